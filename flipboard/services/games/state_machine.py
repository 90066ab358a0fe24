import logging
import time
from typing import List, Optional

from flipboard.errors import (
    AlreadyInRoom,
    AlreadyStarted,
    NotEnoughPlayers,
    RematchRequired,
    RoomFull,
    RoomNotFound,
)
from flipboard.models import BOARD_SIZE, Phase, Room
from .board import color_counts, generate_board
from .registry import RoomRegistry
from .scoring import RoundOutcome, resolve_winner
from .timer import RoundTimer

logger = logging.getLogger(__name__)


class RoomStateMachine:
    """Drives every room through Forming -> Ready -> InProgress -> Ended.

    Holds no per-room state of its own: each call looks the room up by
    code and runs under that room's lock. Outbound events go through
    ``channel``, which must provide ``emit(event, data, to=None,
    skip_sid=None)``, ``enter(sid, room)`` and ``close(room)``.
    """

    def __init__(self, registry: RoomRegistry, channel, round_duration=30, spawn=None, sleep=time.sleep):
        self.registry = registry
        self.channel = channel
        self.round_duration = round_duration
        self._spawn = spawn
        self._sleep = sleep

    # ---- lobby ----

    def create_room(self, sid: str, capacity) -> Room:
        if self.registry.room_for(sid) is not None:
            raise AlreadyInRoom()
        room = self.registry.create(capacity, sid)
        self.channel.enter(sid, room.code)
        self.channel.emit('roomCreated', {
            'roomCode': room.code,
            'board': list(room.board),
            'playerNumber': 1,
            'maxPlayers': room.capacity,
        }, to=sid)
        logger.info(f"[room-create] room={room.code} capacity={room.capacity} creator={sid}")
        return room

    def join(self, code, sid: str) -> Room:
        room = self.registry.get(code)
        with room.lock:
            self._require_live(room)
            if self.registry.room_for(sid) is not None:
                raise AlreadyInRoom()
            if room.is_full:
                raise RoomFull()
            room.players.append(sid)
            room.clicks[sid] = 0
            if room.is_full and room.phase == Phase.FORMING:
                room.phase = Phase.READY
            room.touch()
            self.registry.add_member(room, sid)
            self.channel.enter(sid, room.code)
            self.channel.emit('roomJoined', {
                'roomCode': room.code,
                'board': list(room.board),
                'playerNumber': len(room.players),
                'maxPlayers': room.capacity,
            }, to=sid)
            self.channel.emit('playerCountUpdate', {
                'currentPlayers': len(room.players),
                'maxPlayers': room.capacity,
            }, to=room.code)
            logger.info(f"[room-join] room={room.code} sid={sid} players={len(room.players)}/{room.capacity}")
        return room

    # ---- rounds ----

    def start(self, code, sid: Optional[str] = None) -> Room:
        room = self.registry.get(code)
        with room.lock:
            self._require_live(room)
            if not room.is_full:
                raise NotEnoughPlayers(room.capacity)
            if room.phase == Phase.IN_PROGRESS:
                raise AlreadyStarted()
            if room.phase == Phase.ENDED:
                raise RematchRequired()
            self._arm_round(room)
            self.channel.emit('gameStarted', {
                'roomCode': room.code,
                'round': room.round_number,
                'duration': self.round_duration,
            }, to=room.code)
            logger.info(f"[round-start] room={room.code} round={room.round_number} by={sid}")
        return room

    def _arm_round(self, room: Room) -> None:
        room.phase = Phase.IN_PROGRESS
        room.round_number += 1
        room.touch()
        room.pending_timer = RoundTimer(
            self.round_duration,
            self._expire,
            room.code,
            room.round_number,
            spawn=self._spawn,
            sleep=self._sleep,
            label=f"room={room.code} round={room.round_number}",
        ).start()

    def _expire(self, code: str, round_number: int) -> None:
        self.end_round(code, all_kill=False, round_number=round_number)

    def flip(self, code, sid: str, index) -> bool:
        """Advance one cell to the next owner. Returns False when ignored."""
        room = self.registry.find(code)
        if room is None:
            return False
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < BOARD_SIZE:
            return False
        with room.lock:
            if self.registry.find(room.code) is not room:
                return False
            if room.phase != Phase.IN_PROGRESS or sid not in room.clicks:
                return False
            room.board[index] = (room.board[index] + 1) % room.capacity
            room.clicks[sid] += 1
            room.touch()
            self.channel.emit('boardUpdate', {
                'board': list(room.board),
                'clickedIndex': index,
                'clicks': room.clicks_by_player_number(),
            }, to=room.code)
            if BOARD_SIZE in color_counts(room.board, room.capacity):
                logger.info(f"[allkill] room={room.code} round={room.round_number} by={sid}")
                if room.pending_timer is not None:
                    room.pending_timer.cancel()
                self.end_round(room.code, all_kill=True)
        return True

    def end_round(self, code, all_kill: bool = False, round_number: Optional[int] = None) -> Optional[RoundOutcome]:
        """Finish the running round exactly once.

        Safe to call from both the round timer and an all-kill flip: any
        call that finds the room gone, not in progress, or (for timer
        expiries) on a different round than ``round_number`` does nothing.
        """
        room = self.registry.find(code)
        if room is None:
            logger.info(f"[round-end-skip] room={code} not found")
            return None
        with room.lock:
            if self.registry.find(room.code) is not room or room.phase != Phase.IN_PROGRESS:
                logger.info(f"[round-end-skip] room={room.code} phase={room.phase.value}")
                return None
            if round_number is not None and round_number != room.round_number:
                logger.info(f"[round-end-skip] room={room.code} stale round={round_number} current={room.round_number}")
                return None
            room.phase = Phase.ENDED
            if room.pending_timer is not None:
                room.pending_timer.cancel()
            room.pending_timer = None
            room.touch()

            outcome = resolve_winner(room.board, room.players, room.clicks, all_kill=all_kill)
            room.last_outcome = outcome
            payload = outcome.to_dict()
            for sid in room.players:
                self.channel.emit('gameOver', payload, to=sid)
            self.channel.emit('gameOver', payload, to=room.code)
            logger.info(
                f"[round-end] room={room.code} round={room.round_number} winner={outcome.winner} win_type={outcome.win_type}"
            )
        return outcome

    def rematch(self, code, sid: Optional[str] = None) -> Room:
        room = self.registry.get(code)
        with room.lock:
            self._require_live(room)
            if not room.is_full:
                raise NotEnoughPlayers(room.capacity)
            if room.pending_timer is not None:
                room.pending_timer.cancel()
            room.pending_timer = None
            room.board = generate_board(room.capacity)
            room.clicks = {player: 0 for player in room.players}
            room.phase = Phase.READY
            room.last_outcome = None
            room.touch()
            self.channel.emit('rematchStarted', {'board': list(room.board)}, to=room.code)
            logger.info(f"[rematch] room={room.code} by={sid}")
        return room

    # ---- teardown ----

    def leave(self, sid: str) -> Optional[Room]:
        room = self.registry.room_for(sid)
        if room is None:
            return None
        with room.lock:
            if self.registry.find(room.code) is not room:
                return None
            if room.phase != Phase.ENDED:
                self.channel.emit('opponentLeft', {
                    'roomCode': room.code,
                    'playerNumber': room.player_number(sid),
                }, to=room.code, skip_sid=sid)
            logger.info(f"[room-leave] room={room.code} sid={sid} phase={room.phase.value}")
            self._destroy(room)
        return room

    def sweep_idle(self, max_idle: float, now: Optional[float] = None) -> List[str]:
        """Close rooms idle for longer than ``max_idle`` seconds that are not mid-round."""
        closed = []
        now = time.time() if now is None else now
        for room in self.registry.idle_rooms(max_idle, now):
            with room.lock:
                if self.registry.find(room.code) is not room:
                    continue
                if room.phase == Phase.IN_PROGRESS or now - room.last_activity <= max_idle:
                    continue
                self.channel.emit('roomClosed', {'roomCode': room.code, 'reason': 'idle'}, to=room.code)
                self._destroy(room)
                closed.append(room.code)
                logger.info(f"[room-reap] room={room.code} idle={now - room.last_activity:.0f}s")
        return closed

    def _require_live(self, room: Room) -> None:
        # the room may have been destroyed while we waited for its lock
        if self.registry.find(room.code) is not room:
            raise RoomNotFound(room.code)

    def _destroy(self, room: Room) -> None:
        # a destroyed room never counts as mid-round
        if room.pending_timer is not None:
            room.pending_timer.cancel()
        room.pending_timer = None
        if room.phase == Phase.IN_PROGRESS:
            room.phase = Phase.ENDED
        self.registry.remove(room.code)
        self.channel.close(room.code)


def run_idle_sweeper(machine: RoomStateMachine, interval: float, max_idle: float, sleep=time.sleep) -> None:
    """Background loop closing idle rooms every ``interval`` seconds."""
    logger.info(f"[sweeper-start] interval={interval}s max_idle={max_idle}s")
    while True:
        sleep(interval)
        try:
            machine.sweep_idle(max_idle)
        except Exception:
            logger.exception("[sweeper-error]")

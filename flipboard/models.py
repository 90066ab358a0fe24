import enum
import random
import string
import threading
import time
from typing import Dict, List, Optional


BOARD_SIZE = 36


class Phase(str, enum.Enum):
    FORMING = 'forming'          # waiting for players
    READY = 'ready'              # full, waiting for startGame
    IN_PROGRESS = 'in_progress'
    ENDED = 'ended'


def generate_room_code(length=6):
    """Generate a short room code. Uniqueness is checked by the registry."""
    return ''.join(random.choices(string.ascii_uppercase + string.digits, k=length))


class Room:
    """In-memory state for one room.

    Fields are only mutated by the state machine while holding ``lock``.
    """

    def __init__(self, code: str, capacity: int, board: List[int], creator: str):
        self.code = code
        self.capacity = capacity
        self.board = board
        self.players: List[str] = [creator]
        self.clicks: Dict[str, int] = {creator: 0}
        self.phase = Phase.FORMING
        self.pending_timer = None
        self.round_number = 0
        self.last_outcome = None
        self.lock = threading.RLock()
        self.created_at = time.time()
        self.last_activity = self.created_at

    @property
    def is_full(self) -> bool:
        return len(self.players) >= self.capacity

    def player_number(self, sid: str) -> Optional[int]:
        try:
            return self.players.index(sid) + 1
        except ValueError:
            return None

    def touch(self) -> None:
        self.last_activity = time.time()

    def clicks_by_player_number(self) -> Dict[int, int]:
        return {i + 1: self.clicks.get(sid, 0) for i, sid in enumerate(self.players)}

    def to_dict(self):
        return {
            'roomCode': self.code,
            'maxPlayers': self.capacity,
            'currentPlayers': len(self.players),
            'phase': self.phase.value,
            'board': list(self.board),
            'clicks': self.clicks_by_player_number(),
            'round': self.round_number,
            'lastOutcome': self.last_outcome.to_dict() if self.last_outcome else None,
        }

    def __repr__(self):
        return f"<Room {self.code} {self.phase.value} {len(self.players)}/{self.capacity}>"

import logging
import threading
import time
from typing import Dict, List, Optional

from flipboard.errors import RoomNotFound
from flipboard.models import Room, generate_room_code
from .board import generate_board, validate_capacity

logger = logging.getLogger(__name__)


class RoomRegistry:
    """Owns every live room and which connection sits in which room."""

    def __init__(self, code_length: int = 6, max_code_attempts: int = 100):
        self.code_length = code_length
        self.max_code_attempts = max_code_attempts
        self._rooms: Dict[str, Room] = {}
        self._sid_to_code: Dict[str, str] = {}
        self._lock = threading.Lock()

    def __len__(self):
        return len(self._rooms)

    def __contains__(self, code):
        return code in self._rooms

    def create(self, capacity, creator: str) -> Room:
        capacity = validate_capacity(capacity)
        board = generate_board(capacity)
        with self._lock:
            code = self._unused_code()
            room = Room(code=code, capacity=capacity, board=board, creator=creator)
            self._rooms[code] = room
            self._sid_to_code[creator] = code
        return room

    def _unused_code(self) -> str:
        for _ in range(self.max_code_attempts):
            code = generate_room_code(self.code_length)
            if code not in self._rooms:
                return code
            logger.warning(f"[room-code-collision] code={code}, regenerating")
        raise RuntimeError(f"Could not find a free room code after {self.max_code_attempts} attempts")

    def find(self, code) -> Optional[Room]:
        if not isinstance(code, str):
            return None
        return self._rooms.get(code.upper())

    def get(self, code) -> Room:
        room = self.find(code)
        if room is None:
            raise RoomNotFound(code)
        return room

    def room_for(self, sid: str) -> Optional[Room]:
        code = self._sid_to_code.get(sid)
        return self._rooms.get(code) if code else None

    def add_member(self, room: Room, sid: str) -> None:
        with self._lock:
            self._sid_to_code[sid] = room.code

    def remove(self, code: str) -> Optional[Room]:
        with self._lock:
            room = self._rooms.pop(code, None)
            if room is not None:
                for sid in room.players:
                    if self._sid_to_code.get(sid) == code:
                        self._sid_to_code.pop(sid, None)
        return room

    def rooms(self) -> List[Room]:
        return list(self._rooms.values())

    def idle_rooms(self, max_idle: float, now: Optional[float] = None) -> List[Room]:
        now = time.time() if now is None else now
        return [r for r in self.rooms() if now - r.last_activity > max_idle]

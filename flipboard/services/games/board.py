import random
from typing import List

from flipboard.errors import InvalidCapacity
from flipboard.models import BOARD_SIZE


def validate_capacity(capacity) -> int:
    """Return ``capacity`` as an int, or raise InvalidCapacity.

    A capacity must be at least 2 and split the board evenly.
    """
    if isinstance(capacity, bool) or not isinstance(capacity, int):
        raise InvalidCapacity(capacity)
    if capacity < 2 or BOARD_SIZE % capacity != 0:
        raise InvalidCapacity(capacity)
    return capacity


def generate_board(capacity: int, rng=random) -> List[int]:
    """Deal the board evenly between ``capacity`` owners, then shuffle it.

    Uses a Fisher-Yates shuffle so every arrangement of the per-owner
    counts is equally likely. Each call draws fresh randomness.
    """
    validate_capacity(capacity)
    per_owner = BOARD_SIZE // capacity
    board = [owner for owner in range(capacity) for _ in range(per_owner)]
    for i in range(len(board) - 1, 0, -1):
        j = rng.randint(0, i)
        board[i], board[j] = board[j], board[i]
    return board


def color_counts(board: List[int], capacity: int) -> List[int]:
    counts = [0] * capacity
    for cell in board:
        if 0 <= cell < capacity:
            counts[cell] += 1
    return counts

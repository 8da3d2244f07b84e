from __future__ import annotations
from typing import Optional

from connect4_client.types import Move

QUIT_WORDS = frozenset({"q", "quit", "exit"})


def _index(raw: str) -> Optional[int]:
    """Number as typed (1-based) -> 0-based index, None if it isn't one."""
    s = raw.strip()
    return int(s) - 1 if s.isdigit() else None


def parse_move(raw: str, cols: int) -> Optional[Move]:
    """Column for the next drop, or None when the player wants to quit."""
    if raw.strip().lower() in QUIT_WORDS:
        return None
    col = _index(raw)
    if col is None:
        raise ValueError(f"Enter a column from 1 to {cols}, or q to quit.")
    if not 0 <= col < cols:
        raise ValueError(f"Column must be between 1 and {cols}.")
    return Move(col)


def parse_choice(raw: str, count: int) -> Optional[int]:
    i = _index(raw)
    return i if i is not None and 0 <= i < count else None

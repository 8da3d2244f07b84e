# src/connect4_client/types.py

from __future__ import annotations
from enum import Enum, IntEnum
from typing import NewType, Tuple


class Cell(IntEnum):
    """Cell occupancy. The integer values are the wire/snapshot encoding."""

    EMPTY = 0
    PLAYER = 1
    OPPONENT = 2


class SessionStatus(str, Enum):
    NOT_STARTED = "NotStarted"
    IN_PROGRESS = "InProgress"
    WON = "Won"
    LOST = "Lost"
    DRAW = "Draw"

    @property
    def is_terminal(self) -> bool:
        return self in (SessionStatus.WON, SessionStatus.LOST, SessionStatus.DRAW)


Move = NewType("Move", int)   # column index 0..COLS-1
Coord = Tuple[int, int]       # (row, col), row 0 is the top row

# src/connect4_client/game/events.py

from __future__ import annotations
from dataclasses import dataclass
from typing import Union

from connect4_client.core.rules import WinningRun
from connect4_client.types import Cell, SessionStatus


@dataclass(frozen=True, slots=True)
class BoardReset:
    pass


@dataclass(frozen=True, slots=True)
class PiecePlaced:
    row: int
    col: int
    cell: Cell
    replay: bool = False
    # False for pieces shown at once (snapshot restore, cleared cells).
    animate: bool = True


@dataclass(frozen=True, slots=True)
class RunHighlighted:
    run: WinningRun


@dataclass(frozen=True, slots=True)
class StatusChanged:
    status: SessionStatus
    turn_owner: Cell


Event = Union[BoardReset, PiecePlaced, RunHighlighted, StatusChanged]

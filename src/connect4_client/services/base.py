# src/connect4_client/services/base.py

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Protocol

from connect4_client.core.board import Board
from connect4_client.core.history import MoveHistory
from connect4_client.types import Cell, SessionStatus


@dataclass(slots=True)
class StartGameResponse:
    success: bool
    session_id: Optional[int] = None
    board: Optional[Board] = None
    status: Optional[str] = None
    message: str = ""


@dataclass(slots=True)
class MoveResponse:
    """
    Server result for one move. `status` is the raw server string;
    the engine converts it. `opponent_move` is the CPU reply, if any.
    """
    success: bool
    board: Optional[Board] = None
    status: Optional[str] = None
    opponent_move: Optional[int] = None
    message: str = ""


@dataclass(slots=True)
class PersistedSession:
    player_id: int
    session_id: int
    status: str
    turn_owner: Cell
    move_history: Optional[str] = None
    board_snapshot: Optional[str] = None
    saved_at: str = ""


class GameAuthority(Protocol):
    def start_game(self, player_id: int) -> StartGameResponse:
        ...

    def submit_move(self, session_id: int, column: int) -> MoveResponse:
        ...


class StatisticsSink(Protocol):
    def record_outcome(self, player_id: int, outcome: SessionStatus) -> None:
        ...


class PersistenceStore(Protocol):
    def save_terminal_state(
        self,
        player_id: int,
        session_id: int,
        board: Board,
        turn_owner: Cell,
        status: SessionStatus,
        history: MoveHistory,
    ) -> None:
        ...

    def load_saved_sessions(self, player_id: int) -> List[PersistedSession]:
        ...

# src/connect4_client/game/restore.py

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from connect4_client.config import ROWS, COLS
from connect4_client.core.board import Board
from connect4_client.core.history import MoveHistory
from connect4_client.core.rules import is_draw, winner
from connect4_client.errors import HistoryDecodeError, RestoreDegraded, UnknownStatusError
from connect4_client.game.status import status_from_server
from connect4_client.services.base import PersistedSession
from connect4_client.types import Cell, SessionStatus

logger = logging.getLogger(__name__)

Placement = Tuple[int, int, Cell]


@dataclass(slots=True)
class RestoreResult:
    session_id: int
    status: SessionStatus
    turn_owner: Cell
    board: Board
    history: MoveHistory
    # True when the board came from replaying the move log, so it can be animated
    history_available: bool
    placements: List[Placement] = field(default_factory=list)
    degraded: Optional[RestoreDegraded] = None


def replay(history: MoveHistory, rows: int = ROWS, cols: int = COLS) -> Tuple[Board, List[Placement], int]:
    """
    Rebuild a board by dropping each move into an empty board, in order.
    Moves into a full or nonexistent column are skipped and counted.
    """
    board = Board(rows, cols)
    placed: List[Placement] = []
    skipped = 0
    for rec in history:
        if not 0 <= rec.column < cols:
            skipped += 1
            continue
        row = board.drop(rec.column, rec.actor)
        if row is None:
            skipped += 1
            continue
        placed.append((row, rec.column, rec.actor))
    return board, placed, skipped


def _status_for(raw: str, board: Board, problems: List[str]) -> SessionStatus:
    try:
        return status_from_server(raw)
    except UnknownStatusError:
        problems.append(f"unknown saved status {raw!r}")

    # Read the outcome off the board instead
    owner = winner(board)
    if owner is not None:
        return SessionStatus.WON if owner == Cell.PLAYER else SessionStatus.LOST
    if is_draw(board):
        return SessionStatus.DRAW
    return SessionStatus.IN_PROGRESS


def _decode_history(text: Optional[str], problems: List[str]) -> MoveHistory:
    if not text:
        return MoveHistory()
    try:
        return MoveHistory.decode(text)
    except HistoryDecodeError as e:
        problems.append(f"move history unreadable ({e})")
        return MoveHistory()


def restore(persisted: PersistedSession, rows: int = ROWS, cols: int = COLS) -> RestoreResult:
    """
    Rebuild a session from a saved row. Never raises: anything that could
    not be read is reported on `degraded` and the board is still usable.
    """
    problems: List[str] = []
    try:
        history = _decode_history(persisted.move_history, problems)

        if len(history) > 0:
            board, placements, skipped = replay(history, rows, cols)
            if skipped:
                problems.append(f"{skipped} saved move(s) could not be placed")
            from_log = True
        else:
            if not persisted.board_snapshot:
                problems.append("no move history and no board snapshot")
            board, bad = Board.decode_snapshot(persisted.board_snapshot, rows, cols)
            if bad:
                problems.append(f"{bad} snapshot cell(s) unreadable")
            placements = list(board.occupied())
            from_log = False

        status = _status_for(persisted.status, board, problems)
        turn_owner = persisted.turn_owner if persisted.turn_owner in (Cell.PLAYER, Cell.OPPONENT) else Cell.PLAYER
    except Exception as e:
        logger.exception("Restore of game %s failed; starting from an empty board", persisted.session_id)
        problems.append(f"restore failed ({e})")
        history, board, placements, from_log = MoveHistory(), Board(rows, cols), [], False
        status, turn_owner = SessionStatus.IN_PROGRESS, Cell.PLAYER

    degraded = RestoreDegraded("; ".join(problems)) if problems else None
    if degraded:
        logger.warning("Game %s restored with losses: %s", persisted.session_id, degraded)

    return RestoreResult(
        session_id=persisted.session_id,
        status=status,
        turn_owner=turn_owner,
        board=board,
        history=history,
        history_available=from_log,
        placements=placements,
        degraded=degraded,
    )

# src/connect4_client/game/session.py

from __future__ import annotations
import logging
from collections import deque
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Deque, Iterator, List, Optional, Tuple

from connect4_client.config import ROWS, COLS
from connect4_client.core.board import Board
from connect4_client.core.history import MoveHistory, MoveRecord
from connect4_client.core.rules import WinningRun, find_winning_run
from connect4_client.errors import (
    MoveAlreadyInFlight,
    MoveRejected,
    NotPlayersTurn,
    OutOfBounds,
    SessionNotActive,
    SessionStartError,
)
from connect4_client.game.events import BoardReset, Event, PiecePlaced, RunHighlighted, StatusChanged
from connect4_client.game.restore import RestoreResult, restore
from connect4_client.game.status import status_from_server
from connect4_client.services.base import (
    GameAuthority,
    MoveResponse,
    PersistedSession,
    PersistenceStore,
    StatisticsSink,
)
from connect4_client.types import Cell, SessionStatus

logger = logging.getLogger(__name__)

# Outcomes that are written to the store. Draws are not.
SAVED_OUTCOMES = (SessionStatus.WON, SessionStatus.LOST)


@dataclass(slots=True)
class Session:
    id: Optional[int] = None
    status: SessionStatus = SessionStatus.NOT_STARTED
    board: Board = field(default_factory=Board)
    history: MoveHistory = field(default_factory=MoveHistory)
    turn_owner: Cell = Cell.PLAYER


@dataclass(frozen=True, slots=True)
class SessionView:
    session_id: Optional[int]
    status: SessionStatus
    turn_owner: Cell
    board: Board
    history: MoveHistory
    move_in_flight: bool


@dataclass(frozen=True, slots=True)
class MoveOutcome:
    status: SessionStatus
    opponent_column: Optional[int] = None
    winning_run: Optional[WinningRun] = None
    # Set when a finished game could not be saved; the result still stands.
    save_error: Optional[str] = None


class SessionEngine:
    """
    Owns the one active game and keeps it in step with the server.

    The server's board is taken as-is after every move; the engine never
    recomputes it. Only one exchange with the server may be outstanding:
    while it is, every other mutating call raises MoveAlreadyInFlight.

    Renderers read `drain_events()` to learn what changed and in which order.
    """

    def __init__(
        self,
        authority: GameAuthority,
        stats: Optional[StatisticsSink] = None,
        store: Optional[PersistenceStore] = None,
        rows: int = ROWS,
        cols: int = COLS,
    ) -> None:
        self.authority = authority
        self.stats = stats
        self.store = store
        self.rows = rows
        self.cols = cols

        self.player_id: Optional[int] = None
        self._session = Session(board=Board(rows, cols))
        self._in_flight = False
        self._events: Deque[Event] = deque()

    # --- read side ------------------------------------------------------

    @property
    def status(self) -> SessionStatus:
        return self._session.status

    @property
    def session_id(self) -> Optional[int]:
        return self._session.id

    @property
    def turn_owner(self) -> Cell:
        return self._session.turn_owner

    @property
    def move_in_flight(self) -> bool:
        return self._in_flight

    @property
    def is_active(self) -> bool:
        return self._session.status == SessionStatus.IN_PROGRESS

    @property
    def awaiting_opponent(self) -> bool:
        return self.is_active and self._session.turn_owner == Cell.OPPONENT

    @property
    def board(self) -> Board:
        return self._session.board.copy()

    @property
    def history(self) -> MoveHistory:
        return self._session.history.copy()

    def snapshot(self) -> SessionView:
        s = self._session
        return SessionView(s.id, s.status, s.turn_owner, s.board.copy(), s.history.copy(), self._in_flight)

    def drain_events(self) -> List[Event]:
        out = list(self._events)
        self._events.clear()
        return out

    # --- exchange guard ---------------------------------------------------

    @contextmanager
    def _exchange(self) -> Iterator[None]:
        if self._in_flight:
            raise MoveAlreadyInFlight("A move is already being processed.")
        self._in_flight = True
        try:
            yield
        finally:
            self._in_flight = False

    def _require_active(self) -> None:
        if self._session.id is None or self._session.status == SessionStatus.NOT_STARTED:
            raise SessionNotActive("Start a new game first.")
        if self._session.status.is_terminal:
            raise SessionNotActive(f"The game is over ({self._session.status.value}). Start a new game.")

    def _check_column(self, column: int) -> None:
        if not 0 <= column < self.cols:
            raise OutOfBounds(f"Column {column} is outside 0..{self.cols - 1}.")

    # --- transitions ------------------------------------------------------

    def start_session(self, player_id: int) -> None:
        with self._exchange():
            try:
                resp = self.authority.start_game(player_id)
            except Exception as e:
                logger.exception("Game server failed to start a game for player %s", player_id)
                raise SessionStartError(f"Error starting game: {e}") from e

            if not resp.success:
                raise SessionStartError(resp.message or "The server refused to start a game.")
            if resp.session_id is None:
                raise SessionStartError("The server did not return a game id.")

            board = Board(self.rows, self.cols)
            if resp.board is not None:
                if (resp.board.rows, resp.board.cols) != (self.rows, self.cols):
                    raise SessionStartError("The server board has the wrong size.")
                board = resp.board.copy()

            self.player_id = player_id
            self._session = Session(
                id=resp.session_id,
                status=SessionStatus.IN_PROGRESS,
                board=board,
                history=MoveHistory(),
                turn_owner=Cell.PLAYER,
            )
            self._events.clear()
            self._events.append(BoardReset())
            for r, c, cell in board.occupied():
                self._events.append(PiecePlaced(r, c, cell))
            self._events.append(StatusChanged(SessionStatus.IN_PROGRESS, Cell.PLAYER))
            logger.info("Started game %s for player %s", resp.session_id, player_id)

    def play_move(self, column: int) -> MoveOutcome:
        """Send a move to the server and apply whatever it confirms."""
        with self._exchange():
            self._require_active()
            if self._session.turn_owner != Cell.PLAYER:
                raise NotPlayersTurn("Wait for the opponent to move.")
            if not 0 <= column < self.cols:
                raise MoveRejected(f"Column must be between 1 and {self.cols}.")

            try:
                resp = self.authority.submit_move(self._session.id, column)
            except Exception as e:
                logger.exception("Game server failed on move %s in game %s", column, self._session.id)
                raise MoveRejected(f"Error making move: {e}") from e

            return self._commit(column, Cell.PLAYER, resp)

    def apply_confirmed_move(self, column: int, response: MoveResponse) -> MoveOutcome:
        """Apply a server-confirmed result for a player move in `column`."""
        self._check_column(column)
        with self._exchange():
            self._require_active()
            return self._commit(column, Cell.PLAYER, response)

    def apply_opponent_move(self, column: int, response: MoveResponse) -> MoveOutcome:
        """Follow-up signal for an opponent move that arrived on its own."""
        self._check_column(column)
        with self._exchange():
            self._require_active()
            if self._session.turn_owner != Cell.OPPONENT:
                raise MoveRejected("No opponent move was expected.")
            return self._commit(column, Cell.OPPONENT, response)

    def restore_session(self, persisted: PersistedSession) -> RestoreResult:
        with self._exchange():
            result = restore(persisted, self.rows, self.cols)

            self.player_id = persisted.player_id
            self._session = Session(
                id=result.session_id,
                status=result.status,
                board=result.board.copy(),
                history=result.history.copy(),
                turn_owner=result.turn_owner,
            )
            self._events.clear()
            self._events.append(BoardReset())
            for r, c, cell in result.placements:
                self._events.append(
                    PiecePlaced(r, c, cell, replay=result.history_available, animate=result.history_available)
                )
            self._events.append(StatusChanged(result.status, result.turn_owner))
            if result.status in SAVED_OUTCOMES:
                run = find_winning_run(result.board)
                if run is not None:
                    self._events.append(RunHighlighted(run))

            logger.info("Restored game %s (%s)", result.session_id, result.status.value)
            return result

    # --- internals --------------------------------------------------------

    def _commit(self, column: int, mover: Cell, resp: MoveResponse) -> MoveOutcome:
        # Everything is checked before anything is touched.
        if not resp.success:
            raise MoveRejected(resp.message or "The server rejected the move.")
        if resp.board is None or (resp.board.rows, resp.board.cols) != (self.rows, self.cols):
            raise MoveRejected("The server sent an unusable board.")
        status = status_from_server(resp.status)

        reply = resp.opponent_move if mover == Cell.PLAYER else None
        if reply is not None and not 0 <= reply < self.cols:
            raise MoveRejected(f"The server sent an invalid opponent move ({reply}).")

        s = self._session
        before = s.board
        s.history.append(MoveRecord(column, mover))
        if reply is not None:
            s.history.append(MoveRecord(reply, Cell.OPPONENT))
        s.board = resp.board.copy()
        s.status = status
        if mover == Cell.OPPONENT or reply is not None:
            s.turn_owner = Cell.PLAYER
        else:
            s.turn_owner = Cell.OPPONENT

        self._emit_placements(before, s.board)
        self._events.append(StatusChanged(status, s.turn_owner))

        if not status.is_terminal:
            return MoveOutcome(status, opponent_column=reply)

        run, save_error = self._finish(status)
        return MoveOutcome(status, opponent_column=reply, winning_run=run, save_error=save_error)

    def _emit_placements(self, before: Board, after: Board) -> None:
        # Player pieces first, then the opponent's, like the drop animation.
        for side in (Cell.PLAYER, Cell.OPPONENT):
            for r, c, cell in after.occupied():
                if cell == side and before.grid[r][c] != cell:
                    self._events.append(PiecePlaced(r, c, cell))
        # Pieces the server's board no longer has.
        for r, c, cell in before.occupied():
            if after.grid[r][c] == Cell.EMPTY:
                self._events.append(PiecePlaced(r, c, Cell.EMPTY, animate=False))

    def _finish(self, status: SessionStatus) -> Tuple[Optional[WinningRun], Optional[str]]:
        s = self._session
        run = find_winning_run(s.board) if status in SAVED_OUTCOMES else None
        if run is not None:
            self._events.append(RunHighlighted(run))
        logger.info("Game %s finished: %s", s.id, status.value)

        if self.stats is not None and self.player_id is not None:
            try:
                self.stats.record_outcome(self.player_id, status)
            except Exception:
                logger.warning("Could not record outcome of game %s", s.id, exc_info=True)

        save_error = None
        if status in SAVED_OUTCOMES and self.store is not None and self.player_id is not None:
            try:
                self.store.save_terminal_state(
                    self.player_id, s.id, s.board.copy(), s.turn_owner, status, s.history.copy()
                )
            except Exception as e:
                logger.error("Could not save game %s: %s", s.id, e)
                save_error = str(e)

        return run, save_error

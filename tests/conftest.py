"""
Shared fakes for the session engine tests.

The fakes stand in for the game server, the statistics endpoint and the
saved-games store, and record every call made to them.
"""

from __future__ import annotations

from typing import Callable, List, Optional

import pytest

from connect4_client.core.board import Board
from connect4_client.errors import PersistenceError
from connect4_client.game.session import SessionEngine
from connect4_client.services.base import MoveResponse, PersistedSession, StartGameResponse
from connect4_client.types import Cell

SYMBOLS = {".": Cell.EMPTY, "P": Cell.PLAYER, "O": Cell.OPPONENT}


def board_from(*lines: str) -> Board:
    """Rows top to bottom; '.' empty, 'P' player, 'O' opponent. Missing top rows are empty."""
    b = Board()
    offset = b.rows - len(lines)
    for i, line in enumerate(lines):
        for c, ch in enumerate(line):
            b.set(offset + i, c, SYMBOLS[ch])
    return b


class FakeAuthority:
    def __init__(self) -> None:
        self.start_responses: List[StartGameResponse] = []
        self.move_responses: List[MoveResponse] = []
        self.calls: List[tuple] = []
        self.on_submit: Optional[Callable[[], None]] = None
        self.raise_on_start: Optional[Exception] = None

    def start_game(self, player_id: int) -> StartGameResponse:
        self.calls.append(("start_game", player_id))
        if self.raise_on_start:
            raise self.raise_on_start
        if self.start_responses:
            return self.start_responses.pop(0)
        return StartGameResponse(success=True, session_id=42, board=Board(), status="InProgress")

    def submit_move(self, session_id: int, column: int) -> MoveResponse:
        self.calls.append(("submit_move", session_id, column))
        if self.on_submit:
            self.on_submit()
        return self.move_responses.pop(0)


class RecordingSink:
    def __init__(self, fail: bool = False) -> None:
        self.outcomes: list = []
        self.fail = fail

    def record_outcome(self, player_id, outcome) -> None:
        self.outcomes.append((player_id, outcome))
        if self.fail:
            raise ConnectionError("stats endpoint down")


class RecordingStore:
    def __init__(self, fail: bool = False) -> None:
        self.saved: list = []
        self.fail = fail
        self.sessions: List[PersistedSession] = []

    def save_terminal_state(self, player_id, session_id, board, turn_owner, status, history) -> None:
        self.saved.append(
            {
                "player_id": player_id,
                "session_id": session_id,
                "board": board,
                "turn_owner": turn_owner,
                "status": status,
                "history": history,
            }
        )
        if self.fail:
            raise PersistenceError("disk full")

    def load_saved_sessions(self, player_id):
        return [s for s in self.sessions if s.player_id == player_id]


@pytest.fixture
def authority() -> FakeAuthority:
    return FakeAuthority()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def store() -> RecordingStore:
    return RecordingStore()


@pytest.fixture
def engine(authority, sink, store) -> SessionEngine:
    return SessionEngine(authority, stats=sink, store=store)


@pytest.fixture
def started(engine) -> SessionEngine:
    engine.start_session(7)
    engine.drain_events()
    return engine

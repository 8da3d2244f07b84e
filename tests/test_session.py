"""
Tests for the session engine.

Tests:
- Starting sessions, including after a finished game
- Applying server-confirmed moves and their history order
- The one-exchange-at-a-time guard
- Unknown statuses and rejected moves leaving state untouched
- Terminal outcomes: statistics and saving policy
"""

import pytest

from conftest import board_from

from connect4_client.core.board import Board
from connect4_client.core.history import MoveHistory, MoveRecord
from connect4_client.errors import (
    MoveAlreadyInFlight,
    MoveRejected,
    NotPlayersTurn,
    OutOfBounds,
    SessionNotActive,
    SessionStartError,
    UnknownStatusError,
)
from connect4_client.game.events import BoardReset, PiecePlaced, RunHighlighted, StatusChanged
from connect4_client.game.session import SessionEngine
from connect4_client.services.base import MoveResponse, StartGameResponse
from connect4_client.types import Cell, SessionStatus


def ok(board: Board, status: str = "InProgress", cpu=None) -> MoveResponse:
    return MoveResponse(success=True, board=board, status=status, opponent_move=cpu)


class TestStartSession:
    def test_start_resets_everything(self, engine, authority):
        assert engine.status == SessionStatus.NOT_STARTED
        engine.start_session(7)

        assert authority.calls == [("start_game", 7)]
        assert engine.status == SessionStatus.IN_PROGRESS
        assert engine.session_id == 42
        assert engine.turn_owner == Cell.PLAYER
        assert engine.board == Board()
        assert len(engine.history) == 0
        events = engine.drain_events()
        assert isinstance(events[0], BoardReset)
        assert events[-1] == StatusChanged(SessionStatus.IN_PROGRESS, Cell.PLAYER)

    def test_rejected_start_changes_nothing(self, started, authority):
        authority.move_responses.append(ok(board_from("...P...")))
        started.play_move(3)
        before = started.snapshot()

        authority.start_responses.append(StartGameResponse(success=False, message="Player not found"))
        with pytest.raises(SessionStartError, match="Player not found"):
            started.start_session(7)

        assert started.snapshot() == before

    def test_unreachable_server(self, engine, authority):
        authority.raise_on_start = ConnectionError("refused")
        with pytest.raises(SessionStartError):
            engine.start_session(7)
        assert engine.status == SessionStatus.NOT_STARTED
        assert not engine.move_in_flight

    def test_start_after_finished_game(self, started, authority):
        authority.move_responses.append(ok(board_from("PPPP...", "OOO...."), status="Won"))
        started.play_move(3)
        assert started.status == SessionStatus.WON

        authority.start_responses.append(StartGameResponse(success=True, session_id=43, board=Board(), status="InProgress"))
        started.start_session(7)

        assert started.status == SessionStatus.IN_PROGRESS
        assert started.session_id == 43
        assert len(started.history) == 0
        assert started.board == Board()


class TestConfirmedMoves:
    def test_player_and_opponent_recorded_in_order(self, started, authority):
        authority.move_responses.append(ok(board_from("..OP..."), cpu=2))
        outcome = started.play_move(3)

        assert authority.calls[-1] == ("submit_move", 42, 3)
        assert outcome.status == SessionStatus.IN_PROGRESS
        assert outcome.opponent_column == 2
        assert list(started.history) == [MoveRecord(3, Cell.PLAYER), MoveRecord(2, Cell.OPPONENT)]
        assert started.turn_owner == Cell.PLAYER

    def test_board_is_taken_from_the_server(self, started, authority):
        # The server's board wins even when it disagrees with a local drop.
        server_board = board_from("O......", "P.....O")
        authority.move_responses.append(ok(server_board, cpu=0))
        started.play_move(6)
        assert started.board == server_board

    def test_board_view_is_a_copy(self, started, authority):
        authority.move_responses.append(ok(board_from("...P..."), cpu=None))
        started.play_move(3)
        view = started.board
        view.clear()
        assert started.board.get(5, 3) == Cell.PLAYER

    def test_without_opponent_move_waits_for_follow_up(self, started, authority):
        authority.move_responses.append(ok(board_from("...P...")))
        started.play_move(3)
        assert started.turn_owner == Cell.OPPONENT
        assert started.awaiting_opponent

        with pytest.raises(NotPlayersTurn):
            started.play_move(4)

        outcome = started.apply_opponent_move(4, ok(board_from("...PO..")))
        assert outcome.status == SessionStatus.IN_PROGRESS
        assert started.turn_owner == Cell.PLAYER
        assert list(started.history) == [MoveRecord(3, Cell.PLAYER), MoveRecord(4, Cell.OPPONENT)]

    def test_unexpected_opponent_move(self, started):
        with pytest.raises(MoveRejected):
            started.apply_opponent_move(4, ok(board_from("....O..")))

    def test_apply_confirmed_move_directly(self, started):
        outcome = started.apply_confirmed_move(1, ok(board_from(".PO...."), cpu=2))
        assert outcome.opponent_column == 2
        assert len(started.history) == 2

    def test_placement_events_player_first(self, started, authority):
        authority.move_responses.append(ok(board_from("O..P..."), cpu=0))
        started.play_move(3)
        events = started.drain_events()
        placed = [e for e in events if isinstance(e, PiecePlaced)]
        assert placed == [PiecePlaced(5, 3, Cell.PLAYER), PiecePlaced(5, 0, Cell.OPPONENT)]
        assert events[-1] == StatusChanged(SessionStatus.IN_PROGRESS, Cell.PLAYER)
        assert started.drain_events() == []

    def test_piece_missing_from_server_board_is_cleared(self, started, authority):
        authority.move_responses.append(ok(board_from("O..P..."), cpu=0))
        started.play_move(3)
        started.drain_events()

        # The server drops the CPU piece in column 0 from its board.
        started.apply_confirmed_move(1, ok(board_from(".P.P..."), cpu=None))
        placed = [e for e in started.drain_events() if isinstance(e, PiecePlaced)]

        assert placed == [PiecePlaced(5, 1, Cell.PLAYER), PiecePlaced(5, 0, Cell.EMPTY, animate=False)]
        assert started.board.get(5, 0) == Cell.EMPTY


class TestRejections:
    def test_no_session(self, engine):
        with pytest.raises(SessionNotActive):
            engine.play_move(0)
        with pytest.raises(SessionNotActive):
            engine.apply_confirmed_move(0, ok(Board()))

    def test_server_rejects_move(self, started, authority):
        authority.move_responses.append(MoveResponse(success=False, message="Column is full"))
        with pytest.raises(MoveRejected, match="Column is full"):
            started.play_move(0)
        assert len(started.history) == 0
        assert started.board == Board()
        assert not started.move_in_flight

    def test_bad_column_from_caller(self, started):
        with pytest.raises(MoveRejected):
            started.play_move(7)
        with pytest.raises(OutOfBounds):
            started.apply_confirmed_move(-1, ok(Board()))

    def test_invalid_opponent_column_from_server(self, started, authority):
        authority.move_responses.append(ok(board_from("...P..."), cpu=9))
        with pytest.raises(MoveRejected):
            started.play_move(3)
        assert len(started.history) == 0

    @pytest.mark.parametrize("status", ["Finished", "won", "", None, "NotStarted"])
    def test_unknown_status_commits_nothing(self, started, authority, status):
        authority.move_responses.append(ok(board_from("O..P..."), status=status, cpu=0))
        with pytest.raises(UnknownStatusError):
            started.play_move(3)

        assert started.status == SessionStatus.IN_PROGRESS
        assert len(started.history) == 0
        assert started.board == Board()
        assert started.drain_events() == []

    def test_no_moves_after_terminal(self, started, authority, store):
        authority.move_responses.append(ok(board_from("PPPP...", "OOO...."), status="Won"))
        started.play_move(3)
        with pytest.raises(SessionNotActive):
            started.play_move(4)
        with pytest.raises(SessionNotActive):
            started.apply_confirmed_move(4, ok(Board()))
        assert len(store.saved) == 1


class TestInFlightGuard:
    def test_second_apply_while_first_outstanding(self, started, authority):
        seen = {}

        def reenter():
            try:
                started.apply_confirmed_move(5, ok(board_from(".....P.")))
            except MoveAlreadyInFlight as e:
                seen["error"] = e
            seen["history"] = started.history
            seen["board"] = started.board

        authority.on_submit = reenter
        authority.move_responses.append(ok(board_from("..OP..."), cpu=2))
        started.play_move(3)

        assert isinstance(seen["error"], MoveAlreadyInFlight)
        assert seen["history"] == MoveHistory()
        assert seen["board"] == Board()
        assert list(started.history) == [MoveRecord(3, Cell.PLAYER), MoveRecord(2, Cell.OPPONENT)]

    def test_start_and_play_are_blocked_too(self, started, authority):
        errors = []

        def reenter():
            for call in (lambda: started.play_move(1), lambda: started.start_session(7)):
                try:
                    call()
                except MoveAlreadyInFlight as e:
                    errors.append(e)
            assert started.move_in_flight

        authority.on_submit = reenter
        authority.move_responses.append(ok(board_from("..OP..."), cpu=2))
        started.play_move(3)

        assert len(errors) == 2
        assert not started.move_in_flight
        assert started.session_id == 42

    def test_flag_cleared_after_failure(self, started, authority):
        authority.move_responses.append(ok(Board(), status="Bogus"))
        with pytest.raises(UnknownStatusError):
            started.play_move(0)
        assert not started.move_in_flight

        authority.move_responses.append(ok(board_from("P......"), cpu=None))
        started.play_move(0)
        assert len(started.history) == 1


class TestTerminalOutcomes:
    def test_win_is_saved_once_with_final_state(self, started, authority, store, sink):
        final = board_from("OOO....", "PPPP...")
        authority.move_responses.append(ok(final, status="Won"))
        outcome = started.play_move(3)

        assert outcome.status == SessionStatus.WON
        assert outcome.winning_run.coords == ((5, 0), (5, 1), (5, 2), (5, 3))
        assert outcome.save_error is None
        assert len(store.saved) == 1
        saved = store.saved[0]
        assert saved["player_id"] == 7
        assert saved["session_id"] == 42
        assert saved["status"] == SessionStatus.WON
        assert saved["board"] == final
        assert list(saved["history"]) == [MoveRecord(3, Cell.PLAYER)]
        assert sink.outcomes == [(7, SessionStatus.WON)]

        events = started.drain_events()
        assert isinstance(events[-1], RunHighlighted)
        assert events[-1].run.owner == Cell.PLAYER

    def test_loss_is_saved(self, started, authority, store):
        final = board_from("O......", "O......", "OPP....", "OPP....")
        authority.move_responses.append(ok(final, status="Lost", cpu=0))
        outcome = started.play_move(2)

        assert outcome.status == SessionStatus.LOST
        assert outcome.winning_run.owner == Cell.OPPONENT
        assert len(store.saved) == 1
        assert list(store.saved[0]["history"]) == [MoveRecord(2, Cell.PLAYER), MoveRecord(0, Cell.OPPONENT)]

    def test_draw_is_never_saved(self, started, authority, store, sink):
        authority.move_responses.append(ok(Board(), status="Draw", cpu=1))
        outcome = started.play_move(0)

        assert outcome.status == SessionStatus.DRAW
        assert outcome.winning_run is None
        assert store.saved == []
        assert sink.outcomes == [(7, SessionStatus.DRAW)]

    def test_save_failure_keeps_the_result(self, authority, sink):
        from conftest import RecordingStore

        failing = RecordingStore(fail=True)
        engine = SessionEngine(authority, stats=sink, store=failing)
        engine.start_session(7)
        authority.move_responses.append(ok(board_from("PPPP..."), status="Won"))
        outcome = engine.play_move(3)

        assert engine.status == SessionStatus.WON
        assert outcome.save_error == "disk full"

    def test_stats_failure_is_ignored(self, authority, store):
        from conftest import RecordingSink

        engine = SessionEngine(authority, stats=RecordingSink(fail=True), store=store)
        engine.start_session(7)
        authority.move_responses.append(ok(board_from("PPPP..."), status="Won"))
        outcome = engine.play_move(3)

        assert outcome.status == SessionStatus.WON
        assert len(store.saved) == 1

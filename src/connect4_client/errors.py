# src/connect4_client/errors.py

from __future__ import annotations


class OutOfBounds(IndexError):
    """Board coordinate outside the configured grid."""


class Connect4ClientError(Exception):
    """Base class for everything the session engine reports to callers."""


class SessionStartError(Connect4ClientError):
    pass


class MoveRejected(Connect4ClientError):
    """The move was not applied. The message is suitable for showing to the player."""


class SessionNotActive(MoveRejected):
    pass


class NotPlayersTurn(MoveRejected):
    pass


class MoveAlreadyInFlight(Connect4ClientError):
    """Another exchange with the game server is still outstanding. Retry later."""


class UnknownStatusError(Connect4ClientError):
    def __init__(self, status: object) -> None:
        super().__init__(f"Unknown game status from server: {status!r}")
        self.status = status


class HistoryDecodeError(ValueError):
    pass


class PersistenceError(Connect4ClientError):
    pass


class RestoreDegraded(Connect4ClientError):
    """
    Not raised. Attached to a restore result when the board was rebuilt
    but something was lost on the way (bad history, bad cells, skipped moves).
    """

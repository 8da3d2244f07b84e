# src/connect4_client/game/status.py

from __future__ import annotations
from typing import Optional

from connect4_client.errors import UnknownStatusError
from connect4_client.types import SessionStatus

# What the server may report after a move. NotStarted never comes back from it.
SERVER_STATUSES = {
    "InProgress": SessionStatus.IN_PROGRESS,
    "Won": SessionStatus.WON,
    "Lost": SessionStatus.LOST,
    "Draw": SessionStatus.DRAW,
}


def status_from_server(raw: Optional[str]) -> SessionStatus:
    try:
        return SERVER_STATUSES[raw]  # type: ignore[index]
    except (KeyError, TypeError):
        raise UnknownStatusError(raw) from None

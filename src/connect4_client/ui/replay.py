from __future__ import annotations
import time
from typing import Callable, Iterable, Optional

from connect4_client.config import DROP_DELAY_SEC, HIGHLIGHT_BLINKS, HIGHLIGHT_DELAY_SEC, ROWS, COLS
from connect4_client.core.board import Board
from connect4_client.game.events import BoardReset, Event, PiecePlaced, RunHighlighted, StatusChanged
from connect4_client.types import Cell, SessionStatus
from connect4_client.ui.render import render

STATUS_TEXT = {
    SessionStatus.NOT_STARTED: "Not Started",
    SessionStatus.IN_PROGRESS: "In Progress",
    SessionStatus.WON: "You Win!",
    SessionStatus.LOST: "CPU Wins!",
    SessionStatus.DRAW: "It's a Draw!",
}


def status_line(status: SessionStatus, turn_owner: Cell) -> str:
    text = STATUS_TEXT[status]
    if status == SessionStatus.IN_PROGRESS:
        text += " | Your turn" if turn_owner == Cell.PLAYER else " | CPU is thinking"
    return text


class EventPlayer:
    """
    Draws engine events one at a time so drops and the winning run
    are visible in order. Keeps its own copy of the board.
    """

    def __init__(
        self,
        rows: int = ROWS,
        cols: int = COLS,
        draw: Callable[..., None] = render,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.board = Board(rows, cols)
        self.status = ""
        self.highlight: Optional[tuple] = None
        self._draw = draw
        self._sleep = sleep

    def refresh(self) -> None:
        self._draw(self.board, self.status, highlight=self.highlight)

    def play(self, events: Iterable[Event]) -> None:
        for ev in events:
            if isinstance(ev, BoardReset):
                self.board.clear()
                self.highlight = None
                self.refresh()
            elif isinstance(ev, PiecePlaced):
                self.board.set(ev.row, ev.col, ev.cell)
                # Non-animated pieces show up with the next StatusChanged.
                if ev.animate:
                    self.refresh()
                    self._sleep(DROP_DELAY_SEC)
            elif isinstance(ev, StatusChanged):
                self.status = status_line(ev.status, ev.turn_owner)
                self.refresh()
            elif isinstance(ev, RunHighlighted):
                for i in range(HIGHLIGHT_BLINKS):
                    self.highlight = ev.run.coords if i % 2 == 0 else None
                    self.refresh()
                    self._sleep(HIGHLIGHT_DELAY_SEC)
                self.highlight = ev.run.coords
                self.refresh()

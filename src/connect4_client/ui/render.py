from __future__ import annotations
from typing import Iterable, Optional, Set

from connect4_client.config import CLEAR_SCREEN
from connect4_client.core.board import Board
from connect4_client.types import Cell, Coord
from connect4_client.ui.colors import c, BOLD, CPU, DIM, EMPTY, PLAYER, STATUS, WINNING_RUN

PIECES = {
    Cell.EMPTY: ("·", EMPTY),
    Cell.PLAYER: ("●", PLAYER),
    Cell.OPPONENT: ("●", CPU),
}


def _piece(cell: Cell, lit: bool = False) -> str:
    ch, color = PIECES[cell]
    if lit:
        return c(ch, WINNING_RUN)
    return c(ch, color)


def clear_screen() -> None:
    if CLEAR_SCREEN:
        print("\033[2J\033[H", end="")


def render(board: Board, status: str = "", highlight: Optional[Iterable[Coord]] = None) -> None:
    clear_screen()

    hl: Set[Coord] = set(highlight) if highlight else set()

    print(c("CONNECT 4", BOLD))
    if status:
        print(c(status, STATUS))
    else:
        print()

    nums = "   " + " ".join(str(i + 1) for i in range(board.cols))
    print(c(nums, DIM))

    for r in range(board.rows):
        parts = [_piece(board.grid[r][cidx], (r, cidx) in hl) for cidx in range(board.cols)]
        print(" | " + " ".join(parts) + " |")

    print(c("   " + "—" * (2 * board.cols - 1), DIM))
    print(c(f"   Enter 1-{board.cols} to drop. Enter q to quit.", DIM))

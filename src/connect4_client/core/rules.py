# src/connect4_client/core/rules.py

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Tuple

from connect4_client.config import CONNECT_N
from connect4_client.core.board import Board
from connect4_client.types import Cell, Coord


@dataclass(frozen=True, slots=True)
class WinningRun:
    owner: Cell
    coords: Tuple[Coord, ...]


def _run(board: Board, r: int, c: int, dr: int, dc: int) -> Optional[WinningRun]:
    g = board.grid
    p = g[r][c]
    if p == Cell.EMPTY:
        return None
    coords = tuple((r + i * dr, c + i * dc) for i in range(CONNECT_N))
    if all(g[rr][cc] == p for rr, cc in coords[1:]):
        return WinningRun(p, coords)
    return None


def find_winning_run(board: Board) -> Optional[WinningRun]:
    """
    Return the first four-in-a-row in a fixed scan order, or None.
    The order matters: callers highlight exactly the run returned here.
    """
    rows, cols, n = board.rows, board.cols, CONNECT_N

    # Horizontal: rows top-down, columns left-right
    for r in range(rows):
        for c in range(cols - n + 1):
            run = _run(board, r, c, 0, 1)
            if run:
                return run

    # Vertical: columns left-right, rows top-down
    for c in range(cols):
        for r in range(rows - n + 1):
            run = _run(board, r, c, 1, 0)
            if run:
                return run

    # Diagonal down-right
    for r in range(rows - n + 1):
        for c in range(cols - n + 1):
            run = _run(board, r, c, 1, 1)
            if run:
                return run

    # Diagonal down-left, start columns right to left
    for r in range(rows - n + 1):
        for c in range(cols - 1, n - 2, -1):
            run = _run(board, r, c, 1, -1)
            if run:
                return run

    return None


def winner(board: Board) -> Optional[Cell]:
    run = find_winning_run(board)
    return run.owner if run else None


def is_draw(board: Board) -> bool:
    return board.is_full() and find_winning_run(board) is None

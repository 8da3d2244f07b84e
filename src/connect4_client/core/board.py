# src/connect4_client/core/board.py

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

from connect4_client.config import ROWS, COLS
from connect4_client.errors import OutOfBounds
from connect4_client.types import Cell, Move

ROW_SEP = ";"
CELL_SEP = ","


@dataclass(slots=True)
class Board:
    rows: int = ROWS
    cols: int = COLS
    grid: List[List[Cell]] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.grid:
            self.grid = [[Cell.EMPTY for _ in range(self.cols)] for _ in range(self.rows)]
            return
        if len(self.grid) != self.rows or any(len(row) != self.cols for row in self.grid):
            raise ValueError(f"Grid does not match a {self.rows}x{self.cols} board.")
        self.grid = [[Cell(v) for v in row] for row in self.grid]

    def _check(self, row: int, col: int) -> None:
        if not (0 <= row < self.rows and 0 <= col < self.cols):
            raise OutOfBounds(f"({row}, {col}) is outside a {self.rows}x{self.cols} board.")

    def get(self, row: int, col: int) -> Cell:
        self._check(row, col)
        return self.grid[row][col]

    def set(self, row: int, col: int, cell: Cell) -> None:
        self._check(row, col)
        self.grid[row][col] = Cell(cell)

    def clear(self) -> None:
        self.grid = [[Cell.EMPTY for _ in range(self.cols)] for _ in range(self.rows)]

    def copy(self) -> "Board":
        b = Board(self.rows, self.cols)
        b.grid = [row[:] for row in self.grid]
        return b

    def is_full(self) -> bool:
        return all(self.grid[0][c] != Cell.EMPTY for c in range(self.cols))

    def drop(self, col: Move, cell: Cell) -> Optional[int]:
        """
        Gravity-drop placement: occupy the lowest empty cell in the column.
        Returns the row, or None if the column is already full.
        """
        c = int(col)
        self._check(0, c)
        for r in range(self.rows - 1, -1, -1):
            if self.grid[r][c] == Cell.EMPTY:
                self.grid[r][c] = Cell(cell)
                return r
        return None

    def occupied(self) -> Iterable[Tuple[int, int, Cell]]:
        for r in range(self.rows):
            for c in range(self.cols):
                if self.grid[r][c] != Cell.EMPTY:
                    yield r, c, self.grid[r][c]

    # --- wire formats -------------------------------------------------

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[int]], n_rows: int = ROWS, n_cols: int = COLS) -> "Board":
        """Strict: used for the authoritative board sent by the server."""
        if len(rows) != n_rows or any(len(r) != n_cols for r in rows):
            raise ValueError(f"Server board is not {n_rows}x{n_cols}.")
        try:
            grid = [[Cell(int(v)) for v in r] for r in rows]
        except (TypeError, ValueError) as e:
            raise ValueError(f"Server board has an invalid cell: {e}") from e
        return cls(n_rows, n_cols, grid)

    def encode_snapshot(self) -> str:
        return ROW_SEP.join(CELL_SEP.join(str(int(v)) for v in row) for row in self.grid)

    @classmethod
    def decode_snapshot(cls, text: Optional[str], n_rows: int = ROWS, n_cols: int = COLS) -> Tuple["Board", int]:
        """
        Lenient: parse a persisted snapshot. Cells that are not 0/1/2 stay Empty,
        extra rows and columns are dropped, missing ones stay Empty.
        Returns the board and the number of cells that could not be read.
        """
        board = cls(n_rows, n_cols)
        if not text:
            return board, 0

        bad = 0
        for r, raw_row in enumerate(text.split(ROW_SEP)[:n_rows]):
            for c, raw_cell in enumerate(raw_row.split(CELL_SEP)[:n_cols]):
                try:
                    board.grid[r][c] = Cell(int(raw_cell.strip()))
                except ValueError:
                    bad += 1
        return board, bad

# src/connect4_client/core/history.py

from __future__ import annotations
import json
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence

from connect4_client.errors import HistoryDecodeError
from connect4_client.types import Cell


@dataclass(frozen=True, slots=True)
class MoveRecord:
    column: int
    actor: Cell  # Cell.PLAYER or Cell.OPPONENT

    def __post_init__(self) -> None:
        if self.actor not in (Cell.PLAYER, Cell.OPPONENT):
            raise ValueError(f"A move must belong to a side, got {self.actor!r}.")

    @property
    def is_player_move(self) -> bool:
        return self.actor == Cell.PLAYER


class MoveHistory:
    """
    Append-only log of confirmed moves, player and opponent interleaved.
    The order is the replay order.
    """

    __slots__ = ("_records",)

    def __init__(self, records: Optional[Sequence[MoveRecord]] = None) -> None:
        self._records: List[MoveRecord] = list(records or [])

    def append(self, record: MoveRecord) -> None:
        self._records.append(record)

    def clear(self) -> None:
        self._records = []

    def copy(self) -> "MoveHistory":
        return MoveHistory(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[MoveRecord]:
        return iter(self._records)

    def __getitem__(self, i: int) -> MoveRecord:
        return self._records[i]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MoveHistory):
            return NotImplemented
        return self._records == other._records

    def __repr__(self) -> str:
        return f"MoveHistory({self._records!r})"

    # --- persisted form: [{"Column": 3, "IsPlayerMove": true}, ...] ---

    def encode(self) -> str:
        return json.dumps(
            [{"Column": r.column, "IsPlayerMove": r.is_player_move} for r in self._records]
        )

    @classmethod
    def decode(cls, text: str) -> "MoveHistory":
        try:
            items = json.loads(text)
        except (TypeError, ValueError, RecursionError) as e:
            raise HistoryDecodeError(f"Move history is not valid JSON: {e}") from e

        if not isinstance(items, list):
            raise HistoryDecodeError("Move history must be a JSON array.")

        records = []
        for i, item in enumerate(items):
            if not isinstance(item, dict):
                raise HistoryDecodeError(f"Move {i} is not an object.")
            # Accept camelCase too; other writers of the same file do.
            keys = {str(k).lower(): v for k, v in item.items()}
            col = keys.get("column")
            is_player = keys.get("isplayermove")
            if isinstance(col, bool) or not isinstance(col, int) or not isinstance(is_player, bool):
                raise HistoryDecodeError(f"Move {i} is malformed: {item!r}")
            records.append(MoveRecord(col, Cell.PLAYER if is_player else Cell.OPPONENT))

        return cls(records)

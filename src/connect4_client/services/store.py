# src/connect4_client/services/store.py

from __future__ import annotations
import csv
import logging
import time
from pathlib import Path
from typing import List, Union

import pandas as pd

from connect4_client.config import SAVE_FILE
from connect4_client.core.board import Board
from connect4_client.core.history import MoveHistory
from connect4_client.errors import PersistenceError
from connect4_client.services.base import PersistedSession
from connect4_client.types import Cell, SessionStatus

logger = logging.getLogger(__name__)

COLUMNS = [
    "player_id",
    "session_id",
    "status",
    "is_player_turn",
    "board_state",
    "move_history",
    "saved_at",
]


class CsvSessionStore:
    """
    Finished games, one CSV row each. Rows are only ever appended;
    loading returns a player's rows newest first.
    """

    def __init__(self, path: Union[str, Path] = SAVE_FILE) -> None:
        self.path = Path(path)

    def save_terminal_state(
        self,
        player_id: int,
        session_id: int,
        board: Board,
        turn_owner: Cell,
        status: SessionStatus,
        history: MoveHistory,
    ) -> None:
        row = [
            player_id,
            session_id,
            status.value,
            turn_owner == Cell.PLAYER,
            board.encode_snapshot(),
            history.encode(),
            time.strftime("%Y-%m-%dT%H:%M:%S"),
        ]
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            new_file = not self.path.exists() or self.path.stat().st_size == 0
            with open(self.path, "a", newline="") as f:
                w = csv.writer(f)
                if new_file:
                    w.writerow(COLUMNS)
                w.writerow(row)
        except (OSError, csv.Error) as e:
            raise PersistenceError(f"Could not save game {session_id}: {e}") from e

        logger.info("Saved game %s for player %s (%s)", session_id, player_id, status.value)

    def load_frame(self) -> pd.DataFrame:
        if not self.path.exists():
            return pd.DataFrame(columns=COLUMNS)
        try:
            df = pd.read_csv(self.path, dtype=str, keep_default_na=False)
        except pd.errors.EmptyDataError:
            return pd.DataFrame(columns=COLUMNS)
        except (OSError, pd.errors.ParserError) as e:
            raise PersistenceError(f"Could not read saved games from {self.path}: {e}") from e

        df.columns = [c.strip() for c in df.columns]
        missing = [c for c in COLUMNS if c not in df.columns]
        if missing:
            raise PersistenceError(f"Saved games file is missing columns: {missing}")
        return df

    def load_saved_sessions(self, player_id: int) -> List[PersistedSession]:
        df = self.load_frame()
        df = df[df["player_id"].str.strip() == str(player_id)]
        # Later rows win ties on saved_at (same second)
        df = df.iloc[::-1].sort_values("saved_at", ascending=False, kind="stable")

        out: List[PersistedSession] = []
        for rec in df.to_dict("records"):
            try:
                session_id = int(rec["session_id"])
            except ValueError:
                logger.warning("Skipping saved game with bad id %r", rec["session_id"])
                continue
            is_player_turn = rec["is_player_turn"].strip().lower() in {"true", "1", "yes"}
            out.append(
                PersistedSession(
                    player_id=player_id,
                    session_id=session_id,
                    status=rec["status"],
                    turn_owner=Cell.PLAYER if is_player_turn else Cell.OPPONENT,
                    move_history=rec["move_history"] or None,
                    board_snapshot=rec["board_state"] or None,
                    saved_at=rec["saved_at"],
                )
            )
        return out

from __future__ import annotations

from pathlib import Path

import pandas as pd

from connect4_client.core.history import MoveHistory
from connect4_client.errors import HistoryDecodeError
from connect4_client.services.store import CsvSessionStore


def _move_count(text: str) -> float:
    if not text:
        return float("nan")
    try:
        return float(len(MoveHistory.decode(text)))
    except HistoryDecodeError:
        return float("nan")


def load_games(csv_path: Path) -> pd.DataFrame:
    if not csv_path.exists():
        raise FileNotFoundError(f"CSV not found: {csv_path}")

    df = CsvSessionStore(csv_path).load_frame()

    df["player_id"] = df["player_id"].str.strip()
    df = df[df["player_id"].str.len() > 0].copy()

    df["status"] = df["status"].str.strip()
    df["moves"] = df["move_history"].map(_move_count)
    df["saved_at"] = pd.to_datetime(df["saved_at"], errors="coerce")
    return df

from __future__ import annotations

import pandas as pd


def _require_cols(df: pd.DataFrame, cols: list[str]) -> None:
    missing = [c for c in cols if c not in df.columns]
    if missing:
        raise ValueError(f"Missing required columns: {missing}. Present: {list(df.columns)}")


def outcome_table(df: pd.DataFrame, min_games: int = 0) -> pd.DataFrame:
    """One row per player: games, wins, losses, win rate, average game length."""
    _require_cols(df, ["player_id", "status", "moves"])

    if df.empty:
        return pd.DataFrame(columns=["player_id", "games", "wins", "losses", "win_rate", "avg_moves"])

    out = (
        df.assign(
            won=(df["status"] == "Won").astype(int),
            lost=(df["status"] == "Lost").astype(int),
        )
        .groupby("player_id", sort=True)
        .agg(games=("status", "size"), wins=("won", "sum"), losses=("lost", "sum"), avg_moves=("moves", "mean"))
        .reset_index()
    )
    out["win_rate"] = out["wins"] / out["games"]

    if min_games > 0:
        out = out[out["games"] >= min_games]

    out = out.sort_values(["win_rate", "games"], ascending=[False, False]).reset_index(drop=True)
    return out[["player_id", "games", "wins", "losses", "win_rate", "avg_moves"]]

from __future__ import annotations

from pathlib import Path

import pandas as pd
import matplotlib.pyplot as plt


def plot_outcomes(table: pd.DataFrame, outdir: Path, *, show: bool) -> Path | None:
    """Stacked win/loss bar per player. Returns the saved path, if any."""
    if table.empty:
        return None

    fig, ax = plt.subplots()
    players = table["player_id"].astype(str)
    ax.bar(players, table["wins"], label="won")
    ax.bar(players, table["losses"], bottom=table["wins"], label="lost")
    ax.set_title("Saved games by player")
    ax.set_xlabel("player")
    ax.set_ylabel("games")
    ax.legend()

    if show:
        plt.show()
        return None

    outdir.mkdir(parents=True, exist_ok=True)
    path = outdir / "outcomes_by_player.png"
    fig.savefig(path, dpi=200, bbox_inches="tight")
    plt.close(fig)
    return path

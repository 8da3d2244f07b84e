from __future__ import annotations

import argparse
from pathlib import Path

from connect4_client.config import SAVE_FILE

from ..io.load_games import load_games
from ..metrics.summarize import outcome_table
from ..plots.chart import plot_outcomes


def build_argparser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="connect4_reports", description="Summarize saved Connect-4 games.")
    ap.add_argument("--csv", type=str, default=SAVE_FILE, help="Saved games CSV")
    ap.add_argument("--min-games", type=int, default=0, help="Hide players with fewer games than this")
    ap.add_argument("--figures-dir", type=str, default="data/figures", help="Where to save the chart")
    ap.add_argument("--show", action="store_true", help="Show the chart instead of saving it")
    ap.add_argument("--no-chart", action="store_true", help="Print the table only")
    return ap


def main(argv: list[str] | None = None) -> int:
    args = build_argparser().parse_args(argv)

    csv_path = Path(args.csv)
    df = load_games(csv_path)

    print(f"\nLoaded: {csv_path}")
    print(f"Games: {len(df):,}")

    table = outcome_table(df, min_games=args.min_games)
    print("\n=== Outcomes by player ===")
    print(table.to_string(index=False))

    if not args.no_chart:
        path = plot_outcomes(table, Path(args.figures_dir), show=args.show)
        if path is not None:
            print(f"\nSaved figure to: {path.resolve()}")

    return 0

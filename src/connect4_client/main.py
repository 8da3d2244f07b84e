from __future__ import annotations

import argparse
import logging
from typing import List, Optional

from connect4_client.config import API_BASE_URL, LOG_LEVEL, SAVE_FILE
from connect4_client.errors import (
    Connect4ClientError,
    MoveAlreadyInFlight,
    PersistenceError,
    SessionStartError,
)
from connect4_client.game.session import SessionEngine
from connect4_client.services.api_client import ApiClient, PlayerStatsSink
from connect4_client.services.base import PersistedSession
from connect4_client.services.store import CsvSessionStore
from connect4_client.ui.prompts import parse_choice, parse_move
from connect4_client.ui.replay import EventPlayer, status_line


def build_engine(base_url: str, save_file: str) -> SessionEngine:
    client = ApiClient(base_url=base_url)
    return SessionEngine(client, stats=PlayerStatsSink(client), store=CsvSessionStore(save_file))


def game_loop(engine: SessionEngine, player: EventPlayer) -> None:
    player.play(engine.drain_events())

    while engine.is_active:
        if engine.awaiting_opponent:
            # The server normally answers with the CPU move in the same response.
            player.status = "Waiting for the CPU; resume the game later."
            player.refresh()
            return

        raw = input("Your move: ")
        try:
            move = parse_move(raw, engine.cols)
        except ValueError as e:
            player.status = f"{status_line(engine.status, engine.turn_owner)} | {e}"
            player.refresh()
            continue
        if move is None:
            player.status = "Game quit."
            player.refresh()
            return

        try:
            outcome = engine.play_move(int(move))
        except MoveAlreadyInFlight:
            continue
        except Connect4ClientError as e:
            player.play(engine.drain_events())
            player.status = f"{status_line(engine.status, engine.turn_owner)} | {e}"
            player.refresh()
            continue

        player.play(engine.drain_events())
        if outcome.save_error:
            print(f"Error saving game state: {outcome.save_error}")


def _print_saved(saved: List[PersistedSession]) -> None:
    if not saved:
        print("No saved games.")
        return
    for i, s in enumerate(saved, start=1):
        print(f"{i:>3}) game {s.session_id:<8} {s.status:<6} saved {s.saved_at}")


def cmd_play(args: argparse.Namespace) -> int:
    engine = build_engine(args.url, args.save_file)
    try:
        engine.start_session(args.player)
    except SessionStartError as e:
        print(f"Game Start Error: {e}")
        return 1
    game_loop(engine, EventPlayer(engine.rows, engine.cols))
    return 0


def cmd_saved(args: argparse.Namespace) -> int:
    try:
        saved = CsvSessionStore(args.save_file).load_saved_sessions(args.player)
    except PersistenceError as e:
        print(f"Error loading games: {e}")
        return 1
    _print_saved(saved)
    return 0


def cmd_restore(args: argparse.Namespace) -> int:
    engine = build_engine(args.url, args.save_file)
    try:
        saved = engine.store.load_saved_sessions(args.player)
    except PersistenceError as e:
        print(f"Error loading games: {e}")
        return 1
    if not saved:
        print("No saved games.")
        return 1

    pick: Optional[int] = args.pick - 1 if args.pick is not None else None
    if pick is None:
        _print_saved(saved)
        pick = parse_choice(input("Game to restore: "), len(saved))
    if pick is None or not 0 <= pick < len(saved):
        print("Invalid game data selected.")
        return 1

    result = engine.restore_session(saved[pick])
    game_loop(engine, EventPlayer(engine.rows, engine.cols))
    if result.degraded:
        print(f"Restored with losses: {result.degraded}")
    else:
        print("Game restored successfully!")
    return 0


def cmd_ping(args: argparse.Namespace) -> int:
    ok = ApiClient(base_url=args.url).test_connection()
    print(f"{args.url}: {'reachable' if ok else 'unreachable'}")
    return 0 if ok else 1


def build_argparser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="connect4", description="Play Connect-4 against the game server.")
    ap.add_argument("--url", type=str, default=API_BASE_URL, help="Game server base URL")
    ap.add_argument("--save-file", type=str, default=SAVE_FILE, help="CSV file holding finished games")
    sub = ap.add_subparsers(dest="cmd", required=True)

    p = sub.add_parser("play", help="Start a new game")
    p.add_argument("--player", type=int, required=True, help="Player id on the server")
    p.set_defaults(func=cmd_play)

    p = sub.add_parser("saved", help="List saved games")
    p.add_argument("--player", type=int, required=True)
    p.set_defaults(func=cmd_saved)

    p = sub.add_parser("restore", help="Restore a saved game")
    p.add_argument("--player", type=int, required=True)
    p.add_argument("--pick", type=int, default=None, help="1-based entry from `saved` (prompts if omitted)")
    p.set_defaults(func=cmd_restore)

    p = sub.add_parser("ping", help="Check that the server is reachable")
    p.set_defaults(func=cmd_ping)

    return ap


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    args = build_argparser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())

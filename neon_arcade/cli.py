"""
Neon Arcade CLI - Command-line access to progress and autoplay.

Usage:
    neon-arcade stats                       Show progress and streak level
    neon-arcade reset [--yes]               Wipe all progress
    neon-arcade simulate <kind> [-n N]      Play N autoplay sessions

Global options:
    --data-dir DIR      Where progress.json lives (default: $NEON_ARCADE_DATA_DIR
                        or ~/.neon_arcade)
"""

import argparse
import logging
import sys

from .config import ArcadeSettings
from .engine_core.result import GameKind


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Neon Arcade - mini-game session engine",
        prog="neon-arcade",
    )
    parser.add_argument("--data-dir", help="Directory holding progress.json")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    subparsers.add_parser("stats", help="Show progress and streak level")

    reset_parser = subparsers.add_parser("reset", help="Wipe all progress")
    reset_parser.add_argument("--yes", action="store_true", help="Skip confirmation")

    simulate_parser = subparsers.add_parser("simulate", help="Play autoplay sessions")
    simulate_parser.add_argument("kind", choices=[k.value for k in GameKind], help="Game to play")
    simulate_parser.add_argument("--sessions", "-n", type=int, default=1, help="Number of sessions")
    simulate_parser.add_argument("--seed", type=int, default=None, help="Random seed")

    args = parser.parse_args(argv)

    settings = ArcadeSettings.from_env(args.data_dir)
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "stats":
        cmd_stats(settings)
    elif args.command == "reset":
        cmd_reset(settings, args)
    elif args.command == "simulate":
        cmd_simulate(settings, args)
    else:
        parser.print_help()
        sys.exit(1)


def _open_store(settings: ArcadeSettings):
    from .errors import StorageError
    from .progress import JsonFileKeyValueStore, ProgressStore

    try:
        return ProgressStore.load(JsonFileKeyValueStore(settings.progress_path))
    except StorageError as e:
        print(f"Error: {e}")
        sys.exit(1)


def cmd_stats(settings: ArcadeSettings):
    """Print the progress record."""
    store = _open_store(settings)

    print(f"Sessions played: {store.sessions_played}")
    print(f"Streak level:    {store.streak_level().value} ({store.progress_fraction():.0%})")
    remaining = store.currency_to_next_level()
    if remaining is not None:
        print(f"Next level in:   {remaining}")

    print("\nCurrencies:")
    for kind, amount in store.currencies.items():
        print(f"  {kind.currency_name:<18} {amount}")

    print("\nBest scores:")
    for kind, best in store.best_scores.items():
        print(f"  {kind.title:<18} {best}")

    last = store.last_result
    if last is None:
        print("\nStart your first session to build your streak")
    else:
        print(f"\nLast session: {last.kind.title} - score {last.score}, +{last.reward} {last.kind.currency}")


def cmd_reset(settings: ArcadeSettings, args):
    """Reset all progress."""
    from .errors import StorageError

    if not args.yes:
        answer = input("This erases all progress. Type 'reset' to confirm: ")
        if answer.strip().lower() != "reset":
            print("Cancelled.")
            return

    store = _open_store(settings)
    try:
        store.reset_all()
    except StorageError as e:
        print(f"Error: {e}")
        sys.exit(1)
    print("Progress reset.")


def cmd_simulate(settings: ArcadeSettings, args):
    """Play autoplay sessions and record them."""
    from .bots import default_policy, play_session
    from .engine_core import ManualScheduler, SeededRandom
    from .errors import StorageError
    from .session import SessionDispatcher

    if args.sessions < 1:
        print("Error: --sessions must be at least 1")
        sys.exit(1)

    store = _open_store(settings)
    scheduler = ManualScheduler()
    dispatcher = SessionDispatcher(store, scheduler, rng=SeededRandom(args.seed))
    policy = default_policy(args.kind, seed=args.seed)

    print(f"Simulating {args.sessions} {GameKind(args.kind).title} session(s)...")
    for i in range(args.sessions):
        try:
            summary = play_session(dispatcher, scheduler, args.kind, policy)
        except StorageError as e:
            print(f"Error: progress not saved: {e}")
            sys.exit(1)
        marker = " *" if summary.is_new_best else ""
        print(
            f"  #{i + 1}: score {summary.result.score}, "
            f"+{summary.result.reward} {summary.currency_name}{marker}"
        )

    print(f"\nStreak level: {store.streak_level().value} ({store.progress_fraction():.0%})")


if __name__ == "__main__":
    main()

#!/usr/bin/env python3
"""WordleSync - five-letter word game with a synced play history.

Usage:
    python main.py play --mode daily
    python main.py sync --verbose
"""

import argparse
import logging
import os
import sys
from datetime import date
from logging.handlers import RotatingFileHandler
from pathlib import Path

from core.database_adapter import AdapterError
from core.dictionary_client import DictionaryClient
from core.game_session import GameSession, GameStatus, InvalidGuessError
from core.models import WORD_LENGTH, GameMode, LetterVerdict, UserStats
from core.postgres_adapter import PostgreSQLAdapter
from core.remote_store import OfflineRemoteStore, RemoteStore
from core.scoring import score
from core.sqlite_adapter import SQLiteAdapter
from core.sync_coordinator import SyncCoordinator
from core.user_manager import User, UserManager
from core.word_source import WordSource
from utils.config import Config

log = logging.getLogger("wordlesync")

VERDICT_MARKS = {
    LetterVerdict.CORRECT: "G",
    LetterVerdict.PRESENT: "Y",
    LetterVerdict.ABSENT: ".",
}


def setup_logging(verbose: bool = False) -> None:
    """Log to a rotating file in the XDG state directory and to stderr."""
    xdg_state_home = os.environ.get("XDG_STATE_HOME", str(Path.home() / ".local" / "state"))
    log_dir = Path(xdg_state_home) / "wordlesync"
    log_dir.mkdir(parents=True, exist_ok=True)

    # 5MB max, keep 5 backups
    file_handler = RotatingFileHandler(
        log_dir / "wordlesync.log", maxBytes=5 * 1024 * 1024, backupCount=5
    )
    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[file_handler, stream_handler],
    )


def default_db_path() -> Path:
    return Path.home() / ".local" / "share" / "wordlesync" / "wordlesync.db"


def format_verdicts(verdicts: list[LetterVerdict]) -> str:
    return "".join(VERDICT_MARKS[v] for v in verdicts)


def configured_word_list(settings) -> Path | None:
    return Path(settings.word_list_path) if settings.word_list_path else None


class Application:
    """Wires configuration, stores and the coordinator together."""

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self.config = Config(db_path)
        self.users = UserManager(self.config)

        settings = self.config.settings()
        client = None
        if settings.dictionary_enabled:
            client = DictionaryClient(
                base_url=settings.dictionary_api_url,
                timeout_sec=settings.dictionary_timeout_sec,
            )
        self.words = WordSource(
            dictionary_client=client,
            word_list_path=configured_word_list(settings),
        )

        self.local = SQLiteAdapter(db_path)
        self.local.initialize()
        self.remote = self._create_remote_store()
        self.sync = SyncCoordinator(self.local, self.remote)

    def _create_remote_store(self) -> RemoteStore:
        settings = self.config.settings()
        if not settings.remote_sync_enabled:
            log.info("Remote sync disabled, running offline")
            return OfflineRemoteStore()
        if not settings.postgres_host or not settings.postgres_user:
            log.warning("Remote sync enabled but PostgreSQL is not configured")
            return OfflineRemoteStore("PostgreSQL is not configured")

        remote = PostgreSQLAdapter(
            host=settings.postgres_host,
            port=settings.postgres_port,
            database=settings.postgres_database,
            user=settings.postgres_user,
            password=settings.postgres_password,
            sslmode=settings.postgres_sslmode,
        )
        try:
            remote.initialize()
        except AdapterError as e:
            log.warning(f"Remote store unavailable, running offline: {e}")
            return OfflineRemoteStore(f"Remote store unavailable: {e}")
        return remote

    def require_user(self) -> User:
        user = self.users.get_current_user()
        if user is None:
            raise SystemExit("Not signed in. Run 'login --name NAME' first.")
        return user

    def close(self) -> None:
        if isinstance(self.remote, PostgreSQLAdapter):
            self.remote.close()
        self.local.close()


# ========== Commands that need no stores ==========


def cmd_daily_word(args) -> int:
    settings = Config(args.db or default_db_path()).settings()
    words = WordSource(word_list_path=configured_word_list(settings))
    day = date.fromisoformat(args.date) if args.date else None
    print(words.daily_word(day))
    return 0


def cmd_score(args) -> int:
    try:
        verdicts = score(args.guess, args.target)
    except ValueError as e:
        print(f"Error: {e}")
        return 1
    print(f"{args.guess.upper()}  {format_verdicts(verdicts)}")
    return 0


# ========== Commands that use the stores ==========


def cmd_validate(app: Application, args) -> int:
    valid = app.words.validate(args.word)
    print(f"{args.word.upper()}: {'valid' if valid else 'not a word'}")
    return 0 if valid else 1


def cmd_define(app: Application, args) -> int:
    definition = app.words.definition(args.word)
    if definition is None:
        print(f"No definition found for {args.word.upper()}")
        return 1
    print(definition)
    return 0


def cmd_login(app: Application, args) -> int:
    if args.user_id:
        try:
            user = app.users.sign_in(args.user_id, display_name=args.name, email=args.email)
        except ValueError as e:
            print(f"Error: {e}")
            return 1
    elif args.name:
        user = app.users.create_user(display_name=args.name, email=args.email)
    else:
        print("Error: give --name for a new identity or --user-id to reuse one")
        return 1
    print(f"Signed in as {user.display_name or user.user_id} ({user.user_id})")

    result = app.users.register_remote(app.remote)
    if not result.success:
        print(f"Warning: profile not created remotely: {result.error}")
    return 0


def cmd_logout(app: Application, args) -> int:
    app.users.sign_out()
    print("Signed out")
    return 0


def cmd_play(app: Application, args) -> int:
    user = app.require_user()
    mode = GameMode(args.mode.upper())

    if mode is GameMode.DAILY and app.sync.has_played_daily_today(user.user_id):
        print("You have already played today's word.")
        return 1

    session = GameSession.start(app.words, user.user_id, mode)
    while not session.is_finished:
        try:
            guess = input(f"Guess {len(session.guesses) + 1}/6: ").strip()
        except EOFError:
            print()
            print("Game abandoned")
            return 1

        if len(guess) < WORD_LENGTH:
            print("Not enough letters")
            continue
        if len(guess) > WORD_LENGTH:
            print("Too many letters")
            continue

        session.current_guess = ""
        try:
            for letter in guess:
                session.add_letter(letter)
            result = session.submit_guess()
        except (InvalidGuessError, ValueError) as e:
            print(e)
            continue
        print(f"{result.word}  {format_verdicts(result.verdicts)}")

    print("You won!" if session.status is GameStatus.WON else f"The word was {session.target}")
    definition = app.words.definition(session.target)
    if definition:
        print(f"{session.target}: {definition}")

    saved = app.sync.save_game(session.to_record())
    if not saved.success:
        print(f"Saved locally only: {saved.error}")
    return 0


def cmd_sync(app: Application, args) -> int:
    user = app.require_user()
    result = app.sync.sync_from_remote(user.user_id)
    if not result.success:
        print(f"Sync failed: {result.error}")
        return 1
    print(f"Remote has {len(result.value)} games; local cache holds {app.sync.get_total_games(user.user_id)}")
    return 0


def print_stats(stats: UserStats) -> None:
    print(f"Played:   {stats.total_games}")
    print(f"Won:      {stats.total_wins}")
    print(f"Win rate: {stats.win_rate:.0%}")


def cmd_stats(app: Application, args) -> int:
    user = app.require_user()
    print_stats(app.sync.get_stats(user.user_id))
    return 0


def cmd_profile(app: Application, args) -> int:
    """Show the remote profile totals, or the local counts when they cannot be read."""
    user = app.require_user()
    result = app.remote.get_user(user.user_id)

    if result.success and result.value is not None:
        profile = result.value
        name = profile.display_name or user.display_name
        stats = profile.stats
        source = "remote"
    else:
        reason = result.error if not result.success else "no remote profile"
        log.info(f"Showing local stats for {user.user_id}: {reason}")
        name = user.display_name
        stats = app.sync.get_stats(user.user_id)
        source = f"local cache ({reason})"

    print(f"User:     {name or '-'} ({user.user_id})")
    print_stats(stats)
    print(f"Source:   {source}")
    return 0


def cmd_history(app: Application, args) -> int:
    user = app.require_user()
    mode = GameMode(args.mode.upper()) if args.mode else None
    games = app.sync.load_history(user.user_id, mode)
    if not games:
        print("No games played yet")
        return 0

    for game in games:
        outcome = f"{game.guesses_used}/6" if game.won else "X/6"
        print(f"{game.played_at}  {game.mode.value:<9} {game.word}  {outcome}  {game.sync_status.value}")
    return 0


def cmd_played_today(app: Application, args) -> int:
    user = app.require_user()
    played = app.sync.has_played_daily_today(user.user_id)
    print("yes" if played else "no")
    return 0


def cmd_reset(app: Application, args) -> int:
    user = app.require_user()
    deleted = app.sync.reset_user_games(user.user_id)
    print(f"Deleted {deleted} local games")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Five-letter word game with a synced play history",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s login --name alice
  %(prog)s login --user-id ID   # reuse an identity from another device
  %(prog)s play --mode daily
  %(prog)s score crane react
        """,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")
    parser.add_argument("--db", type=Path, default=None, help="Database path")

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("daily-word", help="Print the word of the day")
    p.add_argument("--date", help="Day as YYYY-MM-DD (default: today)")
    p.set_defaults(func=cmd_daily_word, needs_app=False)

    p = sub.add_parser("score", help="Score a guess against a target")
    p.add_argument("guess")
    p.add_argument("target")
    p.set_defaults(func=cmd_score, needs_app=False)

    p = sub.add_parser("validate", help="Check whether a word is accepted")
    p.add_argument("word")
    p.set_defaults(func=cmd_validate)

    p = sub.add_parser("define", help="Look up a definition")
    p.add_argument("word")
    p.set_defaults(func=cmd_define)

    p = sub.add_parser("login", help="Create an identity, or reuse one from another device")
    p.add_argument("--name", default=None, help="Display name")
    p.add_argument("--user-id", default=None, help="Existing user id to sign in as")
    p.add_argument("--email", default=None, help="Email address")
    p.set_defaults(func=cmd_login)

    p = sub.add_parser("logout", help="Sign out (cached games are kept)")
    p.set_defaults(func=cmd_logout)

    p = sub.add_parser("play", help="Play a game in the terminal")
    p.add_argument("--mode", choices=["daily", "unlimited"], default="unlimited")
    p.set_defaults(func=cmd_play)

    p = sub.add_parser("sync", help="Pull remote games into the local cache")
    p.set_defaults(func=cmd_sync)

    p = sub.add_parser("stats", help="Show games played and won")
    p.set_defaults(func=cmd_stats)

    p = sub.add_parser("profile", help="Show the remote profile totals")
    p.set_defaults(func=cmd_profile)

    p = sub.add_parser("history", help="List played games, most recent first")
    p.add_argument("--mode", choices=["daily", "unlimited"], default=None)
    p.set_defaults(func=cmd_history)

    p = sub.add_parser("played-today", help="Has today's daily game been played")
    p.set_defaults(func=cmd_played_today)

    p = sub.add_parser("reset", help="Delete the signed-in user's local games")
    p.set_defaults(func=cmd_reset)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    if not getattr(args, "needs_app", True):
        return args.func(args)

    try:
        app = Application(args.db or default_db_path())
    except AdapterError as e:
        print(f"Error initializing storage: {e}")
        return 1

    try:
        return args.func(app, args)
    finally:
        app.close()


if __name__ == "__main__":
    sys.exit(main())

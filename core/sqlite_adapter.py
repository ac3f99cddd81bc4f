"""SQLite adapter for the local game store."""

import json
import logging
import sqlite3
from contextlib import closing, contextmanager
from pathlib import Path

from core.database_adapter import AdapterError, ConnectionError, DatabaseAdapter
from core.models import GameMode, GameRecord
from core.sqlite_migration_runner import SQLiteMigrationRunner

log = logging.getLogger("wordlesync.sqlite_adapter")

_SELECT_GAMES = """
    SELECT id, remote_id, user_id, mode, word, guesses_used, played_at, won, guesses
    FROM games
"""


class SQLiteAdapter(DatabaseAdapter):
    """SQLite database adapter implementation.

    Each operation opens its own short-lived connection, so one adapter
    instance can be shared between threads.
    """

    def __init__(self, db_path: Path, migration_dir: Path | None = None):
        """Initialize SQLite adapter.

        Args:
            db_path: Path to SQLite database file
            migration_dir: Alternative Alembic migrations directory
        """
        self.db_path = Path(db_path)
        self.migration_dir = migration_dir
        self._initialized = False

    def initialize(self) -> None:
        """Initialize database schema and perform migrations.

        Raises:
            ConnectionError: If the database file cannot be opened
            AdapterError: If migrations fail
        """
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            with closing(self._connect()) as conn:
                conn.execute("SELECT count(*) FROM sqlite_master")
        except sqlite3.Error as e:
            raise ConnectionError(f"Cannot open database {self.db_path}: {e}") from e

        runner = SQLiteMigrationRunner(self.db_path, self.migration_dir)
        try:
            runner.stamp_unversioned_schema()
            if runner.check_needs_upgrade():
                log.info("Running Alembic database migrations")
                runner.upgrade()
                log.info("Database migrations completed successfully")
        except Exception as e:
            log.error(f"Migration failed: {e}")
            raise AdapterError(f"Database migration failed: {e}") from e

        self._initialized = True

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=30.0)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA busy_timeout = 30000")
        return conn

    @contextmanager
    def get_connection(self):
        """Get a database connection (committed on success, always closed)."""
        if not self._initialized:
            raise AdapterError("Adapter not initialized. Call initialize() first.")
        conn = self._connect()
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    def close(self) -> None:
        """Nothing pooled; connections are closed after every operation."""
        self._initialized = False

    # ========== Game Operations ==========

    def insert_game(self, record: GameRecord) -> int | None:
        """Insert a game record, ignoring duplicates of a remote game.

        SQLite errors are logged and reported as None, the same as an
        ignored duplicate.
        """
        try:
            with self.get_connection() as conn:
                cursor = conn.execute(
                    """
                    INSERT OR IGNORE INTO games
                    (remote_id, user_id, mode, word, guesses_used, played_at, won, guesses)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                    (
                        record.remote_id,
                        record.user_id,
                        record.mode.value,
                        record.word,
                        record.guesses_used,
                        record.played_at,
                        1 if record.won else 0,
                        json.dumps(record.guess_sequence),
                    ),
                )
                if cursor.rowcount == 0:
                    log.debug(
                        f"Game {record.remote_id} already stored for user {record.user_id}"
                    )
                    return None
                return cursor.lastrowid
        except sqlite3.Error as e:
            log.error(f"Failed to insert game {record.word} for user {record.user_id}: {e}")
            return None

    def get_all_games(self, user_id: str) -> list[GameRecord]:
        with self.get_connection() as conn:
            rows = conn.execute(
                _SELECT_GAMES + " WHERE user_id = ? ORDER BY played_at DESC, id DESC",
                (user_id,),
            ).fetchall()
        return [self._row_to_record(row) for row in rows]

    def get_games_by_mode(self, user_id: str, mode: GameMode) -> list[GameRecord]:
        with self.get_connection() as conn:
            rows = conn.execute(
                _SELECT_GAMES
                + " WHERE user_id = ? AND mode = ? ORDER BY played_at DESC, id DESC",
                (user_id, GameMode(mode).value),
            ).fetchall()
        return [self._row_to_record(row) for row in rows]

    def get_game_by_remote_id(self, user_id: str, remote_id: str) -> GameRecord | None:
        if not remote_id:
            return None
        with self.get_connection() as conn:
            row = conn.execute(
                _SELECT_GAMES + " WHERE user_id = ? AND remote_id = ? LIMIT 1",
                (user_id, remote_id),
            ).fetchone()
        return self._row_to_record(row) if row else None

    def get_daily_game_in_range(
        self, user_id: str, start_ms: int, end_ms: int
    ) -> GameRecord | None:
        with self.get_connection() as conn:
            row = conn.execute(
                _SELECT_GAMES
                + """ WHERE user_id = ? AND mode = ?
                      AND played_at >= ? AND played_at < ?
                      ORDER BY played_at ASC LIMIT 1""",
                (user_id, GameMode.DAILY.value, start_ms, end_ms),
            ).fetchone()
        return self._row_to_record(row) if row else None

    def count_games(self, user_id: str) -> int:
        with self.get_connection() as conn:
            row = conn.execute(
                "SELECT COUNT(*) FROM games WHERE user_id = ?", (user_id,)
            ).fetchone()
        return row[0]

    def count_wins(self, user_id: str) -> int:
        with self.get_connection() as conn:
            row = conn.execute(
                "SELECT COUNT(*) FROM games WHERE user_id = ? AND won = 1", (user_id,)
            ).fetchone()
        return row[0]

    def delete_user_games(self, user_id: str) -> int:
        with self.get_connection() as conn:
            cursor = conn.execute("DELETE FROM games WHERE user_id = ?", (user_id,))
            deleted = cursor.rowcount
        log.info(f"Deleted {deleted} games for user {user_id}")
        return deleted

    def delete_all_games(self) -> int:
        with self.get_connection() as conn:
            cursor = conn.execute("DELETE FROM games")
            deleted = cursor.rowcount
        log.info(f"Deleted all {deleted} games")
        return deleted

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> GameRecord:
        try:
            guesses = json.loads(row["guesses"]) if row["guesses"] else []
        except json.JSONDecodeError:
            log.warning(f"Unreadable guesses for game {row['id']}, treating as empty")
            guesses = []

        return GameRecord(
            local_id=row["id"],
            remote_id=row["remote_id"] or "",
            user_id=row["user_id"],
            mode=GameMode(row["mode"]),
            word=row["word"],
            guesses_used=row["guesses_used"],
            played_at=row["played_at"],
            won=bool(row["won"]),
            guess_sequence=guesses,
        )

"""PostgreSQL adapter for the remote game store."""

import json
import logging
import threading
import time
import uuid
from contextlib import contextmanager
from pathlib import Path

import psycopg2
import psycopg2.extras
from psycopg2 import pool
from sqlalchemy.engine import URL

from core.database_adapter import AdapterError, ConnectionError
from core.models import GameMode, GameRecord, UserProfile
from core.postgres_migration_runner import PostgreSQLMigrationRunner
from core.remote_store import RemoteStore
from core.result import Result

log = logging.getLogger("wordlesync.postgres_adapter")

_SELECT_GAMES = """
    SELECT id, user_id, mode, word, guesses_used, played_at, won, guesses
    FROM games
"""


class PostgreSQLAdapter(RemoteStore):
    """PostgreSQL remote store implementation.

    Uses psycopg2 with a thread-safe connection pool and SSL/TLS support.
    The pool is created on first use, so constructing the adapter never
    touches the network and an unreachable server surfaces as failed
    Results rather than exceptions.
    """

    def __init__(
        self,
        host: str,
        port: int,
        database: str,
        user: str,
        password: str,
        sslmode: str = "require",
        min_connections: int = 1,
        max_connections: int = 5,
        connect_timeout: int = 10,
        migration_dir: Path | None = None,
    ):
        """Initialize PostgreSQL adapter.

        Args:
            host: Database host address
            port: Database port (default: 5432)
            database: Database name
            user: Database user
            password: Database password
            sslmode: SSL mode (disable, allow, prefer, require, verify-ca, verify-full)
            min_connections: Minimum number of connections in pool
            max_connections: Maximum number of connections in pool
            connect_timeout: Connection timeout in seconds
            migration_dir: Alternative Alembic migrations directory
        """
        self.host = host
        self.port = port
        self.database = database
        self.user = user
        self.password = password
        self.sslmode = sslmode
        self.min_connections = min_connections
        self.max_connections = max_connections
        self.connect_timeout = connect_timeout
        self.migration_dir = migration_dir

        self._connection_pool: pool.ThreadedConnectionPool | None = None
        self._pool_lock = threading.Lock()

    def initialize(self) -> None:
        """Create the remote schema by running migrations.

        Raises:
            ConnectionError: If the server cannot be reached
            AdapterError: If migrations fail
        """
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute("SELECT version()")
                version = cursor.fetchone()[0]
                log.info(f"Connected to PostgreSQL: {version[:50]}...")
        except psycopg2.Error as e:
            raise ConnectionError(f"Failed to connect to database: {e}") from e

        runner = PostgreSQLMigrationRunner(
            self.sqlalchemy_url(),
            connect_timeout=self.connect_timeout,
            migration_dir=self.migration_dir,
        )
        try:
            if runner.check_needs_upgrade():
                log.info("Running Alembic database migrations")
                runner.upgrade()
                log.info("Database migrations completed successfully")
        except Exception as e:
            log.error(f"Migration failed: {e}")
            raise AdapterError(f"Remote migration failed: {e}") from e

    def sqlalchemy_url(self) -> URL:
        """Connection URL for SQLAlchemy (used by the migrations)."""
        return URL.create(
            "postgresql+psycopg2",
            username=self.user,
            password=self.password,
            host=self.host,
            port=self.port,
            database=self.database,
            query={"sslmode": self.sslmode},
        )

    def _get_pool(self) -> pool.ThreadedConnectionPool:
        with self._pool_lock:
            if self._connection_pool is None:
                try:
                    self._connection_pool = pool.ThreadedConnectionPool(
                        minconn=self.min_connections,
                        maxconn=self.max_connections,
                        host=self.host,
                        port=self.port,
                        database=self.database,
                        user=self.user,
                        password=self.password,
                        sslmode=self.sslmode,
                        connect_timeout=self.connect_timeout,
                    )
                except psycopg2.Error as e:
                    raise ConnectionError(f"Failed to create connection pool: {e}") from e
                log.info(
                    f"Created PostgreSQL connection pool: {self.host}:{self.port}/{self.database}"
                )
            return self._connection_pool

    @contextmanager
    def get_connection(self):
        """Get a database connection from the pool.

        Commits on success and rolls back on error.
        """
        connection_pool = self._get_pool()
        conn = connection_pool.getconn()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            connection_pool.putconn(conn)

    def close(self) -> None:
        """Close all database connections and cleanup resources."""
        with self._pool_lock:
            if self._connection_pool:
                self._connection_pool.closeall()
                self._connection_pool = None
                log.info("PostgreSQL connection pool closed")

    # ========== Game Operations ==========

    def create_game(self, record: GameRecord) -> Result[str]:
        remote_id = uuid.uuid4().hex
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    """
                    INSERT INTO games
                    (id, user_id, mode, word, guesses_used, played_at, won, guesses, created_at)
                    VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
                """,
                    (
                        remote_id,
                        record.user_id,
                        record.mode.value,
                        record.word,
                        record.guesses_used,
                        record.played_at,
                        record.won,
                        json.dumps(record.guess_sequence),
                        int(time.time() * 1000),
                    ),
                )
        except (psycopg2.Error, AdapterError) as e:
            log.error(f"Failed to create remote game for user {record.user_id}: {e}")
            return Result.fail(str(e))

        log.debug(f"Created remote game {remote_id} for user {record.user_id}")
        return Result.ok(remote_id)

    def list_user_games(self, user_id: str) -> Result[list[GameRecord]]:
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor)
                cursor.execute(
                    _SELECT_GAMES + " WHERE user_id = %s ORDER BY played_at DESC",
                    (user_id,),
                )
                rows = cursor.fetchall()
        except (psycopg2.Error, AdapterError) as e:
            log.error(f"Failed to list remote games for user {user_id}: {e}")
            return Result.fail(str(e))

        try:
            games = [row_to_record(row) for row in rows]
        except (ValueError, TypeError, KeyError) as e:
            log.error(f"Malformed remote game for user {user_id}: {e}")
            return Result.fail(f"Malformed remote game: {e}")

        return Result.ok(games)

    def has_daily_game(self, user_id: str, start_ms: int, end_ms: int) -> Result[bool]:
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    """
                    SELECT EXISTS (
                        SELECT 1 FROM games
                        WHERE user_id = %s AND mode = %s
                        AND played_at >= %s AND played_at < %s
                    )
                """,
                    (user_id, GameMode.DAILY.value, start_ms, end_ms),
                )
                exists = bool(cursor.fetchone()[0])
        except (psycopg2.Error, AdapterError) as e:
            log.warning(f"Remote daily game check failed for user {user_id}: {e}")
            return Result.fail(str(e))

        return Result.ok(exists)

    # ========== User Operations ==========

    def get_user(self, user_id: str) -> Result[UserProfile | None]:
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor)
                cursor.execute(
                    """
                    SELECT user_id, email, display_name, created_at, total_games, total_wins
                    FROM users WHERE user_id = %s
                """,
                    (user_id,),
                )
                row = cursor.fetchone()
        except (psycopg2.Error, AdapterError) as e:
            log.error(f"Failed to get remote user {user_id}: {e}")
            return Result.fail(str(e))

        if row is None:
            return Result.ok(None)
        return Result.ok(UserProfile(**dict(row)))

    def create_user(self, profile: UserProfile) -> Result[None]:
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    """
                    INSERT INTO users
                    (user_id, email, display_name, created_at, total_games, total_wins)
                    VALUES (%s, %s, %s, %s, %s, %s)
                    ON CONFLICT (user_id) DO UPDATE SET
                        email = EXCLUDED.email,
                        display_name = EXCLUDED.display_name
                """,
                    (
                        profile.user_id,
                        profile.email,
                        profile.display_name,
                        profile.created_at or int(time.time() * 1000),
                        profile.total_games,
                        profile.total_wins,
                    ),
                )
        except (psycopg2.Error, AdapterError) as e:
            log.error(f"Failed to create remote user {profile.user_id}: {e}")
            return Result.fail(str(e))

        log.info(f"Created remote user {profile.user_id}")
        return Result.ok(None)

    def update_user_stats(self, user_id: str, total_games: int, total_wins: int) -> Result[None]:
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    "UPDATE users SET total_games = %s, total_wins = %s WHERE user_id = %s",
                    (total_games, total_wins, user_id),
                )
                updated = cursor.rowcount
        except (psycopg2.Error, AdapterError) as e:
            log.error(f"Failed to update stats for user {user_id}: {e}")
            return Result.fail(str(e))

        if updated == 0:
            return Result.fail(f"User {user_id} not found")
        return Result.ok(None)


def row_to_record(row: dict) -> GameRecord:
    """Convert a remote games row into a GameRecord carrying its remote id."""
    guesses = row.get("guesses") or "[]"
    if isinstance(guesses, str):
        guesses = json.loads(guesses)

    return GameRecord(
        remote_id=str(row["id"]),
        user_id=row["user_id"],
        mode=GameMode(row["mode"]),
        word=row["word"],
        guesses_used=row["guesses_used"],
        played_at=row["played_at"],
        won=bool(row["won"]),
        guess_sequence=guesses,
    )

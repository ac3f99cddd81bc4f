"""Alembic migrations for the local game cache."""

import logging
from contextlib import contextmanager
from pathlib import Path

from alembic.config import Config
from sqlalchemy import create_engine, inspect

from core.migration_runner import MigrationRunner

log = logging.getLogger("wordlesync.sqlite_migration_runner")

# Revision whose games table has no remote_id column yet
INITIAL_REVISION = "001"


class SQLiteMigrationRunner(MigrationRunner):
    """Runs the cache migrations against one SQLite file.

    ALTERs that SQLite cannot do in place go through Alembic batch mode
    (the table is copied and swapped).
    """

    def __init__(self, db_path: Path, migration_dir: Path | None = None):
        super().__init__(migration_dir)
        self.db_path = Path(db_path)

    @property
    def url(self) -> str:
        return f"sqlite:///{self.db_path}"

    def _create_alembic_config(self) -> Config:
        config = Config()
        config.set_main_option("script_location", str(self.migration_dir))
        config.set_main_option("sqlalchemy.url", self.url)
        config.attributes["connection"] = None
        return config

    @contextmanager
    def _get_connection(self):
        """Yield a connection inside a transaction that commits on exit."""
        engine = create_engine(self.url, connect_args={"check_same_thread": False})
        try:
            with engine.begin() as conn:
                yield conn
        finally:
            engine.dispose()

    def games_columns(self) -> list[str]:
        """Column names of the games table (empty if it does not exist)."""
        with self._get_connection() as conn:
            inspector = inspect(conn)
            if not inspector.has_table("games"):
                return []
            return [column["name"] for column in inspector.get_columns("games")]

    def stamp_unversioned_schema(self) -> str | None:
        """Give a games table created before versioning its revision.

        A table without remote_id has the initial layout, so the next
        upgrade adds the column instead of recreating the table.

        Returns:
            The revision stamped, or None if nothing needed stamping
        """
        if self.get_current_version() is not None:
            return None

        columns = self.games_columns()
        if not columns:
            return None

        revision = "head" if "remote_id" in columns else INITIAL_REVISION
        log.info(f"Unversioned games table in {self.db_path}, stamping as {revision}")
        self.stamp(revision)
        return revision

"""Alembic migrations for the remote PostgreSQL store."""

import logging
from contextlib import contextmanager
from pathlib import Path

from alembic.config import Config
from sqlalchemy import create_engine
from sqlalchemy.engine import URL

from core.migration_runner import MigrationRunner

log = logging.getLogger("wordlesync.postgres_migration_runner")


class PostgreSQLMigrationRunner(MigrationRunner):
    """Runs the remote schema migrations (users and games tables)."""

    def __init__(self, url: URL, connect_timeout: int = 10, migration_dir: Path | None = None):
        """Initialize PostgreSQL migration runner.

        Args:
            url: SQLAlchemy URL of the remote database, sslmode in its query
            connect_timeout: Connection timeout in seconds
            migration_dir: Path to migrations directory
        """
        super().__init__(migration_dir)
        self.url = url
        self.connect_timeout = connect_timeout

    def _create_alembic_config(self) -> Config:
        config = Config()
        config.set_main_option("script_location", str(self.migration_dir))
        # ConfigParser interpolation treats % specially
        config.set_main_option(
            "sqlalchemy.url",
            self.url.render_as_string(hide_password=False).replace("%", "%%"),
        )
        config.attributes["connection"] = None
        return config

    @contextmanager
    def _get_connection(self):
        """Yield a connection inside a transaction that commits on exit."""
        log.debug(f"Connecting to {self.url.host}:{self.url.port}/{self.url.database} for migrations")
        engine = create_engine(self.url, connect_args={"connect_timeout": self.connect_timeout})
        try:
            with engine.begin() as conn:
                yield conn
        finally:
            engine.dispose()

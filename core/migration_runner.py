"""Base migration runner for database migrations.

Provides common migration functionality for all database backends.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory

log = logging.getLogger("wordlesync.migration_runner")

DEFAULT_MIGRATION_DIR = Path(__file__).resolve().parent.parent / "migrations"


class MigrationRunner(ABC):
    """Abstract base class for database migration runners.

    Handles Alembic migration execution for different database backends.
    The connection yielded by _get_connection is handed to migrations/env.py
    through the Alembic config attributes.
    """

    def __init__(self, migration_dir: Path | None = None):
        """Initialize migration runner.

        Args:
            migration_dir: Path to migrations directory
        """
        self.migration_dir = migration_dir or DEFAULT_MIGRATION_DIR
        self._config = None
        self._script_dir = None

    @abstractmethod
    def _create_alembic_config(self) -> Config:
        """Create Alembic configuration for this backend.

        Returns:
            Alembic Config object
        """
        pass

    @abstractmethod
    @contextmanager
    def _get_connection(self):
        """Get a database connection for migration operations.

        The connection must commit when the context exits cleanly.

        Yields:
            SQLAlchemy Connection
        """
        pass

    @property
    def config(self) -> Config:
        """Get Alembic configuration (lazy initialization)."""
        if self._config is None:
            self._config = self._create_alembic_config()
        return self._config

    @property
    def script_dir(self) -> ScriptDirectory:
        """Get Alembic script directory (lazy initialization)."""
        if self._script_dir is None:
            self._script_dir = ScriptDirectory.from_config(self.config)
        return self._script_dir

    def get_current_version(self) -> str | None:
        """Get current database version.

        Returns:
            Current revision or None if database is not versioned
        """
        with self._get_connection() as conn:
            context = MigrationContext.configure(conn)
            return context.get_current_revision()

    def get_head_version(self) -> str | None:
        """Get the newest revision available in the migrations directory."""
        return self.script_dir.get_current_head()

    def check_needs_upgrade(self) -> bool:
        """Check if database needs to be upgraded.

        Returns:
            True if upgrades are available, False otherwise
        """
        current = self.get_current_version()
        if current is None:
            return True
        return current != self.get_head_version()

    def _run(self, alembic_command, revision: str) -> None:
        """Run an Alembic command on a connection from _get_connection."""
        with self._get_connection() as conn:
            self.config.attributes["connection"] = conn
            try:
                alembic_command(self.config, revision)
            finally:
                self.config.attributes["connection"] = None

    def upgrade(self, revision: str = "head") -> None:
        """Run database migrations to target revision ("head" for latest)."""
        log.info(f"Running migrations to {revision}")
        self._run(command.upgrade, revision)
        log.info(f"Migration complete. New version: {self.get_current_version()}")

    def downgrade(self, revision: str) -> None:
        log.info(f"Downgrading to {revision}")
        self._run(command.downgrade, revision)
        log.info(f"Downgrade complete. New version: {self.get_current_version()}")

    def stamp(self, revision: str) -> None:
        """Record a revision without running migrations."""
        log.info(f"Stamping database as {revision}")
        self._run(command.stamp, revision)

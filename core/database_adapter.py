"""Database adapter abstraction layer for the local game store.

Defines the contract the sync coordinator relies on, so the SQLite
backend can be swapped out without touching the sync logic.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager

from core.models import GameMode, GameRecord

log = logging.getLogger("wordlesync.database_adapter")


class DatabaseAdapter(ABC):
    """Abstract base class for local game stores.

    Records are keyed by an auto-assigned local id. Remote-authored records
    are additionally unique per (user_id, remote_id).
    """

    @abstractmethod
    def initialize(self) -> None:
        """Initialize database schema and perform migrations."""
        pass

    @abstractmethod
    @contextmanager
    def get_connection(self):
        """Get a database connection.

        Yields:
            Database connection object (type varies by backend)
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Close all database connections and cleanup resources."""
        pass

    # ========== Game Operations ==========

    @abstractmethod
    def insert_game(self, record: GameRecord) -> int | None:
        """Insert a game record.

        Inserting a record whose (user_id, remote_id) already exists is
        ignored rather than duplicated.

        Args:
            record: Record to insert (its local_id is ignored)

        Returns:
            Assigned local id, or None if nothing was inserted
        """
        pass

    @abstractmethod
    def get_all_games(self, user_id: str) -> list[GameRecord]:
        """Get all games of a user, most recent first."""
        pass

    @abstractmethod
    def get_games_by_mode(self, user_id: str, mode: GameMode) -> list[GameRecord]:
        """Get a user's games of one mode, most recent first."""
        pass

    @abstractmethod
    def get_game_by_remote_id(self, user_id: str, remote_id: str) -> GameRecord | None:
        """Get the game with the given remote id, if present locally."""
        pass

    @abstractmethod
    def get_daily_game_in_range(
        self, user_id: str, start_ms: int, end_ms: int
    ) -> GameRecord | None:
        """Get a DAILY game played in [start_ms, end_ms).

        Args:
            user_id: Owning user
            start_ms: Window start (inclusive, ms since epoch)
            end_ms: Window end (exclusive, ms since epoch)

        Returns:
            A matching record or None
        """
        pass

    @abstractmethod
    def count_games(self, user_id: str) -> int:
        """Count all games of a user."""
        pass

    @abstractmethod
    def count_wins(self, user_id: str) -> int:
        """Count won games of a user."""
        pass

    @abstractmethod
    def delete_user_games(self, user_id: str) -> int:
        """Delete all games of a user.

        Returns:
            Number of deleted rows
        """
        pass

    @abstractmethod
    def delete_all_games(self) -> int:
        """Delete every game.

        Returns:
            Number of deleted rows
        """
        pass


class AdapterError(Exception):
    """Base exception for database adapter errors."""

    pass


class ConnectionError(AdapterError):
    """Exception raised when database connection fails."""

    pass

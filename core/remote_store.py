"""Remote store abstraction (system of record for games and user stats).

Every operation crosses the network and therefore reports its outcome as a
Result instead of raising.
"""

from abc import ABC, abstractmethod

from core.models import GameRecord, UserProfile
from core.result import Result


class RemoteStore(ABC):
    """Abstract base class for remote game stores."""

    @abstractmethod
    def create_game(self, record: GameRecord) -> Result[str]:
        """Create a game document.

        Args:
            record: Completed game (its remote_id is ignored)

        Returns:
            Result carrying the remote id assigned to the new document
        """
        pass

    @abstractmethod
    def list_user_games(self, user_id: str) -> Result[list[GameRecord]]:
        """Get every game of a user, most recent first, with remote ids set."""
        pass

    @abstractmethod
    def get_user(self, user_id: str) -> Result[UserProfile | None]:
        """Get a user profile (None when the user has no profile yet)."""
        pass

    @abstractmethod
    def create_user(self, profile: UserProfile) -> Result[None]:
        """Create a user profile."""
        pass

    @abstractmethod
    def update_user_stats(self, user_id: str, total_games: int, total_wins: int) -> Result[None]:
        """Overwrite a user's aggregate stats."""
        pass

    @abstractmethod
    def has_daily_game(self, user_id: str, start_ms: int, end_ms: int) -> Result[bool]:
        """Check for a DAILY game played in [start_ms, end_ms)."""
        pass


class OfflineRemoteStore(RemoteStore):
    """Remote store used while remote sync is disabled.

    Every call fails, so the coordinator behaves exactly as it does when
    the real remote store is unreachable.
    """

    def __init__(self, reason: str = "Remote sync is disabled"):
        self.reason = reason

    def create_game(self, record: GameRecord) -> Result[str]:
        return Result.fail(self.reason)

    def list_user_games(self, user_id: str) -> Result[list[GameRecord]]:
        return Result.fail(self.reason)

    def get_user(self, user_id: str) -> Result[UserProfile | None]:
        return Result.fail(self.reason)

    def create_user(self, profile: UserProfile) -> Result[None]:
        return Result.fail(self.reason)

    def update_user_stats(self, user_id: str, total_games: int, total_wins: int) -> Result[None]:
        return Result.fail(self.reason)

    def has_daily_game(self, user_id: str, start_ms: int, end_ms: int) -> Result[bool]:
        return Result.fail(self.reason)

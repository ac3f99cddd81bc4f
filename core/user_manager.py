"""User identity management.

Stands in for the account system: the current user is a stable UUID kept
in the settings table, optionally registered with the remote store so it
gets a stats-bearing profile there.
"""

import logging
import time
import uuid
from dataclasses import dataclass

from core.models import UserProfile
from core.remote_store import RemoteStore
from core.result import Result
from utils.config import Config

log = logging.getLogger("wordlesync.user_manager")


@dataclass
class User:
    """User identity information."""

    user_id: str  # UUID as string
    display_name: str | None = None
    email: str | None = None
    created_at: int | None = None  # Milliseconds since epoch

    def to_profile(self) -> UserProfile:
        return UserProfile(
            user_id=self.user_id,
            email=self.email,
            display_name=self.display_name,
            created_at=self.created_at or 0,
        )


class UserManager:
    """Creates, remembers and forgets the signed-in user."""

    def __init__(self, config: Config):
        """Initialize user manager.

        Args:
            config: Config instance holding the identity keys
        """
        self.config = config
        self._cached_user: User | None = None

    def get_current_user(self) -> User | None:
        """Get the signed-in user, or None if nobody is signed in."""
        if self._cached_user:
            return self._cached_user

        user_id = self.config.get("current_user_id", "")
        if not user_id:
            return None

        display_name = self.config.get("current_user_display_name", None)
        email = self.config.get("current_user_email", None)
        self._cached_user = User(
            user_id=str(user_id),
            display_name=str(display_name) if display_name is not None else None,
            email=str(email) if email is not None else None,
            created_at=self.config.get_int("current_user_created_at", 0) or None,
        )
        return self._cached_user

    def create_user(self, display_name: str | None = None, email: str | None = None) -> User:
        """Create a new identity and make it the current user."""
        user = User(
            user_id=str(uuid.uuid4()),
            display_name=display_name,
            email=email,
            created_at=int(time.time() * 1000),
        )
        self._remember(user)
        log.info(f"Created user {user.user_id}")
        return user

    def sign_in(
        self, user_id: str, display_name: str | None = None, email: str | None = None
    ) -> User:
        """Adopt an existing identity, e.g. one created on another device.

        Args:
            user_id: Identity to reuse
            display_name: Display name (kept from the current user if omitted)
            email: Email address (kept from the current user if omitted)

        Raises:
            ValueError: If user_id is blank
        """
        user_id = user_id.strip()
        if not user_id:
            raise ValueError("User id must not be empty")

        current = self.get_current_user()
        if current is not None and current.user_id == user_id:
            display_name = display_name or current.display_name
            email = email or current.email
            created_at = current.created_at
        else:
            created_at = None

        user = User(user_id=user_id, display_name=display_name, email=email, created_at=created_at)
        self._remember(user)
        log.info(f"Signed in as existing user {user_id}")
        return user

    def _remember(self, user: User) -> None:
        values = {
            "current_user_id": user.user_id,
            "current_user_display_name": user.display_name,
            "current_user_email": user.email,
            "current_user_created_at": user.created_at,
        }
        for key, value in values.items():
            if value:
                self.config.set(key, value)
            else:
                self.config.delete(key)
        self._cached_user = user

    def sign_out(self) -> None:
        """Forget the current user (their cached games stay on disk)."""
        for key in (
            "current_user_id",
            "current_user_display_name",
            "current_user_email",
            "current_user_created_at",
        ):
            self.config.delete(key)
        self._cached_user = None
        log.info("Signed out")

    def register_remote(self, remote: RemoteStore) -> Result[None]:
        """Create the current user's profile in the remote store if it has none."""
        user = self.get_current_user()
        if user is None:
            return Result.fail("No user signed in")

        existing = remote.get_user(user.user_id)
        if not existing.success:
            return Result.fail(existing.error)
        if existing.value is not None:
            log.debug(f"Remote profile for {user.user_id} already exists")
            return Result.ok(None)
        return remote.create_user(user.to_profile())

"""Shared test fixtures for WordleSync tests."""

import tempfile
import uuid
from pathlib import Path

import pytest

from core.models import GameMode, GameRecord, UserProfile
from core.remote_store import RemoteStore
from core.result import Result
from core.sqlite_adapter import SQLiteAdapter


class FakeRemoteStore(RemoteStore):
    """In-memory remote store.

    Set ``failing`` to make every call fail, or add method names to
    ``failing_calls`` to fail only those.
    """

    def __init__(self):
        self.games: list[GameRecord] = []
        self.users: dict[str, UserProfile] = {}
        self.failing = False
        self.failing_calls: set[str] = set()
        self.calls: list[str] = []

    def _fails(self, name: str) -> bool:
        self.calls.append(name)
        return self.failing or name in self.failing_calls

    def create_game(self, record):
        if self._fails("create_game"):
            return Result.fail("network down")
        remote_id = uuid.uuid4().hex
        self.games.append(record.model_copy(update={"remote_id": remote_id, "local_id": None}))
        return Result.ok(remote_id)

    def list_user_games(self, user_id):
        if self._fails("list_user_games"):
            return Result.fail("network down")
        games = [g for g in self.games if g.user_id == user_id]
        return Result.ok(sorted(games, key=lambda g: g.played_at, reverse=True))

    def get_user(self, user_id):
        if self._fails("get_user"):
            return Result.fail("network down")
        return Result.ok(self.users.get(user_id))

    def create_user(self, profile):
        if self._fails("create_user"):
            return Result.fail("network down")
        self.users[profile.user_id] = profile
        return Result.ok()

    def update_user_stats(self, user_id, total_games, total_wins):
        if self._fails("update_user_stats"):
            return Result.fail("network down")
        if user_id not in self.users:
            return Result.fail(f"User {user_id} not found")
        self.users[user_id] = self.users[user_id].model_copy(
            update={"total_games": total_games, "total_wins": total_wins}
        )
        return Result.ok()

    def has_daily_game(self, user_id, start_ms, end_ms):
        if self._fails("has_daily_game"):
            return Result.fail("network down")
        return Result.ok(
            any(
                g.user_id == user_id
                and g.mode is GameMode.DAILY
                and start_ms <= g.played_at < end_ms
                for g in self.games
            )
        )


def make_record(
    user_id: str = "user-1",
    mode: GameMode = GameMode.UNLIMITED,
    word: str = "CRANE",
    guesses_used: int = 3,
    played_at: int = 1_700_000_000_000,
    won: bool = True,
    remote_id: str = "",
) -> GameRecord:
    """Build a game record with sensible defaults."""
    return GameRecord(
        user_id=user_id,
        mode=mode,
        word=word,
        guesses_used=guesses_used,
        played_at=played_at,
        won=won,
        guess_sequence=["SLATE", "TRACE", word][-guesses_used:] if guesses_used <= 3 else [],
        remote_id=remote_id,
    )


@pytest.fixture
def temp_db_path():
    """Create a temporary database path and clean up afterwards."""
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "test.db"
        yield db_path


@pytest.fixture
def sqlite_adapter(temp_db_path):
    """Initialized SQLite adapter on a fresh database."""
    adapter = SQLiteAdapter(temp_db_path)
    adapter.initialize()
    yield adapter
    adapter.close()


@pytest.fixture
def fake_remote():
    """Empty in-memory remote store."""
    return FakeRemoteStore()


@pytest.fixture
def record_factory():
    """Factory for game records (see make_record)."""
    return make_record

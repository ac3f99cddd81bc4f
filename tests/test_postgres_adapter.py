"""Tests for PostgreSQLAdapter with the psycopg2 pool mocked out."""

import json
from unittest.mock import MagicMock, patch

import psycopg2
import pytest

from core.database_adapter import ConnectionError
from core.models import GameMode, UserProfile
from core.postgres_adapter import PostgreSQLAdapter, row_to_record
from core.postgres_migration_runner import PostgreSQLMigrationRunner

POOL_PATH = "core.postgres_adapter.pool.ThreadedConnectionPool"


def make_row(**overrides):
    row = {
        "id": "abc123",
        "user_id": "user-1",
        "mode": "DAILY",
        "word": "crane",
        "guesses_used": 2,
        "played_at": 1_700_000_000_000,
        "won": True,
        "guesses": json.dumps(["SLATE", "CRANE"]),
    }
    row.update(overrides)
    return row


@pytest.fixture
def adapter():
    return PostgreSQLAdapter(
        host="db.example.org",
        port=5432,
        database="wordlesync",
        user="wordle",
        password="secret",
    )


@pytest.fixture
def cursor():
    return MagicMock()


@pytest.fixture
def connection(cursor):
    conn = MagicMock()
    conn.cursor.return_value = cursor
    return conn


@pytest.fixture
def mock_pool(connection):
    with patch(POOL_PATH) as pool_cls:
        pool_cls.return_value.getconn.return_value = connection
        yield pool_cls


class TestConnectionFailures:
    """An unreachable server turns into failed Results, never exceptions."""

    @pytest.fixture
    def unreachable(self):
        with patch(POOL_PATH, side_effect=psycopg2.OperationalError("could not connect")):
            yield

    def test_create_game_fails(self, adapter, unreachable, record_factory):
        result = adapter.create_game(record_factory())
        assert not result.success
        assert "could not connect" in result.error

    def test_every_operation_fails(self, adapter, unreachable):
        assert not adapter.list_user_games("user-1").success
        assert not adapter.get_user("user-1").success
        assert not adapter.create_user(UserProfile(user_id="user-1")).success
        assert not adapter.update_user_stats("user-1", 1, 1).success
        assert not adapter.has_daily_game("user-1", 0, 10).success

    def test_initialize_raises_connection_error(self, adapter, unreachable):
        with pytest.raises(ConnectionError):
            adapter.initialize()


class TestGames:
    """Tests for the game operations."""

    def test_create_game_returns_new_id_and_commits(self, adapter, mock_pool, connection, cursor, record_factory):
        result = adapter.create_game(record_factory())

        assert result.success
        assert len(result.value) == 32
        params = cursor.execute.call_args[0][1]
        assert params[0] == result.value
        assert params[1:4] == ("user-1", "UNLIMITED", "CRANE")
        connection.commit.assert_called_once()
        mock_pool.return_value.putconn.assert_called_once_with(connection)

    def test_create_game_query_error_rolls_back(self, adapter, mock_pool, connection, cursor, record_factory):
        cursor.execute.side_effect = psycopg2.ProgrammingError("relation does not exist")

        result = adapter.create_game(record_factory())

        assert not result.success
        connection.rollback.assert_called_once()
        mock_pool.return_value.putconn.assert_called_once_with(connection)

    def test_list_user_games_sets_remote_ids(self, adapter, mock_pool, cursor):
        cursor.fetchall.return_value = [make_row(id="r-2"), make_row(id="r-1", won=False)]

        result = adapter.list_user_games("user-1")

        assert result.success
        assert [g.remote_id for g in result.value] == ["r-2", "r-1"]
        assert result.value[1].won is False

    def test_list_user_games_malformed_row_fails(self, adapter, mock_pool, cursor):
        cursor.fetchall.return_value = [make_row(word="toolong")]

        result = adapter.list_user_games("user-1")

        assert not result.success
        assert "Malformed" in result.error

    @pytest.mark.parametrize("exists", [True, False])
    def test_has_daily_game(self, adapter, mock_pool, cursor, exists):
        cursor.fetchone.return_value = (exists,)

        result = adapter.has_daily_game("user-1", 100, 200)

        assert result.success
        assert result.value is exists
        assert cursor.execute.call_args[0][1] == ("user-1", "DAILY", 100, 200)


class TestUsers:
    """Tests for the user operations."""

    def test_get_missing_user_is_none(self, adapter, mock_pool, cursor):
        cursor.fetchone.return_value = None

        result = adapter.get_user("user-1")

        assert result.success
        assert result.value is None

    def test_get_user(self, adapter, mock_pool, cursor):
        cursor.fetchone.return_value = {
            "user_id": "user-1",
            "email": None,
            "display_name": "alice",
            "created_at": 5,
            "total_games": 4,
            "total_wins": 3,
        }

        profile = adapter.get_user("user-1").value

        assert profile.display_name == "alice"
        assert (profile.total_games, profile.total_wins) == (4, 3)

    def test_update_stats_of_unknown_user_fails(self, adapter, mock_pool, cursor):
        cursor.rowcount = 0
        assert not adapter.update_user_stats("ghost", 1, 0).success

    def test_update_stats(self, adapter, mock_pool, cursor):
        cursor.rowcount = 1

        assert adapter.update_user_stats("user-1", 5, 2).success
        assert cursor.execute.call_args[0][1] == (5, 2, "user-1")

    def test_close_closes_pool(self, adapter, mock_pool, cursor):
        cursor.rowcount = 1
        adapter.update_user_stats("user-1", 1, 1)

        adapter.close()

        mock_pool.return_value.closeall.assert_called_once()


class TestRowToRecord:
    """Tests for row_to_record()."""

    def test_converts_row(self):
        record = row_to_record(make_row())

        assert record.remote_id == "abc123"
        assert record.mode is GameMode.DAILY
        assert record.word == "CRANE"
        assert record.guess_sequence == ["SLATE", "CRANE"]

    def test_missing_guesses_is_empty(self):
        assert row_to_record(make_row(guesses=None)).guess_sequence == []

    def test_unknown_mode_raises(self):
        with pytest.raises(ValueError):
            row_to_record(make_row(mode="WEEKLY"))


class TestMigrationUrl:
    """Tests for the SQLAlchemy URL handed to the migrations."""

    def test_url_carries_sslmode(self, adapter):
        url = adapter.sqlalchemy_url()

        assert url.drivername == "postgresql+psycopg2"
        assert url.host == "db.example.org"
        assert url.query["sslmode"] == "require"

    def test_percent_in_password_escaped_for_alembic(self):
        adapter = PostgreSQLAdapter(
            host="db.example.org", port=5432, database="wordlesync", user="wordle", password="50%off"
        )
        runner = PostgreSQLMigrationRunner(adapter.sqlalchemy_url())

        rendered = runner.config.get_main_option("sqlalchemy.url")

        assert "%" in rendered
        assert rendered.startswith("postgresql+psycopg2://wordle:")

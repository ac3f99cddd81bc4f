"""Initial schema migration.

Creates the games table on both backends. The remote PostgreSQL database
additionally gets the users table that carries the aggregate stats.

Revision ID: 001
Revises:
Create Date: 2025-03-02

"""

import logging

from alembic import op

# revision identifiers, used by Alembic.
revision = "001"
down_revision = None
branch_labels = None
depends_on = None

log = logging.getLogger("wordlesync.migrations")


def upgrade() -> None:
    """Create initial database schema.

    Detects database dialect and creates appropriate schema:
    - SQLite: local games cache keyed by an auto-increment id
    - PostgreSQL: users and games, games keyed by a generated text id
    """
    dialect_name = op.get_bind().dialect.name
    log.info(f"Creating initial schema for {dialect_name}")

    if dialect_name == "sqlite":
        _create_sqlite_schema()
    elif dialect_name == "postgresql":
        _create_postgresql_schema()
    else:
        raise ValueError(f"Unsupported dialect: {dialect_name}")


def downgrade() -> None:
    """Drop all tables."""
    dialect_name = op.get_bind().dialect.name

    op.drop_table("games")
    if dialect_name == "postgresql":
        op.drop_table("users")


def _create_sqlite_schema() -> None:
    """Create SQLite schema."""
    op.execute(
        """
        CREATE TABLE IF NOT EXISTS games (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id TEXT NOT NULL,
            mode TEXT NOT NULL,
            word TEXT NOT NULL,
            guesses_used INTEGER NOT NULL,
            played_at INTEGER NOT NULL,
            won INTEGER NOT NULL,
            guesses TEXT NOT NULL DEFAULT '[]'
        )
    """.strip()
    )

    op.execute(
        """
        CREATE INDEX IF NOT EXISTS idx_games_user_played_at
        ON games(user_id, played_at DESC)
    """.strip()
    )


def _create_postgresql_schema() -> None:
    """Create PostgreSQL schema."""
    op.execute(
        """
        CREATE TABLE IF NOT EXISTS users (
            user_id TEXT PRIMARY KEY,
            email TEXT,
            display_name TEXT,
            created_at BIGINT NOT NULL,
            total_games INTEGER NOT NULL DEFAULT 0,
            total_wins INTEGER NOT NULL DEFAULT 0
        )
    """.strip()
    )

    op.execute(
        """
        CREATE TABLE IF NOT EXISTS games (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            mode TEXT NOT NULL,
            word TEXT NOT NULL,
            guesses_used INTEGER NOT NULL,
            played_at BIGINT NOT NULL,
            won BOOLEAN NOT NULL,
            guesses TEXT NOT NULL DEFAULT '[]',
            created_at BIGINT NOT NULL
        )
    """.strip()
    )

    op.execute(
        """
        CREATE INDEX IF NOT EXISTS idx_games_user_played_at
        ON games(user_id, played_at DESC)
    """.strip()
    )

"""Link local games to their remote copies.

SQLite: adds games.remote_id (existing rows default to '' = not synced) and
a partial unique index so a remote game can only be cached once per user.
PostgreSQL: adds an index for the per-day DAILY game lookup.

Revision ID: 002
Revises: 001
Create Date: 2025-04-11

"""

import logging

from alembic import op

# revision identifiers, used by Alembic.
revision = "002"
down_revision = "001"
branch_labels = None
depends_on = None

log = logging.getLogger("wordlesync.migrations")


def upgrade() -> None:
    """Add remote id tracking."""
    dialect_name = op.get_bind().dialect.name
    log.info(f"Adding remote id tracking for {dialect_name}")

    if dialect_name == "sqlite":
        _upgrade_sqlite()
    elif dialect_name == "postgresql":
        _upgrade_postgresql()
    else:
        raise ValueError(f"Unsupported dialect: {dialect_name}")


def downgrade() -> None:
    """Remove remote id tracking."""
    dialect_name = op.get_bind().dialect.name

    if dialect_name == "sqlite":
        op.execute("DROP INDEX IF EXISTS idx_games_user_remote_id")
        with op.batch_alter_table("games") as batch_op:
            batch_op.drop_column("remote_id")
    elif dialect_name == "postgresql":
        op.execute("DROP INDEX IF EXISTS idx_games_user_mode_played_at")


def _upgrade_sqlite() -> None:
    """Add remote_id column, keeping every existing row."""
    op.execute("ALTER TABLE games ADD COLUMN remote_id TEXT NOT NULL DEFAULT ''")

    op.execute(
        """
        CREATE UNIQUE INDEX IF NOT EXISTS idx_games_user_remote_id
        ON games(user_id, remote_id)
        WHERE remote_id != ''
    """.strip()
    )


def _upgrade_postgresql() -> None:
    """Index DAILY lookups by user and time window."""
    op.execute(
        """
        CREATE INDEX IF NOT EXISTS idx_games_user_mode_played_at
        ON games(user_id, mode, played_at)
    """.strip()
    )

"""Core tables: users, quests, runs, routines, routine_logs.

Revision ID: 001_core_tables
Revises:
Create Date: 2026-10-12
"""

from collections.abc import Sequence

from alembic import op

revision: str = "001_core_tables"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # --- Users (progress counters; preferences arrive in 002) ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS users (
            id VARCHAR(64) PRIMARY KEY,
            email VARCHAR(320) UNIQUE,
            password_hash VARCHAR(256),
            total_xp INTEGER NOT NULL DEFAULT 0,
            level INTEGER NOT NULL DEFAULT 1,
            current_streak INTEGER NOT NULL DEFAULT 0,
            longest_streak INTEGER NOT NULL DEFAULT 0,
            last_active_local_date VARCHAR(10),
            timezone VARCHAR(64) NOT NULL DEFAULT 'Asia/Kolkata',
            avatar_tier INTEGER NOT NULL DEFAULT 0,
            created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP
        )
    """)

    # --- Quest catalog ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS quests (
            id VARCHAR(64) PRIMARY KEY,
            title TEXT NOT NULL,
            base_points INTEGER NOT NULL,
            category VARCHAR(64),
            cooldown_sec INTEGER NOT NULL DEFAULT 0,
            active BOOLEAN NOT NULL DEFAULT true
        )
    """)

    # --- Quest runs ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS runs (
            id VARCHAR(64) PRIMARY KEY,
            user_id VARCHAR(64) NOT NULL REFERENCES users(id),
            quest_id VARCHAR(64) NOT NULL REFERENCES quests(id),
            gained_xp INTEGER NOT NULL,
            streak_applied INTEGER NOT NULL,
            created_at TIMESTAMP WITH TIME ZONE NOT NULL,
            local_date VARCHAR(10) NOT NULL
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS runs_user_date_idx ON runs (user_id, local_date)")

    # --- Routines ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS routines (
            id VARCHAR(64) PRIMARY KEY,
            user_id VARCHAR(64) NOT NULL REFERENCES users(id),
            title TEXT NOT NULL,
            base_points INTEGER NOT NULL DEFAULT 6,
            daily_target INTEGER NOT NULL DEFAULT 1,
            active BOOLEAN NOT NULL DEFAULT true,
            created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP
        )
    """)

    # --- Routine logs (no streak snapshot) ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS routine_logs (
            id VARCHAR(64) PRIMARY KEY,
            routine_id VARCHAR(64) NOT NULL REFERENCES routines(id),
            user_id VARCHAR(64) NOT NULL REFERENCES users(id),
            gained_xp INTEGER NOT NULL,
            created_at TIMESTAMP WITH TIME ZONE NOT NULL,
            local_date VARCHAR(10) NOT NULL
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS routine_logs_user_date_idx ON routine_logs (user_id, local_date)")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS routine_logs")
    op.execute("DROP TABLE IF EXISTS routines")
    op.execute("DROP TABLE IF EXISTS runs")
    op.execute("DROP TABLE IF EXISTS quests")
    op.execute("DROP TABLE IF EXISTS users")

"""User preference columns.

Adds theme_color, daily_target, goals, baseline_mood and onboarding_done to
users. Columns that already exist (schema created by create_all) are skipped.

Revision ID: 002_user_preferences
Revises: 001_core_tables
Create Date: 2026-10-14
"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

revision: str = "002_user_preferences"
down_revision: str | None = "001_core_tables"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

PREFERENCE_COLUMNS = {
    "theme_color": "VARCHAR(16) NOT NULL DEFAULT '#6C7EFF'",
    "daily_target": "INTEGER NOT NULL DEFAULT 1",
    "goals": "JSON NOT NULL DEFAULT '[]'",
    "baseline_mood": "VARCHAR(32) NOT NULL DEFAULT 'neutral'",
    "onboarding_done": "BOOLEAN NOT NULL DEFAULT false",
}


def _existing_columns() -> set[str]:
    return {col["name"] for col in sa.inspect(op.get_bind()).get_columns("users")}


def upgrade() -> None:
    existing = _existing_columns()
    for name, ddl in PREFERENCE_COLUMNS.items():
        if name not in existing:
            op.execute(f"ALTER TABLE users ADD COLUMN {name} {ddl}")


def downgrade() -> None:
    existing = _existing_columns()
    for name in reversed(PREFERENCE_COLUMNS):
        if name in existing:
            op.drop_column("users", name)

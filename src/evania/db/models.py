"""ORM models for users, the quest catalog, routines and completion history.

The same tables are created by the Alembic migrations in ``alembic/versions``.
History rows (runs, routine_logs) are append-only.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from evania.db.base import Base


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class User(Base):
    """Per-identity record: progress counters plus preferences."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True, unique=True)
    password_hash: Mapped[str | None] = mapped_column(String(256), nullable=True)

    # Progress (written by the completion processor only)
    total_xp: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    level: Mapped[int] = mapped_column(Integer, nullable=False, default=1, server_default="1")
    current_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    longest_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    last_active_local_date: Mapped[str | None] = mapped_column(String(10), nullable=True)
    timezone: Mapped[str] = mapped_column(String(64), nullable=False, default="Asia/Kolkata")
    avatar_tier: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")

    # Preferences
    theme_color: Mapped[str] = mapped_column(String(16), nullable=False, default="#6C7EFF")
    daily_target: Mapped[int] = mapped_column(Integer, nullable=False, default=1, server_default="1")
    goals: Mapped[list[Any]] = mapped_column(JSON, nullable=False, default=list)
    baseline_mood: Mapped[str] = mapped_column(String(32), nullable=False, default="neutral")
    onboarding_done: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utc_now, server_default=func.now()
    )


# ---------------------------------------------------------------------------
# Quests (catalog)
# ---------------------------------------------------------------------------


class Quest(Base):
    """Catalog task, seeded once and read-only at runtime."""

    __tablename__ = "quests"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    base_points: Mapped[int] = mapped_column(Integer, nullable=False)
    category: Mapped[str | None] = mapped_column(String(64), nullable=True)
    cooldown_sec: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class Run(Base):
    """One quest completion."""

    __tablename__ = "runs"
    __table_args__ = (Index("runs_user_date_idx", "user_id", "local_date"),)

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), ForeignKey("users.id"), nullable=False)
    quest_id: Mapped[str] = mapped_column(String(64), ForeignKey("quests.id"), nullable=False)
    gained_xp: Mapped[int] = mapped_column(Integer, nullable=False)
    streak_applied: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    local_date: Mapped[str] = mapped_column(String(10), nullable=False)


# ---------------------------------------------------------------------------
# Routines
# ---------------------------------------------------------------------------


class Routine(Base):
    """User-owned repeatable habit. Never hard-deleted."""

    __tablename__ = "routines"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), ForeignKey("users.id"), nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    base_points: Mapped[int] = mapped_column(Integer, nullable=False, default=6, server_default="6")
    daily_target: Mapped[int] = mapped_column(Integer, nullable=False, default=1, server_default="1")
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utc_now, server_default=func.now()
    )


class RoutineLog(Base):
    """One routine completion. Unlike Run it carries no streak snapshot."""

    __tablename__ = "routine_logs"
    __table_args__ = (Index("routine_logs_user_date_idx", "user_id", "local_date"),)

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    routine_id: Mapped[str] = mapped_column(String(64), ForeignKey("routines.id"), nullable=False)
    user_id: Mapped[str] = mapped_column(String(64), ForeignKey("users.id"), nullable=False)
    gained_xp: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    local_date: Mapped[str] = mapped_column(String(10), nullable=False)

"""User state store: lazy creation, insert-or-merge upsert and preferences."""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from evania.config import get_settings
from evania.db.models import User

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

PREFERENCE_FIELDS = ("theme_color", "daily_target", "goals", "baseline_mood", "onboarding_done", "timezone")


@dataclass(frozen=True)
class UserPreferences:
    theme_color: str = "#6C7EFF"
    daily_target: int = 1
    goals: list[str] = field(default_factory=list)
    baseline_mood: str = "neutral"
    onboarding_done: bool = False
    timezone: str = "Asia/Kolkata"

    @classmethod
    def from_user(cls, user: User) -> UserPreferences:
        return cls(**{name: getattr(user, name) for name in PREFERENCE_FIELDS})


def merge_preferences(existing: UserPreferences, partial: Mapping[str, Any]) -> UserPreferences:
    """Overlay the keys present in ``partial`` on ``existing``.

    Presence decides, not truthiness: ``{"daily_target": 0}`` would overwrite
    while a missing key never does. Unknown keys are rejected.
    """
    unknown = set(partial) - set(PREFERENCE_FIELDS)
    if unknown:
        msg = f"Unknown preference fields: {sorted(unknown)}"
        raise ValueError(msg)
    changes = dict(partial)
    if "goals" in changes:
        changes["goals"] = list(changes["goals"])
    return dataclasses.replace(existing, **changes)


async def get_user(
    db: AsyncSession,
    user_id: str,
    *,
    refresh: bool = False,
    for_update: bool = False,
) -> User | None:
    """Load a user.

    ``refresh`` overwrites an already-loaded instance with the stored row;
    ``for_update`` also row-locks it on backends that support SELECT ... FOR UPDATE.
    """
    stmt = select(User).where(User.id == user_id)
    if for_update:
        stmt = stmt.with_for_update()
    if refresh or for_update:
        stmt = stmt.execution_options(populate_existing=True)
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == email.lower().strip()))
    return result.scalar_one_or_none()


def _new_user(user_id: str) -> User:
    return User(
        id=user_id,
        total_xp=0,
        level=1,
        current_streak=0,
        longest_streak=0,
        last_active_local_date=None,
        timezone=get_settings().default_timezone,
        avatar_tier=0,
        theme_color="#6C7EFF",
        daily_target=1,
        goals=[],
        baseline_mood="neutral",
        onboarding_done=False,
    )


async def get_or_create_user(db: AsyncSession, user_id: str) -> tuple[User, bool]:
    """Return the user for an identity, creating it on first contact.

    Commits when a row is created. A concurrent first request for the same
    identity loses the insert race and reads the winner's row instead.
    """
    user = await get_user(db, user_id)
    if user is not None:
        return user, False

    user = _new_user(user_id)
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        existing = await get_user(db, user_id)
        if existing is None:
            raise
        return existing, False

    logger.info("user_created", user_id=user_id)
    return user, True


async def upsert_user(db: AsyncSession, user_id: str, changes: Mapping[str, Any]) -> User:
    """Insert-or-merge: create with defaults, or apply only the keys given.

    Columns not named in ``changes`` keep their stored values. Flushes but
    does not commit.
    """
    user = await get_user(db, user_id)
    if user is None:
        user = _new_user(user_id)
        db.add(user)
    for name, value in changes.items():
        if name == "id" or name not in User.__table__.columns:
            msg = f"Cannot upsert unknown user field {name!r}"
            raise ValueError(msg)
        setattr(user, name, value)
    await db.flush()
    return user


async def update_preferences(db: AsyncSession, user: User, partial: Mapping[str, Any]) -> User:
    """Merge a partial preference update into the stored user and commit."""
    merged = merge_preferences(UserPreferences.from_user(user), partial)
    for name in PREFERENCE_FIELDS:
        setattr(user, name, getattr(merged, name))
    await db.commit()
    logger.info("preferences_updated", user_id=user.id, fields=sorted(partial))
    return user

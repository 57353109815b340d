"""Routine store: user-owned habits with a per-day completion cap."""

from __future__ import annotations

import uuid
from datetime import date

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from evania.db.models import Routine, RoutineLog

logger = structlog.get_logger()


async def create_routine(
    db: AsyncSession,
    owner_id: str,
    title: str,
    base_points: int = 6,
    daily_target: int = 1,
) -> Routine:
    """Create an active routine and commit."""
    routine = Routine(
        id=str(uuid.uuid4()),
        user_id=owner_id,
        title=title,
        base_points=base_points,
        daily_target=daily_target,
        active=True,
    )
    db.add(routine)
    await db.commit()
    logger.info("routine_created", user_id=owner_id, routine_id=routine.id, daily_target=daily_target)
    return routine


async def get_routine(db: AsyncSession, routine_id: str, owner_id: str) -> Routine | None:
    """Active routine owned by ``owner_id``; None for anyone else's or inactive ones."""
    result = await db.execute(
        select(Routine).where(
            Routine.id == routine_id,
            Routine.user_id == owner_id,
            Routine.active.is_(True),
        )
    )
    return result.scalar_one_or_none()


async def list_routines(db: AsyncSession, owner_id: str, today: date) -> list[tuple[Routine, int]]:
    """Active routines, newest first, each with its completion count for ``today``."""
    count_today = (
        select(func.count(RoutineLog.id))
        .where(
            RoutineLog.routine_id == Routine.id,
            RoutineLog.user_id == Routine.user_id,
            RoutineLog.local_date == today.isoformat(),
        )
        .correlate(Routine)
        .scalar_subquery()
    )
    result = await db.execute(
        select(Routine, count_today)
        .where(Routine.user_id == owner_id, Routine.active.is_(True))
        .order_by(Routine.created_at.desc(), Routine.id)
    )
    return [(routine, count or 0) for routine, count in result.all()]


async def active_daily_target_total(db: AsyncSession, owner_id: str) -> int:
    """Sum of daily targets across the user's active routines (0 if none)."""
    result = await db.execute(
        select(func.coalesce(func.sum(Routine.daily_target), 0)).where(
            Routine.user_id == owner_id,
            Routine.active.is_(True),
        )
    )
    return int(result.scalar_one())


async def deactivate_routine(db: AsyncSession, routine_id: str, owner_id: str) -> bool:
    """Soft-delete. Returns False when there is no such active routine."""
    routine = await get_routine(db, routine_id, owner_id)
    if routine is None:
        return False
    routine.active = False
    await db.commit()
    logger.info("routine_deactivated", user_id=owner_id, routine_id=routine_id)
    return True

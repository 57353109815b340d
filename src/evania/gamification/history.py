"""Completion history store. Runs and routine logs are append-only."""

from __future__ import annotations

import uuid
from datetime import date, datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from evania.db.models import RoutineLog, Run


def insert_run(
    db: AsyncSession,
    user_id: str,
    quest_id: str,
    gained_xp: int,
    streak_applied: int,
    created_at: datetime,
    local_date: date,
) -> Run:
    """Stage a Run in the session; the caller commits it with the user update."""
    run = Run(
        id=str(uuid.uuid4()),
        user_id=user_id,
        quest_id=quest_id,
        gained_xp=gained_xp,
        streak_applied=streak_applied,
        created_at=created_at,
        local_date=local_date.isoformat(),
    )
    db.add(run)
    return run


async def most_recent_run(db: AsyncSession, user_id: str, quest_id: str) -> Run | None:
    result = await db.execute(
        select(Run)
        .where(Run.user_id == user_id, Run.quest_id == quest_id)
        .order_by(Run.created_at.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def list_runs(db: AsyncSession, user_id: str, limit: int | None = None) -> list[Run]:
    stmt = select(Run).where(Run.user_id == user_id).order_by(Run.created_at.desc())
    if limit is not None:
        stmt = stmt.limit(limit)
    result = await db.execute(stmt)
    return list(result.scalars())


def insert_routine_log(
    db: AsyncSession,
    routine_id: str,
    user_id: str,
    gained_xp: int,
    created_at: datetime,
    local_date: date,
) -> RoutineLog:
    """Stage a RoutineLog in the session; the caller commits it with the user update."""
    log = RoutineLog(
        id=str(uuid.uuid4()),
        routine_id=routine_id,
        user_id=user_id,
        gained_xp=gained_xp,
        created_at=created_at,
        local_date=local_date.isoformat(),
    )
    db.add(log)
    return log


async def count_routine_logs_today(db: AsyncSession, routine_id: str, user_id: str, day: date) -> int:
    result = await db.execute(
        select(func.count())
        .select_from(RoutineLog)
        .where(
            RoutineLog.routine_id == routine_id,
            RoutineLog.user_id == user_id,
            RoutineLog.local_date == day.isoformat(),
        )
    )
    return int(result.scalar_one())

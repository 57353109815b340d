"""Completion processor: gate, award and persist one quest run or routine log.

Each completion runs under the user's lock from the first read of user state
to the commit, so concurrent completions for one user cannot lose updates.
The user row and the history row are committed together or not at all.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from evania.database import begin_write
from evania.db.models import RoutineLog, Run, User
from evania.errors import (
    InvalidInputError,
    LimitReachedError,
    NotFoundError,
    RateLimitedError,
    StorageUnavailableError,
)
from evania.gamification import history
from evania.gamification.catalog import get_quest
from evania.gamification.locks import UserLockRegistry
from evania.gamification.progress import ProgressState
from evania.gamification.routines import get_routine
from evania.gamification.xp_service import CompletionReward, compute_reward
from evania.time_utils import as_utc, local_date, utc_now
from evania.users.service import get_or_create_user, get_user

logger = structlog.get_logger()


@dataclass(frozen=True)
class CompletionResult:
    """A persisted completion: the history row, the fresh user row and the award."""

    record: Run | RoutineLog
    user: User
    reward: CompletionReward


async def _end_open_transaction(db: AsyncSession) -> None:
    # Reads must not come from a snapshot taken before the lock was acquired.
    if db.in_transaction():
        await db.commit()


async def _load_user_for_update(db: AsyncSession, user_id: str) -> User:
    await get_or_create_user(db, user_id)
    await begin_write(db)
    user = await get_user(db, user_id, for_update=True)
    if user is None:
        msg = f"User {user_id} disappeared during completion"
        raise StorageUnavailableError(msg)
    return user


async def _persist(db: AsyncSession, user: User, reward: CompletionReward, record: Run | RoutineLog) -> None:
    """Commit the user update and its history row as one unit."""
    try:
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error(
            "completion_persist_failed",
            user_id=user.id,
            record_type=type(record).__name__,
            gained_xp=reward.gained_xp,
            exc_info=exc,
        )
        msg = "Could not record the completion; nothing was applied. Try again."
        raise StorageUnavailableError(msg) from exc
    await db.refresh(user)


def cooldown_remaining(cooldown_sec: int, last_run_at: datetime, now: datetime) -> int:
    """Whole seconds left on a cooldown (ceiling), 0 when it has expired."""
    if cooldown_sec <= 0:
        return 0
    elapsed = (as_utc(now) - as_utc(last_run_at)).total_seconds()
    if elapsed >= cooldown_sec:
        return 0
    return min(cooldown_sec, math.ceil(cooldown_sec - elapsed))


async def complete_quest(
    db: AsyncSession,
    locks: UserLockRegistry,
    user_id: str,
    quest_id: str | None,
    now: datetime | None = None,
) -> CompletionResult:
    """Complete a catalog quest for a user.

    Raises:
        InvalidInputError: quest id missing or not an active catalog quest.
        RateLimitedError: the quest's cooldown has not elapsed.
        StorageUnavailableError: the atomic write failed (nothing applied).
    """
    if not quest_id:
        msg = "quest_id is required"
        raise InvalidInputError(msg)

    quest = await get_quest(db, quest_id)
    if quest is None:
        logger.info("completion_rejected", user_id=user_id, quest_id=quest_id, reason="invalid_quest")
        msg = f"Invalid quest_id: {quest_id}"
        raise InvalidInputError(msg)

    await _end_open_transaction(db)
    async with locks.hold(user_id):
        now = as_utc(now) if now else utc_now()
        user = await _load_user_for_update(db, user_id)
        today = local_date(now, user.timezone)

        if quest.cooldown_sec > 0:
            last_run = await history.most_recent_run(db, user_id, quest.id)
            if last_run is not None:
                wait = cooldown_remaining(quest.cooldown_sec, last_run.created_at, now)
                if wait > 0:
                    await db.rollback()
                    logger.info(
                        "completion_rejected",
                        user_id=user_id,
                        quest_id=quest.id,
                        reason="cooldown",
                        retry_after_seconds=wait,
                    )
                    msg = f"Cooldown active for quest {quest.id}"
                    raise RateLimitedError(msg, retry_after_seconds=wait)

        reward = compute_reward(ProgressState.from_user(user), quest.base_points, today)
        reward.after.apply_to(user)
        run = history.insert_run(
            db,
            user_id=user_id,
            quest_id=quest.id,
            gained_xp=reward.gained_xp,
            streak_applied=reward.after.current_streak,
            created_at=now,
            local_date=today,
        )
        await _persist(db, user, reward, run)

    logger.info(
        "quest_completed",
        user_id=user_id,
        quest_id=quest.id,
        gained_xp=reward.gained_xp,
        multiplier=reward.multiplier,
        streak=reward.after.current_streak,
        level=reward.after.level,
        leveled_up=reward.leveled_up,
    )
    return CompletionResult(record=run, user=user, reward=reward)


async def log_routine_completion(
    db: AsyncSession,
    locks: UserLockRegistry,
    user_id: str,
    routine_id: str | None,
    now: datetime | None = None,
) -> CompletionResult:
    """Log one completion of the caller's routine.

    Raises:
        InvalidInputError: routine id missing.
        NotFoundError: no active routine with that id owned by the user.
        LimitReachedError: the routine's daily target is already met today.
        StorageUnavailableError: the atomic write failed (nothing applied).
    """
    if not routine_id:
        msg = "routine_id is required"
        raise InvalidInputError(msg)

    await _end_open_transaction(db)
    async with locks.hold(user_id):
        now = as_utc(now) if now else utc_now()
        user = await _load_user_for_update(db, user_id)

        routine = await get_routine(db, routine_id, user_id)
        if routine is None:
            await db.rollback()
            logger.info("completion_rejected", user_id=user_id, routine_id=routine_id, reason="not_found")
            msg = "Routine not found"
            raise NotFoundError(msg)

        today = local_date(now, user.timezone)
        done_today = await history.count_routine_logs_today(db, routine.id, user_id, today)
        if done_today >= routine.daily_target:
            await db.rollback()
            logger.info(
                "completion_rejected",
                user_id=user_id,
                routine_id=routine.id,
                reason="daily_target",
                daily_target=routine.daily_target,
            )
            msg = "Daily target already reached for this routine"
            raise LimitReachedError(msg, daily_target=routine.daily_target, local_date=today.isoformat())

        reward = compute_reward(ProgressState.from_user(user), routine.base_points, today)
        reward.after.apply_to(user)
        log = history.insert_routine_log(
            db,
            routine_id=routine.id,
            user_id=user_id,
            gained_xp=reward.gained_xp,
            created_at=now,
            local_date=today,
        )
        await _persist(db, user, reward, log)

    logger.info(
        "routine_logged",
        user_id=user_id,
        routine_id=routine_id,
        gained_xp=reward.gained_xp,
        multiplier=reward.multiplier,
        streak=reward.after.current_streak,
        level=reward.after.level,
        count_today=done_today + 1,
    )
    return CompletionResult(record=log, user=user, reward=reward)

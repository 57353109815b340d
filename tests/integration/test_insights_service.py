"""Weekly insights over real history rows."""

from __future__ import annotations

from datetime import date, datetime, timezone

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from evania.errors import NotFoundError
from evania.gamification.completion_service import complete_quest, log_routine_completion
from evania.gamification.locks import UserLockRegistry
from evania.gamification.routines import create_routine, deactivate_routine
from evania.insights import service as insights_service
from evania.insights.service import weekly_insights
from evania.time_utils import local_date, utc_now
from evania.users.service import get_or_create_user


def _at(day: int, hour: int = 6) -> datetime:
    return datetime(2026, 3, day, hour, 0, 0, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_five_days_met_is_green(db_session: AsyncSession, locks: UserLockRegistry):
    await get_or_create_user(db_session, "u1")
    routine = await create_routine(db_session, "u1", "Stretch", daily_target=1)
    for day in (9, 10, 11, 12, 13):
        await log_routine_completion(db_session, locks, "u1", routine.id, now=_at(day))
    await complete_quest(db_session, locks, "u1", "q1", now=_at(13, hour=7))

    report = await weekly_insights(db_session, "u1", today=date(2026, 3, 15))

    assert report["window"] == {"start": "2026-03-09", "end": "2026-03-15"}
    assert report["completion"] == {"daily_target_total": 1, "days_met_target": 5, "completion_rate": 71}
    assert report["risk_band"] == "Green"
    assert report["avatar_mood"] == "happy"
    assert report["streak"] == {"current": 5, "longest": 5}
    # XP in the report comes from quest runs: 10 * 1.25 on a five-day streak
    assert report["totals"] == {"xp": 13, "quests": 1, "routine_logs": 5}
    day_13 = next(row for row in report["series"] if row["date"] == "2026-03-13")
    assert day_13 == {"date": "2026-03-13", "quests": 1, "routine_logs": 1, "xp": 13}


@pytest.mark.asyncio
async def test_deactivated_routines_drop_out_of_target(db_session: AsyncSession, locks: UserLockRegistry):
    await get_or_create_user(db_session, "u1")
    routine = await create_routine(db_session, "u1", "Stretch")
    await log_routine_completion(db_session, locks, "u1", routine.id, now=_at(14))
    await deactivate_routine(db_session, routine.id, "u1")

    report = await weekly_insights(db_session, "u1", today=date(2026, 3, 15))
    assert report["completion"]["daily_target_total"] == 0
    assert report["completion"]["completion_rate"] == 0
    assert report["totals"]["routine_logs"] == 1
    assert report["risk_band"] == "Red"


@pytest.mark.asyncio
async def test_quiet_week_is_red(db_session: AsyncSession):
    await get_or_create_user(db_session, "u1")
    report = await weekly_insights(db_session, "u1", today=date(2026, 3, 15))
    assert report["risk_band"] == "Red"
    assert report["avatar_mood"] == "tired"
    assert all(row["quests"] == 0 and row["routine_logs"] == 0 for row in report["series"])


@pytest.mark.asyncio
async def test_defaults_to_users_local_today(db_session: AsyncSession):
    await get_or_create_user(db_session, "u1")
    report = await weekly_insights(db_session, "u1")
    assert report["window"]["end"] == local_date(utc_now(), "Asia/Kolkata").isoformat()


@pytest.mark.asyncio
async def test_unknown_user_is_not_found(db_session: AsyncSession):
    with pytest.raises(NotFoundError):
        await weekly_insights(db_session, "ghost", today=date(2026, 3, 15))


@pytest.mark.asyncio
async def test_completion_committed_mid_report_is_all_or_nothing(
    db_session: AsyncSession,
    session_factory: async_sessionmaker[AsyncSession],
    locks: UserLockRegistry,
    monkeypatch: pytest.MonkeyPatch,
):
    await get_or_create_user(db_session, "u1")
    routine = await create_routine(db_session, "u1", "Stretch")
    read_log_counts = insights_service._routine_log_counts

    async def log_before_counting(db, user_id, start, end):
        # Another request completes the routine after the user row was read.
        async with session_factory() as other:
            await log_routine_completion(other, locks, "u1", routine.id, now=_at(15))
        return await read_log_counts(db, user_id, start, end)

    monkeypatch.setattr(insights_service, "_routine_log_counts", log_before_counting)
    report = await weekly_insights(db_session, "u1", today=date(2026, 3, 15))

    assert report["streak"] == {"current": 0, "longest": 0}
    assert report["totals"]["routine_logs"] == 0
    assert report["series"][-1]["routine_logs"] == 0
    assert report["completion"]["days_met_target"] == 0

    monkeypatch.setattr(insights_service, "_routine_log_counts", read_log_counts)
    report = await weekly_insights(db_session, "u1", today=date(2026, 3, 15))

    assert report["streak"] == {"current": 1, "longest": 1}
    assert report["totals"]["routine_logs"] == 1
    assert report["series"][-1] == {"date": "2026-03-15", "quests": 0, "routine_logs": 1, "xp": 0}
    assert report["completion"]["days_met_target"] == 1

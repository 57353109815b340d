"""Weekly insight aggregator.

Builds a seven-day report (the local date and the six before it) from quest
runs and routine logs. The report is read-only and takes no user lock.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from evania.database import begin_snapshot
from evania.db.models import RoutineLog, Run
from evania.errors import NotFoundError
from evania.gamification.routines import active_daily_target_total
from evania.time_utils import date_window, local_date, utc_now
from evania.users.service import get_user

logger = structlog.get_logger()

WINDOW_DAYS = 7

GREEN_MIN_RATE = 70
AMBER_MIN_RATE = 40

BAND_MOODS = {
    "Green": "happy",
    "Amber": "thoughtful",
    "Red": "tired",
}

BAND_MESSAGES = {
    "Green": "Great balance this week. Keep the momentum!",
    "Amber": "You're on your way. A couple more logs to hit green!",
    "Red": "Be gentle with yourself. Start small today and build up.",
}


def classify_risk_band(completion_rate: int) -> str:
    if completion_rate >= GREEN_MIN_RATE:
        return "Green"
    if completion_rate >= AMBER_MIN_RATE:
        return "Amber"
    return "Red"


def completion_rate(days_met: int, daily_target_total: int, window_days: int = WINDOW_DAYS) -> int:
    """Percentage of window days that met the target, rounded half up. 0 without routines."""
    if daily_target_total <= 0:
        return 0
    rate = Decimal(days_met) * 100 / Decimal(window_days)
    return int(rate.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def build_weekly_report(
    today: date,
    run_stats: Mapping[str, tuple[int, int]],
    routine_log_counts: Mapping[str, int],
    daily_target_total: int,
    current_streak: int,
    longest_streak: int,
    avatar_tier: int,
) -> dict[str, Any]:
    """Assemble the weekly report from per-day aggregates.

    Args:
        today: Last day of the window (user-local).
        run_stats: ``{"YYYY-MM-DD": (quest_count, xp_sum)}``; days outside
            the window are ignored, missing days count as zero.
        routine_log_counts: ``{"YYYY-MM-DD": routine_log_count}``.
        daily_target_total: Sum of daily targets over active routines.
        current_streak: Streak snapshot to report.
        longest_streak: Longest streak snapshot to report.
        avatar_tier: Avatar tier snapshot to report.
    """
    days = date_window(today, WINDOW_DAYS)
    series = []
    days_met = 0
    for day in days:
        key = day.isoformat()
        quests, xp = run_stats.get(key, (0, 0))
        logs = routine_log_counts.get(key, 0)
        if daily_target_total > 0 and logs >= daily_target_total:
            days_met += 1
        series.append({"date": key, "quests": quests, "routine_logs": logs, "xp": xp})

    rate = completion_rate(days_met, daily_target_total)
    band = classify_risk_band(rate)
    return {
        "window": {"start": days[0].isoformat(), "end": days[-1].isoformat()},
        "series": series,
        "totals": {
            "xp": sum(row["xp"] for row in series),
            "quests": sum(row["quests"] for row in series),
            "routine_logs": sum(row["routine_logs"] for row in series),
        },
        "completion": {
            "daily_target_total": daily_target_total,
            "days_met_target": days_met,
            "completion_rate": rate,
        },
        "streak": {"current": current_streak, "longest": longest_streak},
        "avatar": {"tier": avatar_tier},
        "risk_band": band,
        "avatar_mood": BAND_MOODS[band],
        "message": BAND_MESSAGES[band],
    }


async def _run_stats(db: AsyncSession, user_id: str, start: str, end: str) -> dict[str, tuple[int, int]]:
    result = await db.execute(
        select(Run.local_date, func.count(Run.id), func.coalesce(func.sum(Run.gained_xp), 0))
        .where(Run.user_id == user_id, Run.local_date.between(start, end))
        .group_by(Run.local_date)
    )
    return {day: (int(count), int(xp)) for day, count, xp in result.all()}


async def _routine_log_counts(db: AsyncSession, user_id: str, start: str, end: str) -> dict[str, int]:
    result = await db.execute(
        select(RoutineLog.local_date, func.count(RoutineLog.id))
        .where(RoutineLog.user_id == user_id, RoutineLog.local_date.between(start, end))
        .group_by(RoutineLog.local_date)
    )
    return {day: int(count) for day, count in result.all()}


async def weekly_insights(db: AsyncSession, user_id: str, today: date | None = None) -> dict[str, Any]:
    """Weekly report for a user, read from one database snapshot.

    A completion committed while the report is being read shows up in all of
    it or none of it. ``today`` defaults to the current date in the user's
    timezone.
    """
    await begin_snapshot(db)

    user = await get_user(db, user_id, refresh=True)
    if user is None:
        await db.rollback()
        msg = "User not found"
        raise NotFoundError(msg)

    today = today or local_date(utc_now(), user.timezone)
    window = date_window(today, WINDOW_DAYS)
    start, end = window[0].isoformat(), window[-1].isoformat()

    run_stats = await _run_stats(db, user_id, start, end)
    log_counts = await _routine_log_counts(db, user_id, start, end)
    target_total = await active_daily_target_total(db, user_id)
    report = build_weekly_report(
        today,
        run_stats,
        log_counts,
        target_total,
        current_streak=user.current_streak,
        longest_streak=user.longest_streak,
        avatar_tier=user.avatar_tier,
    )
    await db.commit()

    logger.debug(
        "weekly_insights_built",
        user_id=user_id,
        completion_rate=report["completion"]["completion_rate"],
        risk_band=report["risk_band"],
    )
    return report

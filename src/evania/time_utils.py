"""Clock and calendar helpers.

Cooldowns are measured in elapsed UTC seconds; streaks, daily targets and
insight windows use the calendar date in the user's timezone.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(dt: datetime) -> datetime:
    """Treat naive datetimes (e.g. read back from SQLite) as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def is_valid_timezone(name: str) -> bool:
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return False
    return True


def local_date(now: datetime, tz_name: str) -> date:
    """Calendar date of ``now`` in ``tz_name``."""
    return as_utc(now).astimezone(ZoneInfo(tz_name)).date()


def date_window(end: date, days: int) -> list[date]:
    """``days`` consecutive dates ending at ``end`` inclusive, oldest first."""
    return [end - timedelta(days=offset) for offset in range(days - 1, -1, -1)]

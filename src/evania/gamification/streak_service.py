"""Daily streak tracking and the streak reward multiplier."""

from __future__ import annotations

import dataclasses
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from evania.gamification.progress import ProgressState

PER_DAY_BONUS = Decimal("0.05")
PER_DAY_BONUS_CAP = Decimal("0.5")
WEEK_BONUS = Decimal("0.1")

_CENTS = Decimal("0.01")


def apply_streak_progress(state: ProgressState, today: date) -> ProgressState:
    """Advance the streak for a completion on ``today`` (the user's local date).

    Same day keeps the streak, the next calendar day extends it, any other gap
    (including a date before the last active one) restarts it at 1.
    """
    last = state.last_active_date
    if last is None:
        current = 1
    else:
        diff = (today - last).days
        if diff == 0:
            current = state.current_streak
        elif diff == 1:
            current = state.current_streak + 1
        else:
            current = 1

    return dataclasses.replace(
        state,
        current_streak=current,
        longest_streak=max(state.longest_streak, current),
        last_active_date=today,
    )


def streak_multiplier(streak: int) -> float:
    """1.0 + 5% per streak day (capped at +50%) + 10% per full week, to 2 places."""
    if streak < 1:
        return 1.0
    per_day = min(PER_DAY_BONUS * streak, PER_DAY_BONUS_CAP)
    week_bonus = (streak // 7) * WEEK_BONUS
    total = (Decimal(1) + per_day + week_bonus).quantize(_CENTS, rounding=ROUND_HALF_UP)
    return float(total)

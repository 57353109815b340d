"""XP award for a single completion: streak, multiplier, level and avatar tier."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from evania.gamification.level_thresholds import compute_level, promotes_avatar
from evania.gamification.progress import ProgressState
from evania.gamification.streak_service import apply_streak_progress, streak_multiplier


@dataclass(frozen=True)
class CompletionReward:
    """Outcome of applying one completion to a progress snapshot."""

    before: ProgressState
    after: ProgressState
    base_points: int
    multiplier: float
    gained_xp: int

    @property
    def leveled_up(self) -> bool:
        return self.after.level > self.before.level

    @property
    def avatar_promoted(self) -> bool:
        return self.after.avatar_tier > self.before.avatar_tier


def scale_points(base_points: int, multiplier: float) -> int:
    """base_points * multiplier rounded half-up to a whole number of XP."""
    scaled = Decimal(base_points) * Decimal(str(multiplier))
    return int(scaled.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def compute_reward(state: ProgressState, base_points: int, today: date) -> CompletionReward:
    """Apply one completion worth ``base_points`` on local date ``today``.

    Pure: the streak engine runs exactly once and the multiplier uses the
    post-update streak.
    """
    if base_points <= 0:
        msg = f"base_points must be positive, got {base_points}"
        raise ValueError(msg)

    progressed = apply_streak_progress(state, today)
    multiplier = streak_multiplier(progressed.current_streak)
    gained = scale_points(base_points, multiplier)

    total_xp = progressed.total_xp + gained
    level = compute_level(total_xp)
    avatar_tier = progressed.avatar_tier + (1 if promotes_avatar(state.level, level) else 0)

    after = dataclasses.replace(progressed, total_xp=total_xp, level=level, avatar_tier=avatar_tier)
    return CompletionReward(
        before=state,
        after=after,
        base_points=base_points,
        multiplier=multiplier,
        gained_xp=gained,
    )

"""Streak engine: calendar-day continuity and the reward multiplier."""

from datetime import date

import pytest

from evania.gamification.progress import ProgressState
from evania.gamification.streak_service import apply_streak_progress, streak_multiplier


def _state(current: int = 0, longest: int = 0, last: date | None = None) -> ProgressState:
    return ProgressState(current_streak=current, longest_streak=longest, last_active_date=last)


class TestApplyStreakProgress:
    """Streak transitions by local calendar date."""

    def test_first_ever_completion_starts_at_one(self):
        result = apply_streak_progress(_state(), date(2026, 3, 10))
        assert result.current_streak == 1
        assert result.longest_streak == 1
        assert result.last_active_date == date(2026, 3, 10)

    def test_same_day_is_idempotent(self):
        state = _state(current=4, longest=6, last=date(2026, 3, 10))
        once = apply_streak_progress(state, date(2026, 3, 10))
        twice = apply_streak_progress(once, date(2026, 3, 10))
        assert once.current_streak == 4
        assert twice == once

    def test_consecutive_days_extend(self):
        state = _state()
        for offset in range(5):
            state = apply_streak_progress(state, date(2026, 3, 10 + offset))
        assert state.current_streak == 5
        assert state.longest_streak == 5

    def test_gap_resets_to_one(self):
        state = _state(current=9, longest=9, last=date(2026, 3, 10))
        result = apply_streak_progress(state, date(2026, 3, 12))
        assert result.current_streak == 1
        assert result.longest_streak == 9

    def test_month_boundary_counts_as_consecutive(self):
        state = _state(current=2, longest=2, last=date(2026, 2, 28))
        assert apply_streak_progress(state, date(2026, 3, 1)).current_streak == 3

    def test_date_before_last_active_restarts(self):
        """A clock that moved backwards is treated like a gap."""
        state = _state(current=3, longest=3, last=date(2026, 3, 10))
        result = apply_streak_progress(state, date(2026, 3, 9))
        assert result.current_streak == 1
        assert result.last_active_date == date(2026, 3, 9)

    def test_longest_never_below_current(self):
        state = _state(current=0, longest=0)
        day = date(2026, 1, 1)
        for step in [0, 1, 1, 1, 3, 1, 0, 1]:
            day = date.fromordinal(day.toordinal() + step)
            state = apply_streak_progress(state, day)
            assert state.longest_streak >= state.current_streak

    def test_does_not_touch_xp_or_tier(self):
        state = ProgressState(total_xp=50, level=4, avatar_tier=2)
        result = apply_streak_progress(state, date(2026, 3, 10))
        assert (result.total_xp, result.level, result.avatar_tier) == (50, 4, 2)


class TestStreakMultiplier:
    """1.0 + min(0.05 * streak, 0.5) + 0.1 per full week."""

    @pytest.mark.parametrize(
        ("streak", "expected"),
        [
            (0, 1.0),
            (1, 1.05),
            (2, 1.1),
            (6, 1.3),
            (7, 1.45),
            (10, 1.6),
            (13, 1.6),
            (14, 1.7),
            (21, 1.8),
        ],
    )
    def test_values(self, streak: int, expected: float):
        assert streak_multiplier(streak) == expected

    def test_per_day_bonus_caps_at_ten_days(self):
        assert streak_multiplier(10) == streak_multiplier(11) == streak_multiplier(12)

    def test_non_decreasing(self):
        values = [streak_multiplier(s) for s in range(0, 60)]
        assert values == sorted(values)

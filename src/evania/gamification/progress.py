"""Immutable snapshot of a user's progress counters."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from evania.db.models import User


@dataclass(frozen=True)
class ProgressState:
    total_xp: int = 0
    level: int = 1
    current_streak: int = 0
    longest_streak: int = 0
    last_active_date: date | None = None
    avatar_tier: int = 0

    @classmethod
    def from_user(cls, user: User) -> ProgressState:
        last = user.last_active_local_date
        return cls(
            total_xp=user.total_xp or 0,
            level=user.level or 1,
            current_streak=user.current_streak or 0,
            longest_streak=user.longest_streak or 0,
            last_active_date=date.fromisoformat(last) if last else None,
            avatar_tier=user.avatar_tier or 0,
        )

    def apply_to(self, user: User) -> None:
        """Copy the counters onto an ORM row (no flush)."""
        user.total_xp = self.total_xp
        user.level = self.level
        user.current_streak = self.current_streak
        user.longest_streak = self.longest_streak
        user.last_active_local_date = self.last_active_date.isoformat() if self.last_active_date else None
        user.avatar_tier = self.avatar_tier

"""Level curve and avatar-tier promotion.

Level L starts at 4 * (L - 1)^2 XP: 0, 4, 16, 36, 64, ...
"""

from __future__ import annotations

import math

AVATAR_TIER_LEVEL_STEP = 5


def compute_level(total_xp: int) -> int:
    """floor(sqrt(total_xp) / 2) + 1, exact for any integer XP."""
    if total_xp < 0:
        msg = f"total_xp must be non-negative, got {total_xp}"
        raise ValueError(msg)
    return math.isqrt(total_xp) // 2 + 1


def level_floor_xp(level: int) -> int:
    """Smallest total XP that reaches ``level``."""
    return 4 * (level - 1) ** 2


def level_info(total_xp: int) -> dict:
    """Level plus progress toward the next one."""
    level = compute_level(total_xp)
    floor_xp = level_floor_xp(level)
    next_xp = level_floor_xp(level + 1)
    return {
        "level": level,
        "level_floor_xp": floor_xp,
        "next_level_xp": next_xp,
        "xp_into_level": total_xp - floor_xp,
        "xp_for_level": next_xp - floor_xp,
    }


def promotes_avatar(previous_level: int, new_level: int) -> bool:
    """True when a completion lands on a new level that is a multiple of 5.

    Only the final level is checked, so one event promotes at most one tier
    even when it skips past several multiples of 5.
    """
    return new_level > previous_level and new_level % AVATAR_TIER_LEVEL_STEP == 0

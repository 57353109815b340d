"""Seed the default quest catalog. Idempotent: runs only on an empty catalog."""

from __future__ import annotations

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from evania.db.models import Quest

logger = structlog.get_logger()

QUEST_DEFINITIONS: list[dict] = [
    {"id": "q1", "title": "2-min Breathing", "base_points": 10, "category": "mindfulness", "cooldown_sec": 0},
    {"id": "q2", "title": "Drink Water", "base_points": 5, "category": "self-care", "cooldown_sec": 3600},
    {"id": "q3", "title": "10 Push-ups", "base_points": 12, "category": "fitness", "cooldown_sec": 0},
    {"id": "q4", "title": "Journal 3 lines", "base_points": 15, "category": "reflection", "cooldown_sec": 0},
]


async def seed_quests(db: AsyncSession) -> int:
    """Insert the default quests if the catalog is empty. Returns rows inserted."""
    existing = await db.execute(select(func.count()).select_from(Quest))
    if existing.scalar_one() > 0:
        return 0

    for definition in QUEST_DEFINITIONS:
        db.add(Quest(active=True, **definition))
    await db.commit()
    logger.info("quests_seeded", count=len(QUEST_DEFINITIONS))
    return len(QUEST_DEFINITIONS)

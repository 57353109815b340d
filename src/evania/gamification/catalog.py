"""Quest catalog reads. Only active quests are visible."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from evania.db.models import Quest


async def get_quest(db: AsyncSession, quest_id: str) -> Quest | None:
    result = await db.execute(select(Quest).where(Quest.id == quest_id, Quest.active.is_(True)))
    return result.scalar_one_or_none()


async def list_quests(db: AsyncSession) -> list[Quest]:
    result = await db.execute(select(Quest).where(Quest.active.is_(True)).order_by(Quest.id))
    return list(result.scalars())

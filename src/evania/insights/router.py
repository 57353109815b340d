"""Weekly insights endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from evania.auth.dependencies import get_current_user
from evania.database import get_session
from evania.db.models import User
from evania.insights.schemas import WeeklyInsightsResponse
from evania.insights.service import weekly_insights

router = APIRouter(prefix="/api/insights", tags=["Insights"])


@router.get("/weekly", response_model=WeeklyInsightsResponse)
async def get_weekly_insights(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Seven-day activity report ending today (user-local)."""
    report = await weekly_insights(db, user.id)
    return WeeklyInsightsResponse.model_validate(report)

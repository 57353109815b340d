"""Profile and preference endpoints (/api/me)."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from evania.auth.dependencies import get_current_user
from evania.database import get_session
from evania.db.models import User
from evania.users.schemas import (
    PreferencesResponse,
    PreferencesUpdateRequest,
    PreferencesUpdateResponse,
    ProfileResponse,
)
from evania.users.service import update_preferences

router = APIRouter(prefix="/api/me", tags=["Users"])


def _prefs(user: User) -> PreferencesResponse:
    return PreferencesResponse(
        theme_color=user.theme_color,
        daily_target=user.daily_target,
        goals=list(user.goals or []),
        baseline_mood=user.baseline_mood,
        timezone=user.timezone,
    )


@router.get("", response_model=ProfileResponse)
async def get_me(user: User = Depends(get_current_user)):
    """Current user's profile and preferences."""
    return ProfileResponse(
        id=user.id,
        email=user.email,
        onboarding_done=user.onboarding_done,
        prefs=_prefs(user),
    )


@router.post("/prefs", response_model=PreferencesUpdateResponse)
async def save_prefs(
    body: PreferencesUpdateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Merge the given preference fields; everything else is left as stored."""
    user = await update_preferences(db, user, body.provided())
    return PreferencesUpdateResponse(prefs=_prefs(user))

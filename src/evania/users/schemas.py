"""Request/response schemas for profile and preference endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from evania.time_utils import is_valid_timezone


class PreferencesResponse(BaseModel):
    theme_color: str
    daily_target: int
    goals: list[str]
    baseline_mood: str
    timezone: str


class ProfileResponse(BaseModel):
    id: str
    email: str | None = None
    onboarding_done: bool
    prefs: PreferencesResponse


class PreferencesUpdateRequest(BaseModel):
    """Partial update. Only fields present in the body are changed."""

    theme_color: str | None = Field(None, min_length=1, max_length=16)
    daily_target: int | None = Field(None, ge=1, le=100)
    goals: list[str] | None = Field(None, max_length=20)
    baseline_mood: str | None = Field(None, min_length=1, max_length=32)
    onboarding_done: bool | None = None
    timezone: str | None = Field(None, min_length=1, max_length=64)

    @field_validator("timezone")
    @classmethod
    def known_timezone(cls, v: str | None) -> str | None:
        """Must be an IANA zone name such as 'Europe/Oslo'."""
        if v is not None and not is_valid_timezone(v):
            msg = f"Unknown timezone: {v}"
            raise ValueError(msg)
        return v

    def provided(self) -> dict:
        """Fields the client actually sent; an explicit null counts as not sent."""
        return {k: v for k, v in self.model_dump(exclude_unset=True).items() if v is not None}


class PreferencesUpdateResponse(BaseModel):
    ok: bool = True
    prefs: PreferencesResponse

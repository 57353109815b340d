"""Pydantic request/response models for quest, routine and progress endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator


# --- Quests ---


class QuestResponse(BaseModel):
    id: str
    title: str
    base_points: int
    category: str | None = None
    cooldown_sec: int
    active: bool


class QuestListResponse(BaseModel):
    quests: list[QuestResponse]


# --- Progress ---


class ProgressResponse(BaseModel):
    total_xp: int
    level: int
    current_streak: int
    longest_streak: int
    last_active_date: str | None = None
    avatar_tier: int


class LevelProgressResponse(BaseModel):
    level_floor_xp: int
    next_level_xp: int
    xp_into_level: int
    xp_for_level: int


class ProgressDetailResponse(ProgressResponse):
    user_id: str
    level_progress: LevelProgressResponse


# --- Completions ---


class CompletionMeta(BaseModel):
    base_points: int
    multiplier: float
    leveled_up: bool
    avatar_promoted: bool


class RunCreateRequest(BaseModel):
    quest_id: str = Field(..., min_length=1, max_length=64)


class RunResponse(BaseModel):
    id: str
    user_id: str
    quest_id: str
    gained_xp: int
    streak_applied: int
    created_at: datetime
    local_date: str


class RunCompletionResponse(BaseModel):
    completion: RunResponse
    progress: ProgressResponse
    meta: CompletionMeta


class RunListResponse(BaseModel):
    runs: list[RunResponse]


# --- Routines ---


class RoutineCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    base_points: int = Field(6, gt=0, le=1000)
    daily_target: int = Field(1, gt=0, le=100)

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        """Reject titles that are only whitespace."""
        v = v.strip()
        if not v:
            msg = "title must not be blank"
            raise ValueError(msg)
        return v


class RoutineResponse(BaseModel):
    id: str
    title: str
    base_points: int
    daily_target: int
    active: bool
    count_today: int = 0


class RoutineCreateResponse(BaseModel):
    routine: RoutineResponse


class RoutineListResponse(BaseModel):
    routines: list[RoutineResponse]


class RoutineLogResponse(BaseModel):
    """Routine completion record. Routine logs do not snapshot the streak."""

    id: str
    routine_id: str
    user_id: str
    gained_xp: int
    created_at: datetime
    local_date: str


class RoutineCompletionResponse(BaseModel):
    completion: RoutineLogResponse
    progress: ProgressResponse
    meta: CompletionMeta

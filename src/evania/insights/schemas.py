"""Pydantic response models for the weekly insights endpoint."""

from __future__ import annotations

from pydantic import BaseModel


class InsightWindow(BaseModel):
    start: str
    end: str


class DailyInsight(BaseModel):
    date: str
    quests: int
    routine_logs: int
    xp: int


class InsightTotals(BaseModel):
    xp: int
    quests: int
    routine_logs: int


class CompletionStats(BaseModel):
    daily_target_total: int
    days_met_target: int
    completion_rate: int


class StreakSnapshot(BaseModel):
    current: int
    longest: int


class AvatarSnapshot(BaseModel):
    tier: int


class WeeklyInsightsResponse(BaseModel):
    window: InsightWindow
    series: list[DailyInsight]
    totals: InsightTotals
    completion: CompletionStats
    streak: StreakSnapshot
    avatar: AvatarSnapshot
    risk_band: str
    avatar_mood: str
    message: str

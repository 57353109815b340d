"""Quest, routine and progress endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from evania.auth.dependencies import get_current_user
from evania.database import get_session
from evania.db.models import Routine, RoutineLog, Run, User
from evania.errors import NotFoundError
from evania.gamification import history
from evania.gamification.catalog import list_quests
from evania.gamification.completion_service import (
    CompletionResult,
    complete_quest,
    log_routine_completion,
)
from evania.gamification.level_thresholds import level_info
from evania.gamification.locks import UserLockRegistry, get_user_locks
from evania.gamification.routines import create_routine, deactivate_routine, list_routines
from evania.gamification.schemas import (
    CompletionMeta,
    LevelProgressResponse,
    ProgressDetailResponse,
    ProgressResponse,
    QuestListResponse,
    QuestResponse,
    RoutineCompletionResponse,
    RoutineCreateRequest,
    RoutineCreateResponse,
    RoutineListResponse,
    RoutineLogResponse,
    RoutineResponse,
    RunCompletionResponse,
    RunCreateRequest,
    RunListResponse,
    RunResponse,
)
from evania.time_utils import local_date, utc_now

router = APIRouter(prefix="/api", tags=["Progression"])


def _progress(user: User) -> ProgressResponse:
    return ProgressResponse(
        total_xp=user.total_xp,
        level=user.level,
        current_streak=user.current_streak,
        longest_streak=user.longest_streak,
        last_active_date=user.last_active_local_date,
        avatar_tier=user.avatar_tier,
    )


def _meta(result: CompletionResult) -> CompletionMeta:
    reward = result.reward
    return CompletionMeta(
        base_points=reward.base_points,
        multiplier=reward.multiplier,
        leveled_up=reward.leveled_up,
        avatar_promoted=reward.avatar_promoted,
    )


def _run_response(run: Run) -> RunResponse:
    return RunResponse(
        id=run.id,
        user_id=run.user_id,
        quest_id=run.quest_id,
        gained_xp=run.gained_xp,
        streak_applied=run.streak_applied,
        created_at=run.created_at,
        local_date=run.local_date,
    )


def _routine_log_response(log: RoutineLog) -> RoutineLogResponse:
    return RoutineLogResponse(
        id=log.id,
        routine_id=log.routine_id,
        user_id=log.user_id,
        gained_xp=log.gained_xp,
        created_at=log.created_at,
        local_date=log.local_date,
    )


def _routine_response(routine: Routine, count_today: int = 0) -> RoutineResponse:
    return RoutineResponse(
        id=routine.id,
        title=routine.title,
        base_points=routine.base_points,
        daily_target=routine.daily_target,
        active=routine.active,
        count_today=count_today,
    )


# ── Quests ──


@router.get("/quests", response_model=QuestListResponse)
async def get_quests(db: AsyncSession = Depends(get_session)):
    """Active quest catalog."""
    quests = await list_quests(db)
    return QuestListResponse(
        quests=[
            QuestResponse(
                id=q.id,
                title=q.title,
                base_points=q.base_points,
                category=q.category,
                cooldown_sec=q.cooldown_sec,
                active=q.active,
            )
            for q in quests
        ]
    )


@router.get("/progress", response_model=ProgressDetailResponse)
async def get_progress(user: User = Depends(get_current_user)):
    """Current XP, level, streak and avatar tier."""
    info = level_info(user.total_xp)
    return ProgressDetailResponse(
        user_id=user.id,
        **_progress(user).model_dump(),
        level_progress=LevelProgressResponse(
            level_floor_xp=info["level_floor_xp"],
            next_level_xp=info["next_level_xp"],
            xp_into_level=info["xp_into_level"],
            xp_for_level=info["xp_for_level"],
        ),
    )


@router.post("/runs", response_model=RunCompletionResponse)
async def create_run(
    body: RunCreateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    locks: UserLockRegistry = Depends(get_user_locks),
):
    """Complete a quest. 429 with retry_after_seconds while on cooldown."""
    result = await complete_quest(db, locks, user.id, body.quest_id)
    return RunCompletionResponse(
        completion=_run_response(result.record),
        progress=_progress(result.user),
        meta=_meta(result),
    )


@router.get("/runs", response_model=RunListResponse)
async def get_runs(
    limit: int | None = Query(None, ge=1, le=500),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """The caller's quest runs, newest first."""
    runs = await history.list_runs(db, user.id, limit=limit)
    return RunListResponse(runs=[_run_response(r) for r in runs])


# ── Routines ──


@router.get("/routines", response_model=RoutineListResponse)
async def get_routines(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Active routines with today's completion count."""
    today = local_date(utc_now(), user.timezone)
    rows = await list_routines(db, user.id, today)
    return RoutineListResponse(routines=[_routine_response(r, count) for r, count in rows])


@router.post("/routines", response_model=RoutineCreateResponse, status_code=201)
async def post_routine(
    body: RoutineCreateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Create a routine."""
    routine = await create_routine(
        db,
        owner_id=user.id,
        title=body.title,
        base_points=body.base_points,
        daily_target=body.daily_target,
    )
    return RoutineCreateResponse(routine=_routine_response(routine))


@router.post("/routines/{routine_id}/log", response_model=RoutineCompletionResponse)
async def log_routine(
    routine_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    locks: UserLockRegistry = Depends(get_user_locks),
):
    """Log a routine completion. 400 LIMIT_REACHED once the daily target is met."""
    result = await log_routine_completion(db, locks, user.id, routine_id)
    return RoutineCompletionResponse(
        completion=_routine_log_response(result.record),
        progress=_progress(result.user),
        meta=_meta(result),
    )


@router.delete("/routines/{routine_id}", status_code=204)
async def delete_routine(
    routine_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Deactivate a routine. History is kept."""
    if not await deactivate_routine(db, routine_id, user.id):
        msg = "Routine not found"
        raise NotFoundError(msg)
    return Response(status_code=204)

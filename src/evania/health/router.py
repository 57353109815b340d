"""Liveness, readiness and version endpoints."""

from fastapi import APIRouter, Depends, Response
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from evania.config import get_settings
from evania.database import get_session
from evania.redis_client import ping_redis

router = APIRouter()

_HEALTHY_STATES = frozenset({"ok", "disabled"})


async def _ping_database(db: AsyncSession) -> str:
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        return f"error: {exc}"
    return "ok"


@router.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe: 200 while the process is up."""
    return {"status": "healthy"}


@router.get("/api/health")
async def api_health() -> dict[str, bool]:
    """Liveness in the shape the mobile client polls."""
    return {"ok": True}


@router.get("/ready")
async def readiness(
    response: Response,
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> dict[str, object]:
    """Readiness probe. 503 with per-dependency detail when a dependency is down."""
    checks = {
        "database": await _ping_database(db),
        "redis": await ping_redis(),
    }
    ready = all(state in _HEALTHY_STATES for state in checks.values())
    if not ready:
        response.status_code = 503
    return {"status": "ready" if ready else "degraded", "checks": checks}


@router.get("/version")
async def version() -> dict[str, str]:
    settings = get_settings()
    return {"version": settings.app_version, "environment": settings.environment}

"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from evania.auth.router import router as auth_router
from evania.config import get_settings
from evania.database import close_db, create_schema, get_session_factory, init_db
from evania.gamification.locks import UserLockRegistry
from evania.gamification.router import router as gamification_router
from evania.gamification.seed import seed_quests
from evania.health.router import router as health_router
from evania.insights.router import router as insights_router
from evania.middleware import setup_middleware
from evania.redis_client import close_redis, init_redis
from evania.users.router import router as users_router

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(settings.database_url)
    if settings.auto_create_schema:
        await create_schema()
    if settings.redis_url:
        await init_redis(settings.redis_url)

    # Seed the quest catalog (idempotent)
    if settings.seed_quests:
        async with get_session_factory()() as db:
            await seed_quests(db)

    logger.info("app_started", environment=settings.environment, version=settings.app_version)

    yield

    await close_db()
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Evania API",
        description="Backend API for Evania: quests, routines, XP, streaks and weekly insights",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )
    app.state.user_locks = UserLockRegistry()

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(gamification_router)
    app.include_router(insights_router)

    return app


app = create_app()

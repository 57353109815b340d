"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import AsyncGenerator, Iterator
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from evania.config import get_settings
from evania.database import close_db, create_schema, get_session_factory, init_db
from evania.gamification.locks import UserLockRegistry
from evania.gamification.seed import seed_quests
from evania.main import create_app
from evania.redis_client import close_redis


@pytest.fixture(autouse=True)
def test_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[str]:
    """Point each test at its own SQLite file, with Redis disabled."""
    url = f"sqlite+aiosqlite:///{tmp_path / 'evania_test.db'}"
    monkeypatch.setenv("EVANIA_DATABASE_URL", url)
    monkeypatch.delenv("EVANIA_REDIS_URL", raising=False)
    monkeypatch.setenv("EVANIA_DEV_IDENTITY_FALLBACK", "true")
    monkeypatch.setenv("EVANIA_DEFAULT_TIMEZONE", "Asia/Kolkata")
    monkeypatch.setenv("EVANIA_LOG_FORMAT", "console")
    get_settings.cache_clear()
    yield url
    get_settings.cache_clear()


@pytest_asyncio.fixture
async def database(test_settings: str) -> AsyncGenerator[None, None]:
    """Fresh schema with the quest catalog seeded."""
    await init_db(test_settings)
    await create_schema()
    async with get_session_factory()() as session:
        await seed_quests(session)
    yield
    await close_db()
    await close_redis()


@pytest_asyncio.fixture
async def session_factory(database: None) -> async_sessionmaker[AsyncSession]:
    """Factory for tests that need several independent sessions."""
    return get_session_factory()


@pytest_asyncio.fixture
async def db_session(database: None) -> AsyncGenerator[AsyncSession, None]:
    """Get a direct database session for test assertions."""
    async with get_session_factory()() as session:
        yield session


@pytest.fixture
def locks() -> UserLockRegistry:
    return UserLockRegistry()


@pytest_asyncio.fixture
async def client(database: None) -> AsyncGenerator[AsyncClient, None]:
    """HTTP test client against a fresh app and database."""
    app = create_app()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def authed_client(client: AsyncClient) -> AsyncClient:
    """Client authenticated with a bearer token from a fresh registration."""
    response = await client.post(
        "/api/auth/register",
        json={"email": "asha@example.com", "password": "calm-mind-42"},
    )
    assert response.status_code == 200, response.text
    client.headers["Authorization"] = f"Bearer {response.json()['access_token']}"
    return client

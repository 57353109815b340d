"""Async SQLAlchemy engine and session management."""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy import Connection, event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def _set_sqlite_pragmas(dbapi_connection: Any, _record: Any) -> None:  # noqa: ANN401
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _begin_sqlite_transaction(conn: Connection) -> None:
    # pysqlite only opens a transaction before DML, so reads would run in
    # autocommit. Connections tagged with ``sqlite_begin`` get an explicit BEGIN.
    mode = conn.get_execution_options().get("sqlite_begin")
    if mode:
        conn.exec_driver_sql(f"BEGIN {mode}")


async def init_db(url: str) -> None:
    """Initialize the database engine and session factory."""
    global _engine, _session_factory  # noqa: PLW0603
    if url.startswith("sqlite"):
        _engine = create_async_engine(
            url,
            echo=False,
            connect_args={"timeout": 30},
        )
        event.listen(_engine.sync_engine, "connect", _set_sqlite_pragmas)
        event.listen(_engine.sync_engine, "begin", _begin_sqlite_transaction)
    else:
        _engine = create_async_engine(
            url,
            pool_size=20,
            max_overflow=10,
            pool_pre_ping=True,
            echo=False,
            connect_args={"statement_cache_size": 0},
        )
    _session_factory = async_sessionmaker(
        _engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def create_schema() -> None:
    """Create all tables that do not exist yet (development and tests).

    Production databases are managed by Alembic.
    """
    from evania.db import models  # noqa: F401
    from evania.db.base import Base

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Dispose of the database engine."""
    global _engine, _session_factory  # noqa: PLW0603
    if _engine:
        await _engine.dispose()
        _engine = None
        _session_factory = None


def get_engine() -> AsyncEngine:
    """Get the async engine instance."""
    if _engine is None:
        msg = "Database not initialized. Call init_db() first."
        raise RuntimeError(msg)
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get the session factory for code that runs outside a request."""
    if _session_factory is None:
        msg = "Database not initialized. Call init_db() first."
        raise RuntimeError(msg)
    return _session_factory


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield an async database session (FastAPI dependency)."""
    async with get_session_factory()() as session:
        yield session


def _dialect_name(db: AsyncSession) -> str:
    return db.get_bind().dialect.name


async def begin_snapshot(db: AsyncSession) -> None:
    """Start a read transaction in which every query sees the same snapshot.

    Any open transaction on the session is committed first.
    """
    if db.in_transaction():
        await db.commit()
    if _dialect_name(db) == "postgresql":
        options = {"isolation_level": "REPEATABLE READ"}
    else:
        options = {"sqlite_begin": "DEFERRED"}
    await db.connection(execution_options=options)


async def begin_write(db: AsyncSession) -> None:
    """Start a transaction that holds the write lock from its first statement.

    On SQLite this is ``BEGIN IMMEDIATE``, which serializes writers across
    processes. On Postgres the row locks taken by ``SELECT ... FOR UPDATE``
    do that job. Any open transaction on the session is committed first.
    """
    if db.in_transaction():
        await db.commit()
    options = {"sqlite_begin": "IMMEDIATE"} if _dialect_name(db) == "sqlite" else {}
    await db.connection(execution_options=options)

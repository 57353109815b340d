"""Per-user mutual exclusion for completion processing.

One registry per process. Completions for the same user run one at a time;
different users never wait on each other.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Request


class UserLockRegistry:
    """Hands out one asyncio.Lock per user id, dropped when nobody holds or waits on it."""

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._refcounts: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    @asynccontextmanager
    async def hold(self, user_id: str) -> AsyncIterator[None]:
        lock = self._locks.get(user_id)
        if lock is None:
            lock = self._locks[user_id] = asyncio.Lock()
        self._refcounts[user_id] = self._refcounts.get(user_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._refcounts[user_id] -= 1
            if self._refcounts[user_id] == 0:
                del self._refcounts[user_id]
                del self._locks[user_id]


def get_user_locks(request: Request) -> UserLockRegistry:
    """FastAPI dependency: the app-wide registry created in ``create_app``."""
    return request.app.state.user_locks

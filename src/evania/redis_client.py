"""Optional Redis connection. Request rate limiting and readiness use it when configured."""

import redis.asyncio as redis
from redis.exceptions import RedisError

_client: redis.Redis | None = None


async def init_redis(url: str) -> redis.Redis:
    """Create the shared client for ``url``."""
    global _client  # noqa: PLW0603
    _client = redis.from_url(  # type: ignore[no-untyped-call]
        url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=20,
        health_check_interval=30,
    )
    return _client


async def close_redis() -> None:
    global _client  # noqa: PLW0603
    if _client is not None:
        await _client.aclose()
        _client = None


def redis_configured() -> bool:
    return _client is not None


def get_redis() -> redis.Redis:
    """The shared client. Raises RuntimeError when Redis is not configured."""
    if _client is None:
        msg = "Redis not initialized. Set EVANIA_REDIS_URL to enable it."
        raise RuntimeError(msg)
    return _client


async def ping_redis() -> str:
    """Readiness status: "ok", "disabled" when not configured, else "error: ..."."""
    if _client is None:
        return "disabled"
    try:
        await _client.ping()
    except RedisError as exc:
        return f"error: {exc}"
    return "ok"

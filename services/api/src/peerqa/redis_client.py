"""Redis connection for rate limiting and badge notifications.

Redis is optional. When ``PEERQA_REDIS_URL`` is empty no pool is created and
:func:`get_optional_redis` returns None; callers then skip rate limiting and
``badge_earned`` publishing.
"""

import redis.asyncio as redis
import structlog

logger = structlog.get_logger()

KEY_PREFIX = "peerqa"

_pool: redis.Redis | None = None


async def init_redis(url: str | None, max_connections: int = 50) -> None:
    """Create the connection pool, or leave Redis disabled for an empty URL."""
    global _pool  # noqa: PLW0603
    if not url:
        logger.info("redis_disabled")
        return
    _pool = redis.from_url(  # type: ignore[no-untyped-call]
        url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=max_connections,
    )
    logger.info("redis_configured", max_connections=max_connections)


async def close_redis() -> None:
    global _pool  # noqa: PLW0603
    if _pool:
        await _pool.aclose()
        _pool = None


def get_optional_redis() -> redis.Redis | None:
    return _pool


def redis_key(*parts: object) -> str:
    """Namespaced key: ``redis_key("ratelimit", ip, window)`` -> ``peerqa:ratelimit:<ip>:<window>``."""
    return ":".join([KEY_PREFIX, *(str(p) for p in parts)])

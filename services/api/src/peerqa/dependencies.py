"""Shared FastAPI dependencies."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Path

from peerqa.db.models import MAX_ID
from peerqa.redis_client import get_optional_redis as _get_optional_redis

# Path ids outside the INTEGER key range are rejected with 422 before reaching the driver
ResourceId = Annotated[int, Path(gt=0, le=MAX_ID)]


async def get_redis_dep() -> AsyncGenerator[object, None]:
    """Yield the Redis client (or None when Redis is not running) as a FastAPI dependency."""
    yield _get_optional_redis()

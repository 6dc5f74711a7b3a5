"""Shared test fixtures.

Each test gets a fresh SQLite database file (aiosqlite) under ``tmp_path``.
Redis is never initialized, so rate limiting is bypassed and badge
notifications are skipped unless a test injects a client.
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator, Awaitable, Callable

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

os.environ.setdefault("PEERQA_JWT_SECRET_KEY", "test-secret-key-with-enough-bytes-for-hs256")
os.environ.setdefault("PEERQA_LOG_FORMAT", "console")

from peerqa.auth.jwt import create_access_token  # noqa: E402
from peerqa.config import get_settings  # noqa: E402
from peerqa.database import close_db, create_schema, get_session_factory, init_db  # noqa: E402
from peerqa.db.models import Achievement, Badge, User  # noqa: E402
from peerqa.gamification.catalog import get_catalog  # noqa: E402
from peerqa.main import create_app  # noqa: E402

MakeUser = Callable[..., Awaitable[User]]


@pytest.fixture(autouse=True)
def _fresh_settings_and_catalog() -> None:
    """Settings and the catalog cache are process-wide; reset them per test."""
    get_settings.cache_clear()
    get_catalog().invalidate()


@pytest_asyncio.fixture
async def database_url(tmp_path) -> AsyncGenerator[str, None]:
    url = f"sqlite+aiosqlite:///{tmp_path / 'peerqa_test.db'}"
    await init_db(url)
    await create_schema()
    yield url
    await close_db()


@pytest_asyncio.fixture
async def db_session(database_url: str) -> AsyncGenerator[AsyncSession, None]:
    """Direct database session for arranging data and asserting on it."""
    async with get_session_factory()() as session:
        yield session


@pytest_asyncio.fixture
async def client(database_url: str) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to a fresh app. Lifespan is not run; the DB is already initialized."""
    app = create_app()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def make_user(db_session: AsyncSession) -> MakeUser:
    """Factory inserting users without going through argon2 hashing."""
    counter = {"n": 0}

    async def _make(
        name: str | None = None,
        *,
        sending: float = 0.0,
        receiving: float = 0.0,
        avatar_url: str | None = None,
    ) -> User:
        counter["n"] += 1
        n = counter["n"]
        user = User(
            name=name or f"User {n}",
            email=f"user{n}@example.com",
            username=f"user{n}",
            password_hash="not-a-real-hash",
            avatar_url=avatar_url,
            sending_review_points=sending,
            receiving_review_points=receiving,
            total_points=sending + receiving,
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return _make


@pytest.fixture
def auth_headers() -> Callable[[User], dict[str, str]]:
    def _headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user.id, user.username)}"}

    return _headers


@pytest_asyncio.fixture
async def badge(db_session: AsyncSession) -> Badge:
    b = Badge(name="Reviewer", description="Reviews things", icon="reviewer.png")
    db_session.add(b)
    await db_session.commit()
    return b


@pytest.fixture
def make_achievement(db_session: AsyncSession) -> Callable[..., Awaitable[Achievement]]:
    async def _make(name: str, badge_id: int, *, sending: float = 0.0, receiving: float = 0.0) -> Achievement:
        achievement = Achievement(
            name=name,
            description=f"{name} description",
            sending_review_points=sending,
            receiving_review_points=receiving,
            badge_id=badge_id,
        )
        db_session.add(achievement)
        await db_session.commit()
        return achievement

    return _make

"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from peerqa.auth.router import router as auth_router
from peerqa.config import get_settings
from peerqa.database import close_db, create_schema, get_session_factory, init_db
from peerqa.gamification.router import router as gamification_router
from peerqa.gamification.seed import seed_catalog
from peerqa.health.router import router as health_router
from peerqa.middleware import setup_middleware
from peerqa.redis_client import close_redis, init_redis
from peerqa.reviews.router import router as reviews_router
from peerqa.users.router import router as users_router

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(settings.database_url)
    if settings.create_schema:
        await create_schema()
    await init_redis(settings.redis_url)

    # Seed the default catalog (idempotent)
    try:
        async with get_session_factory()() as db:
            await seed_catalog(db)
    except Exception:
        logger.warning("catalog_seed_failed", exc_info=True)

    yield

    await close_db()
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="PeerQA API",
        description="Peer review and achievement backend for defect-tracking teams",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(reviews_router)
    app.include_router(gamification_router)

    return app


app = create_app()

"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from matcha.admin.router import router as admin_router
from matcha.announcements.router import admin_router as admin_announcements_router
from matcha.announcements.router import router as announcements_router
from matcha.config import get_settings
from matcha.database import close_db, init_db
from matcha.health.router import router as health_router
from matcha.middleware import setup_middleware
from matcha.notifications.router import router as notifications_router
from matcha.redis_client import close_redis, init_redis
from matcha.sessions.router import router as sessions_router
from matcha.stats.router import router as stats_router

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(settings.database_url)
    if settings.redis_url:
        await init_redis(settings.redis_url)
    logger.info("startup_complete", environment=settings.environment, version=settings.app_version)

    yield

    await close_db()
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Matcha Admin API",
        description="Admin and analytics API for the Matcha dating application",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(stats_router)
    app.include_router(admin_router)
    app.include_router(admin_announcements_router)
    app.include_router(announcements_router)
    app.include_router(notifications_router)
    app.include_router(sessions_router)

    return app


app = create_app()

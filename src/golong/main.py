"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from golong.auth.router import router as auth_router
from golong.checkins.router import router as checkins_router
from golong.cleanup.router import router as cleanup_router
from golong.config import get_settings
from golong.database import close_db, init_db
from golong.health.router import router as health_router
from golong.middleware import setup_middleware
from golong.redis_client import close_redis, init_redis
from golong.social.router import router as social_router
from golong.streaks.router import router as streaks_router
from golong.users.router import router as users_router


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(settings.database_url)
    await init_redis(settings.redis_url)

    yield

    await close_db()
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="GoLong API",
        description="Backend API for GoLong: streaks, check-ins and the people doing them together",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    for api_router in (
        auth_router,
        users_router,
        streaks_router,
        checkins_router,
        social_router,
        cleanup_router,
    ):
        app.include_router(api_router)
    return app


app = create_app()

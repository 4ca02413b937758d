"""
LearnLoop API

FastAPI application entry point.

Startup (lifespan):
    - Create missing tables (production schema is managed by Alembic)
    - Start the weekly digest scheduler when DIGEST_SCHEDULE_ENABLED

Shutdown:
    - Stop the scheduler
    - Close the Redis connection pool

Run:
    uvicorn learnloop.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from learnloop import __version__
from learnloop.config import settings
from learnloop.db.base import init_db
from learnloop.db.redis import close_redis_pool
from learnloop.middleware import setup_error_handling, setup_rate_limiting
from learnloop.routers import (
    admin_router,
    auth_router,
    health_router,
    learning_router,
    sessions_router,
    user_router,
)
from learnloop.services.scheduler import start_scheduler, stop_scheduler

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.DEBUG else logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    # LiteLLM is very chatty at INFO
    logging.getLogger("LiteLLM").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    if settings.DIGEST_SCHEDULE_ENABLED:
        start_scheduler()
    if not settings.llm_enabled:
        logger.warning("No LLM API key configured; sample content will be served")

    yield

    if settings.DIGEST_SCHEDULE_ENABLED:
        stop_scheduler()
    await close_redis_pool()


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(
        title=f"{settings.APP_NAME} API",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    setup_error_handling(app, debug=settings.DEBUG)
    setup_rate_limiting(app, enabled=settings.RATE_LIMIT_ENABLED)

    app.include_router(health_router.router)
    app.include_router(auth_router.router)
    app.include_router(learning_router.router)
    app.include_router(sessions_router.router)
    app.include_router(user_router.router)
    app.include_router(admin_router.router)

    @app.get("/")
    async def root():
        return {"message": f"{settings.APP_NAME} API", "version": __version__}

    return app


app = create_app()

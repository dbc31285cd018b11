"""
Leaderboards Backend
Speedrun and score leaderboards served over a FastAPI application
"""

import logging
from contextlib import asynccontextmanager

import sentry_sdk
from fastapi import FastAPI
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

from leaderboard_backend.api.api import api_router
from leaderboard_backend.core.config import settings
from leaderboard_backend.core.database import init_db
from leaderboard_backend.core.exceptions import register_exception_handlers
from leaderboard_backend.core.logging import setup_logging
from leaderboard_backend.middleware import (
    LoggingMiddleware,
    RequestIDMiddleware,
    SecurityHeadersMiddleware,
    add_rate_limiting,
    setup_cors,
)

logger = logging.getLogger(__name__)


def init_sentry() -> None:
    """Initialize Sentry if DSN is provided"""
    if not settings.SENTRY_DSN:
        return

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
        ],
        traces_sample_rate=1.0 if settings.DEBUG else 0.1,
        environment=settings.ENVIRONMENT,
        release=settings.APP_VERSION,
    )
    logger.info("Sentry initialized")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    # Startup
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    if settings.MIGRATE_DB:
        init_db()
        logger.info("Database initialized")

    yield

    # Shutdown
    logger.info("Shutting down application")


def create_app() -> FastAPI:
    """Build the application with its middleware, handlers and routes"""
    setup_logging()
    init_sentry()

    app = FastAPI(
        title=settings.APP_NAME,
        description=settings.APP_DESCRIPTION,
        version=settings.APP_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    register_exception_handlers(app)

    # Innermost first; the request ID wraps everything so every log line carries it
    add_rate_limiting(app)
    app.add_middleware(SecurityHeadersMiddleware)
    setup_cors(app)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Root endpoint
    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "message": f"Welcome to {settings.APP_NAME}",
            "version": settings.APP_VERSION,
            "docs": "/docs",
            "health": "/health",
        }

    app.include_router(api_router)

    # Prometheus metrics endpoint (optional)
    if settings.DEBUG:
        from prometheus_client import make_asgi_app

        app.mount("/metrics", make_asgi_app())

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "leaderboard_backend.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level="debug" if settings.DEBUG else "info",
    )

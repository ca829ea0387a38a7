"""FastAPI application factory and main entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

import culturebridge.models  # noqa: F401  (register tables on Base.metadata)
from culturebridge.api.v1.router import api_router
from culturebridge.common.request_id import RequestIDMiddleware
from culturebridge.core.config import settings
from culturebridge.core.errors import (
    general_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from culturebridge.core.logging import get_logger, setup_logging
from culturebridge.db.base import Base
from culturebridge.db.engine import engine
from culturebridge.rewards.catalog import get_reward_catalog

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    setup_logging()
    # A bad catalog must stop the process before any reward is granted
    get_reward_catalog().validate()
    # Create tables outside prod (prod runs Alembic migrations)
    if settings.ENV != "prod":
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    logger.info("Application started", extra={"env": settings.ENV})
    yield
    await engine.dispose()


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="1.0.0",
        description="CultureBridge learning sessions, progress and CBT rewards",
        openapi_url="/openapi.json" if settings.ENV != "prod" else None,
        docs_url="/docs" if settings.ENV != "prod" else None,
        redoc_url="/redoc" if settings.ENV != "prod" else None,
        lifespan=lifespan,
    )

    # Order matters - first added is innermost
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    app.include_router(api_router, prefix=settings.API_PREFIX)

    @app.get("/", tags=["Root"])
    async def root():
        """API information."""
        return {
            "message": settings.PROJECT_NAME,
            "version": "1.0.0",
            "docs_url": "/docs" if settings.ENV != "prod" else None,
        }

    return app


app = create_app()

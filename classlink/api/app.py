# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI Application Factory.

This module provides the main application factory for the ClassLink API.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from classlink import __version__
from classlink.api.dependencies import close_db, init_db
from classlink.api.middleware import RequestContextMiddleware
from classlink.api.routes import health
from classlink.api.v1 import router as v1_router
from classlink.core.config import get_settings
from classlink.infrastructure.database.connection import DatabaseError
from classlink.utils.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Initializes the database on startup and closes it on shutdown.

    Args:
        app: The FastAPI application instance.

    Yields:
        None during application runtime.
    """
    settings = get_settings()
    logger.info(
        "Starting ClassLink API",
        extra={"environment": settings.environment, "debug": settings.debug},
    )

    try:
        await init_db()
    except Exception as e:
        logger.warning("Failed to initialize database connection: %s", str(e))

    yield

    try:
        await close_db()
        logger.info("Database connection closed")
    except Exception as e:
        logger.warning("Error closing database connection: %s", str(e))

    logger.info("Shutting down ClassLink API")


async def _database_error_handler(request: Request, exc: DatabaseError) -> JSONResponse:
    """Report database unavailability outside the service layer as 503."""
    logger.error("Database unavailable: path=%s, error=%s", request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Database unavailable"},
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()
    setup_logging(settings)

    app = FastAPI(
        title=settings.api.title,
        description="Teacher-student relationship service",
        version=__version__,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
        redirect_slashes=False,
    )

    app.add_exception_handler(DatabaseError, _database_error_handler)
    app.add_middleware(RequestContextMiddleware)

    app.include_router(health.router, tags=["Health"])
    app.include_router(v1_router)

    return app

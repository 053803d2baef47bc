# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI Application Factory.

This module provides the main application factory for the emotional
intelligence API. Engine exceptions are mapped to HTTP responses here:

- ValidationError -> 422
- AnalysisCancelledError -> 409
- DatabaseError -> 503
- AnalysisError, EIConfigError -> 500 with a generic message
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from src.api.dependencies import close_db, init_db
from src.api.routes import health
from src.api.v1 import router as v1_router
from src.core.config import get_settings
from src.core.emotional_intelligence.exceptions import (
    AnalysisCancelledError,
    AnalysisError,
    EIConfigError,
    ValidationError,
)
from src.infrastructure.database.connection import DatabaseError
from src.utils.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Configures logging and opens the database connection on startup,
    closes it on shutdown.

    Args:
        app: The FastAPI application instance.

    Yields:
        None during application runtime.
    """
    settings = get_settings()
    setup_logging(settings)
    logger.info(
        "Starting emotional intelligence API",
        extra={"environment": settings.environment, "debug": settings.debug},
    )

    try:
        await init_db()
        logger.info("Database connection initialized")
    except DatabaseError as e:
        logger.warning("Failed to initialize database connection: %s", str(e))

    yield

    try:
        await close_db()
        logger.info("Database connection closed")
    except DatabaseError as e:
        logger.warning("Error closing database connection: %s", str(e))

    logger.info("Shutting down emotional intelligence API")


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Reject invalid requests before any analysis runs."""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=jsonable_encoder(
            {"error": "validation_error", "message": exc.message, "details": exc.context}
        ),
    )


async def cancelled_error_handler(request: Request, exc: AnalysisCancelledError) -> JSONResponse:
    """Report a cancelled analysis."""
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"error": "analysis_cancelled", "message": exc.message},
    )


async def analysis_error_handler(request: Request, exc: AnalysisError) -> JSONResponse:
    """Hide internal failure details from the caller."""
    logger.error(
        "Analysis request failed",
        extra={"path": request.url.path, **exc.context},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "analysis_failed",
            "message": "The analysis could not be completed",
        },
    )


async def config_error_handler(request: Request, exc: EIConfigError) -> JSONResponse:
    """Report invalid static configuration without its details."""
    logger.error("Invalid EI configuration", extra={"details": exc.context})
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "configuration_error", "message": "Service is misconfigured"},
    )


async def database_error_handler(request: Request, exc: DatabaseError) -> JSONResponse:
    """Report storage failures."""
    logger.error("Database error", extra={"path": request.url.path, "error": str(exc)})
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"error": "storage_unavailable", "message": "Emotional log is unavailable"},
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title="Emotional Intelligence API",
        description="Emotional intelligence competency assessment",
        version="1.0.0",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
        redirect_slashes=False,
    )

    # =========================================================================
    # Exception handlers
    # =========================================================================
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(AnalysisCancelledError, cancelled_error_handler)
    app.add_exception_handler(AnalysisError, analysis_error_handler)
    app.add_exception_handler(EIConfigError, config_error_handler)
    app.add_exception_handler(DatabaseError, database_error_handler)

    # =========================================================================
    # Routes
    # =========================================================================
    app.include_router(health.router, tags=["Health"])
    app.include_router(v1_router)

    return app

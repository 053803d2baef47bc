# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI dependency injection definitions.

This module provides dependency functions for FastAPI endpoints:
- Database lifecycle (init at startup, close at shutdown)
- The emotional intelligence service singleton

Tests replace the service through app.dependency_overrides.

Example:
    @router.get("/analysis/{subject_id}")
    async def get_analysis(subject_id: str, service: EIServiceDep):
        ...
"""

import logging
from typing import Annotated

from fastapi import Depends

from src.core.config import get_settings
from src.core.emotional_intelligence import (
    EmotionalIntelligenceService,
    SQLAlchemyEmotionalDataSource,
)
from src.infrastructure.database.connection import (
    close_database,
    create_tables,
    get_sessionmaker,
    init_database,
)

logger = logging.getLogger(__name__)

# Service singleton, created on first use
_ei_service: EmotionalIntelligenceService | None = None


async def init_db() -> None:
    """Initialize the database connection and the emotional log table."""
    settings = get_settings()
    await init_database(settings)
    await create_tables()


async def close_db() -> None:
    """Close the database connection and drop the service singleton."""
    reset_ei_service()
    await close_database()


def get_ei_service() -> EmotionalIntelligenceService:
    """Get the emotional intelligence service backed by the database.

    Returns:
        EmotionalIntelligenceService instance.

    Raises:
        DatabaseError: If the database has not been initialized.
    """
    global _ei_service
    if _ei_service is None:
        _ei_service = EmotionalIntelligenceService(
            SQLAlchemyEmotionalDataSource(get_sessionmaker()),
            settings=get_settings(),
        )
    return _ei_service


def reset_ei_service() -> None:
    """Drop the cached service so the next request builds a new one."""
    global _ei_service
    _ei_service = None


EIServiceDep = Annotated[EmotionalIntelligenceService, Depends(get_ei_service)]

# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database infrastructure for the emotional log.

This package provides SQLAlchemy async database connections and the
append-only emotional log model.

Example:
    from src.infrastructure.database import get_sessionmaker, init_database, session_scope

    await init_database(settings)
    async with session_scope(get_sessionmaker()) as session:
        result = await session.execute(select(EmotionalLogEntry))
"""

from src.infrastructure.database.connection import (
    DatabaseError,
    build_sessionmaker,
    check_database_connection,
    close_database,
    create_tables,
    get_engine,
    get_sessionmaker,
    init_database,
    session_scope,
)
from src.infrastructure.database.models import (
    ENTRY_TYPE_MILESTONE,
    ENTRY_TYPE_RECORD,
    Base,
    EmotionalLogEntry,
)

__all__ = [
    # Connection
    "DatabaseError",
    "build_sessionmaker",
    "check_database_connection",
    "close_database",
    "create_tables",
    "get_engine",
    "get_sessionmaker",
    "init_database",
    "session_scope",
    # Models
    "Base",
    "EmotionalLogEntry",
    "ENTRY_TYPE_MILESTONE",
    "ENTRY_TYPE_RECORD",
]

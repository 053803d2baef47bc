# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""DateTime utilities for the assessment engine.

Design Decisions:
-----------------
1. All timestamps are stored in UTC (PostgreSQL TIMESTAMPTZ)
2. All Python datetimes are timezone-aware (with timezone.utc)
3. Naive datetimes coming from callers or SQLite are assumed to be UTC

Usage:
------
    from src.utils.datetime import utc_now, ensure_utc

    now = utc_now()
    fetched = ensure_utc(row.occurred_at)
"""

from datetime import datetime, timedelta, timezone

SECONDS_PER_DAY = 86400.0


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime.

    Returns:
        Timezone-aware datetime representing current UTC time.
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Ensure a datetime is timezone-aware UTC.

    Args:
        dt: A datetime object (naive or aware) or None.

    Returns:
        Timezone-aware UTC datetime or None.

    Note:
        - If dt is None, returns None
        - If dt is naive, assumes UTC and adds tzinfo
        - If dt is aware, converts to UTC
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        # Naive datetime - assume UTC
        return dt.replace(tzinfo=timezone.utc)

    # Already aware - convert to UTC
    return dt.astimezone(timezone.utc)


def days_before(moment: datetime, days: int) -> datetime:
    """Get the datetime N days before a reference moment.

    Args:
        moment: Reference datetime.
        days: Number of days to go back.

    Returns:
        Timezone-aware UTC datetime.
    """
    return ensure_utc(moment) - timedelta(days=days)


def days_after(moment: datetime, days: int) -> datetime:
    """Get the datetime N days after a reference moment.

    Args:
        moment: Reference datetime.
        days: Number of days to add.

    Returns:
        Timezone-aware UTC datetime.
    """
    return ensure_utc(moment) + timedelta(days=days)


def days_between(start: datetime, end: datetime) -> float:
    """Fractional number of days from start to end.

    Args:
        start: Start datetime.
        end: End datetime.

    Returns:
        Days elapsed (negative if end precedes start).
    """
    return (ensure_utc(end) - ensure_utc(start)).total_seconds() / SECONDS_PER_DAY


def format_iso(dt: datetime | None) -> str | None:
    """Format a datetime as ISO 8601 string.

    Args:
        dt: Datetime to format.

    Returns:
        ISO 8601 formatted string or None.
    """
    if dt is None:
        return None

    dt_utc = ensure_utc(dt)
    return dt_utc.isoformat()


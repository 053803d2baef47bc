# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Utility functions and helpers for the assessment engine.

This package contains cross-cutting utilities:
- logging: Structured logging with structlog
- datetime: Timezone-aware datetime operations
"""

from src.utils.datetime import (
    days_after,
    days_before,
    days_between,
    ensure_utc,
    format_iso,
    utc_now,
)
from src.utils.logging import (
    bound_context,
    setup_logging,
)

__all__ = [
    # Logging
    "setup_logging",
    "bound_context",
    # Datetime
    "utc_now",
    "ensure_utc",
    "days_before",
    "days_after",
    "days_between",
    "format_iso",
]

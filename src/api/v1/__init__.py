# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API v1 routes package.

Modules:
    emotional_intelligence: Analysis views, milestone recording and
        engine health.
"""

from fastapi import APIRouter

from src.api.v1 import emotional_intelligence

# Create the main v1 router
router = APIRouter(prefix="/api/v1")

router.include_router(
    emotional_intelligence.router,
    prefix="/emotional-intelligence",
    tags=["Emotional Intelligence"],
)

__all__ = ["router"]

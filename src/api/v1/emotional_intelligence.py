# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Emotional intelligence API endpoints.

Every GET endpoint runs one fresh analysis and returns a view of it:
- GET /analysis/{subject_id} - Full analysis result
- GET /competencies/{subject_id} - Competency profile
- GET /growth/{subject_id} - Growth analysis
- GET /patterns/{subject_id} - Pattern analysis
- GET /recommendations/{subject_id} - Recommendation tiers
- GET /dashboard/{subject_id} - Dashboard summary
- POST /milestones/{subject_id} - Record a milestone
- GET /health - Engine health

Example:
    GET /api/v1/emotional-intelligence/dashboard/s-1?subject_age=10

subject_age is required on every analysis view; there is no default stage.
"""

import logging
from datetime import datetime
from typing import Any, Callable

from fastapi import APIRouter, Query, status
from pydantic import BaseModel, Field

from src.api.dependencies import EIServiceDep
from src.core.config import get_settings
from src.core.emotional_intelligence import (
    AnalysisRequest,
    AnalysisResult,
    EmotionalIntelligenceService,
    competency_view,
    dashboard_summary,
    growth_view,
    pattern_view,
    recommendations_view,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# ============================================================================
# Request Models
# ============================================================================


class MilestoneCreateRequest(BaseModel):
    """Request to record a milestone."""

    milestone_type: str = Field(
        description="Milestone type",
        examples=["emotional_breakthrough", "conflict_resolved"],
    )
    achievement: str = Field(description="What was achieved")
    context: str = Field(default="", description="Optional context")


# ============================================================================
# Response Models
# ============================================================================


class MilestoneResponse(BaseModel):
    """A recorded milestone."""

    record_id: str = Field(description="Milestone record ID")
    subject_id: str = Field(description="Subject ID")
    milestone_type: str = Field(description="Milestone type")
    achievement: str = Field(description="What was achieved")
    context: str = Field(description="Context")
    recorded_at: datetime = Field(description="When the milestone was recorded")


# ============================================================================
# Helpers
# ============================================================================


async def _analyze(
    service: EmotionalIntelligenceService,
    subject_id: str,
    subject_age: int,
    time_window_days: int | None,
    include_recommendations: bool,
) -> AnalysisResult:
    """Build a request from query parameters and run one analysis."""
    defaults = get_settings().ei
    request = AnalysisRequest.create(
        subject_id=subject_id,
        subject_age=subject_age,
        time_window_days=(
            defaults.default_time_window_days if time_window_days is None else time_window_days
        ),
        include_recommendations=include_recommendations,
    )
    return await service.analyze(request)


async def _view(
    service: EmotionalIntelligenceService,
    subject_id: str,
    subject_age: int,
    time_window_days: int | None,
    include_recommendations: bool,
    view: Callable[[AnalysisResult], dict[str, Any]],
) -> dict[str, Any]:
    result = await _analyze(
        service, subject_id, subject_age, time_window_days, include_recommendations
    )
    return view(result)


# ============================================================================
# Endpoints
# ============================================================================


@router.get("/analysis/{subject_id}")
async def get_analysis(
    subject_id: str,
    service: EIServiceDep,
    subject_age: int = Query(description="Subject age in years"),
    time_window_days: int | None = Query(default=None, description="Analysis window in days"),
    include_recommendations: bool = Query(default=True),
) -> dict[str, Any]:
    """Run a full analysis and return the complete result."""
    return await _view(
        service,
        subject_id,
        subject_age,
        time_window_days,
        include_recommendations,
        lambda result: result.to_dict(),
    )


@router.get("/competencies/{subject_id}")
async def get_competencies(
    subject_id: str,
    service: EIServiceDep,
    subject_age: int = Query(),
    time_window_days: int | None = Query(default=None),
    include_recommendations: bool = Query(default=True),
) -> dict[str, Any]:
    """Competency profile with stage alignment."""
    return await _view(
        service, subject_id, subject_age, time_window_days, include_recommendations,
        competency_view,
    )


@router.get("/growth/{subject_id}")
async def get_growth(
    subject_id: str,
    service: EIServiceDep,
    subject_age: int = Query(),
    time_window_days: int | None = Query(default=None),
    include_recommendations: bool = Query(default=True),
) -> dict[str, Any]:
    """Growth trends, milestones and projections."""
    return await _view(
        service, subject_id, subject_age, time_window_days, include_recommendations,
        growth_view,
    )


@router.get("/patterns/{subject_id}")
async def get_patterns(
    subject_id: str,
    service: EIServiceDep,
    subject_age: int = Query(),
    time_window_days: int | None = Query(default=None),
    include_recommendations: bool = Query(default=True),
) -> dict[str, Any]:
    """Emotional patterns and data summary."""
    return await _view(
        service, subject_id, subject_age, time_window_days, include_recommendations,
        pattern_view,
    )


@router.get("/recommendations/{subject_id}")
async def get_recommendations(
    subject_id: str,
    service: EIServiceDep,
    subject_age: int = Query(),
    time_window_days: int | None = Query(default=None),
    include_recommendations: bool = Query(default=True),
) -> dict[str, Any]:
    """Recommendation tiers, or the reason they are absent."""
    return await _view(
        service, subject_id, subject_age, time_window_days, include_recommendations,
        recommendations_view,
    )


@router.get("/dashboard/{subject_id}")
async def get_dashboard(
    subject_id: str,
    service: EIServiceDep,
    subject_age: int = Query(),
    time_window_days: int | None = Query(default=None),
    include_recommendations: bool = Query(default=True),
) -> dict[str, Any]:
    """Compact dashboard summary."""
    return await _view(
        service, subject_id, subject_age, time_window_days, include_recommendations,
        lambda result: dashboard_summary(result, service.config),
    )


@router.post(
    "/milestones/{subject_id}",
    response_model=MilestoneResponse,
    status_code=status.HTTP_201_CREATED,
)
async def record_milestone(
    subject_id: str,
    body: MilestoneCreateRequest,
    service: EIServiceDep,
) -> MilestoneResponse:
    """Record a milestone. It appears in the next analysis."""
    record = await service.record_milestone(
        subject_id=subject_id,
        milestone_type=body.milestone_type,
        achievement=body.achievement,
        context=body.context,
    )
    return MilestoneResponse(
        record_id=record.record_id,
        subject_id=record.subject_id,
        milestone_type=record.milestone_type,
        achievement=record.achievement,
        context=record.context,
        recorded_at=record.recorded_at,
    )


@router.get("/health")
async def engine_health(service: EIServiceDep) -> dict[str, Any]:
    """Engine status and taxonomy sizes."""
    return service.health()

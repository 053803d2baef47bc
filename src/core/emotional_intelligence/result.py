# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Analysis result assembly and read-only views.

The AnalysisResult is the root record of one run. Every view below is a
pure projection of an already computed result, so the same result always
yields the same view and no view triggers another analysis.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from src.core.emotional_intelligence.competencies import CompetencyProfile
from src.core.emotional_intelligence.config import EIConfig
from src.core.emotional_intelligence.constants import (
    AnalysisOutcome,
    DataQualityLevel,
    RecommendationStatus,
)
from src.core.emotional_intelligence.growth import GrowthAnalysis
from src.core.emotional_intelligence.insights import Insight, RecommendationTiers
from src.core.emotional_intelligence.patterns import PatternAnalysis
from src.core.emotional_intelligence.quality import DataQuality
from src.core.emotional_intelligence.signals import EmotionalDataSummary
from src.core.emotional_intelligence.stages import StageMatch
from src.utils.datetime import days_after, format_iso


@dataclass(frozen=True)
class AnalysisMetadata:
    """Run-level metadata of an analysis.

    Attributes:
        outcome: complete or insufficient_data.
        data_quality: Data quality estimate.
        confidence: Overall confidence in [0, 1].
        recommendations_status: Whether recommendations were generated.
        recommendations_reason: Why recommendations are absent, if they are.
        next_analysis_date: Suggested date of the next analysis.
    """

    outcome: AnalysisOutcome
    data_quality: DataQuality
    confidence: float
    recommendations_status: RecommendationStatus
    recommendations_reason: str | None
    next_analysis_date: datetime

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "outcome": self.outcome.value,
            "data_quality": self.data_quality.to_dict(),
            "confidence": self.confidence,
            "recommendations_status": self.recommendations_status.value,
            "recommendations_reason": self.recommendations_reason,
            "next_analysis_date": format_iso(self.next_analysis_date),
        }


@dataclass(frozen=True)
class AnalysisResult:
    """Complete result of one analysis run. Regenerated per request."""

    subject_id: str
    snapshot_id: str
    analysis_date: datetime
    window_start: datetime
    time_window_days: int
    subject_age: int
    summary: EmotionalDataSummary
    patterns: PatternAnalysis
    profile: CompetencyProfile
    stage_match: StageMatch
    growth: GrowthAnalysis
    insights: tuple[Insight, ...]
    recommendations: RecommendationTiers | None
    metadata: AnalysisMetadata

    @property
    def is_complete(self) -> bool:
        """Whether the run had enough data for a full result."""
        return self.metadata.outcome == AnalysisOutcome.COMPLETE

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "subject_id": self.subject_id,
            "snapshot_id": self.snapshot_id,
            "analysis_date": format_iso(self.analysis_date),
            "time_window": _time_window(self),
            "subject_age": self.subject_age,
            "emotional_data_summary": self.summary.to_dict(),
            "pattern_analysis": self.patterns.to_dict(),
            "competency_profile": self.profile.to_dict(),
            "developmental_stage": self.stage_match.to_dict(),
            "growth_analysis": self.growth.to_dict(),
            "insights": [i.to_dict() for i in self.insights],
            "recommendations": self.recommendations.to_dict() if self.recommendations else None,
            "metadata": self.metadata.to_dict(),
        }


def overall_confidence(
    summary: EmotionalDataSummary,
    patterns: PatternAnalysis,
    config: EIConfig,
) -> float:
    """Blend data quantity, vocabulary diversity and engagement consistency.

    Args:
        summary: Emotional-data summary.
        patterns: Pattern analysis.
        config: EI configuration.

    Returns:
        Confidence in [0, 1].
    """
    settings = config.confidence
    quantity = min(1.0, summary.total_points / settings.quantity_target)
    diversity = min(1.0, summary.vocabulary_size / settings.diversity_target)
    consistency = patterns.signal("engagement_consistency")
    value = (
        settings.quantity_weight * quantity
        + settings.diversity_weight * diversity
        + settings.pattern_weight * consistency
    )
    return round(min(1.0, max(0.0, value)), 4)


def assemble_result(
    *,
    subject_id: str,
    snapshot_id: str,
    analysis_date: datetime,
    window_start: datetime,
    time_window_days: int,
    subject_age: int,
    summary: EmotionalDataSummary,
    patterns: PatternAnalysis,
    profile: CompetencyProfile,
    stage_match: StageMatch,
    growth: GrowthAnalysis,
    insights: tuple[Insight, ...],
    quality: DataQuality,
    recommendations: RecommendationTiers | None,
    include_recommendations: bool,
    next_analysis_interval_days: int,
    config: EIConfig,
) -> AnalysisResult:
    """Build the AnalysisResult of a run.

    Recommendations are dropped unless the data quality allows them and
    the caller asked for them; the reason is recorded in the metadata.

    Returns:
        AnalysisResult.
    """
    reasons = config.catalog.reasons
    if not quality.allows_recommendations:
        status = RecommendationStatus.INSUFFICIENT_DATA
        reason = reasons["insufficient_data"].format(
            level=quality.level.value,
            min_points=config.quality.min_data_points,
        )
    elif not include_recommendations or recommendations is None:
        status = RecommendationStatus.NOT_REQUESTED
        reason = reasons["not_requested"]
    else:
        status = RecommendationStatus.GENERATED
        reason = None

    outcome = (
        AnalysisOutcome.INSUFFICIENT_DATA
        if quality.level == DataQualityLevel.LOW
        else AnalysisOutcome.COMPLETE
    )

    metadata = AnalysisMetadata(
        outcome=outcome,
        data_quality=quality,
        confidence=overall_confidence(summary, patterns, config),
        recommendations_status=status,
        recommendations_reason=reason,
        next_analysis_date=days_after(analysis_date, next_analysis_interval_days),
    )

    return AnalysisResult(
        subject_id=subject_id,
        snapshot_id=snapshot_id,
        analysis_date=analysis_date,
        window_start=window_start,
        time_window_days=time_window_days,
        subject_age=subject_age,
        summary=summary,
        patterns=patterns,
        profile=profile,
        stage_match=stage_match,
        growth=growth,
        insights=insights,
        recommendations=recommendations if status == RecommendationStatus.GENERATED else None,
        metadata=metadata,
    )


def _time_window(result: AnalysisResult) -> dict[str, Any]:
    return {
        "start": format_iso(result.window_start),
        "end": format_iso(result.analysis_date),
        "days": result.time_window_days,
    }


def _header(result: AnalysisResult) -> dict[str, Any]:
    return {
        "subject_id": result.subject_id,
        "snapshot_id": result.snapshot_id,
        "analysis_date": format_iso(result.analysis_date),
    }


def competency_view(result: AnalysisResult) -> dict[str, Any]:
    """Competency profile with stage context."""
    return {
        **_header(result),
        **result.profile.to_dict(),
        "developmental_stage": result.stage_match.to_dict(),
        "data_quality": result.metadata.data_quality.to_dict(),
    }


def growth_view(result: AnalysisResult) -> dict[str, Any]:
    """Growth analysis with the vocabulary it was computed from."""
    return {
        **_header(result),
        "time_window": _time_window(result),
        "growth_analysis": result.growth.to_dict(),
        "vocabulary": {
            "size": result.summary.vocabulary_size,
            "words": list(result.summary.vocabulary),
        },
        "data_quality": result.metadata.data_quality.to_dict(),
    }


def pattern_view(result: AnalysisResult) -> dict[str, Any]:
    """Pattern analysis with the emotional-data summary."""
    return {
        **_header(result),
        "time_window": _time_window(result),
        "emotional_data_summary": result.summary.to_dict(),
        "pattern_analysis": result.patterns.to_dict(),
    }


def recommendations_view(result: AnalysisResult) -> dict[str, Any]:
    """Recommendation tiers and actionable insights."""
    metadata = result.metadata
    return {
        **_header(result),
        "status": metadata.recommendations_status.value,
        "reason": metadata.recommendations_reason,
        "recommendations": (
            result.recommendations.to_dict() if result.recommendations else None
        ),
        "actionable_insights": [i.to_dict() for i in result.insights if i.actionable],
        "data_quality": metadata.data_quality.to_dict(),
    }


def dashboard_summary(result: AnalysisResult, config: EIConfig) -> dict[str, Any]:
    """Compact summary for a dashboard.

    Args:
        result: Computed analysis result.
        config: EI configuration, for the presentation bounds.

    Returns:
        Dashboard dictionary.
    """
    presentation = config.presentation
    metadata = result.metadata
    immediate = result.recommendations.immediate if result.recommendations else ()

    return {
        "subject_id": result.subject_id,
        "overall_score": result.profile.overall_score,
        "data_quality_label": metadata.data_quality.level.value,
        "confidence": metadata.confidence,
        "time_window": _time_window(result),
        "last_analysis": format_iso(result.analysis_date),
        "competency_scores": result.profile.scores,
        "top_insights": [i.to_dict() for i in result.insights[: presentation.top_insights]],
        "top_recommendations": [
            r.to_dict() for r in immediate[: presentation.top_recommendations]
        ],
        "vocabulary_sample": {
            "size": result.summary.vocabulary_size,
            "recent": list(result.summary.recent_vocabulary[: presentation.vocabulary_sample]),
        },
        "growth_trend_label": result.growth.overall_trend.value.replace("_", " ").title(),
        "strengths": [s.name for s in result.profile.strengths],
        "development_areas": [d.name for d in result.profile.development_areas],
        "milestones": [m.to_dict() for m in result.growth.milestones],
        "next_analysis_date": format_iso(metadata.next_analysis_date),
    }

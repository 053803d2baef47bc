# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for result assembly and views."""

from datetime import datetime, timedelta

import pytest
import pytest_asyncio

from src.core.emotional_intelligence.config import EIConfig
from src.core.emotional_intelligence.constants import (
    AnalysisOutcome,
    CompetencyKey,
    RecommendationStatus,
)
from src.core.emotional_intelligence.patterns import PatternAnalyzer
from src.core.emotional_intelligence.repository import InMemoryEmotionalDataSource
from src.core.emotional_intelligence.result import (
    AnalysisResult,
    competency_view,
    dashboard_summary,
    growth_view,
    overall_confidence,
    pattern_view,
    recommendations_view,
)
from src.core.emotional_intelligence.service import (
    AnalysisRequest,
    EmotionalIntelligenceService,
)
from src.core.emotional_intelligence.signals import summarize_points


@pytest_asyncio.fixture
async def result(
    service: EmotionalIntelligenceService,
    seeded_source: InMemoryEmotionalDataSource,
) -> AnalysisResult:
    """Provide the analysis of the sample records."""
    return await service.analyze(AnalysisRequest(subject_id="s-1", subject_age=12))


class TestOverallConfidence:
    """Tests for overall_confidence."""

    def test_no_data_is_zero(self, ei_config: EIConfig) -> None:
        """Test the confidence of an empty run."""
        patterns = PatternAnalyzer(ei_config).analyze(())

        assert overall_confidence(summarize_points(()), patterns, ei_config) == 0.0


class TestAnalysisResult:
    """Tests for the assembled result."""

    @pytest.mark.asyncio
    async def test_to_dict_sections(self, result: AnalysisResult) -> None:
        """Test the top-level sections of a serialized result."""
        data = result.to_dict()

        assert {
            "time_window",
            "emotional_data_summary",
            "pattern_analysis",
            "competency_profile",
            "developmental_stage",
            "growth_analysis",
            "insights",
            "recommendations",
            "metadata",
        } <= set(data)
        assert data["time_window"]["days"] == 30

    @pytest.mark.asyncio
    async def test_metadata(self, result: AnalysisResult, now: datetime) -> None:
        """Test outcome, status and next analysis date."""
        metadata = result.metadata

        assert result.is_complete
        assert metadata.outcome == AnalysisOutcome.COMPLETE
        assert metadata.recommendations_status == RecommendationStatus.GENERATED
        assert metadata.recommendations_reason is None
        assert metadata.next_analysis_date == now + timedelta(days=7)
        assert 0.0 < metadata.confidence <= 1.0

    @pytest.mark.asyncio
    async def test_analysis_date_is_fetch_time(self, result: AnalysisResult, now: datetime) -> None:
        """Test the analysis and window dates."""
        assert result.analysis_date == now
        assert result.window_start == now - timedelta(days=30)


class TestViews:
    """Tests for the read-only views."""

    @pytest.mark.asyncio
    async def test_views_are_pure(self, result: AnalysisResult, ei_config: EIConfig) -> None:
        """Test that a view of the same result never changes."""
        for view in (competency_view, growth_view, pattern_view, recommendations_view):
            assert view(result) == view(result)
        assert dashboard_summary(result, ei_config) == dashboard_summary(result, ei_config)

    @pytest.mark.asyncio
    async def test_competency_view(self, result: AnalysisResult) -> None:
        """Test the competency view."""
        view = competency_view(result)

        assert view["snapshot_id"] == result.snapshot_id
        assert list(view["competencies"]) == [key.value for key in CompetencyKey]
        assert view["developmental_stage"]["stage"] == "middle_school"

    @pytest.mark.asyncio
    async def test_recommendations_view(self, result: AnalysisResult) -> None:
        """Test that only actionable insights are listed."""
        view = recommendations_view(result)

        assert view["status"] == "generated"
        assert view["recommendations"]["immediate"]
        assert all(i["actionable"] for i in view["actionable_insights"])

    @pytest.mark.asyncio
    async def test_dashboard_summary(self, result: AnalysisResult, ei_config: EIConfig) -> None:
        """Test the bounds of the dashboard."""
        dashboard = dashboard_summary(result, ei_config)

        assert set(dashboard["competency_scores"]) == {key.value for key in CompetencyKey}
        assert len(dashboard["top_insights"]) <= ei_config.presentation.top_insights
        assert len(dashboard["top_recommendations"]) <= ei_config.presentation.top_recommendations
        assert len(dashboard["vocabulary_sample"]["recent"]) <= 8
        assert dashboard["vocabulary_sample"]["recent"][0] == "happy"
        assert dashboard["overall_score"] == result.profile.overall_score
        assert dashboard["growth_trend_label"] == (
            result.growth.overall_trend.value.replace("_", " ").title()
        )

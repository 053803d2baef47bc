# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for insight and recommendation generation."""

from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any

import pytest

from src.core.emotional_intelligence.competencies import CompetencyAssessor
from src.core.emotional_intelligence.config import EIConfig
from src.core.emotional_intelligence.constants import (
    DataQualityLevel,
    InsightType,
    Significance,
)
from src.core.emotional_intelligence.growth import GrowthAnalyzer
from src.core.emotional_intelligence.insights import (
    Insight,
    InsightGenerator,
    rank_insights,
)
from src.core.emotional_intelligence.patterns import PatternAnalyzer
from src.core.emotional_intelligence.quality import DataQualityEstimator
from src.core.emotional_intelligence.signals import (
    EmotionalDataPoint,
    RawEmotionalRecord,
    normalize_records,
)
from src.core.emotional_intelligence.stages import StageMatcher


@pytest.fixture
def pipeline(ei_config: EIConfig, now: datetime) -> Callable[..., dict[str, Any]]:
    """Provide a helper running every stage up to insights."""

    def _run(points: list[EmotionalDataPoint], age: int = 12) -> dict[str, Any]:
        patterns = PatternAnalyzer(ei_config).analyze(points)
        profile = CompetencyAssessor(ei_config).assess(points, patterns)
        growth = GrowthAnalyzer(ei_config).analyze(
            points, patterns, now - timedelta(days=30), now
        )
        matcher = StageMatcher(ei_config)
        stage_match = matcher.match(matcher.resolve(age), profile, patterns)
        quality = DataQualityEstimator(ei_config).estimate(points)
        return {
            "profile": profile,
            "patterns": patterns,
            "growth": growth,
            "stage_match": stage_match,
            "quality": quality,
        }

    return _run


@pytest.fixture
def generator(ei_config: EIConfig) -> InsightGenerator:
    """Provide an insight generator."""
    return InsightGenerator(ei_config)


def _insight(significance: Significance, category: str, title: str) -> Insight:
    return Insight(
        insight_type=InsightType.PATTERN,
        category=category,
        title=title,
        description="",
        significance=significance,
    )


class TestRankInsights:
    """Tests for rank_insights."""

    def test_significance_then_category_then_input_order(self) -> None:
        """Test the ordering rule and its tie-break."""
        insights = [
            _insight(Significance.LOW, "a", "low"),
            _insight(Significance.MEDIUM, "b", "medium-b-1"),
            _insight(Significance.HIGH, "z", "high"),
            _insight(Significance.MEDIUM, "a", "medium-a"),
            _insight(Significance.MEDIUM, "b", "medium-b-2"),
        ]

        ranked = rank_insights(insights)

        assert [i.title for i in ranked] == [
            "high",
            "medium-a",
            "medium-b-1",
            "medium-b-2",
            "low",
        ]


class TestGenerateInsights:
    """Tests for InsightGenerator.generate_insights."""

    def test_sparse_data_reports_low_quality(
        self,
        generator: InsightGenerator,
        pipeline: Callable[..., dict[str, Any]],
        make_point: Callable[..., EmotionalDataPoint],
    ) -> None:
        """Test that a Low quality run carries a high-significance quality insight."""
        stages = pipeline([make_point()])

        insights = generator.generate_insights(**stages)

        quality = [i for i in insights if i.insight_type == InsightType.DATA_QUALITY]
        assert len(quality) == 1
        assert quality[0].significance == Significance.HIGH
        assert stages["quality"].level == DataQualityLevel.LOW

    def test_every_run_has_growth_and_stage_insights(
        self,
        generator: InsightGenerator,
        pipeline: Callable[..., dict[str, Any]],
    ) -> None:
        """Test that growth and stage insights are always present."""
        insights = generator.generate_insights(**pipeline([]))

        types = {i.insight_type for i in insights}
        assert InsightType.GROWTH in types
        assert InsightType.DEVELOPMENTAL in types

    def test_development_areas_become_insights(
        self,
        generator: InsightGenerator,
        pipeline: Callable[..., dict[str, Any]],
    ) -> None:
        """Test one development insight per development area."""
        stages = pipeline([])

        insights = generator.generate_insights(**stages)

        development = [
            i for i in insights if i.insight_type == InsightType.DEVELOPMENT_OPPORTUNITY
        ]
        assert len(development) == len(stages["profile"].development_areas)
        assert all(i.actionable for i in development)

    def test_ranking_is_deterministic(
        self,
        generator: InsightGenerator,
        pipeline: Callable[..., dict[str, Any]],
        sample_records: list[RawEmotionalRecord],
        ei_config: EIConfig,
    ) -> None:
        """Test that two generations are identical and ordered."""
        stages = pipeline(list(normalize_records(sample_records, ei_config)))

        first = generator.generate_insights(**stages)
        second = generator.generate_insights(**stages)

        assert first == second
        ranks = [{"high": 3, "medium": 2, "low": 1}[i.significance.value] for i in first]
        assert ranks == sorted(ranks, reverse=True)


class TestGenerateRecommendations:
    """Tests for InsightGenerator.generate_recommendations."""

    def test_immediate_targets_weakest_area(
        self,
        generator: InsightGenerator,
        pipeline: Callable[..., dict[str, Any]],
    ) -> None:
        """Test that the first development area drives the immediate tier."""
        stages = pipeline([])
        profile = stages["profile"]

        tiers = generator.generate_recommendations(profile, stages["stage_match"])

        assert tiers.immediate[0].category == profile.development_areas[0].key.value
        assert tiers.immediate[0].priority == Significance.HIGH
        assert len(tiers.immediate[0].actions) <= 2
        assert tiers.tier_count == 3

    def test_short_term_starts_with_stage_focus(
        self,
        generator: InsightGenerator,
        pipeline: Callable[..., dict[str, Any]],
    ) -> None:
        """Test the stage focus recommendation."""
        stages = pipeline([], age=7)

        tiers = generator.generate_recommendations(stages["profile"], stages["stage_match"])

        assert tiers.short_term[0].category == "developmental_stage"
        assert tiers.short_term[0].title == "Basic Emotion Recognition"
        assert tiers.short_term[0].timeframe == "2-3 weeks"
        assert tiers.resources == stages["stage_match"].resources

    def test_long_term_ends_with_holistic(
        self,
        generator: InsightGenerator,
        pipeline: Callable[..., dict[str, Any]],
    ) -> None:
        """Test the holistic long-term recommendation."""
        stages = pipeline([])

        tiers = generator.generate_recommendations(stages["profile"], stages["stage_match"])

        assert tiers.long_term[-1].category == "holistic_development"

    def test_exercises_are_bounded(
        self,
        generator: InsightGenerator,
        pipeline: Callable[..., dict[str, Any]],
        ei_config: EIConfig,
    ) -> None:
        """Test exercise selection for the dominant development area."""
        stages = pipeline([])
        dominant = stages["profile"].development_areas[0].key

        tiers = generator.generate_recommendations(stages["profile"], stages["stage_match"])

        assert len(tiers.exercises) <= ei_config.presentation.max_exercises
        assert tiers.exercises[0]["competency"] == dominant.value
        assert tiers.exercises[-1]["competency"] in (dominant.value, "general")

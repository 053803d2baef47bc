# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the pattern analyzer."""

from collections.abc import Callable
from datetime import datetime, timezone

import pytest

from src.core.emotional_intelligence.config import EIConfig
from src.core.emotional_intelligence.constants import (
    PATTERN_SIGNALS,
    CompetencyKey,
    PatternTrend,
    Variability,
)
from src.core.emotional_intelligence.patterns import PatternAnalyzer
from src.core.emotional_intelligence.signals import (
    EmotionalDataPoint,
    RawEmotionalRecord,
    normalize_records,
)


@pytest.fixture
def analyzer(ei_config: EIConfig) -> PatternAnalyzer:
    """Provide a pattern analyzer."""
    return PatternAnalyzer(ei_config)


def _at(day: int, hour: int) -> datetime:
    return datetime(2025, 3, day, hour, tzinfo=timezone.utc)


class TestEmptySequence:
    """Tests for an analysis of zero points."""

    def test_neutral_values(self, analyzer: PatternAnalyzer) -> None:
        """Test that zero points yield neutral blocks."""
        patterns = analyzer.analyze(())

        assert patterns.total_points == 0
        assert patterns.stability.variability == Variability.UNKNOWN
        assert patterns.stability.score == 50.0
        assert patterns.regulation.coping_balance == 0.5
        assert patterns.triggers == ()
        assert patterns.growth.trend == PatternTrend.INSUFFICIENT_DATA
        assert patterns.summary.strongest_patterns == ()
        assert patterns.summary.concern_areas == ()

    def test_all_signals_present(self, analyzer: PatternAnalyzer) -> None:
        """Test that every named signal is reported even without data."""
        patterns = analyzer.analyze(())

        assert set(patterns.signals) == set(PATTERN_SIGNALS)
        assert patterns.signal("reporting_confidence") == 0.0
        assert patterns.signal("unknown_signal") == 0.0


class TestStability:
    """Tests for stability and variability."""

    def test_constant_intensity_is_low_variability(
        self, analyzer: PatternAnalyzer, make_point: Callable[..., EmotionalDataPoint]
    ) -> None:
        """Test that identical intensities are fully stable."""
        points = [make_point(_at(d, 9), intensity=0.5) for d in (3, 4, 5, 6)]

        patterns = analyzer.analyze(points)

        assert patterns.stability.variability == Variability.LOW
        assert patterns.stability.score == 100.0
        assert "Good emotional stability" in patterns.summary.positive_indicators

    def test_alternating_extremes_are_high_variability(
        self, analyzer: PatternAnalyzer, make_point: Callable[..., EmotionalDataPoint]
    ) -> None:
        """Test that swings between 0 and 1 raise a variability concern."""
        points = [
            make_point(_at(d, 9), intensity=0.0 if d % 2 else 1.0) for d in (3, 4, 5, 6)
        ]

        patterns = analyzer.analyze(points)

        assert patterns.stability.variability == Variability.HIGH
        assert patterns.stability.score == 0.0
        assert patterns.summary.concern_areas[0].startswith("High emotional variability")


class TestCyclesAndTriggers:
    """Tests for cyclical distributions and trigger correlations."""

    def test_peak_day_hour_and_season(
        self, analyzer: PatternAnalyzer, make_point: Callable[..., EmotionalDataPoint]
    ) -> None:
        """Test peak detection over a known week."""
        points = [make_point(_at(3, 9)), make_point(_at(3, 9)), make_point(_at(4, 18))]

        cycles = analyzer.analyze(points).cycles

        assert cycles["weekly"]["peak_day"] == "Monday"
        assert cycles["daily"]["peak_hour"] == 9
        assert cycles["monthly"]["peak_day"] == 3
        assert cycles["seasonal"]["peak_season"] == "spring"

    def test_trigger_contexts_in_configured_order(
        self, analyzer: PatternAnalyzer, make_point: Callable[..., EmotionalDataPoint]
    ) -> None:
        """Test that unmatched points fall into "other", listed last."""
        points = [
            make_point(_at(3, 9), emotion="nervous", context_tags=("academic",)),
            make_point(_at(4, 9), emotion="calm"),
            make_point(_at(5, 9), emotion="happy", context_tags=("family",)),
            make_point(_at(6, 9), emotion="nervous", context_tags=("academic_stress",)),
        ]

        triggers = analyzer.analyze(points).triggers

        assert [t.context for t in triggers] == ["academic", "family", "other"]
        assert triggers[0].occurrences == 2
        assert triggers[0].dominant_emotion == "nervous"


class TestRegulationAndSocial:
    """Tests for regulation and social indicators."""

    def test_coping_balance(
        self, analyzer: PatternAnalyzer, make_point: Callable[..., EmotionalDataPoint]
    ) -> None:
        """Test the share of adaptive coping."""
        points = [
            make_point(_at(3, 9), context_tags=("adaptive_coping",)),
            make_point(_at(4, 9), context_tags=("coping_strategy_use",)),
            make_point(_at(5, 9), context_tags=("avoidance",)),
        ]

        regulation = analyzer.analyze(points).regulation

        assert regulation.adaptive_coping == 2
        assert regulation.avoidance == 1
        assert regulation.coping_balance == pytest.approx(2 / 3)

    def test_social_indicators(
        self, analyzer: PatternAnalyzer, make_point: Callable[..., EmotionalDataPoint]
    ) -> None:
        """Test empathy and collaboration counts."""
        points = [
            make_point(_at(3, 9), emotion="grateful", context_tags=("empathy", "helping_behavior")),
            make_point(_at(4, 9), emotion="excited", context_tags=("collaboration",)),
            make_point(_at(5, 9), emotion="calm"),
        ]

        patterns = analyzer.analyze(points)

        assert patterns.social.empathy_indicators == 1
        assert patterns.social.collaboration_indicators == 1
        assert patterns.social.relationship_emotions == ("excited", "grateful")
        assert patterns.signal("empathy_expression") == pytest.approx(1 / 3)


class TestEvidenceIndex:
    """Tests for the per-point evidence index."""

    def test_indicators_map_to_competencies(
        self, analyzer: PatternAnalyzer, make_point: Callable[..., EmotionalDataPoint]
    ) -> None:
        """Test that anchors map to their owning competencies in canonical order."""
        point = make_point(
            _at(3, 9),
            context_tags=("perspective_taking", "emotion_identification", "unrelated"),
        )

        patterns = analyzer.analyze([point])

        evidence = patterns.evidence[0]
        assert evidence.indicators == ("emotion_identification", "perspective_taking")
        assert evidence.competencies == (CompetencyKey.SELF_AWARENESS, CompetencyKey.EMPATHY)
        assert patterns.indicator_counts["unrelated"] == 1


class TestGrowthSubPatterns:
    """Tests for early-versus-late comparisons."""

    def test_growing_vocabulary_and_confidence(
        self, analyzer: PatternAnalyzer, make_point: Callable[..., EmotionalDataPoint]
    ) -> None:
        """Test that a richer, more confident late third reads as growing."""
        points = [
            make_point(_at(3, 9), emotion="happy", confidence=0.3),
            make_point(_at(4, 9), emotion="happy", confidence=0.3),
            make_point(_at(5, 9), emotion="calm", confidence=0.5),
            make_point(_at(6, 9), emotion="sad", confidence=0.5),
            make_point(_at(7, 9), emotion="proud", confidence=0.9,
                       secondary_emotions=("excited",)),
            make_point(_at(8, 9), emotion="curious", confidence=0.9),
        ]

        growth = analyzer.analyze(points).growth

        assert growth.vocabulary.trend == PatternTrend.GROWING
        assert growth.confidence.trend == PatternTrend.GROWING
        assert growth.complexity.trend == PatternTrend.STABLE
        assert growth.trend == PatternTrend.GROWING


class TestDeterminism:
    """Tests for reproducibility."""

    def test_same_input_same_output(
        self,
        analyzer: PatternAnalyzer,
        sample_records: list[RawEmotionalRecord],
        ei_config: EIConfig,
    ) -> None:
        """Test that two analyses of one sequence are equal."""
        points = normalize_records(sample_records, ei_config)

        assert analyzer.analyze(points).to_dict() == analyzer.analyze(points).to_dict()

    def test_strongest_patterns_bounded(
        self,
        analyzer: PatternAnalyzer,
        sample_records: list[RawEmotionalRecord],
        ei_config: EIConfig,
    ) -> None:
        """Test that at most the configured number of strong patterns is reported."""
        points = normalize_records(sample_records, ei_config)

        summary = analyzer.analyze(points).summary

        assert len(summary.strongest_patterns) <= ei_config.patterns.max_strong_patterns
        strengths = [p.strength for p in summary.strongest_patterns]
        assert strengths == sorted(strengths, reverse=True)
        assert all(s > ei_config.patterns.strong_pattern_threshold for s in strengths)

# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for developmental stage matching."""

from collections.abc import Callable

import pytest

from src.core.emotional_intelligence.competencies import CompetencyAssessor
from src.core.emotional_intelligence.config import EIConfig
from src.core.emotional_intelligence.constants import StageKey
from src.core.emotional_intelligence.exceptions import ValidationError
from src.core.emotional_intelligence.patterns import PatternAnalyzer
from src.core.emotional_intelligence.signals import EmotionalDataPoint
from src.core.emotional_intelligence.stages import StageMatch, StageMatcher


@pytest.fixture
def matcher(ei_config: EIConfig) -> StageMatcher:
    """Provide a stage matcher."""
    return StageMatcher(ei_config)


@pytest.fixture
def match_points(ei_config: EIConfig, matcher: StageMatcher) -> Callable[..., StageMatch]:
    """Provide a helper matching points against the stage of an age."""
    analyzer = PatternAnalyzer(ei_config)
    assessor = CompetencyAssessor(ei_config)

    def _match(age: int, points: list[EmotionalDataPoint]) -> StageMatch:
        patterns = analyzer.analyze(points)
        profile = assessor.assess(points, patterns)
        return matcher.match(matcher.resolve(age), profile, patterns)

    return _match


class TestResolve:
    """Tests for StageMatcher.resolve."""

    @pytest.mark.parametrize(
        ("age", "stage"),
        [
            (5, StageKey.EARLY_ELEMENTARY),
            (8, StageKey.EARLY_ELEMENTARY),
            (9, StageKey.LATE_ELEMENTARY),
            (12, StageKey.MIDDLE_SCHOOL),
            (14, StageKey.MIDDLE_SCHOOL),
            (15, StageKey.HIGH_SCHOOL),
            (18, StageKey.HIGH_SCHOOL),
        ],
    )
    def test_age_selects_one_stage(self, matcher: StageMatcher, age: int, stage: StageKey) -> None:
        """Test inclusive range edges."""
        assert matcher.resolve(age).key == stage

    @pytest.mark.parametrize("age", [-1, 0, 4, 19, 200])
    def test_age_outside_every_stage_is_rejected(self, matcher: StageMatcher, age: int) -> None:
        """Test that unsupported ages raise ValidationError."""
        with pytest.raises(ValidationError) as exc_info:
            matcher.resolve(age)

        assert exc_info.value.context["supported_range"] == [5, 18]

    @pytest.mark.parametrize("age", ["12", 12.5, True, None])
    def test_non_integer_age_is_rejected(self, matcher: StageMatcher, age: object) -> None:
        """Test that only real integers are accepted."""
        with pytest.raises(ValidationError):
            matcher.resolve(age)  # type: ignore[arg-type]


class TestMatch:
    """Tests for StageMatcher.match."""

    def test_no_evidence_means_no_alignment(
        self, match_points: Callable[..., StageMatch]
    ) -> None:
        """Test alignment and recommendations without any anchors."""
        result = match_points(10, [])

        assert result.stage_key == StageKey.LATE_ELEMENTARY
        assert result.alignment == 0.0
        assert result.met_capabilities == ()
        assert len(result.unmet_capabilities) == 4
        assert len(result.recommendations) == 3
        assert result.recommendations[0].startswith("Continue developing:")

    def test_met_capabilities_raise_alignment(
        self,
        match_points: Callable[..., StageMatch],
        make_point: Callable[..., EmotionalDataPoint],
    ) -> None:
        """Test that one anchor is enough to meet a capability."""
        points = [
            make_point(context_tags=("emotion_identification",)),
            make_point(context_tags=("mixed_emotions",)),
        ]

        result = match_points(10, points)

        assert result.alignment == 0.5
        assert result.met_capabilities == (
            "Expanded emotional vocabulary",
            "Understanding of multiple emotions simultaneously",
        )

    def test_strong_challenge_reduces_alignment(
        self,
        match_points: Callable[..., StageMatch],
        make_point: Callable[..., EmotionalDataPoint],
    ) -> None:
        """Test the penalty of a challenge evidenced on two points."""
        points = [
            make_point(context_tags=("emotion_identification", "academic_stress")),
            make_point(context_tags=("mixed_emotions", "academic_stress")),
        ]

        result = match_points(10, points)

        assert result.evidenced_challenges == ("Managing academic stress",)
        assert result.alignment == pytest.approx(0.35)

    def test_single_challenge_anchor_is_not_strong(
        self,
        match_points: Callable[..., StageMatch],
        make_point: Callable[..., EmotionalDataPoint],
    ) -> None:
        """Test that one matching point does not count as strong evidence."""
        result = match_points(10, [make_point(context_tags=("academic_stress",))])

        assert result.evidenced_challenges == ()

    def test_alignment_is_clamped(
        self,
        match_points: Callable[..., StageMatch],
        make_point: Callable[..., EmotionalDataPoint],
    ) -> None:
        """Test that penalties never push alignment below zero."""
        tags = ("emotional_overwhelm", "mood_swing", "peer_pressure", "academic_stress")
        result = match_points(13, [make_point(context_tags=tags) for _ in range(3)])

        assert result.alignment == 0.0
        assert len(result.evidenced_challenges) == 4

    def test_focus_and_resources_come_from_stage(
        self, match_points: Callable[..., StageMatch]
    ) -> None:
        """Test that the stage focus is passed through."""
        result = match_points(16, [])

        assert result.focus["title"] == "Advanced EI Integration"
        assert result.resources[0]["type"] == "workshop"

# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Competency assessment for the five EI competencies.

Each sub-competency score blends two components:

    evidence = min(1, matched_points / total_points / saturation_density)
    sub_score = 100 * (w_e * evidence + w_s * signal)

where signal is the pattern signal named by the sub-competency (0..1).
Sub-competencies without a signal are scored on evidence alone. The
competency score is the weighted mean of its sub-scores, and its level
follows the fixed boundaries in constants.LEVEL_BOUNDARIES.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Sequence

from src.core.emotional_intelligence.config import (
    CompetencyConfig,
    EIConfig,
    SubCompetencyConfig,
)
from src.core.emotional_intelligence.constants import (
    BalanceClassification,
    CompetencyKey,
    CompetencyLevel,
    score_to_level,
)
from src.core.emotional_intelligence.patterns import PatternAnalysis
from src.core.emotional_intelligence.signals import EmotionalDataPoint
from src.utils.datetime import format_iso

logger = logging.getLogger(__name__)

DEFAULT_WELL_BALANCED_BELOW = 100.0
DEFAULT_MODERATELY_BALANCED_BELOW = 300.0


@dataclass(frozen=True)
class EvidenceItem:
    """An excerpt of a data point that evidences a competency."""

    source_ref: str
    timestamp: datetime
    excerpt: str
    indicators: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "source_ref": self.source_ref,
            "timestamp": format_iso(self.timestamp),
            "excerpt": self.excerpt,
            "indicators": list(self.indicators),
        }


@dataclass(frozen=True)
class SubCompetencyAssessment:
    """Score of one named sub-competency."""

    key: str
    description: str
    score: float
    confidence: float
    matched_points: int
    evidence: tuple[EvidenceItem, ...] = ()
    signal: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "key": self.key,
            "description": self.description,
            "score": self.score,
            "confidence": round(self.confidence, 4),
            "matched_points": self.matched_points,
            "evidence": [e.to_dict() for e in self.evidence],
            "signal": self.signal,
        }


@dataclass(frozen=True)
class CompetencyAssessment:
    """Assessment of one competency.

    Attributes:
        key: Competency key.
        name: Display name.
        score: Aggregate score in [0, 100].
        level: Discrete level derived from the score.
        sub_competencies: Sub-competency breakdown.
        evidence: Consolidated evidence, most recent first.
        recommended_actions: Actions for the competency's score band.
        indicator_matches: Points carrying each indicator anchor.
    """

    key: CompetencyKey
    name: str
    score: float
    level: CompetencyLevel
    sub_competencies: tuple[SubCompetencyAssessment, ...]
    evidence: tuple[EvidenceItem, ...]
    recommended_actions: tuple[str, ...]
    indicator_matches: dict[str, int]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "key": self.key.value,
            "name": self.name,
            "score": self.score,
            "level": self.level.value,
            "sub_competencies": {s.key: s.to_dict() for s in self.sub_competencies},
            "evidence": [e.to_dict() for e in self.evidence],
            "recommended_actions": list(self.recommended_actions),
            "indicator_matches": dict(self.indicator_matches),
        }


@dataclass(frozen=True)
class RankedCompetency:
    """A competency listed as a strength or a development area."""

    key: CompetencyKey
    name: str
    score: float
    level: CompetencyLevel
    recommended_actions: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "competency": self.name,
            "key": self.key.value,
            "score": self.score,
            "level": self.level.value,
            "recommended_actions": list(self.recommended_actions),
        }


@dataclass(frozen=True)
class BalanceAnalysis:
    """Spread of the five competency scores."""

    mean: float
    variance: float
    classification: BalanceClassification

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "mean": round(self.mean, 2),
            "variance": round(self.variance, 2),
            "classification": self.classification.value,
        }


@dataclass(frozen=True)
class CompetencyProfile:
    """The five competency assessments of one run.

    One attribute per competency keeps "exactly five, always present"
    a structural property.
    """

    self_awareness: CompetencyAssessment
    self_regulation: CompetencyAssessment
    motivation: CompetencyAssessment
    empathy: CompetencyAssessment
    social_skills: CompetencyAssessment
    overall_score: float
    strengths: tuple[RankedCompetency, ...] = ()
    development_areas: tuple[RankedCompetency, ...] = ()
    balance: BalanceAnalysis | None = None

    def get(self, key: CompetencyKey) -> CompetencyAssessment:
        """Get the assessment of a competency."""
        return getattr(self, key.value)

    @property
    def assessments(self) -> tuple[CompetencyAssessment, ...]:
        """All five assessments in CompetencyKey order."""
        return tuple(self.get(key) for key in CompetencyKey)

    @property
    def scores(self) -> dict[str, float]:
        """Competency scores keyed by competency key."""
        return {a.key.value: a.score for a in self.assessments}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "competencies": {a.key.value: a.to_dict() for a in self.assessments},
            "overall_score": self.overall_score,
            "strengths": [s.to_dict() for s in self.strengths],
            "development_areas": [d.to_dict() for d in self.development_areas],
            "balance": self.balance.to_dict() if self.balance else None,
        }


def analyze_balance(
    scores: Mapping[CompetencyKey, float | None],
    well_balanced_below: float = DEFAULT_WELL_BALANCED_BELOW,
    moderately_balanced_below: float = DEFAULT_MODERATELY_BALANCED_BELOW,
) -> BalanceAnalysis | None:
    """Classify how evenly the five competency scores are spread.

    Uses the population variance of the scores.

    Args:
        scores: Score per competency.
        well_balanced_below: Variance below which scores are well balanced.
        moderately_balanced_below: Variance below which scores are
            moderately balanced.

    Returns:
        BalanceAnalysis, or None unless all five scores are present.
    """
    values = [scores.get(key) for key in CompetencyKey]
    if any(value is None for value in values):
        return None

    mean = sum(values) / len(values)
    variance = sum((value - mean) ** 2 for value in values) / len(values)

    if variance < well_balanced_below:
        classification = BalanceClassification.WELL_BALANCED
    elif variance < moderately_balanced_below:
        classification = BalanceClassification.MODERATELY_BALANCED
    else:
        classification = BalanceClassification.UNBALANCED

    return BalanceAnalysis(mean=mean, variance=variance, classification=classification)


class CompetencyAssessor:
    """Scores the five EI competencies from points and pattern output."""

    def __init__(self, config: EIConfig) -> None:
        """Initialize the assessor.

        Args:
            config: EI configuration.
        """
        self._config = config
        self._scoring = config.scoring

    def assess(
        self,
        points: Sequence[EmotionalDataPoint],
        patterns: PatternAnalysis,
    ) -> CompetencyProfile:
        """Assess all five competencies.

        Args:
            points: Normalized data points, aligned with patterns.evidence.
            patterns: Pattern analysis of the same points.

        Returns:
            CompetencyProfile with strengths, development areas and balance.
        """
        assessments = {
            key: self._assess_competency(self._config.get_competency(key), points, patterns)
            for key in CompetencyKey
        }
        scores = {key: a.score for key, a in assessments.items()}
        overall = round(sum(scores.values()) / len(scores), 2)

        order = {key: position for position, key in enumerate(CompetencyKey)}
        strengths = sorted(
            (a for a in assessments.values() if a.score >= self._scoring.strength_threshold),
            key=lambda a: (-a.score, order[a.key]),
        )
        development = sorted(
            (a for a in assessments.values() if a.score < self._scoring.development_threshold),
            key=lambda a: (a.score, order[a.key]),
        )

        profile = CompetencyProfile(
            **{key.value: assessment for key, assessment in assessments.items()},
            overall_score=overall,
            strengths=tuple(self._rank(a) for a in strengths),
            development_areas=tuple(self._rank(a) for a in development),
            balance=analyze_balance(
                scores,
                well_balanced_below=self._scoring.well_balanced_below,
                moderately_balanced_below=self._scoring.moderately_balanced_below,
            ),
        )

        logger.debug(
            "Competency assessment complete",
            extra={"overall_score": overall, "scores": profile.scores},
        )
        return profile

    def _rank(self, assessment: CompetencyAssessment) -> RankedCompetency:
        return RankedCompetency(
            key=assessment.key,
            name=assessment.name,
            score=assessment.score,
            level=assessment.level,
            recommended_actions=assessment.recommended_actions,
        )

    def action_band(self, score: float) -> str:
        """Name the action band of a score.

        Args:
            score: Competency score.

        Returns:
            "foundational", "developing" or "advanced".
        """
        if score < self._scoring.development_threshold:
            return "foundational"
        if score < self._scoring.strength_threshold:
            return "developing"
        return "advanced"

    def _assess_competency(
        self,
        competency: CompetencyConfig,
        points: Sequence[EmotionalDataPoint],
        patterns: PatternAnalysis,
    ) -> CompetencyAssessment:
        subs = tuple(self._assess_sub(sub, points, patterns) for sub in competency.sub_competencies)
        weighted = sum(
            sub_config.weight * sub.score
            for sub_config, sub in zip(competency.sub_competencies, subs)
        )
        score = round(min(100.0, max(0.0, weighted)), 2)

        indicators = set(competency.indicators)
        matched = [
            index
            for index, evidence in enumerate(patterns.evidence)
            if indicators.intersection(evidence.indicators)
        ]

        return CompetencyAssessment(
            key=competency.key,
            name=competency.name,
            score=score,
            level=score_to_level(score),
            sub_competencies=subs,
            evidence=self._excerpts(
                matched, points, patterns, indicators, self._scoring.max_evidence_per_competency
            ),
            recommended_actions=self._config.catalog.actions_for(
                competency.key, self.action_band(score)
            ),
            indicator_matches={
                indicator: patterns.indicator_counts.get(indicator, 0)
                for indicator in competency.indicators
            },
        )

    def _assess_sub(
        self,
        sub: SubCompetencyConfig,
        points: Sequence[EmotionalDataPoint],
        patterns: PatternAnalysis,
    ) -> SubCompetencyAssessment:
        scoring = self._scoring
        total = len(points)
        indicators = set(sub.indicators)
        matched = [
            index
            for index, evidence in enumerate(patterns.evidence)
            if indicators.intersection(evidence.indicators)
        ]

        density = len(matched) / total if total else 0.0
        evidence_component = min(1.0, density / scoring.evidence_saturation_density)

        if sub.signal:
            weight_total = scoring.evidence_weight + scoring.signal_weight
            blended = (
                scoring.evidence_weight * evidence_component
                + scoring.signal_weight * patterns.signal(sub.signal)
            ) / weight_total
        else:
            blended = evidence_component
        score = round(100.0 * min(1.0, max(0.0, blended)), 2)

        if total == 0:
            confidence = 0.0
        elif not matched:
            confidence = scoring.no_match_confidence
        else:
            confidence = min(1.0, len(matched) / scoring.full_confidence_matches)

        return SubCompetencyAssessment(
            key=sub.key,
            description=sub.description,
            score=score,
            confidence=confidence,
            matched_points=len(matched),
            evidence=self._excerpts(
                matched, points, patterns, indicators, scoring.max_evidence_per_sub_competency
            ),
            signal=sub.signal,
        )

    def _excerpts(
        self,
        matched: list[int],
        points: Sequence[EmotionalDataPoint],
        patterns: PatternAnalysis,
        indicators: set[str],
        limit: int,
    ) -> tuple[EvidenceItem, ...]:
        items = []
        # Points are timestamp-ordered, so walking backwards is most recent first
        for index in reversed(matched[-limit:] if limit else []):
            point = points[index]
            items.append(
                EvidenceItem(
                    source_ref=point.source_ref,
                    timestamp=point.timestamp,
                    excerpt=point.excerpt or f"{point.emotion} ({point.source.value})",
                    indicators=tuple(
                        i for i in patterns.evidence[index].indicators if i in indicators
                    ),
                )
            )
        return tuple(items)

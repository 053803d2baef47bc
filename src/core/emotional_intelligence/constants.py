# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Constants for the Emotional Intelligence Assessment Engine.

This module defines the closed sets of named variants used throughout the
assessment pipeline. Tunable numbers (weights, tolerances, thresholds) live
in the YAML configuration, not here. The only fixed numbers are the
competency level boundaries, which are part of the result contract.
"""

from enum import Enum


class CompetencyKey(str, Enum):
    """The five EI competencies. Always present, always in this order."""

    SELF_AWARENESS = "self_awareness"
    SELF_REGULATION = "self_regulation"
    MOTIVATION = "motivation"
    EMPATHY = "empathy"
    SOCIAL_SKILLS = "social_skills"


class CompetencyLevel(str, Enum):
    """Discrete competency level derived from a 0-100 score."""

    EMERGING = "Emerging"
    DEVELOPING = "Developing"
    PROFICIENT = "Proficient"
    ADVANCED = "Advanced"


class StageKey(str, Enum):
    """Developmental stage keys, youngest first."""

    EARLY_ELEMENTARY = "early_elementary"
    LATE_ELEMENTARY = "late_elementary"
    MIDDLE_SCHOOL = "middle_school"
    HIGH_SCHOOL = "high_school"


class RecordKind(str, Enum):
    """Kind of raw record in the emotional log."""

    JOURNAL = "journal"
    REFLECTION = "reflection"
    MOOD_TAG = "mood_tag"


class PointFlag(str, Enum):
    """Normalization flags attached to a data point."""

    INTENSITY_CLAMPED = "intensity_clamped"
    CONFIDENCE_CLAMPED = "confidence_clamped"
    INTENSITY_DEFAULTED = "intensity_defaulted"
    CONFIDENCE_DEFAULTED = "confidence_defaulted"
    EMOTION_INFERRED = "emotion_inferred"


class Variability(str, Enum):
    """Emotional intensity variability classification."""

    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    UNKNOWN = "unknown"


class BalanceClassification(str, Enum):
    """How evenly the five competency scores are spread."""

    WELL_BALANCED = "well-balanced"
    MODERATELY_BALANCED = "moderately-balanced"
    UNBALANCED = "unbalanced"


class VolumeTrend(str, Enum):
    """Trend labels for count-like series (vocabulary, complexity)."""

    EXPANDING = "expanding"
    CONTRACTING = "contracting"
    STABLE = "stable"
    INSUFFICIENT_DATA = "insufficient_data"


class LevelTrend(str, Enum):
    """Trend labels for mean-like series (intensity, confidence)."""

    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"
    INSUFFICIENT_DATA = "insufficient_data"


class OverallTrend(str, Enum):
    """Overall growth trend across the four trend dimensions."""

    STRONG_GROWTH = "strong_growth"
    MODERATE_GROWTH = "moderate_growth"
    STABLE = "stable"
    INSUFFICIENT_DATA = "insufficient_data"


class PatternTrend(str, Enum):
    """Early-vs-late comparison label used by growth sub-patterns."""

    GROWING = "growing"
    DECLINING = "declining"
    STABLE = "stable"
    INSUFFICIENT_DATA = "insufficient_data"


class MilestoneKind(str, Enum):
    """Milestones detected from the data itself."""

    FIRST_ENTRY = "first_entry"
    COMPLEX_EMOTION = "complex_emotion"
    HIGH_CONFIDENCE = "high_confidence"


class MilestoneSource(str, Enum):
    """Where a milestone entry came from."""

    DETECTED = "detected"
    RECORDED = "recorded"


class Significance(str, Enum):
    """Insight significance."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class InsightType(str, Enum):
    """Kind of insight produced by the generator."""

    PATTERN = "pattern"
    CONCERN = "concern"
    STRENGTH = "strength"
    DEVELOPMENT_OPPORTUNITY = "development_opportunity"
    BALANCE = "balance"
    GROWTH = "growth"
    DEVELOPMENTAL = "developmental"
    DATA_QUALITY = "data_quality"


class DataQualityLevel(str, Enum):
    """Data sufficiency level."""

    LOW = "Low"
    MODERATE = "Moderate"
    HIGH = "High"


class AnalysisOutcome(str, Enum):
    """Whether a run had enough data for a full result."""

    COMPLETE = "complete"
    INSUFFICIENT_DATA = "insufficient_data"


class RecommendationStatus(str, Enum):
    """Why the recommendation tiers are (or are not) present."""

    GENERATED = "generated"
    NOT_REQUESTED = "not_requested"
    INSUFFICIENT_DATA = "insufficient_data"


# Inclusive upper bound of each level; anything above the last bound is Advanced.
LEVEL_BOUNDARIES: tuple[tuple[float, CompetencyLevel], ...] = (
    (25, CompetencyLevel.EMERGING),
    (50, CompetencyLevel.DEVELOPING),
    (75, CompetencyLevel.PROFICIENT),
)

SIGNIFICANCE_RANK = {
    Significance.HIGH: 3,
    Significance.MEDIUM: 2,
    Significance.LOW: 1,
}

WEEKDAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

SEASON_MONTHS = {
    "winter": (12, 1, 2),
    "spring": (3, 4, 5),
    "summer": (6, 7, 8),
    "fall": (9, 10, 11),
}


def score_to_level(score: float) -> CompetencyLevel:
    """Map a 0-100 competency score to its level.

    Boundaries are inclusive upper bounds: 25 is Emerging, 26 Developing,
    50 Developing, 51 Proficient, 75 Proficient, 76 Advanced.

    Args:
        score: Competency score.

    Returns:
        The competency level.
    """
    for upper, level in LEVEL_BOUNDARIES:
        if score <= upper:
            return level
    return CompetencyLevel.ADVANCED

# Pattern signals a sub-competency may draw on; each is normalized to 0..1.
PATTERN_SIGNALS = (
    "vocabulary_richness",
    "reporting_confidence",
    "emotional_stability",
    "coping_balance",
    "support_seeking",
    "positive_affect",
    "engagement_consistency",
    "social_engagement",
    "empathy_expression",
    "collaboration",
)

ACTION_BANDS = ("foundational", "developing", "advanced")

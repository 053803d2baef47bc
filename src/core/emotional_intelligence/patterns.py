# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pattern analysis over a normalized emotional sequence.

The analyzer computes, in one linear pass per category:
- Cyclical distributions (hour of day, day of week, day of month, season)
- Trigger correlations by context
- Regulation and coping indicators
- Social indicators
- Early-vs-late growth sub-patterns
- Stability statistics
- The evidence index consumed by the competency assessor

It also derives ten normalized pattern signals (0..1) that competency
sub-scores draw on, and a summary of strongest patterns, concerns and
positive indicators.
"""

import logging
import statistics
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Sequence

from src.core.emotional_intelligence.config import EIConfig
from src.core.emotional_intelligence.constants import (
    SEASON_MONTHS,
    WEEKDAY_NAMES,
    CompetencyKey,
    PatternTrend,
    Variability,
)
from src.core.emotional_intelligence.signals import EmotionalDataPoint
from src.utils.datetime import format_iso

logger = logging.getLogger(__name__)

OTHER_CONTEXT = "other"
NEUTRAL_STABILITY_SCORE = 50.0
NEUTRAL_COPING_BALANCE = 0.5
SECONDARY_EMOTION_WEIGHT = 0.5


def _round(value: float | None, digits: int = 4) -> float | None:
    return None if value is None else round(value, digits)


def _mean(values: Sequence[float]) -> float | None:
    return sum(values) / len(values) if values else None


def _peak(counts: Counter) -> Any:
    """Key with the highest count; ties go to the smallest key."""
    if not counts:
        return None
    return min(counts.items(), key=lambda item: (-item[1], item[0]))[0]


@dataclass(frozen=True)
class PointEvidence:
    """Competency indicator anchors matched by one data point."""

    source_ref: str
    timestamp: datetime
    indicators: tuple[str, ...]
    competencies: tuple[CompetencyKey, ...]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "source_ref": self.source_ref,
            "timestamp": format_iso(self.timestamp),
            "indicators": list(self.indicators),
            "competencies": [key.value for key in self.competencies],
        }


@dataclass(frozen=True)
class TriggerCorrelation:
    """Emotions observed in one trigger context."""

    context: str
    occurrences: int
    emotions: dict[str, int]
    dominant_emotion: str | None
    mean_intensity: float | None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "context": self.context,
            "occurrences": self.occurrences,
            "emotions": dict(self.emotions),
            "dominant_emotion": self.dominant_emotion,
            "mean_intensity": _round(self.mean_intensity),
        }


@dataclass(frozen=True)
class RegulationPatterns:
    """Coping and regulation counters."""

    adaptive_coping: int = 0
    avoidance: int = 0
    support_seeking: int = 0
    strategies: tuple[str, ...] = ()

    @property
    def coping_balance(self) -> float:
        """Share of adaptive coping among adaptive and avoidant points."""
        total = self.adaptive_coping + self.avoidance
        if total == 0:
            return NEUTRAL_COPING_BALANCE
        return self.adaptive_coping / total

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "adaptive_coping": self.adaptive_coping,
            "avoidance": self.avoidance,
            "support_seeking": self.support_seeking,
            "strategies": list(self.strategies),
            "coping_balance": _round(self.coping_balance),
        }


@dataclass(frozen=True)
class SocialPatterns:
    """Social, empathy and collaboration counters."""

    social_interactions: int = 0
    empathy_indicators: int = 0
    collaboration_indicators: int = 0
    relationship_emotions: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "social_interactions": self.social_interactions,
            "empathy_indicators": self.empathy_indicators,
            "collaboration_indicators": self.collaboration_indicators,
            "relationship_emotions": list(self.relationship_emotions),
        }


@dataclass(frozen=True)
class TrendComparison:
    """Early-third versus late-third comparison of one dimension."""

    early: float | None = None
    late: float | None = None
    trend: PatternTrend = PatternTrend.INSUFFICIENT_DATA

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "early": _round(self.early),
            "late": _round(self.late),
            "trend": self.trend.value,
        }


@dataclass(frozen=True)
class GrowthPatterns:
    """Growth sub-patterns of the pattern analysis."""

    vocabulary: TrendComparison = field(default_factory=TrendComparison)
    confidence: TrendComparison = field(default_factory=TrendComparison)
    complexity: TrendComparison = field(default_factory=TrendComparison)
    trend: PatternTrend = PatternTrend.INSUFFICIENT_DATA

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "vocabulary": self.vocabulary.to_dict(),
            "confidence": self.confidence.to_dict(),
            "complexity": self.complexity.to_dict(),
            "trend": self.trend.value,
        }


@dataclass(frozen=True)
class StabilityPatterns:
    """Intensity stability statistics."""

    score: float = NEUTRAL_STABILITY_SCORE
    variability: Variability = Variability.UNKNOWN
    mean_intensity: float | None = None
    standard_deviation: float | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "score": _round(self.score, 2),
            "variability": self.variability.value,
            "mean_intensity": _round(self.mean_intensity),
            "standard_deviation": _round(self.standard_deviation),
        }


@dataclass(frozen=True)
class StrongPattern:
    """A pattern signal above the strong-pattern threshold."""

    name: str
    strength: float
    description: str
    recommendations: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "strength": _round(self.strength),
            "description": self.description,
            "recommendations": list(self.recommendations),
        }


@dataclass(frozen=True)
class PatternSummary:
    """Strongest patterns, concern areas and positive indicators."""

    strongest_patterns: tuple[StrongPattern, ...] = ()
    concern_areas: tuple[str, ...] = ()
    positive_indicators: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "strongest_patterns": [p.to_dict() for p in self.strongest_patterns],
            "concern_areas": list(self.concern_areas),
            "positive_indicators": list(self.positive_indicators),
        }


@dataclass(frozen=True)
class PatternAnalysis:
    """Complete pattern analysis of one normalized sequence.

    Attributes:
        total_points: Number of analyzed points.
        cycles: Hourly, weekly, monthly and seasonal distributions.
        triggers: Trigger correlations in configured context order.
        regulation: Coping and regulation counters.
        social: Social indicators.
        growth: Early-vs-late growth sub-patterns.
        stability: Stability statistics.
        signals: Normalized pattern signals (0..1) by name.
        evidence: Per-point evidence, aligned with the analyzed points.
        indicator_counts: Number of points carrying each tag.
        summary: Strongest patterns, concerns and positives.
        emotion_frequency: Weighted emotion frequency.
        vocabulary: Sorted distinct emotions.
        active_days: Number of distinct days with data.
    """

    total_points: int
    cycles: dict[str, Any]
    triggers: tuple[TriggerCorrelation, ...]
    regulation: RegulationPatterns
    social: SocialPatterns
    growth: GrowthPatterns
    stability: StabilityPatterns
    signals: dict[str, float]
    evidence: tuple[PointEvidence, ...]
    indicator_counts: dict[str, int]
    summary: PatternSummary
    emotion_frequency: dict[str, float]
    vocabulary: tuple[str, ...]
    active_days: int

    def signal(self, name: str) -> float:
        """Get a pattern signal by name (0.0 when unknown)."""
        return self.signals.get(name, 0.0)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "total_points": self.total_points,
            "cycles": self.cycles,
            "triggers": [t.to_dict() for t in self.triggers],
            "regulation": self.regulation.to_dict(),
            "social": self.social.to_dict(),
            "growth": self.growth.to_dict(),
            "stability": self.stability.to_dict(),
            "signals": {name: _round(value) for name, value in self.signals.items()},
            "evidence": [e.to_dict() for e in self.evidence],
            "indicator_counts": dict(self.indicator_counts),
            "summary": self.summary.to_dict(),
            "emotion_frequency": dict(self.emotion_frequency),
            "vocabulary": list(self.vocabulary),
            "active_days": self.active_days,
        }


class PatternAnalyzer:
    """Computes the PatternAnalysis of a normalized sequence.

    Example:
        analyzer = PatternAnalyzer(get_ei_config())
        patterns = analyzer.analyze(points)
        print(patterns.stability.variability)
    """

    def __init__(self, config: EIConfig) -> None:
        """Initialize the analyzer.

        Args:
            config: EI configuration.
        """
        self._config = config
        self._settings = config.patterns
        self._groups = config.lexicon.indicator_groups

    def analyze(self, points: Sequence[EmotionalDataPoint]) -> PatternAnalysis:
        """Analyze a timestamp-ordered sequence of data points.

        Args:
            points: Normalized data points.

        Returns:
            PatternAnalysis. With zero points every block is neutral or
            empty and stability variability is "unknown".
        """
        evidence = self._evidence_index(points)
        regulation = self._regulation(points)
        social = self._social(points)
        stability = self._stability(points)
        growth = self._growth(points, evidence)
        frequency = self._emotion_frequency(points)
        active_days = len({p.timestamp.date() for p in points})
        signals = self._signals(points, regulation, social, stability, frequency, active_days)

        indicator_counts: Counter[str] = Counter()
        for point in points:
            indicator_counts.update(point.context_tags)

        analysis = PatternAnalysis(
            total_points=len(points),
            cycles=self._cycles(points),
            triggers=self._triggers(points),
            regulation=regulation,
            social=social,
            growth=growth,
            stability=stability,
            signals=signals,
            evidence=evidence,
            indicator_counts=dict(sorted(indicator_counts.items())),
            summary=self._summary(len(points), signals, regulation, social, stability, growth),
            emotion_frequency=frequency,
            vocabulary=tuple(frequency),
            active_days=active_days,
        )

        logger.debug(
            "Pattern analysis complete",
            extra={
                "points": len(points),
                "variability": stability.variability.value,
                "strong_patterns": len(analysis.summary.strongest_patterns),
            },
        )
        return analysis

    def _cycles(self, points: Sequence[EmotionalDataPoint]) -> dict[str, Any]:
        hours: Counter[int] = Counter()
        weekdays: Counter[int] = Counter()
        month_days: Counter[int] = Counter()
        months: Counter[int] = Counter()
        weekday_intensity: dict[int, list[float]] = defaultdict(list)

        for point in points:
            ts = point.timestamp
            hours[ts.hour] += 1
            weekdays[ts.weekday()] += 1
            month_days[ts.day] += 1
            months[ts.month] += 1
            weekday_intensity[ts.weekday()].append(point.intensity)

        peak_hours = sorted(hours.items(), key=lambda item: (-item[1], item[0]))
        peak_weekday = _peak(weekdays)

        season_counts = {
            season: sum(months[m] for m in season_months)
            for season, season_months in SEASON_MONTHS.items()
        }
        season_order = {season: index for index, season in enumerate(SEASON_MONTHS)}
        peak_season = None
        if points:
            peak_season = min(
                season_counts, key=lambda s: (-season_counts[s], season_order[s])
            )

        return {
            "daily": {
                "hour_counts": {str(hour): hours[hour] for hour in sorted(hours)},
                "peak_hour": _peak(hours),
                "peak_hours": [
                    {"hour": hour, "count": count}
                    for hour, count in peak_hours[: self._settings.peak_hours]
                ],
            },
            "weekly": {
                "peak_day": WEEKDAY_NAMES[peak_weekday] if peak_weekday is not None else None,
                "summary": [
                    {
                        "day": WEEKDAY_NAMES[day],
                        "count": weekdays[day],
                        "mean_intensity": _round(_mean(weekday_intensity[day])),
                    }
                    for day in range(7)
                ],
            },
            "monthly": {
                "day_counts": {str(day): month_days[day] for day in sorted(month_days)},
                "peak_day": _peak(month_days),
            },
            "seasonal": {
                "counts": season_counts,
                "peak_season": peak_season,
            },
        }

    def _triggers(self, points: Sequence[EmotionalDataPoint]) -> tuple[TriggerCorrelation, ...]:
        contexts = self._config.lexicon.trigger_contexts
        emotions: dict[str, Counter[str]] = defaultdict(Counter)
        intensities: dict[str, list[float]] = defaultdict(list)

        for point in points:
            tags = set(point.context_tags)
            matched = [name for name, ctx_tags in contexts.items() if ctx_tags & tags]
            for context in matched or [OTHER_CONTEXT]:
                emotions[context][point.emotion] += 1
                intensities[context].append(point.intensity)

        correlations = []
        for context in [*contexts, OTHER_CONTEXT]:
            if context not in emotions:
                continue
            counts = emotions[context]
            correlations.append(
                TriggerCorrelation(
                    context=context,
                    occurrences=len(intensities[context]),
                    emotions=dict(sorted(counts.items())),
                    dominant_emotion=_peak(counts),
                    mean_intensity=_mean(intensities[context]),
                )
            )
        return tuple(correlations)

    def _regulation(self, points: Sequence[EmotionalDataPoint]) -> RegulationPatterns:
        adaptive_tags = self._groups.get("adaptive_coping", frozenset())
        avoidance_tags = self._groups.get("avoidance", frozenset())
        support_tags = self._groups.get("support_seeking", frozenset())

        adaptive = avoidance = support = 0
        strategies: set[str] = set()
        for point in points:
            tags = set(point.context_tags)
            adaptive_matched = adaptive_tags & tags
            avoidance_matched = avoidance_tags & tags
            support_matched = support_tags & tags
            adaptive += bool(adaptive_matched)
            avoidance += bool(avoidance_matched)
            support += bool(support_matched)
            strategies |= adaptive_matched | avoidance_matched | support_matched

        return RegulationPatterns(
            adaptive_coping=adaptive,
            avoidance=avoidance,
            support_seeking=support,
            strategies=tuple(sorted(strategies)),
        )

    def _social(self, points: Sequence[EmotionalDataPoint]) -> SocialPatterns:
        social_tags = self._groups.get("social_interaction", frozenset())
        empathy_tags = self._groups.get("empathy", frozenset())
        collaboration_tags = self._groups.get("collaboration", frozenset())
        any_social = social_tags | empathy_tags | collaboration_tags

        social = empathy = collaboration = 0
        relationship_emotions: set[str] = set()
        for point in points:
            tags = set(point.context_tags)
            social += bool(social_tags & tags)
            empathy += bool(empathy_tags & tags)
            collaboration += bool(collaboration_tags & tags)
            if any_social & tags:
                relationship_emotions.add(point.emotion)

        return SocialPatterns(
            social_interactions=social,
            empathy_indicators=empathy,
            collaboration_indicators=collaboration,
            relationship_emotions=tuple(sorted(relationship_emotions)),
        )

    def _stability(self, points: Sequence[EmotionalDataPoint]) -> StabilityPatterns:
        if not points:
            return StabilityPatterns()

        intensities = [p.intensity for p in points]
        mean = statistics.fmean(intensities)
        deviation = statistics.pstdev(intensities, mu=mean)

        if deviation < self._settings.variability_low_below:
            variability = Variability.LOW
        elif deviation < self._settings.variability_moderate_below:
            variability = Variability.MODERATE
        else:
            variability = Variability.HIGH

        score = 100.0 * max(0.0, 1.0 - deviation / self._settings.stability_sd_ceiling)
        return StabilityPatterns(
            score=min(100.0, score),
            variability=variability,
            mean_intensity=mean,
            standard_deviation=deviation,
        )

    def _compare(self, early: float, late: float, dimension: str) -> TrendComparison:
        tolerance = self._settings.subpattern_tolerance.get(dimension, 0.0)
        change = late - early
        if change > tolerance:
            trend = PatternTrend.GROWING
        elif change < -tolerance:
            trend = PatternTrend.DECLINING
        else:
            trend = PatternTrend.STABLE
        return TrendComparison(early=early, late=late, trend=trend)

    def _growth(
        self,
        points: Sequence[EmotionalDataPoint],
        evidence: Sequence[PointEvidence],
    ) -> GrowthPatterns:
        if len(points) < 3:
            return GrowthPatterns()

        third = len(points) // 3
        segments = {
            "early": (points[:third], evidence[:third]),
            "late": (points[-third:], evidence[-third:]),
        }
        measures: dict[str, dict[str, float]] = {}
        for name, (segment, segment_evidence) in segments.items():
            measures[name] = {
                "vocabulary": float(len({e for p in segment for e in p.emotions})),
                "confidence": statistics.fmean(p.confidence for p in segment),
                "complexity": statistics.fmean(len(e.competencies) for e in segment_evidence),
            }

        comparisons = {
            dimension: self._compare(measures["early"][dimension], measures["late"][dimension], dimension)
            for dimension in ("vocabulary", "confidence", "complexity")
        }
        trends = [c.trend for c in comparisons.values()]
        growing = trends.count(PatternTrend.GROWING)
        declining = trends.count(PatternTrend.DECLINING)
        if growing > declining:
            overall = PatternTrend.GROWING
        elif declining > growing:
            overall = PatternTrend.DECLINING
        else:
            overall = PatternTrend.STABLE

        return GrowthPatterns(trend=overall, **comparisons)

    def _evidence_index(self, points: Sequence[EmotionalDataPoint]) -> tuple[PointEvidence, ...]:
        index = self._config.indicator_competencies
        order = {key: position for position, key in enumerate(CompetencyKey)}
        evidence = []
        for point in points:
            indicators = tuple(tag for tag in point.context_tags if tag in index)
            competencies = {key for tag in indicators for key in index[tag]}
            evidence.append(
                PointEvidence(
                    source_ref=point.source_ref,
                    timestamp=point.timestamp,
                    indicators=indicators,
                    competencies=tuple(sorted(competencies, key=order.__getitem__)),
                )
            )
        return tuple(evidence)

    def _emotion_frequency(self, points: Sequence[EmotionalDataPoint]) -> dict[str, float]:
        frequency: Counter[str] = Counter()
        for point in points:
            frequency[point.emotion] += 1.0
            for secondary in point.secondary_emotions:
                frequency[secondary] += SECONDARY_EMOTION_WEIGHT
        return dict(sorted(frequency.items()))

    def _signals(
        self,
        points: Sequence[EmotionalDataPoint],
        regulation: RegulationPatterns,
        social: SocialPatterns,
        stability: StabilityPatterns,
        frequency: dict[str, float],
        active_days: int,
    ) -> dict[str, float]:
        n = len(points)

        def rate(count: int) -> float:
            return min(1.0, count / n) if n else 0.0

        positive = self._config.lexicon.positive_emotions
        return {
            "vocabulary_richness": min(1.0, len(frequency) / self._settings.vocabulary_target),
            "reporting_confidence": statistics.fmean(p.confidence for p in points) if n else 0.0,
            "emotional_stability": stability.score / 100.0,
            "coping_balance": regulation.coping_balance,
            "support_seeking": rate(regulation.support_seeking),
            "positive_affect": rate(sum(1 for p in points if p.emotion in positive)),
            "engagement_consistency": min(1.0, active_days / self._settings.active_days_target),
            "social_engagement": rate(social.social_interactions),
            "empathy_expression": rate(social.empathy_indicators),
            "collaboration": rate(social.collaboration_indicators),
        }

    def _summary(
        self,
        total_points: int,
        signals: dict[str, float],
        regulation: RegulationPatterns,
        social: SocialPatterns,
        stability: StabilityPatterns,
        growth: GrowthPatterns,
    ) -> PatternSummary:
        if total_points == 0:
            return PatternSummary()

        catalog = self._config.catalog
        settings = self._settings

        strong = sorted(
            (
                (name, value)
                for name, value in signals.items()
                if value > settings.strong_pattern_threshold
            ),
            key=lambda item: (-item[1], item[0]),
        )[: settings.max_strong_patterns]
        strongest = tuple(
            StrongPattern(
                name=name,
                strength=value,
                description=catalog.render("strong_pattern_description", label=name.replace("_", " ")),
                recommendations=(
                    catalog.render("strong_pattern_recommendation", label=name.replace("_", " ")),
                ),
            )
            for name, value in strong
        )

        concerns = []
        if stability.variability == Variability.HIGH:
            concerns.append(catalog.concerns["high_variability"])
        if regulation.coping_balance < settings.coping_balance_below:
            concerns.append(catalog.concerns["limited_coping"])
        if social.empathy_indicators < settings.empathy_indicators_below:
            concerns.append(catalog.concerns["few_empathy_indicators"])

        positives = []
        if growth.trend == PatternTrend.GROWING:
            positives.append(catalog.positives["growing"])
        if signals["support_seeking"] > settings.support_seeking_above:
            positives.append(catalog.positives["support_seeking"])
        if stability.score > settings.stability_score_above:
            positives.append(catalog.positives["stable"])

        return PatternSummary(
            strongest_patterns=strongest,
            concern_areas=tuple(concerns),
            positive_indicators=tuple(positives),
        )

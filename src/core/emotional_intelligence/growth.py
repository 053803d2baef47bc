# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Growth analysis across equal sub-windows of the analysis window.

The window [window_start, analysis_time] is divided into a configured number
of equal sub-windows. Four series are computed over the non-empty ones:

- vocabulary: distinct emotions (primary and secondary)
- intensity: mean intensity
- confidence: mean reporting confidence
- complexity: mean number of distinct competencies evidenced per point

Each series is classified by comparing its last value with its first.
Milestones and projections are derived from the same inputs, so the
analysis is a pure function of its arguments.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Sequence

from src.core.emotional_intelligence.config import EIConfig
from src.core.emotional_intelligence.constants import (
    LevelTrend,
    MilestoneKind,
    MilestoneSource,
    OverallTrend,
    VolumeTrend,
)
from src.core.emotional_intelligence.patterns import PatternAnalysis
from src.core.emotional_intelligence.signals import EmotionalDataPoint, MilestoneRecord
from src.utils.datetime import days_between, ensure_utc, format_iso

logger = logging.getLogger(__name__)

DIMENSION_LABELS = {
    "vocabulary": "Emotional vocabulary",
    "intensity": "Emotional intensity",
    "confidence": "Reporting confidence",
    "complexity": "Emotional complexity",
}


@dataclass(frozen=True)
class TrendBlock:
    """Trend of one dimension across sub-windows.

    Attributes:
        dimension: vocabulary, intensity, confidence or complexity.
        classification: Trend label (VolumeTrend or LevelTrend value).
        magnitude: Last value minus first value, None without data.
        series: One value per non-empty sub-window.
        positions: Sub-window index of each series value.
    """

    dimension: str
    classification: str
    magnitude: float | None = None
    series: tuple[float, ...] = ()
    positions: tuple[int, ...] = ()

    @property
    def has_trend(self) -> bool:
        """Whether the series moved beyond its tolerance."""
        return self.classification not in ("stable", "insufficient_data")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "trend": self.classification,
            "magnitude": self.magnitude,
            "series": list(self.series),
            "sub_windows": list(self.positions),
        }


@dataclass(frozen=True)
class Milestone:
    """A notable event, detected from the data or recorded externally."""

    milestone_type: str
    description: str
    date: datetime
    source: MilestoneSource
    source_ref: str
    context: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "type": self.milestone_type,
            "description": self.description,
            "date": format_iso(self.date),
            "source": self.source.value,
            "source_ref": self.source_ref,
            "context": self.context,
        }


@dataclass(frozen=True)
class Projection:
    """Linear extrapolation of one trending dimension."""

    dimension: str
    horizon_days: int
    classification: str
    projected_change: float
    confidence: float
    description: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "dimension": self.dimension,
            "horizon_days": self.horizon_days,
            "trend": self.classification,
            "projected_change": self.projected_change,
            "confidence": self.confidence,
            "description": self.description,
        }


@dataclass(frozen=True)
class GrowthAnalysis:
    """Result of the growth analysis."""

    vocabulary: TrendBlock
    intensity: TrendBlock
    confidence: TrendBlock
    complexity: TrendBlock
    overall_trend: OverallTrend
    description: str
    milestones: tuple[Milestone, ...] = ()
    projections: tuple[Projection, ...] = ()
    sub_window_count: int = 0

    @property
    def trends(self) -> tuple[TrendBlock, ...]:
        """The four trend blocks in fixed order."""
        return (self.vocabulary, self.intensity, self.confidence, self.complexity)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "overall_trend": self.overall_trend.value,
            "description": self.description,
            "trends": {t.dimension: t.to_dict() for t in self.trends},
            "milestones": [m.to_dict() for m in self.milestones],
            "projections": [p.to_dict() for p in self.projections],
            "sub_window_count": self.sub_window_count,
        }


def least_squares_slope(
    series: Sequence[float],
    positions: Sequence[int] | None = None,
) -> float:
    """Slope of the least-squares line through (position, value) pairs.

    Args:
        series: Observed values.
        positions: x of each value, defaults to 0, 1, 2, ...

    Returns:
        Slope per step, 0.0 for fewer than two distinct positions.
    """
    xs = list(range(len(series))) if positions is None else list(positions)
    count = len(series)
    if count < 2 or len(xs) != count:
        return 0.0
    mean_x = sum(xs) / count
    mean_y = sum(series) / count
    denominator = sum((x - mean_x) ** 2 for x in xs)
    if denominator == 0:
        return 0.0
    numerator = sum((x - mean_x) * (y - mean_y) for x, y in zip(xs, series))
    return numerator / denominator


class GrowthAnalyzer:
    """Computes trends, milestones and projections over a window."""

    def __init__(self, config: EIConfig) -> None:
        self._config = config
        self._growth = config.growth

    def analyze(
        self,
        points: Sequence[EmotionalDataPoint],
        patterns: PatternAnalysis,
        window_start: datetime,
        analysis_time: datetime,
        milestones: Sequence[MilestoneRecord] = (),
    ) -> GrowthAnalysis:
        """Analyze growth over the analysis window.

        Args:
            points: Normalized points, aligned with patterns.evidence.
            patterns: Pattern analysis of the same points.
            window_start: Start of the analysis window.
            analysis_time: End of the analysis window.
            milestones: Recorded milestones from the snapshot.

        Returns:
            GrowthAnalysis.
        """
        window_start = ensure_utc(window_start)
        analysis_time = ensure_utc(analysis_time)
        buckets = self._split(points, window_start, analysis_time)
        positions = [index for index, bucket in enumerate(buckets) if bucket]
        non_empty = [buckets[index] for index in positions]

        if len(non_empty) < self._growth.min_sub_windows:
            trends = {
                dimension: TrendBlock(
                    dimension=dimension,
                    classification=VolumeTrend.INSUFFICIENT_DATA.value,
                )
                for dimension in DIMENSION_LABELS
            }
            overall = OverallTrend.INSUFFICIENT_DATA
        else:
            trends = self._trends(non_empty, positions, points, patterns)
            overall = self._overall(trends)

        window_days = days_between(window_start, analysis_time)
        projections = self._project(
            trends, in_window=sum(len(b) for b in non_empty), window_days=window_days
        )

        result = GrowthAnalysis(
            vocabulary=trends["vocabulary"],
            intensity=trends["intensity"],
            confidence=trends["confidence"],
            complexity=trends["complexity"],
            overall_trend=overall,
            description=self._config.catalog.growth_descriptions.get(overall.value, ""),
            milestones=self._milestones(points, patterns, milestones),
            projections=projections,
            sub_window_count=len(non_empty),
        )

        logger.debug(
            "Growth analysis complete",
            extra={
                "overall_trend": overall.value,
                "sub_windows": len(non_empty),
                "milestones": len(result.milestones),
            },
        )
        return result

    def _split(
        self,
        points: Sequence[EmotionalDataPoint],
        window_start: datetime,
        analysis_time: datetime,
    ) -> list[list[int]]:
        """Assign point indexes to equal sub-windows."""
        count = self._growth.sub_windows
        buckets: list[list[int]] = [[] for _ in range(count)]
        span = (analysis_time - window_start).total_seconds()
        if span <= 0:
            return buckets

        for index, point in enumerate(points):
            offset = (point.timestamp - window_start).total_seconds()
            if offset < 0:
                continue
            position = min(count - 1, int(offset / span * count))
            buckets[position].append(index)
        return buckets

    def _trends(
        self,
        buckets: list[list[int]],
        positions: list[int],
        points: Sequence[EmotionalDataPoint],
        patterns: PatternAnalysis,
    ) -> dict[str, TrendBlock]:
        """Per-dimension trends over the non-empty sub-windows at `positions`."""
        vocabulary, intensity, confidence, complexity = [], [], [], []
        for bucket in buckets:
            emotions: set[str] = set()
            for index in bucket:
                emotions.update(points[index].emotions)
            vocabulary.append(float(len(emotions)))
            intensity.append(round(sum(points[i].intensity for i in bucket) / len(bucket), 4))
            confidence.append(round(sum(points[i].confidence for i in bucket) / len(bucket), 4))
            complexity.append(
                round(
                    sum(len(patterns.evidence[i].competencies) for i in bucket) / len(bucket),
                    4,
                )
            )

        return {
            "vocabulary": self._classify("vocabulary", vocabulary, positions, VolumeTrend),
            "intensity": self._classify("intensity", intensity, positions, LevelTrend),
            "confidence": self._classify("confidence", confidence, positions, LevelTrend),
            "complexity": self._classify("complexity", complexity, positions, VolumeTrend),
        }

    def _classify(
        self,
        dimension: str,
        series: list[float],
        positions: list[int],
        labels: type[VolumeTrend] | type[LevelTrend],
    ) -> TrendBlock:
        change = series[-1] - series[0]
        tolerance = self._growth.tolerance.get(dimension, 0.0)

        if abs(change) <= tolerance:
            classification = labels.STABLE
        elif change > 0:
            classification = (
                labels.EXPANDING if labels is VolumeTrend else labels.INCREASING
            )
        else:
            classification = (
                labels.CONTRACTING if labels is VolumeTrend else labels.DECREASING
            )

        return TrendBlock(
            dimension=dimension,
            classification=classification.value,
            magnitude=round(change, 4),
            series=tuple(series),
            positions=tuple(positions),
        )

    def _overall(self, trends: dict[str, TrendBlock]) -> OverallTrend:
        growth_dimensions = sum(
            (
                trends["vocabulary"].classification == VolumeTrend.EXPANDING.value,
                trends["confidence"].classification == LevelTrend.INCREASING.value,
                trends["complexity"].classification == VolumeTrend.EXPANDING.value,
                # Calmer reporting counts as growth
                trends["intensity"].classification == LevelTrend.DECREASING.value,
            )
        )
        if growth_dimensions >= 3:
            return OverallTrend.STRONG_GROWTH
        if growth_dimensions >= 2:
            return OverallTrend.MODERATE_GROWTH
        return OverallTrend.STABLE

    def _milestones(
        self,
        points: Sequence[EmotionalDataPoint],
        patterns: PatternAnalysis,
        recorded: Sequence[MilestoneRecord],
    ) -> tuple[Milestone, ...]:
        templates = self._config.catalog.templates
        detected: list[Milestone] = []

        def detect(kind: MilestoneKind, index: int) -> None:
            point = points[index]
            detected.append(
                Milestone(
                    milestone_type=kind.value,
                    description=templates.get(f"{kind.value}_milestone", kind.value),
                    date=point.timestamp,
                    source=MilestoneSource.DETECTED,
                    source_ref=point.source_ref,
                )
            )

        if points:
            detect(MilestoneKind.FIRST_ENTRY, 0)

        complex_index = next(
            (
                i
                for i, evidence in enumerate(patterns.evidence)
                if len(evidence.competencies) >= self._growth.complex_emotion_min_competencies
            ),
            None,
        )
        if complex_index is not None:
            detect(MilestoneKind.COMPLEX_EMOTION, complex_index)

        confident_index = next(
            (
                i
                for i, point in enumerate(points)
                if point.confidence >= self._growth.high_confidence_threshold
            ),
            None,
        )
        if confident_index is not None:
            detect(MilestoneKind.HIGH_CONFIDENCE, confident_index)

        seen: set[str] = set()
        for record in recorded:
            if record.record_id in seen:
                continue
            seen.add(record.record_id)
            detected.append(
                Milestone(
                    milestone_type=record.milestone_type,
                    description=record.achievement,
                    date=ensure_utc(record.recorded_at),
                    source=MilestoneSource.RECORDED,
                    source_ref=record.record_id,
                    context=record.context,
                )
            )

        return tuple(sorted(detected, key=lambda m: (m.date, m.milestone_type, m.source_ref)))

    def _project(
        self,
        trends: dict[str, TrendBlock],
        in_window: int,
        window_days: float,
    ) -> tuple[Projection, ...]:
        growth = self._growth
        if window_days <= 0:
            return ()
        sub_window_days = window_days / growth.sub_windows
        volume_factor = in_window / (in_window + growth.volume_half_point)

        projections = []
        for horizon in growth.projection_horizons_days:
            confidence = min(
                growth.max_confidence,
                volume_factor / (1 + horizon / growth.horizon_decay_days),
            )
            for dimension, block in trends.items():
                if not block.has_trend:
                    continue
                slope = least_squares_slope(block.series, block.positions)
                change = round(slope * horizon / sub_window_days, 4)
                projections.append(
                    Projection(
                        dimension=dimension,
                        horizon_days=horizon,
                        classification=block.classification,
                        projected_change=change,
                        confidence=round(confidence, 4),
                        description=self._config.catalog.render(
                            "projection",
                            dimension=DIMENSION_LABELS[dimension],
                            classification=block.classification,
                            change=change,
                            horizon=horizon,
                        ),
                    )
                )
        return tuple(projections)

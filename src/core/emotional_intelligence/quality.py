# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Data quality estimation.

The composite score sums three saturating components: volume of points,
time span covered and diversity of distinct emotions plus context tags.
None of them can fall when points are added, so the score is monotonic
under supersets of the same data.
"""

import logging
from dataclasses import dataclass
from typing import Any, Sequence

from src.core.emotional_intelligence.config import EIConfig
from src.core.emotional_intelligence.constants import DataQualityLevel
from src.core.emotional_intelligence.signals import EmotionalDataPoint
from src.utils.datetime import days_between

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QualityFactor:
    """One contribution to the data quality score."""

    name: str
    observed: float
    target: float
    contribution: float

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "observed": round(self.observed, 4),
            "target": self.target,
            "contribution": self.contribution,
        }


@dataclass(frozen=True)
class DataQuality:
    """Data sufficiency of one run."""

    score: float
    level: DataQualityLevel
    data_points: int
    factors: tuple[QualityFactor, ...] = ()

    @property
    def allows_recommendations(self) -> bool:
        """Recommendations are generated at Moderate and High quality."""
        return self.level != DataQualityLevel.LOW

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "score": self.score,
            "level": self.level.value,
            "data_points": self.data_points,
            "factors": [f.to_dict() for f in self.factors],
        }


class DataQualityEstimator:
    """Scores how much a run's conclusions can be trusted."""

    def __init__(self, config: EIConfig) -> None:
        self._settings = config.quality

    def estimate(self, points: Sequence[EmotionalDataPoint]) -> DataQuality:
        """Estimate the data quality of a set of points.

        Args:
            points: Normalized data points.

        Returns:
            DataQuality with composite score, level and factors.
        """
        settings = self._settings
        count = len(points)

        span = days_between(points[0].timestamp, points[-1].timestamp) if count > 1 else 0.0
        signals = set()
        for point in points:
            signals.update(f"emotion:{e}" for e in point.emotions)
            signals.update(f"tag:{t}" for t in point.context_tags)

        factors = (
            self._factor("volume", count, settings.target_data_points, settings.volume_weight),
            self._factor("span_days", span, settings.target_span_days, settings.span_weight),
            self._factor(
                "diversity",
                len(signals),
                settings.target_distinct_signals,
                settings.diversity_weight,
            ),
        )
        score = round(min(100.0, sum(f.contribution for f in factors)), 2)

        if count < settings.min_data_points:
            level = DataQualityLevel.LOW
        elif score >= settings.high_threshold:
            level = DataQualityLevel.HIGH
        else:
            level = DataQualityLevel.MODERATE

        logger.debug(
            "Data quality estimated",
            extra={"score": score, "level": level.value, "data_points": count},
        )
        return DataQuality(score=score, level=level, data_points=count, factors=factors)

    @staticmethod
    def _factor(name: str, observed: float, target: float, weight: float) -> QualityFactor:
        fraction = min(1.0, observed / target) if target > 0 else 1.0
        return QualityFactor(
            name=name,
            observed=observed,
            target=target,
            contribution=round(fraction * weight, 2),
        )

# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for data quality estimation."""

from collections.abc import Callable
from datetime import datetime, timedelta

import pytest

from src.core.emotional_intelligence.config import EIConfig
from src.core.emotional_intelligence.constants import DataQualityLevel
from src.core.emotional_intelligence.quality import DataQualityEstimator
from src.core.emotional_intelligence.signals import (
    EmotionalDataPoint,
    RawEmotionalRecord,
    normalize_records,
)


@pytest.fixture
def estimator(ei_config: EIConfig) -> DataQualityEstimator:
    """Provide a data quality estimator."""
    return DataQualityEstimator(ei_config)


class TestDataQualityEstimator:
    """Tests for DataQualityEstimator."""

    def test_no_points(self, estimator: DataQualityEstimator) -> None:
        """Test the estimate of an empty sequence."""
        quality = estimator.estimate(())

        assert quality.score == 0.0
        assert quality.level == DataQualityLevel.LOW
        assert quality.allows_recommendations is False
        assert [f.name for f in quality.factors] == ["volume", "span_days", "diversity"]

    @pytest.mark.parametrize("count", [1, 2])
    def test_fewer_than_three_points_is_low(
        self,
        estimator: DataQualityEstimator,
        make_point: Callable[..., EmotionalDataPoint],
        now: datetime,
        count: int,
    ) -> None:
        """Test the minimum data points rule."""
        points = [make_point(now - timedelta(days=20 - i)) for i in range(count)]

        assert estimator.estimate(points).level == DataQualityLevel.LOW

    def test_three_points_allow_recommendations(
        self,
        estimator: DataQualityEstimator,
        make_point: Callable[..., EmotionalDataPoint],
        now: datetime,
    ) -> None:
        """Test that three points reach Moderate quality."""
        points = [make_point(now - timedelta(days=d)) for d in (3, 2, 1)]

        quality = estimator.estimate(points)

        assert quality.level == DataQualityLevel.MODERATE
        assert quality.allows_recommendations is True

    def test_rich_data_is_high(
        self,
        estimator: DataQualityEstimator,
        make_point: Callable[..., EmotionalDataPoint],
        now: datetime,
    ) -> None:
        """Test that saturated volume, span and diversity reach 100."""
        points = [
            make_point(now - timedelta(days=20 - i), emotion=f"emotion-{i}", context_tags=(f"tag-{i}",))
            for i in range(20)
        ]

        quality = estimator.estimate(points)

        assert quality.score == 100.0
        assert quality.level == DataQualityLevel.HIGH

    def test_score_is_monotonic_under_supersets(
        self,
        estimator: DataQualityEstimator,
        sample_records: list[RawEmotionalRecord],
        ei_config: EIConfig,
    ) -> None:
        """Test that adding points never lowers the score."""
        points = normalize_records(sample_records, ei_config)

        scores = [estimator.estimate(points[:n]).score for n in range(len(points) + 1)]

        assert scores == sorted(scores)

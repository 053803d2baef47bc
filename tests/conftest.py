# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- Unit tests
- Integration tests
"""

import logging
import sys
from collections.abc import Callable, Iterator
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest
import pytest_asyncio
import structlog

from src.core.config.settings import Settings
from src.core.emotional_intelligence.config import EIConfig, load_ei_config
from src.core.emotional_intelligence.constants import RecordKind
from src.core.emotional_intelligence.repository import InMemoryEmotionalDataSource
from src.core.emotional_intelligence.service import EmotionalIntelligenceService
from src.core.emotional_intelligence.signals import (
    EmotionalDataPoint,
    MilestoneRecord,
    RawEmotionalRecord,
)
from src.utils import logging as logging_utils

# Fixed "now" for every test that needs a clock
NOW = datetime(2025, 3, 31, 12, 0, tzinfo=timezone.utc)


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def ei_config() -> EIConfig:
    """Provide the bundled EI configuration."""
    return load_ei_config()


@pytest.fixture
def settings() -> Settings:
    """Provide settings that ignore the developer's environment."""
    return Settings(_env_file=None)


class _CurrentStdout:
    """Stream proxy that writes to whatever sys.stdout is at write time."""

    def write(self, text: str) -> int:
        return sys.stdout.write(text)

    def flush(self) -> None:
        sys.stdout.flush()


@pytest.fixture
def json_logging(capsys: pytest.CaptureFixture[str]) -> Iterator[None]:
    """Configure production (JSON) logging into the captured stdout.

    The handler and structlog defaults are restored afterwards.
    """
    root_logger = logging.getLogger()
    level = root_logger.level
    logging_utils.setup_logging(
        Settings(_env_file=None, environment="production", debug=False, log_level="INFO")
    )
    # capsys swaps sys.stdout between setup and call; resolve it at write time
    logging_utils._handler.setStream(_CurrentStdout())
    yield
    root_logger.removeHandler(logging_utils._handler)
    logging_utils._handler = None
    root_logger.setLevel(level)
    logging.getLogger("src").setLevel(logging.NOTSET)
    structlog.reset_defaults()


@pytest.fixture
def now() -> datetime:
    """Provide the fixed current time."""
    return NOW


@pytest.fixture
def clock() -> Callable[[], datetime]:
    """Provide a clock frozen at NOW."""
    return lambda: NOW


# =============================================================================
# Factory Fixtures
# =============================================================================


@pytest.fixture
def make_record() -> Callable[..., RawEmotionalRecord]:
    """Provide a factory for raw emotional records."""
    counter = {"value": 0}

    def _make(
        days_ago: float = 1.0,
        emotion: str | None = "happy",
        kind: RecordKind = RecordKind.JOURNAL,
        **fields: Any,
    ) -> RawEmotionalRecord:
        counter["value"] += 1
        return RawEmotionalRecord(
            record_id=fields.pop("record_id", f"rec-{counter['value']:03d}"),
            kind=kind,
            timestamp=fields.pop("timestamp", NOW - timedelta(days=days_ago)),
            emotion=emotion,
            **fields,
        )

    return _make


@pytest.fixture
def make_point() -> Callable[..., EmotionalDataPoint]:
    """Provide a factory for normalized data points."""
    counter = {"value": 0}

    def _make(
        timestamp: datetime | None = None,
        emotion: str = "happy",
        intensity: float = 0.5,
        confidence: float = 0.5,
        context_tags: tuple[str, ...] = (),
        **fields: Any,
    ) -> EmotionalDataPoint:
        counter["value"] += 1
        return EmotionalDataPoint(
            timestamp=timestamp or NOW - timedelta(days=1),
            emotion=emotion,
            intensity=intensity,
            confidence=confidence,
            source_ref=fields.pop("source_ref", f"pt-{counter['value']:03d}"),
            source=fields.pop("source", RecordKind.JOURNAL),
            context_tags=tuple(sorted(context_tags)),
            **fields,
        )

    return _make


@pytest.fixture
def sample_records(make_record: Callable[..., RawEmotionalRecord]) -> list[RawEmotionalRecord]:
    """Provide four weeks of varied journal, reflection and mood records."""
    return [
        make_record(27.5, "nervous", intensity=0.7, confidence=0.4,
                    text="I feel nervous because of the math exam tomorrow"),
        make_record(26, "sad", intensity=0.6, confidence=0.5,
                    text="I felt left out at lunch and avoided my friends"),
        make_record(24, "calm", kind=RecordKind.MOOD_TAG, intensity=0.3, confidence=0.6),
        make_record(21, "frustrated", intensity=0.8, confidence=0.5,
                    text="Homework was hard for me so I took a break and took a deep breath"),
        make_record(19, "happy", secondary_emotions=("proud",), intensity=0.6, confidence=0.7,
                    text="I'm good at drawing and I am proud of myself"),
        make_record(17, "curious", kind=RecordKind.REFLECTION, intensity=0.5, confidence=0.7,
                    title="What did you learn about others?",
                    text="I tried to understand why my friend was upset and how they felt"),
        make_record(15, "anxious", intensity=0.7, confidence=0.6,
                    text="I talked to my mom because I was stressed about the test"),
        make_record(13, "excited", intensity=0.7, confidence=0.8,
                    text="We worked with our team on the group project and it went great"),
        make_record(11, "grateful", kind=RecordKind.REFLECTION, intensity=0.5, confidence=0.8,
                    text="I helped a classmate and comforted her after class"),
        make_record(9, "confident", intensity=0.6, confidence=0.9,
                    text="My goal is to practice piano every day. I know I can do it"),
        make_record(7, "disappointed", secondary_emotions=("frustrated",),
                    intensity=0.6, confidence=0.8,
                    text="I didn't give up even though the test was hard. I kept trying"),
        make_record(5, "hopeful", kind=RecordKind.MOOD_TAG, intensity=0.4, confidence=0.85),
        make_record(3, "proud", intensity=0.7, confidence=0.9,
                    text="I explained my idea to the class and I led the discussion"),
        make_record(2, "relieved", secondary_emotions=("happy", "calm"),
                    intensity=0.4, confidence=0.95,
                    text="We argued but we worked it out and I apologized. I feel relieved"),
        make_record(1, "happy", kind=RecordKind.REFLECTION, intensity=0.5, confidence=0.9,
                    text="Looking forward to the weekend with my family"),
    ]


@pytest.fixture
def data_source(clock: Callable[[], datetime]) -> InMemoryEmotionalDataSource:
    """Provide an empty in-memory data source with a frozen clock."""
    return InMemoryEmotionalDataSource(clock=clock)


@pytest_asyncio.fixture
async def seeded_source(
    data_source: InMemoryEmotionalDataSource,
    sample_records: list[RawEmotionalRecord],
) -> InMemoryEmotionalDataSource:
    """Provide a data source holding sample_records for subject s-1."""
    for record in sample_records:
        await data_source.append_record("s-1", record)
    return data_source


@pytest.fixture
def service(
    data_source: InMemoryEmotionalDataSource,
    ei_config: EIConfig,
    settings: Settings,
    clock: Callable[[], datetime],
) -> EmotionalIntelligenceService:
    """Provide a service over the in-memory data source."""
    return EmotionalIntelligenceService(data_source, config=ei_config, settings=settings, clock=clock)


@pytest.fixture
def milestone_record() -> MilestoneRecord:
    """Provide a recorded milestone."""
    return MilestoneRecord(
        record_id="ms-001",
        subject_id="s-1",
        milestone_type="conflict_resolved",
        achievement="Resolved a disagreement with a friend",
        context="Recess",
        recorded_at=NOW - timedelta(days=4),
    )

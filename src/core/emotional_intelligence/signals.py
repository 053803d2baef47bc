# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Signal normalization for the Emotional Intelligence Assessment Engine.

This module provides:
- The raw input records fetched from the emotional log
- normalize_records: raw records to canonical EmotionalDataPoints
- summarize_points: the emotional-data summary of a normalized sequence

Normalization is a pure function. A malformed record is repaired
(clamped or defaulted, with a flag) or skipped; it never fails the batch.
"""

import logging
import math
import re
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Sequence

from src.core.emotional_intelligence.config import EIConfig
from src.core.emotional_intelligence.constants import PointFlag, RecordKind
from src.utils.datetime import days_between, ensure_utc, format_iso

logger = logging.getLogger(__name__)

SECONDARY_EMOTION_WEIGHT = 0.5
TOP_EMOTIONS = 5


@dataclass(frozen=True)
class RawEmotionalRecord:
    """A journal entry, reflection response or explicit mood tag.

    Attributes:
        record_id: Identifier of the originating log entry.
        kind: Record kind.
        timestamp: When the record was written.
        emotion: Explicit primary emotion, if any.
        secondary_emotions: Explicit secondary emotions.
        intensity: Reported intensity, expected in [0, 1].
        confidence: Self-reported confidence, expected in [0, 1].
        text: Journal body or reflection response.
        title: Entry title.
        tags: Explicit context tags.
    """

    record_id: str
    kind: RecordKind
    timestamp: datetime
    emotion: str | None = None
    secondary_emotions: tuple[str, ...] = ()
    intensity: float | None = None
    confidence: float | None = None
    text: str = ""
    title: str = ""
    tags: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "record_id": self.record_id,
            "kind": self.kind.value,
            "timestamp": format_iso(self.timestamp),
            "emotion": self.emotion,
            "secondary_emotions": list(self.secondary_emotions),
            "intensity": self.intensity,
            "confidence": self.confidence,
            "text": self.text,
            "title": self.title,
            "tags": list(self.tags),
        }


@dataclass(frozen=True)
class MilestoneRecord:
    """An achievement recorded through the milestone write path."""

    record_id: str
    subject_id: str
    milestone_type: str
    achievement: str
    context: str
    recorded_at: datetime

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "record_id": self.record_id,
            "subject_id": self.subject_id,
            "milestone_type": self.milestone_type,
            "achievement": self.achievement,
            "context": self.context,
            "recorded_at": format_iso(self.recorded_at),
        }


@dataclass(frozen=True)
class EmotionalSnapshot:
    """Everything one analysis run reads, fetched once.

    Attributes:
        snapshot_id: Identifier used to reproduce a run.
        subject_id: Subject the records belong to.
        fetched_at: Fetch time; doubles as the analysis date.
        window_start: Start of the requested time window.
        records: Raw records inside the window.
        milestones: Recorded milestones inside the window.
    """

    snapshot_id: str
    subject_id: str
    fetched_at: datetime
    window_start: datetime
    records: tuple[RawEmotionalRecord, ...] = ()
    milestones: tuple[MilestoneRecord, ...] = ()


@dataclass(frozen=True)
class EmotionalDataPoint:
    """A canonical, immutable emotional data point.

    Attributes:
        timestamp: UTC timestamp.
        emotion: Lower-cased primary emotion label.
        intensity: Intensity in [0, 1].
        confidence: Confidence in [0, 1].
        source_ref: Originating record id.
        source: Originating record kind.
        context_tags: Sorted explicit and lexicon-derived tags.
        secondary_emotions: Lower-cased secondary emotions.
        excerpt: Bounded excerpt of the record text.
        flags: Normalization flags.
    """

    timestamp: datetime
    emotion: str
    intensity: float
    confidence: float
    source_ref: str
    source: RecordKind
    context_tags: tuple[str, ...] = ()
    secondary_emotions: tuple[str, ...] = ()
    excerpt: str = ""
    flags: tuple[PointFlag, ...] = ()

    @property
    def emotions(self) -> tuple[str, ...]:
        """Primary emotion followed by secondary emotions."""
        return (self.emotion, *self.secondary_emotions)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "timestamp": format_iso(self.timestamp),
            "emotion": self.emotion,
            "intensity": self.intensity,
            "confidence": self.confidence,
            "source_ref": self.source_ref,
            "source": self.source.value,
            "context_tags": list(self.context_tags),
            "secondary_emotions": list(self.secondary_emotions),
            "excerpt": self.excerpt,
            "flags": [flag.value for flag in self.flags],
        }


@dataclass(frozen=True)
class EmotionalDataSummary:
    """Summary statistics of a normalized sequence."""

    total_points: int
    by_kind: dict[str, int]
    vocabulary: tuple[str, ...]
    recent_vocabulary: tuple[str, ...]
    average_intensity: float | None
    average_confidence: float | None
    top_emotions: tuple[tuple[str, float], ...]
    first_timestamp: datetime | None = None
    last_timestamp: datetime | None = None
    active_days: int = 0
    skipped_records: int = field(default=0, compare=False)

    @property
    def vocabulary_size(self) -> int:
        """Number of distinct emotions."""
        return len(self.vocabulary)

    @property
    def span_days(self) -> float:
        """Days between the first and last data point."""
        if self.first_timestamp is None or self.last_timestamp is None:
            return 0.0
        return days_between(self.first_timestamp, self.last_timestamp)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "total_points": self.total_points,
            "by_kind": dict(self.by_kind),
            "vocabulary_size": self.vocabulary_size,
            "vocabulary": list(self.vocabulary),
            "average_intensity": _round(self.average_intensity),
            "average_confidence": _round(self.average_confidence),
            "top_emotions": [
                {"emotion": emotion, "frequency": frequency}
                for emotion, frequency in self.top_emotions
            ],
            "time_span": {
                "start": format_iso(self.first_timestamp),
                "end": format_iso(self.last_timestamp),
                "days": round(self.span_days, 2),
            },
            "active_days": self.active_days,
            "skipped_records": self.skipped_records,
        }


def _round(value: float | None, digits: int = 4) -> float | None:
    return None if value is None else round(value, digits)


def _clean_label(label: Any) -> str:
    if not isinstance(label, str):
        return ""
    return label.strip().lower()


def _unit_value(value: Any, default: float) -> tuple[float, bool, bool]:
    """Coerce a value into [0, 1].

    Args:
        value: Raw value.
        default: Value used when the raw value is missing or not a number.

    Returns:
        Tuple of (value, clamped, defaulted).
    """
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default, False, True
    if math.isnan(number):
        return default, False, True
    if number < 0.0:
        return 0.0, True, False
    if number > 1.0:
        return 1.0, True, False
    return number, False, False


def _excerpt(text: str, length: int) -> str:
    collapsed = " ".join(text.split())
    if len(collapsed) <= length:
        return collapsed
    return collapsed[: max(0, length - 3)].rstrip() + "..."


class _Lexicon:
    """Compiled matchers over the configured vocabulary and phrases."""

    def __init__(self, config: EIConfig) -> None:
        vocabulary = config.lexicon.emotion_vocabulary
        self._emotion_pattern = (
            re.compile(r"\b(" + "|".join(re.escape(word) for word in vocabulary) + r")\b")
            if vocabulary
            else None
        )
        self._phrases = config.lexicon.phrases

    def infer_emotion(self, text: str) -> str | None:
        """Return the first vocabulary emotion appearing in lower-cased text."""
        if self._emotion_pattern is None:
            return None
        match = self._emotion_pattern.search(text)
        return match.group(1) if match else None

    def tags_for(self, text: str) -> set[str]:
        """Return the tags of every phrase found in lower-cased text."""
        tags: set[str] = set()
        for phrase, phrase_tags in self._phrases.items():
            if phrase in text:
                tags.update(phrase_tags)
        return tags


def _normalize_record(
    record: RawEmotionalRecord,
    lexicon: _Lexicon,
    config: EIConfig,
) -> EmotionalDataPoint | None:
    timestamp = ensure_utc(record.timestamp) if isinstance(record.timestamp, datetime) else None
    if timestamp is None:
        return None
    try:
        kind = RecordKind(record.kind)
    except ValueError:
        return None

    text = record.text or ""
    searchable = f"{record.title or ''} {text}".lower()
    flags: list[PointFlag] = []

    emotion = _clean_label(record.emotion)
    if not emotion:
        emotion = lexicon.infer_emotion(searchable) or ""
        if not emotion:
            return None
        flags.append(PointFlag.EMOTION_INFERRED)

    defaults = config.normalization
    intensity, clamped, defaulted = _unit_value(record.intensity, defaults.default_intensity)
    if clamped:
        flags.append(PointFlag.INTENSITY_CLAMPED)
    if defaulted:
        flags.append(PointFlag.INTENSITY_DEFAULTED)

    confidence, clamped, defaulted = _unit_value(record.confidence, defaults.default_confidence)
    if clamped:
        flags.append(PointFlag.CONFIDENCE_CLAMPED)
    if defaulted:
        flags.append(PointFlag.CONFIDENCE_DEFAULTED)

    secondary: list[str] = []
    for label in record.secondary_emotions or ():
        cleaned = _clean_label(label)
        if cleaned and cleaned != emotion and cleaned not in secondary:
            secondary.append(cleaned)

    tags = {cleaned for cleaned in map(_clean_label, record.tags or ()) if cleaned}
    tags |= lexicon.tags_for(searchable)

    return EmotionalDataPoint(
        timestamp=timestamp,
        emotion=emotion,
        intensity=intensity,
        confidence=confidence,
        source_ref=record.record_id,
        source=kind,
        context_tags=tuple(sorted(tags)),
        secondary_emotions=tuple(secondary),
        excerpt=_excerpt(text, defaults.excerpt_length),
        flags=tuple(flags),
    )


def normalize_records(
    records: Iterable[RawEmotionalRecord],
    config: EIConfig,
) -> tuple[EmotionalDataPoint, ...]:
    """Convert raw records into an ordered sequence of data points.

    Points are ordered by timestamp; ties keep the input order. Records
    without a usable timestamp or any recognizable emotion are skipped.

    Args:
        records: Raw records of one subject.
        config: EI configuration.

    Returns:
        Immutable, timestamp-ordered tuple of EmotionalDataPoint.
    """
    lexicon = _Lexicon(config)
    points: list[EmotionalDataPoint] = []
    skipped = 0

    for record in records:
        point = _normalize_record(record, lexicon, config)
        if point is None:
            skipped += 1
            continue
        points.append(point)

    if skipped:
        logger.debug(
            "Skipped non-qualifying records",
            extra={"skipped": skipped, "kept": len(points)},
        )

    # sorted() is stable, so equal timestamps keep input order
    return tuple(sorted(points, key=lambda p: p.timestamp))


def summarize_points(
    points: Sequence[EmotionalDataPoint],
    skipped_records: int = 0,
) -> EmotionalDataSummary:
    """Compute the emotional-data summary of a normalized sequence.

    Secondary emotions count half as much as primary emotions in the
    frequency ranking.

    Args:
        points: Timestamp-ordered data points.
        skipped_records: Number of raw records that did not qualify.

    Returns:
        EmotionalDataSummary.
    """
    by_kind = {kind.value: 0 for kind in RecordKind}
    frequency: Counter[str] = Counter()
    recent: list[str] = []

    for point in points:
        by_kind[point.source.value] += 1
        frequency[point.emotion] += 1.0
        for secondary in point.secondary_emotions:
            frequency[secondary] += SECONDARY_EMOTION_WEIGHT

    for point in reversed(points):
        for emotion in point.emotions:
            if emotion not in recent:
                recent.append(emotion)

    top = sorted(frequency.items(), key=lambda item: (-item[1], item[0]))[:TOP_EMOTIONS]

    if points:
        average_intensity = sum(p.intensity for p in points) / len(points)
        average_confidence = sum(p.confidence for p in points) / len(points)
    else:
        average_intensity = average_confidence = None

    return EmotionalDataSummary(
        total_points=len(points),
        by_kind=by_kind,
        vocabulary=tuple(sorted(frequency)),
        recent_vocabulary=tuple(recent),
        average_intensity=average_intensity,
        average_confidence=average_confidence,
        top_emotions=tuple(top),
        first_timestamp=points[0].timestamp if points else None,
        last_timestamp=points[-1].timestamp if points else None,
        active_days=len({p.timestamp.date() for p in points}),
        skipped_records=skipped_records,
    )

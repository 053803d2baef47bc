# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Emotional log data sources.

A data source hands the engine one immutable snapshot per analysis and
accepts appended records and milestones. Nothing computed is ever written
back. Two adapters are provided:

- InMemoryEmotionalDataSource: process-local, used in tests and demos.
- SQLAlchemyEmotionalDataSource: the emotional_log_entries table.

Snapshot identifiers are derived from the snapshot content, so fetching an
unchanged log at the same instant yields the same identifier.
"""

import logging
import uuid
from collections import defaultdict
from datetime import datetime
from typing import Callable, Iterable, Protocol, runtime_checkable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.core.emotional_intelligence.constants import RecordKind
from src.core.emotional_intelligence.signals import (
    EmotionalSnapshot,
    MilestoneRecord,
    RawEmotionalRecord,
)
from src.infrastructure.database.connection import session_scope
from src.infrastructure.database.models import (
    ENTRY_TYPE_MILESTONE,
    ENTRY_TYPE_RECORD,
    EmotionalLogEntry,
)
from src.utils.datetime import ensure_utc, format_iso, utc_now

logger = logging.getLogger(__name__)

SNAPSHOT_NAMESPACE = uuid.UUID("6f1c1d2e-7a43-4d0b-9f5e-3c1e2a9b8d47")

Clock = Callable[[], datetime]


def snapshot_id_for(
    subject_id: str,
    window_start: datetime,
    fetched_at: datetime,
    entry_ids: Iterable[str],
) -> str:
    """Derive a deterministic snapshot identifier from its content.

    Args:
        subject_id: Subject identifier.
        window_start: Start of the fetched window.
        fetched_at: Fetch time.
        entry_ids: Identifiers of the records and milestones in the snapshot.

    Returns:
        UUID string.
    """
    parts = [subject_id, format_iso(window_start), format_iso(fetched_at), *entry_ids]
    return str(uuid.uuid5(SNAPSHOT_NAMESPACE, "|".join(parts)))


def _in_window(moment: object, since: datetime) -> bool:
    # Entries without a usable timestamp belong to no window
    return isinstance(moment, datetime) and ensure_utc(moment) >= since


@runtime_checkable
class EmotionalDataSource(Protocol):
    """Source of emotional log snapshots and sink for appended entries."""

    async def fetch_snapshot(self, subject_id: str, since: datetime) -> EmotionalSnapshot:
        """Fetch records and milestones of a subject from `since` onwards."""
        ...

    async def append_record(self, subject_id: str, record: RawEmotionalRecord) -> None:
        """Append a raw emotional record."""
        ...

    async def append_milestone(self, record: MilestoneRecord) -> None:
        """Append a recorded milestone."""
        ...


class InMemoryEmotionalDataSource:
    """Process-local emotional log.

    Args:
        clock: Time source for snapshot fetch times.
    """

    def __init__(self, clock: Clock = utc_now) -> None:
        self._clock = clock
        self._records: dict[str, list[RawEmotionalRecord]] = defaultdict(list)
        self._milestones: dict[str, list[MilestoneRecord]] = defaultdict(list)

    async def fetch_snapshot(self, subject_id: str, since: datetime) -> EmotionalSnapshot:
        since = ensure_utc(since)
        records = tuple(
            r for r in self._records.get(subject_id, ()) if _in_window(r.timestamp, since)
        )
        milestones = tuple(
            m for m in self._milestones.get(subject_id, ()) if _in_window(m.recorded_at, since)
        )
        fetched_at = ensure_utc(self._clock())

        return EmotionalSnapshot(
            snapshot_id=snapshot_id_for(
                subject_id,
                since,
                fetched_at,
                [r.record_id for r in records] + [m.record_id for m in milestones],
            ),
            subject_id=subject_id,
            fetched_at=fetched_at,
            window_start=since,
            records=records,
            milestones=milestones,
        )

    async def append_record(self, subject_id: str, record: RawEmotionalRecord) -> None:
        self._records[subject_id].append(record)

    async def append_milestone(self, record: MilestoneRecord) -> None:
        self._milestones[record.subject_id].append(record)


class SQLAlchemyEmotionalDataSource:
    """Emotional log stored in the emotional_log_entries table.

    Args:
        sessionmaker: Async sessionmaker bound to the log database.
        clock: Time source for snapshot fetch times.
    """

    def __init__(
        self,
        sessionmaker: async_sessionmaker[AsyncSession],
        clock: Clock = utc_now,
    ) -> None:
        self._sessionmaker = sessionmaker
        self._clock = clock

    async def fetch_snapshot(self, subject_id: str, since: datetime) -> EmotionalSnapshot:
        """Fetch records and milestones of a subject from `since` onwards.

        Raises:
            DatabaseError: If the query fails.
        """
        since = ensure_utc(since)
        stmt = (
            select(EmotionalLogEntry)
            .where(
                EmotionalLogEntry.subject_id == subject_id,
                EmotionalLogEntry.occurred_at >= since,
            )
            .order_by(EmotionalLogEntry.occurred_at, EmotionalLogEntry.id)
        )

        async with session_scope(self._sessionmaker) as session:
            result = await session.execute(stmt)
            entries = result.scalars().all()

        records = []
        milestones = []
        for entry in entries:
            if entry.entry_type == ENTRY_TYPE_MILESTONE:
                milestones.append(self._to_milestone(entry))
            else:
                records.append(self._to_record(entry))

        fetched_at = ensure_utc(self._clock())
        logger.debug(
            "Fetched emotional snapshot",
            extra={
                "subject_id": subject_id,
                "records": len(records),
                "milestones": len(milestones),
            },
        )

        return EmotionalSnapshot(
            snapshot_id=snapshot_id_for(
                subject_id, since, fetched_at, [entry.entry_id for entry in entries]
            ),
            subject_id=subject_id,
            fetched_at=fetched_at,
            window_start=since,
            records=tuple(records),
            milestones=tuple(milestones),
        )

    async def append_record(self, subject_id: str, record: RawEmotionalRecord) -> None:
        """Append a raw emotional record.

        Raises:
            DatabaseError: If the insert fails.
        """
        entry = EmotionalLogEntry(
            entry_id=record.record_id,
            subject_id=subject_id,
            entry_type=ENTRY_TYPE_RECORD,
            occurred_at=ensure_utc(record.timestamp),
            kind=record.kind.value,
            emotion=record.emotion,
            secondary_emotions=list(record.secondary_emotions),
            intensity=record.intensity,
            confidence=record.confidence,
            title=record.title,
            body=record.text,
            tags=list(record.tags),
        )
        async with session_scope(self._sessionmaker) as session:
            session.add(entry)

    async def append_milestone(self, record: MilestoneRecord) -> None:
        """Append a recorded milestone.

        Raises:
            DatabaseError: If the insert fails.
        """
        entry = EmotionalLogEntry(
            entry_id=record.record_id,
            subject_id=record.subject_id,
            entry_type=ENTRY_TYPE_MILESTONE,
            occurred_at=ensure_utc(record.recorded_at),
            milestone_type=record.milestone_type,
            achievement=record.achievement,
            context=record.context,
        )
        async with session_scope(self._sessionmaker) as session:
            session.add(entry)

    @staticmethod
    def _to_record(entry: EmotionalLogEntry) -> RawEmotionalRecord:
        try:
            kind = RecordKind(entry.kind)
        except ValueError:
            # Unknown kinds are read as journal entries
            kind = RecordKind.JOURNAL
        return RawEmotionalRecord(
            record_id=entry.entry_id,
            kind=kind,
            timestamp=ensure_utc(entry.occurred_at),
            emotion=entry.emotion,
            secondary_emotions=tuple(entry.secondary_emotions or ()),
            intensity=entry.intensity,
            confidence=entry.confidence,
            text=entry.body or "",
            title=entry.title or "",
            tags=tuple(entry.tags or ()),
        )

    @staticmethod
    def _to_milestone(entry: EmotionalLogEntry) -> MilestoneRecord:
        return MilestoneRecord(
            record_id=entry.entry_id,
            subject_id=entry.subject_id,
            milestone_type=entry.milestone_type or "",
            achievement=entry.achievement or "",
            context=entry.context or "",
            recorded_at=ensure_utc(entry.occurred_at),
        )

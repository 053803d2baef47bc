# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""ORM models for the emotional log.

The log is append-only. Raw emotional records (journal entries,
reflections, mood tags) and recorded milestones share one table and are
told apart by entry_type. Computed analysis results are never stored.
"""

from datetime import datetime

from sqlalchemy import JSON, DateTime, Float, Integer, String, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

ENTRY_TYPE_RECORD = "record"
ENTRY_TYPE_MILESTONE = "milestone"


class Base(DeclarativeBase):
    """Declarative base for emotional log models."""


class EmotionalLogEntry(Base):
    """One appended entry of a subject's emotional log."""

    __tablename__ = "emotional_log_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    entry_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    subject_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    entry_type: Mapped[str] = mapped_column(String(16), nullable=False)
    occurred_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )

    # Raw record fields
    kind: Mapped[str | None] = mapped_column(String(32), nullable=True)
    emotion: Mapped[str | None] = mapped_column(String(64), nullable=True)
    secondary_emotions: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    intensity: Mapped[float | None] = mapped_column(Float, nullable=True)
    confidence: Mapped[float | None] = mapped_column(Float, nullable=True)
    title: Mapped[str] = mapped_column(Text, nullable=False, default="")
    body: Mapped[str] = mapped_column(Text, nullable=False, default="")
    tags: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    # Milestone fields
    milestone_type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    achievement: Mapped[str | None] = mapped_column(Text, nullable=True)
    context: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        return (
            f"<EmotionalLogEntry(entry_id={self.entry_id}, subject_id={self.subject_id}, "
            f"entry_type={self.entry_type})>"
        )

# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Exceptions for the Emotional Intelligence Assessment Engine.

Three outcomes must stay distinguishable for callers:
- ValidationError: the request itself is wrong, nothing was run.
- AnalysisError: the pipeline failed internally, nothing is returned.
- A normal result whose metadata says "insufficient_data" (not an exception).
"""

from typing import Any


class EmotionalIntelligenceError(Exception):
    """Base exception for the EI engine.

    Attributes:
        message: Human-readable error description.
        context: Extra structured data for logging.
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        """Initialize the error.

        Args:
            message: Human-readable error description.
            context: Extra structured data for logging.
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}


class ValidationError(EmotionalIntelligenceError):
    """Raised when a request is rejected before the pipeline starts."""


class AnalysisError(EmotionalIntelligenceError):
    """Raised when a pipeline stage fails unexpectedly.

    Attributes:
        subject_id: Subject whose run failed.
        snapshot_id: Snapshot the run operated on, for reproduction.
        stage: Pipeline stage that failed.
    """

    def __init__(
        self,
        message: str,
        subject_id: str | None = None,
        snapshot_id: str | None = None,
        stage: str | None = None,
    ) -> None:
        """Initialize the analysis error.

        Args:
            message: Human-readable error description.
            subject_id: Subject whose run failed.
            snapshot_id: Snapshot identifier.
            stage: Pipeline stage that failed.
        """
        super().__init__(
            message,
            context={"subject_id": subject_id, "snapshot_id": snapshot_id, "stage": stage},
        )
        self.subject_id = subject_id
        self.snapshot_id = snapshot_id
        self.stage = stage


class AnalysisCancelledError(EmotionalIntelligenceError):
    """Raised when a run is cancelled at a stage checkpoint."""


class EIConfigError(EmotionalIntelligenceError):
    """Raised when the static EI configuration is invalid."""

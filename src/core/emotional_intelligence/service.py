# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Emotional Intelligence Service - orchestrates one analysis run.

A run fetches one snapshot from the data source and feeds it through:

    normalize -> patterns -> (competencies || growth) -> stage match
    -> data quality -> insights/recommendations -> result

Competency assessment and growth analysis only depend on the pattern
output, so they run concurrently in worker threads. An optional
cancellation event is checked between stages.

Example:
    service = EmotionalIntelligenceService(InMemoryEmotionalDataSource())
    request = AnalysisRequest(subject_id="s-1", subject_age=12)
    result = await service.analyze(request)
    print(result.profile.overall_score)
"""

import asyncio
import logging
import uuid
from datetime import datetime
from typing import Any, Callable

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from src.core.config.settings import Settings, get_settings
from src.core.emotional_intelligence.competencies import CompetencyAssessor
from src.core.emotional_intelligence.config import EIConfig, get_ei_config
from src.core.emotional_intelligence.exceptions import (
    AnalysisCancelledError,
    AnalysisError,
    ValidationError,
)
from src.core.emotional_intelligence.growth import GrowthAnalyzer
from src.core.emotional_intelligence.insights import InsightGenerator
from src.core.emotional_intelligence.patterns import PatternAnalyzer
from src.core.emotional_intelligence.quality import DataQualityEstimator
from src.core.emotional_intelligence.repository import EmotionalDataSource
from src.core.emotional_intelligence.result import AnalysisResult, assemble_result
from src.core.emotional_intelligence.signals import (
    EmotionalSnapshot,
    MilestoneRecord,
    RawEmotionalRecord,
    normalize_records,
    summarize_points,
)
from src.core.emotional_intelligence.stages import StageMatcher
from src.utils.datetime import days_before, utc_now
from src.utils.logging import bound_context

logger = logging.getLogger(__name__)


class AnalysisRequest(BaseModel):
    """Parameters of one analysis run."""

    subject_id: str = Field(min_length=1, description="Subject to analyze")
    time_window_days: int = Field(default=30, gt=0, description="Analysis window in days")
    include_recommendations: bool = Field(default=True, description="Generate recommendations")
    subject_age: int = Field(description="Subject age in years")

    @field_validator("subject_id")
    @classmethod
    def subject_id_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("subject_id must not be blank")
        return value

    @classmethod
    def create(cls, **fields: Any) -> "AnalysisRequest":
        """Build a request, raising the engine's ValidationError on bad input.

        Args:
            **fields: Request fields.

        Returns:
            Validated AnalysisRequest.

        Raises:
            ValidationError: If any field is invalid.
        """
        try:
            return cls(**fields)
        except PydanticValidationError as e:
            raise ValidationError(
                "Invalid analysis request",
                context={"errors": e.errors(include_url=False, include_context=False)},
            ) from e


class EmotionalIntelligenceService:
    """Runs emotional intelligence analyses over a data source.

    The service holds no per-run state: configuration is read-only and
    every run builds its result from a fresh snapshot.
    """

    def __init__(
        self,
        data_source: EmotionalDataSource,
        config: EIConfig | None = None,
        settings: Settings | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize the service.

        Args:
            data_source: Emotional log data source.
            config: EI configuration, defaults to the cached configuration.
            settings: Application settings, defaults to the cached settings.
            clock: Time source for window starts and recorded milestones.
        """
        self._data_source = data_source
        self._config = config or get_ei_config()
        self._settings = settings or get_settings()
        self._clock = clock

        self._pattern_analyzer = PatternAnalyzer(self._config)
        self._assessor = CompetencyAssessor(self._config)
        self._growth_analyzer = GrowthAnalyzer(self._config)
        self._stage_matcher = StageMatcher(self._config)
        self._quality_estimator = DataQualityEstimator(self._config)
        self._insight_generator = InsightGenerator(self._config)

    @property
    def config(self) -> EIConfig:
        """EI configuration used by this service."""
        return self._config

    async def analyze(
        self,
        request: AnalysisRequest,
        cancel_event: asyncio.Event | None = None,
    ) -> AnalysisResult:
        """Run a full analysis for a subject.

        Args:
            request: Validated analysis request.
            cancel_event: Optional cancellation token.

        Returns:
            AnalysisResult.

        Raises:
            ValidationError: If the subject age is outside every stage.
            AnalysisCancelledError: If cancel_event is set at a checkpoint.
            AnalysisError: If fetching or any stage fails.
        """
        # Validate before any I/O
        self._stage_matcher.resolve(request.subject_age)
        since = days_before(self._clock(), request.time_window_days)

        with bound_context(subject_id=request.subject_id):
            self._checkpoint(cancel_event, "fetch")
            try:
                snapshot = await self._data_source.fetch_snapshot(request.subject_id, since)
            except Exception as e:
                logger.error(
                    "Failed to fetch emotional snapshot",
                    extra={"subject_id": request.subject_id},
                    exc_info=True,
                )
                raise AnalysisError(
                    "Failed to fetch emotional data",
                    subject_id=request.subject_id,
                    stage="fetch",
                ) from e

            return await self.analyze_snapshot(snapshot, request, cancel_event)

    async def analyze_snapshot(
        self,
        snapshot: EmotionalSnapshot,
        request: AnalysisRequest,
        cancel_event: asyncio.Event | None = None,
    ) -> AnalysisResult:
        """Run the pipeline over an already fetched snapshot.

        The result depends only on the snapshot and the request.

        Args:
            snapshot: Emotional snapshot.
            request: Validated analysis request.
            cancel_event: Optional cancellation token.

        Returns:
            AnalysisResult.

        Raises:
            ValidationError: If the subject age is outside every stage.
            AnalysisCancelledError: If cancel_event is set at a checkpoint.
            AnalysisError: If any stage fails.
        """
        stage_config = self._stage_matcher.resolve(request.subject_age)
        config = self._config
        step = "normalize"

        with bound_context(subject_id=snapshot.subject_id, snapshot_id=snapshot.snapshot_id):
            logger.info(
                "Starting emotional intelligence analysis",
                extra={
                    "subject_id": snapshot.subject_id,
                    "snapshot_id": snapshot.snapshot_id,
                    "records": len(snapshot.records),
                },
            )
            try:
                self._checkpoint(cancel_event, step)
                points = normalize_records(snapshot.records, config)
                summary = summarize_points(
                    points, skipped_records=len(snapshot.records) - len(points)
                )

                step = "patterns"
                self._checkpoint(cancel_event, step)
                patterns = self._pattern_analyzer.analyze(points)

                step = "competencies_and_growth"
                self._checkpoint(cancel_event, step)
                profile, growth = await asyncio.gather(
                    asyncio.to_thread(self._assessor.assess, points, patterns),
                    asyncio.to_thread(
                        self._growth_analyzer.analyze,
                        points,
                        patterns,
                        snapshot.window_start,
                        snapshot.fetched_at,
                        snapshot.milestones,
                    ),
                )

                step = "stage"
                self._checkpoint(cancel_event, step)
                stage_match = self._stage_matcher.match(stage_config, profile, patterns)

                step = "quality"
                self._checkpoint(cancel_event, step)
                quality = self._quality_estimator.estimate(points)

                step = "insights"
                self._checkpoint(cancel_event, step)
                insights = self._insight_generator.generate_insights(
                    profile, patterns, growth, stage_match, quality
                )
                recommendations = None
                if request.include_recommendations and quality.allows_recommendations:
                    recommendations = self._insight_generator.generate_recommendations(
                        profile, stage_match
                    )

                step = "result"
                self._checkpoint(cancel_event, step)
                result = assemble_result(
                    subject_id=snapshot.subject_id,
                    snapshot_id=snapshot.snapshot_id,
                    analysis_date=snapshot.fetched_at,
                    window_start=snapshot.window_start,
                    time_window_days=request.time_window_days,
                    subject_age=request.subject_age,
                    summary=summary,
                    patterns=patterns,
                    profile=profile,
                    stage_match=stage_match,
                    growth=growth,
                    insights=insights,
                    quality=quality,
                    recommendations=recommendations,
                    include_recommendations=request.include_recommendations,
                    next_analysis_interval_days=self._settings.ei.next_analysis_interval_days,
                    config=config,
                )
            except AnalysisCancelledError:
                logger.info("Analysis cancelled", extra={"stage": step})
                raise
            except Exception as e:
                logger.error(
                    "Emotional intelligence analysis failed",
                    extra={
                        "subject_id": snapshot.subject_id,
                        "snapshot_id": snapshot.snapshot_id,
                        "stage": step,
                    },
                    exc_info=True,
                )
                raise AnalysisError(
                    f"Analysis failed at stage '{step}'",
                    subject_id=snapshot.subject_id,
                    snapshot_id=snapshot.snapshot_id,
                    stage=step,
                ) from e

            logger.info(
                "Emotional intelligence analysis complete",
                extra={
                    "outcome": result.metadata.outcome.value,
                    "overall_score": profile.overall_score,
                    "data_quality": quality.level.value,
                },
            )
            return result

    async def record_milestone(
        self,
        subject_id: str,
        milestone_type: str,
        achievement: str,
        context: str = "",
    ) -> MilestoneRecord:
        """Append a recorded milestone for a subject.

        Computed results are never modified; the milestone shows up in the
        next analysis whose window contains it.

        Args:
            subject_id: Subject identifier.
            milestone_type: Milestone type label.
            achievement: What was achieved.
            context: Optional free-text context.

        Returns:
            The appended MilestoneRecord.

        Raises:
            ValidationError: If a required field is blank.
        """
        fields = {
            "subject_id": subject_id,
            "milestone_type": milestone_type,
            "achievement": achievement,
        }
        blank = [name for name, value in fields.items() if not (value or "").strip()]
        if blank:
            raise ValidationError("Milestone fields must not be blank", context={"fields": blank})

        record = MilestoneRecord(
            record_id=uuid.uuid4().hex,
            subject_id=subject_id.strip(),
            milestone_type=milestone_type.strip(),
            achievement=achievement.strip(),
            context=(context or "").strip(),
            recorded_at=self._clock(),
        )
        await self._data_source.append_milestone(record)

        logger.info(
            "Milestone recorded",
            extra={
                "subject_id": record.subject_id,
                "milestone_type": record.milestone_type,
                "record_id": record.record_id,
            },
        )
        return record

    async def record_entry(self, subject_id: str, record: RawEmotionalRecord) -> None:
        """Append a raw emotional record for a subject.

        Raises:
            ValidationError: If the subject id is blank.
        """
        if not (subject_id or "").strip():
            raise ValidationError("subject_id must not be blank")
        await self._data_source.append_record(subject_id.strip(), record)

    def health(self) -> dict[str, Any]:
        """Report configuration status and taxonomy sizes."""
        config = self._config
        return {
            "status": "healthy",
            "competencies": len(config.competencies),
            "sub_competencies": sum(
                len(c.sub_competencies) for c in config.competencies.values()
            ),
            "stages": len(config.stages),
            "age_range": [config.stages[0].age_min, config.stages[-1].age_max],
            "emotion_vocabulary": len(config.lexicon.emotion_vocabulary),
            "lexicon_phrases": len(config.lexicon.phrases),
        }

    @staticmethod
    def _checkpoint(cancel_event: asyncio.Event | None, stage: str) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise AnalysisCancelledError("Analysis cancelled", context={"stage": stage})

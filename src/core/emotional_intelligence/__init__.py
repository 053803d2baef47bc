# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Emotional Intelligence Assessment Engine.

This package turns a subject's emotional log (journal entries, reflections,
mood tags and recorded milestones) into a reproducible assessment of the
five EI competencies:

- signals: Normalization of raw records into data points
- patterns: Temporal, trigger, regulation and social patterns
- competencies: Competency and sub-competency scoring
- growth: Trends, milestones and projections over sub-windows
- stages: Developmental stage resolution and alignment
- quality: Data sufficiency scoring
- insights: Ranked insights and recommendation tiers
- result: Result assembly and read-only views
- repository: Emotional log data sources
- service: Orchestration of one analysis run

Example usage:

    from src.core.emotional_intelligence import (
        AnalysisRequest,
        EmotionalIntelligenceService,
        InMemoryEmotionalDataSource,
    )

    service = EmotionalIntelligenceService(InMemoryEmotionalDataSource())
    result = await service.analyze(AnalysisRequest(subject_id="s-1", subject_age=10))
"""

from src.core.emotional_intelligence.competencies import (
    BalanceAnalysis,
    CompetencyAssessment,
    CompetencyAssessor,
    CompetencyProfile,
    analyze_balance,
)
from src.core.emotional_intelligence.config import (
    EIConfig,
    get_ei_config,
    load_ei_config,
    reload_ei_config,
)
from src.core.emotional_intelligence.constants import (
    AnalysisOutcome,
    CompetencyKey,
    CompetencyLevel,
    DataQualityLevel,
    OverallTrend,
    RecordKind,
    StageKey,
    score_to_level,
)
from src.core.emotional_intelligence.exceptions import (
    AnalysisCancelledError,
    AnalysisError,
    EIConfigError,
    EmotionalIntelligenceError,
    ValidationError,
)
from src.core.emotional_intelligence.growth import GrowthAnalysis, GrowthAnalyzer
from src.core.emotional_intelligence.insights import InsightGenerator
from src.core.emotional_intelligence.patterns import PatternAnalysis, PatternAnalyzer
from src.core.emotional_intelligence.quality import DataQuality, DataQualityEstimator
from src.core.emotional_intelligence.repository import (
    EmotionalDataSource,
    InMemoryEmotionalDataSource,
    SQLAlchemyEmotionalDataSource,
)
from src.core.emotional_intelligence.result import (
    AnalysisResult,
    assemble_result,
    competency_view,
    dashboard_summary,
    growth_view,
    pattern_view,
    recommendations_view,
)
from src.core.emotional_intelligence.service import (
    AnalysisRequest,
    EmotionalIntelligenceService,
)
from src.core.emotional_intelligence.signals import (
    EmotionalDataPoint,
    EmotionalSnapshot,
    MilestoneRecord,
    RawEmotionalRecord,
    normalize_records,
    summarize_points,
)
from src.core.emotional_intelligence.stages import StageMatch, StageMatcher

__all__ = [
    # Service
    "EmotionalIntelligenceService",
    "AnalysisRequest",
    # Data sources
    "EmotionalDataSource",
    "InMemoryEmotionalDataSource",
    "SQLAlchemyEmotionalDataSource",
    # Pipeline stages
    "normalize_records",
    "summarize_points",
    "PatternAnalyzer",
    "CompetencyAssessor",
    "analyze_balance",
    "GrowthAnalyzer",
    "StageMatcher",
    "DataQualityEstimator",
    "InsightGenerator",
    "assemble_result",
    # Views
    "competency_view",
    "growth_view",
    "pattern_view",
    "recommendations_view",
    "dashboard_summary",
    # Data structures
    "RawEmotionalRecord",
    "MilestoneRecord",
    "EmotionalSnapshot",
    "EmotionalDataPoint",
    "PatternAnalysis",
    "CompetencyAssessment",
    "CompetencyProfile",
    "BalanceAnalysis",
    "GrowthAnalysis",
    "StageMatch",
    "DataQuality",
    "AnalysisResult",
    # Configuration
    "EIConfig",
    "get_ei_config",
    "load_ei_config",
    "reload_ei_config",
    # Constants
    "CompetencyKey",
    "CompetencyLevel",
    "StageKey",
    "RecordKind",
    "DataQualityLevel",
    "AnalysisOutcome",
    "OverallTrend",
    "score_to_level",
    # Exceptions
    "EmotionalIntelligenceError",
    "ValidationError",
    "AnalysisError",
    "AnalysisCancelledError",
    "EIConfigError",
]

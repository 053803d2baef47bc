# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Insight and recommendation generation.

Insights are generated in a fixed order (patterns, concerns, strengths,
development areas, balance, growth, developmental stage, data quality) and
then ranked by significance, ties broken by category name. Python's sort
is stable, so remaining ties keep generation order and the ranking is
deterministic.

Recommendation tiers are produced separately and only when the data
quality allows it.
"""

import logging
from dataclasses import dataclass
from typing import Any

from src.core.emotional_intelligence.competencies import CompetencyProfile, RankedCompetency
from src.core.emotional_intelligence.config import EIConfig
from src.core.emotional_intelligence.constants import (
    SIGNIFICANCE_RANK,
    BalanceClassification,
    CompetencyKey,
    DataQualityLevel,
    InsightType,
    LevelTrend,
    OverallTrend,
    Significance,
    VolumeTrend,
    score_to_level,
)
from src.core.emotional_intelligence.growth import GrowthAnalysis
from src.core.emotional_intelligence.patterns import PatternAnalysis
from src.core.emotional_intelligence.quality import DataQuality
from src.core.emotional_intelligence.stages import StageMatch

logger = logging.getLogger(__name__)

GROWTH_SIGNIFICANCE = {
    OverallTrend.STRONG_GROWTH: Significance.HIGH,
    OverallTrend.MODERATE_GROWTH: Significance.MEDIUM,
    OverallTrend.STABLE: Significance.LOW,
    OverallTrend.INSUFFICIENT_DATA: Significance.LOW,
}


@dataclass(frozen=True)
class Insight:
    """A ranked observation about the subject."""

    insight_type: InsightType
    category: str
    title: str
    description: str
    significance: Significance
    actionable: bool = False
    suggested_actions: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "type": self.insight_type.value,
            "category": self.category,
            "title": self.title,
            "description": self.description,
            "significance": self.significance.value,
            "actionable": self.actionable,
            "suggested_actions": list(self.suggested_actions),
        }


@dataclass(frozen=True)
class Recommendation:
    """One recommendation within a tier."""

    category: str
    title: str
    description: str
    priority: Significance
    timeframe: str
    actions: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "category": self.category,
            "title": self.title,
            "description": self.description,
            "priority": self.priority.value,
            "timeframe": self.timeframe,
            "actions": list(self.actions),
        }


@dataclass(frozen=True)
class RecommendationTiers:
    """Recommendations grouped by horizon, plus exercises and resources."""

    immediate: tuple[Recommendation, ...] = ()
    short_term: tuple[Recommendation, ...] = ()
    long_term: tuple[Recommendation, ...] = ()
    exercises: tuple[dict[str, str], ...] = ()
    resources: tuple[dict[str, str], ...] = ()

    @property
    def tier_count(self) -> int:
        """Number of non-empty tiers."""
        return sum(1 for tier in (self.immediate, self.short_term, self.long_term) if tier)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "immediate": [r.to_dict() for r in self.immediate],
            "short_term": [r.to_dict() for r in self.short_term],
            "long_term": [r.to_dict() for r in self.long_term],
            "exercises": [dict(e) for e in self.exercises],
            "resources": [dict(r) for r in self.resources],
        }


def rank_insights(insights: list[Insight]) -> tuple[Insight, ...]:
    """Order insights by significance desc, then category, then input order."""
    return tuple(
        sorted(insights, key=lambda i: (-SIGNIFICANCE_RANK[i.significance], i.category))
    )


class InsightGenerator:
    """Turns analysis outputs into ranked insights and recommendation tiers."""

    def __init__(self, config: EIConfig) -> None:
        self._config = config
        self._catalog = config.catalog
        self._presentation = config.presentation

    def generate_insights(
        self,
        profile: CompetencyProfile,
        patterns: PatternAnalysis,
        growth: GrowthAnalysis,
        stage_match: StageMatch,
        quality: DataQuality,
    ) -> tuple[Insight, ...]:
        """Generate and rank insights.

        Args:
            profile: Competency profile.
            patterns: Pattern analysis.
            growth: Growth analysis.
            stage_match: Stage alignment.
            quality: Data quality estimate.

        Returns:
            Insights ordered by significance.
        """
        insights: list[Insight] = []
        insights.extend(self._pattern_insights(patterns))
        insights.extend(self._strength_insights(profile.strengths))
        insights.extend(self._development_insights(profile.development_areas))
        insights.extend(self._balance_insights(profile))
        insights.append(self._growth_insight(growth))
        insights.append(self._stage_insight(stage_match))
        insights.extend(self._quality_insights(quality))

        ranked = rank_insights(insights)
        logger.debug("Generated insights", extra={"count": len(ranked)})
        return ranked

    def _pattern_insights(self, patterns: PatternAnalysis) -> list[Insight]:
        insights = []
        for pattern in patterns.summary.strongest_patterns:
            significance = (
                Significance.HIGH
                if pattern.strength > self._presentation.high_pattern_strength
                else Significance.MEDIUM
            )
            insights.append(
                Insight(
                    insight_type=InsightType.PATTERN,
                    category="emotional_patterns",
                    title=pattern.name.replace("_", " ").title(),
                    description=pattern.description,
                    significance=significance,
                    actionable=True,
                    suggested_actions=pattern.recommendations,
                )
            )
        for concern in patterns.summary.concern_areas:
            insights.append(
                Insight(
                    insight_type=InsightType.CONCERN,
                    category="emotional_patterns",
                    title=self._catalog.render("concern_insight_title"),
                    description=concern,
                    significance=Significance.MEDIUM,
                    actionable=True,
                )
            )
        return insights

    def _strength_insights(self, strengths: tuple[RankedCompetency, ...]) -> list[Insight]:
        render = self._catalog.render
        return [
            Insight(
                insight_type=InsightType.STRENGTH,
                category=s.key.value,
                title=render("strength_insight_title", competency=s.name),
                description=render(
                    "strength_insight_description",
                    competency_lower=s.name.lower(),
                    score=s.score,
                ),
                significance=Significance.HIGH,
                actionable=True,
                suggested_actions=(
                    render("strength_insight_action", competency_lower=s.name.lower()),
                ),
            )
            for s in strengths
        ]

    def _development_insights(self, areas: tuple[RankedCompetency, ...]) -> list[Insight]:
        render = self._catalog.render
        return [
            Insight(
                insight_type=InsightType.DEVELOPMENT_OPPORTUNITY,
                category=a.key.value,
                title=render("development_insight_title", competency=a.name),
                description=render(
                    "development_insight_description", competency_lower=a.name.lower()
                ),
                significance=Significance.MEDIUM,
                actionable=True,
                suggested_actions=a.recommended_actions,
            )
            for a in areas
        ]

    def _balance_insights(self, profile: CompetencyProfile) -> list[Insight]:
        balance = profile.balance
        if balance is None:
            return []
        balanced = balance.classification == BalanceClassification.WELL_BALANCED
        render = self._catalog.render
        return [
            Insight(
                insight_type=InsightType.BALANCE,
                category="competency_balance",
                title=render(
                    "balance_insight_title",
                    classification=balance.classification.value.replace("-", " ").title(),
                ),
                description=render(
                    "balance_insight_description",
                    variance=balance.variance,
                    mean=balance.mean,
                ),
                significance=Significance.LOW if balanced else Significance.MEDIUM,
                actionable=not balanced,
                suggested_actions=() if balanced else (render("balance_insight_action"),),
            )
        ]

    def _growth_insight(self, growth: GrowthAnalysis) -> Insight:
        actions: tuple[str, ...] = ()
        if growth.overall_trend != OverallTrend.INSUFFICIENT_DATA:
            growth_actions = self._catalog.growth_actions
            vocabulary_key = (
                "vocabulary_expanding"
                if growth.vocabulary.classification == VolumeTrend.EXPANDING.value
                else "vocabulary_flat"
            )
            confidence_key = (
                "confidence_increasing"
                if growth.confidence.classification == LevelTrend.INCREASING.value
                else "confidence_flat"
            )
            actions = (growth_actions[vocabulary_key], growth_actions[confidence_key])

        return Insight(
            insight_type=InsightType.GROWTH,
            category="growth",
            title=self._catalog.render(
                "growth_insight_title",
                trend=growth.overall_trend.value.replace("_", " ").title(),
            ),
            description=growth.description,
            significance=GROWTH_SIGNIFICANCE[growth.overall_trend],
            actionable=bool(actions),
            suggested_actions=actions,
        )

    def _stage_insight(self, stage_match: StageMatch) -> Insight:
        render = self._catalog.render
        return Insight(
            insight_type=InsightType.DEVELOPMENTAL,
            category="developmental_stage",
            title=render("stage_insight_title", stage=stage_match.stage_name),
            description=render(
                "stage_insight_description",
                stage_lower=stage_match.stage_name.lower(),
                alignment=stage_match.alignment,
            ),
            significance=Significance.MEDIUM,
            actionable=bool(stage_match.recommendations),
            suggested_actions=stage_match.recommendations,
        )

    def _quality_insights(self, quality: DataQuality) -> list[Insight]:
        if quality.level == DataQualityLevel.HIGH:
            return []
        render = self._catalog.render
        return [
            Insight(
                insight_type=InsightType.DATA_QUALITY,
                category="data_quality",
                title=render("quality_insight_title", level=quality.level.value),
                description=render("quality_insight_description", score=quality.score),
                significance=(
                    Significance.HIGH
                    if quality.level == DataQualityLevel.LOW
                    else Significance.LOW
                ),
                actionable=True,
                suggested_actions=(render("quality_insight_action"),),
            )
        ]

    def generate_recommendations(
        self,
        profile: CompetencyProfile,
        stage_match: StageMatch,
    ) -> RecommendationTiers:
        """Build the immediate, short-term and long-term tiers.

        Args:
            profile: Competency profile.
            stage_match: Stage alignment, for the stage focus and resources.

        Returns:
            RecommendationTiers.
        """
        catalog = self._catalog
        timeframes = catalog.timeframes
        areas = profile.development_areas

        immediate = []
        target = areas[0] if areas else self._lowest_gap(profile)
        if target is not None:
            immediate.append(
                self._competency_recommendation(
                    target,
                    "immediate",
                    Significance.HIGH,
                    target.recommended_actions[: self._presentation.immediate_actions],
                )
            )

        short_term = []
        if stage_match.focus:
            short_term.append(
                Recommendation(
                    category="developmental_stage",
                    title=stage_match.focus.get("title", stage_match.stage_name),
                    description=stage_match.focus.get("description", ""),
                    priority=Significance.MEDIUM,
                    timeframe=stage_match.focus.get("timeframe", timeframes.get("short_term", "")),
                    actions=stage_match.recommendations,
                )
            )
        short_term.extend(
            self._competency_recommendation(
                area, "short_term", Significance.MEDIUM, area.recommended_actions
            )
            for area in areas[1:]
        )

        long_term = [
            Recommendation(
                category=s.key.value,
                title=catalog.render("strength_extension_title", competency=s.name),
                description=catalog.render(
                    "strength_extension_description", competency_lower=s.name.lower()
                ),
                priority=Significance.LOW,
                timeframe=timeframes.get("long_term", ""),
                actions=s.recommended_actions,
            )
            for s in profile.strengths
        ]
        holistic = catalog.holistic
        if holistic:
            long_term.append(
                Recommendation(
                    category=holistic.get("category", "holistic_development"),
                    title=holistic.get("title", ""),
                    description=holistic.get("description", ""),
                    priority=Significance.LOW,
                    timeframe=holistic.get("timeframe", timeframes.get("long_term", "")),
                    actions=tuple(holistic.get("actions", ())),
                )
            )

        return RecommendationTiers(
            immediate=tuple(immediate),
            short_term=tuple(short_term),
            long_term=tuple(long_term),
            exercises=self._exercises(areas[0].key if areas else None),
            resources=stage_match.resources,
        )

    def _lowest_gap(self, profile: CompetencyProfile) -> RankedCompetency | None:
        threshold = self._config.scoring.strength_threshold
        gaps = [a for a in profile.assessments if a.score < threshold]
        if not gaps:
            return None
        lowest = min(gaps, key=lambda a: a.score)
        return RankedCompetency(
            key=lowest.key,
            name=lowest.name,
            score=lowest.score,
            level=score_to_level(lowest.score),
            recommended_actions=lowest.recommended_actions,
        )

    def _competency_recommendation(
        self,
        competency: RankedCompetency,
        tier: str,
        priority: Significance,
        actions: tuple[str, ...],
    ) -> Recommendation:
        render = self._catalog.render
        return Recommendation(
            category=competency.key.value,
            title=render(f"{tier}_title", competency=competency.name),
            description=render(f"{tier}_description", competency_lower=competency.name.lower()),
            priority=priority,
            timeframe=self._catalog.timeframes.get(tier, ""),
            actions=tuple(actions),
        )

    def _exercises(self, dominant: CompetencyKey | None) -> tuple[dict[str, str], ...]:
        exercises = self._catalog.exercises
        selected: list[dict[str, str]] = []
        if dominant is not None:
            selected.extend(
                {**exercise, "competency": dominant.value}
                for exercise in exercises.get(dominant.value, ())
            )
        selected.extend(
            {**exercise, "competency": "general"} for exercise in exercises.get("general", ())
        )
        return tuple(selected[: self._presentation.max_exercises])

# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Developmental stage resolution and alignment.

A subject's age selects exactly one stage. Alignment with the stage is the
share of expected capabilities that have any evidence, reduced for each
typical challenge that is strongly evidenced.
"""

import logging
from dataclasses import dataclass
from typing import Any

from src.core.emotional_intelligence.competencies import CompetencyProfile
from src.core.emotional_intelligence.config import EIConfig, StageConfig, StageItemConfig
from src.core.emotional_intelligence.constants import StageKey
from src.core.emotional_intelligence.exceptions import ValidationError
from src.core.emotional_intelligence.patterns import PatternAnalysis

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StageMatch:
    """How well the observed data aligns with a developmental stage.

    Attributes:
        stage_key: Matched stage.
        stage_name: Stage display name.
        age_range: Inclusive (min, max) age range.
        alignment: Alignment in [0, 1].
        met_capabilities: Capabilities with at least one matched anchor.
        unmet_capabilities: Capabilities without evidence.
        evidenced_challenges: Challenges with strong evidence.
        recommendations: Stage recommendations, bounded.
        focus: Stage-specific short-term focus.
        resources: Stage resources.
    """

    stage_key: StageKey
    stage_name: str
    age_range: tuple[int, int]
    alignment: float
    met_capabilities: tuple[str, ...]
    unmet_capabilities: tuple[str, ...]
    evidenced_challenges: tuple[str, ...]
    recommendations: tuple[str, ...]
    focus: dict[str, str]
    resources: tuple[dict[str, str], ...]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "stage": self.stage_key.value,
            "name": self.stage_name,
            "age_range": list(self.age_range),
            "alignment": self.alignment,
            "met_capabilities": list(self.met_capabilities),
            "unmet_capabilities": list(self.unmet_capabilities),
            "evidenced_challenges": list(self.evidenced_challenges),
            "recommendations": list(self.recommendations),
            "focus": dict(self.focus),
            "resources": [dict(r) for r in self.resources],
        }


class StageMatcher:
    """Resolves a subject's stage and measures alignment with it."""

    def __init__(self, config: EIConfig) -> None:
        self._config = config
        self._settings = config.stage_matching

    def resolve(self, age: int) -> StageConfig:
        """Select the stage whose inclusive age range contains the age.

        Args:
            age: Subject age in years.

        Returns:
            The matching StageConfig.

        Raises:
            ValidationError: If the age is not an integer or no stage covers it.
        """
        if isinstance(age, bool) or not isinstance(age, int):
            raise ValidationError("Subject age must be an integer", context={"age": age})

        stage = self._config.stage_for_age(age)
        if stage is None:
            supported = (self._config.stages[0].age_min, self._config.stages[-1].age_max)
            raise ValidationError(
                f"No developmental stage covers age {age}",
                context={"age": age, "supported_range": list(supported)},
            )
        return stage

    def match(
        self,
        stage: StageConfig,
        profile: CompetencyProfile,
        patterns: PatternAnalysis,
    ) -> StageMatch:
        """Measure alignment of the observed data with a stage.

        Args:
            stage: Resolved stage.
            profile: Competency profile of the run.
            patterns: Pattern analysis of the run.

        Returns:
            StageMatch.
        """
        counts = patterns.indicator_counts
        met = [c for c in stage.capabilities if self._anchor_matches(c, counts) >= 1]
        unmet = [c for c in stage.capabilities if self._anchor_matches(c, counts) < 1]
        challenges = [
            c
            for c in stage.challenges
            if c.indicators
            and self._anchor_matches(c, counts) >= self._settings.challenge_min_points
        ]

        fraction = len(met) / len(stage.capabilities) if stage.capabilities else 0.0
        alignment = fraction - self._settings.challenge_penalty * len(challenges)
        alignment = round(min(1.0, max(0.0, alignment)), 4)

        result = StageMatch(
            stage_key=stage.key,
            stage_name=stage.name,
            age_range=(stage.age_min, stage.age_max),
            alignment=alignment,
            met_capabilities=tuple(c.description for c in met),
            unmet_capabilities=tuple(c.description for c in unmet),
            evidenced_challenges=tuple(c.description for c in challenges),
            recommendations=self._recommendations(unmet, challenges, profile),
            focus=dict(stage.focus),
            resources=stage.resources,
        )

        logger.debug(
            "Stage match complete",
            extra={
                "stage": stage.key.value,
                "alignment": alignment,
                "met": len(met),
                "challenges": len(challenges),
            },
        )
        return result

    def _anchor_matches(self, item: StageItemConfig, counts: dict[str, int]) -> int:
        return sum(counts.get(indicator, 0) for indicator in item.indicators)

    def _recommendations(
        self,
        unmet: list[StageItemConfig],
        challenges: list[StageItemConfig],
        profile: CompetencyProfile,
    ) -> tuple[str, ...]:
        catalog = self._config.catalog
        limit = self._settings.max_recommendations

        recommendations = [
            catalog.render("stage_unmet_capability", description=c.description) for c in unmet
        ]
        recommendations.extend(
            catalog.render("stage_challenge", description=c.description) for c in challenges
        )
        # Top up from the weakest competencies when the stage has little to say
        for area in profile.development_areas:
            if len(recommendations) >= limit:
                break
            if area.recommended_actions:
                recommendations.append(area.recommended_actions[0])

        return tuple(recommendations[:limit])

# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Emotional intelligence configuration management.

Loads the competency and stage taxonomies, the phrase lexicon, the
pipeline thresholds and the recommendation catalogue from YAML files and
exposes them as read-only dataclasses.

Usage:
    from src.core.emotional_intelligence.config import get_ei_config

    config = get_ei_config()

    # Competency taxonomy
    empathy = config.get_competency(CompetencyKey.EMPATHY)
    print(empathy.name, [s.key for s in empathy.sub_competencies])

    # Stage lookup
    stage = config.stage_for_age(10)
"""

import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any

from src.core.config.settings import get_settings
from src.core.config.yaml_loader import YAMLLoadError, load_yaml
from src.core.emotional_intelligence.constants import (
    ACTION_BANDS,
    PATTERN_SIGNALS,
    CompetencyKey,
    StageKey,
)
from src.core.emotional_intelligence.exceptions import EIConfigError

logger = logging.getLogger(__name__)

# Default config directory - can be overridden by EI_CONFIG_DIR env var
CONFIG_DIR = Path(
    os.environ.get(
        "EI_CONFIG_DIR",
        Path(__file__).parents[3] / "config" / "emotional_intelligence",
    )
)

CONFIG_FILES = (
    "competencies.yaml",
    "stages.yaml",
    "thresholds.yaml",
    "lexicon.yaml",
    "recommendations.yaml",
)


@dataclass(frozen=True)
class SubCompetencyConfig:
    """A named facet of a competency.

    Attributes:
        key: Sub-competency identifier.
        description: Human-readable description.
        weight: Normalized weight within its competency.
        indicators: Indicator anchors that count as evidence.
        signal: Optional pattern signal name.
    """

    key: str
    description: str
    weight: float
    indicators: tuple[str, ...]
    signal: str | None = None


@dataclass(frozen=True)
class CompetencyConfig:
    """One of the five EI competencies.

    Attributes:
        key: Competency key.
        name: Display name.
        description: Human-readable description.
        indicators: All indicator anchors of the competency.
        sub_competencies: Named facets, in configured order.
    """

    key: CompetencyKey
    name: str
    description: str
    indicators: tuple[str, ...]
    sub_competencies: tuple[SubCompetencyConfig, ...]


@dataclass(frozen=True)
class StageItemConfig:
    """A capability or challenge of a developmental stage."""

    description: str
    indicators: tuple[str, ...]


@dataclass(frozen=True)
class StageConfig:
    """A developmental stage definition.

    Attributes:
        key: Stage key.
        name: Display name.
        age_min: Inclusive lower age bound.
        age_max: Inclusive upper age bound.
        capabilities: Expected capabilities.
        challenges: Typical challenges.
        focus: Short-term recommendation {title, description, timeframe}.
        resources: Stage resources {type, title, description}.
    """

    key: StageKey
    name: str
    age_min: int
    age_max: int
    capabilities: tuple[StageItemConfig, ...]
    challenges: tuple[StageItemConfig, ...]
    focus: dict[str, str]
    resources: tuple[dict[str, str], ...]

    def contains(self, age: int) -> bool:
        """Check whether an age falls in this stage's inclusive range."""
        return self.age_min <= age <= self.age_max


@dataclass(frozen=True)
class LexiconConfig:
    """Emotion vocabulary, phrase lexicon and indicator groups.

    Attributes:
        emotion_vocabulary: Curated emotion words used for inference.
        positive_emotions: Emotions counted as positive affect.
        phrases: Lower-cased phrase to derived tags.
        indicator_groups: Regulation and social indicator tag lists.
        trigger_contexts: Trigger context to tag list, in configured order.
    """

    emotion_vocabulary: tuple[str, ...]
    positive_emotions: frozenset[str]
    phrases: dict[str, tuple[str, ...]]
    indicator_groups: dict[str, frozenset[str]]
    trigger_contexts: dict[str, frozenset[str]]


@dataclass(frozen=True)
class NormalizationConfig:
    """Signal normalizer defaults."""

    default_intensity: float = 0.5
    default_confidence: float = 0.5
    excerpt_length: int = 160


@dataclass(frozen=True)
class PatternConfig:
    """Pattern analyzer thresholds.

    Attributes:
        variability_low_below: SD below which variability is low.
        variability_moderate_below: SD below which variability is moderate.
        stability_sd_ceiling: SD at which the stability score reaches 0.
        peak_hours: Number of peak hours reported.
        strong_pattern_threshold: Signal strength marking a strong pattern.
        max_strong_patterns: Bound on strongest patterns.
        vocabulary_target: Vocabulary size saturating vocabulary richness.
        active_days_target: Active days saturating engagement consistency.
        coping_balance_below: Coping balance below which coping is a concern.
        empathy_indicators_below: Empathy count below which empathy is a concern.
        support_seeking_above: Support-seeking rate marking a positive.
        stability_score_above: Stability score marking a positive.
        subpattern_tolerance: Early-vs-late tolerance per dimension.
    """

    variability_low_below: float = 0.15
    variability_moderate_below: float = 0.3
    stability_sd_ceiling: float = 0.5
    peak_hours: int = 3
    strong_pattern_threshold: float = 0.7
    max_strong_patterns: int = 3
    vocabulary_target: int = 8
    active_days_target: int = 10
    coping_balance_below: float = 0.4
    empathy_indicators_below: int = 2
    support_seeking_above: float = 0.3
    stability_score_above: float = 70.0
    subpattern_tolerance: dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class ScoringConfig:
    """Competency assessor weights and thresholds."""

    evidence_weight: float = 0.6
    signal_weight: float = 0.4
    evidence_saturation_density: float = 0.25
    full_confidence_matches: int = 3
    no_match_confidence: float = 0.3
    max_evidence_per_sub_competency: int = 3
    max_evidence_per_competency: int = 5
    strength_threshold: float = 70.0
    development_threshold: float = 50.0
    well_balanced_below: float = 100.0
    moderately_balanced_below: float = 300.0


@dataclass(frozen=True)
class GrowthConfig:
    """Growth analyzer settings.

    Attributes:
        sub_windows: Number of equal sub-windows in the analysis window.
        min_sub_windows: Non-empty sub-windows required for trends.
        tolerance: Small-change tolerance per trend dimension.
        high_confidence_threshold: Confidence marking a high-confidence report.
        complex_emotion_min_competencies: Competencies marking a complex emotion.
        projection_horizons_days: Projection horizons.
        volume_half_point: Points at which the volume factor reaches 0.5.
        horizon_decay_days: Horizon at which projection confidence halves.
        max_confidence: Cap on projection confidence.
    """

    sub_windows: int = 4
    min_sub_windows: int = 3
    tolerance: dict[str, float] = field(default_factory=dict)
    high_confidence_threshold: float = 0.9
    complex_emotion_min_competencies: int = 3
    projection_horizons_days: tuple[int, ...] = (30, 90, 180)
    volume_half_point: float = 10.0
    horizon_decay_days: float = 90.0
    max_confidence: float = 0.85


@dataclass(frozen=True)
class StageMatchConfig:
    """Stage matcher settings."""

    challenge_min_points: int = 2
    challenge_penalty: float = 0.15
    max_recommendations: int = 3


@dataclass(frozen=True)
class QualityConfig:
    """Data quality estimator settings."""

    min_data_points: int = 3
    high_threshold: float = 75.0
    volume_weight: float = 40.0
    span_weight: float = 30.0
    diversity_weight: float = 30.0
    target_data_points: int = 20
    target_span_days: float = 14.0
    target_distinct_signals: int = 12


@dataclass(frozen=True)
class ConfidenceConfig:
    """Overall analysis confidence weights."""

    quantity_weight: float = 0.4
    quantity_target: int = 20
    diversity_weight: float = 0.3
    diversity_target: int = 10
    pattern_weight: float = 0.3


@dataclass(frozen=True)
class PresentationConfig:
    """Bounds on insight and dashboard output."""

    high_pattern_strength: float = 0.85
    max_exercises: int = 3
    immediate_actions: int = 2
    top_insights: int = 3
    top_recommendations: int = 2
    vocabulary_sample: int = 8


@dataclass(frozen=True)
class CatalogConfig:
    """Recommendation catalogue and text templates.

    Attributes:
        competency_actions: Competency key to band to actions.
        exercises: Competency key (or "general") to exercises.
        holistic: Long-term holistic recommendation.
        timeframes: Tier timeframes.
        templates: str.format templates.
        concerns: Concern messages by key.
        positives: Positive indicator messages by key.
        growth_descriptions: Overall trend to description.
        growth_actions: Growth action messages by key.
        reasons: Recommendation status reasons.
    """

    competency_actions: dict[str, dict[str, tuple[str, ...]]]
    exercises: dict[str, tuple[dict[str, str], ...]]
    holistic: dict[str, Any]
    timeframes: dict[str, str]
    templates: dict[str, str]
    concerns: dict[str, str]
    positives: dict[str, str]
    growth_descriptions: dict[str, str]
    growth_actions: dict[str, str]
    reasons: dict[str, str]

    def actions_for(self, competency: CompetencyKey, band: str) -> tuple[str, ...]:
        """Get the recommended actions of a competency for a score band."""
        return self.competency_actions.get(competency.value, {}).get(band, ())

    def render(self, template: str, **fields: Any) -> str:
        """Render a named template.

        Args:
            template: Template key.
            **fields: Placeholder values.

        Returns:
            Rendered text.
        """
        return self.templates[template].format(**fields)


@dataclass(frozen=True)
class EIConfig:
    """Complete emotional intelligence configuration.

    Provides the taxonomies, thresholds and catalogues the pipeline
    stages read. Instances are shared between runs and never mutated.
    """

    competencies: dict[CompetencyKey, CompetencyConfig]
    stages: tuple[StageConfig, ...]
    lexicon: LexiconConfig
    normalization: NormalizationConfig
    patterns: PatternConfig
    scoring: ScoringConfig
    growth: GrowthConfig
    stage_matching: StageMatchConfig
    quality: QualityConfig
    confidence: ConfidenceConfig
    presentation: PresentationConfig
    catalog: CatalogConfig
    indicator_competencies: dict[str, tuple[CompetencyKey, ...]] = field(default_factory=dict)

    def get_competency(self, key: CompetencyKey) -> CompetencyConfig:
        """Get the configuration of a competency.

        Args:
            key: Competency key.

        Returns:
            CompetencyConfig for the key.
        """
        return self.competencies[key]

    def get_stage(self, key: StageKey) -> StageConfig:
        """Get a stage by key.

        Args:
            key: Stage key.

        Returns:
            StageConfig for the key.

        Raises:
            KeyError: If the stage is not configured.
        """
        for stage in self.stages:
            if stage.key == key:
                return stage
        raise KeyError(key)

    def stage_for_age(self, age: int) -> StageConfig | None:
        """Find the stage whose inclusive age range contains an age.

        Args:
            age: Subject age in years.

        Returns:
            Matching StageConfig or None when no stage covers the age.
        """
        for stage in self.stages:
            if stage.contains(age):
                return stage
        return None


def _as_tuple(value: Any) -> tuple[str, ...]:
    if not value:
        return ()
    return tuple(str(item) for item in value)


def _parse_sub_competency(key: str, data: dict, competency: str) -> SubCompetencyConfig:
    """Parse a sub-competency entry.

    Args:
        key: Sub-competency key.
        data: Raw YAML data.
        competency: Owning competency key, for error messages.

    Returns:
        SubCompetencyConfig with an unnormalized weight.
    """
    signal = data.get("signal")
    if signal is not None and signal not in PATTERN_SIGNALS:
        raise EIConfigError(
            f"Unknown pattern signal '{signal}' in {competency}.{key}",
            context={"competency": competency, "sub_competency": key},
        )
    weight = float(data.get("weight", 1.0))
    if weight <= 0:
        raise EIConfigError(f"Sub-competency weight must be positive: {competency}.{key}")
    return SubCompetencyConfig(
        key=key,
        description=str(data.get("description", "")),
        weight=weight,
        indicators=_as_tuple(data.get("indicators")),
        signal=signal,
    )


def _parse_competencies(data: dict) -> dict[CompetencyKey, CompetencyConfig]:
    """Parse the competency taxonomy.

    Exactly the five competencies of CompetencyKey must be present. The
    result is ordered as CompetencyKey, and sub-competency weights are
    normalized to sum to 1 per competency.

    Args:
        data: Raw "competencies" mapping.

    Returns:
        Competency configs keyed by CompetencyKey.

    Raises:
        EIConfigError: If a competency is missing or unknown.
    """
    configured = set(data)
    expected = {key.value for key in CompetencyKey}
    if configured != expected:
        raise EIConfigError(
            "Competency taxonomy must define exactly the five EI competencies",
            context={
                "missing": sorted(expected - configured),
                "unknown": sorted(configured - expected),
            },
        )

    competencies: dict[CompetencyKey, CompetencyConfig] = {}
    for key in CompetencyKey:
        raw = data[key.value] or {}
        subs = [
            _parse_sub_competency(sub_key, sub_data or {}, key.value)
            for sub_key, sub_data in (raw.get("sub_competencies") or {}).items()
        ]
        if not subs:
            raise EIConfigError(f"Competency '{key.value}' has no sub-competencies")
        total = sum(sub.weight for sub in subs)
        normalized = tuple(
            SubCompetencyConfig(
                key=sub.key,
                description=sub.description,
                weight=sub.weight / total,
                indicators=sub.indicators,
                signal=sub.signal,
            )
            for sub in subs
        )
        competencies[key] = CompetencyConfig(
            key=key,
            name=str(raw.get("name", key.value)),
            description=str(raw.get("description", "")),
            indicators=_as_tuple(raw.get("indicators")),
            sub_competencies=normalized,
        )
    return competencies


def _parse_stage_items(items: list | None) -> tuple[StageItemConfig, ...]:
    return tuple(
        StageItemConfig(
            description=str(item.get("description", "")),
            indicators=_as_tuple(item.get("indicators")),
        )
        for item in items or []
    )


def _parse_stages(data: dict) -> tuple[StageConfig, ...]:
    """Parse the developmental stage taxonomy.

    Args:
        data: Raw "stages" mapping.

    Returns:
        Stages ordered by lower age bound.

    Raises:
        EIConfigError: If a stage key is unknown, a range is malformed, or
            two ranges overlap.
    """
    stages = []
    for key, raw in data.items():
        try:
            stage_key = StageKey(key)
        except ValueError as e:
            raise EIConfigError(f"Unknown developmental stage '{key}'") from e

        age_range = raw.get("age_range") or []
        if len(age_range) != 2 or int(age_range[0]) > int(age_range[1]):
            raise EIConfigError(
                f"Stage '{key}' needs an age_range of [min, max]",
                context={"age_range": age_range},
            )

        stages.append(
            StageConfig(
                key=stage_key,
                name=str(raw.get("name", key)),
                age_min=int(age_range[0]),
                age_max=int(age_range[1]),
                capabilities=_parse_stage_items(raw.get("capabilities")),
                challenges=_parse_stage_items(raw.get("challenges")),
                focus={k: str(v) for k, v in (raw.get("focus") or {}).items()},
                resources=tuple(
                    {k: str(v) for k, v in resource.items()}
                    for resource in raw.get("resources") or []
                ),
            )
        )

    stages.sort(key=lambda s: s.age_min)
    for previous, current in zip(stages, stages[1:]):
        if current.age_min <= previous.age_max:
            raise EIConfigError(
                f"Stage ranges overlap: '{previous.key.value}' and '{current.key.value}'",
                context={
                    "first": [previous.age_min, previous.age_max],
                    "second": [current.age_min, current.age_max],
                },
            )
    return tuple(stages)


def _parse_lexicon(data: dict) -> LexiconConfig:
    """Parse the lexicon file.

    Args:
        data: Raw lexicon YAML data.

    Returns:
        LexiconConfig instance.
    """
    return LexiconConfig(
        emotion_vocabulary=tuple(word.lower() for word in _as_tuple(data.get("emotion_vocabulary"))),
        positive_emotions=frozenset(word.lower() for word in _as_tuple(data.get("positive_emotions"))),
        phrases={
            str(phrase).lower(): _as_tuple(tags)
            for phrase, tags in (data.get("phrases") or {}).items()
        },
        indicator_groups={
            name: frozenset(_as_tuple(tags))
            for name, tags in (data.get("indicator_groups") or {}).items()
        },
        trigger_contexts={
            name: frozenset(_as_tuple(tags))
            for name, tags in (data.get("trigger_contexts") or {}).items()
        },
    )


def _parse_patterns(data: dict) -> PatternConfig:
    variability = data.get("variability", {})
    targets = data.get("signal_targets", {})
    concerns = data.get("concerns", {})
    positives = data.get("positives", {})
    return PatternConfig(
        variability_low_below=float(variability.get("low_below", 0.15)),
        variability_moderate_below=float(variability.get("moderate_below", 0.3)),
        stability_sd_ceiling=float(data.get("stability_sd_ceiling", 0.5)),
        peak_hours=int(data.get("peak_hours", 3)),
        strong_pattern_threshold=float(data.get("strong_pattern_threshold", 0.7)),
        max_strong_patterns=int(data.get("max_strong_patterns", 3)),
        vocabulary_target=int(targets.get("vocabulary_size", 8)),
        active_days_target=int(targets.get("active_days", 10)),
        coping_balance_below=float(concerns.get("coping_balance_below", 0.4)),
        empathy_indicators_below=int(concerns.get("empathy_indicators_below", 2)),
        support_seeking_above=float(positives.get("support_seeking_above", 0.3)),
        stability_score_above=float(positives.get("stability_score_above", 70)),
        subpattern_tolerance={
            k: float(v) for k, v in (data.get("subpattern_tolerance") or {}).items()
        },
    )


def _parse_scoring(data: dict) -> ScoringConfig:
    balance = data.get("balance", {})
    return ScoringConfig(
        evidence_weight=float(data.get("evidence_weight", 0.6)),
        signal_weight=float(data.get("signal_weight", 0.4)),
        evidence_saturation_density=float(data.get("evidence_saturation_density", 0.25)),
        full_confidence_matches=int(data.get("full_confidence_matches", 3)),
        no_match_confidence=float(data.get("no_match_confidence", 0.3)),
        max_evidence_per_sub_competency=int(data.get("max_evidence_per_sub_competency", 3)),
        max_evidence_per_competency=int(data.get("max_evidence_per_competency", 5)),
        strength_threshold=float(data.get("strength_threshold", 70)),
        development_threshold=float(data.get("development_threshold", 50)),
        well_balanced_below=float(balance.get("well_balanced_below", 100)),
        moderately_balanced_below=float(balance.get("moderately_balanced_below", 300)),
    )


def _parse_growth(data: dict) -> GrowthConfig:
    projection = data.get("projection", {})
    config = GrowthConfig(
        sub_windows=int(data.get("sub_windows", 4)),
        min_sub_windows=int(data.get("min_sub_windows", 3)),
        tolerance={k: float(v) for k, v in (data.get("tolerance") or {}).items()},
        high_confidence_threshold=float(data.get("high_confidence_threshold", 0.9)),
        complex_emotion_min_competencies=int(data.get("complex_emotion_min_competencies", 3)),
        projection_horizons_days=tuple(
            int(days) for days in data.get("projection_horizons_days", (30, 90, 180))
        ),
        volume_half_point=float(projection.get("volume_half_point", 10)),
        horizon_decay_days=float(projection.get("horizon_decay_days", 90)),
        max_confidence=float(projection.get("max_confidence", 0.85)),
    )
    if config.min_sub_windows > config.sub_windows:
        raise EIConfigError("growth.min_sub_windows cannot exceed growth.sub_windows")
    return config


def _parse_quality(data: dict) -> QualityConfig:
    weights = data.get("weights", {})
    targets = data.get("targets", {})
    return QualityConfig(
        min_data_points=int(data.get("min_data_points", 3)),
        high_threshold=float(data.get("high_threshold", 75)),
        volume_weight=float(weights.get("volume", 40)),
        span_weight=float(weights.get("span", 30)),
        diversity_weight=float(weights.get("diversity", 30)),
        target_data_points=int(targets.get("data_points", 20)),
        target_span_days=float(targets.get("span_days", 14)),
        target_distinct_signals=int(targets.get("distinct_signals", 12)),
    )


def _parse_catalog(data: dict) -> CatalogConfig:
    """Parse the recommendation catalogue.

    Args:
        data: Raw recommendations YAML data.

    Returns:
        CatalogConfig instance.

    Raises:
        EIConfigError: If a competency lacks an action band.
    """
    actions: dict[str, dict[str, tuple[str, ...]]] = {}
    for key in CompetencyKey:
        bands = (data.get("competency_actions") or {}).get(key.value) or {}
        missing = [band for band in ACTION_BANDS if not bands.get(band)]
        if missing:
            raise EIConfigError(
                f"Competency '{key.value}' is missing action bands",
                context={"missing": missing},
            )
        actions[key.value] = {band: _as_tuple(bands[band]) for band in ACTION_BANDS}

    messages = data.get("pattern_messages", {})
    return CatalogConfig(
        competency_actions=actions,
        exercises={
            key: tuple({k: str(v) for k, v in item.items()} for item in items or [])
            for key, items in (data.get("exercises") or {}).items()
        },
        holistic=dict(data.get("holistic") or {}),
        timeframes={k: str(v) for k, v in (data.get("timeframes") or {}).items()},
        templates={k: str(v) for k, v in (data.get("templates") or {}).items()},
        concerns=dict(messages.get("concerns") or {}),
        positives=dict(messages.get("positives") or {}),
        growth_descriptions=dict(data.get("growth_descriptions") or {}),
        growth_actions=dict(data.get("growth_actions") or {}),
        reasons=dict(data.get("recommendation_reasons") or {}),
    )


def _index_indicators(
    competencies: dict[CompetencyKey, CompetencyConfig],
) -> dict[str, tuple[CompetencyKey, ...]]:
    index: dict[str, list[CompetencyKey]] = {}
    for key, competency in competencies.items():
        for indicator in competency.indicators:
            index.setdefault(indicator, []).append(key)
    return {indicator: tuple(keys) for indicator, keys in index.items()}


def _load_file(dir_path: Path, name: str) -> dict[str, Any]:
    try:
        return load_yaml(dir_path / name)
    except YAMLLoadError as e:
        raise EIConfigError(f"Failed to load EI config file {name}: {e.reason}") from e


@lru_cache(maxsize=1)
def load_ei_config(config_dir: str | None = None) -> EIConfig:
    """Load emotional intelligence configuration from YAML files.

    Uses LRU cache to avoid reloading on every access.
    Call `reload_ei_config()` to reload.

    Args:
        config_dir: Optional config directory override (as string for caching).

    Returns:
        EIConfig instance.

    Raises:
        EIConfigError: If a file is missing or the configuration is invalid.
    """
    dir_path = CONFIG_DIR if config_dir is None else Path(config_dir)

    logger.debug("Loading EI config from: %s", dir_path)

    raw = {name: _load_file(dir_path, name) for name in CONFIG_FILES}
    thresholds = raw["thresholds.yaml"]

    competencies = _parse_competencies(raw["competencies.yaml"].get("competencies") or {})
    stages = _parse_stages(raw["stages.yaml"].get("stages") or {})
    if {stage.key for stage in stages} != set(StageKey):
        raise EIConfigError("Stage taxonomy must define all four developmental stages")

    normalization = thresholds.get("normalization", {})
    stage_matching = thresholds.get("stages", {})
    confidence = thresholds.get("confidence", {})
    insights = thresholds.get("insights", {})
    dashboard = thresholds.get("dashboard", {})

    config = EIConfig(
        competencies=competencies,
        stages=stages,
        lexicon=_parse_lexicon(raw["lexicon.yaml"]),
        normalization=NormalizationConfig(
            default_intensity=float(normalization.get("default_intensity", 0.5)),
            default_confidence=float(normalization.get("default_confidence", 0.5)),
            excerpt_length=int(normalization.get("excerpt_length", 160)),
        ),
        patterns=_parse_patterns(thresholds.get("patterns", {})),
        scoring=_parse_scoring(thresholds.get("scoring", {})),
        growth=_parse_growth(thresholds.get("growth", {})),
        stage_matching=StageMatchConfig(
            challenge_min_points=int(stage_matching.get("challenge_min_points", 2)),
            challenge_penalty=float(stage_matching.get("challenge_penalty", 0.15)),
            max_recommendations=int(stage_matching.get("max_recommendations", 3)),
        ),
        quality=_parse_quality(thresholds.get("quality", {})),
        confidence=ConfidenceConfig(
            quantity_weight=float(confidence.get("quantity_weight", 0.4)),
            quantity_target=int(confidence.get("quantity_target", 20)),
            diversity_weight=float(confidence.get("diversity_weight", 0.3)),
            diversity_target=int(confidence.get("diversity_target", 10)),
            pattern_weight=float(confidence.get("pattern_weight", 0.3)),
        ),
        presentation=PresentationConfig(
            high_pattern_strength=float(insights.get("high_pattern_strength", 0.85)),
            max_exercises=int(insights.get("max_exercises", 3)),
            immediate_actions=int(insights.get("immediate_actions", 2)),
            top_insights=int(dashboard.get("top_insights", 3)),
            top_recommendations=int(dashboard.get("top_recommendations", 2)),
            vocabulary_sample=int(dashboard.get("vocabulary_sample", 8)),
        ),
        catalog=_parse_catalog(raw["recommendations.yaml"]),
        indicator_competencies=_index_indicators(competencies),
    )

    logger.info(
        "Loaded EI config: %d competencies, %d stages, %d lexicon phrases",
        len(config.competencies),
        len(config.stages),
        len(config.lexicon.phrases),
    )

    return config


def get_ei_config() -> EIConfig:
    """Get the cached emotional intelligence configuration.

    Honors the EI_CONFIG_DIR setting when it is set.

    Returns:
        EIConfig instance.
    """
    config_dir = get_settings().ei.config_dir
    return load_ei_config(str(config_dir) if config_dir else None)


def reload_ei_config() -> EIConfig:
    """Force reload of emotional intelligence configuration.

    Clears the cache and loads fresh configuration.

    Returns:
        Fresh EIConfig instance.
    """
    load_ei_config.cache_clear()
    return get_ei_config()

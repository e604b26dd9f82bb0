"""Centralised, injectable configuration for the role detection engine."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import Self

from dotenv import load_dotenv

from .config_file import DetectionConfigFile
from .domain.lexical import DEFAULT_FUZZY_THRESHOLD
from .domain.recommendations import RecommendationSettings
from .domain.scoring import FactorWeights, ScoringAdjustments, ScoringRules
from .exceptions import InvalidDetectionConfigError


class NumberEnvVarError(ValueError):
    """Raised when an environment variable must be numeric."""

    def __init__(self, env_name: str) -> None:
        super().__init__(f"{env_name} must be a number.")


class BooleanEnvVarError(ValueError):
    """Raised when an environment variable must be a supported boolean."""

    def __init__(self, env_name: str) -> None:
        super().__init__(f"{env_name} must be a boolean value (true/false, 1/0, yes/no, on/off).")


@dataclass(frozen=True)
class DynamicThresholdConfig:
    """Threshold relaxation ladder used when too few roles clear the threshold."""

    enabled: bool = True
    initial_threshold: float = 0.6
    minimum_threshold: float = 0.3
    decrement_step: float = 0.05
    max_iterations: int = 5


@dataclass(frozen=True)
class DetectionConfig:
    """Immutable detection configuration.

    Load from environment with `DetectionConfig.from_env()` or construct directly for testing.
    Call `validate()` before use; the service validates every config it is given.
    """

    confidence_threshold: float = 0.6
    max_results: int = 5
    min_results: int = 2
    weights: FactorWeights = field(default_factory=FactorWeights)
    dynamic_threshold: DynamicThresholdConfig = field(default_factory=DynamicThresholdConfig)
    fuzzy_threshold: float = DEFAULT_FUZZY_THRESHOLD
    adjustments: ScoringAdjustments = field(default_factory=ScoringAdjustments)
    recommendations: RecommendationSettings = field(default_factory=RecommendationSettings)
    scoring_workers: int = 1

    @property
    def scoring_rules(self) -> ScoringRules:
        return ScoringRules(
            weights=self.weights,
            adjustments=self.adjustments,
            fuzzy_threshold=self.fuzzy_threshold,
        )

    @classmethod
    def from_env(cls, dotenv_path: str | None = None) -> Self:
        """Load configuration from environment variables.

        Args:
            dotenv_path: Optional path to .env file. If None, uses default .env discovery.

        Returns:
            DetectionConfig instance populated from environment.
        """
        load_dotenv(dotenv_path)
        defaults = cls()
        weights = defaults.weights
        dynamic = defaults.dynamic_threshold
        adjustments = defaults.adjustments

        return cls(
            confidence_threshold=_float_env(
                "ROLE_CONFIDENCE_THRESHOLD", defaults.confidence_threshold
            ),
            max_results=_int_env("ROLE_MAX_RESULTS", defaults.max_results),
            min_results=_int_env("ROLE_MIN_RESULTS", defaults.min_results),
            weights=FactorWeights(
                title=_float_env("ROLE_WEIGHT_TITLE", weights.title),
                skills=_float_env("ROLE_WEIGHT_SKILLS", weights.skills),
                experience=_float_env("ROLE_WEIGHT_EXPERIENCE", weights.experience),
                industry=_float_env("ROLE_WEIGHT_INDUSTRY", weights.industry),
                education=_float_env("ROLE_WEIGHT_EDUCATION", weights.education),
                version=_int_env("ROLE_WEIGHTING_VERSION", weights.version),
            ),
            dynamic_threshold=DynamicThresholdConfig(
                enabled=_bool_env("ROLE_DYNAMIC_THRESHOLD_ENABLED", dynamic.enabled),
                initial_threshold=_float_env(
                    "ROLE_DYNAMIC_INITIAL_THRESHOLD", dynamic.initial_threshold
                ),
                minimum_threshold=_float_env(
                    "ROLE_DYNAMIC_MINIMUM_THRESHOLD", dynamic.minimum_threshold
                ),
                decrement_step=_float_env("ROLE_DYNAMIC_DECREMENT_STEP", dynamic.decrement_step),
                max_iterations=_int_env("ROLE_DYNAMIC_MAX_ITERATIONS", dynamic.max_iterations),
            ),
            fuzzy_threshold=_float_env("ROLE_FUZZY_THRESHOLD", defaults.fuzzy_threshold),
            adjustments=replace(
                adjustments,
                seniority_bonus=_float_env("ROLE_SENIORITY_BONUS", adjustments.seniority_bonus),
                seniority_min_years=_float_env(
                    "ROLE_SENIORITY_MIN_YEARS", adjustments.seniority_min_years
                ),
                negative_penalty_per_hit=_float_env(
                    "ROLE_NEGATIVE_PENALTY_PER_HIT", adjustments.negative_penalty_per_hit
                ),
                negative_penalty_cap=_float_env(
                    "ROLE_NEGATIVE_PENALTY_CAP", adjustments.negative_penalty_cap
                ),
            ),
            scoring_workers=_int_env("ROLE_SCORING_WORKERS", defaults.scoring_workers),
        )

    def with_overrides(
        self,
        *,
        confidence_threshold: float | None = None,
        max_results: int | None = None,
        min_results: int | None = None,
        fuzzy_threshold: float | None = None,
        dynamic_threshold_enabled: bool | None = None,
        scoring_workers: int | None = None,
    ) -> Self:
        """Return a new config with specified overrides (for CLI options and callers)."""
        return replace(
            self,
            confidence_threshold=self.confidence_threshold
            if confidence_threshold is None
            else confidence_threshold,
            max_results=self.max_results if max_results is None else max_results,
            min_results=self.min_results if min_results is None else min_results,
            fuzzy_threshold=self.fuzzy_threshold if fuzzy_threshold is None else fuzzy_threshold,
            dynamic_threshold=self.dynamic_threshold
            if dynamic_threshold_enabled is None
            else replace(self.dynamic_threshold, enabled=dynamic_threshold_enabled),
            scoring_workers=self.scoring_workers if scoring_workers is None else scoring_workers,
        )

    def with_file_overrides(self, file_config: DetectionConfigFile) -> Self:
        """Return a new config with config-file values overriding env/default values."""
        weights = self.weights
        dynamic = self.dynamic_threshold
        adjustments = self.adjustments
        return replace(
            self,
            confidence_threshold=_pick(file_config.confidence_threshold, self.confidence_threshold),
            max_results=_pick(file_config.max_results, self.max_results),
            min_results=_pick(file_config.min_results, self.min_results),
            fuzzy_threshold=_pick(file_config.fuzzy_threshold, self.fuzzy_threshold),
            scoring_workers=_pick(file_config.scoring_workers, self.scoring_workers),
            weights=FactorWeights(
                title=_pick(file_config.weight_title, weights.title),
                skills=_pick(file_config.weight_skills, weights.skills),
                experience=_pick(file_config.weight_experience, weights.experience),
                industry=_pick(file_config.weight_industry, weights.industry),
                education=_pick(file_config.weight_education, weights.education),
                version=_pick(file_config.weighting_version, weights.version),
            ),
            dynamic_threshold=DynamicThresholdConfig(
                enabled=_pick(file_config.dynamic_enabled, dynamic.enabled),
                initial_threshold=_pick(
                    file_config.dynamic_initial_threshold, dynamic.initial_threshold
                ),
                minimum_threshold=_pick(
                    file_config.dynamic_minimum_threshold, dynamic.minimum_threshold
                ),
                decrement_step=_pick(file_config.dynamic_decrement_step, dynamic.decrement_step),
                max_iterations=_pick(file_config.dynamic_max_iterations, dynamic.max_iterations),
            ),
            adjustments=replace(
                adjustments,
                title_match_score=_pick(
                    file_config.title_match_score, adjustments.title_match_score
                ),
                title_miss_score=_pick(file_config.title_miss_score, adjustments.title_miss_score),
                seniority_bonus=_pick(file_config.seniority_bonus, adjustments.seniority_bonus),
                seniority_min_years=_pick(
                    file_config.seniority_min_years, adjustments.seniority_min_years
                ),
                negative_penalty_per_hit=_pick(
                    file_config.negative_penalty_per_hit, adjustments.negative_penalty_per_hit
                ),
                negative_penalty_cap=_pick(
                    file_config.negative_penalty_cap, adjustments.negative_penalty_cap
                ),
                backfill_step=_pick(file_config.backfill_step, adjustments.backfill_step),
            ),
        )

    def problems(self) -> list[str]:
        """Return every invariant this config breaks (empty when valid)."""
        problems: list[str] = []
        for name, value in (
            ("confidence_threshold", self.confidence_threshold),
            ("fuzzy_threshold", self.fuzzy_threshold),
            ("dynamic_threshold.initial_threshold", self.dynamic_threshold.initial_threshold),
            ("dynamic_threshold.minimum_threshold", self.dynamic_threshold.minimum_threshold),
            ("adjustments.title_match_score", self.adjustments.title_match_score),
            ("adjustments.title_miss_score", self.adjustments.title_miss_score),
        ):
            if not 0.0 <= value <= 1.0:
                problems.append(f"{name} must be between 0 and 1")

        if self.max_results < 1:
            problems.append("max_results must be at least 1")
        if self.min_results < 0:
            problems.append("min_results must not be negative")
        if self.min_results > self.max_results:
            problems.append("min_results must not exceed max_results")

        weights = self.weights
        for name, value in (
            ("title", weights.title),
            ("skills", weights.skills),
            ("experience", weights.experience),
            ("industry", weights.industry),
            ("education", weights.education),
        ):
            if value < 0:
                problems.append(f"weights.{name} must not be negative")
        if weights.title + weights.skills + weights.experience <= 0:
            problems.append("weights for title, skills and experience must not all be zero")

        dynamic = self.dynamic_threshold
        if dynamic.minimum_threshold > dynamic.initial_threshold:
            problems.append("dynamic_threshold.minimum_threshold must not exceed initial_threshold")
        if dynamic.decrement_step <= 0:
            problems.append("dynamic_threshold.decrement_step must be positive")
        if dynamic.max_iterations < 0:
            problems.append("dynamic_threshold.max_iterations must not be negative")

        adjustments = self.adjustments
        for name, value in (
            ("seniority_bonus", adjustments.seniority_bonus),
            ("seniority_min_years", adjustments.seniority_min_years),
            ("negative_penalty_per_hit", adjustments.negative_penalty_per_hit),
            ("negative_penalty_cap", adjustments.negative_penalty_cap),
            ("backfill_step", adjustments.backfill_step),
        ):
            if value < 0:
                problems.append(f"adjustments.{name} must not be negative")

        if self.recommendations.max_recommendations < 0:
            problems.append("recommendations.max_recommendations must not be negative")
        if self.scoring_workers < 1:
            problems.append("scoring_workers must be at least 1")
        return problems

    def validate(self) -> Self:
        """Return self, or raise InvalidDetectionConfigError listing every broken invariant."""
        problems = self.problems()
        if problems:
            raise InvalidDetectionConfigError(problems)
        return self


@dataclass(frozen=True)
class EngineSettings:
    """Where the role catalog comes from and how long it is cached."""

    catalog_path: str = ""
    catalog_url: str = ""
    cache_ttl_seconds: float = 3600.0
    fetch_timeout_seconds: float = 10.0
    http_timeout_seconds: float = 5.0
    circuit_breaker_threshold: int = 5
    circuit_breaker_timeout_seconds: float = 60.0
    config_file: str = ""

    @classmethod
    def from_env(cls, dotenv_path: str | None = None) -> Self:
        """Load engine settings from environment variables."""
        load_dotenv(dotenv_path)
        defaults = cls()
        return cls(
            catalog_path=os.getenv("ROLE_CATALOG_PATH", "").strip(),
            catalog_url=os.getenv("ROLE_CATALOG_URL", "").strip(),
            cache_ttl_seconds=_float_env(
                "ROLE_CATALOG_CACHE_TTL_SECONDS", defaults.cache_ttl_seconds
            ),
            fetch_timeout_seconds=_float_env(
                "ROLE_CATALOG_FETCH_TIMEOUT_SECONDS", defaults.fetch_timeout_seconds
            ),
            http_timeout_seconds=_float_env(
                "ROLE_CATALOG_HTTP_TIMEOUT_SECONDS", defaults.http_timeout_seconds
            ),
            circuit_breaker_threshold=_int_env(
                "ROLE_CATALOG_CIRCUIT_BREAKER_THRESHOLD", defaults.circuit_breaker_threshold
            ),
            circuit_breaker_timeout_seconds=_float_env(
                "ROLE_CATALOG_CIRCUIT_BREAKER_TIMEOUT_SECONDS",
                defaults.circuit_breaker_timeout_seconds,
            ),
            config_file=os.getenv("ROLE_CONFIG_FILE", "").strip(),
        )


def _pick[T](override: T | None, current: T) -> T:
    return current if override is None else override


def _float_env(env_name: str, default: float) -> float:
    text = os.getenv(env_name, "").strip()
    if not text:
        return default
    try:
        return float(text)
    except ValueError as exc:
        raise NumberEnvVarError(env_name) from exc


def _int_env(env_name: str, default: int) -> int:
    text = os.getenv(env_name, "").strip()
    if not text:
        return default
    try:
        return int(text)
    except ValueError as exc:
        raise NumberEnvVarError(env_name) from exc


def _bool_env(env_name: str, default: bool) -> bool:
    text = os.getenv(env_name, "").strip().lower()
    if not text:
        return default
    if text in {"1", "true", "yes", "y", "on"}:
        return True
    if text in {"0", "false", "no", "n", "off"}:
        return False
    raise BooleanEnvVarError(env_name)

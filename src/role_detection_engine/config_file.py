"""Typed parsing and validation for detection config files.

Example file:
    schema_version = 1

    [detection]
    confidence_threshold = 0.7
    max_results = 4

    [detection.weights]
    skills = 0.4
    version = 2

    [detection.dynamic_threshold]
    minimum_threshold = 0.35
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .exceptions import ConfigFileNotFoundError, ConfigFileParseError, ConfigFileValidationError
from .protocols import FileSystem

_SCHEMA_VERSION = 1


@dataclass(frozen=True)
class DetectionConfigFile:
    """Validated detection config values loaded from a TOML file."""

    confidence_threshold: float | None = None
    max_results: int | None = None
    min_results: int | None = None
    fuzzy_threshold: float | None = None
    scoring_workers: int | None = None
    weight_title: float | None = None
    weight_skills: float | None = None
    weight_experience: float | None = None
    weight_industry: float | None = None
    weight_education: float | None = None
    weighting_version: int | None = None
    dynamic_enabled: bool | None = None
    dynamic_initial_threshold: float | None = None
    dynamic_minimum_threshold: float | None = None
    dynamic_decrement_step: float | None = None
    dynamic_max_iterations: int | None = None
    title_match_score: float | None = None
    title_miss_score: float | None = None
    seniority_bonus: float | None = None
    seniority_min_years: float | None = None
    negative_penalty_per_hit: float | None = None
    negative_penalty_cap: float | None = None
    backfill_step: float | None = None


def _check_unit_interval(value: float | None) -> float | None:
    if value is None:
        return None
    if value < 0.0 or value > 1.0:
        raise ValueError("must be between 0 and 1")
    return value


def _check_non_negative(value: float | None) -> float | None:
    if value is None:
        return None
    if value < 0:
        raise ValueError("must not be negative")
    return value


class _WeightsSectionModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    title: float | None = None
    skills: float | None = None
    experience: float | None = None
    industry: float | None = None
    education: float | None = None
    version: int | None = None

    @field_validator("title", "skills", "experience", "industry", "education")
    @classmethod
    def _validate_weight(cls, value: float | None) -> float | None:
        return _check_non_negative(value)

    @field_validator("version")
    @classmethod
    def _validate_version(cls, value: int | None) -> int | None:
        if value is not None and value < 1:
            raise ValueError("must be at least 1")
        return value


class _DynamicThresholdSectionModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    enabled: bool | None = None
    initial_threshold: float | None = None
    minimum_threshold: float | None = None
    decrement_step: float | None = None
    max_iterations: int | None = None

    @field_validator("initial_threshold", "minimum_threshold")
    @classmethod
    def _validate_threshold(cls, value: float | None) -> float | None:
        return _check_unit_interval(value)

    @field_validator("decrement_step")
    @classmethod
    def _validate_step(cls, value: float | None) -> float | None:
        if value is not None and value <= 0:
            raise ValueError("must be positive")
        return value

    @field_validator("max_iterations")
    @classmethod
    def _validate_iterations(cls, value: int | None) -> int | None:
        if value is not None and value < 0:
            raise ValueError("must not be negative")
        return value


class _AdjustmentsSectionModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    title_match_score: float | None = None
    title_miss_score: float | None = None
    seniority_bonus: float | None = None
    seniority_min_years: float | None = None
    negative_penalty_per_hit: float | None = None
    negative_penalty_cap: float | None = None
    backfill_step: float | None = None

    @field_validator("title_match_score", "title_miss_score")
    @classmethod
    def _validate_score(cls, value: float | None) -> float | None:
        return _check_unit_interval(value)

    @field_validator(
        "seniority_bonus",
        "seniority_min_years",
        "negative_penalty_per_hit",
        "negative_penalty_cap",
        "backfill_step",
    )
    @classmethod
    def _validate_amount(cls, value: float | None) -> float | None:
        return _check_non_negative(value)


class _DetectionSectionModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    confidence_threshold: float | None = None
    max_results: int | None = None
    min_results: int | None = None
    fuzzy_threshold: float | None = None
    scoring_workers: int | None = None
    weights: _WeightsSectionModel = _WeightsSectionModel()
    dynamic_threshold: _DynamicThresholdSectionModel = _DynamicThresholdSectionModel()
    adjustments: _AdjustmentsSectionModel = _AdjustmentsSectionModel()

    @field_validator("confidence_threshold", "fuzzy_threshold")
    @classmethod
    def _validate_threshold(cls, value: float | None) -> float | None:
        return _check_unit_interval(value)

    @field_validator("max_results", "scoring_workers")
    @classmethod
    def _validate_positive_int(cls, value: int | None) -> int | None:
        if value is not None and value < 1:
            raise ValueError("must be at least 1")
        return value

    @field_validator("min_results")
    @classmethod
    def _validate_min_results(cls, value: int | None) -> int | None:
        if value is not None and value < 0:
            raise ValueError("must not be negative")
        return value


class _ConfigFileModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    schema_version: int
    detection: _DetectionSectionModel

    @field_validator("schema_version")
    @classmethod
    def _validate_schema_version(cls, value: int) -> int:
        if value != _SCHEMA_VERSION:
            raise ValueError(f"unsupported schema version (expected {_SCHEMA_VERSION})")
        return value


def format_validation_error(exc: ValidationError) -> str:
    """Render the first pydantic error as ``location: message``."""
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ())) or "<root>"
    message = str(first.get("msg", "invalid value"))
    return f"{location}: {message}"


def load_detection_config_file(*, path: Path, fs: FileSystem) -> DetectionConfigFile:
    """Load and validate a detection TOML config file."""
    if not fs.exists(path):
        raise ConfigFileNotFoundError(str(path))

    raw_payload = fs.read_text(path)
    try:
        payload: object = tomllib.loads(raw_payload)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigFileParseError(str(path), str(exc)) from exc

    try:
        model = _ConfigFileModel.model_validate(payload)
    except ValidationError as exc:
        raise ConfigFileValidationError(str(path), format_validation_error(exc)) from exc

    section = model.detection
    weights = section.weights
    dynamic = section.dynamic_threshold
    adjustments = section.adjustments
    return DetectionConfigFile(
        confidence_threshold=section.confidence_threshold,
        max_results=section.max_results,
        min_results=section.min_results,
        fuzzy_threshold=section.fuzzy_threshold,
        scoring_workers=section.scoring_workers,
        weight_title=weights.title,
        weight_skills=weights.skills,
        weight_experience=weights.experience,
        weight_industry=weights.industry,
        weight_education=weights.education,
        weighting_version=weights.version,
        dynamic_enabled=dynamic.enabled,
        dynamic_initial_threshold=dynamic.initial_threshold,
        dynamic_minimum_threshold=dynamic.minimum_threshold,
        dynamic_decrement_step=dynamic.decrement_step,
        dynamic_max_iterations=dynamic.max_iterations,
        title_match_score=adjustments.title_match_score,
        title_miss_score=adjustments.title_miss_score,
        seniority_bonus=adjustments.seniority_bonus,
        seniority_min_years=adjustments.seniority_min_years,
        negative_penalty_per_hit=adjustments.negative_penalty_per_hit,
        negative_penalty_cap=adjustments.negative_penalty_cap,
        backfill_step=adjustments.backfill_step,
    )

"""Loading and validation for role profile catalogs.

Catalog documents look like::

    {"schema_version": 1, "profiles": [{"id": "data_scientist", "name": "Data Scientist", ...}]}

The envelope is validated strictly. Individual profiles that fail validation are
skipped with a warning so one bad entry cannot take the whole catalog down.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator

from .config_file import format_validation_error
from .domain.role_profiles import (
    CVSection,
    EnhancementTemplates,
    ExperienceLevel,
    ExperienceTemplate,
    MatchingCriteria,
    RoleProfile,
    ValidationRules,
)
from .exceptions import RoleCatalogFileNotFoundError, RoleCatalogValidationError
from .observability import get_logger
from .protocols import FileSystem

_SCHEMA_VERSION = 1


def _clean_terms(value: tuple[str, ...]) -> tuple[str, ...]:
    if any(not term.strip() for term in value):
        raise ValueError("entries must not be blank")
    return tuple(dict.fromkeys(term.strip() for term in value))


class _MatchingCriteriaModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    title_keywords: tuple[str, ...] = ()
    skill_keywords: tuple[str, ...] = ()
    industry_keywords: tuple[str, ...] = ()

    @field_validator("title_keywords", "skill_keywords", "industry_keywords")
    @classmethod
    def _validate_terms(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return _clean_terms(value)


class _ExperienceTemplateModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    experience_level: ExperienceLevel
    bullet_point_template: str


class _EnhancementTemplatesModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    professional_summary: str = ""
    experience_enhancements: tuple[_ExperienceTemplateModel, ...] = ()
    achievement_templates: tuple[str, ...] = ()
    keyword_optimization: tuple[str, ...] = ()


class _ValidationRulesModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    required_sections: tuple[CVSection, ...] = ()
    optional_sections: tuple[CVSection, ...] = ()
    min_experience_years: float = 0.0
    critical_skills: tuple[str, ...] = ()

    @field_validator("min_experience_years")
    @classmethod
    def _validate_years(cls, value: float) -> float:
        if value < 0:
            raise ValueError("must not be negative")
        return value


class _RoleProfileModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str
    name: str
    category: str = ""
    description: str = ""
    keywords: tuple[str, ...] = ()
    required_skills: tuple[str, ...] = ()
    preferred_skills: tuple[str, ...] = ()
    experience_level: ExperienceLevel = ExperienceLevel.MID
    matching_criteria: _MatchingCriteriaModel = _MatchingCriteriaModel()
    enhancement_templates: _EnhancementTemplatesModel = _EnhancementTemplatesModel()
    validation_rules: _ValidationRulesModel = _ValidationRulesModel()
    negative_indicators: tuple[str, ...] = ()
    is_active: bool = True

    @field_validator("id", "name")
    @classmethod
    def _validate_non_empty(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("must not be blank")
        return text

    @field_validator("keywords", "required_skills", "preferred_skills", "negative_indicators")
    @classmethod
    def _validate_terms(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return _clean_terms(value)


class _RoleCatalogModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    schema_version: int
    profiles: tuple[dict[str, object], ...]

    @field_validator("schema_version")
    @classmethod
    def _validate_schema_version(cls, value: int) -> int:
        if value != _SCHEMA_VERSION:
            raise ValueError(f"unsupported schema version (expected {_SCHEMA_VERSION})")
        return value

    @model_validator(mode="after")
    def _validate_profiles(self) -> _RoleCatalogModel:
        if not self.profiles:
            raise ValueError("catalog has no profiles")
        return self


def _to_domain_profile(model: _RoleProfileModel) -> RoleProfile:
    templates = model.enhancement_templates
    rules = model.validation_rules
    return RoleProfile(
        id=model.id,
        name=model.name,
        category=model.category.strip(),
        description=model.description.strip(),
        keywords=model.keywords,
        required_skills=model.required_skills,
        preferred_skills=model.preferred_skills,
        experience_level=model.experience_level,
        matching_criteria=MatchingCriteria(
            title_keywords=model.matching_criteria.title_keywords,
            skill_keywords=model.matching_criteria.skill_keywords,
            industry_keywords=model.matching_criteria.industry_keywords,
        ),
        enhancement_templates=EnhancementTemplates(
            professional_summary=templates.professional_summary,
            experience_enhancements=tuple(
                ExperienceTemplate(
                    experience_level=item.experience_level,
                    bullet_point_template=item.bullet_point_template,
                )
                for item in templates.experience_enhancements
            ),
            achievement_templates=templates.achievement_templates,
            keyword_optimization=templates.keyword_optimization,
        ),
        validation_rules=ValidationRules(
            required_sections=rules.required_sections,
            optional_sections=rules.optional_sections,
            min_experience_years=rules.min_experience_years,
            critical_skills=rules.critical_skills,
        ),
        negative_indicators=tuple(phrase.lower() for phrase in model.negative_indicators),
        is_active=model.is_active,
    )


def parse_role_profile(payload: object, *, source: str) -> RoleProfile:
    """Validate one profile document.

    Raises:
        RoleCatalogValidationError: When the document is not a valid profile.
    """
    try:
        model = _RoleProfileModel.model_validate(payload)
    except ValidationError as exc:
        raise RoleCatalogValidationError(source, format_validation_error(exc)) from exc
    return _to_domain_profile(model)


def parse_role_catalog(payload: object, *, source: str) -> tuple[RoleProfile, ...]:
    """Validate a catalog document, skipping invalid or duplicate profiles.

    Raises:
        RoleCatalogValidationError: When the envelope is invalid or no profile survives.
    """
    logger = get_logger("role_detection_engine.role_catalog")
    try:
        catalog = _RoleCatalogModel.model_validate(payload)
    except ValidationError as exc:
        raise RoleCatalogValidationError(source, format_validation_error(exc)) from exc

    profiles: list[RoleProfile] = []
    seen: set[str] = set()
    for index, entry in enumerate(catalog.profiles):
        try:
            profile = parse_role_profile(entry, source=f"{source} profiles.{index}")
        except RoleCatalogValidationError as exc:
            logger.warning("Skipping invalid role profile: %s", exc)
            continue
        if profile.id in seen:
            logger.warning("Skipping duplicate role profile id %r in %s", profile.id, source)
            continue
        seen.add(profile.id)
        profiles.append(profile)

    if not profiles:
        raise RoleCatalogValidationError(source, "no valid profiles")
    logger.debug("Loaded %s role profiles from %s", len(profiles), source)
    return tuple(profiles)


def load_role_catalog(*, path: Path, fs: FileSystem) -> tuple[RoleProfile, ...]:
    """Load and validate a role catalog from JSON."""
    if not fs.exists(path):
        raise RoleCatalogFileNotFoundError(str(path))
    try:
        payload = fs.read_json(path)
    except ValueError as exc:
        raise RoleCatalogValidationError(str(path), f"invalid JSON: {exc}") from exc
    return parse_role_catalog(payload, source=str(path))

"""Domain model for role profiles supplied by the external catalog."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class ExperienceLevel(StrEnum):
    """Ordered seniority levels, entry first."""

    ENTRY = "entry"
    JUNIOR = "junior"
    MID = "mid"
    SENIOR = "senior"
    LEAD = "lead"
    PRINCIPAL = "principal"
    EXECUTIVE = "executive"

    @property
    def rank(self) -> int:
        return _LEVEL_ORDER.index(self)


_LEVEL_ORDER: tuple[ExperienceLevel, ...] = tuple(ExperienceLevel)


class CVSection(StrEnum):
    """CV sections a role profile can require or recommend."""

    PERSONAL_INFO = "personal_info"
    PROFESSIONAL_SUMMARY = "professional_summary"
    EXPERIENCE = "experience"
    SKILLS = "skills"
    EDUCATION = "education"
    ACHIEVEMENTS = "achievements"
    CERTIFICATIONS = "certifications"
    PROJECTS = "projects"


@dataclass(frozen=True)
class MatchingCriteria:
    """Keyword lists the scorer compares candidate signals against."""

    title_keywords: tuple[str, ...] = ()
    skill_keywords: tuple[str, ...] = ()
    industry_keywords: tuple[str, ...] = ()


@dataclass(frozen=True)
class ExperienceTemplate:
    """A bullet-point template for one seniority level."""

    experience_level: ExperienceLevel
    bullet_point_template: str


@dataclass(frozen=True)
class EnhancementTemplates:
    """Templated copy used to phrase recommendations."""

    professional_summary: str = ""
    experience_enhancements: tuple[ExperienceTemplate, ...] = ()
    achievement_templates: tuple[str, ...] = ()
    keyword_optimization: tuple[str, ...] = ()

    def bullet_for_level(self, level: ExperienceLevel) -> str:
        """Return the bullet template for ``level``, else the first one, else empty."""
        for template in self.experience_enhancements:
            if template.experience_level == level:
                return template.bullet_point_template
        if self.experience_enhancements:
            return self.experience_enhancements[0].bullet_point_template
        return ""


@dataclass(frozen=True)
class ValidationRules:
    """CV completeness rules declared by a role profile."""

    required_sections: tuple[CVSection, ...] = ()
    optional_sections: tuple[CVSection, ...] = ()
    min_experience_years: float = 0.0
    critical_skills: tuple[str, ...] = ()


@dataclass(frozen=True)
class RoleProfile:
    """A catalog entry describing one occupational role. Immutable for a detection run."""

    id: str
    name: str
    category: str
    description: str
    keywords: tuple[str, ...]
    required_skills: tuple[str, ...]
    preferred_skills: tuple[str, ...]
    experience_level: ExperienceLevel
    matching_criteria: MatchingCriteria = field(default_factory=MatchingCriteria)
    enhancement_templates: EnhancementTemplates = field(default_factory=EnhancementTemplates)
    validation_rules: ValidationRules = field(default_factory=ValidationRules)
    negative_indicators: tuple[str, ...] = ()
    is_active: bool = True


def profile_validation_errors(profile: RoleProfile) -> list[str]:
    """Return the reasons a profile cannot take part in detection (empty when usable)."""
    errors: list[str] = []
    if not profile.id.strip():
        errors.append("id is empty")
    if not profile.name.strip():
        errors.append("name is empty")
    if any(not skill.strip() for skill in profile.required_skills):
        errors.append("required_skills contains a blank entry")
    return errors

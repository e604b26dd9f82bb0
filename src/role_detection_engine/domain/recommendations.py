"""Recommendation generation for one detected role.

Recommendations are templated from the role profile's enhancement templates and
ranked high priority first, then by expected impact.
"""

from __future__ import annotations

from dataclasses import dataclass

from .candidate import CandidateProfile
from .results import FactorType, MatchingFactor, Priority, Recommendation, RecommendationType
from .role_profiles import CVSection, RoleProfile

_SKILLS_IN_TEMPLATE = 5
_TITLES_IN_TEMPLATE = 3


@dataclass(frozen=True)
class RecommendationSettings:
    """Impact constants and cut-offs for recommendation generation."""

    skills_impact: int = 20
    experience_impact: int = 18
    title_impact: int = 15
    summary_impact: int = 25
    section_impact: int = 10
    achievements_impact: int = 12
    weak_factor_below: float = 0.5
    high_priority_below: float = 0.3
    max_recommendations: int = 8
    potential_weak_below: float = 0.7
    potential_per_weak_factor: int = 15
    potential_per_missing_section: int = 10


DEFAULT_RECOMMENDATION_SETTINGS = RecommendationSettings()


def section_is_missing(candidate: CandidateProfile, section: CVSection) -> bool:
    """True when the candidate has no content for ``section``; contact details are not modelled."""
    match section:
        case CVSection.PROFESSIONAL_SUMMARY:
            return not candidate.summary.strip()
        case CVSection.EXPERIENCE:
            return not candidate.experience
        case CVSection.SKILLS:
            return not candidate.clean_skills
        case CVSection.EDUCATION:
            return not candidate.education
        case CVSection.ACHIEVEMENTS:
            return not candidate.has_achievements
        case CVSection.CERTIFICATIONS:
            return not any(item.strip() for item in candidate.certifications)
        case CVSection.PROJECTS:
            return not any(item.strip() for item in candidate.projects)
        case _:
            return False


def missing_required_sections(
    candidate: CandidateProfile, profile: RoleProfile
) -> tuple[CVSection, ...]:
    return tuple(
        section
        for section in dict.fromkeys(profile.validation_rules.required_sections)
        if section_is_missing(candidate, section)
    )


def _priority_for(score: float, settings: RecommendationSettings) -> Priority:
    return Priority.HIGH if score < settings.high_priority_below else Priority.MEDIUM


def _from_factor(
    profile: RoleProfile, factor: MatchingFactor, settings: RecommendationSettings
) -> Recommendation:
    base_id = f"{profile.id}_{factor.factor_type}"
    priority = _priority_for(factor.score, settings)
    templates = profile.enhancement_templates
    match factor.factor_type:
        case FactorType.SKILLS:
            keywords = templates.keyword_optimization or profile.required_skills
            return Recommendation(
                id=f"{base_id}_enhancement",
                type=RecommendationType.KEYWORD,
                priority=priority,
                title=f"Enhance {profile.name} skills",
                description=f"Add key skills relevant to {profile.name} roles",
                template="Consider adding: " + ", ".join(keywords[:_SKILLS_IN_TEMPLATE]),
                target_section=CVSection.SKILLS,
                expected_impact=settings.skills_impact,
            )
        case FactorType.EXPERIENCE:
            return Recommendation(
                id=f"{base_id}_optimization",
                type=RecommendationType.CONTENT,
                priority=priority,
                title=f"Optimise experience for {profile.name}",
                description=f"Highlight experience relevant to {profile.name} responsibilities",
                template=templates.bullet_for_level(profile.experience_level),
                target_section=CVSection.EXPERIENCE,
                expected_impact=settings.experience_impact,
            )
        case FactorType.TITLE:
            titles = profile.matching_criteria.title_keywords or (profile.name,)
            return Recommendation(
                id=f"{base_id}_title",
                type=RecommendationType.CONTENT,
                priority=priority,
                title="Update professional title",
                description=f"Align your professional title with {profile.name} expectations",
                template="Consider titles like: " + ", ".join(titles[:_TITLES_IN_TEMPLATE]),
                target_section=CVSection.PERSONAL_INFO,
                expected_impact=settings.title_impact,
            )


def generate_recommendations(
    candidate: CandidateProfile,
    profile: RoleProfile,
    factors: tuple[MatchingFactor, ...],
    settings: RecommendationSettings = DEFAULT_RECOMMENDATION_SETTINGS,
) -> tuple[Recommendation, ...]:
    """Build ranked recommendations for ``profile``, capped at ``max_recommendations``."""
    recommendations: list[Recommendation] = [
        _from_factor(profile, factor, settings)
        for factor in factors
        if factor.score < settings.weak_factor_below
    ]

    templates = profile.enhancement_templates
    if templates.professional_summary.strip() and not candidate.summary.strip():
        recommendations.append(
            Recommendation(
                id=f"{profile.id}_summary",
                type=RecommendationType.SECTION_ADDITION,
                priority=Priority.HIGH,
                title=f"Add a {profile.name} professional summary",
                description=f"Write a summary tailored for {profile.name} roles",
                template=templates.professional_summary,
                target_section=CVSection.PROFESSIONAL_SUMMARY,
                expected_impact=settings.summary_impact,
            )
        )

    templated: set[CVSection] = set()
    if templates.professional_summary.strip():
        templated.add(CVSection.PROFESSIONAL_SUMMARY)
    if templates.achievement_templates:
        templated.add(CVSection.ACHIEVEMENTS)
    for section in missing_required_sections(candidate, profile):
        if section in templated:
            continue
        label = section.replace("_", " ")
        recommendations.append(
            Recommendation(
                id=f"{profile.id}_{section}_section",
                type=RecommendationType.STRUCTURE,
                priority=Priority.MEDIUM,
                title=f"Add a {label} section",
                description=f"{profile.name} CVs are expected to include {label}",
                template="",
                target_section=section,
                expected_impact=settings.section_impact,
            )
        )

    if templates.achievement_templates and not candidate.has_achievements:
        recommendations.append(
            Recommendation(
                id=f"{profile.id}_achievements",
                type=RecommendationType.CONTENT,
                priority=Priority.MEDIUM,
                title="Quantify your achievements",
                description=f"Add measurable outcomes that {profile.name} hiring managers look for",
                template=templates.achievement_templates[0],
                target_section=CVSection.ACHIEVEMENTS,
                expected_impact=settings.achievements_impact,
            )
        )

    ranked = sorted(
        recommendations, key=lambda item: (item.priority.rank, -item.expected_impact)
    )
    return tuple(ranked[: settings.max_recommendations])


def enhancement_potential(
    candidate: CandidateProfile,
    profile: RoleProfile,
    factors: tuple[MatchingFactor, ...],
    settings: RecommendationSettings = DEFAULT_RECOMMENDATION_SETTINGS,
) -> int:
    """Headroom for improvement on a 0-100 scale."""
    weak = sum(1 for factor in factors if factor.score < settings.potential_weak_below)
    missing = len(missing_required_sections(candidate, profile))
    potential = (
        weak * settings.potential_per_weak_factor + missing * settings.potential_per_missing_section
    )
    return min(100, potential)

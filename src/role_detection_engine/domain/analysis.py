"""Compatibility analysis: explain ranked role matches and assemble the final analysis.

Usage example:
    from role_detection_engine.domain.analysis import AnalysisContext, build_analysis

    analysis = build_analysis(candidate, matches, primary_profile=profile, context=context)
    assert analysis.primary_role is matches[0]
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from .candidate import CandidateProfile
from .lexical import DEFAULT_FUZZY_THRESHOLD, match_keyword_set
from .lexicon import detect_experience_level
from .recommendations import (
    DEFAULT_RECOMMENDATION_SETTINGS,
    RecommendationSettings,
    enhancement_potential,
    generate_recommendations,
)
from .results import (
    ConfidenceBucket,
    DetectionMetadata,
    EnhancementSuggestions,
    FitAnalysis,
    GapAnalysis,
    Priority,
    RoleMatchResult,
    RoleProfileAnalysis,
    RoleScore,
    ScoringBreakdown,
    TopFactor,
)
from .role_profiles import RoleProfile

ALGORITHM_VERSION = "weighted-heuristic-1.0"
MAX_MISSING_SKILLS = 10
TOP_FACTOR_COUNT = 3
EXPLANATION_LIMIT = 100
WEAK_AREA_BELOW = 0.5
STRENGTH_AREA_ABOVE = 0.8

# Lower bound (inclusive) and label, highest first
CONFIDENCE_BUCKETS: tuple[tuple[float, str], ...] = (
    (0.8, "80-100%"),
    (0.6, "60-79%"),
    (0.4, "40-59%"),
    (0.0, "0-39%"),
)


@dataclass(frozen=True)
class AnalysisContext:
    """Run-level facts the analyzer reports but does not compute."""

    total_roles_analyzed: int
    original_threshold: float
    adjusted_threshold: float
    adjustments: tuple[str, ...]
    weighting_version: int
    processing_time_ms: float
    generated_at: str
    fuzzy_threshold: float = DEFAULT_FUZZY_THRESHOLD


def truncate(text: str, limit: int = EXPLANATION_LIMIT) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 3].rstrip() + "..."


def overall_assessment(role_name: str, confidence: float) -> str:
    if confidence >= 0.8:
        return f"Excellent fit for {role_name}"
    if confidence >= 0.6:
        return f"Good fit for {role_name} with minor gaps"
    if confidence >= 0.4:
        return f"Partial fit for {role_name}; targeted improvements recommended"
    return f"Limited fit for {role_name}; significant development needed"


def fit_analysis(
    candidate: CandidateProfile,
    profile: RoleProfile,
    role_score: RoleScore,
    confidence: float,
    *,
    as_of: date,
    fuzzy_threshold: float = DEFAULT_FUZZY_THRESHOLD,
) -> FitAnalysis:
    strengths: list[str] = []
    gaps: list[str] = []

    for factor in role_score.factors:
        label = str(factor.factor_type)
        if not factor.applied:
            gaps.append(f"No {label} information to assess")
        elif factor.score > STRENGTH_AREA_ABOVE:
            strengths.append(f"Strong {label} alignment")
        elif factor.score < WEAK_AREA_BELOW:
            gaps.append(f"Weak {label} alignment")

    candidate_terms = (*candidate.clean_skills, candidate.title, *_positions(candidate))
    keyword_match = match_keyword_set(candidate_terms, profile.keywords, fuzzy_threshold)
    if keyword_match.details and keyword_match.score >= 0.5:
        strengths.append(
            f"Covers {keyword_match.matched_count} of {len(keyword_match.details)} role keywords"
        )

    critical = match_keyword_set(
        candidate.clean_skills, profile.validation_rules.critical_skills, fuzzy_threshold
    )
    gaps.extend(f"Missing critical skill: {skill}" for skill in critical.missing)

    seniority = detect_experience_level(candidate.full_text())
    if seniority.level == profile.experience_level:
        strengths.append(f"Seniority aligns with {profile.experience_level} level expectations")
    elif seniority.level.rank < profile.experience_level.rank:
        gaps.append(
            f"Seniority reads as {seniority.level}; role expects {profile.experience_level}"
        )

    years = candidate.total_experience_years(as_of=as_of)
    minimum_years = profile.validation_rules.min_experience_years
    if minimum_years > 0 and years < minimum_years:
        gaps.append(f"{years:.1f} years of experience; role typically needs {minimum_years:g}")

    gaps.extend(f"CV contains contradicting phrase '{hit}'" for hit in role_score.negative_hits)

    return FitAnalysis(
        strengths=tuple(strengths),
        gaps=tuple(gaps),
        overall_assessment=overall_assessment(profile.name, confidence),
    )


def _positions(candidate: CandidateProfile) -> tuple[str, ...]:
    return tuple(entry.position for entry in candidate.experience if entry.position.strip())


def scoring_rationale(
    role_score: RoleScore, confidence: float, *, low_confidence: bool = False
) -> str:
    """One-paragraph explanation of how the confidence was reached."""
    parts = [
        f"{factor.factor_type} {factor.score:.2f}"
        for factor in role_score.factors
        if factor.applied
    ]
    skipped = [str(factor.factor_type) for factor in role_score.factors if not factor.applied]
    text = f"{role_score.role_name} scored {role_score.base_score:.2f}"
    text += f" from {', '.join(parts)}" if parts else " with no applicable factors"
    if skipped:
        text += f" ({', '.join(skipped)} not assessed)"
    if role_score.seniority_bonus:
        text += f"; seniority bonus +{role_score.seniority_bonus:.2f}"
    if role_score.negative_penalty:
        hits = ", ".join(f"'{hit}'" for hit in role_score.negative_hits)
        text += f"; penalty -{role_score.negative_penalty:.2f} for {hits}"
    text += f". Confidence {confidence:.2f}."
    if low_confidence:
        text += (
            f" Low confidence: included to meet the minimum result count"
            f" (scored {role_score.confidence:.2f}, below the threshold)."
        )
    return text


def build_match_result(
    candidate: CandidateProfile,
    profile: RoleProfile,
    role_score: RoleScore,
    *,
    as_of: date,
    confidence: float | None = None,
    low_confidence: bool = False,
    fuzzy_threshold: float = DEFAULT_FUZZY_THRESHOLD,
    settings: RecommendationSettings = DEFAULT_RECOMMENDATION_SETTINGS,
) -> RoleMatchResult:
    """Explain one scored role. ``confidence`` overrides the scored value for backfilled roles."""
    reported = role_score.confidence if confidence is None else confidence
    return RoleMatchResult(
        role_id=role_score.role_id,
        role_name=role_score.role_name,
        confidence=reported,
        factors=role_score.factors,
        enhancement_potential=enhancement_potential(
            candidate, profile, role_score.factors, settings
        ),
        recommendations=generate_recommendations(candidate, profile, role_score.factors, settings),
        scoring_rationale=scoring_rationale(role_score, reported, low_confidence=low_confidence),
        fit_analysis=fit_analysis(
            candidate,
            profile,
            role_score,
            reported,
            as_of=as_of,
            fuzzy_threshold=fuzzy_threshold,
        ),
        low_confidence=low_confidence,
    )


def gap_analysis(
    candidate: CandidateProfile,
    primary: RoleMatchResult,
    profile: RoleProfile | None,
    fuzzy_threshold: float = DEFAULT_FUZZY_THRESHOLD,
) -> GapAnalysis:
    missing: tuple[str, ...] = ()
    if profile is not None and profile.required_skills:
        result = match_keyword_set(candidate.clean_skills, profile.required_skills, fuzzy_threshold)
        missing = result.missing[:MAX_MISSING_SKILLS]
    return GapAnalysis(
        missing_skills=missing,
        weak_areas=tuple(
            str(factor.factor_type) for factor in primary.factors if factor.score < WEAK_AREA_BELOW
        ),
        strength_areas=tuple(
            str(factor.factor_type)
            for factor in primary.factors
            if factor.score > STRENGTH_AREA_ABOVE
        ),
    )


def top_factors(primary: RoleMatchResult) -> tuple[TopFactor, ...]:
    """Rank the primary role's applied factors by their share of the weighted score."""
    applied = [factor for factor in primary.factors if factor.applied]
    total_weight = sum(factor.weight for factor in applied)
    if total_weight <= 0:
        return ()
    ranked = sorted(
        applied,
        key=lambda factor: (-(factor.score * factor.weight), str(factor.factor_type)),
    )
    return tuple(
        TopFactor(
            factor=str(factor.factor_type),
            contribution=round(factor.score * factor.weight / total_weight, 4),
            explanation=truncate(factor.explanation),
        )
        for factor in ranked[:TOP_FACTOR_COUNT]
    )


def confidence_distribution(matches: tuple[RoleMatchResult, ...]) -> tuple[ConfidenceBucket, ...]:
    counts = dict.fromkeys((label for _, label in CONFIDENCE_BUCKETS), 0)
    for match in matches:
        for lower, label in CONFIDENCE_BUCKETS:
            if match.confidence >= lower:
                counts[label] += 1
                break
    return tuple(ConfidenceBucket(range=label, count=count) for label, count in counts.items())


def build_analysis(
    candidate: CandidateProfile,
    matches: tuple[RoleMatchResult, ...],
    *,
    primary_profile: RoleProfile | None,
    context: AnalysisContext,
) -> RoleProfileAnalysis:
    """Assemble the analysis. ``matches`` must be ranked and non-empty."""
    if not matches:
        raise ValueError("matches must not be empty")
    primary, *alternatives = matches
    average = sum(match.confidence for match in matches) / len(matches)
    immediate = tuple(item for item in primary.recommendations if item.priority == Priority.HIGH)
    strategic = tuple(item for item in primary.recommendations if item.priority != Priority.HIGH)
    return RoleProfileAnalysis(
        primary_role=primary,
        alternative_roles=tuple(alternatives),
        overall_confidence=average,
        enhancement_suggestions=EnhancementSuggestions(immediate=immediate, strategic=strategic),
        gap_analysis=gap_analysis(candidate, primary, primary_profile, context.fuzzy_threshold),
        scoring_breakdown=ScoringBreakdown(
            total_roles_analyzed=context.total_roles_analyzed,
            original_threshold=context.original_threshold,
            adjusted_threshold=context.adjusted_threshold,
            average_confidence=average,
            top_factors=top_factors(primary),
        ),
        detection_metadata=DetectionMetadata(
            processing_time_ms=context.processing_time_ms,
            generated_at=context.generated_at,
            algorithm_version=ALGORITHM_VERSION,
            weighting_version=context.weighting_version,
            adjustments=context.adjustments,
            confidence_distribution=confidence_distribution(matches),
        ),
    )

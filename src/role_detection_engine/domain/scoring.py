"""Factor scoring for one (candidate, role profile) pair.

Usage example:
    from datetime import date

    from role_detection_engine.domain.scoring import DEFAULT_SCORING_RULES, score_role

    role_score = score_role(candidate, profile, rules=DEFAULT_SCORING_RULES, as_of=date(2024, 1, 1))
    assert 0.0 <= role_score.confidence <= 1.0

Scoring is pure: the same candidate, profile, rules and ``as_of`` always produce
the same ``RoleScore``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from .candidate import CandidateProfile, WorkExperience, resolve_end_date, years_between
from .lexical import DEFAULT_FUZZY_THRESHOLD, match_keyword_set, similar, synonyms_equal
from .lexicon import negative_indicators_for
from .results import FactorReasoning, FactorType, MatchingFactor, RoleScore, Strength
from .role_profiles import ExperienceLevel, RoleProfile

_MAX_HINTS = 3


@dataclass(frozen=True)
class FactorWeights:
    """Relative factor weights. ``version`` travels with the weights into result metadata."""

    title: float = 0.30
    skills: float = 0.35
    experience: float = 0.25
    industry: float = 0.08
    education: float = 0.02
    version: int = 1


@dataclass(frozen=True)
class ScoringAdjustments:
    """Tunable scoring constants."""

    title_match_score: float = 0.8
    title_miss_score: float = 0.2
    neutral_skills_score: float = 0.5
    recency_floor: float = 0.3
    recency_decay_per_year: float = 0.1
    seniority_bonus: float = 0.1
    seniority_min_years: float = 5.0
    seniority_bonus_level: ExperienceLevel = ExperienceLevel.SENIOR
    negative_penalty_per_hit: float = 0.1
    negative_penalty_cap: float = 0.3
    backfill_step: float = 0.05


@dataclass(frozen=True)
class ScoringRules:
    """Everything the scorer needs besides the candidate and the profile."""

    weights: FactorWeights = field(default_factory=FactorWeights)
    adjustments: ScoringAdjustments = field(default_factory=ScoringAdjustments)
    fuzzy_threshold: float = DEFAULT_FUZZY_THRESHOLD


DEFAULT_SCORING_RULES = ScoringRules()


def clamp(value: float, lower: float = 0.0, upper: float = 1.0) -> float:
    return max(lower, min(upper, value))


def strength_for(score: float) -> Strength:
    if score >= 0.8:
        return Strength.EXCELLENT
    if score >= 0.6:
        return Strength.GOOD
    if score >= 0.4:
        return Strength.MODERATE
    return Strength.WEAK


def _title_matches(title: str, profile: RoleProfile, threshold: float) -> str | None:
    for target in (profile.name, *profile.matching_criteria.title_keywords):
        if not target.strip():
            continue
        if similar(title, target, threshold) or synonyms_equal(title, target):
            return target
    return None


def score_title(
    candidate: CandidateProfile, profile: RoleProfile, rules: ScoringRules
) -> MatchingFactor:
    weight = rules.weights.title
    if not candidate.has_title:
        return MatchingFactor(
            factor_type=FactorType.TITLE,
            score=0.0,
            weight=weight,
            matched_keywords=(),
            explanation="No current title provided; title factor not applied",
            reasoning=FactorReasoning(
                improvement_hints=(f"Add a headline that names the {profile.name} role",)
            ),
            applied=False,
        )

    adjustments = rules.adjustments
    matched = _title_matches(candidate.title, profile, rules.fuzzy_threshold)
    if matched is not None:
        score = adjustments.title_match_score
        explanation = f"Title '{candidate.title.strip()}' matches '{matched}'"
        hints: tuple[str, ...] = ()
    else:
        score = adjustments.title_miss_score
        explanation = (
            f"Title '{candidate.title.strip()}' does not match '{profile.name}' "
            "or its title keywords"
        )
        hints = (f"Align your headline with '{profile.name}' where accurate",)

    return MatchingFactor(
        factor_type=FactorType.TITLE,
        score=clamp(score),
        weight=weight,
        matched_keywords=(matched,) if matched is not None else (),
        explanation=explanation,
        reasoning=FactorReasoning(strength=strength_for(score), improvement_hints=hints),
    )


def score_skills(
    candidate: CandidateProfile, profile: RoleProfile, rules: ScoringRules
) -> MatchingFactor:
    weight = rules.weights.skills
    skills = candidate.clean_skills
    if not skills:
        return MatchingFactor(
            factor_type=FactorType.SKILLS,
            score=0.0,
            weight=weight,
            matched_keywords=(),
            explanation="No skills listed; skills factor not applied",
            reasoning=FactorReasoning(
                improvement_hints=tuple(
                    f"List {skill} if you have it" for skill in profile.required_skills[:_MAX_HINTS]
                )
            ),
            applied=False,
        )

    if not any(skill.strip() for skill in profile.required_skills):
        neutral = rules.adjustments.neutral_skills_score
        return MatchingFactor(
            factor_type=FactorType.SKILLS,
            score=neutral,
            weight=weight,
            matched_keywords=(),
            explanation=f"{profile.name} lists no required skills; neutral score",
            reasoning=FactorReasoning(strength=strength_for(neutral)),
        )

    result = match_keyword_set(skills, profile.required_skills, rules.fuzzy_threshold)
    score = clamp(result.coverage)
    matched = tuple(detail.keyword for detail in result.details if detail.found)
    return MatchingFactor(
        factor_type=FactorType.SKILLS,
        score=score,
        weight=weight,
        matched_keywords=matched,
        explanation=f"Matched {result.matched_count} of {len(result.details)} required skills",
        reasoning=FactorReasoning(
            keyword_matches=result.details,
            strength=strength_for(score),
            improvement_hints=tuple(
                f"Evidence {skill} in your skills or experience"
                for skill in result.missing[:_MAX_HINTS]
            ),
        ),
    )


def recency_weight(
    entry: WorkExperience, *, as_of: date, adjustments: ScoringAdjustments
) -> float:
    """Weight recent roles higher; an unreadable end date gets the floor."""
    end = resolve_end_date(entry.end_date, as_of=as_of)
    if end is None:
        return adjustments.recency_floor
    years_since_end = max(0.0, years_between(end, as_of))
    decayed = 1.0 - years_since_end * adjustments.recency_decay_per_year
    return max(adjustments.recency_floor, decayed)


def _entry_score(
    entry: WorkExperience,
    profile: RoleProfile,
    rules: ScoringRules,
    *,
    as_of: date,
) -> tuple[float, tuple[str, ...]]:
    adjustments = rules.adjustments
    position = entry.position.strip()
    if not position:
        title_score = 0.0
    elif _title_matches(position, profile, rules.fuzzy_threshold) is not None:
        title_score = adjustments.title_match_score
    else:
        title_score = adjustments.title_miss_score

    raw_terms = (profile.name, *profile.required_skills)
    terms = tuple(dict.fromkeys(term.strip().lower() for term in raw_terms if term.strip()))
    description = entry.description.lower()
    found = tuple(term for term in terms if term in description)
    relevance = len(found) / len(terms) if terms else 0.0

    recency = recency_weight(entry, as_of=as_of, adjustments=adjustments)
    return max(title_score, relevance) * recency, found


def score_experience(
    candidate: CandidateProfile, profile: RoleProfile, rules: ScoringRules, *, as_of: date
) -> MatchingFactor:
    weight = rules.weights.experience
    if not candidate.experience:
        return MatchingFactor(
            factor_type=FactorType.EXPERIENCE,
            score=0.0,
            weight=weight,
            matched_keywords=(),
            explanation="No work experience listed; experience factor not applied",
            reasoning=FactorReasoning(
                improvement_hints=("Add your work history with dates and responsibilities",)
            ),
            applied=False,
        )

    scores: list[float] = []
    keywords: list[str] = []
    for entry in candidate.experience:
        entry_score, found = _entry_score(entry, profile, rules, as_of=as_of)
        scores.append(entry_score)
        keywords.extend(found)

    score = clamp(sum(scores) / len(scores))
    hints: tuple[str, ...] = ()
    if score < 0.5:
        hints = (f"Describe {profile.name} responsibilities and tools in your recent roles",)
    return MatchingFactor(
        factor_type=FactorType.EXPERIENCE,
        score=score,
        weight=weight,
        matched_keywords=tuple(dict.fromkeys(keywords)),
        explanation=(
            f"Assessed {len(scores)} experience entries against {profile.name}; "
            f"average relevance {score:.2f}"
        ),
        reasoning=FactorReasoning(strength=strength_for(score), improvement_hints=hints),
    )


def combine(factors: tuple[MatchingFactor, ...]) -> float:
    """Weighted average over applied factors; 0.0 when nothing was applied."""
    applied = [factor for factor in factors if factor.applied and factor.weight > 0]
    total_weight = sum(factor.weight for factor in applied)
    if total_weight <= 0:
        return 0.0
    return clamp(sum(factor.score * factor.weight for factor in applied) / total_weight)


def seniority_bonus(
    candidate: CandidateProfile,
    profile: RoleProfile,
    adjustments: ScoringAdjustments,
    *,
    as_of: date,
) -> float:
    if profile.experience_level != adjustments.seniority_bonus_level:
        return 0.0
    if candidate.total_experience_years(as_of=as_of) < adjustments.seniority_min_years:
        return 0.0
    return adjustments.seniority_bonus


def negative_hits(candidate: CandidateProfile, profile: RoleProfile) -> tuple[str, ...]:
    """Distinct contradicting phrases found literally in the candidate's text."""
    text = candidate.full_text().lower()
    phrases = negative_indicators_for(profile.name, profile.negative_indicators)
    return tuple(phrase for phrase in phrases if phrase in text)


def negative_penalty(hits: tuple[str, ...], adjustments: ScoringAdjustments) -> float:
    return min(adjustments.negative_penalty_cap, len(hits) * adjustments.negative_penalty_per_hit)


def score_role(
    candidate: CandidateProfile,
    profile: RoleProfile,
    *,
    rules: ScoringRules = DEFAULT_SCORING_RULES,
    as_of: date,
) -> RoleScore:
    """Score every factor and fold in the seniority bonus and negative penalty."""
    factors = (
        score_title(candidate, profile, rules),
        score_skills(candidate, profile, rules),
        score_experience(candidate, profile, rules, as_of=as_of),
    )
    base = combine(factors)
    bonus = seniority_bonus(candidate, profile, rules.adjustments, as_of=as_of)
    hits = negative_hits(candidate, profile)
    penalty = negative_penalty(hits, rules.adjustments)
    return RoleScore(
        role_id=profile.id,
        role_name=profile.name,
        factors=factors,
        base_score=base,
        seniority_bonus=bonus,
        negative_penalty=penalty,
        negative_hits=hits,
        confidence=clamp(base + bonus - penalty),
    )

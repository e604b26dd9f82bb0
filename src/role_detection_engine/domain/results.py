"""Result types produced by scoring, detection and analysis."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from .lexical import KeywordMatch
from .role_profiles import CVSection


class FactorType(StrEnum):
    TITLE = "title"
    SKILLS = "skills"
    EXPERIENCE = "experience"


class Strength(StrEnum):
    """Qualitative bucket for one factor score."""

    EXCELLENT = "excellent"
    GOOD = "good"
    MODERATE = "moderate"
    WEAK = "weak"


class RecommendationType(StrEnum):
    CONTENT = "content"
    KEYWORD = "keyword"
    STRUCTURE = "structure"
    SECTION_ADDITION = "section-addition"


class Priority(StrEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}


@dataclass(frozen=True)
class FactorReasoning:
    """Structured explanation attached to a matching factor."""

    keyword_matches: tuple[KeywordMatch, ...] = ()
    strength: Strength = Strength.WEAK
    improvement_hints: tuple[str, ...] = ()


@dataclass(frozen=True)
class MatchingFactor:
    """One independently scored dimension of role fit.

    ``applied`` is False when the candidate lacked the input for this factor; such
    factors carry a zero score and are left out of the weighted denominator.
    """

    factor_type: FactorType
    score: float
    weight: float
    matched_keywords: tuple[str, ...]
    explanation: str
    reasoning: FactorReasoning = field(default_factory=FactorReasoning)
    applied: bool = True


@dataclass(frozen=True)
class RoleScore:
    """Factor Scorer output for one (candidate, profile) pair."""

    role_id: str
    role_name: str
    factors: tuple[MatchingFactor, ...]
    base_score: float
    seniority_bonus: float
    negative_penalty: float
    negative_hits: tuple[str, ...]
    confidence: float

    @property
    def applied_weight(self) -> float:
        return sum(factor.weight for factor in self.factors if factor.applied)


@dataclass(frozen=True)
class Recommendation:
    """A prioritised, templated CV enhancement suggestion."""

    id: str
    type: RecommendationType
    priority: Priority
    title: str
    description: str
    template: str
    target_section: CVSection
    expected_impact: int


@dataclass(frozen=True)
class FitAnalysis:
    strengths: tuple[str, ...]
    gaps: tuple[str, ...]
    overall_assessment: str


@dataclass(frozen=True)
class RoleMatchResult:
    """One ranked role suggestion with its explanation."""

    role_id: str
    role_name: str
    confidence: float
    factors: tuple[MatchingFactor, ...]
    enhancement_potential: int
    recommendations: tuple[Recommendation, ...]
    scoring_rationale: str
    fit_analysis: FitAnalysis
    low_confidence: bool = False


@dataclass(frozen=True)
class GapAnalysis:
    missing_skills: tuple[str, ...]
    weak_areas: tuple[str, ...]
    strength_areas: tuple[str, ...]


@dataclass(frozen=True)
class TopFactor:
    factor: str
    contribution: float
    explanation: str


@dataclass(frozen=True)
class ScoringBreakdown:
    total_roles_analyzed: int
    original_threshold: float
    adjusted_threshold: float
    average_confidence: float
    top_factors: tuple[TopFactor, ...]


@dataclass(frozen=True)
class ConfidenceBucket:
    range: str
    count: int


@dataclass(frozen=True)
class DetectionMetadata:
    """Run metadata. ``processing_time_ms`` and ``generated_at`` are the only wall-clock fields."""

    processing_time_ms: float
    generated_at: str
    algorithm_version: str
    weighting_version: int
    adjustments: tuple[str, ...]
    confidence_distribution: tuple[ConfidenceBucket, ...]


@dataclass(frozen=True)
class EnhancementSuggestions:
    immediate: tuple[Recommendation, ...]
    strategic: tuple[Recommendation, ...]


@dataclass(frozen=True)
class RoleProfileAnalysis:
    """Full explainable detection result handed to the CV recommendation layer."""

    primary_role: RoleMatchResult
    alternative_roles: tuple[RoleMatchResult, ...]
    overall_confidence: float
    enhancement_suggestions: EnhancementSuggestions
    gap_analysis: GapAnalysis
    scoring_breakdown: ScoringBreakdown
    detection_metadata: DetectionMetadata

    @property
    def all_roles(self) -> tuple[RoleMatchResult, ...]:
        return (self.primary_role, *self.alternative_roles)

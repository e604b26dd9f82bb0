"""Tests for compatibility analysis."""

from dataclasses import replace

import pytest

from role_detection_engine.domain.analysis import (
    ALGORITHM_VERSION,
    AnalysisContext,
    build_analysis,
    build_match_result,
    confidence_distribution,
    fit_analysis,
    scoring_rationale,
    top_factors,
    truncate,
)
from role_detection_engine.domain.results import Priority, RoleMatchResult
from role_detection_engine.domain.role_profiles import ExperienceLevel
from role_detection_engine.domain.scoring import score_role
from tests.support.builders import (
    AS_OF,
    full_templates,
    make_candidate,
    make_experience,
    make_profile,
    strict_rules,
)

CONTEXT = AnalysisContext(
    total_roles_analyzed=2,
    original_threshold=0.6,
    adjusted_threshold=0.6,
    adjustments=(),
    weighting_version=1,
    processing_time_ms=1.5,
    generated_at="2024-06-01T12:00:00+00:00",
)


def _match(candidate, profile) -> RoleMatchResult:
    return build_match_result(
        candidate, profile, score_role(candidate, profile, as_of=AS_OF), as_of=AS_OF
    )


def test_fit_analysis_reports_gaps_for_junior_candidate() -> None:
    candidate = make_candidate(
        "Junior Developer",
        skills=("Python",),
        experience=(
            make_experience("Junior Developer", description="Wrote code", start_date="2023-01"),
        ),
    )
    profile = make_profile(level=ExperienceLevel.SENIOR, rules=strict_rules())
    role_score = score_role(candidate, profile, as_of=AS_OF)

    fit = fit_analysis(candidate, profile, role_score, role_score.confidence, as_of=AS_OF)

    assert "Weak title alignment" in fit.gaps
    assert "Seniority reads as junior; role expects senior" in fit.gaps
    assert "1.4 years of experience; role typically needs 3" in fit.gaps
    assert fit.overall_assessment.startswith("Limited fit for Data Scientist")


def test_fit_analysis_reports_strengths() -> None:
    candidate = make_candidate(skills=("Python", "SQL", "Statistics"))
    profile = make_profile(keywords=("python", "sql"))
    role_score = score_role(candidate, profile, as_of=AS_OF)

    fit = fit_analysis(candidate, profile, role_score, role_score.confidence, as_of=AS_OF)

    assert "Strong skills alignment" in fit.strengths
    assert "Covers 2 of 2 role keywords" in fit.strengths
    assert "Seniority aligns with mid level expectations" in fit.strengths
    assert fit.overall_assessment == "Excellent fit for Data Scientist"


def test_fit_analysis_lists_missing_critical_skills_and_contradictions() -> None:
    candidate = make_candidate(skills=("SQL",), summary="No statistics background")
    profile = make_profile(rules=strict_rules())
    role_score = score_role(candidate, profile, as_of=AS_OF)

    fit = fit_analysis(candidate, profile, role_score, role_score.confidence, as_of=AS_OF)

    assert "Missing critical skill: python" in fit.gaps
    assert "CV contains contradicting phrase 'no statistics'" in fit.gaps


def test_scoring_rationale_mentions_low_confidence() -> None:
    candidate = make_candidate("")
    role_score = score_role(candidate, make_profile(), as_of=AS_OF)

    text = scoring_rationale(role_score, 0.25, low_confidence=True)

    assert "title not assessed" in text
    assert "Confidence 0.25" in text
    assert "Low confidence" in text


def test_build_match_result_overrides_confidence_for_backfill() -> None:
    candidate = make_candidate()
    profile = make_profile()
    role_score = score_role(candidate, profile, as_of=AS_OF)

    result = build_match_result(
        candidate, profile, role_score, as_of=AS_OF, confidence=0.2, low_confidence=True
    )

    assert result.confidence == 0.2
    assert result.low_confidence
    assert result.factors == role_score.factors


class TestBuildAnalysis:
    def test_assembles_primary_alternatives_and_metadata(self) -> None:
        candidate = make_candidate()
        scientist = make_profile(templates=full_templates(), rules=strict_rules())
        analyst = make_profile("data_analyst", "Data Analyst", required_skills=("sql", "excel"))
        matches = tuple(
            sorted(
                (_match(candidate, scientist), _match(candidate, analyst)),
                key=lambda match: -match.confidence,
            )
        )

        analysis = build_analysis(candidate, matches, primary_profile=scientist, context=CONTEXT)

        assert analysis.primary_role is matches[0]
        assert analysis.alternative_roles == matches[1:]
        assert analysis.overall_confidence == pytest.approx(
            sum(match.confidence for match in matches) / 2
        )
        suggestions = analysis.enhancement_suggestions
        assert all(item.priority == Priority.HIGH for item in suggestions.immediate)
        assert all(item.priority != Priority.HIGH for item in suggestions.strategic)
        assert len(suggestions.immediate) + len(suggestions.strategic) == len(
            analysis.primary_role.recommendations
        )
        breakdown = analysis.scoring_breakdown
        assert breakdown.adjusted_threshold == 0.6
        assert 0 < len(breakdown.top_factors) <= 3
        assert all(len(item.explanation) <= 100 for item in breakdown.top_factors)
        metadata = analysis.detection_metadata
        assert metadata.algorithm_version == ALGORITHM_VERSION
        assert metadata.processing_time_ms == 1.5
        assert sum(bucket.count for bucket in metadata.confidence_distribution) == 2

    def test_gap_analysis_uses_primary_profile(self) -> None:
        candidate = make_candidate(skills=("Python", "SQL"))
        profile = make_profile()
        match = _match(candidate, profile)

        analysis = build_analysis(candidate, (match,), primary_profile=profile, context=CONTEXT)

        assert analysis.gap_analysis.missing_skills == ("statistics",)
        assert analysis.gap_analysis.strength_areas == ()
        assert analysis.alternative_roles == ()

    def test_rejects_empty_matches(self) -> None:
        with pytest.raises(ValueError, match="must not be empty"):
            build_analysis(make_candidate(), (), primary_profile=None, context=CONTEXT)


def test_top_factors_rank_by_weighted_contribution() -> None:
    match = _match(make_candidate(skills=("Python", "SQL", "Statistics")), make_profile())

    factors = top_factors(match)

    assert [item.factor for item in factors] == ["skills", "title", "experience"]
    assert factors[0].contribution == pytest.approx(0.35 / 0.9, abs=1e-4)


def test_confidence_distribution_buckets() -> None:
    base = _match(make_candidate(), make_profile())
    matches = tuple(replace(base, confidence=value) for value in (0.85, 0.8, 0.65, 0.5, 0.1))

    buckets = {bucket.range: bucket.count for bucket in confidence_distribution(matches)}

    assert buckets == {"80-100%": 2, "60-79%": 1, "40-59%": 1, "0-39%": 1}


def test_truncate_limits_length() -> None:
    text = truncate("word " * 40)
    assert len(text) <= 100
    assert text.endswith("...")
    assert truncate("short") == "short"

"""Tests for factor scoring."""

from dataclasses import replace
from datetime import date

import pytest

from role_detection_engine.domain.candidate import CandidateProfile
from role_detection_engine.domain.results import FactorType
from role_detection_engine.domain.role_profiles import ExperienceLevel
from role_detection_engine.domain.scoring import (
    DEFAULT_SCORING_RULES,
    ScoringAdjustments,
    negative_penalty,
    recency_weight,
    score_experience,
    score_role,
    score_skills,
    score_title,
)
from tests.support.builders import AS_OF, make_candidate, make_experience, make_profile

RULES = DEFAULT_SCORING_RULES


class TestTitleFactor:
    def test_matching_title_scores_match_constant(self) -> None:
        factor = score_title(make_candidate("Data Scientist"), make_profile(), RULES)
        assert factor.score == pytest.approx(0.8)
        assert factor.matched_keywords == ("Data Scientist",)

    def test_abbreviated_title_matches(self) -> None:
        profile = make_profile("product_manager", "Product Manager")
        factor = score_title(make_candidate("PM"), profile, RULES)
        assert factor.score == pytest.approx(0.8)

    def test_title_keywords_are_checked(self) -> None:
        profile = make_profile(title_keywords=("Machine Learning Engineer",))
        factor = score_title(make_candidate("ML Engineer"), profile, RULES)
        assert factor.score == pytest.approx(0.8)

    def test_unrelated_title_scores_miss_constant(self) -> None:
        factor = score_title(make_candidate("Chef"), make_profile(), RULES)
        assert factor.score == pytest.approx(0.2)
        assert factor.reasoning.improvement_hints

    def test_missing_title_is_not_applied(self) -> None:
        factor = score_title(make_candidate(""), make_profile(), RULES)
        assert not factor.applied
        assert factor.score == 0.0


class TestSkillsFactor:
    def test_two_of_three_required_skills(self) -> None:
        factor = score_skills(make_candidate(skills=("Python", "SQL")), make_profile(), RULES)

        assert factor.factor_type == FactorType.SKILLS
        assert factor.score == pytest.approx(0.6667, abs=1e-3)
        assert set(factor.matched_keywords) == {"python", "sql"}

    def test_profile_without_required_skills_is_neutral(self) -> None:
        factor = score_skills(make_candidate(), make_profile(required_skills=()), RULES)
        assert factor.applied
        assert factor.score == pytest.approx(0.5)

    def test_candidate_without_skills_is_not_applied(self) -> None:
        factor = score_skills(make_candidate(skills=(" ",)), make_profile(), RULES)
        assert not factor.applied
        assert factor.reasoning.improvement_hints


class TestExperienceFactor:
    def test_current_matching_role_scores_title_constant(self) -> None:
        factor = score_experience(make_candidate(), make_profile(), RULES, as_of=AS_OF)
        assert factor.score == pytest.approx(0.8)
        assert factor.matched_keywords == ("python", "sql")

    def test_description_relevance_counts_when_title_misses(self) -> None:
        entry = make_experience(
            "Analyst", description="Data Scientist work in python, sql and statistics"
        )
        candidate = make_candidate(experience=(entry,))
        factor = score_experience(candidate, make_profile(), RULES, as_of=AS_OF)
        assert factor.score == pytest.approx(1.0)

    def test_no_experience_is_not_applied(self) -> None:
        factor = score_experience(make_candidate(experience=()), make_profile(), RULES, as_of=AS_OF)
        assert not factor.applied

    def test_recency_decays_to_floor(self) -> None:
        adjustments = ScoringAdjustments()
        recent = make_experience(end_date="present")
        five_years = make_experience(start_date="2015-01", end_date="2019-06-01")
        ancient = make_experience(start_date="1990", end_date="2000")
        unreadable = make_experience(end_date="a while ago")

        assert recency_weight(recent, as_of=AS_OF, adjustments=adjustments) == 1.0
        assert recency_weight(five_years, as_of=AS_OF, adjustments=adjustments) == pytest.approx(
            0.5, abs=0.01
        )
        assert recency_weight(ancient, as_of=AS_OF, adjustments=adjustments) == 0.3
        assert recency_weight(unreadable, as_of=AS_OF, adjustments=adjustments) == 0.3


class TestScoreRole:
    def test_weighted_average_over_applied_factors(self) -> None:
        candidate = make_candidate(skills=("Python", "SQL", "Statistics"))
        role_score = score_role(candidate, make_profile(), as_of=AS_OF)

        expected = (0.30 * 0.8 + 0.35 * 1.0 + 0.25 * 0.8) / 0.90
        assert role_score.base_score == pytest.approx(expected)
        assert role_score.confidence == pytest.approx(expected)

    def test_missing_title_is_excluded_from_the_denominator(self) -> None:
        role_score = score_role(make_candidate(""), make_profile(), as_of=AS_OF)

        expected = (0.35 * (2 / 3) + 0.25 * 0.8) / 0.60
        assert role_score.confidence == pytest.approx(expected)

    def test_empty_candidate_scores_zero(self) -> None:
        role_score = score_role(CandidateProfile(), make_profile(), as_of=AS_OF)
        assert role_score.confidence == 0.0
        assert all(not factor.applied for factor in role_score.factors)

    def test_seniority_bonus_for_experienced_senior_candidates(self) -> None:
        candidate = make_candidate(experience=(make_experience(start_date="2015-01"),))
        senior = make_profile(level=ExperienceLevel.SENIOR)
        mid = make_profile(level=ExperienceLevel.MID)

        with_bonus = score_role(candidate, senior, as_of=AS_OF)
        without_bonus = score_role(candidate, mid, as_of=AS_OF)

        assert with_bonus.seniority_bonus == pytest.approx(0.1)
        assert without_bonus.seniority_bonus == 0.0
        assert with_bonus.confidence == pytest.approx(
            min(1.0, without_bonus.confidence + 0.1)
        )

    def test_negative_indicators_penalise_and_are_capped(self) -> None:
        candidate = make_candidate(
            "Software Engineer",
            summary="Non-technical, business only role with no coding and no programming",
        )
        profile = make_profile("software_engineer", "Software Engineer")

        role_score = score_role(candidate, profile, as_of=AS_OF)

        assert set(role_score.negative_hits) == {
            "non-technical",
            "business only",
            "no coding",
            "no programming",
        }
        assert role_score.negative_penalty == pytest.approx(0.3)
        assert role_score.confidence == pytest.approx(max(0.0, role_score.base_score - 0.3))

    def test_penalty_never_pushes_confidence_below_zero(self) -> None:
        candidate = CandidateProfile(summary="non-technical, no coding, business only")
        profile = make_profile(
            "software_engineer", "Software Engineer", negative_indicators=("business only",)
        )
        role_score = score_role(candidate, profile, as_of=AS_OF)
        assert role_score.confidence == 0.0

    def test_profile_specific_indicators_apply(self) -> None:
        profile = make_profile(negative_indicators=("hates spreadsheets",))
        candidate = make_candidate(summary="Hates spreadsheets")
        assert score_role(candidate, profile, as_of=AS_OF).negative_hits == ("hates spreadsheets",)

    def test_scores_stay_in_unit_interval(self) -> None:
        candidates = [
            make_candidate(),
            make_candidate("", skills=()),
            make_candidate("Chef", skills=("Cooking",)),
            CandidateProfile(summary="no coding"),
        ]
        profiles = [make_profile(), make_profile("se", "Software Engineer", required_skills=())]
        for candidate in candidates:
            for profile in profiles:
                role_score = score_role(candidate, profile, as_of=AS_OF)
                assert 0.0 <= role_score.confidence <= 1.0
                assert all(0.0 <= factor.score <= 1.0 for factor in role_score.factors)

    def test_scoring_is_deterministic(self) -> None:
        candidate = make_candidate()
        first = score_role(candidate, make_profile(), as_of=date(2024, 1, 1))
        second = score_role(candidate, make_profile(), as_of=date(2024, 1, 1))
        assert first == second


def test_negative_penalty_scales_per_hit() -> None:
    adjustments = ScoringAdjustments()
    assert negative_penalty((), adjustments) == 0.0
    assert negative_penalty(("a",), adjustments) == pytest.approx(0.1)
    assert negative_penalty(("a", "b", "c", "d"), adjustments) == pytest.approx(0.3)
    custom = replace(adjustments, negative_penalty_cap=1.0)
    assert negative_penalty(("a", "b", "c", "d"), custom) == pytest.approx(0.4)

"""Tests for detection orchestration."""

from dataclasses import replace

import pytest

from role_detection_engine.application.detection import (
    FALLBACK_ROLE_ID,
    detect_roles,
    fallback_match,
    relaxation_ladder,
    score_profiles,
    usable_profiles,
)
from role_detection_engine.config import DetectionConfig, DynamicThresholdConfig
from role_detection_engine.domain.role_profiles import RoleProfile
from tests.support.builders import AS_OF, make_candidate, make_profile


def _catalog() -> tuple[RoleProfile, ...]:
    return (
        make_profile("chef", "Chef", required_skills=("cooking", "baking", "menu planning")),
        make_profile("data_analyst", "Data Analyst", required_skills=("sql", "excel", "tableau")),
        make_profile("nurse", "Nurse", required_skills=("patient care", "triage")),
        make_profile("data_scientist", "Data Scientist"),
        make_profile("accountant", "Accountant", required_skills=("bookkeeping", "tax")),
    )


STRICT = DetectionConfig(confidence_threshold=0.8, min_results=2, max_results=5)


class TestMinimumResultsGuarantee:
    def test_relaxes_threshold_until_minimum_is_met(self) -> None:
        outcome = detect_roles(make_candidate(), _catalog(), STRICT, as_of=AS_OF)

        assert [match.role_id for match in outcome.matches] == ["data_scientist", "data_analyst"]
        confidences = [match.confidence for match in outcome.matches]
        assert confidences == sorted(confidences, reverse=True)
        assert all(confidence < 0.8 for confidence in confidences)
        assert outcome.original_threshold == 0.8
        assert outcome.adjusted_threshold == 0.6
        assert "Dynamic threshold lowered from 0.80 to 0.60" in outcome.adjustments
        assert not any(match.low_confidence for match in outcome.matches)
        assert outcome.total_roles_analyzed == 5

    def test_backfills_when_relaxation_is_disabled(self) -> None:
        config = replace(STRICT, dynamic_threshold=DynamicThresholdConfig(enabled=False))

        outcome = detect_roles(make_candidate(), _catalog(), config, as_of=AS_OF)

        assert [match.role_id for match in outcome.matches] == ["data_scientist", "data_analyst"]
        assert all(match.low_confidence for match in outcome.matches)
        assert all("Low confidence" in match.scoring_rationale for match in outcome.matches)
        assert outcome.adjusted_threshold == 0.8
        assert "Added 2 low-confidence role(s) to meet the minimum of 2 results" in (
            outcome.adjustments
        )

    def test_backfilled_confidences_sit_below_kept_ones(self) -> None:
        config = DetectionConfig(
            confidence_threshold=0.7,
            min_results=3,
            dynamic_threshold=DynamicThresholdConfig(enabled=False),
        )

        outcome = detect_roles(make_candidate(), _catalog(), config, as_of=AS_OF)

        assert len(outcome.matches) == 3
        kept = [match for match in outcome.matches if not match.low_confidence]
        added = [match for match in outcome.matches if match.low_confidence]
        assert kept and added
        assert max(match.confidence for match in added) < min(match.confidence for match in kept)
        assert all(0.0 <= match.confidence <= 0.7 for match in added)


def test_max_results_truncates() -> None:
    profiles = tuple(make_profile(f"scientist_{index}", "Data Scientist") for index in range(6))
    config = DetectionConfig(confidence_threshold=0.5, max_results=3, min_results=1)

    outcome = detect_roles(make_candidate(), profiles, config, as_of=AS_OF)

    assert [match.role_id for match in outcome.matches] == [
        "scientist_0",
        "scientist_1",
        "scientist_2",
    ]


def test_small_catalog_returns_every_profile() -> None:
    outcome = detect_roles(
        make_candidate(), (make_profile("chef", "Chef"),), DetectionConfig(), as_of=AS_OF
    )

    assert [match.role_id for match in outcome.matches] == ["chef"]
    assert "Catalog has 1 usable profile(s), fewer than the minimum of 2" in outcome.adjustments


def test_empty_catalog_returns_no_matches() -> None:
    outcome = detect_roles(make_candidate(), (), DetectionConfig(), as_of=AS_OF)
    assert outcome.matches == ()
    assert outcome.primary_profile is None


def test_detection_is_deterministic() -> None:
    first = detect_roles(make_candidate(), _catalog(), STRICT, as_of=AS_OF)
    second = detect_roles(make_candidate(), tuple(reversed(_catalog())), STRICT, as_of=AS_OF)
    assert first.matches == second.matches


def test_threaded_scoring_matches_sequential() -> None:
    rules = DetectionConfig().scoring_rules
    sequential = score_profiles(make_candidate(), _catalog(), rules=rules, as_of=AS_OF)
    threaded = score_profiles(make_candidate(), _catalog(), rules=rules, as_of=AS_OF, workers=4)
    assert threaded == sequential


def test_unusable_profiles_are_skipped_and_noted() -> None:
    adjustments: list[str] = []
    profiles = (
        make_profile("data_scientist", "Data Scientist"),
        make_profile("data_scientist", "Duplicate"),
        make_profile("retired", "Retired Role", is_active=False),
        make_profile(" ", "Blank"),
    )

    usable = usable_profiles(profiles, adjustments)

    assert [profile.name for profile in usable] == ["Data Scientist"]
    assert len(adjustments) == 2
    assert not any("retired" in note for note in adjustments)


def test_target_roles_limit_detection() -> None:
    outcome = detect_roles(
        make_candidate(),
        _catalog(),
        DetectionConfig(),
        as_of=AS_OF,
        target_roles=("chef", "nurse", "astronaut"),
    )

    assert {match.role_id for match in outcome.matches} == {"chef", "nurse"}
    assert outcome.total_roles_analyzed == 2
    assert outcome.adjustments[:2] == (
        "Restricted to 2 target role(s)",
        "Unknown target role(s): astronaut",
    )


def test_unknown_target_roles_leave_nothing_to_rank() -> None:
    outcome = detect_roles(
        make_candidate(), _catalog(), DetectionConfig(), as_of=AS_OF, target_roles=("astronaut",)
    )

    assert outcome.matches == ()
    assert outcome.primary_profile is None
    assert outcome.total_roles_analyzed == 0


@pytest.mark.parametrize(
    ("original", "expected"),
    [
        (0.8, (0.6, 0.55, 0.5, 0.45, 0.4)),
        (0.6, (0.55, 0.5, 0.45, 0.4, 0.35)),
        (0.35, (0.3,)),
        (0.3, ()),
    ],
)
def test_relaxation_ladder(original: float, expected: tuple[float, ...]) -> None:
    assert relaxation_ladder(original, DynamicThresholdConfig()) == expected


def test_relaxation_ladder_disabled() -> None:
    assert relaxation_ladder(0.8, DynamicThresholdConfig(enabled=False)) == ()


def test_fallback_match_is_low_confidence() -> None:
    match = fallback_match("catalog down")
    assert match.role_id == FALLBACK_ROLE_ID
    assert match.confidence == 0.3
    assert match.low_confidence
    assert "catalog down" in match.scoring_rationale

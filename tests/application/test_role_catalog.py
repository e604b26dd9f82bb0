"""Tests for role catalog parsing."""

from pathlib import Path

import pytest

from role_detection_engine.domain.role_profiles import CVSection, ExperienceLevel
from role_detection_engine.exceptions import (
    RoleCatalogFileNotFoundError,
    RoleCatalogValidationError,
)
from role_detection_engine.role_catalog import (
    load_role_catalog,
    parse_role_catalog,
    parse_role_profile,
)
from tests.fakes import InMemoryFileSystem
from tests.support.payloads import catalog_payload, profile_payload


def test_parse_role_profile_builds_domain_profile() -> None:
    profile = parse_role_profile(profile_payload(), source="test")

    assert profile.id == "data_scientist"
    assert profile.experience_level == ExperienceLevel.SENIOR
    assert profile.matching_criteria.title_keywords == ("ML Engineer",)
    assert profile.enhancement_templates.bullet_for_level(ExperienceLevel.SENIOR) == "Led [project]"
    assert profile.validation_rules.required_sections == (
        CVSection.PROFESSIONAL_SUMMARY,
        CVSection.SKILLS,
    )
    assert profile.negative_indicators == ("no statistics",)


def test_parse_role_profile_rejects_unknown_keys() -> None:
    payload = profile_payload() | {"requiredSkills": ["python"]}
    with pytest.raises(RoleCatalogValidationError, match="requiredSkills"):
        parse_role_profile(payload, source="test")


def test_invalid_and_duplicate_profiles_are_skipped() -> None:
    blank_name = profile_payload("broken", " ")
    bad_level = profile_payload("odd") | {"experience_level": "wizard"}
    duplicate = profile_payload("data_scientist", "Second Copy")
    payload = catalog_payload(
        profile_payload(), blank_name, bad_level, duplicate, profile_payload("pm", "PM")
    )

    profiles = parse_role_catalog(payload, source="test")

    assert [profile.id for profile in profiles] == ["data_scientist", "pm"]


@pytest.mark.parametrize(
    "payload",
    [
        {"schema_version": 2, "profiles": [profile_payload()]},
        {"schema_version": 1, "profiles": []},
        {"schema_version": 1, "profiles": [profile_payload(" ")]},
        ["not", "a", "catalog"],
    ],
)
def test_unusable_catalogs_raise(payload: object) -> None:
    with pytest.raises(RoleCatalogValidationError):
        parse_role_catalog(payload, source="test")


def test_load_role_catalog_from_filesystem() -> None:
    fs = InMemoryFileSystem()
    fs.add_json("catalog.json", catalog_payload())

    profiles = load_role_catalog(path=Path("catalog.json"), fs=fs)

    assert len(profiles) == 1


def test_load_role_catalog_reports_missing_and_malformed_files() -> None:
    fs = InMemoryFileSystem()
    fs.add_text("broken.json", "{not json")

    with pytest.raises(RoleCatalogFileNotFoundError):
        load_role_catalog(path=Path("missing.json"), fs=fs)
    with pytest.raises(RoleCatalogValidationError, match="invalid JSON"):
        load_role_catalog(path=Path("broken.json"), fs=fs)

"""Tests for candidate document parsing."""

from pathlib import Path

import pytest

from role_detection_engine.application.candidate_input import load_candidate, parse_candidate
from role_detection_engine.exceptions import CandidateValidationError
from tests.fakes import InMemoryFileSystem
from tests.support.payloads import candidate_payload


def test_parse_candidate_reads_parser_output() -> None:
    candidate = parse_candidate(candidate_payload(), source="test")

    assert candidate.title == "Data Scientist"
    assert candidate.skills == ("Python", "SQL", "Git")
    assert candidate.experience[0].achievements == ("Cut churn by 10%",)
    assert candidate.education[0].field_of_study == "Statistics"
    assert candidate.certifications == ("AWS ML Specialty", "Scrum Master")
    assert candidate.projects == ("Forecasting",)


def test_top_level_title_wins_over_personal_info() -> None:
    payload = candidate_payload() | {"title": "Lead Data Scientist"}
    assert parse_candidate(payload, source="test").title == "Lead Data Scientist"


def test_sparse_documents_are_accepted() -> None:
    candidate = parse_candidate({"experience": None, "summary": None}, source="test")

    assert candidate.title == ""
    assert candidate.summary == ""
    assert candidate.experience == ()
    assert candidate.skills == ()


def test_non_object_documents_are_rejected() -> None:
    with pytest.raises(CandidateValidationError, match="Invalid candidate profile"):
        parse_candidate(["not", "a", "cv"], source="test")


def test_load_candidate() -> None:
    fs = InMemoryFileSystem()
    fs.add_json("cv.json", candidate_payload())

    assert load_candidate(path=Path("cv.json"), fs=fs).title == "Data Scientist"
    with pytest.raises(CandidateValidationError, match="file not found"):
        load_candidate(path=Path("missing.json"), fs=fs)

"""Tests for lexical matching primitives."""

import pytest

from role_detection_engine.domain.lexical import (
    MatchType,
    expand_abbreviation,
    match_keyword_set,
    similar,
    similarity,
    synonyms_equal,
)


class TestSimilar:
    """Tests for similar()."""

    @pytest.mark.parametrize("term", ["python", "Product Manager", "k8s", ""])
    @pytest.mark.parametrize("threshold", [0.0, 0.7, 1.0])
    def test_term_is_similar_to_itself(self, term: str, threshold: float) -> None:
        assert similar(term, term, threshold)

    def test_abbreviation_matches_its_expansion(self) -> None:
        assert similar("pm", "product manager", 0.5)
        assert similar("Product Manager", "PM", 0.9)

    def test_case_and_whitespace_are_ignored(self) -> None:
        assert similar("  Data   Scientist ", "data scientist", 1.0)

    def test_small_typo_is_similar(self) -> None:
        assert similar("pyton", "python", 0.7)

    def test_unrelated_terms_are_not_similar(self) -> None:
        assert not similar("java", "javascript", 0.7)


def test_similarity_is_normalised_edit_distance() -> None:
    assert similarity("kitten", "sitting") == pytest.approx(1 - 3 / 7)
    assert similarity("", "abc") == 0.0
    assert similarity("ABC", "abc") == 1.0


def test_similarity_of_empty_strings_is_one() -> None:
    assert similarity("", "") == 1.0


def test_expand_abbreviation_works_both_ways() -> None:
    assert expand_abbreviation("PM") == "product manager"
    assert expand_abbreviation("Product  Manager") == "pm"
    assert expand_abbreviation("Rust") == "rust"


def test_synonyms_equal_uses_clusters() -> None:
    assert synonyms_equal("JS", "javascript")
    assert synonyms_equal("Data Scientist", "data analyst")
    assert not synonyms_equal("python", "java")


class TestMatchKeywordSet:
    """Tests for match_keyword_set()."""

    def test_two_of_three_required_skills(self) -> None:
        result = match_keyword_set(["Python", "SQL"], ["python", "sql", "statistics"], 0.7)

        assert result.matches == frozenset({"python", "sql"})
        assert result.coverage == pytest.approx(2 / 3)
        assert result.score == pytest.approx(2 / 3 + 0.1)
        assert result.missing == ("statistics",)

    def test_half_match_gets_no_bonus(self) -> None:
        result = match_keyword_set(["python"], ["python", "rust"])
        assert result.score == pytest.approx(0.5)

    def test_score_is_capped_at_one(self) -> None:
        result = match_keyword_set(["python", "sql"], ["python", "sql"])
        assert result.score == 1.0

    def test_empty_targets_score_zero(self) -> None:
        result = match_keyword_set(["python"], [])
        assert result.score == 0.0
        assert result.details == ()
        assert result.coverage == 0.0

    def test_match_types_follow_priority(self) -> None:
        exact = match_keyword_set(["python"], ["python"]).details[0]
        substring = match_keyword_set(["Advanced Python"], ["python"]).details[0]
        synonym = match_keyword_set(["k8s"], ["kubernetes"]).details[0]
        fuzzy = match_keyword_set(["pyton"], ["python"]).details[0]

        assert exact.match_type == MatchType.EXACT
        assert substring.match_type == MatchType.SUBSTRING
        assert substring.matched_term == "Advanced Python"
        assert synonym.match_type == MatchType.SYNONYM
        assert fuzzy.match_type == MatchType.FUZZY
        assert fuzzy.relevance == pytest.approx(5 / 6, abs=1e-4)

    def test_short_terms_do_not_substring_match(self) -> None:
        result = match_keyword_set(["go"], ["mongodb"])
        assert not result.details[0].found

    def test_duplicate_targets_are_collapsed(self) -> None:
        result = match_keyword_set(["sql"], ["SQL", "sql ", "python"])
        assert len(result.details) == 2

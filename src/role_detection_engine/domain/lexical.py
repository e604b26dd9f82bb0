"""Lexical matching primitives: edit distance, abbreviations, synonyms, keyword sets.

Usage example:
    from role_detection_engine.domain.lexical import match_keyword_set, similar

    assert similar("pm", "product manager", 0.5)
    result = match_keyword_set(["Python", "SQL"], ["python", "sql", "statistics"], 0.7)
    assert result.matches == frozenset({"python", "sql"})
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import StrEnum

from rapidfuzz.distance import Levenshtein

from .lexicon import ABBREVIATIONS, EXPANSIONS, SYNONYM_CLUSTERS

DEFAULT_FUZZY_THRESHOLD = 0.7
MIN_SUBSTRING_LENGTH = 3
SET_BONUS = 0.1
SET_BONUS_FRACTION = 0.5

EXACT_RELEVANCE = 1.0
SUBSTRING_RELEVANCE = 0.9
SYNONYM_RELEVANCE = 0.85


class MatchType(StrEnum):
    """How a target keyword was found, in priority order."""

    EXACT = "exact"
    SUBSTRING = "substring"
    SYNONYM = "synonym"
    FUZZY = "fuzzy"


@dataclass(frozen=True)
class KeywordMatch:
    """Per-keyword match detail used in factor reasoning."""

    keyword: str
    found: bool
    match_type: MatchType | None = None
    matched_term: str = ""
    relevance: float = 0.0


@dataclass(frozen=True)
class KeywordSetMatch:
    """Result of matching candidate terms against a target keyword set."""

    matches: frozenset[str]
    details: tuple[KeywordMatch, ...]
    score: float

    @property
    def matched_count(self) -> int:
        return len(self.matches)

    @property
    def coverage(self) -> float:
        """Fraction of targets matched, without the set bonus."""
        if not self.details:
            return 0.0
        return self.matched_count / len(self.details)

    @property
    def missing(self) -> tuple[str, ...]:
        return tuple(detail.keyword for detail in self.details if not detail.found)


def _build_synonym_index() -> dict[str, frozenset[int]]:
    index: dict[str, set[int]] = {}
    for position, cluster in enumerate(SYNONYM_CLUSTERS):
        for term in cluster:
            index.setdefault(term, set()).add(position)
    return {term: frozenset(positions) for term, positions in index.items()}


_SYNONYM_INDEX = _build_synonym_index()


def normalise_term(term: str) -> str:
    return " ".join(term.lower().split())


def similarity(a: str, b: str) -> float:
    """Normalised edit-distance similarity in [0, 1] on normalised terms."""
    return Levenshtein.normalized_similarity(normalise_term(a), normalise_term(b))


def expand_abbreviation(term: str) -> str:
    """Swap an abbreviation for its expansion or an expansion for its abbreviation."""
    text = normalise_term(term)
    return ABBREVIATIONS.get(text) or EXPANSIONS.get(text) or text


def _abbreviation_equal(s1: str, s2: str) -> bool:
    e1, e2 = expand_abbreviation(s1), expand_abbreviation(s2)
    return e1 == e2 or e1 == s2 or s1 == e2


def similar(a: str, b: str, threshold: float = DEFAULT_FUZZY_THRESHOLD) -> bool:
    """True when ``a`` and ``b`` are equal, abbreviation-equivalent, or close enough."""
    s1, s2 = normalise_term(a), normalise_term(b)
    if s1 == s2:
        return True
    if _abbreviation_equal(s1, s2):
        return True
    return similarity(s1, s2) >= threshold


def synonyms_equal(a: str, b: str) -> bool:
    """True when both terms sit in the same synonym cluster (or are equal)."""
    s1, s2 = normalise_term(a), normalise_term(b)
    if s1 == s2:
        return True
    return bool(_SYNONYM_INDEX.get(s1, frozenset()) & _SYNONYM_INDEX.get(s2, frozenset()))


def _substring_match(s1: str, s2: str) -> bool:
    shorter, longer = (s1, s2) if len(s1) <= len(s2) else (s2, s1)
    return len(shorter) >= MIN_SUBSTRING_LENGTH and shorter in longer


def _dedupe(terms: Iterable[str]) -> list[tuple[str, str]]:
    seen: set[str] = set()
    pairs: list[tuple[str, str]] = []
    for term in terms:
        key = normalise_term(term)
        if key and key not in seen:
            seen.add(key)
            pairs.append((term.strip(), key))
    return pairs


def _find_match(
    target: str, candidates: Sequence[tuple[str, str]], threshold: float
) -> KeywordMatch | None:
    for original, key in candidates:
        if key == target:
            return KeywordMatch(target, True, MatchType.EXACT, original, EXACT_RELEVANCE)
    for original, key in candidates:
        if _substring_match(key, target):
            return KeywordMatch(target, True, MatchType.SUBSTRING, original, SUBSTRING_RELEVANCE)
    for original, key in candidates:
        if synonyms_equal(key, target):
            return KeywordMatch(target, True, MatchType.SYNONYM, original, SYNONYM_RELEVANCE)
    for original, key in candidates:
        if similar(key, target, threshold):
            relevance = 1.0 if _abbreviation_equal(key, target) else similarity(key, target)
            return KeywordMatch(target, True, MatchType.FUZZY, original, round(relevance, 4))
    return None


def match_keyword_set(
    candidate_terms: Iterable[str],
    target_terms: Iterable[str],
    threshold: float = DEFAULT_FUZZY_THRESHOLD,
) -> KeywordSetMatch:
    """Match every target term against the candidate terms.

    Each target records the first match type found, trying exact, substring, synonym
    and fuzzy in that order. The score is matched/total targets plus a flat bonus
    when more than half of the targets matched, capped at 1.0.
    """
    candidates = _dedupe(candidate_terms)
    targets = _dedupe(target_terms)

    details: list[KeywordMatch] = []
    matches: set[str] = set()
    for _, target in targets:
        found = _find_match(target, candidates, threshold)
        if found is None:
            details.append(KeywordMatch(keyword=target, found=False))
            continue
        details.append(found)
        matches.add(target)

    if not targets:
        return KeywordSetMatch(matches=frozenset(), details=(), score=0.0)

    base = len(matches) / len(targets)
    bonus = SET_BONUS if len(matches) > len(targets) * SET_BONUS_FRACTION else 0.0
    return KeywordSetMatch(
        matches=frozenset(matches),
        details=tuple(details),
        score=min(1.0, base + bonus),
    )

"""Static lexical tables: synonyms, abbreviations, negative and seniority indicators.

Every table is immutable and read concurrently by scoring workers.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from types import MappingProxyType

from .role_profiles import ExperienceLevel

# Each cluster is a set of interchangeable role/skill terms (lower case)
SYNONYM_CLUSTERS: tuple[frozenset[str], ...] = (
    frozenset(
        {
            "software engineer",
            "software developer",
            "programmer",
            "coder",
            "developer",
            "swe",
            "software dev",
        }
    ),
    frozenset({"product manager", "pm", "product owner", "po", "product lead", "product head"}),
    frozenset(
        {
            "business analyst",
            "ba",
            "business systems analyst",
            "systems analyst",
            "requirements analyst",
        }
    ),
    frozenset(
        {
            "ui/ux",
            "user experience",
            "interface design",
            "product design",
            "ux design",
            "ui design",
            "interaction design",
        }
    ),
    frozenset(
        {
            "data scientist",
            "data analyst",
            "ml engineer",
            "machine learning engineer",
            "ai engineer",
            "data engineer",
        }
    ),
    frozenset(
        {
            "devops",
            "dev ops",
            "site reliability engineer",
            "sre",
            "infrastructure engineer",
            "platform engineer",
        }
    ),
    frozenset(
        {"project manager", "program manager", "delivery manager", "scrum master", "agile coach"}
    ),
    frozenset({"quality assurance", "qa", "test engineer", "quality engineer", "sdet"}),
    frozenset({"full stack", "fullstack", "full-stack", "front and back end"}),
    frozenset({"frontend", "front-end", "front end", "ui developer", "client-side developer"}),
    frozenset({"backend", "back-end", "back end", "server-side developer", "api developer"}),
    frozenset({"database", "db", "data management", "sql developer", "database developer", "dba"}),
    frozenset({"cloud", "aws", "azure", "gcp", "cloud computing", "cloud infrastructure"}),
    frozenset({"marketing", "digital marketing", "growth marketing", "content marketing"}),
    frozenset(
        {"sales", "business development", "bd", "account executive", "ae", "sales representative"}
    ),
    frozenset({"machine learning", "ml"}),
    frozenset({"artificial intelligence", "ai"}),
    frozenset({"javascript", "js", "ecmascript"}),
    frozenset({"typescript", "ts"}),
    frozenset({"node.js", "nodejs", "node"}),
    frozenset({"kubernetes", "k8s"}),
    frozenset({"postgresql", "postgres"}),
    frozenset({"statistics", "statistical analysis", "statistical modelling"}),
)

# Abbreviation -> expansion. Lookups work in both directions.
ABBREVIATIONS: MappingProxyType[str, str] = MappingProxyType(
    {
        "pm": "product manager",
        "ba": "business analyst",
        "qa": "quality assurance",
        "swe": "software engineer",
        "sre": "site reliability engineer",
        "po": "product owner",
        "ae": "account executive",
        "bd": "business development",
        "cto": "chief technology officer",
        "ceo": "chief executive officer",
        "cfo": "chief financial officer",
        "vp": "vice president",
        "hr": "human resources",
        "it": "information technology",
        "ui": "user interface",
        "ux": "user experience",
        "api": "application programming interface",
        "ml": "machine learning",
        "ai": "artificial intelligence",
        "dba": "database administrator",
        "sdet": "software development engineer in test",
    }
)

EXPANSIONS: MappingProxyType[str, str] = MappingProxyType(
    {expansion: abbreviation for abbreviation, expansion in ABBREVIATIONS.items()}
)

# Role keyword -> phrases that contradict it. Applied to profiles whose name contains the key.
NEGATIVE_INDICATORS: MappingProxyType[str, tuple[str, ...]] = MappingProxyType(
    {
        "software engineer": (
            "no coding",
            "non-technical",
            "no programming",
            "business only",
            "non-developer",
        ),
        "data scientist": (
            "no statistics",
            "no analytics",
            "no data analysis",
            "no ml experience",
        ),
        "manager": ("individual contributor", "ic role", "no management", "non-managerial"),
        "senior": ("entry level", "fresh graduate", "no experience"),
        "engineer": ("non-technical", "no coding"),
    }
)

SENIORITY_KEYWORDS: MappingProxyType[ExperienceLevel, tuple[str, ...]] = MappingProxyType(
    {
        ExperienceLevel.ENTRY: (
            "entry level",
            "graduate",
            "intern",
            "trainee",
            "0-1 years",
            "fresh graduate",
        ),
        ExperienceLevel.JUNIOR: ("junior", "1-3 years", "associate", "jr", "early career"),
        ExperienceLevel.MID: ("mid-level", "mid level", "3-5 years", "intermediate"),
        ExperienceLevel.SENIOR: ("senior", "sr", "7+ years", "8+ years", "experienced"),
        ExperienceLevel.LEAD: ("lead", "team lead", "tech lead", "technical lead", "10+ years"),
        ExperienceLevel.PRINCIPAL: ("principal", "staff", "architect", "12+ years", "15+ years"),
        ExperienceLevel.EXECUTIVE: (
            "executive",
            "director",
            "vp",
            "vice president",
            "chief",
            "cto",
            "ceo",
            "head of",
        ),
    }
)

_YEARS_RE = re.compile(r"(\d+)\+?\s*years?\s*(?:of\s*)?experience")
_WORD_BOUNDARY = r"(?<![a-z0-9]){}(?![a-z0-9])"

# Years-of-experience bands, checked in order
_YEAR_BANDS: tuple[tuple[int, ExperienceLevel], ...] = (
    (15, ExperienceLevel.PRINCIPAL),
    (10, ExperienceLevel.LEAD),
    (7, ExperienceLevel.SENIOR),
    (3, ExperienceLevel.MID),
    (1, ExperienceLevel.JUNIOR),
    (0, ExperienceLevel.ENTRY),
)


@dataclass(frozen=True)
class SeniorityDetection:
    """Detected seniority level with the evidence that produced it."""

    level: ExperienceLevel
    years_of_experience: int | None
    keywords: tuple[str, ...]


def negative_indicators_for(profile_name: str, extra: tuple[str, ...] = ()) -> tuple[str, ...]:
    """Return distinct contradicting phrases for a profile, its own phrases first."""
    name = profile_name.lower()
    phrases: list[str] = [phrase.strip().lower() for phrase in extra if phrase.strip()]
    for key, values in NEGATIVE_INDICATORS.items():
        if key in name:
            phrases.extend(values)
    return tuple(dict.fromkeys(phrases))


def detect_experience_level(text: str) -> SeniorityDetection:
    """Detect seniority from free text; explicit years of experience take precedence."""
    lowered = text.lower()
    detected: ExperienceLevel | None = None
    matched: list[str] = []
    for level, keywords in SENIORITY_KEYWORDS.items():
        for keyword in keywords:
            if re.search(_WORD_BOUNDARY.format(re.escape(keyword)), lowered):
                matched.append(keyword)
                if detected is None or level.rank > detected.rank:
                    detected = level

    years_found = [int(value) for value in _YEARS_RE.findall(lowered)]
    years = max(years_found) if years_found else None
    if years is not None:
        for floor, level in _YEAR_BANDS:
            if years >= floor:
                detected = level
                break

    if detected is None:
        detected = ExperienceLevel.MID
    return SeniorityDetection(level=detected, years_of_experience=years, keywords=tuple(matched))

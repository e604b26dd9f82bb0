"""Candidate profile model and the derived views the scorer reads.

Usage example:
    from datetime import date

    from role_detection_engine.domain.candidate import CandidateProfile, WorkExperience

    candidate = CandidateProfile(
        title="Data Scientist",
        summary="",
        experience=(
            WorkExperience(
                company="Acme",
                position="Data Scientist",
                start_date="2018-01",
                end_date="present",
                description="Built machine learning models in Python",
            ),
        ),
        skills=("Python", "SQL"),
    )
    assert candidate.total_experience_years(as_of=date(2024, 1, 1)) >= 5
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date

_DAYS_PER_YEAR = 365.25
_OPEN_ENDED = frozenset({"present", "current", "now", "ongoing", "today"})
_ISO_DATE_RE = re.compile(r"^(\d{4})(?:-(\d{1,2}))?(?:-(\d{1,2}))?")


@dataclass(frozen=True)
class WorkExperience:
    """One work-history entry. Dates are free text as produced by the CV parser."""

    company: str = ""
    position: str = ""
    start_date: str = ""
    end_date: str = ""
    description: str = ""
    achievements: tuple[str, ...] = ()


@dataclass(frozen=True)
class Education:
    institution: str = ""
    degree: str = ""
    field_of_study: str = ""
    graduation_date: str = ""


@dataclass(frozen=True)
class CandidateProfile:
    """Structured CV content for one person. Read-only to the engine."""

    title: str = ""
    summary: str = ""
    experience: tuple[WorkExperience, ...] = ()
    skills: tuple[str, ...] = ()
    education: tuple[Education, ...] = ()
    certifications: tuple[str, ...] = ()
    projects: tuple[str, ...] = ()

    @property
    def has_title(self) -> bool:
        return bool(self.title.strip())

    @property
    def clean_skills(self) -> tuple[str, ...]:
        return tuple(skill.strip() for skill in self.skills if skill.strip())

    @property
    def has_achievements(self) -> bool:
        return any(item.strip() for entry in self.experience for item in entry.achievements)

    def full_text(self) -> str:
        """Concatenate every free-text field for literal phrase checks."""
        parts: list[str] = [self.title, self.summary]
        for entry in self.experience:
            parts.extend([entry.position, entry.company, entry.description])
            parts.extend(entry.achievements)
        parts.extend(self.skills)
        return " ".join(part.strip() for part in parts if part and part.strip())

    def total_experience_years(self, *, as_of: date) -> float:
        """Sum entry durations; open-ended entries run to ``as_of``, undated ones count zero."""
        total = 0.0
        for entry in self.experience:
            start = parse_cv_date(entry.start_date)
            end = resolve_end_date(entry.end_date, as_of=as_of)
            if start is None or end is None or end < start:
                continue
            total += (end - start).days / _DAYS_PER_YEAR
        return total


def flatten_skills(skills: object) -> tuple[str, ...]:
    """Flatten a flat list or a category -> list mapping into one ordered tuple."""
    items: list[str] = []
    if isinstance(skills, dict):
        for values in skills.values():
            items.extend(flatten_skills(values))
    elif isinstance(skills, (list, tuple)):
        for value in skills:
            if isinstance(value, str):
                items.append(value)
            else:
                items.extend(flatten_skills(value))
    elif isinstance(skills, str):
        items.append(skills)
    seen: set[str] = set()
    ordered: list[str] = []
    for item in items:
        text = item.strip()
        key = text.lower()
        if text and key not in seen:
            seen.add(key)
            ordered.append(text)
    return tuple(ordered)


def parse_cv_date(value: str) -> date | None:
    """Parse ``YYYY``, ``YYYY-MM`` or ``YYYY-MM-DD`` (prefix match); anything else is None."""
    text = (value or "").strip()
    match = _ISO_DATE_RE.match(text)
    if match is None:
        return None
    year = int(match.group(1))
    month = int(match.group(2) or 1)
    day = int(match.group(3) or 1)
    try:
        return date(year, month, day)
    except ValueError:
        return None


def resolve_end_date(value: str, *, as_of: date) -> date | None:
    """End date of an entry: blank or "present" means ``as_of``."""
    text = (value or "").strip()
    if not text or text.lower() in _OPEN_ENDED:
        return as_of
    return parse_cv_date(text)


def years_between(earlier: date, later: date) -> float:
    return (later - earlier).days / _DAYS_PER_YEAR

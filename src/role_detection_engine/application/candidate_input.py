"""Parse parsed-CV documents into the candidate domain model.

CV parsers emit far more than the engine reads, so unknown keys are ignored.
Skills may arrive as a flat list or as a category -> list mapping.

Usage example:
    from role_detection_engine.application.candidate_input import parse_candidate

    candidate = parse_candidate(
        {"personal_info": {"title": "Data Analyst"}, "skills": {"tools": ["SQL", "Excel"]}},
        source="inline",
    )
    assert candidate.skills == ("SQL", "Excel")
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from ..config_file import format_validation_error
from ..domain.candidate import CandidateProfile, Education, WorkExperience, flatten_skills
from ..exceptions import CandidateValidationError
from ..protocols import FileSystem

_NAMED_ITEM_KEYS = ("name", "title")


def _text(value: object) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _named_items(value: object) -> tuple[str, ...]:
    """Accept strings or objects carrying a name/title; drop everything else."""
    if not isinstance(value, (list, tuple)):
        return ()
    items: list[str] = []
    for item in value:
        if isinstance(item, str) and item.strip():
            items.append(item.strip())
        elif isinstance(item, dict):
            for key in _NAMED_ITEM_KEYS:
                text = _text(item.get(key))
                if text:
                    items.append(text)
                    break
    return tuple(items)


class _PersonalInfoModel(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    title: str | None = None


class _ExperienceModel(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    company: str = ""
    position: str = ""
    start_date: str = ""
    end_date: str = ""
    description: str = ""
    achievements: tuple[str, ...] = ()

    @field_validator("company", "position", "start_date", "end_date", "description", mode="before")
    @classmethod
    def _coerce_text(cls, value: object) -> str:
        return _text(value)

    @field_validator("achievements", mode="before")
    @classmethod
    def _coerce_achievements(cls, value: object) -> tuple[str, ...]:
        if isinstance(value, str):
            return (value.strip(),) if value.strip() else ()
        return _named_items(value)


class _EducationModel(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    institution: str = ""
    degree: str = ""
    field_of_study: str = ""
    graduation_date: str = ""

    @field_validator("institution", "degree", "field_of_study", "graduation_date", mode="before")
    @classmethod
    def _coerce_text(cls, value: object) -> str:
        return _text(value)


class _CandidateModel(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    title: str | None = None
    personal_info: _PersonalInfoModel | None = None
    summary: str = ""
    experience: tuple[_ExperienceModel, ...] = ()
    skills: tuple[str, ...] = ()
    education: tuple[_EducationModel, ...] = ()
    certifications: tuple[str, ...] = ()
    projects: tuple[str, ...] = ()

    @field_validator("summary", mode="before")
    @classmethod
    def _coerce_summary(cls, value: object) -> str:
        return _text(value)

    @field_validator("experience", "education", mode="before")
    @classmethod
    def _coerce_entries(cls, value: object) -> object:
        if value is None:
            return ()
        return value

    @field_validator("skills", mode="before")
    @classmethod
    def _flatten_skills(cls, value: object) -> tuple[str, ...]:
        return flatten_skills(value)

    @field_validator("certifications", "projects", mode="before")
    @classmethod
    def _coerce_named_items(cls, value: object) -> tuple[str, ...]:
        return _named_items(value)

    @property
    def resolved_title(self) -> str:
        if self.title and self.title.strip():
            return self.title.strip()
        if self.personal_info is not None and self.personal_info.title:
            return self.personal_info.title.strip()
        return ""


def parse_candidate(payload: object, *, source: str) -> CandidateProfile:
    """Validate a parsed-CV document.

    Raises:
        CandidateValidationError: When the document shape is unusable.
    """
    try:
        model = _CandidateModel.model_validate(payload)
    except ValidationError as exc:
        raise CandidateValidationError(source, format_validation_error(exc)) from exc

    return CandidateProfile(
        title=model.resolved_title,
        summary=model.summary,
        experience=tuple(
            WorkExperience(
                company=entry.company,
                position=entry.position,
                start_date=entry.start_date,
                end_date=entry.end_date,
                description=entry.description,
                achievements=entry.achievements,
            )
            for entry in model.experience
        ),
        skills=model.skills,
        education=tuple(
            Education(
                institution=entry.institution,
                degree=entry.degree,
                field_of_study=entry.field_of_study,
                graduation_date=entry.graduation_date,
            )
            for entry in model.education
        ),
        certifications=model.certifications,
        projects=model.projects,
    )


def load_candidate(*, path: Path, fs: FileSystem) -> CandidateProfile:
    """Load a parsed-CV JSON document from disk."""
    if not fs.exists(path):
        raise CandidateValidationError(str(path), "file not found")
    try:
        payload = fs.read_json(path)
    except ValueError as exc:
        raise CandidateValidationError(str(path), f"invalid JSON: {exc}") from exc
    return parse_candidate(payload, source=str(path))

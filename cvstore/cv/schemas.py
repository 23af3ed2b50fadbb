"""CV document shape, default filling, and request/response schemas.

Field names on the wire are camelCase (``personalDetails``, ``workExperience``);
Python attributes are snake_case. Every string is trimmed before it is stored.
"""

import re
from collections.abc import Mapping
from datetime import datetime
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PrivateAttr,
    StringConstraints,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

TrimmedStr = Annotated[str, StringConstraints(strip_whitespace=True)]

# ASCII \w, no consecutive separators; same language as the classic
# ^\w+([.-]?\w+)*@\w+([.-]?\w+)*(\.\w{2,3})+$ without its nested quantifier.
EMAIL_PATTERN = re.compile(r"^\w+(?:[.-]\w+)*@\w+(?:[.-]\w+)*(?:\.\w{2,3})+$", re.ASCII)

LIST_SECTIONS = ("education", "work_experience", "skills", "interests", "projects")

_SECTION_LABELS = {
    "education": "Education",
    "work_experience": "Work experience",
    "skills": "Skills",
    "interests": "Interests",
    "projects": "Projects",
}

# Numbers sent where text is expected are stored as their string form ("time": 2020).
_CAMEL = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    str_strip_whitespace=True,
    coerce_numbers_to_str=True,
)


# ── Stored document ───────────────────────────────────────────────────


class _Section(BaseModel):
    """Flat object of trimmed strings; missing or null keys become ``""``."""

    model_config = _CAMEL

    @field_validator("*", mode="before")
    @classmethod
    def _none_as_empty(cls, v: object) -> object:
        return "" if v is None else v


class PersonalDetails(_Section):
    full_name: TrimmedStr = ""
    phone: TrimmedStr = ""
    email: TrimmedStr = ""
    address: TrimmedStr = ""


class About(_Section):
    profile: TrimmedStr = ""


class EducationEntry(_Section):
    institution: TrimmedStr = ""
    qualification: TrimmedStr = ""
    time: TrimmedStr = ""


class WorkExperienceEntry(_Section):
    company: TrimmedStr = ""
    position: TrimmedStr = ""
    time: TrimmedStr = ""


class ProjectEntry(_Section):
    name: TrimmedStr = ""
    description: TrimmedStr = ""
    languages: TrimmedStr = ""


class CVDocument(BaseModel):
    """The persisted shape of a CV. ``None`` list sections mean "absent"."""

    model_config = _CAMEL

    personal_details: PersonalDetails = Field(default_factory=PersonalDetails)
    about: About = Field(default_factory=About)
    education: list[EducationEntry] | None = None
    work_experience: list[WorkExperienceEntry] | None = None
    projects: list[ProjectEntry] | None = None
    skills: list[TrimmedStr] | None = None
    interests: list[TrimmedStr] | None = None

    @field_validator("personal_details", "about", mode="before")
    @classmethod
    def _null_section(cls, v: object) -> object:
        return {} if v is None else v

    def columns(self) -> dict[str, Any]:
        """JSON values keyed by CVRecord column name."""
        return {
            "personal_details": self.personal_details.model_dump(by_alias=True),
            "about": self.about.model_dump(by_alias=True),
            "education": [e.model_dump(by_alias=True) for e in self.education or []],
            "work_experience": [w.model_dump(by_alias=True) for w in self.work_experience or []],
            "projects": [p.model_dump(by_alias=True) for p in self.projects or []],
            "skills": list(self.skills or []),
            "interests": list(self.interests or []),
        }


def normalize_cv_document(data: Mapping[str, Any]) -> CVDocument:
    """Validate, trim and default-fill a document right before it is persisted.

    ``education``, ``workExperience`` and ``projects`` always end up with at
    least one row: a missing or empty list becomes a single all-empty
    placeholder row. ``skills`` and ``interests`` become ``[]`` when missing.

    Raises ``pydantic.ValidationError`` when a section has the wrong shape.
    """
    doc = CVDocument.model_validate(dict(data))
    if not doc.education:
        doc.education = [EducationEntry()]
    if not doc.work_experience:
        doc.work_experience = [WorkExperienceEntry()]
    if not doc.projects:
        doc.projects = [ProjectEntry()]
    if doc.skills is None:
        doc.skills = []
    if doc.interests is None:
        doc.interests = []
    return doc


def default_cv_document() -> CVDocument:
    return normalize_cv_document({})


# ── Upsert request ────────────────────────────────────────────────────


class PersonalDetailsInput(PersonalDetails):
    full_name: TrimmedStr = Field("", max_length=100)
    phone: TrimmedStr = Field("", max_length=20)
    email: TrimmedStr = ""
    address: TrimmedStr = Field("", max_length=200)

    @field_validator("email")
    @classmethod
    def _check_email(cls, v: str) -> str:
        if v and not EMAIL_PATTERN.match(v):
            raise PydanticCustomError("email_format", "Please enter a valid email")
        return v


class AboutInput(About):
    profile: TrimmedStr = Field("", max_length=1000)


class CVUpsertRequest(BaseModel):
    """Partial CV sent by the client.

    List sections are only checked for being lists here; their rows are
    shaped by ``normalize_cv_document`` at persist time.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    # Object sections whose raw JSON object had at least one key, known or not.
    _sent_objects: set[str] = PrivateAttr(default_factory=set)

    personal_details: PersonalDetailsInput | None = None
    about: AboutInput | None = None
    education: list[Any] | None = None
    work_experience: list[Any] | None = None
    skills: list[Any] | None = None
    interests: list[Any] | None = None
    projects: list[Any] | None = None

    @field_validator(*LIST_SECTIONS, mode="before")
    @classmethod
    def _must_be_list(cls, v: object, info: ValidationInfo) -> object:
        # Runs only for keys actually sent, so an explicit null is rejected too.
        if not isinstance(v, list):
            raise PydanticCustomError(
                "list_type",
                "{label} must be an array",
                {"label": _SECTION_LABELS[info.field_name]},
            )
        return v

    @model_validator(mode="wrap")
    @classmethod
    def _record_sent_objects(cls, data: Any, handler) -> "CVUpsertRequest":
        request = handler(data)
        if isinstance(data, Mapping):
            for name in ("personal_details", "about"):
                raw = data.get(to_camel(name), data.get(name))
                if isinstance(raw, Mapping) and raw:
                    request._sent_objects.add(name)
        return request

    def replacements(self) -> dict[str, Any]:
        """Sections that overwrite the stored ones, keyed by column name.

        Only truthy values count: a non-empty object (any key, even one the
        schema ignores), or a non-empty list. ``null``, ``{}`` and ``[]`` leave
        the stored section untouched. A supplied object replaces its whole
        section, so keys it omits are reset to ``""``.
        """
        sections: dict[str, Any] = {}
        for name in ("personal_details", "about"):
            section = getattr(self, name)
            if section is not None and name in self._sent_objects:
                sections[name] = section.model_dump(by_alias=True)
        for name in LIST_SECTIONS:
            value = getattr(self, name)
            if value:
                sections[name] = value
        return sections


def format_validation_errors(exc: ValidationError) -> list[dict[str, str]]:
    """Flatten pydantic errors into ``[{field, message}]`` using wire names.

    FastAPI's ``RequestValidationError`` has the same ``errors()`` shape (with a
    leading ``"body"`` in each location) and is accepted too.
    """
    errors = []
    for err in exc.errors():
        loc = [str(p) for p in err["loc"] if p != "body"]
        errors.append({"field": ".".join(loc), "message": err["msg"]})
    return errors


# ── Response ──────────────────────────────────────────────────────────


class CVResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    user: str
    personal_details: dict[str, Any]
    about: dict[str, Any]
    education: list[dict[str, Any]]
    work_experience: list[dict[str, Any]]
    skills: list[str]
    interests: list[str]
    projects: list[dict[str, Any]]
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_record(cls, cv) -> "CVResponse":
        return cls(
            id=str(cv.id),
            user=str(cv.user_id),
            personal_details=cv.personal_details or {},
            about=cv.about or {},
            education=cv.education or [],
            work_experience=cv.work_experience or [],
            skills=cv.skills or [],
            interests=cv.interests or [],
            projects=cv.projects or [],
            created_at=cv.created_at,
            updated_at=cv.updated_at,
        )

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")

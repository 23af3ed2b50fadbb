"""CV record service: fetch-or-create, upsert, delete.

Every write goes through ``normalize_cv_document`` first, so the stored record
always satisfies the placeholder-row invariant. Storage faults are rolled back
and re-raised as ``CVStorageError``; nothing is retried.
"""

import logging
from collections.abc import Mapping
from typing import Any
from uuid import UUID

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .models import CVRecord
from .schemas import CVUpsertRequest, default_cv_document, format_validation_errors, normalize_cv_document

logger = logging.getLogger(__name__)


class CVError(Exception):
    """Base class for CV operation failures."""


class CVValidationError(CVError):
    """Client payload broke one or more field rules. ``errors`` lists all of them."""

    def __init__(self, errors: list[dict[str, str]]):
        super().__init__("Validation failed")
        self.errors = errors


class CVNotFound(CVError):
    pass


class CVStorageError(CVError):
    """Persistence fault. ``detail`` carries the underlying error text.

    ``status_code`` is 400 for faults while writing client-supplied content
    (create/save), 500 otherwise.
    """

    def __init__(self, message: str, detail: str = "", status_code: int = 500):
        super().__init__(message)
        self.message = message
        self.detail = detail
        self.status_code = status_code


def validate_upsert(payload: Mapping[str, Any] | None) -> CVUpsertRequest:
    """Check a raw request body against the field rules, before touching the DB."""
    try:
        return CVUpsertRequest.model_validate(dict(payload or {}))
    except ValidationError as exc:
        raise CVValidationError(format_validation_errors(exc)) from exc


def get_cv(db: Session, user_id: UUID) -> CVRecord | None:
    return db.query(CVRecord).filter(CVRecord.user_id == user_id).first()


def _apply(cv: CVRecord, data: Mapping[str, Any]) -> None:
    for column, value in normalize_cv_document(data).columns().items():
        setattr(cv, column, value)


def _current_document(cv: CVRecord) -> dict[str, Any]:
    return {
        "personal_details": cv.personal_details,
        "about": cv.about,
        "education": cv.education,
        "work_experience": cv.work_experience,
        "projects": cv.projects,
        "skills": cv.skills,
        "interests": cv.interests,
    }


def get_or_create_cv(db: Session, user_id: UUID) -> CVRecord:
    """Return the user's CV, creating an all-default one if there is none."""
    try:
        cv = get_cv(db, user_id)
        if cv:
            return cv
        cv = CVRecord(user_id=user_id, **default_cv_document().columns())
        db.add(cv)
        db.flush()
    except SQLAlchemyError as exc:
        db.rollback()
        raise CVStorageError("Server error while fetching CV data", str(exc)) from exc
    logger.info("Created default CV for user %s", user_id)
    return cv


def upsert_cv(db: Session, user_id: UUID, request: CVUpsertRequest) -> CVRecord:
    """Create the user's CV or replace the sections the request supplies.

    See ``CVUpsertRequest.replacements`` for which sections count as supplied.
    """
    sections = request.replacements()
    try:
        cv = get_cv(db, user_id)
    except SQLAlchemyError as exc:
        db.rollback()
        raise CVStorageError("Server error while saving CV data", str(exc)) from exc

    creating = cv is None
    if creating:
        message = "Error creating CV data"
        cv = CVRecord(user_id=user_id)
        data: dict[str, Any] = {}
    else:
        message = "Error saving CV data"
        data = _current_document(cv)
    data.update(sections)

    try:
        _apply(cv, data)
        if creating:
            db.add(cv)
        db.flush()
    except (ValidationError, SQLAlchemyError) as exc:
        db.rollback()
        raise CVStorageError(message, str(exc), status_code=400) from exc
    logger.info("Saved CV for user %s (sections: %s)", user_id, ", ".join(sorted(sections)) or "none")
    return cv


def delete_cv(db: Session, user_id: UUID) -> None:
    """Remove the user's CV entirely. Raises ``CVNotFound`` if there is none."""
    try:
        cv = get_cv(db, user_id)
        if cv is None:
            raise CVNotFound()
        db.delete(cv)
        db.flush()
    except SQLAlchemyError as exc:
        db.rollback()
        raise CVStorageError("Server error while deleting CV data", str(exc)) from exc
    logger.info("Deleted CV for user %s", user_id)

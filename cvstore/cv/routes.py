"""CV routes: GET/POST/DELETE /api/cv for the logged-in user."""

import logging
from typing import Any
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..dependencies import get_current_user_id
from ..rate_limit import limiter
from .schemas import CVResponse
from .service import (
    CVNotFound,
    CVStorageError,
    CVValidationError,
    delete_cv,
    get_or_create_cv,
    upsert_cv,
    validate_upsert,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cv", tags=["cv"])


def _fail(status_code: int, message: str, **extra: Any) -> JSONResponse:
    return JSONResponse({"success": False, "message": message, **extra}, status_code=status_code)


@router.get("")
def read_cv(
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    try:
        cv = get_or_create_cv(db, user_id)
        db.commit()
    except CVStorageError as exc:
        logger.error("Get CV error for user %s: %s", user_id, exc.detail)
        return _fail(500, exc.message)
    except Exception:
        db.rollback()
        logger.exception("Get CV error for user %s", user_id)
        return _fail(500, "Server error while fetching CV data")
    return JSONResponse({"success": True, "data": CVResponse.from_record(cv).to_json()})


@router.post("")
@limiter.limit(settings.rate_limit_write)
def save_cv(
    request: Request,
    payload: dict[str, Any] | None = Body(None),
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    try:
        body = validate_upsert(payload)
    except CVValidationError as exc:
        logger.info("CV validation failed for user %s: %s", user_id, exc.errors)
        return _fail(400, "Validation failed", errors=exc.errors)

    try:
        cv = upsert_cv(db, user_id, body)
        db.commit()
    except CVStorageError as exc:
        logger.error("Save CV error for user %s: %s", user_id, exc.detail)
        if exc.status_code == 400:
            return _fail(400, exc.message, error=exc.detail)
        return _fail(exc.status_code, exc.message)
    except Exception:
        db.rollback()
        logger.exception("Save CV error for user %s", user_id)
        return _fail(500, "Server error while saving CV data")

    return JSONResponse(
        {
            "success": True,
            "message": "CV saved successfully",
            "data": CVResponse.from_record(cv).to_json(),
        }
    )


@router.delete("")
def remove_cv(
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    try:
        delete_cv(db, user_id)
        db.commit()
    except CVNotFound:
        return _fail(404, "CV not found")
    except CVStorageError as exc:
        logger.error("Delete CV error for user %s: %s", user_id, exc.detail)
        return _fail(500, exc.message)
    except Exception:
        db.rollback()
        logger.exception("Delete CV error for user %s", user_id)
        return _fail(500, "Server error while deleting CV data")
    return JSONResponse({"success": True, "message": "CV deleted successfully"})

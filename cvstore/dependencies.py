"""Shared FastAPI dependencies."""

from uuid import UUID

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from .auth.models import User
from .database import get_db


class AuthRequired(Exception):
    """Raised when user is not authenticated. Handled by exception handler in main.py."""

    pass


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    """Get the authenticated user from the session cookie."""
    user_id_str = request.session.get("user_id")
    if not user_id_str:
        raise AuthRequired()
    try:
        user_id = UUID(user_id_str)
    except (ValueError, AttributeError, TypeError):
        request.session.clear()
        raise AuthRequired()
    user = db.query(User).filter(User.id == user_id).first()
    if not user or not user.is_active:
        request.session.clear()
        raise AuthRequired()
    return user


def get_current_user_id(user: User = Depends(get_current_user)) -> UUID:
    """Resolve the request to the owning user's id.

    CV routes depend on this alone, so the session mechanism can be swapped
    (or overridden in tests) without touching them.
    """
    return user.id

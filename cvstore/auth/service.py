"""Authentication service: user management and password hashing."""

import logging

import bcrypt
from sqlalchemy.orm import Session

from ..config import settings
from .models import User

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def verify_password(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(plain.encode(), hashed.encode())


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == _normalize_email(email)).first()


def authenticate_user(db: Session, email: str, password: str) -> User | None:
    """Verify credentials and return user, or None if invalid."""
    user = get_user_by_email(db, email)
    if not user or not user.is_active or not verify_password(password, user.password_hash):
        return None
    return user


def create_user(db: Session, email: str, password: str) -> User | None:
    """Register a new account. Returns None if the email is already taken."""
    if get_user_by_email(db, email):
        return None
    user = User(email=_normalize_email(email), password_hash=hash_password(password))
    db.add(user)
    db.flush()
    logger.info("Registered user %s", user.id)
    return user


def ensure_admin_user(db: Session) -> None:
    """Create admin user from env vars if it doesn't exist yet."""
    if not settings.admin_email or not settings.admin_password:
        return

    if get_user_by_email(db, settings.admin_email):
        return

    create_user(db, settings.admin_email, settings.admin_password)
    logger.info("Admin user %s created", settings.admin_email)

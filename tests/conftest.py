"""Shared test fixtures."""

import uuid
from contextlib import asynccontextmanager
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from cvstore.auth.models import User
from cvstore.cv.models import CVRecord
from cvstore.database.base import Base

# Models must be imported so Base.metadata.create_all() sees all tables.
_ALL_MODELS = [User, CVRecord]


@pytest.fixture
def db_session():
    """Create an in-memory SQLite database for testing.

    Note: SQLite stores the JSON columns as text and returns naive datetimes,
    which is enough for service and route logic.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestSession = sessionmaker(bind=engine)
    session = TestSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def test_user(db_session):
    """Create a test user."""
    user = User(
        id=uuid.uuid4(),
        email="test@example.com",
        password_hash="$2b$12$fakehash",
    )
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture
def other_user(db_session):
    user = User(
        id=uuid.uuid4(),
        email="other@example.com",
        password_hash="$2b$12$fakehash",
    )
    db_session.add(user)
    db_session.commit()
    return user


def _make_client(db_session, user_id=None):
    """TestClient with lifespan (migrations, admin seed) and rate limiting disabled."""
    from cvstore.database import get_db
    from cvstore.dependencies import get_current_user_id
    from cvstore.main import create_app
    from cvstore.rate_limit import limiter

    @asynccontextmanager
    async def _test_lifespan(app):
        yield

    def _test_db():
        yield db_session

    with patch("cvstore.main.lifespan", _test_lifespan), patch.object(limiter, "enabled", False):
        app = create_app()
        app.dependency_overrides[get_db] = _test_db
        if user_id is not None:
            app.dependency_overrides[get_current_user_id] = lambda: user_id
        with TestClient(app, raise_server_exceptions=False) as client:
            yield client


@pytest.fixture
def client(db_session, test_user):
    """Client already authenticated as ``test_user``."""
    yield from _make_client(db_session, test_user.id)


@pytest.fixture
def anon_client(db_session):
    """Client going through the real session-cookie authentication."""
    yield from _make_client(db_session)

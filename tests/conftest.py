"""Shared fixtures for comment deduplication tests."""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["REQUIRE_TOPIC_MATCH"] = "true"

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from database.database import Base, SessionLocal, engine, get_db
import models.subject  # noqa: F401
import models.comment  # noqa: F401
from schemas.comment_schema import CommentCreate
from services import comment_service
from services.dedup_service import CommentDeduplicationService
from utils.timeutils import utc_now


BASE_TEXT = "The recruitment law must pass this year without any further delays"


@pytest.fixture
def db_session():
    """Fresh in-memory database per test."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def subject(db_session):
    return comment_service.create_subject(db_session, "Test Member", "Likud")


@pytest.fixture
def other_subject(db_session):
    return comment_service.create_subject(db_session, "Other Member", "Shas")


@pytest.fixture
def service(db_session):
    return CommentDeduplicationService(db_session)


@pytest.fixture
def make_comment(subject):
    """Build a CommentCreate with sensible defaults."""

    def _make(**overrides):
        payload = {
            "subject_id": subject.id,
            "content": BASE_TEXT,
            "source_url": "https://news.example.com/article/1",
            "source_platform": "News",
            "source_type": "Primary",
            "comment_date": utc_now() - timedelta(days=1),
        }
        payload.update(overrides)
        return CommentCreate(**payload)

    return _make


@pytest.fixture
def client(db_session):
    """TestClient bound to the test session."""
    from main import app

    app.dependency_overrides[get_db] = lambda: db_session
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def lenient_client(db_session):
    """TestClient that returns 500 responses instead of raising."""
    from main import app

    app.dependency_overrides[get_db] = lambda: db_session
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def store_error():
    """Error raised by an unavailable database."""
    from sqlalchemy.exc import OperationalError

    return OperationalError("SELECT 1", {}, Exception("database is locked"))

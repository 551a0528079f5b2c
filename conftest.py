"""
pytest configuration – point the service at a throwaway SQLite file,
initialise tables, and empty the review tables between tests.
Provides a shared session-scoped admin token to stay under the login rate limit.
"""
import os

os.environ.setdefault("REVIEWS_DATABASE_URL", "sqlite:///./test_reviews.db")
os.environ.setdefault("REVIEWS_LOG_FORMAT", "text")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import delete

from review_service.database import Base, db_session, engine
from review_service import models  # noqa: F401 – registers ORM mappings with Base.metadata
from review_service.models import RateLimit, Review
from review_service.main import app


@pytest.fixture(autouse=True, scope="session")
def create_tables():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def clean_review_tables():
    with db_session() as session:
        session.execute(delete(Review))
        session.execute(delete(RateLimit))
    yield


# Session-scoped admin token — login happens ONCE per test run
_session_token: str | None = None


@pytest.fixture(scope="session")
def admin_token() -> str:
    global _session_token
    if _session_token is None:
        client = TestClient(app)
        resp = client.post("/auth/login", json={"username": "admin", "password": "changeme"})
        assert resp.status_code == 200, f"Login failed: {resp.text}"
        _session_token = resp.json()["access_token"]
    return _session_token

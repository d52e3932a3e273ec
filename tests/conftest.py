"""
Shared fixtures for CampusFix tests.

Every test gets a fresh in-memory SQLite database holding the demo users.
API tests talk to the app through FastAPI's TestClient with the session
factory dependency pointed at that database.
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from campusfix.models.database import init_db
from campusfix.scripts.seed_demo import seed_users


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    factory = sessionmaker(bind=engine, expire_on_commit=False)
    seed_users(factory)
    yield factory
    engine.dispose()


@pytest.fixture
def client(session_factory):
    from campusfix.api.auth import get_db_session_factory
    from campusfix.api.main import app
    from campusfix.api.rate_limit import limiter

    app.dependency_overrides[get_db_session_factory] = lambda: session_factory
    limiter.enabled = False
    yield TestClient(app)
    app.dependency_overrides.clear()
    limiter.enabled = True


def as_user(user_id: str, role: str = None) -> dict:
    """Mock auth headers for a demo user."""
    headers = {"x-mock-user-id": user_id}
    if role:
        headers["x-mock-role"] = role
    return headers

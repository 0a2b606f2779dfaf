# tests/conftest.py
import os

# Settings are read at import time, so the environment has to be in place first
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("ENV", "local")
os.environ.setdefault("DATABASE_URL_LOCAL", "sqlite://")

import pytest
from starlette.testclient import TestClient

from cloka_events.api import deps
from cloka_events.db.base_class import Base
from cloka_events.db.session import Database
from cloka_events.main import app


@pytest.fixture(scope="function")
def database():
    """A fresh in-memory database per test."""
    database = Database("sqlite://")
    database.create_all()
    yield database
    Base.metadata.drop_all(bind=database.engine)
    database.dispose()


@pytest.fixture(scope="function")
def db_session(database):
    session = database.SessionLocal()
    yield session
    session.close()


@pytest.fixture(scope="function")
def test_client(database):
    """
    Provides a TestClient backed by the per-test in-memory database.
    Authentication is real: use the helpers in tests/utils/auth.py.
    """
    app.state.database = database
    with TestClient(app) as client:
        yield client
    app.state.database = None
    app.dependency_overrides.clear()


# --- Mock Dependencies Setup ---
class MockTokenPayload:
    def __init__(self, sub="user_123", is_admin=False):
        self.sub = sub
        self.is_admin = is_admin


@pytest.fixture(scope="function")
def mock_client():
    """
    Provides a TestClient where the database session and the current user
    are mocked. This is for route-level unit tests that patch the workflow.
    """
    from unittest.mock import MagicMock

    app.state.database = Database("sqlite://")
    app.dependency_overrides[deps.get_db] = lambda: MagicMock()
    app.dependency_overrides[deps.get_current_user] = lambda: MockTokenPayload()
    app.dependency_overrides[deps.get_current_admin] = lambda: MockTokenPayload(
        sub="admin_1", is_admin=True
    )

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()
    app.state.database = None

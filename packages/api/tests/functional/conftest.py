# This project was developed with assistance from AI tools.
"""Fixtures for functional tests.

The real app from ``src.main`` is a module singleton. ``_clean_overrides``
ensures dependency_overrides are cleared after every test so persona
configuration from one test never leaks into the next.
"""

import pytest
from fastapi.testclient import TestClient

from src.main import app as real_app
from src.schemas.auth import UserContext

from .data_factory import make_portfolio
from .mock_db import FakeSession, configure_app_for_persona


@pytest.fixture(autouse=True)
def _clean_overrides():
    """Clear app dependency overrides after each test."""
    yield
    real_app.dependency_overrides.clear()


@pytest.fixture
def app():
    """Return the real FastAPI app with all routers mounted."""
    return real_app


@pytest.fixture
def session() -> FakeSession:
    """Fresh in-memory portfolio for each test."""
    return make_portfolio()


@pytest.fixture
def make_client(app):
    """Factory fixture: configure persona + session, return TestClient."""

    def _make(user: UserContext, session: FakeSession) -> TestClient:
        configure_app_for_persona(app, user, session)
        return TestClient(app)

    return _make

# This project was developed with assistance from AI tools.
"""Fixtures for functional tests.

The real app from ``portal_api.main`` is a module singleton. ``_clean_overrides``
ensures dependency_overrides are cleared after every test so persona
configuration from one test never leaks into the next.
"""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from portal_api.main import app as real_app
from portal_api.schemas.auth import UserContext

from .mock_db import configure_app_for_persona


@pytest.fixture(autouse=True)
def _clean_overrides():
    """Clear app dependency overrides after each test."""
    yield
    real_app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def _no_audit_writes():
    """Audit rows need a PostgreSQL advisory lock; stub the writer out."""
    with (
        patch("portal_api.services.job.write_audit_event", new_callable=AsyncMock) as job_audit,
        patch("portal_api.services.move_request.write_audit_event", new_callable=AsyncMock),
    ):
        yield job_audit


@pytest.fixture
def app():
    """Return the real FastAPI app with all routers mounted."""
    return real_app


@pytest.fixture
def make_client(app):
    """Factory fixture: configure persona + mock DB, return TestClient."""

    def _make(user: UserContext, session: AsyncMock) -> TestClient:
        configure_app_for_persona(app, user, session)
        return TestClient(app)

    return _make

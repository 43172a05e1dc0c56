"""API test fixtures: a TestClient over in-memory services with a mocked session."""

from datetime import timedelta
from unittest.mock import Mock

import pytest
from starlette.testclient import TestClient

from api.app import create_app
from auth.session import SessionManager
from auth.types import Session, UserRole
from utils.timezone import now_utc


# =============================================================================
# AUTH FIXTURES
# =============================================================================


@pytest.fixture
def role() -> UserRole:
    """Role of the signed-in user. Override in a test module to change it."""
    return UserRole.ADMIN


@pytest.fixture
def mock_session_manager(test_user_id, role):
    now = now_utc()
    mock = Mock(spec=SessionManager)
    mock.validate_session.return_value = Session(
        token="test-token",
        user_id=test_user_id,
        role=role,
        created_at=now,
        expires_at=now + timedelta(hours=24),
        last_activity_at=now,
    )
    return mock


# =============================================================================
# APP & CLIENT FIXTURES
# =============================================================================


@pytest.fixture
def app(mock_session_manager, services, db):
    """Full application: middleware, error handlers, data/actions routes, health."""
    return create_app(services, mock_session_manager, db)


@pytest.fixture
def client(app):
    """Authenticated test client."""
    c = TestClient(app, raise_server_exceptions=False)
    c.cookies.set("session_token", "test-token")
    return c


@pytest.fixture
def unauthed_client(app):
    """Unauthenticated test client (no session cookie)."""
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def client_as(mock_session_manager, client, test_user_id):
    """Switch the signed-in user's role for the rest of the test."""
    def _as(role: UserRole):
        now = now_utc()
        mock_session_manager.validate_session.return_value = Session(
            token="test-token",
            user_id=test_user_id,
            role=role,
            created_at=now,
            expires_at=now + timedelta(hours=24),
            last_activity_at=now,
        )
        return client
    return _as

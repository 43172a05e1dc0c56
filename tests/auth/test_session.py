"""Tests for SessionManager - session token lifecycle."""

import pytest
from datetime import timedelta

from auth.session import SessionManager
from auth.config import AuthConfig
from auth.exceptions import SessionExpiredError
from auth.types import UserRole
from utils.timezone import now_utc


class FakeValkey:
    """Dict-backed stand-in for ValkeyClient's JSON helpers."""

    def __init__(self):
        self.data = {}
        self.ttls = {}

    def set_json(self, key, value, expire_seconds=None):
        self.data[key] = value
        self.ttls[key] = expire_seconds
        return True

    def get_json(self, key):
        return self.data.get(key)

    def delete(self, key):
        return 1 if self.data.pop(key, None) is not None else 0


@pytest.fixture
def valkey():
    return FakeValkey()


@pytest.fixture
def config():
    """Test config with short session for testing."""
    return AuthConfig(session_expiry_hours=1)


@pytest.fixture
def session_manager(valkey, config):
    return SessionManager(valkey, config)


class TestCreateSession:
    """Test session creation."""

    def test_returns_session_with_token(self, session_manager, test_user_id):
        """Created session has non-empty token."""
        session = session_manager.create_session(test_user_id, UserRole.SALES_PERSON)

        assert session.token
        assert len(session.token) > 20

    def test_session_has_user_and_role(self, session_manager, test_user_id):
        session = session_manager.create_session(test_user_id, UserRole.INVENTORY_PERSON)

        assert session.user_id == test_user_id
        assert session.role == UserRole.INVENTORY_PERSON

    def test_stored_with_ttl(self, session_manager, valkey, test_user_id):
        session = session_manager.create_session(test_user_id, UserRole.ADMIN)

        key = f"session:{session.token}"
        assert valkey.data[key]["role"] == "admin"
        assert valkey.data[key]["user_id"] == str(test_user_id)
        assert valkey.ttls[key] == 3600

    def test_different_users_get_different_tokens(self, session_manager, test_user_id, test_user_b_id):
        """Different users get unique tokens."""
        session_a = session_manager.create_session(test_user_id, UserRole.ADMIN)
        session_b = session_manager.create_session(test_user_b_id, UserRole.ADMIN)

        assert session_a.token != session_b.token


class TestValidateSession:
    """Test session validation."""

    def test_valid_session_returns_session(self, session_manager, test_user_id):
        """Valid token returns the session."""
        created = session_manager.create_session(test_user_id, UserRole.PURCHASE_PERSON)

        validated = session_manager.validate_session(created.token)

        assert validated.user_id == test_user_id
        assert validated.token == created.token
        assert validated.role == UserRole.PURCHASE_PERSON

    def test_invalid_token_raises(self, session_manager):
        """Invalid token raises SessionExpiredError."""
        with pytest.raises(SessionExpiredError):
            session_manager.validate_session("nonexistent-token")

    def test_expired_session_raises_and_is_removed(self, session_manager, valkey, test_user_id):
        session = session_manager.create_session(test_user_id, UserRole.ADMIN)
        key = f"session:{session.token}"
        valkey.data[key]["expires_at"] = (now_utc() - timedelta(minutes=1)).isoformat()

        with pytest.raises(SessionExpiredError):
            session_manager.validate_session(session.token)

        assert key not in valkey.data

    @pytest.mark.parametrize("role", [None, "superuser"])
    def test_unknown_role_fails_closed(self, session_manager, valkey, test_user_id, role):
        """A session without a recognised role is rejected and removed."""
        session = session_manager.create_session(test_user_id, UserRole.ADMIN)
        key = f"session:{session.token}"
        valkey.data[key]["role"] = role

        with pytest.raises(SessionExpiredError, match="role"):
            session_manager.validate_session(session.token)

        assert key not in valkey.data

    def test_activity_extends_expiry(self, session_manager, valkey, test_user_id):
        session = session_manager.create_session(test_user_id, UserRole.ADMIN)
        key = f"session:{session.token}"
        soon = now_utc() + timedelta(minutes=5)
        valkey.data[key]["expires_at"] = soon.isoformat()

        validated = session_manager.validate_session(session.token)

        assert validated.expires_at > soon + timedelta(minutes=30)
        assert valkey.data[key]["expires_at"] == validated.expires_at.isoformat()

    def test_no_extension_when_disabled(self, valkey, test_user_id):
        manager = SessionManager(valkey, AuthConfig(session_expiry_hours=1, session_extend_on_activity=False))
        session = manager.create_session(test_user_id, UserRole.ADMIN)

        validated = manager.validate_session(session.token)

        assert validated.expires_at == session.expires_at


class TestRevokeSession:
    """Test logout."""

    def test_revoked_session_raises(self, session_manager, test_user_id):
        session = session_manager.create_session(test_user_id, UserRole.ADMIN)
        session_manager.revoke_session(session.token)

        with pytest.raises(SessionExpiredError):
            session_manager.validate_session(session.token)

    def test_revoke_nonexistent_is_safe(self, session_manager):
        session_manager.revoke_session("never-existed")

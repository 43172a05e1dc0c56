"""Tests for auth/types.py - Pydantic models for auth domain."""

from datetime import datetime, timezone
from uuid import uuid4

import pytest
from pydantic import ValidationError

from auth.types import Session, UserRole


class TestUserRole:
    """Tests for the role values stored in sessions."""

    def test_values(self):
        assert {r.value for r in UserRole} == {
            "admin", "sales_person", "inventory_person", "purchase_person",
        }


class TestSessionValidation:
    """Tests that Session requires an explicit role (fail closed)."""

    def test_rejects_missing_role(self):
        now = datetime.now(timezone.utc)
        with pytest.raises(ValidationError):
            Session(token="abc", user_id=uuid4(), created_at=now, expires_at=now, last_activity_at=now)

    def test_rejects_unknown_role(self):
        now = datetime.now(timezone.utc)
        with pytest.raises(ValidationError):
            Session(
                token="abc", user_id=uuid4(), role="owner",
                created_at=now, expires_at=now, last_activity_at=now,
            )

    def test_accepts_role_value(self):
        now = datetime.now(timezone.utc)
        session = Session(
            token="abc", user_id=uuid4(), role="sales_person",
            created_at=now, expires_at=now, last_activity_at=now,
        )
        assert session.role == UserRole.SALES_PERSON

"""Tests for auth/permissions.py - role-based access."""

import pytest

from auth.exceptions import AccessDeniedError
from auth.permissions import Access, ROLE_PERMISSIONS, can_access, require_access
from auth.types import UserRole


class TestCanAccess:
    """Tests for can_access."""

    @pytest.mark.parametrize("resource", ["invoice", "transaction", "company", "anything"])
    def test_admin_reaches_everything(self, resource):
        assert can_access(UserRole.ADMIN, resource, Access.WRITE) is True

    def test_write_implies_read(self):
        assert can_access(UserRole.SALES_PERSON, "invoice", Access.READ) is True
        assert can_access(UserRole.SALES_PERSON, "invoice", Access.WRITE) is True

    def test_read_only_resource(self):
        assert can_access(UserRole.SALES_PERSON, "product", Access.READ) is True
        assert can_access(UserRole.SALES_PERSON, "product", Access.WRITE) is False

    def test_unlisted_resource_denied(self):
        assert can_access(UserRole.PURCHASE_PERSON, "invoice", Access.READ) is False

    def test_defaults_to_read(self):
        assert can_access(UserRole.INVENTORY_PERSON, "company") is True

    @pytest.mark.parametrize("role", [r for r in UserRole if r != UserRole.ADMIN])
    def test_ledger_is_admin_only(self, role):
        assert can_access(role, "transaction") is False

    @pytest.mark.parametrize("role", list(ROLE_PERMISSIONS))
    def test_every_role_sees_dashboard(self, role):
        assert can_access(role, "dashboard") is True

    @pytest.mark.parametrize("role", list(ROLE_PERMISSIONS))
    def test_expense_categories_read_only_below_admin(self, role):
        assert can_access(role, "expense_category") is True
        assert can_access(role, "expense_category", Access.WRITE) is False


class TestRequireAccess:
    """Tests for require_access."""

    def test_allowed_returns_none(self):
        assert require_access(UserRole.INVENTORY_PERSON, "stock_movement", Access.WRITE) is None

    def test_denied_raises(self):
        with pytest.raises(AccessDeniedError) as exc_info:
            require_access(UserRole.SALES_PERSON, "purchase", Access.WRITE)

        assert exc_info.value.role == "sales_person"
        assert exc_info.value.resource == "purchase"
        assert exc_info.value.access == "write"

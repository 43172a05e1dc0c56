"""Tests for utils/user_context.py - RLS operator scope via contextvars."""

import threading
from uuid import uuid4

import pytest

from core.models import CustomerCreate
from utils.user_context import (
    get_current_user_id,
    set_current_user_id,
    clear_current_user_id,
    user_context,
)


class TestScope:
    """Setting, reading and clearing the operator scope."""

    def test_unset_scope_raises(self):
        with pytest.raises(RuntimeError, match="user_context"):
            get_current_user_id()

    def test_set_then_clear(self):
        operator_id = uuid4()

        set_current_user_id(operator_id)
        assert get_current_user_id() == operator_id

        clear_current_user_id()
        with pytest.raises(RuntimeError):
            get_current_user_id()

    def test_fixture_scopes_to_test_user(self, as_test_user, test_user_id):
        assert get_current_user_id() == test_user_id


class TestUserContextManager:

    def test_nested_blocks_restore_outer_operator(self, test_user_id, test_user_b_id):
        with user_context(test_user_id):
            with user_context(test_user_b_id):
                assert get_current_user_id() == test_user_b_id
            assert get_current_user_id() == test_user_id

        with pytest.raises(RuntimeError):
            get_current_user_id()

    def test_cleared_when_block_raises(self, test_user_id):
        with pytest.raises(ValueError):
            with user_context(test_user_id):
                raise ValueError("Invoice must have at least one item")

        with pytest.raises(RuntimeError):
            get_current_user_id()

    def test_scope_does_not_leak_into_other_threads(self, test_user_id):
        seen = []

        def worker():
            try:
                seen.append(get_current_user_id())
            except RuntimeError:
                seen.append(None)

        with user_context(test_user_id):
            thread = threading.Thread(target=worker)
            thread.start()
            thread.join()

        assert seen == [None]


class TestRLSSetting:
    """Value handed to SET app.current_user_id."""

    def test_empty_outside_scope(self):
        from utils.user_context import peek_current_user_id, rls_setting_value

        assert peek_current_user_id() is None
        assert rls_setting_value() == ""

    def test_operator_id_inside_scope(self, test_user_id):
        from utils.user_context import peek_current_user_id, rls_setting_value

        with user_context(test_user_id) as scoped:
            assert scoped == test_user_id
            assert peek_current_user_id() == test_user_id
            assert rls_setting_value() == str(test_user_id)

    def test_token_undoes_set(self, test_user_id, test_user_b_id):
        outer = set_current_user_id(test_user_id)
        inner = set_current_user_id(test_user_b_id)

        inner.var.reset(inner)
        assert get_current_user_id() == test_user_id

        outer.var.reset(outer)
        with pytest.raises(RuntimeError):
            get_current_user_id()

    def test_nested_same_operator_keeps_scope(self, test_user_id):
        with user_context(test_user_id):
            with user_context(test_user_id):
                pass
            assert get_current_user_id() == test_user_id


class TestActorIsExplicit:
    """The scope drives row level security only, never created_by."""

    def test_created_by_comes_from_actor_argument(self, customer_service, test_user_id, test_user_b_id):
        with user_context(test_user_b_id):
            customer = customer_service.create(CustomerCreate(name="Nila Textiles"), test_user_id)

        assert customer.created_by == test_user_id

    def test_writes_work_without_scope(self, customer_service, test_user_id):
        customer = customer_service.create(CustomerCreate(name="Nila Textiles"), test_user_id)

        assert customer.name == "Nila Textiles"

"""
Operator scope for row level security.

Postgres policies read the app.current_user_id setting, which
PostgresClient fills from the scope held here on every connection checkout.
The scope never feeds created_by: services take the acting user as an
explicit argument.
"""

from contextlib import contextmanager
from contextvars import ContextVar, Token
from uuid import UUID

_operator: ContextVar[UUID | None] = ContextVar("rls_operator_id", default=None)


def peek_current_user_id() -> UUID | None:
    """The scoped operator, or None outside any scope."""
    return _operator.get()


def get_current_user_id() -> UUID:
    """
    The scoped operator.

    Raises:
        RuntimeError: Outside an authenticated request or user_context() block
    """
    user_id = _operator.get()
    if user_id is None:
        raise RuntimeError(
            "No user context set. Operator-scoped queries must run inside "
            "an authenticated request or a user_context() block."
        )
    return user_id


def rls_setting_value() -> str:
    """
    Value for SET app.current_user_id.

    Empty outside a scope; the policies' ::uuid cast then matches no rows.
    """
    user_id = _operator.get()
    return "" if user_id is None else str(user_id)


def set_current_user_id(user_id: UUID) -> Token:
    """Scope to user_id until cleared. Returns the token that undoes it."""
    return _operator.set(user_id)


def clear_current_user_id() -> None:
    _operator.set(None)


@contextmanager
def user_context(user_id: UUID):
    """
    Scope database access to one operator for the block.

    Nested blocks restore whatever scope was active before them, including
    none at all.

    Example:
        with user_context(operator_id):
            invoices = invoice_service.list_receivables()
    """
    token = _operator.set(user_id)
    try:
        yield user_id
    finally:
        _operator.reset(token)

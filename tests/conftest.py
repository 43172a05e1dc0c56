"""Shared test fixtures for the billing test suite.

Services run against FakePostgres, an in-memory stand-in for PostgresClient
that implements the same table API (including transactions), so the suite
needs no database.
"""

import copy
from contextlib import contextmanager
from decimal import Decimal
from enum import Enum
from uuid import UUID

import pytest

from api.app import build_services
from clients.postgres_client import DatabaseError
from core.models import (
    CompanyProfileSave,
    CustomerCreate,
    ProductCreate,
    SupplierCreate,
)
from utils.user_context import user_context, clear_current_user_id


# =============================================================================
# TEST USER CONSTANTS
# =============================================================================

# Primary test user - use for single-user tests
TEST_USER_ID = UUID("00000000-0000-0000-0000-000000000001")

# Secondary test user - a second actor in the same account
TEST_USER_B_ID = UUID("00000000-0000-0000-0000-000000000002")


# =============================================================================
# IN-MEMORY DATABASE
# =============================================================================


def _norm(value):
    """Store values the way psycopg2 hands them back: UUIDs and enums as text."""
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    return value


class FakePostgres:
    """
    In-memory PostgresClient.

    Rows live in per-table lists in insertion order. transaction() snapshots
    every table and restores the snapshot if the block raises, like a
    rollback. fail_on_insert() makes the next inserts into a table raise
    DatabaseError, to exercise failure paths.
    """

    def __init__(self):
        self.tables: dict[str, list[dict]] = {}
        self._insert_failures: dict[str, str] = {}
        self.ping_error: str | None = None

    # -- test helpers ---------------------------------------------------------

    def fail_on_insert(self, table: str, message: str) -> None:
        self._insert_failures[table] = message

    def rows(self, table: str) -> list[dict]:
        return [dict(row) for row in self.tables.get(table, [])]

    # -- table API ------------------------------------------------------------

    def insert(self, table: str, record: dict) -> dict:
        return self.insert_many(table, [record])[0]

    def insert_many(self, table: str, records: list[dict]) -> list[dict]:
        if table in self._insert_failures:
            raise DatabaseError(self._insert_failures[table])

        stored = [{k: _norm(v) for k, v in record.items()} for record in records]
        self.tables.setdefault(table, []).extend(stored)
        return [dict(row) for row in stored]

    def _find(self, table: str, row_id) -> dict | None:
        for row in self.tables.get(table, []):
            if row.get("id") == _norm(row_id):
                return row
        return None

    def update(self, table: str, row_id, patch: dict) -> dict | None:
        row = self._find(table, row_id)
        if row is None:
            return None
        row.update({k: _norm(v) for k, v in patch.items()})
        return dict(row)

    def increment(self, table: str, row_id, column: str, delta) -> dict | None:
        row = self._find(table, row_id)
        if row is None:
            return None
        row[column] = Decimal(row[column]) + Decimal(delta)
        return dict(row)

    @staticmethod
    def _matches(row: dict, filters, search, between) -> bool:
        for column, value in (filters or {}).items():
            actual = row.get(column)
            if value is None:
                if actual is not None:
                    return False
            elif isinstance(value, (list, tuple)):
                if actual not in {_norm(v) for v in value}:
                    return False
            elif actual != _norm(value):
                return False

        for column, term in (search or {}).items():
            actual = row.get(column)
            if actual is None or term.lower() not in str(actual).lower():
                return False

        for column, (low, high) in (between or {}).items():
            actual = row.get(column)
            if low is not None and (actual is None or actual < low):
                return False
            if high is not None and (actual is None or actual > high):
                return False

        return True

    def select(
        self,
        table: str,
        filters: dict | None = None,
        *,
        search: dict | None = None,
        between: dict | None = None,
        order_by: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
        for_update: bool = False,
    ) -> list[dict]:
        rows = [
            row for row in self.tables.get(table, [])
            if self._matches(row, filters, search, between)
        ]

        if order_by:
            parts = order_by.split()
            column = parts[0]
            descending = len(parts) > 1 and parts[1].upper() == "DESC"
            present = [r for r in rows if r.get(column) is not None]
            missing = [r for r in rows if r.get(column) is None]
            present.sort(key=lambda r: r[column], reverse=descending)
            rows = present + missing

        if offset:
            rows = rows[offset:]
        if limit is not None:
            rows = rows[:limit]

        return [dict(row) for row in rows]

    def select_one(self, table: str, filters: dict | None = None, **kwargs) -> dict | None:
        rows = self.select(table, filters, limit=1, **kwargs)
        return rows[0] if rows else None

    def delete(self, table: str, row_id) -> bool:
        row = self._find(table, row_id)
        if row is None:
            return False
        self.tables[table].remove(row)
        return True

    @contextmanager
    def transaction(self):
        snapshot = copy.deepcopy(self.tables)
        try:
            yield self
        except Exception:
            self.tables = snapshot
            raise

    def ping(self) -> bool:
        if self.ping_error:
            raise DatabaseError(self.ping_error)
        return True


# =============================================================================
# USER CONTEXT FIXTURES
# =============================================================================


@pytest.fixture(autouse=True)
def reset_user_context():
    """Ensure clean user context before and after each test."""
    clear_current_user_id()
    yield
    clear_current_user_id()


@pytest.fixture
def test_user_id() -> UUID:
    """The primary test user's ID, used as the acting user."""
    return TEST_USER_ID


@pytest.fixture
def test_user_b_id() -> UUID:
    """A second acting user."""
    return TEST_USER_B_ID


@pytest.fixture
def as_test_user(test_user_id):
    """Context manager that sets primary test user context."""
    with user_context(test_user_id):
        yield test_user_id


# =============================================================================
# DATABASE & SERVICE FIXTURES
# =============================================================================


@pytest.fixture
def db() -> FakePostgres:
    return FakePostgres()


@pytest.fixture
def services(db):
    return build_services(db)


@pytest.fixture
def audit(services):
    return services["audit"]


@pytest.fixture
def company_service(services):
    return services["company"]


@pytest.fixture
def customer_service(services):
    return services["customer"]


@pytest.fixture
def supplier_service(services):
    return services["supplier"]


@pytest.fixture
def product_service(services):
    return services["product"]


@pytest.fixture
def inventory_service(services):
    return services["inventory"]


@pytest.fixture
def accounting_service(services):
    return services["accounting"]


@pytest.fixture
def invoice_service(services):
    return services["invoice"]


@pytest.fixture
def purchase_service(services):
    return services["purchase"]


@pytest.fixture
def dashboard_service(services):
    return services["dashboard"]


# =============================================================================
# DATA FIXTURES
# =============================================================================


@pytest.fixture
def company(company_service, test_user_id):
    """Company profile based in Karnataka."""
    return company_service.save(
        CompanyProfileSave(company_name="Acme Traders", gst_number="29ABCDE1234F1Z5", state="Karnataka"),
        test_user_id,
    )


@pytest.fixture
def customer(customer_service, test_user_id):
    """Customer in the company's own state."""
    return customer_service.create(
        CustomerCreate(name="Ravi Stores", state="karnataka "),
        test_user_id,
    )


@pytest.fixture
def interstate_customer(customer_service, test_user_id):
    """Customer in another state."""
    return customer_service.create(
        CustomerCreate(name="Mumbai Mart", state="Maharashtra"),
        test_user_id,
    )


@pytest.fixture
def supplier(supplier_service, test_user_id):
    """Supplier in another state."""
    return supplier_service.create(
        SupplierCreate(name="Chennai Metals", state="Tamil Nadu"),
        test_user_id,
    )


@pytest.fixture
def product(product_service, test_user_id):
    """Finished good at 1000 per piece, 18% GST, 50 in stock."""
    return product_service.create(
        ProductCreate(
            name="Steel Bracket",
            sku="BRK-001",
            selling_price=Decimal("1000"),
            cost_price=Decimal("600"),
            quantity=Decimal("50"),
            hsn_code="7326",
            gst_rate=Decimal("18"),
        ),
        test_user_id,
    )


@pytest.fixture
def second_product(product_service, test_user_id):
    """Finished good at 250 per piece, 5% GST, 10 in stock."""
    return product_service.create(
        ProductCreate(
            name="Rubber Gasket",
            sku="GSK-002",
            selling_price=Decimal("250"),
            quantity=Decimal("10"),
            gst_rate=Decimal("5"),
        ),
        test_user_id,
    )

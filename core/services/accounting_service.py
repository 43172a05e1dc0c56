"""
Accounting service: income/expense ledger, payment methods and expense
categories.

Payments on invoices and purchases append ledger entries through record()
on the workflow's own transaction. Manual entries (rent, salaries, other
income) go through create().
"""

import logging
from datetime import date
from decimal import Decimal
from uuid import UUID, uuid4

from clients.postgres_client import PostgresClient, TableOperations
from core.audit import AuditLogger, AuditAction
from core.models import (
    ExpenseCategory,
    ExpenseCategoryCreate,
    LedgerSummary,
    PaymentMethod,
    PaymentMethodCreate,
    Transaction,
    TransactionCreate,
    TransactionType,
    TransactionUpdate,
)
from utils.timezone import now_utc, business_today

logger = logging.getLogger(__name__)

# Categories used for entries created by document payments
SALES_CATEGORY = "Product Sales"
PURCHASE_CATEGORY = "Inventory Purchase"


class AccountingService:
    """Service for ledger transactions and payment methods."""

    def __init__(self, postgres: PostgresClient, audit: AuditLogger):
        self.postgres = postgres
        self.audit = audit

    def record(self, db: TableOperations, data: TransactionCreate, actor_id: UUID) -> Transaction:
        """Append a ledger entry on the caller's transaction. No audit entry."""
        now = now_utc()
        row = db.insert(
            "transactions",
            {
                "id": uuid4(),
                **data.model_dump(),
                "transaction_date": data.transaction_date or business_today(),
                "created_by": actor_id,
                "created_at": now,
                "updated_at": now,
            },
        )
        return Transaction.model_validate(row)

    def create(self, data: TransactionCreate, actor_id: UUID) -> Transaction:
        """Record a manual ledger entry."""
        transaction = self.record(self.postgres, data, actor_id)

        self.audit.log_change(
            entity_type="transaction",
            entity_id=transaction.id,
            action=AuditAction.CREATE,
            changes={"created": data.model_dump(mode="json", exclude_none=True)},
            actor_id=actor_id,
        )

        return transaction

    def get_by_id(self, transaction_id: UUID) -> Transaction | None:
        """Ledger entry by ID, None if not found."""
        row = self.postgres.select_one("transactions", {"id": transaction_id})
        if row is None:
            return None
        return Transaction.model_validate(row)

    def update(self, transaction_id: UUID, data: TransactionUpdate, actor_id: UUID) -> Transaction:
        """
        Edit a manual ledger entry.

        Raises:
            ValueError: If not found, or if the entry was created by a document payment
        """
        current = self.get_by_id(transaction_id)
        if current is None:
            raise ValueError(f"Transaction {transaction_id} not found")
        if current.invoice_id or current.purchase_id:
            raise ValueError(f"Transaction {transaction_id} belongs to a document payment and cannot be edited")

        updates = data.model_dump(exclude_none=True)
        if not updates:
            return current

        row = self.postgres.update("transactions", transaction_id, {**updates, "updated_at": now_utc()})
        updated = Transaction.model_validate(row)

        self.audit.log_update("transaction", current, updated, actor_id)

        return updated

    def delete(self, transaction_id: UUID, actor_id: UUID) -> bool:
        """
        Delete a manual ledger entry.

        Returns:
            True if deleted, False if not found

        Raises:
            ValueError: If the entry was created by a document payment
        """
        current = self.get_by_id(transaction_id)
        if current is None:
            return False
        if current.invoice_id or current.purchase_id:
            raise ValueError(f"Transaction {transaction_id} belongs to a document payment and cannot be deleted")

        self.postgres.delete("transactions", transaction_id)

        self.audit.log_change(
            entity_type="transaction",
            entity_id=transaction_id,
            action=AuditAction.DELETE,
            changes={"deleted": current.model_dump(mode="json")},
            actor_id=actor_id,
        )

        return True

    def list_transactions(
        self,
        transaction_type: TransactionType | None = None,
        start: date | None = None,
        end: date | None = None,
        limit: int | None = None,
    ) -> list[Transaction]:
        """Ledger entries, newest first, optionally filtered by type and date range."""
        filters = {"type": transaction_type} if transaction_type else None
        rows = self.postgres.select(
            "transactions",
            filters,
            between={"transaction_date": (start, end)},
            order_by="transaction_date DESC",
            limit=limit,
        )
        return [Transaction.model_validate(row) for row in rows]

    def summary(self, start: date | None = None, end: date | None = None) -> LedgerSummary:
        """Income, expense and net over a date range."""
        income = expense = Decimal("0")
        for t in self.list_transactions(start=start, end=end):
            if t.type == TransactionType.INCOME:
                income += t.amount
            else:
                expense += t.amount
        return LedgerSummary(income=income, expense=expense, net=income - expense)

    def list_payment_methods(self, include_inactive: bool = False) -> list[PaymentMethod]:
        """Payment methods ordered by name."""
        filters = None if include_inactive else {"is_active": True}
        rows = self.postgres.select("payment_methods", filters, order_by="name")
        return [PaymentMethod.model_validate(row) for row in rows]

    def create_payment_method(self, data: PaymentMethodCreate, actor_id: UUID) -> PaymentMethod:
        """Add a payment method."""
        row = self.postgres.insert(
            "payment_methods",
            {"id": uuid4(), **data.model_dump(), "created_at": now_utc()},
        )
        method = PaymentMethod.model_validate(row)

        self.audit.log_change(
            entity_type="payment_method",
            entity_id=method.id,
            action=AuditAction.CREATE,
            changes={"created": data.model_dump(mode="json")},
            actor_id=actor_id,
        )

        return method

    def list_expense_categories(self, include_inactive: bool = False) -> list[ExpenseCategory]:
        """Expense categories ordered by name."""
        filters = None if include_inactive else {"is_active": True}
        rows = self.postgres.select("expense_categories", filters, order_by="name")
        return [ExpenseCategory.model_validate(row) for row in rows]

    def create_expense_category(self, data: ExpenseCategoryCreate, actor_id: UUID) -> ExpenseCategory:
        """
        Add an expense category.

        Raises:
            ValueError: If a category with the same name exists
        """
        for existing in self.list_expense_categories(include_inactive=True):
            if existing.name.strip().lower() == data.name.strip().lower():
                raise ValueError(f"Expense category '{data.name}' already exists")

        row = self.postgres.insert(
            "expense_categories",
            {"id": uuid4(), **data.model_dump(), "created_at": now_utc()},
        )
        category = ExpenseCategory.model_validate(row)

        self.audit.log_change(
            entity_type="expense_category",
            entity_id=category.id,
            action=AuditAction.CREATE,
            changes={"created": data.model_dump(mode="json")},
            actor_id=actor_id,
        )

        return category

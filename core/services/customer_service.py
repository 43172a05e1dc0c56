"""
Customer service for CRUD operations and receivable balances.

Besides invoices, a customer's account carries entries recorded by hand:
payments received on account, opening balances, credit notes and other
charges. Those entries count towards the balance.

All operations are automatically scoped to the current account via RLS.
"""

import logging
from decimal import Decimal
from uuid import UUID, uuid4

from core.audit import AuditAction
from core.models import (
    Customer,
    CustomerTransaction,
    CustomerTransactionCreate,
    InvoiceStatus,
)
from core.services.party_service import PartyService
from utils.timezone import now_utc, business_today

logger = logging.getLogger(__name__)


class CustomerService(PartyService[Customer]):
    """Service for customer operations. Balance = amount still to receive."""

    table = "customers"
    entity_type = "customer"
    model = Customer
    document_table = "invoices"
    document_party_column = "customer_id"
    open_document_statuses = (
        InvoiceStatus.DRAFT.value,
        InvoiceStatus.SENT.value,
        InvoiceStatus.PAID.value,
    )

    def record_transaction(
        self, customer_id: UUID, data: CustomerTransactionCreate, actor_id: UUID
    ) -> CustomerTransaction:
        """
        Record an account entry for a customer.

        Raises:
            ValueError: If the customer or the payment method does not exist
        """
        if self.get_by_id(customer_id) is None:
            raise ValueError(f"Customer {customer_id} not found")

        if data.payment_method_id and self.postgres.select_one(
            "payment_methods", {"id": data.payment_method_id}
        ) is None:
            raise ValueError(f"Payment method {data.payment_method_id} not found")

        row = self.postgres.insert(
            "customer_transactions",
            {
                "id": uuid4(),
                "customer_id": customer_id,
                **data.model_dump(),
                "transaction_date": data.transaction_date or business_today(),
                "created_by": actor_id,
                "created_at": now_utc(),
            },
        )
        entry = CustomerTransaction.model_validate(row)

        self.audit.log_change(
            entity_type="customer_transaction",
            entity_id=entry.id,
            action=AuditAction.CREATE,
            changes={"created": {"customer_id": str(customer_id), **data.model_dump(mode="json", exclude_none=True)}},
            actor_id=actor_id,
        )

        logger.info(f"Recorded {entry.type.value} of {entry.amount} for customer {customer_id}")
        return entry

    def list_transactions(self, customer_id: UUID) -> list[CustomerTransaction]:
        """Account entries of a customer, newest first."""
        rows = self.postgres.select(
            "customer_transactions",
            {"customer_id": customer_id},
            order_by="transaction_date DESC",
        )
        return [CustomerTransaction.model_validate(row) for row in rows]

    def delete_transaction(self, transaction_id: UUID, actor_id: UUID) -> bool:
        """
        Remove an account entry.

        Returns:
            True if deleted, False if not found
        """
        row = self.postgres.select_one("customer_transactions", {"id": transaction_id})
        if row is None:
            return False
        entry = CustomerTransaction.model_validate(row)

        self.postgres.delete("customer_transactions", transaction_id)

        self.audit.log_change(
            entity_type="customer_transaction",
            entity_id=transaction_id,
            action=AuditAction.DELETE,
            changes={"deleted": entry.model_dump(mode="json")},
            actor_id=actor_id,
        )

        return True

    def _account_entries_total(self, party_id: UUID) -> Decimal:
        return sum((t.signed_amount for t in self.list_transactions(party_id)), Decimal("0"))

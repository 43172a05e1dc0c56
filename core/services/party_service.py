"""
Shared CRUD for trading parties (customers and suppliers).

Both keep a contact record, a state for GST jurisdiction and an opening
balance. The balance owed is the opening balance plus the unpaid part of
every live document with the party, adjusted by any account entries the
party type keeps.
"""

import logging
from decimal import Decimal
from typing import Generic, TypeVar
from uuid import UUID, uuid4

from pydantic import BaseModel

from clients.postgres_client import PostgresClient
from core.audit import AuditLogger, AuditAction
from core.models import PartyBalance
from utils.timezone import now_utc

logger = logging.getLogger(__name__)

PartyT = TypeVar("PartyT", bound=BaseModel)


class PartyService(Generic[PartyT]):
    """
    Base service for a party table.

    Subclasses set the table, model and the document table whose unpaid
    totals make up the party's balance.
    """

    table: str
    entity_type: str
    model: type[BaseModel]
    document_table: str
    document_party_column: str
    open_document_statuses: tuple[str, ...]

    def __init__(self, postgres: PostgresClient, audit: AuditLogger):
        self.postgres = postgres
        self.audit = audit

    def _label(self) -> str:
        return self.entity_type.capitalize()

    def create(self, data: BaseModel, actor_id: UUID) -> PartyT:
        """
        Create a new party.

        Args:
            data: Creation data
            actor_id: User creating the record

        Returns:
            Created party
        """
        now = now_utc()
        row = self.postgres.insert(
            self.table,
            {
                "id": uuid4(),
                **data.model_dump(),
                "created_by": actor_id,
                "created_at": now,
                "updated_at": now,
            },
        )
        party = self.model.model_validate(row)

        self.audit.log_change(
            entity_type=self.entity_type,
            entity_id=party.id,
            action=AuditAction.CREATE,
            changes={"created": data.model_dump(mode="json", exclude_none=True)},
            actor_id=actor_id,
        )

        return party

    def get_by_id(self, party_id: UUID) -> PartyT | None:
        """Party by ID if found and not deleted, None otherwise."""
        row = self.postgres.select_one(self.table, {"id": party_id, "deleted_at": None})
        if row is None:
            return None
        return self.model.model_validate(row)

    def update(self, party_id: UUID, data: BaseModel, actor_id: UUID) -> PartyT:
        """
        Update party fields.

        Raises:
            ValueError: If party not found
        """
        current = self.get_by_id(party_id)
        if current is None:
            raise ValueError(f"{self._label()} {party_id} not found")

        updates = data.model_dump(exclude_none=True)
        if not updates:
            return current

        row = self.postgres.update(self.table, party_id, {**updates, "updated_at": now_utc()})
        updated = self.model.model_validate(row)

        self.audit.log_update(self.entity_type, current, updated, actor_id)

        return updated

    def delete(self, party_id: UUID, actor_id: UUID) -> bool:
        """
        Soft delete a party.

        Returns:
            True if deleted, False if not found

        Raises:
            ValueError: If the party still has open documents
        """
        current = self.get_by_id(party_id)
        if current is None:
            return False

        open_documents = self.postgres.select(
            self.document_table,
            {
                self.document_party_column: party_id,
                "deleted_at": None,
                "payment_status": ["unpaid", "partial"],
                "status": list(self.open_document_statuses),
            },
            limit=1,
        )
        if open_documents:
            raise ValueError(f"{self._label()} {party_id} has unpaid documents and cannot be deleted")

        now = now_utc()
        self.postgres.update(self.table, party_id, {"deleted_at": now, "updated_at": now})

        self.audit.log_change(
            entity_type=self.entity_type,
            entity_id=party_id,
            action=AuditAction.DELETE,
            changes={"deleted": current.model_dump(mode="json")},
            actor_id=actor_id,
        )

        return True

    def list_all(self, limit: int = 50, offset: int = 0) -> list[PartyT]:
        """Non-deleted parties ordered by name."""
        rows = self.postgres.select(
            self.table, {"deleted_at": None}, order_by="name", limit=limit, offset=offset
        )
        return [self.model.model_validate(row) for row in rows]

    def search(self, query: str, limit: int = 20) -> list[PartyT]:
        """Parties whose name contains the query, case-insensitive."""
        rows = self.postgres.select(
            self.table, {"deleted_at": None}, search={"name": query}, order_by="name", limit=limit
        )
        return [self.model.model_validate(row) for row in rows]

    def get_balance(self, party_id: UUID) -> PartyBalance:
        """
        Outstanding balance with a party.

        Raises:
            ValueError: If party not found
        """
        party = self.get_by_id(party_id)
        if party is None:
            raise ValueError(f"{self._label()} {party_id} not found")

        documents = self.postgres.select(
            self.document_table,
            {
                self.document_party_column: party_id,
                "deleted_at": None,
                "status": list(self.open_document_statuses),
            },
        )

        return PartyBalance(
            party_id=party_id,
            opening_balance=party.opening_balance,
            documents_total=sum((Decimal(d["total"]) for d in documents), Decimal("0")),
            amount_paid=sum((Decimal(d["amount_paid"]) for d in documents), Decimal("0")),
            account_entries=self._account_entries_total(party_id),
        )

    def _account_entries_total(self, party_id: UUID) -> Decimal:
        """Net effect of entries recorded outside documents. None by default."""
        return Decimal("0")

"""
Audit trail for billing records.

Every create, update and delete of a company profile, party, product,
document or ledger entry lands in the audit_log table with the acting user
and what changed. Entries are append-only.

Entries are written after the change itself has committed, so a workflow
that rolls back leaves no trace here.
"""

from enum import Enum
from uuid import UUID, uuid4
from typing import Any

from pydantic import BaseModel

from clients.postgres_client import TableOperations
from utils.timezone import now_utc

# Bookkeeping columns that change on every write
_UNTRACKED_FIELDS = frozenset({"updated_at"})


class AuditAction(Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


def compute_changes(
    old: dict[str, Any],
    new: dict[str, Any],
    exclude_fields: set[str] | frozenset[str] | None = None,
) -> dict[str, dict[str, Any]]:
    """
    Field-level diff of two serialized records.

    Returns {field: {"old": ..., "new": ...}} for every field whose value
    differs, including fields present on only one side. Fields in
    exclude_fields (default: updated_at) are ignored.
    """
    exclude = _UNTRACKED_FIELDS if exclude_fields is None else exclude_fields
    return {
        key: {"old": old.get(key), "new": new.get(key)}
        for key in sorted(old.keys() | new.keys())
        if key not in exclude and old.get(key) != new.get(key)
    }


class AuditLogger:
    """
    Writes and reads the audit_log table.

    Change payloads must be JSON-compatible: pass model_dump(mode="json")
    output, never raw models, so UUIDs, Decimals and dates are strings.

    Usage:
        audit.log_change("invoice", invoice.id, AuditAction.CREATE,
                         {"created": {"invoice_number": invoice.invoice_number}},
                         actor_id)
        audit.log_update("product", before, after, actor_id)
    """

    def __init__(self, postgres: TableOperations):
        self.postgres = postgres

    def log_change(
        self,
        entity_type: str,
        entity_id: UUID,
        action: AuditAction,
        changes: dict[str, Any],
        actor_id: UUID,
    ) -> None:
        """
        Append one entry.

        Changes payload by action:
        - CREATE: {"created": {...}}
        - UPDATE: {"field": {"old": ..., "new": ...}, ...}
        - DELETE: {"deleted": {...}}
        """
        self.postgres.insert(
            "audit_log",
            {
                "id": uuid4(),
                "user_id": actor_id,
                "entity_type": entity_type,
                "entity_id": entity_id,
                "action": action.value,
                "changes": changes,
                "created_at": now_utc(),
            },
        )

    def log_update(self, entity_type: str, before: BaseModel, after: BaseModel, actor_id: UUID) -> bool:
        """
        Diff two versions of a record and log an UPDATE if anything changed.

        Returns True if an entry was written.
        """
        changes = compute_changes(before.model_dump(mode="json"), after.model_dump(mode="json"))
        if not changes:
            return False

        self.log_change(entity_type, after.id, AuditAction.UPDATE, changes, actor_id)
        return True

    def get_entity_history(self, entity_type: str, entity_id: UUID) -> list[dict[str, Any]]:
        """All entries for one record, newest first."""
        return self.postgres.select(
            "audit_log",
            {"entity_type": entity_type, "entity_id": entity_id},
            order_by="created_at DESC",
        )

    def get_user_activity(self, actor_id: UUID, limit: int = 100) -> list[dict[str, Any]]:
        """Recent entries written by one user, newest first."""
        return self.postgres.select(
            "audit_log",
            {"user_id": actor_id},
            order_by="created_at DESC",
            limit=limit,
        )

"""
Inventory service: stock movements and quantity on hand.

Every change to a product's quantity goes through move(), which applies an
atomic increment and appends one stock ledger entry in the same transaction.
Document workflows call it on their own transaction so stock, ledger and
document status commit together.
"""

import logging
from decimal import Decimal
from typing import Iterable
from uuid import UUID, uuid4

from clients.postgres_client import DatabaseError, PostgresClient, TableOperations
from core.audit import AuditLogger, AuditAction
from core.exceptions import OperationFailedError
from core.models import MovementType, StockAdjustment, StockMovement
from utils.timezone import now_utc

logger = logging.getLogger(__name__)


class InventoryService:
    """Service for stock movements."""

    def __init__(self, postgres: PostgresClient, audit: AuditLogger):
        self.postgres = postgres
        self.audit = audit

    def move(
        self,
        db: TableOperations,
        product_id: UUID,
        movement_type: MovementType,
        quantity: Decimal,
        reason: str,
        actor_id: UUID,
        invoice_id: UUID | None = None,
        purchase_id: UUID | None = None,
    ) -> StockMovement:
        """
        Change a product's quantity and record why.

        Args:
            db: Open transaction (or client) to write through
            product_id: Product to move
            movement_type: IN adds, OUT subtracts, ADJUSTMENT adds a signed delta
            quantity: Positive amount for IN/OUT, signed delta for ADJUSTMENT
            reason: Human-readable cause, stored on the ledger entry
            actor_id: User responsible
            invoice_id: Invoice that caused the movement, if any
            purchase_id: Purchase that caused the movement, if any

        Returns:
            The stock ledger entry

        Raises:
            ValueError: If the product does not exist
        """
        if movement_type == MovementType.OUT:
            delta = -quantity
        else:
            delta = quantity

        product = db.increment("products", product_id, "quantity", delta)
        if product is None:
            raise ValueError(f"Product {product_id} not found")

        if Decimal(product["quantity"]) < 0:
            logger.warning(
                "Stock for product %s (%s) is now negative: %s",
                product_id, product.get("sku"), product["quantity"],
            )

        row = db.insert(
            "stock_movements",
            {
                "id": uuid4(),
                "product_id": product_id,
                "type": movement_type,
                "quantity": quantity,
                "reason": reason,
                "invoice_id": invoice_id,
                "purchase_id": purchase_id,
                "created_by": actor_id,
                "created_at": now_utc(),
            },
        )
        return StockMovement.model_validate(row)

    def move_lines(
        self,
        db: TableOperations,
        lines: Iterable[dict],
        movement_type: MovementType,
        reason: str,
        actor_id: UUID,
        invoice_id: UUID | None = None,
        purchase_id: UUID | None = None,
    ) -> list[StockMovement]:
        """Move stock for every document line (dicts with product_id and quantity)."""
        return [
            self.move(
                db,
                line["product_id"],
                movement_type,
                Decimal(line["quantity"]),
                reason,
                actor_id,
                invoice_id=invoice_id,
                purchase_id=purchase_id,
            )
            for line in lines
        ]

    def adjust(self, data: StockAdjustment, actor_id: UUID) -> StockMovement | None:
        """
        Set a product's quantity to a physically counted value.

        Returns:
            The adjustment entry, or None if the count already matched

        Raises:
            ValueError: If product not found
            OperationFailedError: If the database rejects the write
        """
        try:
            with self.postgres.transaction() as tx:
                current = tx.select_one(
                    "products", {"id": data.product_id, "deleted_at": None}, for_update=True
                )
                if current is None:
                    raise ValueError(f"Product {data.product_id} not found")

                delta = data.counted_quantity - Decimal(current["quantity"])
                if delta == 0:
                    return None

                movement = self.move(
                    tx, data.product_id, MovementType.ADJUSTMENT, delta, data.reason, actor_id
                )
        except DatabaseError as e:
            logger.error(f"Error adjusting stock for product {data.product_id}: {e}")
            raise OperationFailedError("adjusting stock", str(e)) from e

        self.audit.log_change(
            entity_type="product",
            entity_id=data.product_id,
            action=AuditAction.UPDATE,
            changes={"quantity": {"old": str(current["quantity"]), "new": str(data.counted_quantity)}},
            actor_id=actor_id,
        )

        return movement

    def list_movements(self, product_id: UUID | None = None, limit: int = 100) -> list[StockMovement]:
        """Stock ledger entries, newest first, optionally for one product."""
        filters = {"product_id": product_id} if product_id else None
        rows = self.postgres.select(
            "stock_movements", filters, order_by="created_at DESC", limit=limit
        )
        return [StockMovement.model_validate(row) for row in rows]

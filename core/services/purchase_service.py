"""
Purchase order service.

Purchase lines name products by SKU. A SKU the catalog has not seen yet
becomes a raw-material product inside the same transaction as the order, so
a failed order leaves no stray catalog entries behind.

Stock arrives when the order is received or first paid, whichever comes
first, and only once.
"""

import logging
from datetime import date
from decimal import Decimal
from uuid import UUID, uuid4

from clients.postgres_client import DatabaseError, PostgresClient, TableOperations
from core.audit import AuditLogger, AuditAction
from core.exceptions import OperationFailedError
from core.gst import ZERO, calculate_item_gst, is_interstate, payment_status_for, sum_breakdowns
from core.numbering import next_number
from core.models import (
    MovementType,
    Payment,
    PaymentCreate,
    PaymentStatus,
    Product,
    Purchase,
    PurchaseCreate,
    PurchaseItem,
    PurchaseStatus,
    TransactionCreate,
    TransactionType,
)
from core.services.accounting_service import AccountingService, PURCHASE_CATEGORY
from core.services.company_service import CompanyService
from core.services.inventory_service import InventoryService
from core.services.product_service import ProductService
from core.services.supplier_service import SupplierService
from utils.timezone import now_utc, business_today

logger = logging.getLogger(__name__)


class PurchaseService:
    """Service for purchase order operations."""

    def __init__(
        self,
        postgres: PostgresClient,
        audit: AuditLogger,
        company: CompanyService,
        suppliers: SupplierService,
        products: ProductService,
        inventory: InventoryService,
        accounting: AccountingService,
    ):
        self.postgres = postgres
        self.audit = audit
        self.company = company
        self.suppliers = suppliers
        self.products = products
        self.inventory = inventory
        self.accounting = accounting

    def _generate_purchase_number(self, db: TableOperations) -> str:
        """Next purchase number. Format: PO-XXXXX, never reused."""
        return next_number(db, "purchases", "purchase_number", "PO-", 5)

    def create(self, data: PurchaseCreate, actor_id: UUID) -> Purchase:
        """
        Create a purchase order with its line items.

        Args:
            data: Supplier, lines and dates
            actor_id: User placing the order

        Returns:
            Created purchase in ORDERED status, unpaid

        Raises:
            ValueError: If the company has no state or the supplier does not exist
            OperationFailedError: If the database rejects a write
        """
        company = self.company.require_tax_jurisdiction()

        supplier = self.suppliers.get_by_id(data.supplier_id)
        if supplier is None:
            raise ValueError(f"Supplier {data.supplier_id} not found")

        interstate = is_interstate(company.state, supplier.state)
        breakdowns = [
            calculate_item_gst(item.quantity * item.unit_price, item.gst_rate, interstate)
            for item in data.items
        ]
        totals = sum_breakdowns(breakdowns)
        purchase_id = uuid4()
        now = now_utc()
        new_products: list[Product] = []

        try:
            with self.postgres.transaction() as tx:
                product_ids = []
                for item in data.items:
                    product = self.products.find_by_sku(item.sku, db=tx)
                    if product is None:
                        product = self.products.create_from_purchase_item(tx, item, actor_id)
                        new_products.append(product)
                    product_ids.append(product.id)

                row = tx.insert(
                    "purchases",
                    {
                        "id": purchase_id,
                        "purchase_number": self._generate_purchase_number(tx),
                        "supplier_id": data.supplier_id,
                        "status": PurchaseStatus.ORDERED,
                        "payment_status": PaymentStatus.UNPAID,
                        "order_date": data.order_date or business_today(),
                        "expected_date": data.expected_date,
                        "received_date": None,
                        "subtotal": totals.subtotal,
                        "cgst": totals.cgst,
                        "sgst": totals.sgst,
                        "igst": totals.igst,
                        "tax": totals.tax,
                        "total": totals.total,
                        "amount_paid": ZERO,
                        "is_interstate": interstate,
                        "place_of_supply": supplier.state,
                        "stock_committed": False,
                        "notes": data.notes,
                        "created_by": actor_id,
                        "created_at": now,
                        "updated_at": now,
                    },
                )

                tx.insert_many(
                    "purchase_items",
                    [
                        {
                            "id": uuid4(),
                            "purchase_id": purchase_id,
                            "product_id": product_id,
                            "product_name": item.product_name,
                            "hsn_code": item.hsn_code,
                            "quantity": item.quantity,
                            "unit_price": item.unit_price,
                            "gst_rate": breakdown.rate,
                            "cgst_rate": breakdown.cgst_rate,
                            "sgst_rate": breakdown.sgst_rate,
                            "igst_rate": breakdown.igst_rate,
                            "cgst_amount": breakdown.cgst,
                            "sgst_amount": breakdown.sgst,
                            "igst_amount": breakdown.igst,
                            "total": breakdown.amount + breakdown.tax,
                            "created_at": now,
                        }
                        for item, product_id, breakdown in zip(data.items, product_ids, breakdowns)
                    ],
                )
        except DatabaseError as e:
            logger.error(f"Error creating purchase for supplier {data.supplier_id}: {e}")
            raise OperationFailedError("creating purchase", str(e)) from e

        purchase = Purchase.model_validate(row)

        for product in new_products:
            self.audit.log_change(
                entity_type="product",
                entity_id=product.id,
                action=AuditAction.CREATE,
                changes={"created": {"sku": product.sku, "name": product.name, "purchase_id": str(purchase.id)}},
                actor_id=actor_id,
            )

        self.audit.log_change(
            entity_type="purchase",
            entity_id=purchase.id,
            action=AuditAction.CREATE,
            changes={
                "created": {
                    "purchase_number": purchase.purchase_number,
                    "supplier_id": str(purchase.supplier_id),
                    "items": len(data.items),
                    "subtotal": str(purchase.subtotal),
                    "tax": str(purchase.tax),
                    "total": str(purchase.total),
                    "is_interstate": purchase.is_interstate,
                }
            },
            actor_id=actor_id,
        )

        logger.info(
            f"Created purchase {purchase.purchase_number} for {purchase.total} "
            f"({len(new_products)} new products)"
        )
        return purchase

    def get_by_id(self, purchase_id: UUID) -> Purchase | None:
        """Purchase by ID if found and not deleted, None otherwise."""
        row = self.postgres.select_one("purchases", {"id": purchase_id, "deleted_at": None})
        if row is None:
            return None
        return Purchase.model_validate(row)

    def get_items(self, purchase_id: UUID) -> list[PurchaseItem]:
        """Line items of a purchase."""
        rows = self.postgres.select("purchase_items", {"purchase_id": purchase_id}, order_by="created_at")
        return [PurchaseItem.model_validate(row) for row in rows]

    def list_all(
        self,
        status: PurchaseStatus | None = None,
        supplier_id: UUID | None = None,
        start: date | None = None,
        end: date | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Purchase]:
        """Non-deleted purchases, newest first."""
        filters = {"deleted_at": None}
        if status:
            filters["status"] = status
        if supplier_id:
            filters["supplier_id"] = supplier_id

        rows = self.postgres.select(
            "purchases",
            filters,
            between={"order_date": (start, end)},
            order_by="purchase_number DESC",
            limit=limit,
            offset=offset,
        )
        return [Purchase.model_validate(row) for row in rows]

    def list_payables(self, supplier_id: UUID | None = None) -> list[Purchase]:
        """Purchases we still owe money on."""
        filters = {
            "deleted_at": None,
            "payment_status": [PaymentStatus.UNPAID, PaymentStatus.PARTIAL],
            "status": [PurchaseStatus.ORDERED, PurchaseStatus.RECEIVED],
        }
        if supplier_id:
            filters["supplier_id"] = supplier_id

        rows = self.postgres.select("purchases", filters, order_by="order_date")
        return [Purchase.model_validate(row) for row in rows]

    def list_payments(self, purchase_id: UUID) -> list[Payment]:
        """Payments made against a purchase, oldest first."""
        rows = self.postgres.select("purchase_payments", {"purchase_id": purchase_id}, order_by="created_at")
        return [Payment.model_validate(row) for row in rows]

    @staticmethod
    def _check_payment(purchase: Purchase, amount: Decimal) -> None:
        if purchase.status == PurchaseStatus.CANCELLED:
            raise ValueError(f"Purchase {purchase.purchase_number} is cancelled")
        if amount <= 0:
            raise ValueError("Payment amount must be greater than zero")
        if amount > purchase.balance_due:
            raise ValueError(
                f"Payment amount {amount} exceeds outstanding balance {purchase.balance_due}"
            )

    def _lock(self, tx: TableOperations, purchase_id: UUID) -> Purchase:
        row = tx.select_one("purchases", {"id": purchase_id, "deleted_at": None}, for_update=True)
        if row is None:
            raise ValueError(f"Purchase {purchase_id} not found")
        return Purchase.model_validate(row)

    def _receive_stock(self, tx: TableOperations, purchase: Purchase, reason: str, actor_id: UUID) -> None:
        """Put every line's quantity on the shelf."""
        items = tx.select("purchase_items", {"purchase_id": purchase.id})
        self.inventory.move_lines(
            tx, items, MovementType.IN, reason, actor_id, purchase_id=purchase.id
        )
        logger.info(f"Stock received for purchase {purchase.purchase_number} ({len(items)} lines)")

    def record_payment(self, purchase_id: UUID, data: PaymentCreate, actor_id: UUID) -> Purchase:
        """
        Record a payment to the supplier.

        The first payment brings the order's stock in if it has not been
        received yet. Every payment appends one expense ledger entry.

        Raises:
            ValueError: If purchase not found, cancelled, or the amount is not
                within (0, balance due]
            OperationFailedError: If the database rejects a write
        """
        current = self.get_by_id(purchase_id)
        if current is None:
            raise ValueError(f"Purchase {purchase_id} not found")
        self._check_payment(current, data.amount)

        payment_date = data.payment_date or business_today()
        now = now_utc()

        try:
            with self.postgres.transaction() as tx:
                locked = self._lock(tx, purchase_id)
                self._check_payment(locked, data.amount)

                tx.insert(
                    "purchase_payments",
                    {
                        "id": uuid4(),
                        "purchase_id": purchase_id,
                        "amount": data.amount,
                        "payment_date": payment_date,
                        "payment_method_id": data.payment_method_id,
                        "reference_number": data.reference_number,
                        "notes": data.notes,
                        "created_by": actor_id,
                        "created_at": now,
                    },
                )

                amount_paid = locked.amount_paid + data.amount
                patch = {
                    "amount_paid": amount_paid,
                    "payment_status": payment_status_for(amount_paid, locked.total),
                    "updated_at": now,
                }

                if locked.payment_status == PaymentStatus.UNPAID and not locked.stock_committed:
                    self._receive_stock(
                        tx, locked, f"Purchase {locked.purchase_number} - first payment made", actor_id
                    )
                    patch["stock_committed"] = True

                row = tx.update("purchases", purchase_id, patch)

                self.accounting.record(
                    tx,
                    TransactionCreate(
                        type=TransactionType.EXPENSE,
                        category=PURCHASE_CATEGORY,
                        amount=data.amount,
                        description=f"Payment made for purchase {locked.purchase_number}",
                        transaction_date=payment_date,
                        payment_method_id=data.payment_method_id,
                        reference_number=data.reference_number,
                        purchase_id=purchase_id,
                    ),
                    actor_id,
                )
        except DatabaseError as e:
            logger.error(f"Error recording payment on purchase {purchase_id}: {e}")
            raise OperationFailedError("recording payment", str(e)) from e

        updated = Purchase.model_validate(row)

        self.audit.log_change(
            entity_type="purchase",
            entity_id=purchase_id,
            action=AuditAction.UPDATE,
            changes={
                "amount_paid": {"old": str(locked.amount_paid), "new": str(updated.amount_paid)},
                "payment_status": {"old": locked.payment_status.value, "new": updated.payment_status.value},
            },
            actor_id=actor_id,
        )

        logger.info(
            f"Payment of {data.amount} recorded on purchase {updated.purchase_number} "
            f"({updated.payment_status.value})"
        )
        return updated

    def mark_received(self, purchase_id: UUID, actor_id: UUID) -> Purchase:
        """
        Record delivery of a purchase order.

        Brings stock in unless a payment already did.

        Raises:
            ValueError: If purchase not found, already received or cancelled
            OperationFailedError: If the database rejects a write
        """
        now = now_utc()

        try:
            with self.postgres.transaction() as tx:
                locked = self._lock(tx, purchase_id)
                if locked.status == PurchaseStatus.RECEIVED:
                    raise ValueError(f"Purchase {locked.purchase_number} is already received")
                if locked.status == PurchaseStatus.CANCELLED:
                    raise ValueError(f"Purchase {locked.purchase_number} is cancelled")

                patch = {
                    "status": PurchaseStatus.RECEIVED,
                    "received_date": business_today(),
                    "updated_at": now,
                }

                if not locked.stock_committed:
                    self._receive_stock(tx, locked, f"Purchase {locked.purchase_number} received", actor_id)
                    patch["stock_committed"] = True

                row = tx.update("purchases", purchase_id, patch)
        except DatabaseError as e:
            logger.error(f"Error receiving purchase {purchase_id}: {e}")
            raise OperationFailedError("receiving purchase", str(e)) from e

        updated = Purchase.model_validate(row)

        self.audit.log_change(
            entity_type="purchase",
            entity_id=purchase_id,
            action=AuditAction.UPDATE,
            changes={"status": {"old": locked.status.value, "new": updated.status.value}},
            actor_id=actor_id,
        )

        logger.info(f"Purchase {updated.purchase_number} received")
        return updated

    def cancel(self, purchase_id: UUID, actor_id: UUID) -> Purchase:
        """
        Cancel an order that has neither been paid nor received.

        Raises:
            ValueError: If purchase not found, paid or received
        """
        current = self.get_by_id(purchase_id)
        if current is None:
            raise ValueError(f"Purchase {purchase_id} not found")

        if current.status == PurchaseStatus.CANCELLED:
            return current
        if current.status == PurchaseStatus.RECEIVED or current.amount_paid > 0:
            raise ValueError(f"Purchase {current.purchase_number} is paid or received and cannot be cancelled")

        row = self.postgres.update(
            "purchases", purchase_id, {"status": PurchaseStatus.CANCELLED, "updated_at": now_utc()}
        )
        updated = Purchase.model_validate(row)

        self.audit.log_change(
            entity_type="purchase",
            entity_id=purchase_id,
            action=AuditAction.UPDATE,
            changes={"status": {"old": current.status.value, "new": PurchaseStatus.CANCELLED.value}},
            actor_id=actor_id,
        )

        return updated

    def delete(self, purchase_id: UUID, actor_id: UUID) -> bool:
        """
        Soft delete a purchase.

        Returns:
            True if deleted, False if not found

        Raises:
            ValueError: If the purchase has payments or its stock was received
        """
        current = self.get_by_id(purchase_id)
        if current is None:
            return False

        if current.amount_paid > 0 or current.stock_committed:
            raise ValueError(
                f"Purchase {current.purchase_number} has payments or received stock and cannot be deleted"
            )

        now = now_utc()
        self.postgres.update("purchases", purchase_id, {"deleted_at": now, "updated_at": now})

        self.audit.log_change(
            entity_type="purchase",
            entity_id=purchase_id,
            action=AuditAction.DELETE,
            changes={"deleted": current.model_dump(mode="json")},
            actor_id=actor_id,
        )

        return True

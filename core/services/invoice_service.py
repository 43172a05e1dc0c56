"""
Invoice service for billing, payments and the stock they release.

An invoice is created from catalog products: each line snapshots the
product's name, HSN code, price and GST rate, and the tax split (CGST+SGST
or IGST) is fixed at creation from the company's and the customer's states.

Stock leaves the shelf when the customer first pays (or when the invoice is
marked paid outright), never at creation. The header's stock_committed flag
makes that happen once per invoice.
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
    Invoice,
    InvoiceCreate,
    InvoiceItem,
    InvoiceStatus,
    MovementType,
    Payment,
    PaymentCreate,
    PaymentStatus,
    ReceivablesSummary,
    TransactionCreate,
    TransactionType,
)
from core.services.accounting_service import AccountingService, SALES_CATEGORY
from core.services.company_service import CompanyService
from core.services.customer_service import CustomerService
from core.services.inventory_service import InventoryService
from core.services.product_service import ProductService
from utils.timezone import now_utc, business_today

logger = logging.getLogger(__name__)


class InvoiceService:
    """Service for invoice operations."""

    def __init__(
        self,
        postgres: PostgresClient,
        audit: AuditLogger,
        company: CompanyService,
        customers: CustomerService,
        products: ProductService,
        inventory: InventoryService,
        accounting: AccountingService,
    ):
        self.postgres = postgres
        self.audit = audit
        self.company = company
        self.customers = customers
        self.products = products
        self.inventory = inventory
        self.accounting = accounting

    def _generate_invoice_number(self, db: TableOperations, invoice_date: date) -> str:
        """
        Next invoice number for the day.

        Format: INV-YYYYMMDD-XXXX where XXXX is a daily sequence. Deleted
        invoices still hold their numbers.
        """
        return next_number(db, "invoices", "invoice_number", f"INV-{invoice_date.strftime('%Y%m%d')}-", 4)

    def create(self, data: InvoiceCreate, actor_id: UUID) -> Invoice:
        """
        Create an invoice with its line items.

        Header and lines are written in one transaction. Stock is not touched.

        Args:
            data: Customer, lines and dates
            actor_id: User creating the invoice

        Returns:
            Created invoice in DRAFT status, unpaid

        Raises:
            ValueError: If the company has no state, or the customer or a
                product does not exist
            OperationFailedError: If the database rejects a write
        """
        company = self.company.require_tax_jurisdiction()

        customer = self.customers.get_by_id(data.customer_id)
        if customer is None:
            raise ValueError(f"Customer {data.customer_id} not found")

        interstate = is_interstate(company.state, customer.state)

        lines = []
        for item in data.items:
            product = self.products.get_by_id(item.product_id)
            if product is None:
                raise ValueError(f"Product {item.product_id} not found")

            unit_price = item.unit_price if item.unit_price is not None else product.selling_price
            rate = product.gst_rate if data.include_gst else ZERO
            breakdown = calculate_item_gst(item.quantity * unit_price, rate, interstate)
            lines.append((item, product, unit_price, breakdown))

        totals = sum_breakdowns(breakdown for _, _, _, breakdown in lines)
        invoice_date = data.invoice_date or business_today()
        invoice_id = uuid4()
        now = now_utc()

        try:
            with self.postgres.transaction() as tx:
                row = tx.insert(
                    "invoices",
                    {
                        "id": invoice_id,
                        "invoice_number": self._generate_invoice_number(tx, invoice_date),
                        "customer_id": data.customer_id,
                        "status": InvoiceStatus.DRAFT,
                        "payment_status": PaymentStatus.UNPAID,
                        "invoice_date": invoice_date,
                        "due_date": data.due_date,
                        "paid_date": None,
                        "subtotal": totals.subtotal,
                        "cgst": totals.cgst,
                        "sgst": totals.sgst,
                        "igst": totals.igst,
                        "tax": totals.tax,
                        "total": totals.total,
                        "amount_paid": ZERO,
                        "include_gst": data.include_gst,
                        "is_interstate": interstate,
                        "place_of_supply": customer.state,
                        "stock_committed": False,
                        "notes": data.notes,
                        "created_by": actor_id,
                        "created_at": now,
                        "updated_at": now,
                    },
                )

                tx.insert_many(
                    "invoice_items",
                    [
                        {
                            "id": uuid4(),
                            "invoice_id": invoice_id,
                            "product_id": product.id,
                            "product_name": product.name,
                            "hsn_code": product.hsn_code,
                            "quantity": item.quantity,
                            "unit_price": unit_price,
                            "total": breakdown.amount,
                            "gst_rate": breakdown.rate,
                            "cgst_rate": breakdown.cgst_rate,
                            "sgst_rate": breakdown.sgst_rate,
                            "igst_rate": breakdown.igst_rate,
                            "cgst_amount": breakdown.cgst,
                            "sgst_amount": breakdown.sgst,
                            "igst_amount": breakdown.igst,
                            "created_at": now,
                        }
                        for item, product, unit_price, breakdown in lines
                    ],
                )
        except DatabaseError as e:
            logger.error(f"Error creating invoice for customer {data.customer_id}: {e}")
            raise OperationFailedError("creating invoice", str(e)) from e

        invoice = Invoice.model_validate(row)

        self.audit.log_change(
            entity_type="invoice",
            entity_id=invoice.id,
            action=AuditAction.CREATE,
            changes={
                "created": {
                    "invoice_number": invoice.invoice_number,
                    "customer_id": str(invoice.customer_id),
                    "items": len(lines),
                    "subtotal": str(invoice.subtotal),
                    "tax": str(invoice.tax),
                    "total": str(invoice.total),
                    "is_interstate": invoice.is_interstate,
                }
            },
            actor_id=actor_id,
        )

        logger.info(f"Created invoice {invoice.invoice_number} for {invoice.total}")
        return invoice

    def get_by_id(self, invoice_id: UUID) -> Invoice | None:
        """Invoice by ID if found and not deleted, None otherwise."""
        row = self.postgres.select_one("invoices", {"id": invoice_id, "deleted_at": None})
        if row is None:
            return None
        return Invoice.model_validate(row)

    def get_items(self, invoice_id: UUID) -> list[InvoiceItem]:
        """Line items of an invoice."""
        rows = self.postgres.select("invoice_items", {"invoice_id": invoice_id}, order_by="created_at")
        return [InvoiceItem.model_validate(row) for row in rows]

    def list_all(
        self,
        status: InvoiceStatus | None = None,
        customer_id: UUID | None = None,
        start: date | None = None,
        end: date | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Invoice]:
        """Non-deleted invoices, newest first."""
        filters = {"deleted_at": None}
        if status:
            filters["status"] = status
        if customer_id:
            filters["customer_id"] = customer_id

        rows = self.postgres.select(
            "invoices",
            filters,
            between={"invoice_date": (start, end)},
            order_by="invoice_number DESC",
            limit=limit,
            offset=offset,
        )
        return [Invoice.model_validate(row) for row in rows]

    def list_receivables(self, customer_id: UUID | None = None, overdue: bool = False) -> list[Invoice]:
        """
        Invoices still awaiting money: not fully paid and not cancelled.

        With overdue=True, only those whose due date is before today's
        business date.
        """
        filters = {
            "deleted_at": None,
            "payment_status": [PaymentStatus.UNPAID, PaymentStatus.PARTIAL],
            "status": [InvoiceStatus.DRAFT, InvoiceStatus.SENT],
        }
        if customer_id:
            filters["customer_id"] = customer_id

        rows = self.postgres.select("invoices", filters, order_by="invoice_date")
        invoices = [Invoice.model_validate(row) for row in rows]

        if overdue:
            today = business_today()
            invoices = [i for i in invoices if i.is_overdue(today)]
        return invoices

    def receivables_summary(self, customer_id: UUID | None = None) -> ReceivablesSummary:
        """Outstanding and overdue totals across open invoices."""
        today = business_today()
        invoices = self.list_receivables(customer_id)
        overdue = [i for i in invoices if i.is_overdue(today)]

        return ReceivablesSummary(
            outstanding=sum((i.balance_due for i in invoices), ZERO),
            overdue=sum((i.balance_due for i in overdue), ZERO),
            invoice_count=len(invoices),
            overdue_count=len(overdue),
        )

    def list_payments(self, invoice_id: UUID) -> list[Payment]:
        """Payments recorded against an invoice, oldest first."""
        rows = self.postgres.select("invoice_payments", {"invoice_id": invoice_id}, order_by="created_at")
        return [Payment.model_validate(row) for row in rows]

    @staticmethod
    def _check_payment(invoice: Invoice, amount: Decimal) -> None:
        if invoice.status == InvoiceStatus.CANCELLED:
            raise ValueError(f"Invoice {invoice.invoice_number} is cancelled")
        if amount <= 0:
            raise ValueError("Payment amount must be greater than zero")
        if amount > invoice.balance_due:
            raise ValueError(
                f"Payment amount {amount} exceeds outstanding balance {invoice.balance_due}"
            )

    def _lock(self, tx: TableOperations, invoice_id: UUID) -> Invoice:
        row = tx.select_one("invoices", {"id": invoice_id, "deleted_at": None}, for_update=True)
        if row is None:
            raise ValueError(f"Invoice {invoice_id} not found")
        return Invoice.model_validate(row)

    def _release_stock(self, tx: TableOperations, invoice: Invoice, reason: str, actor_id: UUID) -> None:
        """Take every line's quantity off the shelf."""
        items = tx.select("invoice_items", {"invoice_id": invoice.id})
        self.inventory.move_lines(
            tx, items, MovementType.OUT, reason, actor_id, invoice_id=invoice.id
        )
        logger.info(f"Stock released for invoice {invoice.invoice_number} ({len(items)} lines)")

    @staticmethod
    def _stock_pending(invoice: Invoice) -> bool:
        return invoice.payment_status == PaymentStatus.UNPAID and not invoice.stock_committed

    def record_payment(self, invoice_id: UUID, data: PaymentCreate, actor_id: UUID) -> Invoice:
        """
        Record a customer payment.

        The first payment on an invoice releases its stock. Every payment
        appends one income ledger entry.

        Args:
            invoice_id: Invoice UUID
            data: Amount, date, method and reference
            actor_id: User recording the payment

        Returns:
            Updated invoice (payment status becomes PARTIAL or PAID)

        Raises:
            ValueError: If invoice not found, cancelled, or the amount is not
                within (0, balance due]
            OperationFailedError: If the database rejects a write
        """
        current = self.get_by_id(invoice_id)
        if current is None:
            raise ValueError(f"Invoice {invoice_id} not found")
        self._check_payment(current, data.amount)

        payment_date = data.payment_date or business_today()
        now = now_utc()

        try:
            with self.postgres.transaction() as tx:
                locked = self._lock(tx, invoice_id)
                self._check_payment(locked, data.amount)

                tx.insert(
                    "invoice_payments",
                    {
                        "id": uuid4(),
                        "invoice_id": invoice_id,
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
                payment_status = payment_status_for(amount_paid, locked.total)
                patch = {
                    "amount_paid": amount_paid,
                    "payment_status": payment_status,
                    "status": InvoiceStatus.PAID if payment_status == PaymentStatus.PAID else InvoiceStatus.SENT,
                    "updated_at": now,
                }
                if payment_status == PaymentStatus.PAID:
                    patch["paid_date"] = payment_date

                if self._stock_pending(locked):
                    self._release_stock(
                        tx, locked, f"Invoice {locked.invoice_number} - first payment received", actor_id
                    )
                    patch["stock_committed"] = True

                row = tx.update("invoices", invoice_id, patch)

                self.accounting.record(
                    tx,
                    TransactionCreate(
                        type=TransactionType.INCOME,
                        category=SALES_CATEGORY,
                        amount=data.amount,
                        description=f"Payment received for invoice {locked.invoice_number}",
                        transaction_date=payment_date,
                        payment_method_id=data.payment_method_id,
                        reference_number=data.reference_number,
                        invoice_id=invoice_id,
                    ),
                    actor_id,
                )
        except DatabaseError as e:
            logger.error(f"Error recording payment on invoice {invoice_id}: {e}")
            raise OperationFailedError("recording payment", str(e)) from e

        updated = Invoice.model_validate(row)

        self.audit.log_change(
            entity_type="invoice",
            entity_id=invoice_id,
            action=AuditAction.UPDATE,
            changes={
                "amount_paid": {"old": str(locked.amount_paid), "new": str(updated.amount_paid)},
                "payment_status": {"old": locked.payment_status.value, "new": updated.payment_status.value},
            },
            actor_id=actor_id,
        )

        logger.info(
            f"Payment of {data.amount} recorded on invoice {updated.invoice_number} "
            f"({updated.payment_status.value})"
        )
        return updated

    def mark_paid(self, invoice_id: UUID, actor_id: UUID) -> Invoice:
        """
        Mark an invoice fully paid without itemizing payments.

        Settles the outstanding balance as one payment and ledger entry,
        and releases stock if no payment had done so yet. Calling it on an
        invoice that is already paid changes nothing.

        Raises:
            ValueError: If invoice not found or cancelled
            OperationFailedError: If the database rejects a write
        """
        today = business_today()
        now = now_utc()

        try:
            with self.postgres.transaction() as tx:
                locked = self._lock(tx, invoice_id)
                if locked.status == InvoiceStatus.CANCELLED:
                    raise ValueError(f"Invoice {locked.invoice_number} is cancelled")
                if locked.is_paid:
                    return locked

                outstanding = locked.balance_due
                patch = {
                    "status": InvoiceStatus.PAID,
                    "payment_status": PaymentStatus.PAID,
                    "amount_paid": locked.total,
                    "paid_date": today,
                    "updated_at": now,
                }

                if self._stock_pending(locked):
                    self._release_stock(
                        tx, locked, f"Invoice {locked.invoice_number} - marked as paid", actor_id
                    )
                    patch["stock_committed"] = True

                if outstanding > 0:
                    tx.insert(
                        "invoice_payments",
                        {
                            "id": uuid4(),
                            "invoice_id": invoice_id,
                            "amount": outstanding,
                            "payment_date": today,
                            "payment_method_id": None,
                            "reference_number": None,
                            "notes": "Marked as paid",
                            "created_by": actor_id,
                            "created_at": now,
                        },
                    )
                    self.accounting.record(
                        tx,
                        TransactionCreate(
                            type=TransactionType.INCOME,
                            category=SALES_CATEGORY,
                            amount=outstanding,
                            description=f"Invoice {locked.invoice_number} marked as paid",
                            transaction_date=today,
                            invoice_id=invoice_id,
                        ),
                        actor_id,
                    )

                row = tx.update("invoices", invoice_id, patch)
        except DatabaseError as e:
            logger.error(f"Error marking invoice {invoice_id} paid: {e}")
            raise OperationFailedError("marking invoice paid", str(e)) from e

        updated = Invoice.model_validate(row)

        self.audit.log_change(
            entity_type="invoice",
            entity_id=invoice_id,
            action=AuditAction.UPDATE,
            changes={
                "status": {"old": locked.status.value, "new": InvoiceStatus.PAID.value},
                "amount_paid": {"old": str(locked.amount_paid), "new": str(updated.amount_paid)},
            },
            actor_id=actor_id,
        )

        logger.info(f"Invoice {updated.invoice_number} marked as paid")
        return updated

    def update_status(self, invoice_id: UUID, status: InvoiceStatus, actor_id: UUID) -> Invoice:
        """
        Move an invoice through its lifecycle.

        draft -> sent, and any invoice without payments -> cancelled.
        Setting PAID is the same as mark_paid().

        Raises:
            ValueError: If invoice not found or the transition is not allowed
        """
        if status == InvoiceStatus.PAID:
            return self.mark_paid(invoice_id, actor_id)

        current = self.get_by_id(invoice_id)
        if current is None:
            raise ValueError(f"Invoice {invoice_id} not found")

        if current.status == status:
            return current

        if status == InvoiceStatus.CANCELLED:
            if current.status == InvoiceStatus.PAID or current.amount_paid > 0:
                raise ValueError(f"Invoice {current.invoice_number} has payments and cannot be cancelled")
        elif not (current.status == InvoiceStatus.DRAFT and status == InvoiceStatus.SENT):
            raise ValueError(
                f"Cannot change invoice {current.invoice_number} from {current.status.value} to {status.value}"
            )

        row = self.postgres.update("invoices", invoice_id, {"status": status, "updated_at": now_utc()})
        updated = Invoice.model_validate(row)

        self.audit.log_change(
            entity_type="invoice",
            entity_id=invoice_id,
            action=AuditAction.UPDATE,
            changes={"status": {"old": current.status.value, "new": status.value}},
            actor_id=actor_id,
        )

        return updated

    def delete(self, invoice_id: UUID, actor_id: UUID) -> bool:
        """
        Soft delete an invoice.

        Returns:
            True if deleted, False if not found

        Raises:
            ValueError: If the invoice has payments or has released stock
        """
        current = self.get_by_id(invoice_id)
        if current is None:
            return False

        if current.amount_paid > 0 or current.stock_committed:
            raise ValueError(f"Invoice {current.invoice_number} has payments recorded and cannot be deleted")

        now = now_utc()
        self.postgres.update("invoices", invoice_id, {"deleted_at": now, "updated_at": now})

        self.audit.log_change(
            entity_type="invoice",
            entity_id=invoice_id,
            action=AuditAction.DELETE,
            changes={"deleted": current.model_dump(mode="json")},
            actor_id=actor_id,
        )

        return True

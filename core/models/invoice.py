"""
Invoice domain models.

Amounts are Decimal rupees. Line items are snapshots: price, rate and HSN
code are copied from the catalog when the invoice is created and never
change afterwards.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from core.gst import PaymentStatus


class InvoiceStatus(str, Enum):
    """Invoice lifecycle status."""

    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    CANCELLED = "cancelled"


class InvoiceItemInput(BaseModel):
    """One line on a new invoice."""

    product_id: UUID
    quantity: Decimal = Field(..., gt=0)
    unit_price: Decimal | None = Field(None, ge=0)  # None = catalog selling price


class InvoiceCreate(BaseModel):
    """Data required to create an invoice."""

    customer_id: UUID
    items: list[InvoiceItemInput]
    invoice_date: date | None = None
    due_date: date | None = None
    include_gst: bool = True
    notes: str | None = Field(None, max_length=2000)

    @model_validator(mode="after")
    def require_items(self) -> "InvoiceCreate":
        """Reject invoices without lines."""
        if not self.items:
            raise ValueError("At least one item is required")
        return self


class InvoiceItem(BaseModel):
    """Invoice line as stored. total is the untaxed line amount."""

    id: UUID
    invoice_id: UUID
    product_id: UUID
    product_name: str
    hsn_code: str | None
    quantity: Decimal
    unit_price: Decimal
    total: Decimal
    gst_rate: Decimal
    cgst_rate: Decimal
    sgst_rate: Decimal
    igst_rate: Decimal
    cgst_amount: Decimal
    sgst_amount: Decimal
    igst_amount: Decimal
    created_at: datetime

    model_config = {"from_attributes": True}

    @property
    def tax_amount(self) -> Decimal:
        return self.cgst_amount + self.sgst_amount + self.igst_amount


class Invoice(BaseModel):
    """Full invoice entity as stored."""

    id: UUID
    invoice_number: str
    customer_id: UUID
    status: InvoiceStatus
    payment_status: PaymentStatus
    invoice_date: date
    due_date: date | None
    paid_date: date | None
    subtotal: Decimal
    cgst: Decimal
    sgst: Decimal
    igst: Decimal
    tax: Decimal
    total: Decimal
    amount_paid: Decimal
    include_gst: bool
    is_interstate: bool
    place_of_supply: str | None
    stock_committed: bool
    notes: str | None
    created_by: UUID | None
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime | None = None

    model_config = {"from_attributes": True}

    @property
    def balance_due(self) -> Decimal:
        """Remaining amount to be paid."""
        return self.total - self.amount_paid

    @property
    def is_paid(self) -> bool:
        """Whether invoice is fully paid."""
        return self.payment_status == PaymentStatus.PAID

    def is_overdue(self, today: date) -> bool:
        """Unpaid past its due date. Invoices without a due date never are."""
        return (
            not self.is_paid
            and self.status != InvoiceStatus.CANCELLED
            and self.due_date is not None
            and self.due_date < today
        )


class ReceivablesSummary(BaseModel):
    """Money still to come in, and how much of it is overdue."""

    outstanding: Decimal
    overdue: Decimal
    invoice_count: int
    overdue_count: int

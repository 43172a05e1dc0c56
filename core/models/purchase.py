"""
Purchase order domain models.

Purchase lines name products by SKU; unknown SKUs become new raw-material
catalog entries when the order is created.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from core.gst import PaymentStatus


class PurchaseStatus(str, Enum):
    """Purchase order lifecycle status."""

    ORDERED = "ordered"
    RECEIVED = "received"
    CANCELLED = "cancelled"


class PurchaseItemInput(BaseModel):
    """One line on a new purchase order."""

    product_name: str = Field(..., min_length=1, max_length=255)
    sku: str = Field(..., min_length=1, max_length=100)
    quantity: Decimal = Field(..., gt=0)
    unit: str = Field("piece", max_length=30)
    unit_price: Decimal = Field(..., ge=0)
    gst_rate: Decimal = Field(Decimal("18"), ge=0, le=100)
    hsn_code: str | None = Field(None, max_length=20)


class PurchaseCreate(BaseModel):
    """Data required to create a purchase order."""

    supplier_id: UUID
    items: list[PurchaseItemInput]
    order_date: date | None = None
    expected_date: date | None = None
    notes: str | None = Field(None, max_length=2000)

    @model_validator(mode="after")
    def require_items(self) -> "PurchaseCreate":
        """Reject purchase orders without lines."""
        if not self.items:
            raise ValueError("At least one item is required")
        return self


class PurchaseItem(BaseModel):
    """Purchase line as stored. total includes the line's tax."""

    id: UUID
    purchase_id: UUID
    product_id: UUID
    product_name: str
    hsn_code: str | None
    quantity: Decimal
    unit_price: Decimal
    gst_rate: Decimal
    cgst_rate: Decimal
    sgst_rate: Decimal
    igst_rate: Decimal
    cgst_amount: Decimal
    sgst_amount: Decimal
    igst_amount: Decimal
    total: Decimal
    created_at: datetime

    model_config = {"from_attributes": True}

    @property
    def subtotal(self) -> Decimal:
        return self.quantity * self.unit_price


class Purchase(BaseModel):
    """Full purchase order entity as stored."""

    id: UUID
    purchase_number: str
    supplier_id: UUID
    status: PurchaseStatus
    payment_status: PaymentStatus
    order_date: date
    expected_date: date | None
    received_date: date | None
    subtotal: Decimal
    cgst: Decimal
    sgst: Decimal
    igst: Decimal
    tax: Decimal
    total: Decimal
    amount_paid: Decimal
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
        """Remaining amount we owe the supplier."""
        return self.total - self.amount_paid

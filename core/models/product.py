"""
Product catalog domain models.

Prices and quantities are Decimal. gst_rate is a percentage (18 = 18%).
Quantity on hand may go negative when stock is sold before it is received.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field


class InventoryType(str, Enum):
    """What a catalog item is held for."""

    FINISHED_GOOD = "finished_good"
    RAW_MATERIAL = "raw_material"


class ProductCreate(BaseModel):
    """Data required to create a product."""

    name: str = Field(..., min_length=1, max_length=255)
    sku: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(None, max_length=1000)
    barcode: str | None = Field(None, max_length=100)
    cost_price: Decimal = Field(Decimal("0"), ge=0)
    selling_price: Decimal = Field(Decimal("0"), ge=0)
    quantity: Decimal = Decimal("0")
    reorder_level: Decimal = Field(Decimal("10"), ge=0)
    unit: str = Field("piece", max_length=30)
    hsn_code: str | None = Field(None, max_length=20)
    gst_rate: Decimal = Field(Decimal("18"), ge=0, le=100)
    color: str | None = Field(None, max_length=50)
    inventory_type: InventoryType = InventoryType.FINISHED_GOOD


class ProductUpdate(BaseModel):
    """
    Data that can be updated on a product. All fields optional.

    Quantity is not here: stock changes only through movements
    (InventoryService.adjust or document side effects).
    """

    name: str | None = Field(None, min_length=1, max_length=255)
    sku: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = Field(None, max_length=1000)
    barcode: str | None = Field(None, max_length=100)
    cost_price: Decimal | None = Field(None, ge=0)
    selling_price: Decimal | None = Field(None, ge=0)
    reorder_level: Decimal | None = Field(None, ge=0)
    unit: str | None = Field(None, max_length=30)
    hsn_code: str | None = Field(None, max_length=20)
    gst_rate: Decimal | None = Field(None, ge=0, le=100)
    color: str | None = Field(None, max_length=50)
    inventory_type: InventoryType | None = None


class Product(BaseModel):
    """Full product entity as stored."""

    id: UUID
    name: str
    sku: str
    description: str | None
    barcode: str | None
    cost_price: Decimal
    selling_price: Decimal
    quantity: Decimal
    reorder_level: Decimal
    unit: str
    hsn_code: str | None
    gst_rate: Decimal
    color: str | None
    inventory_type: InventoryType
    created_by: UUID | None
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime | None = None

    model_config = {"from_attributes": True}

    @property
    def is_low_stock(self) -> bool:
        """At or below the reorder level."""
        return self.quantity <= self.reorder_level

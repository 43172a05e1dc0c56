"""Stock ledger entries. Append-only record of every change to quantity on hand."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field


class MovementType(str, Enum):
    """Direction of a stock movement."""

    IN = "in"                  # Purchase received or paid
    OUT = "out"                # Invoice paid
    ADJUSTMENT = "adjustment"  # Manual stock count correction


class StockAdjustment(BaseModel):
    """Manual correction of quantity on hand to a counted value."""

    product_id: UUID
    counted_quantity: Decimal
    reason: str = Field(..., min_length=1, max_length=500)


class StockMovement(BaseModel):
    """Full stock movement entity as stored."""

    id: UUID
    product_id: UUID
    type: MovementType
    quantity: Decimal
    reason: str | None
    invoice_id: UUID | None = None
    purchase_id: UUID | None = None
    created_by: UUID | None
    created_at: datetime

    model_config = {"from_attributes": True}

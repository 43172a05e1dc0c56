"""Payments recorded against invoices and purchases."""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field


class PaymentCreate(BaseModel):
    """
    A payment to record against a document.

    The amount is checked against the outstanding balance by the service,
    not here, so the caller gets the balance in the error message.
    """

    amount: Decimal
    payment_date: date | None = None
    payment_method_id: UUID | None = None
    reference_number: str | None = Field(None, max_length=100)
    notes: str | None = Field(None, max_length=1000)


class Payment(BaseModel):
    """A recorded payment. Exactly one of invoice_id / purchase_id is set."""

    id: UUID
    invoice_id: UUID | None = None
    purchase_id: UUID | None = None
    amount: Decimal
    payment_date: date
    payment_method_id: UUID | None
    reference_number: str | None
    notes: str | None
    created_by: UUID | None
    created_at: datetime

    model_config = {"from_attributes": True}

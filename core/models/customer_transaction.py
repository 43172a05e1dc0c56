"""Customer account entries recorded outside invoices."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field


class CustomerTransactionType(str, Enum):
    """Kind of account entry."""

    PAYMENT = "payment"
    OPENING_BALANCE = "opening_balance"
    CREDIT_NOTE = "credit_note"
    OTHER = "other"

    @property
    def reduces_balance(self) -> bool:
        """Payments and credit notes lower what the customer owes."""
        return self in (CustomerTransactionType.PAYMENT, CustomerTransactionType.CREDIT_NOTE)


class CustomerTransactionCreate(BaseModel):
    """Data required to record a customer account entry."""

    type: CustomerTransactionType
    amount: Decimal = Field(..., gt=0)
    reference: str | None = Field(None, max_length=100)
    notes: str | None = Field(None, max_length=1000)
    transaction_date: date | None = None
    payment_method_id: UUID | None = None


class CustomerTransaction(BaseModel):
    """Customer account entry as stored."""

    id: UUID
    customer_id: UUID
    type: CustomerTransactionType
    amount: Decimal
    reference: str | None
    notes: str | None
    transaction_date: date
    payment_method_id: UUID | None
    created_by: UUID | None
    created_at: datetime

    model_config = {"from_attributes": True}

    @property
    def signed_amount(self) -> Decimal:
        """Effect on the customer's balance."""
        return -self.amount if self.type.reduces_balance else self.amount

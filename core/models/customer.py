"""Customer domain models."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field, EmailStr


class CustomerCreate(BaseModel):
    """Data required to create a customer."""

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr | None = None
    phone: str | None = Field(None, max_length=50)
    address: str | None = Field(None, max_length=500)
    state: str | None = Field(None, max_length=100)
    gstin: str | None = Field(None, max_length=15)
    opening_balance: Decimal = Decimal("0")


class CustomerUpdate(BaseModel):
    """Data that can be updated on a customer. All fields optional."""

    name: str | None = Field(None, min_length=1, max_length=255)
    email: EmailStr | None = None
    phone: str | None = Field(None, max_length=50)
    address: str | None = Field(None, max_length=500)
    state: str | None = Field(None, max_length=100)
    gstin: str | None = Field(None, max_length=15)
    opening_balance: Decimal | None = None


class Customer(BaseModel):
    """Full customer entity as stored."""

    id: UUID
    name: str
    email: str | None
    phone: str | None
    address: str | None
    state: str | None
    gstin: str | None
    opening_balance: Decimal
    created_by: UUID | None
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime | None = None

    model_config = {"from_attributes": True}


class PartyBalance(BaseModel):
    """Outstanding balance with a customer or supplier."""

    party_id: UUID
    opening_balance: Decimal
    documents_total: Decimal
    amount_paid: Decimal
    account_entries: Decimal = Decimal("0")

    @property
    def balance(self) -> Decimal:
        """Positive: money owed to us (customer) or by us (supplier). Negative: advance."""
        return self.opening_balance + self.documents_total - self.amount_paid + self.account_entries

"""Supplier domain models."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field, EmailStr


class SupplierCreate(BaseModel):
    """Data required to create a supplier."""

    name: str = Field(..., min_length=1, max_length=255)
    contact_person: str | None = Field(None, max_length=255)
    email: EmailStr | None = None
    phone: str | None = Field(None, max_length=50)
    address: str | None = Field(None, max_length=500)
    state: str | None = Field(None, max_length=100)
    gstin: str | None = Field(None, max_length=15)
    opening_balance: Decimal = Decimal("0")


class SupplierUpdate(BaseModel):
    """Data that can be updated on a supplier. All fields optional."""

    name: str | None = Field(None, min_length=1, max_length=255)
    contact_person: str | None = Field(None, max_length=255)
    email: EmailStr | None = None
    phone: str | None = Field(None, max_length=50)
    address: str | None = Field(None, max_length=500)
    state: str | None = Field(None, max_length=100)
    gstin: str | None = Field(None, max_length=15)
    opening_balance: Decimal | None = None


class Supplier(BaseModel):
    """Full supplier entity as stored."""

    id: UUID
    name: str
    contact_person: str | None
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

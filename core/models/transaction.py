"""Accounting ledger: income/expense transactions and payment methods."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field


class TransactionType(str, Enum):
    """Which side of the ledger."""

    INCOME = "income"
    EXPENSE = "expense"


class TransactionCreate(BaseModel):
    """Data required to record a ledger transaction."""

    type: TransactionType
    category: str = Field(..., min_length=1, max_length=100)
    amount: Decimal = Field(..., gt=0)
    description: str | None = Field(None, max_length=1000)
    transaction_date: date | None = None
    payment_method_id: UUID | None = None
    reference_number: str | None = Field(None, max_length=100)
    invoice_id: UUID | None = None
    purchase_id: UUID | None = None


class TransactionUpdate(BaseModel):
    """Data that can be updated on a transaction. All fields optional."""

    type: TransactionType | None = None
    category: str | None = Field(None, min_length=1, max_length=100)
    amount: Decimal | None = Field(None, gt=0)
    description: str | None = Field(None, max_length=1000)
    transaction_date: date | None = None
    payment_method_id: UUID | None = None
    reference_number: str | None = Field(None, max_length=100)


class Transaction(BaseModel):
    """Full ledger transaction as stored."""

    id: UUID
    type: TransactionType
    category: str
    amount: Decimal
    description: str | None
    transaction_date: date
    payment_method_id: UUID | None
    reference_number: str | None
    invoice_id: UUID | None = None
    purchase_id: UUID | None = None
    created_by: UUID | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class LedgerSummary(BaseModel):
    """Income and expense totals over a period."""

    income: Decimal
    expense: Decimal
    net: Decimal


class PaymentMethodCreate(BaseModel):
    """Data required to add a payment method."""

    name: str = Field(..., min_length=1, max_length=100)
    is_active: bool = True


class PaymentMethod(BaseModel):
    """Payment method (cash, UPI, bank transfer...) as stored."""

    id: UUID
    name: str
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class ExpenseCategoryCreate(BaseModel):
    """Data required to add an expense category."""

    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    is_active: bool = True


class ExpenseCategory(BaseModel):
    """Named category offered for expense entries (rent, salaries...)."""

    id: UUID
    name: str
    description: str | None
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}

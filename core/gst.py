"""
GST (Indian goods and services tax) calculation.

Pure functions, no I/O. All amounts are Decimal so tax splits are exact:
an intrastate tax is divided into CGST and SGST halves that always sum back
to the whole, never independently rounded.

Rates are percentages: 18 means 18%.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Iterable

ZERO = Decimal("0")
HUNDRED = Decimal("100")
TWO = Decimal("2")


class PaymentStatus(str, Enum):
    """How much of a document's total has been paid."""

    UNPAID = "unpaid"
    PARTIAL = "partial"
    PAID = "paid"


@dataclass(frozen=True)
class TaxBreakdown:
    """Tax on one amount at one rate."""

    amount: Decimal
    rate: Decimal
    cgst: Decimal
    sgst: Decimal
    igst: Decimal
    cgst_rate: Decimal
    sgst_rate: Decimal
    igst_rate: Decimal

    @property
    def tax(self) -> Decimal:
        return self.cgst + self.sgst + self.igst


@dataclass(frozen=True)
class GSTCalculation:
    """Document-level calculation at a single rate."""

    subtotal: Decimal
    cgst: Decimal
    sgst: Decimal
    igst: Decimal
    total: Decimal
    is_interstate: bool

    @property
    def tax(self) -> Decimal:
        return self.cgst + self.sgst + self.igst


@dataclass(frozen=True)
class TaxTotals:
    """Running totals across the lines of a document."""

    subtotal: Decimal = ZERO
    cgst: Decimal = ZERO
    sgst: Decimal = ZERO
    igst: Decimal = ZERO

    @property
    def tax(self) -> Decimal:
        return self.cgst + self.sgst + self.igst

    @property
    def total(self) -> Decimal:
        return self.subtotal + self.tax


def _as_decimal(value, name: str) -> Decimal:
    result = value if isinstance(value, Decimal) else Decimal(str(value))
    if result < ZERO:
        raise ValueError(f"{name} cannot be negative")
    return result


def normalize_state(state: str | None) -> str:
    """Canonical form of a state name for comparison."""
    return (state or "").strip().lower()


def is_interstate(seller_state: str | None, counterparty_state: str | None) -> bool:
    """
    Whether a supply crosses state lines.

    Case-insensitive, whitespace-insensitive comparison. If either state is
    missing or blank the supply is treated as intrastate, so an incomplete
    customer or supplier record never produces IGST.
    """
    seller = normalize_state(seller_state)
    counterparty = normalize_state(counterparty_state)
    if not seller or not counterparty:
        return False
    return seller != counterparty


def calculate_item_gst(amount, rate, interstate: bool) -> TaxBreakdown:
    """
    Tax on one line.

    Args:
        amount: Untaxed line amount (quantity x unit price), >= 0
        rate: GST rate in percent, >= 0
        interstate: True for IGST, False for CGST + SGST

    Returns:
        TaxBreakdown with cgst + sgst + igst == amount * rate / 100 exactly

    Raises:
        ValueError: If amount or rate is negative
    """
    amount = _as_decimal(amount, "amount")
    rate = _as_decimal(rate, "rate")
    tax = amount * rate / HUNDRED

    if interstate:
        return TaxBreakdown(
            amount=amount,
            rate=rate,
            cgst=ZERO,
            sgst=ZERO,
            igst=tax,
            cgst_rate=ZERO,
            sgst_rate=ZERO,
            igst_rate=rate,
        )

    half = tax / TWO
    half_rate = rate / TWO
    return TaxBreakdown(
        amount=amount,
        rate=rate,
        cgst=half,
        sgst=half,
        igst=ZERO,
        cgst_rate=half_rate,
        sgst_rate=half_rate,
        igst_rate=ZERO,
    )


def calculate_gst(subtotal, rate, interstate: bool) -> GSTCalculation:
    """Tax and grand total for a whole document taxed at one rate."""
    breakdown = calculate_item_gst(subtotal, rate, interstate)
    return GSTCalculation(
        subtotal=breakdown.amount,
        cgst=breakdown.cgst,
        sgst=breakdown.sgst,
        igst=breakdown.igst,
        total=breakdown.amount + breakdown.tax,
        is_interstate=interstate,
    )


def sum_breakdowns(breakdowns: Iterable[TaxBreakdown]) -> TaxTotals:
    """Aggregate line breakdowns into document totals."""
    subtotal = cgst = sgst = igst = ZERO
    for b in breakdowns:
        subtotal += b.amount
        cgst += b.cgst
        sgst += b.sgst
        igst += b.igst
    return TaxTotals(subtotal=subtotal, cgst=cgst, sgst=sgst, igst=igst)


def payment_status_for(amount_paid, total) -> PaymentStatus:
    """
    Payment status from cumulative amount paid.

    0 → unpaid, strictly between 0 and total → partial, >= total → paid.
    A zero-total document with nothing paid is unpaid.
    """
    amount_paid = Decimal(str(amount_paid))
    total = Decimal(str(total))

    if amount_paid <= ZERO:
        return PaymentStatus.UNPAID
    if amount_paid >= total:
        return PaymentStatus.PAID
    return PaymentStatus.PARTIAL

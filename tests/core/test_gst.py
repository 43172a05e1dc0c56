"""Tests for GST calculation."""

from decimal import Decimal

import pytest

from core.gst import (
    PaymentStatus,
    TaxBreakdown,
    calculate_gst,
    calculate_item_gst,
    is_interstate,
    normalize_state,
    payment_status_for,
    sum_breakdowns,
)


class TestCalculateItemGst:
    """Test per-line tax breakdown."""

    def test_intrastate_splits_evenly(self):
        """1000 at 18% within a state is 90 CGST + 90 SGST."""
        b = calculate_item_gst(Decimal("1000"), Decimal("18"), interstate=False)

        assert b.cgst == Decimal("90")
        assert b.sgst == Decimal("90")
        assert b.igst == Decimal("0")
        assert b.tax == Decimal("180")
        assert b.cgst_rate == Decimal("9")
        assert b.sgst_rate == Decimal("9")
        assert b.igst_rate == Decimal("0")

    def test_interstate_is_all_igst(self):
        """1000 at 18% across states is 180 IGST."""
        b = calculate_item_gst(Decimal("1000"), Decimal("18"), interstate=True)

        assert b.cgst == Decimal("0")
        assert b.sgst == Decimal("0")
        assert b.igst == Decimal("180")
        assert b.igst_rate == Decimal("18")
        assert b.cgst_rate == Decimal("0")

    def test_amount_is_echoed(self):
        """The taxed amount is returned unchanged."""
        b = calculate_item_gst(Decimal("123.45"), Decimal("12"), interstate=False)

        assert b.amount == Decimal("123.45")
        assert b.rate == Decimal("12")

    @pytest.mark.parametrize("amount,rate", [
        ("0.01", "18"),
        ("333.33", "5"),
        ("99.99", "28"),
        ("1", "0.25"),
        ("7", "3"),
    ])
    @pytest.mark.parametrize("interstate", [True, False])
    def test_components_sum_to_exact_tax(self, amount, rate, interstate):
        """Odd amounts never lose a paisa in the split."""
        amount, rate = Decimal(amount), Decimal(rate)
        b = calculate_item_gst(amount, rate, interstate)

        assert b.cgst + b.sgst + b.igst == amount * rate / Decimal("100")

    def test_intrastate_halves_are_equal(self):
        """Halves are never rounded independently."""
        b = calculate_item_gst(Decimal("0.01"), Decimal("18"), interstate=False)

        assert b.cgst == b.sgst
        assert b.cgst + b.sgst == Decimal("0.0018")

    def test_zero_rate_gives_zero_tax(self):
        """Exempt goods carry no tax."""
        b = calculate_item_gst(Decimal("500"), Decimal("0"), interstate=False)

        assert b.tax == Decimal("0")

    def test_zero_amount_gives_zero_tax(self):
        """Nothing to tax."""
        b = calculate_item_gst(Decimal("0"), Decimal("18"), interstate=True)

        assert b.tax == Decimal("0")

    def test_accepts_int_and_str(self):
        """Plain numbers are converted to Decimal."""
        b = calculate_item_gst(1000, "18", interstate=False)

        assert isinstance(b.cgst, Decimal)
        assert b.cgst == Decimal("90")

    def test_negative_amount_raises(self):
        """Negative amounts are rejected."""
        with pytest.raises(ValueError, match="amount"):
            calculate_item_gst(Decimal("-1"), Decimal("18"), interstate=False)

    def test_negative_rate_raises(self):
        """Negative rates are rejected."""
        with pytest.raises(ValueError, match="rate"):
            calculate_item_gst(Decimal("100"), Decimal("-18"), interstate=False)


class TestCalculateGst:
    """Test document-level calculation."""

    def test_total_includes_tax(self):
        """Total is subtotal plus tax."""
        calc = calculate_gst(Decimal("1000"), Decimal("18"), interstate=False)

        assert calc.subtotal == Decimal("1000")
        assert calc.tax == Decimal("180")
        assert calc.total == Decimal("1180")
        assert calc.is_interstate is False

    def test_interstate_flag_carried(self):
        """Interstate calculation records the flag and uses IGST."""
        calc = calculate_gst(Decimal("1000"), Decimal("18"), interstate=True)

        assert calc.igst == Decimal("180")
        assert calc.is_interstate is True


class TestIsInterstate:
    """Test the interstate rule."""

    def test_same_state(self):
        assert is_interstate("Karnataka", "Karnataka") is False

    def test_different_states(self):
        assert is_interstate("Karnataka", "Maharashtra") is True

    def test_ignores_case_and_whitespace(self):
        """State names typed differently still match."""
        assert is_interstate("  Karnataka", "KARNATAKA ") is False

    @pytest.mark.parametrize("seller,counterparty", [
        (None, "Karnataka"),
        ("Karnataka", None),
        ("Karnataka", ""),
        ("   ", "Maharashtra"),
        (None, None),
    ])
    def test_missing_state_is_intrastate(self, seller, counterparty):
        """An incomplete record never produces IGST."""
        assert is_interstate(seller, counterparty) is False

    def test_normalize_state(self):
        assert normalize_state("  Tamil Nadu ") == "tamil nadu"
        assert normalize_state(None) == ""


class TestSumBreakdowns:
    """Test aggregation across lines."""

    def test_sums_components(self):
        """Document totals are the sum of line components."""
        lines = [
            calculate_item_gst(Decimal("1000"), Decimal("18"), interstate=False),
            calculate_item_gst(Decimal("500"), Decimal("5"), interstate=False),
        ]

        totals = sum_breakdowns(lines)

        assert totals.subtotal == Decimal("1500")
        assert totals.cgst == Decimal("102.5")
        assert totals.sgst == Decimal("102.5")
        assert totals.igst == Decimal("0")
        assert totals.tax == Decimal("205")
        assert totals.total == Decimal("1705")

    def test_empty_is_zero(self):
        totals = sum_breakdowns([])

        assert totals.subtotal == Decimal("0")
        assert totals.total == Decimal("0")

    def test_accepts_generator(self):
        totals = sum_breakdowns(
            calculate_item_gst(Decimal(n), Decimal("12"), interstate=True) for n in ("100", "200")
        )

        assert totals.igst == Decimal("36")

    def test_breakdown_is_immutable(self):
        b = calculate_item_gst(Decimal("100"), Decimal("18"), interstate=False)

        assert isinstance(b, TaxBreakdown)
        with pytest.raises(AttributeError):
            b.cgst = Decimal("0")


class TestPaymentStatusFor:
    """Test the payment status rule."""

    def test_nothing_paid(self):
        assert payment_status_for(Decimal("0"), Decimal("500")) == PaymentStatus.UNPAID

    def test_partly_paid(self):
        assert payment_status_for(Decimal("200"), Decimal("500")) == PaymentStatus.PARTIAL

    def test_fully_paid(self):
        assert payment_status_for(Decimal("500"), Decimal("500")) == PaymentStatus.PAID

    def test_overpaid_counts_as_paid(self):
        assert payment_status_for(Decimal("600"), Decimal("500")) == PaymentStatus.PAID

    def test_zero_total_nothing_paid_is_unpaid(self):
        assert payment_status_for(Decimal("0"), Decimal("0")) == PaymentStatus.UNPAID

    def test_accepts_plain_numbers(self):
        assert payment_status_for(200, "500") == PaymentStatus.PARTIAL

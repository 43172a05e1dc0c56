"""Tests for ProductService."""

from decimal import Decimal
from uuid import uuid4

import pytest

from core.models import InventoryType, ProductCreate, ProductUpdate


class TestCreate:
    """Tests for ProductService.create."""

    def test_creates_with_defaults(self, product_service, test_user_id):
        product = product_service.create(ProductCreate(name="Nut", sku="NUT-1"), test_user_id)

        assert product.gst_rate == Decimal("18")
        assert product.reorder_level == Decimal("10")
        assert product.unit == "piece"
        assert product.inventory_type == InventoryType.FINISHED_GOOD

    def test_duplicate_sku_rejected(self, product_service, product, test_user_id):
        with pytest.raises(ValueError, match="already exists"):
            product_service.create(ProductCreate(name="Copy", sku="brk-001"), test_user_id)

    @pytest.mark.parametrize("rate", ["-1", "101"])
    def test_gst_rate_bounds(self, rate):
        from pydantic import ValidationError

        with pytest.raises(ValidationError):
            ProductCreate(name="X", sku="X", gst_rate=Decimal(rate))


class TestLookup:
    """Tests for lookups by id, SKU and barcode."""

    def test_find_by_sku_ignores_case_and_whitespace(self, product_service, product):
        assert product_service.find_by_sku("  brk-001 ").id == product.id

    def test_find_by_sku_requires_exact_match(self, product_service, product):
        """A SKU that merely contains the query is not a match."""
        assert product_service.find_by_sku("BRK") is None

    def test_find_by_sku_blank(self, product_service, product):
        assert product_service.find_by_sku("   ") is None

    def test_find_by_barcode(self, product_service, test_user_id):
        product = product_service.create(
            ProductCreate(name="Scanned", sku="SCN-1", barcode="8901234567890"), test_user_id
        )

        assert product_service.find_by_barcode("8901234567890").id == product.id
        assert product_service.find_by_barcode("0000") is None

    def test_search_by_name(self, product_service, product, second_product):
        assert [p.id for p in product_service.search("gasket")] == [second_product.id]

    def test_low_stock(self, product_service, product, second_product):
        assert [p.id for p in product_service.list_low_stock()] == [second_product.id]


class TestUpdate:
    """Tests for ProductService.update."""

    def test_updates_price(self, product_service, product, test_user_id):
        updated = product_service.update(product.id, ProductUpdate(selling_price=Decimal("1100")), test_user_id)

        assert updated.selling_price == Decimal("1100")
        assert updated.quantity == Decimal("50")

    def test_sku_collision_rejected(self, product_service, product, second_product, test_user_id):
        with pytest.raises(ValueError, match="already exists"):
            product_service.update(second_product.id, ProductUpdate(sku="BRK-001"), test_user_id)

    def test_keeping_own_sku_allowed(self, product_service, product, test_user_id):
        updated = product_service.update(product.id, ProductUpdate(sku="BRK-001", name="Bracket"), test_user_id)

        assert updated.name == "Bracket"

    def test_unknown_raises(self, product_service, test_user_id):
        with pytest.raises(ValueError, match="not found"):
            product_service.update(uuid4(), ProductUpdate(name="X"), test_user_id)


class TestDelete:
    """Tests for ProductService.delete."""

    def test_soft_delete(self, product_service, product, test_user_id):
        assert product_service.delete(product.id, test_user_id) is True
        assert product_service.get_by_id(product.id) is None
        assert product_service.find_by_sku("BRK-001") is None

    def test_unknown_returns_false(self, product_service, test_user_id):
        assert product_service.delete(uuid4(), test_user_id) is False

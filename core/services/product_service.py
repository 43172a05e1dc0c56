"""
Product service for the inventory catalog.

Manages catalog items: pricing, GST rate, HSN code and reorder level.
Quantity on hand is never written here directly; it changes only through
InventoryService movements.
"""

import logging
from decimal import Decimal
from uuid import UUID, uuid4

from clients.postgres_client import PostgresClient, TableOperations
from core.audit import AuditLogger, AuditAction
from core.models import Product, ProductCreate, ProductUpdate, InventoryType, PurchaseItemInput
from utils.timezone import now_utc

logger = logging.getLogger(__name__)

_UPDATABLE_COLUMNS = {
    "name", "sku", "description", "barcode",
    "cost_price", "selling_price", "reorder_level", "unit",
    "hsn_code", "gst_rate", "color", "inventory_type",
}

# Reorder level given to catalog entries created from purchase orders
DEFAULT_REORDER_LEVEL = Decimal("10")


class ProductService:
    """Service for product catalog operations."""

    def __init__(self, postgres: PostgresClient, audit: AuditLogger):
        self.postgres = postgres
        self.audit = audit

    def create(self, data: ProductCreate, actor_id: UUID) -> Product:
        """
        Create a new product in the catalog.

        Raises:
            ValueError: If another product already uses the SKU
        """
        if self.find_by_sku(data.sku) is not None:
            raise ValueError(f"Product with SKU '{data.sku}' already exists")

        now = now_utc()
        row = self.postgres.insert(
            "products",
            {
                "id": uuid4(),
                **data.model_dump(),
                "created_by": actor_id,
                "created_at": now,
                "updated_at": now,
            },
        )
        product = Product.model_validate(row)

        self.audit.log_change(
            entity_type="product",
            entity_id=product.id,
            action=AuditAction.CREATE,
            changes={"created": data.model_dump(mode="json", exclude_none=True)},
            actor_id=actor_id,
        )

        return product

    def create_from_purchase_item(
        self, db: TableOperations, item: PurchaseItemInput, actor_id: UUID
    ) -> Product:
        """
        Minimal raw-material entry for a SKU first seen on a purchase order.

        Runs on the caller's transaction. Starts at zero quantity: stock
        arrives only when the purchase is received or paid.
        """
        now = now_utc()
        row = db.insert(
            "products",
            {
                "id": uuid4(),
                "name": item.product_name,
                "sku": item.sku,
                "description": "Raw Material",
                "barcode": None,
                "cost_price": item.unit_price,
                "selling_price": item.unit_price,
                "quantity": Decimal("0"),
                "reorder_level": DEFAULT_REORDER_LEVEL,
                "unit": item.unit,
                "hsn_code": item.hsn_code or "",
                "gst_rate": item.gst_rate,
                "color": None,
                "inventory_type": InventoryType.RAW_MATERIAL,
                "created_by": actor_id,
                "created_at": now,
                "updated_at": now,
            },
        )
        logger.info("Created raw material product for SKU %s", item.sku)
        return Product.model_validate(row)

    def get_by_id(self, product_id: UUID, db: TableOperations | None = None) -> Product | None:
        """Product by ID if found and not deleted, None otherwise."""
        row = (db or self.postgres).select_one("products", {"id": product_id, "deleted_at": None})
        if row is None:
            return None
        return Product.model_validate(row)

    def find_by_sku(self, sku: str, db: TableOperations | None = None) -> Product | None:
        """Product whose SKU matches, ignoring case and surrounding whitespace."""
        wanted = sku.strip().lower()
        if not wanted:
            return None

        rows = (db or self.postgres).select("products", {"deleted_at": None}, search={"sku": wanted})
        for row in rows:
            if row["sku"].strip().lower() == wanted:
                return Product.model_validate(row)
        return None

    def find_by_barcode(self, barcode: str) -> Product | None:
        """Product with exactly this barcode."""
        row = self.postgres.select_one("products", {"barcode": barcode.strip(), "deleted_at": None})
        if row is None:
            return None
        return Product.model_validate(row)

    def list_all(self, limit: int | None = None, offset: int = 0) -> list[Product]:
        """Non-deleted products ordered by name."""
        rows = self.postgres.select(
            "products", {"deleted_at": None}, order_by="name", limit=limit, offset=offset
        )
        return [Product.model_validate(row) for row in rows]

    def search(self, query: str, limit: int = 20) -> list[Product]:
        """Products whose name contains the query."""
        rows = self.postgres.select(
            "products", {"deleted_at": None}, search={"name": query}, order_by="name", limit=limit
        )
        return [Product.model_validate(row) for row in rows]

    def list_low_stock(self) -> list[Product]:
        """Products at or below their reorder level."""
        return [p for p in self.list_all() if p.is_low_stock]

    def update(self, product_id: UUID, data: ProductUpdate, actor_id: UUID) -> Product:
        """
        Update product fields.

        Historical invoice and purchase lines keep the price and rate they
        were created with.

        Raises:
            ValueError: If product not found or the new SKU is taken
        """
        current = self.get_by_id(product_id)
        if current is None:
            raise ValueError(f"Product {product_id} not found")

        updates = data.model_dump(exclude_none=True)
        if not updates:
            return current

        for field in updates:
            if field not in _UPDATABLE_COLUMNS:
                logger.warning(f"Attempted to update unknown field '{field}' on product {product_id}")

        if "sku" in updates:
            other = self.find_by_sku(updates["sku"])
            if other is not None and other.id != product_id:
                raise ValueError(f"Product with SKU '{updates['sku']}' already exists")

        valid_updates = {k: v for k, v in updates.items() if k in _UPDATABLE_COLUMNS}
        if not valid_updates:
            return current

        row = self.postgres.update("products", product_id, {**valid_updates, "updated_at": now_utc()})
        updated = Product.model_validate(row)

        self.audit.log_update("product", current, updated, actor_id)

        return updated

    def delete(self, product_id: UUID, actor_id: UUID) -> bool:
        """
        Soft delete a product.

        Returns:
            True if deleted, False if not found
        """
        current = self.get_by_id(product_id)
        if current is None:
            return False

        now = now_utc()
        self.postgres.update("products", product_id, {"deleted_at": now, "updated_at": now})

        self.audit.log_change(
            entity_type="product",
            entity_id=product_id,
            action=AuditAction.DELETE,
            changes={"deleted": current.model_dump(mode="json")},
            actor_id=actor_id,
        )

        return True

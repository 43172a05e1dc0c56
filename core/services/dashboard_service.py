"""Headline numbers for the dashboard."""

import logging
from decimal import Decimal

from pydantic import BaseModel

from clients.postgres_client import PostgresClient
from core.models import InvoiceStatus, PaymentStatus, Product

logger = logging.getLogger(__name__)


class DashboardStats(BaseModel):
    """Counts and totals shown on the dashboard."""

    total_products: int
    low_stock_products: int
    total_invoices: int
    pending_invoices: int
    revenue: Decimal
    total_customers: int


class DashboardService:
    """Read-only aggregates over the account's data."""

    def __init__(self, postgres: PostgresClient):
        self.postgres = postgres

    def stats(self) -> DashboardStats:
        """
        Current dashboard statistics.

        Revenue is the total of fully paid invoices. Pending invoices are
        those not yet fully paid, excluding cancelled ones.
        """
        products = [
            Product.model_validate(row)
            for row in self.postgres.select("products", {"deleted_at": None})
        ]
        invoices = self.postgres.select("invoices", {"deleted_at": None})
        customers = self.postgres.select("customers", {"deleted_at": None})

        live = [i for i in invoices if i["status"] != InvoiceStatus.CANCELLED.value]
        paid = [i for i in live if i["payment_status"] == PaymentStatus.PAID.value]

        return DashboardStats(
            total_products=len(products),
            low_stock_products=sum(1 for p in products if p.is_low_stock),
            total_invoices=len(invoices),
            pending_invoices=len(live) - len(paid),
            revenue=sum((Decimal(i["total"]) for i in paid), Decimal("0")),
            total_customers=len(customers),
        )

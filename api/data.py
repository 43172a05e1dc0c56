"""GET /api/data: one read endpoint for every record type."""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Query, Request

from api.base import request_id_of, success_response
from auth.permissions import Access, require_access
from core.models import InvoiceStatus, PurchaseStatus, TransactionType


# Query type -> resource name used for role checks
TYPE_RESOURCES = {
    "company": "company",
    "customers": "customer",
    "customer_transactions": "customer",
    "suppliers": "supplier",
    "products": "product",
    "invoices": "invoice",
    "purchases": "purchase",
    "transactions": "transaction",
    "payment_methods": "payment_method",
    "expense_categories": "expense_category",
    "stock_movements": "stock_movement",
    "dashboard": "dashboard",
}


def _dump_all(items) -> list[dict]:
    return [item.model_dump(mode="json") for item in items]


def create_data_router(services: dict) -> APIRouter:
    router = APIRouter()

    company_svc = services["company"]
    customer_svc = services["customer"]
    supplier_svc = services["supplier"]
    product_svc = services["product"]
    inventory_svc = services["inventory"]
    invoice_svc = services["invoice"]
    purchase_svc = services["purchase"]
    accounting_svc = services["accounting"]
    dashboard_svc = services["dashboard"]

    def read(type, id, search, filter, includes, customer_id, supplier_id, product_id, sku, barcode,
             start, end, limit, offset):
        if type == "company":
            profile = company_svc.get()
            return profile.model_dump(mode="json") if profile else None

        if type == "customers":
            return _handle_parties(customer_svc, "Customer", id, search, includes, limit, offset)

        if type == "customer_transactions":
            if not customer_id:
                raise ValueError("customer_id is required for customer_transactions")
            return _dump_all(customer_svc.list_transactions(UUID(customer_id)))

        if type == "suppliers":
            return _handle_parties(supplier_svc, "Supplier", id, search, includes, limit, offset)

        if type == "products":
            return _handle_products(product_svc, id, search, filter, sku, barcode, limit, offset)

        if type == "invoices":
            return _handle_invoices(invoice_svc, id, filter, includes, customer_id, start, end, limit, offset)

        if type == "purchases":
            return _handle_purchases(purchase_svc, id, filter, includes, supplier_id, start, end, limit, offset)

        if type == "transactions":
            return _handle_transactions(accounting_svc, filter, start, end, limit)

        if type == "payment_methods":
            return _dump_all(accounting_svc.list_payment_methods(include_inactive=filter == "all"))

        if type == "expense_categories":
            return _dump_all(accounting_svc.list_expense_categories(include_inactive=filter == "all"))

        if type == "stock_movements":
            return _dump_all(inventory_svc.list_movements(UUID(product_id) if product_id else None, limit))

        return dashboard_svc.stats().model_dump(mode="json")

    @router.get("/data")
    async def get_data(
        request: Request,
        type: str | None = Query(None),
        id: str | None = Query(None),
        search: str | None = Query(None),
        filter: str | None = Query(None),
        include: str | None = Query(None),
        customer_id: str | None = Query(None),
        supplier_id: str | None = Query(None),
        product_id: str | None = Query(None),
        sku: str | None = Query(None),
        barcode: str | None = Query(None),
        start: date | None = Query(None),
        end: date | None = Query(None),
        limit: int = Query(50, ge=1, le=500),
        offset: int = Query(0, ge=0),
    ):
        if type is None:
            raise ValueError("'type' query parameter is required")

        if type not in TYPE_RESOURCES:
            raise ValueError(f"Unknown type '{type}'. Valid types: {', '.join(sorted(TYPE_RESOURCES))}")

        require_access(request.state.role, TYPE_RESOURCES[type], Access.READ)

        includes = set(include.split(",")) if include else set()
        data = read(
            type, id, search, filter, includes, customer_id, supplier_id, product_id, sku, barcode,
            start, end, limit, offset,
        )
        return success_response(data, request_id_of(request)).model_dump(mode="json")

    return router


def _handle_parties(service, label, id, search, includes, limit, offset):
    if id:
        party = service.get_by_id(UUID(id))
        if party is None:
            raise ValueError(f"{label} {id} not found")

        data = party.model_dump(mode="json")
        if "balance" in includes:
            balance = service.get_balance(party.id)
            data["balance"] = str(balance.balance)

        return data

    if search:
        parties = service.search(search, limit)
    else:
        parties = service.list_all(limit, offset)

    return _dump_all(parties)


def _handle_products(product_svc, id, search, filter, sku, barcode, limit, offset):
    if id or sku or barcode:
        if id:
            product = product_svc.get_by_id(UUID(id))
        elif sku:
            product = product_svc.find_by_sku(sku)
        else:
            product = product_svc.find_by_barcode(barcode)

        if product is None:
            raise ValueError(f"Product {id or sku or barcode} not found")
        return product.model_dump(mode="json")

    if filter == "low_stock":
        products = product_svc.list_low_stock()
    elif search:
        products = product_svc.search(search, limit)
    else:
        products = product_svc.list_all(limit, offset)

    return _dump_all(products)


def _handle_invoices(invoice_svc, id, filter, includes, customer_id, start, end, limit, offset):
    if id:
        invoice = invoice_svc.get_by_id(UUID(id))
        if invoice is None:
            raise ValueError(f"Invoice {id} not found")

        data = invoice.model_dump(mode="json")
        if "items" in includes:
            data["items"] = _dump_all(invoice_svc.get_items(invoice.id))
        if "payments" in includes:
            data["payments"] = _dump_all(invoice_svc.list_payments(invoice.id))

        return data

    customer = UUID(customer_id) if customer_id else None

    if filter == "receivables_summary":
        return invoice_svc.receivables_summary(customer).model_dump(mode="json")

    if filter in ("receivables", "overdue"):
        invoices = invoice_svc.list_receivables(customer, overdue=filter == "overdue")
    else:
        status = InvoiceStatus(filter) if filter else None
        invoices = invoice_svc.list_all(status, customer, start, end, limit, offset)

    return _dump_all(invoices)


def _handle_purchases(purchase_svc, id, filter, includes, supplier_id, start, end, limit, offset):
    if id:
        purchase = purchase_svc.get_by_id(UUID(id))
        if purchase is None:
            raise ValueError(f"Purchase {id} not found")

        data = purchase.model_dump(mode="json")
        if "items" in includes:
            data["items"] = _dump_all(purchase_svc.get_items(purchase.id))
        if "payments" in includes:
            data["payments"] = _dump_all(purchase_svc.list_payments(purchase.id))

        return data

    supplier = UUID(supplier_id) if supplier_id else None

    if filter == "payables":
        purchases = purchase_svc.list_payables(supplier)
    else:
        status = PurchaseStatus(filter) if filter else None
        purchases = purchase_svc.list_all(status, supplier, start, end, limit, offset)

    return _dump_all(purchases)


def _handle_transactions(accounting_svc, filter, start, end, limit):
    if filter == "summary":
        summary = accounting_svc.summary(start, end)
        return summary.model_dump(mode="json")

    transaction_type = TransactionType(filter) if filter else None
    transactions = accounting_svc.list_transactions(transaction_type, start, end, limit)
    return _dump_all(transactions)

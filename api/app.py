"""FastAPI application assembly."""

import logging

from fastapi import FastAPI, Request
from starlette.responses import JSONResponse

from api.actions import create_actions_router
from api.base import request_id_of, success_response, error_response, ErrorCodes
from api.data import create_data_router
from api.errors import register_error_handlers
from api.middleware import RequestIDMiddleware
from auth.security_middleware import AuthMiddleware
from auth.session import SessionManager
from clients.postgres_client import DatabaseError, PostgresClient
from core.audit import AuditLogger
from core.services.accounting_service import AccountingService
from core.services.company_service import CompanyService
from core.services.customer_service import CustomerService
from core.services.dashboard_service import DashboardService
from core.services.inventory_service import InventoryService
from core.services.invoice_service import InvoiceService
from core.services.product_service import ProductService
from core.services.purchase_service import PurchaseService
from core.services.supplier_service import SupplierService

logger = logging.getLogger(__name__)


def build_services(postgres: PostgresClient) -> dict:
    """Wire every service to one database client and audit log."""
    audit = AuditLogger(postgres)

    company = CompanyService(postgres, audit)
    customers = CustomerService(postgres, audit)
    suppliers = SupplierService(postgres, audit)
    products = ProductService(postgres, audit)
    inventory = InventoryService(postgres, audit)
    accounting = AccountingService(postgres, audit)

    return {
        "audit": audit,
        "company": company,
        "customer": customers,
        "supplier": suppliers,
        "product": products,
        "inventory": inventory,
        "accounting": accounting,
        "invoice": InvoiceService(postgres, audit, company, customers, products, inventory, accounting),
        "purchase": PurchaseService(postgres, audit, company, suppliers, products, inventory, accounting),
        "dashboard": DashboardService(postgres),
    }


def create_app(
    services: dict,
    session_manager: SessionManager,
    postgres: PostgresClient,
    cookie_name: str = "session_token",
) -> FastAPI:
    """FastAPI app with auth middleware, error handlers, and data/actions routes."""
    app = FastAPI(title="GST Billing API")
    # Last added runs first: request ids are assigned before authentication
    app.add_middleware(AuthMiddleware, session_manager=session_manager, cookie_name=cookie_name)
    app.add_middleware(RequestIDMiddleware)
    register_error_handlers(app)

    app.include_router(create_data_router(services), prefix="/api")
    app.include_router(create_actions_router(services), prefix="/api")

    @app.get("/health")
    async def health(request: Request):
        try:
            postgres.ping()
        except DatabaseError as e:
            logger.error(f"Health check failed: {e}")
            return JSONResponse(
                status_code=503,
                content=error_response(
                    ErrorCodes.SERVICE_UNAVAILABLE, "Database unreachable", request_id_of(request)
                ).model_dump(mode="json"),
            )
        return success_response({"status": "ok"}, request_id_of(request)).model_dump(mode="json")

    return app

"""POST /api/actions: every create, update and workflow step goes through here."""

from uuid import UUID

from fastapi import APIRouter, Request
from pydantic import BaseModel

from api.base import request_id_of, success_response
from auth.permissions import Access, require_access
from core.models import (
    CompanyProfileSave,
    CustomerCreate, CustomerUpdate, CustomerTransactionCreate,
    SupplierCreate, SupplierUpdate,
    ProductCreate, ProductUpdate,
    StockAdjustment,
    InvoiceCreate, InvoiceStatus,
    PurchaseCreate,
    PaymentCreate,
    TransactionCreate, TransactionUpdate,
    PaymentMethodCreate, ExpenseCategoryCreate,
)


class ActionRequest(BaseModel):
    domain: str
    action: str
    data: dict


def create_actions_router(services: dict) -> APIRouter:
    router = APIRouter()

    handlers = {
        "company": CompanyHandler(services["company"]),
        "customer": CustomerHandler(services["customer"]),
        "supplier": PartyHandler(services["supplier"], "Supplier", SupplierCreate, SupplierUpdate),
        "product": ProductHandler(services["product"], services["inventory"]),
        "invoice": InvoiceHandler(services["invoice"]),
        "purchase": PurchaseHandler(services["purchase"]),
        "transaction": TransactionHandler(services["accounting"]),
        "payment_method": PaymentMethodHandler(services["accounting"]),
        "expense_category": ExpenseCategoryHandler(services["accounting"]),
    }

    @router.post("/actions")
    async def perform_action(request: Request, body: ActionRequest):
        handler = handlers.get(body.domain)
        if handler is None:
            raise ValueError(
                f"Unknown domain '{body.domain}'. "
                f"Valid domains: {', '.join(sorted(handlers.keys()))}"
            )

        if body.action not in handler.ALLOWED_ACTIONS:
            raise ValueError(
                f"Action '{body.action}' not allowed on '{body.domain}'. "
                f"Allowed: {', '.join(sorted(handler.ALLOWED_ACTIONS))}"
            )

        require_access(request.state.role, body.domain, Access.WRITE)

        method = getattr(handler, f"_handle_{body.action}")
        result = method(dict(body.data), request.state.user_id)
        return success_response(result, request_id_of(request)).model_dump(mode="json")

    return router


# =============================================================================
# HANDLER CLASSES
# =============================================================================


class CompanyHandler:
    ALLOWED_ACTIONS = {"save"}

    def __init__(self, service):
        self.service = service

    def _handle_save(self, data: dict, actor_id: UUID):
        profile = self.service.save(CompanyProfileSave(**data), actor_id)
        return profile.model_dump(mode="json")


class PartyHandler:
    """Customers and suppliers share the same actions."""

    ALLOWED_ACTIONS = {"create", "update", "delete"}

    def __init__(self, service, label: str, create_model, update_model):
        self.service = service
        self.label = label
        self.create_model = create_model
        self.update_model = update_model

    def _handle_create(self, data: dict, actor_id: UUID):
        party = self.service.create(self.create_model(**data), actor_id)
        return party.model_dump(mode="json")

    def _handle_update(self, data: dict, actor_id: UUID):
        party_id = UUID(data.pop("id"))
        party = self.service.update(party_id, self.update_model(**data), actor_id)
        return party.model_dump(mode="json")

    def _handle_delete(self, data: dict, actor_id: UUID):
        party_id = UUID(data["id"])
        deleted = self.service.delete(party_id, actor_id)
        if not deleted:
            raise ValueError(f"{self.label} {party_id} not found")
        return {"deleted": True}


class CustomerHandler(PartyHandler):
    """Party actions plus the customer's own account entries."""

    ALLOWED_ACTIONS = PartyHandler.ALLOWED_ACTIONS | {"record_transaction", "delete_transaction"}

    def __init__(self, service):
        super().__init__(service, "Customer", CustomerCreate, CustomerUpdate)

    def _handle_record_transaction(self, data: dict, actor_id: UUID):
        customer_id = UUID(data.pop("customer_id"))
        entry = self.service.record_transaction(customer_id, CustomerTransactionCreate(**data), actor_id)
        return entry.model_dump(mode="json")

    def _handle_delete_transaction(self, data: dict, actor_id: UUID):
        transaction_id = UUID(data["id"])
        if not self.service.delete_transaction(transaction_id, actor_id):
            raise ValueError(f"Customer transaction {transaction_id} not found")
        return {"deleted": True}


class ProductHandler:
    ALLOWED_ACTIONS = {"create", "update", "delete", "adjust_stock"}

    def __init__(self, service, inventory):
        self.service = service
        self.inventory = inventory

    def _handle_create(self, data: dict, actor_id: UUID):
        product = self.service.create(ProductCreate(**data), actor_id)
        return product.model_dump(mode="json")

    def _handle_update(self, data: dict, actor_id: UUID):
        product_id = UUID(data.pop("id"))
        product = self.service.update(product_id, ProductUpdate(**data), actor_id)
        return product.model_dump(mode="json")

    def _handle_delete(self, data: dict, actor_id: UUID):
        product_id = UUID(data["id"])
        deleted = self.service.delete(product_id, actor_id)
        if not deleted:
            raise ValueError(f"Product {product_id} not found")
        return {"deleted": True}

    def _handle_adjust_stock(self, data: dict, actor_id: UUID):
        movement = self.inventory.adjust(StockAdjustment(**data), actor_id)
        return movement.model_dump(mode="json") if movement else None


class InvoiceHandler:
    ALLOWED_ACTIONS = {"create", "record_payment", "mark_paid", "update_status", "delete"}

    def __init__(self, service):
        self.service = service

    def _handle_create(self, data: dict, actor_id: UUID):
        invoice = self.service.create(InvoiceCreate(**data), actor_id)
        return invoice.model_dump(mode="json")

    def _handle_record_payment(self, data: dict, actor_id: UUID):
        invoice_id = UUID(data.pop("id"))
        invoice = self.service.record_payment(invoice_id, PaymentCreate(**data), actor_id)
        return invoice.model_dump(mode="json")

    def _handle_mark_paid(self, data: dict, actor_id: UUID):
        invoice = self.service.mark_paid(UUID(data["id"]), actor_id)
        return invoice.model_dump(mode="json")

    def _handle_update_status(self, data: dict, actor_id: UUID):
        invoice = self.service.update_status(UUID(data["id"]), InvoiceStatus(data["status"]), actor_id)
        return invoice.model_dump(mode="json")

    def _handle_delete(self, data: dict, actor_id: UUID):
        invoice_id = UUID(data["id"])
        deleted = self.service.delete(invoice_id, actor_id)
        if not deleted:
            raise ValueError(f"Invoice {invoice_id} not found")
        return {"deleted": True}


class PurchaseHandler:
    ALLOWED_ACTIONS = {"create", "record_payment", "mark_received", "cancel", "delete"}

    def __init__(self, service):
        self.service = service

    def _handle_create(self, data: dict, actor_id: UUID):
        purchase = self.service.create(PurchaseCreate(**data), actor_id)
        return purchase.model_dump(mode="json")

    def _handle_record_payment(self, data: dict, actor_id: UUID):
        purchase_id = UUID(data.pop("id"))
        purchase = self.service.record_payment(purchase_id, PaymentCreate(**data), actor_id)
        return purchase.model_dump(mode="json")

    def _handle_mark_received(self, data: dict, actor_id: UUID):
        purchase = self.service.mark_received(UUID(data["id"]), actor_id)
        return purchase.model_dump(mode="json")

    def _handle_cancel(self, data: dict, actor_id: UUID):
        purchase = self.service.cancel(UUID(data["id"]), actor_id)
        return purchase.model_dump(mode="json")

    def _handle_delete(self, data: dict, actor_id: UUID):
        purchase_id = UUID(data["id"])
        deleted = self.service.delete(purchase_id, actor_id)
        if not deleted:
            raise ValueError(f"Purchase {purchase_id} not found")
        return {"deleted": True}


class TransactionHandler:
    ALLOWED_ACTIONS = {"create", "update", "delete"}

    def __init__(self, service):
        self.service = service

    def _handle_create(self, data: dict, actor_id: UUID):
        transaction = self.service.create(TransactionCreate(**data), actor_id)
        return transaction.model_dump(mode="json")

    def _handle_update(self, data: dict, actor_id: UUID):
        transaction_id = UUID(data.pop("id"))
        transaction = self.service.update(transaction_id, TransactionUpdate(**data), actor_id)
        return transaction.model_dump(mode="json")

    def _handle_delete(self, data: dict, actor_id: UUID):
        transaction_id = UUID(data["id"])
        deleted = self.service.delete(transaction_id, actor_id)
        if not deleted:
            raise ValueError(f"Transaction {transaction_id} not found")
        return {"deleted": True}


class PaymentMethodHandler:
    ALLOWED_ACTIONS = {"create"}

    def __init__(self, service):
        self.service = service

    def _handle_create(self, data: dict, actor_id: UUID):
        method = self.service.create_payment_method(PaymentMethodCreate(**data), actor_id)
        return method.model_dump(mode="json")


class ExpenseCategoryHandler:
    ALLOWED_ACTIONS = {"create"}

    def __init__(self, service):
        self.service = service

    def _handle_create(self, data: dict, actor_id: UUID):
        category = self.service.create_expense_category(ExpenseCategoryCreate(**data), actor_id)
        return category.model_dump(mode="json")

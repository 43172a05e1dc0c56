"""
Supplier service for CRUD operations and payable balances.

All operations are automatically scoped to the current account via RLS.
"""

from core.models import Supplier, PurchaseStatus
from core.services.party_service import PartyService


class SupplierService(PartyService[Supplier]):
    """Service for supplier operations. Balance = amount still to pay."""

    table = "suppliers"
    entity_type = "supplier"
    model = Supplier
    document_table = "purchases"
    document_party_column = "supplier_id"
    open_document_statuses = (
        PurchaseStatus.ORDERED.value,
        PurchaseStatus.RECEIVED.value,
    )

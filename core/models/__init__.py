"""Core domain models."""

from core.models.company import CompanyProfile, CompanyProfileSave
from core.models.customer import Customer, CustomerCreate, CustomerUpdate, PartyBalance
from core.models.customer_transaction import (
    CustomerTransaction, CustomerTransactionCreate, CustomerTransactionType,
)
from core.models.supplier import Supplier, SupplierCreate, SupplierUpdate
from core.models.product import Product, ProductCreate, ProductUpdate, InventoryType
from core.models.stock_movement import StockMovement, StockAdjustment, MovementType
from core.models.payment import Payment, PaymentCreate
from core.models.invoice import (
    Invoice, InvoiceCreate, InvoiceItem, InvoiceItemInput, InvoiceStatus, ReceivablesSummary,
)
from core.models.purchase import (
    Purchase, PurchaseCreate, PurchaseItem, PurchaseItemInput, PurchaseStatus,
)
from core.models.transaction import (
    Transaction, TransactionCreate, TransactionUpdate, TransactionType,
    LedgerSummary, PaymentMethod, PaymentMethodCreate, ExpenseCategory, ExpenseCategoryCreate,
)
from core.gst import PaymentStatus

__all__ = [
    # Company
    "CompanyProfile", "CompanyProfileSave",
    # Customer
    "Customer", "CustomerCreate", "CustomerUpdate", "PartyBalance",
    "CustomerTransaction", "CustomerTransactionCreate", "CustomerTransactionType",
    # Supplier
    "Supplier", "SupplierCreate", "SupplierUpdate",
    # Product
    "Product", "ProductCreate", "ProductUpdate", "InventoryType",
    # StockMovement
    "StockMovement", "StockAdjustment", "MovementType",
    # Payment
    "Payment", "PaymentCreate", "PaymentStatus",
    # Invoice
    "Invoice", "InvoiceCreate", "InvoiceItem", "InvoiceItemInput", "InvoiceStatus",
    "ReceivablesSummary",
    # Purchase
    "Purchase", "PurchaseCreate", "PurchaseItem", "PurchaseItemInput", "PurchaseStatus",
    # Transaction
    "Transaction", "TransactionCreate", "TransactionUpdate", "TransactionType",
    "LedgerSummary", "PaymentMethod", "PaymentMethodCreate", "ExpenseCategory", "ExpenseCategoryCreate",
]

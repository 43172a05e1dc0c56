"""
Role-based access to data types and action domains.

Resources are named in the singular ("invoice", "product"). Admins reach
everything. Other roles get read or write access to the resources their
job needs; write implies read.
"""

from enum import Enum

from auth.exceptions import AccessDeniedError
from auth.types import UserRole


class Access(str, Enum):
    READ = "read"
    WRITE = "write"


ROLE_PERMISSIONS: dict[UserRole, dict[str, Access]] = {
    UserRole.SALES_PERSON: {
        "customer": Access.WRITE,
        "invoice": Access.WRITE,
        "product": Access.READ,
        "company": Access.READ,
        "payment_method": Access.READ,
        "expense_category": Access.READ,
        "dashboard": Access.READ,
    },
    UserRole.INVENTORY_PERSON: {
        "product": Access.WRITE,
        "stock_movement": Access.WRITE,
        "supplier": Access.WRITE,
        "purchase": Access.WRITE,
        "company": Access.READ,
        "payment_method": Access.READ,
        "expense_category": Access.READ,
        "dashboard": Access.READ,
    },
    UserRole.PURCHASE_PERSON: {
        "supplier": Access.WRITE,
        "purchase": Access.WRITE,
        "product": Access.READ,
        "company": Access.READ,
        "payment_method": Access.READ,
        "expense_category": Access.READ,
        "dashboard": Access.READ,
    },
}


def can_access(role: UserRole, resource: str, access: Access = Access.READ) -> bool:
    """Whether a role may read (or write) a resource."""
    if role == UserRole.ADMIN:
        return True

    granted = ROLE_PERMISSIONS.get(role, {}).get(resource)
    if granted is None:
        return False
    return access == Access.READ or granted == Access.WRITE


def require_access(role: UserRole, resource: str, access: Access = Access.READ) -> None:
    """
    Raise unless the role may access the resource.

    Raises:
        AccessDeniedError: If the role lacks the requested access
    """
    if not can_access(role, resource, access):
        raise AccessDeniedError(role.value, resource, access.value)

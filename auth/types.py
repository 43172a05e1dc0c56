"""Pydantic models for auth domain."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field


class UserRole(str, Enum):
    """What part of the business a user works in."""

    ADMIN = "admin"
    SALES_PERSON = "sales_person"
    INVENTORY_PERSON = "inventory_person"
    PURCHASE_PERSON = "purchase_person"


class Session(BaseModel):
    """An active user session."""

    token: str = Field(..., description="Session token (opaque string)")
    user_id: UUID
    role: UserRole  # Required - fail closed, no default
    created_at: datetime
    expires_at: datetime
    last_activity_at: datetime

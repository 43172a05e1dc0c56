"""Company profile: the seller's identity and tax jurisdiction."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class CompanyProfileSave(BaseModel):
    """Data for creating or replacing the company profile."""

    company_name: str = Field(..., min_length=1, max_length=255)
    gst_number: str | None = Field(None, max_length=15)
    pan_number: str | None = Field(None, max_length=10)
    address_line1: str | None = Field(None, max_length=255)
    address_line2: str | None = Field(None, max_length=255)
    city: str | None = Field(None, max_length=100)
    state: str | None = Field(None, max_length=100)
    postal_code: str | None = Field(None, max_length=20)
    country: str | None = Field("India", max_length=100)
    phone: str | None = Field(None, max_length=50)
    email: EmailStr | None = None
    website: str | None = Field(None, max_length=255)
    bank_name: str | None = Field(None, max_length=255)
    account_number: str | None = Field(None, max_length=50)
    ifsc_code: str | None = Field(None, max_length=20)
    terms_conditions: str | None = Field(None, max_length=5000)


class CompanyProfile(BaseModel):
    """Company profile as stored. One per operator account."""

    id: UUID
    company_name: str
    gst_number: str | None
    pan_number: str | None
    address_line1: str | None
    address_line2: str | None
    city: str | None
    state: str | None
    postal_code: str | None
    country: str | None
    phone: str | None
    email: str | None
    website: str | None
    bank_name: str | None
    account_number: str | None
    ifsc_code: str | None
    terms_conditions: str | None
    created_by: UUID | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

    @property
    def has_tax_jurisdiction(self) -> bool:
        """Whether a home state is set, which every taxed document requires."""
        return bool(self.state and self.state.strip())

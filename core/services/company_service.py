"""
Company profile service.

One profile per operator account (row level security scopes the table to
the account), so there is no id to pass around: get() returns the visible
row, save() creates it or overwrites it.
"""

import logging
from uuid import UUID, uuid4

from clients.postgres_client import PostgresClient
from core.audit import AuditLogger, AuditAction
from core.models import CompanyProfile, CompanyProfileSave
from utils.timezone import now_utc

logger = logging.getLogger(__name__)


class CompanyService:
    """Service for the company profile singleton."""

    def __init__(self, postgres: PostgresClient, audit: AuditLogger):
        self.postgres = postgres
        self.audit = audit

    def get(self) -> CompanyProfile | None:
        """Company profile for the current account, or None if not set up yet."""
        row = self.postgres.select_one("company_profile")
        if row is None:
            return None
        return CompanyProfile.model_validate(row)

    def require_tax_jurisdiction(self) -> CompanyProfile:
        """
        Company profile with a home state, required before any taxed document.

        Raises:
            ValueError: If the profile is missing or has no state
        """
        profile = self.get()
        if profile is None or not profile.has_tax_jurisdiction:
            raise ValueError("Please set up your company profile with state information first")
        return profile

    def save(self, data: CompanyProfileSave, actor_id: UUID) -> CompanyProfile:
        """
        Create the company profile or replace its fields.

        Args:
            data: Profile fields
            actor_id: User making the change

        Returns:
            Saved profile
        """
        current = self.get()
        fields = data.model_dump()
        now = now_utc()

        if current is None:
            row = self.postgres.insert(
                "company_profile",
                {"id": uuid4(), **fields, "created_by": actor_id, "created_at": now, "updated_at": now},
            )
            profile = CompanyProfile.model_validate(row)
            self.audit.log_change(
                entity_type="company_profile",
                entity_id=profile.id,
                action=AuditAction.CREATE,
                changes={"created": data.model_dump(mode="json", exclude_none=True)},
                actor_id=actor_id,
            )
            logger.info("Company profile created for %s", profile.company_name)
            return profile

        row = self.postgres.update("company_profile", current.id, {**fields, "updated_at": now})
        updated = CompanyProfile.model_validate(row)

        self.audit.log_update("company_profile", current, updated, actor_id)

        return updated

"""Tests for CompanyService."""

import pytest

from core.models import CompanyProfileSave


class TestSave:
    """Tests for CompanyService.save."""

    def test_get_before_setup(self, company_service):
        assert company_service.get() is None

    def test_first_save_creates(self, company_service, test_user_id, db):
        profile = company_service.save(
            CompanyProfileSave(company_name="Acme Traders", state="Karnataka"), test_user_id
        )

        assert profile.company_name == "Acme Traders"
        assert profile.country == "India"
        assert profile.created_by == test_user_id
        assert len(db.rows("company_profile")) == 1

    def test_second_save_overwrites(self, company_service, company, test_user_id, db):
        updated = company_service.save(
            CompanyProfileSave(company_name="Acme Traders Pvt Ltd", state="Karnataka"), test_user_id
        )

        assert updated.id == company.id
        assert updated.company_name == "Acme Traders Pvt Ltd"
        assert updated.gst_number is None
        assert len(db.rows("company_profile")) == 1

    def test_changes_audited(self, company_service, company, audit, test_user_id):
        company_service.save(CompanyProfileSave(company_name="Acme Traders", state="Goa", gst_number="29ABCDE1234F1Z5"), test_user_id)

        history = audit.get_entity_history("company_profile", company.id)
        update = [h for h in history if h["action"] == "update"][0]
        assert update["changes"]["state"] == {"old": "Karnataka", "new": "Goa"}

    def test_invalid_email_rejected(self):
        from pydantic import ValidationError

        with pytest.raises(ValidationError):
            CompanyProfileSave(company_name="Acme", email="not-an-email")


class TestTaxJurisdiction:
    """Tests for require_tax_jurisdiction."""

    def test_returns_profile_with_state(self, company_service, company):
        assert company_service.require_tax_jurisdiction().id == company.id

    def test_missing_profile(self, company_service):
        with pytest.raises(ValueError, match="state information"):
            company_service.require_tax_jurisdiction()

    @pytest.mark.parametrize("state", [None, "", "   "])
    def test_blank_state(self, company_service, test_user_id, state):
        company_service.save(CompanyProfileSave(company_name="Acme", state=state), test_user_id)

        with pytest.raises(ValueError, match="company profile"):
            company_service.require_tax_jurisdiction()

"""Tests for settings and logging processors."""

from src.config import settings
from src.config.logging import REDACTED, add_owner_prefix, redact_sensitive


class TestLoggingProcessors:
    """Tests for the structlog processors."""

    def test_redacts_credentials(self):
        event = redact_sensitive(
            None,
            "info",
            {"event": "Signing in", "email": "owner@example.com", "password": "secret123", "access_token": None},
        )

        assert event["password"] == REDACTED
        assert event["email"] == "owner@example.com"
        assert event["access_token"] is None

    def test_redacts_billing_fields(self):
        event = redact_sensitive(
            None,
            "info",
            {"event": "Billing details saved", "bank_account_number": "50100012345678", "ifsc_code": "HDFC0001234"},
        )

        assert event["bank_account_number"] == REDACTED
        assert event["ifsc_code"] == REDACTED

    def test_owner_and_report_prefix(self):
        event = add_owner_prefix(None, "info", {"event": "Step completed", "owner_id": "owner-1", "report": "finance"})

        assert event["event"] == "[owner-1/finance] Step completed"

    def test_no_owner_no_prefix(self):
        event = add_owner_prefix(None, "info", {"event": "Pipeline starting", "report": "finance"})

        assert event["event"] == "Pipeline starting"


class TestSettings:
    """Tests for derived settings."""

    def test_service_urls(self):
        base = settings.supabase.url.rstrip("/")

        assert settings.supabase.rest_url == f"{base}/rest/v1"
        assert settings.supabase.auth_url == f"{base}/auth/v1"
        if not settings.storage.endpoint_url:
            assert settings.storage_endpoint_url == f"{base}/storage/v1/s3"

    def test_no_automatic_retry_by_default(self):
        assert settings.supabase.max_attempts == 1

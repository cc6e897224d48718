"""Unit tests for WebhookHandler.

Signatures are produced locally with the test webhook secret and verified
by the real Stripe SDK; the session re-fetch goes to the mocked client and
emails go to the recording transport.
"""

import hashlib
import hmac
import json
import time
from typing import Any
from unittest.mock import MagicMock

import httpx
import pytest
import stripe

from conftest import TEST_WEBHOOK_SECRET, RecordingTransport, make_settings
from storefront.models.errors import CheckoutError, ErrorCode
from storefront.models.stripe_webhook import WebhookResult
from storefront.services.notification_service import NotificationService
from storefront.services.stripe_service import StripeService
from storefront.services.webhook_handler import WebhookHandler


def _create_stripe_signature(payload: bytes, secret: str) -> str:
    timestamp = str(int(time.time()))
    signed_payload = f"{timestamp}.{payload.decode('utf-8')}"
    signature = hmac.new(secret.encode("utf-8"), signed_payload.encode("utf-8"), hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={signature}"


def _event(event_type: str = "checkout.session.completed", session_id: str = "cs_test_abc123") -> bytes:
    return json.dumps(
        {
            "id": "evt_1ABC123DEF456",
            "object": "event",
            "type": event_type,
            "data": {"object": {"id": session_id, "object": "checkout.session"}},
        }
    ).encode("utf-8")


def _session(**overrides: Any) -> dict[str, Any]:
    session = {
        "id": "cs_test_abc123",
        "status": "complete",
        "payment_status": "paid",
        "amount_total": 110000,
        "currency": "usd",
        "metadata": {"package": "Growth", "rush": "TRUE"},
        "customer_details": {"email": "buyer@example.com"},
        "payment_intent": {"id": "pi_123", "latest_charge": "ch_456"},
    }
    session.update(overrides)
    return session


class TestBuildSummary:
    def test_summary_from_session(self, webhook_handler: WebhookHandler, mock_stripe_client: MagicMock) -> None:
        mock_stripe_client.checkout.sessions.retrieve.return_value = _session()

        summary = webhook_handler.build_summary("cs_test_abc123")

        assert summary.package_slug == "growth"
        assert summary.timeline.label == "Growth"
        assert summary.rush is True
        assert summary.amount_display == "1100.00 USD"
        assert summary.reference.value == "pi_123"
        assert summary.customer_email == "buyer@example.com"

    def test_slug_fallback_and_defaults(self, webhook_handler: WebhookHandler, mock_stripe_client: MagicMock) -> None:
        mock_stripe_client.checkout.sessions.retrieve.return_value = _session(
            metadata={"slug": "scale"},
            currency=None,
            amount_total=None,
        )

        summary = webhook_handler.build_summary("cs_test_abc123")

        assert summary.timeline.label == "Scale"
        assert summary.rush is False
        assert summary.amount_display == "USD"

    def test_unknown_package_keeps_slug_as_label(
        self, webhook_handler: WebhookHandler, mock_stripe_client: MagicMock
    ) -> None:
        mock_stripe_client.checkout.sessions.retrieve.return_value = _session(metadata={"package": "bespoke-site"})

        summary = webhook_handler.build_summary("cs_test_abc123")

        assert summary.package_slug == "bespoke-site"
        assert summary.timeline.label == "bespoke-site"


class TestHandle:
    def test_completed_event_processed(
        self,
        webhook_handler: WebhookHandler,
        mock_stripe_client: MagicMock,
        email_transport: RecordingTransport,
    ) -> None:
        mock_stripe_client.checkout.sessions.retrieve.return_value = _session()
        payload = _event()

        outcome = webhook_handler.handle(payload, _create_stripe_signature(payload, TEST_WEBHOOK_SECRET))

        assert outcome.result is WebhookResult.PROCESSED
        assert outcome.session_id == "cs_test_abc123"
        assert outcome.notifications_sent == 2
        assert len(email_transport.requests) == 2

    def test_other_event_types_ignored(
        self,
        webhook_handler: WebhookHandler,
        mock_stripe_client: MagicMock,
        email_transport: RecordingTransport,
    ) -> None:
        payload = _event("payment_intent.succeeded", session_id="pi_123")

        outcome = webhook_handler.handle(payload, _create_stripe_signature(payload, TEST_WEBHOOK_SECRET))

        assert outcome.result is WebhookResult.IGNORED
        mock_stripe_client.checkout.sessions.retrieve.assert_not_called()
        assert email_transport.requests == []

    @pytest.mark.parametrize("signature", [None, "", "t=1,v1=deadbeef"])
    def test_bad_signature_rejected(
        self,
        webhook_handler: WebhookHandler,
        mock_stripe_client: MagicMock,
        email_transport: RecordingTransport,
        signature: str | None,
    ) -> None:
        with pytest.raises(CheckoutError) as exc_info:
            webhook_handler.handle(_event(), signature)

        assert exc_info.value.code == ErrorCode.INVALID_WEBHOOK_SIGNATURE
        mock_stripe_client.checkout.sessions.retrieve.assert_not_called()
        assert email_transport.requests == []

    def test_missing_secret_reported_before_signature(
        self, mock_stripe_client: MagicMock, notification_service: NotificationService
    ) -> None:
        handler = WebhookHandler(
            StripeService(make_settings(stripe_webhook_secret=None), client=mock_stripe_client),
            notification_service,
        )

        with pytest.raises(CheckoutError) as exc_info:
            handler.handle(_event(), None)

        assert exc_info.value.code == ErrorCode.WEBHOOK_SECRET_MISSING

    def test_missing_email_configuration_checked_before_fetch(
        self,
        stripe_service: StripeService,
        email_client,
        mock_stripe_client: MagicMock,
    ) -> None:
        handler = WebhookHandler(stripe_service, NotificationService(make_settings(resend_api_key=None), email_client))
        payload = _event()

        with pytest.raises(CheckoutError) as exc_info:
            handler.handle(payload, _create_stripe_signature(payload, TEST_WEBHOOK_SECRET))

        assert exc_info.value.code == ErrorCode.EMAIL_CONFIG_MISSING
        mock_stripe_client.checkout.sessions.retrieve.assert_not_called()

    def test_session_fetch_failure_is_failed_outcome(
        self, webhook_handler: WebhookHandler, mock_stripe_client: MagicMock
    ) -> None:
        mock_stripe_client.checkout.sessions.retrieve.side_effect = stripe.APIConnectionError("down")
        payload = _event()

        outcome = webhook_handler.handle(payload, _create_stripe_signature(payload, TEST_WEBHOOK_SECRET))

        assert outcome.result is WebhookResult.FAILED
        assert outcome.error_message
        assert mock_stripe_client.checkout.sessions.retrieve.call_count == 3

    def test_email_failure_is_failed_outcome(
        self,
        webhook_handler: WebhookHandler,
        mock_stripe_client: MagicMock,
        email_transport: RecordingTransport,
    ) -> None:
        mock_stripe_client.checkout.sessions.retrieve.return_value = _session()
        email_transport.responses = [httpx.Response(401, json={"message": "bad key"})]
        payload = _event()

        outcome = webhook_handler.handle(payload, _create_stripe_signature(payload, TEST_WEBHOOK_SECRET))

        assert outcome.result is WebhookResult.FAILED
        assert len(email_transport.requests) == 2

    @pytest.mark.parametrize(
        "data",
        ["oops", None, {"object": "cs_test_abc123"}, {"object": {"object": "checkout.session"}}],
    )
    def test_completed_event_without_session_is_failed_outcome(
        self,
        webhook_handler: WebhookHandler,
        mock_stripe_client: MagicMock,
        email_transport: RecordingTransport,
        data: Any,
    ) -> None:
        payload = json.dumps(
            {"id": "evt_1ABC123DEF456", "object": "event", "type": "checkout.session.completed", "data": data}
        ).encode("utf-8")

        outcome = webhook_handler.handle(payload, _create_stripe_signature(payload, TEST_WEBHOOK_SECRET))

        assert outcome.result is WebhookResult.FAILED
        assert outcome.session_id is None
        mock_stripe_client.checkout.sessions.retrieve.assert_not_called()
        assert email_transport.requests == []

    def test_ignored_event_with_malformed_data(
        self, webhook_handler: WebhookHandler, mock_stripe_client: MagicMock
    ) -> None:
        payload = json.dumps(
            {"id": "evt_1ABC123DEF456", "object": "event", "type": "charge.refunded", "data": ["oops"]}
        ).encode("utf-8")

        outcome = webhook_handler.handle(payload, _create_stripe_signature(payload, TEST_WEBHOOK_SECRET))

        assert outcome.result is WebhookResult.IGNORED
        mock_stripe_client.checkout.sessions.retrieve.assert_not_called()

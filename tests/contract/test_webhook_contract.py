"""Contract tests for POST /api/stripe-webhook.

Test categories:
- Signature validation (400, nothing sent)
- checkout.session.completed processing (200 "ok")
- Unhandled event types (200 "Ignored")
- Redelivery (not deduplicated)
- Configuration and processing errors (500)
"""

import hashlib
import hmac
import json
import time
from collections.abc import Callable
from typing import Any
from unittest.mock import MagicMock

import pytest
import stripe
from fastapi.testclient import TestClient
from starlette.status import (
    HTTP_200_OK,
    HTTP_400_BAD_REQUEST,
    HTTP_405_METHOD_NOT_ALLOWED,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from conftest import TEST_OPERATOR_EMAIL, TEST_WEBHOOK_SECRET, RecordingTransport

ENDPOINT = "/api/stripe-webhook"


# === Helper Functions ===


def _create_stripe_signature(payload: bytes, secret: str) -> str:
    """Create a valid Stripe webhook signature.

    Stripe signatures use HMAC-SHA256 with format: t={timestamp},v1={signature}
    """
    timestamp = str(int(time.time()))
    signed_payload = f"{timestamp}.{payload.decode('utf-8')}"
    signature = hmac.new(
        secret.encode("utf-8"),
        signed_payload.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()
    return f"t={timestamp},v1={signature}"


def _create_event(
    event_type: str = "checkout.session.completed",
    event_id: str = "evt_1ABC123DEF456",
    session_id: str = "cs_test_abc123",
) -> bytes:
    return json.dumps(
        {
            "id": event_id,
            "object": "event",
            "type": event_type,
            "created": int(time.time()),
            "data": {
                "object": {
                    "id": session_id,
                    "object": "checkout.session",
                    "metadata": {"package": "starter", "rush": "false"},
                },
            },
        }
    ).encode("utf-8")


def _starter_session() -> dict[str, Any]:
    return {
        "id": "cs_test_abc123",
        "status": "complete",
        "payment_status": "paid",
        "amount_total": 90000,
        "currency": "usd",
        "metadata": {"package": "starter", "rush": "false"},
        "customer_details": {"email": "buyer@example.com"},
        "payment_intent": {
            "id": "pi_3ABC123DEF456",
            "status": "succeeded",
            "latest_charge": {"id": "ch_3ABC123DEF456"},
        },
    }


def _post(client: TestClient, payload: bytes, signature: str | None) -> Any:
    headers = {"Content-Type": "application/json"}
    if signature is not None:
        headers["Stripe-Signature"] = signature
    return client.post(ENDPOINT, content=payload, headers=headers)


# === Tests ===


class TestSignatureValidation:
    def test_missing_signature(self, client: TestClient, email_transport: RecordingTransport) -> None:
        response = _post(client, _create_event(), None)

        assert response.status_code == HTTP_400_BAD_REQUEST
        assert response.text == "Webhook Error: Invalid webhook signature"
        assert email_transport.requests == []

    @pytest.mark.parametrize("secret", ["whsec_wrong_secret", ""])
    def test_invalid_signature(
        self,
        client: TestClient,
        mock_stripe_client: MagicMock,
        email_transport: RecordingTransport,
        secret: str,
    ) -> None:
        payload = _create_event()

        response = _post(client, payload, _create_stripe_signature(payload, secret))

        assert response.status_code == HTTP_400_BAD_REQUEST
        assert response.text == "Webhook Error: Invalid webhook signature"
        mock_stripe_client.checkout.sessions.retrieve.assert_not_called()
        assert email_transport.requests == []

    def test_reserialized_body_rejected(self, client: TestClient, email_transport: RecordingTransport) -> None:
        payload = _create_event()
        signature = _create_stripe_signature(payload, TEST_WEBHOOK_SECRET)
        reformatted = json.dumps(json.loads(payload), indent=2).encode("utf-8")

        response = _post(client, reformatted, signature)

        assert response.status_code == HTTP_400_BAD_REQUEST
        assert email_transport.requests == []

    def test_header_name_case_insensitive(self, client: TestClient) -> None:
        payload = _create_event(event_type="invoice.paid")
        response = client.post(
            ENDPOINT,
            content=payload,
            headers={"stripe-signature": _create_stripe_signature(payload, TEST_WEBHOOK_SECRET)},
        )

        assert response.status_code == HTTP_200_OK

    def test_get_not_allowed(self, client: TestClient) -> None:
        assert client.get(ENDPOINT).status_code == HTTP_405_METHOD_NOT_ALLOWED


class TestCheckoutCompleted:
    def test_sends_customer_and_operator_emails(
        self,
        client: TestClient,
        mock_stripe_client: MagicMock,
        email_transport: RecordingTransport,
    ) -> None:
        mock_stripe_client.checkout.sessions.retrieve.return_value = _starter_session()
        payload = _create_event()

        response = _post(client, payload, _create_stripe_signature(payload, TEST_WEBHOOK_SECRET))

        assert response.status_code == HTTP_200_OK
        assert response.text == "ok"

        customer, operator = email_transport.payloads
        assert customer["to"] == ["buyer@example.com"]
        assert operator["to"] == [TEST_OPERATOR_EMAIL]
        assert "Starter" in operator["html"]
        assert "<b>Rush:</b> No" in operator["html"]
        assert "900.00 USD" in operator["html"]
        assert "pi_3ABC123DEF456" in operator["html"]
        assert "ch_3ABC123DEF456" in operator["html"]

    def test_redelivery_sends_again(
        self,
        client: TestClient,
        mock_stripe_client: MagicMock,
        email_transport: RecordingTransport,
    ) -> None:
        mock_stripe_client.checkout.sessions.retrieve.return_value = _starter_session()
        payload = _create_event()

        first = _post(client, payload, _create_stripe_signature(payload, TEST_WEBHOOK_SECRET))
        second = _post(client, payload, _create_stripe_signature(payload, TEST_WEBHOOK_SECRET))

        assert first.status_code == second.status_code == HTTP_200_OK
        assert len(email_transport.requests) == 4
        assert mock_stripe_client.checkout.sessions.retrieve.call_count == 2

    def test_session_fetch_failure_returns_500(
        self,
        client: TestClient,
        mock_stripe_client: MagicMock,
        email_transport: RecordingTransport,
    ) -> None:
        mock_stripe_client.checkout.sessions.retrieve.side_effect = stripe.APIError("boom", http_status=500)
        payload = _create_event()

        response = _post(client, payload, _create_stripe_signature(payload, TEST_WEBHOOK_SECRET))

        assert response.status_code == HTTP_500_INTERNAL_SERVER_ERROR
        assert response.text == "Webhook handler error"
        assert email_transport.requests == []

    def test_malformed_event_data_returns_500(
        self,
        client: TestClient,
        mock_stripe_client: MagicMock,
        email_transport: RecordingTransport,
    ) -> None:
        payload = json.dumps(
            {"id": "evt_1ABC123DEF456", "object": "event", "type": "checkout.session.completed", "data": "oops"}
        ).encode("utf-8")

        response = _post(client, payload, _create_stripe_signature(payload, TEST_WEBHOOK_SECRET))

        assert response.status_code == HTTP_500_INTERNAL_SERVER_ERROR
        assert response.text == "Webhook handler error"
        mock_stripe_client.checkout.sessions.retrieve.assert_not_called()
        assert email_transport.requests == []


class TestIgnoredEvents:
    @pytest.mark.parametrize("event_type", ["payment_intent.succeeded", "checkout.session.expired", "charge.refunded"])
    def test_other_types_ignored(
        self,
        client: TestClient,
        mock_stripe_client: MagicMock,
        email_transport: RecordingTransport,
        event_type: str,
    ) -> None:
        payload = _create_event(event_type=event_type)

        response = _post(client, payload, _create_stripe_signature(payload, TEST_WEBHOOK_SECRET))

        assert response.status_code == HTTP_200_OK
        assert response.text == "Ignored"
        mock_stripe_client.checkout.sessions.retrieve.assert_not_called()
        assert email_transport.requests == []


class TestConfigurationErrors:
    def test_missing_webhook_secret(self, build_client: Callable[..., TestClient]) -> None:
        client = build_client(stripe_webhook_secret=None)
        payload = _create_event()

        response = _post(client, payload, _create_stripe_signature(payload, TEST_WEBHOOK_SECRET))

        assert response.status_code == HTTP_500_INTERNAL_SERVER_ERROR
        assert response.text == "Webhook misconfigured"

    def test_missing_email_configuration(
        self,
        build_client: Callable[..., TestClient],
        mock_stripe_client: MagicMock,
        email_transport: RecordingTransport,
    ) -> None:
        client = build_client(to_email=None)
        payload = _create_event()

        response = _post(client, payload, _create_stripe_signature(payload, TEST_WEBHOOK_SECRET))

        assert response.status_code == HTTP_500_INTERNAL_SERVER_ERROR
        assert response.text == "Email env missing"
        mock_stripe_client.checkout.sessions.retrieve.assert_not_called()
        assert email_transport.requests == []

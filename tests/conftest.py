"""Pytest configuration and fixtures for the storefront backend tests.

This module provides reusable fixtures for testing:
- Settings built from explicit test values (no environment or .env reads)
- A mocked StripeClient injected into StripeService
- A recording httpx transport standing in for the Resend API
- A FastAPI TestClient with the route-level services overridden
"""

import json
from collections.abc import Callable, Generator
from typing import Any
from unittest.mock import MagicMock

import httpx
import pytest
from fastapi.testclient import TestClient

from storefront.config import Settings
from storefront.services.checkout_service import CheckoutService
from storefront.services.email_client import ResendEmailClient
from storefront.services.form_notifications import FormNotificationService
from storefront.services.notification_service import NotificationService
from storefront.services.pricing import PriceResolver
from storefront.services.session_status import SessionStatusService
from storefront.services.stripe_service import StripeService
from storefront.services.webhook_handler import WebhookHandler
from storefront.utils.retry import RetryPolicy

# === Test Configuration ===

TEST_SECRET_KEY = "sk_test_abc123xyz"
TEST_WEBHOOK_SECRET = "whsec_test_secret_for_testing"
TEST_RESEND_URL = "https://resend.test/emails"
TEST_OPERATOR_EMAIL = "ops@example.com"
TEST_FROM_EMAIL = "CITEKS <contact@citeks.net>"

TEST_PRICES = {
    "price_starter_base": "price_starter_base_123",
    "price_starter_rush": "price_starter_rush_123",
    "price_growth_base": "price_growth_base_123",
    "price_growth_rush": "price_growth_rush_123",
    "price_scale_base": "price_scale_base_123",
    "price_scale_rush": "price_scale_rush_123",
}


def make_settings(**overrides: Any) -> Settings:
    """Settings with complete test configuration; pass overrides to blank fields."""
    values: dict[str, Any] = {
        "environment": "test",
        "stripe_secret_key": TEST_SECRET_KEY,
        "stripe_webhook_secret": TEST_WEBHOOK_SECRET,
        "default_origin": "https://example.com",
        "resend_api_key": "re_test_key",
        "resend_api_url": TEST_RESEND_URL,
        "from_email": TEST_FROM_EMAIL,
        "to_email": TEST_OPERATOR_EMAIL,
        "cc_email": None,
        "retry_max_attempts": 3,
        "retry_backoff_seconds": 0,
        **TEST_PRICES,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class RecordingTransport:
    """httpx transport that records every request to the email API.

    Responses are taken from ``responses`` in order; once exhausted every
    request gets a 200 with a generated message ID.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.responses: list[httpx.Response | Exception] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.responses:
            response = self.responses.pop(0)
            if isinstance(response, Exception):
                raise response
            return response
        return httpx.Response(200, json={"id": f"email_{len(self.requests)}"})

    @property
    def payloads(self) -> list[dict[str, Any]]:
        return [json.loads(r.content) for r in self.requests]


# === Core Fixtures ===


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def no_wait_retry() -> RetryPolicy:
    """Retry policy with no sleeping between attempts."""
    return RetryPolicy(max_attempts=3, backoff_seconds=0, sleep=lambda _: None)


@pytest.fixture
def mock_stripe_client() -> MagicMock:
    """StripeClient double; configure checkout.sessions.create/retrieve per test."""
    client = MagicMock(name="StripeClient")
    client.checkout.sessions.create.return_value = MagicMock(
        id="cs_test_abc123",
        client_secret="cs_test_abc123_secret_xyz",
        url="https://checkout.stripe.com/c/pay/cs_test_abc123",
    )
    return client


@pytest.fixture
def stripe_service(settings: Settings, mock_stripe_client: MagicMock, no_wait_retry: RetryPolicy) -> StripeService:
    return StripeService(settings, client=mock_stripe_client, retry=no_wait_retry)


@pytest.fixture
def email_transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def email_client(
    settings: Settings,
    email_transport: RecordingTransport,
    no_wait_retry: RetryPolicy,
) -> Generator[ResendEmailClient, None, None]:
    client = ResendEmailClient(
        api_key=settings.resend_api_key or "",
        http_client=httpx.Client(transport=httpx.MockTransport(email_transport)),
        api_url=settings.resend_api_url,
        timeout=settings.http_timeout_seconds,
        retry=no_wait_retry,
    )
    yield client
    client.close()


@pytest.fixture
def notification_service(settings: Settings, email_client: ResendEmailClient) -> NotificationService:
    return NotificationService(settings, email_client)


@pytest.fixture
def form_service(settings: Settings, email_client: ResendEmailClient) -> FormNotificationService:
    return FormNotificationService(settings, email_client)


@pytest.fixture
def webhook_handler(stripe_service: StripeService, notification_service: NotificationService) -> WebhookHandler:
    return WebhookHandler(stripe_service, notification_service)


# === API Fixtures ===


@pytest.fixture
def build_client(
    mock_stripe_client: MagicMock,
    no_wait_retry: RetryPolicy,
    email_client: ResendEmailClient,
) -> Generator[Callable[..., TestClient], None, None]:
    """Factory for a TestClient whose services use the given settings.

    Call with no arguments for the complete test configuration, or with
    ``Settings`` overrides to simulate missing configuration.
    """
    from storefront_api import dependencies
    from storefront_api.main import app

    def _build(**overrides: Any) -> TestClient:
        settings = make_settings(**overrides)
        stripe_svc = StripeService(settings, client=mock_stripe_client, retry=no_wait_retry)
        notifications = NotificationService(settings, email_client)

        app.dependency_overrides[dependencies.get_checkout_service] = lambda: CheckoutService(
            pricing=PriceResolver(settings),
            stripe_service=stripe_svc,
            default_origin=settings.default_origin,
        )
        app.dependency_overrides[dependencies.get_webhook_handler] = lambda: WebhookHandler(
            stripe_svc, notifications
        )
        app.dependency_overrides[dependencies.get_session_status_service] = lambda: SessionStatusService(stripe_svc)
        app.dependency_overrides[dependencies.get_form_notification_service] = lambda: FormNotificationService(
            settings, email_client
        )
        return TestClient(app)

    yield _build

    app.dependency_overrides.clear()
    dependencies.reset_services()


@pytest.fixture
def client(build_client: Callable[..., TestClient]) -> TestClient:
    return build_client()

"""FastAPI dependency injection providers for storefront services.

This module provides factory functions for service instances using @lru_cache
so each service (and the Stripe and HTTP clients behind it) is built once per
process and reused across requests.

Usage in routes:
    from storefront_api.dependencies import get_checkout_service

    @router.post("/create-checkout-session")
    def create_checkout_session(
        checkout: CheckoutService = Depends(get_checkout_service),
    ):
        ...

Service Dependency Graph:
    Settings (singleton via get_settings)
        ├── StripeService
        │       ├── CheckoutService (+ PriceResolver)
        │       ├── SessionStatusService
        │       └── WebhookHandler (+ NotificationService)
        └── ResendEmailClient
                ├── NotificationService
                └── FormNotificationService

Testing:
    Override the route-level providers through ``app.dependency_overrides``
    and call reset_services() to clear cached instances between tests.
"""

from functools import lru_cache

from storefront.config import get_settings
from storefront.services.checkout_service import CheckoutService
from storefront.services.email_client import ResendEmailClient
from storefront.services.form_notifications import FormNotificationService
from storefront.services.notification_service import NotificationService
from storefront.services.pricing import PriceResolver
from storefront.services.session_status import SessionStatusService
from storefront.services.stripe_service import StripeService
from storefront.services.webhook_handler import WebhookHandler


@lru_cache
def get_stripe_service() -> StripeService:
    """Get cached StripeService instance.

    The Stripe client itself is created lazily on first use, so a missing
    secret key surfaces as a configuration error on the request that needs it.
    """
    return StripeService(settings=get_settings())


@lru_cache
def get_price_resolver() -> PriceResolver:
    return PriceResolver(settings=get_settings())


@lru_cache
def get_checkout_service() -> CheckoutService:
    """Get cached CheckoutService instance.

    Returns:
        CheckoutService configured with the price table and StripeService.
    """
    settings = get_settings()
    return CheckoutService(
        pricing=get_price_resolver(),
        stripe_service=get_stripe_service(),
        default_origin=settings.default_origin,
    )


@lru_cache
def get_email_client() -> ResendEmailClient:
    """Get cached Resend client.

    An empty API key is allowed here; the notification services check the
    email configuration before any send.
    """
    settings = get_settings()
    return ResendEmailClient.create(
        settings.resend_api_key or "",
        api_url=settings.resend_api_url,
        timeout=settings.http_timeout_seconds,
        retry=settings.retry_policy(),
    )


@lru_cache
def get_notification_service() -> NotificationService:
    return NotificationService(settings=get_settings(), email_client=get_email_client())


@lru_cache
def get_form_notification_service() -> FormNotificationService:
    return FormNotificationService(settings=get_settings(), email_client=get_email_client())


@lru_cache
def get_webhook_handler() -> WebhookHandler:
    """Get cached WebhookHandler instance.

    Returns:
        WebhookHandler wired to StripeService and NotificationService.
    """
    return WebhookHandler(
        stripe_service=get_stripe_service(),
        notifications=get_notification_service(),
    )


@lru_cache
def get_session_status_service() -> SessionStatusService:
    return SessionStatusService(stripe_service=get_stripe_service())


def reset_services() -> None:
    """Clear all cached service instances and settings.

    Call this in test fixtures to ensure clean state between tests.

    Example:
        @pytest.fixture(autouse=True)
        def reset_state():
            yield
            reset_services()
    """
    if get_email_client.cache_info().currsize:
        get_email_client().close()

    get_stripe_service.cache_clear()
    get_price_resolver.cache_clear()
    get_checkout_service.cache_clear()
    get_email_client.cache_clear()
    get_notification_service.cache_clear()
    get_form_notification_service.cache_clear()
    get_webhook_handler.cache_clear()
    get_session_status_service.cache_clear()

    get_settings.cache_clear()

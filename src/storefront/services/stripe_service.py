"""Stripe payment service for checkout sessions and webhook verification.

Provides integration with Stripe using the v8+ StripeClient pattern.
The client and settings are injected; nothing here touches module-level
Stripe state.
"""

import logging
import uuid
from collections.abc import Mapping
from typing import Any

import stripe
from stripe import StripeClient

from storefront.config import Settings
from storefront.models.checkout import CheckoutSessionResult, UIMode
from storefront.models.errors import StripeServiceError, is_stripe_error_retryable
from storefront.models.stripe_session import CheckoutSessionSnapshot
from storefront.utils.logging import log_payment_operation
from storefront.utils.retry import RetryPolicy

logger = logging.getLogger(__name__)

# Expansions needed to resolve PaymentIntent, charge and line item totals
SESSION_EXPAND = [
    "payment_intent.charges",
    "payment_intent.latest_charge",
    "line_items",
]


def is_retryable_stripe_exception(exc: Exception) -> bool:
    """Classify a Stripe SDK exception as transient (retry) or permanent."""
    if isinstance(exc, (stripe.APIConnectionError, stripe.RateLimitError)):
        return True
    if isinstance(exc, stripe.StripeError):
        if is_stripe_error_retryable(getattr(exc, "code", None)):
            return True
        return (exc.http_status or 0) >= 500
    return False


def to_plain(obj: Any) -> Any:
    """Convert a StripeObject into plain dicts; plain mappings pass through."""
    if type(obj) is dict:
        return obj
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    return obj


class StripeService:
    """Service for Stripe payment operations.

    Handles:
    - Checkout session creation (embedded and hosted)
    - Session retrieval with the expansions used for reconciliation
    - Webhook signature validation

    Usage:
        stripe_svc = StripeService(settings)
        result = stripe_svc.create_checkout_session(
            price_id="price_123",
            package_slug="starter",
            rush=False,
            ui_mode=UIMode.EMBEDDED,
            success_url="https://example.com/#/thank-you?session_id={CHECKOUT_SESSION_ID}",
            cancel_url="https://example.com/#/pay/starter?rush=0",
        )
    """

    def __init__(
        self,
        settings: Settings,
        client: StripeClient | None = None,
        retry: RetryPolicy | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            settings: Application settings (secret key, webhook secret, timeouts).
            client: Pre-built StripeClient; created lazily from settings when omitted.
            retry: Retry policy for API calls; defaults to the settings policy.
        """
        self._settings = settings
        self._client = client
        self._retry = retry or settings.retry_policy()

    def _get_client(self) -> StripeClient:
        """Get or create the Stripe client (lazy initialization).

        Raises:
            CheckoutError: If STRIPE_SECRET_KEY is not configured.
        """
        if self._client is None:
            secret_key = self._settings.require_stripe_secret_key()
            self._client = StripeClient(
                secret_key,
                http_client=stripe.RequestsClient(timeout=self._settings.http_timeout_seconds),
                max_network_retries=0,
            )
            logger.info("Stripe client initialized for environment: %s", self._settings.environment)
        return self._client

    def require_webhook_secret(self) -> str:
        """Return the webhook signing secret or raise WEBHOOK_SECRET_MISSING."""
        return self._settings.require_webhook_secret()

    def create_checkout_session(
        self,
        *,
        price_id: str,
        package_slug: str,
        rush: bool,
        ui_mode: UIMode,
        success_url: str,
        cancel_url: str,
    ) -> CheckoutSessionResult:
        """Create a Stripe Checkout session for a single package.

        Args:
            price_id: Stripe Price ID for the package/rush combination.
            package_slug: Package identifier stored in metadata.
            rush: Rush flag stored in metadata as "true"/"false".
            ui_mode: Embedded (client secret) or hosted (redirect URL).
            success_url: Return URL; supports {CHECKOUT_SESSION_ID}.
            cancel_url: Cancel URL (hosted mode only).

        Returns:
            CheckoutSessionResult with either client_secret or url set.

        Raises:
            StripeServiceError: If session creation fails.
        """
        client = self._get_client()

        params: dict[str, Any] = {
            "mode": "payment",
            "line_items": [{"price": price_id, "quantity": 1}],
            "metadata": {"package": package_slug, "rush": "true" if rush else "false"},
        }
        if ui_mode is UIMode.HOSTED:
            params["success_url"] = success_url
            params["cancel_url"] = cancel_url
        else:
            params["ui_mode"] = "embedded"
            params["return_url"] = success_url

        # Same key across retries so a retried create cannot open a second session
        idempotency_key = f"checkout_{package_slug}_{uuid.uuid4().hex}"

        try:
            log_payment_operation(
                logger,
                "create_checkout_session",
                package=package_slug,
                rush=rush,
                ui_mode=ui_mode.value,
            )
            session = self._retry.call(
                lambda: client.checkout.sessions.create(
                    params=params,
                    options={"idempotency_key": idempotency_key},
                ),
                is_retryable=is_retryable_stripe_exception,
                operation="create_checkout_session",
            )
        except stripe.StripeError as e:
            error_code = getattr(e, "code", None)
            logger.error(
                "Stripe checkout session creation failed: %s (code: %s)",
                str(e),
                error_code,
            )
            raise StripeServiceError(
                f"Failed to create checkout session: {e}",
                stripe_error_code=error_code,
                retryable=is_retryable_stripe_exception(e),
            ) from e

        logger.info("Checkout session created: %s for package %s", session.id, package_slug)

        if ui_mode is UIMode.HOSTED:
            return CheckoutSessionResult(session_id=session.id, ui_mode=ui_mode, url=session.url)
        return CheckoutSessionResult(
            session_id=session.id,
            ui_mode=ui_mode,
            client_secret=session.client_secret,
        )

    def retrieve_session(self, session_id: str) -> CheckoutSessionSnapshot:
        """Fetch a checkout session with PaymentIntent, charges and line items expanded.

        Args:
            session_id: Checkout session ID (cs_xxx).

        Returns:
            Normalized snapshot of the session.

        Raises:
            StripeServiceError: If the session cannot be retrieved.
        """
        client = self._get_client()

        try:
            session = self._retry.call(
                lambda: client.checkout.sessions.retrieve(
                    session_id,
                    params={"expand": SESSION_EXPAND},
                ),
                is_retryable=is_retryable_stripe_exception,
                operation="retrieve_session",
            )
        except stripe.StripeError as e:
            error_code = getattr(e, "code", None)
            log_payment_operation(
                logger,
                "retrieve_session",
                session_id=session_id,
                error=str(e),
                code=error_code,
            )
            raise StripeServiceError(
                f"Failed to retrieve checkout session {session_id}: {e}",
                stripe_error_code=error_code,
                retryable=is_retryable_stripe_exception(e),
            ) from e

        data = to_plain(session)
        if not isinstance(data, Mapping):
            raise StripeServiceError(f"Unexpected session payload for {session_id}")
        return CheckoutSessionSnapshot.from_stripe(data)

    def verify_webhook_signature(self, payload: bytes, signature: str) -> dict[str, Any]:
        """Verify a webhook signature and parse the event.

        The signature is an HMAC over the exact request bytes, so ``payload``
        must be the raw body, never a re-serialized JSON document.

        Args:
            payload: Raw request body bytes.
            signature: Stripe-Signature header value.

        Returns:
            Parsed Stripe event dictionary.

        Raises:
            CheckoutError: If the webhook secret is not configured.
            StripeServiceError: If the signature is invalid or the timestamp is stale.
        """
        webhook_secret = self._settings.require_webhook_secret()

        try:
            event = stripe.Webhook.construct_event(
                payload,
                signature,
                webhook_secret,
                tolerance=self._settings.stripe_webhook_tolerance,
            )
        except stripe.SignatureVerificationError as e:
            logger.warning("Invalid webhook signature: %s", str(e))
            raise StripeServiceError("Invalid webhook signature") from e
        except ValueError as e:
            # Signature matched but the body is not valid JSON
            logger.warning("Invalid webhook payload: %s", str(e))
            raise StripeServiceError("Invalid webhook signature") from e

        logger.info("Webhook signature verified for event: %s", event["id"])
        return dict(to_plain(event))

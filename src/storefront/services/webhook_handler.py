"""Webhook handler for processing Stripe events.

Provides business logic for handling webhook events separate from
HTTP routing concerns. This enables:
- Unit testing without HTTP overhead
- Reuse across different transport mechanisms (ASGI, Lambda)

Delivery lifecycle:
    received -> verified -> ignored | processing -> processed | failed

The handler keeps no state. Every delivery of a completed-session event
re-fetches the session from Stripe and re-sends the notifications, so a
redelivered event may produce duplicate emails; there is no dedup store.
"""

from collections.abc import Mapping
from typing import Any

from storefront.models.checkout import PaymentSummary
from storefront.models.errors import CheckoutError, ErrorCode, StripeServiceError
from storefront.models.package import timeline_for
from storefront.models.stripe_webhook import WebhookOutcome, WebhookResult
from storefront.utils.logging import get_logger, log_webhook_event

from .notification_service import NotificationService
from .stripe_service import StripeService
from .transaction import resolve_transaction_reference

logger = get_logger(__name__)

CHECKOUT_SESSION_COMPLETED = "checkout.session.completed"
DEFAULT_CURRENCY = "usd"


class WebhookHandler:
    """Handler for Stripe webhook deliveries.

    Verifies the signature over the raw body, ignores every event type except
    ``checkout.session.completed``, and for completed sessions sends the
    payment notifications.
    """

    def __init__(
        self,
        stripe_service: StripeService,
        notifications: NotificationService,
    ) -> None:
        self._stripe = stripe_service
        self._notifications = notifications

    def verify(self, payload: bytes, signature: str | None) -> dict[str, Any]:
        """Authenticate a delivery and parse the event.

        Args:
            payload: Raw request body, exactly as received.
            signature: Stripe-Signature header value.

        Raises:
            CheckoutError: WEBHOOK_SECRET_MISSING (server misconfiguration) or
                INVALID_WEBHOOK_SIGNATURE (missing/invalid/stale signature).
        """
        # Secret check first so a misconfigured endpoint reports 500, not 400
        self._stripe.require_webhook_secret()

        if not signature:
            logger.warning("Webhook request missing Stripe-Signature header")
            raise CheckoutError(
                ErrorCode.INVALID_WEBHOOK_SIGNATURE,
                details={"message": "Missing Stripe-Signature header"},
            )

        try:
            return self._stripe.verify_webhook_signature(payload, signature)
        except StripeServiceError as e:
            log_webhook_event(logger, None, None, result="rejected", error=str(e))
            raise CheckoutError(
                ErrorCode.INVALID_WEBHOOK_SIGNATURE,
                details={"message": str(e)},
            ) from e

    def build_summary(self, session_id: str) -> PaymentSummary:
        """Re-fetch the session and derive everything the emails need.

        The event payload may carry a trimmed session, so the full object is
        always loaded from Stripe.
        """
        snapshot = self._stripe.retrieve_session(session_id)

        metadata = snapshot.metadata
        slug = (metadata.get("package") or metadata.get("slug") or "").strip().lower()
        rush = metadata.get("rush", "").strip().lower() == "true"

        return PaymentSummary(
            session_id=snapshot.id,
            package_slug=slug or None,
            timeline=timeline_for(slug),
            rush=rush,
            amount_total=snapshot.amount_total,
            currency=(snapshot.currency or DEFAULT_CURRENCY).upper(),
            reference=resolve_transaction_reference(snapshot),
            customer_email=snapshot.customer_email,
        )

    def handle(self, payload: bytes, signature: str | None) -> WebhookOutcome:
        """Process one webhook delivery.

        Args:
            payload: Raw request body bytes.
            signature: Stripe-Signature header value.

        Returns:
            WebhookOutcome with result IGNORED, PROCESSED or FAILED.

        Raises:
            CheckoutError: Signature rejected (400) or configuration missing (500).
        """
        event = self.verify(payload, signature)

        event_id = event.get("id")
        event_type = event.get("type")
        data = event.get("data")
        event_object = data.get("object") if isinstance(data, Mapping) else None
        session_id = event_object.get("id") if isinstance(event_object, Mapping) else None

        log_webhook_event(logger, event_type, event_id, session_id=session_id, result="received")

        if event_type != CHECKOUT_SESSION_COMPLETED:
            outcome = WebhookOutcome(
                event_id=event_id,
                event_type=event_type,
                session_id=session_id,
                result=WebhookResult.IGNORED,
            )
            log_webhook_event(logger, event_type, event_id, session_id=session_id, result=outcome.result.value)
            return outcome

        # Configuration problems fail before any external call
        self._notifications.ensure_configured()

        try:
            if not session_id:
                raise ValueError("checkout.session.completed event without a session id")
            summary = self.build_summary(session_id)
            sent = self._notifications.send_payment_notifications(summary)
        except CheckoutError:
            raise
        except Exception as e:
            logger.exception(
                "Webhook processing failed for event %s (%s), session %s",
                event_id,
                event_type,
                session_id,
            )
            outcome = WebhookOutcome(
                event_id=event_id,
                event_type=event_type,
                session_id=session_id,
                result=WebhookResult.FAILED,
                error_message=str(e),
            )
            log_webhook_event(
                logger,
                event_type,
                event_id,
                session_id=session_id,
                result=outcome.result.value,
                error=str(e),
            )
            return outcome

        outcome = WebhookOutcome(
            event_id=event_id,
            event_type=event_type,
            session_id=session_id,
            result=WebhookResult.PROCESSED,
            notifications_sent=sent,
        )
        log_webhook_event(
            logger,
            event_type,
            event_id,
            session_id=session_id,
            result=outcome.result.value,
            package=summary.package_slug,
            reference=summary.reference.value,
            notifications_sent=sent,
        )
        return outcome

"""Read-only checkout session summary for client polling."""

import logging

from storefront.models.checkout import SessionStatus
from storefront.models.errors import CheckoutError, ErrorCode, StripeServiceError

from .stripe_service import StripeService
from .transaction import resolve_transaction_reference

logger = logging.getLogger(__name__)


class SessionStatusService:
    """Builds the normalized session summary shown on the thank-you page."""

    def __init__(self, stripe_service: StripeService) -> None:
        self._stripe = stripe_service

    def get_status(self, session_id: str | None) -> SessionStatus:
        """Fetch and summarize a checkout session.

        Args:
            session_id: Checkout session ID from the query string.

        Raises:
            CheckoutError: MISSING_SESSION_ID when empty, SESSION_LOAD_FAILED
                when Stripe cannot return the session.
        """
        session_id = (session_id or "").strip()
        if not session_id:
            raise CheckoutError(ErrorCode.MISSING_SESSION_ID)

        try:
            snapshot = self._stripe.retrieve_session(session_id)
        except StripeServiceError as e:
            logger.error("Failed to load session %s: %s", session_id, e)
            raise CheckoutError(
                ErrorCode.SESSION_LOAD_FAILED,
                details={"session_id": session_id},
            ) from e

        reference = resolve_transaction_reference(snapshot)
        payment_intent = snapshot.payment_intent

        return SessionStatus(
            id=snapshot.id,
            status=snapshot.status,
            payment_status=snapshot.payment_status,
            payment_intent_id=reference.payment_intent_id,
            charge_id=reference.charge_id,
            payment_intent_status=payment_intent.status if payment_intent else None,
            amount_total=snapshot.amount_total,
            line_items_total=snapshot.line_items_total(),
            currency=snapshot.currency,
            metadata=snapshot.metadata,
            transaction_id=reference.value,
            transaction_label=reference.label,
        )

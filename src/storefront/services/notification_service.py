"""Payment confirmation emails for customers and the operator."""

import logging

from storefront.config import Settings
from storefront.models.checkout import PaymentSummary
from storefront.models.errors import CheckoutError, EmailDeliveryError, ErrorCode
from storefront.models.notifications import EmailMessage

from .email_client import EmailClient
from .templates import PLACEHOLDER, render_template, sender_address

logger = logging.getLogger(__name__)

COMPLETED_EVENT_SOURCE = "checkout.session.completed"


class NotificationService:
    """Renders and sends the payment notifications for a completed checkout.

    Sends:
    - a customer confirmation, when Stripe resolved a customer email
    - an operator summary with raw PaymentIntent/charge IDs, always

    Both sends are attempted even if one fails; failures are raised
    together afterwards so the webhook can ask Stripe to redeliver.
    """

    def __init__(self, settings: Settings, email_client: EmailClient) -> None:
        self._settings = settings
        self._email = email_client

    def ensure_configured(self) -> None:
        """Fail before any send when API key, sender or recipient is missing.

        Raises:
            CheckoutError: EMAIL_CONFIG_MISSING
        """
        missing = self._settings.missing_email_settings()
        if missing:
            logger.error("Missing email configuration: %s", ", ".join(missing))
            raise CheckoutError(ErrorCode.EMAIL_CONFIG_MISSING, details={"missing": ",".join(missing)})

    def build_customer_email(self, summary: PaymentSummary) -> EmailMessage | None:
        if not summary.customer_email:
            return None
        sender = self._settings.from_email or ""
        brand = self._settings.brand_name
        return EmailMessage(
            sender=sender,
            to=[summary.customer_email],
            subject=f"{brand}: Payment received, your {summary.timeline.label} is locked in",
            html=render_template(
                "payment_customer.html.j2",
                summary=summary,
                brand=brand,
                sender_address=sender_address(sender),
            ),
        )

    def build_operator_email(self, summary: PaymentSummary) -> EmailMessage:
        brand = self._settings.brand_name
        return EmailMessage(
            sender=self._settings.from_email or "",
            to=[self._settings.to_email or ""],
            cc=[self._settings.cc_email] if self._settings.cc_email else [],
            reply_to=summary.customer_email,
            subject=f"{brand}: Payment received - {summary.timeline.label} ({summary.amount_display})",
            html=render_template(
                "payment_operator.html.j2",
                summary=summary,
                placeholder=PLACEHOLDER,
                source=COMPLETED_EVENT_SOURCE,
            ),
        )

    def send_payment_notifications(self, summary: PaymentSummary) -> int:
        """Send the customer and operator emails.

        Args:
            summary: Resolved data for the completed checkout.

        Returns:
            Number of emails sent.

        Raises:
            CheckoutError: Email configuration missing (nothing sent).
            EmailDeliveryError: At least one send failed after retries.
        """
        self.ensure_configured()

        messages: list[tuple[str, EmailMessage]] = []
        customer = self.build_customer_email(summary)
        if customer is not None:
            messages.append(("customer", customer))
        else:
            logger.info("No customer email on session %s; skipping confirmation", summary.session_id)
        messages.append(("operator", self.build_operator_email(summary)))

        sent = 0
        failures: list[str] = []
        for recipient_class, message in messages:
            try:
                self._email.send(message)
                sent += 1
            except EmailDeliveryError as e:
                logger.error(
                    "Failed to send %s email for session %s: %s",
                    recipient_class,
                    summary.session_id,
                    e,
                )
                failures.append(recipient_class)

        if failures:
            raise EmailDeliveryError(
                f"Notification delivery failed for: {', '.join(failures)}",
            )
        return sent

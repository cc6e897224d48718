"""Lead-capture form submission emails."""

import logging
from enum import Enum

from storefront.config import Settings
from storefront.models.errors import CheckoutError, EmailDeliveryError, ErrorCode
from storefront.models.notifications import EmailMessage, FormSubmission
from storefront.models.package import get_package

from .email_client import EmailClient
from .templates import render_template

logger = logging.getLogger(__name__)

CONTACT_FORM = "contact"
BRIEF_PREFIX = "brief-"

# Forms we react to; everything else is acknowledged and ignored
ALLOWED_FORMS = frozenset({CONTACT_FORM, "brief-starter", "brief-growth", "brief-scale"})

# Customer acknowledgments rotate on the submission number
ACK_TEMPLATES = (
    "form_ack_1.html.j2",
    "form_ack_2.html.j2",
    "form_ack_3.html.j2",
)


class FormResult(str, Enum):
    IGNORED = "ignored"
    SENT = "sent"


def _brief_slug(form_name: str) -> str:
    return form_name.removeprefix(BRIEF_PREFIX)


def ack_template_for(submission: FormSubmission) -> str:
    """Pick the acknowledgment template for a submission."""
    return ACK_TEMPLATES[(submission.number or 0) % len(ACK_TEMPLATES)]


class FormNotificationService:
    """Emails the operator a summary of each allowed form submission and,
    when the submitter left an email address, sends them an acknowledgment.
    """

    def __init__(self, settings: Settings, email_client: EmailClient) -> None:
        self._settings = settings
        self._email = email_client

    def build_operator_email(self, submission: FormSubmission) -> EmailMessage:
        brand = self._settings.brand_name
        if submission.form_name == CONTACT_FORM:
            title = "New Contact submission"
            subject = f"{brand}: New contact form"
        else:
            slug = _brief_slug(submission.form_name)
            title = f"New {slug.upper()} Brief"
            subject = f"{brand}: New {slug} brief"

        return EmailMessage(
            sender=self._settings.from_email or "",
            to=[self._settings.to_email or ""],
            cc=[self._settings.cc_email] if self._settings.cc_email else [],
            reply_to=submission.field_value("email"),
            subject=subject,
            html=render_template("form_operator.html.j2", title=title, submission=submission),
        )

    def build_acknowledgment(self, submission: FormSubmission) -> EmailMessage | None:
        customer_email = submission.field_value("email")
        if not customer_email:
            return None

        brand = self._settings.brand_name
        if submission.form_name == CONTACT_FORM:
            topic = "message"
        else:
            package = get_package(_brief_slug(submission.form_name))
            label = package.label if package else _brief_slug(submission.form_name).title()
            topic = f"{label} brief"

        return EmailMessage(
            sender=self._settings.from_email or "",
            to=[customer_email],
            subject=f"{brand}: We received your {topic}",
            html=render_template(
                ack_template_for(submission),
                name=submission.field_value("name"),
                topic=topic,
                brand=brand,
            ),
        )

    def handle_submission(self, submission: FormSubmission) -> FormResult:
        """Send the emails for one submission.

        Returns:
            FormResult.IGNORED for forms outside the allow-list, else SENT.

        Raises:
            CheckoutError: Email configuration missing (nothing sent).
            EmailDeliveryError: A send failed after retries.
        """
        if submission.form_name not in ALLOWED_FORMS:
            logger.info("Ignoring submission for form %r", submission.form_name)
            return FormResult.IGNORED

        missing = self._settings.missing_email_settings()
        if missing:
            logger.warning("Missing email configuration: %s", ", ".join(missing))
            raise CheckoutError(ErrorCode.EMAIL_CONFIG_MISSING, details={"missing": ",".join(missing)})

        messages = [self.build_operator_email(submission)]
        ack = self.build_acknowledgment(submission)
        if ack is not None:
            messages.append(ack)

        failures = 0
        for message in messages:
            try:
                self._email.send(message)
            except EmailDeliveryError as e:
                logger.error(
                    "Form email failed (form=%s, number=%s): %s",
                    submission.form_name,
                    submission.number,
                    e,
                )
                failures += 1

        if failures:
            raise EmailDeliveryError(f"{failures} of {len(messages)} form email(s) failed")

        logger.info("Form submission #%s (%s) emailed", submission.number, submission.form_name)
        return FormResult.SENT

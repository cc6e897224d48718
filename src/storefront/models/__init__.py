"""Pydantic models for the storefront checkout backend."""

from .checkout import (
    CheckoutRequest,
    CheckoutSessionResult,
    PaymentSummary,
    SessionStatus,
    UIMode,
)
from .errors import (
    ERROR_MESSAGES,
    STRIPE_RETRYABLE_ERRORS,
    CheckoutError,
    EmailDeliveryError,
    ErrorBody,
    ErrorCode,
    StripeServiceError,
    is_stripe_error_retryable,
)
from .notifications import EmailMessage, FormSubmission
from .package import PACKAGES, Package, PackageTimeline, get_package, timeline_for
from .stripe_session import (
    ChargeRef,
    CheckoutSessionSnapshot,
    LineItem,
    PaymentIntentRef,
    TransactionReference,
)
from .stripe_webhook import WebhookOutcome, WebhookResult

__all__ = [
    # Catalog
    "PACKAGES",
    "Package",
    "PackageTimeline",
    "get_package",
    "timeline_for",
    # Checkout
    "CheckoutRequest",
    "CheckoutSessionResult",
    "PaymentSummary",
    "SessionStatus",
    "UIMode",
    # Stripe objects
    "ChargeRef",
    "CheckoutSessionSnapshot",
    "LineItem",
    "PaymentIntentRef",
    "TransactionReference",
    # Webhook
    "WebhookOutcome",
    "WebhookResult",
    # Notifications
    "EmailMessage",
    "FormSubmission",
    # Errors
    "CheckoutError",
    "EmailDeliveryError",
    "ErrorBody",
    "ErrorCode",
    "ERROR_MESSAGES",
    "STRIPE_RETRYABLE_ERRORS",
    "StripeServiceError",
    "is_stripe_error_retryable",
]

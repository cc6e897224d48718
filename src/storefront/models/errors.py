"""Standard error codes for the storefront checkout backend.

Every failure surfaced to a client goes through one of these codes so the
HTTP layer can map it to a status and a public message without leaking
internal detail.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ErrorCode(str, Enum):
    """Standard error codes."""

    # Client input errors (ERR_001-ERR_004)
    INVALID_PACKAGE = "ERR_001"
    MISSING_SESSION_ID = "ERR_002"
    INVALID_WEBHOOK_SIGNATURE = "ERR_003"
    MISSING_FORM_PAYLOAD = "ERR_004"

    # Configuration errors (ERR_CONFIG_001-ERR_CONFIG_004)
    PAYMENT_CONFIG_MISSING = "ERR_CONFIG_001"
    PRICE_NOT_CONFIGURED = "ERR_CONFIG_002"
    WEBHOOK_SECRET_MISSING = "ERR_CONFIG_003"
    EMAIL_CONFIG_MISSING = "ERR_CONFIG_004"

    # Upstream provider errors (ERR_UPSTREAM_001-ERR_UPSTREAM_004)
    STRIPE_API_ERROR = "ERR_UPSTREAM_001"
    SESSION_LOAD_FAILED = "ERR_UPSTREAM_002"
    EMAIL_DELIVERY_FAILED = "ERR_UPSTREAM_003"
    WEBHOOK_PROCESSING_FAILED = "ERR_UPSTREAM_004"


# Public messages; safe to return to clients
ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.INVALID_PACKAGE: "Invalid package",
    ErrorCode.MISSING_SESSION_ID: "Missing session_id",
    ErrorCode.INVALID_WEBHOOK_SIGNATURE: "Invalid webhook signature",
    ErrorCode.MISSING_FORM_PAYLOAD: "No payload",
    ErrorCode.PAYMENT_CONFIG_MISSING: "Server Error",
    ErrorCode.PRICE_NOT_CONFIGURED: "Server Error",
    ErrorCode.WEBHOOK_SECRET_MISSING: "Webhook misconfigured",
    ErrorCode.EMAIL_CONFIG_MISSING: "Email env missing",
    ErrorCode.STRIPE_API_ERROR: "Server Error",
    ErrorCode.SESSION_LOAD_FAILED: "Failed to load session",
    ErrorCode.EMAIL_DELIVERY_FAILED: "Failed to send email",
    ErrorCode.WEBHOOK_PROCESSING_FAILED: "Webhook handler error",
}


class ErrorBody(BaseModel):
    """JSON error body returned by the JSON endpoints."""

    model_config = ConfigDict(strict=True)

    error: str
    code: ErrorCode


class CheckoutError(Exception):
    """Exception raised by checkout, webhook and notification operations.

    Converted to an HTTP response by the API exception handlers.
    """

    def __init__(
        self,
        code: ErrorCode,
        details: Optional[dict[str, str]] = None,
    ):
        self.code = code
        self.message = ERROR_MESSAGES[code]
        self.details = details
        super().__init__(self.message)

    def to_body(self) -> ErrorBody:
        """Public JSON body for this error (details are never included)."""
        return ErrorBody(error=self.message, code=self.code)


class StripeServiceError(Exception):
    """Raised when a Stripe operation fails."""

    def __init__(
        self,
        message: str,
        stripe_error_code: str | None = None,
        retryable: bool = False,
    ) -> None:
        """Initialize with message and optional Stripe error code.

        Args:
            message: Human-readable error message.
            stripe_error_code: Stripe-specific error code if available.
            retryable: Whether the underlying failure was transient.
        """
        super().__init__(message)
        self.stripe_error_code = stripe_error_code
        self.retryable = retryable


class EmailDeliveryError(Exception):
    """Raised when the email API rejects or fails a send."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code

    @property
    def retryable(self) -> bool:
        """Transport failures, rate limits and 5xx responses are worth retrying."""
        if self.status_code is None:
            return True
        return self.status_code == 429 or self.status_code >= 500


# Stripe error codes that indicate a transient failure
STRIPE_RETRYABLE_ERRORS: set[str] = {
    "processing_error",
    "rate_limit",
    "lock_timeout",
    "api_connection_error",
}


def is_stripe_error_retryable(stripe_error_code: Optional[str]) -> bool:
    """Check if a Stripe error code is likely transient and retryable.

    Args:
        stripe_error_code: The Stripe error code.

    Returns:
        True if the error may be resolved by retrying.
    """
    return stripe_error_code in STRIPE_RETRYABLE_ERRORS if stripe_error_code else False

"""Shared API response shapes."""

from pydantic import BaseModel, Field


class PingResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    timestamp: str = Field(..., description="Current server time (ISO 8601, UTC)")
    service: str = "storefront-api"


class PlainTextMessage:
    """Plain-text bodies returned by the webhook and form endpoints."""

    IGNORED = "Ignored"
    OK_WEBHOOK = "ok"
    OK_FORM = "OK"
    IGNORED_FORM = "Ignored form"
    INVALID_SIGNATURE_PREFIX = "Webhook Error: "
    FORM_EMAIL_CONFIG_MISSING = "Email env vars not configured"
    FORM_FAILED = "Function error"

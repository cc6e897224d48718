"""Stripe webhook delivery outcome."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class WebhookResult(str, Enum):
    """Terminal state of a webhook delivery."""

    IGNORED = "ignored"
    PROCESSED = "processed"
    FAILED = "failed"


class WebhookOutcome(BaseModel):
    """Result of handling one verified Stripe webhook delivery.

    Used for:
    - Choosing the HTTP response returned to Stripe
    - Auditing: logged for every delivery
    """

    model_config = ConfigDict(frozen=True)

    event_id: str | None = Field(
        default=None,
        description="Stripe event ID (evt_xxx)",
        examples=["evt_1ABC123DEF456"],
    )
    event_type: str | None = Field(
        default=None,
        description="Stripe event type",
        examples=["checkout.session.completed"],
    )
    session_id: str | None = Field(
        default=None,
        description="Checkout session ID from the event object",
    )
    result: WebhookResult
    notifications_sent: int = Field(default=0, ge=0)
    error_message: str | None = Field(
        default=None,
        description="Internal error details if processing failed (never returned to Stripe)",
    )

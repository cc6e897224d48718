"""Checkout request/response and payment summary models."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .package import PackageTimeline
from .stripe_session import TransactionReference


class UIMode(str, Enum):
    """Where the Stripe payment form is rendered."""

    EMBEDDED = "embedded"
    HOSTED = "hosted"

    @classmethod
    def parse(cls, value: str | None) -> "UIMode":
        """Only an explicit "hosted" selects hosted mode; everything else is embedded."""
        if value and value.strip().lower() == cls.HOSTED.value:
            return cls.HOSTED
        return cls.EMBEDDED


class CheckoutRequest(BaseModel):
    """Request to open a Stripe Checkout session for a package."""

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "slug": "starter",
                    "rush": False,
                    "origin": "https://example.com",
                    "uiMode": "embedded",
                }
            ]
        },
    )

    slug: str = Field(default="", description="Package identifier", examples=["starter"])
    rush: bool = Field(default=False, description="Rush delivery selected")
    origin: str | None = Field(
        default=None,
        description="Site origin used to build return/cancel URLs",
        examples=["https://example.com"],
    )
    ui_mode: str | None = Field(
        default=None,
        alias="uiMode",
        description='"hosted" for a redirect checkout, anything else for embedded',
    )

    @field_validator("slug", mode="before")
    @classmethod
    def _slug_as_text(cls, value: Any) -> str:
        # Non-string slugs are simply unknown packages
        return value if isinstance(value, str) else ""

    @field_validator("rush", mode="before")
    @classmethod
    def _rush_truthy(cls, value: Any) -> bool:
        if isinstance(value, str):
            return value.strip().lower() in ("1", "true", "yes", "on")
        return bool(value)

    @field_validator("origin", "ui_mode", mode="before")
    @classmethod
    def _optional_text(cls, value: Any) -> str | None:
        return value if isinstance(value, str) else None


class CheckoutSessionResult(BaseModel):
    """Result of opening a checkout session.

    Exactly one of ``client_secret`` (embedded) or ``url`` (hosted) is set.
    """

    model_config = ConfigDict(frozen=True)

    session_id: str
    ui_mode: UIMode
    client_secret: str | None = Field(
        default=None,
        description="Secret used to mount embedded checkout",
    )
    url: str | None = Field(default=None, description="Hosted checkout redirect URL")


class SessionStatus(BaseModel):
    """Normalized summary of a checkout session for client polling."""

    id: str
    status: str | None = None
    payment_status: str | None = None
    payment_intent_id: str | None = None
    charge_id: str | None = None
    payment_intent_status: str | None = None
    amount_total: int | None = Field(default=None, description="Stripe-computed total in minor units")
    line_items_total: int | None = Field(
        default=None,
        description="Locally summed total, set only when amount_total is absent",
    )
    currency: str | None = None
    metadata: dict[str, str] = Field(default_factory=dict)
    transaction_id: str = Field(..., description="Best available transaction reference")
    transaction_label: str = Field(..., description='"Transaction ID" or "Order ID"')


class PaymentSummary(BaseModel):
    """Everything the payment notifications need about a completed checkout."""

    model_config = ConfigDict(frozen=True)

    session_id: str
    package_slug: str | None = None
    timeline: PackageTimeline
    rush: bool = False
    amount_total: int | None = None
    currency: str = "USD"
    reference: TransactionReference
    customer_email: str | None = None

    @property
    def amount_display(self) -> str:
        """``"900.00 USD"``, or just the currency when the amount is unknown."""
        if self.amount_total is None:
            return self.currency
        return f"{self.amount_total / 100:.2f} {self.currency}"

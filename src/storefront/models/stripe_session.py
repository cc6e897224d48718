"""Typed views of the Stripe objects this backend reads.

Stripe returns ``payment_intent`` and ``latest_charge`` either as bare ID
strings or as expanded objects depending on the ``expand`` parameters used.
These models normalize both shapes into explicit optional fields so the rest
of the code never inspects raw provider payloads.
"""

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


def _as_mapping(value: Any) -> Mapping[str, Any] | None:
    return value if isinstance(value, Mapping) else None


def _expanded_list(value: Any) -> list[Mapping[str, Any]]:
    """Items of a Stripe list object (``{"object": "list", "data": [...]}``)."""
    container = _as_mapping(value)
    if container is None:
        return []
    data = container.get("data")
    if not isinstance(data, list):
        return []
    return [item for item in data if isinstance(item, Mapping)]


class ChargeRef(BaseModel):
    """Reference to a Stripe Charge (ch_xxx / py_xxx)."""

    model_config = ConfigDict(frozen=True)

    id: str

    @classmethod
    def parse(cls, value: Any) -> "ChargeRef | None":
        """Parse a charge given as an ID string or an expanded object."""
        if isinstance(value, str):
            return cls(id=value) if value else None
        obj = _as_mapping(value)
        if obj is not None and obj.get("id"):
            return cls(id=str(obj["id"]))
        return None


class PaymentIntentRef(BaseModel):
    """Expanded Stripe PaymentIntent, reduced to the fields used here."""

    model_config = ConfigDict(frozen=True)

    id: str | None = None
    status: str | None = None
    latest_charge: ChargeRef | None = None
    charges: list[ChargeRef] = Field(default_factory=list)

    @classmethod
    def from_stripe(cls, obj: Mapping[str, Any]) -> "PaymentIntentRef":
        charges = [
            ref for ref in (ChargeRef.parse(item) for item in _expanded_list(obj.get("charges")))
            if ref is not None
        ]
        return cls(
            id=obj.get("id") or None,
            status=obj.get("status"),
            latest_charge=ChargeRef.parse(obj.get("latest_charge")),
            charges=charges,
        )


class LineItem(BaseModel):
    """A checkout line item."""

    model_config = ConfigDict(frozen=True)

    unit_amount: int | None = Field(default=None, description="Unit price in minor units")
    quantity: int = 1
    amount_total: int | None = Field(default=None, description="Stripe-computed line total")

    @classmethod
    def from_stripe(cls, obj: Mapping[str, Any]) -> "LineItem":
        price = _as_mapping(obj.get("price")) or {}
        quantity = obj.get("quantity")
        return cls(
            unit_amount=price.get("unit_amount"),
            quantity=quantity if isinstance(quantity, int) else 1,
            amount_total=obj.get("amount_total"),
        )

    def subtotal(self) -> int:
        """Unit price times quantity, falling back to Stripe's own line total."""
        if self.unit_amount is not None:
            return self.unit_amount * self.quantity
        return self.amount_total or 0


class CheckoutSessionSnapshot(BaseModel):
    """Read-only snapshot of an expanded Stripe Checkout Session."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Checkout session ID", examples=["cs_test_abc123"])
    status: str | None = Field(default=None, description="open, complete or expired")
    payment_status: str | None = Field(default=None, description="paid, unpaid or no_payment_required")
    amount_total: int | None = Field(default=None, description="Total in minor units")
    currency: str | None = None
    metadata: dict[str, str] = Field(default_factory=dict)
    customer_email: str | None = None
    payment_intent_id: str | None = Field(
        default=None,
        description="PaymentIntent ID whether or not the object was expanded",
    )
    payment_intent: PaymentIntentRef | None = Field(
        default=None,
        description="Expanded PaymentIntent, None when Stripe returned only an ID",
    )
    line_items: list[LineItem] = Field(default_factory=list)

    @classmethod
    def from_stripe(cls, obj: Mapping[str, Any]) -> "CheckoutSessionSnapshot":
        """Build a snapshot from a Stripe session dict.

        Args:
            obj: Session as returned by ``checkout.sessions.retrieve``
                (already converted to plain dicts).
        """
        raw_pi = obj.get("payment_intent")
        payment_intent: PaymentIntentRef | None = None
        payment_intent_id: str | None = None
        if isinstance(raw_pi, str):
            payment_intent_id = raw_pi or None
        elif _as_mapping(raw_pi) is not None:
            payment_intent = PaymentIntentRef.from_stripe(raw_pi)
            payment_intent_id = payment_intent.id

        customer_details = _as_mapping(obj.get("customer_details")) or {}
        customer_email = customer_details.get("email") or obj.get("customer_email") or None

        metadata = _as_mapping(obj.get("metadata")) or {}

        return cls(
            id=str(obj["id"]),
            status=obj.get("status"),
            payment_status=obj.get("payment_status"),
            amount_total=obj.get("amount_total"),
            currency=obj.get("currency"),
            metadata={str(k): str(v) for k, v in metadata.items() if v is not None},
            customer_email=customer_email,
            payment_intent_id=payment_intent_id,
            payment_intent=payment_intent,
            line_items=[LineItem.from_stripe(item) for item in _expanded_list(obj.get("line_items"))],
        )

    def line_items_total(self) -> int | None:
        """Locally summed total, only when Stripe did not provide ``amount_total``."""
        if self.amount_total is not None or not self.line_items:
            return None
        return sum(item.subtotal() for item in self.line_items)


class TransactionReference(BaseModel):
    """Best available user-facing reference for a completed checkout."""

    model_config = ConfigDict(frozen=True)

    value: str = Field(..., description="Displayed reference")
    label: str = Field(..., description='"Transaction ID" or "Order ID"')
    payment_intent_id: str | None = None
    charge_id: str | None = None

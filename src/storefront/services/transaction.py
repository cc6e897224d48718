"""Transaction reference resolution for completed checkouts."""

from storefront.models.stripe_session import CheckoutSessionSnapshot, TransactionReference

TRANSACTION_ID_LABEL = "Transaction ID"
ORDER_ID_LABEL = "Order ID"


def resolve_charge_id(snapshot: CheckoutSessionSnapshot) -> str | None:
    """Charge ID from the expanded PaymentIntent.

    The latest charge wins over the charges list. A PaymentIntent that was
    returned as a bare ID has no charge information.
    """
    payment_intent = snapshot.payment_intent
    if payment_intent is None:
        return None
    if payment_intent.latest_charge is not None:
        return payment_intent.latest_charge.id
    if payment_intent.charges:
        return payment_intent.charges[0].id
    return None


def resolve_transaction_reference(snapshot: CheckoutSessionSnapshot) -> TransactionReference:
    """Pick the best user-facing reference for a checkout session.

    Order: PaymentIntent ID, then charge ID, then the session ID itself.
    Sessions without any money movement (e.g. fully discounted) have neither
    a PaymentIntent nor a charge and are labelled "Order ID".
    """
    payment_intent_id = snapshot.payment_intent_id
    charge_id = resolve_charge_id(snapshot)

    if payment_intent_id is not None:
        value, label = payment_intent_id, TRANSACTION_ID_LABEL
    elif charge_id is not None:
        value, label = charge_id, TRANSACTION_ID_LABEL
    else:
        value, label = snapshot.id, ORDER_ID_LABEL

    return TransactionReference(
        value=value,
        label=label,
        payment_intent_id=payment_intent_id,
        charge_id=charge_id,
    )

"""API request/response models.

Domain models (CheckoutRequest, SessionStatus, ...) live in
``storefront.models``; this package holds HTTP-layer shapes only.
"""

from .checkout import CheckoutSessionResponse
from .common import PingResponse, PlainTextMessage

__all__ = ["CheckoutSessionResponse", "PingResponse", "PlainTextMessage"]

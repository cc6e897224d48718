"""Storefront services.

Services receive their settings and clients through their constructors;
the API layer wires them together in ``storefront_api.dependencies``.
"""

from .checkout_service import CheckoutService
from .email_client import EmailClient, ResendEmailClient
from .form_notifications import FormNotificationService, FormResult
from .notification_service import NotificationService
from .pricing import PriceResolver
from .session_status import SessionStatusService
from .stripe_service import StripeService
from .transaction import resolve_transaction_reference
from .webhook_handler import WebhookHandler

__all__ = [
    "CheckoutService",
    "EmailClient",
    "FormNotificationService",
    "FormResult",
    "NotificationService",
    "PriceResolver",
    "ResendEmailClient",
    "SessionStatusService",
    "StripeService",
    "WebhookHandler",
    "resolve_transaction_reference",
]

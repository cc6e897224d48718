"""API routes package.

Routers are organized by concern:

- checkout: checkout session creation
- sessions: checkout session status
- webhooks: Stripe webhook events
- forms: form submission notifications

All routers are registered in main.py with /api prefix.
"""

from storefront_api.routes.checkout import router as checkout_router
from storefront_api.routes.forms import router as forms_router
from storefront_api.routes.sessions import router as sessions_router
from storefront_api.routes.webhooks import router as webhooks_router

__all__ = [
    "checkout_router",
    "forms_router",
    "sessions_router",
    "webhooks_router",
]

"""Checkout session endpoint.

Opens a Stripe Checkout session for one package. The price is looked up
server-side from the package slug and rush flag; clients never send prices.
"""

from fastapi import APIRouter, Depends

from storefront.models.checkout import CheckoutRequest
from storefront.models.errors import ErrorBody
from storefront.services.checkout_service import CheckoutService
from storefront_api.dependencies import get_checkout_service
from storefront_api.models.checkout import CheckoutSessionResponse

router = APIRouter(tags=["checkout"])


@router.post(
    "/create-checkout-session",
    summary="Create a checkout session",
    description="""
Open a Stripe Checkout session for a package.

**Request body:** `{"slug", "rush", "origin", "uiMode"}`

- `uiMode: "hosted"` returns a redirect `url`
- anything else returns an embedded `clientSecret`
- `origin` defaults to the configured site origin

The session carries `metadata.package` and `metadata.rush` so the webhook can
rebuild the order summary.
""",
    response_model=CheckoutSessionResponse,
    response_model_exclude_none=True,
    responses={
        200: {"description": "Session created"},
        400: {"description": "Unknown package", "model": ErrorBody},
        500: {"description": "Configuration missing or Stripe failure", "model": ErrorBody},
    },
)
def create_checkout_session(
    body: CheckoutRequest | None = None,
    checkout: CheckoutService = Depends(get_checkout_service),
) -> CheckoutSessionResponse:
    """Create an embedded or hosted checkout session."""
    result = checkout.start_checkout(body or CheckoutRequest())
    return CheckoutSessionResponse.from_result(result)

"""Checkout session initiation."""

import logging

from storefront.models.checkout import CheckoutRequest, CheckoutSessionResult, UIMode
from storefront.models.package import get_package
from storefront.utils.logging import log_payment_operation

from .pricing import PriceResolver
from .stripe_service import StripeService

logger = logging.getLogger(__name__)

SUCCESS_PATH = "/#/thank-you?session_id={CHECKOUT_SESSION_ID}"


class CheckoutService:
    """Opens Stripe Checkout sessions for package purchases.

    The price is resolved before any provider call, so an invalid package
    never reaches Stripe.
    """

    def __init__(
        self,
        pricing: PriceResolver,
        stripe_service: StripeService,
        default_origin: str,
    ) -> None:
        self._pricing = pricing
        self._stripe = stripe_service
        self._default_origin = default_origin

    def build_urls(self, slug: str, rush: bool, origin: str | None) -> tuple[str, str]:
        """Build (success/return URL, cancel URL) anchored at the site origin."""
        base = (origin or "").strip().rstrip("/") or self._default_origin.rstrip("/")
        success_url = f"{base}{SUCCESS_PATH}"
        cancel_url = f"{base}/#/pay/{slug}?rush={'1' if rush else '0'}"
        return success_url, cancel_url

    def start_checkout(self, request: CheckoutRequest) -> CheckoutSessionResult:
        """Resolve the price and open an embedded or hosted session.

        Raises:
            CheckoutError: Invalid package or missing configuration.
            StripeServiceError: Stripe rejected or failed the request.
        """
        price_id = self._pricing.resolve(request.slug, request.rush)
        # resolve() guarantees the package exists
        package = get_package(request.slug)
        assert package is not None
        slug = package.slug

        ui_mode = UIMode.parse(request.ui_mode)
        success_url, cancel_url = self.build_urls(slug, request.rush, request.origin)

        result = self._stripe.create_checkout_session(
            price_id=price_id,
            package_slug=slug,
            rush=request.rush,
            ui_mode=ui_mode,
            success_url=success_url,
            cancel_url=cancel_url,
        )

        log_payment_operation(
            logger,
            "start_checkout",
            session_id=result.session_id,
            package=slug,
            amount_cents=package.total(request.rush),
            status="created",
            ui_mode=ui_mode.value,
        )
        return result

"""Price resolution for package checkout."""

import logging

from storefront.config import Settings
from storefront.models.errors import CheckoutError, ErrorCode
from storefront.models.package import get_package

logger = logging.getLogger(__name__)


class PriceResolver:
    """Maps ``(package slug, rush)`` to a Stripe Price ID.

    The table has one entry per package and rush state. Unknown packages are
    a client error; there is no default price.
    """

    def __init__(self, settings: Settings) -> None:
        self._prices = settings.price_table()

    def resolve(self, slug: str | None, rush: bool) -> str:
        """Return the Stripe Price ID for a package.

        Args:
            slug: Package identifier (case-insensitive).
            rush: Whether rush delivery was selected.

        Returns:
            Stripe Price ID (price_xxx).

        Raises:
            CheckoutError: INVALID_PACKAGE for unknown slugs,
                PRICE_NOT_CONFIGURED when the price env var is unset.
        """
        package = get_package(slug)
        if package is None:
            logger.warning("Checkout requested for unknown package: %r", slug)
            raise CheckoutError(ErrorCode.INVALID_PACKAGE, details={"slug": str(slug)})

        price_id = self._prices.get((package.slug, bool(rush)))
        if not price_id:
            logger.error(
                "No Stripe price configured for package=%s rush=%s",
                package.slug,
                rush,
            )
            raise CheckoutError(
                ErrorCode.PRICE_NOT_CONFIGURED,
                details={"package": package.slug, "rush": str(bool(rush)).lower()},
            )
        return price_id

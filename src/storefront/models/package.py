"""Service package catalog."""

from pydantic import BaseModel, ConfigDict, Field

PLACEHOLDER_DAYS = "—"


class Package(BaseModel):
    """A purchasable service package.

    Prices are stored in USD cents. Defined at import time and never mutated.
    """

    model_config = ConfigDict(strict=True, frozen=True)

    slug: str = Field(..., description="Package identifier", examples=["starter"])
    label: str = Field(..., description="Display name", examples=["Starter"])
    base_price: int = Field(..., ge=0, description="Base price in cents")
    rush_fee: int = Field(..., ge=0, description="Rush surcharge in cents")
    days: int = Field(..., gt=0, description="Standard delivery time in days")
    rush_days: int = Field(..., gt=0, description="Rush delivery time in days")

    def total(self, rush: bool) -> int:
        """Price in cents including the rush surcharge when selected."""
        return self.base_price + (self.rush_fee if rush else 0)


class PackageTimeline(BaseModel):
    """Label and delivery timeline shown in payment notifications.

    Days are strings so unknown packages can carry a placeholder.
    """

    model_config = ConfigDict(frozen=True)

    label: str
    days: str
    rush_days: str


PACKAGES: dict[str, Package] = {
    p.slug: p
    for p in (
        Package(slug="starter", label="Starter", base_price=90000, rush_fee=20000, days=4, rush_days=2),
        Package(slug="growth", label="Growth", base_price=230000, rush_fee=40000, days=8, rush_days=6),
        Package(slug="scale", label="Scale", base_price=700000, rush_fee=80000, days=14, rush_days=10),
    )
}


def get_package(slug: str | None) -> Package | None:
    """Look up a package by slug, ignoring case and surrounding whitespace."""
    if not slug:
        return None
    return PACKAGES.get(slug.strip().lower())


def timeline_for(slug: str | None) -> PackageTimeline:
    """Resolve the timeline for a package slug taken from session metadata.

    Unknown or missing slugs never fail: they fall back to a placeholder
    labelled with the slug as given, or "Custom" when there is none.
    """
    package = get_package(slug)
    if package is not None:
        return PackageTimeline(
            label=package.label,
            days=str(package.days),
            rush_days=str(package.rush_days),
        )

    cleaned = (slug or "").strip()
    return PackageTimeline(
        label=cleaned or "Custom",
        days=PLACEHOLDER_DAYS,
        rush_days=PLACEHOLDER_DAYS,
    )

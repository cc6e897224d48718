"""Application configuration loaded from environment variables."""

import os
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from storefront.models.errors import CheckoutError, ErrorCode
from storefront.utils.retry import RetryPolicy

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Storefront settings.

    Field names map to upper-case environment variables
    (``stripe_secret_key`` -> ``STRIPE_SECRET_KEY``).
    """

    environment: str = _ENVIRONMENT

    # Stripe
    stripe_secret_key: str | None = None
    stripe_webhook_secret: str | None = None
    stripe_webhook_tolerance: int = Field(default=300, ge=1)

    # Price references per package, base and rush variants
    price_starter_base: str | None = None
    price_starter_rush: str | None = None
    price_growth_base: str | None = None
    price_growth_rush: str | None = None
    price_scale_base: str | None = None
    price_scale_rush: str | None = None

    default_origin: str = "https://example.com"

    # Email (Resend)
    resend_api_key: str | None = None
    resend_api_url: str = "https://api.resend.com/emails"
    from_email: str | None = "contact@citeks.net"
    to_email: str | None = None
    cc_email: str | None = None
    brand_name: str = "CITEKS"

    # Outbound calls
    http_timeout_seconds: float = Field(default=10.0, gt=0)
    retry_max_attempts: int = Field(default=3, ge=1)
    retry_backoff_seconds: float = Field(default=0.5, ge=0)

    cors_allow_origins: str = "http://localhost:3000,http://127.0.0.1:3000"

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    def price_table(self) -> dict[tuple[str, bool], str | None]:
        """Map ``(package slug, rush)`` to the configured Stripe price ID."""
        return {
            ("starter", False): self.price_starter_base,
            ("starter", True): self.price_starter_rush,
            ("growth", False): self.price_growth_base,
            ("growth", True): self.price_growth_rush,
            ("scale", False): self.price_scale_base,
            ("scale", True): self.price_scale_rush,
        }

    def retry_policy(self) -> RetryPolicy:
        """Build the retry policy used for outbound calls."""
        return RetryPolicy(
            max_attempts=self.retry_max_attempts,
            backoff_seconds=self.retry_backoff_seconds,
        )

    def allowed_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_allow_origins.split(",") if o.strip()]

    def require_stripe_secret_key(self) -> str:
        """Return the Stripe secret key or raise a configuration error."""
        if not self.stripe_secret_key:
            raise CheckoutError(
                ErrorCode.PAYMENT_CONFIG_MISSING,
                details={"missing": "STRIPE_SECRET_KEY"},
            )
        return self.stripe_secret_key

    def require_webhook_secret(self) -> str:
        """Return the webhook signing secret or raise a configuration error."""
        if not self.stripe_webhook_secret:
            raise CheckoutError(
                ErrorCode.WEBHOOK_SECRET_MISSING,
                details={"missing": "STRIPE_WEBHOOK_SECRET"},
            )
        return self.stripe_webhook_secret

    def missing_email_settings(self) -> list[str]:
        """Names of required email settings that are not configured."""
        missing = []
        if not self.resend_api_key:
            missing.append("RESEND_API_KEY")
        if not self.from_email:
            missing.append("FROM_EMAIL")
        if not self.to_email:
            missing.append("TO_EMAIL")
        return missing


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the process-wide settings (read once from the environment)."""
    return Settings()

"""Response model for checkout session creation."""

from pydantic import BaseModel, ConfigDict, Field

from storefront.models.checkout import CheckoutSessionResult, UIMode


class CheckoutSessionResponse(BaseModel):
    """Body returned to the browser after opening a checkout session.

    Embedded sessions carry ``clientSecret``; hosted sessions carry ``url``.
    The route omits whichever is unset.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {"clientSecret": "cs_test_a1b2c3_secret_d4e5f6"},
                {"url": "https://checkout.stripe.com/c/pay/cs_test_a1b2c3"},
            ]
        },
    )

    clientSecret: str | None = Field(default=None, description="Embedded checkout client secret")
    url: str | None = Field(default=None, description="Hosted checkout redirect URL")

    @classmethod
    def from_result(cls, result: CheckoutSessionResult) -> "CheckoutSessionResponse":
        if result.ui_mode is UIMode.HOSTED:
            return cls(url=result.url)
        return cls(clientSecret=result.client_secret)

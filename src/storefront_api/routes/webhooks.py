"""Webhook endpoint for Stripe events.

No authentication header is required: every delivery is authenticated by
its Stripe-Signature over the raw body. Responses are plain text.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse
from starlette.concurrency import run_in_threadpool
from starlette.status import HTTP_200_OK, HTTP_500_INTERNAL_SERVER_ERROR

from storefront.models.errors import ERROR_MESSAGES, CheckoutError, ErrorCode
from storefront.models.stripe_webhook import WebhookResult
from storefront.services.webhook_handler import WebhookHandler
from storefront.utils.logging import get_logger
from storefront_api.dependencies import get_webhook_handler
from storefront_api.exceptions import get_http_status_for_error
from storefront_api.models.common import PlainTextMessage

logger = get_logger(__name__)

router = APIRouter(tags=["webhooks"])

STRIPE_SIGNATURE_HEADER = "stripe-signature"


def _error_text(exc: CheckoutError) -> str:
    if exc.code is ErrorCode.INVALID_WEBHOOK_SIGNATURE:
        return f"{PlainTextMessage.INVALID_SIGNATURE_PREFIX}{exc.message}"
    return exc.message


@router.post(
    "/stripe-webhook",
    summary="Receive Stripe webhook events",
    description="""
Endpoint for Stripe webhook events. Handles:
- checkout.session.completed: sends the customer confirmation and operator summary

Every other event type is acknowledged with `Ignored`.

**No authentication required** - the signature is verified with the webhook secret.

**Not idempotent**: a redelivered event re-sends the notifications.
""",
    response_class=PlainTextResponse,
    responses={
        200: {"description": "`ok` or `Ignored`"},
        400: {"description": "`Webhook Error: Invalid webhook signature`"},
        500: {"description": "`Webhook misconfigured`, `Email env missing` or `Webhook handler error`"},
    },
)
async def handle_stripe_webhook(
    request: Request,
    handler: WebhookHandler = Depends(get_webhook_handler),
) -> PlainTextResponse:
    """Verify and process one Stripe delivery."""
    # Raw bytes: the signature covers the exact body Stripe sent
    payload = await request.body()
    signature = request.headers.get(STRIPE_SIGNATURE_HEADER)

    try:
        outcome = await run_in_threadpool(handler.handle, payload, signature)
    except CheckoutError as e:
        status_code = get_http_status_for_error(e.code)
        if status_code >= HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error("Webhook rejected with %s: %s %s", e.code.value, e.message, e.details)
        return PlainTextResponse(_error_text(e), status_code=status_code)

    if outcome.result is WebhookResult.IGNORED:
        return PlainTextResponse(PlainTextMessage.IGNORED, status_code=HTTP_200_OK)
    if outcome.result is WebhookResult.FAILED:
        # Non-2xx so Stripe redelivers
        return PlainTextResponse(
            ERROR_MESSAGES[ErrorCode.WEBHOOK_PROCESSING_FAILED],
            status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        )
    return PlainTextResponse(PlainTextMessage.OK_WEBHOOK, status_code=HTTP_200_OK)

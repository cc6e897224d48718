"""FastAPI exception handlers for converting domain errors to HTTP responses.

The ErrorCode-to-HTTP status mapping:
- 400 Bad Request: invalid client input (package, session id, signature, payload)
- 500 Internal Server Error: missing configuration or upstream failures
- 502 Bad Gateway: the email provider rejected a form notification

JSON endpoints render ``{"error": <public message>, "code": <error code>}``.
Internal error text is logged, never returned.

Usage:
    from storefront_api.exceptions import register_exception_handlers
    register_exception_handlers(app)
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_502_BAD_GATEWAY,
)

from storefront.models.errors import CheckoutError, ErrorCode, StripeServiceError

logger = logging.getLogger(__name__)

# Map ErrorCode to HTTP status codes
ERROR_CODE_TO_HTTP_STATUS: dict[ErrorCode, int] = {
    # Client input -> 400 Bad Request
    ErrorCode.INVALID_PACKAGE: HTTP_400_BAD_REQUEST,
    ErrorCode.MISSING_SESSION_ID: HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_WEBHOOK_SIGNATURE: HTTP_400_BAD_REQUEST,
    ErrorCode.MISSING_FORM_PAYLOAD: HTTP_400_BAD_REQUEST,
    # Configuration -> 500
    ErrorCode.PAYMENT_CONFIG_MISSING: HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.PRICE_NOT_CONFIGURED: HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.WEBHOOK_SECRET_MISSING: HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.EMAIL_CONFIG_MISSING: HTTP_500_INTERNAL_SERVER_ERROR,
    # Upstream providers
    ErrorCode.STRIPE_API_ERROR: HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.SESSION_LOAD_FAILED: HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.EMAIL_DELIVERY_FAILED: HTTP_502_BAD_GATEWAY,
    ErrorCode.WEBHOOK_PROCESSING_FAILED: HTTP_500_INTERNAL_SERVER_ERROR,
}


# Routes whose unreadable request bodies are reported as a domain error
# instead of FastAPI's default 422
VALIDATION_ERROR_CODES: dict[str, ErrorCode] = {
    "/api/create-checkout-session": ErrorCode.INVALID_PACKAGE,
}


def get_http_status_for_error(code: ErrorCode) -> int:
    """Get HTTP status code for an ErrorCode.

    Args:
        code: The ErrorCode to map

    Returns:
        HTTP status code, defaults to 500 if not explicitly mapped.
    """
    return ERROR_CODE_TO_HTTP_STATUS.get(code, HTTP_500_INTERNAL_SERVER_ERROR)


def error_response(code: ErrorCode) -> JSONResponse:
    """JSON error response for a code, with its public message."""
    exc = CheckoutError(code)
    return JSONResponse(
        status_code=get_http_status_for_error(code),
        content=exc.to_body().model_dump(mode="json"),
    )


async def checkout_error_handler(request: Request, exc: CheckoutError) -> JSONResponse:
    """Handle CheckoutError exceptions and convert to JSON response.

    Args:
        request: The incoming request
        exc: The CheckoutError exception

    Returns:
        JSONResponse with the public message and mapped status code.
    """
    status_code = get_http_status_for_error(exc.code)
    if status_code >= HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error(
            "%s %s failed: %s (%s) %s", request.method, request.url.path, exc.code.value, exc.message, exc.details
        )
    else:
        logger.info("%s %s rejected: %s (%s)", request.method, request.url.path, exc.code.value, exc.message)

    return JSONResponse(
        status_code=status_code,
        content=exc.to_body().model_dump(mode="json"),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> Response:
    """Render body validation failures on checkout as ``Invalid package``.

    Non-JSON bodies and bodies that are not a JSON object cannot name a
    package. Other routes keep the default validation response.
    """
    code = VALIDATION_ERROR_CODES.get(request.url.path)
    if code is None:
        return await request_validation_exception_handler(request, exc)

    logger.info("%s %s rejected: unreadable body (%d errors)", request.method, request.url.path, len(exc.errors()))
    return error_response(code)


async def stripe_error_handler(request: Request, exc: StripeServiceError) -> JSONResponse:
    """Handle Stripe failures that escaped a service as a generic 500."""
    logger.error(
        "Stripe error on %s %s: %s (code: %s)",
        request.method,
        request.url.path,
        exc,
        exc.stripe_error_code,
    )
    return error_response(ErrorCode.STRIPE_API_ERROR)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions with a generic error response.

    Args:
        request: The incoming request
        exc: The uncaught exception

    Returns:
        JSONResponse with 500 status and no internal details.
    """
    logger.exception("Unhandled exception on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Server Error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app.

    Args:
        app: The FastAPI application instance.
    """
    app.add_exception_handler(CheckoutError, checkout_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StripeServiceError, stripe_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, generic_exception_handler)

"""Form submission hook.

Called by the hosting platform for every form submission with a body of
``{"payload": {...}}``. Responses are plain text.
"""

from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool
from starlette.status import (
    HTTP_200_OK,
    HTTP_400_BAD_REQUEST,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_502_BAD_GATEWAY,
)

from storefront.models.errors import ERROR_MESSAGES, CheckoutError, EmailDeliveryError, ErrorCode
from storefront.models.notifications import FormSubmission
from storefront.services.form_notifications import FormNotificationService, FormResult
from storefront.utils.logging import get_logger
from storefront_api.dependencies import get_form_notification_service
from storefront_api.exceptions import get_http_status_for_error
from storefront_api.models.common import PlainTextMessage

logger = get_logger(__name__)

router = APIRouter(tags=["forms"])


async def _read_payload(request: Request) -> dict[str, Any] | None:
    try:
        body = await request.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    payload = body.get("payload")
    return payload if isinstance(payload, dict) and payload else None


@router.post(
    "/submission-created",
    summary="Handle a form submission",
    description="""
Emails the operator a summary of `contact` and `brief-*` submissions and sends
the submitter an acknowledgment when they left an email address. Other forms
are acknowledged with `Ignored form`.
""",
    response_class=PlainTextResponse,
    responses={
        200: {"description": "`OK` or `Ignored form`"},
        400: {"description": "`No payload`"},
        500: {"description": "Email configuration missing"},
        502: {"description": "`Failed to send email`"},
    },
)
async def submission_created(
    request: Request,
    forms: FormNotificationService = Depends(get_form_notification_service),
) -> PlainTextResponse:
    payload = await _read_payload(request)
    if payload is None:
        return PlainTextResponse(ERROR_MESSAGES[ErrorCode.MISSING_FORM_PAYLOAD], status_code=HTTP_400_BAD_REQUEST)

    try:
        submission = FormSubmission.model_validate(payload)
    except ValidationError as e:
        logger.warning("Unreadable form payload: %s", e)
        return PlainTextResponse(ERROR_MESSAGES[ErrorCode.MISSING_FORM_PAYLOAD], status_code=HTTP_400_BAD_REQUEST)

    try:
        result = await run_in_threadpool(forms.handle_submission, submission)
    except CheckoutError as e:
        status_code = get_http_status_for_error(e.code)
        if e.code is ErrorCode.EMAIL_CONFIG_MISSING:
            return PlainTextResponse(PlainTextMessage.FORM_EMAIL_CONFIG_MISSING, status_code=status_code)
        return PlainTextResponse(e.message, status_code=status_code)
    except EmailDeliveryError as e:
        logger.error("Form %s #%s email failed: %s", submission.form_name, submission.number, e)
        return PlainTextResponse(ERROR_MESSAGES[ErrorCode.EMAIL_DELIVERY_FAILED], status_code=HTTP_502_BAD_GATEWAY)
    except Exception:
        logger.exception("Form submission handler failed for %s", submission.form_name)
        return PlainTextResponse(PlainTextMessage.FORM_FAILED, status_code=HTTP_500_INTERNAL_SERVER_ERROR)

    if result is FormResult.IGNORED:
        return PlainTextResponse(PlainTextMessage.IGNORED_FORM, status_code=HTTP_200_OK)
    return PlainTextResponse(PlainTextMessage.OK_FORM, status_code=HTTP_200_OK)

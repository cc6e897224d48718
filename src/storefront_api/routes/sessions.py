"""Checkout session status endpoint (polled by the thank-you page)."""

from fastapi import APIRouter, Depends, Query

from storefront.models.checkout import SessionStatus
from storefront.models.errors import ErrorBody
from storefront.services.session_status import SessionStatusService
from storefront_api.dependencies import get_session_status_service

router = APIRouter(tags=["checkout"])


@router.get(
    "/session-status",
    summary="Get checkout session status",
    description="""
Read-only summary of a checkout session: status, payment status, PaymentIntent
and charge IDs, totals, metadata and the best available transaction reference.

`line_items_total` is only computed when Stripe did not return `amount_total`.
""",
    response_model=SessionStatus,
    responses={
        400: {"description": "session_id missing", "model": ErrorBody},
        500: {"description": "Session could not be loaded", "model": ErrorBody},
    },
)
def get_session_status(
    session_id: str | None = Query(default=None, description="Checkout session ID (cs_xxx)"),
    service: SessionStatusService = Depends(get_session_status_service),
) -> SessionStatus:
    return service.get_status(session_id)

"""API routes exposing billing timelines."""
from __future__ import annotations

from fastapi import APIRouter

from ..billing import BillingTimelineError
from ..schemas.billing import BillingEventListResponse
from ..services.billing import get_billing_event_service


router = APIRouter(prefix="/api/billing", tags=["billing"])


@router.get("/accounts/{account_id}/events", response_model=BillingEventListResponse)
def list_billing_events(account_id: str) -> BillingEventListResponse:
    service = get_billing_event_service()
    try:
        events = service.compute_billing_events(account_id)
    except BillingTimelineError as exc:
        raise exc.to_http_exception() from exc
    return BillingEventListResponse.from_events(account_id, events)

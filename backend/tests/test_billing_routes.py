from __future__ import annotations

from datetime import datetime, timezone

import pytest
from fastapi import HTTPException

from backend.app.billing import (
    BillingEvent,
    InconsistentDataError,
    NotFoundError,
    SubscriptionTransitionType,
)
from backend.app.routes import billing as billing_routes
from backend.app.schemas.billing import BillingEventListResponse


class FakeBillingEventService:
    def __init__(self, events=None, error: Exception | None = None) -> None:
        self._events = events or []
        self._error = error
        self.requested: list[str] = []

    def compute_billing_events(self, account_id: str):
        self.requested.append(account_id)
        if self._error is not None:
            raise self._error
        return self._events


def test_list_billing_events_serializes_timeline(monkeypatch):
    created = datetime(2013, 8, 7, tzinfo=timezone.utc)
    event = BillingEvent(
        subscription_id="sub-1",
        bundle_id="bundle-1",
        effective_date=created,
        kind=SubscriptionTransitionType.CREATE,
    )
    service = FakeBillingEventService(events=[event])
    monkeypatch.setattr(billing_routes, "get_billing_event_service", lambda: service)

    response = billing_routes.list_billing_events("account-1")

    assert isinstance(response, BillingEventListResponse)
    assert service.requested == ["account-1"]
    assert response.account_id == "account-1"
    assert response.events[0].subscription_id == "sub-1"
    assert response.events[0].kind == SubscriptionTransitionType.CREATE
    dumped = response.model_dump(by_alias=True, mode="json")
    assert dumped["accountId"] == "account-1"
    assert dumped["events"][0]["kind"] == "create"
    assert dumped["events"][0]["bundleId"] == "bundle-1"
    assert "effectiveDate" in dumped["events"][0]


def test_unknown_account_maps_to_404(monkeypatch):
    error = NotFoundError(message="Account account-9 not found", detail={"account_id": "account-9"})
    monkeypatch.setattr(
        billing_routes,
        "get_billing_event_service",
        lambda: FakeBillingEventService(error=error),
    )

    with pytest.raises(HTTPException) as excinfo:
        billing_routes.list_billing_events("account-9")

    assert excinfo.value.status_code == 404
    assert excinfo.value.detail["error"] == "not_found"
    assert excinfo.value.detail["account_id"] == "account-9"


def test_inconsistent_data_maps_to_409(monkeypatch):
    monkeypatch.setattr(
        billing_routes,
        "get_billing_event_service",
        lambda: FakeBillingEventService(error=InconsistentDataError(message="bad lane")),
    )

    with pytest.raises(HTTPException) as excinfo:
        billing_routes.list_billing_events("account-1")

    assert excinfo.value.status_code == 409
    assert excinfo.value.detail == {"error": "inconsistent_data", "message": "bad lane"}

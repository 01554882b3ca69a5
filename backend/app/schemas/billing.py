"""API schemas for billing timeline endpoints."""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from ..billing import BillingEvent, SubscriptionTransitionType


class BillingEventResponse(BaseModel):
    subscription_id: str = Field(alias="subscriptionId")
    bundle_id: Optional[str] = Field(alias="bundleId", default=None)
    effective_date: datetime = Field(alias="effectiveDate")
    kind: SubscriptionTransitionType

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_event(cls, event: BillingEvent) -> "BillingEventResponse":
        return cls(
            subscription_id=event.subscription_id,
            bundle_id=event.bundle_id,
            effective_date=event.effective_date,
            kind=event.kind,
        )


class BillingEventListResponse(BaseModel):
    account_id: str = Field(alias="accountId")
    events: List[BillingEventResponse] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_events(cls, account_id: str, events: Sequence[BillingEvent]) -> "BillingEventListResponse":
        return cls(
            account_id=account_id,
            events=[BillingEventResponse.from_event(event) for event in events],
        )

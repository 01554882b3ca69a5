"""Domain models for the billing timeline."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class BlockingStateType(str, Enum):
    """Entity levels that can carry blocking states."""

    ACCOUNT = "account"
    SUBSCRIPTION_BUNDLE = "subscription_bundle"
    SUBSCRIPTION = "subscription"


class SubscriptionTransitionType(str, Enum):
    """Kinds of events appearing on a subscription billing timeline."""

    CREATE = "create"
    TRANSFER = "transfer"
    MIGRATE_BILLING = "migrate_billing"
    RE_CREATE = "re_create"
    CHANGE = "change"
    PHASE = "phase"
    CANCEL = "cancel"
    UNCANCEL = "uncancel"
    START_BILLING_DISABLED = "start_billing_disabled"
    END_BILLING_DISABLED = "end_billing_disabled"

    @property
    def is_creation(self) -> bool:
        """Return ``True`` for kinds that start billing for a subscription."""
        return self in _CREATION_KINDS

    @property
    def is_billing_boundary(self) -> bool:
        return self in (
            SubscriptionTransitionType.START_BILLING_DISABLED,
            SubscriptionTransitionType.END_BILLING_DISABLED,
        )


_CREATION_KINDS = frozenset(
    {
        SubscriptionTransitionType.CREATE,
        SubscriptionTransitionType.TRANSFER,
        SubscriptionTransitionType.MIGRATE_BILLING,
        SubscriptionTransitionType.RE_CREATE,
    }
)


class BlockingRecord(BaseModel):
    """A recorded change of blocking state for one entity and service."""

    blocked_id: str
    state_type: BlockingStateType
    state_name: str = Field(min_length=1)
    service: str = Field(min_length=1)
    block_change: bool = False
    block_entitlement: bool = False
    block_billing: bool = False
    effective_date: datetime
    sequence: int = Field(ge=0, description="Insertion order, used to break same-date ties")

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @field_validator("effective_date")
    @classmethod
    def _normalize_effective_date(cls, value: datetime) -> datetime:
        return _as_utc(value)

    @property
    def lane(self) -> tuple[str, str]:
        """Key of the ``(blocked_id, service)`` lane this record belongs to."""
        return (self.blocked_id, self.service)

    @property
    def sort_key(self) -> tuple[datetime, int]:
        return (self.effective_date, self.sequence)


class LifecycleTransition(BaseModel):
    """Subscription lifecycle transition produced by the subscription engine."""

    subscription_id: str
    kind: SubscriptionTransitionType
    effective_date: datetime

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @field_validator("effective_date")
    @classmethod
    def _normalize_effective_date(cls, value: datetime) -> datetime:
        return _as_utc(value)

    @field_validator("kind")
    @classmethod
    def _reject_billing_boundaries(cls, value: SubscriptionTransitionType) -> SubscriptionTransitionType:
        if value.is_billing_boundary:
            raise ValueError(f"{value.value} is computed from blocking states and cannot be a lifecycle transition")
        return value


class SubscriptionRef(BaseModel):
    """Subscription identity together with the entities that govern it."""

    subscription_id: str
    bundle_id: str
    account_id: str
    created_at: datetime

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @field_validator("created_at")
    @classmethod
    def _normalize_created_at(cls, value: datetime) -> datetime:
        return _as_utc(value)


class BillingEvent(BaseModel):
    """Single entry of the billing timeline returned to callers."""

    subscription_id: str
    bundle_id: Optional[str] = None
    effective_date: datetime
    kind: SubscriptionTransitionType

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class OpenEnd(Enum):
    """Marker for a disabled interval that has not been cleared."""

    OPEN = "open"

    def __repr__(self) -> str:
        return "OPEN"


OPEN = OpenEnd.OPEN

_END_OF_TIME = datetime.max.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class DisabledInterval:
    """Time range during which billing is disabled for ``owner_id``."""

    owner_id: str
    start: datetime
    end: Union[datetime, OpenEnd]

    @property
    def is_open(self) -> bool:
        return self.end is OPEN

    @property
    def end_key(self) -> datetime:
        """Comparable end of the interval, ``OPEN`` mapping past every real date."""

        return _END_OF_TIME if self.end is OPEN else self.end

    @property
    def sort_key(self) -> tuple[datetime, datetime]:
        return (self.start, self.end_key)

    def is_valid(self) -> bool:
        return self.end is OPEN or self.end >= self.start

    def contains_strictly(self, moment: datetime) -> bool:
        """Return ``True`` when ``moment`` lies after the start and before the end."""

        return self.start < moment < self.end_key

    def extended_to(self, other: "DisabledInterval") -> "DisabledInterval":
        """Return this interval stretched to cover the end of ``other``."""

        if self.is_open or other.is_open:
            return DisabledInterval(owner_id=self.owner_id, start=self.start, end=OPEN)
        return DisabledInterval(owner_id=self.owner_id, start=self.start, end=max(self.end, other.end))


__all__ = [
    "BillingEvent",
    "BlockingRecord",
    "BlockingStateType",
    "DisabledInterval",
    "LifecycleTransition",
    "OPEN",
    "OpenEnd",
    "SubscriptionRef",
    "SubscriptionTransitionType",
]

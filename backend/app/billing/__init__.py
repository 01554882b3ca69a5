"""Billing timeline package merging lifecycle transitions with blocking states."""

from .config import BillingTimelineConfig, load_billing_timeline_config
from .exceptions import BillingTimelineError, InconsistentDataError, NotFoundError
from .intervals import build_disabled_intervals, merge_disabled_intervals
from .models import (
    OPEN,
    BillingEvent,
    BlockingRecord,
    BlockingStateType,
    DisabledInterval,
    LifecycleTransition,
    OpenEnd,
    SubscriptionRef,
    SubscriptionTransitionType,
)
from .service import (
    BillingEventService,
    BlockingStateRepository,
    LifecycleRepository,
    SubscriptionDirectory,
)
from .stream import group_by_lane, order_blocking_records
from .timeline import splice_timeline

__all__ = [
    "BillingEvent",
    "BillingEventService",
    "BillingTimelineConfig",
    "BillingTimelineError",
    "BlockingRecord",
    "BlockingStateRepository",
    "BlockingStateType",
    "DisabledInterval",
    "InconsistentDataError",
    "LifecycleRepository",
    "LifecycleTransition",
    "NotFoundError",
    "OPEN",
    "OpenEnd",
    "SubscriptionDirectory",
    "SubscriptionRef",
    "SubscriptionTransitionType",
    "build_disabled_intervals",
    "group_by_lane",
    "load_billing_timeline_config",
    "merge_disabled_intervals",
    "order_blocking_records",
    "splice_timeline",
]

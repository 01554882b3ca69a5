"""Account level computation of billing timelines."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Protocol, Sequence, Tuple

from .config import BillingTimelineConfig
from .exceptions import NotFoundError
from .intervals import build_disabled_intervals, merge_disabled_intervals
from .models import (
    BillingEvent,
    BlockingRecord,
    BlockingStateType,
    DisabledInterval,
    LifecycleTransition,
    SubscriptionRef,
)
from .timeline import splice_timeline


logger = logging.getLogger("billing")


class BlockingStateRepository(Protocol):
    """Lookup of blocking records recorded against one entity."""

    def list_blocking_records(self, blocked_id: str, state_type: BlockingStateType) -> Sequence[BlockingRecord]:
        ...


class LifecycleRepository(Protocol):
    """Lookup of the date ordered lifecycle transitions of a subscription."""

    def list_transitions(self, subscription_id: str) -> Sequence[LifecycleTransition]:
        ...


class SubscriptionDirectory(Protocol):
    """Lookup of accounts and the subscriptions they own."""

    def account_exists(self, account_id: str) -> bool:
        ...

    def list_subscriptions(self, account_id: str) -> Sequence[SubscriptionRef]:
        ...


_IntervalKey = Tuple[str, BlockingStateType]


@dataclass
class BillingEventService:
    """Builds account wide billing timelines from collaborator data."""

    subscriptions: SubscriptionDirectory
    lifecycle: LifecycleRepository
    blocking_states: BlockingStateRepository
    config: BillingTimelineConfig = field(default_factory=BillingTimelineConfig)

    def compute_billing_events(self, account_id: str) -> List[BillingEvent]:
        """Return every billing event of the account ordered by effective date.

        Events sharing a date keep the creation order of their subscriptions.
        """

        if not self.subscriptions.account_exists(account_id):
            raise NotFoundError(
                message=f"Account {account_id} not found",
                detail={"account_id": account_id},
            )

        refs = sorted(
            self.subscriptions.list_subscriptions(account_id),
            key=lambda ref: (ref.created_at, ref.subscription_id),
        )
        interval_cache: Dict[_IntervalKey, List[DisabledInterval]] = {}

        keyed: List[Tuple[Tuple[object, int], BillingEvent]] = []
        for order, ref in enumerate(refs):
            intervals = self._disabled_intervals(ref, interval_cache)
            for event in self._splice(ref, intervals):
                keyed.append(((event.effective_date, order), event))

        keyed.sort(key=lambda item: item[0])
        events = [event for _, event in keyed]
        logger.debug(
            "Computed billing events account=%s subscriptions=%s events=%s",
            account_id,
            len(refs),
            len(events),
        )
        return events

    def compute_subscription_events(self, ref: SubscriptionRef) -> List[BillingEvent]:
        """Return the billing timeline of a single subscription."""

        return self._splice(ref, self._disabled_intervals(ref, {}))

    def compute_disabled_intervals(self, ref: SubscriptionRef) -> List[DisabledInterval]:
        """Return the merged disabled intervals governing ``ref``."""

        return self._disabled_intervals(ref, {})

    def _splice(self, ref: SubscriptionRef, intervals: List[DisabledInterval]) -> List[BillingEvent]:
        transitions = self.lifecycle.list_transitions(ref.subscription_id)
        return splice_timeline(
            ref.subscription_id,
            transitions,
            intervals,
            bundle_id=ref.bundle_id,
            suppress_blocked_transitions=self.config.suppress_blocked_transitions,
        )

    def _disabled_intervals(
        self,
        ref: SubscriptionRef,
        cache: Dict[_IntervalKey, List[DisabledInterval]],
    ) -> List[DisabledInterval]:
        governing = (
            (ref.account_id, BlockingStateType.ACCOUNT),
            (ref.bundle_id, BlockingStateType.SUBSCRIPTION_BUNDLE),
            (ref.subscription_id, BlockingStateType.SUBSCRIPTION),
        )
        contributed: List[DisabledInterval] = []
        for key in governing:
            if key not in cache:
                cache[key] = self._entity_intervals(*key)
            contributed.extend(cache[key])

        merged = merge_disabled_intervals(contributed, ref.subscription_id)
        logger.debug(
            "Merged disabled intervals subscription=%s contributed=%s merged=%s",
            ref.subscription_id,
            len(contributed),
            len(merged),
        )
        return merged

    def _entity_intervals(self, blocked_id: str, state_type: BlockingStateType) -> List[DisabledInterval]:
        records = self.blocking_states.list_blocking_records(blocked_id, state_type)
        return build_disabled_intervals(
            records,
            owner_id=blocked_id,
            strict_clears=self.config.strict_clears,
        )


__all__ = [
    "BillingEventService",
    "BlockingStateRepository",
    "LifecycleRepository",
    "SubscriptionDirectory",
]

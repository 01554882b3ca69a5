"""Splicing of lifecycle transitions and disabled intervals into one timeline."""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from .exceptions import InconsistentDataError
from .models import (
    BillingEvent,
    DisabledInterval,
    LifecycleTransition,
    SubscriptionTransitionType,
)

# Rank of each event at a shared effective date.
_CREATION_RANK = 0
_DISABLE_RANK = 1
_ENABLE_RANK = 2
_LIFECYCLE_RANK = 3


def _rank(kind: SubscriptionTransitionType) -> int:
    if kind.is_creation:
        return _CREATION_RANK
    if kind == SubscriptionTransitionType.START_BILLING_DISABLED:
        return _DISABLE_RANK
    if kind == SubscriptionTransitionType.END_BILLING_DISABLED:
        return _ENABLE_RANK
    return _LIFECYCLE_RANK


def splice_timeline(
    subscription_id: str,
    transitions: Sequence[LifecycleTransition],
    intervals: Sequence[DisabledInterval],
    *,
    bundle_id: Optional[str] = None,
    suppress_blocked_transitions: bool = False,
) -> List[BillingEvent]:
    """Return the ordered billing events of one subscription.

    ``intervals`` must already be merged. Each interval contributes a
    ``START_BILLING_DISABLED`` at its start and, unless open, an
    ``END_BILLING_DISABLED`` at its end. At a shared date, creation comes first,
    then disable, then enable, then the remaining lifecycle transitions.
    """

    _check_transitions(subscription_id, transitions)

    keyed: List[Tuple[Tuple[datetime, int, int], BillingEvent]] = []
    for position, transition in enumerate(transitions):
        if suppress_blocked_transitions and _is_blocked(transition, intervals):
            continue
        event = BillingEvent(
            subscription_id=subscription_id,
            bundle_id=bundle_id,
            effective_date=transition.effective_date,
            kind=transition.kind,
        )
        keyed.append(((event.effective_date, _rank(event.kind), position), event))

    offset = len(transitions)
    for position, interval in enumerate(intervals, start=offset):
        start = BillingEvent(
            subscription_id=subscription_id,
            bundle_id=bundle_id,
            effective_date=interval.start,
            kind=SubscriptionTransitionType.START_BILLING_DISABLED,
        )
        keyed.append(((start.effective_date, _DISABLE_RANK, position), start))
        if interval.is_open:
            continue
        end = BillingEvent(
            subscription_id=subscription_id,
            bundle_id=bundle_id,
            effective_date=interval.end,
            kind=SubscriptionTransitionType.END_BILLING_DISABLED,
        )
        keyed.append(((end.effective_date, _ENABLE_RANK, position), end))

    keyed.sort(key=lambda item: item[0])
    return [event for _, event in keyed]


def _check_transitions(subscription_id: str, transitions: Sequence[LifecycleTransition]) -> None:
    if not transitions:
        raise InconsistentDataError(
            message=f"Subscription {subscription_id} has no lifecycle transitions",
            detail={"subscription_id": subscription_id},
        )
    previous: Optional[LifecycleTransition] = None
    for transition in transitions:
        if transition.subscription_id != subscription_id:
            raise InconsistentDataError(
                message=f"Transition for {transition.subscription_id} found on subscription {subscription_id}",
                detail={"subscription_id": subscription_id},
            )
        if previous is not None and transition.effective_date < previous.effective_date:
            raise InconsistentDataError(
                message=f"Lifecycle transitions of subscription {subscription_id} are not date ordered",
                detail={
                    "subscription_id": subscription_id,
                    "effective_date": transition.effective_date.isoformat(),
                },
            )
        previous = transition


def _is_blocked(transition: LifecycleTransition, intervals: Sequence[DisabledInterval]) -> bool:
    if transition.kind.is_creation:
        return False
    return any(interval.contains_strictly(transition.effective_date) for interval in intervals)


__all__ = ["splice_timeline"]

"""Conversion of blocking records into disabled billing intervals."""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence

from .exceptions import InconsistentDataError
from .models import OPEN, BlockingRecord, DisabledInterval
from .stream import group_by_lane, order_blocking_records


logger = logging.getLogger("billing")


def build_disabled_intervals(
    records: Iterable[BlockingRecord],
    *,
    owner_id: Optional[str] = None,
    strict_clears: bool = True,
) -> List[DisabledInterval]:
    """Build the disabled intervals of a single blocked entity.

    Each ``(blocked_id, service)`` lane is scanned on its own: a billing block
    opens an interval, a non-blocking record or a block under a new state name
    closes it. Non-blocking records leading a lane are initial states; a later
    one with nothing open raises :class:`InconsistentDataError` unless
    ``strict_clears`` is turned off. Intervals never cleared end with ``OPEN``.
    The lane results are unioned so the returned intervals are disjoint and
    ordered by start.
    """

    ordered = order_blocking_records(records)
    if not ordered:
        return []

    owner = owner_id or ordered[0].blocked_id
    lane_intervals: List[DisabledInterval] = []
    for lane_records in group_by_lane(ordered).values():
        lane_intervals.extend(_scan_lane(lane_records, owner, strict_clears=strict_clears))
    return merge_disabled_intervals(lane_intervals, owner)


def _scan_lane(
    records: Sequence[BlockingRecord],
    owner_id: str,
    *,
    strict_clears: bool,
) -> List[DisabledInterval]:
    intervals: List[DisabledInterval] = []
    open_start = None
    open_state: Optional[str] = None
    seen_block = False

    for record in records:
        if record.block_billing:
            seen_block = True
            if open_start is None:
                open_start, open_state = record.effective_date, record.state_name
            elif record.state_name != open_state:
                # A new blocking state closes the previous one and reopens at the same instant.
                intervals.append(DisabledInterval(owner_id=owner_id, start=open_start, end=record.effective_date))
                open_start, open_state = record.effective_date, record.state_name
            continue

        if open_start is not None:
            intervals.append(DisabledInterval(owner_id=owner_id, start=open_start, end=record.effective_date))
            open_start, open_state = None, None
        elif strict_clears and seen_block:
            logger.warning(
                "Clear without open interval blocked_id=%s service=%s state=%s sequence=%s",
                record.blocked_id,
                record.service,
                record.state_name,
                record.sequence,
            )
            raise InconsistentDataError(
                message=f"Blocking state {record.state_name!r} clears nothing on lane {record.lane}",
                detail={
                    "blocked_id": record.blocked_id,
                    "service": record.service,
                    "sequence": record.sequence,
                },
            )

    if open_start is not None:
        intervals.append(DisabledInterval(owner_id=owner_id, start=open_start, end=OPEN))
    return intervals


def merge_disabled_intervals(intervals: Iterable[DisabledInterval], owner_id: str) -> List[DisabledInterval]:
    """Union ``intervals`` into the minimal disjoint set owned by ``owner_id``.

    Intervals touching at a boundary are fused. The result only depends on the
    set of intervals given, never on their order.
    """

    merged: List[DisabledInterval] = []
    current: Optional[DisabledInterval] = None
    for interval in sorted(intervals, key=lambda item: item.sort_key):
        if not interval.is_valid():
            raise InconsistentDataError(
                message=f"Disabled interval for {interval.owner_id} ends before it starts",
                detail={
                    "owner_id": interval.owner_id,
                    "start": interval.start.isoformat(),
                    "end": interval.end_key.isoformat(),
                },
            )
        if current is None:
            current = DisabledInterval(owner_id=owner_id, start=interval.start, end=interval.end)
        elif interval.start <= current.end_key:
            current = current.extended_to(interval)
        else:
            merged.append(current)
            current = DisabledInterval(owner_id=owner_id, start=interval.start, end=interval.end)

    if current is not None:
        merged.append(current)
    return merged


__all__ = ["build_disabled_intervals", "merge_disabled_intervals"]

"""Total ordering of blocking records for a single blocked entity."""
from __future__ import annotations

from typing import Dict, Iterable, List, Tuple

from .exceptions import InconsistentDataError
from .models import BlockingRecord


def order_blocking_records(records: Iterable[BlockingRecord]) -> List[BlockingRecord]:
    """Return the records of one entity ordered by ``(effective_date, sequence)``.

    Sequences only need to be unique within a ``(blocked_id, service)`` lane, so
    the service name settles any remaining tie between lanes. Records returned
    twice by a lookup are collapsed. The result does not depend on the order in
    which ``records`` is supplied.
    """

    by_lane_sequence: Dict[Tuple[str, int], BlockingRecord] = {}
    blocked_ids = set()
    for record in records:
        blocked_ids.add(record.blocked_id)
        key = (record.service, record.sequence)
        existing = by_lane_sequence.get(key)
        if existing is None:
            by_lane_sequence[key] = record
        elif existing != record:
            raise InconsistentDataError(
                message=(
                    f"Blocking records of service {record.service!r} share sequence "
                    f"{record.sequence} with different content"
                ),
                detail={
                    "blocked_id": record.blocked_id,
                    "service": record.service,
                    "sequence": record.sequence,
                },
            )

    if len(blocked_ids) > 1:
        raise InconsistentDataError(
            message="Blocking record stream mixes several blocked entities",
            detail={"blocked_ids": sorted(blocked_ids)},
        )

    return sorted(by_lane_sequence.values(), key=lambda record: (*record.sort_key, record.service))


def group_by_lane(records: Iterable[BlockingRecord]) -> Dict[Tuple[str, str], List[BlockingRecord]]:
    """Split an ordered stream into ``(blocked_id, service)`` lanes, keeping order."""

    lanes: Dict[Tuple[str, str], List[BlockingRecord]] = {}
    for record in records:
        lanes.setdefault(record.lane, []).append(record)
    return lanes


__all__ = ["group_by_lane", "order_blocking_records"]

"""Application wiring for the billing timeline service."""
from __future__ import annotations

import logging
from functools import lru_cache

from ..billing import BillingEventService, load_billing_timeline_config
from ..billing.repository import PostgresBillingTimelineRepository


logger = logging.getLogger("billing")


@lru_cache(maxsize=1)
def get_billing_event_service() -> BillingEventService:
    config = load_billing_timeline_config()
    repository = PostgresBillingTimelineRepository()
    logger.info(
        "Billing timeline configured suppress_blocked_transitions=%s strict_clears=%s",
        config.suppress_blocked_transitions,
        config.strict_clears,
    )
    return BillingEventService(
        subscriptions=repository,
        lifecycle=repository,
        blocking_states=repository,
        config=config,
    )


__all__ = ["get_billing_event_service"]

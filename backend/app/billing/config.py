"""Billing timeline configuration helpers."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional
import os


@dataclass(frozen=True)
class BillingTimelineConfig:
    """Options controlling how billing timelines are computed."""

    suppress_blocked_transitions: bool = False
    strict_clears: bool = True


def _to_bool(value: Optional[str], *, default: bool) -> bool:
    if value is None:
        return default
    lowered = value.strip().lower()
    if lowered in {"1", "true", "yes", "on"}:
        return True
    if lowered in {"0", "false", "no", "off"}:
        return False
    return default


def load_billing_timeline_config(env: Optional[Mapping[str, str]] = None) -> BillingTimelineConfig:
    """Load :class:`BillingTimelineConfig` from environment variables."""

    env_mapping = os.environ if env is None else env

    return BillingTimelineConfig(
        suppress_blocked_transitions=_to_bool(
            env_mapping.get("BILLING_SUPPRESS_BLOCKED_TRANSITIONS"), default=False
        ),
        strict_clears=_to_bool(env_mapping.get("BILLING_STRICT_CLEARS"), default=True),
    )


__all__ = ["BillingTimelineConfig", "load_billing_timeline_config"]

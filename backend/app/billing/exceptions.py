"""Errors raised while computing billing timelines."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from fastapi import HTTPException, status


@dataclass(eq=False)
class BillingTimelineError(Exception):
    """Base error surfaced to callers of the billing timeline."""

    code: str
    message: str
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail: Optional[Mapping[str, Any]] = None

    def __post_init__(self) -> None:
        base_detail: Dict[str, Any] = {"error": self.code, "message": self.message}
        if self.detail:
            base_detail.update(self.detail)
        object.__setattr__(self, "_payload", base_detail)
        super().__init__(self.message)

    @property
    def payload(self) -> Mapping[str, Any]:
        """Serialized representation suitable for JSON responses."""

        return self._payload

    def to_http_exception(self) -> HTTPException:
        """Convert the domain error into a FastAPI HTTPException."""

        return HTTPException(status_code=self.status_code, detail=dict(self.payload))


@dataclass(eq=False)
class NotFoundError(BillingTimelineError, LookupError):
    """An account or subscription the caller asked for does not exist."""

    code: str = "not_found"
    message: str = "Resource not found"
    status_code: int = status.HTTP_404_NOT_FOUND


@dataclass(eq=False)
class InconsistentDataError(BillingTimelineError, ValueError):
    """Collaborator data cannot be turned into a deterministic timeline."""

    code: str = "inconsistent_data"
    message: str = "Inconsistent billing data"
    status_code: int = status.HTTP_409_CONFLICT


__all__ = ["BillingTimelineError", "InconsistentDataError", "NotFoundError"]

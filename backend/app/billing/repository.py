"""Read-only PostgreSQL lookups feeding the billing timeline."""
from __future__ import annotations

from contextlib import contextmanager
from typing import Iterable, List, Optional

import psycopg2
import psycopg2.extras
from psycopg2.extensions import connection as PgConnection
from psycopg2.extensions import cursor as PgCursor

from .models import (
    BlockingRecord,
    BlockingStateType,
    LifecycleTransition,
    SubscriptionRef,
    SubscriptionTransitionType,
)

try:  # pragma: no cover - resolve connection helper when imported from FastAPI app
    from backend.app_context import get_conn
except ModuleNotFoundError as exc:  # pragma: no cover
    if exc.name != "backend":
        raise
    from ...app_context import get_conn  # type: ignore[no-redef]


@contextmanager
def managed_connection(conn: Optional[PgConnection] = None):
    """Context manager that manages transaction boundaries for optional connections."""

    if conn is not None:
        yield conn, False
        return

    connection = get_conn()
    try:
        yield connection, True
        connection.commit()
    except Exception:
        connection.rollback()
        raise
    finally:
        connection.close()


def _row_to_blocking_record(row: dict) -> BlockingRecord:
    return BlockingRecord(
        blocked_id=str(row["blockable_id"]),
        state_type=BlockingStateType(row["type"]),
        state_name=row["state"],
        service=row["service"],
        block_change=bool(row["block_change"]),
        block_entitlement=bool(row["block_entitlement"]),
        block_billing=bool(row["block_billing"]),
        effective_date=row["effective_date"],
        sequence=int(row["record_id"]),
    )


def _row_to_transition(row: dict) -> LifecycleTransition:
    return LifecycleTransition(
        subscription_id=str(row["subscription_id"]),
        kind=SubscriptionTransitionType(row["event_type"]),
        effective_date=row["effective_date"],
    )


def _row_to_subscription_ref(row: dict) -> SubscriptionRef:
    return SubscriptionRef(
        subscription_id=str(row["subscription_id"]),
        bundle_id=str(row["bundle_id"]),
        account_id=str(row["account_id"]),
        created_at=row["created_at"],
    )


class PostgresBillingTimelineRepository:
    """Implements the blocking, lifecycle and subscription lookups on PostgreSQL."""

    def __init__(self, *, conn: Optional[PgConnection] = None) -> None:
        self._conn = conn

    @contextmanager
    def _cursor(self) -> Iterable[PgCursor]:
        with managed_connection(self._conn) as (connection, managed):
            cursor = connection.cursor(cursor_factory=psycopg2.extras.RealDictCursor)
            try:
                yield cursor
                if managed:
                    connection.commit()
            except Exception:
                if managed:
                    connection.rollback()
                raise
            finally:
                cursor.close()

    def account_exists(self, account_id: str) -> bool:
        with self._cursor() as cursor:
            cursor.execute(
                """
                SELECT 1
                FROM accounts
                WHERE id = %s
                LIMIT 1
                """,
                (account_id,),
            )
            return cursor.fetchone() is not None

    def list_subscriptions(self, account_id: str) -> List[SubscriptionRef]:
        with self._cursor() as cursor:
            cursor.execute(
                """
                SELECT s.id AS subscription_id,
                       s.bundle_id,
                       b.account_id,
                       s.created_date AS created_at
                FROM subscriptions s
                JOIN bundles b ON b.id = s.bundle_id
                WHERE b.account_id = %s
                ORDER BY s.created_date ASC, s.record_id ASC
                """,
                (account_id,),
            )
            rows = cursor.fetchall() or []
        return [_row_to_subscription_ref(row) for row in rows]

    def list_transitions(self, subscription_id: str) -> List[LifecycleTransition]:
        with self._cursor() as cursor:
            cursor.execute(
                """
                SELECT subscription_id, event_type, effective_date
                FROM subscription_events
                WHERE subscription_id = %s
                  AND is_active = TRUE
                ORDER BY effective_date ASC, record_id ASC
                """,
                (subscription_id,),
            )
            rows = cursor.fetchall() or []
        return [_row_to_transition(row) for row in rows]

    def list_blocking_records(self, blocked_id: str, state_type: BlockingStateType) -> List[BlockingRecord]:
        with self._cursor() as cursor:
            cursor.execute(
                """
                SELECT record_id,
                       blockable_id,
                       type,
                       state,
                       service,
                       block_change,
                       block_entitlement,
                       block_billing,
                       effective_date
                FROM blocking_states
                WHERE blockable_id = %s
                  AND type = %s
                  AND is_active = TRUE
                ORDER BY effective_date ASC, record_id ASC
                """,
                (blocked_id, state_type.value),
            )
            rows = cursor.fetchall() or []
        return [_row_to_blocking_record(row) for row in rows]


__all__ = ["PostgresBillingTimelineRepository", "managed_connection"]

"""WAL-backed change notifications via pluggy and a thread pool.

Each notification is inserted into ``event_wal`` as ``pending`` before any
plugin sees it. A hook that raises marks the row ``failed`` (or
``dead_letter`` once ``max_retries`` attempts are used up); ``drain()``
replays pending and failed rows in insertion order.

INVARIANT: Plugin failures are warnings, never errors.
"""

from __future__ import annotations

import json
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, func, insert, select, update

from relgraph.infrastructure.database.schema import event_wal
from relgraph.services._helpers import now_iso

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection, Engine
    from sqlalchemy.sql import Select

    from relgraph.plugins.manager import PluginManager

logger = logging.getLogger(__name__)

FUTURE_TIMEOUT = 30.0


class EventStatus(StrEnum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    DEAD_LETTER = "dead_letter"


RETRYABLE = (EventStatus.PENDING, EventStatus.FAILED)


class EventBus:
    """Fire-and-forget dispatch of change notifications.

    Parameters:
        engine: Engine whose database holds the ``event_wal`` table.
        plugin_manager: Manager whose hooks receive the notifications.
        sync: Call hooks inline instead of on the thread pool.
        max_retries: Failed attempts before a row becomes ``dead_letter``.
        max_workers: Thread pool size for asynchronous dispatch.
    """

    def __init__(
        self,
        engine: Engine,
        plugin_manager: PluginManager,
        *,
        sync: bool = False,
        max_retries: int = 3,
        max_workers: int = 2,
    ) -> None:
        self._engine = engine
        self._pm = plugin_manager
        self._max_retries = max_retries
        self._executor = None if sync else ThreadPoolExecutor(max_workers=max_workers)
        self._futures: list[Future[None]] = []

    @property
    def plugin_manager(self) -> PluginManager:
        return self._pm

    def dispatch(self, hook_name: str, payload: dict[str, Any]) -> int:
        """Log *payload* to the WAL and hand it to the plugins. Returns the row id."""
        with self._engine.begin() as conn:
            event_id = conn.execute(
                insert(event_wal).values(
                    hook_name=hook_name,
                    payload=json.dumps(payload, sort_keys=True),
                    status=EventStatus.PENDING.value,
                    retries=0,
                    graph_id=payload.get("graph_id"),
                    created=now_iso(),
                )
            ).inserted_primary_key[0]

        if self._executor is None:
            self._deliver(event_id, hook_name, payload)
        else:
            self._futures.append(
                self._executor.submit(self._deliver, event_id, hook_name, payload)
            )
        return event_id

    def drain(self, *, graph_id: str | None = None) -> list[dict[str, Any]]:
        """Replay pending and failed rows synchronously, optionally for one graph.

        Returns ``{id, hook_name, graph_id, status}`` per replayed row,
        with the status it ended in.
        """
        self._wait_futures()
        query = _scoped(
            select(
                event_wal.c.id,
                event_wal.c.hook_name,
                event_wal.c.graph_id,
                event_wal.c.payload,
            ).where(event_wal.c.status.in_([s.value for s in RETRYABLE])),
            graph_id,
        ).order_by(event_wal.c.id)
        with self._engine.connect() as conn:
            rows = conn.execute(query).all()

        replayed: list[dict[str, Any]] = []
        for row in rows:
            status = self._deliver(row.id, row.hook_name, json.loads(row.payload))
            replayed.append(
                {
                    "id": row.id,
                    "hook_name": row.hook_name,
                    "graph_id": row.graph_id,
                    "status": status.value,
                }
            )
        return replayed

    def status_counts(self, *, graph_id: str | None = None) -> dict[str, int]:
        """Row count per status; statuses with no rows are omitted."""
        self._wait_futures()
        query = _scoped(
            select(event_wal.c.status, func.count()).group_by(event_wal.c.status), graph_id
        )
        with self._engine.connect() as conn:
            return {status: int(count) for status, count in conn.execute(query)}

    def purge(self, *, graph_id: str | None = None) -> int:
        """Delete completed rows. Returns how many were removed."""
        self._wait_futures()
        stmt = delete(event_wal).where(event_wal.c.status == EventStatus.COMPLETED.value)
        if graph_id is not None:
            stmt = stmt.where(event_wal.c.graph_id == graph_id)
        with self._engine.begin() as conn:
            return conn.execute(stmt).rowcount

    def shutdown(self) -> None:
        """Wait for in-flight deliveries and stop the thread pool."""
        self._wait_futures()
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------

    def _deliver(self, event_id: int, hook_name: str, payload: dict[str, Any]) -> EventStatus:
        hook = getattr(self._pm.hook, hook_name, None)
        try:
            if hook is not None:
                hook(**payload)
        except Exception as exc:
            logger.warning("Hook %s failed for event %d: %s", hook_name, event_id, exc)
            with self._engine.begin() as conn:
                return self._record_failure(conn, event_id, str(exc))
        with self._engine.begin() as conn:
            conn.execute(
                update(event_wal)
                .where(event_wal.c.id == event_id)
                .values(status=EventStatus.COMPLETED.value, error=None, completed=now_iso())
            )
        return EventStatus.COMPLETED

    def _record_failure(self, conn: Connection, event_id: int, error: str) -> EventStatus:
        retries = (
            conn.execute(select(event_wal.c.retries).where(event_wal.c.id == event_id)).scalar_one()
            + 1
        )
        status = EventStatus.DEAD_LETTER if retries >= self._max_retries else EventStatus.FAILED
        conn.execute(
            update(event_wal)
            .where(event_wal.c.id == event_id)
            .values(
                status=status.value,
                error=error,
                retries=retries,
                completed=now_iso() if status is EventStatus.DEAD_LETTER else None,
            )
        )
        return status

    def _wait_futures(self) -> None:
        futures, self._futures = self._futures, []
        for future in futures:
            try:
                future.result(timeout=FUTURE_TIMEOUT)
            except Exception:
                logger.warning("Event delivery did not finish", exc_info=True)


def _scoped(query: Select[Any], graph_id: str | None) -> Select[Any]:
    if graph_id is None:
        return query
    return query.where(event_wal.c.graph_id == graph_id)

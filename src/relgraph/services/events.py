"""EventService — inspection and replay of the notification WAL."""

from __future__ import annotations

from typing import Any

from relgraph.plugins.event_bus import EventBus, EventStatus
from relgraph.services.base import BaseService
from relgraph.services.result import ServiceResult


class EventService(BaseService):
    """Reports on, replays, and prunes change notifications.

    Every method takes an optional *graph_id* restricting it to the
    notifications of one graph.
    """

    def status(self, graph_id: str | None = None) -> ServiceResult:
        """Count WAL rows per status (pending, completed, failed, dead_letter)."""
        op = "event_status"
        bus = self._bus(op)
        if isinstance(bus, ServiceResult):
            return bus
        counts = bus.status_counts(graph_id=graph_id)
        return ServiceResult(
            ok=True,
            op=op,
            data=_scoped({"total": sum(counts.values()), "counts": counts}, graph_id),
        )

    def drain(self, graph_id: str | None = None) -> ServiceResult:
        """Retry every pending or failed notification synchronously."""
        op = "drain_events"
        bus = self._bus(op)
        if isinstance(bus, ServiceResult):
            return bus
        replayed = bus.drain(graph_id=graph_id)
        warnings = [
            f"Event {item['id']} ({item['hook_name']}) is {item['status']}"
            for item in replayed
            if item["status"] != EventStatus.COMPLETED
        ]
        return ServiceResult(
            ok=True,
            op=op,
            data=_scoped({"count": len(replayed), "items": replayed}, graph_id),
            warnings=warnings,
        )

    def purge(self, graph_id: str | None = None) -> ServiceResult:
        """Delete delivered notifications; failed and dead-letter rows stay."""
        op = "purge_events"
        bus = self._bus(op)
        if isinstance(bus, ServiceResult):
            return bus
        return ServiceResult(
            ok=True, op=op, data=_scoped({"purged": bus.purge(graph_id=graph_id)}, graph_id)
        )

    def _bus(self, op: str) -> EventBus | ServiceResult:
        bus = self._ledger.event_bus
        if bus is None:
            return ServiceResult.failure(op, "NO_EVENT_BUS", "Event bus is not initialized")
        return bus


def _scoped(data: dict[str, Any], graph_id: str | None) -> dict[str, Any]:
    return data if graph_id is None else {"graph_id": graph_id, **data}

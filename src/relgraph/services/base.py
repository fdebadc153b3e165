"""BaseService — shared foundation for relgraph services.

Every service receives a :class:`Ledger` at construction time. Services
own their transaction boundaries via ``self._ledger.transaction()``,
translate domain errors into ``ServiceResult`` failures, and dispatch
change notifications only after the transaction commits.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from relgraph.config.logging import bound_operation
from relgraph.domain.errors import GraphError
from relgraph.domain.ids import normalize_account, validate_graph_id
from relgraph.services.result import ServiceResult

if TYPE_CHECKING:
    from relgraph.domain.types import GraphKind
    from relgraph.infrastructure.ledger import Ledger, LedgerTransaction
    from relgraph.infrastructure.repositories.graphs import GraphRecord

logger = logging.getLogger(__name__)


class Rejected(Exception):
    """Abort the current operation with a prepared failure result."""

    def __init__(self, result: ServiceResult) -> None:
        super().__init__(result.error.message if result.error else result.op)
        self.result = result


@dataclass
class Outcome:
    """What a successful operation produced.

    Attributes:
        data: Payload for ``ServiceResult.data``.
        events: ``(hook_name, payload)`` pairs to dispatch after commit.
            The graph id is added to every payload automatically.
        changed: Whether the graph snapshot must be saved.
    """

    data: dict[str, Any] = field(default_factory=dict)
    events: list[tuple[str, dict[str, Any]]] = field(default_factory=list)
    changed: bool = False

    def emit(self, hook_name: str, **payload: Any) -> None:
        self.events.append((hook_name, payload))
        self.changed = True


class BaseService:
    """Base for all service-layer classes.

    Subclasses express each operation as an *action* run by :meth:`_run`
    inside one ledger transaction.
    """

    def __init__(self, ledger: Ledger) -> None:
        self._ledger = ledger

    # ------------------------------------------------------------------
    # Operation runner
    # ------------------------------------------------------------------

    def _run(
        self,
        op: str,
        graph_id: str | None,
        action: Callable[[LedgerTransaction], Outcome],
    ) -> ServiceResult:
        """Run *action* in a transaction, then dispatch its events.

        :class:`Rejected` and :class:`GraphError` roll the transaction
        back and become ``ok=False`` results; no event is dispatched.
        """
        with bound_operation(op, graph_id):
            try:
                with self._ledger.transaction() as txn:
                    outcome = action(txn)
            except Rejected as exc:
                return exc.result
            except GraphError as exc:
                logger.debug("Rejected: %s (%s)", exc.message, exc.code)
                return ServiceResult.from_error(op, exc)

            warnings: list[str] = []
            for hook_name, payload in outcome.events:
                self._dispatch_event(hook_name, {"graph_id": graph_id, **payload}, warnings)
        data = {"graph_id": graph_id, **outcome.data} if graph_id else outcome.data
        return ServiceResult(ok=True, op=op, data=data, warnings=warnings)

    def _dispatch_event(
        self,
        hook_name: str,
        payload: dict[str, Any],
        warnings: list[str],
    ) -> None:
        """Dispatch a change notification. No-op if the event bus is not initialized.

        INVARIANT: Plugin failures are warnings, never errors.
        """
        bus = self._ledger.event_bus
        if bus is None:
            return
        try:
            bus.dispatch(hook_name, payload)
        except Exception:
            logger.warning("Event dispatch failed for %s", hook_name, exc_info=True)
            warnings.append(f"Event dispatch failed for {hook_name}")

    # ------------------------------------------------------------------
    # Shared checks
    # ------------------------------------------------------------------

    @staticmethod
    def _accounts(op: str, *accounts: str) -> list[str]:
        """Normalize account identities, rejecting invalid ones with INVALID_ACCOUNT."""
        normalized: list[str] = []
        for account in accounts:
            try:
                normalized.append(normalize_account(account))
            except ValueError as exc:
                raise Rejected(
                    ServiceResult.failure(op, "INVALID_ACCOUNT", str(exc), {"account": account})
                ) from exc
        return normalized

    @staticmethod
    def _require_record(
        txn: LedgerTransaction,
        op: str,
        graph_id: str,
        kind: GraphKind,
    ) -> GraphRecord:
        """Fetch the graph record; reject malformed ids, unknown ids, and the other kind."""
        if not validate_graph_id(graph_id):
            raise Rejected(
                ServiceResult.failure(
                    op,
                    "INVALID_GRAPH_ID",
                    f"'{graph_id}' is not a graph id (expected graph_ and 12 hex digits)",
                    {"graph_id": graph_id},
                )
            )
        record = txn.graphs.get_record(graph_id)
        if record is None:
            raise Rejected(
                ServiceResult.failure(
                    op, "NOT_FOUND", f"Graph '{graph_id}' not found", {"graph_id": graph_id}
                )
            )
        if record.kind != kind:
            raise Rejected(
                ServiceResult.failure(
                    op,
                    "WRONG_KIND",
                    f"Graph '{graph_id}' is a {record.kind} graph, not a {kind} graph",
                    {"graph_id": graph_id, "kind": record.kind.value},
                )
            )
        return record

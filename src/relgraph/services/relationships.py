"""RelationshipService — caller-scoped operations on relationship graphs.

Every mutating method takes the caller identity explicitly; the caller
is always the source of the relationship (or the account whose
properties change). Each call loads the graph snapshot, applies one
domain operation, saves, commits, and then dispatches notifications.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from typing import Any

from relgraph.domain.properties import Attributes
from relgraph.domain.relationships import RelationshipGraph
from relgraph.domain.types import GraphKind
from relgraph.infrastructure.ledger import LedgerTransaction
from relgraph.services._helpers import dump_props, now_iso
from relgraph.services.base import BaseService, Outcome, Rejected
from relgraph.services.result import ServiceResult

logger = logging.getLogger(__name__)

PropsInput = Mapping[str, Any] | Attributes
GraphAction = Callable[[RelationshipGraph[Attributes]], Outcome]


def _coerce_props(op: str, props: PropsInput) -> Attributes:
    """Parse *props* as a JSON object, rejecting values JSON cannot represent.

    The payload is stored as JSON, so anything that would not survive a
    reload unchanged (sets, NaN, arbitrary objects) fails with INVALID_PROPS.
    """
    raw = props.model_dump() if isinstance(props, Attributes) else dict(props)
    try:
        return Attributes.model_validate_json(json.dumps(raw, allow_nan=False))
    except (TypeError, ValueError) as exc:
        raise Rejected(
            ServiceResult.failure(op, "INVALID_PROPS", f"Properties must be JSON-compatible: {exc}")
        ) from exc


class RelationshipService(BaseService):
    """Handles relationship graphs: edges, account props, relationship props."""

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def create_graph(
        self,
        max_out_degree: int | None = None,
        *,
        use_default: bool = True,
    ) -> ServiceResult:
        """Create an empty relationship graph.

        Args:
            max_out_degree: Cap on targets per source. When None and
                *use_default* is set, ``[graph] default_max_out_degree``
                applies; otherwise the graph is unbounded.
        """
        op = "create_graph"
        if max_out_degree is None and use_default:
            max_out_degree = self._ledger.settings.graph.default_max_out_degree

        def action(txn: LedgerTransaction) -> Outcome:
            graph: RelationshipGraph[Attributes] = RelationshipGraph(max_out_degree=max_out_degree)
            txn.graphs.create_relationship_graph(graph, now_iso())
            outcome = Outcome(
                data={
                    "graph_id": graph.graph_id,
                    "kind": GraphKind.RELATIONSHIP.value,
                    "max_out_degree": graph.max_out_degree,
                }
            )
            outcome.emit(
                "graph_created", graph_id=graph.graph_id, kind=GraphKind.RELATIONSHIP.value
            )
            logger.debug("Created relationship graph %s", graph.graph_id)
            return outcome

        return self._run(op, None, action)

    def destroy_graph(self, graph_id: str) -> ServiceResult:
        """Tear down a graph. Fails with GRAPH_NOT_EMPTY unless every map is empty."""
        op = "destroy_graph"

        def action(txn: LedgerTransaction) -> Outcome:
            record = self._require_record(txn, op, graph_id, GraphKind.RELATIONSHIP)
            txn.graphs.load_relationship_graph(record).ensure_empty()
            txn.graphs.delete(graph_id)
            outcome = Outcome(data={"destroyed": True})
            outcome.emit("graph_destroyed", kind=GraphKind.RELATIONSHIP.value)
            return outcome

        return self._run(op, graph_id, action)

    def list_graphs(self, *, kind: GraphKind | None = None) -> ServiceResult:
        """List every graph record, oldest first."""

        def action(txn: LedgerTransaction) -> Outcome:
            items = [
                {
                    "graph_id": record.id,
                    "kind": record.kind.value,
                    "max_out_degree": record.max_out_degree,
                    "max_as_benefactor": record.max_as_benefactor,
                    "max_as_beneficiary": record.max_as_beneficiary,
                    "created": record.created,
                    "modified": record.modified,
                }
                for record in txn.graphs.list_records(kind=kind)
            ]
            return Outcome(data={"count": len(items), "items": items})

        return self._run("list_graphs", None, action)

    def show_graph(self, graph_id: str) -> ServiceResult:
        """Full snapshot of a relationship graph."""

        def inspect(graph: RelationshipGraph[Attributes]) -> Outcome:
            relationships = {
                source: sorted(graph.relationships_of(source)) for source in sorted(graph.sources())
            }
            account_props = {
                account: dump_props(props)
                for account, props in sorted(graph.account_props_items())
            }
            relationship_props = [
                {"source": source, "target": target, "props": dump_props(props)}
                for (source, target), props in sorted(graph.relationship_props_items())
            ]
            return Outcome(
                data={
                    "kind": GraphKind.RELATIONSHIP.value,
                    "max_out_degree": graph.max_out_degree,
                    "relationship_count": sum(len(t) for t in relationships.values()),
                    "relationships": relationships,
                    "account_props": account_props,
                    "relationship_props": relationship_props,
                }
            )

        return self._apply("show_graph", graph_id, inspect)

    # ------------------------------------------------------------------
    # Relationships
    # ------------------------------------------------------------------

    def add_relationship(self, graph_id: str, caller: str, target: str) -> ServiceResult:
        """Add ``caller -> target`` subject to the graph's out-degree cap."""
        op = "add_relationship"

        def mutate(graph: RelationshipGraph[Attributes]) -> Outcome:
            source, dest = self._accounts(op, caller, target)
            added = graph.add_relationship(source, dest)
            outcome = Outcome(
                data={
                    "source": source,
                    "target": dest,
                    "added": added,
                    "out_degree": graph.out_degree(source),
                }
            )
            if added:
                outcome.emit("relationship_added", source=source, target=dest)
            return outcome

        return self._apply(op, graph_id, mutate)

    def remove_relationship(self, graph_id: str, caller: str, target: str) -> ServiceResult:
        """Remove ``caller -> target``; its relationship properties cascade away."""
        op = "remove_relationship"

        def mutate(graph: RelationshipGraph[Attributes]) -> Outcome:
            source, dest = self._accounts(op, caller, target)
            previous = graph.remove_relationship(source, dest)
            outcome = Outcome(
                data={"source": source, "target": dest, "previous_props": dump_props(previous)}
            )
            outcome.emit("relationship_removed", source=source, target=dest)
            if previous is not None:
                outcome.emit(
                    "relationship_props_unset",
                    source=source,
                    target=dest,
                    props=dump_props(previous),
                )
            return outcome

        return self._apply(op, graph_id, mutate)

    def clear_relationships(self, graph_id: str, caller: str) -> ServiceResult:
        """Remove every relationship of *caller*. An empty result is not an error."""
        op = "clear_relationships"

        def mutate(graph: RelationshipGraph[Attributes]) -> Outcome:
            (source,) = self._accounts(op, caller)
            removed = graph.clear_relationships(source)
            outcome = Outcome(
                data={
                    "source": source,
                    "count": len(removed),
                    "removed": {
                        target: dump_props(props) for target, props in sorted(removed.items())
                    },
                }
            )
            for target, props in sorted(removed.items()):
                outcome.emit("relationship_removed", source=source, target=target)
                if props is not None:
                    outcome.emit(
                        "relationship_props_unset",
                        source=source,
                        target=target,
                        props=dump_props(props),
                    )
            return outcome

        return self._apply(op, graph_id, mutate)

    def list_relationships(self, graph_id: str, account: str) -> ServiceResult:
        """Targets of *account*, with its degree against the cap."""
        op = "list_relationships"

        def inspect(graph: RelationshipGraph[Attributes]) -> Outcome:
            (source,) = self._accounts(op, account)
            targets = sorted(graph.relationships_of(source))
            return Outcome(
                data={
                    "account": source,
                    "count": len(targets),
                    "targets": targets,
                    "max_out_degree": graph.max_out_degree,
                }
            )

        return self._apply(op, graph_id, inspect)

    # ------------------------------------------------------------------
    # Account properties
    # ------------------------------------------------------------------

    def set_account_props(self, graph_id: str, caller: str, props: PropsInput) -> ServiceResult:
        op = "set_account_props"

        def mutate(graph: RelationshipGraph[Attributes]) -> Outcome:
            (account,) = self._accounts(op, caller)
            value = _coerce_props(op, props)
            previous = graph.set_account_props(account, value)
            outcome = Outcome(
                data={
                    "account": account,
                    "props": dump_props(value),
                    "previous_props": dump_props(previous),
                }
            )
            outcome.emit("account_props_set", account=account, props=dump_props(value))
            return outcome

        return self._apply(op, graph_id, mutate)

    def unset_account_props(self, graph_id: str, caller: str) -> ServiceResult:
        """Remove the caller's account properties; absence is not an error."""
        op = "unset_account_props"

        def mutate(graph: RelationshipGraph[Attributes]) -> Outcome:
            (account,) = self._accounts(op, caller)
            previous = graph.unset_account_props(account)
            outcome = Outcome(data={"account": account, "previous_props": dump_props(previous)})
            if previous is not None:
                outcome.emit("account_props_unset", account=account, props=dump_props(previous))
            return outcome

        return self._apply(op, graph_id, mutate)

    def get_account_props(self, graph_id: str, account: str) -> ServiceResult:
        op = "get_account_props"

        def inspect(graph: RelationshipGraph[Attributes]) -> Outcome:
            (name,) = self._accounts(op, account)
            props = graph.get_account_props(name)
            return Outcome(data={"account": name, "props": dump_props(props)})

        return self._apply(op, graph_id, inspect)

    # ------------------------------------------------------------------
    # Relationship properties
    # ------------------------------------------------------------------

    def set_relationship_props(
        self,
        graph_id: str,
        caller: str,
        target: str,
        props: PropsInput,
    ) -> ServiceResult:
        """Attach properties to an existing ``caller -> target`` edge."""
        op = "set_relationship_props"

        def mutate(graph: RelationshipGraph[Attributes]) -> Outcome:
            source, dest = self._accounts(op, caller, target)
            value = _coerce_props(op, props)
            previous = graph.set_relationship_props(source, dest, value)
            outcome = Outcome(
                data={
                    "source": source,
                    "target": dest,
                    "props": dump_props(value),
                    "previous_props": dump_props(previous),
                }
            )
            outcome.emit(
                "relationship_props_set", source=source, target=dest, props=dump_props(value)
            )
            return outcome

        return self._apply(op, graph_id, mutate)

    def unset_relationship_props(self, graph_id: str, caller: str, target: str) -> ServiceResult:
        op = "unset_relationship_props"

        def mutate(graph: RelationshipGraph[Attributes]) -> Outcome:
            source, dest = self._accounts(op, caller, target)
            previous = graph.unset_relationship_props(source, dest)
            outcome = Outcome(
                data={"source": source, "target": dest, "previous_props": dump_props(previous)}
            )
            if previous is not None:
                outcome.emit(
                    "relationship_props_unset",
                    source=source,
                    target=dest,
                    props=dump_props(previous),
                )
            return outcome

        return self._apply(op, graph_id, mutate)

    def get_relationship_props(self, graph_id: str, source: str, target: str) -> ServiceResult:
        op = "get_relationship_props"

        def inspect(graph: RelationshipGraph[Attributes]) -> Outcome:
            src, dest = self._accounts(op, source, target)
            return Outcome(
                data={
                    "source": src,
                    "target": dest,
                    "exists": graph.has_relationship(src, dest),
                    "props": dump_props(graph.get_relationship_props(src, dest)),
                }
            )

        return self._apply(op, graph_id, inspect)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _apply(self, op: str, graph_id: str, action: GraphAction) -> ServiceResult:
        """Load the graph, run *action*, and save the snapshot if it changed."""

        def run(txn: LedgerTransaction) -> Outcome:
            record = self._require_record(txn, op, graph_id, GraphKind.RELATIONSHIP)
            graph = txn.graphs.load_relationship_graph(record)
            outcome = action(graph)
            if outcome.changed:
                txn.graphs.save_relationship_graph(graph, now_iso())
            return outcome

        return self._run(op, graph_id, run)

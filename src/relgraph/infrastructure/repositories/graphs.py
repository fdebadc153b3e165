"""Snapshot repository for relationship graphs and beneficiary links.

Graphs are small (out-degree is capped), so every save rewrites the
graph's rows wholesale and every load replays them into a fresh domain
object. The caller owns the transaction: pass a ``Connection`` obtained
from ``engine.begin()`` so the snapshot write is atomic with whatever
else the caller does.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqlalchemy import delete, insert, select, update

from relgraph.domain.beneficiary import BeneficiaryLink, Direction
from relgraph.domain.errors import InconsistentSnapshotError
from relgraph.domain.properties import Attributes
from relgraph.domain.relationships import RelationshipGraph
from relgraph.domain.types import GraphKind
from relgraph.infrastructure.database.schema import (
    account_props,
    graphs,
    labeled_edges,
    labeled_nodes,
    relationship_props,
    relationships,
)

if TYPE_CHECKING:
    from sqlalchemy import Connection, RowMapping


_GRAPH_TABLES = (relationships, account_props, relationship_props, labeled_edges, labeled_nodes)


@dataclass(frozen=True)
class GraphRecord:
    """A row of the ``graphs`` table."""

    id: str
    kind: GraphKind
    max_out_degree: int | None
    max_as_benefactor: int | None
    max_as_beneficiary: int | None
    created: str
    modified: str


def _dump(props: Attributes) -> str:
    return json.dumps(props.as_dict(), sort_keys=True)


def _load(payload: str) -> Attributes:
    return Attributes.model_validate(json.loads(payload))


class GraphRepository:
    """Encapsulates SQL for graph snapshots within one transaction."""

    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    def get_record(self, graph_id: str) -> GraphRecord | None:
        row = self._conn.execute(select(graphs).where(graphs.c.id == graph_id)).mappings().first()
        if row is None:
            return None
        return self._to_record(row)

    def list_records(self, *, kind: GraphKind | None = None) -> list[GraphRecord]:
        stmt = select(graphs).order_by(graphs.c.created, graphs.c.id)
        if kind is not None:
            stmt = stmt.where(graphs.c.kind == kind.value)
        return [self._to_record(row) for row in self._conn.execute(stmt).mappings().all()]

    def delete(self, graph_id: str) -> None:
        """Remove a graph record; dependent rows cascade."""
        self._clear_rows(graph_id)
        self._conn.execute(delete(graphs).where(graphs.c.id == graph_id))

    # ------------------------------------------------------------------
    # Relationship graphs
    # ------------------------------------------------------------------

    def create_relationship_graph(self, graph: RelationshipGraph[Attributes], now: str) -> None:
        self._conn.execute(
            insert(graphs).values(
                id=graph.graph_id,
                kind=GraphKind.RELATIONSHIP.value,
                max_out_degree=graph.max_out_degree,
                created=now,
                modified=now,
            )
        )

    def load_relationship_graph(self, record: GraphRecord) -> RelationshipGraph[Attributes]:
        graph: RelationshipGraph[Attributes] = RelationshipGraph(
            record.id, max_out_degree=record.max_out_degree
        )
        rel_rows = self._conn.execute(
            select(relationships.c.source, relationships.c.target).where(
                relationships.c.graph_id == record.id
            )
        ).all()
        for row in rel_rows:
            graph.add_relationship(row.source, row.target)

        acct_rows = self._conn.execute(
            select(account_props.c.account, account_props.c.payload).where(
                account_props.c.graph_id == record.id
            )
        ).all()
        for row in acct_rows:
            graph.set_account_props(row.account, _load(row.payload))

        prop_rows = self._conn.execute(
            select(
                relationship_props.c.source,
                relationship_props.c.target,
                relationship_props.c.payload,
            ).where(relationship_props.c.graph_id == record.id)
        ).all()
        for row in prop_rows:
            graph.set_relationship_props(row.source, row.target, _load(row.payload))
        return graph

    def save_relationship_graph(self, graph: RelationshipGraph[Attributes], now: str) -> None:
        """Replace every stored row of *graph* with its current state."""
        graph_id = graph.graph_id
        self._clear_rows(graph_id)

        rel_values = [
            {"graph_id": graph_id, "source": source, "target": target}
            for source in graph.sources()
            for target in graph.relationships_of(source)
        ]
        if rel_values:
            self._conn.execute(insert(relationships), rel_values)

        acct_values = [
            {"graph_id": graph_id, "account": account, "payload": _dump(props)}
            for account, props in graph.account_props_items()
        ]
        if acct_values:
            self._conn.execute(insert(account_props), acct_values)

        prop_values = [
            {"graph_id": graph_id, "source": source, "target": target, "payload": _dump(props)}
            for (source, target), props in graph.relationship_props_items()
        ]
        if prop_values:
            self._conn.execute(insert(relationship_props), prop_values)

        self._touch(graph_id, now)

    # ------------------------------------------------------------------
    # Beneficiary links
    # ------------------------------------------------------------------

    def create_beneficiary_link(self, link: BeneficiaryLink, now: str) -> None:
        self._conn.execute(
            insert(graphs).values(
                id=link.graph_id,
                kind=GraphKind.BENEFICIARY.value,
                max_as_benefactor=link.max_as_benefactor,
                max_as_beneficiary=link.max_as_beneficiary,
                created=now,
                modified=now,
            )
        )

    def load_beneficiary_link(self, record: GraphRecord) -> BeneficiaryLink:
        assert record.max_as_benefactor is not None
        assert record.max_as_beneficiary is not None
        link = BeneficiaryLink(
            record.id,
            max_as_benefactor=record.max_as_benefactor,
            max_as_beneficiary=record.max_as_beneficiary,
        )
        node_rows = self._conn.execute(
            select(labeled_nodes.c.node, labeled_nodes.c.incoming).where(
                labeled_nodes.c.graph_id == record.id
            )
        ).all()
        for row in node_rows:
            link.graph.add_node(row.node)

        edge_rows = self._conn.execute(
            select(labeled_edges.c.source, labeled_edges.c.target, labeled_edges.c.label).where(
                labeled_edges.c.graph_id == record.id
            )
        ).all()
        for row in edge_rows:
            link.graph.add_edge(row.source, row.target, Direction(row.label))

        stored = {row.node: row.incoming for row in node_rows}
        replayed = {node: link.graph.incoming_count(node) for node in link.graph.nodes()}
        if stored != replayed:
            msg = f"Beneficiary link {record.id} has incoming counts that disagree with its edges"
            raise InconsistentSnapshotError(msg, graph_id=record.id)
        return link

    def save_beneficiary_link(self, link: BeneficiaryLink, now: str) -> None:
        """Replace every stored node and edge row of *link*."""
        graph_id = link.graph_id
        labeled = link.graph
        self._clear_rows(graph_id)

        node_values = [
            {"graph_id": graph_id, "node": node, "incoming": labeled.incoming_count(node)}
            for node in labeled.nodes()
        ]
        if node_values:
            self._conn.execute(insert(labeled_nodes), node_values)

        edge_values = [
            {"graph_id": graph_id, "source": source, "target": target, "label": label.value}
            for source, target, label in labeled.edges()
        ]
        if edge_values:
            self._conn.execute(insert(labeled_edges), edge_values)

        self._touch(graph_id, now)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _clear_rows(self, graph_id: str) -> None:
        for table in _GRAPH_TABLES:
            self._conn.execute(delete(table).where(table.c.graph_id == graph_id))

    def _touch(self, graph_id: str, now: str) -> None:
        self._conn.execute(update(graphs).where(graphs.c.id == graph_id).values(modified=now))

    @staticmethod
    def _to_record(row: RowMapping) -> GraphRecord:
        return GraphRecord(
            id=row["id"],
            kind=GraphKind(row["kind"]),
            max_out_degree=row["max_out_degree"],
            max_as_benefactor=row["max_as_benefactor"],
            max_as_beneficiary=row["max_as_beneficiary"],
            created=row["created"],
            modified=row["modified"],
        )

"""LabeledDirectedGraph — nodes with labeled outgoing edges and incoming counters.

Each materialized node stores the set of its outgoing ``(target, label)``
edges and a running count of edges that point at it. The counter is
maintained independently of any per-source enumeration.

Behavior choices:
- ``add_edge`` materializes missing endpoints.
- ``remove_edge`` on an absent edge is a silent no-op.
- Node queries on a non-materialized node raise :class:`NotFoundError`.

INVARIANT: An edge enters a source's adjacency set together with one
increment of the target's ``incoming`` counter, and leaves it together
with one decrement. Neither is ever mutated alone.
"""

from __future__ import annotations

from collections.abc import Hashable, Iterator
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from relgraph.domain.errors import (
    AlreadyExistsError,
    NodeHasIncomingError,
    NodeHasOutgoingError,
    NotFoundError,
)
from relgraph.domain.keyed import KeyedMap, KeyedStore

N = TypeVar("N", bound=Hashable)
L = TypeVar("L", bound=Hashable)


@dataclass
class NodeEntry(Generic[N, L]):
    """Storage for one materialized node."""

    adjacency: set[tuple[N, L]] = field(default_factory=set)
    incoming: int = 0


class LabeledDirectedGraph(Generic[N, L]):
    """Directed graph whose edges are deduplicated by ``(source, target, label)``."""

    def __init__(self, store: KeyedStore[N, NodeEntry[N, L]] | None = None) -> None:
        self._nodes: KeyedStore[N, NodeEntry[N, L]] = (
            store if store is not None else KeyedMap()
        )

    # ------------------------------------------------------------------
    # Nodes
    # ------------------------------------------------------------------

    def add_node(self, node: N) -> None:
        """Materialize *node* with no edges.

        Raises:
            AlreadyExistsError: If *node* is already materialized.
        """
        if self._nodes.contains(node):
            msg = f"Node already exists: {node!r}"
            raise AlreadyExistsError(msg, node=str(node))
        self._nodes.insert(node, NodeEntry())

    def remove_node(self, node: N) -> None:
        """Delete *node*'s storage.

        Raises:
            NotFoundError: If *node* is not materialized.
            NodeHasIncomingError: If any edge still targets *node*.
            NodeHasOutgoingError: If *node* still has outgoing edges.
        """
        entry = self._entry(node)
        if entry.incoming > 0:
            msg = f"Node {node!r} still has {entry.incoming} incoming edge(s)"
            raise NodeHasIncomingError(msg, node=str(node), incoming=entry.incoming)
        if entry.adjacency:
            msg = f"Node {node!r} still has {len(entry.adjacency)} outgoing edge(s)"
            raise NodeHasOutgoingError(msg, node=str(node), outgoing=len(entry.adjacency))
        self._nodes.remove(node)

    def node_exists(self, node: N) -> bool:
        return self._nodes.contains(node)

    def incoming_count(self, node: N) -> int:
        return self._entry(node).incoming

    def adjacency_of(self, node: N) -> frozenset[tuple[N, L]]:
        return frozenset(self._entry(node).adjacency)

    def out_degree(self, node: N, label: L | None = None) -> int:
        """Count *node*'s outgoing edges, optionally only those with *label*."""
        adjacency = self._entry(node).adjacency
        if label is None:
            return len(adjacency)
        return sum(1 for _, edge_label in adjacency if edge_label == label)

    def nodes(self) -> list[N]:
        return self._nodes.keys()

    # ------------------------------------------------------------------
    # Edges
    # ------------------------------------------------------------------

    def add_edge(self, source: N, target: N, label: L) -> bool:
        """Insert ``source -[label]-> target``, materializing missing endpoints.

        Returns False (and changes nothing) if the exact edge already exists.
        """
        source_entry = self._ensure(source)
        edge = (target, label)
        if edge in source_entry.adjacency:
            return False
        target_entry = self._ensure(target)
        source_entry.adjacency.add(edge)
        target_entry.incoming += 1
        return True

    def remove_edge(self, source: N, target: N, label: L) -> bool:
        """Remove ``source -[label]-> target`` if present. Returns whether it was."""
        source_entry = self._nodes.lookup(source)
        edge = (target, label)
        if source_entry is None or edge not in source_entry.adjacency:
            return False
        source_entry.adjacency.remove(edge)
        self._nodes.get(target).incoming -= 1
        return True

    def has_edge(self, source: N, target: N, label: L) -> bool:
        entry = self._nodes.lookup(source)
        return entry is not None and (target, label) in entry.adjacency

    def edges(self) -> Iterator[tuple[N, N, L]]:
        """Yield every ``(source, target, label)`` edge (unordered)."""
        for source in self._nodes.keys():
            for target, label in self._nodes.get(source).adjacency:
                yield source, target, label

    def is_empty(self) -> bool:
        return self._nodes.is_empty()

    def __len__(self) -> int:
        return len(self._nodes)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _entry(self, node: N) -> NodeEntry[N, L]:
        entry = self._nodes.lookup(node)
        if entry is None:
            msg = f"Node not found: {node!r}"
            raise NotFoundError(msg, node=str(node))
        return entry

    def _ensure(self, node: N) -> NodeEntry[N, L]:
        entry = self._nodes.lookup(node)
        if entry is None:
            entry = NodeEntry()
            self._nodes.insert(node, entry)
        return entry

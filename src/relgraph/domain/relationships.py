"""RelationshipGraph — capped outgoing relationships between accounts.

Composes an :class:`AdjacencySet` (keyed by source account) with two
:class:`KeyedPropertyStore` instances: one keyed by account, one keyed
by the ordered ``(source, target)`` pair.

Every mutating operation takes the caller identity explicitly and acts
only on that caller's slice of the graph.

INVARIANTS:
- A present source has at least one target, and at most
  ``max_out_degree`` targets when a cap is set.
- Relationship properties exist only while their edge exists.
  Removing an edge always cascades to its properties.
- Checks precede mutation; a raised error leaves the graph untouched.
"""

from __future__ import annotations

from typing import Generic, TypeVar

from relgraph.domain.adjacency import AdjacencySet
from relgraph.domain.errors import (
    DegreeExceededError,
    GraphNotEmptyError,
    InvalidDegreeError,
    NotFoundError,
    RelationshipNotExistError,
)
from relgraph.domain.ids import generate_graph_id
from relgraph.domain.properties import KeyedPropertyStore

P = TypeVar("P")

Account = str
Pair = tuple[Account, Account]


class RelationshipGraph(Generic[P]):
    """Directed account graph with optional out-degree cap and property overlays.

    Args:
        graph_id: Opaque identity; generated when omitted.
        max_out_degree: Cap on distinct targets per source. ``None`` means
            unbounded; any value below 1 raises :class:`InvalidDegreeError`.
    """

    def __init__(self, graph_id: str | None = None, *, max_out_degree: int | None = None) -> None:
        if max_out_degree is not None and max_out_degree < 1:
            msg = f"max_out_degree must be at least 1, got {max_out_degree}"
            raise InvalidDegreeError(msg, max_out_degree=max_out_degree)
        self._graph_id = graph_id or generate_graph_id()
        self._max_out_degree = max_out_degree
        self._relationships: AdjacencySet[Account] = AdjacencySet()
        self._account_props: KeyedPropertyStore[Account, P] = KeyedPropertyStore()
        self._relationship_props: KeyedPropertyStore[Pair, P] = KeyedPropertyStore()

    @property
    def graph_id(self) -> str:
        return self._graph_id

    @property
    def max_out_degree(self) -> int | None:
        return self._max_out_degree

    # ------------------------------------------------------------------
    # Relationships
    # ------------------------------------------------------------------

    def add_relationship(self, caller: Account, target: Account) -> bool:
        """Add ``caller -> target``.

        The degree check runs before deduplication: a caller already at
        the cap is rejected even when *target* is one of its targets.

        Returns:
            True if the edge was newly added, False if it already existed.

        Raises:
            DegreeExceededError: If the caller already has ``max_out_degree``
                targets.
        """
        if self._relationships.has_source(caller):
            degree = self._relationships.out_degree(caller)
            if self._max_out_degree is not None and degree >= self._max_out_degree:
                msg = f"{caller} already has {degree} of {self._max_out_degree} relationships"
                raise DegreeExceededError(
                    msg,
                    source=caller,
                    target=target,
                    max_out_degree=self._max_out_degree,
                )
        return self._relationships.add(caller, target)

    def remove_relationship(self, caller: Account, target: Account) -> P | None:
        """Remove ``caller -> target`` and return its cascaded properties.

        Raises:
            NotFoundError: If the caller has no relationships, or none to *target*.
        """
        if not self._relationships.has_source(caller):
            msg = f"{caller} has no relationships"
            raise NotFoundError(msg, source=caller)
        if not self._relationships.contains(caller, target):
            msg = f"{caller} has no relationship to {target}"
            raise NotFoundError(msg, source=caller, target=target)
        self._relationships.discard(caller, target)
        return self._relationship_props.unset((caller, target))

    def clear_relationships(self, caller: Account) -> dict[Account, P | None]:
        """Drop every relationship of *caller* in one step.

        Returns a map of removed target -> cascaded properties (or None).
        An empty map means the caller had no relationships.
        """
        if not self._relationships.has_source(caller):
            return {}
        targets = self._relationships.pop_source(caller)
        return {target: self._relationship_props.unset((caller, target)) for target in targets}

    def has_relationship(self, source: Account, target: Account) -> bool:
        return self._relationships.contains(source, target)

    def relationships_of(self, source: Account) -> frozenset[Account]:
        return self._relationships.targets(source)

    def out_degree(self, source: Account) -> int:
        return self._relationships.out_degree(source)

    def sources(self) -> list[Account]:
        return self._relationships.sources()

    # ------------------------------------------------------------------
    # Account properties
    # ------------------------------------------------------------------

    def set_account_props(self, caller: Account, props: P) -> P | None:
        return self._account_props.set(caller, props)

    def unset_account_props(self, caller: Account) -> P | None:
        return self._account_props.unset(caller)

    def get_account_props(self, account: Account) -> P | None:
        return self._account_props.get(account)

    def account_props_items(self) -> list[tuple[Account, P]]:
        return self._account_props.items()

    # ------------------------------------------------------------------
    # Relationship properties
    # ------------------------------------------------------------------

    def set_relationship_props(self, caller: Account, target: Account, props: P) -> P | None:
        """Attach *props* to the existing edge ``caller -> target``.

        Raises:
            RelationshipNotExistError: If the edge does not exist.
        """
        if not self._relationships.contains(caller, target):
            msg = f"No relationship from {caller} to {target}"
            raise RelationshipNotExistError(msg, source=caller, target=target)
        return self._relationship_props.set((caller, target), props)

    def unset_relationship_props(self, caller: Account, target: Account) -> P | None:
        return self._relationship_props.unset((caller, target))

    def get_relationship_props(self, source: Account, target: Account) -> P | None:
        return self._relationship_props.get((source, target))

    def relationship_props_items(self) -> list[tuple[Pair, P]]:
        return self._relationship_props.items()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def is_empty(self) -> bool:
        return (
            self._relationships.is_empty()
            and self._account_props.is_empty()
            and self._relationship_props.is_empty()
        )

    def ensure_empty(self) -> None:
        """Teardown precondition: every contained map must be empty.

        Raises:
            GraphNotEmptyError: Listing how many entries remain in each map.
        """
        if self.is_empty():
            return
        msg = f"Graph {self._graph_id} still holds entries"
        raise GraphNotEmptyError(
            msg,
            graph_id=self._graph_id,
            relationships=self._relationships.edge_count(),
            account_props=len(self._account_props),
            relationship_props=len(self._relationship_props),
        )

"""BeneficiaryLink — paired benefactor/beneficiary designations.

A benefactor designating a beneficiary is stored as two edges in a
:class:`LabeledDirectedGraph`:

    benefactor  -[TO]->    beneficiary
    beneficiary -[FROM]->  benefactor

``max_as_benefactor`` caps how many TO edges one node may originate
(its beneficiaries); ``max_as_beneficiary`` caps how many FROM edges
one node may originate (its benefactors).

INVARIANT: The two edges of a pair are added and removed together.
"""

from __future__ import annotations

from enum import StrEnum

from relgraph.domain.errors import (
    BenefactorExceededError,
    BeneficiaryExceededError,
    GraphError,
    GraphNotEmptyError,
    InvalidDegreeError,
)
from relgraph.domain.ids import generate_graph_id
from relgraph.domain.labeled import LabeledDirectedGraph

Account = str


class Direction(StrEnum):
    """Edge label distinguishing the two halves of a designation."""

    TO = "to"
    FROM = "from"


class BeneficiaryLink:
    """Symmetric benefactor/beneficiary relation with per-direction caps."""

    def __init__(
        self,
        graph_id: str | None = None,
        *,
        max_as_benefactor: int,
        max_as_beneficiary: int,
    ) -> None:
        for name, value in (
            ("max_as_benefactor", max_as_benefactor),
            ("max_as_beneficiary", max_as_beneficiary),
        ):
            if value < 1:
                msg = f"{name} must be at least 1, got {value}"
                raise InvalidDegreeError(msg, **{name: value})
        self._graph_id = graph_id or generate_graph_id()
        self._max_as_benefactor = max_as_benefactor
        self._max_as_beneficiary = max_as_beneficiary
        self._graph: LabeledDirectedGraph[Account, Direction] = LabeledDirectedGraph()

    @property
    def graph_id(self) -> str:
        return self._graph_id

    @property
    def max_as_benefactor(self) -> int:
        return self._max_as_benefactor

    @property
    def max_as_beneficiary(self) -> int:
        return self._max_as_beneficiary

    @property
    def graph(self) -> LabeledDirectedGraph[Account, Direction]:
        """The underlying labeled graph (read it, don't mutate it directly)."""
        return self._graph

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add(self, caller: Account, beneficiary: Account) -> bool:
        """Designate *beneficiary* with *caller* as benefactor.

        Returns:
            True if the pair was newly added, False if it already existed.

        Raises:
            BeneficiaryExceededError: *caller* already has ``max_as_benefactor``
                beneficiaries.
            BenefactorExceededError: *beneficiary* already has
                ``max_as_beneficiary`` benefactors.
        """
        to_count = self.beneficiary_count(caller)
        if to_count >= self._max_as_benefactor:
            cap = self._max_as_benefactor
            msg = f"{caller} already designates {to_count} of {cap} beneficiaries"
            raise BeneficiaryExceededError(
                msg, benefactor=caller, beneficiary=beneficiary, limit=self._max_as_benefactor
            )
        from_count = self.benefactor_count(beneficiary)
        if from_count >= self._max_as_beneficiary:
            cap = self._max_as_beneficiary
            msg = f"{beneficiary} already has {from_count} of {cap} benefactors"
            raise BenefactorExceededError(
                msg, benefactor=caller, beneficiary=beneficiary, limit=self._max_as_beneficiary
            )

        added_to = self._graph.add_edge(caller, beneficiary, Direction.TO)
        try:
            added_from = self._graph.add_edge(beneficiary, caller, Direction.FROM)
        except GraphError:
            if added_to:
                self._graph.remove_edge(caller, beneficiary, Direction.TO)
                self._prune(caller, beneficiary)
            raise
        return added_to or added_from

    def remove(self, caller: Account, beneficiary: Account) -> bool:
        """Remove both halves of the ``caller -> beneficiary`` designation.

        Both edges are removed unconditionally; nodes left without any
        edge are pruned. Returns whether anything was removed.
        """
        removed_to = self._graph.remove_edge(caller, beneficiary, Direction.TO)
        removed_from = self._graph.remove_edge(beneficiary, caller, Direction.FROM)
        self._prune(caller, beneficiary)
        return removed_to or removed_from

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def beneficiary_count(self, account: Account) -> int:
        """Number of TO edges *account* originates."""
        if not self._graph.node_exists(account):
            return 0
        return self._graph.out_degree(account, Direction.TO)

    def benefactor_count(self, account: Account) -> int:
        """Number of FROM edges *account* originates."""
        if not self._graph.node_exists(account):
            return 0
        return self._graph.out_degree(account, Direction.FROM)

    def beneficiaries_of(self, account: Account) -> frozenset[Account]:
        return self._neighbors(account, Direction.TO)

    def benefactors_of(self, account: Account) -> frozenset[Account]:
        return self._neighbors(account, Direction.FROM)

    def is_beneficiary(self, benefactor: Account, beneficiary: Account) -> bool:
        return self._graph.has_edge(benefactor, beneficiary, Direction.TO)

    def is_empty(self) -> bool:
        return self._graph.is_empty()

    def ensure_empty(self) -> None:
        """Teardown precondition: no node may remain.

        Raises:
            GraphNotEmptyError: If any designation is still recorded.
        """
        if self.is_empty():
            return
        msg = f"Beneficiary link {self._graph_id} still holds {len(self._graph)} node(s)"
        raise GraphNotEmptyError(msg, graph_id=self._graph_id, nodes=len(self._graph))

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _neighbors(self, account: Account, direction: Direction) -> frozenset[Account]:
        if not self._graph.node_exists(account):
            return frozenset()
        return frozenset(
            target for target, label in self._graph.adjacency_of(account) if label == direction
        )

    def _prune(self, *accounts: Account) -> None:
        for account in accounts:
            if not self._graph.node_exists(account):
                continue
            if self._graph.incoming_count(account) == 0 and not self._graph.adjacency_of(account):
                self._graph.remove_node(account)

"""Tests for RelationshipGraph — capped relationships and property overlays."""

from __future__ import annotations

import pytest

from relgraph.domain.errors import (
    DegreeExceededError,
    GraphNotEmptyError,
    InvalidDegreeError,
    NotFoundError,
    RelationshipNotExistError,
)
from relgraph.domain.ids import validate_graph_id
from relgraph.domain.properties import Attributes, NoProps
from relgraph.domain.relationships import RelationshipGraph

A = "@0x123"
B = "@0x456"
C = "@0x789"


def _graph(cap: int | None = None) -> RelationshipGraph[Attributes]:
    return RelationshipGraph(max_out_degree=cap)


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


class TestConstruction:
    def test_generated_id(self) -> None:
        assert validate_graph_id(_graph().graph_id)

    def test_explicit_id_kept(self) -> None:
        graph: RelationshipGraph[NoProps] = RelationshipGraph("graph_000000000001")
        assert graph.graph_id == "graph_000000000001"

    @pytest.mark.parametrize("cap", [0, -1])
    def test_cap_below_one_rejected(self, cap: int) -> None:
        with pytest.raises(InvalidDegreeError):
            RelationshipGraph(max_out_degree=cap)

    def test_unbounded_by_default(self) -> None:
        assert _graph().max_out_degree is None


# ---------------------------------------------------------------------------
# Relationships
# ---------------------------------------------------------------------------


class TestAddRelationship:
    def test_cap_one_scenario(self) -> None:
        graph = _graph(cap=1)
        assert graph.add_relationship(A, B) is True
        assert graph.has_relationship(A, B)

        with pytest.raises(DegreeExceededError):
            graph.add_relationship(A, C)

        graph.remove_relationship(A, B)
        assert graph.add_relationship(A, C) is True
        assert graph.relationships_of(A) == frozenset({C})

    def test_degree_check_precedes_dedup(self) -> None:
        graph = _graph(cap=1)
        graph.add_relationship(A, B)
        with pytest.raises(DegreeExceededError):
            graph.add_relationship(A, B)
        assert graph.out_degree(A) == 1

    def test_duplicate_under_cap_is_noop(self) -> None:
        graph = _graph(cap=3)
        graph.add_relationship(A, B)
        assert graph.add_relationship(A, B) is False
        assert graph.out_degree(A) == 1

    def test_unbounded_accepts_many(self) -> None:
        graph = _graph()
        for i in range(1000):
            graph.add_relationship(A, f"@t{i}")
        assert graph.out_degree(A) == 1000

    def test_degree_error_carries_detail(self) -> None:
        graph = _graph(cap=1)
        graph.add_relationship(A, B)
        with pytest.raises(DegreeExceededError) as exc_info:
            graph.add_relationship(A, C)
        assert exc_info.value.code == "DEGREE_EXCEEDED"
        assert exc_info.value.detail["max_out_degree"] == 1

    def test_self_relationship_allowed(self) -> None:
        graph = _graph()
        assert graph.add_relationship(A, A)
        assert graph.has_relationship(A, A)

    def test_callers_are_independent(self) -> None:
        graph = _graph(cap=1)
        graph.add_relationship(A, C)
        graph.add_relationship(B, C)
        assert sorted(graph.sources()) == [A, B]


class TestRemoveRelationship:
    def test_remove_unknown_source_raises(self) -> None:
        with pytest.raises(NotFoundError):
            _graph().remove_relationship(A, B)

    def test_remove_unknown_target_raises(self) -> None:
        graph = _graph()
        graph.add_relationship(A, B)
        with pytest.raises(NotFoundError):
            graph.remove_relationship(A, C)
        assert graph.has_relationship(A, B)

    def test_remove_last_drops_source(self) -> None:
        graph = _graph()
        graph.add_relationship(A, B)
        graph.remove_relationship(A, B)
        assert A not in graph.sources()
        assert graph.out_degree(A) == 0

    def test_remove_cascades_props(self) -> None:
        graph = _graph()
        graph.add_relationship(A, B)
        graph.set_relationship_props(A, B, Attributes(note="x"))
        assert graph.remove_relationship(A, B) == Attributes(note="x")
        assert graph.get_relationship_props(A, B) is None
        assert graph.is_empty()

    def test_remove_without_props_returns_none(self) -> None:
        graph = _graph()
        graph.add_relationship(A, B)
        assert graph.remove_relationship(A, B) is None


class TestClearRelationships:
    def test_clear_returns_cascaded_props(self) -> None:
        graph = _graph()
        graph.add_relationship(A, B)
        graph.add_relationship(A, C)
        graph.set_relationship_props(A, C, Attributes(w=1))
        removed = graph.clear_relationships(A)
        assert removed == {B: None, C: Attributes(w=1)}
        assert graph.is_empty()

    def test_clear_without_relationships_is_empty(self) -> None:
        assert _graph().clear_relationships(A) == {}

    def test_clear_leaves_others(self) -> None:
        graph = _graph()
        graph.add_relationship(A, B)
        graph.add_relationship(B, A)
        graph.clear_relationships(A)
        assert graph.has_relationship(B, A)


# ---------------------------------------------------------------------------
# Properties
# ---------------------------------------------------------------------------


class TestAccountProps:
    def test_round_trip(self) -> None:
        graph = _graph()
        graph.set_account_props(A, Attributes(name="alice"))
        assert graph.get_account_props(A) == Attributes(name="alice")

    def test_props_need_no_relationship(self) -> None:
        graph = _graph()
        graph.set_account_props(A, Attributes(name="alice"))
        assert graph.sources() == []

    def test_set_returns_previous(self) -> None:
        graph = _graph()
        graph.set_account_props(A, Attributes(v=1))
        assert graph.set_account_props(A, Attributes(v=2)) == Attributes(v=1)

    def test_unset_idempotent(self) -> None:
        graph = _graph()
        graph.set_account_props(A, Attributes(v=1))
        assert graph.unset_account_props(A) == Attributes(v=1)
        assert graph.unset_account_props(A) is None
        assert graph.get_account_props(A) is None


class TestRelationshipProps:
    def test_requires_relationship(self) -> None:
        graph = _graph()
        with pytest.raises(RelationshipNotExistError) as exc_info:
            graph.set_relationship_props(A, B, Attributes(w=1))
        assert exc_info.value.code == "RELATIONSHIP_NOT_EXIST"
        assert graph.is_empty()

    def test_round_trip(self) -> None:
        graph = _graph()
        graph.add_relationship(A, B)
        graph.set_relationship_props(A, B, Attributes(w=1))
        assert graph.get_relationship_props(A, B) == Attributes(w=1)
        assert graph.get_relationship_props(B, A) is None

    def test_unset_idempotent(self) -> None:
        graph = _graph()
        graph.add_relationship(A, B)
        graph.set_relationship_props(A, B, Attributes(w=1))
        assert graph.unset_relationship_props(A, B) == Attributes(w=1)
        assert graph.unset_relationship_props(A, B) is None
        assert graph.has_relationship(A, B)


# ---------------------------------------------------------------------------
# Teardown
# ---------------------------------------------------------------------------


class TestEnsureEmpty:
    def test_empty_graph_passes(self) -> None:
        _graph().ensure_empty()

    def test_reports_remaining_counts(self) -> None:
        graph = _graph()
        graph.add_relationship(A, B)
        graph.set_account_props(C, Attributes(v=1))
        with pytest.raises(GraphNotEmptyError) as exc_info:
            graph.ensure_empty()
        detail = exc_info.value.detail
        assert detail["relationships"] == 1
        assert detail["account_props"] == 1
        assert detail["relationship_props"] == 0

"""Tests for LabeledDirectedGraph — labeled edges with incoming counters."""

from __future__ import annotations

import pytest

from relgraph.domain.errors import (
    AlreadyExistsError,
    NodeHasIncomingError,
    NodeHasOutgoingError,
    NotFoundError,
)
from relgraph.domain.labeled import LabeledDirectedGraph


def _graph() -> LabeledDirectedGraph[str, str]:
    return LabeledDirectedGraph()


class TestNodes:
    def test_add_node(self) -> None:
        g = _graph()
        g.add_node("a")
        assert g.node_exists("a")
        assert g.incoming_count("a") == 0
        assert g.adjacency_of("a") == frozenset()

    def test_add_existing_node_raises(self) -> None:
        g = _graph()
        g.add_node("a")
        with pytest.raises(AlreadyExistsError):
            g.add_node("a")

    def test_remove_unknown_node_raises(self) -> None:
        with pytest.raises(NotFoundError):
            _graph().remove_node("a")

    def test_remove_node_with_incoming_refused(self) -> None:
        g = _graph()
        g.add_edge("a", "b", "x")
        with pytest.raises(NodeHasIncomingError):
            g.remove_node("b")
        assert g.node_exists("b")
        assert g.incoming_count("b") == 1
        assert g.has_edge("a", "b", "x")

    def test_remove_node_with_outgoing_refused(self) -> None:
        g = _graph()
        g.add_edge("a", "b", "x")
        with pytest.raises(NodeHasOutgoingError):
            g.remove_node("a")
        assert g.has_edge("a", "b", "x")

    def test_remove_isolated_node(self) -> None:
        g = _graph()
        g.add_edge("a", "b", "x")
        g.remove_edge("a", "b", "x")
        g.remove_node("b")
        g.remove_node("a")
        assert g.is_empty()

    def test_queries_on_unknown_node_raise(self) -> None:
        g = _graph()
        with pytest.raises(NotFoundError):
            g.incoming_count("ghost")
        with pytest.raises(NotFoundError):
            g.adjacency_of("ghost")
        with pytest.raises(NotFoundError):
            g.out_degree("ghost")


class TestEdges:
    def test_add_edge_materializes_endpoints(self) -> None:
        g = _graph()
        assert g.add_edge("a", "b", "x") is True
        assert g.node_exists("a")
        assert g.node_exists("b")
        assert g.incoming_count("b") == 1
        assert g.adjacency_of("a") == frozenset({("b", "x")})

    def test_duplicate_edge_is_noop(self) -> None:
        g = _graph()
        g.add_edge("a", "b", "x")
        assert g.add_edge("a", "b", "x") is False
        assert g.incoming_count("b") == 1

    def test_labels_distinguish_edges(self) -> None:
        g = _graph()
        g.add_edge("a", "b", "x")
        g.add_edge("a", "b", "y")
        assert g.out_degree("a") == 2
        assert g.out_degree("a", "x") == 1
        assert g.incoming_count("b") == 2

    def test_remove_edge_decrements_incoming(self) -> None:
        g = _graph()
        g.add_edge("a", "b", "x")
        assert g.remove_edge("a", "b", "x") is True
        assert g.incoming_count("b") == 0
        assert not g.has_edge("a", "b", "x")

    def test_remove_absent_edge_is_noop(self) -> None:
        g = _graph()
        assert g.remove_edge("a", "b", "x") is False
        g.add_edge("a", "b", "x")
        assert g.remove_edge("a", "b", "y") is False
        assert g.incoming_count("b") == 1

    def test_self_loop(self) -> None:
        g = _graph()
        g.add_edge("a", "a", "x")
        assert g.incoming_count("a") == 1
        assert g.out_degree("a") == 1

    def test_incoming_counts_match_edges(self) -> None:
        g = _graph()
        ops = [
            ("add", "a", "b", "x"),
            ("add", "c", "b", "x"),
            ("add", "b", "a", "y"),
            ("remove", "a", "b", "x"),
            ("add", "a", "c", "x"),
            ("add", "a", "c", "x"),
            ("remove", "c", "c", "x"),
        ]
        for op, source, target, label in ops:
            if op == "add":
                g.add_edge(source, target, label)
            else:
                g.remove_edge(source, target, label)

        edges = list(g.edges())
        for node in g.nodes():
            assert g.incoming_count(node) == sum(1 for _, t, _ in edges if t == node)

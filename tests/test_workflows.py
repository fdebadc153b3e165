"""Workflow tests — multi-step scenarios spanning services and ledger reopen.

These exercise the seams unit tests skip: snapshots written by one ledger
and read by the next, event ordering across a whole session, and the
interplay of relationship and beneficiary graphs in one database.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from relgraph.config.settings import RelgraphSettings
from relgraph.infrastructure.ledger import Ledger
from relgraph.services.beneficiary import BeneficiaryService
from relgraph.services.events import EventService
from relgraph.services.relationships import RelationshipService


class TestRelationshipSession:
    """Create → link → annotate → unlink, checking the event trail."""

    def test_event_trail(self, ledger: Ledger, recorder: Any) -> None:
        svc = RelationshipService(ledger)
        graph_id = svc.create_graph(2).data["graph_id"]

        assert svc.add_relationship(graph_id, "@a", "@b").ok
        assert svc.set_relationship_props(graph_id, "@a", "@b", {"w": 1}).ok
        assert svc.set_account_props(graph_id, "@a", {"name": "alice"}).ok
        assert svc.remove_relationship(graph_id, "@a", "@b").ok

        assert recorder.names() == [
            "graph_created",
            "relationship_added",
            "relationship_props_set",
            "account_props_set",
            "relationship_removed",
            "relationship_props_unset",
        ]
        # Account props survive relationship removal.
        assert svc.get_account_props(graph_id, "@a").data["props"] == {"name": "alice"}

    def test_failures_leave_no_trace(self, ledger: Ledger, recorder: Any) -> None:
        svc = RelationshipService(ledger)
        graph_id = svc.create_graph(1).data["graph_id"]
        svc.add_relationship(graph_id, "@a", "@b")
        before = svc.show_graph(graph_id).data

        assert not svc.add_relationship(graph_id, "@a", "@c").ok
        assert not svc.set_relationship_props(graph_id, "@a", "@c", {"w": 1}).ok
        assert not svc.remove_relationship(graph_id, "@a", "@c").ok
        assert not svc.destroy_graph(graph_id).ok

        assert svc.show_graph(graph_id).data == before
        assert recorder.names() == ["graph_created", "relationship_added"]


class TestReopen:
    def test_state_survives_new_ledger(self, root: Path) -> None:
        first = Ledger(RelgraphSettings.from_cli(root=root))
        try:
            svc = RelationshipService(first)
            graph_id = svc.create_graph(1).data["graph_id"]
            svc.add_relationship(graph_id, "@a", "@b")
            svc.set_relationship_props(graph_id, "@a", "@b", {"since": 2021})
            link_id = BeneficiaryService(first).create_link(1, 1).data["graph_id"]
            BeneficiaryService(first).add_beneficiary(link_id, "alice", "bob")
        finally:
            first.close()

        second = Ledger(RelgraphSettings.from_cli(root=root))
        try:
            svc = RelationshipService(second)
            # The cap is persisted with the graph.
            assert svc.add_relationship(graph_id, "@a", "@c").error.code == "DEGREE_EXCEEDED"
            props = svc.get_relationship_props(graph_id, "@a", "@b").data["props"]
            assert props == {"since": 2021}

            ben = BeneficiaryService(second)
            assert ben.show_account(link_id, "bob").data["benefactors"] == ["alice"]
            result = ben.add_beneficiary(link_id, "carol", "bob")
            assert result.error.code == "BENEFACTOR_EXCEEDED"
        finally:
            second.close()


class TestMixedKinds:
    def test_graphs_are_independent(self, ledger: Ledger, recorder: Any) -> None:
        rel = RelationshipService(ledger)
        ben = BeneficiaryService(ledger)
        graph_id = rel.create_graph().data["graph_id"]
        link_id = ben.create_link().data["graph_id"]

        rel.add_relationship(graph_id, "alice", "bob")
        ben.add_beneficiary(link_id, "alice", "bob")

        assert rel.add_relationship(link_id, "alice", "carol").error.code == "WRONG_KIND"
        assert ben.remove_beneficiary(link_id, "alice", "bob").ok
        assert ben.destroy_link(link_id).ok
        assert rel.list_relationships(graph_id, "alice").data["targets"] == ["bob"]

        listed = rel.list_graphs().data["items"]
        assert [item["graph_id"] for item in listed] == [graph_id]
        assert recorder.names()[-1] == "graph_destroyed"

    def test_wal_tracks_every_dispatch(self, ledger: Ledger, recorder: Any) -> None:
        rel = RelationshipService(ledger)
        graph_id = rel.create_graph().data["graph_id"]
        rel.add_relationship(graph_id, "alice", "bob")

        status = EventService(ledger).status()
        assert status.data["total"] == len(recorder.calls) == 2
        assert status.data["counts"] == {"completed": 2}

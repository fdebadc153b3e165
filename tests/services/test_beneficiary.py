"""Tests for BeneficiaryService — persisted beneficiary designations."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from relgraph.config.settings import RelgraphSettings
from relgraph.infrastructure.ledger import Ledger
from relgraph.services.beneficiary import BeneficiaryService
from relgraph.services.relationships import RelationshipService


def _link(ledger: Ledger, benefactor: int | None = None, beneficiary: int | None = None) -> str:
    result = BeneficiaryService(ledger).create_link(benefactor, beneficiary)
    assert result.ok, result.error
    return result.data["graph_id"]


class TestCreateLink:
    def test_defaults_from_config(self, ledger: Ledger) -> None:
        result = BeneficiaryService(ledger).create_link()
        assert result.data["max_as_benefactor"] == 5
        assert result.data["max_as_beneficiary"] == 5

    def test_configured_defaults(self, root: Path) -> None:
        (root / "relgraph.toml").write_text("[beneficiary]\nmax_as_beneficiary = 1\n")
        led = Ledger(RelgraphSettings.from_cli(root=root))
        try:
            data = BeneficiaryService(led).create_link().data
        finally:
            led.close()
        assert data["max_as_benefactor"] == 5
        assert data["max_as_beneficiary"] == 1

    def test_invalid_cap(self, ledger: Ledger) -> None:
        result = BeneficiaryService(ledger).create_link(0, 1)
        assert result.error is not None
        assert result.error.code == "INVALID_DEGREE"


class TestDesignations:
    def test_add_and_show(self, ledger: Ledger) -> None:
        link_id = _link(ledger)
        svc = BeneficiaryService(ledger)
        added = svc.add_beneficiary(link_id, "alice", "bob")
        assert added.data == {
            "graph_id": link_id,
            "benefactor": "alice",
            "beneficiary": "bob",
            "added": True,
            "beneficiary_count": 1,
            "benefactor_count": 1,
        }
        alice = svc.show_account(link_id, "alice").data
        assert alice["beneficiaries"] == ["bob"]
        assert alice["benefactors"] == []
        bob = svc.show_account(link_id, "bob").data
        assert bob["benefactors"] == ["alice"]

    def test_benefactor_cap(self, ledger: Ledger) -> None:
        link_id = _link(ledger, benefactor=1)
        svc = BeneficiaryService(ledger)
        svc.add_beneficiary(link_id, "alice", "bob")
        result = svc.add_beneficiary(link_id, "alice", "carol")
        assert result.error is not None
        assert result.error.code == "BENEFICIARY_EXCEEDED"
        assert svc.show_account(link_id, "carol").data["benefactors"] == []

    def test_beneficiary_cap(self, ledger: Ledger) -> None:
        link_id = _link(ledger, beneficiary=1)
        svc = BeneficiaryService(ledger)
        svc.add_beneficiary(link_id, "alice", "bob")
        result = svc.add_beneficiary(link_id, "carol", "bob")
        assert result.error is not None
        assert result.error.code == "BENEFACTOR_EXCEEDED"

    def test_remove_then_destroy(self, ledger: Ledger) -> None:
        link_id = _link(ledger)
        svc = BeneficiaryService(ledger)
        svc.add_beneficiary(link_id, "alice", "bob")
        blocked = svc.destroy_link(link_id)
        assert blocked.error is not None
        assert blocked.error.code == "GRAPH_NOT_EMPTY"

        assert svc.remove_beneficiary(link_id, "alice", "bob").data["removed"] is True
        assert svc.destroy_link(link_id).ok

    def test_remove_absent_is_noop(self, ledger: Ledger) -> None:
        link_id = _link(ledger)
        result = BeneficiaryService(ledger).remove_beneficiary(link_id, "alice", "bob")
        assert result.ok
        assert result.data["removed"] is False

    def test_wrong_kind(self, ledger: Ledger) -> None:
        graph_id = RelationshipService(ledger).create_graph().data["graph_id"]
        result = BeneficiaryService(ledger).add_beneficiary(graph_id, "alice", "bob")
        assert result.error is not None
        assert result.error.code == "WRONG_KIND"


class TestNotifications:
    def test_events(self, ledger: Ledger, recorder: Any) -> None:
        link_id = _link(ledger, benefactor=1)
        svc = BeneficiaryService(ledger)
        svc.add_beneficiary(link_id, "alice", "bob")
        svc.add_beneficiary(link_id, "alice", "carol")  # rejected
        svc.remove_beneficiary(link_id, "alice", "bob")
        svc.remove_beneficiary(link_id, "alice", "bob")  # no-op
        svc.destroy_link(link_id)
        assert recorder.names() == [
            "graph_created",
            "beneficiary_added",
            "beneficiary_removed",
            "graph_destroyed",
        ]
        assert recorder.calls[1][1] == {
            "graph_id": link_id,
            "benefactor": "alice",
            "beneficiary": "bob",
        }
        assert recorder.calls[-1][1]["kind"] == "beneficiary"

"""BeneficiaryService — caller-scoped benefactor/beneficiary designations.

The caller is always the benefactor. Each designation is stored as a
pair of opposite-labeled edges; see :mod:`relgraph.domain.beneficiary`.
"""

from __future__ import annotations

from collections.abc import Callable

from relgraph.domain.beneficiary import BeneficiaryLink
from relgraph.domain.types import GraphKind
from relgraph.infrastructure.ledger import LedgerTransaction
from relgraph.services._helpers import now_iso
from relgraph.services.base import BaseService, Outcome
from relgraph.services.result import ServiceResult

LinkAction = Callable[[BeneficiaryLink], Outcome]


class BeneficiaryService(BaseService):
    """Handles beneficiary links."""

    def create_link(
        self,
        max_as_benefactor: int | None = None,
        max_as_beneficiary: int | None = None,
    ) -> ServiceResult:
        """Create an empty beneficiary link.

        Caps default to the ``[beneficiary]`` config section.
        """
        defaults = self._ledger.settings.beneficiary
        benefactor_cap = (
            defaults.max_as_benefactor if max_as_benefactor is None else max_as_benefactor
        )
        beneficiary_cap = (
            defaults.max_as_beneficiary if max_as_beneficiary is None else max_as_beneficiary
        )

        def action(txn: LedgerTransaction) -> Outcome:
            link = BeneficiaryLink(
                max_as_benefactor=benefactor_cap,
                max_as_beneficiary=beneficiary_cap,
            )
            txn.graphs.create_beneficiary_link(link, now_iso())
            outcome = Outcome(
                data={
                    "graph_id": link.graph_id,
                    "kind": GraphKind.BENEFICIARY.value,
                    "max_as_benefactor": link.max_as_benefactor,
                    "max_as_beneficiary": link.max_as_beneficiary,
                }
            )
            outcome.emit("graph_created", graph_id=link.graph_id, kind=GraphKind.BENEFICIARY.value)
            return outcome

        return self._run("create_link", None, action)

    def destroy_link(self, graph_id: str) -> ServiceResult:
        """Tear down a link. Fails with GRAPH_NOT_EMPTY while designations remain."""
        op = "destroy_link"

        def action(txn: LedgerTransaction) -> Outcome:
            record = self._require_record(txn, op, graph_id, GraphKind.BENEFICIARY)
            txn.graphs.load_beneficiary_link(record).ensure_empty()
            txn.graphs.delete(graph_id)
            outcome = Outcome(data={"destroyed": True})
            outcome.emit("graph_destroyed", kind=GraphKind.BENEFICIARY.value)
            return outcome

        return self._run(op, graph_id, action)

    def add_beneficiary(self, graph_id: str, caller: str, beneficiary: str) -> ServiceResult:
        """Designate *beneficiary* with *caller* as benefactor."""
        op = "add_beneficiary"

        def mutate(link: BeneficiaryLink) -> Outcome:
            benefactor, target = self._accounts(op, caller, beneficiary)
            added = link.add(benefactor, target)
            outcome = Outcome(
                data={
                    "benefactor": benefactor,
                    "beneficiary": target,
                    "added": added,
                    "beneficiary_count": link.beneficiary_count(benefactor),
                    "benefactor_count": link.benefactor_count(target),
                }
            )
            if added:
                outcome.emit("beneficiary_added", benefactor=benefactor, beneficiary=target)
            return outcome

        return self._apply(op, graph_id, mutate)

    def remove_beneficiary(self, graph_id: str, caller: str, beneficiary: str) -> ServiceResult:
        """Withdraw the designation; removing an absent one is a no-op."""
        op = "remove_beneficiary"

        def mutate(link: BeneficiaryLink) -> Outcome:
            benefactor, target = self._accounts(op, caller, beneficiary)
            removed = link.remove(benefactor, target)
            outcome = Outcome(
                data={"benefactor": benefactor, "beneficiary": target, "removed": removed}
            )
            if removed:
                outcome.emit("beneficiary_removed", benefactor=benefactor, beneficiary=target)
            return outcome

        return self._apply(op, graph_id, mutate)

    def show_account(self, graph_id: str, account: str) -> ServiceResult:
        """Both sides of *account*'s designations with the link's caps."""
        op = "show_account"

        def inspect(link: BeneficiaryLink) -> Outcome:
            (name,) = self._accounts(op, account)
            return Outcome(
                data={
                    "account": name,
                    "beneficiaries": sorted(link.beneficiaries_of(name)),
                    "benefactors": sorted(link.benefactors_of(name)),
                    "max_as_benefactor": link.max_as_benefactor,
                    "max_as_beneficiary": link.max_as_beneficiary,
                }
            )

        return self._apply(op, graph_id, inspect)

    def _apply(self, op: str, graph_id: str, action: LinkAction) -> ServiceResult:
        """Load the link, run *action*, and save the snapshot if it changed."""

        def run(txn: LedgerTransaction) -> Outcome:
            record = self._require_record(txn, op, graph_id, GraphKind.BENEFICIARY)
            link = txn.graphs.load_beneficiary_link(record)
            outcome = action(link)
            if outcome.changed:
                txn.graphs.save_beneficiary_link(link, now_iso())
            return outcome

        return self._run(op, graph_id, run)

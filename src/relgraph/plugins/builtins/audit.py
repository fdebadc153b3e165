"""Built-in audit plugin: writes every change notification to the log.

Records go to the ``relgraph.audit`` structlog logger at INFO level with
the notification name as the event and its payload as key/value fields.
"""

from __future__ import annotations

from typing import Any

import pluggy
import structlog

hookimpl = pluggy.HookimplMarker("relgraph")


class AuditPlugin:
    """Structured audit trail of graph mutations."""

    def __init__(self, logger_name: str = "relgraph.audit") -> None:
        self._log = structlog.get_logger(logger_name)

    def _record(self, event: str, **fields: Any) -> None:
        self._log.info(event, **fields)

    @hookimpl
    def graph_created(self, graph_id: str, kind: str) -> None:
        self._record("graph_created", graph_id=graph_id, kind=kind)

    @hookimpl
    def graph_destroyed(self, graph_id: str, kind: str) -> None:
        self._record("graph_destroyed", graph_id=graph_id, kind=kind)

    @hookimpl
    def relationship_added(self, graph_id: str, source: str, target: str) -> None:
        self._record("relationship_added", graph_id=graph_id, source=source, target=target)

    @hookimpl
    def relationship_removed(self, graph_id: str, source: str, target: str) -> None:
        self._record("relationship_removed", graph_id=graph_id, source=source, target=target)

    @hookimpl
    def account_props_set(self, graph_id: str, account: str, props: dict[str, Any]) -> None:
        self._record("account_props_set", graph_id=graph_id, account=account, props=props)

    @hookimpl
    def account_props_unset(self, graph_id: str, account: str, props: dict[str, Any]) -> None:
        self._record("account_props_unset", graph_id=graph_id, account=account, props=props)

    @hookimpl
    def relationship_props_set(
        self, graph_id: str, source: str, target: str, props: dict[str, Any]
    ) -> None:
        self._record(
            "relationship_props_set", graph_id=graph_id, source=source, target=target, props=props
        )

    @hookimpl
    def relationship_props_unset(
        self, graph_id: str, source: str, target: str, props: dict[str, Any]
    ) -> None:
        self._record(
            "relationship_props_unset", graph_id=graph_id, source=source, target=target, props=props
        )

    @hookimpl
    def beneficiary_added(self, graph_id: str, benefactor: str, beneficiary: str) -> None:
        self._record(
            "beneficiary_added", graph_id=graph_id, benefactor=benefactor, beneficiary=beneficiary
        )

    @hookimpl
    def beneficiary_removed(self, graph_id: str, benefactor: str, beneficiary: str) -> None:
        self._record(
            "beneficiary_removed", graph_id=graph_id, benefactor=benefactor, beneficiary=beneficiary
        )

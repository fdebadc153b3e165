"""Shared pytest fixtures for relgraph tests."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pluggy
import pytest
from click.testing import CliRunner
from sqlalchemy.engine import Engine

from relgraph.config.settings import RelgraphSettings
from relgraph.infrastructure.database.engine import init_database
from relgraph.infrastructure.ledger import Ledger

hookimpl = pluggy.HookimplMarker("relgraph")


class RecordingPlugin:
    """Plugin that records every change notification it receives."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def _record(self, name: str, **payload: Any) -> None:
        self.calls.append((name, payload))

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
            "relationship_props_unset",
            graph_id=graph_id,
            source=source,
            target=target,
            props=props,
        )

    @hookimpl
    def beneficiary_added(self, graph_id: str, benefactor: str, beneficiary: str) -> None:
        self._record(
            "beneficiary_added", graph_id=graph_id, benefactor=benefactor, beneficiary=beneficiary
        )

    @hookimpl
    def beneficiary_removed(self, graph_id: str, benefactor: str, beneficiary: str) -> None:
        self._record(
            "beneficiary_removed",
            graph_id=graph_id,
            benefactor=benefactor,
            beneficiary=beneficiary,
        )


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def db_engine(tmp_path: Path) -> Engine:
    """Initialized SQLite engine with all tables created."""
    engine = init_database(tmp_path)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Empty ledger directory, shielded from any ambient RELGRAPH_CONFIG."""
    monkeypatch.delenv("RELGRAPH_CONFIG", raising=False)
    return tmp_path


@pytest.fixture
def ledger(root: Path) -> Ledger:
    """Ledger without an event bus: services run, nothing is dispatched."""
    led = Ledger(RelgraphSettings.from_cli(root=root))
    try:
        yield led
    finally:
        led.close()


@pytest.fixture
def recorder(ledger: Ledger) -> RecordingPlugin:
    """Attach a synchronous event bus to *ledger* with a recording plugin."""
    bus = ledger.init_event_bus(sync=True)
    plugin = RecordingPlugin()
    bus.plugin_manager.register_plugin(plugin, name="recorder")
    return plugin


@pytest.fixture
def _isolated_root(root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to a temp ledger root so the CLI creates an isolated ledger.

    Use via ``@pytest.mark.usefixtures("_isolated_root")`` on command test
    classes.
    """
    monkeypatch.chdir(root)

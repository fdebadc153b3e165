"""Ledger — the persistence substrate every service is built on.

The Ledger owns the database engine and the (optional) event bus. Its
:meth:`transaction` context manager yields a :class:`LedgerTransaction`
whose repository reads and writes graph snapshots on one connection:
commit on success, rollback on any exception.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING

from relgraph.infrastructure.database.engine import STATE_DIRNAME, init_database
from relgraph.infrastructure.repositories.graphs import GraphRepository

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from sqlalchemy import Connection
    from sqlalchemy.engine import Engine

    from relgraph.config.settings import RelgraphSettings
    from relgraph.plugins.event_bus import EventBus

logger = logging.getLogger(__name__)


@dataclass
class LedgerTransaction:
    """Active transaction: a connection plus the graph repository bound to it."""

    conn: Connection
    graphs: GraphRepository


class Ledger:
    """Single dependency injected into every service.

    Created once per CLI invocation (or test) from resolved settings.
    Services receive it through :class:`BaseService`.
    """

    def __init__(self, settings: RelgraphSettings) -> None:
        self._settings = settings
        self._engine: Engine = init_database(self.root)
        self._event_bus: EventBus | None = None

    @property
    def root(self) -> Path:
        """The ledger root directory."""
        return self._settings.root

    @property
    def engine(self) -> Engine:
        """The underlying SQLAlchemy engine."""
        return self._engine

    @property
    def settings(self) -> RelgraphSettings:
        return self._settings

    @property
    def event_bus(self) -> EventBus | None:
        """The change-notification bus (None if not initialized)."""
        return self._event_bus

    def init_event_bus(self, *, sync: bool | None = None) -> EventBus:
        """Create the plugin manager and event bus.

        Discovers entry-point and local plugins when ``[plugins] enabled``
        is set, and registers the built-in audit plugin unless its name
        appears in ``[plugins] disabled``.
        """
        from relgraph.plugins.builtins.audit import AuditPlugin
        from relgraph.plugins.event_bus import EventBus
        from relgraph.plugins.manager import PluginManager

        pm = PluginManager(disabled=self._settings.plugins.disabled)
        if self._settings.plugins.enabled:
            loaded = pm.discover_and_load(local_dir=self.root / STATE_DIRNAME / "plugins")
            logger.debug("Loaded plugins: %s", loaded)
        pm.register_plugin(AuditPlugin(), name="audit-builtin")

        events = self._settings.events
        self._event_bus = EventBus(
            self._engine,
            pm,
            sync=self._settings.events_sync if sync is None else sync,
            max_retries=events.max_retries,
            max_workers=events.max_workers,
        )
        return self._event_bus

    @contextmanager
    def transaction(self) -> Iterator[LedgerTransaction]:
        """Database transaction scoped to one service operation.

        Usage::

            with ledger.transaction() as txn:
                graph = txn.graphs.load_relationship_graph(record)
                graph.add_relationship(caller, target)
                txn.graphs.save_relationship_graph(graph, now)
                # Commits on exit; any exception rolls everything back.
        """
        with self._engine.begin() as conn:
            yield LedgerTransaction(conn=conn, graphs=GraphRepository(conn))

    def close(self) -> None:
        """Flush the event bus and release the engine."""
        if self._event_bus is not None:
            self._event_bus.shutdown()
            self._event_bus = None
        self._engine.dispose()

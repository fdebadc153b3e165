"""Pluggy hook specifications for relgraph change notifications.

One hook per state-changing operation. Every payload carries the graph
id plus the key(s) that changed; property payloads are plain JSON
objects. Hooks are fire-and-forget: return values are ignored.
"""

from __future__ import annotations

from typing import Any

import pluggy

hookspec = pluggy.HookspecMarker("relgraph")


class RelgraphHookSpec:
    """Hook specifications for the relgraph plugin system."""

    @hookspec
    def graph_created(self, graph_id: str, kind: str) -> None:
        """Called after a graph or beneficiary link is created."""

    @hookspec
    def graph_destroyed(self, graph_id: str, kind: str) -> None:
        """Called after an empty graph is torn down."""

    @hookspec
    def relationship_added(self, graph_id: str, source: str, target: str) -> None:
        """Called after ``source -> target`` is added."""

    @hookspec
    def relationship_removed(self, graph_id: str, source: str, target: str) -> None:
        """Called once per removed ``source -> target`` (including clears)."""

    @hookspec
    def account_props_set(self, graph_id: str, account: str, props: dict[str, Any]) -> None:
        """Called after account properties are set."""

    @hookspec
    def account_props_unset(self, graph_id: str, account: str, props: dict[str, Any]) -> None:
        """Called after account properties are removed; *props* is the removed value."""

    @hookspec
    def relationship_props_set(
        self,
        graph_id: str,
        source: str,
        target: str,
        props: dict[str, Any],
    ) -> None:
        """Called after relationship properties are set."""

    @hookspec
    def relationship_props_unset(
        self,
        graph_id: str,
        source: str,
        target: str,
        props: dict[str, Any],
    ) -> None:
        """Called after relationship properties are removed or cascaded away."""

    @hookspec
    def beneficiary_added(self, graph_id: str, benefactor: str, beneficiary: str) -> None:
        """Called after a benefactor designates a beneficiary."""

    @hookspec
    def beneficiary_removed(self, graph_id: str, benefactor: str, beneficiary: str) -> None:
        """Called after a designation is withdrawn."""

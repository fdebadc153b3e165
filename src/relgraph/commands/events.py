"""Command group: change-notification WAL."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from relgraph.commands._base import RgGroup
from relgraph.services.events import EventService

if TYPE_CHECKING:
    from relgraph.commands._context import AppContext

_EVENTS_EXAMPLES = """\
  relgraph events status
  relgraph events status --graph graph_0a1b2c3d4e5f
  relgraph events drain
  relgraph events purge"""

_graph_option = click.option(
    "--graph",
    "graph_id",
    default=None,
    metavar="GRAPH_ID",
    help="Only notifications of this graph.",
)


@click.group(cls=RgGroup, examples=_EVENTS_EXAMPLES)
@click.pass_obj
def events(app: AppContext) -> None:
    """Inspect and retry plugin notifications."""


@events.command()
@_graph_option
@click.pass_obj
def status(app: AppContext, graph_id: str | None) -> None:
    """Count notifications by delivery status."""
    app.emit(EventService(app.ledger).status(graph_id))


@events.command()
@_graph_option
@click.pass_obj
def drain(app: AppContext, graph_id: str | None) -> None:
    """Retry pending and failed notifications now."""
    app.emit(EventService(app.ledger).drain(graph_id))


@events.command()
@_graph_option
@click.pass_obj
def purge(app: AppContext, graph_id: str | None) -> None:
    """Delete delivered notifications from the log."""
    app.emit(EventService(app.ledger).purge(graph_id))

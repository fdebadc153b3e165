"""Command group: relationship graph lifecycle."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from relgraph.commands._base import RgGroup
from relgraph.domain.types import GraphKind
from relgraph.services.relationships import RelationshipService

if TYPE_CHECKING:
    from relgraph.commands._context import AppContext

_GRAPH_EXAMPLES = """\
  relgraph graph create --max-out-degree 1
  relgraph graph create --unbounded
  relgraph graph list --kind beneficiary
  relgraph graph show graph_0a1b2c3d4e5f
  relgraph graph destroy graph_0a1b2c3d4e5f"""


@click.group(cls=RgGroup, examples=_GRAPH_EXAMPLES)
@click.pass_obj
def graph(app: AppContext) -> None:
    """Create, inspect, and tear down relationship graphs."""


@graph.command(
    examples="""\
  relgraph graph create
  relgraph graph create --max-out-degree 1
  relgraph --json graph create --unbounded"""
)
@click.option(
    "--max-out-degree",
    type=click.IntRange(min=1),
    default=None,
    help="Maximum targets per source (default: [graph] default_max_out_degree).",
)
@click.option("--unbounded", is_flag=True, help="Ignore the configured default cap.")
@click.pass_obj
def create(app: AppContext, max_out_degree: int | None, unbounded: bool) -> None:
    """Create an empty relationship graph."""
    if unbounded and max_out_degree is not None:
        raise click.UsageError("--unbounded and --max-out-degree are mutually exclusive.")
    app.emit(
        RelationshipService(app.ledger).create_graph(max_out_degree, use_default=not unbounded)
    )


@graph.command(
    "list",
    examples="""\
  relgraph graph list
  relgraph -q graph list --kind relationship""",
)
@click.option(
    "--kind",
    type=click.Choice([k.value for k in GraphKind]),
    default=None,
    help="Only list graphs of this kind.",
)
@click.pass_obj
def list_cmd(app: AppContext, kind: str | None) -> None:
    """List every graph and beneficiary link."""
    app.emit(
        RelationshipService(app.ledger).list_graphs(kind=GraphKind(kind) if kind else None)
    )


@graph.command(
    examples="""\
  relgraph graph show graph_0a1b2c3d4e5f
  relgraph -v graph show graph_0a1b2c3d4e5f"""
)
@click.argument("graph_id")
@click.pass_obj
def show(app: AppContext, graph_id: str) -> None:
    """Show relationships and properties of a graph."""
    app.emit(RelationshipService(app.ledger).show_graph(graph_id))


@graph.command(
    examples="""\
  relgraph graph destroy graph_0a1b2c3d4e5f"""
)
@click.argument("graph_id")
@click.pass_obj
def destroy(app: AppContext, graph_id: str) -> None:
    """Tear down an empty relationship graph."""
    app.emit(RelationshipService(app.ledger).destroy_graph(graph_id))

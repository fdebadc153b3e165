"""Command group: relationships owned by the calling account."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from relgraph.commands._base import RgGroup, caller_option
from relgraph.services.relationships import RelationshipService

if TYPE_CHECKING:
    from relgraph.commands._context import AppContext

_REL_EXAMPLES = """\
  relgraph rel add graph_0a1b2c3d4e5f @0x456 --as @0x123
  relgraph rel remove graph_0a1b2c3d4e5f @0x456 --as @0x123
  relgraph rel clear graph_0a1b2c3d4e5f --as @0x123
  relgraph rel list graph_0a1b2c3d4e5f @0x123"""


@click.group(cls=RgGroup, examples=_REL_EXAMPLES)
@click.pass_obj
def rel(app: AppContext) -> None:
    """Add and remove directed relationships."""


@rel.command(
    examples="""\
  relgraph rel add graph_0a1b2c3d4e5f @0x456 --as @0x123"""
)
@click.argument("graph_id")
@click.argument("target")
@caller_option
@click.pass_obj
def add(app: AppContext, graph_id: str, target: str, caller: str) -> None:
    """Add a relationship from the caller to TARGET."""
    app.emit(RelationshipService(app.ledger).add_relationship(graph_id, caller, target))


@rel.command(
    examples="""\
  relgraph rel remove graph_0a1b2c3d4e5f @0x456 --as @0x123"""
)
@click.argument("graph_id")
@click.argument("target")
@caller_option
@click.pass_obj
def remove(app: AppContext, graph_id: str, target: str, caller: str) -> None:
    """Remove the caller's relationship to TARGET and its properties."""
    app.emit(RelationshipService(app.ledger).remove_relationship(graph_id, caller, target))


@rel.command(
    examples="""\
  relgraph rel clear graph_0a1b2c3d4e5f --as @0x123"""
)
@click.argument("graph_id")
@caller_option
@click.pass_obj
def clear(app: AppContext, graph_id: str, caller: str) -> None:
    """Remove every relationship of the caller."""
    app.emit(RelationshipService(app.ledger).clear_relationships(graph_id, caller))


@rel.command(
    "list",
    examples="""\
  relgraph rel list graph_0a1b2c3d4e5f @0x123
  relgraph -q rel list graph_0a1b2c3d4e5f @0x123""",
)
@click.argument("graph_id")
@click.argument("account")
@click.pass_obj
def list_cmd(app: AppContext, graph_id: str, account: str) -> None:
    """List the targets of ACCOUNT."""
    app.emit(RelationshipService(app.ledger).list_relationships(graph_id, account))

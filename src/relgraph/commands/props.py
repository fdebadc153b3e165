"""Command group: account and relationship properties."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import click

from relgraph.commands._base import RgGroup, caller_option
from relgraph.services.relationships import RelationshipService

if TYPE_CHECKING:
    from relgraph.commands._context import AppContext

_PROPS_EXAMPLES = """\
  relgraph props set graph_0a1b2c3d4e5f name=alice tier=2 --as @0x123
  relgraph props set graph_0a1b2c3d4e5f --json-props '{"note": "x"}' --target @0x456 --as @0x123
  relgraph props unset graph_0a1b2c3d4e5f --as @0x123
  relgraph props get graph_0a1b2c3d4e5f @0x123 --target @0x456"""

_target_option = click.option(
    "--target",
    default=None,
    metavar="ACCOUNT",
    help="Operate on the relationship to this account instead of the account itself.",
)


def _parse_props(pairs: tuple[str, ...], json_props: str | None) -> dict[str, Any]:
    """Merge a JSON object with ``key=value`` pairs; pair values are JSON when they parse."""
    props: dict[str, Any] = {}
    if json_props is not None:
        try:
            loaded = json.loads(json_props)
        except json.JSONDecodeError as exc:
            raise click.BadParameter(f"not valid JSON: {exc}", param_hint="--json-props") from exc
        if not isinstance(loaded, dict):
            raise click.BadParameter("must be a JSON object", param_hint="--json-props")
        props.update(loaded)
    for pair in pairs:
        key, sep, raw = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got '{pair}'", param_hint="PAIRS")
        try:
            props[key] = json.loads(raw)
        except json.JSONDecodeError:
            props[key] = raw
    return props


@click.group(cls=RgGroup, examples=_PROPS_EXAMPLES)
@click.pass_obj
def props(app: AppContext) -> None:
    """Attach properties to accounts and relationships."""


@props.command(
    "set",
    examples="""\
  relgraph props set graph_0a1b2c3d4e5f name=alice --as @0x123
  relgraph props set graph_0a1b2c3d4e5f weight=0.5 --target @0x456 --as @0x123""",
)
@click.argument("graph_id")
@click.argument("pairs", nargs=-1)
@click.option("--json-props", default=None, help="Properties as a JSON object.")
@_target_option
@caller_option
@click.pass_obj
def set_cmd(
    app: AppContext,
    graph_id: str,
    pairs: tuple[str, ...],
    json_props: str | None,
    target: str | None,
    caller: str,
) -> None:
    """Replace the caller's properties, or those of its relationship to --target."""
    values = _parse_props(pairs, json_props)
    svc = RelationshipService(app.ledger)
    if target is None:
        app.emit(svc.set_account_props(graph_id, caller, values))
    else:
        app.emit(svc.set_relationship_props(graph_id, caller, target, values))


@props.command(
    examples="""\
  relgraph props unset graph_0a1b2c3d4e5f --as @0x123
  relgraph props unset graph_0a1b2c3d4e5f --target @0x456 --as @0x123"""
)
@click.argument("graph_id")
@_target_option
@caller_option
@click.pass_obj
def unset(app: AppContext, graph_id: str, target: str | None, caller: str) -> None:
    """Remove the caller's properties; absent properties are not an error."""
    svc = RelationshipService(app.ledger)
    if target is None:
        app.emit(svc.unset_account_props(graph_id, caller))
    else:
        app.emit(svc.unset_relationship_props(graph_id, caller, target))


@props.command(
    examples="""\
  relgraph props get graph_0a1b2c3d4e5f @0x123
  relgraph --json props get graph_0a1b2c3d4e5f @0x123 --target @0x456"""
)
@click.argument("graph_id")
@click.argument("account")
@_target_option
@click.pass_obj
def get(app: AppContext, graph_id: str, account: str, target: str | None) -> None:
    """Show the properties of ACCOUNT, or of its relationship to --target."""
    svc = RelationshipService(app.ledger)
    if target is None:
        app.emit(svc.get_account_props(graph_id, account))
    else:
        app.emit(svc.get_relationship_props(graph_id, account, target))

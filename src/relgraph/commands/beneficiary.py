"""Command group: beneficiary links."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from relgraph.commands._base import RgGroup, caller_option
from relgraph.services.beneficiary import BeneficiaryService

if TYPE_CHECKING:
    from relgraph.commands._context import AppContext

_BENEFICIARY_EXAMPLES = """\
  relgraph beneficiary create --max-as-benefactor 3 --max-as-beneficiary 2
  relgraph beneficiary add graph_0a1b2c3d4e5f @0x456 --as @0x123
  relgraph beneficiary remove graph_0a1b2c3d4e5f @0x456 --as @0x123
  relgraph beneficiary show graph_0a1b2c3d4e5f @0x456
  relgraph beneficiary destroy graph_0a1b2c3d4e5f"""


@click.group(cls=RgGroup, examples=_BENEFICIARY_EXAMPLES)
@click.pass_obj
def beneficiary(app: AppContext) -> None:
    """Designate beneficiaries under per-account caps."""


@beneficiary.command(
    examples="""\
  relgraph beneficiary create
  relgraph --json beneficiary create --max-as-benefactor 1"""
)
@click.option(
    "--max-as-benefactor",
    type=click.IntRange(min=1),
    default=None,
    help="Beneficiaries one account may designate.",
)
@click.option(
    "--max-as-beneficiary",
    type=click.IntRange(min=1),
    default=None,
    help="Benefactors one account may have.",
)
@click.pass_obj
def create(
    app: AppContext, max_as_benefactor: int | None, max_as_beneficiary: int | None
) -> None:
    """Create an empty beneficiary link."""
    app.emit(BeneficiaryService(app.ledger).create_link(max_as_benefactor, max_as_beneficiary))


@beneficiary.command(
    examples="""\
  relgraph beneficiary add graph_0a1b2c3d4e5f @0x456 --as @0x123"""
)
@click.argument("graph_id")
@click.argument("account")
@caller_option
@click.pass_obj
def add(app: AppContext, graph_id: str, account: str, caller: str) -> None:
    """Designate ACCOUNT as a beneficiary of the caller."""
    app.emit(BeneficiaryService(app.ledger).add_beneficiary(graph_id, caller, account))


@beneficiary.command(
    examples="""\
  relgraph beneficiary remove graph_0a1b2c3d4e5f @0x456 --as @0x123"""
)
@click.argument("graph_id")
@click.argument("account")
@caller_option
@click.pass_obj
def remove(app: AppContext, graph_id: str, account: str, caller: str) -> None:
    """Withdraw the caller's designation of ACCOUNT."""
    app.emit(BeneficiaryService(app.ledger).remove_beneficiary(graph_id, caller, account))


@beneficiary.command(
    examples="""\
  relgraph beneficiary show graph_0a1b2c3d4e5f @0x456"""
)
@click.argument("graph_id")
@click.argument("account")
@click.pass_obj
def show(app: AppContext, graph_id: str, account: str) -> None:
    """Show who ACCOUNT designates and who designates it."""
    app.emit(BeneficiaryService(app.ledger).show_account(graph_id, account))


@beneficiary.command(
    examples="""\
  relgraph beneficiary destroy graph_0a1b2c3d4e5f"""
)
@click.argument("graph_id")
@click.pass_obj
def destroy(app: AppContext, graph_id: str) -> None:
    """Tear down an empty beneficiary link."""
    app.emit(BeneficiaryService(app.ledger).destroy_link(graph_id))

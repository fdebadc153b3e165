"""Command: ledger initialization (named init_cmd to avoid shadowing builtins)."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from relgraph.commands._base import RgCommand
from relgraph.services.init import InitService

if TYPE_CHECKING:
    from relgraph.commands._context import AppContext

_INIT_EXAMPLES = """\
  relgraph init
  relgraph init /path/to/ledger --max-out-degree 1
  relgraph init . --max-as-benefactor 3 --max-as-beneficiary 3"""


@click.command("init", cls=RgCommand, examples=_INIT_EXAMPLES)
@click.argument("path", required=False, default=".")
@click.option(
    "--max-out-degree",
    type=int,
    default=None,
    help="Default cap for new relationship graphs.",
)
@click.option("--max-as-benefactor", type=int, default=None, help="Default benefactor cap.")
@click.option("--max-as-beneficiary", type=int, default=None, help="Default beneficiary cap.")
@click.pass_obj
def init_cmd(
    app: AppContext,
    path: str,
    max_out_degree: int | None,
    max_as_benefactor: int | None,
    max_as_beneficiary: int | None,
) -> None:
    """Initialize a new relgraph ledger."""
    app.emit(
        InitService.init_ledger(
            Path(path).resolve(),
            max_out_degree=max_out_degree,
            max_as_benefactor=max_as_benefactor,
            max_as_beneficiary=max_as_beneficiary,
        )
    )

"""Subcommand modules for relgraph.

``register_commands()`` uses deferred imports to keep ``relgraph --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all command groups and standalone commands on the root CLI group."""
    # --- Groups ---
    from relgraph.commands.beneficiary import beneficiary
    from relgraph.commands.events import events
    from relgraph.commands.graph import graph
    from relgraph.commands.props import props
    from relgraph.commands.rel import rel

    cli.add_command(graph)
    cli.add_command(rel)
    cli.add_command(props)
    cli.add_command(beneficiary)
    cli.add_command(events)

    # --- Standalone commands ---
    from relgraph.commands.init_cmd import init_cmd

    cli.add_command(init_cmd)

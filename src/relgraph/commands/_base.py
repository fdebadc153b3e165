"""Click base classes with ``--examples`` support.

RgCommand and RgGroup accept an ``examples`` parameter. Passing
``--examples`` prints them and exits, keeping ``--help`` short.
"""

from __future__ import annotations

from typing import Any

import click


def _add_examples_option(cmd: click.Command | click.Group, examples: str) -> None:
    """Attach an eager ``--examples`` flag to a Click command or group."""

    def show_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(examples)
        ctx.exit(0)

    cmd.params.append(
        click.Option(
            ["--examples"],
            is_flag=True,
            expose_value=False,
            is_eager=True,
            callback=show_examples,
            help="Show usage examples.",
        )
    )


class RgCommand(click.Command):
    """Command that supports an ``--examples`` flag."""

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            _add_examples_option(self, examples)


class RgGroup(click.Group):
    """Group that supports an ``--examples`` flag.

    ``command_class = RgCommand`` lets every subcommand take ``examples=``
    without an explicit ``cls=``.
    """

    command_class = RgCommand

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            _add_examples_option(self, examples)


def caller_option(func: Any) -> Any:
    """``--as ACCOUNT``: the caller identity for a mutating command."""
    return click.option(
        "--as",
        "caller",
        required=True,
        metavar="ACCOUNT",
        help="Account performing the operation.",
    )(func)

"""AppContext — shared Click context for all commands.

Created once by the root CLI group and passed to subcommands via
``@click.pass_obj``. Opens the ledger lazily and routes results to
stdout/stderr with the right exit code.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from relgraph.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from relgraph.config.settings import RelgraphSettings
    from relgraph.infrastructure.ledger import Ledger
    from relgraph.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The ledger is opened on first use so ``--help`` and ``--version``
    never touch the database.
    """

    def __init__(self, settings: RelgraphSettings) -> None:
        self.settings = settings
        self._ledger: Ledger | None = None

        from relgraph.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def ledger(self) -> Ledger:
        """The ledger instance (created lazily on first access)."""
        if self._ledger is None:
            from relgraph.infrastructure.ledger import Ledger

            self._ledger = Ledger(self.settings)
            self._ledger.init_event_bus()
        return self._ledger

    def close(self) -> None:
        """Drain pending events and release the ledger, if one was opened."""
        if self._ledger is not None:
            self._ledger.close()
            self._ledger = None

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success: stdout; warnings go to stderr so piped output stays clean.
        * Failure: stderr, exit code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            # JSON payloads already carry their warnings.
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(result.exit_code)

"""Operation-specific Rich renderers for ServiceResult.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from relgraph.output.console import create_console, get_output

if TYPE_CHECKING:
    from collections.abc import Callable

    from rich.console import Console

    from relgraph.services.result import ServiceResult

    Renderer = Callable[..., None]


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich."""
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Minimal output for ``--quiet``: ids or accounts, one per line."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    data = result.data
    if result.op == "list_graphs":
        return "\n".join(item["graph_id"] for item in data.get("items", []))
    if result.op in ("create_graph", "create_link"):
        return str(data.get("graph_id", ""))
    if result.op == "list_relationships":
        return "\n".join(data.get("targets", []))
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    label = Text("OK", style="rg.ok")
    op = Text(f"  {result.op}", style="rg.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="rg.key")
    if isinstance(value, (dict, list)):
        v = Text(json.dumps(value, separators=(",", ":"), sort_keys=True))
    elif key.endswith("graph_id"):
        v = Text(str(value), style="rg.id")
    elif key in ("source", "target", "account", "benefactor", "beneficiary"):
        v = Text(str(value), style="rg.account")
    else:
        v = Text("-" if value is None else str(value))
    console.print(Text.assemble(k, v))


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    code = f" [{err.code}]" if err else ""
    label = Text("ERROR", style="rg.error")
    console.print(label, Text(f"  {result.op}", style="rg.op"), Text(f"— {msg}{code}"))

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(Text(f"    {k}: {v}"))


# ── Graph renderers ───────────────────────────────────────────────────


def _render_graph_list(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    _field(console, "count", result.data.get("count", 0))
    items = result.data.get("items", [])
    if not items:
        return
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Graph", style="rg.id", no_wrap=True)
    table.add_column("Kind")
    table.add_column("Caps", justify="right")
    if verbose:
        table.add_column("Modified", style="dim")
    for item in items:
        if item["kind"] == "relationship":
            caps = str(item["max_out_degree"] or "unbounded")
        else:
            caps = f"{item['max_as_benefactor']}/{item['max_as_beneficiary']}"
        row = [item["graph_id"], item["kind"], caps]
        if verbose:
            row.append(item.get("modified", ""))
        table.add_row(*row)
    console.print(table)


def _render_graph_snapshot(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    d = result.data
    _status_line(console, result)
    _field(console, "graph_id", d["graph_id"])
    _field(console, "max_out_degree", d["max_out_degree"] or "unbounded")
    _field(console, "relationship_count", d["relationship_count"])
    relationships: dict[str, list[str]] = d.get("relationships", {})
    if relationships:
        table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
        table.add_column("Source", style="rg.account", no_wrap=True)
        table.add_column("Targets")
        table.add_column("Degree", style="rg.count", justify="right")
        for source, targets in relationships.items():
            table.add_row(source, ", ".join(targets), str(len(targets)))
        console.print(table)
    if verbose:
        _field(console, "account_props", d.get("account_props", {}))
        _field(console, "relationship_props", d.get("relationship_props", []))


def _render_account(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, list):
            _field(console, key, ", ".join(value) if value else "-")
        else:
            _field(console, key, value)


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Renderer] = {
    "list_graphs": _render_graph_list,
    "show_graph": _render_graph_snapshot,
    "list_relationships": _render_account,
    "show_account": _render_account,
}

"""structlog configuration for relgraph.

Log lines go to stderr so ``--json`` results on stdout stay parseable.
The console renderer is used by default; ``--log-json`` switches to one
JSON object per line.

Service operations run inside :func:`bound_operation`, so every record
emitted while handling one (including plain stdlib ``logging`` calls)
carries ``op`` and ``graph_id``.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator, MutableMapping
from contextlib import contextmanager
from typing import Any

import structlog

# Event keys that may hold user-supplied property payloads.
PAYLOAD_KEYS = ("props", "previous_props")
MAX_PAYLOAD_CHARS = 200

_QUIET_LOGGERS = ("sqlalchemy", "pluggy")


def truncate_payloads(
    _logger: Any, _method: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Shorten oversized property payloads so one event stays one readable line."""
    for key in PAYLOAD_KEYS:
        value = event_dict.get(key)
        if value is None:
            continue
        text = value if isinstance(value, str) else repr(value)
        if len(text) > MAX_PAYLOAD_CHARS:
            event_dict[key] = f"{text[:MAX_PAYLOAD_CHARS]}... ({len(text)} chars)"
    return event_dict


@contextmanager
def bound_operation(op: str, graph_id: str | None = None) -> Iterator[None]:
    """Bind ``op`` (and ``graph_id`` when known) to every log record in scope."""
    context: dict[str, Any] = {"op": op}
    if graph_id is not None:
        context["graph_id"] = graph_id
    with structlog.contextvars.bound_contextvars(**context):
        yield


def _renderer(log_json: bool) -> structlog.types.Processor:
    if log_json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_logging(*, verbose: bool = False, log_json: bool = False) -> None:
    """Route structlog and stdlib logging through one stderr handler.

    ``relgraph`` loggers log at DEBUG when *verbose*, otherwise WARNING.
    Third-party loggers stay at WARNING either way.
    """
    shared: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        truncate_payloads,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_json),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.WARNING)

    logging.getLogger("relgraph").setLevel(logging.DEBUG if verbose else logging.WARNING)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

"""Shared service-layer helper functions."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any


def now_iso() -> str:
    """Current UTC time as standard ISO 8601 (for record and WAL timestamps)."""
    return datetime.now(UTC).isoformat()


def dump_props(props: Any) -> dict[str, Any] | None:
    """Render a property payload as a JSON object (None passes through)."""
    if props is None:
        return None
    return dict(props.model_dump(mode="json"))

"""Account and graph identifier rules.

Accounts are opaque identities. The only rules enforced here are the
ones every caller can rely on: non-empty, no surrounding whitespace,
no embedded whitespace, and a bounded length.

Graph ids are random: ``graph_`` followed by 12 lowercase hex chars.

INVARIANT: IDs are permanent. Once generated, a graph id never changes.
"""

from __future__ import annotations

import re
import secrets

GRAPH_ID_PREFIX = "graph_"
GRAPH_ID_PATTERN = re.compile(r"^graph_[0-9a-f]{12}$")
MAX_ACCOUNT_LENGTH = 256

_WHITESPACE = re.compile(r"\s")


def normalize_account(account: str) -> str:
    """Strip surrounding whitespace and validate an account identity.

    Raises:
        ValueError: If the account is empty, contains whitespace, or is
            longer than :data:`MAX_ACCOUNT_LENGTH`.
    """
    value = account.strip()
    if not value:
        msg = "Account identity must not be empty"
        raise ValueError(msg)
    if _WHITESPACE.search(value):
        msg = f"Account identity must not contain whitespace: {value!r}"
        raise ValueError(msg)
    if len(value) > MAX_ACCOUNT_LENGTH:
        msg = f"Account identity longer than {MAX_ACCOUNT_LENGTH} characters"
        raise ValueError(msg)
    return value


def generate_graph_id() -> str:
    """Return a fresh ``graph_xxxxxxxxxxxx`` identifier."""
    return f"{GRAPH_ID_PREFIX}{secrets.token_hex(6)}"


def validate_graph_id(graph_id: str) -> bool:
    """Check whether *graph_id* matches :data:`GRAPH_ID_PATTERN`."""
    return GRAPH_ID_PATTERN.match(graph_id) is not None

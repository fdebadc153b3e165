"""Graph classification enums."""

from __future__ import annotations

from enum import StrEnum


class GraphKind(StrEnum):
    """The two persisted graph variants."""

    RELATIONSHIP = "relationship"
    BENEFICIARY = "beneficiary"

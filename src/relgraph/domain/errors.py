"""Graph error taxonomy.

Every failure at the domain layer is a logical precondition violation:
local, synchronous, and never retryable. Each subclass carries a stable
``code`` that the service layer copies into ``ServiceError.code``.

INVARIANT: An operation that raises leaves the graph exactly as it was.
"""

from __future__ import annotations

from typing import Any, ClassVar


class GraphError(Exception):
    """Base class for all domain failures."""

    code: ClassVar[str] = "GRAPH_ERROR"

    def __init__(self, message: str, **detail: Any) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail


class InvalidDegreeError(GraphError):
    """A degree cap of zero (or less) was supplied at creation."""

    code = "INVALID_DEGREE"


class DegreeExceededError(GraphError):
    """The out-degree cap is already reached."""

    code = "DEGREE_EXCEEDED"


class BeneficiaryExceededError(DegreeExceededError):
    """The benefactor already designates the maximum number of beneficiaries."""

    code = "BENEFICIARY_EXCEEDED"


class BenefactorExceededError(DegreeExceededError):
    """The beneficiary is already designated by the maximum number of benefactors."""

    code = "BENEFACTOR_EXCEEDED"


class NotFoundError(GraphError):
    """A keyed entry required by the operation does not exist."""

    code = "NOT_FOUND"


class RelationshipNotExistError(NotFoundError):
    """Relationship properties were set on an edge that does not exist."""

    code = "RELATIONSHIP_NOT_EXIST"


class AlreadyExistsError(GraphError):
    """A keyed entry (or node) is already present."""

    code = "ALREADY_EXISTS"


class NodeHasIncomingError(GraphError):
    """A node cannot be removed while edges still point at it."""

    code = "NODE_HAS_INCOMING"


class NodeHasOutgoingError(GraphError):
    """A node cannot be removed while it still has outgoing edges."""

    code = "NODE_HAS_OUTGOING"


class GraphNotEmptyError(GraphError):
    """Teardown was requested while the graph still holds entries."""

    code = "GRAPH_NOT_EMPTY"


class InconsistentSnapshotError(GraphError):
    """A stored graph contradicts itself and cannot be loaded."""

    code = "INCONSISTENT_SNAPSHOT"

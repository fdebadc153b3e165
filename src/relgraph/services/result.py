"""ServiceResult — what every service method hands back.

INVARIANT: Service methods return a ServiceResult for expected failures
instead of raising; ``ok`` is False exactly when ``error`` is set.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field, model_validator

if TYPE_CHECKING:
    from relgraph.domain.errors import GraphError


class ServiceError(BaseModel):
    """Failure payload: a stable machine code plus a human message."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Outcome of one service operation.

    Attributes:
        ok: Whether the operation succeeded.
        op: Operation name, e.g. ``"add_relationship"``.
        data: Operation payload; empty on failure.
        warnings: Non-fatal problems, such as a plugin failing to receive
            a notification.
        error: Set when ``ok`` is False.
        meta: Free-form extras for interfaces that want them.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None

    @model_validator(mode="after")
    def _error_matches_ok(self) -> ServiceResult:
        if self.ok == (self.error is not None):
            msg = "a failed result needs an error and a successful one must not have one"
            raise ValueError(msg)
        return self

    @property
    def exit_code(self) -> int:
        """Process exit status for CLI callers."""
        return 0 if self.ok else 1

    @classmethod
    def failure(
        cls,
        op: str,
        code: str,
        message: str,
        detail: dict[str, Any] | None = None,
    ) -> ServiceResult:
        return cls(
            ok=False,
            op=op,
            error=ServiceError(code=code, message=message, detail=detail or {}),
        )

    @classmethod
    def from_error(cls, op: str, exc: GraphError) -> ServiceResult:
        """Failure result carrying a domain error's code, message, and detail."""
        return cls.failure(op, exc.code, exc.message, dict(exc.detail))

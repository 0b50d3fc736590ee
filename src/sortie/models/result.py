"""Success/failure result for operations that touch the file system.

Loading a folder, moving a clip and undoing a move all report their
outcome this way instead of raising, so a failure can never leave the
review queue half-updated.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """Outcome of a collaborator operation.

    Attributes:
        ok: True when the operation succeeded
        data: Payload on success (e.g. the new path of a moved clip)
        error: Human-readable message on failure
    """

    ok: bool
    data: T | None = None
    error: str = ""

    @classmethod
    def success(cls, data: T | None = None) -> "OperationResult[T]":
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, error: str) -> "OperationResult[T]":
        return cls(ok=False, error=error)


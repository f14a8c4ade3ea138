"""Outcome result type.

Used at component boundaries where a failure must be reported to the caller
without raising: persistence, retrieval and report generation.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Optional, TypeVar

T = TypeVar("T")


@dataclass
class Outcome(Generic[T]):
    """Result of a boundary operation.

    Attributes:
        ok: Whether the operation achieved its goal (or was skipped by design)
        value: Payload on success
        error_code: ErrorCode constant on failure
        message: Developer-facing description
        warnings: Non-fatal notes collected along the way
        alert: User-facing message to surface in the UI, if any
    """

    ok: bool
    value: Optional[T] = None
    error_code: Optional[str] = None
    message: Optional[str] = None
    warnings: List[str] = field(default_factory=list)
    alert: Optional[str] = None

    @classmethod
    def success(cls, value: Optional[T] = None, warnings: Optional[List[str]] = None) -> "Outcome[T]":
        return cls(ok=True, value=value, warnings=list(warnings or []))

    @classmethod
    def failure(
        cls,
        error_code: str,
        message: str,
        alert: Optional[str] = None,
        warnings: Optional[List[str]] = None,
    ) -> "Outcome[T]":
        return cls(
            ok=False,
            error_code=error_code,
            message=message,
            alert=alert,
            warnings=list(warnings or []),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize without the value, for logging and API envelopes."""
        return {
            "ok": self.ok,
            "errorCode": self.error_code,
            "message": self.message,
            "warnings": self.warnings,
            "alert": self.alert,
        }

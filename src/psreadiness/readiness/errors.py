"""Structured errors raised around a readiness evaluation pass.

Classification and rendering never fail; these errors come from the
collaborators feeding the pass (namespace listing) and consuming it
(status persistence).
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any


class ReadinessError(RuntimeError):
    """Structured exception for readiness evaluation failures."""

    default_code = "readiness_error"

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        retryable: bool = False,
        details: dict[str, Any] | None = None,
        timestamp: str | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code or self.default_code
        self.message = message
        self.retryable = retryable
        self.details = details or {}
        self.timestamp = timestamp or datetime.now(UTC).isoformat()

    def to_dict(self) -> dict[str, Any]:
        """Serialize the error for logs/status surfaces."""
        return {
            "code": self.code,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
            "timestamp": self.timestamp,
        }

    def to_json(self) -> str:
        """Serialize the error as a compact JSON string."""
        return json.dumps(self.to_dict(), sort_keys=True, ensure_ascii=True)


class StatusUpdateError(ReadinessError):
    """The status sink rejected or could not apply a condition update."""

    default_code = "status_update_failed"


class NamespaceListError(ReadinessError):
    """The namespace source could not produce a snapshot."""

    default_code = "namespace_list_failed"


def ensure_readiness_error(
    error: Exception,
    *,
    code: str = "readiness_unexpected_error",
    retryable: bool = False,
    details: dict[str, Any] | None = None,
) -> ReadinessError:
    """Normalize unknown exceptions into a structured readiness error."""
    if isinstance(error, ReadinessError):
        return error

    merged_details = dict(details or {})
    merged_details.setdefault("exception_type", type(error).__name__)

    return ReadinessError(
        str(error) or "Unknown readiness evaluation error",
        code=code,
        retryable=retryable,
        details=merged_details,
    )


__all__ = [
    "NamespaceListError",
    "ReadinessError",
    "StatusUpdateError",
    "ensure_readiness_error",
]

"""Custom exception classes for Statbook.

All exceptions follow the same error format:
{
    "kind": "NotFound" | "InvalidPayload" | "Unknown",
    "code": "STAT_NOT_FOUND",
    "msg": "Human-readable message",
    "details": {}  # optional
}
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Machine-usable error category exposed to clients."""

    NOT_FOUND = "NotFound"
    INVALID_PAYLOAD = "InvalidPayload"
    UNKNOWN = "Unknown"


class StatsBaseError(Exception):
    """Base exception for Statbook."""

    def __init__(
        self,
        kind: ErrorKind,
        code: str,
        message: str,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.kind = kind
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "kind": self.kind.value,
            "code": self.code,
            "msg": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


class StatNotFoundError(StatsBaseError):
    """No stat resolves to the given id."""

    def __init__(self, stat_id: str) -> None:
        self.stat_id = stat_id
        super().__init__(
            kind=ErrorKind.NOT_FOUND,
            code="STAT_NOT_FOUND",
            message="stat not found",
            status_code=404,
        )


class ValueNotFoundError(StatsBaseError):
    """The stat exists but holds no value with the given id."""

    def __init__(self, stat_id: str, value_id: str) -> None:
        self.stat_id = stat_id
        self.value_id = value_id
        super().__init__(
            kind=ErrorKind.NOT_FOUND,
            code="VALUE_NOT_FOUND",
            message="value not found",
            status_code=404,
        )


class InvalidPayloadError(StatsBaseError):
    """Request body lacks any recognized, correctly typed field."""

    def __init__(
        self,
        message: str = "please provide at least one valid field",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            kind=ErrorKind.INVALID_PAYLOAD,
            code="INVALID_PAYLOAD",
            message=message,
            status_code=400,
            details=details,
        )


class StoreError(StatsBaseError):
    """Unexpected failure in the document store."""

    def __init__(
        self,
        operation: str,
        stat_id: str | None = None,
        value_id: str | None = None,
    ) -> None:
        self.operation = operation
        details: dict[str, Any] = {"operation": operation}
        if stat_id:
            details["statId"] = stat_id
        if value_id:
            details["valueId"] = value_id
        super().__init__(
            kind=ErrorKind.UNKNOWN,
            code="STORE_ERROR",
            message=f"error while {operation.replace('_', ' ')}",
            status_code=500,
            details=details,
        )

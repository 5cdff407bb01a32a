"""Error types raised by the formatter collaborator layer.

The reconciliation core never raises for the conditions it recognises; these
errors cover subprocess, discovery and cancellation failures which must be
surfaced to the user rather than retried.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar

if TYPE_CHECKING:
    from .formatter import ProcessResult


class ErrorCode:
    """Constants for error codes attached to formatter errors."""

    EXECUTABLE_NOT_FOUND = "executable_not_found"
    TIMEOUT = "timeout"
    NON_ZERO_EXIT = "non_zero_exit"
    OPERATION_CANCELLED = "operation_cancelled"


@dataclass
class FormatterError(Exception):
    """Base exception for formatter failures.

    Attributes:
        error_code: Machine-readable error identifier.
        message: Human-readable error description.
        details: Additional structured error information.
    """

    error_code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    severity: ClassVar[str] = "error"

    def __post_init__(self) -> None:
        Exception.__init__(self, self.message)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "error": self.error_code,
            "message": self.message,
        }
        if self.details:
            result["details"] = dict(self.details)
        return result

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"


@dataclass
class FormatterNotFoundError(FormatterError):
    """Raised when the formatter executable cannot be started."""

    error_code: str = field(default=ErrorCode.EXECUTABLE_NOT_FOUND)
    message: str = field(default="Formatter executable not found")
    details: dict[str, Any] = field(default_factory=dict)

    executable: str | None = field(default=None)


@dataclass
class FormatterTimeoutError(FormatterError):
    """Raised when the formatter does not finish within the configured timeout."""

    error_code: str = field(default=ErrorCode.TIMEOUT)
    message: str = field(default="Formatter timed out")
    details: dict[str, Any] = field(default_factory=dict)

    timeout: float | None = field(default=None)


@dataclass
class FormatterExitError(FormatterError):
    """Raised when the formatter exits with a non-zero status."""

    error_code: str = field(default=ErrorCode.NON_ZERO_EXIT)
    message: str = field(default="Formatter exited with an error")
    details: dict[str, Any] = field(default_factory=dict)

    result: "ProcessResult | None" = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        if self.result is not None:
            payload["code"] = self.result.code
            payload["stderr"] = self.result.stderr
        return payload


@dataclass
class FormatCancelledError(FormatterError):
    """Raised when a format attempt was superseded before its result was applied."""

    severity: ClassVar[str] = "info"

    error_code: str = field(default=ErrorCode.OPERATION_CANCELLED)
    message: str = field(default="Format attempt cancelled")
    details: dict[str, Any] = field(default_factory=dict)


__all__ = [
    "ErrorCode",
    "FormatCancelledError",
    "FormatterError",
    "FormatterExitError",
    "FormatterNotFoundError",
    "FormatterTimeoutError",
]

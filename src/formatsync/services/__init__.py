"""Service layer helpers (formatter discovery, invocation, sessions, settings)."""

from .cancellation import CancellationToken
from .errors import (
    FormatCancelledError,
    FormatterError,
    FormatterExitError,
    FormatterNotFoundError,
    FormatterTimeoutError,
)
from .formatter import ProcessResult, run_formatter
from .session import FormatSession, attach
from .settings import Settings, SettingsStore

__all__ = [
    "CancellationToken",
    "FormatCancelledError",
    "FormatSession",
    "FormatterError",
    "FormatterExitError",
    "FormatterNotFoundError",
    "FormatterTimeoutError",
    "ProcessResult",
    "Settings",
    "SettingsStore",
    "attach",
    "run_formatter",
]

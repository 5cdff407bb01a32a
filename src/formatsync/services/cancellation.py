"""Cooperative cancellation for formatter round-trips."""

from __future__ import annotations

from dataclasses import dataclass, field

from .errors import FormatCancelledError


@dataclass(slots=True)
class CancellationToken:
    """Flag shared between a save attempt and whoever may supersede it."""

    reason: str | None = None
    _cancelled: bool = field(default=False, repr=False)

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self, reason: str = "superseded") -> None:
        if not self._cancelled:
            self._cancelled = True
            self.reason = reason

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise FormatCancelledError(message=f"Format attempt cancelled ({self.reason})")


__all__ = ["CancellationToken"]

"""Replacement operations produced by reconciliation."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class ReplacementOperation:
    """Replace ``[start, end)`` of the original snapshot with ``replacement``."""

    start: int
    end: int
    replacement: str = ""

    def to_dict(self) -> dict[str, object]:
        return {"start": self.start, "end": self.end, "text": self.replacement}


__all__ = ["ReplacementOperation"]

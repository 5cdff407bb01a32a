"""Replacement application and diff rendering helpers."""

from __future__ import annotations

import difflib
from dataclasses import dataclass
from typing import Sequence, Tuple

from ..core.operations import ReplacementOperation


class PatchApplyError(RuntimeError):
    """Raised when replacement operations cannot be applied cleanly."""

    def __init__(
        self,
        message: str,
        *,
        reason: str = "invalid_range",
        operation: ReplacementOperation | None = None,
    ) -> None:
        super().__init__(message)
        self.reason = reason
        self.operation = operation

    def details(self) -> dict[str, object]:
        return {
            "reason": self.reason,
            "operation": self.operation.to_dict() if self.operation else None,
        }


@dataclass(slots=True)
class PatchResult:
    """Result of applying replacement operations to a document."""

    text: str
    spans: Tuple[Tuple[int, int], ...]
    summary: str


def apply_replacements(original_text: str, operations: Sequence[ReplacementOperation]) -> PatchResult:
    """Apply ``operations`` to ``original_text`` in a single pass.

    Every operation is interpreted against the unmodified ``original_text``;
    the list must be ordered by offset and must not overlap.
    """

    _validate(original_text, operations)

    parts: list[str] = []
    spans: list[tuple[int, int]] = []
    cursor = 0
    delta = 0
    for operation in operations:
        parts.append(original_text[cursor : operation.start])
        parts.append(operation.replacement)
        cursor = operation.end
        if operation.replacement:
            start = operation.start + delta
            spans.append((start, start + len(operation.replacement)))
        delta += len(operation.replacement) - (operation.end - operation.start)
    parts.append(original_text[cursor:])
    updated_text = "".join(parts)

    summary = _summarize_patch(original_text, updated_text)
    return PatchResult(text=updated_text, spans=tuple(spans), summary=summary)


def render_unified_diff(before: str, after: str, *, filename: str = "buffer", context_lines: int = 3) -> str:
    """Return a unified diff between ``before`` and ``after`` (empty when equal)."""

    diff = difflib.unified_diff(
        before.splitlines(),
        after.splitlines(),
        fromfile=f"a/{filename}",
        tofile=f"b/{filename}",
        lineterm="",
        n=context_lines,
    )
    return "\n".join(diff)


def _validate(text: str, operations: Sequence[ReplacementOperation]) -> None:
    previous_end = 0
    for operation in operations:
        if operation.start < 0 or operation.end < operation.start:
            raise PatchApplyError(
                f"Invalid replacement range [{operation.start}, {operation.end})",
                reason="invalid_range",
                operation=operation,
            )
        if operation.end > len(text):
            raise PatchApplyError(
                "Replacement range exceeds document length",
                reason="range_overflow",
                operation=operation,
            )
        if operation.start < previous_end:
            raise PatchApplyError(
                "Replacement ranges must be ordered and may not overlap",
                reason="range_overlap",
                operation=operation,
            )
        previous_end = operation.end


def _summarize_patch(before: str, after: str) -> str:
    delta = len(after) - len(before)
    if delta == 0:
        return "patch: Δ0"
    sign = "+" if delta > 0 else "-"
    return f"patch: {sign}{abs(delta)} chars"


__all__ = [
    "PatchApplyError",
    "PatchResult",
    "apply_replacements",
    "render_unified_diff",
]

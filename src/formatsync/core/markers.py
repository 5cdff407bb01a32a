"""Selection marker embedding used to track cursors through a text diff."""

from __future__ import annotations

from typing import Sequence

from .ranges import TextRange

# U+FFFD REPLACEMENT CHARACTER; never expected inside real source text.
CURSOR_MARKER = "\ufffd"


def has_marker_collision(*texts: str) -> bool:
    """Return ``True`` when any of ``texts`` already contains :data:`CURSOR_MARKER`."""

    return any(CURSOR_MARKER in text for text in texts)


def embed_markers(original: str, selections: Sequence[TextRange]) -> str:
    """Return ``original`` with a marker before and after every selection.

    Selections must be sorted by start offset and must not overlap. A caret
    produces two adjacent markers. The result is exactly
    ``len(original) + 2 * len(selections)`` characters long.
    """

    parts: list[str] = []
    last_end = 0
    for selection in selections:
        parts.append(original[last_end : selection.start])
        parts.append(CURSOR_MARKER)
        parts.append(original[selection.start : selection.end])
        parts.append(CURSOR_MARKER)
        last_end = selection.end
    parts.append(original[last_end:])
    return "".join(parts)


__all__ = ["CURSOR_MARKER", "embed_markers", "has_marker_collision"]

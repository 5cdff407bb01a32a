"""Reconcile a buffer with its reformatted text while preserving selections."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable

from .diff import DEFAULT_DIFF_TIMEOUT, DiffSegment, SegmentKind, diff_segments
from .markers import CURSOR_MARKER, embed_markers, has_marker_collision
from .operations import ReplacementOperation
from .ranges import TextRange, coerce_ranges
from .translate import translate

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class ReconcileResult:
    """Edits to apply to the original text plus the selections to restore."""

    operations: tuple[ReplacementOperation, ...]
    selections: tuple[TextRange, ...]
    fallback: bool = False

    @property
    def changed(self) -> bool:
        return bool(self.operations)

    def apply(self, original: str) -> str:
        """Apply :attr:`operations` to ``original`` in a single pass."""

        from ..editor.patches import apply_replacements

        if not self.operations:
            return original
        return apply_replacements(original, self.operations).text


def reconcile(
    original: str,
    formatted: str,
    selections: Iterable[Any] | None = None,
    *,
    timeout: float = DEFAULT_DIFF_TIMEOUT,
) -> ReconcileResult:
    """Compute the minimal edits turning ``original`` into ``formatted``.

    ``selections`` are ``(start, end)`` offsets into ``original``; the result
    carries them remapped into ``formatted``'s coordinates, in input order.
    When either text already contains the cursor marker the whole buffer is
    replaced and the selections are returned unchanged. ``timeout`` bounds the
    time spent diffing, in seconds.
    """

    ranges = tuple(rng.clamp(upper=len(original)) for rng in coerce_ranges(selections))

    if has_marker_collision(original, formatted):
        LOGGER.debug("Cursor marker present in buffer; falling back to full replacement")
        operation = ReplacementOperation(0, len(original), formatted)
        return ReconcileResult(operations=(operation,), selections=ranges, fallback=True)

    if original == formatted:
        return ReconcileResult(operations=(), selections=ranges)

    order = sorted(range(len(ranges)), key=ranges.__getitem__)
    ordered = [ranges[index] for index in order]
    embedded = embed_markers(original, ordered)
    segments = _settle_markers(diff_segments(embedded, formatted, timeout=timeout))
    operations, tracked = translate(segments, len(ordered))

    remapped: list[TextRange] = [TextRange.caret(0)] * len(ranges)
    for position, index in enumerate(order):
        remapped[index] = tracked[position]
    LOGGER.debug(
        "Reconciled %d chars into %d chars with %d operations",
        len(original),
        len(formatted),
        len(operations),
    )
    return ReconcileResult(operations=operations, selections=tuple(remapped))


def _settle_markers(segments: list[DiffSegment]) -> list[DiffSegment]:
    """Place cursor markers of a replaced run on the right side of its insertion.

    Carets and opening markers deleted together with replaced text move past
    the inserted text, so a caret follows inserted whitespace. The closing
    marker of a non-empty selection that began earlier stays ahead of it, so
    the selection does not absorb text inserted right after it.
    """

    settled: list[DiffSegment] = []
    markers_seen = 0
    index = 0
    while index < len(segments):
        segment = segments[index]
        following = segments[index + 1] if index + 1 < len(segments) else None
        if (
            segment.kind is not SegmentKind.DELETE
            or following is None
            or following.kind is not SegmentKind.INSERT
            or CURSOR_MARKER not in segment.text
        ):
            settled.append(segment)
            if segment.kind is not SegmentKind.INSERT and segment.text:
                markers_seen += segment.text.count(CURSOR_MARKER)
            index += 1
            continue

        ahead: list[str] = []
        behind: list[str] = []
        opened_here = False
        for char in segment.text:
            if char != CURSOR_MARKER:
                ahead.append(char)
            elif markers_seen % 2 == 0:
                behind.append(char)
                opened_here = True
                markers_seen += 1
            else:
                if opened_here:
                    behind.append(char)
                else:
                    ahead.append(char)
                opened_here = False
                markers_seen += 1

        if ahead:
            settled.append(DiffSegment(SegmentKind.DELETE, "".join(ahead)))
        settled.append(following)
        if behind:
            settled.append(DiffSegment(SegmentKind.DELETE, "".join(behind)))
        index += 2
    return settled


__all__ = ["ReconcileResult", "reconcile"]

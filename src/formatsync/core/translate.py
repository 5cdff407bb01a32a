"""Translate diff segments into replacement operations and tracked selections."""

from __future__ import annotations

import logging
from typing import Iterable, List, Sequence

from .diff import DiffSegment, SegmentKind
from .markers import CURSOR_MARKER
from .operations import ReplacementOperation
from .ranges import TextRange

LOGGER = logging.getLogger(__name__)

_FLUSH = DiffSegment(SegmentKind.EQUAL, "")


def translate(
    segments: Iterable[DiffSegment],
    selection_count: int,
) -> tuple[tuple[ReplacementOperation, ...], tuple[TextRange, ...]]:
    """Return the edits and post-edit selections encoded by ``segments``.

    ``segments`` diff the marker-embedded original against the formatted
    text. Operations are expressed against the original text *without*
    markers and are meant to be applied in one pass against that snapshot.
    Selections are expressed in the formatted text's coordinates.
    """

    operations: list[ReplacementOperation] = []
    entries: list[list[int]] = []
    offset = 0  # destination cursor
    source = 0  # original cursor, markers excluded
    pending = 0

    for segment in [*segments, _FLUSH]:
        text = segment.text
        if segment.kind is SegmentKind.DELETE:
            pending += len(text)
            index = text.find(CURSOR_MARKER)
            while index != -1:
                if not entries or len(entries[-1]) == 2:
                    entries.append([offset])
                else:
                    entries[-1].append(offset)
                pending -= len(CURSOR_MARKER)
                index = text.find(CURSOR_MARKER, index + 1)
            continue

        if segment.kind is SegmentKind.EQUAL and pending:
            operations.append(ReplacementOperation(source, source + pending, ""))
        elif segment.kind is SegmentKind.INSERT and (text or pending):
            if CURSOR_MARKER in text:
                LOGGER.debug("Ignoring cursor marker inside inserted text")
            operations.append(ReplacementOperation(source, source + pending, text))

        source += pending
        pending = 0
        offset += len(text)
        if segment.kind is SegmentKind.EQUAL:
            source += len(text)

    selections = _finalize_selections(entries, selection_count, offset)
    return tuple(_coalesce(operations)), selections


def _finalize_selections(entries: Sequence[Sequence[int]], expected: int, limit: int) -> tuple[TextRange, ...]:
    ranges: List[TextRange] = []
    for entry in entries:
        if len(entry) == 1:
            LOGGER.debug("Unbalanced cursor marker at %s; collapsing to caret", entry[0])
            ranges.append(TextRange.caret(entry[0]))
        else:
            ranges.append(TextRange(entry[0], entry[1]))

    if len(ranges) != expected:
        LOGGER.warning(
            "Tracked %d selections but %d were embedded; padding/truncating",
            len(ranges),
            expected,
        )
        ranges = ranges[:expected]
        while len(ranges) < expected:
            ranges.append(TextRange.caret(limit))
    return tuple(ranges)


def _coalesce(operations: Sequence[ReplacementOperation]) -> list[ReplacementOperation]:
    """Merge operations that touch so the edit list stays minimal."""

    merged: list[ReplacementOperation] = []
    for operation in operations:
        if merged and merged[-1].end == operation.start:
            previous = merged[-1]
            merged[-1] = ReplacementOperation(
                previous.start,
                operation.end,
                previous.replacement + operation.replacement,
            )
        else:
            merged.append(operation)
    return merged


__all__ = ["translate"]

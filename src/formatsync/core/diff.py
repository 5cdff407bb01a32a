"""Character-level diff segments built on :mod:`diff_match_patch`."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List

from diff_match_patch import diff_match_patch

DEFAULT_DIFF_TIMEOUT = 5.0


class SegmentKind(Enum):
    """Tag attached to every diff segment."""

    EQUAL = "equal"
    INSERT = "insert"
    DELETE = "delete"


_KINDS = {
    diff_match_patch.DIFF_EQUAL: SegmentKind.EQUAL,
    diff_match_patch.DIFF_INSERT: SegmentKind.INSERT,
    diff_match_patch.DIFF_DELETE: SegmentKind.DELETE,
}


@dataclass(slots=True, frozen=True)
class DiffSegment:
    """Contiguous run of text that is kept, inserted or deleted."""

    kind: SegmentKind
    text: str


def diff_segments(before: str, after: str, *, timeout: float = DEFAULT_DIFF_TIMEOUT) -> List[DiffSegment]:
    """Return the ordered segments transforming ``before`` into ``after``.

    EQUAL+DELETE text rebuilds ``before`` and EQUAL+INSERT text rebuilds
    ``after``. Within a changed run the deletion always precedes the
    insertion. Large inputs are first diffed line by line and the changed
    lines refined character by character; once ``timeout`` seconds have
    passed the remaining regions are reported as plain replacements.
    """

    dmp = diff_match_patch()
    dmp.Diff_Timeout = timeout
    segments = [DiffSegment(_KINDS[op], text) for op, text in dmp.diff_main(before, after)]
    return _merge_adjacent(segments)


def source_text(segments: Iterable[DiffSegment]) -> str:
    """Rebuild the text the segments were diffed from."""

    return "".join(segment.text for segment in segments if segment.kind is not SegmentKind.INSERT)


def target_text(segments: Iterable[DiffSegment]) -> str:
    """Rebuild the text the segments diff towards."""

    return "".join(segment.text for segment in segments if segment.kind is not SegmentKind.DELETE)


def _merge_adjacent(segments: list[DiffSegment]) -> list[DiffSegment]:
    merged: list[DiffSegment] = []
    for segment in segments:
        if not segment.text:
            continue
        if merged and merged[-1].kind is segment.kind:
            merged[-1] = DiffSegment(segment.kind, merged[-1].text + segment.text)
        else:
            merged.append(segment)
    return merged


__all__ = [
    "DEFAULT_DIFF_TIMEOUT",
    "DiffSegment",
    "SegmentKind",
    "diff_segments",
    "source_text",
    "target_text",
]

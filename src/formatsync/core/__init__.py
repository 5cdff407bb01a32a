"""Core reconciliation types and algorithms.

This package holds the pure diff-and-patch pipeline: marker embedding,
character diffing and translation of diff segments into replacement
operations plus remapped selections.
"""

from .diff import DiffSegment, SegmentKind, diff_segments
from .markers import CURSOR_MARKER, embed_markers, has_marker_collision
from .operations import ReplacementOperation
from .ranges import TextRange
from .reconcile import ReconcileResult, reconcile
from .translate import translate

__all__ = [
    "CURSOR_MARKER",
    "DiffSegment",
    "ReconcileResult",
    "ReplacementOperation",
    "SegmentKind",
    "TextRange",
    "diff_segments",
    "embed_markers",
    "has_marker_collision",
    "reconcile",
    "translate",
]

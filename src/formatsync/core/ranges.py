"""Selection offsets shared by the reconciler, buffers and editor adapters."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Iterator


@dataclass(slots=True, frozen=True, order=True)
class TextRange:
    """Half-open ``[start, end)`` span of code point offsets.

    A range whose ends meet is a caret. Negative offsets are raised to zero
    and reversed ends are swapped, so an editor's anchor/active pair can be
    passed in either direction. Ranges unpack as ``start, end = rng`` and
    order by start, then end.
    """

    start: int
    end: int

    def __post_init__(self) -> None:
        try:
            start, end = sorted((max(0, int(self.start)), max(0, int(self.end))))
        except (TypeError, ValueError) as exc:
            raise ValueError(f"TextRange offsets must be integers, got {self.start!r}, {self.end!r}") from exc
        object.__setattr__(self, "start", start)
        object.__setattr__(self, "end", end)

    def __iter__(self) -> Iterator[int]:
        yield self.start
        yield self.end

    @classmethod
    def caret(cls, offset: int) -> TextRange:
        return cls(offset, offset)

    @property
    def length(self) -> int:
        return self.end - self.start

    @property
    def is_caret(self) -> bool:
        return self.start == self.end

    def clamp(self, upper: int) -> TextRange:
        """Pull both ends back inside a text of length ``upper``."""

        if self.end <= upper:
            return self
        return TextRange(min(self.start, upper), upper)

    def to_dict(self) -> dict[str, int]:
        return {"start": self.start, "end": self.end}


def coerce_range(value: Any) -> TextRange:
    """Build a :class:`TextRange` from a pair, a mapping or a start/end object."""

    if isinstance(value, TextRange):
        return value
    if isinstance(value, Mapping):
        if "start" not in value or "end" not in value:
            raise ValueError(f"Selection mapping needs start and end keys: {value!r}")
        return TextRange(value["start"], value["end"])
    if hasattr(value, "start") and hasattr(value, "end"):
        return TextRange(value.start, value.end)
    if isinstance(value, (str, bytes)):
        raise TypeError(f"Unsupported selection value: {value!r}")
    try:
        start, end = value
    except (TypeError, ValueError) as exc:
        raise TypeError(f"Unsupported selection value: {value!r}") from exc
    return TextRange(start, end)


def coerce_ranges(values: Iterable[Any] | None) -> tuple[TextRange, ...]:
    if values is None:
        return ()
    return tuple(coerce_range(value) for value in values)


__all__ = ["TextRange", "coerce_range", "coerce_ranges"]

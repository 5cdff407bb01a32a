"""In-memory text buffer with multi-selection state and save hooks.

The buffer plays the role of an editor document: it owns the text and the
ordered selection set, applies batches of replacement operations atomically
and runs *will-save* hooks (such as format-on-save) before writing to disk.
"""

from __future__ import annotations

import inspect
import logging
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Awaitable, Callable, Iterable, Protocol, Sequence

from ..core.operations import ReplacementOperation
from ..core.ranges import TextRange, coerce_ranges
from ..utils.file_io import load_text, write_text
from .patches import PatchResult, apply_replacements

LOGGER = logging.getLogger(__name__)


class TextChangeListener(Protocol):
    """Callback signature invoked when the buffer text changes."""

    def __call__(self, text: str, buffer: "TextBuffer") -> None:
        ...


class SelectionListener(Protocol):
    """Callback invoked when the selection set changes."""

    def __call__(self, selections: tuple[TextRange, ...]) -> None:
        ...


WillSaveHook = Callable[["TextBuffer"], "Awaitable[Any] | Any"]


@dataclass(slots=True)
class _UndoEntry:
    text: str
    selections: tuple[TextRange, ...]


@dataclass(slots=True)
class EditTransaction:
    """Collects replacements against the snapshot taken when an edit starts."""

    snapshot: str
    operations: list[ReplacementOperation] = field(default_factory=list)

    def replace(self, start: int, end: int, text: str) -> None:
        self.operations.append(ReplacementOperation(start, end, text))

    def insert(self, position: int, text: str) -> None:
        self.replace(position, position, text)

    def delete(self, start: int, end: int) -> None:
        self.replace(start, end, "")


class TextBuffer:
    """Editable document with ordered selections."""

    MAX_HISTORY = 50

    def __init__(
        self,
        text: str = "",
        *,
        path: Path | str | None = None,
        selections: Iterable[Any] | None = None,
        encoding: str = "utf-8",
        bom: bool = False,
    ) -> None:
        self.buffer_id = uuid.uuid4().hex
        self.path: Path | None = Path(path) if path else None
        self.encoding = encoding
        self.bom = bom
        self._text = text
        self._selections: tuple[TextRange, ...] = ()
        self.version = 1
        self.dirty = False
        self._text_listeners: list[TextChangeListener] = []
        self._selection_listeners: list[SelectionListener] = []
        self._will_save_hooks: list[WillSaveHook] = []
        self._undo_stack: list[_UndoEntry] = []
        self.selections = coerce_ranges(selections) or (TextRange.caret(0),)

    @classmethod
    def open(cls, path: Path | str) -> "TextBuffer":
        """Load ``path`` into a new buffer that saves back in the same encoding."""

        target = Path(path)
        loaded = load_text(target)
        return cls(loaded.text, path=target, encoding=loaded.encoding, bom=loaded.bom)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def text(self) -> str:
        return self._text

    @property
    def length(self) -> int:
        return len(self._text)

    @property
    def selections(self) -> tuple[TextRange, ...]:
        return self._selections

    @selections.setter
    def selections(self, values: Iterable[Any]) -> None:
        ranges = tuple(rng.clamp(upper=len(self._text)) for rng in coerce_ranges(values))
        if ranges == self._selections:
            return
        self._selections = ranges
        for listener in list(self._selection_listeners):
            listener(ranges)

    def set_text(self, text: str) -> None:
        """Replace the whole document, collapsing selections to the end."""

        self.edit(lambda tx: tx.replace(0, len(tx.snapshot), text))
        self.selections = (TextRange.caret(len(text)),)

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------
    def edit(self, callback: Callable[[EditTransaction], Any]) -> Any:
        """Run ``callback`` with a transaction and apply its operations at once.

        The callback's return value is passed through, which lets callers
        compute post-edit selections inside the same transaction.
        """

        transaction = EditTransaction(snapshot=self._text)
        result = callback(transaction)
        if transaction.operations:
            self.apply_operations(transaction.operations)
        return result

    def apply_operations(self, operations: Sequence[ReplacementOperation]) -> PatchResult:
        """Apply ``operations`` against the current text as a single undo step."""

        ordered = sorted(operations, key=lambda op: (op.start, op.end))
        patch = apply_replacements(self._text, ordered)
        if patch.text == self._text:
            return patch
        self._push_undo()
        self._text = patch.text
        self.version += 1
        self.dirty = True
        self._selections = tuple(rng.clamp(upper=len(self._text)) for rng in self._selections)
        LOGGER.debug("Buffer %s updated (%s)", self.buffer_id, patch.summary)
        for listener in list(self._text_listeners):
            listener(self._text, self)
        return patch

    def undo(self) -> bool:
        """Restore the text and selections from before the last edit."""

        if not self._undo_stack:
            return False
        entry = self._undo_stack.pop()
        self._text = entry.text
        self.version += 1
        self.dirty = True
        self.selections = entry.selections
        for listener in list(self._text_listeners):
            listener(self._text, self)
        return True

    def _push_undo(self) -> None:
        self._undo_stack.append(_UndoEntry(self._text, self._selections))
        if len(self._undo_stack) > self.MAX_HISTORY:
            self._undo_stack.pop(0)

    # ------------------------------------------------------------------
    # Listeners and saving
    # ------------------------------------------------------------------
    def add_text_listener(self, listener: TextChangeListener) -> None:
        self._text_listeners.append(listener)

    def add_selection_listener(self, listener: SelectionListener) -> None:
        self._selection_listeners.append(listener)

    def on_will_save(self, hook: WillSaveHook) -> Callable[[], None]:
        """Register ``hook`` to run before every save; returns an unregister callable."""

        self._will_save_hooks.append(hook)

        def _remove() -> None:
            if hook in self._will_save_hooks:
                self._will_save_hooks.remove(hook)

        return _remove

    async def save(self, path: Path | str | None = None, *, run_hooks: bool = True) -> Path:
        """Run will-save hooks, then write the buffer to disk."""

        target = Path(path) if path else self.path
        if target is None:
            raise ValueError("Buffer has no path; provide one to save")
        self.path = target
        if run_hooks:
            for hook in list(self._will_save_hooks):
                outcome = hook(self)
                if inspect.isawaitable(outcome):
                    await outcome
        write_text(target, self._text, encoding=self.encoding, bom=self.bom)
        self.dirty = False
        LOGGER.debug("Buffer %s saved to %s", self.buffer_id, target)
        return target


__all__ = ["EditTransaction", "TextBuffer"]

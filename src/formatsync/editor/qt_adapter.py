"""Apply reconciled formatter output to a Qt ``QPlainTextEdit``."""

from __future__ import annotations

from typing import Sequence

from PySide6.QtGui import QTextCursor
from PySide6.QtWidgets import QPlainTextEdit

from ..core.operations import ReplacementOperation
from ..core.ranges import TextRange
from ..core.reconcile import ReconcileResult, reconcile


def _utf16_offset(text: str, index: int) -> int:
    # Qt positions count UTF-16 code units; Python offsets count code points.
    return len(text[:index].encode("utf-16-le")) // 2


def _codepoint_offset(text: str, units: int) -> int:
    count = 0
    for index, char in enumerate(text):
        if count >= units:
            return index
        count += 2 if ord(char) > 0xFFFF else 1
    return len(text)


class QtEditorAdapter:
    """Bridges a ``QPlainTextEdit`` to the reconciliation core."""

    def __init__(self, widget: QPlainTextEdit) -> None:
        self._widget = widget

    @property
    def widget(self) -> QPlainTextEdit:
        return self._widget

    def text(self) -> str:
        return self._widget.toPlainText()

    def selection(self) -> TextRange:
        """Return the widget's selection in code point offsets."""

        cursor = self._widget.textCursor()
        text = self.text()
        return TextRange(
            _codepoint_offset(text, cursor.selectionStart()),
            _codepoint_offset(text, cursor.selectionEnd()),
        )

    def apply_operations(self, operations: Sequence[ReplacementOperation]) -> None:
        """Apply ``operations`` as one undoable edit block."""

        if not operations:
            return
        snapshot = self.text()
        cursor = QTextCursor(self._widget.document())
        cursor.beginEditBlock()
        try:
            # Descending order keeps earlier offsets valid against the snapshot.
            for operation in sorted(operations, key=lambda op: op.start, reverse=True):
                cursor.setPosition(_utf16_offset(snapshot, operation.start))
                cursor.setPosition(
                    _utf16_offset(snapshot, operation.end), QTextCursor.MoveMode.KeepAnchor
                )
                cursor.insertText(operation.replacement)
        finally:
            cursor.endEditBlock()

    def set_selection(self, selection: TextRange) -> None:
        text = self.text()
        selection = selection.clamp(upper=len(text))
        cursor = self._widget.textCursor()
        cursor.setPosition(_utf16_offset(text, selection.start))
        cursor.setPosition(_utf16_offset(text, selection.end), QTextCursor.MoveMode.KeepAnchor)
        self._widget.setTextCursor(cursor)

    def apply_reconcile(self, result: ReconcileResult) -> None:
        self.apply_operations(result.operations)
        if result.selections:
            self.set_selection(result.selections[0])

    def apply_formatted(self, formatted: str) -> ReconcileResult:
        """Reconcile the widget with ``formatted`` and keep the selection in place."""

        result = reconcile(self.text(), formatted, [self.selection()])
        self.apply_reconcile(result)
        return result


__all__ = ["QtEditorAdapter"]

"""Per-buffer format-on-save orchestration.

A :class:`FormatSession` owns everything that outlives a single format
attempt for one buffer: the cancellation token of the attempt in flight and
the last text the formatter produced. Each save cancels the previous attempt,
runs the external formatter and, when the result is still relevant, applies
the reconciled edits and selections to the buffer.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Optional

from ..core.reconcile import ReconcileResult, reconcile
from ..editor.buffer import EditTransaction, TextBuffer
from .cancellation import CancellationToken
from .errors import FormatCancelledError, FormatterError, FormatterExitError
from .formatter import ProcessResult, run_formatter
from .settings import Settings

LOGGER = logging.getLogger(__name__)

FormatterRunner = Callable[[str, str, Settings], Awaitable[Optional[ProcessResult]]]
Notifier = Callable[[FormatterError], None]


class FormatSession:
    """Format-on-save state for a single :class:`TextBuffer`."""

    def __init__(
        self,
        buffer: TextBuffer,
        settings: Settings | None = None,
        *,
        runner: FormatterRunner | None = None,
        notify: Notifier | None = None,
    ) -> None:
        self._buffer = buffer
        self._settings = settings or Settings()
        self._runner = runner or _default_runner
        self._notify = notify
        self._current_token: CancellationToken | None = None
        self._last_formatted: str | None = None
        self._last_result: ReconcileResult | None = None

    @property
    def buffer(self) -> TextBuffer:
        return self._buffer

    @property
    def last_formatted_text(self) -> str | None:
        return self._last_formatted

    @property
    def last_result(self) -> ReconcileResult | None:
        return self._last_result

    def cancel_pending(self, reason: str = "superseded") -> None:
        if self._current_token is not None:
            self._current_token.cancel(reason)

    async def on_will_save(self, _buffer: TextBuffer | None = None) -> bool:
        """Will-save hook: cancel the attempt in flight and format the buffer."""

        if not self._settings.format_on_save:
            return False
        self.cancel_pending()
        token = CancellationToken()
        self._current_token = token
        try:
            return await self.maybe_format(token)
        except FormatCancelledError:
            LOGGER.debug("Format attempt for %s was superseded", self._buffer.path)
            return False
        except FormatterError as exc:
            LOGGER.warning("Formatting %s failed: %s", self._buffer.path, exc)
            if self._notify is not None:
                self._notify(exc)
            return False
        finally:
            if self._current_token is token:
                self._current_token = None

    async def maybe_format(self, token: CancellationToken | None = None) -> bool:
        """Format the buffer and apply the result; return ``True`` when it changed."""

        token = token or CancellationToken()
        path = self._buffer.path
        if path is None:
            return False

        current_text = self._buffer.text
        if current_text == self._last_formatted:
            LOGGER.debug("Buffer %s unchanged since last format", path)
            return False

        version = self._buffer.version
        selections = self._buffer.selections
        output = await self._runner(current_text, str(path), self._settings)
        token.raise_if_cancelled()
        if output is None:
            return False
        if not output.ok:
            raise FormatterExitError(
                message=f"Formatter exited with status {output.code}: {output.stderr.strip()}",
                result=output,
            )
        if self._buffer.version != version:
            LOGGER.debug("Buffer %s changed while formatting; dropping result", path)
            return False
        if output.stdout == current_text:
            self._last_formatted = current_text
            return False

        result = reconcile(current_text, output.stdout, selections)
        self._buffer.edit(lambda tx: _replay(tx, result))
        if result.selections:
            self._buffer.selections = result.selections
        self._last_formatted = self._buffer.text
        self._last_result = result
        LOGGER.info(
            "Formatted %s with %d edit(s)%s",
            path,
            len(result.operations),
            " (full replacement)" if result.fallback else "",
        )
        return True


def attach(
    buffer: TextBuffer,
    settings: Settings | None = None,
    *,
    runner: FormatterRunner | None = None,
    notify: Notifier | None = None,
) -> FormatSession:
    """Create a :class:`FormatSession` and register it as ``buffer``'s will-save hook."""

    session = FormatSession(buffer, settings, runner=runner, notify=notify)
    buffer.on_will_save(session.on_will_save)
    return session


def _replay(transaction: EditTransaction, result: ReconcileResult) -> None:
    for operation in result.operations:
        transaction.replace(operation.start, operation.end, operation.replacement)


async def _default_runner(text: str, file_path: str, settings: Settings) -> ProcessResult | None:
    return await run_formatter(text, file_path, settings)


__all__ = ["FormatSession", "FormatterRunner", "attach"]

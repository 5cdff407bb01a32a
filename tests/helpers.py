"""Shared test helpers and stub runners."""

from __future__ import annotations

import asyncio

from formatsync.services.formatter import ProcessResult


class StubRunner:
    """Formatter runner stub returning canned output.

    ``transform`` maps the input text to formatted text. When ``gate`` is set
    the runner waits on it before returning, which lets tests interleave saves.
    """

    def __init__(self, transform=None, *, code: int = 0, stderr: str = "", gate: asyncio.Event | None = None):
        self.transform = transform or (lambda text: text)
        self.code = code
        self.stderr = stderr
        self.gate = gate
        self.calls: list[tuple[str, str]] = []

    async def __call__(self, text: str, file_path: str, settings) -> ProcessResult:
        self.calls.append((text, file_path))
        if self.gate is not None:
            await self.gate.wait()
        stdout = self.transform(text) if self.code == 0 else ""
        return ProcessResult(code=self.code, stdout=stdout, stderr=self.stderr)

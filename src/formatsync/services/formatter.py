"""Asynchronous formatter invocation."""

from __future__ import annotations

import asyncio
import logging
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from .discovery import find_closest_config, resolve_executable
from .errors import FormatterNotFoundError, FormatterTimeoutError
from .settings import Settings

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class ProcessResult:
    """Exit status and captured output of a finished formatter process."""

    code: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.code == 0


@dataclass(slots=True, frozen=True)
class FormatterInvocation:
    """Resolved command line for one formatter run."""

    executable: Path
    args: tuple[str, ...] = field(default_factory=tuple)
    cwd: Path | None = None

    @property
    def command(self) -> str:
        return shlex.join([str(self.executable), *self.args])


async def run_process(
    executable: Path | str,
    args: Sequence[str] = (),
    *,
    cwd: Path | str | None = None,
    stdin: str | None = None,
    timeout: float | None = None,
) -> ProcessResult:
    """Run ``executable`` with ``args``, feeding ``stdin`` and capturing output."""

    try:
        process = await asyncio.create_subprocess_exec(
            str(executable),
            *args,
            cwd=str(cwd) if cwd else None,
            stdin=asyncio.subprocess.PIPE if stdin is not None else asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except (FileNotFoundError, PermissionError) as exc:
        raise FormatterNotFoundError(
            message=f"Formatter executable not found: {executable}",
            executable=str(executable),
        ) from exc

    payload = stdin.encode("utf-8") if stdin is not None else None
    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(payload), timeout=timeout)
    except asyncio.TimeoutError as exc:
        process.kill()
        await process.wait()
        raise FormatterTimeoutError(
            message=f"Formatter did not finish within {timeout} seconds",
            timeout=timeout,
        ) from exc

    return ProcessResult(
        code=process.returncode if process.returncode is not None else -1,
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
    )


def build_invocation(
    file_path: Path | str,
    config_path: Path | str,
    settings: Settings | None = None,
) -> FormatterInvocation | None:
    """Return the command used to format ``file_path`` or ``None`` without an executable."""

    settings = settings or Settings()
    config = Path(config_path)
    executable = resolve_executable(config, settings.executable_relative_path)
    if executable is None:
        return None
    args = ("--stdin-filepath", str(file_path), *settings.extra_args)
    return FormatterInvocation(executable=executable, args=args, cwd=config.parent)


async def run_formatter(
    text: str,
    file_path: Path | str,
    settings: Settings | None = None,
) -> ProcessResult | None:
    """Format ``text`` as if it were the contents of ``file_path``.

    Returns ``None`` when no configuration or executable applies to the file.
    """

    settings = settings or Settings()
    target = Path(file_path)
    config_path = find_closest_config(
        target.parent,
        filenames=settings.config_filenames,
        max_depth=settings.max_config_depth,
    )
    if config_path is None:
        LOGGER.debug("No formatter config found for %s", target)
        return None

    invocation = build_invocation(target, config_path, settings)
    if invocation is None:
        return None

    LOGGER.debug("Running formatter: %s", invocation.command)
    return await run_process(
        invocation.executable,
        invocation.args,
        cwd=invocation.cwd,
        stdin=text,
        timeout=settings.timeout_seconds,
    )


__all__ = [
    "FormatterInvocation",
    "ProcessResult",
    "build_invocation",
    "run_formatter",
    "run_process",
]

"""Locate formatter configuration files and executables."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from .settings import DEFAULT_CONFIG_FILENAMES

LOGGER = logging.getLogger(__name__)


def find_closest_config(
    directory: Path | str,
    *,
    filenames: Sequence[str] = DEFAULT_CONFIG_FILENAMES,
    max_depth: int = 100,
) -> Path | None:
    """Return the nearest config file in ``directory`` or one of its ancestors.

    Within a directory the first existing entry of ``filenames`` wins. The
    walk stops at the filesystem root or after ``max_depth`` parents.
    """

    current = Path(directory).expanduser().absolute()
    for depth, candidate_dir in enumerate((current, *current.parents)):
        if depth > max_depth:
            LOGGER.debug("Config lookup from %s exceeded %d levels", current, max_depth)
            return None
        for name in filenames:
            candidate = candidate_dir / name
            if candidate.is_file():
                return candidate
    return None


def resolve_executable(
    config_path: Path | str,
    relative: str = "node_modules/.bin/prettier",
) -> Path | None:
    """Return the formatter executable that lives beside ``config_path``."""

    executable = Path(config_path).parent / relative
    if executable.exists():
        return executable
    LOGGER.debug("Formatter executable %s not found", executable)
    return None


__all__ = ["find_closest_config", "resolve_executable"]

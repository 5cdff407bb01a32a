"""Logging setup for formatsync.

Handlers are attached to the ``formatsync`` package logger, never to the root
logger, so an editor embedding the package keeps control of its own logging.
Records still propagate to the root logger.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..services.settings import Settings

__all__ = ["PACKAGE_LOGGER", "configure_from_settings", "default_log_dir", "get_log_path", "setup_logging"]

PACKAGE_LOGGER = "formatsync"
_LOG_FILENAME = "formatsync.log"
_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_INSTALLED: list[logging.Handler] = []
_LOG_PATH: Path | None = None


def default_log_dir() -> Path:
    override = os.environ.get("FORMATSYNC_LOG_DIR")
    return Path(override or Path.home() / ".formatsync" / "logs").expanduser()


def setup_logging(
    level: int = logging.INFO,
    *,
    log_dir: Path | str | None = None,
    log_file: bool = True,
    console: bool = False,
    max_bytes: int = 1_000_000,
    backup_count: int = 3,
) -> Path | None:
    """(Re)configure the package logger and return the log file, if any.

    Calling it again replaces the handlers installed by the previous call.
    """

    global _LOG_PATH
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in _INSTALLED:
        logger.removeHandler(handler)
        handler.close()
    _INSTALLED.clear()

    formatter = logging.Formatter(fmt=_FORMAT, datefmt=_DATE_FORMAT)
    log_path: Path | None = None
    if log_file:
        target_dir = Path(log_dir).expanduser() if log_dir else default_log_dir()
        target_dir.mkdir(parents=True, exist_ok=True)
        log_path = target_dir / _LOG_FILENAME
        _install(
            logger,
            logging.handlers.RotatingFileHandler(
                log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
            ),
            level,
            formatter,
        )
    if console:
        _install(logger, logging.StreamHandler(sys.stderr), level, formatter)

    logger.setLevel(level)
    _LOG_PATH = log_path
    return log_path


def configure_from_settings(settings: "Settings", *, verbose: bool = False) -> Path | None:
    """Apply ``settings.debug_logging``; ``verbose`` adds debug output on stderr."""

    if not (settings.debug_logging or verbose):
        return None
    return setup_logging(
        logging.DEBUG,
        log_dir=settings.log_dir,
        log_file=settings.debug_logging,
        console=verbose,
    )


def get_log_path() -> Path | None:
    """Return the file written by the last :func:`setup_logging` call."""

    return _LOG_PATH


def _install(logger: logging.Logger, handler: logging.Handler, level: int, formatter: logging.Formatter) -> None:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    _INSTALLED.append(handler)

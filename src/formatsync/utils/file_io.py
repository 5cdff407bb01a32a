"""File IO helpers used by buffers and the CLI.

Text is read and written verbatim: newline sequences are never translated and
the encoding a file was read with, including its byte order mark, is reused
when it is written back. Offsets into the text therefore count the file's own
characters, and an unchanged region of a file keeps its exact bytes.
"""

from __future__ import annotations

import codecs
import locale
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

__all__ = ["TextFile", "load_text", "read_text", "write_text"]

_BOM = "\ufeff"
_BOM_MAP: dict[bytes, str] = {
    codecs.BOM_UTF8: "utf-8",
    codecs.BOM_UTF16_LE: "utf-16-le",
    codecs.BOM_UTF16_BE: "utf-16-be",
}


@dataclass(slots=True, frozen=True)
class TextFile:
    """Decoded file contents plus what is needed to encode them back."""

    text: str
    encoding: str = "utf-8"
    bom: bool = False


def load_text(path: Path | str, *, encoding: str | None = None) -> TextFile:
    """Decode ``path`` and remember its encoding and byte order mark."""

    raw = Path(path).read_bytes()
    detected = encoding or _detect_encoding(raw)
    text = raw.decode(detected)
    if text.startswith(_BOM):
        return TextFile(text[len(_BOM) :], detected, True)
    return TextFile(text, detected)


def read_text(path: Path | str, *, encoding: str | None = None) -> str:
    return load_text(path, encoding=encoding).text


def write_text(
    path: Path | str,
    content: str,
    *,
    encoding: str = "utf-8",
    bom: bool = False,
) -> Path:
    """Atomically replace ``path`` with ``content`` encoded as ``encoding``."""

    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    payload = ((_BOM if bom else "") + content).encode(encoding)

    descriptor, tmp_name = tempfile.mkstemp(
        dir=str(target.parent), prefix=f".{target.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(descriptor, "wb") as handle:
            handle.write(payload)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, target)
    finally:
        if os.path.exists(tmp_name):  # pragma: no cover - cleanup path
            os.unlink(tmp_name)
    return target


def _detect_encoding(raw: bytes) -> str:
    for bom, encoding in _BOM_MAP.items():
        if raw.startswith(bom):
            return encoding

    preferred = locale.getpreferredencoding(False) or "utf-8"
    for candidate in dict.fromkeys(("utf-8", preferred, "latin-1")):
        try:
            raw.decode(candidate)
        except UnicodeDecodeError:
            continue
        return candidate
    return "latin-1"

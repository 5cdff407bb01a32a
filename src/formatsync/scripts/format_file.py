"""CLI helper that reconciles a file with its formatted output."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Sequence

from ..core.ranges import TextRange
from ..core.reconcile import ReconcileResult, reconcile
from ..editor.patches import render_unified_diff
from ..services.errors import FormatterError
from ..services.formatter import run_formatter
from ..services.settings import SettingsStore
from ..utils.file_io import load_text, read_text, write_text
from ..utils.logging import configure_from_settings

LOGGER = logging.getLogger(__name__)


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Apply formatter output to a file with minimal edits and report remapped selections."
    )
    parser.add_argument("path", type=Path, help="File to format.")
    parser.add_argument(
        "--formatted",
        type=Path,
        help="Read the formatted text from this file instead of running the formatter.",
    )
    parser.add_argument(
        "--selection",
        action="append",
        default=[],
        metavar="START:END",
        help="Selection to track through the edit (repeatable). A bare offset is a caret.",
    )
    parser.add_argument("--write", action="store_true", help="Write the formatted text back to PATH.")
    parser.add_argument("--json", action="store_true", help="Emit operations and selections as JSON.")
    parser.add_argument("--diff", action="store_true", help="Print a unified diff of the change.")
    parser.add_argument("--settings", type=Path, help="Settings file to load.")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging on stderr.")
    args = parser.parse_args(argv)

    store = SettingsStore(args.settings) if args.settings else SettingsStore()
    settings = store.load()
    configure_from_settings(settings, verbose=args.verbose)

    try:
        selections = [_parse_selection(value) for value in args.selection]
    except ValueError as exc:
        parser.error(str(exc))

    for path in (args.path, args.formatted):
        if path is not None and not path.is_file():
            print(f"No such file: {path}", file=sys.stderr)
            return 1
    source = load_text(args.path)
    original = source.text

    if args.formatted:
        formatted = read_text(args.formatted)
    else:
        try:
            output = asyncio.run(run_formatter(original, args.path.absolute(), settings))
        except FormatterError as exc:
            print(str(exc), file=sys.stderr)
            return 2
        if output is None:
            print(f"No formatter configuration found for {args.path}", file=sys.stderr)
            return 1
        if not output.ok:
            print(output.stderr.strip() or f"Formatter exited with status {output.code}", file=sys.stderr)
            return 2
        formatted = output.stdout

    result = reconcile(original, formatted, selections)
    updated = result.apply(original)

    if args.json:
        print(json.dumps(_to_payload(result), indent=2))
    else:
        _print_summary(result)
    if args.diff:
        print(render_unified_diff(original, updated, filename=args.path.name))
    if args.write and result.changed:
        write_text(args.path, updated, encoding=source.encoding, bom=source.bom)
        LOGGER.info("Wrote %s", args.path)
    return 0


def _parse_selection(value: str) -> TextRange:
    start, sep, end = value.partition(":")
    try:
        if not sep:
            return TextRange.caret(int(start))
        return TextRange(int(start), int(end))
    except ValueError as exc:
        raise ValueError(f"Invalid selection {value!r}; expected START:END") from exc


def _to_payload(result: ReconcileResult) -> dict[str, object]:
    return {
        "fallback": result.fallback,
        "operations": [operation.to_dict() for operation in result.operations],
        "selections": [selection.to_dict() for selection in result.selections],
    }


def _print_summary(result: ReconcileResult) -> None:
    if result.fallback:
        print("cursor marker present; replacing the whole buffer")
    print(f"operations: {len(result.operations)}")
    for operation in result.operations:
        print(f"  [{operation.start}, {operation.end}) -> {operation.replacement!r}")
    for index, selection in enumerate(result.selections):
        print(f"selection {index}: {selection.start}:{selection.end}")


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())

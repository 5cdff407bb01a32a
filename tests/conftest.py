"""Shared pytest fixtures."""

from __future__ import annotations

import os
import stat
import sys
from pathlib import Path

import pytest

# Run Qt headless when no display is available.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


@pytest.fixture
def fake_formatter(tmp_path: Path):
    """Create a project with a config file and an executable formatter stub.

    The stub is a Python script that collapses ``x=1`` style assignments to
    ``x = 1`` and strips trailing whitespace, which is enough to exercise the
    full discovery + invocation + reconcile path.
    """

    project = tmp_path / "project"
    (project / "node_modules" / ".bin").mkdir(parents=True)
    (project / ".prettierrc").write_text("{}\n", encoding="utf-8")
    executable = project / "node_modules" / ".bin" / "prettier"
    executable.write_text(
        f"#!{sys.executable}\n"
        "import re, sys\n"
        "if '--fail' in sys.argv:\n"
        "    sys.stderr.write('SyntaxError: unexpected token')\n"
        "    sys.exit(2)\n"
        "text = sys.stdin.read()\n"
        "text = re.sub(r'\\s*=\\s*', ' = ', text)\n"
        "text = '\\n'.join(line.rstrip() for line in text.split('\\n'))\n"
        "sys.stdout.write(text)\n",
        encoding="utf-8",
    )
    executable.chmod(executable.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return project


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in list(os.environ):
        if name.startswith("FORMATSYNC_"):
            monkeypatch.delenv(name, raising=False)

"""Tests for format-on-save sessions."""

from __future__ import annotations

import asyncio
import re

import pytest

from formatsync.core.markers import CURSOR_MARKER
from formatsync.core.ranges import TextRange
from formatsync.editor.buffer import TextBuffer
from formatsync.services.errors import FormatterExitError, FormatterNotFoundError
from formatsync.services.session import FormatSession, attach
from formatsync.services.settings import Settings
from tests.helpers import StubRunner


def _spaces_around_equals(text: str) -> str:
    return re.sub(r"\s*=\s*", " = ", text)


@pytest.mark.asyncio
async def test_save_formats_buffer_and_moves_caret(tmp_path):
    target = tmp_path / "main.js"
    buffer = TextBuffer("let x=1", path=target, selections=[TextRange.caret(5)])
    runner = StubRunner(_spaces_around_equals)
    session = attach(buffer, runner=runner)

    await buffer.save()

    assert buffer.text == "let x = 1"
    assert buffer.selections == (TextRange(6, 6),)
    assert target.read_text(encoding="utf-8") == "let x = 1"
    assert runner.calls == [("let x=1", str(target))]
    assert session.last_formatted_text == "let x = 1"
    assert session.last_result is not None and not session.last_result.fallback


@pytest.mark.asyncio
async def test_formatting_is_a_single_undo_step(tmp_path):
    buffer = TextBuffer("a=1;b=2", path=tmp_path / "a.js")
    session = FormatSession(buffer, runner=StubRunner(_spaces_around_equals))

    assert await session.on_will_save()
    assert buffer.undo()
    assert buffer.text == "a=1;b=2"


@pytest.mark.asyncio
async def test_unchanged_output_does_not_edit(tmp_path):
    buffer = TextBuffer("x = 1", path=tmp_path / "a.js")
    session = FormatSession(buffer, runner=StubRunner())

    assert not await session.on_will_save()
    assert buffer.version == 1
    assert session.last_formatted_text == "x = 1"


@pytest.mark.asyncio
async def test_skips_formatter_when_text_matches_last_output(tmp_path):
    buffer = TextBuffer("x=1", path=tmp_path / "a.js")
    runner = StubRunner(_spaces_around_equals)
    session = FormatSession(buffer, runner=runner)

    await session.on_will_save()
    await session.on_will_save()

    assert len(runner.calls) == 1


@pytest.mark.asyncio
async def test_buffers_without_path_are_skipped():
    runner = StubRunner(_spaces_around_equals)
    session = FormatSession(TextBuffer("x=1"), runner=runner)

    assert not await session.maybe_format()
    assert runner.calls == []


@pytest.mark.asyncio
async def test_missing_formatter_is_a_no_op(tmp_path):
    async def no_formatter(text, path, settings):
        return None

    buffer = TextBuffer("x=1", path=tmp_path / "a.js")

    assert not await FormatSession(buffer, runner=no_formatter).on_will_save()
    assert buffer.text == "x=1"


@pytest.mark.asyncio
async def test_format_on_save_can_be_disabled(tmp_path):
    runner = StubRunner(_spaces_around_equals)
    buffer = TextBuffer("x=1", path=tmp_path / "a.js")
    session = FormatSession(buffer, Settings(format_on_save=False), runner=runner)

    assert not await session.on_will_save()
    assert runner.calls == []


@pytest.mark.asyncio
async def test_non_zero_exit_is_reported_not_raised(tmp_path):
    notified = []
    buffer = TextBuffer("x=", path=tmp_path / "a.js")
    runner = StubRunner(code=2, stderr="SyntaxError: Unexpected token")
    session = FormatSession(buffer, runner=runner, notify=notified.append)

    assert not await session.on_will_save()
    assert buffer.text == "x="
    assert len(notified) == 1
    assert isinstance(notified[0], FormatterExitError)
    assert "Unexpected token" in notified[0].message
    assert notified[0].to_dict()["code"] == 2


@pytest.mark.asyncio
async def test_maybe_format_raises_formatter_errors(tmp_path):
    async def broken(text, path, settings):
        raise FormatterNotFoundError(executable="prettier")

    session = FormatSession(TextBuffer("x", path=tmp_path / "a.js"), runner=broken)

    with pytest.raises(FormatterNotFoundError):
        await session.maybe_format()


@pytest.mark.asyncio
async def test_newer_save_cancels_older_attempt(tmp_path):
    gate = asyncio.Event()
    runner = StubRunner(_spaces_around_equals, gate=gate)
    buffer = TextBuffer("x=1", path=tmp_path / "a.js")
    session = FormatSession(buffer, runner=runner)

    first = asyncio.ensure_future(session.on_will_save())
    await asyncio.sleep(0)
    second = asyncio.ensure_future(session.on_will_save())
    await asyncio.sleep(0)
    gate.set()

    assert await first is False
    assert await second is True
    assert buffer.text == "x = 1"
    assert len(runner.calls) == 2


@pytest.mark.asyncio
async def test_result_is_dropped_when_buffer_changes_mid_format(tmp_path):
    gate = asyncio.Event()
    buffer = TextBuffer("x=1", path=tmp_path / "a.js")
    session = FormatSession(buffer, runner=StubRunner(_spaces_around_equals, gate=gate))

    pending = asyncio.ensure_future(session.on_will_save())
    await asyncio.sleep(0)
    buffer.edit(lambda tx: tx.insert(3, ";"))
    gate.set()

    assert await pending is False
    assert buffer.text == "x=1;"


@pytest.mark.asyncio
async def test_marker_collision_replaces_whole_buffer(tmp_path):
    original = f"x=1 {CURSOR_MARKER}"
    buffer = TextBuffer(original, path=tmp_path / "a.js", selections=[TextRange(0, 1)])
    session = FormatSession(buffer, runner=StubRunner(_spaces_around_equals))

    assert await session.on_will_save()
    assert buffer.text == f"x = 1 {CURSOR_MARKER}"
    assert buffer.selections == (TextRange(0, 1),)
    assert session.last_result.fallback


@pytest.mark.asyncio
async def test_end_to_end_with_real_formatter_process(fake_formatter):
    source = fake_formatter / "src" / "app.js"
    source.parent.mkdir()
    buffer = TextBuffer("const a=1  \nconst b=2", path=source, selections=[(6, 7), TextRange.caret(21)])
    attach(buffer, Settings())

    await buffer.save()

    assert buffer.text == "const a = 1\nconst b = 2"
    assert buffer.selections == (TextRange(6, 7), TextRange(23, 23))
    assert source.read_text(encoding="utf-8") == "const a = 1\nconst b = 2"

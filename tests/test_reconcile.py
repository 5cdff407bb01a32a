"""End-to-end tests for reconciling a buffer with formatter output."""

from __future__ import annotations

import random

import pytest

from formatsync.core.markers import CURSOR_MARKER
from formatsync.core.operations import ReplacementOperation
from formatsync.core.ranges import TextRange
from formatsync.core.reconcile import reconcile
from formatsync.editor.patches import apply_replacements

CASES = [
    ("let x=1", "let x = 1"),
    ("a  b", "a b"),
    ("", "const a = 1;\n"),
    ("const a = 1;\n", ""),
    ("function f(){return 1}", "function f() {\n  return 1;\n}\n"),
    ("const  x  =  [1,2,3]", "const x = [1, 2, 3];\n"),
    ("if(a){b()}else{c()}", "if (a) {\n  b();\n} else {\n  c();\n}\n"),
    ("\tindented\n\ttext\n", "  indented\n  text\n"),
    ("emoji 😀=1", "emoji 😀 = 1"),
]


@pytest.mark.parametrize("original, formatted", CASES)
def test_operations_rebuild_formatted_text(original, formatted):
    selections = [TextRange.caret(len(original) // 2)]

    result = reconcile(original, formatted, selections)

    assert apply_replacements(original, result.operations).text == formatted
    assert result.apply(original) == formatted


@pytest.mark.parametrize("original, formatted", CASES)
def test_selections_stay_inside_formatted_text(original, formatted):
    selections = [TextRange(0, len(original)), TextRange.caret(len(original))]

    result = reconcile(original, formatted, selections)

    assert len(result.selections) == len(selections)
    for selection in result.selections:
        assert 0 <= selection.start <= selection.end <= len(formatted)


def test_operations_are_ordered_and_disjoint():
    result = reconcile("a=1;b=2;c=3", "a = 1;\nb = 2;\nc = 3;\n", [TextRange.caret(4)])

    previous_end = 0
    for operation in result.operations:
        assert operation.start >= previous_end
        assert operation.end >= operation.start
        previous_end = operation.end


def test_caret_moves_past_inserted_whitespace():
    result = reconcile("let x=1", "let x = 1", [TextRange.caret(5)])

    assert result.selections == (TextRange(6, 6),)
    assert result.apply("let x=1") == "let x = 1"
    assert not result.fallback


def test_selection_over_collapsed_whitespace():
    result = reconcile("a  b", "a b", [TextRange(1, 3)])

    (selection,) = result.selections
    assert result.operations == (ReplacementOperation(2, 3, ""),)
    assert 0 <= selection.start <= selection.end <= len("a b")
    assert selection.length <= 1


def test_selection_does_not_absorb_whitespace_inserted_after_it():
    result = reconcile("a=1", "a = 1", [TextRange(0, 1)])

    assert result.selections == (TextRange(0, 1),)


def test_caret_before_edits_is_preserved():
    original = "const value = 1;   \n"
    formatted = "const value = 1;\n"

    result = reconcile(original, formatted, [TextRange.caret(6)])

    assert result.selections == (TextRange(6, 6),)


def test_identical_texts_produce_no_operations():
    selections = [TextRange(1, 4), TextRange.caret(9)]

    result = reconcile("identical", "identical", selections)

    assert result.operations == ()
    assert result.selections == tuple(selections)
    assert not result.changed


def test_marker_in_original_falls_back_to_full_replacement():
    original = f"bad {CURSOR_MARKER} char"
    selections = [TextRange(0, 3)]

    result = reconcile(original, "formatted", selections)

    assert result.fallback
    assert result.operations == (ReplacementOperation(0, len(original), "formatted"),)
    assert result.selections == (TextRange(0, 3),)


def test_marker_in_formatted_text_falls_back_to_full_replacement():
    result = reconcile("abc", f"a{CURSOR_MARKER}c", [TextRange.caret(1)])

    assert result.fallback
    assert result.operations == (ReplacementOperation(0, 3, f"a{CURSOR_MARKER}c"),)
    assert result.selections == (TextRange(1, 1),)


def test_selection_order_follows_input_order():
    original = "a=1;b=2"
    formatted = "a = 1; b = 2"

    result = reconcile(original, formatted, [TextRange.caret(6), TextRange(0, 1)])

    assert result.selections == (TextRange(11, 11), TextRange(0, 1))
    assert result.apply(original) == formatted


def test_selection_count_matches_input_for_many_carets():
    original = "x=1\ny=2\nz=3\n"
    formatted = "x = 1;\ny = 2;\nz = 3;\n"
    selections = [TextRange.caret(offset) for offset in range(len(original) + 1)]

    result = reconcile(original, formatted, selections)

    assert len(result.selections) == len(selections)
    assert all(selection.is_caret for selection in result.selections)
    starts = [selection.start for selection in result.selections]
    assert starts == sorted(starts)


def test_selections_are_clamped_to_original_length():
    result = reconcile("ab", "a b", [(0, 50)])

    (selection,) = result.selections
    assert selection.end <= len("a b")


def test_no_selections():
    result = reconcile("x=1", "x = 1")

    assert result.selections == ()
    assert result.apply("x=1") == "x = 1"


def test_large_buffer_keeps_caret_on_a_reformatted_line():
    lines = [f"const v{n} = [{n}, {n + 1}];\n" for n in range(300)]
    formatted = "".join(lines)
    messy = [line.replace(" = ", "=") if n % 25 == 7 else line for n, line in enumerate(lines)]
    original = "".join(messy)
    target_line = 182
    line_start = sum(len(line) for line in messy[:target_line])
    caret = line_start + messy[target_line].index("=")

    result = reconcile(original, formatted, [TextRange.caret(caret)])

    formatted_start = sum(len(line) for line in lines[:target_line])
    expected = formatted_start + lines[target_line].index("=")
    assert len(original) > 5000
    assert result.apply(original) == formatted
    assert result.selections == (TextRange.caret(expected),)
    assert len(result.operations) == 2 * len([n for n in range(300) if n % 25 == 7])


def _random_text(rng: random.Random, alphabet: str, limit: int) -> str:
    return "".join(rng.choice(alphabet) for _ in range(rng.randint(0, limit)))


def _random_selections(rng: random.Random, length: int) -> list[TextRange]:
    points = sorted(rng.randint(0, length) for _ in range(2 * rng.randint(0, 3)))
    return [TextRange(points[index], points[index + 1]) for index in range(0, len(points), 2)]


@pytest.mark.parametrize("seed", range(20))
def test_random_pairs_round_trip_with_valid_selections(seed):
    rng = random.Random(seed)
    alphabet = "ab =;\n(){}"
    for _ in range(100):
        original = _random_text(rng, alphabet, 40)
        formatted = _random_text(rng, alphabet, 40) if rng.random() < 0.5 else original.replace("=", " = ")
        selections = _random_selections(rng, len(original))

        result = reconcile(original, formatted, selections)

        assert result.apply(original) == formatted
        assert len(result.selections) == len(selections)
        for selection in result.selections:
            assert 0 <= selection.start <= selection.end <= len(formatted)
        previous_end = 0
        for operation in result.operations:
            assert previous_end <= operation.start <= operation.end <= len(original)
            previous_end = operation.end


def test_selection_inside_a_replaced_run_collapses_after_the_replacement():
    result = reconcile("a(x)b", "a[y]b", [TextRange(2, 3)])

    assert result.apply("a(x)b") == "a[y]b"
    assert result.selections == (TextRange.caret(4),)

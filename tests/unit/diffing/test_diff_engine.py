"""Unit tests for the snapshot diff engine."""

from __future__ import annotations

import pytest

from core.errors import MongoDiffConfigError
from core.types import DiffHunk, DiffLine
from diffing.diff_engine import compute_diff, split_lines


def _numbered_lines(count: int) -> list[str]:
    return [f"line {index}\n" for index in range(1, count + 1)]


def test_compute_diff_first_capture_is_one_added_hunk() -> None:
    """A missing previous version should yield one all-added hunk."""
    result = compute_diff(None, "DB: admin\nDB: test\n", context_lines=2)

    assert result.has_previous is False
    assert result.hunks == (
        DiffHunk(
            old_start=0,
            old_count=0,
            new_start=1,
            new_count=2,
            lines=(DiffLine("added", "DB: admin\n"), DiffLine("added", "DB: test\n")),
        ),
    )


def test_compute_diff_first_capture_of_empty_content() -> None:
    """An empty first capture should produce an empty hunk with no changes."""
    result = compute_diff(None, "", context_lines=2)

    assert result.hunks == (DiffHunk(0, 0, 0, 0, ()),)
    assert result.has_changes is False


def test_compute_diff_identical_content_has_no_hunks() -> None:
    """Identical inputs should produce an empty diff."""
    content = "DB: admin\nDB: test\n"

    result = compute_diff(content, content, context_lines=2)

    assert result.hunks == ()
    assert result.has_previous is True
    assert result.has_changes is False


def test_compute_diff_reports_single_added_line() -> None:
    """An appended line should show with its leading context."""
    result = compute_diff("DB: admin\n", "DB: admin\nDB: analytics\n", context_lines=2)

    assert result.hunks == (
        DiffHunk(
            old_start=1,
            old_count=1,
            new_start=1,
            new_count=2,
            lines=(DiffLine("context", "DB: admin\n"), DiffLine("added", "DB: analytics\n")),
        ),
    )


def test_compute_diff_bounds_context_around_change() -> None:
    """A mid-file change should carry exactly N context lines on each side."""
    old_lines = _numbered_lines(20)
    new_lines = list(old_lines)
    new_lines[9] = "line 10 changed\n"

    result = compute_diff("".join(old_lines), "".join(new_lines), context_lines=3)

    assert len(result.hunks) == 1
    hunk = result.hunks[0]
    assert (hunk.old_start, hunk.old_count, hunk.new_start, hunk.new_count) == (7, 7, 7, 7)
    assert [line.tag for line in hunk.lines] == [
        "context",
        "context",
        "context",
        "removed",
        "added",
        "context",
        "context",
        "context",
    ]
    assert hunk.lines[3].text == "line 10\n"
    assert hunk.lines[4].text == "line 10 changed\n"


def test_compute_diff_with_zero_context_shows_only_changes() -> None:
    """Context zero should drop all unchanged lines from hunks."""
    old_lines = _numbered_lines(10)
    new_lines = list(old_lines)
    new_lines[4] = "line five\n"

    result = compute_diff("".join(old_lines), "".join(new_lines), context_lines=0)

    assert result.hunks == (
        DiffHunk(
            old_start=5,
            old_count=1,
            new_start=5,
            new_count=1,
            lines=(DiffLine("removed", "line 5\n"), DiffLine("added", "line five\n")),
        ),
    )


def test_compute_diff_splits_hunks_when_gap_exceeds_twice_context() -> None:
    """Changes separated by more than 2N unchanged lines should split."""
    old_lines = _numbered_lines(15)
    new_lines = list(old_lines)
    new_lines[2] = "line 3 changed\n"
    new_lines[9] = "line 10 changed\n"

    result = compute_diff("".join(old_lines), "".join(new_lines), context_lines=2)

    assert len(result.hunks) == 2
    first, second = result.hunks
    assert (first.old_start, first.old_count) == (1, 5)
    assert (second.old_start, second.old_count) == (8, 5)
    assert first.old_start + first.old_count <= second.old_start


def test_compute_diff_merges_hunks_when_gap_fits_twice_context() -> None:
    """Changes separated by exactly 2N unchanged lines should share a hunk."""
    old_lines = _numbered_lines(12)
    new_lines = list(old_lines)
    new_lines[2] = "line 3 changed\n"
    new_lines[7] = "line 8 changed\n"

    result = compute_diff("".join(old_lines), "".join(new_lines), context_lines=2)

    assert len(result.hunks) == 1
    hunk = result.hunks[0]
    assert (hunk.old_start, hunk.old_count) == (1, 10)
    assert sum(1 for line in hunk.lines if line.tag == "context") == 8


def test_compute_diff_change_at_start_has_no_leading_context() -> None:
    """A first-line change should start the hunk at line one."""
    result = compute_diff("a\nb\nc\n", "x\nb\nc\n", context_lines=2)

    assert result.hunks == (
        DiffHunk(
            old_start=1,
            old_count=3,
            new_start=1,
            new_count=3,
            lines=(
                DiffLine("removed", "a\n"),
                DiffLine("added", "x\n"),
                DiffLine("context", "b\n"),
                DiffLine("context", "c\n"),
            ),
        ),
    )


def test_compute_diff_reports_removed_trailing_line() -> None:
    """A dropped last line should show as removed after its context."""
    result = compute_diff("a\nb\n", "a\n", context_lines=1)

    assert result.hunks == (
        DiffHunk(
            old_start=1,
            old_count=2,
            new_start=1,
            new_count=1,
            lines=(DiffLine("context", "a\n"), DiffLine("removed", "b\n")),
        ),
    )


def test_compute_diff_treats_missing_final_newline_as_change() -> None:
    """Adding a trailing newline should change the last line."""
    result = compute_diff("a\nb", "a\nb\n", context_lines=0)

    assert result.hunks == (
        DiffHunk(
            old_start=2,
            old_count=1,
            new_start=2,
            new_count=1,
            lines=(DiffLine("removed", "b"), DiffLine("added", "b\n")),
        ),
    )


def test_compute_diff_is_deterministic() -> None:
    """Repeated comparisons of the same inputs should be equal."""
    old_content = "DB: admin\nDB: local\nDB: test\n"
    new_content = "DB: admin\nDB: config\nDB: test\nDB: zeta\n"

    first = compute_diff(old_content, new_content, context_lines=1)
    second = compute_diff(old_content, new_content, context_lines=1)

    assert first == second


def test_compute_diff_rejects_negative_context() -> None:
    """Negative context counts should raise a config error."""
    with pytest.raises(MongoDiffConfigError, match="context line count"):
        compute_diff("a\n", "b\n", context_lines=-1)


def test_split_lines_keeps_terminators() -> None:
    """Lines should keep their newline and carriage return bytes."""
    assert split_lines("a\r\nb\n\nc") == ["a\r\n", "b\n", "\n", "c"]
    assert split_lines("") == []
    assert split_lines("\n") == ["\n"]

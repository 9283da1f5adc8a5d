"""Snapshot diff engine.

This module compares a previous snapshot text with a fresh capture.
It treats both inputs as ordered lines and nothing else.
"""

from __future__ import annotations

from core.errors import MongoDiffConfigError
from core.types import DiffHunk, DiffLine, DiffResult
from diffing.edit_script import compute_opcodes
from diffing.hunk_grouping import build_hunk, group_opcodes


def compute_diff(old_content: str | None, new_content: str, context_lines: int) -> DiffResult:
    """Compute a context-bounded line diff.

    Args:
        old_content: Previous snapshot text; None on the first capture.
        new_content: Freshly captured text.
        context_lines: Unchanged lines shown around each change run.

    Returns:
        Diff result. A first capture yields one all-added hunk; identical
        inputs yield no hunks.

    Raises:
        MongoDiffConfigError: If ``context_lines`` is negative.
    """
    if context_lines < 0:
        raise MongoDiffConfigError(
            f"Invalid context line count {context_lines}: expected a value >= 0."
        )
    new_lines = split_lines(new_content)
    if old_content is None:
        return DiffResult(hunks=(_first_capture_hunk(new_lines),), has_previous=False)
    old_lines = split_lines(old_content)
    opcodes = compute_opcodes(old_lines, new_lines)
    hunks = tuple(
        build_hunk(group, old_lines, new_lines)
        for group in group_opcodes(opcodes, context_lines)
    )
    return DiffResult(hunks=hunks, has_previous=True)


def split_lines(content: str) -> list[str]:
    """Split text on ``\\n`` keeping each line's terminator.

    Args:
        content: Raw text.

    Returns:
        Lines in order; the last one lacks ``\\n`` when the text does.
    """
    if not content:
        return []
    pieces = content.split("\n")
    lines = [piece + "\n" for piece in pieces[:-1]]
    if pieces[-1]:
        lines.append(pieces[-1])
    return lines


def _first_capture_hunk(new_lines: list[str]) -> DiffHunk:
    return DiffHunk(
        old_start=0,
        old_count=0,
        new_start=1 if new_lines else 0,
        new_count=len(new_lines),
        lines=tuple(DiffLine("added", text) for text in new_lines),
    )

"""Unified diff text rendering."""

from __future__ import annotations

from core.constants import NO_NEWLINE_MARKER
from core.types import DiffHunk, DiffResult

_LINE_PREFIXES = {"context": " ", "removed": "-", "added": "+"}


def render_unified_diff(result: DiffResult) -> str:
    """Render hunks as unified-diff text.

    Args:
        result: Diff result to render.

    Returns:
        Hunk headers and prefixed lines; empty when there are no hunks.
    """
    return "".join(render_hunk(hunk) for hunk in result.hunks)


def render_hunk(hunk: DiffHunk) -> str:
    """Render one hunk with its ``@@`` header."""
    parts = [
        f"@@ -{hunk.old_start},{hunk.old_count} +{hunk.new_start},{hunk.new_count} @@\n"
    ]
    for line in hunk.lines:
        parts.append(_LINE_PREFIXES[line.tag] + line.text)
        if not line.text.endswith("\n"):
            parts.append(f"\n{NO_NEWLINE_MARKER}\n")
    return "".join(parts)

"""Shared typed models.

This module defines immutable data models used by the sampler, store,
diff engine, and drift pipeline to keep interfaces explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal

DiffLineTag = Literal["context", "added", "removed"]
DriftRunState = Literal[
    "idle",
    "sampling",
    "comparing",
    "reporting",
    "persisting",
    "retaining",
    "done",
    "failed",
]


@dataclass(frozen=True)
class Snapshot:
    """One captured inventory text block before it is persisted.

    Attributes:
        name: Snapshot name partitioning the version store.
        captured_at: UTC time the sampler finished.
        content: Raw inventory text.
    """

    name: str
    captured_at: datetime
    content: str


@dataclass(frozen=True)
class VersionRecord:
    """Immutable persisted snapshot version.

    Attributes:
        name: Snapshot name.
        sequence: Per-name version number, starting at 1.
        captured_at: UTC capture timestamp.
        content: Raw content, byte-for-byte as saved.
    """

    name: str
    sequence: int
    captured_at: datetime
    content: str


@dataclass(frozen=True)
class DiffLine:
    """One tagged line inside a hunk.

    Attributes:
        tag: ``context``, ``added`` or ``removed``.
        text: Line text including its terminator when the source had one.
    """

    tag: DiffLineTag
    text: str


@dataclass(frozen=True)
class DiffHunk:
    """Contiguous change region with bounded unchanged context.

    Attributes:
        old_start: 1-based first old line, or the line before an empty range.
        old_count: Number of old lines covered.
        new_start: 1-based first new line, or the line before an empty range.
        new_count: Number of new lines covered.
        lines: Ordered tagged lines.
    """

    old_start: int
    old_count: int
    new_start: int
    new_count: int
    lines: tuple[DiffLine, ...]


@dataclass(frozen=True)
class DiffResult:
    """Ordered hunks for one comparison.

    Attributes:
        hunks: Non-overlapping hunks ordered by ``old_start``.
        has_previous: False when there was no earlier version to compare.
    """

    hunks: tuple[DiffHunk, ...]
    has_previous: bool

    @property
    def has_changes(self) -> bool:
        """Return whether any line was added or removed."""
        return any(line.tag != "context" for hunk in self.hunks for line in hunk.lines)


@dataclass(frozen=True)
class RetentionPolicy:
    """Retention settings for one snapshot name."""

    keep_count: int

    @property
    def retained_count(self) -> int:
        """Return versions to keep; the latest version always survives."""
        return max(self.keep_count, 1)


@dataclass(frozen=True)
class RetentionReport:
    """Outcome of one retention pass.

    Attributes:
        name: Snapshot name.
        kept: Surviving sequence numbers, ascending.
        deleted: Sequence numbers removed by this pass.
        failed: Sequence numbers whose removal failed.
    """

    name: str
    kept: tuple[int, ...]
    deleted: tuple[int, ...]
    failed: tuple[int, ...] = ()


@dataclass(frozen=True)
class DriftRunResult:
    """Result of one drift pipeline run.

    Attributes:
        state: Terminal run state.
        report: Text written to the report stream.
        saved_version: Version persisted by this run, if any.
        previous_sequence: Sequence compared against, if any.
        retention: Retention outcome, if retention ran and listed versions.
    """

    state: DriftRunState
    report: str
    saved_version: VersionRecord | None = None
    previous_sequence: int | None = None
    retention: RetentionReport | None = None

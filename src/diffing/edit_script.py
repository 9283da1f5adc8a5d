"""Minimal line edit scripts.

This module aligns two line sequences with Myers' O(ND) shortest edit
script and exposes the result as difflib-style opcodes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Sequence

OpcodeTag = Literal["equal", "delete", "insert", "replace"]
_EditKind = Literal["equal", "delete", "insert"]


@dataclass(frozen=True)
class Opcode:
    """One aligned block, using half-open old/new index ranges."""

    tag: OpcodeTag
    old_begin: int
    old_end: int
    new_begin: int
    new_end: int


def compute_opcodes(old_lines: Sequence[str], new_lines: Sequence[str]) -> list[Opcode]:
    """Compute opcodes for a minimal edit script between two line lists.

    Args:
        old_lines: Previous content lines.
        new_lines: Current content lines.

    Returns:
        Opcodes covering both sequences in order. Adjacent deletes and
        inserts are folded into one ``replace`` block.
    """
    prefix = _common_prefix_length(old_lines, new_lines)
    suffix = _common_suffix_length(old_lines, new_lines, prefix)
    old_middle = old_lines[prefix : len(old_lines) - suffix]
    new_middle = new_lines[prefix : len(new_lines) - suffix]
    edits: list[_EditKind] = ["equal"] * prefix
    edits.extend(_shortest_edit_script(old_middle, new_middle))
    edits.extend(["equal"] * suffix)
    return _edits_to_opcodes(edits)


def _common_prefix_length(old_lines: Sequence[str], new_lines: Sequence[str]) -> int:
    limit = min(len(old_lines), len(new_lines))
    length = 0
    while length < limit and old_lines[length] == new_lines[length]:
        length += 1
    return length


def _common_suffix_length(
    old_lines: Sequence[str], new_lines: Sequence[str], prefix: int
) -> int:
    limit = min(len(old_lines), len(new_lines)) - prefix
    length = 0
    while length < limit and old_lines[-1 - length] == new_lines[-1 - length]:
        length += 1
    return length


def _shortest_edit_script(
    old_lines: Sequence[str], new_lines: Sequence[str]
) -> list[_EditKind]:
    """Return the edit kinds of one shortest edit script.

    Each round ``d`` records, per diagonal ``k = x - y``, the furthest
    reachable old index and the diagonal it was reached from. Only moves
    inside the edit graph are considered, so the search ends exactly at
    the bottom-right corner.
    """
    old_count = len(old_lines)
    new_count = len(new_lines)
    target_diagonal = old_count - new_count
    rounds: list[dict[int, tuple[int, int]]] = []
    frontier: dict[int, int] = {}
    for depth in range(old_count + new_count + 1):
        reached: dict[int, tuple[int, int]] = {}
        for diagonal in range(-depth, depth + 1, 2):
            if depth == 0:
                step: tuple[int, int] | None = (0, 0)
            else:
                step = _furthest_step(frontier, diagonal, old_count, new_count)
            if step is None:
                continue
            x, origin = step
            y = x - diagonal
            while x < old_count and y < new_count and old_lines[x] == new_lines[y]:
                x += 1
                y += 1
            reached[diagonal] = (x, origin)
        rounds.append(reached)
        frontier = {diagonal: point[0] for diagonal, point in reached.items()}
        if frontier.get(target_diagonal) == old_count:
            return _backtrack(rounds, old_count, new_count)
    raise AssertionError("edit graph search ended without reaching the corner")


def _furthest_step(
    frontier: dict[int, int], diagonal: int, old_count: int, new_count: int
) -> tuple[int, int] | None:
    """Pick the better in-bounds predecessor for one diagonal.

    Args:
        frontier: Furthest x per diagonal from the previous round.
        diagonal: Target diagonal.
        old_count: Old sequence length.
        new_count: New sequence length.

    Returns:
        Start x on the diagonal and the origin diagonal, or None when the
        diagonal is unreachable this round.
    """
    best: tuple[int, int] | None = None
    if diagonal + 1 in frontier:
        x = frontier[diagonal + 1]
        if x - diagonal <= new_count:
            best = (x, diagonal + 1)
    if diagonal - 1 in frontier:
        x = frontier[diagonal - 1] + 1
        if x <= old_count and (best is None or x > best[0]):
            best = (x, diagonal - 1)
    return best


def _backtrack(
    rounds: list[dict[int, tuple[int, int]]], old_count: int, new_count: int
) -> list[_EditKind]:
    """Walk recorded rounds back from the corner into edit kinds."""
    edits: list[_EditKind] = []
    x, y = old_count, new_count
    for depth in range(len(rounds) - 1, 0, -1):
        diagonal = x - y
        _, origin = rounds[depth][diagonal]
        origin_x = rounds[depth - 1][origin][0]
        origin_y = origin_x - origin
        if origin == diagonal + 1:
            edit_x, edit_kind = origin_x, "insert"
        else:
            edit_x, edit_kind = origin_x + 1, "delete"
        while x > edit_x:
            edits.append("equal")
            x -= 1
            y -= 1
        edits.append(edit_kind)
        x, y = origin_x, origin_y
    edits.extend(["equal"] * x)
    edits.reverse()
    return edits


def _edits_to_opcodes(edits: list[_EditKind]) -> list[Opcode]:
    """Fold a flat edit list into equal/delete/insert/replace blocks."""
    opcodes: list[Opcode] = []
    old_index = 0
    new_index = 0
    position = 0
    while position < len(edits):
        old_begin, new_begin = old_index, new_index
        if edits[position] == "equal":
            while position < len(edits) and edits[position] == "equal":
                old_index += 1
                new_index += 1
                position += 1
            opcodes.append(Opcode("equal", old_begin, old_index, new_begin, new_index))
            continue
        while position < len(edits) and edits[position] != "equal":
            if edits[position] == "delete":
                old_index += 1
            else:
                new_index += 1
            position += 1
        opcodes.append(
            Opcode(
                _change_tag(old_index - old_begin, new_index - new_begin),
                old_begin,
                old_index,
                new_begin,
                new_index,
            )
        )
    return opcodes


def _change_tag(removed: int, added: int) -> OpcodeTag:
    if removed and added:
        return "replace"
    if removed:
        return "delete"
    return "insert"

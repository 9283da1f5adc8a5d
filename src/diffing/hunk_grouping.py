"""Context-bounded hunk grouping.

This module groups edit opcodes into hunks that carry at most
``context_lines`` unchanged lines on either side of each change run.
"""

from __future__ import annotations

from typing import Sequence

from core.types import DiffHunk, DiffLine
from diffing.edit_script import Opcode


def group_opcodes(opcodes: Sequence[Opcode], context_lines: int) -> list[list[Opcode]]:
    """Split opcodes into hunk groups.

    Change runs separated by at most ``2 * context_lines`` unchanged lines
    share one group; longer unchanged gaps start a new group.

    Args:
        opcodes: Opcodes covering both sequences.
        context_lines: Unchanged lines kept around each change run.

    Returns:
        Groups of opcodes, each trimmed to its bounded context. Empty when
        no opcode is a change.
    """
    if all(opcode.tag == "equal" for opcode in opcodes):
        return []
    codes = list(opcodes)
    if codes[0].tag == "equal":
        codes[0] = _keep_tail(codes[0], context_lines)
    if codes[-1].tag == "equal":
        codes[-1] = _keep_head(codes[-1], context_lines)
    groups: list[list[Opcode]] = []
    group: list[Opcode] = []
    for opcode in codes:
        if opcode.tag == "equal" and opcode.old_end - opcode.old_begin > 2 * context_lines:
            group.append(_keep_head(opcode, context_lines))
            groups.append(group)
            group = []
            opcode = _keep_tail(opcode, context_lines)
        group.append(opcode)
    if group and not (len(group) == 1 and group[0].tag == "equal"):
        groups.append(group)
    return groups


def build_hunk(
    group: Sequence[Opcode], old_lines: Sequence[str], new_lines: Sequence[str]
) -> DiffHunk:
    """Materialize one opcode group into a hunk.

    Args:
        group: Opcodes of one hunk, in order.
        old_lines: Previous content lines.
        new_lines: Current content lines.

    Returns:
        Hunk with unified-diff line numbering.
    """
    lines: list[DiffLine] = []
    for opcode in group:
        if opcode.tag == "equal":
            lines.extend(
                DiffLine("context", text)
                for text in old_lines[opcode.old_begin : opcode.old_end]
            )
            continue
        lines.extend(
            DiffLine("removed", text) for text in old_lines[opcode.old_begin : opcode.old_end]
        )
        lines.extend(
            DiffLine("added", text) for text in new_lines[opcode.new_begin : opcode.new_end]
        )
    old_begin, old_end = group[0].old_begin, group[-1].old_end
    new_begin, new_end = group[0].new_begin, group[-1].new_end
    return DiffHunk(
        old_start=_range_start(old_begin, old_end),
        old_count=old_end - old_begin,
        new_start=_range_start(new_begin, new_end),
        new_count=new_end - new_begin,
        lines=tuple(lines),
    )


def _range_start(begin: int, end: int) -> int:
    # Empty ranges point at the line after which the change happens.
    return begin + 1 if end > begin else begin


def _keep_head(opcode: Opcode, context_lines: int) -> Opcode:
    return Opcode(
        "equal",
        opcode.old_begin,
        min(opcode.old_end, opcode.old_begin + context_lines),
        opcode.new_begin,
        min(opcode.new_end, opcode.new_begin + context_lines),
    )


def _keep_tail(opcode: Opcode, context_lines: int) -> Opcode:
    return Opcode(
        "equal",
        max(opcode.old_begin, opcode.old_end - context_lines),
        opcode.old_end,
        max(opcode.new_begin, opcode.new_end - context_lines),
        opcode.new_end,
    )

"""Inventory text formatting.

This module turns raw MongoDB command payloads into stable text lines.
Every section is sorted explicitly because driver result order is not
guaranteed, and line diffs are only meaningful on a stable order.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping


def format_inventory(
    database_names: Iterable[str],
    users: Iterable[Mapping[str, Any]],
    repl_config: Mapping[str, Any],
    repl_status: Mapping[str, Any],
) -> str:
    """Format a full inventory block.

    Args:
        database_names: Names from ``listDatabases``.
        users: ``users`` array from ``usersInfo``.
        repl_config: ``config`` document from ``replSetGetConfig``.
        repl_status: Reply of ``replSetGetStatus``.

    Returns:
        Newline-terminated lines: databases, users with roles, member
        settings, then member runtime status.
    """
    lines = [
        *format_database_lines(database_names),
        *format_user_lines(users),
        *format_member_config_lines(repl_config),
        *format_member_status_lines(repl_status),
    ]
    return "".join(f"{line}\n" for line in lines)


def format_database_lines(database_names: Iterable[str]) -> list[str]:
    """Format one ``DB:`` line per database, sorted by name."""
    return [f"DB: {name}" for name in sorted(database_names)]


def format_user_lines(users: Iterable[Mapping[str, Any]]) -> list[str]:
    """Format ``USER:`` lines, each followed by its sorted ``USER_ROLE:`` lines."""
    lines: list[str] = []
    ordered_users = sorted(
        users, key=lambda user: (_text(user.get("db")), _text(user.get("user")))
    )
    for user in ordered_users:
        db = _text(user.get("db"))
        user_name = _text(user.get("user"))
        lines.append(f"USER: db={db}, user={user_name}")
        roles = sorted(
            user.get("roles") or [],
            key=lambda role: (_text(role.get("db")), _text(role.get("role"))),
        )
        for role in roles:
            lines.append(
                f"USER_ROLE: db={db}, user={user_name}, "
                f"role={_text(role.get('db'))}/{_text(role.get('role'))}"
            )
    return lines


def format_member_config_lines(repl_config: Mapping[str, Any]) -> list[str]:
    """Format ``SETTING:`` lines for configured members, sorted by id."""
    lines: list[str] = []
    for member in _sorted_members(repl_config):
        lines.append(
            f"SETTING: id={_number(member.get('_id'))}, "
            f"host={_text(member.get('host'))}, "
            f"vote={_number(member.get('votes'))}, "
            f"arbiterOnly={_flag(member.get('arbiterOnly'))}, "
            f"buildIndexes={_flag(member.get('buildIndexes'))}, "
            f"hidden={_flag(member.get('hidden'))}, "
            f"priority={_number(member.get('priority'))}"
        )
    return lines


def format_member_status_lines(repl_status: Mapping[str, Any]) -> list[str]:
    """Format ``REPL_STAT:`` lines for member runtime status, sorted by id."""
    lines: list[str] = []
    for member in _sorted_members(repl_status):
        lines.append(
            f"REPL_STAT: id={_number(member.get('_id'))}, "
            f"name={_text(member.get('name'))}, "
            f"state={_text(member.get('stateStr'))}, "
            f"health={_number(member.get('health'))}, "
            f"syncSourceHost={_text(member.get('syncSourceHost'))}, "
            f"syncingTo={_text(member.get('syncingTo'))}"
        )
    return lines


def _sorted_members(document: Mapping[str, Any]) -> list[Mapping[str, Any]]:
    members = document.get("members") or []
    return sorted(members, key=lambda member: _sort_number(member.get("_id")))


def _text(value: object) -> str:
    return "" if value is None else str(value)


def _flag(value: object) -> str:
    return "true" if value else "false"


def _number(value: object) -> str:
    """Render integral numbers without a fractional part; missing is 0."""
    if value is None:
        return "0"
    if isinstance(value, bool):
        return str(int(value))
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _sort_number(value: object) -> float:
    if isinstance(value, (int, float)):
        return float(value)
    return 0.0

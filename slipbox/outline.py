"""Org heading parsing and line-level outline helpers."""

from __future__ import annotations

from slipbox.model import WriteError

_TODO_KEYWORDS = frozenset({"TODO", "DONE", "NEXT", "WAITING", "STARTED", "CANCELLED", "HOLD"})
_PLANNING_PREFIXES = ("SCHEDULED:", "DEADLINE:", "CLOSED:")


def heading_level(line: str) -> int | None:
    """Number of leading stars of a heading line, or None if not a heading."""
    trimmed = line.lstrip()
    stars = len(trimmed) - len(trimmed.lstrip("*"))
    if stars == 0 or stars >= len(trimmed) or not trimmed[stars].isspace():
        return None
    return stars


def _relevel(line: str, level: int, new_level: int) -> str:
    return "*" * new_level + line.lstrip()[level:]


def shift_subtree_levels(lines: list[str], desired_root_level: int) -> list[str]:
    """Shift every heading so that the first line sits at the desired level."""
    current_root = heading_level(lines[0]) if lines else None
    if current_root is None:
        raise WriteError("subtree must begin with a heading")
    delta = desired_root_level - current_root
    shifted = []
    for line in lines:
        level = heading_level(line)
        shifted.append(line if level is None else _relevel(line, level, max(level + delta, 1)))
    return shifted


def parse_colon_tags(text: str) -> list[str]:
    """Tags from a ":a:b:" string; an empty list if it is not one."""
    trimmed = text.strip()
    if not trimmed.startswith(":") or not trimmed.endswith(":"):
        return []
    return [
        part
        for part in trimmed.split(":")
        if part and not any(character.isspace() for character in part)
    ]


def _dedup(values: list[str]) -> list[str]:
    unique: list[str] = []
    for value in values:
        if value and value not in unique:
            unique.append(value)
    return unique


def split_heading_tags(text: str) -> tuple[str, list[str]]:
    """Split heading text into its title and trailing colon tags."""
    position = text.rfind(" :")
    if position < 0:
        return text.strip(), []
    tags = parse_colon_tags(text[position + 1 :])
    if not tags:
        return text.strip(), []
    return text[:position].rstrip(), _dedup(tags)


def split_todo_keyword(text: str) -> tuple[str | None, str]:
    """Split a leading TODO-style keyword off heading text."""
    first, separator, rest = text.partition(" ")
    if separator and first in _TODO_KEYWORDS:
        return first, rest.lstrip()
    return None, text


def heading_title(line: str) -> str | None:
    """Title of a heading without stars, keyword or tags."""
    level = heading_level(line)
    if level is None:
        return None
    text = line.lstrip()[level + 1 :].strip()
    title, _ = split_heading_tags(text)
    _, title = split_todo_keyword(title)
    title = title.strip()
    return title or None


def is_heading_planning_line(line: str) -> bool:
    """Whether the line is a SCHEDULED/DEADLINE/CLOSED planning line."""
    return line.lstrip().startswith(_PLANNING_PREFIXES)


def promote_subtree_lines(lines: list[str]) -> list[str]:
    """Raise every heading by one level, never above level one."""
    promoted = []
    for line in lines:
        level = heading_level(line)
        promoted.append(line if level is None else _relevel(line, level, max(level - 1, 1)))
    return promoted


def demote_all_headings(lines: list[str]) -> list[str]:
    """Lower every heading by one level."""
    demoted = []
    for line in lines:
        level = heading_level(line)
        demoted.append(line if level is None else _relevel(line, level, level + 1))
    return demoted


def format_colon_tags(values: list[str]) -> str:
    """Render tags as ":a:b:"."""
    return ":" + ":".join(values) + ":"


def format_heading_line(level: int, title: str, tags: list[str]) -> str:
    """Render a heading line with optional trailing tags."""
    line = f"{'*' * level} {title}"
    return f"{line} {format_colon_tags(tags)}" if tags else line


def render_lines(lines: list[str], had_trailing_newline: bool) -> str:
    """Join lines, ending the text with a newline unless it is empty."""
    rendered = "\n".join(lines)
    if rendered and (had_trailing_newline or not rendered.endswith("\n")):
        rendered += "\n"
    return rendered
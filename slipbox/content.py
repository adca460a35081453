"""Placing captured content into an Org document.

Content can become a new entry (heading), plain text, a list item or a
table row, under either the whole file or one heading.
"""

from __future__ import annotations

import re
import string
from dataclasses import dataclass, field

from slipbox.document import OrgDocument
from slipbox.model import CaptureContentType, WriteError
from slipbox.outline import heading_level
from slipbox.paths import normalized_title

_DIGITS = frozenset(string.digits)
_LETTERS = frozenset(string.ascii_letters)
_SIGNED_INTEGER = re.compile(r"[+-]?[0-9]+")
_HLINE_CHARACTERS = frozenset("-+: ")


@dataclass(frozen=True)
class CaptureTarget:
    """Where a capture goes: the whole file, or the heading at a 1-based line."""

    relative_path: str
    node_key: str
    line_number: int | None = None
    level: int = 0


@dataclass(frozen=True)
class _OrderedMarker:
    value: int
    alpha: bool = False
    uppercase: bool = False

    def text(self) -> str:
        if not self.alpha:
            return str(self.value)
        character = chr(self.value)
        if self.uppercase and character.isascii():
            return character.upper()
        return character

    def advanced(self) -> _OrderedMarker:
        return _OrderedMarker(self.value + 1, self.alpha, self.uppercase)


@dataclass(frozen=True)
class _Unordered:
    bullet: str


@dataclass(frozen=True)
class _Ordered:
    start: _OrderedMarker
    delimiter: str


@dataclass(frozen=True)
class _ListItem:
    indent: int
    style: _Unordered | _Ordered
    checkbox: bool
    content_offset: int


@dataclass(frozen=True)
class _ListContext:
    start: int
    end: int
    indent: int
    style: _Unordered | _Ordered


@dataclass
class _TableContext:
    start: int
    end: int
    hlines: list[int] = field(default_factory=list)
    data_lines: list[int] = field(default_factory=list)


def capture_entry(
    document: OrgDocument,
    target: CaptureTarget,
    content: str,
    title: str,
    prepend: bool,
    empty_lines_before: int,
    empty_lines_after: int,
) -> str:
    """Insert the content as a new heading entry; return its node key."""
    is_file = target.line_number is None
    desired_level = 1 if is_file else target.level + 1
    block = _entry_capture_lines(content, title, desired_level)
    if is_file:
        insert_index = document.file_entry_insert_index(prepend)
    else:
        insert_index = document.heading_entry_insert_index(
            target.line_number, target.level, prepend
        )
    line_number = document.insert_block(
        insert_index, block, empty_lines_before, empty_lines_after
    )
    relative_path = target.relative_path.replace("\\", "/")
    return f"heading:{relative_path}:{line_number}"


def capture_plain(
    document: OrgDocument,
    target: CaptureTarget,
    content: str,
    prepend: bool,
    empty_lines_before: int,
    empty_lines_after: int,
) -> str:
    """Insert the content as plain text in the target's body."""
    block = _trimmed_capture_lines(content)
    if not block:
        return target.node_key

    if target.line_number is None:
        index = _file_plain_prepend_index(document) if prepend else len(document.lines)
    else:
        body_start, body_end = document.heading_body_bounds(target.line_number, target.level)
        index = body_start if prepend else body_end
    document.insert_block(index, block, empty_lines_before, empty_lines_after)
    return target.node_key


def capture_list_item(
    document: OrgDocument,
    target: CaptureTarget,
    content: str,
    capture_type: CaptureContentType,
    prepend: bool,
    empty_lines_before: int,
    empty_lines_after: int,
) -> str:
    """Add the content as an item of the target's first list, or start a list."""
    search_start, search_end, fallback_index = _list_search_bounds(document, target, prepend)
    context = _find_list_context(document.lines, search_start, search_end)
    if context is not None:
        index = context.start if prepend else context.end
        blank_before = 0 if prepend else min(empty_lines_before, 1)
        blank_after = min(empty_lines_after, 1) if prepend else 0
    else:
        index, blank_before, blank_after = fallback_index, empty_lines_before, empty_lines_after

    block = _list_capture_lines(content, capture_type, context)
    document.insert_block(index, block, blank_before, blank_after)

    if context is not None and isinstance(context.style, _Ordered):
        _renumber_ordered_list(
            document,
            min(context.start, index),
            context.style.start,
            context.style.delimiter,
        )
    return target.node_key


def capture_table_line(
    document: OrgDocument,
    target: CaptureTarget,
    content: str,
    prepend: bool,
    table_line_pos: str | None,
) -> str:
    """Add the content as a row of the target's first table, creating one if needed."""
    search_start, search_end = _table_search_bounds(document, target)
    table = _find_table_context(document.lines, search_start, search_end)
    if table is None:
        document.insert_block(search_end, ["|   |", "|---|"], 0, 0)
        table = _find_table_context(document.lines, search_end, len(document.lines))
        if table is None:
            raise WriteError("failed to prepare capture table")
    index = _table_insertion_index(table, prepend, table_line_pos)
    document.insert_block(index, [_table_capture_line(content)], 0, 0)
    return target.node_key


def _split_lines(content: str) -> list[str]:
    parts = content.split("\n")
    last = parts.pop()
    lines = [part[:-1] if part.endswith("\r") else part for part in parts]
    if last:
        lines.append(last)
    return lines


def _trimmed_capture_lines(content: str) -> list[str]:
    lines = _split_lines(content)
    start = 0
    while start < len(lines) and not lines[start].strip():
        start += 1
    end = len(lines)
    while end > start and not lines[end - 1].strip():
        end -= 1
    return lines[start:end]


def _entry_capture_lines(content: str, title: str, desired_level: int) -> list[str]:
    lines = _trimmed_capture_lines(content)
    title = normalized_title(title)
    if not lines:
        return [f"{'*' * desired_level} {title}"]

    current_level = heading_level(lines[0])
    if current_level is None:
        return [f"{'*' * desired_level} {title}", *lines]

    delta = desired_level - current_level
    shifted = []
    for line in lines:
        level = heading_level(line)
        if level is None:
            shifted.append(line)
        else:
            shifted.append("*" * max(level + delta, 1) + line.lstrip()[level:])

    first_level = heading_level(shifted[0])
    if first_level is not None and not shifted[0][first_level:].strip():
        shifted[0] = f"{'*' * first_level} {title}"
    return shifted


def _is_org_comment_line(line: str) -> bool:
    return line.startswith(("# ", "#\t"))


def _is_horizontal_rule(line: str) -> bool:
    trimmed = line.strip()
    return len(trimmed) >= 5 and set(trimmed) == {"-"}


def _skip_until(lines: list[str], index: int, is_end) -> int:
    while index < len(lines) and not is_end(lines[index]):
        index += 1
    return index + 1 if index < len(lines) else index


def _file_plain_prepend_index(document: OrgDocument) -> int:
    lines = document.lines
    index = 0
    while True:
        while index < len(lines) and not lines[index].strip():
            index += 1
        if index >= len(lines):
            return index

        trimmed = lines[index].lstrip()
        if trimmed.startswith(("#+begin_comment", "#+BEGIN_COMMENT")):
            index = _skip_until(
                lines,
                index + 1,
                lambda line: line.lstrip().startswith(("#+end_comment", "#+END_COMMENT")),
            )
            continue
        if trimmed.startswith("#+") or _is_org_comment_line(trimmed) or _is_horizontal_rule(
            trimmed
        ):
            index += 1
            continue
        if trimmed.isascii() and trimmed.upper() == ":PROPERTIES:":
            index = _skip_until(
                lines,
                index + 1,
                lambda line: line.strip().isascii() and line.strip().upper() == ":END:",
            )
            continue
        return index


def _list_search_bounds(
    document: OrgDocument, target: CaptureTarget, prepend: bool
) -> tuple[int, int, int]:
    if target.line_number is None:
        end = len(document.lines)
        return 0, end, 0 if prepend else end
    body_start, body_end = document.heading_body_bounds(target.line_number, target.level)
    return body_start, body_end, body_start if prepend else body_end


def _table_search_bounds(document: OrgDocument, target: CaptureTarget) -> tuple[int, int]:
    if target.line_number is None:
        return 0, len(document.lines)
    return document.heading_body_bounds(target.line_number, target.level)


def _leading_spaces(line: str) -> int:
    return len(line) - len(line.lstrip(" "))


def _parse_checkbox_prefix(text: str) -> tuple[bool, int]:
    if len(text) >= 3 and text[0] == "[" and text[1].isascii() and text[2] == "]":
        if len(text) >= 4 and text[3] == " ":
            return True, 4
        return True, 3
    return False, 0


def _parse_list_item_prefix(line: str) -> _ListItem | None:
    indent = _leading_spaces(line)
    trimmed = line[indent:].rstrip("\r")
    if not trimmed:
        return None
    first = trimmed[0]

    if first in "-+*":
        if first == "*" and indent == 0:
            return None
        rest = trimmed[1:]
        if not rest.startswith(" "):
            return None
        checkbox, consumed = _parse_checkbox_prefix(rest.lstrip(" "))
        return _ListItem(indent, _Unordered(first), checkbox, indent + 2 + consumed)

    if first in _DIGITS or first in _LETTERS:
        marker_len = 1
        if first in _DIGITS:
            marker_len = len(trimmed) - len(trimmed.lstrip(string.digits))
        if len(trimmed) < marker_len + 2:
            return None
        delimiter = trimmed[marker_len]
        spacing = trimmed[marker_len + 1]
        if delimiter not in ".)" or not spacing.isspace() or not spacing.isascii():
            return None
        checkbox, consumed = _parse_checkbox_prefix(trimmed[marker_len + 2 :])
        if first in _DIGITS:
            start = _OrderedMarker(int(trimmed[:marker_len]))
        else:
            start = _OrderedMarker(ord(first.lower()), alpha=True, uppercase=first.isupper())
        return _ListItem(
            indent, _Ordered(start, delimiter), checkbox, indent + marker_len + 2 + consumed
        )

    return None


def _find_list_context(lines: list[str], start: int, end: int) -> _ListContext | None:
    end = min(end, len(lines))
    for index in range(start, end):
        item = _parse_list_item_prefix(lines[index])
        if item is None:
            continue
        end_index = end
        for cursor in range(index + 1, end):
            line = lines[cursor]
            if not line.lstrip():
                end_index = cursor
                break
            if (
                _parse_list_item_prefix(line) is not None
                or _leading_spaces(line) > item.indent
                or line.startswith("\t")
            ):
                continue
            end_index = cursor
            break
        return _ListContext(index, end_index, item.indent, item.style)
    return None


def _list_marker_prefix(style: _Unordered | _Ordered, capture_type: CaptureContentType) -> str:
    checkbox = " [ ]" if capture_type is CaptureContentType.CHECKITEM else ""
    if isinstance(style, _Unordered):
        return style.bullet + checkbox
    return style.start.text() + style.delimiter + checkbox


def _format_list_line(indent: int, marker: str, text: str) -> str:
    if not text:
        return f"{' ' * indent}{marker} "
    return f"{' ' * indent}{marker} {text}"


def _strip_list_marker(line: str) -> str:
    item = _parse_list_item_prefix(line)
    if item is not None:
        return line[item.content_offset :].lstrip()
    return line.lstrip()


def _list_capture_lines(
    content: str, capture_type: CaptureContentType, existing: _ListContext | None
) -> list[str]:
    lines = _trimmed_capture_lines(content) or [""]
    first, rest = _strip_list_marker(lines[0]), lines[1:]

    if existing is not None:
        marker, indent = _list_marker_prefix(existing.style, capture_type), existing.indent
    elif capture_type is CaptureContentType.CHECKITEM:
        marker, indent = "- [ ]", 0
    elif capture_type is CaptureContentType.ITEM:
        marker, indent = "-", 0
    else:
        raise WriteError("unsupported list capture type")

    continuation = " " * (indent + len(marker) + 1)
    return [_format_list_line(indent, marker, first), *(continuation + line for line in rest)]


def _renumber_ordered_list(
    document: OrgDocument, start_index: int, ordered_start: _OrderedMarker, delimiter: str
) -> None:
    context = _find_list_context(document.lines, start_index, len(document.lines))
    if context is None or not isinstance(context.style, _Ordered):
        return
    current = ordered_start
    for index in range(context.start, context.end):
        line = document.lines[index]
        item = _parse_list_item_prefix(line)
        if item is None or not isinstance(item.style, _Ordered) or item.indent != context.indent:
            continue
        text = line[item.content_offset :].lstrip()
        prefix = f"{current.text()}{delimiter}" + (" [ ]" if item.checkbox else "")
        document.lines[index] = _format_list_line(context.indent, prefix, text)
        current = current.advanced()


def _is_table_hline(line: str) -> bool:
    trimmed = line.strip()
    if not trimmed.startswith("|"):
        return False
    inner = trimmed[1:]
    if not inner.endswith("|"):
        return False
    content = inner[:-1].strip()
    return bool(content) and set(content) <= _HLINE_CHARACTERS and "-" in content


def _find_table_context(lines: list[str], start: int, end: int) -> _TableContext | None:
    end = min(end, len(lines))
    table_start = next(
        (index for index in range(start, end) if lines[index].lstrip().startswith("|")),
        None,
    )
    if table_start is None:
        return None
    table = _TableContext(table_start, end)
    for index in range(table_start, end):
        line = lines[index]
        if not line.lstrip().startswith("|"):
            table.end = index
            break
        if _is_table_hline(line):
            table.hlines.append(index)
        else:
            table.data_lines.append(index)
    return table


def _table_insertion_index(
    table: _TableContext, prepend: bool, table_line_pos: str | None
) -> int:
    if table_line_pos is not None:
        return _table_line_position_index(table, table_line_pos)
    if not prepend:
        return table.end
    if table.hlines:
        first_hline = table.hlines[0]
        return next((line for line in table.data_lines if line > first_hline), table.end)
    return table.start


def _table_line_position_index(table: _TableContext, spec: str) -> int:
    error = WriteError(f'invalid table line specification "{spec}"')
    hline_count = len(spec) - len(spec.lstrip("I"))
    if hline_count == 0:
        raise error
    offset = spec[hline_count:]
    if not _SIGNED_INTEGER.fullmatch(offset):
        raise error
    delta = int(offset)
    if hline_count > len(table.hlines):
        raise error
    hline = table.hlines[hline_count - 1]
    index = hline + (delta + 1 if delta < 0 else delta)
    if index < table.start or index > table.end:
        raise error
    return index


def _table_capture_line(content: str) -> str:
    lines = _trimmed_capture_lines(content)
    line = lines[0] if lines else ""
    if line.lstrip().startswith("|"):
        return line
    if not line.strip():
        return "|  |"
    return f"| {line.strip()} |"
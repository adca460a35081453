"""Property drawers and file keywords of Org documents.

The functions taking a list of lines change that list in place.
"""

from __future__ import annotations

import unicodedata

from slipbox.model import WriteError
from slipbox.outline import format_colon_tags, heading_level

_QUOTE_ESCAPES = {
    '"': '\\"',
    "\\": "\\\\",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\0": "\\0",
}


def _quote(value: str) -> str:
    pieces = []
    for character in value:
        if character in _QUOTE_ESCAPES:
            pieces.append(_QUOTE_ESCAPES[character])
        elif unicodedata.category(character) == "Cc":
            pieces.append(f"\\u{{{ord(character):x}}}")
        else:
            pieces.append(character)
    return '"' + "".join(pieces) + '"'


def _strip_keyword(line: str, keyword: str) -> str | None:
    if len(line) < len(keyword):
        return None
    prefix = line[: len(keyword)]
    if prefix.isascii() and prefix.lower() == keyword.lower():
        return line[len(keyword) :]
    return None


def _is_marker(line: str, marker: str) -> bool:
    stripped = line.strip()
    return stripped.isascii() and stripped.upper() == marker


def format_property_values(values: list[str]) -> str:
    """Join values with spaces, quoting those holding whitespace or quotes."""
    return " ".join(
        _quote(value)
        if any(character.isspace() or character == '"' for character in value)
        else value
        for value in values
    )


def property_value(values: list[str]) -> str | None:
    """A property drawer value for the list, or None when it is empty."""
    return format_property_values(values) if values else None


def keyword_value(values: list[str]) -> str | None:
    """A colon-tag keyword value for the list, or None when it is empty."""
    return format_colon_tags(values) if values else None


def _file_keyword_limit(lines: list[str]) -> int:
    return next(
        (index for index, line in enumerate(lines) if heading_level(line) is not None),
        len(lines),
    )


def _file_keyword_index(lines: list[str], keyword: str) -> int | None:
    needle = f"#+{keyword}:"
    return next(
        (
            index
            for index in range(_file_keyword_limit(lines))
            if _strip_keyword(lines[index].lstrip(), needle) is not None
        ),
        None,
    )


def file_keyword_value(lines: list[str], keyword: str) -> str | None:
    """Value of a #+keyword: line before the first heading."""
    index = _file_keyword_index(lines, keyword)
    if index is None:
        return None
    return _strip_keyword(lines[index].lstrip(), f"#+{keyword}:").strip()


def remove_file_keyword(lines: list[str], keyword: str) -> None:
    """Remove the first #+keyword: line before the first heading."""
    index = _file_keyword_index(lines, keyword)
    if index is not None:
        del lines[index]


def set_file_keyword_value(lines: list[str], keyword: str, value: str | None) -> None:
    """Set, replace or (with None) remove a file keyword."""
    rendered = None if value is None else f"#+{keyword.lower()}: {value}"
    index = _file_keyword_index(lines, keyword)
    if index is not None:
        if rendered is None:
            del lines[index]
        else:
            lines[index] = rendered
        return
    if rendered is not None:
        lines.insert(file_property_insert_index(lines), rendered)


def file_property_insert_index(lines: list[str]) -> int:
    """Index after leading blank lines and #+ keyword lines."""
    index = 0
    while index < len(lines) and not lines[index].strip():
        index += 1
    while index < len(lines) and lines[index].lstrip().startswith("#+"):
        index += 1
    return index


def _drawer_end(lines: list[str], drawer_start: int) -> tuple[int, int] | None:
    if drawer_start < len(lines) and _is_marker(lines[drawer_start], ":PROPERTIES:"):
        for end in range(drawer_start + 1, len(lines)):
            if _is_marker(lines[end], ":END:"):
                return drawer_start, end + 1
    return None


def file_property_drawer_bounds(lines: list[str]) -> tuple[int, int] | None:
    """Start index and end (exclusive) of the file-level property drawer."""
    index = file_property_insert_index(lines)
    while index < len(lines) and not lines[index].strip():
        index += 1
    return _drawer_end(lines, index)


def heading_property_drawer_bounds(
    lines: list[str], heading_index: int
) -> tuple[int, int] | None:
    """Start index and end (exclusive) of a heading's property drawer."""
    return _drawer_end(lines, heading_index + 1)


def _drawer_value(lines: list[str], bounds: tuple[int, int] | None, name: str) -> str | None:
    if bounds is None:
        return None
    start, end = bounds
    key = f":{name}:"
    for line in lines[start + 1 : end - 1]:
        value = _strip_keyword(line.strip(), key)
        if value is not None:
            return value.strip()
    return None


def _update_drawer(
    lines: list[str], start: int, end: int, name: str, value: str | None
) -> None:
    key = f":{name}:"
    for index in range(start + 1, end - 1):
        if _strip_keyword(lines[index].strip(), key) is None:
            continue
        if value is not None:
            lines[index] = f":{name}: {value}"
        else:
            del lines[index]
            if start + 1 == end - 2:
                del lines[start : start + 2]
        return
    if value is not None:
        lines.insert(end - 1, f":{name}: {value}")


def file_property_value(lines: list[str], name: str) -> str | None:
    """Value of a property in the file-level drawer."""
    return _drawer_value(lines, file_property_drawer_bounds(lines), name)


def heading_property_value(lines: list[str], heading_index: int, name: str) -> str | None:
    """Value of a property in the drawer under a heading."""
    return _drawer_value(lines, heading_property_drawer_bounds(lines, heading_index), name)


def set_file_property_value(lines: list[str], name: str, value: str | None) -> None:
    """Set, replace or (with None) remove a file-level property."""
    bounds = file_property_drawer_bounds(lines)
    if bounds is not None:
        _update_drawer(lines, bounds[0], bounds[1], name, value)
        return
    if value is None:
        return
    insert_index = file_property_insert_index(lines)
    drawer = [":PROPERTIES:", f":{name}: {value}", ":END:"]
    if insert_index == len(lines) or lines[insert_index].strip():
        drawer.append("")
    lines[insert_index:insert_index] = drawer


def ensure_heading_property_value(
    lines: list[str], heading_index: int, name: str, value: str | None
) -> None:
    """Set, replace or (with None) remove a property under a heading."""
    if heading_index >= len(lines) or heading_level(lines[heading_index]) is None:
        raise WriteError(f"heading line {heading_index + 1} is out of range")
    bounds = heading_property_drawer_bounds(lines, heading_index)
    if bounds is not None:
        _update_drawer(lines, bounds[0], bounds[1], name, value)
        return
    if value is not None:
        lines[heading_index + 1 : heading_index + 1] = [
            ":PROPERTIES:",
            f":{name}: {value}",
            ":END:",
        ]
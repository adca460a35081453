"""An Org file held as lines, with outline and property editing."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Callable, Iterable

from slipbox.model import NodeKind, NodeRecord, WriteError
from slipbox.outline import (
    demote_all_headings,
    format_colon_tags,
    format_heading_line,
    heading_level,
    heading_title,
    is_heading_planning_line,
    parse_colon_tags,
    promote_subtree_lines,
    render_lines,
    split_heading_tags,
    split_todo_keyword,
)
from slipbox.paths import default_capture_file_title
from slipbox.properties import (
    ensure_heading_property_value,
    file_keyword_value,
    file_property_drawer_bounds,
    file_property_insert_index,
    file_property_value,
    heading_property_value,
    keyword_value,
    property_value,
    remove_file_keyword,
    set_file_keyword_value,
    set_file_property_value,
)


def _split_lines(source: str) -> list[str]:
    parts = source.split("\n")
    last = parts.pop()
    lines = [part[:-1] if part.endswith("\r") else part for part in parts]
    if last:
        lines.append(last)
    return lines


def _heading_parts(line: str, level: int) -> tuple[str, list[str]]:
    text = line.lstrip()[level + 1 :].strip()
    title, tags = split_heading_tags(text)
    _, title = split_todo_keyword(title)
    return title.strip(), tags


def _new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class OrgDocument:
    """The lines of an Org file and whether it ended with a newline."""

    lines: list[str] = field(default_factory=list)
    had_trailing_newline: bool = False

    @classmethod
    def from_source(cls, source: str) -> OrgDocument:
        """Parse source text into lines."""
        return cls(_split_lines(source), source.endswith("\n"))

    @classmethod
    def from_extracted_subtree(cls, subtree_lines: list[str], explicit_id: str) -> OrgDocument:
        """Build a file note from a subtree whose first line is its heading."""
        if not subtree_lines:
            raise WriteError("subtree must begin with a heading")
        level = heading_level(subtree_lines[0])
        if level is None:
            raise WriteError("subtree must begin with a heading")
        title, tags = _heading_parts(subtree_lines[0], level)
        if not title:
            raise WriteError("subtree heading must include a title")

        lines = [f"#+title: {title}"]
        if tags:
            lines.append(f"#+filetags: {format_colon_tags(tags)}")
        lines.extend(promote_subtree_lines(list(subtree_lines[1:])))
        document = cls(lines, True)
        document.set_file_property("ID", explicit_id)
        return document

    def render(self) -> str:
        """The document as text."""
        if not self.lines:
            return ""
        return render_lines(self.lines, self.had_trailing_newline)

    def has_meaningful_content(self) -> bool:
        """Whether any line holds more than whitespace."""
        return any(line.strip() for line in self.lines)

    def demote_entire_file(self, relative_path: str) -> None:
        """Turn the file into a single top-level heading holding its content."""
        title = self.file_keyword_value("title")
        if title is None or not title.strip():
            title = default_capture_file_title(relative_path, "")
        tags = self.filetags()
        self.set_file_keyword("title", None)
        self.set_file_keyword("filetags", None)
        self.lines = demote_all_headings(self.lines)
        self.lines.insert(0, format_heading_line(1, title, tags))

    def promote_entire_file(self) -> None:
        """Turn a file made of one top-level heading into a file note."""
        if not self.is_promoteable():
            raise WriteError(
                "cannot promote: multiple root headings or there is extra file-level text"
            )
        heading = self.lines.pop(0)
        title_text, tags = split_heading_tags(heading.lstrip()[2:].strip())
        _, title = split_todo_keyword(title_text)
        title = title.strip()
        if not title:
            raise WriteError("cannot promote: top-level heading must have a title")
        self.lines = promote_subtree_lines(self.lines)
        self.set_file_keyword("title", title)
        self.set_file_keyword("filetags", keyword_value(tags))

    def subtree_lines(self, node: NodeRecord) -> tuple[list[str], str]:
        """Lines of the node as a heading subtree carrying an ID, and that ID."""
        explicit_id = node.explicit_id if node.explicit_id is not None else _new_id()
        if node.kind is NodeKind.HEADING:
            start, end = self.subtree_range(node.line)
            lines = self.lines[start:end]
        else:
            lines = list(self.lines)
            remove_file_keyword(lines, "title")
            remove_file_keyword(lines, "filetags")
            lines = demote_all_headings(lines)
            lines.insert(0, format_heading_line(1, node.title, node.tags))
        ensure_heading_property_value(lines, 0, "ID", explicit_id)
        return lines, explicit_id

    def insert_block(
        self,
        index: int,
        block: Iterable[str],
        blank_lines_before: int,
        blank_lines_after: int,
    ) -> int:
        """Insert lines with padding blanks; return the 1-based first content line."""
        add_before = max(blank_lines_before - self._blank_lines_before(index), 0)
        add_after = max(blank_lines_after - self._blank_lines_after(index), 0)
        self.lines[index:index] = [""] * add_before + list(block) + [""] * add_after
        return index + add_before + 1

    def remove_range(self, start: int, end: int) -> None:
        """Delete the lines from start up to end."""
        del self.lines[start:end]

    def insert_subtree(self, index: int, target_kind: NodeKind, subtree_lines: list[str]) -> None:
        """Insert subtree lines, separated by a blank line under a file target."""
        inserted = list(subtree_lines)
        if (
            target_kind is NodeKind.FILE
            and 0 < index <= len(self.lines)
            and self.lines[index - 1].strip()
        ):
            inserted.insert(0, "")
        self.lines[index:index] = inserted

    def _blank_lines_before(self, index: int) -> int:
        blanks = 0
        for line in reversed(self.lines[:index]):
            if line.strip():
                break
            blanks += 1
        return blanks

    def _blank_lines_after(self, index: int) -> int:
        blanks = 0
        for line in self.lines[index:]:
            if line.strip():
                break
            blanks += 1
        return blanks

    def _find_heading(
        self, start: int, end: int, accept: Callable[[int], bool], default: int
    ) -> int:
        for index in range(start, min(end, len(self.lines))):
            level = heading_level(self.lines[index])
            if level is not None and accept(level):
                return index
        return default

    def heading_index(self, line_number: int) -> int:
        """0-based index of the heading at a 1-based line."""
        if line_number == 0 or line_number > len(self.lines):
            raise WriteError(f"heading line {line_number} is out of range")
        index = line_number - 1
        if heading_level(self.lines[index]) is None:
            raise WriteError(f"line {line_number} is not a heading")
        return index

    def subtree_range(self, line_number: int) -> tuple[int, int]:
        """Start and end (exclusive) indices of the heading's subtree."""
        start = self.heading_index(line_number)
        level = heading_level(self.lines[start])
        end = self._find_heading(
            start + 1, len(self.lines), lambda candidate: candidate <= level, len(self.lines)
        )
        return start, end

    def insertion_index(self, target: NodeRecord) -> int:
        """Index at which content refiled under the target goes."""
        if target.kind is NodeKind.FILE:
            return len(self.lines)
        start = self.heading_index(target.line)
        return self._find_heading(
            start + 1,
            len(self.lines),
            lambda candidate: candidate <= target.level,
            len(self.lines),
        )

    def file_entry_insert_index(self, prepend: bool) -> int:
        """Index for a new top-level entry: before the first heading or at the end."""
        if not prepend:
            return len(self.lines)
        _, body_end = self.file_body_bounds()
        return self._find_heading(body_end, len(self.lines), lambda _: True, len(self.lines))

    def heading_entry_insert_index(self, line_number: int, level: int, prepend: bool) -> int:
        """Index for a new child entry: before the first child or at subtree end."""
        _, subtree_end = self.subtree_range(line_number)
        if not prepend:
            return subtree_end
        body_start, _ = self.heading_body_bounds(line_number, level)
        return self._find_heading(
            body_start, subtree_end, lambda candidate: candidate > level, subtree_end
        )

    def file_body_bounds(self) -> tuple[int, int]:
        """Start and end of the file text before its first heading."""
        start = self._file_body_start_index()
        end = self._find_heading(start, len(self.lines), lambda _: True, len(self.lines))
        return start, end

    def heading_body_bounds(self, line_number: int, level: int) -> tuple[int, int]:
        """Start and end of a heading's own text before its first child."""
        start = self._heading_body_start_index(line_number)
        subtree_start, subtree_end = self.subtree_range(line_number)
        search_start = max(start, subtree_start + 1)
        end = self._find_heading(
            search_start, subtree_end, lambda candidate: candidate > level, subtree_end
        )
        return start, end

    def ensure_outline_path(self, outline_path: list[str]) -> tuple[int, int] | None:
        """Find or create nested headings; return the last one's line and level."""
        if not outline_path:
            return None
        parent_start, parent_end, parent_level = 0, len(self.lines), 0
        current = None
        for heading in outline_path:
            wanted_level = parent_level + 1
            found = None
            for index in range(parent_start, parent_end):
                line = self.lines[index]
                if heading_level(line) == wanted_level and heading_title(line) == heading:
                    if found is not None:
                        raise WriteError(f"heading not unique on level {wanted_level}: {heading}")
                    found = index
            if found is None:
                found = self._insert_outline_heading(parent_end, wanted_level, heading)
            _, subtree_end = self.subtree_range(found + 1)
            parent_start, parent_end, parent_level = found, subtree_end, wanted_level
            current = (found + 1, wanted_level)
        return current

    def is_promoteable(self) -> bool:
        """Whether the file is exactly one top-level heading tree from its first line."""
        h1_count = sum(1 for line in self.lines if heading_level(line) == 1)
        return h1_count == 1 and bool(self.lines) and heading_level(self.lines[0]) == 1

    def _file_body_start_index(self) -> int:
        bounds = file_property_drawer_bounds(self.lines)
        index = bounds[1] if bounds else file_property_insert_index(self.lines)
        while index < len(self.lines) and not self.lines[index].strip():
            index += 1
        return index

    def _heading_body_start_index(self, line_number: int) -> int:
        lines = self.lines
        index = self.heading_index(line_number) + 1
        if index < len(lines) and lines[index].strip().upper() == ":PROPERTIES:":
            index += 1
            while index < len(lines) and lines[index].strip().upper() != ":END:":
                index += 1
            if index < len(lines):
                index += 1
        while index < len(lines) and is_heading_planning_line(lines[index]):
            index += 1
        while index < len(lines) and not lines[index].strip():
            index += 1
        return index

    def _insert_outline_heading(self, index: int, level: int, title: str) -> int:
        needs_blank = 0 < index <= len(self.lines) and bool(self.lines[index - 1].strip())
        insertion = [""] if needs_blank else []
        insertion.append(format_heading_line(level, title, []))
        self.lines[index:index] = insertion
        return index + int(needs_blank)

    def set_file_property(self, name: str, value: str | None) -> None:
        """Set or remove a file-level property."""
        set_file_property_value(self.lines, name, value)

    def set_heading_property(self, line_number: int, name: str, value: str | None) -> None:
        """Set or remove a property of the heading at a 1-based line."""
        ensure_heading_property_value(self.lines, self.heading_index(line_number), name, value)

    def set_file_keyword(self, keyword: str, value: str | None) -> None:
        """Set or remove a #+keyword: line."""
        set_file_keyword_value(self.lines, keyword, value)

    def set_heading_tags(self, line_number: int, tags: list[str]) -> None:
        """Replace the tags of the heading at a 1-based line."""
        index = self.heading_index(line_number)
        level = heading_level(self.lines[index])
        text = self.lines[index].lstrip()[level + 1 :].strip()
        title, _ = split_heading_tags(text)
        self.lines[index] = format_heading_line(level, title, tags)

    def ensure_file_identity(self, refs: list[str] | tuple[str, ...] = ()) -> None:
        """Give the file an ID if it has none, and set its references if any."""
        if file_property_value(self.lines, "ID") is None:
            self.set_file_property("ID", _new_id())
        if refs:
            self.set_file_property("ROAM_REFS", property_value(list(refs)))
        if not self.render():
            raise WriteError("capture file head must not be empty")

    def file_keyword_value(self, keyword: str) -> str | None:
        """Value of a #+keyword: line before the first heading."""
        return file_keyword_value(self.lines, keyword)

    def heading_property_value(self, line_number: int, name: str) -> str | None:
        """Value of a property of the heading at a 1-based line."""
        return heading_property_value(self.lines, self.heading_index(line_number), name)

    def filetags(self) -> list[str]:
        """Tags of the #+filetags: keyword."""
        value = self.file_keyword_value("filetags")
        return parse_colon_tags(value) if value is not None else []
"""Creating file notes and appending headings to them."""

from __future__ import annotations

import uuid
from pathlib import Path
from typing import Sequence

from slipbox.document import OrgDocument
from slipbox.model import CaptureOutcome, NodeKind, NodeRecord, WriteError
from slipbox.outline import heading_level, render_lines
from slipbox.paths import (
    next_available_path,
    next_available_relative_path,
    normalize_relative_org_path,
    normalized_head_source,
    normalized_title,
    slugify,
)
from slipbox.properties import format_property_values


def _file_key(relative_path: str) -> str:
    return "file:" + relative_path.replace("\\", "/")


def _heading_key(relative_path: str, line_number: int) -> str:
    return f"heading:{relative_path.replace(chr(92), '/')}:{line_number}"


def _checked_heading(heading: str) -> str:
    heading = heading.strip()
    if not heading:
        raise WriteError("capture heading must not be empty")
    return heading


def capture_file_note(root: Path, title: str, refs: Sequence[str] = ()) -> CaptureOutcome:
    """Create a new file note named after the slug of its title."""
    root = Path(root)
    root.mkdir(parents=True, exist_ok=True)
    title = normalized_title(title)
    relative_path = next_available_path(root, slugify(title))
    return _create_file_note(root, relative_path, title, refs)


def capture_file_note_at(
    root: Path, file_path: str, title: str, refs: Sequence[str] = ()
) -> CaptureOutcome:
    """Create a new file note at a relative path, numbering it if it is taken."""
    root = Path(root)
    root.mkdir(parents=True, exist_ok=True)
    title = normalized_title(title)
    relative_path = next_available_relative_path(root, file_path)
    return _create_file_note(root, relative_path, title, refs)


def capture_file_note_at_with_head(
    root: Path, file_path: str, title: str, head: str, refs: Sequence[str] = ()
) -> CaptureOutcome:
    """Create a new file note whose text starts with the given head."""
    root = Path(root)
    root.mkdir(parents=True, exist_ok=True)
    normalized_title(title)
    relative_path = next_available_relative_path(root, file_path)
    absolute_path = root / relative_path
    document = OrgDocument.from_source(normalized_head_source(head))
    document.ensure_file_identity(list(refs))
    absolute_path.write_text(document.render(), encoding="utf-8")
    return CaptureOutcome(absolute_path, _file_key(relative_path))


def ensure_file_note(root: Path, file_path: str, title: str) -> CaptureOutcome:
    """Create the file note at a relative path unless it already exists."""
    root = Path(root)
    root.mkdir(parents=True, exist_ok=True)
    title = normalized_title(title)
    relative_path = normalize_relative_org_path(file_path)
    absolute_path = root / relative_path
    if not absolute_path.exists():
        _write_file_note(absolute_path, title, ())
    return CaptureOutcome(absolute_path, _file_key(relative_path))


def append_heading(
    root: Path, file_path: str, title: str, heading: str, level: int
) -> CaptureOutcome:
    """Append a heading to the end of a file note, creating the note if needed."""
    heading = _checked_heading(heading)
    file_note = ensure_file_note(root, file_path, title)
    source = file_note.absolute_path.read_text(encoding="utf-8")
    updated, line_number = _append_heading_to_source(source, heading, max(level, 1))
    file_note.absolute_path.write_text(updated, encoding="utf-8")
    relative_path = file_note.node_key.removeprefix("file:")
    return CaptureOutcome(file_note.absolute_path, f"heading:{relative_path}:{line_number}")


def append_heading_to_node(root: Path, node: NodeRecord, heading: str) -> CaptureOutcome:
    """Append a heading as the last child of a node."""
    heading = _checked_heading(heading)
    absolute_path = Path(root) / node.file_path
    source = absolute_path.read_text(encoding="utf-8")
    if node.kind is NodeKind.FILE:
        updated, line_number = _append_heading_to_source(source, heading, 1)
    else:
        updated, line_number = _append_heading_under_node(source, node.line, node.level, heading)
    absolute_path.write_text(updated, encoding="utf-8")
    return CaptureOutcome(absolute_path, f"heading:{node.file_path}:{line_number}")


def append_heading_at_outline_path(
    root: Path,
    file_path: str,
    heading: str,
    outline_path: Sequence[str],
    head: str | None = None,
) -> CaptureOutcome:
    """Append a heading under an outline path, creating the file and path if needed."""
    heading = _checked_heading(heading)
    root = Path(root)
    root.mkdir(parents=True, exist_ok=True)
    relative_path = normalize_relative_org_path(file_path)
    absolute_path = root / relative_path
    if absolute_path.exists():
        source = absolute_path.read_text(encoding="utf-8")
    else:
        absolute_path.parent.mkdir(parents=True, exist_ok=True)
        source = normalized_head_source(head)

    document = OrgDocument.from_source(source)
    location = document.ensure_outline_path(list(outline_path))
    if location is not None:
        line_number, level = location
        rendered, new_line = _append_heading_under_node(
            document.render(), line_number, level, heading
        )
    else:
        rendered, new_line = _append_heading_to_source(document.render(), heading, 1)
    absolute_path.write_text(rendered, encoding="utf-8")
    return CaptureOutcome(absolute_path, _heading_key(relative_path, new_line))


def _create_file_note(
    root: Path, file_path: str, title: str, refs: Sequence[str]
) -> CaptureOutcome:
    relative_path = normalize_relative_org_path(file_path)
    absolute_path = root / relative_path
    _write_file_note(absolute_path, title, refs)
    return CaptureOutcome(absolute_path, _file_key(relative_path))


def _write_file_note(path: Path, title: str, refs: Sequence[str]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    content = f"#+title: {title}\n:PROPERTIES:\n:ID: {uuid.uuid4()}\n"
    if refs:
        content += f":ROAM_REFS: {format_property_values(list(refs))}\n"
    content += ":END:\n\n"
    path.write_text(content, encoding="utf-8")


def _append_heading_to_source(source: str, heading: str, level: int) -> tuple[str, int]:
    lines = OrgDocument.from_source(source).lines
    if lines and lines[-1].strip():
        lines.append("")
    line_number = len(lines) + 1
    lines.append(f"{'*' * level} {heading}")
    return render_lines(lines, source.endswith("\n")), line_number


def _append_heading_under_node(
    source: str, line_number: int, level: int, heading: str
) -> tuple[str, int]:
    lines = OrgDocument.from_source(source).lines
    if line_number == 0 or line_number > len(lines):
        raise WriteError(f"heading line {line_number} is out of range")

    insert_index = next(
        (
            index
            for index in range(line_number, len(lines))
            if (candidate := heading_level(lines[index])) is not None and candidate <= level
        ),
        len(lines),
    )
    if insert_index > 0 and lines[insert_index - 1].strip():
        lines.insert(insert_index, "")
        insert_index += 1

    lines.insert(insert_index, f"{'*' * (level + 1)} {heading}")
    return render_lines(lines, source.endswith("\n")), insert_index + 1
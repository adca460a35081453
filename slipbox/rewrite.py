"""Moving subtrees and regions between notes and reshaping whole files."""

from __future__ import annotations

from pathlib import Path

from slipbox.document import OrgDocument
from slipbox.model import (
    CaptureOutcome,
    NodeKind,
    NodeRecord,
    RegionRewriteOutcome,
    RewriteOutcome,
    WriteError,
)
from slipbox.outline import heading_level
from slipbox.paths import normalize_relative_org_path


def _target_root_level(target: NodeRecord) -> int:
    return 1 if target.kind is NodeKind.FILE else target.level + 1


def _shift_levels(lines: list[str], delta: int) -> list[str]:
    shifted = []
    for line in lines:
        level = heading_level(line)
        if level is None:
            shifted.append(line)
        else:
            shifted.append("*" * max(level + delta, 1) + line.lstrip()[level:])
    return shifted


def _shift_subtree(lines: list[str], desired_root_level: int) -> list[str]:
    root_level = heading_level(lines[0]) if lines else None
    if root_level is None:
        raise WriteError("subtree must begin with a heading")
    return _shift_levels(lines, desired_root_level - root_level)


def refile_subtree(root: Path, source: NodeRecord, target: NodeRecord) -> RewriteOutcome:
    """Move a node's subtree under a target node, possibly in another file."""
    if source.node_key == target.node_key:
        raise WriteError("target is the same as current node")

    root = Path(root)
    source_path = root / source.file_path
    target_path = root / target.file_path
    same_file = source_path == target_path
    if source.kind is NodeKind.FILE and same_file:
        raise WriteError("target is inside the current subtree")

    source_text = source_path.read_text(encoding="utf-8")
    target_text = None if same_file else target_path.read_text(encoding="utf-8")

    source_document = OrgDocument.from_source(source_text)
    subtree, explicit_id = source_document.subtree_lines(source)
    subtree = _shift_subtree(subtree, _target_root_level(target))

    if same_file:
        source_start, source_end = source_document.subtree_range(source.line)
        if target.kind is NodeKind.HEADING and source_start <= target.line - 1 < source_end:
            raise WriteError("target is inside the current subtree")

        insert_index = source_document.insertion_index(target)
        source_document.remove_range(source_start, source_end)
        if insert_index > source_start:
            insert_index -= source_end - source_start
        source_document.insert_subtree(insert_index, target.kind, subtree)
        source_path.write_text(source_document.render(), encoding="utf-8")
        return RewriteOutcome([source_path], [], explicit_id)

    target_document = OrgDocument.from_source(target_text or "")
    target_document.insert_subtree(
        target_document.insertion_index(target), target.kind, subtree
    )

    changed_paths = [target_path]
    removed_paths = []
    if source.kind is NodeKind.FILE:
        source_path.unlink()
        removed_paths.append(source_path)
    else:
        source_start, source_end = source_document.subtree_range(source.line)
        source_document.remove_range(source_start, source_end)
        if source_document.has_meaningful_content():
            source_path.write_text(source_document.render(), encoding="utf-8")
            changed_paths.append(source_path)
        else:
            source_path.unlink()
            removed_paths.append(source_path)

    target_path.write_text(target_document.render(), encoding="utf-8")
    return RewriteOutcome(changed_paths, removed_paths, explicit_id)


def refile_region(
    root: Path, source_file_path: str, start: int, end: int, target: NodeRecord
) -> RegionRewriteOutcome:
    """Move the text between 1-based character positions under a target node."""
    if start == end:
        raise WriteError("active region must not be empty")

    root = Path(root)
    source_path = root / normalize_relative_org_path(source_file_path)
    target_path = root / target.file_path
    same_file = source_path == target_path
    source_text = source_path.read_text(encoding="utf-8")
    target_text = None if same_file else target_path.read_text(encoding="utf-8")

    selection_start = _offset_for_position(source_text, start)
    selection_end = _offset_for_position(source_text, end)
    if selection_start >= selection_end:
        raise WriteError("active region must not be empty")

    region = _normalize_region_for_target(
        source_text[selection_start:selection_end], _target_root_level(target)
    )
    remaining = source_text[:selection_start] + source_text[selection_end:]

    if same_file:
        target_insert = _insertion_offset(source_text, target)
        if target.kind is NodeKind.HEADING:
            heading_start = _line_index_offset(source_text, max(target.line - 1, 0))
            if selection_start <= heading_start < selection_end:
                raise WriteError("target is inside the current region")
        if target_insert > selection_start:
            target_insert -= selection_end - selection_start
        source_path.write_text(
            _insert_region_text(remaining, target_insert, region), encoding="utf-8"
        )
        return RegionRewriteOutcome([source_path], [])

    target_text = target_text or ""
    rewritten_target = _insert_region_text(
        target_text, _insertion_offset(target_text, target), region
    )

    changed_paths = [target_path]
    removed_paths = []
    if not remaining.strip():
        source_path.unlink()
        removed_paths.append(source_path)
    else:
        source_path.write_text(remaining, encoding="utf-8")
        changed_paths.append(source_path)

    target_path.write_text(rewritten_target, encoding="utf-8")
    return RegionRewriteOutcome(changed_paths, removed_paths)


def extract_subtree(root: Path, source: NodeRecord, file_path: str) -> RewriteOutcome:
    """Move a heading subtree into a new file note of its own."""
    if source.kind is not NodeKind.HEADING:
        raise WriteError("only heading nodes can be extracted")

    root = Path(root)
    relative_path = normalize_relative_org_path(file_path)
    source_path = root / source.file_path
    target_path = root / relative_path
    if source_path == target_path:
        raise WriteError("target file must differ from the source file")
    if target_path.exists():
        raise WriteError(f"{target_path} exists. Aborting")

    source_document = OrgDocument.from_source(source_path.read_text(encoding="utf-8"))
    subtree, explicit_id = source_document.subtree_lines(source)
    target_document = OrgDocument.from_extracted_subtree(subtree, explicit_id)
    source_start, source_end = source_document.subtree_range(source.line)
    source_document.remove_range(source_start, source_end)

    target_path.parent.mkdir(parents=True, exist_ok=True)
    source_path.write_text(source_document.render(), encoding="utf-8")
    target_path.write_text(target_document.render(), encoding="utf-8")
    return RewriteOutcome([source_path, target_path], [], explicit_id)


def demote_entire_file(root: Path, file_path: str) -> CaptureOutcome:
    """Turn a file note into one top-level heading holding its content."""
    relative_path = normalize_relative_org_path(file_path)
    absolute_path = Path(root) / relative_path
    document = OrgDocument.from_source(absolute_path.read_text(encoding="utf-8"))
    document.demote_entire_file(relative_path)
    absolute_path.write_text(document.render(), encoding="utf-8")
    return CaptureOutcome(absolute_path, f"heading:{relative_path.replace(chr(92), '/')}:1")


def promote_entire_file(root: Path, file_path: str) -> CaptureOutcome:
    """Turn a file made of one top-level heading into a file note."""
    relative_path = normalize_relative_org_path(file_path)
    absolute_path = Path(root) / relative_path
    document = OrgDocument.from_source(absolute_path.read_text(encoding="utf-8"))
    document.promote_entire_file()
    absolute_path.write_text(document.render(), encoding="utf-8")
    return CaptureOutcome(absolute_path, f"file:{relative_path.replace(chr(92), '/')}")


def _normalize_region_for_target(region: str, desired_root_level: int) -> str:
    lines = OrgDocument.from_source(region).lines
    levels = [level for line in lines if (level := heading_level(line)) is not None]
    if levels:
        lines = _shift_levels(lines, desired_root_level - min(levels))
    rendered = "\n".join(lines)
    if region.endswith("\n") and not rendered.endswith("\n"):
        rendered += "\n"
    return rendered


def _insertion_offset(source: str, target: NodeRecord) -> int:
    line_index = OrgDocument.from_source(source).insertion_index(target)
    return _line_index_offset(source, line_index)


def _line_index_offset(source: str, line_index: int) -> int:
    if line_index == 0:
        return 0
    newlines = [offset for offset, character in enumerate(source) if character == "\n"]
    if len(newlines) >= line_index:
        return newlines[line_index - 1] + 1
    if line_index >= len(OrgDocument.from_source(source).lines):
        return len(source)
    raise WriteError(f"line index {line_index} is out of range")


def _offset_for_position(source: str, position: int) -> int:
    if position == 0:
        raise WriteError("character positions must be 1-based")
    wanted = position - 1
    if wanted > len(source):
        raise WriteError(f"character position {position} is out of range")
    return wanted


def _insert_region_text(source: str, offset: int, region: str) -> str:
    if offset > 0 and not source[:offset].endswith("\n") and region:
        region = "\n" + region
    return source[:offset] + region + source[offset:]
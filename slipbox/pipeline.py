"""Template captures: resolving the target file and placing content in it."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from pathlib import Path

from slipbox.content import (
    CaptureTarget,
    capture_entry,
    capture_list_item,
    capture_plain,
    capture_table_line,
)
from slipbox.document import OrgDocument
from slipbox.model import (
    CaptureContentType,
    CaptureOutcome,
    CapturePreviewOutcome,
    CaptureTemplateParams,
    NodeKind,
    NodeRecord,
    WriteError,
)
from slipbox.paths import (
    default_capture_file_title,
    next_available_path,
    normalize_relative_org_path,
    normalized_head_source,
    slugify,
)


@dataclass
class _PreparedCapture:
    absolute_path: Path
    relative_path: str
    document: OrgDocument
    node_key: str


def capture_template(
    root: Path, target_node: NodeRecord | None, params: CaptureTemplateParams
) -> CaptureOutcome:
    """Run a template capture and write the result to disk."""
    prepared = _prepare_capture_template(Path(root), target_node, params, None, False)
    prepared.absolute_path.parent.mkdir(parents=True, exist_ok=True)
    prepared.absolute_path.write_text(prepared.document.render(), encoding="utf-8")
    return CaptureOutcome(prepared.absolute_path, prepared.node_key)


def preview_capture_template(
    root: Path,
    target_node: NodeRecord | None,
    params: CaptureTemplateParams,
    source_override: str | None = None,
    ensure_node_id: bool = False,
) -> CapturePreviewOutcome:
    """Run a template capture without writing, returning the rendered text."""
    prepared = _prepare_capture_template(
        Path(root), target_node, params, source_override, ensure_node_id
    )
    return CapturePreviewOutcome(
        absolute_path=prepared.absolute_path,
        relative_path=prepared.relative_path,
        node_key=prepared.node_key,
        content=prepared.document.render(),
    )


def _prepare_capture_template(
    root: Path,
    target_node: NodeRecord | None,
    params: CaptureTemplateParams,
    source_override: str | None,
    ensure_node_id: bool,
) -> _PreparedCapture:
    root.mkdir(parents=True, exist_ok=True)
    refs = params.normalized_refs()
    relative_path = _resolve_template_relative_path(root, target_node, params)
    absolute_path = root / relative_path
    existed_on_disk = absolute_path.exists()

    if source_override is not None:
        source = source_override
    elif existed_on_disk:
        source = absolute_path.read_text(encoding="utf-8")
    else:
        source = normalized_head_source(params.head)
    document = OrgDocument.from_source(source)

    if not existed_on_disk and source_override is None:
        if params.head is None:
            document.set_file_keyword(
                "title", default_capture_file_title(relative_path, params.title)
            )
        document.ensure_file_identity(refs)

    target = _resolve_capture_target(document, relative_path, target_node, params)
    before = params.normalized_empty_lines_before()
    after = params.normalized_empty_lines_after()
    capture_type = params.capture_type

    if capture_type is CaptureContentType.ENTRY:
        node_key = capture_entry(
            document, target, params.content, params.title, params.prepend, before, after
        )
    elif capture_type is CaptureContentType.PLAIN:
        node_key = capture_plain(document, target, params.content, params.prepend, before, after)
    elif capture_type in (CaptureContentType.ITEM, CaptureContentType.CHECKITEM):
        node_key = capture_list_item(
            document, target, params.content, capture_type, params.prepend, before, after
        )
    else:
        node_key = capture_table_line(
            document,
            target,
            params.content,
            params.prepend,
            params.normalized_table_line_pos(),
        )

    if ensure_node_id:
        _ensure_capture_node_identity(document, node_key)

    return _PreparedCapture(absolute_path, relative_path, document, node_key)


def _resolve_template_relative_path(
    root: Path, target_node: NodeRecord | None, params: CaptureTemplateParams
) -> str:
    if target_node is not None:
        return target_node.file_path
    if params.file_path is not None:
        return normalize_relative_org_path(params.file_path)
    title = params.title.strip()
    slug = slugify(title) if title else "note"
    return next_available_path(root, slug)


def _resolve_capture_target(
    document: OrgDocument,
    relative_path: str,
    target_node: NodeRecord | None,
    params: CaptureTemplateParams,
) -> CaptureTarget:
    if target_node is not None:
        if target_node.kind is NodeKind.FILE:
            return CaptureTarget(relative_path, target_node.node_key)
        return CaptureTarget(
            relative_path, target_node.node_key, target_node.line, target_node.level
        )

    normalized_path = relative_path.replace("\\", "/")
    location = document.ensure_outline_path(params.normalized_outline_path())
    if location is None:
        return CaptureTarget(relative_path, f"file:{normalized_path}")
    line_number, level = location
    return CaptureTarget(
        relative_path, f"heading:{normalized_path}:{line_number}", line_number, level
    )


def _ensure_capture_node_identity(document: OrgDocument, node_key: str) -> None:
    if node_key.startswith("file:"):
        document.ensure_file_identity()
        return
    line_number = _capture_heading_line_number(node_key)
    if line_number is None:
        raise WriteError(f"unsupported capture node key: {node_key}")
    explicit_id = document.heading_property_value(line_number, "ID")
    if explicit_id is None:
        explicit_id = str(uuid.uuid4())
    document.set_heading_property(line_number, "ID", explicit_id)


def _capture_heading_line_number(node_key: str) -> int | None:
    if not node_key.startswith("heading:"):
        return None
    rest = node_key[len("heading:"):]
    _, separator, number = rest.rpartition(":")
    if not separator:
        return None
    digits = number[1:] if number.startswith("+") else number
    if not digits or not digits.isascii() or not digits.isdigit():
        return None
    return int(digits)
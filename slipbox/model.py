"""Records shared by the note-writing operations."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class WriteError(ValueError):
    """Raised when a note cannot be created or rewritten."""


class NodeKind(Enum):
    """Whether a node is a whole file or a heading inside one."""

    FILE = "file"
    HEADING = "heading"


class CaptureContentType(Enum):
    """How captured content is placed into the target."""

    ENTRY = "entry"
    PLAIN = "plain"
    ITEM = "item"
    CHECKITEM = "checkitem"
    TABLE_LINE = "table-line"


@dataclass
class NodeRecord:
    """An indexed node: a file or a heading at a 1-based line."""

    node_key: str
    file_path: str
    kind: NodeKind
    title: str = ""
    line: int = 1
    level: int = 0
    tags: list[str] = field(default_factory=list)
    explicit_id: str | None = None


def _unique_trimmed(values: list[str]) -> list[str]:
    unique: list[str] = []
    for value in values:
        value = value.strip()
        if value and value not in unique:
            unique.append(value)
    return unique


@dataclass
class CaptureTemplateParams:
    """Parameters of a template capture."""

    title: str = ""
    capture_type: CaptureContentType = CaptureContentType.ENTRY
    content: str = ""
    file_path: str | None = None
    head: str | None = None
    outline_path: list[str] = field(default_factory=list)
    refs: list[str] = field(default_factory=list)
    prepend: bool = False
    empty_lines_before: int | None = None
    empty_lines_after: int | None = None
    table_line_pos: str | None = None

    def normalized_refs(self) -> list[str]:
        """Trimmed, non-empty references without duplicates."""
        return _unique_trimmed(self.refs)

    def normalized_outline_path(self) -> list[str]:
        """Trimmed, non-empty outline headings in order."""
        return [part.strip() for part in self.outline_path if part.strip()]

    def normalized_empty_lines_before(self) -> int:
        """Number of blank lines wanted before the capture."""
        return max(self.empty_lines_before or 0, 0)

    def normalized_empty_lines_after(self) -> int:
        """Number of blank lines wanted after the capture."""
        return max(self.empty_lines_after or 0, 0)

    def normalized_table_line_pos(self) -> str | None:
        """The table line position, or None when unset or blank."""
        if self.table_line_pos is None:
            return None
        value = self.table_line_pos.strip()
        return value or None


@dataclass
class CaptureOutcome:
    """Where a capture was written and the key of the resulting node."""

    absolute_path: Path
    node_key: str


@dataclass
class CapturePreviewOutcome:
    """A capture rendered without writing it to disk."""

    absolute_path: Path
    relative_path: str
    node_key: str
    content: str


@dataclass
class MetadataUpdate:
    """Metadata to replace on a node; None leaves a field untouched."""

    aliases: list[str] | None = None
    refs: list[str] | None = None
    tags: list[str] | None = None


@dataclass
class RewriteOutcome:
    """Files touched by a subtree rewrite and the moved node's ID."""

    changed_paths: list[Path] = field(default_factory=list)
    removed_paths: list[Path] = field(default_factory=list)
    explicit_id: str = ""


@dataclass
class RegionRewriteOutcome:
    """Files touched by a region rewrite."""

    changed_paths: list[Path] = field(default_factory=list)
    removed_paths: list[Path] = field(default_factory=list)
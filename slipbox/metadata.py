"""Giving nodes IDs and replacing their aliases, references and tags."""

from __future__ import annotations

import uuid
from pathlib import Path

from slipbox.document import OrgDocument
from slipbox.model import MetadataUpdate, NodeKind, NodeRecord
from slipbox.properties import keyword_value, property_value


def ensure_node_id(root: Path, node: NodeRecord) -> Path:
    """Give the node an ID property unless it already has one; return its file."""
    absolute_path = Path(root) / node.file_path
    if node.explicit_id is not None:
        return absolute_path

    document = OrgDocument.from_source(absolute_path.read_text(encoding="utf-8"))
    explicit_id = str(uuid.uuid4())
    if node.kind is NodeKind.FILE:
        document.set_file_property("ID", explicit_id)
    else:
        document.set_heading_property(node.line, "ID", explicit_id)
    absolute_path.write_text(document.render(), encoding="utf-8")
    return absolute_path


def update_node_metadata(root: Path, node: NodeRecord, update: MetadataUpdate) -> Path:
    """Replace the metadata fields given in the update; return the node's file."""
    absolute_path = Path(root) / node.file_path
    document = OrgDocument.from_source(absolute_path.read_text(encoding="utf-8"))

    if node.kind is NodeKind.FILE:
        if update.aliases is not None:
            document.set_file_property("ROAM_ALIASES", property_value(update.aliases))
        if update.refs is not None:
            document.set_file_property("ROAM_REFS", property_value(update.refs))
        if update.tags is not None:
            document.set_file_keyword("filetags", keyword_value(update.tags))
    else:
        if update.aliases is not None:
            document.set_heading_property(
                node.line, "ROAM_ALIASES", property_value(update.aliases)
            )
        if update.refs is not None:
            document.set_heading_property(node.line, "ROAM_REFS", property_value(update.refs))
        if update.tags is not None:
            document.set_heading_tags(node.line, update.tags)

    absolute_path.write_text(document.render(), encoding="utf-8")
    return absolute_path
"""Titles, slugs and file paths inside a slipbox root."""

from __future__ import annotations

from itertools import count
from pathlib import Path, PurePosixPath

from slipbox.model import WriteError


def normalized_title(title: str) -> str:
    """Return the trimmed title, refusing an empty one."""
    title = title.strip()
    if not title:
        raise WriteError("capture title must not be empty")
    return title


def normalize_relative_org_path(file_path: str) -> str:
    """Normalise a relative .org path that must stay within the root."""
    if PurePosixPath(file_path).is_absolute():
        raise WriteError("file path must be relative to the slipbox root")

    parts = []
    for part in file_path.split("/"):
        if part in ("", "."):
            continue
        if part == "..":
            raise WriteError("file path must stay within the slipbox root")
        parts.append(part)

    normalized = "/".join(parts).replace("\\", "/")
    if not normalized:
        raise WriteError("file path must not be empty")
    if not normalized.endswith(".org"):
        raise WriteError("file path must end with .org")
    return normalized


def next_available_path(root: Path, slug: str) -> str:
    """First unused file name of the form slug.org, slug-1.org, ..."""
    root = Path(root)
    for suffix in count():
        filename = f"{slug}.org" if suffix == 0 else f"{slug}-{suffix}.org"
        if not (root / filename).exists():
            return filename
    raise AssertionError("unreachable")


def next_available_relative_path(root: Path, file_path: str) -> str:
    """First unused variant of a relative .org path, numbering the stem."""
    root = Path(root)
    candidate = PurePosixPath(normalize_relative_org_path(file_path))
    stem = candidate.stem
    extension = candidate.suffix[1:]
    if not stem:
        raise WriteError("file path must include a valid file name")
    if not extension:
        raise WriteError("file path must include a valid extension")
    parent = candidate.parent
    has_parent = str(parent) not in ("", ".")

    for suffix in count():
        filename = f"{stem}.{extension}" if suffix == 0 else f"{stem}-{suffix}.{extension}"
        relative = str(parent / filename) if has_parent else filename
        if not (root / relative).exists():
            return relative.replace("\\", "/")
    raise AssertionError("unreachable")


def slugify(title: str) -> str:
    """Lower-case ASCII slug with runs of other characters turned into one dash."""
    pieces: list[str] = []
    previous_dash = False
    for character in title:
        lowered = character.lower() if character.isascii() else character
        if lowered.isascii() and lowered.isalnum():
            pieces.append(lowered)
            previous_dash = False
        elif not previous_dash:
            pieces.append("-")
            previous_dash = True
    slug = "".join(pieces).strip("-")
    return slug or "note"


def default_capture_file_title(relative_path: str, title: str) -> str:
    """The given title, else one made from the file name, else "Note"."""
    title = title.strip()
    if title:
        return title
    stem = PurePosixPath(relative_path).stem.replace("-", " ")
    return stem if stem.strip() else "Note"


def normalized_head_source(head: str | None) -> str:
    """A non-blank head ending in a newline, or the empty string."""
    if head is None or not head.strip():
        return ""
    return head if head.endswith("\n") else head + "\n"
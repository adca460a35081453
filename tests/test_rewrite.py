import pytest

from slipbox.document import OrgDocument
from slipbox.model import NodeKind, NodeRecord, WriteError
from slipbox.properties import file_property_value
from slipbox.rewrite import (
    demote_entire_file,
    extract_subtree,
    promote_entire_file,
    refile_region,
    refile_subtree,
)


def _write(tmp_path, name, text):
    path = tmp_path / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def _lines(path):
    return OrgDocument.from_source(path.read_text(encoding="utf-8")).lines


def _heading(file_path, line, level=1, title="", explicit_id=None):
    return NodeRecord(
        node_key=f"heading:{file_path}:{line}",
        file_path=file_path,
        kind=NodeKind.HEADING,
        title=title,
        line=line,
        level=level,
        explicit_id=explicit_id,
    )


def _file(file_path, title="", explicit_id=None):
    return NodeRecord(
        node_key=f"file:{file_path}",
        file_path=file_path,
        kind=NodeKind.FILE,
        title=title,
        explicit_id=explicit_id,
    )


def test_refile_same_node_rejected(tmp_path):
    node = _heading("a.org", 1)
    with pytest.raises(WriteError):
        refile_subtree(tmp_path, node, node)


def test_refile_file_into_same_file_rejected(tmp_path):
    _write(tmp_path, "a.org", "#+title: A\n* H\n")
    with pytest.raises(WriteError):
        refile_subtree(tmp_path, _file("a.org"), _heading("a.org", 2))


def test_refile_heading_to_other_file(tmp_path):
    source = _write(tmp_path, "a.org", "#+title: A\n\n* Move me\nbody\n* Stay\n")
    target = _write(tmp_path, "b.org", "#+title: B\n")
    outcome = refile_subtree(tmp_path, _heading("a.org", 3), _file("b.org"))
    assert outcome.changed_paths == [target, source]
    assert outcome.removed_paths == []
    target_lines = _lines(target)
    assert "* Move me" in target_lines
    assert f":ID: {outcome.explicit_id}" in target_lines
    assert "body" in target_lines
    source_lines = _lines(source)
    assert "* Move me" not in source_lines
    assert "* Stay" in source_lines


def test_refile_keeps_existing_id(tmp_path):
    _write(tmp_path, "a.org", "* Move me\n:PROPERTIES:\n:ID: kept\n:END:\n* Stay\n")
    target = _write(tmp_path, "b.org", "#+title: B\n")
    outcome = refile_subtree(
        tmp_path, _heading("a.org", 1, explicit_id="kept"), _file("b.org")
    )
    assert outcome.explicit_id == "kept"
    assert _lines(target).count(":ID: kept") == 1


def test_refile_under_heading_shifts_levels(tmp_path):
    _write(tmp_path, "a.org", "* Move me\n** Child\n* Stay\n")
    target = _write(tmp_path, "b.org", "* Parent\n")
    refile_subtree(tmp_path, _heading("a.org", 1), _heading("b.org", 1))
    target_lines = _lines(target)
    assert target_lines[0] == "* Parent"
    assert target_lines[1] == "** Move me"
    assert "*** Child" in target_lines


def test_refile_removes_emptied_source(tmp_path):
    source = _write(tmp_path, "a.org", "* Only\n")
    target = _write(tmp_path, "b.org", "#+title: B\n")
    outcome = refile_subtree(tmp_path, _heading("a.org", 1), _file("b.org"))
    assert outcome.removed_paths == [source]
    assert outcome.changed_paths == [target]
    assert not source.exists()


def test_refile_file_node_removes_source(tmp_path):
    source = _write(tmp_path, "a.org", "#+title: A\n\nText\n")
    target = _write(tmp_path, "b.org", "#+title: B\n")
    outcome = refile_subtree(tmp_path, _file("a.org", title="A"), _file("b.org"))
    assert outcome.removed_paths == [source]
    assert not source.exists()
    target_lines = _lines(target)
    assert "* A" in target_lines
    assert "Text" in target_lines


def test_refile_within_same_file(tmp_path):
    path = _write(tmp_path, "a.org", "* A\nbody a\n* B\nbody b\n")
    outcome = refile_subtree(tmp_path, _heading("a.org", 1), _heading("a.org", 3))
    assert outcome.changed_paths == [path]
    assert _lines(path) == [
        "* B",
        "body b",
        "** A",
        ":PROPERTIES:",
        f":ID: {outcome.explicit_id}",
        ":END:",
        "body a",
    ]


def test_refile_into_own_subtree_rejected(tmp_path):
    _write(tmp_path, "a.org", "* A\n** Child\n")
    with pytest.raises(WriteError):
        refile_subtree(tmp_path, _heading("a.org", 1), _heading("a.org", 2, level=2))


def test_refile_region_to_other_file(tmp_path):
    text = "#+title: A\n\nline one\nline two\n"
    source = _write(tmp_path, "a.org", text)
    target = _write(tmp_path, "b.org", "* T\n")
    start = text.index("line one") + 1
    end = start + len("line one\n")
    outcome = refile_region(tmp_path, "a.org", start, end, _heading("b.org", 1))
    assert outcome.changed_paths == [target, source]
    assert target.read_text(encoding="utf-8") == "* T\nline one\n"
    assert source.read_text(encoding="utf-8") == text.replace("line one\n", "")


def test_refile_region_shifts_headings(tmp_path):
    text = "* Sub\ntext\n"
    _write(tmp_path, "a.org", text + "* Other\n")
    target = _write(tmp_path, "b.org", "* T\n")
    refile_region(tmp_path, "a.org", 1, len(text) + 1, _heading("b.org", 1))
    assert _lines(target) == ["* T", "** Sub", "text"]


def test_refile_region_removes_emptied_source(tmp_path):
    text = "moved\n"
    source = _write(tmp_path, "a.org", text)
    target = _write(tmp_path, "b.org", "#+title: B\n")
    outcome = refile_region(tmp_path, "a.org", 1, len(text) + 1, _file("b.org"))
    assert outcome.removed_paths == [source]
    assert not source.exists()
    assert _lines(target)[-1] == "moved"


def test_refile_region_within_same_file(tmp_path):
    text = "* A\nalpha\n* B\nbeta\n"
    path = _write(tmp_path, "a.org", text)
    start = text.index("alpha") + 1
    end = start + len("alpha\n")
    refile_region(tmp_path, "a.org", start, end, _heading("a.org", 3))
    assert path.read_text(encoding="utf-8") == "* A\n* B\nbeta\nalpha\n"


def test_refile_region_containing_target_rejected(tmp_path):
    text = "* A\nalpha\n* B\nbeta\n"
    _write(tmp_path, "a.org", text)
    start = text.index("* B") + 1
    with pytest.raises(WriteError):
        refile_region(tmp_path, "a.org", start, len(text) + 1, _heading("a.org", 3))


@pytest.mark.parametrize("start, end", [(3, 3), (0, 2), (2, 99), (4, 2)])
def test_refile_region_invalid_positions(tmp_path, start, end):
    _write(tmp_path, "a.org", "text\n")
    _write(tmp_path, "b.org", "#+title: B\n")
    with pytest.raises(WriteError):
        refile_region(tmp_path, "a.org", start, end, _file("b.org"))


def test_extract_subtree(tmp_path):
    source = _write(tmp_path, "a.org", "#+title: A\n\n* Child :tag:\nbody\n* Stay\n")
    outcome = extract_subtree(tmp_path, _heading("a.org", 3), "sub/child.org")
    target = tmp_path / "sub" / "child.org"
    assert outcome.changed_paths == [source, target]
    target_lines = _lines(target)
    assert target_lines[0] == "#+title: Child"
    assert target_lines[1] == "#+filetags: :tag:"
    assert file_property_value(target_lines, "ID") == outcome.explicit_id
    assert "body" in target_lines
    source_lines = _lines(source)
    assert "* Stay" in source_lines
    assert not any("Child" in line for line in source_lines)


def test_extract_file_node_rejected(tmp_path):
    _write(tmp_path, "a.org", "#+title: A\n")
    with pytest.raises(WriteError):
        extract_subtree(tmp_path, _file("a.org"), "b.org")


def test_extract_to_existing_file_rejected(tmp_path):
    _write(tmp_path, "a.org", "* Child\n")
    existing = _write(tmp_path, "b.org", "keep\n")
    with pytest.raises(WriteError):
        extract_subtree(tmp_path, _heading("a.org", 1), "b.org")
    assert existing.read_text(encoding="utf-8") == "keep\n"


def test_extract_to_same_file_rejected(tmp_path):
    _write(tmp_path, "a.org", "* Child\n")
    with pytest.raises(WriteError):
        extract_subtree(tmp_path, _heading("a.org", 1), "a.org")


def test_demote_entire_file(tmp_path):
    path = _write(tmp_path, "note.org", "#+title: Top\n#+filetags: :a:\n\n* Child\n")
    outcome = demote_entire_file(tmp_path, "note.org")
    assert outcome.node_key == "heading:note.org:1"
    lines = _lines(path)
    assert lines[0] == "* Top :a:"
    assert "** Child" in lines
    assert not any(line.startswith("#+") for line in lines)


def test_promote_demote_round_trip(tmp_path):
    original = "#+title: Top\n#+filetags: :a:\n* Child\n"
    path = _write(tmp_path, "note.org", original)
    demote_entire_file(tmp_path, "note.org")
    outcome = promote_entire_file(tmp_path, "note.org")
    assert outcome.node_key == "file:note.org"
    assert path.read_text(encoding="utf-8") == original


def test_promote_multiple_roots_rejected(tmp_path):
    _write(tmp_path, "note.org", "* One\n* Two\n")
    with pytest.raises(WriteError):
        promote_entire_file(tmp_path, "note.org")


def test_promote_rejects_path_outside_root(tmp_path):
    with pytest.raises(WriteError):
        promote_entire_file(tmp_path, "../note.org")
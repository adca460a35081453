import pytest

from slipbox.model import WriteError
from slipbox.paths import (
    default_capture_file_title,
    next_available_path,
    next_available_relative_path,
    normalize_relative_org_path,
    normalized_head_source,
    normalized_title,
    slugify,
)


def test_normalized_title_trims():
    assert normalized_title("  Title  ") == "Title"


@pytest.mark.parametrize("title", ["", "   ", "\n\t"])
def test_normalized_title_rejects_blank(title):
    with pytest.raises(WriteError):
        normalized_title(title)


def test_normalize_relative_org_path_drops_current_dir():
    assert normalize_relative_org_path("./notes/./a.org") == "notes/a.org"


def test_normalize_relative_org_path_keeps_simple_path():
    assert normalize_relative_org_path("a.org") == "a.org"


@pytest.mark.parametrize("path", ["/abs/a.org", "../a.org", "x/../a.org", "", ".", "a.txt"])
def test_normalize_relative_org_path_rejects(path):
    with pytest.raises(WriteError):
        normalize_relative_org_path(path)


def test_next_available_path_numbers_existing(tmp_path):
    assert next_available_path(tmp_path, "idea") == "idea.org"
    (tmp_path / "idea.org").write_text("x")
    assert next_available_path(tmp_path, "idea") == "idea-1.org"
    (tmp_path / "idea-1.org").write_text("x")
    second = next_available_path(tmp_path, "idea")
    assert not (tmp_path / second).exists()
    assert second.startswith("idea-") and second.endswith(".org")


def test_next_available_relative_path_keeps_directory(tmp_path):
    first = next_available_relative_path(tmp_path, "sub/n.org")
    assert first == "sub/n.org"
    (tmp_path / "sub").mkdir()
    (tmp_path / first).write_text("x")
    second = next_available_relative_path(tmp_path, "sub/n.org")
    assert second.startswith("sub/n-")
    assert second.endswith(".org")
    assert not (tmp_path / second).exists()


def test_next_available_relative_path_rejects_bad_path(tmp_path):
    with pytest.raises(WriteError):
        next_available_relative_path(tmp_path, "../n.org")


def test_slugify_example():
    assert slugify("Hello, World!") == "hello-world"


def test_slugify_falls_back_to_note():
    assert slugify("!!! ???") == "note"


@pytest.mark.parametrize(
    ("title", "expected"),
    [
        ("A  b", "a-b"),
        ("--x--", "x"),
        ("Ünïcode title", "n-code-title"),
        ("Mixed_CASE 42", "mixed-case-42"),
        ("  ", "note"),
    ],
)
def test_slugify_shape(title, expected):
    assert slugify(title) == expected


def test_default_capture_file_title_prefers_title():
    assert default_capture_file_title("x.org", "  Given  ") == "Given"


def test_default_capture_file_title_from_stem():
    assert default_capture_file_title("dir/my-note.org", "") == "my note"


def test_default_capture_file_title_fallback():
    assert default_capture_file_title("---.org", "") == "Note"


def test_normalized_head_source():
    assert normalized_head_source(None) == ""
    assert normalized_head_source("  \n") == ""
    head = "#+title: x"
    assert normalized_head_source(head) == head + "\n"
    assert normalized_head_source(head + "\n") == head + "\n"
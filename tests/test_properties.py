import pytest

from slipbox.model import WriteError
from slipbox.outline import format_colon_tags
from slipbox.properties import (
    ensure_heading_property_value,
    file_keyword_value,
    file_property_drawer_bounds,
    file_property_insert_index,
    file_property_value,
    format_property_values,
    heading_property_drawer_bounds,
    heading_property_value,
    keyword_value,
    property_value,
    remove_file_keyword,
    set_file_keyword_value,
    set_file_property_value,
)


def test_empty_values_give_none():
    assert property_value([]) is None
    assert keyword_value([]) is None


def test_plain_values_are_joined():
    assert property_value(["one", "two"]) == "one two"


def test_values_with_spaces_are_quoted():
    assert format_property_values(["a", "b c"]) == 'a "b c"'


def test_values_with_quotes_are_escaped():
    assert format_property_values(['say "hi"']) == '"say \\"hi\\""'


def test_keyword_value_uses_colon_tags():
    assert keyword_value(["a", "b"]) == format_colon_tags(["a", "b"])


def test_insert_index_skips_blanks_and_keywords():
    lines = ["", "#+title: a", "#+filetags: :x:", "text"]
    assert file_property_insert_index(lines) == lines.index("text")


def test_set_file_property_creates_drawer():
    lines = ["#+title: T", "", "Body"]
    set_file_property_value(lines, "ID", "abc")
    assert file_property_value(lines, "ID") == "abc"
    start, end = file_property_drawer_bounds(lines)
    assert lines[start] == ":PROPERTIES:"
    assert lines[end - 1] == ":END:"
    assert lines[0] == "#+title: T"
    assert lines[-1] == "Body"


def test_file_property_round_trip_restores_lines():
    original = ["#+title: T", "", "Body"]
    lines = list(original)
    set_file_property_value(lines, "ID", "abc")
    set_file_property_value(lines, "ID", None)
    assert lines == original


def test_file_property_replaced_in_place():
    lines = ["#+title: T", "", "Body"]
    set_file_property_value(lines, "ID", "first")
    size = len(lines)
    set_file_property_value(lines, "ID", "second")
    assert file_property_value(lines, "ID") == "second"
    assert len(lines) == size


def test_second_property_added_to_existing_drawer():
    lines = ["#+title: T", "", "Body"]
    set_file_property_value(lines, "ID", "abc")
    set_file_property_value(lines, "ROAM_REFS", "ref")
    assert file_property_value(lines, "ID") == "abc"
    assert file_property_value(lines, "ROAM_REFS") == "ref"
    assert lines.count(":PROPERTIES:") == 1
    set_file_property_value(lines, "ROAM_REFS", None)
    assert file_property_value(lines, "ROAM_REFS") is None
    assert file_property_value(lines, "ID") == "abc"


def test_drawer_without_end_is_ignored():
    lines = [":PROPERTIES:", ":ID: x"]
    assert file_property_drawer_bounds(lines) is None
    assert file_property_value(lines, "ID") is None


def test_file_keyword_set_and_remove():
    original = ["Body"]
    lines = list(original)
    set_file_keyword_value(lines, "TITLE", "Hello")
    assert lines[0] == "#+title: Hello"
    assert file_keyword_value(lines, "title") == "Hello"
    set_file_keyword_value(lines, "title", None)
    assert lines == original


def test_file_keyword_lookup_is_case_insensitive():
    lines = ["#+TITLE:  Spaced  ", "text"]
    assert file_keyword_value(lines, "title") == "Spaced"


def test_remove_file_keyword_stops_at_first_heading():
    lines = ["* Heading", "#+title: late"]
    remove_file_keyword(lines, "title")
    assert lines == ["* Heading", "#+title: late"]
    assert file_keyword_value(lines, "title") is None


def test_remove_file_keyword_removes_first_match():
    lines = ["#+title: A", "#+filetags: :x:", "text"]
    remove_file_keyword(lines, "title")
    assert lines == ["#+filetags: :x:", "text"]


def test_heading_property_lookup_is_case_insensitive():
    lines = ["* H", ":PROPERTIES:", ":id: x", ":END:"]
    assert heading_property_drawer_bounds(lines, 0) == (1, 4)
    assert heading_property_value(lines, 0, "ID") == "x"


def test_heading_property_round_trip():
    original = ["* H", "text"]
    lines = list(original)
    ensure_heading_property_value(lines, 0, "ID", "abc")
    assert lines[1] == ":PROPERTIES:"
    assert heading_property_value(lines, 0, "ID") == "abc"
    ensure_heading_property_value(lines, 0, "ID", None)
    assert lines == original


def test_heading_property_update_keeps_other_properties():
    lines = ["* H", ":PROPERTIES:", ":ID: a", ":CUSTOM: c", ":END:"]
    ensure_heading_property_value(lines, 0, "ID", None)
    assert heading_property_value(lines, 0, "CUSTOM") == "c"
    assert heading_property_value(lines, 0, "ID") is None


def test_heading_property_requires_heading():
    with pytest.raises(WriteError):
        ensure_heading_property_value(["text"], 0, "ID", "x")
    with pytest.raises(WriteError):
        ensure_heading_property_value(["* H"], 5, "ID", "x")
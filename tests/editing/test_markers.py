"""Tests for the marker insert/merge protocol."""

import re

import pytest

from prettier_diff.editing.change_range import ChangeRange
from prettier_diff.editing.markers import (
    RUN_ID, MarkerError, MarkerMismatchError, UnsupportedLanguageError,
    get_marker, insert_markers, merge_marked_sections, merge_sections,
    split_marked_sections,
)


def _marker_regex(language: str) -> re.Pattern:
    return re.compile(rf"__PDQ_MARKER_\w+?_{re.escape(language)}_PDQ_MARKER__")


def _count_markers(text: str, language: str) -> int:
    return len(_marker_regex(language).findall(text))


class TestGetMarker:
    def test_line_comment_preferred(self):
        marker = get_marker("babel")
        assert marker.startswith("//")
        assert RUN_ID in marker
        assert "_babel_" in marker

    def test_block_comment(self):
        marker = get_marker("html")
        assert marker.startswith("<!--")
        assert marker.endswith("-->")

    def test_css_has_block_only(self):
        marker = get_marker("css")
        assert marker.startswith("/*") and marker.endswith("*/")

    def test_languages_do_not_collide(self):
        assert get_marker("yaml") != get_marker("graphql")

    def test_unknown_language(self):
        with pytest.raises(UnsupportedLanguageError):
            get_marker("cobol")

    def test_unsupported_is_marker_error(self):
        assert issubclass(UnsupportedLanguageError, MarkerError)
        assert issubclass(MarkerMismatchError, MarkerError)


class TestInsertMarkers:
    def test_appends_trailing_newline(self):
        result = insert_markers("foo\nbar", [ChangeRange(1, 2)], "babel")
        assert result.endswith("\n")

    def test_single_range_js(self):
        result = insert_markers("line1\nline2\nline3\n", [ChangeRange(2, 3)], "babel")
        marker = get_marker("babel")
        assert result == f"line1\n{marker}\nline2\n{marker}\nline3\n"

    def test_multiple_ranges_html(self):
        content = "<div>\n<span>\n</span>\n</div>\n"
        result = insert_markers(
            content, [ChangeRange(1, 2), ChangeRange(3, 4)], "html"
        )
        assert _count_markers(result, "html") == 4
        marker = get_marker("html")
        assert result == (
            f"{marker}\n<div>\n{marker}\n<span>\n"
            f"{marker}\n</span>\n{marker}\n</div>\n"
        )

    def test_range_order_does_not_matter(self):
        content = "a\nb\nc\nd\ne\n"
        forward = insert_markers(content, [ChangeRange(2, 3), ChangeRange(4, 5)], "babel")
        backward = insert_markers(content, [ChangeRange(4, 5), ChangeRange(2, 3)], "babel")
        assert forward == backward

    def test_windows_line_endings(self):
        marker = get_marker("babel")
        result = insert_markers("a\r\nb\r\nc\r\n", [ChangeRange(2, 3)], "babel")
        assert result == f"a\r\n{marker}\nb\r\n{marker}\nc\r\n"

    def test_unsupported_language_raises_before_mutation(self):
        with pytest.raises(UnsupportedLanguageError):
            insert_markers("foo", [ChangeRange(1, 2)], "unknown")


class TestMergeMarkedSections:
    def test_no_markers_returns_original(self):
        original = "foo\nbar\nbaz\n"
        formatted = "FOO\nBAR\nBAZ\n"
        assert merge_marked_sections(original, formatted, "babel") == original

    def test_merges_only_marked_sections(self):
        marked = insert_markers("a\nb\nc\n", [ChangeRange(2, 3)], "babel")
        formatted = marked.upper().replace(
            get_marker("babel").upper(), get_marker("babel")
        )
        merged = merge_marked_sections(marked, formatted, "babel")
        assert merged == "a\nB\nc\n"

    def test_tolerates_indented_markers(self):
        marker = get_marker("babel")
        marked = insert_markers("a\nb\nc\n", [ChangeRange(2, 3)], "babel")
        formatted = f"A\n    {marker}\nbee\n  {marker}  \nC\n"
        assert merge_marked_sections(marked, formatted, "babel") == "a\nbee\nc\n"

    def test_mismatch_raises(self):
        marked = insert_markers("a\nb\nc\n", [ChangeRange(2, 3)], "babel")
        stripped = marked.replace(get_marker("babel") + "\n", "", 1)
        with pytest.raises(MarkerMismatchError):
            merge_marked_sections(marked, stripped, "babel")

    def test_split_alternates_outside_and_inside(self):
        marked = insert_markers("a\nb\nc\nd\n", [ChangeRange(2, 3), ChangeRange(4, 5)], "babel")
        assert split_marked_sections(marked, "babel") == ["a\n", "b\n", "c\n", "d\n", ""]


@pytest.mark.parametrize(
    "text,ranges,language",
    [
        ("a\nb\nc\n", [ChangeRange(1, 2)], "babel"),
        ("a\nb\nc\n", [ChangeRange(1, 4)], "css"),
        ("a\r\nb\r\nc\r\n", [ChangeRange(2, 3)], "typescript"),
        ("<p>\n</p>\n<br>\n", [ChangeRange(1, 2), ChangeRange(3, 4)], "html"),
        ("k: v\nx: y\n", [ChangeRange(2, 3)], "yaml"),
        ("a\n\n\nb\n", [ChangeRange(2, 4)], "graphql"),
    ],
)
def test_identity_round_trip(text, ranges, language):
    marked = insert_markers(text, ranges, language)
    assert merge_marked_sections(marked, marked, language) == text


def test_identity_round_trip_adds_missing_newline():
    marked = insert_markers("a\nb", [ChangeRange(1, 2)], "babel")
    assert merge_marked_sections(marked, marked, "babel") == "a\nb\n"


class TestMergeSections:
    def test_odd_items_from_formatted(self):
        assert merge_sections(["a\n", "b\n", "c\n"], ["A\n", "B\n", "C\n"]) == "a\nB\nc\n"

    def test_length_mismatch(self):
        with pytest.raises(MarkerMismatchError, match="3 vs 1"):
            merge_sections(["a\n", "b\n", "c\n"], ["abc\n"])

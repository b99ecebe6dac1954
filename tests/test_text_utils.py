"""Tests for aospscan.text_utils"""

import pytest
from aospscan.text_utils import (
    extract_balanced, split_top_level, split_words,
    strip_line_comment, strip_make_comment, strip_comments, ordered_unique,
)


class TestExtractBalanced:
    def test_simple_span(self):
        text = "name { a: 1 }"
        assert extract_balanced(text, "{", "}") == (5, 12)

    def test_nested_span(self):
        text = "x { a: { b: 1 } } y"
        start, end = extract_balanced(text, "{", "}")
        assert text[start:end + 1] == "{ a: { b: 1 } }"

    def test_starts_at_from_index(self):
        text = "{a} {b}"
        assert extract_balanced(text, "{", "}", 1) == (4, 6)

    def test_ignores_brackets_in_strings(self):
        text = 'm { cflags: ["-DX=\\"}\\"", "{"] }'
        start, end = extract_balanced(text, "{", "}")
        assert start == 2
        assert end == len(text) - 1

    def test_unbalanced_returns_none(self):
        assert extract_balanced("m { a: {", "{", "}") is None

    def test_no_open_char_returns_none(self):
        assert extract_balanced("nothing here", "{", "}") is None

    def test_quotes_disabled(self):
        text = "$(subst \",x,a\")"
        assert extract_balanced(text, "(", ")", quotes="") == (1, len(text) - 1)


class TestSplitting:
    def test_split_top_level_respects_parens(self):
        assert split_top_level("a,$(f x,y),c") == ["a", "$(f x,y)", "c"]

    def test_split_words_on_whitespace_and_backslash(self):
        assert split_words("a \\ b\tc") == ["a", "b", "c"]

    def test_split_words_keeps_macro_calls_whole(self):
        words = split_words("$(call include-path-for, camera) inc")
        assert words == ["$(call include-path-for, camera)", "inc"]

    def test_split_words_keeps_escaped_quotes(self):
        assert split_words('-DNAME=\\"x\\" -O2') == ['-DNAME=\\"x\\"', "-O2"]


class TestComments:
    def test_strip_line_comment(self):
        assert strip_line_comment('name: "x", // trailing') == 'name: "x", '

    def test_line_comment_marker_inside_string(self):
        line = 'url: "http://example.com",'
        assert strip_line_comment(line) == line

    def test_escaped_marker_kept(self):
        assert strip_line_comment(r"a \# b # c", "#", quotes="") == r"a \# b "

    def test_nested_marker_kept(self):
        line = "$(subst #,x,a) # gone"
        assert strip_line_comment(line, "#", quotes="", nested=True) == "$(subst #,x,a) "

    def test_strip_make_comment(self):
        assert strip_make_comment("LOCAL_CFLAGS := -Wall # keep warnings on") == "LOCAL_CFLAGS := -Wall "
        assert strip_make_comment(r"LOCAL_CFLAGS := -DCH=\#") == "LOCAL_CFLAGS := -DCH=#"

    def test_strip_comments_block_and_line(self):
        text = 'a /* gone */ b "/* kept */" // tail\nc'
        assert strip_comments(text) == 'a   b "/* kept */" \nc'

    def test_url_inside_block_comment(self):
        text = "/* Docs: https://source.android.com/docs */\nm { }"
        assert strip_comments(text) == " \nm { }"

    def test_block_marker_inside_line_comment(self):
        assert strip_comments("// see /* here\nm { }") == "\nm { }"

    def test_line_comment_marker_inside_string_survives(self):
        text = 'url: "http://example.com", // gone'
        assert strip_comments(text) == 'url: "http://example.com", '

    def test_unterminated_block_comment(self):
        assert strip_comments("a /* never closed") == "a "


class TestOrderedUnique:
    def test_keeps_first_appearance(self):
        assert ordered_unique(["b", "a", "b", "c", "a"]) == ["b", "a", "c"]

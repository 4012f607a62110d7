"""Tests for pi.mention.utils."""

from __future__ import annotations

from pi.mention.utils import (
    grapheme_len_after,
    grapheme_len_before,
    normalize_to_single_line,
    truncate_to_width,
    visible_width,
)


class TestGraphemeStepping:
    """Caret steps cover whole grapheme clusters, not single code points."""

    def test_ascii(self):
        assert grapheme_len_before("abc", 2) == 1
        assert grapheme_len_after("abc", 2) == 1

    def test_combining_mark(self):
        text = "ae\u0301"
        assert grapheme_len_before(text, 3) == 2
        assert grapheme_len_after(text, 1) == 2

    def test_edges(self):
        assert grapheme_len_before("abc", 0) == 0
        assert grapheme_len_after("abc", 3) == 0


class TestVisibleWidth:
    def test_plain(self):
        assert visible_width("hello") == 5

    def test_sgr_is_ignored(self):
        assert visible_width("\x1b[1mbold\x1b[22m") == 4

    def test_wide_characters(self):
        assert visible_width("日本") == 4

    def test_empty(self):
        assert visible_width("") == 0


class TestTruncateToWidth:
    def test_short_text_untouched(self):
        assert truncate_to_width("Carole", 10) == "Carole"

    def test_ellipsis_counts_towards_width(self):
        assert truncate_to_width("Abdulraheem Fareed", 8) == "Abdul..."

    def test_custom_ellipsis(self):
        assert truncate_to_width("Abdulraheem Fareed", 5, "") == "Abdul"

    def test_zero_width(self):
        assert truncate_to_width("abc", 0) == ""


class TestNormalizeToSingleLine:
    def test_collapses_newlines(self):
        assert normalize_to_single_line("Carole\r\nMutemi\n") == "Carole Mutemi"

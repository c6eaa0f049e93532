"""
Tests for the escaped-delimiter tokenizer.

Tests cover:
- Outer delimiter stripping
- Splitting on unescaped delimiters
- Backslash escapes for delimiter, backslash and punctuation
- Resumable cursor and token limits
- Whitespace trimming
"""

import pytest
from psv.tables.components.tokenizer import (
    iter_tokens,
    next_token,
    split_cells,
    strip_line_terminator,
    strip_outer_delimiters,
    trim_whitespace,
)


class TestStripOuterDelimiters:
    """Test reduction of a table line to its cell content."""

    def test_standard_line(self):
        """Should drop leading pipe, trailing pipe and newline."""
        assert strip_outer_delimiters("| a | b |\n") == " a | b "

    def test_crlf_line(self):
        """Should drop a CRLF terminator."""
        assert strip_outer_delimiters("| a | b |\r\n") == " a | b "

    def test_missing_trailing_delimiter(self):
        """Should keep the remainder when there is no closing pipe."""
        assert strip_outer_delimiters("| a | b") == " a | b"

    def test_text_after_last_delimiter_kept(self):
        """Should keep text after the last pipe as the final cell."""
        assert strip_outer_delimiters("| a | b | trailing\n") == " a | b | trailing"

    def test_whitespace_after_closing_delimiter(self):
        """Should still treat a pipe followed by spaces as the closing one."""
        assert strip_outer_delimiters("| a | b |  \t\n") == " a | b "

    def test_row_without_closing_delimiter_keeps_last_cell(self):
        """Should split an unclosed row into all of its cells."""
        assert split_cells("| Ann | 30") == ["Ann", "30"]

    def test_escaped_trailing_delimiter_kept(self):
        """Should not treat an escaped pipe as the closing delimiter."""
        assert strip_outer_delimiters("| a \\|") == " a \\|"

    def test_escaped_backslash_before_delimiter(self):
        """Should treat a pipe after an escaped backslash as a delimiter."""
        assert strip_outer_delimiters("| a \\\\|") == " a \\\\"

    def test_only_delimiter(self):
        """Should yield empty content for a lone pipe."""
        assert strip_outer_delimiters("|\n") == ""

    def test_custom_delimiter(self):
        """Should honour a different delimiter character."""
        assert strip_outer_delimiters("; a ; b ;", ";") == " a ; b "


class TestNextToken:
    """Test single-token reads with an explicit cursor."""

    def test_first_token(self):
        """Should return the first token and the cursor after the delimiter."""
        assert next_token("a|b") == ("a", 2)

    def test_resume_from_cursor(self):
        """Should continue exactly where the previous call stopped."""
        token, cursor = next_token("a|b|c")
        token, cursor = next_token("a|b|c", "|", cursor)
        assert token == "b"
        assert next_token("a|b|c", "|", cursor) == ("c", 5)

    def test_end_of_content(self):
        """Should return None when nothing remains."""
        assert next_token("a", "|", 1) is None

    def test_empty_content(self):
        """Should return None for an empty buffer."""
        assert next_token("") is None

    def test_empty_token_between_delimiters(self):
        """Should return an empty token for adjacent delimiters."""
        assert next_token("|b") == ("", 1)


class TestIterTokens:
    """Test full tokenization."""

    def test_basic_split(self):
        """Should split on each delimiter."""
        assert list(iter_tokens(" a | b | c ")) == [" a ", " b ", " c "]

    def test_escaped_delimiter_does_not_split(self):
        """Should keep an escaped pipe inside the cell."""
        assert list(iter_tokens(" a \\| b | c ")) == [" a | b ", " c "]

    def test_escaped_backslash(self):
        """Should collapse a double backslash to one."""
        assert list(iter_tokens("a\\\\b")) == ["a\\b"]

    def test_escaped_punctuation(self):
        """Should drop the backslash before punctuation."""
        assert list(iter_tokens("\\*bold\\* \\[x\\]")) == ["*bold* [x]"]

    def test_backslash_before_letter_kept(self):
        """Should keep a backslash that does not escape anything."""
        assert list(iter_tokens("C:\\temp")) == ["C:\\temp"]

    def test_trailing_backslash_kept(self):
        """Should keep a backslash at the very end."""
        assert list(iter_tokens("a\\")) == ["a\\"]

    def test_empty_middle_tokens(self):
        """Should produce empty tokens for adjacent delimiters."""
        assert list(iter_tokens("a||b")) == ["a", "", "b"]

    def test_no_token_after_final_delimiter(self):
        """Should not produce a token for the empty remainder."""
        assert list(iter_tokens("a|")) == ["a"]

    def test_limit_stops_early(self):
        """Should stop after the requested number of tokens."""
        assert list(iter_tokens("a|b|c|d", limit=2)) == ["a", "b"]

    def test_limit_larger_than_tokens(self):
        """Should return all tokens when fewer than the limit exist."""
        assert list(iter_tokens("a|b", limit=5)) == ["a", "b"]

    @pytest.mark.parametrize("content", [
        "plain",
        "a|b|c",
        " spaced | out ",
        "a\\|b|c",
        "x\\\\|y",
        "\\#tag|\\-dash",
    ])
    def test_rejoin_recovers_unescaped_content(self, content):
        """Joining tokens with the delimiter should equal the un-escaped text."""
        unescaped = []
        i = 0
        while i < len(content):
            if content[i] == "\\" and i + 1 < len(content):
                unescaped.append(content[i + 1])
                i += 2
                continue
            unescaped.append(content[i])
            i += 1
        assert "|".join(iter_tokens(content)) == "".join(unescaped)


class TestTrimWhitespace:
    """Test the whitespace trimmer."""

    def test_trims_ascii_whitespace(self):
        """Should strip spaces, tabs and line breaks."""
        assert trim_whitespace(" \t value \r\n") == "value"

    def test_keeps_inner_whitespace(self):
        """Should not touch whitespace inside the token."""
        assert trim_whitespace("  two words ") == "two words"

    def test_keeps_non_ascii_whitespace(self):
        """Should only strip ASCII whitespace."""
        assert trim_whitespace("\u00a0x\u00a0") == "\u00a0x\u00a0"

    def test_empty(self):
        """Should handle empty and blank tokens."""
        assert trim_whitespace("") == ""
        assert trim_whitespace("   ") == ""


class TestHelpers:
    """Test line helpers."""

    def test_strip_line_terminator(self):
        """Should remove LF and CRLF but nothing else."""
        assert strip_line_terminator("a\n") == "a"
        assert strip_line_terminator("a\r\n") == "a"
        assert strip_line_terminator("a ") == "a "

    def test_split_cells(self):
        """Should strip delimiters and trim each cell."""
        assert split_cells("| Ann | 30 |\n") == ["Ann", "30"]

    def test_split_cells_with_limit(self):
        """Should cap the number of cells."""
        assert split_cells("| a | b | c |", limit=2) == ["a", "b"]

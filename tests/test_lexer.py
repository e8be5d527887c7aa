"""Tests for the patch line lexer."""

import pytest

from redline.diff.lexer import (
    PatchLexer,
    TokenKind,
    classify_body,
    classify_header,
    decode_patch,
    split_lines,
)


class TestDecodePatch:
    """Tests for decode_patch."""

    def test_text_passthrough(self):
        assert decode_patch("abc") == ("abc", "utf-8")

    def test_utf8_bytes(self):
        assert decode_patch("é".encode("utf-8")) == ("é", "utf-8")

    def test_latin1_fallback(self):
        assert decode_patch(b"\xe9") == ("é", "latin-1")


class TestSplitLines:
    """Tests for split_lines."""

    def test_empty(self):
        assert split_lines("") == []

    def test_offsets_and_numbers(self):
        """Test byte offsets account for multi-byte characters."""
        lines = split_lines("é\nab\n")
        assert [l.text for l in lines] == ["é", "ab"]
        assert [l.offset for l in lines] == [0, 3]
        assert [l.line_number for l in lines] == [1, 2]

    def test_crlf_stripped(self):
        """Test one trailing carriage return is dropped."""
        lines = split_lines("a\r\nb\r\r\n")
        assert [l.text for l in lines] == ["a", "b\r"]
        assert lines[1].offset == 3

    def test_no_trailing_newline(self):
        lines = split_lines("a\nb")
        assert [l.text for l in lines] == ["a", "b"]

    def test_inner_empty_line_kept(self):
        lines = split_lines("a\n\nb\n")
        assert [l.text for l in lines] == ["a", "", "b"]


class TestClassify:
    """Tests for mode-dependent line classification."""

    @pytest.mark.parametrize(
        "text,kind",
        [
            ("diff --git a/x b/x", TokenKind.GIT_HEADER),
            ("@@ -1 +1 @@", TokenKind.HUNK_HEADER),
            ("--- a/x", TokenKind.OLD_FILE),
            ("+++ b/x", TokenKind.NEW_FILE),
            ("Binary files a/x and b/x differ", TokenKind.BINARY),
            ("GIT binary patch", TokenKind.BINARY),
            ("new file mode 100644", TokenKind.EXTENDED),
            ("rename from a.txt", TokenKind.EXTENDED),
            ("index 0000000..1111111", TokenKind.EXTENDED),
            ("---", TokenKind.OTHER),
            ("Subject: [PATCH] x", TokenKind.OTHER),
        ],
    )
    def test_header_mode(self, text, kind):
        assert classify_header(text) == kind

    @pytest.mark.parametrize(
        "text,kind",
        [
            (" ctx", TokenKind.CONTEXT),
            ("", TokenKind.CONTEXT),
            ("+add", TokenKind.ADDITION),
            ("+++ b/x", TokenKind.ADDITION),
            ("-del", TokenKind.DELETION),
            ("--- a/x", TokenKind.DELETION),
            ("\\ No newline at end of file", TokenKind.NO_NEWLINE),
            ("@@ -1 +1 @@", TokenKind.END),
            ("diff --git a/x b/x", TokenKind.END),
        ],
    )
    def test_body_mode(self, text, kind):
        assert classify_body(text) == kind


class TestPatchLexer:
    """Tests for PatchLexer cursor."""

    def test_peek_and_advance(self):
        lexer = PatchLexer("--- a/x\n+++ b/x\n")
        assert lexer.peek_header().kind == TokenKind.OLD_FILE
        assert lexer.peek_header(1).kind == TokenKind.NEW_FILE
        assert lexer.peek_header(2) is None

        lexer.advance()
        token = lexer.peek_body()
        assert token.kind == TokenKind.ADDITION
        assert token.offset == 8
        assert token.line_number == 2

    def test_end_position(self):
        lexer = PatchLexer("ab\n")
        lexer.advance()
        assert lexer.at_end
        assert lexer.offset == 3
        assert lexer.line_number == 2
        assert lexer.peek_body() is None

        lexer.advance()
        assert lexer.at_end

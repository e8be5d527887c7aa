"""Tests for emitting patch text."""

from pathlib import Path

import pytest

from redline.diff.parser import parse_patch
from redline.diff.writer import format_hunk, format_patch


FIXTURES_DIR = Path(__file__).parent / "fixtures" / "patches"


def _projection(files):
    """Reduce parsed files to what emitting must preserve."""
    return [
        (
            f.old_path,
            f.new_path,
            f.is_new,
            f.is_delete,
            f.is_binary,
            [
                (h.old_start, h.old_lines, h.new_start, h.new_lines, h.no_newline, h.lines)
                for h in f.hunks
            ],
        )
        for f in files
    ]


class TestFormatPatch:
    """Tests for format_patch function."""

    def test_empty(self):
        assert format_patch([]) == ""

    @pytest.mark.parametrize(
        "name",
        [
            "simple_modify.patch",
            "new_file.patch",
            "deleted_file.patch",
            "binary.patch",
            "multi_file.patch",
            "complex.patch",
            "crlf.patch",
        ],
    )
    def test_reparse_preserves_hunks(self, name):
        """Test emitted text parses back to equivalent files."""
        files = parse_patch((FIXTURES_DIR / name).read_bytes())
        assert _projection(parse_patch(format_patch(files))) == _projection(files)

    def test_new_file_headers(self):
        """Test created files use /dev/null on the old side."""
        files = parse_patch((FIXTURES_DIR / "new_file.patch").read_text())
        text = format_patch(files)

        assert "new file mode 100644\n" in text
        assert "--- /dev/null\n" in text
        assert "+++ b/new.txt\n" in text

    def test_rename_headers(self):
        """Test pure renames keep their rename lines."""
        files = parse_patch((FIXTURES_DIR / "multi_file.patch").read_text())
        text = format_patch(files[1:2])

        assert text == (
            "diff --git a/docs/old_name.md b/docs/new_name.md\n"
            "rename from docs/old_name.md\n"
            "rename to docs/new_name.md\n"
        )


class TestFormatHunk:
    """Tests for format_hunk function."""

    def test_no_newline_marker(self):
        """Test the no-newline marker is written after the body."""
        readme = parse_patch((FIXTURES_DIR / "multi_file.patch").read_text())[3]
        lines = format_hunk(readme.hunks[0])

        assert lines == [
            "@@ -1,2 +1,3 @@",
            " # Project",
            "+",
            " Some text",
            "\\ No newline at end of file",
        ]

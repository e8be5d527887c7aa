"""Tests for output formatters."""

import json
from pathlib import Path

import pytest

from redline.core.review import (
    ReviewState,
    add_comment,
    approve_file,
    approve_hunk,
    reject_file,
)
from redline.diff.parser import parse_patch
from redline.diff.types import FileDiff
from redline.output import get_formatter
from redline.output.base import approval_label
from redline.output.json import JSONFormatter
from redline.output.markdown import MarkdownFormatter
from redline.output.text import TextFormatter


FIXTURES_DIR = Path(__file__).parent.parent / "fixtures" / "patches"


@pytest.fixture
def sample_state() -> ReviewState:
    """A review of the multi-file patch with decisions and comments."""
    state = ReviewState.from_files(parse_patch((FIXTURES_DIR / "multi_file.patch").read_text()))
    state = approve_hunk(state, "src/app.py", "h0_0")
    state = reject_file(state, "assets/logo.png")
    state = approve_file(state, "README.md")
    state = add_comment(state, "src/app.py", 2, "Why switch to logging?", hunk_id="h0_0", author="alice")
    state = add_comment(state, "src/app.py", 13, "Should report() be optional?", hunk_id="h0_1")
    return add_comment(state, "src/app.py", 99, "Unrelated note")


@pytest.fixture
def empty_state() -> ReviewState:
    """A review with no files."""
    return ReviewState()


class TestApprovalLabel:
    """Tests for approval_label."""

    def test_labels(self):
        assert approval_label(True) == "approved"
        assert approval_label(False) == "rejected"
        assert approval_label(None) == "pending"


class TestTextFormatter:
    """Tests for TextFormatter."""

    def test_name(self):
        assert TextFormatter().name == "text"

    def test_format_empty(self, empty_state):
        """Test formatting a review with no files."""
        output = TextFormatter(color=False).format(empty_state, target="empty.patch")
        assert "Redline Review" in output
        assert "Target: empty.patch" in output
        assert "No changes." in output

    def test_format_summary_line(self, sample_state):
        output = TextFormatter(color=False).format(sample_state)
        assert "4 file(s): 1 added, 3 modified, 0 deleted  +3 -1  Low Risk" in output

    def test_format_file_headers(self, sample_state):
        """Test each file shows its change tags and decision."""
        output = TextFormatter(color=False).format(sample_state)

        assert "src/app.py [pending]" in output
        assert "docs/new_name.md [renamed from docs/old_name.md, pending]" in output
        assert "assets/logo.png [new, binary, rejected]" in output
        assert "README.md [approved]" in output
        assert "Binary file - cannot display diff" in output
        assert "No content changes" in output

    def test_format_unified_lines(self, sample_state):
        """Test unified lines carry both line numbers."""
        output = TextFormatter(color=False).format(sample_state)

        assert "@@ -1,4 +1,4 @@ [approved]" in output
        assert "@@ -10,4 +10,5 @@ def main():" in output
        assert "    2       -import sys" in output
        assert "          2 +import logging" in output
        assert "   12    12      cleanup()" in output

    def test_comments_under_their_line(self, sample_state):
        """Test threads appear after the line they anchor to."""
        lines = TextFormatter(color=False).format(sample_state).splitlines()

        added = next(i for i, l in enumerate(lines) if l.endswith("+    report()"))
        assert "Should report() be optional?" in lines[added + 1]
        assert "line 13" in lines[added + 1]

    def test_comment_follows_first_matching_line(self, sample_state):
        """Test a line number shared by a deleted and an added line threads once."""
        lines = TextFormatter(color=False).format(sample_state).splitlines()

        deleted = next(i for i, l in enumerate(lines) if l.endswith("-import sys"))
        assert "Why switch to logging?" in lines[deleted + 1]
        assert "alice" in lines[deleted + 1]
        assert sum("Why switch to logging?" in l for l in lines) == 1

    def test_orphan_comments(self, sample_state):
        """Test comments outside every hunk are listed after the file."""
        output = TextFormatter(color=False).format(sample_state)
        assert "Other comments:" in output
        assert "line 99" in output
        assert output.count("Why switch to logging?") == 1

    def test_without_comments(self, sample_state):
        output = TextFormatter(color=False).format(sample_state, include_comments=False)
        assert "Why switch to logging?" not in output
        assert "Other comments:" not in output

    def test_split_view(self, sample_state):
        """Test the split view pairs changed lines in one row."""
        output = TextFormatter(view="split", width=100, color=False).format(sample_state)
        row = next(l for l in output.splitlines() if "import sys" in l)
        assert "import logging" in row
        assert " | " in row

    def test_split_view_truncates(self):
        """Test long lines are cut to the column width."""
        content = "--- a/t.txt\n+++ b/t.txt\n@@ -1 +1 @@\n-" + "x" * 200 + "\n+y\n"
        state = ReviewState.from_files(parse_patch(content))
        output = TextFormatter(view="split", width=60, color=False).format(state)
        assert "x" * 200 not in output
        assert "~" in output

    def test_color(self, sample_state):
        output = TextFormatter(color=True).format(sample_state)
        assert "\033[" in output

    def test_no_color(self, sample_state):
        output = TextFormatter(color=False).format(sample_state)
        assert "\033[" not in output


class TestJSONFormatter:
    """Tests for JSONFormatter."""

    def test_name(self):
        assert JSONFormatter().name == "json"

    def test_format_empty(self, empty_state):
        data = json.loads(JSONFormatter().format(empty_state, target="empty.patch"))
        assert data["target"] == "empty.patch"
        assert data["files"] == []
        assert data["summary"]["totalFiles"] == 0
        assert data["summary"]["riskLevel"] == "low"

    def test_format_files(self, sample_state):
        """Test files carry keys, decisions and comments."""
        data = json.loads(JSONFormatter().format(sample_state, target="multi.patch"))

        assert "version" in data
        assert [f["key"] for f in data["files"]] == [
            "src/app.py",
            "docs/new_name.md",
            "assets/logo.png",
            "README.md",
        ]
        app = data["files"][0]
        assert app["effectiveApproval"] is None
        assert app["hunks"][0]["approved"] is True
        assert len(app["comments"]) == 3
        assert data["files"][2]["oldPath"] == "/dev/null"
        assert data["files"][2]["effectiveApproval"] is False
        assert data["files"][3]["effectiveApproval"] is True

    def test_side_by_side_rows(self, sample_state):
        data = json.loads(JSONFormatter().format(sample_state))
        rows = data["files"][0]["sideBySide"]

        assert rows[1] == {
            "type": "modified",
            "leftNum": 2,
            "leftContent": "import sys",
            "rightNum": 2,
            "rightContent": "import logging",
        }
        assert any("header" in row for row in rows)
        assert data["files"][2]["sideBySide"] == []

    def test_without_side_by_side(self, sample_state):
        data = json.loads(JSONFormatter(include_side_by_side=False).format(sample_state))
        assert "sideBySide" not in data["files"][0]

    def test_without_comments(self, sample_state):
        data = json.loads(JSONFormatter().format(sample_state, include_comments=False))
        assert "comments" not in data["files"][0]


class TestMarkdownFormatter:
    """Tests for MarkdownFormatter."""

    def test_name(self):
        assert MarkdownFormatter().name == "markdown"

    def test_format_empty(self, empty_state):
        output = MarkdownFormatter().format(empty_state)
        assert "## Redline Review" in output
        assert "No changes." in output

    def test_format_summary_table(self, sample_state):
        output = MarkdownFormatter().format(sample_state, target="multi.patch")

        assert "**4 file(s)** in `multi.patch`" in output
        assert "| 1 | 3 | 0 | +3 / -1 | :green_circle: Low Risk |" in output

    def test_format_file_rows(self, sample_state):
        output = MarkdownFormatter().format(sample_state)

        assert "| `src/app.py` | modified | +2 / -1 | pending | 3 |" in output
        assert "| `docs/new_name.md` | renamed from `docs/old_name.md` | +0 / -0 | pending | 0 |" in output
        assert "| `assets/logo.png` | added (binary) | - | rejected | 0 |" in output
        assert "| `README.md` | modified | +1 / -0 | approved | 0 |" in output

    def test_format_comments_by_line(self, sample_state):
        """Test comments are listed per file in line order."""
        output = MarkdownFormatter().format(sample_state)

        assert "### Comments" in output
        assert "#### `src/app.py`" in output
        first = output.index("Why switch to logging?")
        second = output.index("Should report() be optional?")
        third = output.index("Unrelated note")
        assert first < second < third
        assert "**line 2 (h0_0)** alice" in output
        assert "**line 99** You" in output

    def test_without_comments(self, sample_state):
        output = MarkdownFormatter().format(sample_state, include_comments=False)
        assert "### Comments" not in output

    def test_escapes_pipes(self):
        state = ReviewState.from_files([FileDiff(old_path="a|b.txt", new_path="a|b.txt")])
        output = MarkdownFormatter().format(state)
        assert "`a\\|b.txt`" in output

    def test_high_risk_emoji(self):
        files = [FileDiff(old_path=f"f{i}", new_path=None, is_delete=True) for i in range(6)]
        output = MarkdownFormatter().format(ReviewState.from_files(files))
        assert ":red_circle: High Risk" in output


class TestGetFormatter:
    """Tests for get_formatter function."""

    def test_get_text_formatter(self):
        assert isinstance(get_formatter("text"), TextFormatter)

    def test_get_json_formatter(self):
        assert isinstance(get_formatter("json"), JSONFormatter)

    def test_get_markdown_formatter(self):
        assert isinstance(get_formatter("markdown"), MarkdownFormatter)

    def test_options_passed(self):
        formatter = get_formatter("text", view="split", color=False)
        assert formatter.view == "split"
        assert formatter.color is False

    def test_unknown_formatter(self):
        with pytest.raises(ValueError, match="Unknown formatter"):
            get_formatter("sarif")

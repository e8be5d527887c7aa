"""Text output formatter for Redline."""

from typing import Optional

from redline.core.review import ReviewState, anchor_line_number, thread_at
from redline.diff.side_by_side import SideBySideKind, SideBySideLine, align_hunk
from redline.diff.summary import DiffSummary, RiskLevel, summarize
from redline.diff.types import DiffComment, FileDiff, Hunk, LineKind
from redline.output.base import Formatter, approval_label

# ANSI color codes
RED = "\033[91m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
CYAN = "\033[96m"
GRAY = "\033[90m"
RESET = "\033[0m"
BOLD = "\033[1m"

RISK_COLORS = {
    RiskLevel.LOW: GREEN,
    RiskLevel.MEDIUM: YELLOW,
    RiskLevel.HIGH: RED,
}

LINE_COLORS = {
    LineKind.ADDITION: GREEN,
    LineKind.DELETION: RED,
}

LINE_PREFIXES = {
    LineKind.CONTEXT: " ",
    LineKind.ADDITION: "+",
    LineKind.DELETION: "-",
}

TAB = "    "


class TextFormatter(Formatter):
    """Human-readable text formatter for terminal output."""

    def __init__(self, view: str = "unified", width: int = 160, color: bool = True) -> None:
        self.view = view
        self.width = width
        self.color = color

    @property
    def name(self) -> str:
        return "text"

    def format(
        self,
        state: ReviewState,
        target: str = "",
        include_comments: bool = True,
    ) -> str:
        """Format a review as terminal text.

        Args:
            state: The review to format.
            target: Name of the patch being reviewed.
            include_comments: Whether to include comment threads.

        Returns:
            Formatted text output.
        """
        lines: list[str] = []

        lines.append(self._style("Redline Review", BOLD))
        if target:
            lines.append(f"Target: {target}")
        lines.append("")

        if not state.files:
            lines.append("No changes.")
            return "\n".join(lines)

        lines.append(self.format_summary(summarize(state.files)))
        lines.append("")

        for file_diff in state.files:
            lines.extend(self._format_file(state, file_diff, include_comments))
            lines.append("")

        return "\n".join(lines).rstrip("\n")

    def format_summary(self, summary: DiffSummary) -> str:
        """One-line change summary with the colored risk level."""
        risk = self._style(summary.risk.label, RISK_COLORS[summary.risk])
        return (
            f"{summary.total_files} file(s): {summary.files_added} added, "
            f"{summary.files_modified} modified, {summary.files_deleted} deleted  "
            f"{self._style(f'+{summary.lines_added}', GREEN)} "
            f"{self._style(f'-{summary.lines_deleted}', RED)}  {risk}"
        )

    def _format_file(
        self, state: ReviewState, file_diff: FileDiff, include_comments: bool
    ) -> list[str]:
        lines: list[str] = []

        tags = []
        if file_diff.is_new:
            tags.append("new")
        if file_diff.is_delete:
            tags.append("deleted")
        if file_diff.is_renamed:
            tags.append(f"renamed from {file_diff.old_path}")
        if file_diff.is_binary:
            tags.append("binary")
        tags.append(approval_label(file_diff.effective_approval))
        lines.append(f"{self._style(file_diff.key, BOLD)} [{', '.join(tags)}]")

        if file_diff.is_binary:
            lines.append("  Binary file - cannot display diff")
            return lines
        if not file_diff.hunks:
            lines.append("  No content changes")
            return lines

        printed: set[str] = set()
        for hunk in file_diff.hunks:
            status = "" if hunk.approved is None else f" [{approval_label(hunk.approved)}]"
            lines.append(self._style(hunk.format_header() + status, CYAN))
            if self.view == "split":
                body = self._format_split(state, file_diff, hunk, include_comments, printed)
            else:
                body = self._format_unified(state, file_diff, hunk, include_comments, printed)
            lines.extend(body)

        # Comments whose anchor line is not part of any hunk
        if include_comments:
            orphans = [c for c in file_diff.comments if c.id not in printed]
            if orphans:
                lines.append(self._style("Other comments:", BOLD))
                lines.extend(self._format_comment(c, indent=2) for c in orphans)

        return lines

    def _format_unified(
        self,
        state: ReviewState,
        file_diff: FileDiff,
        hunk: Hunk,
        include_comments: bool,
        printed: set[str],
    ) -> list[str]:
        lines: list[str] = []
        for line in hunk.lines:
            old = "" if line.old_num is None else str(line.old_num)
            new = "" if line.new_num is None else str(line.new_num)
            text = f"{LINE_PREFIXES[line.kind]}{line.content.replace(chr(9), TAB)}"
            color = LINE_COLORS.get(line.kind)
            lines.append(f"{self._style(f'{old:>5} {new:>5}', GRAY)} {self._style(text, color)}")

            if include_comments:
                anchor = anchor_line_number(line)
                lines.extend(self._thread(state, file_diff, hunk, anchor, printed, indent=12))
        return lines

    def _format_split(
        self,
        state: ReviewState,
        file_diff: FileDiff,
        hunk: Hunk,
        include_comments: bool,
        printed: set[str],
    ) -> list[str]:
        # Two cells of "nnnnn text", separated by " | "
        cell = max((self.width - 3) // 2 - 6, 10)
        lines: list[str] = []
        for row in align_hunk(hunk):
            left = self._cell(row.left_num, row.left_content, cell, _left_color(row))
            right = self._cell(row.right_num, row.right_content, cell, _right_color(row))
            lines.append(f"{left} | {right}")

            if include_comments:
                anchors = []
                if row.kind in (SideBySideKind.DELETED, SideBySideKind.MODIFIED):
                    anchors.append(row.left_num)
                if row.right_num is not None:
                    anchors.append(row.right_num)
                for anchor in anchors:
                    lines.extend(self._thread(state, file_diff, hunk, anchor, printed, indent=6))
        return lines

    def _cell(
        self, num: Optional[int], content: Optional[str], width: int, color: Optional[str]
    ) -> str:
        if num is None and content is None:
            return " " * (width + 6)
        text = (content or "").replace("\t", TAB)
        if len(text) > width:
            text = text[: width - 1] + "~"
        number = "" if num is None else str(num)
        return f"{self._style(f'{number:>5}', GRAY)} {self._style(text.ljust(width), color)}"

    def _thread(
        self,
        state: ReviewState,
        file_diff: FileDiff,
        hunk: Hunk,
        anchor: Optional[int],
        printed: set[str],
        indent: int,
    ) -> list[str]:
        if anchor is None or not file_diff.comments:
            return []
        lines = []
        for comment in thread_at(state, file_diff.key, anchor, hunk.id):
            if comment.id in printed:
                continue
            printed.add(comment.id)
            lines.append(self._format_comment(comment, indent))
        return lines

    def _format_comment(self, comment: DiffComment, indent: int) -> str:
        author = comment.author or "You"
        meta = self._style(f"{author} {comment.timestamp}", GRAY)
        return f"{' ' * indent}{self._style('>', YELLOW)} line {comment.line_num} {meta}: {comment.content}"

    def _style(self, text: str, code: Optional[str]) -> str:
        if not self.color or not code:
            return text
        return f"{code}{text}{RESET}"


def _left_color(row: SideBySideLine) -> Optional[str]:
    if row.kind in (SideBySideKind.DELETED, SideBySideKind.MODIFIED):
        return RED
    return None


def _right_color(row: SideBySideLine) -> Optional[str]:
    if row.kind in (SideBySideKind.ADDED, SideBySideKind.MODIFIED):
        return GREEN
    return None

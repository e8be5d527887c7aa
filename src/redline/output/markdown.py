"""Markdown output formatter for Redline."""

from redline.core.review import ReviewState
from redline.diff.summary import RiskLevel, summarize
from redline.diff.types import DiffComment, FileDiff
from redline.output.base import Formatter, approval_label

RISK_EMOJI = {
    RiskLevel.LOW: ":green_circle:",
    RiskLevel.MEDIUM: ":yellow_circle:",
    RiskLevel.HIGH: ":red_circle:",
}


class MarkdownFormatter(Formatter):
    """Markdown formatter for review reports."""

    @property
    def name(self) -> str:
        return "markdown"

    def format(
        self,
        state: ReviewState,
        target: str = "",
        include_comments: bool = True,
    ) -> str:
        """Format a review as a Markdown report.

        Args:
            state: The review to format.
            target: Name of the patch being reviewed.
            include_comments: Whether to include comment threads.

        Returns:
            Formatted Markdown string.
        """
        lines: list[str] = []

        lines.append("## Redline Review")
        lines.append("")

        if not state.files:
            lines.append("No changes.")
            return "\n".join(lines)

        summary = summarize(state.files)
        if target:
            lines.append(f"**{summary.total_files} file(s)** in `{target}`")
        else:
            lines.append(f"**{summary.total_files} file(s)**")
        lines.append("")

        lines.append("| Added | Modified | Deleted | Lines | Risk |")
        lines.append("|-------|----------|---------|-------|------|")
        lines.append(
            f"| {summary.files_added} | {summary.files_modified} | {summary.files_deleted} "
            f"| +{summary.lines_added} / -{summary.lines_deleted} "
            f"| {RISK_EMOJI[summary.risk]} {summary.risk.label} |"
        )
        lines.append("")

        lines.append("### Files")
        lines.append("")
        lines.append("| File | Change | Lines | Status | Comments |")
        lines.append("|------|--------|-------|--------|----------|")
        for file_diff in state.files:
            lines.append(self._format_file_row(file_diff))
        lines.append("")

        if include_comments:
            commented = [f for f in state.files if f.comments]
            if commented:
                lines.append("### Comments")
                lines.append("")
                for file_diff in commented:
                    lines.append(f"#### `{file_diff.key}`")
                    lines.append("")
                    for comment in sorted(file_diff.comments, key=lambda c: c.line_num):
                        lines.append(self._format_comment(comment))
                    lines.append("")

        return "\n".join(lines)

    def _format_file_row(self, file_diff: FileDiff) -> str:
        if file_diff.is_new:
            change = "added"
        elif file_diff.is_delete:
            change = "deleted"
        elif file_diff.is_renamed:
            change = f"renamed from `{_escape(file_diff.old_path or '')}`"
        else:
            change = "modified"
        if file_diff.is_binary:
            change += " (binary)"
            size = "-"
        else:
            size = f"+{file_diff.additions} / -{file_diff.deletions}"
        status = approval_label(file_diff.effective_approval)
        count = len(file_diff.comments)
        return f"| `{_escape(file_diff.key)}` | {change} | {size} | {status} | {count} |"

    def _format_comment(self, comment: DiffComment) -> str:
        author = comment.author or "You"
        where = f"line {comment.line_num}"
        if comment.hunk_id:
            where += f" ({comment.hunk_id})"
        return f"- **{where}** {author}, {comment.timestamp}: {comment.content}"


def _escape(text: str) -> str:
    return text.replace("|", "\\|")

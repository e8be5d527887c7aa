"""JSON output formatter for Redline."""

import json

from redline import __version__
from redline.core.review import ReviewState
from redline.diff.side_by_side import side_by_side
from redline.diff.summary import summarize
from redline.output.base import Formatter


class JSONFormatter(Formatter):
    """JSON formatter for machine-readable output."""

    def __init__(self, include_side_by_side: bool = True) -> None:
        self.include_side_by_side = include_side_by_side

    @property
    def name(self) -> str:
        return "json"

    def format(
        self,
        state: ReviewState,
        target: str = "",
        include_comments: bool = True,
    ) -> str:
        """Format a review as JSON.

        Args:
            state: The review to format.
            target: Name of the patch being reviewed.
            include_comments: Whether to include comment threads.

        Returns:
            Formatted JSON string.
        """
        output = {
            "version": __version__,
            "target": target,
            "summary": summarize(state.files).to_dict(),
            "files": [],
        }

        for file_diff in state.files:
            file_dict = file_diff.to_dict()
            file_dict["key"] = file_diff.key
            file_dict["effectiveApproval"] = file_diff.effective_approval
            if not include_comments:
                file_dict.pop("comments", None)
            if self.include_side_by_side:
                file_dict["sideBySide"] = [row.to_dict() for row in side_by_side(file_diff)]
            output["files"].append(file_dict)

        return json.dumps(output, indent=2)

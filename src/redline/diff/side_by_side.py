"""Two-column alignment of file diffs."""

from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from redline.diff.types import FileDiff, Hunk, Line, LineKind


class SideBySideKind(Enum):
    """Type of a side-by-side row."""

    CONTEXT = "context"
    ADDED = "added"
    DELETED = "deleted"
    MODIFIED = "modified"


@dataclass(frozen=True)
class SideBySideLine:
    """One row of a two-column diff view.

    A cell whose number and content are both None is blank. Rows carrying
    a ``header`` separate consecutive hunks and have both cells blank.
    """

    kind: SideBySideKind
    left_num: Optional[int] = None
    left_content: Optional[str] = None
    right_num: Optional[int] = None
    right_content: Optional[str] = None
    header: Optional[str] = None

    @property
    def is_hunk_boundary(self) -> bool:
        return self.header is not None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.kind.value}
        if self.left_num is not None:
            data["leftNum"] = self.left_num
        if self.left_content is not None:
            data["leftContent"] = self.left_content
        if self.right_num is not None:
            data["rightNum"] = self.right_num
        if self.right_content is not None:
            data["rightContent"] = self.right_content
        if self.header is not None:
            data["header"] = self.header
        return data


def side_by_side(file_diff: FileDiff) -> list[SideBySideLine]:
    """Align a file diff into two columns.

    Runs of deletions and additions between context lines are paired
    positionally into modified rows; the surplus of the longer run falls
    through as deleted or added rows. Binary files produce no rows.

    Args:
        file_diff: The file to align.

    Returns:
        Rows for every hunk in order, with a boundary row between hunks.
    """
    if file_diff.is_binary:
        return []

    rows: list[SideBySideLine] = []
    for index, hunk in enumerate(file_diff.hunks):
        if index > 0:
            rows.append(SideBySideLine(kind=SideBySideKind.CONTEXT, header=hunk.format_header()))
        rows.extend(align_hunk(hunk))
    return rows


def align_hunk(hunk: Hunk) -> list[SideBySideLine]:
    """Align the lines of a single hunk."""
    rows: list[SideBySideLine] = []
    pending_del: deque[Line] = deque()
    pending_add: deque[Line] = deque()

    for line in hunk.lines:
        if line.kind == LineKind.CONTEXT:
            _flush(pending_del, pending_add, rows)
            rows.append(
                SideBySideLine(
                    kind=SideBySideKind.CONTEXT,
                    left_num=line.old_num,
                    left_content=line.content,
                    right_num=line.new_num,
                    right_content=line.content,
                )
            )
        elif line.kind == LineKind.DELETION:
            pending_del.append(line)
        else:
            pending_add.append(line)

    _flush(pending_del, pending_add, rows)
    return rows


def _flush(
    pending_del: deque[Line],
    pending_add: deque[Line],
    rows: list[SideBySideLine],
) -> None:
    while pending_del and pending_add:
        deleted = pending_del.popleft()
        added = pending_add.popleft()
        rows.append(
            SideBySideLine(
                kind=SideBySideKind.MODIFIED,
                left_num=deleted.old_num,
                left_content=deleted.content,
                right_num=added.new_num,
                right_content=added.content,
            )
        )
    while pending_del:
        deleted = pending_del.popleft()
        rows.append(
            SideBySideLine(
                kind=SideBySideKind.DELETED,
                left_num=deleted.old_num,
                left_content=deleted.content,
            )
        )
    while pending_add:
        added = pending_add.popleft()
        rows.append(
            SideBySideLine(
                kind=SideBySideKind.ADDED,
                right_num=added.new_num,
                right_content=added.content,
            )
        )

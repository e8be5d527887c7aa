"""Diff data structures for Redline."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

# Null path marker used by unified diffs for created and deleted files.
DEV_NULL = "/dev/null"


def _path_to_text(path: Optional[str]) -> str:
    return DEV_NULL if path is None else path


def _path_from_text(text: Optional[str]) -> Optional[str]:
    if text is None or text == "" or text == DEV_NULL:
        return None
    return text


class LineKind(Enum):
    """Type of line in a diff hunk."""

    CONTEXT = "context"
    ADDITION = "addition"
    DELETION = "deletion"


@dataclass(frozen=True)
class Line:
    """A single line in a diff hunk."""

    kind: LineKind
    content: str
    old_num: Optional[int] = None
    new_num: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert line to its persisted form."""
        data: dict[str, Any] = {"type": self.kind.value, "content": self.content}
        if self.old_num is not None:
            data["oldNum"] = self.old_num
        if self.new_num is not None:
            data["newNum"] = self.new_num
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Line":
        return cls(
            kind=LineKind(data["type"]),
            content=data.get("content", ""),
            old_num=data.get("oldNum"),
            new_num=data.get("newNum"),
        )


@dataclass(frozen=True)
class Hunk:
    """A contiguous changed section in a file diff."""

    id: str
    old_start: int
    old_lines: int
    new_start: int
    new_lines: int
    lines: tuple[Line, ...]
    header: str = ""
    section: str = ""
    no_newline: bool = False
    approved: Optional[bool] = None

    @property
    def additions(self) -> int:
        return sum(1 for line in self.lines if line.kind == LineKind.ADDITION)

    @property
    def deletions(self) -> int:
        return sum(1 for line in self.lines if line.kind == LineKind.DELETION)

    def format_header(self) -> str:
        """Return the hunk header, rebuilding it when none was recorded."""
        if self.header:
            return self.header
        header = f"@@ -{self.old_start},{self.old_lines} +{self.new_start},{self.new_lines} @@"
        if self.section:
            header += f" {self.section}"
        return header

    def to_dict(self) -> dict[str, Any]:
        """Convert hunk to its persisted form."""
        data: dict[str, Any] = {
            "id": self.id,
            "oldStart": self.old_start,
            "oldLines": self.old_lines,
            "newStart": self.new_start,
            "newLines": self.new_lines,
            "lines": [line.to_dict() for line in self.lines],
        }
        if self.header:
            data["header"] = self.header
        if self.section:
            data["section"] = self.section
        if self.no_newline:
            data["noNewline"] = True
        if self.approved is not None:
            data["approved"] = self.approved
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Hunk":
        return cls(
            id=data.get("id", ""),
            old_start=data["oldStart"],
            old_lines=data["oldLines"],
            new_start=data["newStart"],
            new_lines=data["newLines"],
            lines=tuple(Line.from_dict(line) for line in data.get("lines", [])),
            header=data.get("header", ""),
            section=data.get("section", ""),
            no_newline=data.get("noNewline", False),
            approved=data.get("approved"),
        )


@dataclass(frozen=True)
class DiffComment:
    """A reviewer comment anchored to a line of a file diff."""

    id: str
    line_num: int
    content: str
    timestamp: str
    hunk_id: Optional[str] = None
    author: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "lineNum": self.line_num,
            "content": self.content,
            "timestamp": self.timestamp,
        }
        if self.hunk_id is not None:
            data["hunkId"] = self.hunk_id
        if self.author is not None:
            data["author"] = self.author
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DiffComment":
        return cls(
            id=data["id"],
            line_num=data["lineNum"],
            content=data["content"],
            timestamp=data["timestamp"],
            hunk_id=data.get("hunkId") or None,
            author=data.get("author") or None,
        )


@dataclass(frozen=True)
class FileDiff:
    """Changes to a single file.

    ``old_path`` is None for created files and ``new_path`` is None for
    deleted files; ``/dev/null`` only appears in the textual encodings.
    """

    old_path: Optional[str]
    new_path: Optional[str]
    hunks: tuple[Hunk, ...] = ()
    is_new: bool = False
    is_delete: bool = False
    is_binary: bool = False
    approved: Optional[bool] = None
    comments: tuple[DiffComment, ...] = field(default=())

    @property
    def key(self) -> str:
        """Return the file key (new_path if it exists, else old_path)."""
        if self.new_path is not None:
            return self.new_path
        if self.old_path is not None:
            return self.old_path
        raise ValueError("FileDiff has no path")

    @property
    def is_renamed(self) -> bool:
        """Check if this file was renamed."""
        return (
            self.old_path is not None
            and self.new_path is not None
            and self.old_path != self.new_path
        )

    @property
    def effective_approval(self) -> Optional[bool]:
        """Explicit approval, or the approval derived from the hunks.

        All hunks approved gives True, any rejected hunk gives False and
        anything else (including a file without hunks) is undecided.
        """
        if self.approved is not None:
            return self.approved
        if not self.hunks:
            return None
        if any(hunk.approved is False for hunk in self.hunks):
            return False
        if all(hunk.approved is True for hunk in self.hunks):
            return True
        return None

    @property
    def additions(self) -> int:
        return sum(hunk.additions for hunk in self.hunks)

    @property
    def deletions(self) -> int:
        return sum(hunk.deletions for hunk in self.hunks)

    def get_hunk(self, hunk_id: str) -> Optional[Hunk]:
        for hunk in self.hunks:
            if hunk.id == hunk_id:
                return hunk
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert file diff to its persisted form."""
        data: dict[str, Any] = {
            "oldPath": _path_to_text(self.old_path),
            "newPath": _path_to_text(self.new_path),
            "hunks": [hunk.to_dict() for hunk in self.hunks],
            "isNew": self.is_new,
            "isDelete": self.is_delete,
            "isBinary": self.is_binary,
        }
        if self.approved is not None:
            data["approved"] = self.approved
        if self.comments:
            data["comments"] = [comment.to_dict() for comment in self.comments]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FileDiff":
        return cls(
            old_path=_path_from_text(data.get("oldPath")),
            new_path=_path_from_text(data.get("newPath")),
            hunks=tuple(Hunk.from_dict(hunk) for hunk in data.get("hunks", [])),
            is_new=data.get("isNew", False),
            is_delete=data.get("isDelete", False),
            is_binary=data.get("isBinary", False),
            approved=data.get("approved"),
            comments=tuple(
                DiffComment.from_dict(comment) for comment in data.get("comments") or []
            ),
        )

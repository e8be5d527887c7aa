"""Change summary and risk triage for Redline."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable

from redline.diff.types import FileDiff, LineKind

# Risk thresholds. Fixed: triage must mean the same thing everywhere.
HIGH_RISK_LINES = 500
HIGH_RISK_DELETED_FILES = 5
MEDIUM_RISK_LINES = 100
MEDIUM_RISK_DELETED_FILES = 2


class RiskLevel(Enum):
    """Coarse triage label for a change set."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    def __lt__(self, other: "RiskLevel") -> bool:
        if not isinstance(other, RiskLevel):
            return NotImplemented
        order = [RiskLevel.LOW, RiskLevel.MEDIUM, RiskLevel.HIGH]
        return order.index(self) < order.index(other)

    def __le__(self, other: "RiskLevel") -> bool:
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self == other or self < other

    def __gt__(self, other: "RiskLevel") -> bool:
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return not self <= other

    def __ge__(self, other: "RiskLevel") -> bool:
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return not self < other

    @property
    def label(self) -> str:
        return f"{self.value.title()} Risk"


def assess_risk(lines_changed: int, files_deleted: int) -> RiskLevel:
    """Classify a change set by its size and number of deleted files."""
    if lines_changed > HIGH_RISK_LINES or files_deleted > HIGH_RISK_DELETED_FILES:
        return RiskLevel.HIGH
    if lines_changed > MEDIUM_RISK_LINES or files_deleted > MEDIUM_RISK_DELETED_FILES:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


@dataclass(frozen=True)
class DiffSummary:
    """Aggregate counts over a list of file diffs."""

    total_files: int = 0
    files_added: int = 0
    files_deleted: int = 0
    files_modified: int = 0
    lines_added: int = 0
    lines_deleted: int = 0

    @property
    def lines_changed(self) -> int:
        return self.lines_added + self.lines_deleted

    @property
    def risk(self) -> RiskLevel:
        return assess_risk(self.lines_changed, self.files_deleted)

    def __add__(self, other: "DiffSummary") -> "DiffSummary":
        if not isinstance(other, DiffSummary):
            return NotImplemented
        return DiffSummary(
            total_files=self.total_files + other.total_files,
            files_added=self.files_added + other.files_added,
            files_deleted=self.files_deleted + other.files_deleted,
            files_modified=self.files_modified + other.files_modified,
            lines_added=self.lines_added + other.lines_added,
            lines_deleted=self.lines_deleted + other.lines_deleted,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalFiles": self.total_files,
            "filesAdded": self.files_added,
            "filesDeleted": self.files_deleted,
            "filesModified": self.files_modified,
            "linesAdded": self.lines_added,
            "linesDeleted": self.lines_deleted,
            "riskLevel": self.risk.value,
        }


def summarize(files: Iterable[FileDiff]) -> DiffSummary:
    """Count files and lines in one pass and derive the risk level.

    Binary and hunkless files (renames, mode changes) only count as files.
    """
    total = added = deleted = modified = 0
    lines_added = lines_deleted = 0

    for file_diff in files:
        total += 1
        if file_diff.is_new:
            added += 1
        elif file_diff.is_delete:
            deleted += 1
        else:
            modified += 1

        for hunk in file_diff.hunks:
            for line in hunk.lines:
                if line.kind == LineKind.ADDITION:
                    lines_added += 1
                elif line.kind == LineKind.DELETION:
                    lines_deleted += 1

    return DiffSummary(
        total_files=total,
        files_added=added,
        files_deleted=deleted,
        files_modified=modified,
        lines_added=lines_added,
        lines_deleted=lines_deleted,
    )

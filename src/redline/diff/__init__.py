"""Diff parsing, alignment and summary for Redline."""

from redline.diff.parser import MalformedPatch, parse_patch, parse_patch_file
from redline.diff.side_by_side import SideBySideKind, SideBySideLine, side_by_side
from redline.diff.summary import DiffSummary, RiskLevel, summarize
from redline.diff.types import DiffComment, FileDiff, Hunk, Line, LineKind
from redline.diff.writer import format_patch

__all__ = [
    "LineKind",
    "Line",
    "Hunk",
    "FileDiff",
    "DiffComment",
    "SideBySideKind",
    "SideBySideLine",
    "DiffSummary",
    "RiskLevel",
    "parse_patch",
    "parse_patch_file",
    "side_by_side",
    "summarize",
    "format_patch",
    "MalformedPatch",
]

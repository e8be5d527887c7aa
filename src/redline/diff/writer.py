"""Unified diff text emitter for Redline."""

from typing import Iterable

from redline.diff.types import DEV_NULL, FileDiff, Hunk, LineKind

PREFIXES = {
    LineKind.CONTEXT: " ",
    LineKind.ADDITION: "+",
    LineKind.DELETION: "-",
}


def format_hunk(hunk: Hunk) -> list[str]:
    """Render a hunk as unified diff lines (without terminators)."""
    lines = [hunk.format_header()]
    lines.extend(PREFIXES[line.kind] + line.content for line in hunk.lines)
    if hunk.no_newline:
        lines.append("\\ No newline at end of file")
    return lines


def format_file(file_diff: FileDiff) -> list[str]:
    """Render one file section in git's unified format."""
    old_name = file_diff.old_path if file_diff.old_path is not None else file_diff.key
    new_name = file_diff.new_path if file_diff.new_path is not None else file_diff.key

    lines = [f"diff --git a/{old_name} b/{new_name}"]
    if file_diff.is_new:
        lines.append("new file mode 100644")
    elif file_diff.is_delete:
        lines.append("deleted file mode 100644")
    elif file_diff.is_renamed:
        lines.append(f"rename from {old_name}")
        lines.append(f"rename to {new_name}")

    if file_diff.is_binary:
        old_ref = DEV_NULL if file_diff.is_new else f"a/{old_name}"
        new_ref = DEV_NULL if file_diff.is_delete else f"b/{new_name}"
        lines.append(f"Binary files {old_ref} and {new_ref} differ")
        return lines

    if file_diff.hunks:
        lines.append(f"--- {DEV_NULL}" if file_diff.old_path is None else f"--- a/{old_name}")
        lines.append(f"+++ {DEV_NULL}" if file_diff.new_path is None else f"+++ b/{new_name}")
        for hunk in file_diff.hunks:
            lines.extend(format_hunk(hunk))
    return lines


def format_patch(files: Iterable[FileDiff]) -> str:
    """Render file diffs back to patch text.

    The output parses back to the same paths, hunks, line kinds, contents
    and line numbers; it is not a byte-exact copy of the original input.
    """
    lines: list[str] = []
    for file_diff in files:
        lines.extend(format_file(file_diff))
    if not lines:
        return ""
    return "\n".join(lines) + "\n"

"""Review state and its transitions.

A ReviewState is a value. Every transition takes a state and returns a new
one; the input is never mutated. Transitions on unknown file keys, hunk ids
or comment ids return the state unchanged.
"""

import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Iterable, Optional, Protocol

from redline.core.ids import new_comment_id, utc_timestamp
from redline.diff.types import DiffComment, FileDiff, Line, LineKind

logger = logging.getLogger(__name__)


class ApprovalSink(Protocol):
    """Receiver of batch approval decisions (usually the host UI)."""

    def accept(self, file_key: str) -> None: ...

    def reject(self, file_key: str) -> None: ...


@dataclass(frozen=True)
class ReviewState:
    """Everything a reviewer has decided about a change set."""

    files: tuple[FileDiff, ...] = ()
    selected_files: tuple[str, ...] = ()
    show_comments: tuple[str, ...] = ()
    active_file_key: Optional[str] = None

    @classmethod
    def from_files(cls, files: Iterable[FileDiff]) -> "ReviewState":
        """Start a review of freshly parsed files."""
        files = tuple(files)
        return cls(files=files, active_file_key=files[0].key if files else None)

    @property
    def file_keys(self) -> list[str]:
        return [file_diff.key for file_diff in self.files]

    @property
    def active_file(self) -> Optional[FileDiff]:
        if self.active_file_key is None:
            return None
        return self.get_file(self.active_file_key)

    def get_file(self, file_key: str) -> Optional[FileDiff]:
        """Get FileDiff by key (matches new_path, then old_path)."""
        for file_diff in self.files:
            if file_diff.key == file_key:
                return file_diff
        return None

    def approvals(self) -> dict[str, Optional[bool]]:
        """Effective approval of every file, by file key."""
        return {file_diff.key: file_diff.effective_approval for file_diff in self.files}

    def is_selected(self, file_key: str) -> bool:
        return file_key in self.selected_files

    def to_dict(self) -> dict[str, Any]:
        """Convert the state to its persisted form."""
        data: dict[str, Any] = {
            "files": [file_diff.to_dict() for file_diff in self.files],
            "selectedFiles": list(self.selected_files),
            "showComments": {key: True for key in self.show_comments},
        }
        if self.active_file_key is not None:
            data["activeFileKey"] = self.active_file_key
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ReviewState":
        return cls(
            files=tuple(FileDiff.from_dict(item) for item in data.get("files", [])),
            selected_files=tuple(data.get("selectedFiles", [])),
            show_comments=tuple(str(k) for k, v in (data.get("showComments") or {}).items() if v),
            active_file_key=data.get("activeFileKey"),
        )


@dataclass(frozen=True)
class BatchBar:
    """What the batch-approval bar shows for the current selection."""

    visible: bool
    selected_count: int
    total_count: int

    @property
    def label(self) -> str:
        noun = "file" if self.total_count == 1 else "files"
        return f"{self.selected_count} of {self.total_count} {noun} selected"


def line_key(file_key: str, line_num: int, hunk_id: Optional[str] = None) -> str:
    """Key of a line in the show-comments map."""
    if hunk_id is None:
        return f"{file_key}:{line_num}"
    return f"{file_key}:{hunk_id}:{line_num}"


def anchor_line_number(line: Line) -> int:
    """Line number a comment on ``line`` is anchored to.

    Deleted lines only exist in the old file, so they anchor to their old
    number; additions and context anchor to the new number.
    """
    number = line.old_num if line.kind == LineKind.DELETION else line.new_num
    if number is None:
        raise ValueError(f"{line.kind.value} line has no line number to anchor to")
    return number


def _update_file(
    state: ReviewState,
    file_key: str,
    update: Callable[[FileDiff], FileDiff],
) -> ReviewState:
    files = []
    changed = False
    for file_diff in state.files:
        if file_diff.key == file_key:
            new_diff = update(file_diff)
            changed = changed or new_diff is not file_diff
            files.append(new_diff)
        else:
            files.append(file_diff)
    if not changed:
        return state
    return replace(state, files=tuple(files))


def _set_file_approvals(state: ReviewState, keys: Iterable[str], approved: bool) -> ReviewState:
    wanted = set(keys)
    if not wanted:
        return state
    files = tuple(
        replace(file_diff, approved=approved) if file_diff.key in wanted else file_diff
        for file_diff in state.files
    )
    return replace(state, files=files)


# Selection


def toggle_file_selection(state: ReviewState, file_key: str) -> ReviewState:
    """Add ``file_key`` to the selection, or remove it if present."""
    if file_key in state.selected_files:
        selected = tuple(key for key in state.selected_files if key != file_key)
    elif state.get_file(file_key) is None:
        return state
    else:
        selected = state.selected_files + (file_key,)
    return replace(state, selected_files=selected)


def clear_selection(state: ReviewState) -> ReviewState:
    if not state.selected_files:
        return state
    return replace(state, selected_files=())


def approve_selected(state: ReviewState, sink: ApprovalSink) -> ReviewState:
    """Approve every selected file, in selection order, then clear the selection."""
    for file_key in state.selected_files:
        sink.accept(file_key)
    logger.debug("Approved %d selected file(s)", len(state.selected_files))
    state = _set_file_approvals(state, state.selected_files, True)
    return clear_selection(state)


def reject_selected(state: ReviewState, sink: ApprovalSink) -> ReviewState:
    """Reject every selected file, in selection order, then clear the selection."""
    for file_key in state.selected_files:
        sink.reject(file_key)
    logger.debug("Rejected %d selected file(s)", len(state.selected_files))
    state = _set_file_approvals(state, state.selected_files, False)
    return clear_selection(state)


def approve_all(
    state: ReviewState,
    files: Optional[Iterable[FileDiff]],
    sink: ApprovalSink,
) -> ReviewState:
    """Approve ``files`` (default: every file of the state) in order."""
    keys = [file_diff.key for file_diff in (state.files if files is None else files)]
    for file_key in keys:
        sink.accept(file_key)
    return _set_file_approvals(state, keys, True)


def reject_all(
    state: ReviewState,
    files: Optional[Iterable[FileDiff]],
    sink: ApprovalSink,
) -> ReviewState:
    """Reject ``files`` (default: every file of the state) in order."""
    keys = [file_diff.key for file_diff in (state.files if files is None else files)]
    for file_key in keys:
        sink.reject(file_key)
    return _set_file_approvals(state, keys, False)


def batch_bar(state: ReviewState, total_count: Optional[int] = None) -> BatchBar:
    """Describe the batch-approval bar; hidden while nothing is selected."""
    total = len(state.files) if total_count is None else total_count
    selected = len(state.selected_files)
    return BatchBar(visible=selected > 0, selected_count=selected, total_count=total)


# Approvals


def approve_file(state: ReviewState, file_key: str) -> ReviewState:
    return _update_file(state, file_key, lambda f: replace(f, approved=True))


def reject_file(state: ReviewState, file_key: str) -> ReviewState:
    return _update_file(state, file_key, lambda f: replace(f, approved=False))


def _set_hunk_approval(state: ReviewState, file_key: str, hunk_id: str, approved: bool) -> ReviewState:
    def update(file_diff: FileDiff) -> FileDiff:
        if file_diff.get_hunk(hunk_id) is None:
            return file_diff
        hunks = tuple(
            replace(hunk, approved=approved) if hunk.id == hunk_id else hunk
            for hunk in file_diff.hunks
        )
        return replace(file_diff, hunks=hunks)

    return _update_file(state, file_key, update)


def approve_hunk(state: ReviewState, file_key: str, hunk_id: str) -> ReviewState:
    return _set_hunk_approval(state, file_key, hunk_id, True)


def reject_hunk(state: ReviewState, file_key: str, hunk_id: str) -> ReviewState:
    return _set_hunk_approval(state, file_key, hunk_id, False)


# Navigation


def set_active_file(state: ReviewState, file_key: Optional[str]) -> ReviewState:
    """Focus a file; unknown keys leave the focus unchanged."""
    if file_key is not None and state.get_file(file_key) is None:
        return state
    return replace(state, active_file_key=file_key)


def toggle_comments(state: ReviewState, key: str) -> ReviewState:
    """Show or hide the comment thread of a line (see ``line_key``)."""
    if key in state.show_comments:
        shown = tuple(k for k in state.show_comments if k != key)
    else:
        shown = state.show_comments + (key,)
    return replace(state, show_comments=shown)


def comments_visible(state: ReviewState, key: str) -> bool:
    return key in state.show_comments


# Comments


def add_comment(
    state: ReviewState,
    file_key: str,
    line_num: int,
    content: str,
    hunk_id: Optional[str] = None,
    author: Optional[str] = None,
) -> ReviewState:
    """Append a new comment to a file's thread list.

    Blank content or an unknown file leaves the state unchanged.
    """
    content = content.strip()
    if not content:
        return state

    comment = DiffComment(
        id=new_comment_id(),
        line_num=line_num,
        content=content,
        timestamp=utc_timestamp(),
        hunk_id=hunk_id,
        author=author,
    )
    logger.debug("Adding comment %s on %s:%d", comment.id, file_key, line_num)
    return _update_file(
        state, file_key, lambda f: replace(f, comments=f.comments + (comment,))
    )


def delete_comment(state: ReviewState, file_key: str, comment_id: str) -> ReviewState:
    """Remove a comment by id; an absent id is not an error."""

    def update(file_diff: FileDiff) -> FileDiff:
        comments = tuple(c for c in file_diff.comments if c.id != comment_id)
        if len(comments) == len(file_diff.comments):
            return file_diff
        return replace(file_diff, comments=comments)

    return _update_file(state, file_key, update)


def thread_at(
    state: ReviewState,
    file_key: str,
    line_num: int,
    hunk_id: Optional[str] = None,
) -> list[DiffComment]:
    """Comments on a line, in the order they were added.

    With ``hunk_id`` given, comments pinned to another hunk are left out;
    comments without a hunk id match on the line number alone.
    """
    file_diff = state.get_file(file_key)
    if file_diff is None:
        return []
    return [
        comment
        for comment in file_diff.comments
        if comment.line_num == line_num
        and (hunk_id is None or comment.hunk_id is None or comment.hunk_id == hunk_id)
    ]

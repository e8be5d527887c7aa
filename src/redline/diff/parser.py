"""Unified diff parser for Redline."""

import codecs
import logging
import re
from pathlib import Path
from typing import Optional, Union

from redline.core.ids import hunk_id
from redline.diff.lexer import BINARY_FILES, PatchLexer, Token, TokenKind
from redline.diff.types import DEV_NULL, FileDiff, Hunk, Line, LineKind

logger = logging.getLogger(__name__)


class MalformedPatch(Exception):
    """Structural error in patch text.

    Attributes:
        reason: Short human-readable description.
        offset: Byte offset of the offending line in the input.
        line_number: 1-based line number of the offending line.
    """

    def __init__(self, reason: str, offset: int = 0, line_number: Optional[int] = None) -> None:
        self.reason = reason
        self.offset = offset
        self.line_number = line_number
        location = f"byte {offset}"
        if line_number is not None:
            location += f", line {line_number}"
        super().__init__(f"{reason} ({location})")

    @classmethod
    def at(cls, reason: str, token: Token) -> "MalformedPatch":
        return cls(reason, offset=token.offset, line_number=token.line_number)


HUNK_HEADER = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@(.*)$")
DIFF_GIT_HEADER = re.compile(r"^diff --git a/(.*) b/(.*)$")
DIFF_GIT_QUOTED_HEADER = re.compile(r'^diff --git ("(?:[^"\\]|\\.)*"|\S+) ("(?:[^"\\]|\\.)*"|\S+)$')

# Signature separator git format-patch appends after the last hunk.
PATCH_SIGNATURE = "-- "


def parse_patch(data: Union[str, bytes]) -> list[FileDiff]:
    """Parse unified patch content.

    Args:
        data: Patch text, or raw bytes (UTF-8 with a Latin-1 fallback).

    Returns:
        FileDiff list in patch order. Empty input gives an empty list.

    Raises:
        MalformedPatch: If the patch violates the unified diff grammar.
            Nothing is returned for a partially valid patch.
    """
    lexer = PatchLexer(data)
    files: list[FileDiff] = []

    while not lexer.at_end:
        token = lexer.peek_header()
        assert token is not None

        if token.kind in (TokenKind.GIT_HEADER, TokenKind.OLD_FILE):
            files.append(_parse_file(lexer, len(files)))
            continue

        if token.kind == TokenKind.BINARY and BINARY_FILES.match(token.text):
            # Plain "diff -r" output reports binary files without a section
            files.append(_parse_plain_binary(token))
            lexer.advance()
            continue

        if token.kind == TokenKind.HUNK_HEADER:
            raise MalformedPatch.at("hunk header without a file header", token)
        if token.kind == TokenKind.NEW_FILE:
            raise MalformedPatch.at("'+++' file header without a preceding '---'", token)

        # Preamble, commit message or trailer
        lexer.advance()

    logger.debug(
        "Parsed %d file(s), %d hunk(s)",
        len(files),
        sum(len(file_diff.hunks) for file_diff in files),
    )
    return files


def parse_patch_file(path: str) -> list[FileDiff]:
    """Parse a patch from a file.

    Args:
        path: Path to the .patch/.diff file.

    Returns:
        FileDiff list in patch order.

    Raises:
        FileNotFoundError: If the file does not exist.
        MalformedPatch: If the file content is malformed.
    """
    filepath = Path(path)
    if not filepath.exists():
        raise FileNotFoundError(f"Patch file not found: {path}")
    return parse_patch(filepath.read_bytes())


def _parse_file(lexer: PatchLexer, file_index: int) -> FileDiff:
    """Parse one file section, starting at its first header line."""
    old_path: Optional[str] = None
    new_path: Optional[str] = None
    is_new = False
    is_delete = False

    token = lexer.peek_header()
    assert token is not None
    start = token

    if token.kind == TokenKind.GIT_HEADER:
        old_path, new_path = _parse_git_header(token)
        lexer.advance()

        # Unknown extended headers are skipped up to the next structural line
        while True:
            token = lexer.peek_header()
            if token is None or token.kind not in (TokenKind.EXTENDED, TokenKind.OTHER):
                break
            text = token.text
            if text.startswith("new file mode "):
                is_new = True
            elif text.startswith("deleted file mode "):
                is_delete = True
            elif text.startswith("rename from "):
                old_path = _unquote(text[len("rename from "):])
            elif text.startswith("rename to "):
                new_path = _unquote(text[len("rename to "):])
            elif text.startswith("copy from "):
                old_path = _unquote(text[len("copy from "):])
            elif text.startswith("copy to "):
                new_path = _unquote(text[len("copy to "):])
            lexer.advance()

        token = lexer.peek_header()
        if token is not None and token.kind == TokenKind.BINARY:
            lexer.advance()
            if token.text == "GIT binary patch":
                _skip_binary_payload(lexer)
            old_path = None if is_new else old_path
            new_path = None if is_delete else new_path
            _check_named(old_path, new_path, start)
            return FileDiff(
                old_path=old_path,
                new_path=new_path,
                hunks=(),
                is_new=is_new,
                is_delete=is_delete,
                is_binary=True,
            )

    token = lexer.peek_header()
    if token is not None and token.kind == TokenKind.OLD_FILE:
        new_token = lexer.peek_header(1)
        if new_token is None or new_token.kind != TokenKind.NEW_FILE:
            raise MalformedPatch.at("'---' file header without a following '+++'", token)
        old_path = _parse_file_path(token.text[4:], "a/")
        new_path = _parse_file_path(new_token.text[4:], "b/")
        is_new = is_new or old_path is None
        is_delete = is_delete or new_path is None
        lexer.advance()
        lexer.advance()
    elif token is not None and token.kind == TokenKind.NEW_FILE:
        raise MalformedPatch.at("'+++' file header without a preceding '---'", token)

    if is_new:
        old_path = None
    if is_delete:
        new_path = None
    _check_named(old_path, new_path, start)

    hunks: list[Hunk] = []
    while True:
        token = lexer.peek_header()
        if token is None or token.kind != TokenKind.HUNK_HEADER:
            break
        hunks.append(_parse_hunk(lexer, hunk_id(file_index, len(hunks))))

    return FileDiff(
        old_path=old_path,
        new_path=new_path,
        hunks=tuple(hunks),
        is_new=is_new,
        is_delete=is_delete,
    )


def _parse_hunk(lexer: PatchLexer, hid: str) -> Hunk:
    """Parse a hunk header and its body, checking the line arithmetic."""
    header = lexer.peek_header()
    assert header is not None

    match = HUNK_HEADER.match(header.text)
    if not match:
        raise MalformedPatch.at(f"invalid hunk header {header.text!r}", header)

    old_start = int(match.group(1))
    old_lines = int(match.group(2)) if match.group(2) is not None else 1
    new_start = int(match.group(3))
    new_lines = int(match.group(4)) if match.group(4) is not None else 1
    section = match.group(5).strip()
    lexer.advance()

    lines: list[Line] = []
    old_num = old_start
    new_num = new_start
    old_seen = 0
    new_seen = 0
    no_newline = False

    while old_seen < old_lines or new_seen < new_lines:
        token = lexer.peek_body()
        if token is None or token.kind == TokenKind.END:
            break

        if token.kind == TokenKind.NO_NEWLINE:
            no_newline = True
        elif token.kind == TokenKind.CONTEXT:
            if old_seen >= old_lines or new_seen >= new_lines:
                break
            lines.append(
                Line(kind=LineKind.CONTEXT, content=token.text[1:], old_num=old_num, new_num=new_num)
            )
            old_num += 1
            new_num += 1
            old_seen += 1
            new_seen += 1
        elif token.kind == TokenKind.ADDITION:
            if new_seen >= new_lines:
                break
            lines.append(Line(kind=LineKind.ADDITION, content=token.text[1:], new_num=new_num))
            new_num += 1
            new_seen += 1
        elif token.kind == TokenKind.DELETION:
            if old_seen >= old_lines:
                break
            lines.append(Line(kind=LineKind.DELETION, content=token.text[1:], old_num=old_num))
            old_num += 1
            old_seen += 1

        lexer.advance()

    while True:
        token = lexer.peek_body()
        if token is None or token.kind != TokenKind.NO_NEWLINE:
            break
        no_newline = True
        lexer.advance()

    if old_seen != old_lines or new_seen != new_lines:
        raise MalformedPatch.at(
            f"hunk {header.text!r} declares -{old_lines} +{new_lines} lines "
            f"but its body has -{old_seen} +{new_seen}",
            header,
        )

    _check_hunk_end(lexer, header)

    return Hunk(
        id=hid,
        old_start=old_start,
        old_lines=old_lines,
        new_start=new_start,
        new_lines=new_lines,
        lines=tuple(lines),
        header=header.text,
        section=section,
        no_newline=no_newline,
    )


def _check_hunk_end(lexer: PatchLexer, header: Token) -> None:
    """Reject body lines that continue past the declared hunk size."""
    token = lexer.peek_body()
    if token is None or token.text == PATCH_SIGNATURE:
        return
    if token.kind not in (TokenKind.ADDITION, TokenKind.DELETION, TokenKind.CONTEXT):
        return
    if token.text == "":
        return
    header_kind = lexer.peek_header()
    if header_kind is not None and header_kind.kind in (TokenKind.OLD_FILE, TokenKind.NEW_FILE):
        return
    raise MalformedPatch.at(
        f"unexpected line after hunk {header.text!r}: body exceeds the declared line counts",
        token,
    )


def _check_named(old_path: Optional[str], new_path: Optional[str], token: Token) -> None:
    if old_path is None and new_path is None:
        raise MalformedPatch.at("file section names no file on either side", token)


def _skip_binary_payload(lexer: PatchLexer) -> None:
    """Skip "GIT binary patch" literal/delta data up to the next section."""
    while True:
        token = lexer.peek_header()
        if token is None or token.kind == TokenKind.GIT_HEADER:
            return
        lexer.advance()


def _parse_plain_binary(token: Token) -> FileDiff:
    match = BINARY_FILES.match(token.text)
    assert match is not None
    old_path = _parse_file_path(match.group(1), "a/")
    new_path = _parse_file_path(match.group(2), "b/")
    _check_named(old_path, new_path, token)
    return FileDiff(
        old_path=old_path,
        new_path=new_path,
        hunks=(),
        is_new=old_path is None,
        is_delete=new_path is None,
        is_binary=True,
    )


def _parse_git_header(token: Token) -> tuple[Optional[str], Optional[str]]:
    """Extract tentative paths from a ``diff --git`` line."""
    rest = token.text[len("diff --git "):]

    # Unquoted identical paths: split exactly in the middle so that
    # names containing " b/" survive.
    if not rest.startswith('"') and len(rest) % 2 == 1:
        half = len(rest) // 2
        left, right = rest[:half], rest[half + 1:]
        if rest[half] == " " and left.startswith("a/") and right.startswith("b/") and left[2:] == right[2:]:
            return left[2:], right[2:]

    match = DIFF_GIT_HEADER.match(token.text)
    if match:
        return match.group(1), match.group(2)

    # Quoted names, or --no-prefix output
    quoted = DIFF_GIT_QUOTED_HEADER.match(token.text)
    if quoted:
        return _strip_prefix(_unquote(quoted.group(1)), "a/"), _strip_prefix(_unquote(quoted.group(2)), "b/")

    raise MalformedPatch.at(f"invalid git file header {token.text!r}", token)


def _parse_file_path(text: str, prefix: str) -> Optional[str]:
    """Parse the path of a ``---``/``+++`` header.

    Drops a trailing tab-separated timestamp, unquotes git-quoted names,
    maps ``/dev/null`` to None and strips the ``a/``/``b/`` prefix.
    """
    path = text.split("\t", 1)[0]
    path = _unquote(path)
    if path == DEV_NULL:
        return None
    return _strip_prefix(path, prefix)


def _strip_prefix(path: str, prefix: str) -> str:
    if path.startswith(prefix):
        return path[len(prefix):]
    return path


def _unquote(path: str) -> str:
    """Undo git's C-style quoting of unusual path names."""
    if len(path) < 2 or not (path.startswith('"') and path.endswith('"')):
        return path
    inner = path[1:-1]
    try:
        decoded = codecs.decode(inner.encode("utf-8"), "unicode_escape")
        return decoded.encode("latin-1").decode("utf-8")
    except (UnicodeError, ValueError):
        return inner

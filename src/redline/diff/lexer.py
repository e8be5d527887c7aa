"""Line lexer for unified patches.

The same physical line means different things depending on where it
appears: ``--- a/x`` is a file header between sections but a deletion
inside a hunk body. The lexer therefore only splits the input into
positioned lines and classifies a line in the mode the parser asks for.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class TokenKind(Enum):
    """Classification of a patch line."""

    # Header mode
    GIT_HEADER = "git_header"
    EXTENDED = "extended"
    OLD_FILE = "old_file"
    NEW_FILE = "new_file"
    BINARY = "binary"
    HUNK_HEADER = "hunk_header"
    OTHER = "other"

    # Body mode
    CONTEXT = "context"
    ADDITION = "addition"
    DELETION = "deletion"
    NO_NEWLINE = "no_newline"
    END = "end"


EXTENDED_HEADER_PREFIXES = (
    "new file mode ",
    "deleted file mode ",
    "old mode ",
    "new mode ",
    "index ",
    "similarity index ",
    "dissimilarity index ",
    "rename from ",
    "rename to ",
    "copy from ",
    "copy to ",
)

BINARY_FILES = re.compile(r"^Binary files (.*) and (.*) differ$")


@dataclass(frozen=True)
class Token:
    """A classified patch line."""

    kind: TokenKind
    text: str
    offset: int
    line_number: int


@dataclass(frozen=True)
class SourceLine:
    """A physical line of the patch with its position."""

    text: str
    offset: int
    line_number: int


def decode_patch(data: Union[str, bytes]) -> tuple[str, str]:
    """Return patch text and the encoding used to decode it."""
    if isinstance(data, str):
        return data, "utf-8"
    try:
        return data.decode("utf-8"), "utf-8"
    except UnicodeDecodeError:
        return data.decode("latin-1"), "latin-1"


def split_lines(text: str, encoding: str = "utf-8") -> list[SourceLine]:
    """Split patch text into positioned lines.

    Lines are split on ``\\n`` only; one trailing ``\\r`` is dropped from
    each line. Offsets are byte offsets in ``encoding``.
    """
    if not text:
        return []

    raw_lines = text.split("\n")
    if text.endswith("\n"):
        raw_lines.pop()

    result: list[SourceLine] = []
    offset = 0
    for index, raw in enumerate(raw_lines):
        line = raw[:-1] if raw.endswith("\r") else raw
        result.append(SourceLine(text=line, offset=offset, line_number=index + 1))
        offset += len(raw.encode(encoding, errors="replace")) + 1
    return result


def classify_header(text: str) -> TokenKind:
    """Classify a line appearing outside a hunk body."""
    if text.startswith("diff --git "):
        return TokenKind.GIT_HEADER
    if text.startswith("@@"):
        return TokenKind.HUNK_HEADER
    if text.startswith("--- "):
        return TokenKind.OLD_FILE
    if text.startswith("+++ "):
        return TokenKind.NEW_FILE
    if BINARY_FILES.match(text) or text == "GIT binary patch":
        return TokenKind.BINARY
    if text.startswith(EXTENDED_HEADER_PREFIXES):
        return TokenKind.EXTENDED
    return TokenKind.OTHER


def classify_body(text: str) -> TokenKind:
    """Classify a line appearing inside a hunk body."""
    if text == "" or text.startswith(" "):
        return TokenKind.CONTEXT
    if text.startswith("+"):
        return TokenKind.ADDITION
    if text.startswith("-"):
        return TokenKind.DELETION
    if text.startswith("\\"):
        return TokenKind.NO_NEWLINE
    return TokenKind.END


class PatchLexer:
    """Cursor over the lines of a patch."""

    def __init__(self, data: Union[str, bytes]) -> None:
        text, encoding = decode_patch(data)
        self._lines = split_lines(text, encoding)
        self._pos = 0
        self._end_offset = len(text.encode(encoding, errors="replace"))

    @property
    def at_end(self) -> bool:
        return self._pos >= len(self._lines)

    @property
    def offset(self) -> int:
        """Byte offset of the current line (or end of input)."""
        if self.at_end:
            return self._end_offset
        return self._lines[self._pos].offset

    @property
    def line_number(self) -> int:
        if self.at_end:
            return len(self._lines) + 1
        return self._lines[self._pos].line_number

    def peek_header(self, ahead: int = 0) -> Optional[Token]:
        """Classify the current line (or one ``ahead``) in header mode."""
        return self._peek(ahead, classify_header)

    def peek_body(self) -> Optional[Token]:
        """Classify the current line in hunk-body mode."""
        return self._peek(0, classify_body)

    def advance(self) -> None:
        if not self.at_end:
            self._pos += 1

    def _peek(self, ahead: int, classify) -> Optional[Token]:
        index = self._pos + ahead
        if index >= len(self._lines):
            return None
        line = self._lines[index]
        return Token(
            kind=classify(line.text),
            text=line.text,
            offset=line.offset,
            line_number=line.line_number,
        )

"""Identifier and timestamp helpers for Redline."""

import itertools
import secrets
import string
from datetime import datetime, timezone
from typing import Optional

_BASE36 = string.digits + string.ascii_lowercase

# Process-local sequence mixed into comment ids so two ids minted in the
# same millisecond never collide.
_sequence = itertools.count()


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def new_comment_id() -> str:
    """Mint a comment id such as ``comment_1705332600000_2kq9x0f1b``."""
    millis = int(datetime.now(timezone.utc).timestamp() * 1000)
    suffix = _to_base36(next(_sequence)) + "".join(secrets.choice(_BASE36) for _ in range(8))
    return f"comment_{millis}_{suffix}"


def hunk_id(file_index: int, hunk_index: int) -> str:
    """Return the parser-assigned id of a hunk."""
    return f"h{file_index}_{hunk_index}"


def utc_timestamp(moment: Optional[datetime] = None) -> str:
    """Format an instant as ISO-8601 UTC with millisecond precision.

    Args:
        moment: Instant to format. Naive datetimes are taken as UTC.
            Defaults to now.

    Returns:
        Timestamp like ``2024-01-15T15:30:00.000Z``.
    """
    if moment is None:
        moment = datetime.now(timezone.utc)
    elif moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    else:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"

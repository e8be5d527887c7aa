"""Tests for identifier and timestamp helpers."""

import re
from datetime import datetime, timedelta, timezone

from redline.core.ids import hunk_id, new_comment_id, utc_timestamp


COMMENT_ID = re.compile(r"^comment_[^_]+_[A-Za-z0-9]+$")


class TestNewCommentId:
    """Tests for new_comment_id function."""

    def test_format(self):
        """Test ids carry the comment prefix."""
        assert COMMENT_ID.match(new_comment_id())

    def test_unique(self):
        """Test ids do not repeat within a process."""
        ids = [new_comment_id() for _ in range(2000)]
        assert len(set(ids)) == len(ids)


class TestHunkId:
    """Tests for hunk_id function."""

    def test_format(self):
        assert hunk_id(0, 0) == "h0_0"
        assert hunk_id(3, 12) == "h3_12"


class TestUtcTimestamp:
    """Tests for utc_timestamp function."""

    def test_millisecond_precision(self):
        moment = datetime(2024, 1, 15, 15, 30, 0, 123456, tzinfo=timezone.utc)
        assert utc_timestamp(moment) == "2024-01-15T15:30:00.123Z"

    def test_naive_taken_as_utc(self):
        assert utc_timestamp(datetime(2024, 1, 15, 15, 30)) == "2024-01-15T15:30:00.000Z"

    def test_converts_to_utc(self):
        moment = datetime(2024, 1, 15, 17, 30, tzinfo=timezone(timedelta(hours=2)))
        assert utc_timestamp(moment) == "2024-01-15T15:30:00.000Z"

    def test_default_now(self):
        assert re.match(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$", utc_timestamp())

"""Core module for Redline."""

from redline.core.config import (
    Config,
    ConfigError,
    find_config_file,
    load_config,
    merge_cli_args,
)
from redline.core.ids import hunk_id, new_comment_id, utc_timestamp
from redline.core.review import ApprovalSink, BatchBar, ReviewState
from redline.core.store import ReviewStore, StoreError

__all__ = [
    "Config",
    "ConfigError",
    "load_config",
    "find_config_file",
    "merge_cli_args",
    "new_comment_id",
    "hunk_id",
    "utc_timestamp",
    "ApprovalSink",
    "BatchBar",
    "ReviewState",
    "ReviewStore",
    "StoreError",
]

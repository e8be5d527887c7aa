"""On-disk persistence of review state."""

import json
import logging
from pathlib import Path

from redline.core.review import ReviewState

logger = logging.getLogger(__name__)

STATE_VERSION = 1


class StoreError(Exception):
    """Error reading or writing a review state file."""

    pass


class ReviewStore:
    """Persist a ReviewState as JSON."""

    def __init__(self, path: str) -> None:
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> ReviewState:
        """Load the stored state, or an empty state if there is none.

        Raises:
            StoreError: If the file cannot be read or is not a review state.
        """
        if not self.path.exists():
            return ReviewState()

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise StoreError(f"Corrupt review state in {self.path}: {e}") from e
        except OSError as e:
            raise StoreError(f"Cannot read review state: {e}") from e

        if not isinstance(data, dict) or "state" not in data:
            raise StoreError(f"{self.path} is not a review state file")
        if data.get("version") != STATE_VERSION:
            raise StoreError(f"Unsupported review state version: {data.get('version')}")

        try:
            state = ReviewState.from_dict(data["state"])
        except (KeyError, TypeError, ValueError) as e:
            raise StoreError(f"Invalid review state in {self.path}: {e}") from e

        logger.debug("Loaded review of %d file(s) from %s", len(state.files), self.path)
        return state

    def save(self, state: ReviewState) -> None:
        """Write the state, creating parent directories as needed."""
        payload = {"version": STATE_VERSION, "state": state.to_dict()}
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2)
        except OSError as e:
            raise StoreError(f"Cannot write review state: {e}") from e
        logger.debug("Saved review of %d file(s) to %s", len(state.files), self.path)

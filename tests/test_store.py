"""Tests for review state persistence."""

import json
from pathlib import Path

import pytest

from redline.core.review import ReviewState, add_comment, approve_file
from redline.core.store import ReviewStore, StoreError
from redline.diff.parser import parse_patch


FIXTURES_DIR = Path(__file__).parent / "fixtures" / "patches"


@pytest.fixture
def state():
    files = parse_patch((FIXTURES_DIR / "multi_file.patch").read_text())
    state = ReviewState.from_files(files)
    state = approve_file(state, "README.md")
    return add_comment(state, "src/app.py", 2, "Looks fine", hunk_id="h0_0")


class TestReviewStore:
    """Tests for ReviewStore."""

    def test_load_missing_file(self, tmp_path):
        """Test a missing file loads as an empty review."""
        store = ReviewStore(str(tmp_path / "review.json"))
        assert not store.exists()
        assert store.load() == ReviewState()

    def test_save_and_load(self, tmp_path, state):
        """Test a saved review loads back unchanged."""
        store = ReviewStore(str(tmp_path / "nested" / "dir" / "review.json"))
        store.save(state)

        assert store.exists()
        assert store.load() == state

    def test_file_layout(self, tmp_path, state):
        """Test the persisted JSON is versioned and camelCase."""
        path = tmp_path / "review.json"
        ReviewStore(str(path)).save(state)

        data = json.loads(path.read_text())
        assert data["version"] == 1
        files = data["state"]["files"]
        assert files[0]["newPath"] == "src/app.py"
        assert files[0]["comments"][0]["hunkId"] == "h0_0"
        assert files[2]["oldPath"] == "/dev/null"
        assert files[3]["approved"] is True

    def test_corrupt_json(self, tmp_path):
        path = tmp_path / "review.json"
        path.write_text("{not json")
        with pytest.raises(StoreError, match="Corrupt"):
            ReviewStore(str(path)).load()

    def test_not_a_state_file(self, tmp_path):
        path = tmp_path / "review.json"
        path.write_text("[1, 2, 3]")
        with pytest.raises(StoreError, match="not a review state"):
            ReviewStore(str(path)).load()

    def test_unsupported_version(self, tmp_path):
        path = tmp_path / "review.json"
        path.write_text(json.dumps({"version": 99, "state": {}}))
        with pytest.raises(StoreError, match="Unsupported"):
            ReviewStore(str(path)).load()

    def test_invalid_state(self, tmp_path):
        """Test missing required fields are reported."""
        path = tmp_path / "review.json"
        path.write_text(json.dumps({"version": 1, "state": {"files": [{"hunks": [{}]}]}}))
        with pytest.raises(StoreError, match="Invalid"):
            ReviewStore(str(path)).load()

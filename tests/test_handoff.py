"""Tests for expiring handoff stores."""

import json
import tempfile
from pathlib import Path

from extension_planner import JsonFileExpirableStore
from extension_planner import MemoryExpirableStore


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_memory_store_expires():
    """Test that values disappear once the TTL has passed."""
    clock = FakeClock()
    store = MemoryExpirableStore(clock=clock)

    store.set_with_expire("42", {"to_install": {"views": "Views"}}, ttl_seconds=60)
    assert store.get("42") == {"to_install": {"views": "Views"}}

    clock.now += 59
    assert store.get("42") is not None

    clock.now += 1
    assert store.get("42") is None
    assert store.get("42", default="gone") == "gone"


def test_memory_store_delete_and_purge():
    clock = FakeClock()
    store = MemoryExpirableStore(clock=clock)

    store.set_with_expire("a", 1, ttl_seconds=10)
    store.set_with_expire("b", 2, ttl_seconds=100)
    store.delete("a")
    store.delete("missing")
    assert store.get("a") is None

    store.set_with_expire("c", 3, ttl_seconds=10)
    clock.now += 50
    assert store.purge_expired() == 1
    assert store.get("b") == 2


def test_file_store_persistence():
    """Test that entries persist across instances until they expire."""
    with tempfile.TemporaryDirectory() as tmpdir:
        store_path = Path(tmpdir) / "state" / "handoff.json"
        clock = FakeClock()

        first = JsonFileExpirableStore(store_path=store_path, clock=clock)
        assert not store_path.exists()

        first.set_with_expire("42", {"to_install": {"views": "Views"}}, ttl_seconds=60)
        assert store_path.exists()

        second = JsonFileExpirableStore(store_path=store_path, clock=clock)
        assert second.get("42") == {"to_install": {"views": "Views"}}

        clock.now += 61
        assert second.get("42") is None

        third = JsonFileExpirableStore(store_path=store_path, clock=clock)
        assert third.get("42") is None


def test_file_store_format():
    """Test the on-disk document layout."""
    with tempfile.TemporaryDirectory() as tmpdir:
        store_path = Path(tmpdir) / "handoff.json"
        store = JsonFileExpirableStore(store_path=store_path, clock=FakeClock(100.0))

        store.set_with_expire("7", ["x"], ttl_seconds=5)

        data = json.loads(store_path.read_text())
        assert data == {"version": "1.0", "entries": {"7": {"value": ["x"], "expires_at": 105.0}}}


def test_file_store_corrupt_file_treated_as_empty():
    with tempfile.TemporaryDirectory() as tmpdir:
        store_path = Path(tmpdir) / "handoff.json"

        for content in ["{not json", "[]", "\"x\"", "null", "42"]:
            store_path.write_text(content)

            store = JsonFileExpirableStore(store_path=store_path)

            assert store.get("anything") is None


def test_file_store_delete():
    with tempfile.TemporaryDirectory() as tmpdir:
        store_path = Path(tmpdir) / "handoff.json"
        store = JsonFileExpirableStore(store_path=store_path)

        store.set_with_expire("42", "plan", ttl_seconds=60)
        store.delete("42")

        assert JsonFileExpirableStore(store_path=store_path).get("42") is None

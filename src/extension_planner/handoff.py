"""Expiring key-value stores for the selection handoff.

The selection step parks its resolution under the acting account; the
confirmation step reads it back. Entries vanish after their TTL, so an
abandoned confirmation leaves nothing behind.

File format (JSON):
{
  "version": "1.0",
  "entries": {
    "42": {
      "value": {"to_install": {"views": "Views"}, ...},
      "expires_at": 1760000060.0
    }
  }
}
"""

import json
import logging
import time
from collections.abc import Callable
from dataclasses import asdict
from dataclasses import dataclass
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class ExpiringEntry:
    """Stored value with its absolute expiry time."""

    value: Any
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "ExpiringEntry":
        """Create from dictionary."""
        return cls(**data)


class MemoryExpirableStore:
    """Process-local expiring store.

    Example:
        >>> store = MemoryExpirableStore()
        >>> store.set_with_expire("42", {"to_install": {}}, ttl_seconds=60)
        >>> store.get("42")
        {'to_install': {}}
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self.clock = clock
        self._data: dict[str, ExpiringEntry] = {}

    def set_with_expire(self, key: str, value: Any, ttl_seconds: int) -> None:
        self._data[key] = ExpiringEntry(value=value, expires_at=self.clock() + ttl_seconds)

    def get(self, key: str, default: Any = None) -> Any:
        entry = self._data.get(key)
        if entry is None:
            return default
        if entry.is_expired(self.clock()):
            del self._data[key]
            return default
        return entry.value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def purge_expired(self) -> int:
        """Drop expired entries, returning how many were removed."""
        now = self.clock()
        expired = [key for key, entry in self._data.items() if entry.is_expired(now)]
        for key in expired:
            del self._data[key]
        return len(expired)


class JsonFileExpirableStore:
    """
    Expiring store persisted to a JSON file (with injected path).

    Values must be JSON serializable. Every write rewrites the file and
    drops entries that have already expired.
    """

    VERSION = "1.0"

    def __init__(self, store_path: Path, clock: Callable[[], float] = time.time):
        """Initialize store with app-provided file path.

        Args:
            store_path: Path to the JSON file (app determines location)
            clock: Time source in epoch seconds

        Example:
            >>> store = JsonFileExpirableStore(store_path=Path("/var/lib/site/purge-handoff.json"))
        """
        self.store_path = store_path
        self.clock = clock
        self._data: dict[str, ExpiringEntry] = {}
        self._load()

    def _load(self) -> None:
        """Load store file if it exists."""
        if not self.store_path.exists():
            self._data = {}
            return

        try:
            with open(self.store_path) as f:
                data = json.load(f)

            if not isinstance(data, dict):
                raise ValueError(f"expected a JSON object, got {type(data).__name__}")

            if data.get("version") != self.VERSION:
                logger.warning(f"Handoff store version mismatch: expected {self.VERSION}, got {data.get('version')}")

            entries = data.get("entries", {})
            self._data = {key: ExpiringEntry.from_dict(entry) for key, entry in entries.items()}

            logger.debug(f"Loaded {len(self._data)} entries from handoff store")

        except (OSError, ValueError, TypeError) as e:
            logger.error(f"Failed to load handoff store: {e}")
            self._data = {}

    def _save(self) -> None:
        """Save store file, leaving out expired entries."""
        self.store_path.parent.mkdir(parents=True, exist_ok=True)

        now = self.clock()
        self._data = {key: entry for key, entry in self._data.items() if not entry.is_expired(now)}

        data = {
            "version": self.VERSION,
            "entries": {key: entry.to_dict() for key, entry in self._data.items()},
        }

        try:
            with open(self.store_path, "w") as f:
                json.dump(data, f, indent=2)
            logger.debug(f"Saved handoff store with {len(self._data)} entries")
        except OSError as e:
            logger.error(f"Failed to save handoff store: {e}")

    def set_with_expire(self, key: str, value: Any, ttl_seconds: int) -> None:
        self._data[key] = ExpiringEntry(value=value, expires_at=self.clock() + ttl_seconds)
        self._save()

    def get(self, key: str, default: Any = None) -> Any:
        entry = self._data.get(key)
        if entry is None:
            return default
        if entry.is_expired(self.clock()):
            del self._data[key]
            self._save()
            return default
        return entry.value

    def delete(self, key: str) -> None:
        if key in self._data:
            del self._data[key]
            self._save()

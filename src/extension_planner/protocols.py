"""Protocols for host-provided collaborators.

The library never looks up host state on its own. Apps inject these:
- which extensions are already enabled
- whether an extension can be installed on this system
- where the selection is parked until the confirmation step reads it
"""

from typing import Any
from typing import Protocol
from typing import runtime_checkable


@runtime_checkable
class ExtensionStateProvider(Protocol):
    """Reports which extensions are active in the running system."""

    def is_enabled(self, extension_name: str) -> bool:
        """Check whether an extension is already installed and enabled.

        Args:
            extension_name: Machine name of the extension

        Returns:
            True if the extension is active
        """
        ...


@runtime_checkable
class RequirementsChecker(Protocol):
    """Per-extension installability gate.

    Failure reasons are the checker's business; the resolver only sees the verdict.
    """

    def check_requirements(self, extension_name: str) -> bool:
        """Check whether an extension can be installed.

        Args:
            extension_name: Machine name of the extension

        Returns:
            True if installable, False otherwise
        """
        ...


class ExpirableStore(Protocol):
    """Key-value store whose entries expire after a TTL.

    Example implementations:
    - MemoryExpirableStore: process-local dict
    - JsonFileExpirableStore: JSON document on disk
    """

    def set_with_expire(self, key: str, value: Any, ttl_seconds: int) -> None:
        """Store a value that disappears after ttl_seconds."""
        ...

    def get(self, key: str, default: Any = None) -> Any:
        """Return the stored value, or default if missing or expired."""
        ...

    def delete(self, key: str) -> None:
        """Remove a key if present."""
        ...

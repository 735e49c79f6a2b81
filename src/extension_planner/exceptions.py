"""Extension planning exceptions.

Data conditions found while resolving (missing dependencies, failed
requirement checks) are reported through the resolution result, not raised.
These exceptions cover catalog and metadata problems.
"""


class ExtensionError(Exception):
    """Base exception for extension planning operations."""

    def __init__(self, message: str, context: dict | None = None):
        """Initialize with message and optional context.

        Args:
            message: Human-readable error message
            context: Optional dict with additional context (descriptor paths, names, etc.)
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}


class CatalogError(ExtensionError):
    """Extension catalog could not be built."""


class ExtensionMetadataError(ExtensionError):
    """Invalid or missing extension metadata."""


class ExtensionNotFoundError(ExtensionError):
    """Extension not present in the catalog."""

"""extension-planner - Extension selection, dependency resolution and handoff.

Apps inject policy (search paths, host version, enabled state, requirement
checks, the handoff store); the library supplies the mechanism.
"""

from .catalog import ExtensionCatalog
from .catalog import build_catalog
from .exceptions import CatalogError
from .exceptions import ExtensionError
from .exceptions import ExtensionMetadataError
from .exceptions import ExtensionNotFoundError
from .handoff import JsonFileExpirableStore
from .handoff import MemoryExpirableStore
from .listing import ExtensionListing
from .listing import ExtensionRow
from .listing import PackageGroup
from .listing import build_listing
from .listing import build_row
from .protocols import ExpirableStore
from .protocols import ExtensionStateProvider
from .protocols import RequirementsChecker
from .requirements import SystemRequirementsChecker
from .resolver import DependencyResolver
from .resolver import ResolutionResult
from .schema import EXPERIMENTAL_PACKAGE
from .schema import Dependency
from .schema import Extension
from .schema import ExtensionInfo
from .workflow import CONFIRM_ROUTE
from .workflow import HANDOFF_TTL_SECONDS
from .workflow import PurgeConfigurationsWorkflow

__all__ = [
    # Metadata
    "Dependency",
    "Extension",
    "ExtensionInfo",
    "EXPERIMENTAL_PACKAGE",
    # Catalog
    "ExtensionCatalog",
    "build_catalog",
    # Resolution
    "DependencyResolver",
    "ResolutionResult",
    "SystemRequirementsChecker",
    # Listing
    "ExtensionListing",
    "ExtensionRow",
    "PackageGroup",
    "build_listing",
    "build_row",
    # Handoff
    "JsonFileExpirableStore",
    "MemoryExpirableStore",
    # Workflow
    "PurgeConfigurationsWorkflow",
    "CONFIRM_ROUTE",
    "HANDOFF_TTL_SECONDS",
    # Protocols
    "ExpirableStore",
    "ExtensionStateProvider",
    "RequirementsChecker",
    # Exceptions
    "CatalogError",
    "ExtensionError",
    "ExtensionMetadataError",
    "ExtensionNotFoundError",
]

__version__ = "0.1.0"

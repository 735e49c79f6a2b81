"""Purge-configurations workflow - Selection step orchestration.

Glues the catalog, listing, resolver and handoff store together:
1. Rescan the catalog and build the listing
2. Read the checkbox state back into a selection
3. Resolve the selection and park the result for the confirmation step

The acting account and the host version are passed in; nothing is looked
up from ambient state.
"""

import logging
from collections.abc import Mapping
from typing import Any

from .catalog import ExtensionCatalog
from .exceptions import CatalogError
from .listing import ExtensionListing
from .listing import build_listing
from .protocols import ExpirableStore
from .resolver import DependencyResolver
from .resolver import ResolutionResult

logger = logging.getLogger(__name__)

HANDOFF_TTL_SECONDS = 60
CONFIRM_ROUTE = "easy_install.purge_configurations_confirm"


class PurgeConfigurationsWorkflow:
    """
    Selection step for installing extensions and purging leftover configuration.

    Example:
        >>> workflow = PurgeConfigurationsWorkflow(catalog, resolver, store, distribution="Standard")
        >>> listing, errors = workflow.build_listing()
        >>> route = workflow.submit(account_id=42, values={"modules": {"views": {"enable": True}}})
        >>> workflow.pending(42).to_install
        {'views': 'Views'}
    """

    def __init__(
        self,
        catalog: ExtensionCatalog,
        resolver: DependencyResolver,
        store: ExpirableStore,
        distribution: str = "",
        ttl_seconds: int = HANDOFF_TTL_SECONDS,
    ):
        self.catalog = catalog
        self.resolver = resolver
        self.store = store
        self.distribution = distribution
        self.ttl_seconds = ttl_seconds

    def build_listing(self, filter_text: str | None = None) -> tuple[ExtensionListing, list[str]]:
        """
        Rescan the catalog and build the selection listing.

        Returns:
            (listing, errors). A catalog that can't be read gives an empty
            listing and one error message instead of raising.
        """
        try:
            extensions = self.catalog.reset().get_list()
        except CatalogError as e:
            logger.warning(f"Extensions could not be listed: {e.message}")
            return ExtensionListing(), [f"Extensions could not be listed due to an error: {e.message}"]

        listing = build_listing(
            extensions,
            distribution=self.distribution,
            core_version=self.catalog.core_version,
            filter_text=filter_text,
        )
        return listing, []

    def selected_names(self, values: Mapping[str, Any]) -> set[str]:
        """
        Extract ticked extensions from submitted values.

        Args:
            values: {"modules": {name: {"enable": bool}}}

        Returns:
            Names that were ticked and exist in the catalog
        """
        known = self.catalog.get_list()
        selected = set()

        for name, row in values.get("modules", {}).items():
            if not isinstance(row, Mapping) or not row.get("enable"):
                continue
            if name not in known:
                logger.debug(f"Ignoring selection of unknown extension '{name}'")
                continue
            selected.add(name)

        return selected

    def submit(self, account_id: int | str, values: Mapping[str, Any]) -> str:
        """
        Resolve the submitted selection and hand it off to the confirmation step.

        Args:
            account_id: Acting account, used as the handoff key
            values: Submitted form values

        Returns:
            Route name the caller should redirect to
        """
        extensions = self.catalog.get_list()
        result = self.resolver.compute_install_set(extensions, self.selected_names(values))

        self.store.set_with_expire(str(account_id), result.to_dict(), self.ttl_seconds)
        logger.info(f"Stored install plan for account {account_id} ({len(result.to_install)} extensions)")

        return CONFIRM_ROUTE

    def pending(self, account_id: int | str) -> ResolutionResult | None:
        """Read back the handoff for an account, or None if it expired."""
        data = self.store.get(str(account_id))
        if data is None:
            return None
        return ResolutionResult.from_dict(data)

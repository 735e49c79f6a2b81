"""Extension catalog - Scan descriptors into catalog entries.

Search paths, the host core version and the enabled-state lookup are app
policy; the catalog only knows how to read descriptors and derive the
dependency graph from them.

The catalog is rebuilt on every reset() so extensions dropped into a search
path show up without restarting the host.
"""

import logging
import tomllib
from collections.abc import Iterable
from pathlib import Path

from pydantic import ValidationError

from .exceptions import CatalogError
from .exceptions import ExtensionMetadataError
from .exceptions import ExtensionNotFoundError
from .protocols import ExtensionStateProvider
from .schema import DESCRIPTOR_FILENAME
from .schema import Extension
from .schema import ExtensionInfo
from .schema import constraint_allows

logger = logging.getLogger(__name__)


def sort_key(extension: Extension) -> tuple[str, str]:
    """Order catalog entries by display name, then machine name."""
    return (extension.display_name.casefold(), extension.name)


def build_catalog(
    infos: Iterable[ExtensionInfo],
    enabled_names: Iterable[str] = (),
    core_version: str | None = None,
) -> dict[str, Extension]:
    """
    Build catalog entries from parsed descriptors.

    Computes the host-dependent fields:
    - enabled: name is in enabled_names
    - core_incompatible: core_version does not satisfy core_version_requirement
    - dependents: transpose of dependencies, restricted to catalog names

    Args:
        infos: Parsed descriptors. Later duplicates replace earlier ones.
        enabled_names: Names already active in the running system
        core_version: Running host version (None skips the core check)

    Returns:
        Mapping of name to Extension, ordered by display name
    """
    by_name: dict[str, ExtensionInfo] = {}
    for info in infos:
        if info.name in by_name:
            logger.debug(f"Extension '{info.name}' redefined, keeping the later descriptor")
        by_name[info.name] = info

    enabled = set(enabled_names)

    dependents: dict[str, set[str]] = {name: set() for name in by_name}
    for name, info in by_name.items():
        for dependency in info.dependencies:
            if dependency in dependents:
                dependents[dependency].add(name)

    entries = []
    for name, info in by_name.items():
        core_incompatible = False
        if core_version is not None and info.core_version_requirement:
            core_incompatible = not constraint_allows(info.core_version_requirement, core_version)

        entries.append(
            Extension(
                name=name,
                display_name=info.label,
                description=info.description,
                version=info.version,
                package_group=info.package,
                enabled=name in enabled,
                required=info.required,
                core_incompatible=core_incompatible,
                hidden=info.hidden,
                dependencies=dict(info.dependencies),
                dependents=frozenset(dependents[name]),
                info=info,
            )
        )

    entries.sort(key=sort_key)
    return {entry.name: entry for entry in entries}


class ExtensionCatalog:
    """
    Extension catalog provider (with injected search paths).

    Layout: <search_path>/<extension_dir>/extension.toml. The descriptor's
    name, not the directory name, identifies the extension.

    Example:
        >>> catalog = ExtensionCatalog(
        ...     search_paths=[Path("/srv/core/extensions"), Path("/srv/site/extensions")],
        ...     core_version="10.2.0",
        ...     state_provider=host_state,
        ... )
        >>> for name, extension in catalog.reset().get_list().items():
        ...     print(name, extension.enabled)
    """

    def __init__(
        self,
        search_paths: list[Path],
        core_version: str | None = None,
        state_provider: ExtensionStateProvider | None = None,
    ):
        """Initialize catalog with app-provided search paths.

        Args:
            search_paths: Paths to scan in precedence order (lowest to highest).
            core_version: Running host version used for core compatibility.
            state_provider: Lookup for already-enabled extensions. Without one,
                           nothing is considered enabled.
        """
        self.search_paths = search_paths
        self.core_version = core_version
        self.state_provider = state_provider
        self._extensions: dict[str, Extension] | None = None

    def reset(self) -> "ExtensionCatalog":
        """Rescan all search paths.

        Returns:
            self, so callers can chain get_list()

        Raises:
            CatalogError: If a descriptor cannot be parsed
        """
        infos = self._scan()

        enabled_names = []
        if self.state_provider is not None:
            enabled_names = [info.name for info in infos if self.state_provider.is_enabled(info.name)]

        self._extensions = build_catalog(infos, enabled_names, self.core_version)
        logger.debug(f"Catalog rebuilt with {len(self._extensions)} extensions")
        return self

    def get_list(self) -> dict[str, Extension]:
        """Return the catalog, scanning on first use."""
        if self._extensions is None:
            return self.reset()._extensions
        return self._extensions

    def get(self, name: str) -> Extension:
        """Return a single catalog entry.

        Raises:
            ExtensionNotFoundError: If name is not in the catalog
        """
        extensions = self.get_list()
        if name not in extensions:
            raise ExtensionNotFoundError(
                f"Extension '{name}' not found in catalog",
                context={"extension_name": name, "search_paths": [str(p) for p in self.search_paths]},
            )
        return extensions[name]

    def exists(self, name: str) -> bool:
        return name in self.get_list()

    def _scan(self) -> list[ExtensionInfo]:
        """Read descriptors from all search paths (lowest precedence first)."""
        infos: list[ExtensionInfo] = []

        for search_path in self.search_paths:
            if not search_path.exists():
                continue

            for extension_dir in sorted(search_path.iterdir()):
                if not extension_dir.is_dir() or extension_dir.name.startswith("."):
                    continue

                descriptor = extension_dir / DESCRIPTOR_FILENAME
                if not descriptor.exists():
                    continue

                try:
                    infos.append(ExtensionInfo.from_descriptor(descriptor))
                except (KeyError, tomllib.TOMLDecodeError, ValidationError, ExtensionMetadataError) as e:
                    raise CatalogError(
                        f"Invalid extension descriptor {descriptor}: {e}",
                        context={"descriptor": str(descriptor)},
                    ) from e

        return infos

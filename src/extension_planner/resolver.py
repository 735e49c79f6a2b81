"""Dependency resolver - Turn a selection into an install set.

Three passes over a catalog snapshot:
1. Seed: profile-required extensions plus the selection (enabled ones skipped)
2. Closure: pull in dependencies until nothing new is added
3. Requirements: drop candidates the host says cannot be installed, along
   with their direct dependents

Nothing here raises for data problems. Missing dependencies and failed
requirement checks show up in the result instead.
"""

import logging
from collections import deque
from collections.abc import Iterable
from collections.abc import Mapping

from pydantic import BaseModel
from pydantic import Field

from .protocols import RequirementsChecker
from .schema import Extension

logger = logging.getLogger(__name__)


class ResolutionResult(BaseModel):
    """Outcome of one resolution call.

    Plain mappings and lists of strings only, so it can be parked in an
    expiring store and read back by the confirmation step.
    """

    to_install: dict[str, str] = Field(default_factory=dict)
    dependencies_added: dict[str, dict[str, str]] = Field(default_factory=dict)
    experimental: dict[str, str] = Field(default_factory=dict)
    unresolvable: dict[str, list[str]] = Field(default_factory=dict)
    failed_requirements: list[str] = Field(default_factory=list)

    @property
    def experimental_names(self) -> set[str]:
        return set(self.experimental)

    def has_changes(self) -> bool:
        return bool(self.to_install)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return self.model_dump()

    @classmethod
    def from_dict(cls, data: dict) -> "ResolutionResult":
        """Create from dictionary."""
        return cls.model_validate(data)


class DependencyResolver:
    """
    Compute install sets against an injected requirements checker.

    Stateless between calls: the catalog and selection are passed in each
    time, the catalog is never modified.

    Removal after a failed requirements check goes one level deep by default:
    the failing extension and the extensions that directly depend on it.
    Pass cascade_transitively=True to remove the whole dependent closure.

    Example:
        >>> resolver = DependencyResolver(requirements_checker=SystemRequirementsChecker(catalog))
        >>> result = resolver.compute_install_set(catalog.get_list(), {"views_ui"})
        >>> result.to_install
        {'views_ui': 'Views UI', 'views': 'Views'}
    """

    def __init__(self, requirements_checker: RequirementsChecker, cascade_transitively: bool = False):
        self.requirements_checker = requirements_checker
        self.cascade_transitively = cascade_transitively

    def compute_install_set(
        self,
        catalog: Mapping[str, Extension],
        requested_names: Iterable[str],
    ) -> ResolutionResult:
        """
        Resolve a selection into the set of extensions to install.

        Args:
            catalog: Extension name to catalog entry (read only)
            requested_names: Names the user selected. Names outside the
                            catalog are ignored.

        Returns:
            ResolutionResult populated by the three passes
        """
        requested = set(requested_names)
        result = ResolutionResult()

        self._seed(catalog, requested, result)
        self._add_dependencies(catalog, result)
        self._check_requirements(catalog, result)

        logger.info(
            f"Resolved {len(requested)} selected extensions to {len(result.to_install)} installs "
            f"({len(result.failed_requirements)} failed requirements, "
            f"{len(result.unresolvable)} with missing dependencies)"
        )
        return result

    def _seed(self, catalog: Mapping[str, Extension], requested: set[str], result: ResolutionResult) -> None:
        for name, extension in catalog.items():
            # Already active, nothing to do
            if extension.enabled:
                continue

            if extension.required:
                self._add(extension, result)
            elif name in requested:
                self._add(extension, result)

    def _add_dependencies(self, catalog: Mapping[str, Extension], result: ResolutionResult) -> None:
        # Every install-set member is expanded exactly once, which also stops cycles
        pending = deque(result.to_install)
        expanded: set[str] = set()

        while pending:
            parent = pending.popleft()
            if parent in expanded:
                continue
            expanded.add(parent)

            for dependency in catalog[parent].dependencies:
                if dependency not in catalog:
                    missing = result.unresolvable.setdefault(parent, [])
                    if dependency not in missing:
                        missing.append(dependency)
                    logger.debug(f"'{parent}' requires '{dependency}' which is not in the catalog")
                    continue

                target = catalog[dependency]
                if dependency in result.to_install or target.enabled:
                    continue

                self._add(target, result)
                result.dependencies_added.setdefault(parent, {})[dependency] = target.display_name
                pending.append(dependency)
                logger.debug(f"Added dependency '{dependency}' for '{parent}'")

    def _check_requirements(self, catalog: Mapping[str, Extension], result: ResolutionResult) -> None:
        # Snapshot: every candidate is checked once, even if an earlier failure removed it
        for name in list(result.to_install):
            if self.requirements_checker.check_requirements(name):
                continue

            logger.info(f"Extension '{name}' failed its requirements check, removing it and its dependents")
            result.failed_requirements.append(name)
            self._remove(name, result)

            for dependent in self._dependents_to_remove(catalog, name):
                self._remove(dependent, result)

    def _dependents_to_remove(self, catalog: Mapping[str, Extension], name: str) -> list[str]:
        direct = sorted(catalog[name].dependents)
        if not self.cascade_transitively:
            return direct

        closure: list[str] = []
        seen = {name}
        pending = deque(direct)
        while pending:
            dependent = pending.popleft()
            if dependent in seen:
                continue
            seen.add(dependent)
            closure.append(dependent)
            if dependent in catalog:
                pending.extend(sorted(catalog[dependent].dependents))
        return closure

    @staticmethod
    def _add(extension: Extension, result: ResolutionResult) -> None:
        result.to_install[extension.name] = extension.display_name
        if extension.is_experimental:
            result.experimental[extension.name] = extension.display_name

    @staticmethod
    def _remove(name: str, result: ResolutionResult) -> None:
        result.to_install.pop(name, None)
        result.experimental.pop(name, None)
        result.dependencies_added.pop(name, None)

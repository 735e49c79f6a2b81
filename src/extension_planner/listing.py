"""Extension listing - The data behind the selection table.

Lists extensions that are neither hidden nor enabled, grouped by package,
with everything the table needs to decide whether a row's checkbox can be
ticked. Producing markup is left to the app.
"""

import platform
from collections.abc import Mapping

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field

from .schema import CORE_PACKAGE
from .schema import TESTING_PACKAGE
from .schema import Extension
from .schema import constraint_allows


class ExtensionRow(BaseModel):
    """One selectable extension (immutable)."""

    model_config = ConfigDict(frozen=True)

    name: str
    display_name: str
    description: str = ""
    version: str = ""
    disabled: bool = False
    incompatible: bool = False
    incompatible_reasons: list[str] = Field(default_factory=list)
    requires: dict[str, str] = Field(default_factory=dict)
    required_by: list[str] = Field(default_factory=list)


class PackageGroup(BaseModel):
    """Rows sharing a package label."""

    model_config = ConfigDict(frozen=True)

    title: str
    open: bool = True
    rows: list[ExtensionRow] = Field(default_factory=list)


class ExtensionListing(BaseModel):
    """All package groups, Core first, the rest by title."""

    model_config = ConfigDict(frozen=True)

    groups: list[PackageGroup] = Field(default_factory=list)

    def get_group(self, title: str) -> PackageGroup | None:
        for group in self.groups:
            if group.title == title:
                return group
        return None

    def get_row(self, name: str) -> ExtensionRow | None:
        for group in self.groups:
            for row in group.rows:
                if row.name == name:
                    return row
        return None

    def row_names(self) -> list[str]:
        return [row.name for group in self.groups for row in group.rows]


def _matches(extension: Extension, filter_text: str) -> bool:
    needle = filter_text.casefold()
    return any(
        needle in value.casefold() for value in (extension.name, extension.display_name, extension.description)
    )


def build_row(
    catalog: Mapping[str, Extension],
    extension: Extension,
    distribution: str = "",
    core_version: str | None = None,
    python_version: str | None = None,
) -> ExtensionRow:
    """
    Build the row for one extension.

    Args:
        catalog: Full catalog, used to describe dependencies and dependents
        extension: The extension the row is for
        distribution: Name of the install profile, shown for required extensions
        core_version: Running host version, used in incompatibility reasons
        python_version: Interpreter version (defaults to the running one)

    Returns:
        ExtensionRow with compatibility and relationship labels
    """
    python_version = python_version or platform.python_version()
    info = extension.info

    disabled = extension.enabled
    requires: dict[str, str] = {}
    required_by: list[str] = []
    reasons: list[str] = []

    if extension.required:
        disabled = True
        explanation = f" ({info.explanation})" if info is not None and info.explanation else ""
        required_by.append(f"{distribution}{explanation}")

    if extension.core_incompatible:
        requirement = info.core_version_requirement if info is not None else ""
        if core_version is None:
            reasons.append("This version is not compatible with the running core and should be replaced.")
            requires["core"] = f"Core ({requirement}) (incompatible)"
        else:
            reasons.append(f"This version is not compatible with core {core_version} and should be replaced.")
            requires["core"] = f"Core ({requirement}) (incompatible with version {core_version})"

    if info is not None and info.python and not constraint_allows(info.python, python_version):
        reasons.append(
            f"This extension requires Python version {info.python} "
            f"and is incompatible with Python version {python_version}."
        )

    incompatible = bool(reasons)
    description = extension.description
    if incompatible:
        disabled = True
        description = " ".join(reasons)

    for dependency in extension.dependency_objects():
        target = catalog.get(dependency.name)
        if target is None:
            requires[dependency.name] = f"{dependency.name} (missing)"
            disabled = True
        elif target.hidden:
            continue
        elif not dependency.is_compatible(target.version):
            requires[dependency.name] = (
                f"{target.display_name} ({dependency.constraint_string()}) "
                f"(incompatible with version {target.version})"
            )
            disabled = True
        elif target.core_incompatible:
            requires[dependency.name] = f"{target.display_name} (incompatible with this version of core)"
            disabled = True
        elif target.enabled:
            requires[dependency.name] = target.display_name
        else:
            requires[dependency.name] = f"{target.display_name} (disabled)"

    for dependent_name in sorted(extension.dependents):
        dependent = catalog.get(dependent_name)
        if dependent is None or dependent.hidden:
            continue
        if dependent.enabled and extension.enabled:
            required_by.append(dependent.display_name)
            disabled = True
        else:
            required_by.append(f"{dependent.display_name} (disabled)")

    return ExtensionRow(
        name=extension.name,
        display_name=extension.display_name,
        description=description,
        version=extension.version,
        disabled=disabled,
        incompatible=incompatible,
        incompatible_reasons=reasons,
        requires=requires,
        required_by=required_by,
    )


def build_listing(
    catalog: Mapping[str, Extension],
    distribution: str = "",
    core_version: str | None = None,
    python_version: str | None = None,
    filter_text: str | None = None,
) -> ExtensionListing:
    """
    Build the selection listing for extensions that can still be installed.

    Example:
        >>> listing = build_listing(catalog.reset().get_list(), distribution="Standard")
        >>> for group in listing.groups:
        ...     print(group.title, [row.name for row in group.rows])
    """
    rows_by_package: dict[str, list[ExtensionRow]] = {}

    for extension in catalog.values():
        if extension.hidden or extension.enabled:
            continue
        if filter_text and not _matches(extension, filter_text):
            continue

        row = build_row(catalog, extension, distribution, core_version, python_version)
        rows_by_package.setdefault(extension.package_group, []).append(row)

    titles = sorted(rows_by_package, key=lambda title: (title != CORE_PACKAGE, title.casefold()))

    return ExtensionListing(
        groups=[
            PackageGroup(title=title, open=title != TESTING_PACKAGE, rows=rows_by_package[title])
            for title in titles
        ]
    )

"""Extension metadata schema - Parse extension.toml descriptors.

An extension directory carries one descriptor with an [extension] table.
ExtensionInfo is what the descriptor says; Extension is the catalog entry,
which adds the runtime state the host computed (enabled, core compatibility,
dependents).
"""

import tomllib
from collections.abc import Iterator
from pathlib import Path

from packaging.specifiers import InvalidSpecifier
from packaging.specifiers import SpecifierSet
from packaging.version import InvalidVersion
from packaging.version import Version
from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field

from .exceptions import ExtensionMetadataError

DESCRIPTOR_FILENAME = "extension.toml"

CORE_PACKAGE = "Core"
EXPERIMENTAL_PACKAGE = "Core (Experimental)"
TESTING_PACKAGE = "Testing"


def constraint_allows(constraint: str, version: str) -> bool:
    """Check a version against a PEP 440 specifier string.

    An empty constraint allows everything. Unparsable constraints or versions
    never match.
    """
    if not constraint.strip():
        return True
    try:
        return Version(version) in SpecifierSet(constraint)
    except (InvalidSpecifier, InvalidVersion):
        return False


class Dependency(BaseModel):
    """A declared dependency: extension name plus version constraint."""

    model_config = ConfigDict(frozen=True)

    name: str
    constraint: str = ""

    def is_compatible(self, version: str) -> bool:
        """Check whether the dependency's installed version satisfies the constraint."""
        return constraint_allows(self.constraint, version)

    def constraint_string(self) -> str:
        return self.constraint.strip()


class ExtensionInfo(BaseModel):
    """
    Extension metadata from extension.toml.

    Only `name` is mandatory; everything else has a default so that small
    test extensions can declare just a name and their dependencies.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    display_name: str = ""
    description: str = ""
    version: str = "0.0.0"
    package: str = "Other"

    hidden: bool = False
    required: bool = False
    explanation: str = ""

    core_version_requirement: str = ""
    python: str = ""
    configure: str | None = None

    # Insertion order is the declaration order in the descriptor
    dependencies: dict[str, str] = Field(default_factory=dict)
    commands: list[str] = Field(default_factory=list)

    @property
    def label(self) -> str:
        """Human-readable name, falling back to the machine name."""
        return self.display_name or self.name

    @classmethod
    def from_descriptor(cls, descriptor_path: Path) -> "ExtensionInfo":
        """
        Load extension metadata from extension.toml.

        Args:
            descriptor_path: Path to extension.toml file

        Returns:
            ExtensionInfo instance

        Raises:
            FileNotFoundError: If the descriptor doesn't exist
            KeyError: If the [extension] table or its name is missing
            ExtensionMetadataError: If dependencies is not a table
            tomllib.TOMLDecodeError: If invalid TOML
        """
        if not descriptor_path.exists():
            raise FileNotFoundError(f"extension.toml not found: {descriptor_path}")

        with open(descriptor_path, "rb") as f:
            data = tomllib.load(f)

        extension = data.get("extension", {})
        if not extension:
            raise KeyError(f"[extension] section missing in {descriptor_path}")
        if "name" not in extension:
            raise KeyError(f"[extension] name missing in {descriptor_path}")

        requirements = extension.get("requirements", {})
        if not isinstance(extension.get("dependencies", {}), dict):
            raise ExtensionMetadataError(
                f"[extension] dependencies must be a table of name = constraint in {descriptor_path}",
                context={"descriptor": str(descriptor_path)},
            )

        return cls(
            name=extension["name"],
            display_name=extension.get("display_name", ""),
            description=extension.get("description", ""),
            version=str(extension.get("version", "0.0.0")),
            package=extension.get("package", "Other"),
            hidden=extension.get("hidden", False),
            required=extension.get("required", False),
            explanation=extension.get("explanation", ""),
            core_version_requirement=extension.get("core_version_requirement", ""),
            python=extension.get("python", ""),
            configure=extension.get("configure"),
            dependencies=extension.get("dependencies", {}),
            commands=requirements.get("commands", []),
        )


class Extension(BaseModel):
    """Catalog entry: descriptor metadata plus host-computed state (immutable)."""

    model_config = ConfigDict(frozen=True)

    name: str
    display_name: str
    description: str = ""
    version: str = "0.0.0"
    package_group: str = "Other"

    enabled: bool = False
    required: bool = False
    core_incompatible: bool = False
    hidden: bool = False

    dependencies: dict[str, str] = Field(default_factory=dict)
    dependents: frozenset[str] = Field(default_factory=frozenset)

    info: ExtensionInfo | None = None

    @property
    def is_experimental(self) -> bool:
        return self.package_group == EXPERIMENTAL_PACKAGE

    def dependency_objects(self) -> Iterator[Dependency]:
        """Yield declared dependencies in declaration order."""
        for name, constraint in self.dependencies.items():
            yield Dependency(name=name, constraint=constraint)

"""System requirement checks for install candidates.

Checks what an extension's descriptor asks of the machine it is installed on:
the running Python version and executables on PATH.
"""

import logging
import platform
import shutil
from collections.abc import Callable
from collections.abc import Mapping

from .catalog import ExtensionCatalog
from .schema import Extension
from .schema import constraint_allows

logger = logging.getLogger(__name__)


class SystemRequirementsChecker:
    """
    RequirementsChecker backed by descriptor metadata.

    An extension fails when:
    - it is not in the catalog
    - the running Python doesn't satisfy its `python` specifier
    - a command listed under [extension.requirements] is not on PATH
    """

    def __init__(
        self,
        catalog: ExtensionCatalog | Mapping[str, Extension],
        python_version: str | None = None,
        which: Callable[[str], str | None] = shutil.which,
    ):
        """Initialize checker.

        Args:
            catalog: Catalog provider (read fresh on every check) or a fixed snapshot
            python_version: Interpreter version to check against (defaults to the running one)
            which: Executable lookup, shutil.which unless overridden
        """
        self.catalog = catalog
        self.python_version = python_version or platform.python_version()
        self.which = which

    def unmet_requirements(self, extension_name: str) -> list[str]:
        """List human-readable reasons why an extension can't be installed.

        Returns:
            Empty list if the extension is installable
        """
        extensions = self.catalog.get_list() if isinstance(self.catalog, ExtensionCatalog) else self.catalog
        extension = extensions.get(extension_name)
        if extension is None:
            return [f"{extension_name} is not in the catalog"]

        info = extension.info
        if info is None:
            return []

        reasons = []
        if info.python and not constraint_allows(info.python, self.python_version):
            reasons.append(f"requires Python {info.python}, running {self.python_version}")

        for command in info.commands:
            if self.which(command) is None:
                reasons.append(f"requires the '{command}' command")

        return reasons

    def check_requirements(self, extension_name: str) -> bool:
        reasons = self.unmet_requirements(extension_name)
        if reasons:
            logger.info(f"Extension '{extension_name}' cannot be installed: {'; '.join(reasons)}")
            return False
        return True

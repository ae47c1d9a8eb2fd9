"""Entry enumeration within a single physical location."""

from __future__ import annotations

import logging
import os
import zipfile

from .errors import ResourceUnavailableError
from .locations import ArchiveLocation
from .locations import DirectoryLocation
from .locations import PhysicalLocation
from .names import entry_name
from .names import is_direct_child
from .names import is_package_marker
from .names import package_prefix

logger = logging.getLogger(__name__)

DEFAULT_SUFFIX = ".py"


class EntryEnumerator:
    """Lists the module names a directory or archive location contributes to a package.

    Only files ending in the entry suffix count. Package markers (__init__)
    name the package itself and are never reported as entries.
    """

    def __init__(self, suffix: str = DEFAULT_SUFFIX):
        self.suffix = suffix

    def enumerate(self, location: PhysicalLocation, package: str, recursive: bool = True) -> set[str]:
        """Return the dotted entry names found at location.

        Args:
            location: Directory or archive location backing the package
            package: Dotted package name the location belongs to
            recursive: Include entries of sub-packages

        Raises:
            ResourceUnavailableError: Directory cannot be listed or archive cannot be read
        """
        if isinstance(location, DirectoryLocation):
            names = self._enumerate_directory(location, package, recursive)
        elif isinstance(location, ArchiveLocation):
            names = self._enumerate_archive(location, package, recursive)
        else:
            raise ResourceUnavailableError(location, f"Unsupported location type: {type(location).__name__}")

        entries = {n for n in names if not is_package_marker(n)}
        logger.debug(f"[package:enumerate] {location} -> {len(entries)} entries")
        return entries

    def _enumerate_directory(self, location: DirectoryLocation, package: str, recursive: bool) -> set[str]:
        root = location.root
        if not root.is_dir():
            raise ResourceUnavailableError(location, f"Not a directory: {root}")
        try:
            candidates = list(root.rglob("*") if recursive else root.iterdir())
        except OSError as e:
            raise ResourceUnavailableError(location, f"Cannot list directory {root}: {e}") from e

        names: set[str] = set()
        for path in candidates:
            if not path.name.endswith(self.suffix) or not path.is_file():
                continue
            relative = str(path.relative_to(root))
            names.add(entry_name(relative, package, self.suffix, os.sep))
        return names

    def _enumerate_archive(self, location: ArchiveLocation, package: str, recursive: bool) -> set[str]:
        prefix = package_prefix(package)
        names: set[str] = set()
        try:
            with zipfile.ZipFile(location.container) as archive:
                members = archive.namelist()
        except (OSError, zipfile.BadZipFile) as e:
            raise ResourceUnavailableError(location, f"Cannot read archive {location.container}: {e}") from e

        for member in members:
            member = member[1:] if member.startswith("/") else member
            if not member.startswith(location.prefix) or not member.endswith(self.suffix):
                continue
            name = entry_name(member, "", self.suffix, "/")
            if not name.startswith(prefix):
                continue
            if not recursive and not is_direct_child(name, package):
                continue
            names.add(name)
        return names

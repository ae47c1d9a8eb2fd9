"""Error taxonomy for package loading.

Only InvalidArgumentError and PackageNotFoundError escape a load call.
ResourceUnavailableError and EntryMaterializationError are raised by the
lower layers and recovered by the loader.
"""

from __future__ import annotations

from typing import Any


class PackageLoaderError(Exception):
    """Base class for all package loader errors."""


class InvalidArgumentError(PackageLoaderError, ValueError):
    """Empty or malformed package name, logical path, or scope."""


class PackageNotFoundError(PackageLoaderError, LookupError):
    """No physical location provides the package anywhere in the scope."""

    def __init__(self, package: str, message: str | None = None):
        self.package = package
        super().__init__(message or f"Package '{package}' not found")


class ResourceUnavailableError(PackageLoaderError):
    """A physical location could not be listed or read."""

    def __init__(self, location: Any, message: str):
        self.location = location
        super().__init__(message)


class EntryMaterializationError(PackageLoaderError):
    """A module could not be resolved or its body failed to run."""

    def __init__(self, entry: str, message: str):
        self.entry = entry
        super().__init__(message)


__all__ = [
    "PackageLoaderError",
    "InvalidArgumentError",
    "PackageNotFoundError",
    "ResourceUnavailableError",
    "EntryMaterializationError",
]

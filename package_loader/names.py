"""Package and entry name conversions."""

from __future__ import annotations

import os

from .errors import InvalidArgumentError

PACKAGE_SEPARATOR = "."
PATH_SEPARATOR = "/"


def normalize_package_name(name) -> str:
    """Validate a package name and strip a leading '/' or '.'.

    Args:
        name: Dotted package name, optionally written path-style ("/a.b")

    Returns:
        The dotted name without the leading marker

    Raises:
        InvalidArgumentError: Name is not a string, or a segment is not an identifier
    """
    if not isinstance(name, str):
        raise InvalidArgumentError(f"Package name must be a string, got {type(name).__name__}")
    if not name:
        raise InvalidArgumentError("Package name must not be empty")

    if name[0] in (PATH_SEPARATOR, PACKAGE_SEPARATOR):
        name = name[1:]

    if not all(segment.isidentifier() for segment in name.split(PACKAGE_SEPARATOR)):
        raise InvalidArgumentError(f"Malformed package name: {name!r}")

    return name


def to_logical_path(package: str) -> str:
    return package.replace(PACKAGE_SEPARATOR, PATH_SEPARATOR)


def package_prefix(package: str) -> str:
    return package + PACKAGE_SEPARATOR if package else ""


def entry_name(relative_path: str, package: str, suffix: str, sep: str = os.sep) -> str:
    """Convert a suffix-bearing path below a package root into a dotted entry name.

    Example:
        >>> entry_name("q/Y.py", "p", ".py", "/")
        'p.q.Y'
    """
    stem = relative_path[: -len(suffix)] if suffix else relative_path
    return package_prefix(package) + stem.replace(sep, PACKAGE_SEPARATOR)


def is_direct_child(entry: str, package: str) -> bool:
    """True when entry sits directly in package, not in a sub-package."""
    prefix = package_prefix(package)
    if not entry.startswith(prefix):
        return False
    return PACKAGE_SEPARATOR not in entry[len(prefix) :]


def is_package_marker(entry: str) -> bool:
    """True for names produced from __init__ files."""
    return entry.rpartition(PACKAGE_SEPARATOR)[2] == "__init__"

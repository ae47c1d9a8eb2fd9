"""Physical locations backing a package: plain directories and archive prefixes.

A location remembers the resolver that reported it so materialization can be
routed back to that resolver. Equality ignores the resolver: two resolvers
exposing the same directory produce equal locations.
"""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field
from pathlib import Path
from typing import Any
from urllib.parse import unquote
from urllib.parse import urlparse

from .errors import InvalidArgumentError

ARCHIVE_SCHEMES = ("zip:", "jar:")
ARCHIVE_SEPARATOR = "!/"


def _normalize_prefix(prefix: str) -> str:
    prefix = prefix.lstrip("/")
    if prefix and not prefix.endswith("/"):
        prefix += "/"
    return prefix


@dataclass(frozen=True)
class DirectoryLocation:
    """A package directory on the filesystem."""

    root: Path
    resolver: Any = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, "root", Path(self.root).resolve())

    @property
    def identity(self) -> tuple[str, ...]:
        return ("directory", str(self.root))

    @property
    def url(self) -> str:
        return self.root.as_uri()

    def __str__(self) -> str:
        return str(self.root)


@dataclass(frozen=True)
class ArchiveLocation:
    """A member prefix inside a zip archive (zip, wheel, egg, pyz)."""

    container: Path
    prefix: str
    resolver: Any = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, "container", Path(self.container).resolve())
        object.__setattr__(self, "prefix", _normalize_prefix(self.prefix))

    @property
    def identity(self) -> tuple[str, ...]:
        return ("archive", str(self.container), self.prefix)

    @property
    def url(self) -> str:
        return f"zip:{self.container.as_uri()}{ARCHIVE_SEPARATOR}{self.prefix}"

    def __str__(self) -> str:
        return f"{self.container}{ARCHIVE_SEPARATOR}{self.prefix}"


PhysicalLocation = DirectoryLocation | ArchiveLocation


def file_url_to_path(url: str) -> Path:
    """Decode a file:// URL (or a plain path) into a Path.

    Raises:
        InvalidArgumentError: URL uses a scheme other than file
    """
    if not url.startswith("file:"):
        if "://" in url:
            raise InvalidArgumentError(f"Unsupported URL scheme: {url}")
        return Path(url)

    parsed = urlparse(url)
    if parsed.netloc not in ("", "localhost"):
        raise InvalidArgumentError(f"Remote file URLs are not supported: {url}")
    return Path(unquote(parsed.path))


def parse_location(url: str, resolver: Any = None) -> PhysicalLocation:
    """Classify a resource URL as a directory or archive location.

    Formats:
        file:///path/to/root/p          -> DirectoryLocation
        zip:file:///path/x.zip!/p       -> ArchiveLocation
        jar:file:///path/x.zip!/p       -> ArchiveLocation

    Percent escapes are decoded in both the container path and the member prefix.

    Raises:
        InvalidArgumentError: Empty URL or unsupported scheme
    """
    if not url:
        raise InvalidArgumentError("Location URL must not be empty")

    if url.startswith(ARCHIVE_SCHEMES):
        rest = url[4:]
        container_url, sep, member = rest.partition(ARCHIVE_SEPARATOR)
        if not sep:
            raise InvalidArgumentError(f"Archive URL is missing '{ARCHIVE_SEPARATOR}': {url}")
        return ArchiveLocation(file_url_to_path(container_url), unquote(member), resolver)

    if url.startswith("file:"):
        return DirectoryLocation(file_url_to_path(url), resolver)

    raise InvalidArgumentError(f"Unsupported location URL: {url}")

"""Discover and load every module of a Python package.

Given a package name, a PackageLoader finds every directory and zip archive
providing it across an ordered set of resolvers, lists the modules each one
contains, and imports them, optionally running only some module bodies.

Public API:
- PackageLoader: load_package / list_entries / locate
- LoaderRegistry: one loader per loading scope, built once
- PathResolver, SystemResolver: resolvers over explicit roots or sys.path
- get_package_loader, get_system_package_loader, get_context_package_loader
- use_context_resolver: bind the context resolver for a block
"""

from .enumerator import EntryEnumerator
from .errors import EntryMaterializationError
from .errors import InvalidArgumentError
from .errors import PackageLoaderError
from .errors import PackageNotFoundError
from .errors import ResourceUnavailableError
from .loader import PackageLoader
from .locations import ArchiveLocation
from .locations import DirectoryLocation
from .locations import parse_location
from .locator import ResourceLocator
from .registry import LoaderRegistry
from .registry import get_context_package_loader
from .registry import get_default_registry
from .registry import get_package_loader
from .registry import get_system_package_loader
from .resolvers import PathResolver
from .resolvers import Resolver
from .resolvers import SystemResolver
from .resolvers import get_context_resolver
from .resolvers import get_system_resolver
from .resolvers import use_context_resolver
from .scope import LoadingScope

__all__ = [
    "ArchiveLocation",
    "DirectoryLocation",
    "EntryEnumerator",
    "EntryMaterializationError",
    "InvalidArgumentError",
    "LoaderRegistry",
    "LoadingScope",
    "PackageLoader",
    "PackageLoaderError",
    "PackageNotFoundError",
    "PathResolver",
    "ResourceLocator",
    "ResourceUnavailableError",
    "Resolver",
    "SystemResolver",
    "get_context_package_loader",
    "get_context_resolver",
    "get_default_registry",
    "get_package_loader",
    "get_system_package_loader",
    "get_system_resolver",
    "parse_location",
    "use_context_resolver",
]

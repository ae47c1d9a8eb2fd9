"""Package loading: discover every module of a package and materialize it."""

from __future__ import annotations

import logging
from collections.abc import Callable
from collections.abc import Iterable
from collections.abc import Iterator
from types import ModuleType

from .enumerator import EntryEnumerator
from .errors import EntryMaterializationError
from .errors import InvalidArgumentError
from .errors import PackageNotFoundError
from .errors import ResourceUnavailableError
from .locations import PhysicalLocation
from .locator import ResourceLocator
from .names import normalize_package_name
from .names import to_logical_path
from .scope import LoadingScope

logger = logging.getLogger(__name__)

InitializePolicy = bool | Callable[[ModuleType], bool]


class PackageLoader:
    """Discovers and loads the modules of a package across a loading scope.

    Features:
    - Multiple locations per package (directories and archives, any mix)
    - Duplicate locations and duplicate entries collapse to one (first seen wins)
    - Eager, lazy, or predicate-driven initialization
    - A broken location or module is logged and skipped, never fatal

    Usage:
        loader = PackageLoader([PathResolver(["build/lib", "vendor.zip"])])
        modules = loader.load_package("myapp.plugins")
    """

    def __init__(
        self,
        scope: LoadingScope | Iterable,
        locator: ResourceLocator | None = None,
        enumerator: EntryEnumerator | None = None,
    ):
        self.scope = scope if isinstance(scope, LoadingScope) else LoadingScope(scope)
        self.locator = locator or ResourceLocator()
        self.enumerator = enumerator or EntryEnumerator()

    def load_package(
        self,
        name: str | ModuleType,
        recursive: bool = True,
        initialize: InitializePolicy = True,
    ) -> set[ModuleType]:
        """Load every module of a package.

        Args:
            name: Dotted package name (a leading '/' or '.' is ignored) or a package module
            recursive: Include modules of sub-packages
            initialize: True runs every module body, False runs none. A callable is
                called with each not-yet-run module and decides, per module, whether
                to run its body.

        Returns:
            Set of modules. Empty when the package exists but has no loadable modules.

        Raises:
            InvalidArgumentError: Empty or malformed name, or unsupported initialize value
            PackageNotFoundError: No location provides the package
        """
        package = self._package_name(name)
        predicate, eager = self._policy(initialize)
        locations = self._locate(package)

        materialized: dict[str, ModuleType] = {}
        attempted: set[tuple[int, str]] = set()

        for location, entries in self._iter_entries(package, locations, recursive):
            resolver = location.resolver or self.scope[0]
            for entry in sorted(entries):
                if entry in materialized:
                    continue
                # A failed entry may still come from a later location owned by another resolver
                key = (id(resolver), entry)
                if key in attempted:
                    continue
                attempted.add(key)

                module = self._materialize(resolver, entry, eager, predicate, package)
                if module is not None:
                    materialized[entry] = module

        logger.debug(f"[package:load] '{package}' -> {len(materialized)} module(s) from {len(locations)} location(s)")
        return set(materialized.values())

    def list_entries(self, name: str | ModuleType, recursive: bool = True) -> dict[str, PhysicalLocation]:
        """Discover the modules of a package without loading them.

        Returns:
            Mapping of entry name to the first location providing it

        Raises:
            InvalidArgumentError: Empty or malformed name
            PackageNotFoundError: No location provides the package
        """
        package = self._package_name(name)
        entries: dict[str, PhysicalLocation] = {}
        for location, names in self._iter_entries(package, self._locate(package), recursive):
            for entry in sorted(names):
                entries.setdefault(entry, location)
        return entries

    def locate(self, name: str | ModuleType) -> list[PhysicalLocation]:
        """Physical locations of a package, in scope order.

        Raises:
            InvalidArgumentError: Empty or malformed name
            PackageNotFoundError: No location provides the package
        """
        return self._locate(self._package_name(name))

    def _package_name(self, name: str | ModuleType) -> str:
        if isinstance(name, ModuleType):
            name = name.__name__
        return normalize_package_name(name)

    @staticmethod
    def _policy(initialize: InitializePolicy) -> tuple[Callable[[ModuleType], bool] | None, bool]:
        if isinstance(initialize, bool):
            return None, initialize
        if callable(initialize):
            return initialize, False
        raise InvalidArgumentError(f"initialize must be a bool or a callable, got {type(initialize).__name__}")

    def _locate(self, package: str) -> list[PhysicalLocation]:
        locations = self.locator.locate(to_logical_path(package), self.scope)
        if not locations:
            raise PackageNotFoundError(package)
        return locations

    def _iter_entries(
        self, package: str, locations: list[PhysicalLocation], recursive: bool
    ) -> Iterator[tuple[PhysicalLocation, set[str]]]:
        for location in locations:
            try:
                entries = self.enumerator.enumerate(location, package, recursive)
            except ResourceUnavailableError as e:
                logger.warning(f"[package:load] Skipping location {location} for '{package}': {e}")
                continue
            yield location, entries

    @staticmethod
    def _materialize(
        resolver,
        entry: str,
        eager: bool,
        predicate: Callable[[ModuleType], bool] | None,
        package: str,
    ) -> ModuleType | None:
        try:
            if predicate is None:
                return resolver.materialize(entry, eager)

            module = resolver.resolve(entry)
            if predicate(module):
                module = resolver.activate(entry)
            return module
        except EntryMaterializationError as e:
            logger.debug(f"[package:load] Skipping {entry} in '{package}': {e}", exc_info=True)
            return None

    def __repr__(self) -> str:
        return f"PackageLoader({self.scope!r})"

"""Loader registry: one PackageLoader per loading scope.

The registry is an ordinary object so applications can build and inject their
own. A process-wide default instance backs the get_*_package_loader helpers.
"""

from __future__ import annotations

import logging
import threading

from .loader import PackageLoader
from .resolvers import Resolver
from .resolvers import get_context_resolver
from .resolvers import get_system_resolver
from .scope import LoadingScope

logger = logging.getLogger(__name__)


class LoaderRegistry:
    """Cache of PackageLoader instances keyed by loading scope identity.

    Loaders are built on first request and never rebuilt or evicted. Lookups
    that hit take no lock; a miss takes the registry lock and checks again
    before building, so concurrent first requests build exactly one loader.
    """

    def __init__(self, loader_factory=PackageLoader):
        self._loader_factory = loader_factory
        self._loaders: dict[LoadingScope, PackageLoader] = {}
        self._lock = threading.Lock()

    def get(self, *resolvers: Resolver | LoadingScope) -> PackageLoader:
        """Return the loader for the given resolvers (or a prebuilt LoadingScope).

        Raises:
            InvalidArgumentError: No resolvers given
        """
        if len(resolvers) == 1 and isinstance(resolvers[0], LoadingScope):
            scope = resolvers[0]
        else:
            scope = LoadingScope(resolvers)

        loader = self._loaders.get(scope)
        if loader is not None:
            return loader

        with self._lock:
            loader = self._loaders.get(scope)
            if loader is not None:
                return loader

            loader = self._loader_factory(scope)
            self._loaders[scope] = loader
            logger.debug(f"[package:registry] Built loader for {scope!r}")
            return loader

    def __contains__(self, scope: LoadingScope) -> bool:
        return scope in self._loaders

    def __len__(self) -> int:
        return len(self._loaders)


# Singleton instance
_registry: LoaderRegistry | None = None
_registry_lock = threading.Lock()


def get_default_registry() -> LoaderRegistry:
    """Process-wide registry used when no registry is injected."""
    global _registry
    if _registry is None:
        with _registry_lock:
            if _registry is None:
                _registry = LoaderRegistry()
    return _registry


def get_package_loader(*resolvers: Resolver, registry: LoaderRegistry | None = None) -> PackageLoader:
    """Loader for an explicit, ordered list of resolvers."""
    registry = registry if registry is not None else get_default_registry()
    return registry.get(*resolvers)


def get_system_package_loader(registry: LoaderRegistry | None = None) -> PackageLoader:
    """Loader over sys.path."""
    return get_package_loader(get_system_resolver(), registry=registry)


def get_context_package_loader(registry: LoaderRegistry | None = None) -> PackageLoader:
    """Loader for the resolver bound to the current context (see use_context_resolver)."""
    return get_package_loader(get_context_resolver(), registry=registry)

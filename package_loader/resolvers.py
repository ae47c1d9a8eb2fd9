"""Resolver implementations.

A resolver plays the role a class loader plays on other runtimes. It owns an
ordered list of roots (directories and zip archives) and an optional parent it
delegates to. It does two jobs:

- discovery: report every physical location exposing a logical path
- materialization, in two explicit phases:
  - resolve: create the module object from its spec without running its body
  - activate: run the body once and hand back that same module object

Concrete resolvers:
- PathResolver: explicit roots, private module table (never touches sys.modules)
- SystemResolver: roots are sys.path, active modules live in sys.modules
"""

from __future__ import annotations

import builtins
import importlib
import importlib.util
import logging
import sys
import threading
import zipfile
from abc import ABC
from abc import abstractmethod
from collections.abc import Iterator
from collections.abc import MutableMapping
from contextlib import contextmanager
from contextvars import ContextVar
from importlib.machinery import ModuleSpec
from pathlib import Path
from types import ModuleType

from .errors import EntryMaterializationError
from .errors import InvalidArgumentError
from .locations import ArchiveLocation
from .locations import DirectoryLocation
from .locations import PhysicalLocation
from .locations import file_url_to_path

logger = logging.getLogger(__name__)


def _finder_for(path: str):
    """Build a path-entry finder (FileFinder, zipimporter) without touching sys.path_importer_cache."""
    for hook in sys.path_hooks:
        try:
            return hook(path)
        except ImportError:
            continue
    return None


class Resolver(ABC):
    """Owns location discovery and module materialization for one scope member."""

    def __init__(self, parent: Resolver | None = None, name: str | None = None):
        self.parent = parent
        self.name = name or type(self).__name__
        self._lock = threading.RLock()
        self._pending: dict[str, ModuleType] = {}
        self._specs: dict[str, ModuleSpec] = {}
        self._initializing: set[str] = set()
        self._name_locks: dict[str, threading.RLock] = {}

    @abstractmethod
    def roots(self) -> list[Path]:
        """Ordered roots searched by this resolver (not including the parent's)."""

    @property
    @abstractmethod
    def modules(self) -> MutableMapping[str, ModuleType]:
        """Table of active (body already executed) modules."""

    # ----- Discovery -----

    def find_locations(self, logical_path: str) -> list[PhysicalLocation]:
        """Find every location exposing logical_path, parent's locations first.

        Args:
            logical_path: Slash-separated package path (e.g., "p/q")

        Returns:
            Locations in delegation order, each tagged with the resolver that found it

        Raises:
            InvalidArgumentError: Empty logical path
        """
        if not logical_path:
            raise InvalidArgumentError("Logical path must not be empty")

        locations: list[PhysicalLocation] = []
        if self.parent is not None:
            locations.extend(self.parent.find_locations(logical_path))

        for root in self.roots():
            location = self._find_in_root(root, logical_path)
            if location is not None:
                locations.append(location)

        return locations

    def _find_in_root(self, root: Path, logical_path: str) -> PhysicalLocation | None:
        if root.is_dir():
            candidate = root.joinpath(*logical_path.split("/"))
            if candidate.is_dir():
                return DirectoryLocation(candidate, self)
            return None

        if root.is_file():
            prefix = logical_path + "/"
            try:
                with zipfile.ZipFile(root) as archive:
                    names = archive.namelist()
            except (OSError, zipfile.BadZipFile) as e:
                logger.warning(f"[package:locate] Skipping unreadable archive {root}: {e}")
                return None

            if any(n.lstrip("/").startswith(prefix) for n in names):
                return ArchiveLocation(root, prefix, self)

        return None

    # ----- Materialization -----

    def resolve(self, name: str) -> ModuleType:
        """Return the module for name without running its body.

        If the module is already active, the active module is returned.

        Raises:
            EntryMaterializationError: Module not found or its code does not compile
        """
        return self._require_owner(name)._resolve_local(name)

    def activate(self, name: str) -> ModuleType:
        """Run the module body (once) and return the module.

        Raises:
            EntryMaterializationError: Module not found, does not compile, or its body raised
        """
        return self._require_owner(name)._activate_local(name)

    def materialize(self, name: str, initialize: bool) -> ModuleType:
        return self.activate(name) if initialize else self.resolve(name)

    def is_active(self, name: str) -> bool:
        owner = self._owner(name)
        if owner is None:
            return False
        with owner._lock:
            return name in owner.modules and name not in owner._initializing

    def _require_owner(self, name: str) -> Resolver:
        owner = self._owner(name)
        if owner is None:
            raise EntryMaterializationError(name, f"Module '{name}' not found by {self!r}")
        return owner

    def _owner(self, name: str) -> Resolver | None:
        """First resolver in the delegation chain (parent first) that provides name."""
        if self.parent is not None:
            owner = self.parent._owner(name)
            if owner is not None:
                return owner

        with self._lock:
            if name in self.modules or name in self._pending:
                return self
        if self._find_spec(name) is not None:
            return self
        return None

    def _find_spec(self, name: str) -> ModuleSpec | None:
        with self._lock:
            cached = self._specs.get(name)
        if cached is not None:
            return cached

        package = name.rpartition(".")[0]
        parts = package.split(".") if package else []
        for root in self.roots():
            finder = _finder_for(str(root.joinpath(*parts)))
            if finder is None:
                continue
            spec = finder.find_spec(name)
            # Namespace portions come back without a loader
            if spec is not None and spec.loader is not None:
                with self._lock:
                    self._specs[name] = spec
                return spec
        return None

    def _resolve_local(self, name: str) -> ModuleType:
        with self._lock:
            module = self.modules.get(name) or self._pending.get(name)
            if module is not None:
                return module

            spec = self._find_spec(name)
            if spec is None:
                raise EntryMaterializationError(name, f"Module '{name}' not found by {self!r}")

            try:
                self._verify(spec)
                module = importlib.util.module_from_spec(spec)
            except Exception as e:
                raise EntryMaterializationError(name, f"Module '{name}' failed verification: {e}") from e

            self._prepare(module)
            self._pending[name] = module
            return module

    def _activate_local(self, name: str) -> ModuleType:
        with self._lock:
            module = self.modules.get(name)
            if module is not None and name not in self._initializing:
                return module

        # The table lock is only held for bookkeeping; bodies run under a per-name lock
        with self._module_lock(name):
            with self._lock:
                module = self.modules.get(name)
                if module is not None:
                    # Finished by another thread, or a circular import in this one
                    return module
                module = self._resolve_local(name)
                self.modules[name] = module
                self._initializing.add(name)

            try:
                module.__spec__.loader.exec_module(module)
            except Exception as e:
                with self._lock:
                    self.modules.pop(name, None)
                    self._pending.pop(name, None)
                    self._initializing.discard(name)
                raise EntryMaterializationError(name, f"Module '{name}' failed to initialize: {e}") from e

            with self._lock:
                self._pending.pop(name, None)
                self._initializing.discard(name)
                # The body may have replaced its own table entry
                module = self.modules.get(name, module)

        logger.debug(f"[package:activate] {name} via {self!r}")
        return module

    def _module_lock(self, name: str) -> threading.RLock:
        with self._lock:
            lock = self._name_locks.get(name)
            if lock is None:
                lock = self._name_locks[name] = threading.RLock()
            return lock

    def _prepare(self, module: ModuleType) -> None:
        """Hook run on a freshly created module before it is handed out."""

    @staticmethod
    def _verify(spec: ModuleSpec) -> None:
        """Compile the module code so broken sources fail in the resolve phase."""
        get_code = getattr(spec.loader, "get_code", None)
        if get_code is not None:
            get_code(spec.name)


class PathResolver(Resolver):
    """Resolver over an explicit, ordered list of roots.

    Modules activated here live in a private table, so two PathResolvers over
    the same roots hold independent copies of each module. Import statements
    in those modules (absolute or relative) are served from the same table:
    names this resolver or its parent provides are activated through it, and
    everything else goes to the regular import system.
    """

    def __init__(
        self,
        roots: list[str | Path],
        parent: Resolver | None = None,
        name: str | None = None,
    ):
        super().__init__(parent=parent, name=name)
        self._roots = tuple(
            (file_url_to_path(r) if isinstance(r, str) else Path(r)).resolve() for r in roots
        )
        self._modules: dict[str, ModuleType] = {}
        self._builtins = dict(vars(builtins), __import__=self._import)

    def roots(self) -> list[Path]:
        return list(self._roots)

    @property
    def modules(self) -> dict[str, ModuleType]:
        return self._modules

    def _prepare(self, module: ModuleType) -> None:
        # exec() keeps an existing __builtins__, so the body's imports come back here
        module.__builtins__ = self._builtins

    def _import(self, name, globals=None, locals=None, fromlist=(), level=0):
        if level > 0:
            package = (globals or {}).get("__package__")
            target = importlib.util.resolve_name("." * level + name, package)
        else:
            target = name

        if not self._provides(target):
            return builtins.__import__(name, globals, locals, fromlist, level)

        try:
            chain = self._activate_chain(target)
            module = chain[-1]
            for item in fromlist or ():
                child = f"{target}.{item}"
                if item != "*" and not hasattr(module, item) and self._owner(child) is not None:
                    setattr(module, item, self.activate(child))
        except EntryMaterializationError as e:
            raise ImportError(str(e), name=e.entry) from e

        logger.debug(f"[package:import] {target} via {self!r}")
        return module if fromlist else chain[0]

    def _provides(self, name: str) -> bool:
        if self._owner(name) is not None:
            return True
        # Namespace package: a directory in one of our roots without __init__
        logical_path = name.replace(".", "/")
        return any(self._find_in_root(root, logical_path) is not None for root in self.roots())

    def _activate_chain(self, target: str) -> list[ModuleType]:
        """Activate target and each package above it, binding children onto parents."""
        parts = target.split(".")
        chain: list[ModuleType] = []
        for i, part in enumerate(parts):
            name = ".".join(parts[: i + 1])
            if self._owner(name) is not None:
                module = self.activate(name)
            else:
                module = self._namespace_package(name)
            if chain and not hasattr(chain[-1], part):
                setattr(chain[-1], part, module)
            chain.append(module)
        return chain

    def _namespace_package(self, name: str) -> ModuleType:
        with self._lock:
            module = self._modules.get(name)
            if module is None:
                module = ModuleType(name)
                module.__path__ = []
                module.__package__ = name
                self._modules[name] = module
            return module

    def __repr__(self) -> str:
        return f"PathResolver({self.name}, roots={len(self._roots)})"


class SystemResolver(Resolver):
    """Resolver over the live sys.path, registering active modules in sys.modules."""

    def __init__(self, name: str | None = "system"):
        super().__init__(parent=None, name=name)

    def roots(self) -> list[Path]:
        return [Path(entry or ".").resolve() for entry in sys.path]

    @property
    def modules(self) -> MutableMapping[str, ModuleType]:
        return sys.modules

    def _activate_local(self, name: str) -> ModuleType:
        package, _, tail = name.rpartition(".")
        parent_module = None
        if package:
            try:
                parent_module = importlib.import_module(package)
            except Exception as e:
                raise EntryMaterializationError(name, f"Parent package '{package}' failed to import: {e}") from e

        module = super()._activate_local(name)
        if parent_module is not None and not hasattr(parent_module, tail):
            setattr(parent_module, tail, module)
        return module

    def __repr__(self) -> str:
        return "SystemResolver(sys.path)"


# ----- Scope selection -----

_system_resolver: SystemResolver | None = None
_system_lock = threading.Lock()

_context_resolver: ContextVar[Resolver | None] = ContextVar("package_loader_context_resolver", default=None)


def get_system_resolver() -> SystemResolver:
    """Process-wide resolver over sys.path."""
    global _system_resolver
    if _system_resolver is None:
        with _system_lock:
            if _system_resolver is None:
                _system_resolver = SystemResolver()
    return _system_resolver


def get_context_resolver() -> Resolver:
    """Resolver bound to the current execution context, falling back to the system resolver."""
    return _context_resolver.get() or get_system_resolver()


@contextmanager
def use_context_resolver(resolver: Resolver) -> Iterator[Resolver]:
    """Bind resolver as the context resolver for the duration of the block.

    Example:
        >>> with use_context_resolver(PathResolver(["plugins"])):
        ...     loader = get_context_package_loader()
    """
    token = _context_resolver.set(resolver)
    try:
        yield resolver
    finally:
        _context_resolver.reset(token)

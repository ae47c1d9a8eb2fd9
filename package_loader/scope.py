"""Loading scope: an immutable, ordered group of resolvers."""

from __future__ import annotations

from collections.abc import Iterable
from collections.abc import Iterator

from .errors import InvalidArgumentError


class LoadingScope:
    """Ordered, non-empty sequence of resolvers queried as one unit.

    Two scopes are equal when they hold the very same resolver objects in the
    same order. Resolver equality is never consulted.
    """

    __slots__ = ("_resolvers",)

    def __init__(self, resolvers: Iterable):
        resolvers = tuple(resolvers)
        if not resolvers:
            raise InvalidArgumentError("A loading scope needs at least one resolver")
        object.__setattr__(self, "_resolvers", resolvers)

    def __setattr__(self, key, value):
        raise AttributeError("LoadingScope is immutable")

    @property
    def resolvers(self) -> tuple:
        return self._resolvers

    def __iter__(self) -> Iterator:
        return iter(self._resolvers)

    def __len__(self) -> int:
        return len(self._resolvers)

    def __getitem__(self, index: int):
        return self._resolvers[index]

    def __eq__(self, other) -> bool:
        if not isinstance(other, LoadingScope):
            return NotImplemented
        return len(self) == len(other) and all(a is b for a, b in zip(self._resolvers, other._resolvers))

    def __hash__(self) -> int:
        return hash(tuple(id(r) for r in self._resolvers))

    def __repr__(self) -> str:
        return f"LoadingScope({', '.join(repr(r) for r in self._resolvers)})"

"""Keyed map primitive — the storage contract every graph structure builds on.

Strict semantics: ``insert`` refuses to overwrite, ``update`` and
``remove`` refuse to touch a missing key. Callers that want lenient
behavior check ``contains`` (or use ``lookup``) first. No iteration
order is guaranteed.
"""

from __future__ import annotations

from collections.abc import Hashable, Iterator
from typing import Generic, Protocol, TypeVar

from relgraph.domain.errors import AlreadyExistsError, NotFoundError

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class KeyedStore(Protocol[K, V]):
    """Structural interface for the keyed map a graph structure stores into.

    :class:`AdjacencySet`, :class:`KeyedPropertyStore` and
    :class:`LabeledDirectedGraph` accept any implementation; they default
    to :class:`KeyedMap`.
    """

    def contains(self, key: K) -> bool: ...

    def get(self, key: K) -> V: ...

    def lookup(self, key: K) -> V | None: ...

    def insert(self, key: K, value: V) -> None: ...

    def update(self, key: K, value: V) -> None: ...

    def remove(self, key: K) -> V: ...

    def keys(self) -> list[K]: ...

    def is_empty(self) -> bool: ...

    def __len__(self) -> int: ...


class KeyedMap(Generic[K, V]):
    """In-memory :class:`KeyedStore` backed by a dict."""

    def __init__(self) -> None:
        self._data: dict[K, V] = {}

    def contains(self, key: K) -> bool:
        return key in self._data

    def get(self, key: K) -> V:
        """Return the value for *key*.

        Raises:
            NotFoundError: If *key* is absent.
        """
        try:
            return self._data[key]
        except KeyError:
            msg = f"Key not found: {key!r}"
            raise NotFoundError(msg, key=repr(key)) from None

    def lookup(self, key: K) -> V | None:
        """Return the value for *key*, or None if absent."""
        return self._data.get(key)

    def insert(self, key: K, value: V) -> None:
        """Add a new entry. Raises AlreadyExistsError if *key* is present."""
        if key in self._data:
            msg = f"Key already present: {key!r}"
            raise AlreadyExistsError(msg, key=repr(key))
        self._data[key] = value

    def update(self, key: K, value: V) -> None:
        """Replace an existing entry. Raises NotFoundError if *key* is absent."""
        if key not in self._data:
            msg = f"Key not found: {key!r}"
            raise NotFoundError(msg, key=repr(key))
        self._data[key] = value

    def remove(self, key: K) -> V:
        """Delete and return the entry. Raises NotFoundError if *key* is absent."""
        if key not in self._data:
            msg = f"Key not found: {key!r}"
            raise NotFoundError(msg, key=repr(key))
        return self._data.pop(key)

    def keys(self) -> list[K]:
        """Snapshot of the current keys (unordered)."""
        return list(self._data)

    def is_empty(self) -> bool:
        return not self._data

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[K]:
        return iter(list(self._data))

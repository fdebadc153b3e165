"""Property payloads and the keyed property overlay.

A :class:`KeyedPropertyStore` holds at most one payload per key and
always hands back the value it displaced, so callers can report (or
cascade) what was overwritten or removed.
"""

from __future__ import annotations

from collections.abc import Hashable
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict

from relgraph.domain.keyed import KeyedMap, KeyedStore

K = TypeVar("K", bound=Hashable)
P = TypeVar("P")


class NoProps(BaseModel):
    """The empty property payload: a unit value with no fields."""

    model_config = ConfigDict(frozen=True, extra="forbid")


class Attributes(BaseModel):
    """Free-form, immutable property payload.

    Any JSON-compatible keyword fields are accepted. Two payloads are
    equal when their fields are equal.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    def as_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class KeyedPropertyStore(Generic[K, P]):
    """Keyed overlay supporting set/get/unset with previous value."""

    def __init__(self, store: KeyedStore[K, P] | None = None) -> None:
        self._entries: KeyedStore[K, P] = store if store is not None else KeyedMap()

    def set(self, key: K, props: P) -> P | None:
        """Store *props* under *key*, returning the value it replaced."""
        previous = self._entries.lookup(key)
        if previous is None:
            self._entries.insert(key, props)
        else:
            self._entries.update(key, props)
        return previous

    def get(self, key: K) -> P | None:
        return self._entries.lookup(key)

    def unset(self, key: K) -> P | None:
        """Remove the value under *key*. Returns None if nothing was stored."""
        if not self._entries.contains(key):
            return None
        return self._entries.remove(key)

    def contains(self, key: K) -> bool:
        return self._entries.contains(key)

    def keys(self) -> list[K]:
        return self._entries.keys()

    def items(self) -> list[tuple[K, P]]:
        return [(key, self._entries.get(key)) for key in self._entries.keys()]

    def is_empty(self) -> bool:
        return self._entries.is_empty()

    def __len__(self) -> int:
        return len(self._entries)

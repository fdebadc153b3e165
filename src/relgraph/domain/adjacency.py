"""Per-source sets of distinct outgoing targets.

Storage is sparse: a source with no targets has no entry at all, so
``has_source`` doubles as "has at least one outgoing edge".
"""

from __future__ import annotations

from collections.abc import Hashable
from typing import Generic, TypeVar

from relgraph.domain.errors import NotFoundError
from relgraph.domain.keyed import KeyedMap, KeyedStore

N = TypeVar("N", bound=Hashable)


class AdjacencySet(Generic[N]):
    """Map of source -> non-empty set of targets."""

    def __init__(self, store: KeyedStore[N, set[N]] | None = None) -> None:
        self._targets: KeyedStore[N, set[N]] = store if store is not None else KeyedMap()

    def has_source(self, source: N) -> bool:
        return self._targets.contains(source)

    def contains(self, source: N, target: N) -> bool:
        targets = self._targets.lookup(source)
        return targets is not None and target in targets

    def targets(self, source: N) -> frozenset[N]:
        """Read-only view of *source*'s targets (empty if none)."""
        targets = self._targets.lookup(source)
        return frozenset(targets) if targets is not None else frozenset()

    def out_degree(self, source: N) -> int:
        targets = self._targets.lookup(source)
        return len(targets) if targets is not None else 0

    def add(self, source: N, target: N) -> bool:
        """Insert ``source -> target``. Returns False if it was already present."""
        targets = self._targets.lookup(source)
        if targets is None:
            self._targets.insert(source, {target})
            return True
        if target in targets:
            return False
        targets.add(target)
        return True

    def discard(self, source: N, target: N) -> bool:
        """Remove ``source -> target`` if present; drops the source once empty."""
        targets = self._targets.lookup(source)
        if targets is None or target not in targets:
            return False
        targets.remove(target)
        if not targets:
            self._targets.remove(source)
        return True

    def pop_source(self, source: N) -> frozenset[N]:
        """Remove and return every target of *source*.

        Raises:
            NotFoundError: If *source* has no targets.
        """
        if not self._targets.contains(source):
            msg = f"No relationships recorded for {source!r}"
            raise NotFoundError(msg, source=str(source))
        return frozenset(self._targets.remove(source))

    def sources(self) -> list[N]:
        return self._targets.keys()

    def edge_count(self) -> int:
        return sum(len(self._targets.get(source)) for source in self._targets.keys())

    def is_empty(self) -> bool:
        return self._targets.is_empty()

    def __len__(self) -> int:
        return len(self._targets)

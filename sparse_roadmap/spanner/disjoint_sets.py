# Copyright (c) 2025 Arne Deutsch, itemis AG, MIT License
"""Incremental connected components over dense guard ids."""

from __future__ import annotations

from typing import Dict, List, Set


class DisjointSets:
    """Union-find with path compression and union by size.

    Elements are the dense ids ``0 .. n-1`` handed out by the roadmap, so the
    parent and size tables are plain lists.
    """

    __slots__ = ("_parent", "_size")

    def __init__(self) -> None:
        self._parent: List[int] = []
        self._size: List[int] = []

    def make_set(self, x: int) -> None:
        """Register ``x`` as a singleton; ids must arrive in order."""

        if x != len(self._parent):
            raise ValueError(f"expected next id {len(self._parent)}, got {x}")
        self._parent.append(x)
        self._size.append(1)

    def find(self, x: int) -> int:
        root = x
        while self._parent[root] != root:
            root = self._parent[root]
        while self._parent[x] != root:
            self._parent[x], x = root, self._parent[x]
        return root

    def union(self, a: int, b: int) -> bool:
        """Merge the sets of ``a`` and ``b``.

        The smaller set is attached below the larger one, so the larger set's
        representative survives. Returns ``False`` if already merged.
        """

        ra, rb = self.find(a), self.find(b)
        if ra == rb:
            return False
        if self._size[ra] < self._size[rb]:
            ra, rb = rb, ra
        self._parent[rb] = ra
        self._size[ra] += self._size[rb]
        return True

    def same(self, a: int, b: int) -> bool:
        return self.find(a) == self.find(b)

    def size(self, x: int) -> int:
        """Number of elements in the set containing ``x``."""

        return self._size[self.find(x)]

    def components(self) -> List[Set[int]]:
        """Return all sets, largest first."""

        groups: Dict[int, Set[int]] = {}
        for x in range(len(self._parent)):
            groups.setdefault(self.find(x), set()).add(x)
        return sorted(groups.values(), key=len, reverse=True)

    def clear(self) -> None:
        self._parent.clear()
        self._size.clear()

    def __len__(self) -> int:
        return len(self._parent)


__all__ = ["DisjointSets"]

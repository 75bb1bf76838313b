# Copyright (c) 2025 Arne Deutsch, itemis AG, MIT License
"""Nearest-neighbour indexes over guard ids.

The roadmap queries guards near a state by radius (visibility and
abandonment) and by count. Two interchangeable backends are provided: a
brute-force NumPy scan that works with any metric and a SciPy k-d tree for
Euclidean spaces. The backend is chosen once when the planner is built.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional

import numpy as np
from scipy.spatial import cKDTree

from sparse_roadmap.space.base import State, StateSpace


class NearestNeighbors(ABC):
    """Common index protocol over integer guard ids."""

    @abstractmethod
    def add(self, gid: int, state: State) -> None:
        """Insert guard ``gid`` located at ``state``."""

    @abstractmethod
    def nearest_k(self, state: State, k: int) -> List[int]:
        """Return up to ``k`` guard ids ordered by distance to ``state``."""

    @abstractmethod
    def nearest_r(self, state: State, radius: float) -> List[int]:
        """Return guard ids within ``radius`` ordered by distance."""

    @abstractmethod
    def list(self) -> List[int]:
        """Return all stored guard ids in insertion order."""

    @abstractmethod
    def clear(self) -> None:
        """Remove every guard."""

    @abstractmethod
    def __len__(self) -> int:  # pragma: no cover - simple delegation
        """Number of stored guards."""


def _ordered(ids: List[int], dists: np.ndarray) -> List[int]:
    # stable sort keeps insertion order among equidistant guards
    order = np.argsort(dists, kind="stable")
    return [ids[i] for i in order.tolist()]


class BruteForceNeighbors(NearestNeighbors):
    """Linear scan using an arbitrary distance function."""

    def __init__(self, distance: Callable[[State, State], float]) -> None:
        self._distance = distance
        self._ids: List[int] = []
        self._states: List[State] = []

    def add(self, gid: int, state: State) -> None:
        self._ids.append(gid)
        self._states.append(state)

    def _dists(self, state: State) -> np.ndarray:
        return np.array([self._distance(state, s) for s in self._states], dtype=float)

    def nearest_k(self, state: State, k: int) -> List[int]:
        if not self._ids or k <= 0:
            return []
        return _ordered(self._ids, self._dists(state))[:k]

    def nearest_r(self, state: State, radius: float) -> List[int]:
        if not self._ids:
            return []
        dists = self._dists(state)
        keep = np.flatnonzero(dists <= radius)
        return _ordered([self._ids[i] for i in keep.tolist()], dists[keep])

    def list(self) -> List[int]:
        return list(self._ids)

    def clear(self) -> None:
        self._ids.clear()
        self._states.clear()

    def __len__(self) -> int:
        return len(self._ids)


class KDTreeNeighbors(NearestNeighbors):
    """Euclidean k-d tree rebuilt lazily as guards accumulate.

    Guards inserted since the last rebuild are scanned linearly; the tree is
    rebuilt once more than ``rebuild_threshold`` of them are pending.
    """

    def __init__(self, dim: int, rebuild_threshold: int = 32) -> None:
        if rebuild_threshold < 1:
            raise ValueError("rebuild_threshold must be >= 1")
        self.dim = dim
        self.rebuild_threshold = rebuild_threshold
        self._ids: List[int] = []
        self._points: List[np.ndarray] = []
        self._tree: Optional[cKDTree] = None
        self._indexed = 0

    def add(self, gid: int, state: State) -> None:
        point = np.asarray(state, dtype=float)
        if point.shape != (self.dim,):
            raise ValueError(f"expected {self.dim} dimensions, got {point.shape}")
        self._ids.append(gid)
        self._points.append(point)
        if len(self._ids) - self._indexed > self.rebuild_threshold:
            self._rebuild()

    def _rebuild(self) -> None:
        self._tree = cKDTree(np.vstack(self._points))
        self._indexed = len(self._points)

    def _pending(self, query: np.ndarray) -> tuple[List[int], np.ndarray]:
        ids = self._ids[self._indexed :]
        if not ids:
            return [], np.empty(0)
        pts = np.vstack(self._points[self._indexed :])
        return list(range(self._indexed, len(self._ids))), np.linalg.norm(pts - query, axis=1)

    def nearest_r(self, state: State, radius: float) -> List[int]:
        query = np.asarray(state, dtype=float)
        rows: List[int] = []
        if self._tree is not None:
            rows.extend(self._tree.query_ball_point(query, r=radius))
        pend_rows, pend_dists = self._pending(query)
        rows.extend(row for row, d in zip(pend_rows, pend_dists.tolist()) if d <= radius)
        if not rows:
            return []
        rows.sort()
        dists = np.linalg.norm(np.vstack([self._points[r] for r in rows]) - query, axis=1)
        return _ordered([self._ids[r] for r in rows], dists)

    def nearest_k(self, state: State, k: int) -> List[int]:
        if not self._ids or k <= 0:
            return []
        query = np.asarray(state, dtype=float)
        found: Dict[int, float] = {}
        if self._tree is not None:
            kk = min(k, self._indexed)
            dists, rows = self._tree.query(query, k=kk)
            for d, row in zip(np.atleast_1d(dists).tolist(), np.atleast_1d(rows).tolist()):
                found[int(row)] = float(d)
        pend_rows, pend_dists = self._pending(query)
        for row, d in zip(pend_rows, pend_dists.tolist()):
            found[row] = d
        rows = sorted(found)
        return _ordered([self._ids[r] for r in rows], np.array([found[r] for r in rows]))[:k]

    def list(self) -> List[int]:
        return list(self._ids)

    def clear(self) -> None:
        self._ids.clear()
        self._points.clear()
        self._tree = None
        self._indexed = 0

    def __len__(self) -> int:
        return len(self._ids)


def make_neighbors(kind: str, space: StateSpace, *, rebuild_threshold: int = 32) -> NearestNeighbors:
    """Return the index named ``kind`` (``"brute"`` or ``"kdtree"``) for ``space``."""

    if kind == "brute":
        return BruteForceNeighbors(space.distance)
    if kind == "kdtree":
        return KDTreeNeighbors(space.dimension, rebuild_threshold=rebuild_threshold)
    raise ValueError(f"Unknown nearest neighbour index: {kind}")


__all__ = [
    "NearestNeighbors",
    "BruteForceNeighbors",
    "KDTreeNeighbors",
    "make_neighbors",
]

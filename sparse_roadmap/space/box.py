# Copyright (c) 2025 Arne Deutsch, itemis AG, MIT License
"""Axis-aligned box configuration space with simple obstacles.

Summary
-------
Implements :class:`~sparse_roadmap.space.base.StateSpace` for a Euclidean
box ``[low, high]``. Validity excludes the interior of box and ball
obstacles; local motions are checked by discretising the straight segment
at ``resolution * max_extent``.

Side Effects
------------
Tracks every state produced by :meth:`BoxStateSpace.clone` so that leaks
and double frees are observable through :attr:`BoxStateSpace.live_states`.

Examples
--------
>>> space = BoxStateSpace([0.0, 0.0], [1.0, 1.0], seed=0)
>>> s = space.clone([0.5, 0.5]); space.live_states
1
>>> space.free(s); space.live_states
0
"""

from __future__ import annotations

import math
import threading
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Sequence, Tuple

import numpy as np

from sparse_roadmap.common.errors import PreconditionViolation, SamplingExhausted

from .base import State, StateSpace


@dataclass(frozen=True)
class BoxObstacle:
    """Closed axis-aligned box removed from the free space."""

    low: Tuple[float, ...]
    high: Tuple[float, ...]

    def contains(self, points: np.ndarray) -> np.ndarray:
        """Return a mask of ``points`` (``(n, d)``) lying inside the box."""

        lo = np.asarray(self.low, dtype=float)
        hi = np.asarray(self.high, dtype=float)
        return np.all((points >= lo) & (points <= hi), axis=1)


@dataclass(frozen=True)
class CircleObstacle:
    """Closed ball removed from the free space."""

    center: Tuple[float, ...]
    radius: float

    def contains(self, points: np.ndarray) -> np.ndarray:
        """Return a mask of ``points`` (``(n, d)``) lying inside the ball."""

        c = np.asarray(self.center, dtype=float)
        return np.linalg.norm(points - c, axis=1) <= self.radius


class BoxStateSpace(StateSpace):
    """Euclidean box with obstacles and clone/free accounting."""

    def __init__(
        self,
        low: Sequence[float],
        high: Sequence[float],
        obstacles: Iterable[BoxObstacle | CircleObstacle] = (),
        *,
        resolution: float = 0.01,
        max_attempts: int = 100,
        seed: Optional[int] = None,
    ) -> None:
        """Create the space.

        Parameters
        ----------
        low, high : Sequence[float]
            Box corners; ``low`` must be strictly below ``high`` per axis.
        obstacles : Iterable, optional
            Obstacles removed from the free space.
        resolution : float, optional
            Motion-check step as a fraction of :attr:`max_extent`.
        max_attempts : int, optional
            Retry budget of the valid samplers.
        seed : int, optional
            Seed of the NumPy generator used for sampling.
        """

        self.low = np.asarray(low, dtype=float)
        self.high = np.asarray(high, dtype=float)
        if self.low.shape != self.high.shape or self.low.ndim != 1:
            raise ValueError("low and high must be vectors of equal length")
        if np.any(self.low >= self.high):
            raise ValueError("low must be strictly below high on every axis")
        if not 0.0 < resolution <= 1.0:
            raise ValueError("resolution must be in (0, 1]")
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.dimension = int(self.low.shape[0])
        self.obstacles = tuple(obstacles)
        self.resolution = float(resolution)
        self.max_attempts = int(max_attempts)
        self.rng = np.random.default_rng(seed)
        self._extent = float(np.linalg.norm(self.high - self.low))
        # id(state) -> state; holding the reference keeps ids unique
        self._live: Dict[int, np.ndarray] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Metric and validity
    @property
    def max_extent(self) -> float:
        return self._extent

    def distance(self, a: State, b: State) -> float:
        return float(np.linalg.norm(np.asarray(a, dtype=float) - np.asarray(b, dtype=float)))

    def satisfies_bounds(self, state: State) -> bool:
        arr = np.asarray(state, dtype=float)
        if arr.shape != self.low.shape or not np.all(np.isfinite(arr)):
            return False
        return bool(np.all((arr >= self.low) & (arr <= self.high)))

    def _free_mask(self, points: np.ndarray) -> np.ndarray:
        mask = np.all((points >= self.low) & (points <= self.high), axis=1)
        for obstacle in self.obstacles:
            mask &= ~obstacle.contains(points)
        return mask

    def is_valid(self, state: State) -> bool:
        if not self.satisfies_bounds(state):
            return False
        return bool(self._free_mask(np.asarray(state, dtype=float)[None, :])[0])

    def check_motion(self, a: State, b: State) -> bool:
        a = np.asarray(a, dtype=float)
        b = np.asarray(b, dtype=float)
        if not (self.satisfies_bounds(a) and self.satisfies_bounds(b)):
            return False
        step = self.resolution * self._extent
        n = max(1, int(math.ceil(self.distance(a, b) / step)))
        ts = np.linspace(0.0, 1.0, n + 1)[:, None]
        points = a[None, :] + ts * (b - a)[None, :]
        return bool(np.all(self._free_mask(points)))

    # ------------------------------------------------------------------
    # Sampling
    def sample(self) -> State:
        return self.rng.uniform(self.low, self.high)

    def valid_sample(self) -> State:
        for _ in range(self.max_attempts):
            candidate = self.sample()
            if self.is_valid(candidate):
                return candidate
        raise SamplingExhausted(f"no valid sample after {self.max_attempts} attempts")

    def sample_near(self, near: State, radius: float) -> State:
        near = np.asarray(near, dtype=float)
        for _ in range(self.max_attempts):
            direction = self.rng.normal(size=self.dimension)
            norm = float(np.linalg.norm(direction))
            if norm == 0.0:
                continue
            r = radius * self.rng.random() ** (1.0 / self.dimension)
            # projection onto the box never moves a point away from ``near``
            candidate = np.clip(near + direction / norm * r, self.low, self.high)
            if self.is_valid(candidate):
                return candidate
        raise SamplingExhausted(
            f"no valid sample within {radius:g} after {self.max_attempts} attempts"
        )

    # ------------------------------------------------------------------
    # Ownership
    def clone(self, state: State) -> State:
        arr = np.array(state, dtype=float, copy=True)
        with self._lock:
            self._live[id(arr)] = arr
        return arr

    def free(self, state: State) -> None:
        with self._lock:
            owned = self._live.get(id(state))
            if owned is not state:
                raise PreconditionViolation("state was already freed or not cloned by this space")
            del self._live[id(state)]

    @property
    def live_states(self) -> int:
        """Number of cloned states that have not been freed."""

        with self._lock:
            return len(self._live)


__all__ = ["BoxObstacle", "CircleObstacle", "BoxStateSpace"]

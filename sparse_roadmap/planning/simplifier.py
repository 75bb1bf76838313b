# Copyright (c) 2025 Arne Deutsch, itemis AG, MIT License
"""Path simplification by random vertex reduction and greedy shortcutting.

Both passes only ever replace a stretch of the path by a straight motion the
state space accepts, so endpoints are preserved and the path never grows
longer. Input states are not modified; the returned list may share them.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

import numpy as np

from sparse_roadmap.space.base import State, StateSpace

logger = logging.getLogger(__name__)


class PathSimplifier:
    """Shorten paths of states using :meth:`StateSpace.check_motion`."""

    def __init__(
        self,
        space: StateSpace,
        *,
        reduce_steps: int = 10,
        shortcut_steps: int = 50,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        self.space = space
        self.reduce_steps = reduce_steps
        self.shortcut_steps = shortcut_steps
        self.rng = rng if rng is not None else np.random.default_rng()

    def path_length(self, path: Sequence[State]) -> float:
        return sum(self.space.distance(a, b) for a, b in zip(path, path[1:]))

    def is_valid(self, path: Sequence[State]) -> bool:
        """``True`` if every consecutive motion of ``path`` is valid."""

        return all(self.space.check_motion(a, b) for a, b in zip(path, path[1:]))

    def reduce_vertices(self, path: Sequence[State], max_steps: Optional[int] = None) -> List[State]:
        """Randomly drop intermediate vertices joined by a valid straight motion.

        Stops after ``max_steps`` consecutive attempts without progress.
        """

        result = list(path)
        budget = self.reduce_steps if max_steps is None else max_steps
        misses = 0
        while len(result) > 2 and misses < budget:
            i = int(self.rng.integers(0, len(result) - 2))
            j = int(self.rng.integers(i + 2, len(result)))
            if self.space.check_motion(result[i], result[j]):
                result = result[: i + 1] + result[j:]
                misses = 0
            else:
                misses += 1
        return result

    def shortcut_path(self, path: Sequence[State], max_steps: Optional[int] = None) -> List[State]:
        """From each kept vertex, jump to the farthest vertex reachable directly."""

        path = list(path)
        if len(path) <= 2:
            return path
        budget = self.shortcut_steps if max_steps is None else max_steps
        result = [path[0]]
        i = 0
        while i < len(path) - 1:
            farthest = i + 1
            for j in range(len(path) - 1, i + 1, -1):
                if budget <= 0:
                    break
                budget -= 1
                if self.space.check_motion(path[i], path[j]):
                    farthest = j
                    break
            result.append(path[farthest])
            i = farthest
        return result

    def simplify(self, path: Sequence[State]) -> List[State]:
        """Run vertex reduction followed by greedy shortcutting."""

        reduced = self.shortcut_path(self.reduce_vertices(path))
        logger.debug("simplified path from %d to %d states", len(path), len(reduced))
        return reduced


__all__ = ["PathSimplifier"]

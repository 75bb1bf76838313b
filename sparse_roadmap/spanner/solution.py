# Copyright (c) 2025 Arne Deutsch, itemis AG, MIT License
"""Extract and simplify solution paths from the roadmap."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from sparse_roadmap.common.errors import RoadmapError
from sparse_roadmap.planning.path_planner import PathPlanner
from sparse_roadmap.planning.simplifier import PathSimplifier
from sparse_roadmap.space.base import State

from .graph import RoadmapGraph

logger = logging.getLogger(__name__)


@dataclass
class SolutionPath:
    """Simplified geometric path between a start and a goal guard.

    ``states`` are copies independent of the roadmap and survive
    :meth:`SparsTwo.clear`.
    """

    states: List[State]
    start: int
    goal: int
    cost: float

    def __len__(self) -> int:
        return len(self.states)


class SolutionAssembler:
    """Turn guard paths into owned, simplified state sequences."""

    def __init__(self, graph: RoadmapGraph, simplifier: PathSimplifier) -> None:
        self.graph = graph
        self.simplifier = simplifier
        self.planner = PathPlanner(graph)

    def construct_solution(self, start: int, goal: int) -> SolutionPath:
        """Return the simplified shortest path from ``start`` to ``goal``.

        Raises
        ------
        RoadmapError
            If the guards share a component but no path is found.
        """

        with self.graph.lock:
            ids = self.planner.shortest_path(start, goal)
            if not ids:
                raise RoadmapError(f"guards {start} and {goal} share a component but no path was found")
            states = [np.array(self.graph.state(i), copy=True) for i in ids]
        raw_cost = self.planner.path_cost(ids)
        states = self.simplifier.simplify(states)
        cost = self.simplifier.path_length(states)
        logger.debug("solution %d -> %d: %d guards, cost %.4f -> %.4f", start, goal, len(ids), raw_cost, cost)
        return SolutionPath(states, start, goal, cost)

    def have_solution(self, starts: Sequence[int], goals: Sequence[int]) -> Optional[SolutionPath]:
        """Return the cheapest path over connected start/goal pairs, if any."""

        best: Optional[SolutionPath] = None
        with self.graph.lock:
            for s in starts:
                for g in goals:
                    if not self.graph.same_component(s, g):
                        continue
                    path = self.construct_solution(s, g)
                    if best is None or path.cost < best.cost:
                        best = path
        return best


__all__ = ["SolutionPath", "SolutionAssembler"]

# Copyright (c) 2025 Arne Deutsch, itemis AG, MIT License
from __future__ import annotations

import heapq
from typing import TYPE_CHECKING, Dict, List, Optional

if TYPE_CHECKING:  # pragma: no cover - typing only
    from sparse_roadmap.spanner.graph import RoadmapGraph


class PathPlanner:
    """A* planner operating on a :class:`RoadmapGraph`."""

    def __init__(self, graph: RoadmapGraph) -> None:
        self.graph = graph

    def shortest_path(self, start: int, goal: int) -> List[int]:
        """Return minimal-weight guard path from ``start`` to ``goal``.

        Parameters
        ----------
        start:
            Source guard id.
        goal:
            Destination guard id.

        Returns
        -------
        list[int]
            Guard ids including ``start`` and ``goal``; empty if disconnected.
        """

        n = self.graph.milestone_count()
        if not (0 <= start < n and 0 <= goal < n):
            return []

        def heuristic(a: int) -> float:
            return self.graph.distance(a, goal)

        adj = self.graph.graph.adj
        open_set: list[tuple[float, float, int, Optional[int]]] = []
        heapq.heappush(open_set, (heuristic(start), 0.0, start, None))
        came_from: Dict[int, Optional[int]] = {}
        costs = {start: 0.0}
        while open_set:
            _, g, node, parent = heapq.heappop(open_set)
            if node in came_from:
                continue
            came_from[node] = parent
            if node == goal:
                break
            for nbr, edge in adj[node].items():
                ng = g + edge["weight"]
                if ng < costs.get(nbr, float("inf")):
                    costs[nbr] = ng
                    heapq.heappush(open_set, (ng + heuristic(nbr), ng, nbr, node))
        if goal not in came_from:
            return []
        path_ids: List[int] = []
        node: Optional[int] = goal
        while node is not None:
            path_ids.append(node)
            node = came_from[node]
        path_ids.reverse()
        return path_ids

    def path_cost(self, path_ids: List[int]) -> float:
        """Sum of edge weights along ``path_ids``."""

        return sum(self.graph.edge_weight(a, b) for a, b in zip(path_ids, path_ids[1:]))


__all__ = ["PathPlanner"]

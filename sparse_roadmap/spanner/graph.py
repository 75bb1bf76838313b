# Copyright (c) 2025 Arne Deutsch, itemis AG, MIT License
"""Roadmap graph of guards with incremental connectivity.

Summary
-------
Stores guards in an arena indexed by dense integer ids. Edges live in a
``networkx.Graph`` weighted by state-space distance, connected components
are tracked incrementally by :class:`DisjointSets`, and interface evidence
by :class:`InterfaceBookkeeper`. All four services operate over the same
ids.

Side Effects
------------
Every guard owns one state cloned through the state space; :meth:`clear`
frees them. Structural changes take :attr:`RoadmapGraph.lock`.

Complexity
----------
``add_guard`` is dominated by the abandonment radius query; ``connect`` and
``same_component`` are ``O(alpha(n))`` amortised.

Examples
--------
>>> from sparse_roadmap.space import BoxStateSpace
>>> from sparse_roadmap.retrieval import make_neighbors
>>> space = BoxStateSpace([0.0, 0.0], [1.0, 1.0])
>>> g = RoadmapGraph(space, make_neighbors("brute", space), dense_delta=0.01)
>>> a = g.add_guard([0.1, 0.1], GuardType.COVERAGE)
>>> b = g.add_guard([0.2, 0.1], GuardType.COVERAGE)
>>> g.connect(a, b), g.same_component(a, b)
(True, True)

See Also
--------
sparse_roadmap.spanner.admission
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Dict, List

import networkx as nx
import numpy as np

from sparse_roadmap.common.errors import PreconditionViolation
from sparse_roadmap.common.gates import GuardType
from sparse_roadmap.retrieval.neighbors import NearestNeighbors
from sparse_roadmap.space.base import State, StateSpace

from .disjoint_sets import DisjointSets
from .interface import InterfaceBookkeeper

logger = logging.getLogger(__name__)


@dataclass
class Guard:
    """A roadmap vertex.

    Parameters
    ----------
    id : int
        Dense vertex id.
    state : numpy.ndarray
        Owned clone of the accepted sample.
    kind : GuardType
        Why the guard was added.
    """

    id: int
    state: State
    kind: GuardType


class RoadmapGraph:
    """Guard arena, weighted edges, components and interface tables."""

    def __init__(self, space: StateSpace, neighbors: NearestNeighbors, *, dense_delta: float) -> None:
        self.space = space
        self.neighbors = neighbors
        self.guards: List[Guard] = []
        self.graph = nx.Graph()
        self.components = DisjointSets()
        self.interfaces = InterfaceBookkeeper(space, neighbors, dense_delta)
        self.lock = threading.RLock()
        self._log: Dict[str, int] = {"guards_added": 0, "edges_added": 0, "abandoned": 0}

    # ------------------------------------------------------------------
    # Construction
    def add_guard(self, state: State, kind: GuardType) -> int:
        """Clone ``state`` into a new guard and return its id.

        Interface evidence of guards close to ``state`` is abandoned before
        the new guard is indexed.
        """

        if not self.space.satisfies_bounds(state):
            raise PreconditionViolation(f"state {np.asarray(state).tolist()} lies outside the space")
        with self.lock:
            owned = self.space.clone(state)
            self._log["abandoned"] += self.interfaces.abandon_lists(owned)
            gid = len(self.guards)
            self.guards.append(Guard(gid, owned, kind))
            self.graph.add_node(gid, kind=kind)
            self.components.make_set(gid)
            self.neighbors.add(gid, owned)
            self._log["guards_added"] += 1
        logger.debug("added %s guard %d at %s", kind.value, gid, owned.tolist())
        return gid

    def connect(self, v: int, vp: int) -> bool:
        """Add the edge ``v``–``vp`` and unite their components.

        Returns ``False`` without change if the edge already exists.
        """

        with self.lock:
            if v == vp or self.graph.has_edge(v, vp):
                return False
            self._add_edge(v, vp)
            self.unite_components(v, vp)
        return True

    def _add_edge(self, v: int, vp: int) -> None:
        weight = self.space.distance(self.guards[v].state, self.guards[vp].state)
        self.graph.add_edge(v, vp, weight=weight)
        self._log["edges_added"] += 1
        logger.debug("connected guards %d and %d (weight %.4f)", v, vp, weight)

    def unite_components(self, a: int, b: int) -> bool:
        with self.lock:
            return self.components.union(a, b)

    def same_component(self, a: int, b: int) -> bool:
        with self.lock:
            return self.components.same(a, b)

    # ------------------------------------------------------------------
    # Read helpers
    def state(self, v: int) -> State:
        return self.guards[v].state

    def kind(self, v: int) -> GuardType:
        return self.guards[v].kind

    def neighbors_of(self, v: int) -> List[int]:
        """Adjacent guards of ``v`` in insertion order."""

        return list(self.graph.adj[v])

    def has_edge(self, a: int, b: int) -> bool:
        return self.graph.has_edge(a, b)

    def edge_weight(self, a: int, b: int) -> float:
        return float(self.graph.edges[a, b]["weight"])

    def distance(self, a: int, b: int) -> float:
        return self.space.distance(self.guards[a].state, self.guards[b].state)

    def guard_ids(self) -> List[int]:
        return list(range(len(self.guards)))

    def milestone_count(self) -> int:
        return len(self.guards)

    def snapshot(self) -> nx.Graph:
        """Return a frozen copy with ``state`` and ``kind`` node attributes."""

        with self.lock:
            copy = nx.Graph()
            for guard in self.guards:
                copy.add_node(guard.id, state=np.array(guard.state, copy=True), kind=guard.kind)
            copy.add_edges_from((u, v, dict(d)) for u, v, d in self.graph.edges(data=True))
        return nx.freeze(copy)

    # ------------------------------------------------------------------
    # Maintenance and logging
    def clear(self) -> None:
        """Free every guard state and all interface evidence."""

        with self.lock:
            self.interfaces.clear()
            for guard in self.guards:
                self.space.free(guard.state)
            self.guards.clear()
            self.graph.clear()
            self.components.clear()
            self.neighbors.clear()

    def log_status(self) -> dict:
        """Return counters for guards, edges and abandoned entries."""

        return dict(self._log)


__all__ = ["Guard", "RoadmapGraph"]

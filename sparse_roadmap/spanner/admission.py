# Copyright (c) 2025 Arne Deutsch, itemis AG, MIT License
"""Guard admission for the sparse roadmap spanner.

Summary
-------
Decides whether a freshly sampled state must grow the roadmap. Four
criteria are tried in order and the first one that mutates the graph wins:

1. coverage: no guard sees the sample;
2. connectivity: the sample sees guards of two or more components;
3. interface: the two closest guards are visible but not yet linked;
4. quality: support samples around the sample reveal a missing shortcut
   whose detour violates the stretch factor.

Each evaluation produces an :class:`AdmissionDecision` that is counted in
the admission telemetry and optionally appended to a provenance log.

Side Effects
------------
Adds guards and edges to the :class:`RoadmapGraph` and updates its
interface evidence. Temporary support states are cloned through the state
space and freed before returning.

See Also
--------
sparse_roadmap.spanner.candidates
sparse_roadmap.spanner.planner
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from sparse_roadmap.common.errors import SamplingExhausted
from sparse_roadmap.common.gates import AdmissionDecision, GuardType, rejection
from sparse_roadmap.common.provenance import ProvenanceLogger, log_admission
from sparse_roadmap.common.telemetry import AdmissionStats
from sparse_roadmap.planning.simplifier import PathSimplifier
from sparse_roadmap.space.base import State

from .candidates import compute_vpp, compute_x, update_pair_points
from .graph import RoadmapGraph
from .interface import InterfaceData

logger = logging.getLogger(__name__)


class GuardAdmission:
    """Apply the four admission criteria to samples."""

    def __init__(
        self,
        graph: RoadmapGraph,
        simplifier: PathSimplifier,
        *,
        stretch_factor: float,
        sparse_delta: float,
        dense_delta: float,
        near_sample_points: int,
        support_attempts: int = 20,
        stats: Optional[AdmissionStats] = None,
        provenance: Optional[ProvenanceLogger] = None,
        name: str = "spars2",
    ) -> None:
        self.graph = graph
        self.space = graph.space
        self.simplifier = simplifier
        self.stretch_factor = stretch_factor
        self.sparse_delta = sparse_delta
        self.dense_delta = dense_delta
        self.near_sample_points = near_sample_points
        self.support_attempts = support_attempts
        self.stats = stats if stats is not None else AdmissionStats()
        self.provenance = provenance
        self.name = name

    # ------------------------------------------------------------------
    # Entry point
    def evaluate(self, q_new: State) -> AdmissionDecision:
        """Run the criteria on ``q_new`` and return the winning decision."""

        decision, payload = self.decide(q_new)
        self.log(decision, payload)
        return decision

    def decide(self, q_new: State) -> Tuple[AdmissionDecision, Dict[str, Any]]:
        """Apply the criteria under the graph lock without writing provenance.

        Returns the decision and the provenance payload to hand to
        :meth:`log` once the caller has released the lock.
        """

        with self.graph.lock:
            graph_nbh, visible = self.find_graph_neighbors(q_new)
            decision = (
                self.check_add_coverage(q_new, visible)
                or self.check_add_connectivity(q_new, visible)
                or self.check_add_interface(q_new, graph_nbh, visible)
                or self.check_add_quality(q_new, visible)
                or rejection("no criterion applies")
            )
            self.stats.record(decision)
        return decision, {"state": np.asarray(q_new).tolist(), "visible": len(visible)}

    def log(self, decision: AdmissionDecision, payload: Dict[str, Any]) -> None:
        log_admission(self.provenance, self.name, decision, payload)

    # ------------------------------------------------------------------
    # Neighbourhoods
    def find_graph_neighbors(self, state: State) -> Tuple[List[int], List[int]]:
        """Return guards within ``sparse_delta`` and the visible subset, closest first."""

        graph_nbh = self.graph.neighbors.nearest_r(state, self.sparse_delta)
        visible = [v for v in graph_nbh if self.space.check_motion(state, self.graph.state(v))]
        return graph_nbh, visible

    def find_graph_representative(self, state: State) -> Optional[int]:
        """Return the closest guard that sees ``state``, if any."""

        for v in self.graph.neighbors.nearest_r(state, self.sparse_delta):
            if self.space.check_motion(state, self.graph.state(v)):
                return v
        return None

    def approach_graph(self, v: int) -> int:
        """Connect guard ``v`` to every guard it sees; return the edge count."""

        linked = 0
        with self.graph.lock:
            st = self.graph.state(v)
            for vp in self.graph.neighbors.nearest_r(st, self.sparse_delta):
                if vp != v and self.space.check_motion(st, self.graph.state(vp)):
                    linked += int(self.graph.connect(v, vp))
        return linked

    def _sample_support(self, q_new: State) -> Optional[State]:
        for _ in range(self.support_attempts):
            try:
                candidate = self.space.sample_near(q_new, self.dense_delta)
            except SamplingExhausted:
                return None
            if self.space.distance(q_new, candidate) <= self.dense_delta and self.space.check_motion(
                q_new, candidate
            ):
                return candidate
        return None

    def find_close_representatives(
        self, q_new: State, q_rep: int
    ) -> Tuple[Dict[int, State], Optional[AdmissionDecision]]:
        """Probe around ``q_new`` for guards other than ``q_rep`` bordering it.

        Returns a map from each such representative to an owned support state
        in its region. A probe no guard can see is added as a coverage guard
        instead; the map is then empty and the decision reports the addition.
        """

        reps: Dict[int, State] = {}
        for _ in range(self.near_sample_points):
            support = self._sample_support(q_new)
            if support is None:
                break
            rep = self.find_graph_representative(support)
            if rep is None:
                self._free_states(reps.values())
                gid = self.graph.add_guard(support, GuardType.COVERAGE)
                return {}, AdmissionDecision(
                    "add_guard", "support sample outside every region", GuardType.COVERAGE, (gid,)
                )
            if rep != q_rep and rep not in reps:
                reps[rep] = self.space.clone(support)
        return reps, None

    def _free_states(self, states: Sequence[State]) -> None:
        for st in list(states):
            self.space.free(st)

    # ------------------------------------------------------------------
    # Criteria
    def check_add_coverage(self, q_new: State, visible: List[int]) -> Optional[AdmissionDecision]:
        if visible:
            return None
        gid = self.graph.add_guard(q_new, GuardType.COVERAGE)
        return AdmissionDecision("add_guard", "no visible guard", GuardType.COVERAGE, (gid,))

    def check_add_connectivity(self, q_new: State, visible: List[int]) -> Optional[AdmissionDecision]:
        """Add a guard linking one visible guard of every distinct component."""

        if len(visible) < 2:
            return None
        links: List[int] = []
        roots = set()
        for v in visible:
            root = self.graph.components.find(v)
            if root not in roots:
                roots.add(root)
                links.append(v)
        if len(links) < 2:
            return None
        gid = self.graph.add_guard(q_new, GuardType.CONNECTIVITY)
        for v in links:
            self.graph.connect(gid, v)
        return AdmissionDecision(
            "add_guard",
            f"joins {len(links)} components",
            GuardType.CONNECTIVITY,
            (gid, *links),
            float(len(links)),
        )

    def check_add_interface(
        self, q_new: State, graph_nbh: List[int], visible: List[int]
    ) -> Optional[AdmissionDecision]:
        """Bridge the two closest guards when they are visible but unlinked."""

        if len(visible) < 2 or graph_nbh[:2] != visible[:2]:
            return None
        a, b = visible[0], visible[1]
        if self.graph.has_edge(a, b):
            return None
        if self.space.check_motion(self.graph.state(a), self.graph.state(b)):
            self.graph.connect(a, b)
            return AdmissionDecision("connect", "closest guards see each other", GuardType.INTERFACE, (a, b))
        gid = self.graph.add_guard(q_new, GuardType.INTERFACE)
        self.graph.connect(gid, a)
        self.graph.connect(gid, b)
        return AdmissionDecision("add_guard", "bridges closest guards", GuardType.INTERFACE, (gid, a, b))

    def check_add_quality(self, q_new: State, visible: List[int]) -> Optional[AdmissionDecision]:
        """Refresh interface evidence around ``q_new`` and repair stretch violations.

        Every representative involved gets a chance to repair, so one sample
        can fix several violations; the repairs are merged into one decision.
        """

        if not visible:
            return None
        rep = visible[0]
        close, decision = self.find_close_representatives(q_new, rep)
        if decision is not None:
            return decision
        try:
            for r, s in close.items():
                update_pair_points(self.graph, rep, q_new, r, s)
                update_pair_points(self.graph, r, s, rep, q_new)
            repairs = [d for d in (self.check_add_path(v) for v in (rep, *close)) if d is not None]
        finally:
            self._free_states(close.values())
        return _merge_repairs(repairs)

    def check_add_path(self, v: int) -> Optional[AdmissionDecision]:
        """Look for a pair of ``v``'s neighbours whose detour breaks the stretch bound.

        For neighbours ``r`` and ``rp`` (a VPP candidate), the longest detour
        through ``v`` toward any X candidate is compared against the recorded
        interface distance. On violation the pair is linked directly when
        possible, otherwise the interface path is spliced in.
        """

        for r in self.graph.neighbors_of(v):
            for rp in compute_vpp(self.graph, v, r):
                d_rv = self.graph.distance(r, v)
                rm_dist = max(
                    (d_rv + self.graph.distance(v, x)) / 2.0 for x in compute_x(self.graph, v, r, rp)
                )
                data = self.graph.interfaces.get_data(v, r, rp)
                if not rm_dist > self.stretch_factor * data.d:
                    continue
                decision = self._repair(v, r, rp, data, rm_dist)
                if decision is not None:
                    return decision
        return None

    def _repair(
        self, v: int, r: int, rp: int, data: InterfaceData, rm_dist: float
    ) -> Optional[AdmissionDecision]:
        if self.graph.has_edge(r, rp):
            return None
        if self.space.check_motion(self.graph.state(r), self.graph.state(rp)):
            self.graph.connect(r, rp)
            return AdmissionDecision(
                "connect", "direct shortcut restores stretch bound", GuardType.QUALITY, (r, rp), rm_dist
            )
        near, far = (data.first, data.second) if r < rp else (data.second, data.first)
        path = [near.sigma.get(), near.point.get(), self.graph.state(v), far.point.get(), far.sigma.get()]
        path = self.simplifier.simplify(path)
        if not self.simplifier.is_valid([self.graph.state(r), *path, self.graph.state(rp)]):
            logger.debug("interface path between %d and %d through %d is blocked", r, rp, v)
            return None
        # adding guards may abandon ``data`` and free the states the path refers to
        staged = [self.space.clone(st) for st in path]
        added: List[int] = []
        try:
            prior = r
            for st in staged:
                gid = self.graph.add_guard(st, GuardType.QUALITY)
                self.graph.connect(prior, gid)
                added.append(gid)
                prior = gid
            self.graph.connect(prior, rp)
        finally:
            self._free_states(staged)
        return AdmissionDecision(
            "add_guard", "interface path restores stretch bound", GuardType.QUALITY, tuple(added), rm_dist
        )


def _merge_repairs(repairs: List[AdmissionDecision]) -> Optional[AdmissionDecision]:
    if not repairs:
        return None
    if len(repairs) == 1:
        return repairs[0]
    action = "add_guard" if any(d.action == "add_guard" for d in repairs) else "connect"
    guards = tuple(g for d in repairs for g in d.guards)
    score = max(d.score for d in repairs if d.score is not None)
    return AdmissionDecision(action, f"{len(repairs)} repairs restore stretch bound", GuardType.QUALITY, guards, score)


__all__ = ["GuardAdmission"]

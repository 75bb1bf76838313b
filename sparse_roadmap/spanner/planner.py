# Copyright (c) 2025 Arne Deutsch, itemis AG, MIT License
"""SPARS2 solver loop and planner lifecycle.

Summary
-------
:class:`SparsTwo` grows a sparse roadmap spanner by repeatedly sampling a
valid state and handing it to :class:`GuardAdmission`. Planning stops when
a start and a goal guard share a component, when the caller's termination
condition fires, or after ``max_failures`` consecutive samples left the
roadmap unchanged.

Side Effects
------------
The roadmap persists across queries; :meth:`SparsTwo.clear_query` only
forgets the query while :meth:`SparsTwo.clear` frees every guard.

Examples
--------
>>> from sparse_roadmap.space import BoxStateSpace
>>> space = BoxStateSpace([0.0, 0.0], [1.0, 1.0], seed=1)
>>> planner = SparsTwo(space, {"sparse_delta": 0.5, "max_failures": 50})
>>> planner.set_problem_definition(ProblemDefinition([[0.1, 0.1]], [[0.9, 0.9]]))
>>> planner.solve().status
<PlannerStatus.EXACT_SOLUTION: 'exact solution'>

See Also
--------
sparse_roadmap.spanner.admission
sparse_roadmap.spanner.solution
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

import networkx as nx

from sparse_roadmap.common.errors import PreconditionViolation, SamplingExhausted
from sparse_roadmap.common.gates import AdmissionDecision, GuardType, rejection
from sparse_roadmap.common.provenance import ProvenanceLogger
from sparse_roadmap.common.telemetry import admission_registry
from sparse_roadmap.planning.simplifier import PathSimplifier
from sparse_roadmap.retrieval.neighbors import NearestNeighbors, make_neighbors
from sparse_roadmap.space.base import StateSpace

from .admission import GuardAdmission
from .config import SparsConfig, coerce_config
from .graph import RoadmapGraph
from .solution import SolutionAssembler, SolutionPath
from .termination import TerminationCondition, never

logger = logging.getLogger(__name__)


class PlannerStatus(str, Enum):
    EXACT_SOLUTION = "exact solution"
    TIMEOUT = "timeout"
    NO_SOLUTION = "no solution found"


@dataclass
class ProblemDefinition:
    """Start and goal states of one query."""

    starts: List[Sequence[float]] = field(default_factory=list)
    goals: List[Sequence[float]] = field(default_factory=list)


@dataclass
class SolveResult:
    """Outcome of :meth:`SparsTwo.solve` or :meth:`SparsTwo.construct_roadmap`.

    ``iterations`` counts evaluated samples, ``additions`` the samples that
    changed the roadmap and ``failures`` the trailing run of rejections.
    """

    status: PlannerStatus
    solution: Optional[SolutionPath] = None
    iterations: int = 0
    additions: int = 0
    failures: int = 0

    @property
    def solved(self) -> bool:
        return self.status is PlannerStatus.EXACT_SOLUTION


class SparsTwo:
    """Sparse roadmap spanner planner.

    ``name`` is the key under which admission counters are kept in
    :data:`admission_registry`. Planners built with the same name, including
    the default, report into one shared :class:`AdmissionStats`; pass a
    distinct name to keep their telemetry apart.
    """

    def __init__(
        self,
        space: StateSpace,
        config: SparsConfig | Dict[str, Any] | None = None,
        *,
        neighbors: Optional[NearestNeighbors] = None,
        simplifier: Optional[PathSimplifier] = None,
        provenance: Optional[ProvenanceLogger] = None,
        name: str = "spars2",
    ) -> None:
        self.space = space
        self.config = coerce_config(config)
        self.name = name
        self.stats = admission_registry.get(name)
        self.provenance = provenance
        if self.provenance is None and self.config.provenance_dir:
            self.provenance = ProvenanceLogger(self.config.provenance_dir)
        self._neighbors = neighbors
        self._simplifier = simplifier
        self.graph: Optional[RoadmapGraph] = None
        self.admission: Optional[GuardAdmission] = None
        self.assembler: Optional[SolutionAssembler] = None
        self._problem: Optional[ProblemDefinition] = None
        self._start_guards: List[int] = []
        self._goal_guards: List[int] = []
        self._solution: Optional[SolutionPath] = None
        self.setup()

    # ------------------------------------------------------------------
    # Lifecycle
    def setup(self) -> None:
        """Resolve parameters against the space and build missing services.

        Calling it again re-applies the configuration to an existing roadmap.
        """

        cfg = self.config
        extent = self.space.max_extent
        sparse = cfg.sparse_delta if cfg.sparse_delta_fraction is None else cfg.sparse_delta_fraction * extent
        dense = cfg.dense_delta if cfg.dense_delta_fraction is None else cfg.dense_delta_fraction * extent
        near = cfg.near_sample_points if cfg.near_sample_points is not None else 2 * self.space.dimension
        if self.graph is None:
            index = self._neighbors or make_neighbors(
                cfg.neighbors, self.space, rebuild_threshold=cfg.kdtree_rebuild_threshold
            )
            simplifier = self._simplifier or PathSimplifier(
                self.space, reduce_steps=cfg.reduce_vertices_steps, shortcut_steps=cfg.shortcut_steps
            )
            self.graph = RoadmapGraph(self.space, index, dense_delta=dense)
            self.admission = GuardAdmission(
                self.graph,
                simplifier,
                stretch_factor=cfg.stretch_factor,
                sparse_delta=sparse,
                dense_delta=dense,
                near_sample_points=near,
                support_attempts=cfg.support_attempts,
                stats=self.stats,
                provenance=self.provenance,
                name=self.name,
            )
            self.assembler = SolutionAssembler(self.graph, simplifier)
        else:
            with self.graph.lock:
                self.admission.stretch_factor = cfg.stretch_factor
                self.admission.sparse_delta = sparse
                self.admission.near_sample_points = near
                self.admission.support_attempts = cfg.support_attempts
                self.admission.dense_delta = dense
                self.graph.interfaces.dense_delta = dense
        logger.debug(
            "%s setup: sparse_delta=%.4f dense_delta=%.6f t=%.2f near_samples=%d",
            self.name,
            sparse,
            dense,
            cfg.stretch_factor,
            near,
        )

    def set_problem_definition(self, problem: ProblemDefinition) -> None:
        """Install a query, adding its states as START/GOAL guards.

        Raises
        ------
        PreconditionViolation
            If starts or goals are missing, out of bounds or invalid.
        """

        if not problem.starts or not problem.goals:
            raise PreconditionViolation("a problem needs at least one start and one goal")
        for st in (*problem.starts, *problem.goals):
            if not self.space.satisfies_bounds(st) or not self.space.is_valid(st):
                raise PreconditionViolation(f"query state {list(st)} is out of bounds or invalid")
        with self.graph.lock:
            self.clear_query()
            self._problem = problem
            self._start_guards = [self._add_query_guard(st, GuardType.START) for st in problem.starts]
            self._goal_guards = [self._add_query_guard(st, GuardType.GOAL) for st in problem.goals]

    def _add_query_guard(self, state: Sequence[float], kind: GuardType) -> int:
        gid = self.graph.add_guard(state, kind)
        self.admission.approach_graph(gid)
        return gid

    def clear_query(self) -> None:
        """Forget the query and its cached solution; the roadmap is kept."""

        with self.graph.lock:
            self._problem = None
            self._start_guards = []
            self._goal_guards = []
            self._solution = None

    def clear(self) -> None:
        """Drop the query and free the whole roadmap."""

        with self.graph.lock:
            self.clear_query()
            self.graph.clear()
        logger.info("%s cleared", self.name)

    # ------------------------------------------------------------------
    # Planning
    def solve(
        self, ptc: Optional[TerminationCondition] = None, max_failures: Optional[int] = None
    ) -> SolveResult:
        """Grow the roadmap until the query is solved or planning stops.

        Parameters
        ----------
        ptc:
            Termination condition polled between iterations.
        max_failures:
            Consecutive rejections tolerated; defaults to the configured value.

        Raises
        ------
        PreconditionViolation
            If no problem definition is installed.
        """

        if self._problem is None:
            raise PreconditionViolation("solve() requires a problem definition")
        if self._solution is not None:
            return SolveResult(PlannerStatus.EXACT_SOLUTION, self._solution)
        logger.info(
            "%s: starting with %d guards, %d start(s), %d goal(s)",
            self.name,
            self.milestone_count(),
            len(self._start_guards),
            len(self._goal_guards),
        )
        result = self._grow(ptc, max_failures, query=True)
        logger.info(
            "%s: %s after %d iterations, %d additions, %d guards",
            self.name,
            result.status.value,
            result.iterations,
            result.additions,
            self.milestone_count(),
        )
        return result

    def construct_roadmap(
        self, ptc: Optional[TerminationCondition] = None, max_failures: Optional[int] = None
    ) -> SolveResult:
        """Grow the roadmap without a query, e.g. to preprocess for later queries."""

        result = self._grow(ptc, max_failures, query=False)
        logger.info(
            "%s: roadmap has %d guards after %d iterations", self.name, self.milestone_count(), result.iterations
        )
        return result

    def _grow(self, ptc: Optional[TerminationCondition], max_failures: Optional[int], *, query: bool) -> SolveResult:
        ptc = ptc or never()
        limit = self.config.max_failures if max_failures is None else max_failures
        iterations = additions = failures = 0
        solution = self._check_solution() if query else None
        while solution is None and failures < limit and not ptc():
            with self.graph.lock:
                iterations += 1
                decision, payload = self._iterate()
                if decision.accepted:
                    failures = 0
                    additions += 1
                else:
                    failures += 1
                if query:
                    solution = self._check_solution(changed=decision.accepted)
            if payload is not None:
                self.admission.log(decision, payload)
        if solution is not None:
            status = PlannerStatus.EXACT_SOLUTION
        elif failures >= limit:
            status = PlannerStatus.NO_SOLUTION
        else:
            status = PlannerStatus.TIMEOUT
        return SolveResult(status, solution, iterations, additions, failures)

    def _iterate(self) -> Tuple[AdmissionDecision, Optional[Dict[str, Any]]]:
        try:
            q_new = self.space.valid_sample()
        except SamplingExhausted:
            self.stats.record_sampling_failure()
            return rejection("sampling exhausted"), None
        return self.admission.decide(q_new)

    def _check_solution(self, changed: bool = True) -> Optional[SolutionPath]:
        # another thread may have solved the query in the meantime
        with self.graph.lock:
            if self._solution is None and changed and self._problem is not None:
                self._solution = self.assembler.have_solution(self._start_guards, self._goal_guards)
            return self._solution

    # ------------------------------------------------------------------
    # Parameters
    @property
    def stretch_factor(self) -> float:
        return self.admission.stretch_factor

    @stretch_factor.setter
    def stretch_factor(self, value: float) -> None:
        if value <= 1.0:
            raise ValueError("stretch_factor must be > 1")
        self.config.stretch_factor = value
        self.admission.stretch_factor = value

    @property
    def sparse_delta(self) -> float:
        return self.admission.sparse_delta

    @sparse_delta.setter
    def sparse_delta(self, value: float) -> None:
        if value <= 0.0:
            raise ValueError("sparse_delta must be positive")
        self.config.sparse_delta = value
        self.config.sparse_delta_fraction = None
        self.admission.sparse_delta = value

    @property
    def dense_delta(self) -> float:
        return self.admission.dense_delta

    @dense_delta.setter
    def dense_delta(self, value: float) -> None:
        if value <= 0.0:
            raise ValueError("dense_delta must be positive")
        self.config.dense_delta = value
        self.config.dense_delta_fraction = None
        self.admission.dense_delta = value
        self.graph.interfaces.dense_delta = value

    @property
    def max_failures(self) -> int:
        return self.config.max_failures

    @max_failures.setter
    def max_failures(self, value: int) -> None:
        if value < 0:
            raise ValueError("max_failures must be >= 0")
        self.config.max_failures = value

    # ------------------------------------------------------------------
    # Introspection
    @property
    def problem(self) -> Optional[ProblemDefinition]:
        return self._problem

    @property
    def start_guards(self) -> List[int]:
        return list(self._start_guards)

    @property
    def goal_guards(self) -> List[int]:
        return list(self._goal_guards)

    def get_roadmap(self) -> nx.Graph:
        """Read-only snapshot of guards and edges."""

        return self.graph.snapshot()

    def milestone_count(self) -> int:
        return self.graph.milestone_count()

    def log_status(self) -> Dict[str, Any]:
        """Merge graph counters, admission telemetry and the milestone count."""

        with self.graph.lock:
            status: Dict[str, Any] = {
                "milestones": self.milestone_count(),
                "edges": self.graph.graph.number_of_edges(),
                "interface_states": self.graph.interfaces.live_states(),
            }
            status.update(self.graph.log_status())
            status.update(self.stats.snapshot())
        return status


__all__ = ["PlannerStatus", "ProblemDefinition", "SolveResult", "SparsTwo"]

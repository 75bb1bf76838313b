# Copyright (c) 2025 Arne Deutsch, itemis AG, MIT License
"""Sparse roadmap spanner: guard admission, interface bookkeeping and solver."""

from .admission import GuardAdmission
from .candidates import compute_vpp, compute_x, distance_check, update_pair_points
from .config import SparsConfig, coerce_config, load_config
from .disjoint_sets import DisjointSets
from .graph import Guard, RoadmapGraph
from .interface import InterfaceBookkeeper, InterfaceData, SupportPair
from .planner import PlannerStatus, ProblemDefinition, SolveResult, SparsTwo
from .solution import SolutionAssembler, SolutionPath
from .termination import TerminationCondition, after_checks, event, never, timed

__all__ = [
    "Guard",
    "RoadmapGraph",
    "GuardAdmission",
    "compute_vpp",
    "compute_x",
    "distance_check",
    "update_pair_points",
    "SparsConfig",
    "coerce_config",
    "load_config",
    "DisjointSets",
    "InterfaceBookkeeper",
    "InterfaceData",
    "SupportPair",
    "PlannerStatus",
    "ProblemDefinition",
    "SolveResult",
    "SparsTwo",
    "SolutionAssembler",
    "SolutionPath",
    "TerminationCondition",
    "after_checks",
    "event",
    "never",
    "timed",
]

# Copyright (c) 2025 Arne Deutsch, itemis AG, MIT License
"""Path search over the roadmap and path simplification."""

from .path_planner import PathPlanner
from .simplifier import PathSimplifier

__all__ = ["PathPlanner", "PathSimplifier"]

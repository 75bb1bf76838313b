# Copyright (c) 2025 Arne Deutsch, itemis AG, MIT License
"""Exception types shared by the roadmap modules."""

from __future__ import annotations


class RoadmapError(RuntimeError):
    """Base class for roadmap failures."""


class SamplingExhausted(RoadmapError):
    """The sampler could not produce a valid state within its retry budget.

    Recoverable: the solver loop counts it as one failed iteration.
    """


class PreconditionViolation(RoadmapError, ValueError):
    """Caller misuse such as a query state outside the space's domain."""


__all__ = ["RoadmapError", "SamplingExhausted", "PreconditionViolation"]

# Copyright (c) 2025 Arne Deutsch, itemis AG, MIT License
"""Configuration-space port used by the roadmap.

The roadmap never allocates states itself: every state it keeps is produced
by :meth:`StateSpace.clone` and released with :meth:`StateSpace.free`.
States are NumPy vectors; temporaries returned by the samplers are owned by
the caller and need not be freed.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np

State = np.ndarray


class StateSpace(ABC):
    """Sampling, metric and local-motion validity for one configuration space."""

    dimension: int

    @property
    @abstractmethod
    def max_extent(self) -> float:
        """Largest distance between two states of the space."""

    @abstractmethod
    def sample(self) -> State:
        """Return a uniform sample that may be invalid."""

    @abstractmethod
    def valid_sample(self) -> State:
        """Return a valid sample or raise :class:`SamplingExhausted`."""

    @abstractmethod
    def sample_near(self, near: State, radius: float) -> State:
        """Return a valid sample within ``radius`` of ``near``.

        Raises :class:`SamplingExhausted` when the retry budget runs out.
        """

    @abstractmethod
    def distance(self, a: State, b: State) -> float:
        """Metric distance between ``a`` and ``b``."""

    @abstractmethod
    def clone(self, state: State) -> State:
        """Return an owned copy of ``state``."""

    @abstractmethod
    def free(self, state: State) -> None:
        """Release a state produced by :meth:`clone`."""

    @abstractmethod
    def is_valid(self, state: State) -> bool:
        """Return ``True`` if ``state`` is collision free and within bounds."""

    @abstractmethod
    def satisfies_bounds(self, state: State) -> bool:
        """Return ``True`` if ``state`` lies inside the domain."""

    @abstractmethod
    def check_motion(self, a: State, b: State) -> bool:
        """Return ``True`` if the straight motion from ``a`` to ``b`` is valid."""


__all__ = ["State", "StateSpace"]

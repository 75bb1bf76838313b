# Copyright (c) 2025 Arne Deutsch, itemis AG, MIT License
"""Interface bookkeeping for the quality criterion.

Summary
-------
Every guard ``v`` keeps, for unordered pairs ``(r, r')`` of other guards,
the closest known support evidence that the visibility regions of ``r`` and
``r'`` both border the region of ``v``. The evidence is two support pairs:
``first`` for the lower-id side and ``second`` for the higher-id side. Each
pair holds a ``point`` inside ``v``'s region and a ``sigma`` just across the
interface. The cached distance ``d`` between the two points is what the
quality criterion compares against the stretch bound.

Side Effects
------------
All stored states are clones owned through :class:`SafeState`; clearing an
entry frees them through the state space.

Examples
--------
>>> from sparse_roadmap.space import BoxStateSpace
>>> space = BoxStateSpace([0.0, 0.0], [1.0, 1.0])
>>> data = InterfaceData()
>>> data.set_first([0.1, 0.0], [0.2, 0.0], space); data.d
inf
>>> data.set_second([0.4, 0.0], [0.5, 0.0], space); round(data.d, 3)
0.3

See Also
--------
sparse_roadmap.spanner.candidates
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from sparse_roadmap.common.errors import PreconditionViolation
from sparse_roadmap.retrieval.neighbors import NearestNeighbors
from sparse_roadmap.space.base import State, StateSpace
from sparse_roadmap.space.safe_state import SafeState

logger = logging.getLogger(__name__)

PairKey = Tuple[int, int]


def index(vp: int, vpp: int) -> PairKey:
    """Return the canonical ``(min, max)`` key for an unordered guard pair."""

    if vp == vpp:
        raise PreconditionViolation(f"interface pair needs two distinct guards, got {vp} twice")
    return (vp, vpp) if vp < vpp else (vpp, vp)


@dataclass
class SupportPair:
    """State inside the region (``point``) and just outside it (``sigma``)."""

    point: SafeState = field(default_factory=SafeState)
    sigma: SafeState = field(default_factory=SafeState)

    def set(self, point: State, sigma: State, space: StateSpace) -> None:
        self.point.set(point, space)
        self.sigma.set(sigma, space)

    def clear(self, space: StateSpace) -> None:
        self.point.clear(space)
        self.sigma.clear(space)

    def live_states(self) -> int:
        return int(not self.point.is_null) + int(not self.sigma.is_null)


@dataclass
class InterfaceData:
    """Support evidence for one guard pair as observed from one guard."""

    first: SupportPair = field(default_factory=SupportPair)
    second: SupportPair = field(default_factory=SupportPair)
    d: float = math.inf

    @property
    def complete(self) -> bool:
        """``True`` when both support points are present."""

        return not (self.first.point.is_null or self.second.point.is_null)

    def _refresh(self, space: StateSpace) -> None:
        if self.complete:
            self.d = space.distance(self.first.point.get(), self.second.point.get())
        else:
            self.d = math.inf

    def set_first(self, point: State, sigma: State, space: StateSpace) -> None:
        """Replace the lower-id side evidence with clones of ``point``/``sigma``."""

        self.first.set(point, sigma, space)
        self._refresh(space)

    def set_second(self, point: State, sigma: State, space: StateSpace) -> None:
        """Replace the higher-id side evidence with clones of ``point``/``sigma``."""

        self.second.set(point, sigma, space)
        self._refresh(space)

    def clear(self, space: StateSpace) -> None:
        """Free all four states and reset ``d``."""

        self.first.clear(space)
        self.second.clear(space)
        self.d = math.inf

    def live_states(self) -> int:
        return self.first.live_states() + self.second.live_states()


class InterfaceBookkeeper:
    """Per-guard tables of :class:`InterfaceData` keyed by guard pairs."""

    def __init__(self, space: StateSpace, neighbors: NearestNeighbors, dense_delta: float) -> None:
        self.space = space
        self.neighbors = neighbors
        self.dense_delta = dense_delta
        self._tables: Dict[int, Dict[PairKey, InterfaceData]] = defaultdict(dict)

    def get_data(self, v: int, vp: int, vpp: int) -> InterfaceData:
        """Return ``v``'s entry for the pair ``(vp, vpp)``, creating it if absent."""

        key = index(vp, vpp)
        table = self._tables[v]
        data = table.get(key)
        if data is None:
            data = table[key] = InterfaceData()
        return data

    def peek(self, v: int, vp: int, vpp: int) -> Optional[InterfaceData]:
        """Return the entry without creating one."""

        table = self._tables.get(v)
        if table is None:
            return None
        return table.get(index(vp, vpp))

    def set_first(self, v: int, vp: int, vpp: int, point: State, sigma: State) -> InterfaceData:
        data = self.get_data(v, vp, vpp)
        data.set_first(point, sigma, self.space)
        return data

    def set_second(self, v: int, vp: int, vpp: int, point: State, sigma: State) -> InterfaceData:
        data = self.get_data(v, vp, vpp)
        data.set_second(point, sigma, self.space)
        return data

    def abandon_lists(self, state: State) -> int:
        """Clear the evidence of every guard within ``dense_delta`` of ``state``.

        Called when a new guard is accepted at ``state``: it subdivides the
        regions of nearby guards, so their support points may no longer lie
        in the region they were recorded for. Returns the number of entries
        cleared.
        """

        cleared = 0
        for v in self.neighbors.nearest_r(state, self.dense_delta):
            for data in self._tables.get(v, {}).values():
                if data.live_states() or data.d != math.inf:
                    cleared += 1
                data.clear(self.space)
        if cleared:
            logger.debug("abandoned %d interface entries near %s", cleared, state)
        return cleared

    def delete_pair_info(self, v: int) -> None:
        """Free and drop every entry owned by ``v``."""

        table = self._tables.pop(v, None)
        if table is None:
            return
        for data in table.values():
            data.clear(self.space)

    def live_states(self) -> int:
        """Number of states currently owned by all entries."""

        return sum(d.live_states() for table in self._tables.values() for d in table.values())

    def clear(self) -> None:
        for v in list(self._tables):
            self.delete_pair_info(v)


__all__ = ["PairKey", "index", "SupportPair", "InterfaceData", "InterfaceBookkeeper"]

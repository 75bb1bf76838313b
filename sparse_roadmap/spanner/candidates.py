# Copyright (c) 2025 Arne Deutsch, itemis AG, MIT License
"""Candidate sets and support-point updates for the quality criterion.

For a guard ``v`` and one of its neighbours ``v'``, the second-order
candidates ``v''`` are the other neighbours of ``v`` not already adjacent to
``v'``: a shortcut ``v' -> v''`` through ``v``'s region might be missing.
The third-order candidates ``x`` are neighbours of ``v''`` that also touch
``v`` and already carry support evidence; they bound the length of the
detour the roadmap currently offers.

Ties follow adjacency iteration order, which is stable within one run.
"""

from __future__ import annotations

from typing import List

from sparse_roadmap.space.base import State

from .graph import RoadmapGraph


def compute_vpp(graph: RoadmapGraph, v: int, vp: int) -> List[int]:
    """Return neighbours of ``v`` other than ``vp`` that are not adjacent to ``vp``."""

    return [w for w in graph.neighbors_of(v) if w != vp and not graph.has_edge(w, vp)]


def compute_x(graph: RoadmapGraph, v: int, vp: int, vpp: int) -> List[int]:
    """Return third-order candidates for ``v``, ``vp`` and ``vpp``.

    A neighbour ``cx`` of ``vpp`` qualifies when it is adjacent to ``v`` but
    not to ``vp`` and ``v`` already holds a support point on ``vpp``'s side
    of the pair ``(vpp, cx)``. ``vpp`` itself always closes the list.
    """

    xs: List[int] = []
    for cx in graph.neighbors_of(vpp):
        if cx in (v, vp) or not graph.has_edge(cx, v) or graph.has_edge(cx, vp):
            continue
        data = graph.interfaces.get_data(v, vpp, cx)
        side = data.first if vpp < cx else data.second
        if not side.point.is_null:
            xs.append(cx)
    xs.append(vpp)
    return xs


def distance_check(graph: RoadmapGraph, rep: int, q: State, r: int, s: State, rp: int) -> bool:
    """Offer ``(q, s)`` as ``rep``'s support for ``r`` in the pair ``(r, rp)``.

    ``r`` owns the ``first`` slot when ``r < rp`` and the ``second`` slot
    otherwise. An empty slot is always filled; an occupied one is replaced
    only when ``q`` lies closer to the other side's point. With the other
    side still unknown there is nothing to compare against and the current
    evidence is kept. Returns ``True`` if the entry changed.
    """

    space = graph.space
    data = graph.interfaces.get_data(rep, r, rp)
    own, other = (data.first, data.second) if r < rp else (data.second, data.first)
    if not own.point.is_null:
        if other.point.is_null:
            return False
        current = space.distance(own.point.get(), other.point.get())
        if space.distance(q, other.point.get()) >= current:
            return False
    if r < rp:
        data.set_first(q, s, space)
    else:
        data.set_second(q, s, space)
    return True


def update_pair_points(graph: RoadmapGraph, rep: int, q: State, r: int, s: State) -> int:
    """Refresh ``rep``'s evidence for every pair ``(r, r')`` with ``r'`` a VPP candidate.

    ``q`` lies in ``rep``'s region and ``s`` in ``r``'s. Returns the number of
    entries that changed.
    """

    changed = 0
    for rp in compute_vpp(graph, rep, r):
        changed += int(distance_check(graph, rep, q, r, s, rp))
    return changed


__all__ = ["compute_vpp", "compute_x", "distance_check", "update_pair_points"]

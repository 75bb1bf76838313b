# Copyright (c) 2025 Arne Deutsch, itemis AG, MIT License
"""Tests for VPP/X candidate sets and support point updates."""

import math

import pytest

from sparse_roadmap.common import GuardType
from sparse_roadmap.retrieval import make_neighbors
from sparse_roadmap.spanner import RoadmapGraph, compute_vpp, compute_x, distance_check, update_pair_points
from sparse_roadmap.space import BoxStateSpace


def _graph(n: int, edges):
    space = BoxStateSpace([0.0, 0.0], [1.0, 1.0])
    graph = RoadmapGraph(space, make_neighbors("brute", space), dense_delta=0.001)
    for i in range(n):
        graph.add_guard([0.1 + 0.8 * i / max(n - 1, 1), 0.5], GuardType.COVERAGE)
    for a, b in edges:
        graph.connect(a, b)
    return space, graph


def test_compute_vpp_excludes_neighbours_of_vp() -> None:
    _, graph = _graph(4, [(0, 1), (0, 2), (0, 3), (1, 2)])
    assert compute_vpp(graph, 0, 1) == [3]
    assert compute_vpp(graph, 0, 3) == [1, 2]
    assert compute_vpp(graph, 1, 0) == []


def test_compute_x_requires_support_on_vpp_side() -> None:
    _, graph = _graph(5, [(0, 1), (0, 2), (0, 3), (0, 4), (1, 2), (3, 4), (3, 2)])
    assert compute_x(graph, 0, 1, 3) == [3]

    graph.interfaces.set_second(0, 3, 4, [0.5, 0.5], [0.5, 0.6])
    assert compute_x(graph, 0, 1, 3) == [3]

    graph.interfaces.set_first(0, 3, 4, [0.5, 0.4], [0.5, 0.3])
    assert compute_x(graph, 0, 1, 3) == [4, 3]


def test_distance_check_slots_and_replacement() -> None:
    space, graph = _graph(3, [(0, 1), (0, 2)])
    data = graph.interfaces.get_data(0, 1, 2)

    assert distance_check(graph, 0, [0.4, 0.5], 1, [0.3, 0.5], 2)
    assert data.first.point.get().tolist() == [0.4, 0.5]
    # the other side is unknown, keep the current evidence
    assert not distance_check(graph, 0, [0.45, 0.5], 1, [0.3, 0.5], 2)
    assert data.first.point.get().tolist() == [0.4, 0.5]

    assert distance_check(graph, 0, [0.6, 0.5], 2, [0.7, 0.5], 1)
    assert data.second.point.get().tolist() == [0.6, 0.5]
    assert data.d == pytest.approx(0.2)

    assert not distance_check(graph, 0, [0.3, 0.5], 1, [0.2, 0.5], 2)
    assert distance_check(graph, 0, [0.5, 0.5], 1, [0.3, 0.5], 2)
    assert data.d == pytest.approx(0.1)
    assert space.live_states == graph.milestone_count() + 4


def test_update_pair_points_visits_every_vpp() -> None:
    _, graph = _graph(4, [(0, 1), (0, 2), (0, 3)])
    changed = update_pair_points(graph, 0, [0.2, 0.5], 1, [0.3, 0.5])
    assert changed == 2
    for rp in (2, 3):
        data = graph.interfaces.peek(0, 1, rp)
        assert not data.first.point.is_null
        assert math.isinf(data.d)
    assert update_pair_points(graph, 0, [0.2, 0.5], 1, [0.3, 0.5]) == 0

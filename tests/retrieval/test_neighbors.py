# Copyright (c) 2025 Arne Deutsch, itemis AG, MIT License
"""Tests for the nearest-neighbour backends."""

import numpy as np
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from sparse_roadmap.retrieval import BruteForceNeighbors, KDTreeNeighbors, make_neighbors
from sparse_roadmap.space import BoxStateSpace

coords = st.floats(min_value=0.0, max_value=1.0, allow_nan=False, width=32)
points = st.lists(st.tuples(coords, coords), min_size=1, max_size=60)


def _euclid(a, b) -> float:
    return float(np.linalg.norm(np.asarray(a) - np.asarray(b)))


def test_brute_force_orders_by_distance() -> None:
    nn = BruteForceNeighbors(_euclid)
    for gid, p in enumerate([(0.0, 0.0), (0.5, 0.0), (0.2, 0.0), (0.9, 0.9)]):
        nn.add(gid, np.array(p))
    assert nn.nearest_r(np.array([0.0, 0.0]), 0.6) == [0, 2, 1]
    assert nn.nearest_k(np.array([1.0, 1.0]), 2) == [3, 1]
    assert nn.list() == [0, 1, 2, 3]
    assert len(nn) == 4
    nn.clear()
    assert nn.nearest_r(np.array([0.0, 0.0]), 10.0) == []


def test_ties_keep_insertion_order() -> None:
    nn = KDTreeNeighbors(2, rebuild_threshold=1)
    for gid, p in enumerate([(1.0, 0.0), (-1.0, 0.0), (0.0, 1.0)]):
        nn.add(gid, np.array(p))
    assert nn.nearest_r(np.zeros(2), 1.0) == [0, 1, 2]


def test_kdtree_rejects_wrong_dimension() -> None:
    nn = KDTreeNeighbors(2)
    with pytest.raises(ValueError):
        nn.add(0, np.zeros(3))
    with pytest.raises(ValueError):
        KDTreeNeighbors(2, rebuild_threshold=0)


def test_make_neighbors_kinds() -> None:
    space = BoxStateSpace([0.0, 0.0], [1.0, 1.0])
    assert isinstance(make_neighbors("brute", space), BruteForceNeighbors)
    assert isinstance(make_neighbors("kdtree", space), KDTreeNeighbors)
    with pytest.raises(ValueError):
        make_neighbors("gnat", space)


@settings(max_examples=50, deadline=None)
@given(points, st.tuples(coords, coords), st.floats(min_value=0.0, max_value=1.5))
def test_kdtree_matches_brute_force_radius(pts, query, radius) -> None:
    brute = BruteForceNeighbors(_euclid)
    tree = KDTreeNeighbors(2, rebuild_threshold=4)
    for gid, p in enumerate(pts):
        brute.add(gid, np.array(p, dtype=float))
        tree.add(gid, np.array(p, dtype=float))
    q = np.array(query, dtype=float)
    # points on the sphere may round either way in the two backends
    fuzzy = {i for i, p in enumerate(pts) if abs(_euclid(q, p) - radius) < 1e-9}
    assert set(tree.nearest_r(q, radius)) - fuzzy == set(brute.nearest_r(q, radius)) - fuzzy


@settings(max_examples=50, deadline=None)
@given(points, st.tuples(coords, coords), st.integers(min_value=1, max_value=10))
def test_kdtree_matches_brute_force_k(pts, query, k) -> None:
    brute = BruteForceNeighbors(_euclid)
    tree = KDTreeNeighbors(2, rebuild_threshold=4)
    for gid, p in enumerate(pts):
        brute.add(gid, np.array(p, dtype=float))
        tree.add(gid, np.array(p, dtype=float))
    q = np.array(query, dtype=float)
    got = [_euclid(q, pts[i]) for i in tree.nearest_k(q, k)]
    want = [_euclid(q, pts[i]) for i in brute.nearest_k(q, k)]
    assert got == pytest.approx(want)

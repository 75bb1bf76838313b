# Copyright (c) 2025 Arne Deutsch, itemis AG, MIT License
"""Tests for ``PathSimplifier``."""

import numpy as np
from hypothesis import given, settings
from hypothesis import strategies as st

from sparse_roadmap.planning import PathSimplifier
from sparse_roadmap.space import BoxObstacle, BoxStateSpace

WALL = BoxObstacle((0.45, 0.0), (0.55, 0.7))


def _detour():
    return [np.array(p) for p in [(0.1, 0.1), (0.2, 0.5), (0.3, 0.8), (0.5, 0.85), (0.7, 0.8), (0.8, 0.5), (0.9, 0.1)]]


def test_simplify_keeps_endpoints_and_validity() -> None:
    space = BoxStateSpace([0.0, 0.0], [1.0, 1.0], [WALL])
    simplifier = PathSimplifier(space, rng=np.random.default_rng(0))
    path = _detour()
    assert simplifier.is_valid(path)

    short = simplifier.simplify(path)

    assert short[0] is path[0] and short[-1] is path[-1]
    assert simplifier.is_valid(short)
    assert simplifier.path_length(short) <= simplifier.path_length(path) + 1e-12
    assert len(short) < len(path)


def test_straight_line_in_open_space() -> None:
    space = BoxStateSpace([0.0, 0.0], [1.0, 1.0])
    simplifier = PathSimplifier(space, rng=np.random.default_rng(1))
    assert len(simplifier.shortcut_path(_detour())) == 2


def test_short_paths_unchanged() -> None:
    space = BoxStateSpace([0.0, 0.0], [1.0, 1.0])
    simplifier = PathSimplifier(space)
    pair = [np.array([0.1, 0.1]), np.array([0.2, 0.2])]
    assert len(simplifier.simplify(pair)) == 2
    assert all(a is b for a, b in zip(simplifier.simplify(pair), pair))
    assert len(simplifier.simplify(pair[:1])) == 1


@settings(max_examples=30, deadline=None)
@given(st.integers(0, 2**16), st.integers(0, 20), st.integers(0, 60))
def test_never_lengthens(seed, reduce_steps, shortcut_steps) -> None:
    space = BoxStateSpace([0.0, 0.0], [1.0, 1.0], [WALL])
    simplifier = PathSimplifier(
        space,
        reduce_steps=reduce_steps,
        shortcut_steps=shortcut_steps,
        rng=np.random.default_rng(seed),
    )
    path = _detour()
    short = simplifier.simplify(path)
    assert simplifier.is_valid(short)
    assert simplifier.path_length(short) <= simplifier.path_length(path) + 1e-12

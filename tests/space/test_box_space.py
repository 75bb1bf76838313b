# Copyright (c) 2025 Arne Deutsch, itemis AG, MIT License
"""Tests for ``BoxStateSpace`` validity, sampling and clone accounting."""

import numpy as np
import pytest

from sparse_roadmap.common.errors import PreconditionViolation, SamplingExhausted
from sparse_roadmap.space import BoxObstacle, BoxStateSpace, CircleObstacle


def _wall_space(**kwargs) -> BoxStateSpace:
    return BoxStateSpace([0.0, 0.0], [1.0, 1.0], [BoxObstacle((0.45, 0.0), (0.55, 0.9))], **kwargs)


def test_rejects_bad_bounds() -> None:
    with pytest.raises(ValueError):
        BoxStateSpace([0.0, 1.0], [1.0, 1.0])
    with pytest.raises(ValueError):
        BoxStateSpace([0.0], [1.0, 1.0])
    with pytest.raises(ValueError):
        BoxStateSpace([0.0], [1.0], resolution=0.0)


def test_validity_and_bounds() -> None:
    space = _wall_space()
    assert space.is_valid([0.1, 0.1])
    assert not space.is_valid([0.5, 0.5])
    assert not space.satisfies_bounds([1.5, 0.5])
    assert not space.satisfies_bounds([0.5, np.nan])
    assert space.max_extent == pytest.approx(np.sqrt(2.0))


def test_check_motion_blocked_by_wall() -> None:
    space = _wall_space()
    assert not space.check_motion([0.2, 0.5], [0.8, 0.5])
    assert space.check_motion([0.2, 0.95], [0.8, 0.95])
    assert space.check_motion([0.2, 0.2], [0.2, 0.2])


def test_circle_obstacle() -> None:
    space = BoxStateSpace([0.0, 0.0], [1.0, 1.0], [CircleObstacle((0.5, 0.5), 0.2)])
    assert not space.is_valid([0.5, 0.5])
    assert space.is_valid([0.1, 0.1])
    assert not space.check_motion([0.1, 0.5], [0.9, 0.5])


def test_valid_sample_is_valid_and_seeded() -> None:
    a = _wall_space(seed=3)
    b = _wall_space(seed=3)
    for _ in range(20):
        s = a.valid_sample()
        assert a.is_valid(s)
        assert np.array_equal(s, b.valid_sample())


def test_sampling_exhausted_when_no_free_space() -> None:
    space = BoxStateSpace(
        [0.0, 0.0], [1.0, 1.0], [BoxObstacle((0.0, 0.0), (1.0, 1.0))], max_attempts=5
    )
    with pytest.raises(SamplingExhausted):
        space.valid_sample()
    with pytest.raises(SamplingExhausted):
        space.sample_near([0.5, 0.5], 0.1)


def test_sample_near_stays_within_radius() -> None:
    space = BoxStateSpace([0.0, 0.0], [1.0, 1.0], seed=0)
    centre = np.array([0.0, 0.5])
    for _ in range(50):
        s = space.sample_near(centre, 0.05)
        assert space.distance(centre, s) <= 0.05 + 1e-12
        assert space.satisfies_bounds(s)


def test_clone_free_accounting() -> None:
    space = BoxStateSpace([0.0, 0.0], [1.0, 1.0])
    src = np.array([0.3, 0.3])
    a = space.clone(src)
    b = space.clone(src)
    assert a is not src and a is not b
    assert space.live_states == 2
    src[0] = 0.9
    assert a[0] == pytest.approx(0.3)
    space.free(a)
    assert space.live_states == 1
    with pytest.raises(PreconditionViolation):
        space.free(a)
    with pytest.raises(PreconditionViolation):
        space.free(np.array([0.3, 0.3]))
    space.free(b)
    assert space.live_states == 0

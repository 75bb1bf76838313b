"""Pytest configuration for path setup, markers and scripted spaces."""

import sys
from collections import deque
from pathlib import Path

import numpy as np
import pytest

sys.path.append(str(Path(__file__).resolve().parent.parent))

from sparse_roadmap.common.errors import SamplingExhausted  # noqa: E402
from sparse_roadmap.common.telemetry import admission_registry  # noqa: E402
from sparse_roadmap.space.box import BoxStateSpace  # noqa: E402


def pytest_addoption(parser):
    parser.addoption(
        "--runslow", action="store_true", default=False, help="run tests marked as slow"
    )


def pytest_collection_modifyitems(config, items):
    if config.getoption("--runslow"):
        return
    skip_slow = pytest.mark.skip(reason="need --runslow to run slow tests")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


@pytest.fixture(autouse=True)
def reset_admission_stats():
    admission_registry.reset()
    yield
    admission_registry.reset()


class ScriptedSpace(BoxStateSpace):
    """Box space replaying queued samples instead of drawing random ones.

    ``valid_sample`` pops from ``samples`` and ``sample_near`` from ``near``;
    an empty queue raises :class:`SamplingExhausted`.
    """

    def __init__(self, low, high, obstacles=(), *, samples=(), near=(), **kwargs):
        super().__init__(low, high, obstacles, **kwargs)
        self.samples = deque(np.asarray(s, dtype=float) for s in samples)
        self.near = deque(np.asarray(s, dtype=float) for s in near)

    def valid_sample(self):
        if not self.samples:
            raise SamplingExhausted("script exhausted")
        return self.samples.popleft()

    def sample_near(self, near, radius):
        if not self.near:
            raise SamplingExhausted("script exhausted")
        return self.near.popleft()


@pytest.fixture
def scripted_space():
    """Factory for :class:`ScriptedSpace` instances."""

    return ScriptedSpace

# Copyright (c) 2025 Arne Deutsch, itemis AG, MIT License
"""Configuration-space port and the owned state handle."""

from .base import State, StateSpace
from .box import BoxObstacle, BoxStateSpace, CircleObstacle
from .safe_state import SafeState

__all__ = [
    "State",
    "StateSpace",
    "BoxObstacle",
    "BoxStateSpace",
    "CircleObstacle",
    "SafeState",
]

# Copyright (c) 2025 Arne Deutsch, itemis AG, MIT License
"""Nearest-neighbour indexes used to query guards near a state."""

from .neighbors import BruteForceNeighbors, KDTreeNeighbors, NearestNeighbors, make_neighbors

__all__ = ["NearestNeighbors", "BruteForceNeighbors", "KDTreeNeighbors", "make_neighbors"]

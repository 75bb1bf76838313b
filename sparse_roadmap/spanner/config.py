# Copyright (c) 2025 Arne Deutsch, itemis AG, MIT License
"""Planner configuration.

``SparsConfig`` is a structured config: it can be built directly, merged
from YAML files and dotlist overrides through :func:`load_config`, or
embedded in a Hydra config (see :mod:`sparse_roadmap.build`).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence

from omegaconf import DictConfig, OmegaConf


@dataclass
class SparsConfig:
    """Tunable parameters of the spanner planner."""

    # Spanner quality
    stretch_factor: float = 3.0
    # Visibility range of guards and interface support tolerance
    sparse_delta: float = 0.25
    dense_delta: float = 0.001
    # When set, override the absolute deltas as fractions of the space extent
    sparse_delta_fraction: Optional[float] = None
    dense_delta_fraction: Optional[float] = None

    # Termination heuristic: consecutive rejected samples
    max_failures: int = 5000
    # Support samples drawn per quality check; ``None`` means 2 * dimension
    near_sample_points: Optional[int] = None
    support_attempts: int = 20

    # Nearest neighbour backend: {"brute", "kdtree"}
    neighbors: str = "brute"
    kdtree_rebuild_threshold: int = 32

    # Path simplification budgets
    reduce_vertices_steps: int = 10
    shortcut_steps: int = 50

    # Optional NDJSON admission log directory
    provenance_dir: Optional[str] = None

    def __post_init__(self) -> None:
        if self.stretch_factor <= 1.0:
            raise ValueError("stretch_factor must be > 1")
        if self.sparse_delta <= 0.0 or self.dense_delta <= 0.0:
            raise ValueError("sparse_delta and dense_delta must be positive")
        for frac in (self.sparse_delta_fraction, self.dense_delta_fraction):
            if frac is not None and not 0.0 < frac <= 1.0:
                raise ValueError("delta fractions must be in (0, 1]")
        if self.max_failures < 0:
            raise ValueError("max_failures must be >= 0")
        if self.near_sample_points is not None and self.near_sample_points < 0:
            raise ValueError("near_sample_points must be >= 0")
        if self.support_attempts < 1:
            raise ValueError("support_attempts must be >= 1")
        if self.neighbors not in ("brute", "kdtree"):
            raise ValueError(f"Unknown nearest neighbour index: {self.neighbors}")


def load_config(
    path: Optional[str] = None,
    overrides: Optional[Sequence[str]] = None,
    base: Optional[Mapping[str, Any]] = None,
) -> SparsConfig:
    """Merge defaults, an optional YAML file, a mapping and dotlist overrides.

    Parameters
    ----------
    path:
        YAML file with ``SparsConfig`` keys.
    overrides:
        Dotlist entries such as ``["stretch_factor=2.5"]``.
    base:
        Mapping merged before ``overrides``.
    """

    cfg = OmegaConf.structured(SparsConfig)
    if path:
        cfg = OmegaConf.merge(cfg, OmegaConf.load(path))
    if base:
        cfg = OmegaConf.merge(cfg, base)
    if overrides:
        cfg = OmegaConf.merge(cfg, OmegaConf.from_dotlist(list(overrides)))
    return OmegaConf.to_object(cfg)


def coerce_config(config: SparsConfig | Mapping[str, Any] | DictConfig | None) -> SparsConfig:
    """Return ``config`` as a :class:`SparsConfig`."""

    if config is None:
        return SparsConfig()
    if isinstance(config, SparsConfig):
        return config
    if isinstance(config, DictConfig):
        return load_config(base=OmegaConf.to_container(config, resolve=True))
    return load_config(base=dict(config))


__all__ = ["SparsConfig", "load_config", "coerce_config"]

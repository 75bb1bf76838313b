# Copyright (c) 2025 Arne Deutsch, itemis AG, MIT License
"""Build a sparse roadmap for a box world from the command line.

The configuration is handled through `hydra` so that any field can be
overridden on the command line, e.g.
``python scripts/build_roadmap.py planner.stretch_factor=2.5 time_limit=5``.

Obstacles are given as a list of specs, either boxes
(``{kind: box, low: [..], high: [..]}``) or discs
(``{kind: circle, center: [..], radius: r}``). ``mode=roadmap`` only grows
the roadmap without a query. ``dry_run=true`` builds the world and the
planner and then exits.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import hydra
from hydra.core.config_store import ConfigStore
from omegaconf import OmegaConf

from sparse_roadmap.space.box import BoxObstacle, BoxStateSpace, CircleObstacle
from sparse_roadmap.spanner.config import SparsConfig
from sparse_roadmap.spanner.planner import ProblemDefinition, SolveResult, SparsTwo
from sparse_roadmap.spanner.termination import timed

logger = logging.getLogger(__name__)


@dataclass
class ObstacleSpec:
    kind: str = "box"  # {"box","circle"}
    low: List[float] = field(default_factory=list)
    high: List[float] = field(default_factory=list)
    center: List[float] = field(default_factory=list)
    radius: float = 0.0

    def build(self) -> BoxObstacle | CircleObstacle:
        if self.kind == "box":
            return BoxObstacle(self.low, self.high)
        if self.kind == "circle":
            return CircleObstacle(self.center, self.radius)
        raise ValueError(f"Unknown obstacle kind: {self.kind}")


@dataclass
class BuildConfig:
    """Configuration for a roadmap build."""

    # World
    low: List[float] = field(default_factory=lambda: [0.0, 0.0])
    high: List[float] = field(default_factory=lambda: [1.0, 1.0])
    obstacles: List[ObstacleSpec] = field(default_factory=list)
    resolution: float = 0.01
    seed: Optional[int] = 0

    # Query
    start: List[float] = field(default_factory=lambda: [0.05, 0.05])
    goal: List[float] = field(default_factory=lambda: [0.95, 0.95])
    mode: str = "solve"  # {"solve","roadmap"}
    time_limit: float = 10.0

    # Output
    outdir: Optional[str] = None
    dry_run: bool = False

    planner: SparsConfig = field(default_factory=SparsConfig)


# Register the config with Hydra so that `@hydra.main` can locate it.
ConfigStore.instance().store(name="build_roadmap_config", node=BuildConfig)


def make_space(cfg: BuildConfig) -> BoxStateSpace:
    """Instantiate the box world described by ``cfg``."""

    return BoxStateSpace(
        cfg.low,
        cfg.high,
        [spec.build() for spec in cfg.obstacles],
        resolution=cfg.resolution,
        seed=cfg.seed,
    )


def _summarise(planner: SparsTwo, result: Optional[SolveResult]) -> Dict[str, Any]:
    summary: Dict[str, Any] = {"status": "dry_run" if result is None else result.status.value}
    if result is not None:
        summary.update(iterations=result.iterations, additions=result.additions, failures=result.failures)
        if result.solution is not None:
            summary["cost"] = result.solution.cost
            summary["path"] = [state.tolist() for state in result.solution.states]
    summary["roadmap"] = planner.log_status()
    return summary


def build(cfg: BuildConfig) -> Dict[str, Any]:
    """Run the planner described by ``cfg`` and return a JSON-able summary."""

    if cfg.mode not in ("solve", "roadmap"):
        raise ValueError(f"Unknown mode: {cfg.mode}")
    space = make_space(cfg)
    planner = SparsTwo(space, cfg.planner)
    result: Optional[SolveResult] = None
    if not cfg.dry_run:
        ptc = timed(cfg.time_limit)
        if cfg.mode == "roadmap":
            result = planner.construct_roadmap(ptc)
        else:
            planner.set_problem_definition(ProblemDefinition([cfg.start], [cfg.goal]))
            result = planner.solve(ptc)
    summary = _summarise(planner, result)
    logger.info("build finished: %s with %d guards", summary["status"], summary["roadmap"]["milestones"])
    if cfg.outdir:
        out = Path(cfg.outdir)
        out.mkdir(parents=True, exist_ok=True)
        (out / "summary.json").write_text(json.dumps(summary, indent=2), encoding="utf-8")
    return summary


@hydra.main(config_name="build_roadmap_config", version_base=None)
def main(cfg: BuildConfig) -> None:  # pragma: no cover - thin wrapper
    """Hydra entry point."""

    logging.basicConfig(level=logging.INFO)
    build(OmegaConf.to_object(cfg))


def parse_args(args: Optional[List[str]] = None) -> BuildConfig:
    """Parse a list of Hydra style overrides into a :class:`BuildConfig`."""

    cfg = OmegaConf.structured(BuildConfig)
    cli_cfg = OmegaConf.from_cli(args or [])
    merged = OmegaConf.merge(cfg, cli_cfg)
    return OmegaConf.to_object(merged)


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    main()

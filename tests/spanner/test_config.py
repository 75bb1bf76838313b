# Copyright (c) 2025 Arne Deutsch, itemis AG, MIT License
import pytest
from omegaconf import OmegaConf

from sparse_roadmap.spanner import SparsConfig, coerce_config, load_config


def test_defaults_and_overrides(tmp_path) -> None:
    path = tmp_path / "planner.yaml"
    path.write_text("stretch_factor: 2.5\nneighbors: kdtree\n", encoding="utf-8")
    cfg = load_config(str(path), overrides=["max_failures=10"])
    assert isinstance(cfg, SparsConfig)
    assert cfg.stretch_factor == 2.5
    assert cfg.neighbors == "kdtree"
    assert cfg.max_failures == 10
    assert cfg.sparse_delta == SparsConfig().sparse_delta


@pytest.mark.parametrize(
    "override",
    [
        {"stretch_factor": 1.0},
        {"sparse_delta": 0.0},
        {"dense_delta_fraction": 1.5},
        {"max_failures": -1},
        {"support_attempts": 0},
        {"neighbors": "gnat"},
    ],
)
def test_invalid_values_raise(override) -> None:
    with pytest.raises(ValueError):
        coerce_config(override)


def test_coerce_accepts_dictconfig_and_none() -> None:
    assert coerce_config(None) == SparsConfig()
    cfg = coerce_config(OmegaConf.create({"dense_delta": 0.002}))
    assert cfg.dense_delta == 0.002
    same = SparsConfig(stretch_factor=4.0)
    assert coerce_config(same) is same

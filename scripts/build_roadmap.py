# Copyright (c) 2025 Arne Deutsch, itemis AG, MIT License
"""CLI wrapper for :mod:`sparse_roadmap.build`."""

from sparse_roadmap.build import BuildConfig, ObstacleSpec, build, main, parse_args

__all__ = ["BuildConfig", "ObstacleSpec", "build", "main", "parse_args"]


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    main()

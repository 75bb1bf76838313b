# Copyright (c) 2025 Arne Deutsch, itemis AG, MIT License
"""Sparse roadmap spanners over continuous configuration spaces."""

__all__ = ["__version__"]
__version__ = "0.0.1"

# Copyright (c) 2025 Arne Deutsch, itemis AG, MIT License
"""Thread-safe admission telemetry counters."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Dict

from .gates import AdmissionDecision


@dataclass
class AdmissionStats:
    """Counters for admission decisions of one telemetry key.

    Planners registered under the same name share one instance, so every
    update takes the instance lock.
    """

    attempts: int = 0
    accepted: int = 0
    rejected: int = 0
    sampling_failures: int = 0
    by_kind: Dict[str, int] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def record(self, decision: AdmissionDecision) -> None:
        """Add one evaluated sample."""

        with self._lock:
            self.attempts += 1
            if not decision.accepted:
                self.rejected += 1
                return
            self.accepted += 1
            if decision.kind is not None:
                key = decision.kind.value
                self.by_kind[key] = self.by_kind.get(key, 0) + 1

    def record_sampling_failure(self) -> None:
        with self._lock:
            self.sampling_failures += 1

    def reset(self) -> None:
        with self._lock:
            self.attempts = self.accepted = self.rejected = self.sampling_failures = 0
            self.by_kind.clear()

    def snapshot(self) -> Dict[str, int]:
        """Return flat counters including per-kind acceptances."""

        with self._lock:
            snap = {
                "attempts": self.attempts,
                "accepted": self.accepted,
                "rejected": self.rejected,
                "sampling_failures": self.sampling_failures,
            }
            for kind, count in sorted(self.by_kind.items()):
                snap[f"accepted_{kind}"] = count
        return snap


class StatsRegistry:
    """Thread-safe container for per-planner :class:`AdmissionStats`."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._stats: Dict[str, AdmissionStats] = {}

    def get(self, name: str) -> AdmissionStats:
        """Return stats object for ``name``, creating it on first use."""

        with self._lock:
            stats = self._stats.get(name)
            if stats is None:
                stats = self._stats[name] = AdmissionStats()
            return stats

    def reset(self) -> None:
        """Reset all counters to zero.

        Counters are zeroed in place so planners holding a reference keep
        reporting into the registry.
        """

        with self._lock:
            for stats in self._stats.values():
                stats.reset()

    def all_snapshots(self) -> Dict[str, Dict[str, int]]:
        """Return snapshots for all registered planners."""

        with self._lock:
            return {k: v.snapshot() for k, v in self._stats.items()}


# Track admission counters for all planners in the process.
admission_registry = StatsRegistry()

__all__ = ["AdmissionStats", "StatsRegistry", "admission_registry"]

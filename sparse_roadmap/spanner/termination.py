# Copyright (c) 2025 Arne Deutsch, itemis AG, MIT License
"""Cooperative termination conditions polled between solver iterations."""

from __future__ import annotations

import threading
import time
from typing import Callable


class TerminationCondition:
    """Callable returning ``True`` once planning should stop."""

    def __init__(self, check: Callable[[], bool], name: str = "custom") -> None:
        self._check = check
        self.name = name

    def __call__(self) -> bool:
        return bool(self._check())

    def __or__(self, other: "TerminationCondition") -> "TerminationCondition":
        return TerminationCondition(lambda: self() or other(), f"{self.name}|{other.name}")

    def __repr__(self) -> str:
        return f"TerminationCondition({self.name})"


def never() -> TerminationCondition:
    """Condition that never fires; the failure budget ends the run."""

    return TerminationCondition(lambda: False, "never")


def timed(seconds: float) -> TerminationCondition:
    """Condition firing ``seconds`` after creation."""

    deadline = time.monotonic() + seconds
    return TerminationCondition(lambda: time.monotonic() >= deadline, f"timed({seconds:g}s)")


def after_checks(n: int) -> TerminationCondition:
    """Condition allowing ``n`` polls before it fires."""

    calls = {"n": 0}

    def check() -> bool:
        calls["n"] += 1
        return calls["n"] > n

    return TerminationCondition(check, f"after_checks({n})")


def event(flag: threading.Event) -> TerminationCondition:
    """Condition firing once ``flag`` is set, e.g. from another thread."""

    return TerminationCondition(flag.is_set, "event")


__all__ = ["TerminationCondition", "never", "timed", "after_checks", "event"]

# Copyright (c) 2025 Arne Deutsch, itemis AG, MIT License
"""Guard types and admission decision records."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple


class GuardType(str, Enum):
    """Reason a guard was added to the spanner. Diagnostic only."""

    START = "start"
    GOAL = "goal"
    COVERAGE = "coverage"
    CONNECTIVITY = "connectivity"
    INTERFACE = "interface"
    QUALITY = "quality"


@dataclass
class AdmissionDecision:
    """Result of evaluating one sample against the admission criteria.

    Parameters
    ----------
    action : str
        ``"add_guard"``, ``"connect"`` or ``"reject"``.
    reason : str
        Human-readable explanation for the decision.
    kind : GuardType | None, optional
        Criterion that fired; ``None`` for rejections.
    guards : tuple[int, ...], optional
        Guards created or linked by the decision.
    score : float | None, optional
        Criterion specific measure, e.g. the violated stretch ratio.
    """

    action: str
    reason: str
    kind: GuardType | None = None
    guards: Tuple[int, ...] = field(default_factory=tuple)
    score: float | None = None

    @property
    def accepted(self) -> bool:
        """``True`` when the decision mutated the roadmap."""

        return self.action != "reject"


REJECT = "reject"


def rejection(reason: str) -> AdmissionDecision:
    """Return a rejecting :class:`AdmissionDecision`."""

    return AdmissionDecision(REJECT, reason)


__all__ = ["GuardType", "AdmissionDecision", "rejection", "REJECT"]

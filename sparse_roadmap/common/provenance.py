# Copyright (c) 2025 Arne Deutsch, itemis AG, MIT License
"""Structured logging for admission decisions."""

from __future__ import annotations

import json
import threading
import time
from pathlib import Path
from typing import Any, Dict

from .gates import AdmissionDecision


class ProvenanceLogger:
    """Append admission decisions to a line-delimited JSON file."""

    def __init__(self, outdir: str) -> None:
        """Create a logger writing to ``outdir/provenance.ndjson``."""

        self.path = Path(outdir) / "provenance.ndjson"
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def log(
        self,
        *,
        planner: str,
        action: str,
        reason: str,
        kind: str | None = None,
        payload: Dict[str, Any] | None = None,
        score: float | None = None,
    ) -> None:
        """Append a record with ``payload`` and metadata."""

        rec = {
            "ts": time.time(),
            "planner": planner,
            "action": action,
            "reason": reason,
            "kind": kind,
            "score": score,
            "payload": payload or {},
        }
        with self._lock, self.path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(rec) + "\n")


def log_admission(
    logger: "ProvenanceLogger | None",
    planner: str,
    decision: AdmissionDecision,
    payload: Dict[str, Any],
) -> None:
    """Log ``decision`` to ``logger`` if provided."""

    if logger is None:
        return
    logger.log(
        planner=planner,
        action=decision.action,
        reason=decision.reason,
        kind=decision.kind.value if decision.kind is not None else None,
        score=decision.score,
        payload={"guards": list(decision.guards), **payload},
    )


__all__ = ["ProvenanceLogger", "log_admission"]

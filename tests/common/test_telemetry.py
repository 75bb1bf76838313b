# Copyright (c) 2025 Arne Deutsch, itemis AG, MIT License
"""Tests for admission telemetry and provenance logging."""

import json
import threading

from sparse_roadmap.common import (
    AdmissionDecision,
    GuardType,
    ProvenanceLogger,
    StatsRegistry,
    log_admission,
    rejection,
)


def test_stats_record_and_reset_in_place() -> None:
    registry = StatsRegistry()
    stats = registry.get("p")
    stats.record(AdmissionDecision("add_guard", "no visible guard", GuardType.COVERAGE, (0,)))
    stats.record(AdmissionDecision("connect", "shortcut", GuardType.QUALITY, (1, 2)))
    stats.record(rejection("nothing to do"))
    snap = registry.all_snapshots()["p"]
    assert snap["attempts"] == 3
    assert snap["accepted"] == 2 and snap["rejected"] == 1
    assert snap["accepted_coverage"] == 1 and snap["accepted_quality"] == 1

    registry.reset()
    assert registry.get("p") is stats
    assert stats.snapshot() == {"attempts": 0, "accepted": 0, "rejected": 0, "sampling_failures": 0}


def test_provenance_appends_ndjson(tmp_path) -> None:
    logger = ProvenanceLogger(str(tmp_path / "prov"))
    decision = AdmissionDecision("add_guard", "joins 2 components", GuardType.CONNECTIVITY, (4, 0, 2), 2.0)
    log_admission(logger, "spars2", decision, {"visible": 3})
    log_admission(logger, "spars2", rejection("no criterion applies"), {"visible": 1})
    log_admission(None, "spars2", decision, {})

    lines = logger.path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    first = json.loads(lines[0])
    assert first["kind"] == "connectivity"
    assert first["payload"] == {"guards": [4, 0, 2], "visible": 3}
    assert json.loads(lines[1])["action"] == "reject"


def test_shared_stats_count_every_thread() -> None:
    registry = StatsRegistry()
    decision = AdmissionDecision("add_guard", "no visible guard", GuardType.COVERAGE, (0,))

    def run() -> None:
        stats = registry.get("shared")
        for _ in range(500):
            stats.record(decision)
            stats.record_sampling_failure()

    threads = [threading.Thread(target=run) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    snap = registry.get("shared").snapshot()
    assert snap["attempts"] == snap["accepted"] == snap["accepted_coverage"] == 2000
    assert snap["sampling_failures"] == 2000

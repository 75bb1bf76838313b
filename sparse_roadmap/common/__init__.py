# Copyright (c) 2025 Arne Deutsch, itemis AG, MIT License
"""Common decision types, errors and telemetry for the roadmap modules."""

from .errors import PreconditionViolation, RoadmapError, SamplingExhausted
from .gates import AdmissionDecision, GuardType, rejection
from .provenance import ProvenanceLogger, log_admission
from .telemetry import AdmissionStats, StatsRegistry, admission_registry

__all__ = [
    "RoadmapError",
    "SamplingExhausted",
    "PreconditionViolation",
    "GuardType",
    "AdmissionDecision",
    "rejection",
    "ProvenanceLogger",
    "log_admission",
    "AdmissionStats",
    "StatsRegistry",
    "admission_registry",
]

"""
Roro recommendation scoring and experimentation engine.

Single entry point for the engine package:
- models/: Event, ViewerContext, WeightVector, ScoreResult, telemetry records
- weights, scoring, reasons: five-factor ranking with explanations
- bucketing, experiment: deterministic sticky variant assignment
- metrics, significance, reporting: telemetry recording and CTR z-tests
- storage: ExperimentStore protocol and in-memory implementation
"""

from .bucketing import bucket, build_seed, stable_hash
from .config import DEFAULT_CONFIG, EngineConfig, resolve_config
from .errors import ExperimentConfigError, RoroError, StorageError
from .experiment import AssignmentOrigin, AssignmentResult, AssignmentSource, ExperimentAssigner
from .metrics import ClickResult, MetricsRecorder
from .models import (
    DEFAULT_WEIGHTS,
    Event,
    ScoreResult,
    ScoringMode,
    SubjectIdentity,
    ViewerContext,
    WeightVector,
)
from .reasons import ReasonTag, render_reasons
from .reporting import ExperimentReport, build_experiment_reports
from .scoring import rank
from .significance import SignificanceResult, compare, normal_cdf
from .storage import ExperimentStore, InMemoryExperimentStore
from .weights import normalize

__all__ = [
    "bucket",
    "build_seed",
    "stable_hash",
    "DEFAULT_CONFIG",
    "EngineConfig",
    "resolve_config",
    "ExperimentConfigError",
    "RoroError",
    "StorageError",
    "AssignmentOrigin",
    "AssignmentResult",
    "AssignmentSource",
    "ExperimentAssigner",
    "ClickResult",
    "MetricsRecorder",
    "DEFAULT_WEIGHTS",
    "Event",
    "ScoreResult",
    "ScoringMode",
    "SubjectIdentity",
    "ViewerContext",
    "WeightVector",
    "ReasonTag",
    "render_reasons",
    "ExperimentReport",
    "build_experiment_reports",
    "rank",
    "SignificanceResult",
    "compare",
    "normal_cdf",
    "ExperimentStore",
    "InMemoryExperimentStore",
    "normalize",
]

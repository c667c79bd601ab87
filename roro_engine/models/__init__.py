"""Typed records used across the engine: candidates, viewers, scores, telemetry."""

from .event import Event, ensure_events, parse_event_date
from .scoring import (
    DEFAULT_WEIGHTS,
    FACTOR_NAMES,
    FactorScores,
    ScoreResult,
    ScoringMode,
    WeightVector,
)
from .telemetry import (
    CLICK,
    EXPOSURE,
    Assignment,
    ClickRecord,
    DailyVariantClicks,
    ItemClickCount,
    TelemetryEvent,
    VariantStats,
    utcnow,
)
from .viewer import SubjectIdentity, SubjectScope, ViewerContext

__all__ = [
    "Event",
    "ensure_events",
    "parse_event_date",
    "DEFAULT_WEIGHTS",
    "FACTOR_NAMES",
    "FactorScores",
    "ScoreResult",
    "ScoringMode",
    "WeightVector",
    "CLICK",
    "EXPOSURE",
    "Assignment",
    "ClickRecord",
    "DailyVariantClicks",
    "ItemClickCount",
    "TelemetryEvent",
    "VariantStats",
    "utcnow",
    "SubjectIdentity",
    "SubjectScope",
    "ViewerContext",
]

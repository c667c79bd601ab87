"""
Experiment store abstraction.

The engine never talks to a database directly. Assignment lookups/upserts,
telemetry and click inserts, the recent-click lookup used for duplicate
suppression, and the aggregate queries behind reports all go through an
ExperimentStore. Implementations: in-memory (tests, local runs) and Firestore
(roro_server.services). Backends raise StorageError on failure.
"""

import threading
from collections import defaultdict
from datetime import datetime
from typing import Dict, List, Optional, Protocol, Tuple

from .models.telemetry import (
    CLICK,
    EXPOSURE,
    Assignment,
    ClickRecord,
    DailyVariantClicks,
    ItemClickCount,
    TelemetryEvent,
    VariantStats,
)
from .models.viewer import SubjectScope


class ExperimentStore(Protocol):
    """Protocol for assignment and telemetry persistence."""

    def fetch_assignment(
        self,
        experiment: str,
        scope: SubjectScope,
        subject_id: str,
    ) -> Optional[Assignment]:
        """Return the stored assignment for (experiment, scope, subject_id), or None."""
        ...

    def upsert_assignment(self, assignment: Assignment) -> None:
        """Insert or replace the assignment keyed by (experiment, scope, subject_id)."""
        ...

    def insert_telemetry(self, event: TelemetryEvent) -> None:
        """Append one telemetry event."""
        ...

    def insert_click(self, record: ClickRecord) -> None:
        """Append one click record."""
        ...

    def query_recent_click(self, item_id: str, subject_key: str) -> Optional[datetime]:
        """Timestamp of the latest click for (item_id, subject_key), or None."""
        ...

    def aggregate_variant_stats(
        self,
        experiment: Optional[str] = None,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
    ) -> List[VariantStats]:
        """Exposure/click counts per (experiment, variant), ordered by experiment then variant."""
        ...

    def click_counts(
        self,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
        limit: int = 100,
    ) -> List[ItemClickCount]:
        """Click counts per item within the range, most clicked first."""
        ...

    def daily_variant_clicks(
        self,
        experiment: str,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
    ) -> List[DailyVariantClicks]:
        """Click telemetry per (day, variant) for one experiment, ordered by day."""
        ...

    def ping(self) -> bool:
        """True when the backend is reachable."""
        ...


def _in_range(ts: datetime, since: Optional[datetime], until: Optional[datetime]) -> bool:
    if since is not None and ts < since:
        return False
    if until is not None and ts > until:
        return False
    return True


class InMemoryExperimentStore:
    """
    Experiment store kept in process memory (no persistence).
    Used for local runs, tests, and the default server configuration.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._assignments: Dict[Tuple[str, str, str], Assignment] = {}
        self._events: List[TelemetryEvent] = []
        self._clicks: List[ClickRecord] = []

    def fetch_assignment(
        self,
        experiment: str,
        scope: SubjectScope,
        subject_id: str,
    ) -> Optional[Assignment]:
        with self._lock:
            return self._assignments.get((experiment, SubjectScope(scope).value, subject_id))

    def upsert_assignment(self, assignment: Assignment) -> None:
        key = (assignment.experiment, assignment.scope.value, assignment.subject_id)
        with self._lock:
            self._assignments[key] = assignment

    def insert_telemetry(self, event: TelemetryEvent) -> None:
        with self._lock:
            self._events.append(event)

    def insert_click(self, record: ClickRecord) -> None:
        with self._lock:
            self._clicks.append(record)

    def query_recent_click(self, item_id: str, subject_key: str) -> Optional[datetime]:
        with self._lock:
            for rec in reversed(self._clicks):
                if rec.item_id == item_id and rec.subject_key == subject_key:
                    return rec.created_at
        return None

    def aggregate_variant_stats(
        self,
        experiment: Optional[str] = None,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
    ) -> List[VariantStats]:
        counts: Dict[Tuple[str, str], Dict[str, int]] = defaultdict(lambda: {EXPOSURE: 0, CLICK: 0})
        with self._lock:
            events = list(self._events)
        for ev in events:
            if experiment is not None and ev.experiment != experiment:
                continue
            if not _in_range(ev.created_at, since, until):
                continue
            bucket = counts[(ev.experiment, ev.variant)]
            if ev.event_name in (EXPOSURE, CLICK):
                bucket[ev.event_name] += 1
        return [
            VariantStats(experiment=exp, variant=var, exposures=c[EXPOSURE], clicks=c[CLICK])
            for (exp, var), c in sorted(counts.items())
        ]

    def click_counts(
        self,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
        limit: int = 100,
    ) -> List[ItemClickCount]:
        counts: Dict[str, int] = defaultdict(int)
        with self._lock:
            clicks = list(self._clicks)
        for rec in clicks:
            if _in_range(rec.created_at, since, until):
                counts[rec.item_id] += 1
        ranked = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
        return [ItemClickCount(item_id=i, clicks=n) for i, n in ranked[: max(0, limit)]]

    def daily_variant_clicks(
        self,
        experiment: str,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
    ) -> List[DailyVariantClicks]:
        counts: Dict[Tuple, int] = defaultdict(int)
        with self._lock:
            events = list(self._events)
        for ev in events:
            if ev.experiment != experiment or ev.event_name != CLICK:
                continue
            if _in_range(ev.created_at, since, until):
                counts[(ev.created_at.date(), ev.variant)] += 1
        return [
            DailyVariantClicks(day=day, variant=var, clicks=n)
            for (day, var), n in sorted(counts.items())
        ]

    def ping(self) -> bool:
        return True

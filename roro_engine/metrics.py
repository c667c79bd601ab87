"""
Telemetry recording: clicks on recommendations and experiment events.

Clicks for the same (item, subject) within the duplicate window collapse to
one stored row. The check-then-insert is not atomic; a burst of concurrent
duplicates may store a few extra rows, which reports tolerate.

Reads from the store propagate errors; failed inserts are logged and reported
as not stored so the user-facing request still succeeds.
"""

import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Callable, List, Optional, Tuple

from pydantic import BaseModel

from .config import EngineConfig, resolve_config
from .errors import StorageError
from .models.telemetry import (
    CLICK,
    ClickRecord,
    DailyVariantClicks,
    ItemClickCount,
    TelemetryEvent,
    VariantStats,
    utcnow,
)
from .models.viewer import SubjectIdentity
from .sanitize import sanitize_key, sanitize_text
from .storage import ExperimentStore

logger = logging.getLogger(__name__)

CLICK_CONTEXT = "recommend-events-hit"
CLICK_REPORT_DAYS = 7
VARIANT_REPORT_DAYS = 30


class ClickResult(BaseModel):
    stored: bool
    duplicate: bool
    window_seconds: float


def day_range(
    since: Optional[date],
    until: Optional[date],
    default_days: int,
    now: Optional[datetime] = None,
) -> Tuple[datetime, datetime]:
    """Inclusive UTC datetime range covering whole days; defaults to the last default_days."""
    now = now or utcnow()
    until = until or now.date()
    since = since or (now - timedelta(days=default_days)).date()
    start = datetime.combine(since, time.min, tzinfo=timezone.utc)
    end = datetime.combine(until, time.max, tzinfo=timezone.utc)
    return start, end


class MetricsRecorder:
    """Records clicks and experiment telemetry through an ExperimentStore."""

    def __init__(
        self,
        store: ExperimentStore,
        config: Optional[EngineConfig] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.config = resolve_config(config)
        self.clock = clock

    @property
    def window_seconds(self) -> float:
        return self.config.duplicate_window_seconds

    def is_duplicate(self, item_id: str, subject: SubjectIdentity, now: datetime) -> bool:
        recent = self.store.query_recent_click(item_id, subject.subject_key)
        if recent is None:
            return False
        return (now - recent).total_seconds() <= self.window_seconds

    def record_click(
        self,
        item_id: str,
        subject: SubjectIdentity,
        context: str = "",
        experiment: Optional[str] = None,
        variant: Optional[str] = None,
    ) -> ClickResult:
        """
        Store a click unless the same subject clicked the same item within the window.

        When experiment and variant are both given, a stored click also appends
        a "click" telemetry event for that variant.
        """
        item_id = str(item_id).strip()
        if not item_id:
            raise ValueError("item_id is required")
        now = self.clock()
        if self.is_duplicate(item_id, subject, now):
            logger.debug("[click] duplicate item=%s subject=%s", item_id, subject.subject_key)
            return ClickResult(stored=False, duplicate=True, window_seconds=self.window_seconds)

        record = ClickRecord(
            item_id=item_id,
            subject_key=subject.subject_key,
            user_id=subject.user_id,
            session_id=subject.session_id,
            context=sanitize_text(context, self.config.max_context_length),
            created_at=now,
        )
        try:
            self.store.insert_click(record)
        except StorageError as e:
            logger.warning("[click] insert failed item=%s subject=%s: %s", item_id, subject.subject_key, e)
            return ClickResult(stored=False, duplicate=False, window_seconds=self.window_seconds)

        exp = sanitize_key(experiment, self.config.max_key_length)
        var = sanitize_key(variant, self.config.max_key_length)
        if exp and var:
            self.record_event(exp, var, subject, CLICK, 1.0, CLICK_CONTEXT)
        return ClickResult(stored=True, duplicate=False, window_seconds=self.window_seconds)

    def record_event(
        self,
        experiment: str,
        variant: str,
        subject: SubjectIdentity,
        event_name: str,
        value: float = 1.0,
        context: str = "",
    ) -> bool:
        """Append one experiment event. No suppression. Returns False if the insert failed."""
        exp = sanitize_key(experiment, self.config.max_key_length)
        var = sanitize_key(variant, self.config.max_key_length)
        name = sanitize_key(event_name, self.config.max_key_length)
        if not (exp and var and name):
            raise ValueError("experiment, variant and event_name are required")
        event = TelemetryEvent(
            experiment=exp,
            variant=var,
            subject_key=subject.subject_key,
            user_id=subject.user_id,
            session_id=subject.session_id,
            event_name=name,
            value=float(value),
            context=sanitize_text(context, self.config.max_context_length),
            created_at=self.clock(),
        )
        try:
            self.store.insert_telemetry(event)
        except StorageError as e:
            logger.warning("[event] insert failed experiment=%s variant=%s event=%s: %s", exp, var, name, e)
            return False
        return True

    def click_report(
        self,
        since: Optional[date] = None,
        until: Optional[date] = None,
        limit: int = 100,
    ) -> List[ItemClickCount]:
        start, end = day_range(since, until, CLICK_REPORT_DAYS, self.clock())
        return self.store.click_counts(start, end, limit)

    def variant_stats(
        self,
        experiment: Optional[str] = None,
        since: Optional[date] = None,
        until: Optional[date] = None,
    ) -> List[VariantStats]:
        start, end = day_range(since, until, VARIANT_REPORT_DAYS, self.clock())
        exp = sanitize_key(experiment, self.config.max_key_length) or None
        return self.store.aggregate_variant_stats(exp, start, end)

    def daily_variant_clicks(
        self,
        experiment: str,
        since: Optional[date] = None,
        until: Optional[date] = None,
    ) -> List[DailyVariantClicks]:
        start, end = day_range(since, until, VARIANT_REPORT_DAYS, self.clock())
        return self.store.daily_variant_clicks(sanitize_key(experiment, self.config.max_key_length), start, end)

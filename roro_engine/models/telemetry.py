"""
Telemetry model: persisted assignment/event/click rows and derived aggregates.

Persisted (append-only except Assignment, which is upserted):
- Assignment: sticky variant for (experiment, scope, subject_id)
- TelemetryEvent: exposure / click / custom experiment events
- ClickRecord: a click on a recommended item, used for de-duplication and reports

Derived at query time (never stored):
- VariantStats, ItemClickCount, DailyVariantClicks
"""

from datetime import date, datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field

from .viewer import SubjectScope

EXPOSURE = "exposure"
CLICK = "click"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Assignment(BaseModel):
    experiment: str
    scope: SubjectScope
    subject_id: str
    variant: str
    assigned_at: datetime = Field(default_factory=utcnow)


class TelemetryEvent(BaseModel):
    experiment: str
    variant: str
    subject_key: str
    user_id: Optional[str] = None
    session_id: Optional[str] = None
    event_name: str
    value: float = 1.0
    context: str = ""
    created_at: datetime = Field(default_factory=utcnow)


class ClickRecord(BaseModel):
    item_id: str
    subject_key: str
    user_id: Optional[str] = None
    session_id: Optional[str] = None
    context: str = ""
    created_at: datetime = Field(default_factory=utcnow)


class VariantStats(BaseModel):
    """Exposure and click counts for one variant of one experiment."""

    experiment: str
    variant: str
    exposures: int = 0
    clicks: int = 0

    @property
    def ctr(self) -> float:
        return self.clicks / self.exposures if self.exposures > 0 else 0.0


class ItemClickCount(BaseModel):
    item_id: str
    clicks: int


class DailyVariantClicks(BaseModel):
    day: date
    variant: str
    clicks: int

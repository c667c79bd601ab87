"""
Event model: a read-only candidate item supplied per scoring request.

Built from API/storage dicts via Event.model_validate(d) or ensure_events().
Aggregate counters (favorites, clicks) are computed upstream.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


def parse_event_date(value: Any) -> Optional[datetime]:
    """Parse an ISO datetime or YYYY-MM-DD string. Returns None when absent or unparseable."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        try:
            dt = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


class Event(BaseModel):
    """
    Candidate event for ranking.

    id: unique item id (numeric ids are coerced to strings).
    name: display name; also the tie-break key when scores are equal.
    region: prefecture the event is held in, used for proximity.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str = ""
    category: str = ""
    region: str = ""
    event_date: Optional[datetime] = None
    favorite_count: int = Field(0, ge=0)
    click_count: int = Field(0, ge=0)

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, v):
        if isinstance(v, bool):
            raise ValueError("id must be a string or integer")
        return str(v).strip() if isinstance(v, (int, str)) else v

    @field_validator("name", "category", "region", mode="before")
    @classmethod
    def _none_to_empty(cls, v):
        return "" if v is None else v

    @field_validator("event_date", mode="before")
    @classmethod
    def _parse_date(cls, v):
        return parse_event_date(v)


def ensure_events(items: List[Union[Dict[str, Any], "Event"]]) -> List["Event"]:
    """Convert list of dicts or Events to list of Event models."""
    return [Event.model_validate(e) if isinstance(e, dict) else e for e in items]

"""Recommendation and click Pydantic models."""

from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from roro_engine.models.event import Event


class ViewerIn(BaseModel):
    favorited_categories: List[str] = []
    home_region: Optional[str] = None
    excluded_item_ids: List[str] = []

    @field_validator("excluded_item_ids", mode="before")
    @classmethod
    def _coerce_ids(cls, v):
        return [str(x) for x in (v or [])]


class RecommendRequest(BaseModel):
    candidates: List[Event] = []
    viewer: ViewerIn = ViewerIn()
    # Keys: similarity/history/recency/popularity/proximity (or w_ prefixed)
    weights: Optional[Dict[str, Any]] = None
    limit: Optional[int] = None
    locale: Optional[str] = None


class RecommendationItem(BaseModel):
    id: str
    name: str = ""
    score: float
    reason: str
    reasons: List[str] = []
    factors: Dict[str, float] = {}


class RecommendResponse(BaseModel):
    results: List[RecommendationItem]
    mode: str
    weights: Dict[str, float]


class ClickRequest(BaseModel):
    item_id: str
    experiment: Optional[str] = None
    variant: Optional[str] = None
    context: Optional[str] = None

    @field_validator("item_id", mode="before")
    @classmethod
    def _coerce_item_id(cls, v):
        return str(v) if isinstance(v, int) and not isinstance(v, bool) else v


class ClickResponse(BaseModel):
    ok: bool = True
    stored: bool
    duplicate: bool
    suppressed_window_sec: float


class ItemClicks(BaseModel):
    item_id: str
    clicks: int


class ClickReportResponse(BaseModel):
    ok: bool = True
    since: date
    until: date
    rows: List[ItemClicks]
    limit: int = Field(100, ge=0)

"""Pydantic request/response models for the API."""

from .experiments import (
    AssignRequest,
    AssignResponse,
    DailyClicks,
    DailyClicksResponse,
    EventRequest,
    ReportResponse,
    SignificanceRequest,
    SignificanceResponse,
)
from .recommendations import (
    ClickReportResponse,
    ClickRequest,
    ClickResponse,
    ItemClicks,
    RecommendationItem,
    RecommendRequest,
    RecommendResponse,
    ViewerIn,
)

__all__ = [
    "AssignRequest",
    "AssignResponse",
    "DailyClicks",
    "DailyClicksResponse",
    "EventRequest",
    "ReportResponse",
    "SignificanceRequest",
    "SignificanceResponse",
    "ClickReportResponse",
    "ClickRequest",
    "ClickResponse",
    "ItemClicks",
    "RecommendationItem",
    "RecommendRequest",
    "RecommendResponse",
    "ViewerIn",
]

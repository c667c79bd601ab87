"""A/B experiment Pydantic models."""

from datetime import date
from typing import List, Optional, Union

from pydantic import BaseModel, Field

from roro_engine.reporting import ExperimentReport
from roro_engine.significance import SignificanceResult


class AssignRequest(BaseModel):
    experiment: str
    # List of names or a comma-separated string ("a,b")
    variants: Union[List[str], str]
    split: Optional[int] = None


class AssignResponse(BaseModel):
    ok: bool = True
    experiment: str
    variant: str
    source: str
    origin: str


class EventRequest(BaseModel):
    experiment: str
    variant: str
    event_name: str
    value: float = 1.0
    context: Optional[str] = None


class SignificanceRequest(BaseModel):
    n1: int = Field(..., ge=0, description="exposures, variant 1")
    c1: int = Field(..., ge=0, description="clicks, variant 1")
    n2: int = Field(..., ge=0, description="exposures, variant 2")
    c2: int = Field(..., ge=0, description="clicks, variant 2")


class SignificanceResponse(SignificanceResult):
    pass


class ReportResponse(BaseModel):
    ok: bool = True
    since: date
    until: date
    experiments: List[ExperimentReport]


class DailyClicks(BaseModel):
    day: date
    variant: str
    clicks: int


class DailyClicksResponse(BaseModel):
    ok: bool = True
    experiment: str
    since: date
    until: date
    rows: List[DailyClicks]

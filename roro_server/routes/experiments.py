"""A/B testing endpoints: assignment, events, significance and reports."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response

from roro_engine.metrics import VARIANT_REPORT_DAYS, day_range
from roro_engine.models.viewer import SubjectIdentity
from roro_engine.reporting import build_experiment_reports
from roro_engine.sanitize import sanitize_date, sanitize_key
from roro_engine.significance import compare

from ..identity import ab_cookie_name, resolve_subject, set_cookie
from ..models import (
    AssignRequest,
    AssignResponse,
    DailyClicks,
    DailyClicksResponse,
    EventRequest,
    ReportResponse,
    SignificanceRequest,
    SignificanceResponse,
)
from ..state import get_state

router = APIRouter()


@router.post("/assign", response_model=AssignResponse)
def assign_variant(
    request: AssignRequest,
    http_request: Request,
    response: Response,
    subject: SubjectIdentity = Depends(resolve_subject),
):
    """Return a sticky variant for the subject, creating one (and an exposure) on first visit."""
    state = get_state()
    experiment = sanitize_key(request.experiment, state.engine_config.max_key_length)
    sticky_token = http_request.cookies.get(ab_cookie_name(experiment)) if experiment else None
    result = state.assigner.assign(
        subject,
        request.experiment,
        request.variants,
        split=request.split,
        sticky_token=sticky_token,
    )
    set_cookie(response, ab_cookie_name(result.experiment), result.variant)
    return AssignResponse(
        experiment=result.experiment,
        variant=result.variant,
        source=result.source.value,
        origin=result.origin.value,
    )


@router.post("/event")
def record_event(
    request: EventRequest,
    subject: SubjectIdentity = Depends(resolve_subject),
):
    """Append a generic experiment event (no duplicate suppression)."""
    state = get_state()
    stored = state.recorder.record_event(
        request.experiment,
        request.variant,
        subject,
        request.event_name,
        request.value,
        request.context or "",
    )
    return {"ok": True, "stored": stored}


@router.post("/significance", response_model=SignificanceResponse)
def significance(request: SignificanceRequest):
    """Two-proportion z-test from aggregated exposure/click counts."""
    alpha = get_state().engine_config.significance_alpha
    result = compare(request.n1, request.c1, request.n2, request.c2, alpha)
    return SignificanceResponse(**result.model_dump())


@router.get("/report", response_model=ReportResponse)
def experiment_report(
    experiment: Optional[str] = Query(None),
    since: Optional[str] = Query(None, description="YYYY-MM-DD"),
    until: Optional[str] = Query(None, description="YYYY-MM-DD"),
):
    """Exposures, clicks and CTR per variant; z-test for two-variant experiments (default: last 30 days)."""
    state = get_state()
    start, end = day_range(sanitize_date(since), sanitize_date(until), VARIANT_REPORT_DAYS, state.recorder.clock())
    stats = state.recorder.variant_stats(experiment, start.date(), end.date())
    reports = build_experiment_reports(stats, state.engine_config.significance_alpha)
    return ReportResponse(since=start.date(), until=end.date(), experiments=reports)


@router.get("/daily", response_model=DailyClicksResponse)
def daily_clicks(
    experiment: str = Query(...),
    since: Optional[str] = Query(None, description="YYYY-MM-DD"),
    until: Optional[str] = Query(None, description="YYYY-MM-DD"),
):
    """Click events per day and variant for one experiment."""
    state = get_state()
    start, end = day_range(sanitize_date(since), sanitize_date(until), VARIANT_REPORT_DAYS, state.recorder.clock())
    rows = state.recorder.daily_variant_clicks(experiment, start.date(), end.date())
    return DailyClicksResponse(
        experiment=sanitize_key(experiment, state.engine_config.max_key_length),
        since=start.date(),
        until=end.date(),
        rows=[DailyClicks(day=r.day, variant=r.variant, clicks=r.clicks) for r in rows],
    )

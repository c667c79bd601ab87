"""Recommendation, click and click-report endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from roro_engine.metrics import CLICK_REPORT_DAYS, day_range
from roro_engine.models.scoring import ScoringMode
from roro_engine.models.viewer import SubjectIdentity, ViewerContext
from roro_engine.sanitize import sanitize_date
from roro_engine.scoring import rank
from roro_engine.weights import normalize

from ..identity import resolve_subject
from ..models import (
    ClickReportResponse,
    ClickRequest,
    ClickResponse,
    ItemClicks,
    RecommendationItem,
    RecommendRequest,
    RecommendResponse,
)
from ..state import get_state

router = APIRouter()


@router.post("/recommendations", response_model=RecommendResponse)
def get_recommendations(
    request: RecommendRequest,
    subject: SubjectIdentity = Depends(resolve_subject),
):
    """Rank the supplied candidates for the current viewer. Supplying `weights` selects the configurable mode."""
    state = get_state()
    engine_config = state.engine_config
    if request.weights is not None:
        mode = ScoringMode.CONFIGURABLE
        weights = normalize(request.weights, engine_config.default_weights)
    else:
        mode = ScoringMode.DEFAULT
        weights = engine_config.default_weights
    limit = request.limit if request.limit is not None else engine_config.default_limit
    limit = min(limit, engine_config.max_limit)

    ctx = ViewerContext(
        subject=subject,
        favorited_categories=request.viewer.favorited_categories,
        home_region=request.viewer.home_region,
        excluded_item_ids=request.viewer.excluded_item_ids,
    )
    results = rank(
        request.candidates,
        ctx,
        weights=weights,
        limit=limit,
        mode=mode,
        locale=request.locale,
        config=engine_config,
    )
    return RecommendResponse(
        results=[
            RecommendationItem(
                id=r.id,
                name=r.name,
                score=r.score,
                reason=r.reason,
                reasons=r.reasons,
                factors={k: round(v, 4) for k, v in r.factors.as_dict().items()},
            )
            for r in results
        ],
        mode=mode.value,
        weights=weights.as_dict(),
    )


@router.post("/recommendations/hit", response_model=ClickResponse)
def record_recommendation_hit(
    request: ClickRequest,
    subject: SubjectIdentity = Depends(resolve_subject),
):
    """Record a click on a recommended item, suppressing repeats within the window."""
    state = get_state()
    result = state.recorder.record_click(
        request.item_id,
        subject,
        context=request.context or "",
        experiment=request.experiment,
        variant=request.variant,
    )
    return ClickResponse(
        stored=result.stored,
        duplicate=result.duplicate,
        suppressed_window_sec=result.window_seconds,
    )


@router.get("/recommendations/report", response_model=ClickReportResponse)
def click_report(
    since: Optional[str] = Query(None, description="YYYY-MM-DD"),
    until: Optional[str] = Query(None, description="YYYY-MM-DD"),
    limit: int = Query(100, ge=0, le=1000),
):
    """Clicks per recommended item within a date range (default: last 7 days)."""
    state = get_state()
    since_d, until_d = sanitize_date(since), sanitize_date(until)
    start, end = day_range(since_d, until_d, CLICK_REPORT_DAYS, state.recorder.clock())
    rows = state.recorder.click_report(start.date(), end.date(), limit)
    return ClickReportResponse(
        since=start.date(),
        until=end.date(),
        rows=[ItemClicks(item_id=r.item_id, clicks=r.clicks) for r in rows],
        limit=limit,
    )

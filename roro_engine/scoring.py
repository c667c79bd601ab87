"""
Candidate ranking: five-factor blended scoring with explanations.

score = w_similarity * similarity + w_history * history + w_recency * recency
      + w_popularity * popularity + w_proximity * proximity

Max favorite/click counts are computed per call over the candidate set after
exclusions; nothing is cached between calls.
"""

import logging
from datetime import datetime
from typing import List, Optional, Sequence

from .config import EngineConfig, resolve_config
from .models.event import Event
from .models.scoring import FactorScores, ScoreResult, ScoringMode, WeightVector
from .models.telemetry import utcnow
from .models.viewer import ViewerContext
from .reasons import reason_tags, render_reasons

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400.0
SCORE_DECIMALS = 4


def days_since(event_date: Optional[datetime], now: datetime) -> Optional[float]:
    """Fractional days between event_date and now (negative for future events)."""
    if event_date is None:
        return None
    return (now - event_date).total_seconds() / SECONDS_PER_DAY


def recency_score(days_old: Optional[float], window_days: float = 30.0) -> float:
    """1 / (1 + days/window); 0 without a date, 1 for upcoming events."""
    if days_old is None:
        return 0.0
    return 1.0 / (1.0 + max(0.0, days_old) / window_days)


def similarity_score(category: str, favorited_categories: Sequence[str]) -> float:
    if not category or not favorited_categories:
        return 0.0
    return 1.0 if category in favorited_categories else 0.0


def proximity_score(region: str, home_region: Optional[str]) -> float:
    event_region = (region or "").strip()
    viewer_region = (home_region or "").strip()
    if not event_region or not viewer_region:
        return 0.0
    return 1.0 if event_region.casefold() == viewer_region.casefold() else 0.0


def compute_factors(
    event: Event,
    ctx: ViewerContext,
    max_favorite: int,
    max_click: int,
    now: datetime,
    config: EngineConfig,
) -> FactorScores:
    """Factor values for one candidate. max_* must already be >= 1."""
    return FactorScores(
        similarity=similarity_score(event.category, ctx.favorited_categories),
        history=event.click_count / max_click,
        recency=recency_score(days_since(event.event_date, now), config.recency_window_days),
        popularity=event.favorite_count / max_favorite,
        proximity=proximity_score(event.region, ctx.home_region),
    )


def filter_excluded(candidates: Sequence[Event], ctx: ViewerContext) -> List[Event]:
    """Drop candidates the viewer has already favorited."""
    excluded = set(ctx.excluded_item_ids)
    return [ev for ev in candidates if ev.id not in excluded]


def rank(
    candidates: Sequence[Event],
    ctx: ViewerContext,
    weights: Optional[WeightVector] = None,
    limit: Optional[int] = None,
    mode: ScoringMode = ScoringMode.DEFAULT,
    now: Optional[datetime] = None,
    locale: Optional[str] = None,
    config: Optional[EngineConfig] = None,
) -> List[ScoreResult]:
    """
    Rank candidates for a viewer and return at most `limit` results.

    Sorted by rounded score descending, then name, then id, so identical
    inputs always produce identical output. Empty input gives an empty list.
    """
    config = resolve_config(config)
    weights = weights or config.default_weights
    limit = config.default_limit if limit is None else limit
    locale = locale or config.default_locale
    now = now or utcnow()
    if limit < 1:
        return []

    pool = filter_excluded(candidates, ctx)
    if not pool:
        return []

    max_favorite = max(ev.favorite_count for ev in pool) or 1
    max_click = max(ev.click_count for ev in pool) or 1
    authenticated = ctx.is_authenticated

    results: List[ScoreResult] = []
    for ev in pool:
        factors = compute_factors(ev, ctx, max_favorite, max_click, now, config)
        score = min(1.0, max(0.0, factors.weighted_sum(weights)))
        tags = reason_tags(factors, weights, mode, authenticated=authenticated)
        results.append(
            ScoreResult(
                id=ev.id,
                name=ev.name,
                score=round(score, SCORE_DECIMALS),
                factors=factors,
                reasons=[t.value for t in tags],
                reason=render_reasons(tags, locale),
            )
        )

    results.sort(key=lambda r: (-r.score, r.name, r.id))
    logger.debug(
        "[rank] mode=%s candidates=%d scored=%d returned=%d",
        mode.value, len(candidates), len(results), min(limit, len(results)),
    )
    return results[:limit]

"""
Reason tags for recommendation explainability, and their rendering.

Scoring produces an ordered list of ReasonTag values; render_reasons() maps
them to a single human-readable string for a locale.
"""

from enum import Enum
from typing import Dict, Iterable, List

from .models.scoring import FactorScores, ScoringMode, WeightVector


class ReasonTag(str, Enum):
    NOT_YET_FAVORITED = "not_yet_favorited"
    POPULAR = "popular"
    FREQUENTLY_CLICKED = "frequently_clicked"
    NEW_EVENT = "new_event"
    MATCHES_INTERESTS = "matches_interests"
    NEARBY = "nearby"
    FALLBACK = "fallback"


# Factor -> tag, in the order reasons are listed.
FACTOR_TAGS = (
    ("popularity", ReasonTag.POPULAR),
    ("history", ReasonTag.FREQUENTLY_CLICKED),
    ("recency", ReasonTag.NEW_EVENT),
    ("similarity", ReasonTag.MATCHES_INTERESTS),
    ("proximity", ReasonTag.NEARBY),
)

# DEFAULT mode: a factor is notable at or above its threshold. Similarity
# has none here; interest matches are only called out in CONFIGURABLE mode.
DEFAULT_THRESHOLDS: Dict[str, float] = {
    "popularity": 0.6,
    "history": 0.5,
    "recency": 0.5,
    "proximity": 0.5,
}

# CONFIGURABLE mode: notable when factor * weight >= ratio * weight.
CONFIGURABLE_RATIO = 0.3

_LOCALES: Dict[str, Dict] = {
    "ja": {
        ReasonTag.NOT_YET_FAVORITED: "まだお気に入りに追加していません",
        ReasonTag.POPULAR: "人気度が高い",
        ReasonTag.FREQUENTLY_CLICKED: "多くクリックされている",
        ReasonTag.NEW_EVENT: "新しいイベント",
        ReasonTag.MATCHES_INTERESTS: "あなたの興味に関連しています",
        ReasonTag.NEARBY: "近くで開催されます",
        ReasonTag.FALLBACK: "人気度と開催日からおすすめしています",
        "separator": "、",
        "suffix": "ためおすすめしています",
        "prefix": "",
    },
    "en": {
        ReasonTag.NOT_YET_FAVORITED: "not in your favorites yet",
        ReasonTag.POPULAR: "popular",
        ReasonTag.FREQUENTLY_CLICKED: "frequently clicked",
        ReasonTag.NEW_EVENT: "a recent event",
        ReasonTag.MATCHES_INTERESTS: "related to your interests",
        ReasonTag.NEARBY: "held near you",
        ReasonTag.FALLBACK: "recommended for its popularity and date",
        "separator": ", ",
        "suffix": "",
        "prefix": "Recommended because it is ",
    },
}

DEFAULT_LOCALE = "ja"


def _is_notable(name: str, value: float, weights: WeightVector, mode: ScoringMode) -> bool:
    if mode == ScoringMode.CONFIGURABLE:
        weight = getattr(weights, name)
        return weight > 0 and value * weight >= CONFIGURABLE_RATIO * weight
    threshold = DEFAULT_THRESHOLDS.get(name)
    return threshold is not None and value >= threshold


def reason_tags(
    factors: FactorScores,
    weights: WeightVector,
    mode: ScoringMode = ScoringMode.DEFAULT,
    authenticated: bool = False,
) -> List[ReasonTag]:
    """
    Ordered, de-duplicated reason tags for one candidate.

    Authenticated viewers get NOT_YET_FAVORITED first (favorited items are
    excluded upstream). FALLBACK is used when no factor is notable.
    """
    tags: List[ReasonTag] = []
    if authenticated:
        tags.append(ReasonTag.NOT_YET_FAVORITED)
    values = factors.as_dict()
    notable = [tag for name, tag in FACTOR_TAGS if _is_notable(name, values[name], weights, mode)]
    tags.extend(notable or [ReasonTag.FALLBACK])
    return _dedupe(tags)


def _dedupe(tags: Iterable[ReasonTag]) -> List[ReasonTag]:
    seen = set()
    out = []
    for t in tags:
        if t not in seen:
            seen.add(t)
            out.append(t)
    return out


def render_reasons(tags: Iterable[ReasonTag], locale: str = DEFAULT_LOCALE) -> str:
    """Join tags into one sentence using the locale's strings (unknown locale -> ja)."""
    strings = _LOCALES.get((locale or "").lower()[:2], _LOCALES[DEFAULT_LOCALE])
    parts = [strings[ReasonTag(t)] for t in _dedupe(tags)]
    if not parts:
        return ""
    return strings["prefix"] + strings["separator"].join(parts) + strings["suffix"]


def supported_locales() -> List[str]:
    return sorted(_LOCALES)

"""
Weight normalization for the five scoring factors.

Caller overrides merge onto the default vector, then the merged vector is
L1-normalized so it sums to 1.0. When nothing usable is supplied, or the
merged sum is not positive, the defaults are returned unchanged.
"""

import math
from typing import Any, Dict, Mapping, Optional

from .models.scoring import DEFAULT_WEIGHTS, FACTOR_NAMES, WeightVector

# Query-string style prefix accepted for each key (w_recency, w_popularity, ...)
QUERY_PREFIX = "w_"


def parse_weight(value: Any) -> Optional[float]:
    """Return value as a finite non-negative float, or None if it is not usable."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        f = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(f) or f < 0:
        return None
    return f


def _override_for(raw: Mapping[str, Any], name: str) -> Optional[float]:
    if name in raw:
        parsed = parse_weight(raw[name])
        if parsed is not None:
            return parsed
    return parse_weight(raw.get(QUERY_PREFIX + name))


def normalize(
    raw: Optional[Mapping[str, Any]],
    defaults: WeightVector = DEFAULT_WEIGHTS,
) -> WeightVector:
    """
    Merge raw overrides onto defaults and L1-normalize.

    Invalid, negative, or absent entries keep their default value. Returns
    defaults unchanged when no override applies or the merged sum is <= 0.
    """
    if not raw:
        return defaults
    merged: Dict[str, float] = defaults.as_dict()
    applied = False
    for name in FACTOR_NAMES:
        override = _override_for(raw, name)
        if override is not None:
            merged[name] = override
            applied = True
    if not applied:
        return defaults
    total = sum(merged.values())
    if total <= 0 or not math.isfinite(total):
        return defaults
    return WeightVector(**{name: value / total for name, value in merged.items()})

"""
Scoring model: weight vector, per-candidate factors, and ranked results.

Contains:
- WeightVector: the five factor weights (validated to sum to 1.0)
- FactorScores: raw factor values for one candidate, each in [0, 1]
- ScoreResult: one ranked recommendation with its reasons
- ScoringMode: which reason thresholds apply
"""

from enum import Enum
from typing import Dict, List

from pydantic import BaseModel, Field, model_validator

FACTOR_NAMES = ("similarity", "history", "recency", "popularity", "proximity")

# Tolerance for the sum-to-one check on a constructed WeightVector.
WEIGHT_SUM_TOLERANCE = 1e-6


class ScoringMode(str, Enum):
    """DEFAULT uses fixed notability thresholds; CONFIGURABLE uses weight-relative ones."""

    DEFAULT = "default"
    CONFIGURABLE = "configurable"


class WeightVector(BaseModel):
    """Weights for the five scoring factors."""

    similarity: float = Field(0.2, ge=0.0)
    history: float = Field(0.2, ge=0.0)
    recency: float = Field(0.2, ge=0.0)
    popularity: float = Field(0.2, ge=0.0)
    proximity: float = Field(0.2, ge=0.0)

    @model_validator(mode="after")
    def weights_sum_to_one(self):
        total = sum(self.as_dict().values())
        if abs(total - 1.0) > WEIGHT_SUM_TOLERANCE:
            raise ValueError(f"Scoring weights must sum to 1.0, got {total}")
        return self

    def as_dict(self) -> Dict[str, float]:
        return {name: getattr(self, name) for name in FACTOR_NAMES}


DEFAULT_WEIGHTS = WeightVector()


class FactorScores(BaseModel):
    """Raw factor values for one candidate."""

    similarity: float = 0.0
    history: float = 0.0
    recency: float = 0.0
    popularity: float = 0.0
    proximity: float = 0.0

    def as_dict(self) -> Dict[str, float]:
        return {name: getattr(self, name) for name in FACTOR_NAMES}

    def weighted_sum(self, weights: WeightVector) -> float:
        w = weights.as_dict()
        return sum(w[name] * value for name, value in self.as_dict().items())


class ScoreResult(BaseModel):
    """A candidate with its blended score and explanation. Produced per request, never stored."""

    id: str
    name: str = ""
    score: float
    factors: FactorScores
    reasons: List[str] = []
    reason: str = ""

"""
Engine configuration: scoring, telemetry, and experiment parameters.

EngineConfig defaults are defined here. The server may pass a dict
(e.g. from a JSON file named by ENGINE_CONFIG_PATH); from_dict() merges it with these defaults.
"""

import json
from pathlib import Path
from typing import Dict, Optional, Union

from pydantic import BaseModel, Field

from .models.scoring import DEFAULT_WEIGHTS, WeightVector
from .weights import normalize


class EngineConfig(BaseModel):
    """Configuration for scoring, telemetry, and experiments."""

    # -------------------------------------------------------------------------
    # Scoring
    # -------------------------------------------------------------------------

    # Weights used when the caller supplies none (and the base for overrides).
    default_weights: WeightVector = DEFAULT_WEIGHTS

    # Number of results returned when the caller does not ask for a limit.
    default_limit: int = Field(5, ge=1)
    # Upper bound on the limit a caller may request over HTTP.
    max_limit: int = Field(50, ge=1)

    # recency = 1 / (1 + days_since / recency_window_days)
    recency_window_days: float = Field(30.0, gt=0)

    # Locale used to render reasons when the request has none.
    default_locale: str = "ja"

    # -------------------------------------------------------------------------
    # Telemetry
    # -------------------------------------------------------------------------

    # Repeated clicks on the same (item, subject) within this window collapse to one row.
    duplicate_window_seconds: float = Field(10.0, ge=0)

    # -------------------------------------------------------------------------
    # Experiments
    # -------------------------------------------------------------------------

    # Percent of traffic sent to the first variant of a two-variant experiment.
    default_split: int = Field(50, ge=0, le=100)
    # Variant lists are truncated to this many entries.
    max_variants: int = Field(8, ge=2)
    # Experiment keys, variant names and event names are truncated to this length.
    max_key_length: int = Field(64, ge=1)
    # Free-text context is truncated to this length.
    max_context_length: int = Field(128, ge=1)
    # p-value threshold for significance.
    significance_alpha: float = Field(0.05, gt=0, lt=1)

    @classmethod
    def from_dict(cls, config_dict: Dict) -> "EngineConfig":
        """Create config from dictionary (e.g., loaded from JSON)."""
        flat = {}
        if "weights" in config_dict:
            flat["default_weights"] = normalize(config_dict["weights"])
        for section in ("scoring", "telemetry", "experiments"):
            if section in config_dict:
                flat.update(config_dict[section])
        allowed = set(cls.model_fields)
        filtered = {k: v for k, v in flat.items() if k in allowed}
        return cls.model_validate(filtered)

    @classmethod
    def from_file(cls, path: Union[Path, str]) -> "EngineConfig":
        with open(path) as f:
            return cls.from_dict(json.load(f))


DEFAULT_CONFIG = EngineConfig()


def resolve_config(config: Optional["EngineConfig"]) -> "EngineConfig":
    """Return config or DEFAULT_CONFIG when none is provided."""
    return config if config is not None else DEFAULT_CONFIG

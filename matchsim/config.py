from __future__ import annotations
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional
import copy
import json
import logging
import os

from .core import ConfigurationError

logger = logging.getLogger(__name__)

OBSERVATION_FORMS = ("constant", "linear", "uniform", "convex")
QUALITY_DISTRIBUTIONS = ("normal", "uniform")
THRESHOLD_RULES = ("fixed", "quality", "quality_minus")

@dataclass
class ScenarioConfig:
    # Population
    n_proposers: int = 6000
    n_reviewers: int = 4000
    quality_dist: str = "normal"      # "normal" (clipped) or "uniform"
    quality_mean: float = 0.5
    quality_std: float = 0.15
    disclosure_min: float = 0.1
    disclosure_max: float = 1.0

    # Thresholds & rationality
    proposer_threshold_rule: str = "fixed"      # "fixed", "quality", "quality_minus"
    proposer_threshold: float = 0.2
    reviewer_threshold_rule: str = "quality"
    reviewer_threshold: float = 0.5
    threshold_delta: float = 0.2                # used by "quality_minus"
    proposer_beta: float = 6.0
    reviewer_beta: float = 12.0

    # Periods & daily caps
    n_periods: int = 10
    proposer_view_cap: int = 100
    proposer_like_cap: int = 20
    reviewer_review_cap: int = 100
    reviewer_like_cap: Optional[int] = 20       # None = bounded by review cap only

    # Observation (bias/noise form)
    observation_form: str = "linear"  # "constant", "linear", "uniform", "convex"
    observation_bias: float = 0.25
    observation_noise: float = 0.2

    # Discovery / exposure ranking
    exposure_exponent: float = 6.0
    exposure_floor: float = 0.0       # > 0 avoids zero-probability starvation
    discovery_max_redraws: int = 10_000  # consecutive repeat draws before a batch ends

    # Review phase
    review_ranking: bool = True       # rank inbox by fresh observation; False = arrival order
    fatigue_rate: float = 0.15        # per match already made this period

    # Threshold adaptation (feedback between periods)
    threshold_adaptation: bool = False
    proposer_loosen_rate: float = 0.96
    proposer_tighten_rate: float = 1.01
    reviewer_volume_cutoff: int = 10
    reviewer_tighten_rate: float = 1.01
    reviewer_loosen_rate: float = 0.99

    # Bookkeeping
    event_log_maxlen: Optional[int] = 200_000
    record_daily_counts: bool = False

    def __post_init__(self) -> None:
        self.observation_form = str(self.observation_form).strip().lower()
        self.quality_dist = str(self.quality_dist).strip().lower()
        self.proposer_threshold_rule = str(self.proposer_threshold_rule).strip().lower()
        self.reviewer_threshold_rule = str(self.reviewer_threshold_rule).strip().lower()

    def validate(self) -> "ScenarioConfig":
        if self.n_proposers <= 0 or self.n_reviewers <= 0:
            raise ConfigurationError(
                f"population sizes must be positive (proposers={self.n_proposers}, reviewers={self.n_reviewers})"
            )
        if self.n_periods < 1:
            raise ConfigurationError(f"n_periods must be >= 1, got {self.n_periods}")
        caps = {
            "proposer_view_cap": self.proposer_view_cap,
            "proposer_like_cap": self.proposer_like_cap,
            "reviewer_review_cap": self.reviewer_review_cap,
        }
        if self.reviewer_like_cap is not None:
            caps["reviewer_like_cap"] = self.reviewer_like_cap
        for name, value in caps.items():
            if value < 0:
                raise ConfigurationError(f"{name} must be >= 0, got {value}")
        if self.proposer_beta <= 0 or self.reviewer_beta <= 0:
            raise ConfigurationError(
                f"beta must be positive (proposer={self.proposer_beta}, reviewer={self.reviewer_beta})"
            )
        if self.observation_form not in OBSERVATION_FORMS:
            raise ConfigurationError(
                f"unknown observation_form {self.observation_form!r}; expected one of {OBSERVATION_FORMS}"
            )
        if self.quality_dist not in QUALITY_DISTRIBUTIONS:
            raise ConfigurationError(
                f"unknown quality_dist {self.quality_dist!r}; expected one of {QUALITY_DISTRIBUTIONS}"
            )
        for rule in (self.proposer_threshold_rule, self.reviewer_threshold_rule):
            if rule not in THRESHOLD_RULES:
                raise ConfigurationError(f"unknown threshold rule {rule!r}; expected one of {THRESHOLD_RULES}")
        if self.quality_std < 0 or self.observation_noise < 0:
            raise ConfigurationError("standard deviations must be non-negative")
        if not 0.0 <= self.disclosure_min <= self.disclosure_max <= 1.0:
            raise ConfigurationError(
                f"disclosure range must satisfy 0 <= min <= max <= 1, got ({self.disclosure_min}, {self.disclosure_max})"
            )
        if not 0.0 <= self.proposer_threshold <= 1.0 or not 0.0 <= self.reviewer_threshold <= 1.0:
            raise ConfigurationError("fixed thresholds must lie in [0, 1]")
        if not 0.0 <= self.threshold_delta <= 1.0:
            raise ConfigurationError(f"threshold_delta must lie in [0, 1], got {self.threshold_delta}")
        if self.exposure_exponent <= 0 or self.exposure_floor < 0:
            raise ConfigurationError("exposure_exponent must be > 0 and exposure_floor >= 0")
        if self.discovery_max_redraws < 1:
            raise ConfigurationError("discovery_max_redraws must be >= 1")
        if self.fatigue_rate < 0:
            raise ConfigurationError(f"fatigue_rate must be >= 0, got {self.fatigue_rate}")
        for name in ("proposer_loosen_rate", "proposer_tighten_rate", "reviewer_tighten_rate", "reviewer_loosen_rate"):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"{name} must be positive")
        return self

    def snapshot(self) -> Dict[str, Any]:
        return asdict(self)

    def copy_with_overrides(self, overrides: Optional[Dict[str, Any]] = None) -> "ScenarioConfig":
        """Return a new config with ``overrides`` applied; unknown keys raise ``KeyError``."""
        new_cfg = copy.deepcopy(self)
        if overrides:
            known = {f.name for f in fields(self)}
            for key, value in overrides.items():
                if key not in known:
                    raise KeyError(f"Unknown configuration attribute '{key}'.")
                setattr(new_cfg, key, copy.deepcopy(value))
            new_cfg.__post_init__()
        return new_cfg


def load_config(path: str | os.PathLike[str], base: Optional[ScenarioConfig] = None) -> ScenarioConfig:
    """Load a JSON object of overrides from disk on top of ``base`` (defaults if omitted)."""
    file_path = Path(path).expanduser().resolve()
    if not file_path.exists():
        raise FileNotFoundError(f"Config file not found: {file_path}")
    with file_path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)
    if not isinstance(payload, dict):
        raise ConfigurationError(f"Config file {file_path} must contain a JSON object.")
    logger.info("Loaded %d config overrides from %s", len(payload), file_path)
    return (base or ScenarioConfig()).copy_with_overrides(payload)

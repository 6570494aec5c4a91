from __future__ import annotations

import json

import pytest

from matchsim.config import ScenarioConfig, load_config
from matchsim.core import ConfigurationError
from matchsim.engine import MarketEngine


def test_defaults_are_valid() -> None:
    cfg = ScenarioConfig()
    assert cfg.validate() is cfg
    assert cfg.n_proposers == 6000
    assert cfg.n_reviewers == 4000
    assert cfg.n_periods == 10


@pytest.mark.parametrize(
    "overrides",
    [
        {"n_proposers": 0},
        {"n_reviewers": -3},
        {"n_periods": 0},
        {"proposer_view_cap": -1},
        {"proposer_like_cap": -1},
        {"reviewer_review_cap": -5},
        {"reviewer_like_cap": -1},
        {"proposer_beta": 0.0},
        {"reviewer_beta": -2.0},
        {"observation_form": "gaussian"},
        {"quality_dist": "beta"},
        {"reviewer_threshold_rule": "median"},
        {"disclosure_min": 0.8, "disclosure_max": 0.2},
        {"exposure_exponent": 0.0},
        {"fatigue_rate": -0.1},
        {"proposer_threshold": 1.5},
        {"reviewer_threshold_rule": "quality_minus", "threshold_delta": -0.8},
        {"threshold_delta": 1.5},
    ],
)
def test_invalid_configuration_fails_fast(overrides) -> None:
    cfg = ScenarioConfig().copy_with_overrides(overrides)
    with pytest.raises(ConfigurationError):
        cfg.validate()
    with pytest.raises(ConfigurationError):
        MarketEngine(cfg, seed=1)


def test_zero_caps_are_allowed() -> None:
    cfg = ScenarioConfig(proposer_view_cap=0, reviewer_review_cap=0, reviewer_like_cap=0)
    cfg.validate()


def test_configuration_error_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        ScenarioConfig(n_periods=0).validate()


def test_observation_form_is_normalised() -> None:
    cfg = ScenarioConfig(observation_form="  Convex ")
    assert cfg.observation_form == "convex"
    cfg.validate()


def test_copy_with_overrides_leaves_original_untouched() -> None:
    base = ScenarioConfig()
    updated = base.copy_with_overrides({"n_periods": 3, "threshold_adaptation": True})
    assert updated.n_periods == 3
    assert updated.threshold_adaptation is True
    assert base.n_periods == 10
    assert base.threshold_adaptation is False


def test_unknown_override_key_raises() -> None:
    with pytest.raises(KeyError):
        ScenarioConfig().copy_with_overrides({"n_agents": 5})


def test_load_config_from_json(tmp_path) -> None:
    path = tmp_path / "scenario.json"
    path.write_text(json.dumps({"n_proposers": 10, "observation_form": "uniform", "reviewer_like_cap": None}))
    cfg = load_config(path)
    assert cfg.n_proposers == 10
    assert cfg.observation_form == "uniform"
    assert cfg.reviewer_like_cap is None
    cfg.validate()


def test_load_config_rejects_non_object(tmp_path) -> None:
    path = tmp_path / "scenario.json"
    path.write_text("[1, 2, 3]")
    with pytest.raises(ConfigurationError):
        load_config(path)


def test_load_config_missing_file(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.json")

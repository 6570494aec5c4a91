from __future__ import annotations

import random

import pytest

from conftest import ScriptedRandom, make_agent
from matchsim.decision import decide, decide_observed, fatigue_probability, logistic_prob
from matchsim.observation import LinearShift


def test_logistic_is_centred_on_threshold() -> None:
    assert logistic_prob(0.0, 6.0) == 0.5
    assert logistic_prob(0.1, 6.0) > 0.5
    assert logistic_prob(-0.1, 6.0) < 0.5


def test_logistic_handles_extreme_utilities() -> None:
    assert logistic_prob(-500.0, 12.0) >= 0.0
    assert logistic_prob(-500.0, 12.0) < 1e-100
    assert logistic_prob(500.0, 12.0) == 1.0


def test_beta_sharpens_the_curve() -> None:
    assert logistic_prob(0.1, 12.0) > logistic_prob(0.1, 6.0)
    assert logistic_prob(-0.1, 12.0) < logistic_prob(-0.1, 6.0)


def test_acceptance_is_probabilistic_at_the_threshold() -> None:
    rng = random.Random(2024)
    viewer = make_agent(threshold=0.5, beta=12.0)
    accepted = sum(decide_observed(viewer, 0.5, rng) for _ in range(20000))
    assert 0.47 < accepted / 20000 < 0.53


def test_below_threshold_can_still_be_accepted() -> None:
    viewer = make_agent(threshold=0.8, beta=6.0)
    assert decide_observed(viewer, 0.1, ScriptedRandom(0.0)) is True
    assert decide_observed(viewer, 0.8, ScriptedRandom(0.5)) is False
    assert decide_observed(viewer, 0.81, ScriptedRandom(0.5)) is True


def test_decide_observes_the_target() -> None:
    viewer = make_agent(threshold=0.5, beta=6.0)
    strong = make_agent(side="reviewer", quality=0.9, disclosure=1.0)
    weak = make_agent(side="reviewer", quality=0.1, disclosure=1.0)
    model = LinearShift(bias=0.25, noise=0.2)
    rng = ScriptedRandom(0.3)
    # p(0.9) ~ 0.92, p(0.1) ~ 0.08 against a fixed draw of 0.3
    assert decide(viewer, strong, rng, model) is True
    assert decide(viewer, weak, rng, model) is False


def test_fatigue_starts_at_zero_and_grows() -> None:
    assert fatigue_probability(0, 0.15) == 0.0
    values = [fatigue_probability(n, 0.15) for n in range(12)]
    assert all(a <= b for a, b in zip(values, values[1:]))
    assert values[2] == pytest.approx(0.3)
    assert fatigue_probability(50, 0.15) == 1.0

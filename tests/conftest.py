from __future__ import annotations

import random

import pytest

from matchsim.config import ScenarioConfig
from matchsim.core import Agent


class ScriptedRandom(random.Random):
    """Generator whose uniform draws are pinned to ``value`` and normal draws to their mean."""

    def __init__(self, value: float = 0.0) -> None:
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value

    def gauss(self, mu: float = 0.0, sigma: float = 1.0) -> float:
        return mu


def make_agent(agent_id=0, side="proposer", quality=0.5, disclosure=1.0, threshold=0.5, beta=6.0) -> Agent:
    return Agent(
        agent_id=agent_id,
        side=side,
        quality=quality,
        disclosure=disclosure,
        threshold=threshold,
        beta=beta,
    )


@pytest.fixture
def always_accept():
    return ScriptedRandom(0.0)


@pytest.fixture
def small_config() -> ScenarioConfig:
    return ScenarioConfig(
        n_proposers=120,
        n_reviewers=80,
        n_periods=3,
        proposer_view_cap=15,
        proposer_like_cap=5,
        reviewer_review_cap=10,
        reviewer_like_cap=4,
        exposure_floor=0.01,
        event_log_maxlen=None,
    )

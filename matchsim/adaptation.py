from __future__ import annotations
from dataclasses import dataclass
from typing import Sequence

from .config import ScenarioConfig
from .core import Agent, clamp01


@dataclass(frozen=True)
class ThresholdAdaptation:
    """
    Between-period feedback on thresholds. Proposers still without a match
    lower their bar, matched proposers raise it; reviewers raise their bar
    after a busy inbox and lower it after a quiet one.
    """
    proposer_loosen_rate: float = 0.96
    proposer_tighten_rate: float = 1.01
    reviewer_volume_cutoff: int = 10
    reviewer_tighten_rate: float = 1.01
    reviewer_loosen_rate: float = 0.99

    @classmethod
    def from_config(cls, cfg: ScenarioConfig) -> "ThresholdAdaptation":
        return cls(
            proposer_loosen_rate=cfg.proposer_loosen_rate,
            proposer_tighten_rate=cfg.proposer_tighten_rate,
            reviewer_volume_cutoff=cfg.reviewer_volume_cutoff,
            reviewer_tighten_rate=cfg.reviewer_tighten_rate,
            reviewer_loosen_rate=cfg.reviewer_loosen_rate,
        )

    def adapt_proposer(self, agent: Agent) -> float:
        rate = self.proposer_loosen_rate if agent.matches == 0 else self.proposer_tighten_rate
        agent.threshold = clamp01(agent.threshold * rate)
        return agent.threshold

    def adapt_reviewer(self, agent: Agent, inbox_volume: int) -> float:
        if inbox_volume > self.reviewer_volume_cutoff:
            rate = self.reviewer_tighten_rate
        else:
            rate = self.reviewer_loosen_rate
        agent.threshold = clamp01(agent.threshold * rate)
        return agent.threshold

    def apply(self, proposers: Sequence[Agent], reviewers: Sequence[Agent], inbox_volumes: Sequence[int]) -> None:
        for p in proposers:
            self.adapt_proposer(p)
        for r, volume in zip(reviewers, inbox_volumes):
            self.adapt_reviewer(r, volume)

from __future__ import annotations
from typing import List
import random

from .config import ScenarioConfig
from .core import Agent, Side, clamp01


class PopulationFactory:
    def __init__(self, cfg: ScenarioConfig, rng: random.Random) -> None:
        self.cfg = cfg
        self.rng = rng

    def sample_quality(self) -> float:
        cfg = self.cfg
        if cfg.quality_dist == "uniform":
            return self.rng.random()
        return clamp01(self.rng.gauss(cfg.quality_mean, cfg.quality_std))

    def sample_disclosure(self) -> float:
        return self.rng.uniform(self.cfg.disclosure_min, self.cfg.disclosure_max)

    def initial_threshold(self, side: Side, quality: float) -> float:
        cfg = self.cfg
        rule = cfg.proposer_threshold_rule if side == "proposer" else cfg.reviewer_threshold_rule
        if rule == "quality":
            return quality
        if rule == "quality_minus":
            return clamp01(quality - cfg.threshold_delta)
        return cfg.proposer_threshold if side == "proposer" else cfg.reviewer_threshold

    def create_agent(self, agent_id: int, side: Side) -> Agent:
        quality = self.sample_quality()
        disclosure = self.sample_disclosure()
        beta = self.cfg.proposer_beta if side == "proposer" else self.cfg.reviewer_beta
        return Agent(
            agent_id=agent_id,
            side=side,
            quality=quality,
            disclosure=disclosure,
            threshold=self.initial_threshold(side, quality),
            beta=beta,
        )

    def create_side(self, side: Side, n: int) -> List[Agent]:
        return [self.create_agent(i, side) for i in range(n)]

    def create_population(self) -> tuple[List[Agent], List[Agent]]:
        # proposers first, then reviewers, so a seed pins down both sides
        proposers = self.create_side("proposer", self.cfg.n_proposers)
        reviewers = self.create_side("reviewer", self.cfg.n_reviewers)
        return proposers, reviewers

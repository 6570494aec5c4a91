from __future__ import annotations
from typing import Dict, List, Optional, Sequence
import logging
import random

import pandas as pd

from .adaptation import ThresholdAdaptation
from .config import ScenarioConfig
from .core import Agent, ConfigurationError, Event, EventLog, InboxArena, Side
from .decision import decide, decide_observed, fatigue_probability
from .discovery import DiscoverySampler, exposure_weights
from .factory import PopulationFactory
from .metrics import MetricsStore, outcome_table
from .observation import build_observation_model

logger = logging.getLogger(__name__)


class MarketEngine:
    """
    Synchronous two-sided market. Each period runs
    reset -> (adapt thresholds) -> discovery -> review, drawing every random
    number from ``self.rng`` in a fixed order: proposers in list order during
    discovery, then reviewers in list order during review.
    """

    def __init__(
        self,
        cfg: ScenarioConfig,
        seed: Optional[int] = None,
        *,
        rng: Optional[random.Random] = None,
        proposers: Optional[List[Agent]] = None,
        reviewers: Optional[List[Agent]] = None,
    ) -> None:
        self.cfg = cfg.validate()
        if rng is not None and seed is not None:
            raise ConfigurationError("pass either seed or rng, not both")
        self.rng = rng if rng is not None else random.Random(seed)

        self.period: int = 0
        self.log = EventLog(maxlen=cfg.event_log_maxlen)
        self.metrics = MetricsStore()

        self.observer = build_observation_model(cfg)
        self.adaptation: Optional[ThresholdAdaptation] = (
            ThresholdAdaptation.from_config(cfg) if cfg.threshold_adaptation else None
        )

        if proposers is None and reviewers is None:
            proposers, reviewers = PopulationFactory(cfg, self.rng).create_population()
        elif proposers is None or reviewers is None:
            raise ConfigurationError("supply both proposers and reviewers, or neither")
        self.proposers: List[Agent] = list(proposers)
        self.reviewers: List[Agent] = list(reviewers)
        self._check_population(self.proposers, "proposer")
        self._check_population(self.reviewers, "reviewer")

        self.inboxes = InboxArena(len(self.reviewers))
        self._last_inbox_volumes: List[int] = [0] * len(self.reviewers)
        self.sampler = DiscoverySampler(self._exposure_weights(), max_redraws=cfg.discovery_max_redraws)

        # per-period tallies
        self._views_period = 0
        self._proposals_period = 0
        self._reviews_period = 0
        self._matches_period = 0
        self._fatigue_exits_period = 0

    @staticmethod
    def _check_population(agents: Sequence[Agent], side: Side) -> None:
        if not agents:
            raise ConfigurationError(f"{side} population is empty")
        for a in agents:
            if a.side != side:
                raise ConfigurationError(f"agent {a.agent_id} has side {a.side!r} in the {side} population")
            if a.beta <= 0:
                raise ConfigurationError(f"{side} {a.agent_id}: beta must be positive, got {a.beta}")
            a.check_integrity()

    def _exposure_weights(self):
        return exposure_weights(
            self.reviewers,
            self.observer,
            exponent=self.cfg.exposure_exponent,
            floor=self.cfg.exposure_floor,
        )

    @property
    def done(self) -> bool:
        return self.period >= self.cfg.n_periods

    def run(self) -> None:
        """Run the remaining configured periods."""
        remaining = self.cfg.n_periods - self.period
        if remaining > 0:
            self.step(remaining)
        logger.info(
            "Simulation done after %d periods: %d proposer matches, %d reviewer matches",
            self.period,
            sum(a.matches for a in self.proposers),
            sum(a.matches for a in self.reviewers),
        )

    def step(self, n_periods: int = 1) -> None:
        for _ in range(n_periods):
            self.log.add(Event(self.period, "PERIOD_STARTED"))
            self._reset_period()
            if self.adaptation is not None and self.period > 0:
                self._adapt_thresholds()
            # weights depend only on static (q, d); refreshed each period all the same
            self.sampler.refresh(self._exposure_weights())
            self._discovery_phase()
            self._review_phase()
            self._snapshot_period()
            self.period += 1

    # -----------------------------
    # Phases
    # -----------------------------
    def _reset_period(self) -> None:
        self._last_inbox_volumes = self.inboxes.volumes()
        self.inboxes.clear()
        for a in self.proposers:
            a.reset_daily()
        for a in self.reviewers:
            a.reset_daily()
        self._views_period = 0
        self._proposals_period = 0
        self._reviews_period = 0
        self._matches_period = 0
        self._fatigue_exits_period = 0

    def _adapt_thresholds(self) -> None:
        self.adaptation.apply(self.proposers, self.reviewers, self._last_inbox_volumes)
        self.log.add(Event(self.period, "THRESHOLDS_ADAPTED", meta={
            "proposer_mean": _mean_threshold(self.proposers),
            "reviewer_mean": _mean_threshold(self.reviewers),
        }))

    def _discovery_phase(self) -> None:
        cfg = self.cfg
        rng = self.rng
        for i, m in enumerate(self.proposers):
            budget = cfg.proposer_view_cap - m.daily_view_count
            for j in self.sampler.iter_candidates(rng, budget):
                f = self.reviewers[j]
                m.daily_view_count += 1
                self._views_period += 1
                if decide(m, f, rng, self.observer) and m.daily_like_count < cfg.proposer_like_cap:
                    # receiving a proposal does not spend the reviewer's budget
                    m.daily_like_count += 1
                    f.daily_received_count += 1
                    self.inboxes.deliver(j, i)
                    self._proposals_period += 1

    def _review_phase(self) -> None:
        cfg = self.cfg
        rng = self.rng
        for j, f in enumerate(self.reviewers):
            box = self.inboxes[j]
            if not box:
                continue
            if cfg.review_ranking:
                ranked = [(self.observer.observe(self.proposers[i], rng), i) for i in box]
                ranked.sort(key=lambda item: item[0], reverse=True)
            else:
                ranked = [(None, i) for i in box]

            for observed, i in ranked:
                if f.daily_review_count >= cfg.reviewer_review_cap:
                    break
                if cfg.reviewer_like_cap is not None and f.daily_like_count >= cfg.reviewer_like_cap:
                    break
                fatigue_p = fatigue_probability(f.daily_match_count, cfg.fatigue_rate)
                if fatigue_p > 0.0 and rng.random() < fatigue_p:
                    self._fatigue_exits_period += 1
                    self.log.add(Event(self.period, "FATIGUE_EXIT", actor_id=f.agent_id, side="reviewer",
                                       meta={"daily_matches": f.daily_match_count, "p": fatigue_p}))
                    break
                m = self.proposers[i]
                f.daily_review_count += 1
                self._reviews_period += 1
                if observed is None:
                    observed = self.observer.observe(m, rng)
                if decide_observed(f, observed, rng):
                    f.daily_like_count += 1
                    self._record_match(m, f, observed)

    def _record_match(self, proposer: Agent, reviewer: Agent, observed: float) -> None:
        proposer_satisfied = proposer.record_match(reviewer)
        reviewer_satisfied = reviewer.record_match(proposer)
        self._matches_period += 1
        self.log.add(Event(
            self.period,
            "MATCH",
            actor_id=reviewer.agent_id,
            counterpart_id=proposer.agent_id,
            side="reviewer",
            meta={
                "proposer_satisfied": proposer_satisfied,
                "reviewer_satisfied": reviewer_satisfied,
                "observed": observed,
            },
        ))
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "[MATCH] period=%d proposer=%d (q=%.3f) reviewer=%d (q=%.3f θ=%.3f obs=%.3f) satisfied=%s/%s",
                self.period,
                proposer.agent_id,
                proposer.quality,
                reviewer.agent_id,
                reviewer.quality,
                reviewer.threshold,
                observed,
                proposer_satisfied,
                reviewer_satisfied,
            )

    # -----------------------------
    # Outputs
    # -----------------------------
    def _snapshot_period(self) -> None:
        row: Dict[str, float] = {
            "period": self.period,
            "views": self._views_period,
            "proposals": self._proposals_period,
            "reviews": self._reviews_period,
            "matches": self._matches_period,
            "fatigue_exits": self._fatigue_exits_period,
            "proposer_threshold_mean": _mean_threshold(self.proposers),
            "reviewer_threshold_mean": _mean_threshold(self.reviewers),
        }
        self.metrics.add_period(row)
        self.log.add(Event(self.period, "PERIOD_COMPLETED", meta=dict(row)))
        logger.info(
            "period %d: views=%d proposals=%d reviews=%d matches=%d fatigue_exits=%d",
            self.period,
            self._views_period,
            self._proposals_period,
            self._reviews_period,
            self._matches_period,
            self._fatigue_exits_period,
        )

    def proposer_table(self) -> pd.DataFrame:
        return outcome_table(self.proposers, include_daily=self.cfg.record_daily_counts)

    def reviewer_table(self) -> pd.DataFrame:
        return outcome_table(self.reviewers, include_daily=self.cfg.record_daily_counts)


def _mean_threshold(agents: Sequence[Agent]) -> float:
    if not agents:
        return 0.0
    return float(sum(a.threshold for a in agents) / len(agents))

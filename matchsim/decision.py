from __future__ import annotations
import math
import random

from .core import Agent
from .observation import ObservationModel


def logistic_prob(utility: float, beta: float) -> float:
    """1 / (1 + exp(-beta * utility)) without overflow for large |beta * utility|."""
    z = beta * utility
    if z >= 0:
        return 1.0 / (1.0 + math.exp(-z))
    ez = math.exp(z)
    return ez / (1.0 + ez)


def decide_observed(viewer: Agent, observed: float, rng: random.Random) -> bool:
    p = logistic_prob(observed - viewer.threshold, viewer.beta)
    return rng.random() < p


def decide(viewer: Agent, target: Agent, rng: random.Random, observer: ObservationModel) -> bool:
    return decide_observed(viewer, observer.observe(target, rng), rng)


def fatigue_probability(daily_match_count: int, rate: float) -> float:
    return min(1.0, max(0, daily_match_count) * rate)

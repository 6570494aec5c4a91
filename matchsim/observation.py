"""
Observation model: how one agent's presented signal looks to another.

Every form keeps two properties in disclosure ``d``: the upward bias and the
spread of the noise are both non-increasing in ``d``, so agents who disclose
less look better on average and are harder to judge.
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Type
import random

from .config import ScenarioConfig
from .core import Agent, ConfigurationError, clamp01


@dataclass(frozen=True)
class ObservationModel(ABC):
    bias: float = 0.25
    noise: float = 0.2

    @abstractmethod
    def apparent(self, quality: float, disclosure: float) -> float:
        """Deterministic part of the signal, used for exposure ranking."""
        raise NotImplementedError

    @abstractmethod
    def sample(self, quality: float, disclosure: float, rng: random.Random) -> float:
        raise NotImplementedError

    def observe(self, target: Agent, rng: random.Random) -> float:
        return clamp01(self.sample(target.quality, target.disclosure, rng))


class ConstantShift(ObservationModel):
    # q + b + N(0, s * (1 - d))
    def apparent(self, quality: float, disclosure: float) -> float:
        return clamp01(quality + self.bias)

    def sample(self, quality: float, disclosure: float, rng: random.Random) -> float:
        return quality + self.bias + rng.gauss(0.0, self.noise * (1.0 - disclosure))


class LinearShift(ObservationModel):
    # q + b * (1 - d) + N(0, s * (1 - d))
    def apparent(self, quality: float, disclosure: float) -> float:
        return clamp01(quality + self.bias * (1.0 - disclosure))

    def sample(self, quality: float, disclosure: float, rng: random.Random) -> float:
        hidden = 1.0 - disclosure
        return quality + self.bias * hidden + rng.gauss(0.0, self.noise * hidden)


class UniformShift(ObservationModel):
    # q + (1 - d) * U(0, b)
    def apparent(self, quality: float, disclosure: float) -> float:
        return clamp01(quality + (1.0 - disclosure) * self.bias * 0.5)

    def sample(self, quality: float, disclosure: float, rng: random.Random) -> float:
        return quality + (1.0 - disclosure) * rng.uniform(0.0, self.bias)


class ConvexBlend(ObservationModel):
    # d * q + (1 - d) * U(0, 1)
    def apparent(self, quality: float, disclosure: float) -> float:
        return clamp01(disclosure * quality + (1.0 - disclosure) * 0.5)

    def sample(self, quality: float, disclosure: float, rng: random.Random) -> float:
        return disclosure * quality + (1.0 - disclosure) * rng.random()


OBSERVATION_MODELS: Dict[str, Type[ObservationModel]] = {
    "constant": ConstantShift,
    "linear": LinearShift,
    "uniform": UniformShift,
    "convex": ConvexBlend,
}


def build_observation_model(cfg: ScenarioConfig) -> ObservationModel:
    try:
        model_cls = OBSERVATION_MODELS[cfg.observation_form]
    except KeyError:
        raise ConfigurationError(
            f"unknown observation_form {cfg.observation_form!r}; expected one of {tuple(OBSERVATION_MODELS)}"
        ) from None
    return model_cls(bias=float(cfg.observation_bias), noise=float(cfg.observation_noise))

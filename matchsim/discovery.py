from __future__ import annotations
from typing import Iterator, List, Sequence, Set
import logging
import random

import numpy as np

from .core import Agent
from .observation import ObservationModel

logger = logging.getLogger(__name__)


def exposure_weights(
    candidates: Sequence[Agent],
    observer: ObservationModel,
    exponent: float,
    floor: float = 0.0,
) -> np.ndarray:
    apparent = np.fromiter(
        (observer.apparent(c.quality, c.disclosure) for c in candidates),
        dtype=float,
        count=len(candidates),
    )
    return np.power(np.clip(apparent, 0.0, 1.0), exponent) + floor


class DiscoverySampler:
    """
    Engagement-ranked discovery: candidates are drawn with probability
    proportional to their exposure weight, repeats within one proposer's batch
    are rejected and redrawn.
    """
    def __init__(self, weights: np.ndarray, max_redraws: int = 10_000) -> None:
        self.max_redraws = max_redraws
        self.refresh(weights)

    def refresh(self, weights: np.ndarray) -> None:
        w = np.asarray(weights, dtype=float)
        if np.any(w < 0) or not np.all(np.isfinite(w)):
            raise ValueError("exposure weights must be finite and non-negative")
        self.n_candidates = int(w.size)
        self.n_reachable = int(np.count_nonzero(w > 0))
        self._indices = list(range(self.n_candidates))
        self._cum_weights: List[float] = np.cumsum(w).tolist()

    def iter_candidates(self, rng: random.Random, k: int) -> Iterator[int]:
        """Yield up to ``k`` distinct indices lazily so callers can interleave their own draws."""
        k = min(int(k), self.n_reachable)
        seen: Set[int] = set()
        misses = 0
        while len(seen) < k:
            j = rng.choices(self._indices, cum_weights=self._cum_weights)[0]
            if j in seen:
                misses += 1
                if misses >= self.max_redraws:
                    logger.debug("discovery batch cut at %d/%d after %d repeat draws", len(seen), k, misses)
                    return
                continue
            misses = 0
            seen.add(j)
            yield j

    def draw(self, rng: random.Random, k: int) -> List[int]:
        return list(self.iter_candidates(rng, k))

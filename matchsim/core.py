from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional
from collections import deque

Side = Literal["proposer", "reviewer"]

def clamp01(x: float) -> float:
    return 0.0 if x < 0.0 else 1.0 if x > 1.0 else float(x)

# -----------------------------
# Errors
# -----------------------------
class MatchSimError(Exception):
    pass

class ConfigurationError(MatchSimError, ValueError):
    """Invalid scenario parameters; raised before any period runs."""

class DataIntegrityError(MatchSimError, ValueError):
    """Agent record outside its domain (quality, disclosure or threshold not in [0,1], or no id)."""

# -----------------------------
# Events
# -----------------------------
@dataclass
class Event:
    period: int
    event_type: str
    actor_id: Optional[int] = None
    counterpart_id: Optional[int] = None
    side: Optional[Side] = None
    meta: dict = field(default_factory=dict)

class EventLog:
    def __init__(self, maxlen: Optional[int] = None) -> None:
        self.events = deque(maxlen=maxlen)

    def add(self, e: Event) -> None:
        self.events.append(e)

    def of_type(self, event_type: str) -> List[Event]:
        return [e for e in self.events if e.event_type == event_type]


# -----------------------------
# Agents
# -----------------------------
@dataclass
class Agent:
    agent_id: int
    side: Side
    quality: float
    disclosure: float
    threshold: float
    beta: float

    # cumulative outcomes
    matches: int = 0
    true_satisfaction: int = 0

    # daily counters, reset every period
    daily_view_count: int = 0
    daily_like_count: int = 0
    daily_review_count: int = 0
    daily_match_count: int = 0
    daily_received_count: int = 0

    def reset_daily(self) -> None:
        self.daily_view_count = 0
        self.daily_like_count = 0
        self.daily_review_count = 0
        self.daily_match_count = 0
        self.daily_received_count = 0

    def check_integrity(self) -> None:
        if not 0.0 <= self.quality <= 1.0:
            raise DataIntegrityError(
                f"{self.side} {self.agent_id}: quality {self.quality!r} outside [0, 1]"
            )
        if not 0.0 <= self.disclosure <= 1.0:
            raise DataIntegrityError(
                f"{self.side} {self.agent_id}: disclosure {self.disclosure!r} outside [0, 1]"
            )
        if not 0.0 <= self.threshold <= 1.0:
            raise DataIntegrityError(
                f"{self.side} {self.agent_id}: threshold {self.threshold!r} outside [0, 1]"
            )

    def record_match(self, counterpart: "Agent") -> bool:
        """Count a match with ``counterpart``; return whether it truly satisfied this agent."""
        self.matches += 1
        self.daily_match_count += 1
        satisfied = counterpart.quality >= self.threshold
        if satisfied:
            self.true_satisfaction += 1
        return satisfied

    def to_row(self, include_daily: bool = False) -> Dict[str, float]:
        row = {
            "id": self.agent_id,
            "true_attr": float(self.quality),
            "disclosure": float(self.disclosure),
            "threshold": float(self.threshold),
            "matches": int(self.matches),
            "true_satisfaction": int(self.true_satisfaction),
        }
        if include_daily:
            row["daily_view_count"] = int(self.daily_view_count)
            row["daily_like_count"] = int(self.daily_like_count)
            row["daily_review_count"] = int(self.daily_review_count)
            row["daily_received_count"] = int(self.daily_received_count)
        return row


# -----------------------------
# Inboxes
# -----------------------------
class InboxArena:
    """One proposer-index list per reviewer, cleared in place between periods."""

    def __init__(self, n_reviewers: int) -> None:
        self.boxes: List[List[int]] = [[] for _ in range(n_reviewers)]

    def __len__(self) -> int:
        return len(self.boxes)

    def __getitem__(self, reviewer_idx: int) -> List[int]:
        return self.boxes[reviewer_idx]

    def deliver(self, reviewer_idx: int, proposer_idx: int) -> None:
        self.boxes[reviewer_idx].append(proposer_idx)

    def volumes(self) -> List[int]:
        return [len(box) for box in self.boxes]

    def clear(self) -> None:
        for box in self.boxes:
            box.clear()

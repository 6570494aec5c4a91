from __future__ import annotations

import pytest

from conftest import make_agent
from matchsim.core import DataIntegrityError, Event, EventLog, InboxArena, clamp01


def test_clamp01() -> None:
    assert clamp01(-0.2) == 0.0
    assert clamp01(1.7) == 1.0
    assert clamp01(0.25) == 0.25


def test_record_match_counts_satisfaction_against_own_threshold() -> None:
    proposer = make_agent(0, "proposer", quality=0.9, threshold=0.3)
    reviewer = make_agent(0, "reviewer", quality=0.4, threshold=0.5)
    assert proposer.record_match(reviewer) is True
    assert reviewer.record_match(proposer) is True
    reviewer.threshold = 0.95
    assert reviewer.record_match(proposer) is False
    assert reviewer.matches == 2
    assert reviewer.true_satisfaction == 1
    assert reviewer.daily_match_count == 2


def test_reset_daily_keeps_cumulative_counts() -> None:
    agent = make_agent()
    agent.record_match(make_agent(side="reviewer", quality=0.9))
    agent.daily_view_count = 7
    agent.daily_received_count = 3
    agent.reset_daily()
    assert agent.matches == 1
    assert agent.true_satisfaction == 1
    assert (agent.daily_view_count, agent.daily_match_count, agent.daily_received_count) == (0, 0, 0)


@pytest.mark.parametrize("quality, disclosure", [(1.01, 0.5), (-0.1, 0.5), (0.5, 1.5), (0.5, float("nan"))])
def test_integrity_check_rejects_out_of_range_records(quality, disclosure) -> None:
    with pytest.raises(DataIntegrityError):
        make_agent(quality=quality, disclosure=disclosure).check_integrity()


def test_bounded_event_log_keeps_most_recent() -> None:
    log = EventLog(maxlen=3)
    for p in range(5):
        log.add(Event(p, "MATCH" if p % 2 else "PERIOD_STARTED"))
    assert [e.period for e in log.events] == [2, 3, 4]
    assert [e.period for e in log.of_type("MATCH")] == [3]


def test_inbox_arena_clears_in_place() -> None:
    arena = InboxArena(3)
    box = arena[1]
    arena.deliver(1, 4)
    arena.deliver(1, 2)
    arena.deliver(2, 0)
    assert len(arena) == 3
    assert arena.volumes() == [0, 2, 1]
    assert arena[1] == [4, 2]
    arena.clear()
    assert arena.volumes() == [0, 0, 0]
    assert arena[1] is box

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Any, List, Sequence
import pandas as pd

from .core import Agent

OUTCOME_COLUMNS = ["id", "true_attr", "disclosure", "threshold", "matches", "true_satisfaction"]

@dataclass
class MetricsStore:
    period_rows: List[Dict[str, Any]] = field(default_factory=list)

    def add_period(self, row: Dict[str, Any]) -> None:
        self.period_rows.append(row)

    def period_df(self) -> pd.DataFrame:
        return pd.DataFrame(self.period_rows)


def outcome_table(agents: Sequence[Agent], include_daily: bool = False) -> pd.DataFrame:
    rows = [a.to_row(include_daily=include_daily) for a in agents]
    if not rows:
        return pd.DataFrame(columns=OUTCOME_COLUMNS)
    return pd.DataFrame(rows)

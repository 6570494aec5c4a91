from __future__ import annotations
from pathlib import Path
from typing import List, Optional
import logging
import os

import numpy as np
import pandas as pd

from .core import Agent, DataIntegrityError, Side
from .metrics import OUTCOME_COLUMNS

logger = logging.getLogger(__name__)

REQUIRED_AGENT_COLUMNS = ("id", "true_attr", "disclosure")


def check_table(df: pd.DataFrame, required=REQUIRED_AGENT_COLUMNS, source: str = "table") -> None:
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise DataIntegrityError(f"{source}: missing required column(s) {missing}")
    if "id" in df.columns:
        ids = pd.to_numeric(df["id"], errors="coerce").to_numpy(dtype=float)
        bad_id = ~np.isfinite(ids) | (ids != np.floor(ids))
        if np.any(bad_id):
            first = int(np.flatnonzero(bad_id)[0])
            raise DataIntegrityError(f"{source}: id in row {first} is not an integer ({df['id'].iloc[first]!r})")
    for col in ("true_attr", "disclosure", "threshold"):
        if col not in df.columns:
            continue
        values = pd.to_numeric(df[col], errors="coerce").to_numpy(dtype=float)
        bad = ~((values >= 0.0) & (values <= 1.0))  # NaN counts as bad
        if np.any(bad):
            first = int(np.flatnonzero(bad)[0])
            raise DataIntegrityError(
                f"{source}: {col} out of [0, 1] in row {first} (id={df['id'].iloc[first]!r}, value={df[col].iloc[first]!r})"
            )


def export_outcomes(df: pd.DataFrame, path: str | os.PathLike[str]) -> Path:
    """Write an outcome table as CSV: header row first, ``id`` and the outcome columns leading."""
    check_table(df, required=OUTCOME_COLUMNS, source="outcome export")
    extra = [c for c in df.columns if c not in OUTCOME_COLUMNS]
    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    df[OUTCOME_COLUMNS + extra].to_csv(out_path, index=False)
    logger.info("Wrote %d rows to %s", len(df), out_path)
    return out_path


def load_table(path: str | os.PathLike[str]) -> pd.DataFrame:
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"Table not found: {file_path}")
    df = pd.read_csv(file_path)
    check_table(df, source=str(file_path))
    return df


def agents_from_table(
    df: pd.DataFrame,
    side: Side,
    beta: float,
    default_threshold: Optional[float] = None,
) -> List[Agent]:
    """Build a population from agent records; a ``threshold`` column wins over ``default_threshold``."""
    check_table(df, source=f"{side} records")
    has_threshold = "threshold" in df.columns
    if not has_threshold and default_threshold is None:
        raise DataIntegrityError(f"{side} records: no threshold column and no default threshold given")
    agents: List[Agent] = []
    for rec in df.to_dict(orient="records"):
        threshold = float(rec["threshold"]) if has_threshold else float(default_threshold)
        agent = Agent(
            agent_id=int(rec["id"]),
            side=side,
            quality=float(rec["true_attr"]),
            disclosure=float(rec["disclosure"]),
            threshold=threshold,
            beta=float(beta),
        )
        agent.check_integrity()
        agents.append(agent)
    return agents


def load_agents(
    path: str | os.PathLike[str],
    side: Side,
    beta: float,
    default_threshold: Optional[float] = None,
) -> List[Agent]:
    agents = agents_from_table(load_table(path), side, beta, default_threshold)
    logger.info("Loaded %d %s records from %s", len(agents), side, path)
    return agents

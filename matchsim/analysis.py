"""Offline analysis of exported outcome tables."""
from __future__ import annotations
from typing import Any, Dict, Sequence

import numpy as np
import pandas as pd

DEFAULT_FACTORS = ("true_attr", "disclosure", "threshold")


def correlation(x: Sequence[float], y: Sequence[float]) -> float:
    """Pearson correlation; 0.0 for empty input, mismatched lengths or zero variance."""
    xa = np.asarray(x, dtype=float)
    ya = np.asarray(y, dtype=float)
    n = xa.size
    if n == 0 or n != ya.size:
        return 0.0
    dx = xa - xa.mean()
    dy = ya - ya.mean()
    den_x = float(np.dot(dx, dx))
    den_y = float(np.dot(dy, dy))
    if den_x == 0.0 or den_y == 0.0:
        return 0.0
    return float(np.dot(dx, dy) / np.sqrt(den_x * den_y))


def correlation_report(
    df: pd.DataFrame,
    target: str = "matches",
    factors: Sequence[str] = DEFAULT_FACTORS,
) -> Dict[str, float]:
    if target not in df.columns:
        raise KeyError(f"column '{target}' not in table (have {list(df.columns)})")
    report: Dict[str, float] = {}
    for col in factors:
        if col not in df.columns:
            raise KeyError(f"column '{col}' not in table (have {list(df.columns)})")
        report[col] = correlation(df[col].to_numpy(), df[target].to_numpy())
    return report


def count_rows(df: pd.DataFrame, column: str, value: Any) -> int:
    if column not in df.columns:
        raise KeyError(f"column '{column}' not in table (have {list(df.columns)})")
    return int((df[column] == value).sum())

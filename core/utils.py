from __future__ import annotations

import math
from typing import Iterable

import numpy as np
import pandas as pd

MONTHS_PER_YEAR = 12


def require_columns(df: pd.DataFrame, cols: Iterable[str]) -> None:
    missing = [c for c in cols if c not in df.columns]
    if missing:
        raise ValueError(f"Missing required columns: {missing}")


def annual_to_monthly_return(annual_pct: float, leverage: float = 1.0) -> float:
    """Leveraged annual percentage return -> arithmetic monthly mean (r / 12)."""
    return leverage * (annual_pct / 100.0) / MONTHS_PER_YEAR


def annual_to_monthly_risk(annual_pct: float, leverage: float = 1.0) -> float:
    """Leveraged annual percentage volatility -> monthly std dev (sigma / sqrt(12))."""
    return leverage * (annual_pct / 100.0) / math.sqrt(MONTHS_PER_YEAR)


def deflator(inflation_rate_pct: float, years) -> np.ndarray:
    """Cumulative price level (1 + i)^years; vectorized over `years`."""
    return np.power(1.0 + inflation_rate_pct / 100.0, np.asarray(years, dtype=float))


def nearest_rank_index(n: int, pct: float) -> int:
    """Floor-indexed nearest rank: floor(n * pct / 100), clamped to the last element."""
    if n <= 0:
        raise ValueError("Cannot take a percentile of an empty sample.")
    return min(int(math.floor(n * pct / 100.0)), n - 1)

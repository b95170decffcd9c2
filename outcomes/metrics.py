"""
Final-outcome statistics: summary table and histogram bins for final capital.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np
import pandas as pd

from core.schema import PERCENTILE_FIELDS
from core.utils import nearest_rank_index

from .aggregator import nearest_rank_percentile

HISTOGRAM_COLUMNS = ["start", "end", "count"]


def final_outcome_summary(final_assets: Sequence[float]) -> pd.DataFrame:
    """
    One-row table: Trials, Mean, Std Dev, Min, P10..P90 (nearest rank), Max.
    Empty input gives an empty table.
    """
    values = np.sort(np.asarray(final_assets, dtype=float))
    if len(values) == 0:
        return pd.DataFrame()

    row = {
        "Trials": len(values),
        "Mean": float(np.mean(values)),
        "Std Dev": float(np.std(values)),
        "Min": float(values[0]),
    }
    for _, pct in PERCENTILE_FIELDS:
        row[f"P{pct:02d}"] = nearest_rank_percentile(values, pct)
    row["Max"] = float(values[-1])
    return pd.DataFrame([row])


def probability_below(final_assets: Sequence[float], threshold: float) -> float:
    """Fraction of trials finishing at or below `threshold`."""
    values = np.asarray(final_assets, dtype=float)
    if len(values) == 0:
        return 0.0
    return float(np.mean(values <= threshold))


def histogram_bins(
    values: Sequence[float],
    n_bins: int = 20,
    *,
    max_percentile: float = 100.0,
) -> pd.DataFrame:
    """
    Equal-width bins over [min, max] of `values`.

    Each value lands in bin floor((v - min) / width), with the maximum folded
    into the last bin. All-equal input gives a single bin holding everything.

    max_percentile < 100 drops the upper tail first: only values <= the
    nearest-rank value at that percentile are binned.
    """
    data = np.asarray(values, dtype=float)
    if len(data) == 0:
        return pd.DataFrame(columns=HISTOGRAM_COLUMNS)

    ordered = np.sort(data)
    lo = ordered[0]
    if max_percentile >= 100:
        hi = ordered[-1]
    else:
        hi = max(ordered[nearest_rank_index(len(ordered), max_percentile)], lo)
    data = data[data <= hi]

    width = (hi - lo) / n_bins
    if hi == lo or width <= 0:
        return pd.DataFrame([{"start": lo, "end": hi, "count": len(data)}], columns=HISTOGRAM_COLUMNS)

    idx = np.minimum(np.floor((data - lo) / width).astype(int), n_bins - 1)
    counts = np.bincount(idx, minlength=n_bins)
    starts = lo + np.arange(n_bins) * width
    return pd.DataFrame({"start": starts, "end": starts + width, "count": counts}, columns=HISTOGRAM_COLUMNS)

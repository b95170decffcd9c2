"""
Aggregate per-trial capital traces into percentile bands and a ruin rate.

Percentiles use floor-indexed nearest rank on the sorted sample:
    value = sorted[min(floor(n * p / 100), n - 1)]
No interpolation: every reported number is a capital value some trial
actually reached.

Ruin (bankruptcy) = final capital <= 0. The rate is a percentage of trials,
defined as 0 when no trials ran.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

import numpy as np

from core.schema import PERCENTILE_FIELDS, SimulationDataPoint, SimulationResult
from core.utils import nearest_rank_index


def nearest_rank_percentile(sorted_values: Sequence[float], pct: float) -> float:
    return float(sorted_values[nearest_rank_index(len(sorted_values), pct)])


def summarize_year(year: int, samples: Iterable[float]) -> Optional[SimulationDataPoint]:
    """Percentile point for one year's samples; None for an empty bucket."""
    ordered = np.sort(np.fromiter(samples, dtype=float))
    if len(ordered) == 0:
        return None
    values = {name: nearest_rank_percentile(ordered, pct) for name, pct in PERCENTILE_FIELDS}
    return SimulationDataPoint(year=year, **values)


def summarize_year_samples(samples_by_year: Sequence[Iterable[float]]) -> List[SimulationDataPoint]:
    """One data point per non-empty year bucket, ascending by year."""
    points = []
    for year, samples in enumerate(samples_by_year):
        point = summarize_year(year, samples)
        if point is not None:
            points.append(point)
    return points


def bankruptcy_rate(final_assets: Sequence[float], n_trials: Optional[int] = None) -> float:
    n = len(final_assets) if n_trials is None else n_trials
    if n <= 0:
        return 0.0
    ruined = int(np.count_nonzero(np.asarray(final_assets, dtype=float) <= 0))
    return 100.0 * ruined / n


def aggregate_trials(
    traces: np.ndarray,
    *,
    total_years: int,
    seed: Optional[int] = None,
) -> SimulationResult:
    """
    Reduce a (n_trials × total_years + 1) trace matrix.

    Column y holds every trial's capital at the end of year y; the last
    column is each trial's final capital.
    """
    traces = np.asarray(traces, dtype=float)
    if traces.ndim != 2 or traces.shape[1] != total_years + 1:
        raise ValueError(
            f"Expected traces of shape (n_trials, {total_years + 1}), got {traces.shape}"
        )
    final_assets = traces[:, -1].copy()
    ordered = np.sort(traces, axis=0)
    time_series = summarize_year_samples([ordered[:, y] for y in range(total_years + 1)])
    return SimulationResult(
        time_series=time_series,
        final_assets=final_assets,
        bankruptcy_rate=bankruptcy_rate(final_assets),
        total_years=total_years,
        seed=seed,
    )


def empty_timeline_result(initial_capital: float) -> SimulationResult:
    """No phases: a single year-0 point at the initial capital, no trials run."""
    c0 = float(initial_capital)
    return SimulationResult(
        time_series=[SimulationDataPoint(year=0, p10=c0, p25=c0, median=c0, p75=c0, p90=c0)],
        final_assets=np.array([c0]),
        bankruptcy_rate=100.0 if c0 <= 0 else 0.0,
        total_years=0,
    )


def no_trials_result() -> SimulationResult:
    return SimulationResult(
        time_series=[],
        final_assets=np.array([], dtype=float),
        bankruptcy_rate=0.0,
        total_years=0,
    )

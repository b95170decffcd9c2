"""
Trial Executor: one full pass over the monthly timeline.

Per month:
  1. growth:       if capital > 0, capital *= 1 + N(monthly_return, monthly_risk)
                   (no growth while capital <= 0; ruin absorbs growth, not cashflow)
  2. contribution: capital += monthly_contribution, always
  3. year end:     every 12th month, add that year's spot payments,
                   then record capital as the sample for that year

Year 0 of every trace is the initial capital.

`run_trial` is the single-trial form. `run_trial_block` runs the same algorithm
for a block of trials at once; growth is masked per trial, so each row of its
output is exactly what `run_trial` would produce for some random stream.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

import numpy as np

from core.utils import MONTHS_PER_YEAR
from distributions.sampler import BoxMullerSampler
from phases.compiler import CompiledPhase

from .events import SpotPaymentSchedule


@dataclass
class TrialResult:
    """Year-indexed capital trace (trace[0] = initial capital) and final capital."""
    trace: np.ndarray  # shape (total_years + 1,)
    final: float


def run_trial(
    initial_capital: float,
    compiled: List[CompiledPhase],
    schedule: SpotPaymentSchedule,
    sampler: BoxMullerSampler,
) -> TrialResult:
    total_months = sum(c.duration_months for c in compiled)
    total_years = total_months // MONTHS_PER_YEAR

    trace = np.empty(total_years + 1, dtype=float)
    capital = float(initial_capital)
    trace[0] = capital
    month = 0

    for phase in compiled:
        for _ in range(phase.duration_months):
            if capital > 0:
                capital *= 1.0 + sampler.normal(phase.monthly_return, phase.monthly_risk)
            capital += phase.monthly_contribution

            month += 1
            if month % MONTHS_PER_YEAR == 0:
                year = month // MONTHS_PER_YEAR
                capital += schedule.amount_for_year(year)
                if year <= total_years:
                    trace[year] = capital

    return TrialResult(trace=trace, final=capital)


def run_trial_block(
    n_trials: int,
    initial_capital: float,
    schedule_arrays: Dict[str, np.ndarray],
    payments: SpotPaymentSchedule,
    sampler: BoxMullerSampler,
) -> np.ndarray:
    """
    Run `n_trials` trials side by side.

    Parameters
    ----------
    schedule_arrays : dict
        Output of phases.compiler.monthly_schedule(): month-indexed "mean",
        "std" and "contribution" arrays.

    Returns
    -------
    traces : np.ndarray, shape (n_trials, total_years + 1)
        Year-end capital per trial; the last column is the final capital.
    """
    mean = schedule_arrays["mean"]
    std = schedule_arrays["std"]
    contribution = schedule_arrays["contribution"]
    n_months = len(mean)
    total_years = n_months // MONTHS_PER_YEAR

    traces = np.empty((n_trials, total_years + 1), dtype=float)
    capital = np.full(n_trials, float(initial_capital), dtype=float)
    traces[:, 0] = capital

    for m in range(n_months):
        growing = capital > 0
        if growing.any():
            r = mean[m] + sampler.standard_normals(n_trials) * std[m]
            capital = np.where(growing, capital * (1.0 + r), capital)
        capital += contribution[m]

        month = m + 1
        if month % MONTHS_PER_YEAR == 0:
            year = month // MONTHS_PER_YEAR
            capital += payments.amount_for_year(year)
            traces[:, year] = capital

    return traces

"""
Plan Compiler: turns the human-authored phase timeline into per-month parameters.

For each phase:
    monthly_return = leverage * (annual_return_pct / 100) / 12
    monthly_risk   = leverage * (annual_risk_pct / 100) / sqrt(12)
    duration_months = duration_years * 12   (non-positive durations -> 0 months)

Leverage scales both the expected gain and the volatility, so a 2x phase has
twice the drift and twice the standard deviation of its unlevered version.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

import numpy as np

from core.schema import Phase
from core.utils import MONTHS_PER_YEAR, annual_to_monthly_return, annual_to_monthly_risk


@dataclass(frozen=True)
class CompiledPhase:
    monthly_return: float
    monthly_risk: float
    duration_months: int
    monthly_contribution: float
    increase_with_inflation: bool = False


def compile_phase(phase: Phase) -> CompiledPhase:
    leverage = float(phase.leverage)
    return CompiledPhase(
        monthly_return=annual_to_monthly_return(float(phase.annual_return_pct), leverage),
        monthly_risk=annual_to_monthly_risk(float(phase.annual_risk_pct), leverage),
        duration_months=max(int(phase.duration_years), 0) * MONTHS_PER_YEAR,
        monthly_contribution=float(phase.monthly_contribution),
        increase_with_inflation=bool(phase.increase_with_inflation),
    )


def compile_phases(phases: Iterable[Phase]) -> List[CompiledPhase]:
    """Compile phases in sequence order. Zero-length phases are kept (they contribute no months)."""
    return [compile_phase(p) for p in phases]


def total_months(compiled: Iterable[CompiledPhase]) -> int:
    return sum(c.duration_months for c in compiled)


def total_years(compiled: Iterable[CompiledPhase]) -> int:
    return total_months(compiled) // MONTHS_PER_YEAR


def monthly_schedule(
    compiled: List[CompiledPhase],
    *,
    inflation_rate_pct: Optional[float] = None,
    escalate_contributions: bool = False,
) -> dict:
    """
    Flatten compiled phases into month-indexed arrays.

    Returns dict of equal-length arrays: "mean", "std", "contribution".
    When escalate_contributions is set and an inflation rate is given,
    contributions of flagged phases are multiplied by (1 + i)^(m / 12),
    m = months elapsed since simulation start.
    """
    n = total_months(compiled)
    mean = np.empty(n, dtype=float)
    std = np.empty(n, dtype=float)
    contribution = np.empty(n, dtype=float)
    escalate = np.zeros(n, dtype=bool)

    start = 0
    for c in compiled:
        end = start + c.duration_months
        mean[start:end] = c.monthly_return
        std[start:end] = c.monthly_risk
        contribution[start:end] = c.monthly_contribution
        escalate[start:end] = c.increase_with_inflation
        start = end

    if escalate_contributions and inflation_rate_pct is not None and n > 0:
        elapsed = np.arange(n, dtype=float)
        factor = np.power(1.0 + inflation_rate_pct / 100.0, elapsed / MONTHS_PER_YEAR)
        contribution = np.where(escalate, contribution * factor, contribution)

    return {"mean": mean, "std": std, "contribution": contribution}

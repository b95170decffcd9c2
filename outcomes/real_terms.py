"""
Nominal -> real conversion for display.

The engine works in nominal currency. To show results in today's purchasing
power, each year's values are divided by the cumulative price level
(1 + inflation)^year; final assets use the deflator at the last simulated year.
Signs are preserved, so the bankruptcy rate is unchanged.
"""

from __future__ import annotations

from dataclasses import replace

import numpy as np

from core.schema import SimulationDataPoint, SimulationResult
from core.utils import deflator


def deflate_point(point: SimulationDataPoint, inflation_rate_pct: float) -> SimulationDataPoint:
    d = float(deflator(inflation_rate_pct, point.year))
    return SimulationDataPoint(
        year=point.year,
        p10=point.p10 / d,
        p25=point.p25 / d,
        median=point.median / d,
        p75=point.p75 / d,
        p90=point.p90 / d,
    )


def to_real_terms(result: SimulationResult, inflation_rate_pct: float) -> SimulationResult:
    if result.is_real:
        raise ValueError("Result is already expressed in real terms.")
    final_deflator = float(deflator(inflation_rate_pct, result.total_years))
    return replace(
        result,
        time_series=[deflate_point(pt, inflation_rate_pct) for pt in result.time_series],
        final_assets=np.asarray(result.final_assets, dtype=float) / final_deflator,
        is_real=True,
        notes=list(result.notes) + [f"Deflated at {inflation_rate_pct}% annual inflation"],
    )

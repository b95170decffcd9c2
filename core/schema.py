from __future__ import annotations

import math
from dataclasses import dataclass, field, fields
from typing import List, Optional, Tuple

import numpy as np
import pandas as pd

# Percentile fields reported for every simulated year, with their levels (%).
PERCENTILE_FIELDS: Tuple[Tuple[str, int], ...] = (
    ("p10", 10),
    ("p25", 25),
    ("median", 50),
    ("p75", 75),
    ("p90", 90),
)

TIME_SERIES_COLUMNS: Tuple[str, ...] = ("year",) + tuple(name for name, _ in PERCENTILE_FIELDS)

# Column names accepted when phases / spot payments are loaded from a table.
PHASE_TABLE_COLUMNS: Tuple[str, ...] = (
    "name",
    "durationYears",
    "monthlyContribution",
    "annualReturn",
    "annualRisk",
    "leverage",
)

SPOT_PAYMENT_TABLE_COLUMNS: Tuple[str, ...] = ("name", "year", "amount")


@dataclass(frozen=True)
class Phase:
    """A contiguous span of the plan with constant contribution/return/risk/leverage."""

    duration_years: int
    monthly_contribution: float = 0.0
    annual_return_pct: float = 0.0
    annual_risk_pct: float = 0.0
    leverage: float = 1.0
    increase_with_inflation: bool = False
    name: str = ""


@dataclass(frozen=True)
class SpotPayment:
    """One-off cash adjustment applied when simulated `year` ends."""

    year: int
    amount: float
    name: str = ""


@dataclass(frozen=True)
class SimulationParams:
    initial_capital: float
    num_simulations: int
    phases: Tuple[Phase, ...] = ()
    spot_payments: Tuple[SpotPayment, ...] = ()
    inflation_rate: Optional[float] = None  # percent

    def __post_init__(self):
        # Accept lists from callers, store tuples.
        object.__setattr__(self, "phases", tuple(self.phases))
        object.__setattr__(self, "spot_payments", tuple(self.spot_payments))

    @property
    def total_years(self) -> int:
        return sum(max(int(p.duration_years), 0) for p in self.phases)

    def check_finite(self) -> None:
        """Raise ValueError if any numeric input is NaN or infinite."""
        bad = []
        if not math.isfinite(self.initial_capital):
            bad.append("initial_capital")
        if self.inflation_rate is not None and not math.isfinite(self.inflation_rate):
            bad.append("inflation_rate")
        for i, phase in enumerate(self.phases):
            for f in fields(phase):
                value = getattr(phase, f.name)
                if isinstance(value, float) and not math.isfinite(value):
                    bad.append(f"phases[{i}].{f.name}")
        for i, payment in enumerate(self.spot_payments):
            if not math.isfinite(payment.amount):
                bad.append(f"spot_payments[{i}].amount")
        if bad:
            raise ValueError(f"Non-finite simulation inputs: {bad}")


@dataclass(frozen=True)
class SimulationDataPoint:
    year: int
    p10: float
    p25: float
    median: float
    p75: float
    p90: float


@dataclass
class SimulationResult:
    """
    Output of one engine invocation.

    time_series:     one point per simulated year (ascending), percentile bands
    final_assets:    final capital of every trial (unordered)
    bankruptcy_rate: percentage of trials finishing at or below zero, in [0, 100]
    """

    time_series: List[SimulationDataPoint]
    final_assets: np.ndarray
    bankruptcy_rate: float
    total_years: int = 0
    seed: Optional[int] = None
    is_real: bool = False
    notes: List[str] = field(default_factory=list)

    @property
    def trial_count(self) -> int:
        return len(self.final_assets)

    def time_series_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            [{name: getattr(pt, name) for name in TIME_SERIES_COLUMNS} for pt in self.time_series],
            columns=list(TIME_SERIES_COLUMNS),
        )

    def to_dict(self) -> dict:
        """JSON-friendly view with camelCase keys, matching the plan file format."""
        return {
            "timeSeries": [
                {name: getattr(pt, name) for name in TIME_SERIES_COLUMNS} for pt in self.time_series
            ],
            "finalAssets": [float(v) for v in self.final_assets],
            "bankruptcyRate": float(self.bankruptcy_rate),
            "totalYears": self.total_years,
            "seed": self.seed,
            "isReal": self.is_real,
        }

"""
Risk assessment: turns a simulation result into a headline an investor can act on.

  Q1: "How likely am I to run out?"        → bankruptcy rate and its risk level
  Q2: "What does a bad outcome look like?" → p10 final capital
  Q3: "What is the typical outcome?"       → median final capital

Risk levels match the dashboard colouring:
  safe     rate <= 5%
  caution  5% < rate <= 20%
  danger   rate > 20%
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np
import pandas as pd

from core.schema import SimulationResult

from .aggregator import nearest_rank_percentile

SAFE_MAX_RATE = 5.0
CAUTION_MAX_RATE = 20.0


def risk_level(bankruptcy_rate: float) -> str:
    if bankruptcy_rate > CAUTION_MAX_RATE:
        return "danger"
    if bankruptcy_rate > SAFE_MAX_RATE:
        return "caution"
    return "safe"


@dataclass
class RiskAssessment:
    bankruptcy_rate: float
    level: str
    trials: int
    median_final: Optional[float]
    p10_final: Optional[float]
    p90_final: Optional[float]
    flags: List[str] = field(default_factory=list)

    def to_dataframe(self) -> pd.DataFrame:
        def _money(v):
            return f"{v:,.0f}" if v is not None else "N/A"

        rows = [
            {"Metric": "Bankruptcy Rate", "Value": f"{self.bankruptcy_rate:.2f}%"},
            {"Metric": "Risk Level", "Value": self.level},
            {"Metric": "Trials", "Value": f"{self.trials:,}"},
            {"Metric": "Median Final Capital", "Value": _money(self.median_final)},
            {"Metric": "P10 Final Capital", "Value": _money(self.p10_final)},
            {"Metric": "P90 Final Capital", "Value": _money(self.p90_final)},
        ]
        if self.flags:
            rows.append({"Metric": "FLAGS", "Value": " | ".join(self.flags)})
        return pd.DataFrame(rows)


def assess_risk(result: SimulationResult) -> RiskAssessment:
    finals = np.sort(np.asarray(result.final_assets, dtype=float))
    rate = float(result.bankruptcy_rate)

    if len(finals) > 0:
        median_final = nearest_rank_percentile(finals, 50)
        p10_final = nearest_rank_percentile(finals, 10)
        p90_final = nearest_rank_percentile(finals, 90)
    else:
        median_final = p10_final = p90_final = None

    flags = []
    if len(finals) == 0:
        flags.append("NO_TRIALS: nothing was simulated")
    if rate > CAUTION_MAX_RATE:
        flags.append(f"HIGH_RUIN: {rate:.1f}% of trials end at or below zero")
    if p10_final is not None and p10_final <= 0 < rate <= CAUTION_MAX_RATE:
        flags.append("TAIL_RUIN: worst 10% of trials end at or below zero")
    if median_final is not None and median_final <= 0:
        flags.append("MEDIAN_RUIN: the typical trial ends at or below zero")

    return RiskAssessment(
        bankruptcy_rate=rate,
        level=risk_level(rate),
        trials=len(finals),
        median_final=median_final,
        p10_final=p10_final,
        p90_final=p90_final,
        flags=flags,
    )

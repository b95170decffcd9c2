"""
Named plan presets: ready-made phase timelines for the dashboard and CLI.

"fire" is the four-phase plan the dashboard opens with: two stages
of accumulation, a period of reduced saving, then a forty-year drawdown at
roughly 4% of the expected pot plus a small allowance.
"""

from __future__ import annotations

from typing import Dict, Tuple

from core.schema import Phase

PLAN_PRESETS: Dict[str, Tuple[Phase, ...]] = {
    "fire": (
        Phase(name="Start saving", duration_years=2, monthly_contribution=200_000,
              annual_return_pct=8, annual_risk_pct=16),
        Phase(name="Aggressive saving", duration_years=10, monthly_contribution=250_000,
              annual_return_pct=8, annual_risk_pct=16),
        Phase(name="Rising expenses", duration_years=10, monthly_contribution=200_000,
              annual_return_pct=8, annual_risk_pct=16),
        Phase(name="Retire, draw down 4%", duration_years=40, monthly_contribution=-23_000,
              annual_return_pct=4, annual_risk_pct=16),
    ),
    "steady_saver": (
        Phase(name="Index fund saving", duration_years=30, monthly_contribution=50_000,
              annual_return_pct=6, annual_risk_pct=15, increase_with_inflation=True),
    ),
    "leveraged_accumulation": (
        Phase(name="Leveraged growth", duration_years=10, monthly_contribution=100_000,
              annual_return_pct=7, annual_risk_pct=18, leverage=2),
        Phase(name="De-risk", duration_years=10, monthly_contribution=100_000,
              annual_return_pct=5, annual_risk_pct=10),
        Phase(name="Drawdown", duration_years=30, monthly_contribution=-150_000,
              annual_return_pct=4, annual_risk_pct=8),
    ),
}

DEFAULT_PRESET = "fire"


def get_preset(name: str) -> Tuple[Phase, ...]:
    try:
        return PLAN_PRESETS[name]
    except KeyError:
        raise KeyError(
            f"Unknown plan preset {name!r}. Available: {sorted(PLAN_PRESETS)}"
        ) from None

"""
Plan validation before the run.

Catches problems early:
- Non-finite numbers (the engine rejects them outright)
- Negative trial counts or leverage
- Timelines that simulate nothing
- Spot payments that can never be applied
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List

from core.schema import SimulationParams
from engine.events import SpotPaymentSchedule

MAX_REASONABLE_LEVERAGE = 3.0
LARGE_TRIAL_COUNT = 1_000_000


@dataclass
class ValidationResult:
    """Collects all validation warnings/errors for a plan."""
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def summary(self) -> str:
        lines = []
        if self.errors:
            lines.append(f"ERRORS ({len(self.errors)}):")
            for e in self.errors:
                lines.append(f"  ✗ {e}")
        if self.warnings:
            lines.append(f"WARNINGS ({len(self.warnings)}):")
            for w in self.warnings:
                lines.append(f"  ⚠ {w}")
        if not lines:
            lines.append("✓ All checks passed.")
        return "\n".join(lines)


def validate_params(params: SimulationParams) -> ValidationResult:
    """
    Run all validation checks on a plan.
    Returns a ValidationResult with errors (blocking) and warnings (informational).
    """
    result = ValidationResult()

    # --- Finite numbers ---
    try:
        params.check_finite()
    except ValueError as exc:
        result.errors.append(str(exc))

    # --- Trial count ---
    if params.num_simulations < 0:
        result.errors.append(f"num_simulations is negative ({params.num_simulations}).")
    elif params.num_simulations == 0:
        result.warnings.append("num_simulations is 0; no trials will run.")
    elif params.num_simulations > LARGE_TRIAL_COUNT:
        result.warnings.append(
            f"num_simulations is {params.num_simulations:,}; expect a long run and high memory use."
        )

    # --- Phases ---
    if not params.phases:
        result.warnings.append("No phases; the projection is just the initial capital.")

    for i, phase in enumerate(params.phases):
        label = phase.name or f"phase {i + 1}"
        if phase.duration_years <= 0:
            result.warnings.append(f"{label}: duration is {phase.duration_years} years; it is skipped.")
        if phase.leverage < 0:
            result.errors.append(f"{label}: leverage is negative ({phase.leverage}).")
        elif phase.leverage > MAX_REASONABLE_LEVERAGE:
            result.warnings.append(f"{label}: leverage {phase.leverage}x exceeds {MAX_REASONABLE_LEVERAGE}x.")
        if phase.annual_risk_pct < 0:
            result.warnings.append(
                f"{label}: annual risk is negative ({phase.annual_risk_pct}%); its magnitude is what matters."
            )

    if params.phases and params.total_years == 0:
        result.warnings.append("Total timeline is 0 years.")

    # --- Spot payments ---
    unreachable = SpotPaymentSchedule(params.spot_payments).unreachable_years(params.total_years)
    if unreachable:
        result.warnings.append(
            f"Spot payments in year(s) {unreachable} fall outside years 1..{params.total_years} and are never applied."
        )

    # --- Inflation ---
    if params.inflation_rate is not None and math.isfinite(params.inflation_rate) and params.inflation_rate <= -100:
        result.errors.append(f"inflation_rate {params.inflation_rate}% is at or below -100%.")

    return result

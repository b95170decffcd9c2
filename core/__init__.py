"""
Core package: data model, run configuration, and shared numeric helpers.
No business logic lives here.
"""

from .schema import (
    PERCENTILE_FIELDS,
    Phase,
    SimulationDataPoint,
    SimulationParams,
    SimulationResult,
    SpotPayment,
)
from .config import SimulationConfig
from .utils import require_columns, annual_to_monthly_return, annual_to_monthly_risk, deflator

__all__ = [
    "PERCENTILE_FIELDS",
    "Phase",
    "SpotPayment",
    "SimulationParams",
    "SimulationDataPoint",
    "SimulationResult",
    "SimulationConfig",
    "require_columns",
    "annual_to_monthly_return",
    "annual_to_monthly_risk",
    "deflator",
]

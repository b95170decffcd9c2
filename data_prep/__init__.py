"""
Data preparation: sanitizing raw inputs, loading plan files, validation.
"""

from .loader import load_plan, load_phase_table, load_spot_payment_table
from .sanitize import PlanInput, PhaseInput, SpotPaymentInput, sanitize_plan
from .validators import ValidationResult, validate_params

__all__ = [
    "load_plan",
    "load_phase_table",
    "load_spot_payment_table",
    "PlanInput",
    "PhaseInput",
    "SpotPaymentInput",
    "sanitize_plan",
    "ValidationResult",
    "validate_params",
]

"""
Plan phases: compile the phase timeline into per-month simulation parameters.
"""

from .compiler import CompiledPhase, compile_phase, compile_phases, monthly_schedule, total_years
from .presets import PLAN_PRESETS, DEFAULT_PRESET, get_preset

__all__ = [
    "CompiledPhase",
    "compile_phase",
    "compile_phases",
    "monthly_schedule",
    "total_years",
    "PLAN_PRESETS",
    "DEFAULT_PRESET",
    "get_preset",
]

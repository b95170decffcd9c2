"""
Simulation engine: single-trial executor, Monte Carlo runner, background task boundary.
"""

from .events import SpotPaymentSchedule
from .trial import TrialResult, run_trial, run_trial_block
from .runner import SimulationCancelled, run_simulation
from .background import SimulationTask, submit_simulation, run_simulation_async

__all__ = [
    "SpotPaymentSchedule",
    "TrialResult",
    "run_trial",
    "run_trial_block",
    "SimulationCancelled",
    "run_simulation",
    "SimulationTask",
    "submit_simulation",
    "run_simulation_async",
]

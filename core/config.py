"""
Simulation run configuration.
Plan inputs live in core.schema.SimulationParams; this holds how a run executes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class SimulationConfig:
    seed: Optional[int] = None

    # trials per work unit; each chunk draws from its own spawned stream
    chunk_size: int = 2_000
    n_workers: Optional[int] = None  # None -> os.cpu_count()
    parallel_threshold: int = 20_000  # below this, stay in-process

    # escalate flagged contributions by cumulative inflation (off = observed behaviour)
    escalate_contributions: bool = False

    # output controls
    histogram_bins: int = 20

    def __post_init__(self):
        if self.chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {self.chunk_size}")
        if self.n_workers is not None and self.n_workers <= 0:
            raise ValueError(f"n_workers must be positive, got {self.n_workers}")
        if self.histogram_bins <= 0:
            raise ValueError(f"histogram_bins must be positive, got {self.histogram_bins}")

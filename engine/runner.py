"""
Monte Carlo runner: runs the Trial Executor N times and hands the traces to the aggregator.

Flow:
  1. degenerate inputs are answered directly (empty timeline, zero trials)
  2. phases are compiled once into month-indexed arrays
  3. trials are split into chunks of `config.chunk_size`; chunk k draws from the
     k-th child of the run's root SeedSequence
  4. chunks run in-process, or on a process pool for large runs; each chunk
     writes into its own slice of pre-sized (n_trials × years+1) storage
  5. outcomes.aggregator reduces the traces to percentile bands + ruin rate

The seed stream is tied to the chunk index, not to the worker, so the same
seed and chunk size give identical results for any worker count.

Cancellation: pass a threading.Event; it is checked between chunks and, once
set, SimulationCancelled is raised. Partial results are never returned.
"""

from __future__ import annotations

import logging
import os
import threading
from concurrent.futures import ProcessPoolExecutor, as_completed
from typing import Callable, Dict, List, Optional, Tuple

import numpy as np

from core.config import SimulationConfig
from core.schema import SimulationParams, SimulationResult
from core.utils import MONTHS_PER_YEAR
from distributions.sampler import root_seed_sequence, sampler_for_stream
from outcomes.aggregator import aggregate_trials, empty_timeline_result, no_trials_result
from phases.compiler import compile_phases, monthly_schedule

from .events import SpotPaymentSchedule
from .trial import run_trial_block

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


class SimulationCancelled(RuntimeError):
    """Raised when a run is cancelled before all trials complete."""


def _chunk_bounds(n_trials: int, chunk_size: int) -> List[Tuple[int, int]]:
    return [(start, min(start + chunk_size, n_trials)) for start in range(0, n_trials, chunk_size)]


def _run_chunk(
    n_trials: int,
    initial_capital: float,
    schedule_arrays: Dict[str, np.ndarray],
    payments: SpotPaymentSchedule,
    stream: np.random.SeedSequence,
) -> np.ndarray:
    # Top-level so it pickles for the process pool.
    return run_trial_block(n_trials, initial_capital, schedule_arrays, payments, sampler_for_stream(stream))


def _resolve_workers(config: SimulationConfig, n_chunks: int, n_trials: int) -> int:
    if n_trials < config.parallel_threshold or n_chunks < 2:
        return 1
    workers = config.n_workers or os.cpu_count() or 1
    return max(1, min(workers, n_chunks))


def run_simulation(
    params: SimulationParams,
    config: Optional[SimulationConfig] = None,
    *,
    cancel_event: Optional[threading.Event] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> SimulationResult:
    """
    Run the full Monte Carlo projection for a plan.

    Parameters
    ----------
    params : SimulationParams
        Sanitized plan inputs (finite numbers only)
    config : SimulationConfig, optional
        Seed, chunking and worker settings; defaults to SimulationConfig()
    cancel_event : threading.Event, optional
        Set from another thread to abandon the run
    progress_callback : callable, optional
        Called as progress_callback(completed_trials, total_trials) after each chunk

    Returns
    -------
    SimulationResult
    """
    cfg = config or SimulationConfig()
    params.check_finite()
    n_trials = int(params.num_simulations)
    if n_trials < 0:
        raise ValueError(f"num_simulations must be >= 0, got {n_trials}")

    if not params.phases:
        logger.info("Empty phase list; returning initial capital without running trials.")
        return empty_timeline_result(params.initial_capital)
    if n_trials == 0:
        logger.info("num_simulations is 0; returning an empty result.")
        return no_trials_result()

    compiled = compile_phases(params.phases)
    schedule_arrays = monthly_schedule(
        compiled,
        inflation_rate_pct=params.inflation_rate,
        escalate_contributions=cfg.escalate_contributions,
    )
    payments = SpotPaymentSchedule(params.spot_payments)
    total_years = len(schedule_arrays["mean"]) // MONTHS_PER_YEAR

    seed_seq = root_seed_sequence(cfg.seed)
    bounds = _chunk_bounds(n_trials, cfg.chunk_size)
    streams = seed_seq.spawn(len(bounds))
    n_workers = _resolve_workers(cfg, len(bounds), n_trials)

    logger.info(
        "Running %d trials over %d years (%d chunks, %d worker(s)).",
        n_trials, total_years, len(bounds), n_workers,
    )

    traces = np.empty((n_trials, total_years + 1), dtype=float)
    completed = 0

    def _check_cancelled():
        if cancel_event is not None and cancel_event.is_set():
            logger.warning("Simulation cancelled after %d of %d trials.", completed, n_trials)
            raise SimulationCancelled(f"Cancelled after {completed} of {n_trials} trials.")

    if n_workers == 1:
        for (start, end), stream in zip(bounds, streams):
            _check_cancelled()
            traces[start:end] = _run_chunk(end - start, params.initial_capital, schedule_arrays, payments, stream)
            completed += end - start
            logger.debug("Chunk [%d, %d) complete.", start, end)
            if progress_callback is not None:
                progress_callback(completed, n_trials)
    else:
        with ProcessPoolExecutor(max_workers=n_workers) as executor:
            futures = {
                executor.submit(
                    _run_chunk, end - start, params.initial_capital, schedule_arrays, payments, stream
                ): (start, end)
                for (start, end), stream in zip(bounds, streams)
            }
            for future in as_completed(futures):
                if cancel_event is not None and cancel_event.is_set():
                    for f in futures:
                        f.cancel()
                    _check_cancelled()
                start, end = futures[future]
                traces[start:end] = future.result()
                completed += end - start
                logger.debug("Chunk [%d, %d) complete.", start, end)
                if progress_callback is not None:
                    progress_callback(completed, n_trials)

    return aggregate_trials(traces, total_years=total_years, seed=seed_seq.entropy)

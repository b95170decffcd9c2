"""
Asynchronous task boundary around run_simulation.

The computation itself is synchronous; this module only moves it off the
caller's thread so a UI or event loop stays responsive, and exposes
cancellation.

    task = submit_simulation(params, SimulationConfig(seed=1))
    ...
    task.cancel()            # optional
    result = task.result()   # raises SimulationCancelled if cancelled

    result = await run_simulation_async(params)
"""

from __future__ import annotations

import asyncio
import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Optional

from core.config import SimulationConfig
from core.schema import SimulationParams, SimulationResult

from .runner import ProgressCallback, run_simulation

logger = logging.getLogger(__name__)


class SimulationTask:
    """A single background simulation run."""

    def __init__(
        self,
        params: SimulationParams,
        config: Optional[SimulationConfig] = None,
        *,
        progress_callback: Optional[ProgressCallback] = None,
    ):
        self.params = params
        self.config = config or SimulationConfig()
        self.progress_callback = progress_callback
        self._cancel_event = threading.Event()
        self._future: Optional[Future] = None
        self._own_executor: Optional[ThreadPoolExecutor] = None

    def _run(self) -> SimulationResult:
        return run_simulation(
            self.params,
            self.config,
            cancel_event=self._cancel_event,
            progress_callback=self.progress_callback,
        )

    def start(self, executor: Optional[Executor] = None) -> Future:
        if self._future is not None:
            raise RuntimeError("SimulationTask already started.")
        if executor is None:
            self._own_executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="simulation")
            executor = self._own_executor
        self._future = executor.submit(self._run)
        if self._own_executor is not None:
            self._own_executor.shutdown(wait=False)
        logger.debug("Simulation task started (%d trials).", self.params.num_simulations)
        return self._future

    @property
    def future(self) -> Future:
        if self._future is None:
            raise RuntimeError("SimulationTask not started.")
        return self._future

    def cancel(self) -> bool:
        """Request cancellation. Returns False if the run had already finished."""
        self._cancel_event.set()
        if self._future is None:
            return True
        if self._future.cancel():
            return True
        return not self._future.done()

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def done(self) -> bool:
        return self.future.done()

    def result(self, timeout: Optional[float] = None) -> SimulationResult:
        return self.future.result(timeout=timeout)


def submit_simulation(
    params: SimulationParams,
    config: Optional[SimulationConfig] = None,
    *,
    executor: Optional[Executor] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> SimulationTask:
    task = SimulationTask(params, config, progress_callback=progress_callback)
    task.start(executor)
    return task


async def run_simulation_async(
    params: SimulationParams,
    config: Optional[SimulationConfig] = None,
) -> SimulationResult:
    task = submit_simulation(params, config)
    try:
        return await asyncio.wrap_future(task.future)
    except asyncio.CancelledError:
        task.cancel()
        raise

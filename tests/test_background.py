import asyncio
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from core.config import SimulationConfig
from engine.background import SimulationTask, run_simulation_async, submit_simulation
from engine.runner import SimulationCancelled, run_simulation


def test_submit_matches_direct_run(make_params, growth_phase):
    params = make_params([growth_phase], num_simulations=200)
    config = SimulationConfig(seed=5)
    task = submit_simulation(params, config)
    result = task.result(timeout=30)
    assert task.done()
    assert not task.cancelled
    assert result.time_series == run_simulation(params, config).time_series


def test_external_executor(make_params, growth_phase):
    params = make_params([growth_phase], num_simulations=50)
    with ThreadPoolExecutor(max_workers=1) as pool:
        task = submit_simulation(params, SimulationConfig(seed=1), executor=pool)
        assert task.result(timeout=30).trial_count == 50


def test_cancel_running_task(make_params, growth_phase):
    started = threading.Event()
    gate = threading.Event()

    def hold_first_chunk(done, total):
        started.set()
        gate.wait(timeout=30)

    params = make_params([growth_phase], num_simulations=300)
    task = submit_simulation(
        params, SimulationConfig(seed=2, chunk_size=100), progress_callback=hold_first_chunk
    )
    assert started.wait(timeout=30)
    assert task.cancel()
    gate.set()
    with pytest.raises(SimulationCancelled):
        task.result(timeout=30)
    assert task.cancelled


def test_task_lifecycle_errors(make_params):
    task = SimulationTask(make_params([]))
    with pytest.raises(RuntimeError):
        _ = task.future
    task.start()
    with pytest.raises(RuntimeError):
        task.start()
    assert task.result(timeout=30).trial_count == 1


def test_async_run(make_params, growth_phase):
    params = make_params([growth_phase], num_simulations=100)
    config = SimulationConfig(seed=9)
    result = asyncio.run(run_simulation_async(params, config))
    assert result.trial_count == 100
    assert result.seed == 9

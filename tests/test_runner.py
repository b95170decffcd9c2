import threading

import numpy as np
import pytest

from core.config import SimulationConfig
from core.schema import Phase, SpotPayment
from engine.runner import SimulationCancelled, run_simulation
from tests.helpers import percentile_values


class TestDegenerateInputs:
    def test_empty_phases_negative_capital(self, make_params):
        result = run_simulation(make_params([], initial_capital=-5, num_simulations=1000))
        assert len(result.time_series) == 1
        point = result.time_series[0]
        assert point.year == 0
        assert percentile_values(point) == [-5] * 5
        np.testing.assert_array_equal(result.final_assets, [-5])
        assert result.bankruptcy_rate == 100

    def test_empty_phases_positive_capital(self, make_params):
        result = run_simulation(make_params([], initial_capital=10, num_simulations=0))
        assert result.bankruptcy_rate == 0
        np.testing.assert_array_equal(result.final_assets, [10])

    def test_zero_simulations(self, make_params, growth_phase):
        result = run_simulation(make_params([growth_phase], initial_capital=-1, num_simulations=0))
        assert result.time_series == []
        assert len(result.final_assets) == 0
        assert result.bankruptcy_rate == 0

    def test_zero_duration_phase(self, make_params):
        result = run_simulation(make_params([Phase(duration_years=0)], initial_capital=1_000_000, num_simulations=100))
        assert [pt.year for pt in result.time_series] == [0]
        assert percentile_values(result.time_series[0]) == [1_000_000] * 5
        np.testing.assert_array_equal(result.final_assets, np.full(100, 1_000_000.0))
        assert result.bankruptcy_rate == 0

    def test_non_finite_input_rejected(self, make_params, growth_phase):
        with pytest.raises(ValueError, match="initial_capital"):
            run_simulation(make_params([growth_phase], initial_capital=float("nan")))
        with pytest.raises(ValueError, match="annual_risk_pct"):
            run_simulation(make_params([Phase(duration_years=1, annual_risk_pct=float("inf"))]))

    def test_negative_trial_count_rejected(self, make_params, growth_phase):
        with pytest.raises(ValueError):
            run_simulation(make_params([growth_phase], num_simulations=-1))


class TestScenarios:
    def test_zero_capital_counts_as_ruin(self, make_params):
        phase = Phase(duration_years=1, monthly_contribution=0, annual_return_pct=0, annual_risk_pct=0, leverage=1)
        result = run_simulation(make_params([phase], initial_capital=0, num_simulations=1000))
        assert [pt.year for pt in result.time_series] == [0, 1]
        for point in result.time_series:
            assert percentile_values(point) == [0] * 5
        assert result.bankruptcy_rate == 100

    def test_spot_payment_reduces_later_years(self, make_params, flat_phase, spot_payment):
        base = run_simulation(make_params([flat_phase], num_simulations=200), SimulationConfig(seed=1))
        paid = run_simulation(
            make_params([flat_phase], num_simulations=200, spot_payments=[spot_payment]), SimulationConfig(seed=1)
        )
        for b, p in zip(base.time_series, paid.time_series):
            delta = -2_000_000 if b.year >= 5 else 0
            assert p.median - b.median == delta
            assert p.p10 - b.p10 == delta
        np.testing.assert_array_equal(paid.final_assets - base.final_assets, -2_000_000)
        assert paid.bankruptcy_rate == 100

    def test_zero_risk_collapses_percentiles(self, make_params):
        phases = [
            Phase(duration_years=5, monthly_contribution=1_000, annual_return_pct=6),
            Phase(duration_years=5, monthly_contribution=-500, annual_return_pct=3, leverage=2),
        ]
        few = run_simulation(make_params(phases, num_simulations=3), SimulationConfig(seed=1))
        many = run_simulation(make_params(phases, num_simulations=700), SimulationConfig(seed=2))
        for a, b in zip(few.time_series, many.time_series):
            assert len(set(percentile_values(a))) == 1
            assert percentile_values(a) == percentile_values(b)

    def test_single_trial_structure(self, make_params, growth_phase):
        result = run_simulation(make_params([growth_phase], num_simulations=1), SimulationConfig(seed=4))
        assert len(result.final_assets) == 1
        assert len(result.time_series) == 11
        for point in result.time_series:
            assert len(set(percentile_values(point))) == 1
        assert result.time_series[-1].median == result.final_assets[0]


class TestInvariants:
    def test_percentiles_ordered_and_year_zero_fixed(self, make_params, growth_phase):
        phases = [growth_phase, Phase(duration_years=20, monthly_contribution=-40_000, annual_return_pct=4, annual_risk_pct=25)]
        result = run_simulation(make_params(phases, initial_capital=500_000, num_simulations=2_000), SimulationConfig(seed=9))
        assert [pt.year for pt in result.time_series] == list(range(31))
        assert percentile_values(result.time_series[0]) == [500_000] * 5
        for point in result.time_series:
            values = percentile_values(point)
            assert values == sorted(values)
        assert 0 <= result.bankruptcy_rate <= 100
        assert len(result.final_assets) == 2_000

    def test_bankruptcy_rate_matches_final_assets(self, make_params):
        phase = Phase(duration_years=15, monthly_contribution=-9_000, annual_return_pct=5, annual_risk_pct=20)
        result = run_simulation(make_params([phase], num_simulations=1_000), SimulationConfig(seed=3))
        expected = 100.0 * np.count_nonzero(result.final_assets <= 0) / 1_000
        assert result.bankruptcy_rate == pytest.approx(expected)
        assert 0 < result.bankruptcy_rate < 100

    def test_last_year_percentiles_come_from_final_assets(self, make_params, growth_phase):
        result = run_simulation(make_params([growth_phase], num_simulations=10), SimulationConfig(seed=8))
        ordered = np.sort(result.final_assets)
        last = result.time_series[-1]
        assert last.p10 == ordered[1]
        assert last.median == ordered[5]
        assert last.p90 == ordered[9]


class TestReproducibility:
    def test_same_seed_same_result(self, make_params, growth_phase):
        cfg = SimulationConfig(seed=123, chunk_size=100)
        a = run_simulation(make_params([growth_phase], num_simulations=450), cfg)
        b = run_simulation(make_params([growth_phase], num_simulations=450), cfg)
        np.testing.assert_array_equal(a.final_assets, b.final_assets)
        assert a.seed == 123

    def test_unseeded_run_reports_reusable_seed(self, make_params, growth_phase):
        params = make_params([growth_phase], num_simulations=50)
        first = run_simulation(params)
        again = run_simulation(params, SimulationConfig(seed=first.seed))
        np.testing.assert_array_equal(first.final_assets, again.final_assets)

    def test_worker_count_does_not_change_result(self, make_params, growth_phase):
        params = make_params([growth_phase], num_simulations=600)
        serial = run_simulation(params, SimulationConfig(seed=5, chunk_size=150, n_workers=1))
        pooled = run_simulation(params, SimulationConfig(seed=5, chunk_size=150, n_workers=2, parallel_threshold=0))
        np.testing.assert_array_equal(serial.final_assets, pooled.final_assets)
        assert serial.time_series == pooled.time_series


class TestProgressAndCancellation:
    def test_progress_reports_every_chunk(self, make_params, growth_phase):
        calls = []
        run_simulation(
            make_params([growth_phase], num_simulations=250),
            SimulationConfig(seed=1, chunk_size=100),
            progress_callback=lambda done, total: calls.append((done, total)),
        )
        assert calls == [(100, 250), (200, 250), (250, 250)]

    def test_cancel_before_start(self, make_params, growth_phase):
        event = threading.Event()
        event.set()
        with pytest.raises(SimulationCancelled):
            run_simulation(make_params([growth_phase]), cancel_event=event)

    def test_cancel_mid_run(self, make_params, growth_phase):
        event = threading.Event()

        def _cancel_after_first(done, total):
            event.set()

        with pytest.raises(SimulationCancelled):
            run_simulation(
                make_params([growth_phase], num_simulations=300),
                SimulationConfig(seed=1, chunk_size=100),
                cancel_event=event,
                progress_callback=_cancel_after_first,
            )


def test_escalation_raises_contributions(make_params):
    phase = Phase(duration_years=10, monthly_contribution=1_000, increase_with_inflation=True)
    params = make_params([phase], initial_capital=0, num_simulations=5, inflation_rate=3.0)
    flat = run_simulation(params, SimulationConfig(seed=1))
    escalated = run_simulation(params, SimulationConfig(seed=1, escalate_contributions=True))
    assert flat.time_series[-1].median == pytest.approx(120_000)
    assert escalated.time_series[-1].median > flat.time_series[-1].median


def test_spot_payment_outside_timeline_is_ignored(make_params, flat_phase):
    result = run_simulation(
        make_params([flat_phase], num_simulations=10, spot_payments=[SpotPayment(year=11, amount=-5e9)]),
        SimulationConfig(seed=1),
    )
    np.testing.assert_array_equal(result.final_assets, 1_000_000)

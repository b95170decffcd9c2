import numpy as np
import pytest

from core.schema import Phase, SpotPayment
from distributions.sampler import BoxMullerSampler
from engine.events import SpotPaymentSchedule
from engine.trial import run_trial, run_trial_block
from phases.compiler import compile_phases, monthly_schedule


def _block(phases, n, initial_capital, payments=(), seed=0):
    compiled = compile_phases(phases)
    return run_trial_block(
        n, initial_capital, monthly_schedule(compiled), SpotPaymentSchedule(payments), BoxMullerSampler(seed=seed)
    )


class TestSpotPaymentSchedule:
    def test_same_year_payments_are_summed(self):
        schedule = SpotPaymentSchedule([SpotPayment(3, 100), SpotPayment(3, -40), SpotPayment(7, 5)])
        assert schedule.amount_for_year(3) == 60
        assert schedule.amount_for_year(7) == 5
        assert schedule.amount_for_year(4) == 0

    def test_unreachable_years(self):
        schedule = SpotPaymentSchedule([SpotPayment(0, 1), SpotPayment(2, 1), SpotPayment(11, 1)])
        assert schedule.unreachable_years(10) == [0, 11]
        assert not SpotPaymentSchedule()


class TestRunTrial:
    def test_year_zero_is_initial_capital(self, growth_phase):
        compiled = compile_phases([growth_phase])
        result = run_trial(123_456.0, compiled, SpotPaymentSchedule(), BoxMullerSampler(seed=1))
        assert result.trace[0] == 123_456.0
        assert len(result.trace) == 11
        assert result.final == result.trace[-1]

    def test_deterministic_compounding_without_risk(self):
        compiled = compile_phases([Phase(duration_years=2, monthly_contribution=100, annual_return_pct=12)])
        result = run_trial(1000.0, compiled, SpotPaymentSchedule(), BoxMullerSampler(seed=1))
        capital = 1000.0
        for _ in range(24):
            capital = capital * 1.01 + 100
        assert result.final == pytest.approx(capital)

    def test_no_growth_while_ruined_but_contributions_apply(self):
        compiled = compile_phases([Phase(duration_years=1, monthly_contribution=10, annual_return_pct=50, annual_risk_pct=80)])
        result = run_trial(-1000.0, compiled, SpotPaymentSchedule(), BoxMullerSampler(seed=1))
        # capital stays <= 0 for all 12 months, so only contributions move it
        assert result.final == pytest.approx(-1000.0 + 12 * 10)

    def test_recovery_via_contributions_resumes_growth(self):
        compiled = compile_phases([Phase(duration_years=1, monthly_contribution=100, annual_return_pct=12)])
        result = run_trial(-150.0, compiled, SpotPaymentSchedule(), BoxMullerSampler(seed=1))
        capital = -150.0
        for _ in range(12):
            if capital > 0:
                capital *= 1.01
            capital += 100
        assert result.final == pytest.approx(capital)

    def test_spot_payment_applied_before_year_sample(self, flat_phase, spot_payment):
        compiled = compile_phases([flat_phase])
        result = run_trial(1_000_000.0, compiled, SpotPaymentSchedule([spot_payment]), BoxMullerSampler(seed=1))
        np.testing.assert_array_equal(result.trace[:5], 1_000_000.0)
        np.testing.assert_array_equal(result.trace[5:], -1_000_000.0)

    def test_empty_timeline(self):
        result = run_trial(42.0, [], SpotPaymentSchedule(), BoxMullerSampler(seed=1))
        np.testing.assert_array_equal(result.trace, [42.0])
        assert result.final == 42.0

    def test_zero_length_phase_is_skipped(self):
        compiled = compile_phases([Phase(duration_years=0, monthly_contribution=999), Phase(duration_years=1)])
        result = run_trial(5.0, compiled, SpotPaymentSchedule(), BoxMullerSampler(seed=1))
        assert result.final == 5.0


class TestRunTrialBlock:
    def test_shape_and_year_zero(self, growth_phase):
        traces = _block([growth_phase], 64, 1_000.0)
        assert traces.shape == (64, 11)
        np.testing.assert_array_equal(traces[:, 0], 1_000.0)

    def test_single_trial_matches_scalar_executor(self, growth_phase):
        phases = [growth_phase, Phase(duration_years=5, monthly_contribution=-30_000, annual_return_pct=4, annual_risk_pct=20)]
        payments = [SpotPayment(3, 50_000), SpotPayment(12, -200_000)]
        block = _block(phases, 1, 250_000.0, payments, seed=21)
        scalar = run_trial(
            250_000.0, compile_phases(phases), SpotPaymentSchedule(payments), BoxMullerSampler(seed=21)
        )
        np.testing.assert_allclose(block[0], scalar.trace, rtol=1e-12)

    def test_ruined_rows_do_not_grow(self):
        phase = Phase(duration_years=3, monthly_contribution=0, annual_return_pct=20, annual_risk_pct=60)
        traces = _block([phase], 200, 0.0)
        np.testing.assert_array_equal(traces, 0.0)

    def test_spot_payment_shifts_every_trial_exactly(self, flat_phase, spot_payment):
        base = _block([flat_phase], 50, 1_000_000.0)
        shifted = _block([flat_phase], 50, 1_000_000.0, [spot_payment])
        np.testing.assert_array_equal(shifted[:, :5], base[:, :5])
        np.testing.assert_array_equal(shifted[:, 5:] - base[:, 5:], -2_000_000.0)

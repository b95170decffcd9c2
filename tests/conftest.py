import json
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from core.schema import Phase, SimulationParams, SpotPayment  # noqa: E402


@pytest.fixture
def sample_plan_path() -> Path:
    return PROJECT_ROOT / "plans" / "fire_plan.json"


@pytest.fixture
def sample_plan_dict(sample_plan_path) -> dict:
    return json.loads(sample_plan_path.read_text(encoding="utf-8"))


@pytest.fixture
def growth_phase() -> Phase:
    return Phase(duration_years=10, monthly_contribution=10_000, annual_return_pct=7, annual_risk_pct=15)


@pytest.fixture
def flat_phase() -> Phase:
    """No return, no risk, no contribution: capital only changes via spot payments."""
    return Phase(duration_years=10, monthly_contribution=0, annual_return_pct=0, annual_risk_pct=0)


@pytest.fixture
def make_params():
    def _make(phases=(), *, initial_capital=1_000_000.0, num_simulations=500, spot_payments=(), inflation_rate=None):
        return SimulationParams(
            initial_capital=initial_capital,
            num_simulations=num_simulations,
            phases=tuple(phases),
            spot_payments=tuple(spot_payments),
            inflation_rate=inflation_rate,
        )
    return _make


@pytest.fixture
def spot_payment() -> SpotPayment:
    return SpotPayment(year=5, amount=-2_000_000, name="Tuition")

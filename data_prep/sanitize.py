"""
Input sanitization: coerce loosely typed form/JSON values into engine inputs.

Front ends hand over numbers that may be blank strings, None, numeric strings
or garbage. The engine only accepts finite numbers, so everything is coerced
here, before the engine boundary:

  blank / None / non-numeric / NaN / inf  -> 0
  leverage blank or non-numeric           -> 1
  durations, years, trial counts          -> truncated to int
  negative trial count                    -> 0

Keys may be camelCase (as plan files and the web form send them) or snake_case.
"""

from __future__ import annotations

import math
from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from core.schema import Phase, SimulationParams, SpotPayment


def coerce_number(value: Any, default: float = 0.0) -> float:
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, str):
        value = value.strip().replace(",", "")
        if value == "":
            return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


def coerce_int(value: Any, default: int = 0) -> int:
    return int(coerce_number(value, float(default)))


def coerce_flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "y", "on"}
    if value is None:
        return False
    try:
        return bool(value) and not (isinstance(value, float) and math.isnan(value))
    except (TypeError, ValueError):
        return False


class _Input(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class PhaseInput(_Input):
    name: str = ""
    duration_years: int = Field(0, validation_alias=AliasChoices("durationYears", "duration_years"))
    monthly_contribution: float = Field(
        0.0, validation_alias=AliasChoices("monthlyContribution", "monthly_contribution")
    )
    annual_return_pct: float = Field(
        0.0, validation_alias=AliasChoices("annualReturn", "annualReturnPct", "annual_return_pct")
    )
    annual_risk_pct: float = Field(
        0.0, validation_alias=AliasChoices("annualRisk", "annualRiskPct", "annual_risk_pct")
    )
    leverage: float = 1.0
    increase_with_inflation: bool = Field(
        False, validation_alias=AliasChoices("increaseWithInflation", "increase_with_inflation")
    )

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, v):
        return "" if v is None or (isinstance(v, float) and math.isnan(v)) else str(v)

    @field_validator("duration_years", mode="before")
    @classmethod
    def _duration(cls, v):
        return coerce_int(v)

    @field_validator("monthly_contribution", "annual_return_pct", "annual_risk_pct", mode="before")
    @classmethod
    def _number(cls, v):
        return coerce_number(v)

    @field_validator("leverage", mode="before")
    @classmethod
    def _leverage(cls, v):
        return coerce_number(v, default=1.0)

    @field_validator("increase_with_inflation", mode="before")
    @classmethod
    def _flag(cls, v):
        return coerce_flag(v)

    def to_phase(self) -> Phase:
        return Phase(
            name=self.name,
            duration_years=self.duration_years,
            monthly_contribution=self.monthly_contribution,
            annual_return_pct=self.annual_return_pct,
            annual_risk_pct=self.annual_risk_pct,
            leverage=self.leverage,
            increase_with_inflation=self.increase_with_inflation,
        )


class SpotPaymentInput(_Input):
    name: str = ""
    year: int = 0
    amount: float = 0.0

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, v):
        return "" if v is None or (isinstance(v, float) and math.isnan(v)) else str(v)

    @field_validator("year", mode="before")
    @classmethod
    def _year(cls, v):
        return coerce_int(v)

    @field_validator("amount", mode="before")
    @classmethod
    def _amount(cls, v):
        return coerce_number(v)

    def to_spot_payment(self) -> SpotPayment:
        return SpotPayment(name=self.name, year=self.year, amount=self.amount)


class PlanInput(_Input):
    initial_capital: float = Field(0.0, validation_alias=AliasChoices("initialCapital", "initial_capital"))
    num_simulations: int = Field(
        10_000, validation_alias=AliasChoices("numSimulations", "num_simulations")
    )
    phases: List[PhaseInput] = Field(default_factory=list, validation_alias=AliasChoices("phases", "blocks"))
    spot_payments: List[SpotPaymentInput] = Field(
        default_factory=list, validation_alias=AliasChoices("spotPayments", "spot_payments")
    )
    inflation_rate: Optional[float] = Field(
        None, validation_alias=AliasChoices("inflationRate", "inflation_rate")
    )

    @field_validator("initial_capital", mode="before")
    @classmethod
    def _capital(cls, v):
        return coerce_number(v)

    @field_validator("num_simulations", mode="before")
    @classmethod
    def _trials(cls, v):
        return max(coerce_int(v), 0)

    @field_validator("phases", "spot_payments", mode="before")
    @classmethod
    def _rows(cls, v):
        return [] if v is None else v

    @field_validator("inflation_rate", mode="before")
    @classmethod
    def _inflation(cls, v):
        if v is None or (isinstance(v, str) and v.strip() == ""):
            return None
        return coerce_number(v)

    def to_params(self) -> SimulationParams:
        return SimulationParams(
            initial_capital=self.initial_capital,
            num_simulations=self.num_simulations,
            phases=tuple(p.to_phase() for p in self.phases),
            spot_payments=tuple(s.to_spot_payment() for s in self.spot_payments),
            inflation_rate=self.inflation_rate,
        )


def sanitize_plan(raw: dict) -> SimulationParams:
    """Raw plan dict (camelCase or snake_case) -> SimulationParams."""
    return PlanInput.model_validate(raw).to_params()


def sanitize_phases(rows: List[dict]) -> List[Phase]:
    return [PhaseInput.model_validate(row).to_phase() for row in rows]


def sanitize_spot_payments(rows: List[dict]) -> List[SpotPayment]:
    return [SpotPaymentInput.model_validate(row).to_spot_payment() for row in rows]

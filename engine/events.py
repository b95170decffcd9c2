"""
Spot payments: one-off cash events applied at simulated year boundaries.

A payment with year=k is applied once per trial, right after month 12*k,
before the year-k capital sample is recorded. Several payments in the same
year are summed. Payments whose year never comes up (year < 1 or beyond the
timeline) are simply never applied.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, Iterable

from core.schema import SpotPayment


class SpotPaymentSchedule:
    """Spot-payment totals keyed by simulated year."""

    def __init__(self, payments: Iterable[SpotPayment] = ()):
        totals: Dict[int, float] = defaultdict(float)
        for payment in payments:
            totals[int(payment.year)] += float(payment.amount)
        self._totals = dict(totals)

    def amount_for_year(self, year: int) -> float:
        return self._totals.get(year, 0.0)

    def years(self) -> list:
        return sorted(self._totals)

    def unreachable_years(self, total_years: int) -> list:
        """Years that can never be applied on a timeline of `total_years`."""
        return [y for y in self.years() if y < 1 or y > total_years]

    def __bool__(self) -> bool:
        return bool(self._totals)

    def __repr__(self) -> str:
        return f"SpotPaymentSchedule({self._totals!r})"

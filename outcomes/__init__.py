"""
Simulation outcomes: percentile aggregation, final-outcome statistics, risk, real terms.
"""

from .aggregator import aggregate_trials, bankruptcy_rate, summarize_year_samples
from .metrics import final_outcome_summary, histogram_bins, probability_below
from .risk import RiskAssessment, assess_risk, risk_level
from .real_terms import to_real_terms

__all__ = [
    "aggregate_trials",
    "bankruptcy_rate",
    "summarize_year_samples",
    "final_outcome_summary",
    "histogram_bins",
    "probability_below",
    "RiskAssessment",
    "assess_risk",
    "risk_level",
    "to_real_terms",
]

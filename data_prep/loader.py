"""
Plan loading: JSON plan files, and phase / spot-payment tables from CSV or Excel.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Union

import pandas as pd

from core.schema import PHASE_TABLE_COLUMNS, SPOT_PAYMENT_TABLE_COLUMNS, Phase, SimulationParams, SpotPayment
from core.utils import require_columns

from .sanitize import sanitize_phases, sanitize_plan, sanitize_spot_payments

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

_TABLE_SUFFIXES = {".csv", ".xlsx"}


def load_plan_dict(path: PathLike) -> dict:
    with open(path, "r", encoding="utf-8") as fh:
        raw = json.load(fh)
    if not isinstance(raw, dict):
        raise ValueError(f"Plan file {path} must contain a JSON object, got {type(raw).__name__}.")
    return raw


def load_plan(path: PathLike) -> SimulationParams:
    """Load and sanitize a JSON plan file."""
    params = sanitize_plan(load_plan_dict(path))
    logger.info(
        "Loaded plan %s: %d phase(s), %d spot payment(s), %d trials.",
        path, len(params.phases), len(params.spot_payments), params.num_simulations,
    )
    return params


def read_table(path: PathLike) -> pd.DataFrame:
    suffix = Path(path).suffix.lower()
    if suffix not in _TABLE_SUFFIXES:
        raise ValueError(f"Unsupported table format {suffix!r}; expected one of {sorted(_TABLE_SUFFIXES)}.")
    if suffix == ".xlsx":
        return pd.read_excel(path, engine="openpyxl")
    return pd.read_csv(path)


def _records(df: pd.DataFrame) -> List[dict]:
    # Blank cells arrive as NaN; the sanitizer maps them to defaults.
    return df.to_dict(orient="records")


def load_phase_table(path: PathLike) -> List[Phase]:
    """Phases from a table with durationYears / monthlyContribution / annualReturn / annualRisk columns."""
    df = read_table(path)
    required = [c for c in PHASE_TABLE_COLUMNS if c not in ("name", "leverage")]
    require_columns(df, required)
    return sanitize_phases(_records(df))


def load_spot_payment_table(path: PathLike) -> List[SpotPayment]:
    df = read_table(path)
    require_columns(df, [c for c in SPOT_PAYMENT_TABLE_COLUMNS if c != "name"])
    return sanitize_spot_payments(_records(df))

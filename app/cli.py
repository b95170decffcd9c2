"""Command-line runner: load a plan, simulate, print the headline, optionally export."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from core.config import SimulationConfig
from data_prep.loader import load_plan
from data_prep.validators import validate_params
from engine.runner import run_simulation
from outcomes.metrics import final_outcome_summary
from outcomes.real_terms import to_real_terms
from outcomes.risk import assess_risk
from phases.presets import PLAN_PRESETS, get_preset

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Monte Carlo projection of a multi-phase investment plan")
    parser.add_argument("plan", help="Path to plan JSON file")
    parser.add_argument("--runs", type=int, help="Override the number of trials")
    parser.add_argument("--seed", type=int, help="Random seed for reproducibility")
    parser.add_argument("--workers", type=int, help="Worker processes for large runs (default: all cores)")
    parser.add_argument("--chunk-size", type=int, default=SimulationConfig.chunk_size, help="Trials per work unit")
    parser.add_argument("--preset", choices=sorted(PLAN_PRESETS), help="Replace the plan's phases with a named preset")
    parser.add_argument("--escalate", action="store_true", help="Escalate flagged contributions by inflation")
    parser.add_argument("--real", action="store_true", help="Report in real terms using the plan's inflation rate")
    parser.add_argument("--csv", help="Write the percentile time series to this CSV path")
    parser.add_argument("--json", dest="json_path", help="Write the full result to this JSON path")
    parser.add_argument("--validate", action="store_true", help="Validate the plan only")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="More logging (-v info, -vv debug)")
    return parser


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def _print_validation(errors: list, warnings: list) -> None:
    for warning in warnings:
        print(f"WARNING: {warning}")
    for error in errors:
        print(f"ERROR: {error}", file=sys.stderr)


def main(argv: Optional[list] = None) -> int:
    args = _build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    try:
        params = load_plan(args.plan)
    except (OSError, ValueError, ValidationError) as exc:
        logger.error("Failed to load plan %s: %s", args.plan, exc)
        print(f"Failed to load plan: {exc}", file=sys.stderr)
        return 2

    if args.preset:
        params = replace(params, phases=get_preset(args.preset))
    if args.runs is not None:
        params = replace(params, num_simulations=args.runs)

    validation = validate_params(params)
    _print_validation(validation.errors, validation.warnings)
    if not validation.is_valid:
        return 1
    if args.validate:
        print("Plan is valid.")
        return 0
    if args.real and params.inflation_rate is None:
        print("--real needs an inflationRate in the plan", file=sys.stderr)
        return 2

    try:
        config = SimulationConfig(
            seed=args.seed,
            n_workers=args.workers,
            chunk_size=args.chunk_size,
            escalate_contributions=args.escalate,
        )
    except ValueError as exc:
        print(f"Invalid settings: {exc}", file=sys.stderr)
        return 2

    result = run_simulation(params, config)
    if args.real:
        result = to_real_terms(result, params.inflation_rate)

    risk = assess_risk(result)
    basis = "real" if result.is_real else "nominal"
    print(f"Trials: {result.trial_count:,}  Years: {result.total_years}  Basis: {basis}")
    print(f"Bankruptcy rate: {result.bankruptcy_rate:.2f}% ({risk.level})")
    if risk.median_final is not None:
        print(f"Median final capital: {risk.median_final:,.0f}")
        print(f"P10 / P90 final capital: {risk.p10_final:,.0f} / {risk.p90_final:,.0f}")
    for flag in risk.flags:
        print(f"FLAG: {flag}")
    if result.seed is not None:
        print(f"Seed: {result.seed}")

    if args.csv:
        result.time_series_frame().to_csv(args.csv, index=False)
        print(f"Wrote time series to {Path(args.csv)}")
    if args.json_path:
        payload = result.to_dict()
        summary = final_outcome_summary(result.final_assets)
        payload["finalSummary"] = summary.to_dict(orient="records")
        payload["risk"] = {"level": risk.level, "flags": risk.flags}
        Path(args.json_path).write_text(json.dumps(payload, indent=2), encoding="utf-8")
        print(f"Wrote result to {Path(args.json_path)}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())

"""
Capital Projection Dashboard
============================

Monte Carlo projection of a multi-phase investment plan:
  1. Phases:         editable table of duration / contribution / return / risk / leverage
  2. Spot payments:  one-off inflows and outflows at a given year
  3. Results:        bankruptcy rate, percentile bands, final-capital histogram

Run: streamlit run app/streamlit_app.py
"""

from __future__ import annotations

import sys
from pathlib import Path

import altair as alt
import pandas as pd
import streamlit as st

# ---------------------------------------------------------------------------
# Make project root importable
# ---------------------------------------------------------------------------
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from core.config import SimulationConfig
from core.schema import PHASE_TABLE_COLUMNS, SPOT_PAYMENT_TABLE_COLUMNS

from data_prep.sanitize import PlanInput
from data_prep.validators import validate_params

from engine.runner import run_simulation

from outcomes.metrics import final_outcome_summary, histogram_bins
from outcomes.real_terms import to_real_terms
from outcomes.risk import assess_risk

from phases.presets import DEFAULT_PRESET, PLAN_PRESETS

RISK_COLORS = {"safe": "green", "caution": "orange", "danger": "red"}


# ---------------------------------------------------------------------------
# Table helpers
# ---------------------------------------------------------------------------
def _preset_table(name: str) -> pd.DataFrame:
    rows = [
        {
            "name": p.name,
            "durationYears": p.duration_years,
            "monthlyContribution": p.monthly_contribution,
            "annualReturn": p.annual_return_pct,
            "annualRisk": p.annual_risk_pct,
            "leverage": p.leverage,
            "increaseWithInflation": p.increase_with_inflation,
        }
        for p in PLAN_PRESETS[name]
    ]
    return pd.DataFrame(rows, columns=list(PHASE_TABLE_COLUMNS) + ["increaseWithInflation"])


def _empty_spot_table() -> pd.DataFrame:
    return pd.DataFrame(columns=list(SPOT_PAYMENT_TABLE_COLUMNS))


def _fmt_money(val):
    """Format currency with commas."""
    return f"{val:,.0f}"


# ---------------------------------------------------------------------------
# Chart helpers
# ---------------------------------------------------------------------------
def _plot_bands(ts: pd.DataFrame, *, title, y_title, height=380):
    if len(ts) == 0:
        st.info("No data to plot.")
        return
    outer = (
        alt.Chart(ts).mark_area(opacity=0.15, color="steelblue")
        .encode(
            x=alt.X("year:Q", title="Year"),
            y=alt.Y("p10:Q", title=y_title, axis=alt.Axis(format=",.0f")),
            y2="p90:Q",
        )
    )
    inner = (
        alt.Chart(ts).mark_area(opacity=0.3, color="steelblue")
        .encode(x="year:Q", y="p25:Q", y2="p75:Q")
    )
    median = (
        alt.Chart(ts).mark_line(color="steelblue", strokeWidth=2)
        .encode(x="year:Q", y="median:Q", tooltip=["year", "p10", "p25", "median", "p75", "p90"])
    )
    st.altair_chart((outer + inner + median).properties(title=title, height=height), use_container_width=True)


def _plot_histogram(bins: pd.DataFrame, *, title, x_label, height=320):
    if len(bins) == 0:
        st.info("No data.")
        return
    chart = (
        alt.Chart(bins).mark_bar(opacity=0.8, color="#22d3ee")
        .encode(
            x=alt.X("start:Q", bin="binned", title=x_label, axis=alt.Axis(format=",.0f")),
            x2="end:Q",
            y=alt.Y("count:Q", title="Trials"),
            tooltip=[alt.Tooltip("start:Q", format=",.0f"), alt.Tooltip("end:Q", format=",.0f"), "count:Q"],
        )
        .properties(title=title, height=height)
    )
    st.altair_chart(chart, use_container_width=True)


# ═══════════════════════════════════════════════════════════════════════════
# PAGE CONFIG
# ═══════════════════════════════════════════════════════════════════════════
st.set_page_config(page_title="Capital Projection", layout="wide")
st.title("Capital Projection")
st.caption("Monte Carlo simulation of a multi-phase investment plan")

# ═══════════════════════════════════════════════════════════════════════════
# SIDEBAR: Plan settings
# ═══════════════════════════════════════════════════════════════════════════
with st.sidebar:
    st.header("Plan Settings")
    preset = st.selectbox("Start from preset", options=sorted(PLAN_PRESETS),
                          index=sorted(PLAN_PRESETS).index(DEFAULT_PRESET))
    initial_capital = st.number_input("Initial capital", value=0.0, step=100_000.0, format="%.0f")
    num_simulations = st.number_input("Trials", min_value=0, max_value=1_000_000, value=10_000, step=1_000)
    inflation_rate = st.number_input("Inflation rate (%)", value=2.0, step=0.1)
    show_real = st.toggle("Show in real terms", value=False)
    escalate = st.checkbox("Escalate flagged contributions with inflation", value=False)
    seed_text = st.text_input("Seed (blank = random)", value="")
    run_clicked = st.button("Run simulation", type="primary", use_container_width=True)

if st.session_state.get("preset") != preset:
    st.session_state["preset"] = preset
    st.session_state["phase_table"] = _preset_table(preset)
    st.session_state.pop("result", None)

# ═══════════════════════════════════════════════════════════════════════════
# PLAN TABLES
# ═══════════════════════════════════════════════════════════════════════════
left, right = st.columns([3, 2])
with left:
    st.subheader("Phases")
    phase_table = st.data_editor(
        st.session_state["phase_table"], num_rows="dynamic", use_container_width=True, key="phase_editor",
    )
with right:
    st.subheader("Spot Payments")
    spot_table = st.data_editor(
        st.session_state.get("spot_table", _empty_spot_table()),
        num_rows="dynamic", use_container_width=True, key="spot_editor",
    )

plan = PlanInput.model_validate({
    "initialCapital": initial_capital,
    "numSimulations": num_simulations,
    "phases": phase_table.to_dict(orient="records"),
    "spotPayments": spot_table.to_dict(orient="records"),
    "inflationRate": inflation_rate,
})
params = plan.to_params()

vr = validate_params(params)
for w in vr.warnings:
    st.warning(w)
if not vr.is_valid:
    st.error("Plan validation failed:\n" + vr.summary())

# ═══════════════════════════════════════════════════════════════════════════
# RUN
# ═══════════════════════════════════════════════════════════════════════════
if (run_clicked or "result" not in st.session_state) and vr.is_valid:
    seed = int(seed_text) if seed_text.strip().lstrip("-").isdigit() else None
    cfg = SimulationConfig(seed=seed, escalate_contributions=escalate)
    progress_bar = st.progress(0, text="Running trials...")

    def _progress(done, total):
        progress_bar.progress(int(100 * done / max(total, 1)), text=f"{done:,} / {total:,} trials")

    with st.spinner("Simulating..."):
        st.session_state["result"] = run_simulation(params, cfg, progress_callback=_progress)
    progress_bar.empty()

result = st.session_state.get("result")
if result is None:
    st.stop()

if show_real and params.inflation_rate is not None:
    result = to_real_terms(result, params.inflation_rate)
basis = "real" if result.is_real else "nominal"

# ═══════════════════════════════════════════════════════════════════════════
# RESULTS
# ═══════════════════════════════════════════════════════════════════════════
risk = assess_risk(result)

k1, k2, k3, k4 = st.columns(4)
k1.metric("Bankruptcy Rate", f"{result.bankruptcy_rate:.2f}%")
k1.markdown(f":{RISK_COLORS[risk.level]}[**{risk.level.upper()}**]: final capital at or below zero")
k2.metric("Median Final Capital", _fmt_money(risk.median_final) if risk.median_final is not None else "N/A")
k3.metric("P10 Final Capital", _fmt_money(risk.p10_final) if risk.p10_final is not None else "N/A")
k4.metric("Trials", f"{result.trial_count:,}")

for flag in risk.flags:
    st.warning(flag)

ts = result.time_series_frame()
_plot_bands(ts, title=f"Capital by Year ({basis}): P10-P90, P25-P75, median", y_title="Capital")

st.markdown("**Final Capital Distribution**")
max_pct = st.slider("Exclude the top tail above percentile", min_value=1, max_value=100, value=100, step=1)
bins = histogram_bins(result.final_assets, n_bins=SimulationConfig.histogram_bins, max_percentile=max_pct)
_plot_histogram(bins, title=f"Final Capital ({basis})", x_label="Final capital")

with st.expander("Percentile table", expanded=False):
    st.dataframe(ts, use_container_width=True, hide_index=True)
    st.dataframe(final_outcome_summary(result.final_assets), use_container_width=True, hide_index=True)
    st.download_button("Download time series (CSV)", ts.to_csv(index=False), file_name="time_series.csv")

"""
report_export.py – CSV Export, Console Summary & Self-Check
===========================================================
Flattens the dashboard views into DataFrames, writes them as CSV and
prints the coach-facing console summary.

Output (inside the output directory)
-----------------------------------
* metric_summary.csv         (one row per metric with data)
* trend_series.csv           (one row per date)
* athlete_rollups.csv        (filtered window, one row per athlete)
* athlete_report_<N>d.csv    (fixed 7/14-day report window)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

import numpy as np
import pandas as pd

from config.settings import (
    CSV_METRIC_SUMMARY, CSV_TREND_SERIES, CSV_ATHLETE_ROLLUPS, CSV_ATHLETE_REPORT,
    HRV_TREND_WEEKS,
)
from team_dashboard import DashboardViews, SessionConfig
from team_metrics import (
    METRIC_TABLE, TRACKED_METRICS, AthleteRollup, Metric, MetricSummary, TrendLabel,
)

log = logging.getLogger(__name__)

ROLLUP_COLS = [
    "athlete", "sessions", "days_with_data",
    "avg_recovery", "avg_strain", "avg_hrv", "avg_sleep",
    "recovery_tier", "sleep_tier", "hrv_trend",
]

# Console glyphs for the HRV dots
TREND_GLYPHS = {
    TrendLabel.RISING: "▲",
    TrendLabel.FLAT: "■",
    TrendLabel.DECLINING: "▼",
    TrendLabel.NO_DATA: "·",
}


# ═══════════════════════════════════════════════════════════════════════════════
# VIEWS → DATAFRAMES
# ═══════════════════════════════════════════════════════════════════════════════
def summary_frame(summary: dict[Metric, MetricSummary]) -> pd.DataFrame:
    rows = [
        {
            "metric": METRIC_TABLE[metric].label,
            "unit": METRIC_TABLE[metric].unit,
            "avg": stat.avg,
            "min": stat.min,
            "max": stat.max,
            "count": stat.count,
        }
        for metric, stat in summary.items()
    ]
    return pd.DataFrame(rows, columns=["metric", "unit", "avg", "min", "max", "count"])


def rollups_frame(rollups: list[AthleteRollup]) -> pd.DataFrame:
    rows = [
        {
            "athlete": r.athlete_id,
            "sessions": r.sessions,
            "days_with_data": r.days_with_data,
            "avg_recovery": r.avg_recovery,
            "avg_strain": r.avg_strain,
            "avg_hrv": r.avg_hrv,
            "avg_sleep": r.avg_sleep,
            "recovery_tier": r.recovery_tier.value,
            "sleep_tier": r.sleep_tier.value,
            "hrv_trend": " ".join(label.value for label in r.hrv_trend),
        }
        for r in rollups
    ]
    out = pd.DataFrame(rows, columns=ROLLUP_COLS)
    # None → NaN so the averages stay numeric
    avg_cols = ["avg_recovery", "avg_strain", "avg_hrv", "avg_sleep"]
    out[avg_cols] = out[avg_cols].astype(float)
    return out


# ═══════════════════════════════════════════════════════════════════════════════
# CSV EXPORT
# ═══════════════════════════════════════════════════════════════════════════════
def save_views(
    views: DashboardViews,
    config: SessionConfig,
    output_dir: Union[str, Path],
) -> list[Path]:
    """Write all four views as CSV; returns the written paths."""
    out_dir = Path(output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    frames = {
        CSV_METRIC_SUMMARY: summary_frame(views.summary).round({"avg": 1, "min": 1, "max": 1}),
        CSV_TREND_SERIES: views.trends.round(1),
        CSV_ATHLETE_ROLLUPS: rollups_frame(views.rollups).round(1),
        CSV_ATHLETE_REPORT.format(days=config.report_days): rollups_frame(views.report).round(1),
    }

    written = []
    for name, frame in frames.items():
        path = out_dir / name
        frame.to_csv(path, index=False)
        log.info("  → Saved: %s  (%d rows)", path, len(frame))
        written.append(path)
    return written


# ═══════════════════════════════════════════════════════════════════════════════
# CONSOLE SUMMARY
# ═══════════════════════════════════════════════════════════════════════════════
def _fmt(value, unit: str = "") -> str:
    if value is None or (isinstance(value, float) and np.isnan(value)):
        return "--"
    return f"{value:.0f}{unit}"


def hrv_dots(rollup: AthleteRollup) -> str:
    return "".join(TREND_GLYPHS[label] for label in rollup.hrv_trend)


def print_console_summary(views: DashboardViews, config: SessionConfig) -> None:
    print()
    print("╔══════════════════════════════════════════════════════════════╗")
    print(f"  Athlete: {config.athlete}  │  Range: {config.time_range}  │  "
          f"Athletes in export: {len(views.athletes)}")

    for metric in TRACKED_METRICS:
        info = METRIC_TABLE[metric]
        stat = views.summary.get(metric)
        if stat is None:
            print(f"  {info.label:<18} --")
            continue
        print(f"  {info.label:<18} {_fmt(stat.avg, info.unit):>6}   "
              f"({stat.min:.0f}–{stat.max:.0f}, n={stat.count})")

    recent = views.recent_trends
    if not recent.empty:
        print()
        print(f"  Last {len(recent)} days ({recent['date'].iloc[0]} → {recent['date'].iloc[-1]}):")
        for col, label in (("recovery", "Recovery"), ("hrv", "HRV")):
            print(f"    {label:<9} " + " ".join(_fmt(v) for v in recent[col].tolist()))

    print()
    print(f"  {config.report_days}-day report (anchored to the latest export date):")
    for r in views.report:
        print(f"    {r.athlete_id:<24} rec {_fmt(r.avg_recovery, '%'):>5} "
              f"[{r.recovery_tier.value:<7}]  sleep {_fmt(r.avg_sleep, '%'):>5}  "
              f"HRV {hrv_dots(r)}")
    print("╚══════════════════════════════════════════════════════════════╝")


# ═══════════════════════════════════════════════════════════════════════════════
# SELF-CHECK: verify_views()
# ═══════════════════════════════════════════════════════════════════════════════
def verify_views(views: DashboardViews) -> bool:
    """
    Sanity checks on the computed views:
    1. Summary: min ≤ avg ≤ max, count > 0.
    2. Trend series: no duplicate dates.
    3. Every rollup carries exactly HRV_TREND_WEEKS labels.
    4. Rollups ordered by average recovery.
    """
    print()
    print("=" * 64)
    print("  SELF-CHECK  –  verify_views()")
    print("=" * 64)
    ok = True

    bad = [m.value for m, s in views.summary.items()
           if not (s.min <= s.avg <= s.max and s.count > 0)]
    ok &= _check(not bad, "Summary bounds (min ≤ avg ≤ max)", ", ".join(bad))

    dates = views.trends["date"]
    ok &= _check(dates.is_unique, f"Trend series: {len(dates)} distinct dates")

    wrong = [r.athlete_id for r in views.rollups + views.report
             if len(r.hrv_trend) != HRV_TREND_WEEKS]
    ok &= _check(not wrong, f"HRV trend length = {HRV_TREND_WEEKS}", ", ".join(wrong))

    for name, rollups in (("window", views.rollups), ("report", views.report)):
        keys = [r.avg_recovery if r.avg_recovery is not None else 0.0 for r in rollups]
        ok &= _check(keys == sorted(keys, reverse=True), f"Rollup order ({name})")

    print("=" * 64)
    return bool(ok)


def _check(passed: bool, label: str, detail: str = "") -> bool:
    symbol = "✓" if passed else "✗"
    suffix = f"  ({detail})" if detail and not passed else ""
    print(f"  {symbol} {label}{suffix}")
    return bool(passed)

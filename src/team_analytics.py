"""
team_analytics.py – Team Recovery Analytics
===========================================
Analytics layer – derived views over a (filtered) reading set.

Modules
-------
A. Metric Summary       – mean / min / max / count per metric
B. Trend Series         – per-date team averages (recovery, strain, HRV)
C. HRV Weekly Trend     – 5 week-over-week labels per athlete
D. Athlete Rollups      – per-athlete averages, coverage, HRV trend

Missing values
--------------
* Summary (A) counts every numeric value, 0 included.
* Trend series (B) and rollup averages (D) use *recorded* values only –
  a 0 in the export means "not recorded" and is skipped.
* Coverage days (D) and the HRV trend (C) require a value > 0.
A metric without values is NaN in frames and None in dataclasses –
never 0.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

import numpy as np
import pandas as pd

from config.settings import (
    HRV_TREND_WEEKS, HRV_TREND_BUCKET_DAYS, HRV_TREND_DELTA, RECENT_TREND_DAYS,
)
from team_metrics import (
    AthleteRollup, Metric, MetricSummary, SUMMARY_METRICS, TrendLabel,
)

log = logging.getLogger(__name__)

TREND_METRICS = (Metric.RECOVERY, Metric.STRAIN, Metric.HRV)
TREND_COLUMNS = ["date"] + [m.column for m in TREND_METRICS]

ROLLUP_METRICS = (Metric.RECOVERY, Metric.STRAIN, Metric.HRV, Metric.SLEEP_PERFORMANCE)


# ═══════════════════════════════════════════════════════════════════════════════
# HELPERS
# ═══════════════════════════════════════════════════════════════════════════════
def numeric(readings: pd.DataFrame, column: str) -> pd.Series:
    """Metric column as float (NaN where missing / non-numeric / no column)."""
    if column not in readings.columns:
        return pd.Series(np.nan, index=readings.index, dtype=float)
    return pd.to_numeric(readings[column], errors="coerce").astype(float)


def recorded(readings: pd.DataFrame, column: str) -> pd.Series:
    """Like numeric(), with 0 treated as not recorded."""
    values = numeric(readings, column)
    return values.where(values != 0)


def mean_or_none(values: pd.Series) -> Optional[float]:
    values = values.dropna()
    if values.empty:
        return None
    return float(values.mean())


# ═══════════════════════════════════════════════════════════════════════════════
# MODULE A – METRIC SUMMARY
# ═══════════════════════════════════════════════════════════════════════════════
def compute_metric_summary(
    readings: pd.DataFrame,
    metrics: Iterable[Metric] = SUMMARY_METRICS,
) -> dict[Metric, MetricSummary]:
    """
    avg / max / min / count for each metric with ≥1 numeric value.
    Metrics without values are left out (not reported as 0).
    """
    stats: dict[Metric, MetricSummary] = {}
    for metric in metrics:
        values = numeric(readings, metric.column).dropna()
        if values.empty:
            continue
        lo, hi = float(values.min()), float(values.max())
        # float rounding can push the mean of equal values past the bounds
        avg = float(np.clip(values.mean(), lo, hi))
        stats[metric] = MetricSummary(avg=avg, max=hi, min=lo, count=int(values.size))
    return stats


# ═══════════════════════════════════════════════════════════════════════════════
# MODULE B – TREND SERIES (per-date team averages)
# ═══════════════════════════════════════════════════════════════════════════════
def build_trend_series(readings: pd.DataFrame) -> pd.DataFrame:
    """
    Group by the exact date string, average recovery / strain / HRV over
    recorded values.  Returns DataFrame[date, recovery, strain, hrv]
    ordered by date; NaN where a date has no value for a metric.
    """
    if readings.empty:
        return pd.DataFrame(columns=TREND_COLUMNS)

    frame = readings[["date", "timestamp"]].assign(
        **{m.column: recorded(readings, m.column) for m in TREND_METRICS}
    )
    daily = frame.groupby("date", sort=False).agg(
        timestamp=("timestamp", "min"),
        **{m.column: (m.column, "mean") for m in TREND_METRICS},
    )
    daily = daily.sort_values("timestamp", kind="mergesort").reset_index()
    return daily[TREND_COLUMNS]


def recent_trends(trends: pd.DataFrame, days: int = RECENT_TREND_DAYS) -> pd.DataFrame:
    """Last ``days`` points of a trend series (overview chart)."""
    return trends.tail(days).reset_index(drop=True)


# ═══════════════════════════════════════════════════════════════════════════════
# MODULE C – HRV WEEKLY TREND
# ═══════════════════════════════════════════════════════════════════════════════
def weekly_hrv_averages(history: pd.DataFrame) -> list[Optional[float]]:
    """
    Mean HRV of HRV_TREND_WEEKS + 1 consecutive 7-day buckets, oldest first.

    Buckets end at the athlete's latest reading with HRV > 0 (the anchor);
    bucket w covers (anchor − (w+1)·7d, anchor − w·7d].  Empty bucket → None.
    """
    n_buckets = HRV_TREND_WEEKS + 1
    hrv = numeric(history, Metric.HRV.column)
    valid = pd.DataFrame({"timestamp": history["timestamp"], "hrv": hrv}).loc[hrv > 0]
    if valid.empty:
        return [None] * n_buckets

    anchor = valid["timestamp"].max()
    bucket = pd.Timedelta(days=HRV_TREND_BUCKET_DAYS)

    averages: list[Optional[float]] = []
    for w in range(n_buckets - 1, -1, -1):
        end = anchor - w * bucket
        start = end - bucket
        in_bucket = valid.loc[(valid["timestamp"] > start) & (valid["timestamp"] <= end), "hrv"]
        averages.append(mean_or_none(in_bucket))
    return averages


def compare_weeks(prev_week: Optional[float], this_week: Optional[float]) -> TrendLabel:
    if prev_week is None or this_week is None:
        return TrendLabel.NO_DATA
    diff = this_week - prev_week
    if diff > HRV_TREND_DELTA:
        return TrendLabel.RISING
    if diff < -HRV_TREND_DELTA:
        return TrendLabel.DECLINING
    return TrendLabel.FLAT


def classify_hrv_trend(history: pd.DataFrame) -> list[TrendLabel]:
    """
    HRV_TREND_WEEKS labels (oldest week first) – each week's mean HRV
    against the week before.  Uses the athlete's full history in any order.
    """
    weeks = weekly_hrv_averages(history)
    return [compare_weeks(prev, this) for prev, this in zip(weeks, weeks[1:])]


# ═══════════════════════════════════════════════════════════════════════════════
# MODULE D – ATHLETE ROLLUPS
# ═══════════════════════════════════════════════════════════════════════════════
def days_with_data(readings: pd.DataFrame) -> int:
    """Distinct dates with at least one of recovery/strain/HRV/sleep > 0."""
    if readings.empty:
        return 0
    has_data = pd.Series(False, index=readings.index)
    for metric in ROLLUP_METRICS:
        has_data |= numeric(readings, metric.column) > 0
    return int(readings.loc[has_data, "date"].nunique())


def build_athlete_rollups(
    window: pd.DataFrame,
    history: Optional[pd.DataFrame] = None,
) -> list[AthleteRollup]:
    """
    One rollup per athlete present in ``window``.

    Averages and coverage come from the window; the HRV trend comes from
    ``history`` (the unwindowed export) so a short window still gets real
    past weeks.  Sorted by average recovery, highest first (None ranks as 0).
    """
    if window.empty:
        return []

    history_by_athlete: dict[str, pd.DataFrame] = {}
    if history is not None and not history.empty:
        history_by_athlete = {
            str(aid): grp for aid, grp in history.groupby("athlete_id", sort=False)
        }

    rollups: list[AthleteRollup] = []
    for athlete_id, grp in window.groupby("athlete_id", sort=False):
        athlete_history = history_by_athlete.get(athlete_id, grp)
        rollups.append(AthleteRollup(
            athlete_id=athlete_id,
            sessions=int(len(grp)),
            days_with_data=days_with_data(grp),
            avg_recovery=mean_or_none(recorded(grp, Metric.RECOVERY.column)),
            avg_strain=mean_or_none(recorded(grp, Metric.STRAIN.column)),
            avg_hrv=mean_or_none(recorded(grp, Metric.HRV.column)),
            avg_sleep=mean_or_none(recorded(grp, Metric.SLEEP_PERFORMANCE.column)),
            hrv_trend=classify_hrv_trend(athlete_history),
        ))

    rollups.sort(key=lambda r: r.avg_recovery if r.avg_recovery is not None else 0.0,
                 reverse=True)
    log.debug("Built %d athlete rollups from %d readings", len(rollups), len(window))
    return rollups

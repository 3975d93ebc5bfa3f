"""
team_dashboard.py – Session Configuration & Derived Views
=========================================================
The dashboard state is an explicit, immutable ``SessionConfig``
(athlete filter, time range, report window).  Every view is a pure
function of that config plus the reading set – ``compute_views()``.

``DashboardSession`` owns the one mutable piece: the current reading
set of the active upload.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Optional

import pandas as pd

from config.settings import (
    ALL_ATHLETES, ALL_TIME, DEFAULT_REPORT_DAYS, REPORT_WINDOW_CHOICES,
)
from team_analytics import (
    build_athlete_rollups, build_trend_series, compute_metric_summary, recent_trends,
)
from team_filters import (
    TimeRange, filter_readings, list_athletes, parse_time_range, report_window,
)
from team_metrics import AthleteRollup, Metric, MetricSummary
from whoop_csv import UploadError, parse_readings

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionConfig:
    athlete: str = ALL_ATHLETES
    time_range: TimeRange = ALL_TIME
    report_days: int = DEFAULT_REPORT_DAYS

    def __post_init__(self):
        parse_time_range(self.time_range)  # raises on bad input
        if self.report_days not in REPORT_WINDOW_CHOICES:
            raise ValueError(
                f"Report window must be one of {REPORT_WINDOW_CHOICES}, got {self.report_days!r}"
            )


@dataclass
class DashboardViews:
    athletes: list[str]
    summary: dict[Metric, MetricSummary]
    trends: pd.DataFrame
    rollups: list[AthleteRollup]
    report: list[AthleteRollup]
    recent_trends: pd.DataFrame = field(default_factory=pd.DataFrame)
    working: Optional[pd.DataFrame] = field(default=None, repr=False)


def compute_views(readings: pd.DataFrame, config: SessionConfig) -> DashboardViews:
    """All derived views for one reading set + session config."""
    working = filter_readings(readings, config.athlete, config.time_range)
    report = report_window(readings, config.report_days)
    trends = build_trend_series(working)
    return DashboardViews(
        athletes=list_athletes(readings),
        summary=compute_metric_summary(working),
        trends=trends,
        rollups=build_athlete_rollups(working, readings),
        report=build_athlete_rollups(report, readings),
        recent_trends=recent_trends(trends),
        working=working,
    )


class DashboardSession:
    """One interactive session: the active upload and its filter selections."""

    def __init__(self, config: Optional[SessionConfig] = None):
        self.readings: Optional[pd.DataFrame] = None
        self.config = config or SessionConfig()

    @property
    def has_data(self) -> bool:
        return self.readings is not None

    def upload(self, text: str) -> pd.DataFrame:
        """
        Replace the dataset with a new export.  On UploadError the previous
        dataset stays active and the error propagates to the caller.
        """
        try:
            readings = parse_readings(text)
        except UploadError as exc:
            log.warning("Upload rejected: %s", exc)
            raise
        self.readings = readings
        return readings

    def select_athlete(self, athlete: str) -> SessionConfig:
        self.config = replace(self.config, athlete=athlete)
        return self.config

    def select_time_range(self, time_range: TimeRange) -> SessionConfig:
        self.config = replace(self.config, time_range=time_range)
        return self.config

    def select_report_days(self, days: int) -> SessionConfig:
        self.config = replace(self.config, report_days=days)
        return self.config

    def reset(self) -> None:
        """Back to the upload screen – drop the dataset, keep nothing."""
        self.readings = None
        self.config = SessionConfig()

    def views(self) -> DashboardViews:
        if self.readings is None:
            raise RuntimeError("No dataset loaded – upload an export first")
        return compute_views(self.readings, self.config)

"""
team_filters.py – Athlete & Date-Range Windowing
================================================
Pure selections over a reading set.  Every function returns a new
DataFrame and keeps the original row order.

"Last N days" is anchored to the latest date in the *whole* export,
not to wall-clock today, so an old export still shows its last weeks.
"""

from __future__ import annotations

from typing import Optional, Union

import pandas as pd

from config.settings import ALL_ATHLETES, ALL_TIME, REPORT_WINDOW_CHOICES

TimeRange = Union[str, int, None]


def latest_timestamp(readings: pd.DataFrame) -> Optional[pd.Timestamp]:
    if readings.empty:
        return None
    return readings["timestamp"].max()


def parse_time_range(time_range: TimeRange) -> Optional[int]:
    """``"all"``/None → None, otherwise the positive number of days."""
    if time_range is None or time_range == ALL_TIME:
        return None
    try:
        days = int(time_range)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid time range: {time_range!r}") from None
    if days <= 0:
        raise ValueError(f"Time range must be positive, got {days}")
    return days


def window_cutoff(readings: pd.DataFrame, days: int) -> Optional[pd.Timestamp]:
    """Earliest timestamp kept by a ``days`` window (None for an empty set)."""
    latest = latest_timestamp(readings)
    if latest is None:
        return None
    return latest - pd.Timedelta(days=days)


def filter_readings(
    readings: pd.DataFrame,
    athlete: Optional[str] = ALL_ATHLETES,
    time_range: TimeRange = ALL_TIME,
) -> pd.DataFrame:
    """
    Working subset for the dashboard filters.

    athlete    : ``"All"`` (or None) keeps everyone, else exact athlete_id match
    time_range : ``"all"`` (or None) keeps everything, else last N days
                 (timestamp ≥ latest − N days, inclusive)
    """
    days = parse_time_range(time_range)
    mask = pd.Series(True, index=readings.index)

    if athlete is not None and athlete != ALL_ATHLETES:
        mask &= readings["athlete_id"] == athlete

    if days is not None:
        cutoff = window_cutoff(readings, days)
        if cutoff is not None:
            mask &= readings["timestamp"] >= cutoff

    return readings.loc[mask].copy()


def report_window(readings: pd.DataFrame, days: int) -> pd.DataFrame:
    """Fixed 7/14-day slice used by the athlete report cards."""
    if days not in REPORT_WINDOW_CHOICES:
        raise ValueError(
            f"Report window must be one of {REPORT_WINDOW_CHOICES}, got {days!r}"
        )
    return filter_readings(readings, ALL_ATHLETES, days)


def list_athletes(readings: pd.DataFrame) -> list[str]:
    """Sorted distinct athletes for the athlete picker."""
    if readings.empty:
        return []
    return sorted(readings["athlete_id"].unique().tolist())

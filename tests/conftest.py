"""Shared fixtures: small team exports and HRV histories."""

from __future__ import annotations

import pandas as pd
import pytest

from whoop_csv import parse_readings

HEADER = "Date,First Name,Last Name,Recovery,HRV,Strain,Sleep Performance,RHR"


@pytest.fixture
def team_csv() -> str:
    """Two athletes over three days, with zeros and blanks mixed in."""
    return "\n".join([
        HEADER,
        "2024-03-01,Jo,Doe,75,60,12.5,88,52",
        "2024-03-01,Sam,Lee,40,45,15.0,70,58",
        "2024-03-02,Jo,Doe,81,64,10.0,90,51",
        "2024-03-02,Sam,Lee,0,0,0,0,0",
        "2024-03-03,Jo,Doe,,,,,",
        "2024-03-03,Sam,Lee,20,41,18.5,55,60",
    ])


@pytest.fixture
def team_readings(team_csv) -> pd.DataFrame:
    return parse_readings(team_csv)


@pytest.fixture
def make_csv():
    """Build export text from dict rows (missing keys → empty cell)."""
    def _make(rows: list[dict], header: str = HEADER) -> str:
        columns = header.split(",")
        lines = [header]
        for row in rows:
            lines.append(",".join(str(row.get(col, "")) for col in columns))
        return "\n".join(lines)
    return _make


@pytest.fixture
def hrv_history():
    """One athlete's history from [(date, hrv), ...]."""
    def _make(points: list[tuple[str, float]], athlete: str = "A B") -> pd.DataFrame:
        dates = [d for d, _ in points]
        return pd.DataFrame({
            "date": dates,
            "timestamp": pd.to_datetime(dates),
            "athlete_id": [athlete] * len(points),
            "hrv": [float(v) for _, v in points],
        })
    return _make

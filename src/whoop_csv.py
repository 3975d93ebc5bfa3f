"""
whoop_csv.py – Team WHOOP Export Parser
=======================================
Turns the raw team export (one row per athlete per day) into the
canonical in-memory reading set – a pandas DataFrame sorted by date.

Input
-----
Comma-separated text, first line = header.  Required headers:
``Date``, ``First Name``, ``Last Name``; metrics are optional
(``Recovery``, ``HRV``, ``Strain``, ``Sleep Performance``, ``RHR``).
Column order is free, headers are matched by name.

Output
------
DataFrame columns:
  date, timestamp, first_name, last_name, athlete_id,
  recovery, hrv, strain, sleep_performance, resting_heart_rate,
  + any unrecognised export columns (float or str, not interpreted).

Rows with too few fields, no athlete name or no usable date are
dropped without a per-row report.
"""

from __future__ import annotations

import logging
import os
import re
from typing import Optional, Union

import numpy as np
import pandas as pd

from config.settings import HEADER_ALIASES, MIN_FIELD_RATIO
from team_metrics import METRIC_COLUMNS

log = logging.getLogger(__name__)

IDENTITY_COLUMNS = ("date", "first_name", "last_name")
CORE_COLUMNS = ("date", "timestamp", "first_name", "last_name", "athlete_id") + METRIC_COLUMNS

# Plain decimal literal: 75, -3.5, .5, 1e3 (no "inf", "nan", hex or "1_000")
_NUMBER_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")


class UploadError(ValueError):
    """Upload rejected – the previous dataset (if any) stays active."""


class MalformedInputError(UploadError):
    def __init__(self, message: str = "File must have header and data rows"):
        super().__init__(message)


class EmptyResultError(UploadError):
    def __init__(self, message: str = "No valid data found"):
        super().__init__(message)


# ═══════════════════════════════════════════════════════════════════════════════
# LINE & VALUE HELPERS
# ═══════════════════════════════════════════════════════════════════════════════
def split_csv_line(line: str) -> list[str]:
    """
    Split one CSV line on commas outside double quotes.
    A quote only toggles the in-quotes flag (it is not copied), every
    field is stripped.
    """
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False
    for ch in line:
        if ch == '"':
            in_quotes = not in_quotes
        elif ch == "," and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(ch)
    fields.append("".join(current).strip())
    return fields


def resolve_column(header: str) -> str:
    """Canonical column for a known header, the header itself otherwise."""
    return HEADER_ALIASES.get(header.strip().lower(), header)


def parse_value(value: str) -> Union[float, str]:
    if value and _NUMBER_RE.match(value):
        return float(value)
    return value


def parse_timestamp(value: str) -> Optional[pd.Timestamp]:
    """Parse a date cell; tz-aware values become naive UTC.  None if unusable."""
    # relative keywords ("today", "now") would read the wall clock
    if not value or not any(c.isdigit() for c in value):
        return None
    try:
        ts = pd.Timestamp(value)
    except (ValueError, TypeError):
        return None
    if pd.isna(ts):
        return None
    if ts.tzinfo is not None:
        ts = ts.tz_convert("UTC").tz_localize(None)
    return ts


def _build_row(headers: list[str], values: list[str]) -> Optional[dict]:
    row: dict = {"date": "", "first_name": "", "last_name": ""}
    for idx, header in enumerate(headers):
        value = values[idx] if idx < len(values) else ""
        column = resolve_column(header)
        if column in IDENTITY_COLUMNS:
            row[column] = value
        elif column in METRIC_COLUMNS:
            parsed = parse_value(value)
            row[column] = parsed if isinstance(parsed, float) else np.nan
        else:
            row[column] = parse_value(value)

    athlete_id = f"{row['first_name'].strip()} {row['last_name'].strip()}".strip()
    timestamp = parse_timestamp(row["date"])
    if not athlete_id or not row["date"] or timestamp is None:
        return None
    row["athlete_id"] = athlete_id
    row["timestamp"] = timestamp
    return row


# ═══════════════════════════════════════════════════════════════════════════════
# PARSER
# ═══════════════════════════════════════════════════════════════════════════════
def parse_readings(text: str) -> pd.DataFrame:
    """
    Parse the raw export into a reading set sorted ascending by date.

    Raises
    ------
    MalformedInputError : fewer than 2 non-blank lines
    EmptyResultError    : no row survived validation
    """
    lines = [ln for ln in text.lstrip("\ufeff").split("\n") if ln.strip()]
    if len(lines) < 2:
        raise MalformedInputError()

    headers = split_csv_line(lines[0])
    min_fields = len(headers) * MIN_FIELD_RATIO

    rows: list[dict] = []
    skipped = 0
    for line in lines[1:]:
        values = split_csv_line(line)
        row = _build_row(headers, values) if len(values) >= min_fields else None
        if row is None:
            skipped += 1
            continue
        rows.append(row)

    if not rows:
        raise EmptyResultError()
    if skipped:
        log.debug("Skipped %d incomplete row(s)", skipped)

    df = pd.DataFrame.from_records(rows)
    for col in METRIC_COLUMNS:
        if col not in df.columns:
            df[col] = np.nan
        df[col] = df[col].astype(float)
    extra = [c for c in df.columns if c not in CORE_COLUMNS]
    df = df[list(CORE_COLUMNS) + extra]
    df = df.sort_values("timestamp", kind="mergesort").reset_index(drop=True)

    log.info(
        "Parsed %d readings for %d athletes (%s → %s)",
        len(df), df["athlete_id"].nunique(),
        df["timestamp"].min().date(), df["timestamp"].max().date(),
    )
    return df


def load_readings(path: Union[str, os.PathLike]) -> pd.DataFrame:
    """Read a UTF-8 export from disk and parse it."""
    path = os.fspath(path)
    if not os.path.exists(path):
        raise FileNotFoundError(f"Export not found: {path}")
    if not path.lower().endswith(".csv"):
        log.warning("%s does not look like a .csv export – parsing anyway", path)
    with open(path, "r", encoding="utf-8") as fh:
        text = fh.read()
    return parse_readings(text)

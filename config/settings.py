"""
Team Recovery Lab – Centralized Configuration
==============================================
All file paths, column mappings and thresholds in one place.
Edit this file (or drop a .env next to it) – never hardcode values
in individual scripts.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# ============================================================
# PROJECT PATHS (relative to project root)
# ============================================================
PROJECT_ROOT = Path(__file__).resolve().parent.parent

REPORTS_DIR     = Path(os.getenv("TEAM_LAB_REPORTS_DIR", PROJECT_ROOT / "reports"))
LOGS_DIR        = Path(os.getenv("TEAM_LAB_LOGS_DIR", PROJECT_ROOT / "logs"))
LOG_LEVEL       = os.getenv("TEAM_LAB_LOG_LEVEL", "INFO")

# ============================================================
# CSV INPUT
# ============================================================
# Header (lower-cased, stripped) → canonical column.
# The short names are the team export; the long ones come from
# the per-athlete WHOOP export.
HEADER_ALIASES = {
    "date":                         "date",
    "first name":                   "first_name",
    "last name":                    "last_name",
    "recovery":                     "recovery",
    "recovery score %":             "recovery",
    "hrv":                          "hrv",
    "heart rate variability (ms)":  "hrv",
    "strain":                       "strain",
    "day strain":                   "strain",
    "sleep performance":            "sleep_performance",
    "sleep performance %":          "sleep_performance",
    "rhr":                          "resting_heart_rate",
    "resting heart rate (bpm)":     "resting_heart_rate",
}

MIN_FIELD_RATIO = 0.5          # row needs ≥ 50 % of header fields

# ============================================================
# FILTERS & WINDOWS (anchored to the latest date in the export)
# ============================================================
ALL_ATHLETES          = "All"
ALL_TIME              = "all"
TIME_RANGE_CHOICES    = (ALL_TIME, "7", "14", "30")
REPORT_WINDOW_CHOICES = (7, 14)
DEFAULT_REPORT_DAYS   = 7
RECENT_TREND_DAYS     = 14     # overview chart tail

# ============================================================
# HRV WEEKLY TREND
# ============================================================
HRV_TREND_WEEKS       = 5      # labels per athlete (needs 6 weekly buckets)
HRV_TREND_BUCKET_DAYS = 7
HRV_TREND_DELTA       = 2.0    # ms – week-over-week change counted as a move

# ============================================================
# SEVERITY TIERS (recovery %, sleep performance %)
# ============================================================
TIER_GOOD_MIN         = 67
TIER_CAUTION_MIN      = 30

# ============================================================
# CSV FILE NAMES (inside REPORTS_DIR)
# ============================================================
CSV_METRIC_SUMMARY    = "metric_summary.csv"
CSV_TREND_SERIES      = "trend_series.csv"
CSV_ATHLETE_ROLLUPS   = "athlete_rollups.csv"
CSV_ATHLETE_REPORT    = "athlete_report_{days}d.csv"

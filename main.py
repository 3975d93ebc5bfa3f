#!/usr/bin/env python3
"""
main.py – Team Recovery Lab · Central Entry Point
=================================================
Loads one team WHOOP export and derives the coaching views:

  1. PARSE   – CSV export → reading set  (whoop_csv)
  2. FILTER  – athlete / last-N-days selection  (team_filters)
  3. ANALYZE – summary, trend series, athlete rollups, report window  (team_analytics)
  4. EXPORT  – CSV files + console summary + self-check  (report_export)

Usage
-----
    python main.py export.csv                          # whole team, all time
    python main.py export.csv --range 14 --report 14   # last 14 days
    python main.py export.csv --athlete "Jo Doe"       # one athlete
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
import time
from pathlib import Path
from typing import Optional

# ── Project root on sys.path ─────────────────────────────────────────────────
PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
SRC_DIR = os.path.join(PROJECT_ROOT, "src")
for _p in (PROJECT_ROOT, SRC_DIR):
    if _p not in sys.path:
        sys.path.insert(0, _p)

from config.settings import (
    ALL_ATHLETES, LOG_LEVEL, LOGS_DIR, REPORTS_DIR,
    REPORT_WINDOW_CHOICES, TIME_RANGE_CHOICES, DEFAULT_REPORT_DAYS,
)
from report_export import print_console_summary, save_views, verify_views
from team_dashboard import SessionConfig, compute_views
from whoop_csv import UploadError, load_readings

log = logging.getLogger("main")


# ═══════════════════════════════════════════════════════════════════════════════
# LOGGING
# ═══════════════════════════════════════════════════════════════════════════════
def setup_logging(log_dir: Path) -> None:
    log_dir.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s  %(levelname)-8s  %(message)s",
        datefmt="%H:%M:%S",
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(log_dir / "main.log", encoding="utf-8"),
        ],
    )


# ═══════════════════════════════════════════════════════════════════════════════
# CLI
# ═══════════════════════════════════════════════════════════════════════════════
def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Team Recovery Lab – WHOOP team export analytics",
        epilog="Time windows are anchored to the latest date in the export, not today.",
    )
    parser.add_argument("csv", help="Team export (.csv) with Date, First Name, Last Name columns")
    parser.add_argument(
        "--athlete",
        default=ALL_ATHLETES,
        help=f"Athlete 'First Last' to focus on (default: {ALL_ATHLETES})",
    )
    parser.add_argument(
        "--range",
        dest="time_range",
        choices=TIME_RANGE_CHOICES,
        default=TIME_RANGE_CHOICES[0],
        help="Date filter: all time or last N days (default: all)",
    )
    parser.add_argument(
        "--report",
        type=int,
        choices=REPORT_WINDOW_CHOICES,
        default=DEFAULT_REPORT_DAYS,
        help=f"Athlete report window in days (default: {DEFAULT_REPORT_DAYS})",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=REPORTS_DIR,
        help=f"Directory for the CSV views (default: {REPORTS_DIR})",
    )
    parser.add_argument(
        "--log-dir",
        type=Path,
        default=LOGS_DIR,
        help=f"Directory for main.log (default: {LOGS_DIR})",
    )
    parser.add_argument(
        "--no-verify",
        action="store_true",
        help="Skip the self-check after export",
    )
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = create_parser().parse_args(argv)
    setup_logging(args.log_dir)

    log.info("Team Recovery Lab  ·  Pipeline Start")
    t0 = time.time()

    try:
        log.info("=" * 60)
        log.info("STEP 1 / 4 : PARSE – %s", args.csv)
        log.info("=" * 60)
        readings = load_readings(args.csv)

        log.info("STEP 2 / 4 : FILTER – athlete=%s, range=%s", args.athlete, args.time_range)
        config = SessionConfig(
            athlete=args.athlete,
            time_range=args.time_range,
            report_days=args.report,
        )

        log.info("STEP 3 / 4 : ANALYZE – summary, trends, rollups, %d-day report", args.report)
        views = compute_views(readings, config)
        if args.athlete != ALL_ATHLETES and args.athlete not in views.athletes:
            log.warning("Athlete %r not in export – filtered views are empty", args.athlete)

        log.info("STEP 4 / 4 : EXPORT – %s", args.output)
        save_views(views, config, args.output)
    except FileNotFoundError as exc:
        log.error("File error: %s", exc)
        return 1
    except UploadError as exc:
        log.error("Upload rejected: %s", exc)
        return 1
    except ValueError as exc:
        log.error("Invalid parameters: %s", exc)
        return 1

    print_console_summary(views, config)
    if not args.no_verify:
        verify_views(views)

    log.info("=" * 60)
    log.info("Pipeline finished in %.1f s", time.time() - t0)
    log.info("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(main())

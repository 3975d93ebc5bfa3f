"""
team_metrics.py – Metric catalogue & result types
=================================================
Closed table of the five tracked WHOOP metrics (column, label, unit,
severity scale) plus the small result types shared by the analytics
layer.

Severity tiers replace the dashboard colours: the view layer maps
``SeverityTier`` → colour, the core never returns presentation tokens.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from config.settings import TIER_GOOD_MIN, TIER_CAUTION_MIN


class Metric(str, Enum):
    RECOVERY = "recovery"
    STRAIN = "strain"
    HRV = "hrv"
    SLEEP_PERFORMANCE = "sleep_performance"
    RESTING_HEART_RATE = "resting_heart_rate"

    @property
    def column(self) -> str:
        return self.value

    @property
    def info(self) -> "MetricInfo":
        return METRIC_TABLE[self]


class TrendLabel(str, Enum):
    """Week-over-week HRV direction (one dot on the athlete card)."""
    RISING = "rising"
    FLAT = "flat"
    DECLINING = "declining"
    NO_DATA = "no-data"


class SeverityTier(str, Enum):
    GOOD = "good"
    CAUTION = "caution"
    POOR = "poor"
    NO_DATA = "no-data"


@dataclass(frozen=True)
class MetricInfo:
    label: str
    unit: str
    tiered: bool


METRIC_TABLE: dict[Metric, MetricInfo] = {
    Metric.RECOVERY:           MetricInfo("Recovery", "%", tiered=True),
    Metric.STRAIN:             MetricInfo("Strain", "", tiered=False),
    Metric.HRV:                MetricInfo("HRV", "ms", tiered=False),
    Metric.SLEEP_PERFORMANCE:  MetricInfo("Sleep Performance", "%", tiered=True),
    Metric.RESTING_HEART_RATE: MetricInfo("RHR", "bpm", tiered=False),
}

# Summary cards show four metrics; the summary itself also carries RHR.
TRACKED_METRICS = (Metric.RECOVERY, Metric.STRAIN, Metric.HRV, Metric.SLEEP_PERFORMANCE)
SUMMARY_METRICS = TRACKED_METRICS + (Metric.RESTING_HEART_RATE,)
METRIC_COLUMNS = tuple(m.column for m in SUMMARY_METRICS)


def _is_missing(value: Optional[float]) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


def severity_tier(value: Optional[float]) -> SeverityTier:
    """Recovery / sleep scale: ≥67 good, 30–66 caution, ≤29 poor."""
    if _is_missing(value):
        return SeverityTier.NO_DATA
    if value >= TIER_GOOD_MIN:
        return SeverityTier.GOOD
    if value >= TIER_CAUTION_MIN:
        return SeverityTier.CAUTION
    return SeverityTier.POOR


def metric_tier(metric: Metric, value: Optional[float]) -> SeverityTier:
    if not METRIC_TABLE[metric].tiered:
        raise ValueError(f"{metric.value} has no severity scale")
    return severity_tier(value)


# ═══════════════════════════════════════════════════════════════════════════════
# RESULT TYPES
# ═══════════════════════════════════════════════════════════════════════════════
@dataclass(frozen=True)
class MetricSummary:
    avg: float
    max: float
    min: float
    count: int


@dataclass
class AthleteRollup:
    """Per-athlete window averages + HRV weekly trend (full history)."""
    athlete_id: str
    sessions: int
    days_with_data: int
    avg_recovery: Optional[float] = None
    avg_strain: Optional[float] = None
    avg_hrv: Optional[float] = None
    avg_sleep: Optional[float] = None
    hrv_trend: list[TrendLabel] = field(default_factory=list)

    @property
    def recovery_tier(self) -> SeverityTier:
        return metric_tier(Metric.RECOVERY, self.avg_recovery)

    @property
    def sleep_tier(self) -> SeverityTier:
        return metric_tier(Metric.SLEEP_PERFORMANCE, self.avg_sleep)

"""
Data model (DailyRecord and derived views)
==========================================

Each raw API row is converted into a `DailyRecord` object. Every derived
view (summary, week buckets, growth points, distribution) is also a small
frozen dataclass so that:
- records cannot be accidentally modified after loading, and
- every view is recomputed from the series instead of being edited in place.
"""

from __future__ import annotations
from dataclasses import dataclass, asdict
from datetime import date, datetime
from typing import Any, Dict, List, Optional

UNKNOWN_DATE = "Unknown date"

@dataclass(frozen=True)
class DailyRecord:
    """One calendar day of statistics for one country."""
    date: str
    new_cases: int = 0
    total_cases: int = 0
    new_deaths: int = 0
    total_deaths: int = 0

    def day(self) -> Optional[date]:
        """Return the record date as a `datetime.date`, or None if unparseable."""
        try:
            return datetime.strptime(self.date, "%Y-%m-%d").date()
        except ValueError:
            return None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

@dataclass(frozen=True)
class SummaryStats:
    total_cases: int = 0
    total_deaths: int = 0
    new_cases: int = 0
    new_deaths: int = 0
    # percent, 2 decimals
    case_fatality_rate: float = 0.0

@dataclass(frozen=True)
class WeekBucket:
    """Averages for one run of consecutive days sharing a week label.

    `total_cases`/`total_deaths` are the values of the bucket's last day,
    not sums.
    """
    week: str
    avg_new_cases: float
    avg_new_deaths: float
    total_cases: int
    total_deaths: int
    days: int

@dataclass(frozen=True)
class GrowthPoint:
    date: str
    total_cases: int
    growth_rate: float

@dataclass(frozen=True)
class DistributionSlice:
    name: str
    value: int

@dataclass(frozen=True)
class TrendMetric:
    subject: str
    value: float

@dataclass(frozen=True)
class DashboardView:
    """Everything the presentation layer needs for one (country, range) pair."""
    country: str
    time_range: str
    summary: SummaryStats
    series: List[DailyRecord]
    weekly: List[WeekBucket]
    growth: List[GrowthPoint]
    distribution: List[DistributionSlice]
    trend: List[TrendMetric]
    recent: List[DailyRecord]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

"""
Derived views
=============

Pure functions turning a (filtered) series into the views the dashboard shows:

- summarize        -> SummaryStats (latest totals, case-fatality rate)
- weekly_buckets   -> WeekBucket list (weekly averages)
- growth_rates     -> GrowthPoint list (day-over-day % change of total cases)
- distribution     -> Cases vs Deaths split of the latest totals
- trend_metrics    -> five-axis profile derived from the summary
- recent_rows      -> last N records (table)

None of these raise on degenerate input: empty series and zero
denominators produce zeros or empty lists.
"""

from __future__ import annotations
from datetime import date
from typing import List, Optional
import math
from .formatting import fixed
from .models import (
    DailyRecord, SummaryStats, WeekBucket, GrowthPoint,
    DistributionSlice, TrendMetric,
)

RECENT_ROWS = 10

# ---------------- Summary ----------------
def summarize(series: List[DailyRecord]) -> SummaryStats:
    """Latest totals and case-fatality rate; all zero for an empty series."""
    if not series:
        return SummaryStats()
    latest = series[-1]
    cfr = fixed(latest.total_deaths / latest.total_cases * 100) if latest.total_cases > 0 else 0.0
    return SummaryStats(
        total_cases=latest.total_cases,
        total_deaths=latest.total_deaths,
        new_cases=latest.new_cases,
        new_deaths=latest.new_deaths,
        case_fatality_rate=cfr,
    )

# ---------------- Weekly ----------------
def week_number(d: date) -> int:
    """Week of year, counting 7-day blocks from the Sunday on or before 1 Jan.

    Not ISO-8601: 1 Jan is always in week 1, and the last days of December
    can be week 53 (or 54 in a leap year starting on Saturday).
    """
    jan1 = date(d.year, 1, 1)
    past_days = (d - jan1).days
    # Sunday = 0 ... Saturday = 6
    jan1_dow = (jan1.weekday() + 1) % 7
    return math.ceil((past_days + jan1_dow + 1) / 7)

def week_label(record: DailyRecord) -> str:
    d = record.day()
    if d is None:
        return "Week ? ?"
    return f"Week {week_number(d)} {d.year}"

def weekly_buckets(series: List[DailyRecord]) -> List[WeekBucket]:
    """Group consecutive records by week label and average the daily counts.

    A new bucket starts whenever the label changes, so a label that
    reappears later (unsorted input) opens a second bucket.
    """
    out: List[WeekBucket] = []
    label: Optional[str] = None
    sum_cases = sum_deaths = 0
    last: Optional[DailyRecord] = None
    days = 0

    def _close() -> None:
        out.append(WeekBucket(
            week=label,
            avg_new_cases=fixed(sum_cases / days),
            avg_new_deaths=fixed(sum_deaths / days),
            total_cases=last.total_cases,
            total_deaths=last.total_deaths,
            days=days,
        ))

    for r in series:
        lbl = week_label(r)
        if lbl != label and days > 0:
            _close()
            sum_cases = sum_deaths = days = 0
        label = lbl
        sum_cases += r.new_cases
        sum_deaths += r.new_deaths
        last = r
        days += 1

    if days > 0:
        _close()
    return out

# ---------------- Growth ----------------
def growth_rates(series: List[DailyRecord]) -> List[GrowthPoint]:
    """Day-over-day % change of total cases.

    The first point is 0. A point whose previous total is 0 has no defined
    rate and is left out.
    """
    if len(series) < 2:
        return []
    out: List[GrowthPoint] = [GrowthPoint(series[0].date, series[0].total_cases, 0.0)]
    for prev, cur in zip(series, series[1:]):
        if prev.total_cases == 0:
            continue
        rate = (cur.total_cases - prev.total_cases) / prev.total_cases * 100
        out.append(GrowthPoint(cur.date, cur.total_cases, fixed(rate)))
    return out

# ---------------- Distribution ----------------
def distribution(series: List[DailyRecord]) -> List[DistributionSlice]:
    if not series:
        return []
    latest = series[-1]
    return [
        DistributionSlice("Cases", latest.total_cases - latest.total_deaths),
        DistributionSlice("Deaths", latest.total_deaths),
    ]

# ---------------- Trend profile ----------------
def _pct(num: int, den: int) -> float:
    if num <= 0 or den <= 0:
        return 0.0
    return fixed(num / den * 100)

def trend_metrics(summary: SummaryStats) -> List[TrendMetric]:
    """Five ratios on a 0-100 scale (the 'trend analysis' radar)."""
    return [
        TrendMetric("Cases", 100.0 if summary.total_cases > 0 else 0.0),
        TrendMetric("Deaths", _pct(summary.total_deaths, summary.total_cases)),
        TrendMetric("New Cases", _pct(summary.new_cases, summary.total_cases)),
        TrendMetric("New Deaths", _pct(summary.new_deaths, summary.total_deaths)),
        TrendMetric("Fatality", summary.case_fatality_rate),
    ]

def recent_rows(series: List[DailyRecord], n: int = RECENT_ROWS) -> List[DailyRecord]:
    if n <= 0:
        return []
    return list(series[-n:])

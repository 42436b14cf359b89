"""
Time range filter
=================

Restricts a series to a trailing window relative to "now":

    all | 1m | 3m | 6m | 1y

The cutoff is "now" (with its time of day) minus a calendar offset (pandas
`DateOffset`), so 31 March minus one month is 29 February in a leap year,
not 2 March. A record counts from midnight of its date, so the cutoff day
itself is only kept when "now" is exactly midnight.
"""

from __future__ import annotations
from datetime import date, datetime
from typing import Dict, List, Optional, Union
import pandas as pd
from .models import DailyRecord

ALL = "all"

# selector -> months to go back
_OFFSETS: Dict[str, int] = {
    "1m": 1,
    "3m": 3,
    "6m": 6,
    "1y": 12,
}

TIME_RANGES = (ALL, "1y", "6m", "3m", "1m")

LABELS = {
    ALL: "All Time",
    "1y": "Last Year",
    "6m": "Last 6 Months",
    "3m": "Last 3 Months",
    "1m": "Last Month",
}

def validate_time_range(time_range: str) -> str:
    tr = (time_range or "").strip().lower()
    if tr not in TIME_RANGES:
        raise ValueError(f"time range must be one of: {', '.join(TIME_RANGES)}")
    return tr

def cutoff_for(time_range: str, now: Optional[Union[date, datetime]] = None) -> Optional[pd.Timestamp]:
    """Return the earliest instant kept by `time_range`, or None for 'all'.

    `now` keeps its time of day; a plain `date` counts as midnight.
    """
    tr = validate_time_range(time_range)
    if tr == ALL:
        return None
    ts = pd.Timestamp(now or datetime.now())
    if ts.tzinfo is not None:
        ts = ts.tz_localize(None)
    return ts - pd.DateOffset(months=_OFFSETS[tr])

def filter_series(
    series: List[DailyRecord],
    time_range: str,
    now: Optional[Union[date, datetime]] = None,
) -> List[DailyRecord]:
    """Keep records whose midnight is at or after the cutoff, preserving order.

    Records with an unparseable date are only kept by 'all'.
    """
    cutoff = cutoff_for(time_range, now)
    if cutoff is None:
        return list(series)
    out: List[DailyRecord] = []
    for r in series:
        d = r.day()
        if d is not None and pd.Timestamp(d) >= cutoff:
            out.append(r)
    return out

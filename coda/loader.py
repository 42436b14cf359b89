"""
Record normalizer (raw rows -> DailyRecord list)
================================================

This module converts raw per-day rows (API JSON objects, fallback-file
entries, or pandas rows from an Our World in Data export) into
`DailyRecord` objects.

Key ideas:
- Each numeric field may be missing, null, a string, a float or NaN.
- We keep conversion helpers (_to_count/_to_date) that never raise:
  anything unusable becomes 0 (or "Unknown date").
- Field names follow the OWID dataset: new_cases, total_cases, ...
"""

from __future__ import annotations
from datetime import date, datetime
from typing import Any, Iterable, List, Mapping
import math
import pandas as pd
from .models import DailyRecord, UNKNOWN_DATE

COUNT_FIELDS = ("new_cases", "total_cases", "new_deaths", "total_deaths")

def _is_missing(x: Any) -> bool:
    if x is None:
        return True
    try:
        return bool(pd.isna(x))
    except (TypeError, ValueError):
        # lists / dicts: pd.isna returns an array
        return False

def _to_count(x: Any) -> int:
    """Convert a cell to int, returning 0 if missing/invalid."""
    if _is_missing(x) or isinstance(x, bool):
        return 0
    if isinstance(x, str):
        x = x.strip()
        if not x:
            return 0
    try:
        v = float(x)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(v):
        return 0
    return int(v)

def _to_date(x: Any) -> str:
    """Convert a date cell to a 10-character YYYY-MM-DD string."""
    if _is_missing(x):
        return UNKNOWN_DATE
    if isinstance(x, (datetime, date)):
        # pandas.Timestamp is a datetime subclass
        return x.isoformat()[:10]
    s = str(x).strip()
    if not s:
        return UNKNOWN_DATE
    return s[:10]

def normalize_record(raw: Mapping[str, Any]) -> DailyRecord:
    """Coerce one raw row into a DailyRecord. Never raises for a mapping."""
    return DailyRecord(
        date=_to_date(raw.get("date")),
        new_cases=_to_count(raw.get("new_cases")),
        total_cases=_to_count(raw.get("total_cases")),
        new_deaths=_to_count(raw.get("new_deaths")),
        total_deaths=_to_count(raw.get("total_deaths")),
    )

def normalize_series(rows: Iterable[Mapping[str, Any]]) -> List[DailyRecord]:
    """Normalize a whole series, keeping the source order."""
    return [normalize_record(r) for r in rows]

"""
Application state (immutable) and transitions
=============================================

`AppState` is a frozen snapshot of everything the dashboard shows:
selected country, time range, active chart, the loaded series and the
loading/error flags. Each event (country change, range change, fetch
completion) goes through a pure transition function that returns a *new*
state.

Overlapping requests
--------------------
Every series request bumps `request_seq`. A completion carries the sequence
number it was issued with; if that is not the latest one, the completion is
stale and the state is returned unchanged. The latest request always wins,
whatever order the responses arrive in.
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Any, Iterable, Mapping, Optional, Tuple, Union
import logging
from .aggregates import summarize, weekly_buckets, growth_rates, distribution, trend_metrics, recent_rows
from .loader import normalize_series
from .models import DailyRecord, DashboardView
from .timerange import filter_series, validate_time_range

logger = logging.getLogger(__name__)

CHARTS = ("trends", "cumulative", "weekly", "distribution", "growthRate")

@dataclass(frozen=True)
class AppState:
    selected_country: str = "India"
    time_range: str = "all"
    active_chart: str = "trends"
    countries: Tuple[str, ...] = ()
    # full normalized series for selected_country (unfiltered)
    series: Tuple[DailyRecord, ...] = ()
    loading: bool = False
    error: Optional[str] = None
    request_seq: int = 0
    source: Optional[str] = None

def initial_state(country: str = "India", time_range: str = "all") -> AppState:
    return AppState(selected_country=country, time_range=validate_time_range(time_range))

# ---------------- Countries ----------------
def countries_requested(state: AppState) -> AppState:
    return replace(state, loading=True)

def countries_loaded(state: AppState, countries: Iterable[str], source: Optional[str] = None) -> AppState:
    return replace(state, countries=tuple(countries), loading=False, source=source or state.source)

def countries_failed(state: AppState, message: str) -> AppState:
    return replace(state, loading=False, error=message)

# ---------------- Series ----------------
def series_requested(state: AppState, country: str) -> AppState:
    """Start a new request for `country`; the new sequence number is `request_seq`."""
    return replace(
        state,
        selected_country=country,
        loading=True,
        error=None,
        request_seq=state.request_seq + 1,
    )

def _is_stale(state: AppState, seq: int) -> bool:
    if seq != state.request_seq:
        logger.debug("Discarding stale response #%s (latest is #%s)", seq, state.request_seq)
        return True
    return False

def series_loaded(
    state: AppState,
    seq: int,
    rows: Iterable[Mapping[str, Any]],
    source: Optional[str] = None,
) -> AppState:
    if _is_stale(state, seq):
        return state
    series = tuple(normalize_series(rows))
    error = None if series else f"No data available for {state.selected_country}"
    return replace(state, series=series, loading=False, error=error, source=source or state.source)

def series_failed(state: AppState, seq: int, message: str) -> AppState:
    if _is_stale(state, seq):
        return state
    return replace(state, series=(), loading=False, error=message)

# ---------------- Selections ----------------
def time_range_selected(state: AppState, time_range: str) -> AppState:
    return replace(state, time_range=validate_time_range(time_range))

def chart_selected(state: AppState, chart: str) -> AppState:
    if chart not in CHARTS:
        raise ValueError(f"chart must be one of: {', '.join(CHARTS)}")
    return replace(state, active_chart=chart)

# ---------------- Derived view ----------------
def derive_view(state: AppState, now: Optional[Union[date, datetime]] = None) -> DashboardView:
    """Run the whole pipeline on the stored series for the current range."""
    filtered = filter_series(list(state.series), state.time_range, now)
    summary = summarize(filtered)
    return DashboardView(
        country=state.selected_country,
        time_range=state.time_range,
        summary=summary,
        series=filtered,
        weekly=weekly_buckets(filtered),
        growth=growth_rates(filtered),
        distribution=distribution(filtered),
        trend=trend_metrics(summary),
        recent=recent_rows(filtered),
    )

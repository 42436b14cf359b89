"""
Dashboard controller (CODA)
===========================

This is the heart of the project. CODA works like a tiny offline dashboard:

1) Ask the source chain for the list of countries
2) Fetch the raw series for the selected country (API -> table -> fallback)
3) Keep the current selection in an immutable `AppState`
4) Derive the views (summary, weekly, growth, distribution, ...) on demand
5) Export / report on the current view

State changes go through the pure transitions in `coda.state`; this class
only performs the I/O around them and keeps the selection history.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional, Sequence, Tuple, Union
import csv
import json
import logging
from .models import DashboardView
from .sources import SourceChain, DataSourceError
from . import state as st
from .timerange import validate_time_range

logger = logging.getLogger(__name__)

# Offered when a selection has no data
SUGGESTED_COUNTRIES = ("United States", "India", "United Kingdom", "Brazil", "Germany")

# (country, time_range)
Selection = Tuple[str, str]

def search_countries(countries: Sequence[str], term: str) -> List[str]:
    """Case-insensitive substring search over country names."""
    t = (term or "").strip().lower()
    return [c for c in countries if t in c.lower()]

@dataclass
class Dashboard:
    """COVID-19 Data Analyzer controller.

    The controller stores:
    - sources: the priority-ordered source chain
    - state: current AppState (replaced, never mutated)
    - history: undo/redo stacks of (country, time_range) selections
    """
    sources: SourceChain
    state: st.AppState = field(default_factory=st.initial_state)
    # Stores CLI commands (for reproducibility in reports)
    command_log: List[str] = field(default_factory=list)

    # Stacks for undo/redo (store snapshots of the selection)
    _undo: List[Selection] = field(default_factory=list, init=False)
    _redo: List[Selection] = field(default_factory=list, init=False)

    # ---------------- History (Stacks) ----------------
    def _selection(self) -> Selection:
        return (self.state.selected_country, self.state.time_range)

    def _push_history(self) -> None:
        self._undo.append(self._selection())
        self._redo.clear()

    def _restore(self, sel: Selection) -> None:
        country, time_range = sel
        self.state = st.time_range_selected(self.state, time_range)
        if country != self.state.selected_country:
            self._fetch(country)

    def undo(self) -> bool:
        if not self._undo:
            return False
        self._redo.append(self._selection())
        self._restore(self._undo.pop())
        return True

    def redo(self) -> bool:
        if not self._redo:
            return False
        self._undo.append(self._selection())
        self._restore(self._redo.pop())
        return True

    # ---------------- Fetching ----------------
    def load_countries(self) -> List[str]:
        self.state = st.countries_requested(self.state)
        try:
            name, countries = self.sources.countries()
        except DataSourceError as e:
            logger.error("Error fetching countries: %s", e)
            self.state = st.countries_failed(self.state, str(e))
            return []
        logger.info("Loaded %d countries from %s", len(countries), name)
        self.state = st.countries_loaded(self.state, countries, name)
        return list(self.state.countries)

    def _fetch(self, country: str) -> None:
        self.state = st.series_requested(self.state, country)
        seq = self.state.request_seq
        try:
            name, rows = self.sources.series(country)
        except DataSourceError as e:
            logger.error("Error fetching data for %s: %s", country, e)
            self.state = st.series_failed(self.state, seq, str(e))
            return
        logger.info("Fetched %d rows for %s from %s", len(rows), country, name)
        self.state = st.series_loaded(self.state, seq, rows, name)

    def start(self) -> None:
        """Load countries, then the series for the default country."""
        self.load_countries()
        self._fetch(self.state.selected_country)

    def refresh(self) -> None:
        """Retry: reload countries if none are known, else refetch the series."""
        if not self.state.countries:
            self.load_countries()
        self._fetch(self.state.selected_country)

    # ---------------- Selections ----------------
    def select_country(self, country: str) -> None:
        country = country.strip()
        if self.state.countries and country not in self.state.countries:
            raise ValueError(f"Unknown country: {country}")
        logger.info("Changing country from %s to %s", self.state.selected_country, country)
        self._push_history()
        self._fetch(country)

    def select_time_range(self, time_range: str) -> None:
        tr = validate_time_range(time_range)
        self._push_history()
        self.state = st.time_range_selected(self.state, tr)

    def select_chart(self, chart: str) -> None:
        self.state = st.chart_selected(self.state, chart)

    def suggestions(self) -> List[str]:
        return [c for c in SUGGESTED_COUNTRIES if c in self.state.countries]

    # ---------------- Output operations ----------------
    def view(self, now: Optional[Union[date, datetime]] = None) -> DashboardView:
        return st.derive_view(self.state, now)

    def export_csv(self, path: str, now: Optional[Union[date, datetime]] = None) -> int:
        rows = self.view(now).series
        if not rows:
            raise ValueError("Nothing to export: current selection is empty.")
        with open(path, "w", newline="", encoding="utf-8") as f:
            w = csv.writer(f)
            w.writerow(["date", "new_cases", "total_cases", "new_deaths", "total_deaths"])
            for r in rows:
                w.writerow([r.date, r.new_cases, r.total_cases, r.new_deaths, r.total_deaths])
        return len(rows)

    def export_json(self, path: str, now: Optional[Union[date, datetime]] = None) -> int:
        """Export the whole current view (summary + every derived series) as JSON."""
        v = self.view(now)
        if not v.series:
            raise ValueError("Nothing to export: current selection is empty.")
        payload = v.to_dict()
        payload["source"] = self.state.source
        with open(path, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2)
        return len(v.series)

"""
Data sources
============

A data source answers two questions: which countries exist, and what is the
raw daily series for one country. Sources are tried in priority order by
`SourceChain`:

1) ApiDataSource      - the live HTTP API (/countries, /summary?country=...)
2) TableFileSource    - an Our World in Data CSV/XLSX export (optional)
3) FallbackFileSource - the static fallback-data.json shipped with the app

Every source returns *raw* rows (dicts); normalization happens in
`coda.loader`, so the pipeline never knows which source supplied the data.
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional, Sequence, Tuple
import json
import logging
import os
import pandas as pd
import requests

logger = logging.getLogger(__name__)

INVALID_FORMAT = "Invalid data format received from API"
ALL_FAILED = "Unable to load any data. Please check your connection."

class DataSourceError(RuntimeError):
    pass

def _payload_error(payload: Any) -> Optional[str]:
    """Return the message of an {"error": ...} payload, or None."""
    if not isinstance(payload, dict) or not payload.get("error"):
        return None
    err = payload["error"]
    if isinstance(err, str):
        return err
    if isinstance(err, list) and err:
        return str(err[0])
    return None

def extract_error_message(err: Optional[BaseException]) -> str:
    """Turn a failed request into a short user-facing message."""
    if err is None:
        return "Unknown error"

    response = getattr(err, "response", None)
    if response is not None:
        try:
            body = response.json()
        except ValueError:
            body = None
        if body is not None:
            msg = _payload_error(body)
            if msg:
                return msg
            return json.dumps(body)

    msg = str(err)
    if msg:
        return msg
    return "Failed to connect to server"


class DataSource:
    """Base data source interface. Subclasses override both methods."""

    name = "source"

    def countries(self) -> List[str]:
        """Return the list of known country names."""
        raise NotImplementedError

    def series(self, country: str) -> List[Dict[str, Any]]:
        """Return raw daily rows for `country` (oldest first). [] means no data."""
        raise NotImplementedError


class ApiDataSource(DataSource):
    """Live API backed by requests."""

    name = "api"

    def __init__(self, base_url: str, timeout: float = 15.0, session: Optional[requests.Session] = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _get(self, path: str, params: Optional[Dict[str, str]] = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            r = self.session.get(url, params=params, timeout=self.timeout)
            r.raise_for_status()
        except requests.RequestException as e:
            raise DataSourceError(extract_error_message(e)) from e
        try:
            payload = r.json()
        except ValueError as e:
            raise DataSourceError(INVALID_FORMAT) from e
        msg = _payload_error(payload)
        if msg:
            logger.error("API returned error: %s", msg)
            raise DataSourceError(msg)
        return payload

    def countries(self) -> List[str]:
        payload = self._get("/countries")
        if not isinstance(payload, list) or not payload:
            raise DataSourceError(INVALID_FORMAT)
        return [str(c) for c in payload]

    def series(self, country: str) -> List[Dict[str, Any]]:
        logger.info("Fetching data for %s", country)
        # requests percent-encodes the country name
        payload = self._get("/summary", params={"country": country})
        if not isinstance(payload, list):
            raise DataSourceError(INVALID_FORMAT)
        return payload


class FallbackFileSource(DataSource):
    """Static JSON file: {"countries": [...], "countryData": {name: [rows]}}."""

    name = "fallback"

    def __init__(self, path: str) -> None:
        self.path = path
        self._data: Optional[Dict[str, Any]] = None

    def _load(self) -> Dict[str, Any]:
        if self._data is None:
            try:
                with open(self.path, "r", encoding="utf-8") as f:
                    data = json.load(f)
            except (OSError, ValueError) as e:
                raise DataSourceError(f"Cannot read fallback file {self.path}: {e}") from e
            if not isinstance(data, dict):
                raise DataSourceError(f"Fallback file {self.path} is not a JSON object")
            self._data = data
        return self._data

    def countries(self) -> List[str]:
        countries = self._load().get("countries")
        if not isinstance(countries, list) or not countries:
            raise DataSourceError(f"Fallback file {self.path} has no country list")
        return [str(c) for c in countries]

    def series(self, country: str) -> List[Dict[str, Any]]:
        rows = (self._load().get("countryData") or {}).get(country)
        return list(rows) if isinstance(rows, list) else []


class TableFileSource(DataSource):
    """Our World in Data export (owid-covid-data.csv or .xlsx)."""

    name = "table"
    COLUMNS = ("location", "date", "new_cases", "total_cases", "new_deaths", "total_deaths")

    def __init__(self, path: str) -> None:
        self.path = path
        self._df: Optional[pd.DataFrame] = None

    def _load(self) -> pd.DataFrame:
        if self._df is None:
            ext = os.path.splitext(self.path)[1].lower()
            try:
                if ext in (".xlsx", ".xls"):
                    df = pd.read_excel(self.path, engine="openpyxl")
                else:
                    df = pd.read_csv(self.path)
            except (OSError, ValueError) as e:
                raise DataSourceError(f"Cannot read table file {self.path}: {e}") from e
            df.rename(columns={c: str(c).strip() for c in df.columns}, inplace=True)
            missing = [c for c in self.COLUMNS if c not in df.columns]
            if missing:
                raise DataSourceError(f"Table file {self.path} is missing columns: {missing}")
            df = df[list(self.COLUMNS)].copy()
            df["date"] = pd.to_datetime(df["date"], errors="coerce")
            self._df = df.sort_values(["location", "date"], kind="stable")
        return self._df

    def countries(self) -> List[str]:
        df = self._load()
        return sorted(str(c) for c in df["location"].dropna().unique())

    def series(self, country: str) -> List[Dict[str, Any]]:
        df = self._load()
        sub = df[df["location"] == country]
        # NaN cells stay NaN; the normalizer turns them into 0
        return sub.drop(columns=["location"]).to_dict("records")


class SourceChain:
    """Try each source in order until one answers."""

    def __init__(self, sources: Sequence[DataSource]) -> None:
        if not sources:
            raise ValueError("SourceChain needs at least one source")
        self.sources = list(sources)

    def _first(self, what: str, call) -> Tuple[str, Any]:
        last: Optional[DataSourceError] = None
        for src in self.sources:
            try:
                return src.name, call(src)
            except DataSourceError as e:
                logger.warning("Error fetching %s from %s: %s. Switching to next source...", what, src.name, e)
                last = e
        raise DataSourceError(ALL_FAILED) from last

    def countries(self) -> Tuple[str, List[str]]:
        """Return (source name, countries)."""
        return self._first("countries", lambda s: s.countries())

    def series(self, country: str) -> Tuple[str, List[Dict[str, Any]]]:
        """Return (source name, raw rows)."""
        return self._first(f"data for {country}", lambda s: s.series(country))

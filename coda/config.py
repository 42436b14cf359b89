"""
Configuration
=============

Settings come from (lowest to highest priority):
1) defaults below,
2) environment variables / a `.env` file (python-dotenv),
3) CLI flags (see `coda/cli.py`).

Environment variables:
    CODA_API_URL, CODA_FALLBACK_PATH, CODA_TABLE_PATH,
    CODA_TIMEOUT, CODA_COUNTRY, CODA_TIME_RANGE
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional
import os
from dotenv import find_dotenv, load_dotenv
from .sources import DataSource, ApiDataSource, FallbackFileSource, TableFileSource, SourceChain
from .timerange import validate_time_range

DEFAULT_API_URL = "http://localhost:8000"
DEFAULT_FALLBACK_PATH = "fallback-data.json"

@dataclass
class Settings:
    api_base_url: str = DEFAULT_API_URL
    fallback_path: Optional[str] = DEFAULT_FALLBACK_PATH
    # optional OWID csv/xlsx export used before the fallback file
    table_path: Optional[str] = None
    timeout: float = 15.0
    default_country: str = "India"
    default_time_range: str = "all"

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv(find_dotenv(usecwd=True))
        timeout = os.getenv("CODA_TIMEOUT")
        return cls(
            api_base_url=os.getenv("CODA_API_URL", DEFAULT_API_URL),
            fallback_path=os.getenv("CODA_FALLBACK_PATH", DEFAULT_FALLBACK_PATH) or None,
            table_path=os.getenv("CODA_TABLE_PATH") or None,
            timeout=float(timeout) if timeout else 15.0,
            default_country=os.getenv("CODA_COUNTRY", "India"),
            default_time_range=validate_time_range(os.getenv("CODA_TIME_RANGE", "all")),
        )

def build_sources(settings: Settings) -> SourceChain:
    """API first, then the OWID table (if any), then the static fallback file."""
    sources: List[DataSource] = []
    if settings.api_base_url:
        sources.append(ApiDataSource(settings.api_base_url, timeout=settings.timeout))
    if settings.table_path:
        sources.append(TableFileSource(settings.table_path))
    if settings.fallback_path:
        sources.append(FallbackFileSource(settings.fallback_path))
    return SourceChain(sources)

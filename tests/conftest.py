from typing import Any, Dict, List, Optional

import pytest

from coda.models import DailyRecord
from coda.sources import DataSource, DataSourceError


def rec(date: str, total_cases: int = 0, total_deaths: int = 0, new_cases: int = 0, new_deaths: int = 0) -> DailyRecord:
    return DailyRecord(date=date, new_cases=new_cases, total_cases=total_cases,
                       new_deaths=new_deaths, total_deaths=total_deaths)


class StaticSource(DataSource):
    """In-memory source; `fail=True` makes every call raise."""

    def __init__(self, name: str, data: Optional[Dict[str, List[Dict[str, Any]]]] = None, fail: bool = False):
        self.name = name
        self.data = data or {}
        self.fail = fail
        self.calls: List[str] = []

    def countries(self) -> List[str]:
        self.calls.append("countries")
        if self.fail:
            raise DataSourceError(f"{self.name} down")
        return list(self.data)

    def series(self, country: str) -> List[Dict[str, Any]]:
        self.calls.append(country)
        if self.fail:
            raise DataSourceError(f"{self.name} down")
        return self.data.get(country, [])


def raw_days(start_total: int = 100, days: int = 5, start_day: int = 1) -> List[Dict[str, Any]]:
    out = []
    total = start_total
    for i in range(days):
        total += 10
        out.append({
            "date": f"2024-03-{start_day + i:02d}T00:00:00.000Z",
            "new_cases": 10,
            "total_cases": total,
            "new_deaths": 1,
            "total_deaths": i + 1,
        })
    return out


@pytest.fixture
def sample_data():
    return {
        "India": raw_days(100, 5),
        "Brazil": raw_days(1000, 3),
        "Germany": [],
    }

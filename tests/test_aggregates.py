from datetime import date

from coda.aggregates import (
    summarize, week_number, week_label, weekly_buckets, growth_rates,
    distribution, trend_metrics, recent_rows,
)
from coda.models import SummaryStats, DailyRecord, UNKNOWN_DATE

from conftest import rec


# ---------------- summarize ----------------
def test_summary_of_empty_series_is_all_zero():
    assert summarize([]) == SummaryStats(0, 0, 0, 0, 0.0)


def test_summary_uses_latest_record_and_cfr():
    s = summarize([rec("2024-01-01", 10, 1), rec("2024-01-02", 1000, 20, new_cases=5, new_deaths=2)])
    assert (s.total_cases, s.total_deaths, s.new_cases, s.new_deaths) == (1000, 20, 5, 2)
    assert s.case_fatality_rate == 2.0


def test_cfr_is_zero_without_cases():
    assert summarize([rec("2024-01-01", 0, 5)]).case_fatality_rate == 0.0


def test_cfr_rounds_to_two_decimals():
    assert summarize([rec("2024-01-01", 3, 1)]).case_fatality_rate == 33.33


# ---------------- week numbering ----------------
def test_weeks_start_on_sunday():
    # 2024-01-01 is a Monday
    assert week_number(date(2024, 1, 1)) == 1
    assert week_number(date(2024, 1, 6)) == 1
    assert week_number(date(2024, 1, 7)) == 2
    # 2023-01-01 is a Sunday
    assert week_number(date(2023, 1, 7)) == 1
    assert week_number(date(2023, 1, 8)) == 2


def test_year_edges_are_not_iso():
    # ISO-8601 puts 2023-12-31 in week 52 and 2024-12-31 in 2025-W01
    assert week_number(date(2023, 12, 31)) == 53
    assert week_number(date(2024, 12, 31)) == 53
    assert week_number(date(2020, 12, 31)) == 53


def test_week_label():
    assert week_label(rec("2024-01-07")) == "Week 2 2024"
    assert week_label(DailyRecord(date=UNKNOWN_DATE)) == "Week ? ?"


# ---------------- weekly buckets ----------------
def test_weekly_of_empty_series_is_empty():
    assert weekly_buckets([]) == []


def test_weekly_buckets_average_and_closing_totals():
    series = [
        rec("2024-01-04", 10, 1, new_cases=1, new_deaths=0),   # Thu, week 1
        rec("2024-01-05", 20, 1, new_cases=2, new_deaths=0),
        rec("2024-01-06", 30, 2, new_cases=4, new_deaths=1),   # Sat, week 1
        rec("2024-01-07", 40, 2, new_cases=10, new_deaths=0),  # Sun, week 2
    ]
    out = weekly_buckets(series)
    assert [w.week for w in out] == ["Week 1 2024", "Week 2 2024"]
    first, last = out
    assert first.avg_new_cases == 2.33
    assert first.avg_new_deaths == 0.33
    assert (first.total_cases, first.total_deaths, first.days) == (30, 2, 3)
    # single-day bucket at the end is still emitted
    assert (last.avg_new_cases, last.total_cases, last.days) == (10.0, 40, 1)


def test_weekly_splits_at_year_boundary():
    series = [rec("2023-12-30"), rec("2023-12-31"), rec("2024-01-01")]
    assert [w.week for w in weekly_buckets(series)] == ["Week 52 2023", "Week 53 2023", "Week 1 2024"]


def test_weekly_sums_round_trip_and_is_repeatable():
    series = [rec(f"2024-02-{d:02d}", new_cases=d * 3, new_deaths=d % 2) for d in range(1, 29)]
    out = weekly_buckets(series)
    assert out == weekly_buckets(series)
    assert sum(w.days for w in out) == len(series)
    total = sum(w.avg_new_cases * w.days for w in out)
    assert abs(total - sum(r.new_cases for r in series)) < 0.01 * len(out) * 7


# ---------------- growth ----------------
def test_growth_rate_basic():
    out = growth_rates([rec("2024-01-01", 100), rec("2024-01-02", 150)])
    assert [(g.date, g.growth_rate) for g in out] == [("2024-01-01", 0.0), ("2024-01-02", 50.0)]


def test_growth_omits_points_after_zero_total():
    out = growth_rates([rec("2024-01-01", 0), rec("2024-01-02", 0)])
    assert [g.date for g in out] == ["2024-01-01"]

    out = growth_rates([rec("2024-01-01", 0), rec("2024-01-02", 5), rec("2024-01-03", 10)])
    assert [(g.date, g.growth_rate) for g in out] == [("2024-01-01", 0.0), ("2024-01-03", 100.0)]


def test_growth_of_short_series_is_empty():
    assert growth_rates([]) == []
    assert growth_rates([rec("2024-01-01", 100)]) == []


def test_growth_rounds_to_two_decimals():
    out = growth_rates([rec("2024-01-01", 300), rec("2024-01-02", 301)])
    assert out[-1].growth_rate == 0.33


# ---------------- distribution / trend / recent ----------------
def test_distribution_of_latest_record():
    out = distribution([rec("2024-01-01", 10, 1), rec("2024-01-02", 500, 50)])
    assert [(d.name, d.value) for d in out] == [("Cases", 450), ("Deaths", 50)]


def test_distribution_of_empty_series_is_empty():
    assert distribution([]) == []


def test_trend_metrics():
    s = SummaryStats(total_cases=1000, total_deaths=20, new_cases=10, new_deaths=2, case_fatality_rate=2.0)
    assert [(m.subject, m.value) for m in trend_metrics(s)] == [
        ("Cases", 100.0), ("Deaths", 2.0), ("New Cases", 1.0), ("New Deaths", 10.0), ("Fatality", 2.0),
    ]


def test_trend_metrics_guard_zero_denominators():
    s = SummaryStats(total_cases=0, total_deaths=3, new_cases=0, new_deaths=0)
    assert [m.value for m in trend_metrics(s)] == [0.0, 0.0, 0.0, 0.0, 0.0]


def test_recent_rows():
    series = [rec(f"2024-01-{d:02d}") for d in range(1, 16)]
    assert [r.date for r in recent_rows(series)] == [f"2024-01-{d:02d}" for d in range(6, 16)]
    assert recent_rows(series[:3]) == series[:3]
    assert recent_rows(series, 0) == []

import pytest

from coda.cli import handle
from coda.engine import Dashboard
from coda.sources import SourceChain

from conftest import StaticSource


@pytest.fixture
def dash(sample_data):
    d = Dashboard(sources=SourceChain([StaticSource("api", sample_data)]))
    d.start()
    return d


def test_countries_prefix(dash, capsys):
    handle(dash, "countries br")
    assert capsys.readouterr().out.split() == ["Brazil"]


def test_search(dash, capsys):
    handle(dash, "search AN")
    assert capsys.readouterr().out.split() == ["Germany"]


def test_country_and_stats(dash, capsys):
    handle(dash, 'country "Brazil"')
    out = capsys.readouterr().out
    assert out.startswith("Brazil | All Time | 3 days")
    handle(dash, "stats")
    out = capsys.readouterr().out
    assert "1.0K" in out
    assert "Case Fatality Rate: 0.29%" in out


def test_no_data_prints_suggestions(dash, capsys):
    handle(dash, "country Germany")
    out = capsys.readouterr().out
    assert "Error: No data available for Germany" in out
    assert "Popular countries with good data coverage: India, Brazil" in out


def test_views(dash, capsys):
    handle(dash, "weekly")
    assert "Week 9 2024" in capsys.readouterr().out
    handle(dash, "growth 2")
    assert len(capsys.readouterr().out.splitlines()) == 2
    handle(dash, "dist")
    assert capsys.readouterr().out.splitlines() == ["Cases: 145", "Deaths: 5"]
    handle(dash, "trend")
    assert capsys.readouterr().out.splitlines()[0].split() == ["Cases", "100.00"]
    handle(dash, "table")
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 6 and lines[-1].split()[0] == "2024-03-05"


def test_range_undo_redo(dash, capsys):
    handle(dash, "range 1y")
    assert dash.state.time_range == "1y"
    handle(dash, "undo")
    assert "Undone." in capsys.readouterr().out
    assert dash.state.time_range == "all"
    handle(dash, "redo")
    assert dash.state.time_range == "1y"


def test_bad_range_raises(dash):
    with pytest.raises(ValueError):
        handle(dash, "range 2w")


def test_export(dash, tmp_path, capsys):
    out = tmp_path / "out.csv"
    handle(dash, f'export csv "{out}"')
    assert "Exported 5 rows" in capsys.readouterr().out
    assert out.exists()
    handle(dash, f'export xml "{out}"')
    assert "Unknown export format" in capsys.readouterr().out


def test_unknown_command(dash, capsys):
    handle(dash, "frobnicate")
    assert "Unknown command" in capsys.readouterr().out


def test_zero_count_prints_nothing(dash, capsys):
    handle(dash, "weekly 0")
    handle(dash, "growth 0")
    handle(dash, "growth -3")
    assert capsys.readouterr().out == ""

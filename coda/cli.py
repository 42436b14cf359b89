"""
CODA Command Line Interface (CLI)
=================================

This file provides the interactive terminal program you run like:

    python -m coda.cli --api http://localhost:8000 --country "India"

It demonstrates:
- Argument parsing (argparse) layered over environment settings
- A REPL loop (Read-Eval-Print Loop) for commands
- Mapping user commands to dashboard methods (country, range, views, export)

If the API is unreachable, data comes from the OWID table file (--table)
or the static fallback file (--fallback).
"""

from __future__ import annotations
import argparse, logging, shlex
from typing import List
from .config import Settings, build_sources
from .engine import Dashboard, search_countries
from .formatting import format_number, format_rate
from .models import DailyRecord
from .state import initial_state
from .timerange import LABELS

HELP = """
CODA commands (grouped)
----------------------

1) Selection
   countries [prefix]               (example: countries Uni)
   search <term>                    (example: search land)
   country "<Country>"              (example: country "United States")
   range all|1y|6m|3m|1m            (example: range 3m)
   chart trends|cumulative|weekly|distribution|growthRate
   refresh                          (retry the last fetch)

2) Views (current country + range)
   stats
   weekly [n]                       (last n weeks, default 10)
   growth [n]                       (last n days, default 10)
   dist
   trend
   table

3) Export / report
   export csv "<out.csv>"
   export json "<out.json>"
   report "<out.docx>"

4) History
   undo
   redo

5) Exit
   quit
"""


def main(argv: List[str] = None):
    """Entry point for the CODA CLI.

    1) Resolve settings (env + flags)
    2) Load countries and the default country's series
    3) Start an interactive REPL
    """
    settings = Settings.from_env()
    ap = argparse.ArgumentParser(prog="coda")
    ap.add_argument("--api", default=settings.api_base_url, help="Base URL of the statistics API")
    ap.add_argument("--fallback", default=settings.fallback_path, help="Path to fallback-data.json")
    ap.add_argument("--table", default=settings.table_path, help="Path to an OWID covid CSV/XLSX export")
    ap.add_argument("--country", default=settings.default_country)
    ap.add_argument("--range", dest="time_range", default=settings.default_time_range, choices=list(LABELS))
    ap.add_argument("--timeout", type=float, default=settings.timeout)
    ap.add_argument("--log-level", default="WARNING", help="DEBUG, INFO, WARNING, ERROR")
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    settings.api_base_url = args.api
    settings.fallback_path = args.fallback
    settings.table_path = args.table
    settings.timeout = args.timeout

    dash = Dashboard(sources=build_sources(settings), state=initial_state(args.country, args.time_range))
    print("Loading data...")
    dash.start()
    _print_status(dash)
    print("Type 'help' for commands.")

    while True:
        try:
            line = input("coda> ")
            # Keep a lightweight log of commands for the report (reproducibility).
            stripped = line.strip()
            if stripped:
                cmd0 = stripped.split()[0].lower()
                if cmd0 in ("country", "range", "chart", "undo", "redo", "refresh"):
                    dash.command_log.append(stripped)
        except EOFError:
            break
        if not line.strip():
            continue
        if line.strip().lower() in ("quit", "exit"):
            break
        try:
            handle(dash, line)
        except Exception as e:
            print(f"Error: {e}")


def handle(dash: Dashboard, line: str) -> None:
    """Handle one CLI command line."""
    parts = shlex.split(line)
    cmd = parts[0].lower()

    if cmd == "help":
        print(HELP)
        return

    if cmd == "countries":
        prefix = parts[1] if len(parts) >= 2 else ""
        vals = list(dash.state.countries)
        if prefix:
            p = prefix.lower()
            vals = [v for v in vals if v.lower().startswith(p)]
        for v in vals[:50]:
            print(v)
        if len(vals) > 50:
            print(f"... ({len(vals)} total, showing 50)")
        return

    if cmd == "search":
        term = " ".join(parts[1:])
        for v in search_countries(dash.state.countries, term)[:50]:
            print(v)
        return

    if cmd == "country":
        if len(parts) < 2:
            raise ValueError('usage: country "<Country>"')
        dash.select_country(" ".join(parts[1:]))
        _print_status(dash)
        return

    if cmd == "range":
        if len(parts) < 2:
            raise ValueError("usage: range all|1y|6m|3m|1m")
        dash.select_time_range(parts[1])
        _print_status(dash)
        return

    if cmd == "chart":
        dash.select_chart(parts[1] if len(parts) >= 2 else "")
        print(f"Active chart: {dash.state.active_chart}")
        return

    if cmd == "refresh":
        dash.refresh()
        _print_status(dash)
        return

    if cmd == "undo":
        print("Undone." if dash.undo() else "Nothing to undo.")
        _print_status(dash)
        return

    if cmd == "redo":
        print("Redone." if dash.redo() else "Nothing to redo.")
        _print_status(dash)
        return

    if cmd == "stats":
        s = dash.view().summary
        print(f"Total Cases:        {format_number(s.total_cases)} (+{format_number(s.new_cases)} new)")
        print(f"Total Deaths:       {format_number(s.total_deaths)} (+{format_number(s.new_deaths)} new)")
        print(f"Case Fatality Rate: {format_rate(s.case_fatality_rate)}")
        return

    if cmd == "weekly":
        n = int(parts[1]) if len(parts) >= 2 else 10
        if n <= 0:
            return
        for w in dash.view().weekly[-n:]:
            print(f"{w.week:<14} avg_cases={w.avg_new_cases:<10} avg_deaths={w.avg_new_deaths:<8} "
                  f"total_cases={w.total_cases} total_deaths={w.total_deaths}")
        return

    if cmd == "growth":
        n = int(parts[1]) if len(parts) >= 2 else 10
        if n <= 0:
            return
        for g in dash.view().growth[-n:]:
            print(f"{g.date} {format_rate(g.growth_rate)}")
        return

    if cmd == "dist":
        for d in dash.view().distribution:
            print(f"{d.name}: {format_number(d.value)}")
        return

    if cmd == "trend":
        for m in dash.view().trend:
            print(f"{m.subject:<10} {m.value:.2f}")
        return

    if cmd == "table":
        _print_rows(dash.view().recent)
        return

    if cmd == "export":
        # export <csv|json> "<path>"
        if len(parts) < 3:
            print('Usage: export csv "out.csv"  OR  export json "out.json"')
            return
        fmt, out_path = parts[1].lower(), parts[2]
        if fmt == "csv":
            n = dash.export_csv(out_path)
        elif fmt == "json":
            n = dash.export_json(out_path)
        else:
            print("Unknown export format. Use: csv or json")
            return
        print(f"Exported {n} rows to {out_path}")
        return

    if cmd == "report":
        from .report import generate_docx_report, ReportConfig, DatasetCitation
        if len(parts) < 2:
            raise ValueError('usage: report "<out.docx>"')
        cfg = ReportConfig(
            citation=DatasetCitation(source_name=dash.state.source),
            command_log=dash.command_log,
        )
        generate_docx_report(dash.view(), parts[1], config=cfg)
        print(f"Report written to {parts[1]}")
        return

    print("Unknown command. Type 'help'.")


def _print_status(dash: Dashboard) -> None:
    s = dash.state
    label = LABELS.get(s.time_range, s.time_range)
    if s.error:
        print(f"Error: {s.error}")
        if not s.series:
            sugg = [c for c in dash.suggestions() if c != s.selected_country]
            if sugg:
                print("Popular countries with good data coverage: " + ", ".join(sugg))
        return
    n = len(dash.view().series)
    print(f"{s.selected_country} | {label} | {n} days (source: {s.source})")


def _print_rows(rows: List[DailyRecord]) -> None:
    print(f"{'Date':<12} {'New Cases':>10} {'Total Cases':>12} {'New Deaths':>10} {'Total Deaths':>12}")
    for r in rows:
        print(f"{r.date:<12} {r.new_cases:>10} {r.total_cases:>12} {r.new_deaths:>10} {r.total_deaths:>12}")


if __name__ == "__main__":
    main()

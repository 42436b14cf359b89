from __future__ import annotations

"""
CODA report generator
--------------------
This module generates a DOCX report from a `DashboardView`.

Design goals:
- Keep CODA usable even if report dependencies are missing (lazy imports).
- One chart per dashboard tab (trends, cumulative, weekly, distribution,
  growth rate), each skipped when its view is empty.
- Tables mirror the dashboard cards and the "Recent Data" table.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple
import os
import tempfile

from .formatting import format_number, format_rate
from .models import DashboardView
from .timerange import LABELS


# -----------------------------
# Configuration / citation types
# -----------------------------

@dataclass
class DatasetCitation:
    """Minimal dataset citation metadata for the DOCX report."""
    database_name: str = "COVID-19 dataset"
    institutional_author: str = "Our World in Data"
    website: str = "https://ourworldindata.org/coronavirus"
    source_name: Optional[str] = None


@dataclass
class ReportConfig:
    """High-level knobs to control how the report is written."""
    title: str = "COVID-19 Data Analyzer Report"
    subtitle: str = "CODA (CLI)"
    citation: DatasetCitation = field(default_factory=DatasetCitation)

    # How many weeks to show in the weekly bar chart
    max_weeks: int = 26

    # Optional: list of CLI commands used to create the current selection
    command_log: Optional[List[str]] = None


def _tick_step(n: int, ticks: int = 15) -> int:
    """Show about `ticks` date labels on the x-axis."""
    return max(1, n // ticks)


# -----------------------------
# Main entry point used by CLI
# -----------------------------

def generate_docx_report(
    view: DashboardView,
    out_path: str,
    *,
    config: Optional[ReportConfig] = None,
) -> str:
    """
    Generate a DOCX report + charts for one dashboard view.
    """
    config = config or ReportConfig()

    # Lazy imports: only required when "report" is used.
    try:
        from docx import Document
        from docx.shared import Pt, Inches
        from docx.enum.text import WD_ALIGN_PARAGRAPH
    except ImportError as e:
        raise ImportError(
            "Missing dependency: python-docx.\n"
            "Install it with: python -m pip install python-docx"
        ) from e

    try:
        import matplotlib
        matplotlib.use("Agg")
        import matplotlib.pyplot as plt
        import numpy as np
    except ImportError as e:
        raise ImportError(
            "Missing dependency: matplotlib (and numpy).\n"
            "Install with: python -m pip install matplotlib numpy"
        ) from e

    if not view.series:
        raise ValueError("No data to report on (selection is empty).")

    series = view.series
    dates = [r.date for r in series]
    range_label = LABELS.get(view.time_range, view.time_range)

    # -----------------------------
    # 1) Charts
    # -----------------------------
    tmpdir = tempfile.mkdtemp(prefix="coda_report_")
    # Each chart is: (title, file_path)
    chart_paths: List[Tuple[str, str]] = []

    def _save(filename: str) -> str:
        path = os.path.join(tmpdir, filename)
        plt.tight_layout()
        plt.savefig(path, dpi=200)
        plt.close()
        return path

    def _date_axis(labels: List[str]) -> None:
        step = _tick_step(len(labels))
        idx = list(range(0, len(labels), step))
        plt.xticks(idx, [labels[i] for i in idx], rotation=45, ha="right", fontsize=7)

    x = np.arange(len(series))

    # Daily trends
    plt.figure(figsize=(10, 4))
    plt.plot(x, [r.new_cases for r in series], label="New Cases")
    plt.plot(x, [r.new_deaths for r in series], label="New Deaths")
    _date_axis(dates)
    plt.title(f"Daily New Cases and Deaths in {view.country}")
    plt.legend()
    chart_paths.append(("Daily trends", _save("trends.png")))

    # Cumulative totals
    plt.figure(figsize=(10, 4))
    plt.fill_between(x, [r.total_cases for r in series], alpha=0.4, label="Total Cases")
    plt.fill_between(x, [r.total_deaths for r in series], alpha=0.6, label="Total Deaths")
    _date_axis(dates)
    plt.title(f"Cumulative Cases and Deaths in {view.country}")
    plt.legend()
    chart_paths.append(("Cumulative totals", _save("cumulative.png")))

    # Weekly averages (most recent weeks only)
    weeks = view.weekly[-config.max_weeks:]
    if weeks:
        wx = np.arange(len(weeks))
        plt.figure(figsize=(10, 4))
        plt.bar(wx - 0.2, [w.avg_new_cases for w in weeks], width=0.4, label="Avg New Cases")
        plt.bar(wx + 0.2, [w.avg_new_deaths for w in weeks], width=0.4, label="Avg New Deaths")
        plt.xticks(wx, [w.week for w in weeks], rotation=45, ha="right", fontsize=7)
        plt.title(f"Weekly Averages for {view.country}")
        plt.legend()
        chart_paths.append(("Weekly averages", _save("weekly.png")))

    # Distribution
    dist = [d for d in view.distribution if d.value > 0]
    if dist:
        plt.figure()
        plt.pie([d.value for d in dist], labels=[d.name for d in dist], autopct="%1.1f%%")
        plt.title(f"Case Distribution for {view.country}")
        chart_paths.append(("Case distribution", _save("distribution.png")))

    # Growth rate
    if view.growth:
        plt.figure(figsize=(10, 4))
        plt.plot(np.arange(len(view.growth)), [g.growth_rate for g in view.growth], color="#ff7300")
        _date_axis([g.date for g in view.growth])
        plt.ylabel("Daily Growth Rate (%)")
        plt.title(f"Daily Growth Rate for {view.country}")
        chart_paths.append(("Daily growth rate", _save("growth.png")))

    # -----------------------------
    # 2) Build DOCX report
    # -----------------------------
    doc = Document()

    style = doc.styles["Normal"]
    style.font.name = "Calibri"
    style.font.size = Pt(11)

    def _center_title(text: str, size: int, bold: bool = False, italic: bool = False) -> None:
        p = doc.add_paragraph()
        r = p.add_run(text)
        r.bold = bold
        r.italic = italic
        r.font.size = Pt(size)
        p.alignment = WD_ALIGN_PARAGRAPH.CENTER

    def _kv(key: str, value: str) -> None:
        p = doc.add_paragraph()
        r = p.add_run(f"{key}: ")
        r.bold = True
        p.add_run(value)

    _center_title(config.title, 22, bold=True)
    _center_title(config.subtitle, 12, italic=True)

    doc.add_paragraph("")
    _kv("Country", view.country)
    _kv("Time range", range_label)
    _kv("Days in range", str(len(series)))
    _kv("Period", f"{series[0].date} to {series[-1].date}")
    if config.citation.source_name:
        _kv("Data source used", config.citation.source_name)

    # Summary cards
    doc.add_paragraph("")
    doc.add_heading("Summary", level=1)
    s = view.summary
    t = doc.add_table(rows=1, cols=3)
    t.rows[0].cells[0].text = "Metric"
    t.rows[0].cells[1].text = "Total"
    t.rows[0].cells[2].text = "Latest day"
    for name, total, new in [
        ("Cases", s.total_cases, s.new_cases),
        ("Deaths", s.total_deaths, s.new_deaths),
    ]:
        row = t.add_row().cells
        row[0].text = name
        row[1].text = format_number(total)
        row[2].text = f"+{format_number(new)} new"
    row = t.add_row().cells
    row[0].text = "Case Fatality Rate"
    row[1].text = format_rate(s.case_fatality_rate)

    # Visualizations
    doc.add_paragraph("")
    doc.add_heading("Visualizations", level=1)
    for title, path in chart_paths:
        doc.add_paragraph(title)
        doc.add_picture(path, width=Inches(6.5))
        doc.add_paragraph("")

    # Trend analysis
    doc.add_heading("Trend analysis", level=1)
    t2 = doc.add_table(rows=1, cols=2)
    t2.rows[0].cells[0].text = "Metric"
    t2.rows[0].cells[1].text = "Value (%)"
    for m in view.trend:
        row = t2.add_row().cells
        row[0].text = m.subject
        row[1].text = f"{m.value:.2f}"

    # Recent data
    doc.add_paragraph("")
    doc.add_heading("Recent data", level=1)
    t3 = doc.add_table(rows=1, cols=5)
    h = t3.rows[0].cells
    h[0].text = "Date"
    h[1].text = "New Cases"
    h[2].text = "Total Cases"
    h[3].text = "New Deaths"
    h[4].text = "Total Deaths"
    for r in view.recent:
        row = t3.add_row().cells
        row[0].text = r.date
        row[1].text = str(r.new_cases)
        row[2].text = str(r.total_cases)
        row[3].text = str(r.new_deaths)
        row[4].text = str(r.total_deaths)

    # Dataset citation section
    doc.add_paragraph("")
    doc.add_heading("Dataset citation", level=1)
    cit = config.citation
    doc.add_paragraph(f"{cit.institutional_author}. {cit.database_name}. {cit.website}.")

    # -----------------------------
    # Reproducibility footer
    # -----------------------------
    doc.add_paragraph("")
    doc.add_heading("Reproducibility footer", level=1)

    from . import __version__ as coda_version
    from datetime import datetime as _dt
    generated_at = _dt.now().isoformat(timespec="seconds")

    doc.add_paragraph(f"CODA version: {coda_version}")
    doc.add_paragraph(f"Report generated at: {generated_at}")

    if config.command_log:
        doc.add_paragraph("Commands used (log):")
        for line in config.command_log:
            doc.add_paragraph(line, style="List Bullet")

    os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
    doc.save(out_path)
    return out_path

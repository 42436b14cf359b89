"""
CODA package
============

This package contains the COVID-19 Data Analyzer (CODA).

- The CLI entry point is in `coda/cli.py`.
- The transformation pipeline (time ranges, weekly averages, growth rate,
  distribution, summary) is in `coda/timerange.py` and `coda/aggregates.py`.
- Record normalization is in `coda/loader.py`; data sources in `coda/sources.py`.
- The dashboard controller (state, history, exports) is in `coda/engine.py`.
"""

__version__ = '0.3.1'

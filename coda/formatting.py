"""
Number formatting helpers
=========================

Small helpers shared by the pipeline, the CLI and the report:
- `fixed` rounds like a fixed-point display (half-up on the exact value),
- `format_number` abbreviates large counts (1.2M, 3.4K).
"""

from __future__ import annotations
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union
import math

Number = Union[int, float]

def fixed(value: float, places: int = 2) -> float:
    """Round `value` to `places` decimals, ties away from zero.

    Works on the exact binary value of the float, so 1.005 stays 1.0
    (it is really 1.00499...) while 0.125 becomes 0.13.
    """
    if not math.isfinite(value):
        return value
    q = Decimal(1).scaleb(-places)
    return float(Decimal(value).quantize(q, rounding=ROUND_HALF_UP))

def format_number(num: Optional[Number]) -> str:
    """Abbreviate a count for display: 1234567 -> '1.2M', 1234 -> '1.2K'."""
    if num is None:
        return "N/A"
    if isinstance(num, float) and math.isnan(num):
        return "N/A"
    if num >= 1_000_000:
        return f"{fixed(num / 1_000_000, 1):.1f}M"
    if num >= 1_000:
        return f"{fixed(num / 1_000, 1):.1f}K"
    return str(num)

def format_rate(value: Number) -> str:
    return f"{value}%"

"""
tp_platform/formatting.py
=========================
Shared rounding plus Indian number system formatting (Crores/Lakhs),
percent and year-label helpers for benchmarking disclosures.
"""
from __future__ import annotations
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional


def round_half_away(value: float, decimals: int = 2) -> float:
    """
    Round half away from zero (2.345 → 2.35, -2.345 → -2.35).

    Python's ``round`` uses banker's rounding, which gives different
    percentiles in filed reports. The value is read through its shortest
    repr so 1.005 rounds to 1.01 rather than 1.00.
    """
    if value != value or value in (float("inf"), float("-inf")):
        return value
    quantum = Decimal(1).scaleb(-decimals)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def round_int(value: float) -> int:
    return int(round_half_away(value, 0))


def format_fixed(value: float, decimals: int = 2) -> str:
    """Fixed-point string using half-away-from-zero rounding."""
    return f"{round_half_away(value, decimals):.{decimals}f}"


def format_indian_number(value: Optional[float], decimals: int = 2) -> str:
    """
    Format number in Indian notation: Cr / L / K.
    e.g. 150000 → 1.50 L,  48,50,00,000 → 48.50 Cr
    """
    if value is None:
        return "—"
    if value == 0:
        return "0"

    abs_val = abs(value)
    sign = "-" if value < 0 else ""

    if abs_val >= 1_00_00_000:  # ≥ 1 Crore
        cr = abs_val / 1_00_00_000
        if cr >= 1_000:
            return f"{sign}{cr:,.0f} Cr"
        return f"{sign}{cr:,.{decimals}f} Cr"
    elif abs_val >= 1_00_000:  # ≥ 1 Lakh
        l = abs_val / 1_00_000
        return f"{sign}{l:,.{decimals}f} L"
    elif abs_val >= 1_000:
        k = abs_val / 1_000
        return f"{sign}{k:,.{decimals}f} K"
    else:
        return f"{sign}{abs_val:,.{decimals}f}"


def format_percent(value: Optional[float], decimals: int = 2) -> str:
    if value is None:
        return "—"
    return f"{format_fixed(value, decimals)}%"


def format_number(value: Optional[float], decimals: int = 2) -> str:
    if value is None:
        return "—"
    return f"{round_half_away(value, decimals):,.{decimals}f}"


def year_label(year: str) -> str:
    """
    Convert a financial-year label to its short display form.
    e.g. "2023-24" → "FY24", "202403" → "FY24"
    """
    if len(year) == 7 and year[4] == "-" and year[:4].isdigit() and year[5:].isdigit():
        return f"FY{year[5:]}"
    if len(year) == 6 and year.isdigit():
        y = int(year[:4])
        m = int(year[4:])
        if m == 3:
            return f"FY{str(y)[2:]}"
        return f"{y}-{m:02d}"
    return year

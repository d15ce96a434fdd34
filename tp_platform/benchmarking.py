"""
tp_platform/benchmarking.py
===========================
Statistical benchmarking of comparable PLIs and the arm's length range.

  Percentile(p)   linear interpolation at index (p/100)·(n−1) on ascending values
  Q1 / Q3         Percentile(25) / Percentile(75),  IQR = Q3 − Q1
  Fences          Q1 − 1.5·IQR,  Q3 + 1.5·IQR
  Arm's length    Percentile(35) .. Percentile(65)
  Std deviation   sample (n − 1)

Every reported statistic is rounded to 2 d.p. half away from zero.
An empty comparable set yields an all-zero result, never an exception.
"""
from __future__ import annotations
import math
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Tuple

from .constants import METHODOLOGY, OUTLIER_IQR_MULTIPLIER
from .formatting import round_half_away
from .pli import calculate_weighted_pli, validate_pli_type
from .types import (
    ArmLengthRange, BenchmarkingOptions, BenchmarkingSet, BenchmarkStatistics,
    ComparableCompany, PLIValue, TestedPartyPosition,
)


# ─── Primitives ───────────────────────────────────────────────────────────────

def calculate_percentile(sorted_values: Sequence[float], percentile: float) -> float:
    """Linear-interpolated percentile of values already sorted ascending."""
    n = len(sorted_values)
    if n == 0:
        return 0.0
    if n == 1:
        return sorted_values[0]

    index = (percentile / 100) * (n - 1)
    lower = math.floor(index)
    upper = math.ceil(index)
    weight = index - lower

    if upper >= n:
        return sorted_values[-1]
    return sorted_values[lower] * (1 - weight) + sorted_values[upper] * weight


def calculate_mean(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    return sum(values) / len(values)


def calculate_std_dev(values: Sequence[float]) -> float:
    if len(values) < 2:
        return 0.0
    mean = calculate_mean(values)
    variance = sum((v - mean) ** 2 for v in values) / (len(values) - 1)
    return math.sqrt(variance)


def tag_outliers(values: Sequence[float]) -> List[bool]:
    """True where a value lies outside the IQR fences of ``values``."""
    if not values:
        return []
    ordered = sorted(values)
    q1 = calculate_percentile(ordered, 25)
    q3 = calculate_percentile(ordered, 75)
    iqr = q3 - q1
    lower = q1 - OUTLIER_IQR_MULTIPLIER * iqr
    upper = q3 + OUTLIER_IQR_MULTIPLIER * iqr
    return [v < lower or v > upper for v in values]


# ─── Statistics ───────────────────────────────────────────────────────────────

def calculate_statistics(sorted_values: Sequence[float]) -> BenchmarkStatistics:
    if not sorted_values:
        return BenchmarkStatistics()

    r = round_half_away
    q1 = calculate_percentile(sorted_values, 25)
    q3 = calculate_percentile(sorted_values, 75)
    iqr = q3 - q1

    return BenchmarkStatistics(
        count=len(sorted_values),
        mean=r(calculate_mean(sorted_values)),
        median=r(calculate_percentile(sorted_values, 50)),
        standard_deviation=r(calculate_std_dev(sorted_values)),
        min=r(sorted_values[0]),
        max=r(sorted_values[-1]),
        q1=r(q1),
        q3=r(q3),
        iqr=r(iqr),
        lower_fence=r(q1 - OUTLIER_IQR_MULTIPLIER * iqr),
        upper_fence=r(q3 + OUTLIER_IQR_MULTIPLIER * iqr),
    )


def calculate_arm_length_range(
    sorted_values: Sequence[float],
    statistics: BenchmarkStatistics,
    options: Optional[BenchmarkingOptions] = None,
) -> ArmLengthRange:
    if not sorted_values:
        return ArmLengthRange()

    opts = options or BenchmarkingOptions()
    return ArmLengthRange(
        lower_bound=round_half_away(calculate_percentile(sorted_values, opts.lower_percentile)),
        upper_bound=round_half_away(calculate_percentile(sorted_values, opts.upper_percentile)),
        full_range_lower=statistics.min,
        full_range_upper=statistics.max,
        interquartile_lower=statistics.q1,
        interquartile_upper=statistics.q3,
        median=statistics.median,
    )


def position_tested_party(
    sorted_values: Sequence[float], arm_length_range: ArmLengthRange, tested_pli: float
) -> TestedPartyPosition:
    """
    Percentile rank and range membership of the tested party's PLI.

    Outside the arm's length range the adjustment moves the PLI to the
    (unrounded) median: adjustment = median − tested PLI.
    """
    n = len(sorted_values)
    rank = sum(1 for v in sorted_values if v <= tested_pli) / n * 100
    q1 = calculate_percentile(sorted_values, 25)
    q3 = calculate_percentile(sorted_values, 75)
    median = calculate_percentile(sorted_values, 50)

    within_range = arm_length_range.lower_bound <= tested_pli <= arm_length_range.upper_bound
    within_iqr = q1 <= tested_pli <= q3

    return TestedPartyPosition(
        pli=tested_pli,
        within_arm_length_range=within_range,
        within_interquartile_range=within_iqr,
        percentile=round_half_away(rank),
        adjustment=None if within_range else median - tested_pli,
        adjusted_to_median=not within_range,
    )


def benchmark_values(
    values: Sequence[float],
    tested_party_pli: Optional[float] = None,
    options: Optional[BenchmarkingOptions] = None,
) -> Tuple[BenchmarkStatistics, ArmLengthRange, Optional[TestedPartyPosition]]:
    """Statistics, arm's length range and tested-party position for raw PLI values."""
    ordered = sorted(values)
    statistics = calculate_statistics(ordered)
    arm_range = calculate_arm_length_range(ordered, statistics, options)
    position = None
    if tested_party_pli is not None and ordered:
        position = position_tested_party(ordered, arm_range, tested_party_pli)
    return statistics, arm_range, position


# ─── Benchmarking Set ─────────────────────────────────────────────────────────

def comparable_pli_values(
    comparables: Sequence[ComparableCompany],
    pli_type: str,
    options: Optional[BenchmarkingOptions] = None,
) -> List[PLIValue]:
    """
    Weighted PLI per comparable. Companies without a strictly positive
    weighted PLI (no data for the type, or loss-making) are left out.

    The outlier flag is also written onto each included company's
    ``pli_type`` records, so callers should pass copies.
    """
    opts = options or BenchmarkingOptions()
    rows = []
    included = []
    for comp in comparables:
        value = calculate_weighted_pli(comp.plis, pli_type, opts.pli_weights)
        if value > 0:
            rows.append(PLIValue(company_id=comp.id, company_name=comp.name, value=value))
            included.append(comp)
    for row, comp, flag in zip(rows, included, tag_outliers([r.value for r in rows])):
        row.is_outlier = flag
        for p in comp.plis:
            if p.pli_type == pli_type:
                p.is_outlier = flag
    return rows


def calculate_benchmarking_set(
    comparables: Sequence[ComparableCompany],
    pli_type: str,
    tested_party_pli: Optional[float] = None,
    options: Optional[BenchmarkingOptions] = None,
) -> BenchmarkingSet:
    validate_pli_type(pli_type)
    pli_values = comparable_pli_values(comparables, pli_type, options)
    statistics, arm_range, position = benchmark_values(
        [p.value for p in pli_values], tested_party_pli, options
    )

    years = sorted({f.year for c in comparables for f in c.financials}, reverse=True) if pli_values else []

    return BenchmarkingSet(
        pli_type=pli_type,
        statistics=statistics,
        arm_length_range=arm_range,
        comparables=list(comparables),
        tested_party_pli=tested_party_pli,
        tested_party_analysis=position,
        pli_values=pli_values,
        analysis_date=datetime.now(timezone.utc).isoformat(),
        financial_years=years,
        methodology=METHODOLOGY,
    )

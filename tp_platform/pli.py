"""
tp_platform/pli.py
==================
Profit Level Indicator derivation and multi-year weighting.

  OP/OC   = Operating Profit / Operating Cost × 100
  OP/OR   = Operating Profit / Operating Revenue × 100
  OP/TC   = Operating Profit / Total Cost × 100
  GP/Sales = Gross Profit / Revenue × 100
  Berry   = Gross Profit / (Operating Cost − Gross Profit + Operating Profit)
  ROA     = Operating Profit / Total Assets × 100
  ROCE    = Operating Profit / Capital Employed × 100

An indicator is emitted only when its denominator is strictly positive.
"""
from __future__ import annotations
from typing import Iterable, List, Optional, Sequence

from .constants import PLI_YEAR_WEIGHTS, PLI_MAX_YEARS, RECOMMENDED_PLI
from .types import (
    CompanyFinancials, PLICalculated, PLI_TYPES,
    UnknownPLITypeError, UnknownFunctionalProfileError,
)


def validate_pli_type(pli_type: str) -> str:
    if pli_type not in PLI_TYPES:
        raise UnknownPLITypeError(f"Unknown PLI type: {pli_type!r}")
    return pli_type


def calculate_plis(financials: CompanyFinancials) -> List[PLICalculated]:
    f = financials
    year = f.year
    plis: List[PLICalculated] = []

    if f.operating_cost > 0:
        plis.append(PLICalculated("OP_OC", f.operating_profit / f.operating_cost * 100, year))

    if f.operating_revenue > 0:
        plis.append(PLICalculated("OP_OR", f.operating_profit / f.operating_revenue * 100, year))

    if f.total_cost > 0:
        plis.append(PLICalculated("OP_TC", f.operating_profit / f.total_cost * 100, year))

    if f.revenue > 0:
        plis.append(PLICalculated("GP_SALES", f.gross_profit / f.revenue * 100, year))

    operating_expenses = f.operating_cost - f.gross_profit + f.operating_profit
    if operating_expenses > 0 and f.gross_profit > 0:
        plis.append(PLICalculated("BERRY_RATIO", f.gross_profit / operating_expenses, year))

    if f.total_assets > 0:
        plis.append(PLICalculated("ROA", f.operating_profit / f.total_assets * 100, year))

    if f.capital_employed > 0:
        plis.append(PLICalculated("ROCE", f.operating_profit / f.capital_employed * 100, year))

    return plis


def calculate_company_plis(financials: Iterable[CompanyFinancials]) -> List[PLICalculated]:
    """PLIs for every year of a company's history, in the order given."""
    out: List[PLICalculated] = []
    for f in financials:
        out.extend(calculate_plis(f))
    return out


def find_pli(plis: Iterable[PLICalculated], pli_type: str, year: str) -> Optional[PLICalculated]:
    for p in plis:
        if p.pli_type == pli_type and p.year == year:
            return p
    return None


def calculate_weighted_pli(
    plis: Iterable[PLICalculated],
    pli_type: str,
    weights: Sequence[float] = PLI_YEAR_WEIGHTS,
) -> float:
    """
    Weighted average of the latest three years of one PLI type.

    Years are ranked by label descending ("2023-24" before "2022-23") and
    weighted positionally. A position past the end of ``weights`` reuses the
    last weight; an explicit 0.0 weight is kept as zero.
    Returns 0.0 when the company has no value for ``pli_type``.
    """
    validate_pli_type(pli_type)
    relevant = sorted(
        (p for p in plis if p.pli_type == pli_type),
        key=lambda p: p.year,
        reverse=True,
    )[:PLI_MAX_YEARS]

    if not relevant or not weights:
        return 0.0

    weighted_sum = 0.0
    total_weight = 0.0
    for i, p in enumerate(relevant):
        w = weights[i] if i < len(weights) else weights[-1]
        weighted_sum += p.value * w
        total_weight += w

    return weighted_sum / total_weight if total_weight > 0 else 0.0


def get_recommended_pli(profile: str) -> str:
    """
    Regulatory PLI for a functional profile.

    Toll manufacturers get NCP_SALES, which ``calculate_plis`` does not derive:
    a tested party benchmarked on it must carry an explicit ``pli``, and
    comparables only contribute if their PLI records include NCP_SALES values.
    """
    try:
        return RECOMMENDED_PLI[profile]
    except KeyError:
        raise UnknownFunctionalProfileError(f"Unknown functional profile: {profile!r}") from None

"""
tp_platform/adjustments.py
==========================
Working capital adjustment of comparable margins.

  Receivable days = Receivables / (Revenue / 365)
  Inventory days  = Inventory / (Operating Cost / 365)
  Payable days    = Payables / (Operating Cost / 365)
  WC days         = Receivable days + Inventory days − Payable days

  Adjustment      = (WC days − tested party WC days) / 365 × rate × 100
  Adjusted PLI    = latest-year OP/OC − Adjustment
"""
from __future__ import annotations
import logging
from typing import Iterable, List, Optional

from .constants import DAYS_IN_YEAR
from .pli import find_pli
from .types import (
    CompanyFinancials, ComparableCompany, WorkingCapitalAdjustment, WorkingCapitalDays,
)

logger = logging.getLogger(__name__)

DEFAULT_ADJUSTMENT_RATE = 0.10  # opportunity cost of capital


def calculate_working_capital_days(financials: CompanyFinancials) -> WorkingCapitalDays:
    daily_revenue = financials.revenue / DAYS_IN_YEAR
    daily_cost = financials.operating_cost / DAYS_IN_YEAR

    receivables_days = financials.receivables / daily_revenue if daily_revenue > 0 else 0.0
    inventory_days = financials.inventory / daily_cost if daily_cost > 0 else 0.0
    payables_days = financials.payables / daily_cost if daily_cost > 0 else 0.0

    return WorkingCapitalDays(
        receivables_days=receivables_days,
        inventory_days=inventory_days,
        payables_days=payables_days,
        working_capital_days=receivables_days + inventory_days - payables_days,
    )


def calculate_working_capital_adjustment(
    comparable: ComparableCompany,
    tested_party_wc_days: float,
    adjustment_rate: float = DEFAULT_ADJUSTMENT_RATE,
) -> WorkingCapitalAdjustment:
    if not comparable.financials:
        raise ValueError(f"Comparable {comparable.id} has no financial statements")

    latest = comparable.financials[0]
    wc = calculate_working_capital_days(latest)
    difference = wc.working_capital_days - tested_party_wc_days
    adjustment = (difference / DAYS_IN_YEAR) * adjustment_rate * 100

    latest_pli = find_pli(comparable.plis, "OP_OC", latest.year)
    if latest_pli is None:
        logger.warning("No %s OP/OC for %s; adjusting from 0", latest.year, comparable.name)
    original_pli = latest_pli.value if latest_pli is not None else 0.0

    return WorkingCapitalAdjustment(
        company_id=comparable.id,
        company_name=comparable.name,
        original_pli=original_pli,
        adjusted_pli=original_pli - adjustment,
        adjustment=adjustment,
        receivables_days=wc.receivables_days,
        inventory_days=wc.inventory_days,
        payables_days=wc.payables_days,
        working_capital_days=wc.working_capital_days,
        tested_party_wc_days=tested_party_wc_days,
        difference=difference,
        adjustment_rate=adjustment_rate,
    )


def adjust_for_working_capital(
    comparables: Iterable[ComparableCompany],
    tested_party_wc_days: float,
    adjustment_rate: Optional[float] = None,
) -> List[WorkingCapitalAdjustment]:
    """Batch adjustment; companies without statements are skipped with a warning."""
    rate = DEFAULT_ADJUSTMENT_RATE if adjustment_rate is None else adjustment_rate
    out: List[WorkingCapitalAdjustment] = []
    for comp in comparables:
        if not comp.financials:
            logger.warning("Skipping working capital adjustment for %s: no financials", comp.name)
            continue
        out.append(calculate_working_capital_adjustment(comp, tested_party_wc_days, rate))
    return out

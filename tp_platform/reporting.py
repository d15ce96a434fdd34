"""
tp_platform/reporting.py
========================
Tabular (pandas) views of a comparability analysis for the disclosure
annexures: accepted comparables, rejection matrix, statistics and working
capital adjustments.
"""
from __future__ import annotations
from typing import Iterable

import pandas as pd

from .constants import nic_description
from .formatting import format_indian_number, round_half_away, year_label
from .types import ComparabilityAnalysis, WorkingCapitalAdjustment


def comparables_frame(analysis: ComparabilityAnalysis) -> pd.DataFrame:
    """One row per accepted comparable with its weighted PLI and scores."""
    pli_by_id = {p.company_id: p for p in analysis.benchmarking_set.pli_values}
    pli_col = f"Weighted {analysis.tested_party.pli_type}"
    rows = []
    for comp in analysis.accepted_comparables:
        pli = pli_by_id.get(comp.id)
        latest = comp.financials[0] if comp.financials else None
        score = comp.comparability_score
        rows.append({
            "Company": comp.name,
            "CIN": comp.cin,
            "NIC": comp.nic_code,
            "Activity": comp.nic_description or nic_description(comp.nic_code),
            "Latest Year": year_label(latest.year) if latest else "—",
            "Revenue": format_indian_number(latest.revenue) if latest else "—",
            pli_col: round_half_away(pli.value) if pli else None,
            "Outlier": pli.is_outlier if pli else None,
            "FAR Similarity": score.functional if score else None,
            "Comparability": score.overall if score else None,
        })
    return pd.DataFrame(rows, columns=[
        "Company", "CIN", "NIC", "Activity", "Latest Year", "Revenue", pli_col,
        "Outlier", "FAR Similarity", "Comparability",
    ])


def rejection_matrix_frame(analysis: ComparabilityAnalysis) -> pd.DataFrame:
    rows = [
        {
            "Code": row.code,
            "Reason": row.reason,
            "Severity": row.severity,
            "Count": row.count,
            "Companies": ", ".join(row.companies),
        }
        for row in analysis.rejection_matrix
    ]
    return pd.DataFrame(rows, columns=["Code", "Reason", "Severity", "Count", "Companies"])


def statistics_frame(analysis: ComparabilityAnalysis) -> pd.DataFrame:
    s = analysis.benchmarking_set.statistics
    a = analysis.benchmarking_set.arm_length_range
    rows = [
        ("Number of comparables", s.count),
        ("Arithmetic mean", s.mean),
        ("Median", s.median),
        ("Standard deviation", s.standard_deviation),
        ("Minimum", s.min),
        ("Maximum", s.max),
        ("35th percentile", a.lower_bound),
        ("65th percentile", a.upper_bound),
        ("25th percentile (Q1)", s.q1),
        ("75th percentile (Q3)", s.q3),
        ("Interquartile range", s.iqr),
        ("Lower fence", s.lower_fence),
        ("Upper fence", s.upper_fence),
    ]
    return pd.DataFrame(rows, columns=["Statistic", "Value"])


def working_capital_frame(adjustments: Iterable[WorkingCapitalAdjustment]) -> pd.DataFrame:
    r = round_half_away
    rows = [
        {
            "Company": adj.company_name,
            "Receivable Days": r(adj.receivables_days),
            "Inventory Days": r(adj.inventory_days),
            "Payable Days": r(adj.payables_days),
            "WC Days": r(adj.working_capital_days),
            "Difference": r(adj.difference),
            "Original PLI": r(adj.original_pli),
            "Adjustment": r(adj.adjustment),
            "Adjusted PLI": r(adj.adjusted_pli),
        }
        for adj in adjustments
    ]
    return pd.DataFrame(rows, columns=[
        "Company", "Receivable Days", "Inventory Days", "Payable Days", "WC Days",
        "Difference", "Original PLI", "Adjustment", "Adjusted PLI",
    ])

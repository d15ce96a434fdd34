"""
tp_platform/scoring.py
======================
Multi-dimensional comparability scoring of a candidate against the tested party.

    overall = 0.3·functional + 0.2·financial + 0.2·industry
            + 0.1·geographic + 0.1·temporal + 0.1·qualitative
"""
from __future__ import annotations
from typing import Optional

from .constants import (
    COMPARABILITY_WEIGHTS, FINANCIAL_SIMILARITY_WEIGHTS,
    INDUSTRY_MATCH_SCORE, INDUSTRY_MISMATCH_SCORE,
)
from .far import far_differences
from .formatting import round_int, format_indian_number
from .types import (
    BenchmarkingOptions, CompanyFinancials, ComparabilityScore, FARProfile, ScoreFactor,
)


def _size_ratio(a: float, b: float) -> float:
    hi = max(a, b)
    if hi <= 0:
        return 0.0
    return min(a, b) / hi


def _employee_cost_ratio(f: CompanyFinancials) -> float:
    return f.employee_cost / f.revenue if f.revenue > 0 else 0.0


def calculate_financial_similarity(tested: CompanyFinancials, candidate: CompanyFinancials) -> int:
    """Size and cost-structure similarity, 0-100."""
    w = FINANCIAL_SIMILARITY_WEIGHTS
    rev_ratio = _size_ratio(tested.revenue, candidate.revenue)
    asset_ratio = _size_ratio(tested.total_assets, candidate.total_assets)
    emp_similarity = 1 - abs(_employee_cost_ratio(tested) - _employee_cost_ratio(candidate))
    return round_int(
        (rev_ratio * w["revenue"] + asset_ratio * w["assets"] + emp_similarity * w["employee_cost"]) * 100
    )


def score_comparability(
    tested_profile: str,
    tested_far: FARProfile,
    tested_financials: CompanyFinancials,
    candidate_profile: str,
    candidate_far: FARProfile,
    candidate_financials: Optional[CompanyFinancials],
    data_quality_score: float,
    far_similarity: int,
    options: Optional[BenchmarkingOptions] = None,
) -> ComparabilityScore:
    opts = options or BenchmarkingOptions()
    w = COMPARABILITY_WEIGHTS

    if candidate_financials is not None:
        financial = calculate_financial_similarity(tested_financials, candidate_financials)
        financial_note = (
            f"Revenue {format_indian_number(candidate_financials.revenue)} vs "
            f"{format_indian_number(tested_financials.revenue)}"
        )
    else:
        financial = 0
        financial_note = "No financial statements available"

    industry = INDUSTRY_MATCH_SCORE if candidate_profile == tested_profile else INDUSTRY_MISMATCH_SCORE

    gaps = far_differences(tested_far, candidate_far)
    functional_note = (
        "Identical FAR profile" if not gaps
        else f"Differs on {len(gaps)} FAR item(s): {', '.join(sorted(gaps))}"
    )

    factors = [
        ("functional", far_similarity, functional_note),
        ("financial", financial, financial_note),
        ("industry", industry, "Same functional profile" if industry == INDUSTRY_MATCH_SCORE else "Different functional profile"),
        ("geographic", opts.geographic_score, "India-based"),
        ("temporal", opts.temporal_score, "Same financial years"),
        ("qualitative", data_quality_score, "Data quality score"),
    ]

    breakdown = [
        ScoreFactor(factor=name, score=score, weight=w[name], weighted_score=score * w[name], notes=note)
        for name, score, note in factors
    ]
    overall = round_int(sum(f.weighted_score for f in breakdown))

    return ComparabilityScore(
        overall=overall,
        functional=far_similarity,
        financial=financial,
        industry=industry,
        geographic=opts.geographic_score,
        temporal=opts.temporal_score,
        qualitative=data_quality_score,
        breakdown=breakdown,
    )

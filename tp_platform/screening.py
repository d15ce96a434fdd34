"""
tp_platform/screening.py
========================
Candidate search, quantitative screening filters and rejection rules.

The engine reads candidates through a ``CompanyRepository``. The in-memory
implementation hands out deep copies so an analysis pass can tag
candidates without touching the shared records.
"""
from __future__ import annotations
import copy
import logging
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Protocol

from .constants import REJECTION_RULES
from .formatting import format_number
from .types import (
    BenchmarkingOptions, ComparableCompany, ComparableSearchCriteria, FilterEffect,
    FilteringAnalysis, RejectionMatrixRow, RejectionReason, SearchResult,
)

logger = logging.getLogger(__name__)


# ─── Repository ───────────────────────────────────────────────────────────────

class CompanyRepository(Protocol):
    def __len__(self) -> int: ...

    def all_companies(self) -> List[ComparableCompany]: ...

    def get_company(self, cin: str) -> Optional[ComparableCompany]: ...


class InMemoryCompanyRepository:
    """Read-only repository over a fixed list of company records."""

    def __init__(self, companies: Iterable[ComparableCompany]):
        self._companies = tuple(companies)

    def __len__(self) -> int:
        return len(self._companies)

    def all_companies(self) -> List[ComparableCompany]:
        return [copy.deepcopy(c) for c in self._companies]

    def get_company(self, cin: str) -> Optional[ComparableCompany]:
        for c in self._companies:
            if c.cin == cin:
                return copy.deepcopy(c)
        return None


# ─── Search Filters ───────────────────────────────────────────────────────────

def latest_revenue(company: ComparableCompany) -> float:
    return company.financials[0].revenue if company.financials else 0.0


def _nic_match(company: ComparableCompany, criteria: ComparableSearchCriteria) -> bool:
    if not criteria.nic_codes:
        return True
    return any(company.nic_code.startswith(code) for code in criteria.nic_codes)


def _revenue_match(company: ComparableCompany, criteria: ComparableSearchCriteria) -> bool:
    rev = latest_revenue(company)
    if criteria.revenue_min is not None and rev < criteria.revenue_min:
        return False
    if criteria.revenue_max is not None and rev > criteria.revenue_max:
        return False
    return True


def _rpt_match(company: ComparableCompany, criteria: ComparableSearchCriteria) -> bool:
    if criteria.exclude_related_party_above is None:
        return True
    return company.related_party_percent <= criteria.exclude_related_party_above


def _loss_match(company: ComparableCompany, criteria: ComparableSearchCriteria) -> bool:
    return not (criteria.exclude_persistent_losses and company.has_persistent_losses)


def matches_criteria(company: ComparableCompany, criteria: ComparableSearchCriteria) -> bool:
    if not _nic_match(company, criteria):
        return False
    if criteria.functional_profile and company.functional_profile != criteria.functional_profile:
        return False
    if not _revenue_match(company, criteria):
        return False
    if not _rpt_match(company, criteria):
        return False
    if not _loss_match(company, criteria):
        return False
    if criteria.min_years_data is not None and company.years_of_data < criteria.min_years_data:
        return False
    if criteria.status and company.status not in criteria.status:
        return False
    if criteria.exclude_companies and company.id in criteria.exclude_companies:
        return False
    return True


def search_companies(
    repository: CompanyRepository, criteria: ComparableSearchCriteria
) -> SearchResult:
    companies = [c for c in repository.all_companies() if matches_criteria(c, criteria)]
    logger.debug("Search matched %d companies", len(companies))
    return SearchResult(
        companies=companies,
        total=len(companies),
        criteria=criteria,
        search_date=datetime.now(timezone.utc).isoformat(),
    )


def filtering_analysis(
    repository: CompanyRepository, criteria: ComparableSearchCriteria
) -> FilteringAnalysis:
    """
    Independent survivor count for each headline filter, plus the combined result.
    Each filter is applied to the full database on its own, so the counts
    show how restrictive that filter is in isolation.
    """
    companies = repository.all_companies()
    total = len(companies)

    after_nic = sum(1 for c in companies if _nic_match(c, criteria))
    after_revenue = sum(1 for c in companies if _revenue_match(c, criteria))
    after_rpt = sum(1 for c in companies if _rpt_match(c, criteria))
    after_loss = sum(1 for c in companies if _loss_match(c, criteria))
    final = sum(1 for c in companies if matches_criteria(c, criteria))

    def effect(name: str, survivors: int) -> FilterEffect:
        removed = total - survivors
        pct = removed / total * 100 if total else 0.0
        return FilterEffect(filter=name, companies_removed=removed, percentage=pct)

    return FilteringAnalysis(
        total_in_database=total,
        after_nic_filter=after_nic,
        after_revenue_filter=after_revenue,
        after_rpt_filter=after_rpt,
        after_loss_filter=after_loss,
        final_count=final,
        filter_effectiveness=[
            effect("NIC Code", after_nic),
            effect("Revenue Range", after_revenue),
            effect("Related Party", after_rpt),
            effect("Persistent Losses", after_loss),
        ],
    )


# ─── Rejection Rules ──────────────────────────────────────────────────────────

def make_rejection(code: str, details: str) -> RejectionReason:
    reason, severity, basis = REJECTION_RULES[code]
    return RejectionReason(code=code, reason=reason, severity=severity, details=details, regulatory_basis=basis)


def evaluate_rejections(
    company: ComparableCompany,
    far_similarity: Optional[int],
    options: Optional[BenchmarkingOptions] = None,
) -> List[RejectionReason]:
    """
    Hard and soft rejection reasons for one candidate.

    HARD: related-party share above threshold, persistent losses.
    SOFT: data quality below threshold, FAR similarity below threshold.
    ``far_similarity`` of None (FAR could not be built) skips the FAR test.
    """
    opts = options or BenchmarkingOptions()
    reasons: List[RejectionReason] = []

    if company.related_party_percent > opts.rpt_threshold:
        reasons.append(make_rejection(
            "RPT_HIGH",
            f"Related party transactions at {format_number(company.related_party_percent)}% "
            f"exceed {format_number(opts.rpt_threshold)}% threshold",
        ))

    if company.has_persistent_losses:
        reasons.append(make_rejection("PERSISTENT_LOSS", f"Company has losses in {company.loss_years} years"))

    if company.data_quality_score < opts.data_quality_threshold:
        reasons.append(make_rejection(
            "LOW_DATA_QUALITY",
            f"Data quality score {format_number(company.data_quality_score)}% "
            f"below {format_number(opts.data_quality_threshold)}% threshold",
        ))

    if far_similarity is not None and far_similarity < opts.far_similarity_threshold:
        reasons.append(make_rejection(
            "FAR_MISMATCH",
            f"FAR similarity score {far_similarity}% below {format_number(opts.far_similarity_threshold)}% threshold",
        ))

    return reasons


def has_hard_rejection(reasons: Iterable[RejectionReason]) -> bool:
    return any(r.severity == "HARD" for r in reasons)


def is_accepted(
    reasons: Iterable[RejectionReason], overall_score: float, options: Optional[BenchmarkingOptions] = None
) -> bool:
    opts = options or BenchmarkingOptions()
    return not has_hard_rejection(reasons) and overall_score >= opts.acceptance_threshold


def build_rejection_matrix(companies: Iterable[ComparableCompany]) -> List[RejectionMatrixRow]:
    """Count and names per reason code; a company appears under every reason it carries."""
    rows: Dict[str, RejectionMatrixRow] = {}
    for company in companies:
        for r in company.rejection_reasons:
            row = rows.get(r.code)
            if row is None:
                row = rows[r.code] = RejectionMatrixRow(code=r.code, reason=r.reason, severity=r.severity)
            row.count += 1
            row.companies.append(company.name)
    return list(rows.values())

"""
tests/test_screening.py
=======================
Unit tests for the company repository, search filters, filtering analysis
and rejection rules.

Run:  pytest tests/ -v
"""

import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from tp_platform.screening import (
    InMemoryCompanyRepository,
    build_rejection_matrix,
    evaluate_rejections,
    filtering_analysis,
    is_accepted,
    make_rejection,
    matches_criteria,
    search_companies,
)
from tp_platform.types import BenchmarkingOptions, ComparableSearchCriteria

from conftest import make_company


# ─── Repository ───────────────────────────────────────────────────────────────

class TestRepository:
    def test_len(self, repository, comparable_pool):
        assert len(repository) == len(comparable_pool)

    def test_returns_copies(self, repository):
        first = repository.all_companies()
        first[0].is_accepted = True
        first[0].rejection_reasons.append(make_rejection("RPT_HIGH", "x"))
        again = repository.all_companies()
        assert again[0].is_accepted is False
        assert again[0].rejection_reasons == []

    def test_get_company_by_cin(self, repository):
        company = repository.get_company("U72200KA2001PTCC003")
        assert company.name == "Gamma Systems Ltd"

    def test_get_company_missing(self, repository):
        assert repository.get_company("NOPE") is None


# ─── Search ───────────────────────────────────────────────────────────────────

class TestSearch:
    def _names(self, repository, **criteria):
        result = search_companies(repository, ComparableSearchCriteria(**criteria))
        return {c.name for c in result.companies}

    def test_empty_criteria_returns_all(self, repository):
        result = search_companies(repository, ComparableSearchCriteria())
        assert result.total == len(repository)

    def test_nic_prefix(self, repository):
        names = self._names(repository, nic_codes=["46"])
        assert names == {"Wholesale Traders Ltd"}

    def test_nic_two_digit_matches_four_digit(self, repository):
        assert len(self._names(repository, nic_codes=["62"])) == 8

    def test_functional_profile(self, repository):
        names = self._names(repository, functional_profile="MANUFACTURER_FULL_FLEDGED")
        assert names == {"Heavy Engineering Ltd"}

    def test_revenue_range_inclusive(self):
        small = make_company("S1", "Small Ltd", cost=1_000.0)
        big = make_company("B1", "Big Ltd", cost=1_000_000.0)
        repo = InMemoryCompanyRepository([small, big])
        rev = small.financials[0].revenue
        result = search_companies(repo, ComparableSearchCriteria(revenue_min=rev, revenue_max=rev))
        assert [c.name for c in result.companies] == ["Small Ltd"]

    def test_rpt_ceiling(self, repository):
        names = self._names(repository, exclude_related_party_above=25.0)
        assert "Captive Tech Services Ltd" not in names
        assert len(names) == 8

    def test_exclude_persistent_losses(self, repository):
        assert "Lossmaker Software Ltd" not in self._names(repository, exclude_persistent_losses=True)

    def test_min_years(self, repository):
        assert self._names(repository, min_years_data=4) == set()

    def test_status(self):
        repo = InMemoryCompanyRepository([
            make_company("A1", "Active Ltd"),
            make_company("L1", "Liquidating Ltd", status="UNDER_LIQUIDATION"),
        ])
        result = search_companies(repo, ComparableSearchCriteria(status=["ACTIVE"]))
        assert [c.name for c in result.companies] == ["Active Ltd"]

    def test_exclude_companies(self, repository):
        names = self._names(repository, exclude_companies=["C001", "C002"])
        assert "Alpha Infotech Pvt Ltd" not in names
        assert "Beta Softech Pvt Ltd" not in names

    def test_no_financials_has_zero_revenue(self):
        company = make_company("E1", "Empty Ltd")
        company.financials = []
        assert not matches_criteria(company, ComparableSearchCriteria(revenue_min=1.0))
        assert matches_criteria(company, ComparableSearchCriteria())


class TestFilteringAnalysis:
    def test_counts(self, repository):
        criteria = ComparableSearchCriteria(
            nic_codes=["62"], exclude_related_party_above=25.0, exclude_persistent_losses=True,
        )
        fa = filtering_analysis(repository, criteria)
        assert fa.total_in_database == 9
        assert fa.after_nic_filter == 8
        assert fa.after_revenue_filter == 9
        assert fa.after_rpt_filter == 8
        assert fa.after_loss_filter == 8
        assert fa.final_count == 6

    def test_effectiveness(self, repository):
        fa = filtering_analysis(repository, ComparableSearchCriteria(nic_codes=["62"]))
        nic = fa.filter_effectiveness[0]
        assert nic.filter == "NIC Code"
        assert nic.companies_removed == 1
        assert nic.percentage == pytest.approx(100 / 9)

    def test_empty_database(self):
        fa = filtering_analysis(InMemoryCompanyRepository([]), ComparableSearchCriteria())
        assert fa.total_in_database == 0
        assert all(e.percentage == 0.0 for e in fa.filter_effectiveness)


# ─── Rejection rules ──────────────────────────────────────────────────────────

class TestRejections:
    def _codes(self, company, far=100):
        return [r.code for r in evaluate_rejections(company, far)]

    def test_clean_company(self):
        assert self._codes(make_company("A", "Clean Ltd")) == []

    def test_rpt_above_threshold_is_hard(self):
        reasons = evaluate_rejections(make_company("A", "Captive Ltd", rpt=30.0), 100)
        assert [r.code for r in reasons] == ["RPT_HIGH"]
        assert reasons[0].severity == "HARD"
        assert reasons[0].regulatory_basis

    def test_rpt_at_threshold_passes(self):
        assert self._codes(make_company("A", "Edge Ltd", rpt=25.0)) == []

    def test_persistent_loss(self):
        assert self._codes(make_company("A", "Loss Ltd", losses=True)) == ["PERSISTENT_LOSS"]

    def test_low_quality_is_soft(self):
        reasons = evaluate_rejections(make_company("A", "Sparse Ltd", quality=60.0), 100)
        assert [(r.code, r.severity) for r in reasons] == [("LOW_DATA_QUALITY", "SOFT")]

    def test_far_mismatch(self):
        assert self._codes(make_company("A", "Other Ltd"), far=59) == ["FAR_MISMATCH"]

    def test_far_at_threshold_passes(self):
        assert self._codes(make_company("A", "Other Ltd"), far=60) == []

    def test_far_unknown_skipped(self):
        assert self._codes(make_company("A", "Other Ltd"), far=None) == []

    def test_custom_thresholds(self):
        opts = BenchmarkingOptions(rpt_threshold=10.0)
        reasons = evaluate_rejections(make_company("A", "Mid Ltd", rpt=15.0), 100, opts)
        assert [r.code for r in reasons] == ["RPT_HIGH"]

    def test_hard_rejection_never_accepted(self):
        reasons = [make_rejection("RPT_HIGH", "30%")]
        assert not is_accepted(reasons, 100)

    def test_soft_rejection_accepted_on_score(self):
        reasons = [make_rejection("LOW_DATA_QUALITY", "60%")]
        assert is_accepted(reasons, 65)
        assert not is_accepted(reasons, 64)


class TestRejectionMatrix:
    def test_company_counted_under_each_reason(self):
        a = make_company("A", "Alpha Ltd")
        a.rejection_reasons = [make_rejection("RPT_HIGH", ""), make_rejection("FAR_MISMATCH", "")]
        b = make_company("B", "Beta Ltd")
        b.rejection_reasons = [make_rejection("FAR_MISMATCH", "")]
        rows = build_rejection_matrix([a, b])
        assert [(r.code, r.count, r.companies) for r in rows] == [
            ("RPT_HIGH", 1, ["Alpha Ltd"]),
            ("FAR_MISMATCH", 2, ["Alpha Ltd", "Beta Ltd"]),
        ]

    def test_no_rejections(self):
        assert build_rejection_matrix([make_company("A", "Alpha Ltd")]) == []

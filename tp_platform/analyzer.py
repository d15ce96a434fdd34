"""
tp_platform/analyzer.py
=======================
Comparability analysis orchestrator.

Pipeline for one tested party:
  1. search the injected repository with the screening criteria
  2. build the tested party's FAR profile
  3. per candidate: FAR similarity, comparability score, rejection rules
  4. split accepted / rejected, build the rejection matrix
  5. benchmark the accepted set's weighted PLIs against the tested PLI
  6. conclude: within the arm's length range, or adjust to the median

``ComparabilityEngine`` is a caller-owned service object. It holds only the
repository and options, so one engine can serve concurrent analyses.
"""
from __future__ import annotations
import logging
from typing import Iterable, List, Optional

from .adjustments import adjust_for_working_capital
from .benchmarking import calculate_benchmarking_set
from .constants import PLI_DESCRIPTIONS, functional_profiles
from .far import create_far_profile, calculate_far_similarity
from .formatting import format_fixed
from .pli import calculate_company_plis, calculate_plis, get_recommended_pli, validate_pli_type
from .scoring import score_comparability
from .screening import (
    CompanyRepository, build_rejection_matrix, evaluate_rejections, filtering_analysis,
    is_accepted, make_rejection, search_companies,
)
from .types import (
    BenchmarkingError, BenchmarkingOptions, BenchmarkingSet, ComparabilityAnalysis,
    ComparabilityConclusion, ComparableCompany, ComparableSearchCriteria, FARProfile,
    FilteringAnalysis, SearchResult, TestedParty, TestedPartySnapshot, WorkingCapitalAdjustment,
)

logger = logging.getLogger(__name__)


# ─── Candidate Assessment ─────────────────────────────────────────────────────

def assess_candidate(
    candidate: ComparableCompany,
    tested_party: TestedParty,
    tested_far: FARProfile,
    options: Optional[BenchmarkingOptions] = None,
) -> ComparableCompany:
    """
    Score and tag one candidate in place. Callers pass a copy; repository
    records are never handed out directly.

    A candidate with no financial statements is still scored (financial
    similarity 0), carries LOW_DATA_QUALITY, and is never accepted.
    """
    opts = options or BenchmarkingOptions()
    latest = candidate.financials[0] if candidate.financials else None

    if not candidate.plis and candidate.financials:
        candidate.plis = calculate_company_plis(candidate.financials)

    candidate_far = create_far_profile(candidate.functional_profile, latest)
    similarity = calculate_far_similarity(tested_far, candidate_far)

    reasons = evaluate_rejections(candidate, similarity, opts)
    if latest is None:
        logger.warning("Candidate %s has no financial statements", candidate.name)
        if not any(r.code == "LOW_DATA_QUALITY" for r in reasons):
            reasons.append(make_rejection("LOW_DATA_QUALITY", "No financial statements available"))

    score = score_comparability(
        tested_profile=tested_party.functional_profile,
        tested_far=tested_far,
        tested_financials=tested_party.financials,
        candidate_profile=candidate.functional_profile,
        candidate_far=candidate_far,
        candidate_financials=latest,
        data_quality_score=candidate.data_quality_score,
        far_similarity=similarity,
        options=opts,
    )

    candidate.far_profile = candidate_far
    candidate.comparability_score = score
    candidate.rejection_reasons = reasons
    candidate.is_accepted = latest is not None and is_accepted(reasons, score.overall, opts)

    logger.debug(
        "%s: FAR %d, overall %d, reasons=%s, accepted=%s",
        candidate.name, similarity, score.overall, [r.code for r in reasons], candidate.is_accepted,
    )
    return candidate


def resolve_tested_pli(tested_party: TestedParty, pli_type: str) -> float:
    """The tested party's stated PLI, or the one derived from its financials."""
    if tested_party.pli is not None:
        return tested_party.pli
    for p in calculate_plis(tested_party.financials):
        if p.pli_type == pli_type:
            return p.value
    raise BenchmarkingError(
        f"Tested party {tested_party.name!r} has no {pli_type} and none can be derived from its financials"
    )


# ─── Conclusion ───────────────────────────────────────────────────────────────

def build_conclusion(tested_pli: float, benchmarking_set: BenchmarkingSet) -> ComparabilityConclusion:
    position = benchmarking_set.tested_party_analysis
    arm = benchmarking_set.arm_length_range
    is_arm_length = position.within_arm_length_range if position is not None else False
    adjustment = position.adjustment if position is not None else None

    if is_arm_length:
        narrative = (
            f"The tested party's PLI of {format_fixed(tested_pli)}% falls within the arm's length range "
            f"of {format_fixed(arm.lower_bound)}% to {format_fixed(arm.upper_bound)}%. "
            f"No adjustment is required."
        )
    else:
        narrative = (
            f"The tested party's PLI of {format_fixed(tested_pli)}% falls outside the arm's length range. "
            f"An adjustment of {format_fixed(adjustment or 0.0)}% to the median of "
            f"{format_fixed(arm.median)}% may be required."
        )

    return ComparabilityConclusion(
        is_arm_length=is_arm_length,
        tested_party_pli=tested_pli,
        arm_length_range_lower=arm.lower_bound,
        arm_length_range_upper=arm.upper_bound,
        median=arm.median,
        adjustment=adjustment,
        narrative=narrative,
    )


def perform_comparability_analysis(
    repository: CompanyRepository,
    tested_party: TestedParty,
    search_criteria: ComparableSearchCriteria,
    pli_type: str = "OP_OC",
    options: Optional[BenchmarkingOptions] = None,
) -> ComparabilityAnalysis:
    opts = options or BenchmarkingOptions()
    validate_pli_type(pli_type)
    tested_pli = resolve_tested_pli(tested_party, pli_type)

    search = search_companies(repository, search_criteria)
    tested_far = create_far_profile(tested_party.functional_profile, tested_party.financials)

    accepted: List[ComparableCompany] = []
    rejected: List[ComparableCompany] = []
    for candidate in search.companies:
        assess_candidate(candidate, tested_party, tested_far, opts)
        (accepted if candidate.is_accepted else rejected).append(candidate)

    rejection_matrix = build_rejection_matrix(search.companies)
    benchmarking_set = calculate_benchmarking_set(accepted, pli_type, tested_pli, opts)
    conclusion = build_conclusion(tested_pli, benchmarking_set)

    logger.info(
        "Comparability analysis for %s: %d screened, %d accepted, arm's length=%s",
        tested_party.name, search.total, len(accepted), conclusion.is_arm_length,
    )

    return ComparabilityAnalysis(
        tested_party=TestedPartySnapshot(
            name=tested_party.name,
            functional_profile=tested_party.functional_profile,
            far_profile=tested_far,
            pli=tested_pli,
            pli_type=pli_type,
            financials=tested_party.financials,
        ),
        search_criteria=search_criteria,
        initial_pool=len(repository),
        after_screening=len(search.companies),
        final_set=len(accepted),
        rejection_matrix=tuple(rejection_matrix),
        accepted_comparables=tuple(accepted),
        rejected_comparables=tuple(rejected),
        benchmarking_set=benchmarking_set,
        conclusion=conclusion,
    )


# ─── Engine ───────────────────────────────────────────────────────────────────

class ComparabilityEngine:
    """Comparable search, benchmarking and adjustment over one repository."""

    def __init__(self, repository: CompanyRepository, options: Optional[BenchmarkingOptions] = None):
        self.repository = repository
        self.options = options or BenchmarkingOptions()

    def search(self, criteria: ComparableSearchCriteria) -> SearchResult:
        return search_companies(self.repository, criteria)

    def get_company(self, cin: str) -> Optional[ComparableCompany]:
        return self.repository.get_company(cin)

    def analyze(
        self,
        tested_party: TestedParty,
        search_criteria: ComparableSearchCriteria,
        pli_type: str = "OP_OC",
    ) -> ComparabilityAnalysis:
        return perform_comparability_analysis(
            self.repository, tested_party, search_criteria, pli_type, self.options
        )

    def adjust_for_working_capital(
        self,
        comparables: Iterable[ComparableCompany],
        tested_party_wc_days: float,
        adjustment_rate: Optional[float] = None,
    ) -> List[WorkingCapitalAdjustment]:
        rate = self.options.working_capital_rate if adjustment_rate is None else adjustment_rate
        return adjust_for_working_capital(comparables, tested_party_wc_days, rate)

    def filtering_analysis(self, criteria: ComparableSearchCriteria) -> FilteringAnalysis:
        return filtering_analysis(self.repository, criteria)

    @staticmethod
    def recommended_pli(profile: str) -> str:
        return get_recommended_pli(profile)

    @staticmethod
    def functional_profiles() -> List[str]:
        return functional_profiles()

    @staticmethod
    def pli_descriptions():
        return PLI_DESCRIPTIONS

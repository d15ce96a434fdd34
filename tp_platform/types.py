"""
tp_platform/types.py
====================
Dataclasses for the comparable benchmarking engine.
All transfer-pricing data structures used across the platform.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Literal, Tuple

# ─── Enumerations ─────────────────────────────────────────────────────────────

FunctionalProfile = Literal[
    "MANUFACTURER_FULL_FLEDGED",
    "MANUFACTURER_CONTRACT",
    "MANUFACTURER_TOLL",
    "DISTRIBUTOR_FULL_FLEDGED",
    "DISTRIBUTOR_LIMITED_RISK",
    "DISTRIBUTOR_COMMISSIONAIRE",
    "SERVICE_PROVIDER_FULL",
    "SERVICE_PROVIDER_CONTRACT",
    "IT_SERVICES",
    "ITES_BPO",
    "KPO",
    "R_AND_D_FULL",
    "R_AND_D_CONTRACT",
    "HOLDING_COMPANY",
    "FINANCING",
]

FUNCTIONAL_PROFILES: Tuple[str, ...] = (
    "IT_SERVICES", "ITES_BPO", "KPO",
    "MANUFACTURER_FULL_FLEDGED", "MANUFACTURER_CONTRACT", "MANUFACTURER_TOLL",
    "DISTRIBUTOR_FULL_FLEDGED", "DISTRIBUTOR_LIMITED_RISK", "DISTRIBUTOR_COMMISSIONAIRE",
    "SERVICE_PROVIDER_FULL", "SERVICE_PROVIDER_CONTRACT",
    "R_AND_D_FULL", "R_AND_D_CONTRACT",
    "HOLDING_COMPANY", "FINANCING",
)

PLIType = Literal[
    "OP_OC",        # Operating Profit / Operating Cost
    "OP_OR",        # Operating Profit / Operating Revenue
    "OP_TC",        # Operating Profit / Total Cost
    "GP_SALES",     # Gross Profit / Sales
    "NCP_SALES",    # Net Cost Plus
    "BERRY_RATIO",  # Gross Profit / Operating Expenses
    "ROA",          # Return on Assets
    "ROCE",         # Return on Capital Employed
]

PLI_TYPES: Tuple[str, ...] = (
    "OP_OC", "OP_OR", "OP_TC", "GP_SALES", "NCP_SALES", "BERRY_RATIO", "ROA", "ROCE",
)

RiskLevel = Literal["LOW", "MEDIUM", "HIGH"]
Severity = Literal["HARD", "SOFT"]
CompanyStatus = Literal["ACTIVE", "INACTIVE", "UNDER_LIQUIDATION"]
DatabaseSource = Literal["INTERNAL", "MCA", "MANUAL"]


# ─── Errors ───────────────────────────────────────────────────────────────────

class BenchmarkingError(ValueError):
    """Base class for contract violations raised by the engine."""


class UnknownPLITypeError(BenchmarkingError):
    pass


class UnknownFunctionalProfileError(BenchmarkingError, KeyError):
    pass


# ─── Configuration ────────────────────────────────────────────────────────────

@dataclass
class BenchmarkingOptions:
    pli_weights: Tuple[float, ...] = (0.5, 0.35, 0.15)
    rpt_threshold: float = 25.0
    data_quality_threshold: float = 70.0
    far_similarity_threshold: float = 60.0
    acceptance_threshold: float = 65.0
    lower_percentile: float = 35.0
    upper_percentile: float = 65.0
    working_capital_rate: float = 0.10
    geographic_score: float = 85.0
    temporal_score: float = 95.0


# ─── Financial Data ───────────────────────────────────────────────────────────

@dataclass(frozen=True)
class CompanyFinancials:
    year: str
    revenue: float
    operating_revenue: float
    gross_profit: float
    operating_profit: float
    net_profit: float
    operating_cost: float
    total_cost: float
    total_assets: float
    fixed_assets: float = 0.0
    current_assets: float = 0.0
    current_liabilities: float = 0.0
    inventory: float = 0.0
    receivables: float = 0.0
    payables: float = 0.0
    capital_employed: float = 0.0
    employee_cost: float = 0.0
    depreciation: float = 0.0
    rnd_expense: Optional[float] = None
    related_party_transactions: Optional[float] = None
    related_party_percent: Optional[float] = None


@dataclass
class PLICalculated:
    pli_type: PLIType
    value: float
    year: str
    is_outlier: Optional[bool] = None  # set when the company is benchmarked on this type


# ─── FAR Analysis ─────────────────────────────────────────────────────────────

@dataclass
class FARProfile:
    """Functions performed, assets employed and risks assumed by one party.

    Each group maps an item name to a RiskLevel. Item names are fixed by
    ``constants.FAR_FUNCTIONS``, ``constants.FAR_ASSETS`` and ``constants.FAR_RISKS``.
    """
    functions: Dict[str, RiskLevel]
    assets: Dict[str, RiskLevel]
    risks: Dict[str, RiskLevel]
    overall_profile: FunctionalProfile
    score: int  # 0-100


# ─── Comparability ────────────────────────────────────────────────────────────

@dataclass
class ScoreFactor:
    factor: str
    score: float
    weight: float
    weighted_score: float
    notes: str = ""


@dataclass
class ComparabilityScore:
    overall: int
    functional: float       # FAR similarity
    financial: float        # size/scale similarity
    industry: float
    geographic: float
    temporal: float
    qualitative: float      # data quality
    breakdown: List[ScoreFactor] = field(default_factory=list)


@dataclass
class RejectionReason:
    code: str
    reason: str
    severity: Severity
    details: str
    regulatory_basis: Optional[str] = None


@dataclass
class RejectionMatrixRow:
    code: str
    reason: str
    severity: Severity
    count: int = 0
    companies: List[str] = field(default_factory=list)


@dataclass
class ComparableCompany:
    id: str
    cin: str
    name: str
    nic_code: str
    functional_profile: FunctionalProfile
    financials: List[CompanyFinancials] = field(default_factory=list)  # most recent first
    plis: List[PLICalculated] = field(default_factory=list)
    nic_description: str = ""
    industry: str = ""
    sub_industry: str = ""
    status: CompanyStatus = "ACTIVE"
    source: DatabaseSource = "INTERNAL"

    # Quality indicators
    data_quality_score: float = 100.0
    years_of_data: int = 0
    has_related_party_transactions: bool = False
    related_party_percent: float = 0.0
    has_persistent_losses: bool = False
    loss_years: int = 0
    has_extraordinary_items: bool = False

    # Comparability assessment (filled by the analysis pass, on a copy)
    far_profile: Optional[FARProfile] = None
    comparability_score: Optional[ComparabilityScore] = None
    is_accepted: bool = False
    rejection_reasons: List[RejectionReason] = field(default_factory=list)


@dataclass
class ComparableSearchCriteria:
    nic_codes: List[str] = field(default_factory=list)
    functional_profile: Optional[FunctionalProfile] = None
    revenue_min: Optional[float] = None
    revenue_max: Optional[float] = None
    exclude_related_party_above: Optional[float] = None
    exclude_persistent_losses: bool = False
    min_years_data: Optional[int] = None
    status: List[CompanyStatus] = field(default_factory=list)
    exclude_companies: List[str] = field(default_factory=list)


@dataclass
class SearchResult:
    companies: List[ComparableCompany]
    total: int
    criteria: ComparableSearchCriteria
    search_date: str


@dataclass
class FilterEffect:
    filter: str
    companies_removed: int
    percentage: float


@dataclass
class FilteringAnalysis:
    total_in_database: int
    after_nic_filter: int
    after_revenue_filter: int
    after_rpt_filter: int
    after_loss_filter: int
    final_count: int
    filter_effectiveness: List[FilterEffect] = field(default_factory=list)


# ─── Benchmarking ─────────────────────────────────────────────────────────────

@dataclass
class BenchmarkStatistics:
    count: int = 0
    mean: float = 0.0
    median: float = 0.0
    standard_deviation: float = 0.0
    min: float = 0.0
    max: float = 0.0
    q1: float = 0.0           # 25th percentile
    q3: float = 0.0           # 75th percentile
    iqr: float = 0.0
    lower_fence: float = 0.0  # Q1 - 1.5*IQR
    upper_fence: float = 0.0  # Q3 + 1.5*IQR


@dataclass
class ArmLengthRange:
    lower_bound: float = 0.0  # 35th percentile
    upper_bound: float = 0.0  # 65th percentile
    full_range_lower: float = 0.0
    full_range_upper: float = 0.0
    interquartile_lower: float = 0.0
    interquartile_upper: float = 0.0
    median: float = 0.0


@dataclass
class TestedPartyPosition:
    __test__ = False  # not a pytest class

    pli: float
    within_arm_length_range: bool
    within_interquartile_range: bool
    percentile: float
    adjustment: Optional[float] = None
    adjusted_to_median: bool = False


@dataclass
class PLIValue:
    company_id: str
    company_name: str
    value: float
    is_outlier: bool = False


@dataclass
class BenchmarkingSet:
    pli_type: PLIType
    statistics: BenchmarkStatistics
    arm_length_range: ArmLengthRange
    comparables: List[ComparableCompany] = field(default_factory=list)
    tested_party_pli: Optional[float] = None
    tested_party_analysis: Optional[TestedPartyPosition] = None
    pli_values: List[PLIValue] = field(default_factory=list)
    analysis_date: str = ""
    financial_years: List[str] = field(default_factory=list)
    methodology: str = ""


@dataclass
class WorkingCapitalDays:
    receivables_days: float
    inventory_days: float
    payables_days: float
    working_capital_days: float


@dataclass
class WorkingCapitalAdjustment:
    company_id: str
    company_name: str
    original_pli: float
    adjusted_pli: float
    adjustment: float
    receivables_days: float
    inventory_days: float
    payables_days: float
    working_capital_days: float
    tested_party_wc_days: float
    difference: float
    adjustment_rate: float


# ─── Analysis Output ──────────────────────────────────────────────────────────

@dataclass
class TestedParty:
    __test__ = False

    name: str
    functional_profile: FunctionalProfile
    financials: CompanyFinancials
    pli: Optional[float] = None  # derived from financials when omitted


@dataclass(frozen=True)
class TestedPartySnapshot:
    __test__ = False

    name: str
    functional_profile: FunctionalProfile
    far_profile: FARProfile
    pli: float
    pli_type: PLIType
    financials: CompanyFinancials


@dataclass(frozen=True)
class ComparabilityConclusion:
    is_arm_length: bool
    tested_party_pli: float
    arm_length_range_lower: float
    arm_length_range_upper: float
    median: float
    narrative: str
    adjustment: Optional[float] = None


@dataclass(frozen=True)
class ComparabilityAnalysis:
    tested_party: TestedPartySnapshot
    search_criteria: ComparableSearchCriteria
    initial_pool: int
    after_screening: int
    final_set: int
    rejection_matrix: Tuple[RejectionMatrixRow, ...]
    accepted_comparables: Tuple[ComparableCompany, ...]
    rejected_comparables: Tuple[ComparableCompany, ...]
    benchmarking_set: BenchmarkingSet
    conclusion: ComparabilityConclusion

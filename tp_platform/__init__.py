"""TP Benchmark: comparable company benchmarking for transfer-pricing filings."""
from .types import *
from .formatting import *
from .analyzer import ComparabilityEngine, perform_comparability_analysis
from .adjustments import adjust_for_working_capital, calculate_working_capital_adjustment
from .benchmarking import calculate_benchmarking_set, calculate_percentile
from .far import create_far_profile, calculate_far_similarity
from .pli import calculate_plis, calculate_weighted_pli, get_recommended_pli
from .screening import CompanyRepository, InMemoryCompanyRepository

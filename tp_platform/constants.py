"""
tp_platform/constants.py
========================
Regulatory reference data for comparability analysis: FAR baselines per
functional profile, NIC codes, PLI descriptions and recommendations, and
the fixed weights of the comparability score.
"""
from __future__ import annotations
from typing import Dict, List, Tuple

from .types import FUNCTIONAL_PROFILES, PLI_TYPES

# ─── FAR Dimensions ───────────────────────────────────────────────────────────

FAR_FUNCTIONS: Tuple[str, ...] = (
    "manufacturing", "procurement", "marketing", "distribution",
    "r_and_d", "quality_control", "strategic_decisions", "financial_management",
)
FAR_ASSETS: Tuple[str, ...] = (
    "tangible_assets", "intangible_assets", "inventory", "receivables", "brand", "technology",
)
FAR_RISKS: Tuple[str, ...] = (
    "market_risk", "credit_risk", "inventory_risk", "foreign_exchange_risk",
    "product_liability_risk", "operational_risk", "financial_risk",
)

RISK_WEIGHTS: Dict[str, int] = {"LOW": 1, "MEDIUM": 2, "HIGH": 3}
FAR_ITEM_COUNT = len(FAR_FUNCTIONS) + len(FAR_ASSETS) + len(FAR_RISKS)  # 21
MAX_RISK_DIFF = RISK_WEIGHTS["HIGH"] - RISK_WEIGHTS["LOW"]

L, M, H = "LOW", "MEDIUM", "HIGH"


def _far(functions: Tuple[str, ...], assets: Tuple[str, ...], risks: Tuple[str, ...]) -> Dict[str, Dict[str, str]]:
    return {
        "functions": dict(zip(FAR_FUNCTIONS, functions)),
        "assets": dict(zip(FAR_ASSETS, assets)),
        "risks": dict(zip(FAR_RISKS, risks)),
    }


# Column order follows FAR_FUNCTIONS / FAR_ASSETS / FAR_RISKS.
FAR_BASELINES: Dict[str, Dict[str, Dict[str, str]]] = {
    "IT_SERVICES": _far(
        (L, L, L, L, M, M, L, L),
        (L, L, L, M, L, L),
        (L, M, L, M, L, M, L),
    ),
    "ITES_BPO": _far(
        (L, L, L, L, L, M, L, L),
        (M, L, L, M, L, L),
        (L, M, L, M, L, M, L),
    ),
    "MANUFACTURER_FULL_FLEDGED": _far(
        (H, H, H, H, H, H, H, H),
        (H, H, H, H, H, H),
        (H, H, H, H, H, H, H),
    ),
    "MANUFACTURER_CONTRACT": _far(
        (H, M, L, L, L, H, L, L),
        (H, L, M, M, L, L),
        (L, M, M, M, M, M, L),
    ),
    "MANUFACTURER_TOLL": _far(
        (H, L, L, L, L, M, L, L),
        (H, L, L, L, L, L),
        (L, L, L, L, L, M, L),
    ),
    "DISTRIBUTOR_FULL_FLEDGED": _far(
        (L, H, H, H, L, M, H, H),
        (M, M, H, H, M, L),
        (H, H, H, H, M, M, H),
    ),
    "DISTRIBUTOR_LIMITED_RISK": _far(
        (L, M, M, M, L, L, L, L),
        (L, L, M, M, L, L),
        (L, M, L, M, L, L, L),
    ),
    "DISTRIBUTOR_COMMISSIONAIRE": _far(
        (L, L, M, M, L, L, L, L),
        (L, L, L, M, L, L),
        (L, L, L, M, L, L, L),
    ),
    "SERVICE_PROVIDER_FULL": _far(
        (L, M, H, M, M, H, H, H),
        (M, H, L, H, H, M),
        (H, H, L, M, M, H, H),
    ),
    "SERVICE_PROVIDER_CONTRACT": _far(
        (L, L, L, L, L, M, L, L),
        (M, L, L, M, L, L),
        (L, M, L, M, L, M, L),
    ),
    "KPO": _far(
        (L, L, L, L, H, H, M, L),
        (L, M, L, M, L, M),
        (M, M, L, M, L, M, L),
    ),
    "R_AND_D_FULL": _far(
        (L, M, L, L, H, H, H, H),
        (H, H, L, M, M, H),
        (H, M, L, M, H, H, H),
    ),
    "R_AND_D_CONTRACT": _far(
        (L, L, L, L, H, H, L, L),
        (M, L, L, M, L, L),
        (L, M, L, M, L, M, L),
    ),
    "HOLDING_COMPANY": _far(
        (L, L, L, L, L, L, H, H),
        (L, H, L, M, H, L),
        (H, M, L, H, L, L, H),
    ),
    "FINANCING": _far(
        (L, L, L, L, L, L, M, H),
        (L, L, L, H, L, L),
        (L, H, L, H, L, L, H),
    ),
}

del L, M, H

# ─── PLI Reference ────────────────────────────────────────────────────────────

PLI_DESCRIPTIONS: Dict[str, Dict[str, object]] = {
    "OP_OC": {
        "name": "Operating Profit to Operating Cost",
        "formula": "Operating Profit / Operating Cost × 100",
        "description": "Most commonly used PLI for service providers. Measures return on operating costs.",
        "applicability": ["IT_SERVICES", "ITES_BPO", "KPO", "SERVICE_PROVIDER_CONTRACT", "R_AND_D_CONTRACT"],
    },
    "OP_OR": {
        "name": "Operating Profit to Operating Revenue",
        "formula": "Operating Profit / Operating Revenue × 100",
        "description": "Measures operating margin. Suitable for full-fledged entities.",
        "applicability": ["MANUFACTURER_FULL_FLEDGED", "DISTRIBUTOR_FULL_FLEDGED", "SERVICE_PROVIDER_FULL"],
    },
    "OP_TC": {
        "name": "Operating Profit to Total Cost",
        "formula": "Operating Profit / Total Cost × 100",
        "description": "Comprehensive cost-based PLI including non-operating costs.",
        "applicability": ["MANUFACTURER_CONTRACT", "SERVICE_PROVIDER_CONTRACT"],
    },
    "GP_SALES": {
        "name": "Gross Profit to Sales",
        "formula": "Gross Profit / Net Sales × 100",
        "description": "Measures gross margin. Suitable for trading/distribution entities.",
        "applicability": ["DISTRIBUTOR_FULL_FLEDGED", "DISTRIBUTOR_LIMITED_RISK"],
    },
    "NCP_SALES": {
        "name": "Net Cost Plus",
        "formula": "(Sales - Total Cost) / Total Cost × 100",
        "description": "Full cost plus markup. Comprehensive profitability measure.",
        "applicability": ["MANUFACTURER_CONTRACT", "MANUFACTURER_TOLL"],
    },
    "BERRY_RATIO": {
        "name": "Berry Ratio",
        "formula": "Gross Profit / Operating Expenses",
        "description": "Ratio of gross profit to operating expenses. Useful for distribution entities.",
        "applicability": ["DISTRIBUTOR_LIMITED_RISK", "DISTRIBUTOR_COMMISSIONAIRE"],
    },
    "ROA": {
        "name": "Return on Assets",
        "formula": "Operating Profit / Total Assets × 100",
        "description": "Measures return relative to assets employed. For asset-intensive operations.",
        "applicability": ["MANUFACTURER_FULL_FLEDGED", "R_AND_D_FULL"],
    },
    "ROCE": {
        "name": "Return on Capital Employed",
        "formula": "Operating Profit / Capital Employed × 100",
        "description": "Measures return on capital. For capital-intensive operations.",
        "applicability": ["MANUFACTURER_FULL_FLEDGED", "FINANCING"],
    },
}

RECOMMENDED_PLI: Dict[str, str] = {
    "MANUFACTURER_FULL_FLEDGED": "OP_OR",
    "MANUFACTURER_CONTRACT": "OP_TC",
    # NCP_SALES is not derived from statements; the tested party must state it
    "MANUFACTURER_TOLL": "NCP_SALES",
    "DISTRIBUTOR_FULL_FLEDGED": "GP_SALES",
    "DISTRIBUTOR_LIMITED_RISK": "BERRY_RATIO",
    "DISTRIBUTOR_COMMISSIONAIRE": "BERRY_RATIO",
    "SERVICE_PROVIDER_FULL": "OP_OR",
    "SERVICE_PROVIDER_CONTRACT": "OP_OC",
    "IT_SERVICES": "OP_OC",
    "ITES_BPO": "OP_OC",
    "KPO": "OP_OC",
    "R_AND_D_FULL": "OP_OR",
    "R_AND_D_CONTRACT": "OP_OC",
    "HOLDING_COMPANY": "ROA",
    "FINANCING": "ROCE",
}

# ─── NIC Codes ────────────────────────────────────────────────────────────────

NIC_CODES: Dict[str, Dict[str, str]] = {
    "62": {"description": "Computer programming, consultancy and related activities", "group": "IT Services"},
    "6201": {"description": "Computer programming activities", "group": "IT Services"},
    "6202": {"description": "Computer consultancy and computer facilities management activities", "group": "IT Services"},
    "6209": {"description": "Other information technology and computer service activities", "group": "IT Services"},
    "63": {"description": "Information service activities", "group": "IT Services"},
    "6311": {"description": "Data processing, hosting and related activities", "group": "ITES/BPO"},
    "6312": {"description": "Web portals", "group": "IT Services"},
    "82": {"description": "Office administrative, office support and other business support activities", "group": "ITES/BPO"},
    "8211": {"description": "Combined office administrative service activities", "group": "ITES/BPO"},
    "8220": {"description": "Activities of call centres", "group": "ITES/BPO"},
    "72": {"description": "Scientific research and development", "group": "R&D"},
    "7210": {"description": "Research and experimental development on natural sciences and engineering", "group": "R&D"},
    "7220": {"description": "Research and experimental development on social sciences and humanities", "group": "R&D"},
    "21": {"description": "Manufacture of pharmaceuticals, medicinal chemical and botanical products", "group": "Pharma"},
    "2100": {"description": "Manufacture of pharmaceuticals, medicinal chemical and botanical products", "group": "Pharma"},
    "26": {"description": "Manufacture of computer, electronic and optical products", "group": "Electronics"},
    "29": {"description": "Manufacture of motor vehicles, trailers and semi-trailers", "group": "Automotive"},
    "46": {"description": "Wholesale trade, except of motor vehicles and motorcycles", "group": "Trading"},
    "47": {"description": "Retail trade, except of motor vehicles and motorcycles", "group": "Trading"},
}


def nic_description(code: str) -> str:
    """Description of the most specific NIC entry that prefixes ``code`` ('' if none)."""
    for n in range(len(code), 1, -1):
        entry = NIC_CODES.get(code[:n])
        if entry:
            return entry["description"]
    return ""


# ─── Weights and Thresholds ───────────────────────────────────────────────────

PLI_YEAR_WEIGHTS: Tuple[float, ...] = (0.5, 0.35, 0.15)
PLI_MAX_YEARS = 3

COMPARABILITY_WEIGHTS: Dict[str, float] = {
    "functional": 0.3,
    "financial": 0.2,
    "industry": 0.2,
    "geographic": 0.1,
    "temporal": 0.1,
    "qualitative": 0.1,
}

FINANCIAL_SIMILARITY_WEIGHTS: Dict[str, float] = {
    "revenue": 0.4,
    "assets": 0.3,
    "employee_cost": 0.3,
}

INDUSTRY_MATCH_SCORE = 100
INDUSTRY_MISMATCH_SCORE = 70

DAYS_IN_YEAR = 365
OUTLIER_IQR_MULTIPLIER = 1.5

METHODOLOGY = "Transactional Net Margin Method (TNMM) with weighted average PLI (50:35:15)"

# code → (reason, severity, regulatory basis)
REJECTION_RULES: Dict[str, Tuple[str, str, str]] = {
    "RPT_HIGH": ("High related party transactions", "HARD", "Rule 10B(4) - Related party filter"),
    "PERSISTENT_LOSS": ("Persistent losses", "HARD", "OECD Guidelines Para 3.64"),
    "LOW_DATA_QUALITY": ("Insufficient data quality", "SOFT", "Rule 10B(4) - Reliable data requirement"),
    "FAR_MISMATCH": ("Functional profile mismatch", "SOFT", "Rule 10B(2) - Functional comparability"),
}


def _check_complete() -> None:
    missing = set(FUNCTIONAL_PROFILES) - set(FAR_BASELINES)
    extra = set(FAR_BASELINES) - set(FUNCTIONAL_PROFILES)
    if missing or extra:
        raise RuntimeError(f"FAR baseline table out of sync: missing={sorted(missing)} extra={sorted(extra)}")
    for profile, groups in FAR_BASELINES.items():
        for group, items in (("functions", FAR_FUNCTIONS), ("assets", FAR_ASSETS), ("risks", FAR_RISKS)):
            if tuple(groups[group]) != items:
                raise RuntimeError(f"FAR baseline {profile}.{group} has wrong items")
    if set(RECOMMENDED_PLI) != set(FUNCTIONAL_PROFILES):
        raise RuntimeError("RECOMMENDED_PLI must cover every functional profile")
    if set(PLI_DESCRIPTIONS) != set(PLI_TYPES):
        raise RuntimeError("PLI_DESCRIPTIONS must cover every PLI type")


_check_complete()


def functional_profiles() -> List[str]:
    return list(FUNCTIONAL_PROFILES)

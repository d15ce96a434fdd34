"""
tests/conftest.py
=================
Shared pytest fixtures for the TP benchmarking test suite.
Company records are synthetic; every figure is chosen so the PLIs are easy
to verify by hand.
"""
import sys
import os

# Ensure the project root is on the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from tp_platform.pli import calculate_company_plis
from tp_platform.screening import InMemoryCompanyRepository
from tp_platform.types import CompanyFinancials, ComparableCompany, TestedParty

YEARS = ("2023-24", "2022-23", "2021-22")
BASE_COST = 100_000_000.0  # ₹10 Cr operating cost per year


def make_financials(year: str, markup: float, cost: float = BASE_COST, **overrides) -> CompanyFinancials:
    """One year of statements with OP/OC equal to ``markup`` percent."""
    op = cost * markup / 100
    revenue = cost + op
    values = dict(
        year=year,
        revenue=revenue,
        operating_revenue=revenue,
        gross_profit=revenue * 0.3,
        operating_profit=op,
        net_profit=op * 0.75,
        operating_cost=cost,
        total_cost=cost,
        total_assets=revenue * 0.6,
        fixed_assets=revenue * 0.1,
        current_assets=revenue * 0.45,
        current_liabilities=revenue * 0.2,
        inventory=0.0,
        receivables=revenue * 0.2,
        payables=cost * 0.1,
        capital_employed=revenue * 0.4,
        employee_cost=revenue * 0.6,
        depreciation=revenue * 0.02,
    )
    values.update(overrides)
    return CompanyFinancials(**values)


def make_company(
    cid: str,
    name: str,
    markups=(15.0, 15.0, 15.0),
    profile: str = "IT_SERVICES",
    nic_code: str = "6201",
    rpt: float = 5.0,
    quality: float = 90.0,
    losses: bool = False,
    status: str = "ACTIVE",
    cost: float = BASE_COST,
) -> ComparableCompany:
    financials = [make_financials(y, m, cost) for y, m in zip(YEARS, markups)]
    return ComparableCompany(
        id=cid,
        cin=f"U72200KA2001PTC{cid}",
        name=name,
        nic_code=nic_code,
        functional_profile=profile,
        financials=financials,
        plis=calculate_company_plis(financials),
        status=status,
        data_quality_score=quality,
        years_of_data=len(financials),
        has_related_party_transactions=rpt > 0,
        related_party_percent=rpt,
        has_persistent_losses=losses,
        loss_years=3 if losses else 0,
    )


@pytest.fixture
def comparable_pool():
    """Five clean IT services comparables (10-18% OP/OC) plus four that must not survive."""
    clean = [
        make_company("C001", "Alpha Infotech Pvt Ltd", (10.0, 10.0, 10.0)),
        make_company("C002", "Beta Softech Pvt Ltd", (12.0, 12.0, 12.0)),
        make_company("C003", "Gamma Systems Ltd", (14.0, 14.0, 14.0)),
        make_company("C004", "Delta Code Works Ltd", (16.0, 16.0, 16.0)),
        make_company("C005", "Epsilon Digital Ltd", (18.0, 18.0, 18.0)),
    ]
    excluded = [
        make_company("C006", "Captive Tech Services Ltd", (15.0, 15.0, 15.0), rpt=30.0),
        make_company("C007", "Lossmaker Software Ltd", (-5.0, -4.0, -6.0), losses=True),
        make_company(
            "C008", "Heavy Engineering Ltd", (20.0, 20.0, 20.0),
            profile="MANUFACTURER_FULL_FLEDGED", nic_code="6209", quality=60.0,
        ),
        make_company("C009", "Wholesale Traders Ltd", (8.0, 8.0, 8.0), profile="DISTRIBUTOR_FULL_FLEDGED", nic_code="4690"),
    ]
    return clean + excluded


@pytest.fixture
def repository(comparable_pool):
    return InMemoryCompanyRepository(comparable_pool)


@pytest.fixture
def tested_party():
    return TestedParty(
        name="Acme Software India Pvt Ltd",
        functional_profile="IT_SERVICES",
        financials=make_financials("2023-24", 13.0),
        pli=13.0,
    )

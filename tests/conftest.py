"""
Pytest configuration and fixtures for CashProj test suite.

This module provides reusable fixtures for testing all CashProj components.
Every fixture pins its dates so results do not depend on the day tests run.
"""

import json
from datetime import date
from decimal import Decimal
from typing import List

import pytest

from cashproj.expenses import ExpenseInstrument
from cashproj.income import IncomeInstrument


# ---------------------------------------------------------------------------
# Date Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def start_date() -> date:
    """Standard first projected month for tests."""
    return date(2025, 1, 1)


@pytest.fixture
def months() -> int:
    """Standard projection horizon for tests."""
    return 24


# ---------------------------------------------------------------------------
# Income Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def salary() -> IncomeInstrument:
    """
    Contribution-subject monthly salary.

    Gross: 5,000/month, stored take-home 4,000 (20% employee share)
    """
    return IncomeInstrument(
        name="Salary",
        amount=Decimal("5000"),
        frequency="monthly",
        start_date=date(2024, 1, 1),
        subject_to_contribution=True,
        net_amount=Decimal("4000"),
    )


@pytest.fixture
def salary_with_raise() -> IncomeInstrument:
    """
    Salary rising from 5,000 to 6,000 gross in July 2025.

    Before July the stored take-home (4,000) applies; from July the
    take-home is recomputed from 6,000 (4,800 at age 30).
    """
    return IncomeInstrument(
        name="Salary",
        amount=Decimal("5000"),
        frequency="monthly",
        start_date=date(2024, 1, 1),
        subject_to_contribution=True,
        net_amount=Decimal("4000"),
        change_flag=True,
        future_amount=Decimal("6000"),
        future_start_date=date(2025, 7, 1),
    )


@pytest.fixture
def salary_with_bonus() -> IncomeInstrument:
    """Salary of 6,000 with a 2-month bonus paid each December."""
    return IncomeInstrument(
        name="Salary",
        amount=Decimal("6000"),
        frequency="monthly",
        start_date=date(2024, 1, 1),
        subject_to_contribution=True,
        net_amount=Decimal("4800"),
        account_for_bonus=True,
        bonus_groups=json.dumps([{"month": 12, "amount": "2"}]),
    )


@pytest.fixture
def rental_income() -> IncomeInstrument:
    """Quarterly rental income of 1,500 starting February 2025, no contribution."""
    return IncomeInstrument(
        name="Rental",
        amount="1500",
        frequency="quarterly",
        start_date=date(2025, 2, 1),
    )


# ---------------------------------------------------------------------------
# Expense Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def rent() -> ExpenseInstrument:
    """Open-ended monthly rent of 2,500, already running."""
    return ExpenseInstrument(name="Rent", amount="2500", frequency="monthly")


@pytest.fixture
def insurance() -> ExpenseInstrument:
    """Yearly insurance premium of 1,200 due each March."""
    return ExpenseInstrument(
        name="Insurance",
        amount="1200",
        frequency="yearly",
        start_date=date(2023, 3, 10),
    )


@pytest.fixture
def school_fees() -> ExpenseInstrument:
    """School fees of 800 charged in January and July."""
    return ExpenseInstrument(
        name="School fees",
        amount="800",
        frequency="custom",
        start_date=date(2024, 1, 1),
        custom_months="[1, 7]",
    )


@pytest.fixture
def expenses(rent, insurance, school_fees) -> List[ExpenseInstrument]:
    """Standard household expenses."""
    return [rent, insurance, school_fees]


# ---------------------------------------------------------------------------
# File Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def portfolio_data() -> dict:
    """Instruments file content with one salary, rent and a one-off purchase."""
    return {
        "schema_version": "0.1.0",
        "incomes": [
            {
                "name": "Salary",
                "amount": "5000",
                "frequency": "monthly",
                "start_date": "2024-01-01",
                "subject_to_contribution": True,
                "net_amount": "4000",
            }
        ],
        "expenses": [
            {"name": "Rent", "amount": "2500", "frequency": "monthly"},
            {
                "name": "Laptop",
                "amount": "1800",
                "frequency": "one-time",
                "start_date": "2025-03-15",
            },
        ],
    }


@pytest.fixture
def portfolio_file(tmp_path, portfolio_data):
    """Instruments file written to a temporary directory."""
    path = tmp_path / "instruments.json"
    with open(path, "w") as f:
        json.dump(portfolio_data, f)
    return path

"""
Integration test for full CashProj workflow.

Tests the complete pipeline from an instruments file through projection,
analysis and persistence to verify all components work together correctly.
"""

from datetime import date
from decimal import Decimal

import pytest

from cashproj.cpf_projection import (
    ContributorProfile,
    PropertyAsset,
    extract_loan_deductions,
    project_contribution_accounts,
)
from cashproj.projection import (
    compute_projection_metrics,
    project_monthly_balance,
    projection_to_frame,
)
from cashproj.serialization import (
    load_portfolio,
    load_projection,
    save_portfolio,
    save_projection,
)


@pytest.mark.integration
class TestFullWorkflow:
    """Integration tests for the file-to-projection workflow."""

    def test_file_to_saved_projection(self, portfolio_file, tmp_path, start_date):
        """
        Load instruments, project 12 months, analyse and save.

        Salary take-home 4,000 less rent 2,500 leaves 1,500 a month; the
        laptop costs 1,800 in March.
        """
        # 1. Load instruments
        portfolio = load_portfolio(portfolio_file)
        incomes = portfolio.income_instruments()
        expenses = portfolio.expense_instruments()
        assert len(incomes) == 1
        assert len(expenses) == 2

        # 2. Project
        points = project_monthly_balance(
            incomes, expenses, 12, "500", start=start_date, scheme=portfolio.scheme()
        )
        assert len(points) == 12
        assert points[2].expense == Decimal("4300.00")
        assert points[2].monthly_balance == Decimal("-300.00")
        assert points[-1].cumulative_balance == Decimal("16700.00")

        # 3. Analyse
        frame = projection_to_frame(points)
        assert frame.shape == (12, 7)
        assert frame["monthly_balance"].sum() == pytest.approx(16200.0)

        metrics = compute_projection_metrics(points)
        assert metrics.negative_months == 1
        assert metrics.min_cumulative_month == "Jan 2025"
        assert metrics.ending_balance == pytest.approx(16700.0)

        # 4. Persist and reload
        out = tmp_path / "out" / "projection.json"
        save_projection(points, out, starting_balance="500")
        data = load_projection(out)
        assert len(data["points"]) == 12
        assert data["points"][-1]["cumulative_balance"] == "16700.00"

    def test_programmatic_portfolio_round_trip(self, tmp_path, salary_with_raise, salary_with_bonus,
                                               expenses, start_date, months):
        """Instruments saved to disk project identically after reloading."""
        incomes = [salary_with_raise, salary_with_bonus]
        before = project_monthly_balance(incomes, expenses, months, start=start_date)

        path = tmp_path / "instruments.json"
        save_portfolio(incomes, expenses, path)
        portfolio = load_portfolio(path)
        after = project_monthly_balance(
            portfolio.income_instruments(),
            portfolio.expense_instruments(),
            months,
            start=start_date,
            scheme=portfolio.scheme(),
        )

        assert after == before
        december = after[11]
        assert december.bonus > 0
        assert any(item.type == "bonus" for item in december.special_items)

    def test_household_contribution_accounts(self):
        """Two earners paying a contribution-funded mortgage for six months."""
        members = [
            ContributorProfile("m1", "Alex", monthly_gross_income="6000", current_age=30),
            ContributorProfile("m2", "Sam", monthly_gross_income="4000", current_age=30),
        ]
        assets = [
            PropertyAsset("Flat", "1000", "6000", paid_by_contribution=True),
            PropertyAsset("Car", "800", "20000", paid_by_contribution=False),
        ]

        loans = extract_loan_deductions(assets)
        points = project_contribution_accounts(members, 12, loans, start=date(2025, 1, 1))

        assert len(points) == 13
        assert points[6].household.cumulative_loan_deduction == Decimal("6000")
        assert points[7].household.monthly_loan_deduction == 0
        # 3,700 a month less 1,000 in loan payments for six months
        assert points[12].household.cumulative_total == Decimal("38404")

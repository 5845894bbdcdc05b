"""
Unit tests for expenses.py module.
"""

from dataclasses import replace
from datetime import date
from decimal import Decimal

from cashproj.expenses import ExpenseInstrument, allocate_expense, expense_monthly_equivalent


class TestExpenseInstrument:
    """Tests for ExpenseInstrument allocation."""

    def test_running_without_start(self, rent):
        assert allocate_expense(rent, date(2019, 1, 1)) == Decimal("2500")
        assert allocate_expense(rent, date(2031, 1, 1)) == Decimal("2500")

    def test_end_date(self, rent):
        expense = replace(rent, start_date=date(2025, 3, 1), end_date=date(2025, 5, 31))
        assert allocate_expense(expense, date(2025, 2, 1)) == 0
        assert allocate_expense(expense, date(2025, 4, 1)) == Decimal("2500")
        assert allocate_expense(expense, date(2025, 6, 1)) == 0

    def test_yearly(self, insurance):
        assert allocate_expense(insurance, date(2025, 3, 1)) == Decimal("1200")
        assert allocate_expense(insurance, date(2025, 4, 1)) == 0

    def test_custom(self, school_fees):
        assert allocate_expense(school_fees, date(2025, 7, 1)) == Decimal("800")
        assert allocate_expense(school_fees, date(2025, 8, 1)) == 0

    def test_one_time_without_start_never_charged(self):
        expense = ExpenseInstrument(amount="500", frequency="one-time")
        assert all(allocate_expense(expense, date(2025, m, 1)) == 0 for m in range(1, 13))

    def test_unusable_amount(self, rent):
        assert allocate_expense(replace(rent, amount=""), date(2025, 1, 1)) == 0
        assert allocate_expense(replace(rent, amount=None), date(2025, 1, 1)) == 0

    def test_participation(self, rent):
        assert rent.participates
        assert not replace(rent, is_active=False).participates
        assert not replace(rent, lifecycle_category="one-off").participates


class TestExpenseMonthlyEquivalent:
    """Tests for expense_monthly_equivalent."""

    def test_equivalents(self, rent, insurance, school_fees):
        assert expense_monthly_equivalent(rent) == Decimal("2500")
        assert expense_monthly_equivalent(insurance) == Decimal("100")
        assert expense_monthly_equivalent(school_fees) == Decimal("1600") / 12

    def test_unusable_amount(self, rent):
        assert expense_monthly_equivalent(replace(rent, amount="x")) == 0

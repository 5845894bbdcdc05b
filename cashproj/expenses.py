"""
Expense instruments for CashProj.

Purpose
-------
Models the outgoing side of the cash flow: rent, utilities, insurance
premiums, school fees, one-off purchases. Mirrors the income module with a
smaller record: expenses have no contribution deduction, no scheduled
change and no bonus.

Unlike income, an expense may be recorded without a start date; it is then
treated as running since before the projection began.

Example
-------
>>> from datetime import date
>>> from decimal import Decimal
>>> rent = ExpenseInstrument(amount="2500", frequency="monthly",
...                          start_date=date(2025, 3, 1), end_date=date(2025, 5, 31))
>>> allocate_expense(rent, date(2025, 4, 1))
Decimal('2500')
>>> allocate_expense(rent, date(2025, 6, 1))
Decimal('0')
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Optional, Union

from .allocation import ZERO, allocate_amount, monthly_equivalent
from .constants import CURRENT_RECURRING
from .utils import parse_amount

__all__ = [
    "ExpenseInstrument",
    "allocate_expense",
    "expense_monthly_equivalent",
]

AmountLike = Union[Decimal, int, float, str]


@dataclass(frozen=True)
class ExpenseInstrument:
    """
    One expense with its schedule.

    Parameters
    ----------
    amount : Decimal-like
        Amount per occurrence. Parsed fail-soft like income amounts.
    frequency : str
        monthly, quarterly, semi-yearly, yearly, custom or one-time.
    start_date : date, optional
        First day the expense applies. None means "already running".
    end_date : date, optional
        Last day the expense applies. None means open-ended.
    custom_months : iterable of int or JSON string, optional
        Calendar months charged when frequency is "custom".
    lifecycle_category : str, default "current-recurring"
    is_active : bool or None, default True
    name : str, default "expense"
    """

    amount: AmountLike
    frequency: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    custom_months: Any = None
    lifecycle_category: Optional[str] = CURRENT_RECURRING
    is_active: Optional[bool] = True
    name: str = "expense"

    @property
    def participates(self) -> bool:
        """Whether the monthly projection includes this instrument."""
        return self.lifecycle_category == CURRENT_RECURRING and self.is_active is not False

    @property
    def parsed_amount(self) -> Optional[Decimal]:
        return parse_amount(self.amount)


def allocate_expense(expense: ExpenseInstrument, target_month: date) -> Decimal:
    """Gross expense attributed to *target_month*; 0 if the amount is unusable."""
    amount = expense.parsed_amount
    if amount is None:
        return ZERO
    return allocate_amount(
        amount,
        expense.frequency,
        expense.start_date,
        expense.end_date,
        expense.custom_months,
        target_month,
    )


def expense_monthly_equivalent(expense: ExpenseInstrument) -> Decimal:
    """Average monthly cost, ignoring the active window."""
    amount = expense.parsed_amount
    if amount is None:
        return ZERO
    return monthly_equivalent(amount, expense.frequency, expense.custom_months)

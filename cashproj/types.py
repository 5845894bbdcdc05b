"""
Type definitions for CashProj.

Purpose
-------
Provides TypedDict definitions for the JSON-ready dictionaries produced by
CashProj results. Amounts are carried as strings so Decimal values survive
serialization without float round-off.

Type Definitions
----------------
ContributionDict
    Ordinary-wage contribution breakdown from ContributionResult.as_dict()

BonusContributionDict
    Bonus contribution breakdown from BonusContributionResult.as_dict()

SpecialItemDict
    Marker for one-off/custom/bonus amounts within a projected month

ProjectionPointDict
    One month of the cash-flow projection
"""

from typing import Dict, List

from typing_extensions import Literal, NotRequired, TypedDict

__all__ = [
    "SpecialItemType",
    "ContributionDict",
    "BonusContributionDict",
    "SpecialItemDict",
    "ProjectionPointDict",
]

SpecialItemType = Literal["one-off-income", "one-off-expense", "custom-expense", "bonus"]


class ContributionDict(TypedDict):
    """
    Ordinary-wage contribution breakdown.

    Examples
    --------
    >>> compute_contribution(Decimal("10000")).as_dict()["net_take_home"]
    '8400.00'
    """

    gross_amount: str
    applicable_amount: str
    employee_amount: str
    employer_amount: str
    total_amount: str
    net_take_home: str


class BonusContributionDict(TypedDict):
    """Bonus contribution breakdown including the sub-account split."""

    bonus_amount: str
    annual_ordinary_base: str
    remaining_annual_ceiling: str
    applicable_amount: str
    employee_amount: str
    employer_amount: str
    total_amount: str
    sub_accounts: Dict[str, str]


class SpecialItemDict(TypedDict):
    name: str
    amount: str
    type: SpecialItemType


class ProjectionPointDict(TypedDict):
    """
    One month of the cash-flow projection.

    Attributes
    ----------
    month : str
        First day of the month, ISO format.
    month_label : str
        Display label, e.g. "Jan 2025".
    income, salary_income, bonus, expense, monthly_balance, cumulative_balance : str
        Cent-rounded amounts.
    special_items : list of SpecialItemDict, optional
        Omitted when the month has none.
    """

    month: str
    month_label: str
    income: str
    salary_income: str
    bonus: str
    expense: str
    monthly_balance: str
    cumulative_balance: str
    special_items: NotRequired[List[SpecialItemDict]]

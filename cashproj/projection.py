"""Monthly cash-flow projection for CashProj

Combines income and expense instruments into a month-by-month series of
income, expense, net balance and running (cumulative) balance, starting at
the current month.

Per month and per instrument the pipeline is:

    income  -> resolve_effective_terms -> take_home_amount -> allocate_amount
    bonus   -> bonus_for_month (annual-ceiling contribution deducted)
    expense -> allocate_amount

Rounding
--------
Instrument amounts are summed unrounded; the monthly totals are rounded to
cents once, when the point is built. The running balance accumulates the
unrounded monthly balances and is rounded only on output, so it never
drifts more than half a cent from the exact total.

Typical usage
-------------
>>> from datetime import date
>>> points = project_monthly_balance(incomes, expenses, 24, starting_balance="1500",
...                                  start=date(2025, 1, 1))
>>> points[0].month_label
'Jan 2025'
>>> df = projection_to_frame(points)
>>> metrics = compute_projection_metrics(points)
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from .allocation import ZERO, normalize_frequency
from .constants import DEFAULT_HORIZON_MONTHS, MONTH_LABEL_FORMAT
from .contribution import DEFAULT_SCHEME, ContributionScheme
from .exceptions import ValidationError
from .expenses import ExpenseInstrument, allocate_expense
from .income import IncomeInstrument, allocate_income, bonus_for_month
from .types import ProjectionPointDict, SpecialItemType
from .utils import add_months, current_month, month_index, round_money, to_decimal

__all__ = [
    "SpecialItem",
    "MonthlyProjectionPoint",
    "ProjectionMetrics",
    "project_monthly_balance",
    "month_label",
    "time_range_to_months",
    "projection_to_frame",
    "compute_projection_metrics",
]

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SpecialItem:
    """An amount worth flagging on a chart: one-offs, custom charges, bonuses."""
    name: str
    amount: Decimal
    type: SpecialItemType


@dataclass(frozen=True)
class MonthlyProjectionPoint:
    """
    One projected month. All amounts are rounded to cents.

    Each amount is rounded from its own unrounded total, so
    ``monthly_balance`` can differ by a cent from ``income - expense`` as
    shown, and ``cumulative_balance`` from the sum of the shown balances.
    """
    month: date
    month_label: str
    income: Decimal
    salary_income: Decimal
    bonus: Decimal
    expense: Decimal
    monthly_balance: Decimal
    cumulative_balance: Decimal
    special_items: Tuple[SpecialItem, ...] = field(default_factory=tuple)

    def as_dict(self) -> ProjectionPointDict:
        data: ProjectionPointDict = {
            "month": self.month.isoformat(),
            "month_label": self.month_label,
            "income": str(self.income),
            "salary_income": str(self.salary_income),
            "bonus": str(self.bonus),
            "expense": str(self.expense),
            "monthly_balance": str(self.monthly_balance),
            "cumulative_balance": str(self.cumulative_balance),
        }
        if self.special_items:
            data["special_items"] = [
                {"name": item.name, "amount": str(item.amount), "type": item.type}
                for item in self.special_items
            ]
        return data


@dataclass(frozen=True)
class ProjectionMetrics:
    """Summary metrics for a projection."""
    months: int
    total_income: float
    total_expense: float
    net_change: float
    mean_monthly_balance: float
    std_monthly_balance: float
    ending_balance: float
    min_cumulative_balance: float
    min_cumulative_month: Optional[str]
    negative_months: int


# ---------------------------------------------------------------------------
# Labels and horizons
# ---------------------------------------------------------------------------

def month_label(offset: int, start: Optional[date] = None) -> str:
    """Label of the month *offset* months after *start*'s month (default: now)."""
    return add_months(current_month(start), offset).strftime(MONTH_LABEL_FORMAT)


def time_range_to_months(time_range: str) -> int:
    """Convert a time-range selector value ("12", "24", "36", "60", "120", ...)
    to a number of months. Unreadable or non-positive values give the default.
    """
    try:
        months = int(str(time_range).strip())
    except ValueError:
        return DEFAULT_HORIZON_MONTHS
    return months if months > 0 else DEFAULT_HORIZON_MONTHS


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------

def _warn_unusable(instruments: Sequence, kind: str) -> None:
    for inst in instruments:
        if inst.parsed_amount is None:
            logger.warning(
                "%s %r has unusable amount %r; it contributes 0 where that amount applies.",
                kind, inst.name, inst.amount,
            )


def _bonus_label(name: str, multiplier: Decimal) -> str:
    return f"{name} Bonus ({multiplier.normalize():f}x)"


def project_monthly_balance(
    incomes: Sequence[IncomeInstrument],
    expenses: Sequence[ExpenseInstrument],
    horizon_months: int,
    starting_balance=ZERO,
    *,
    start: Optional[date] = None,
    scheme: ContributionScheme = DEFAULT_SCHEME,
) -> List[MonthlyProjectionPoint]:
    """
    Project monthly income, expense and balance over *horizon_months*.

    Parameters
    ----------
    incomes : sequence of IncomeInstrument
        Order is irrelevant. Only current-recurring, not-deactivated
        instruments take part.
    expenses : sequence of ExpenseInstrument
        Same filtering as incomes.
    horizon_months : int
        Number of points to produce. Must be >= 0.
    starting_balance : Decimal-like, default 0
        Balance before month 0; may be negative.
    start : date, optional
        Any day in month 0. Defaults to today.
    scheme : ContributionScheme, default DEFAULT_SCHEME
        Used to recompute take-home for future amounts and bonuses.

    Returns
    -------
    list of MonthlyProjectionPoint
        Chronological, ``len == horizon_months``.

    Raises
    ------
    ValidationError
        If horizon_months is negative or starting_balance is not a number.

    Notes
    -----
    Pure: inputs are never mutated and no state survives the call.
    """
    if horizon_months < 0:
        raise ValidationError(f"horizon_months must be non-negative, got {horizon_months}.")
    try:
        cumulative = to_decimal(starting_balance)
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise ValidationError(f"starting_balance is not a number: {starting_balance!r}") from exc

    origin = current_month(start)
    active_incomes = [inc for inc in incomes if inc.participates]
    active_expenses = [exp for exp in expenses if exp.participates]
    _warn_unusable(active_incomes, "Income")
    _warn_unusable(active_expenses, "Expense")

    logger.debug(
        "Projecting %d months from %s: %d/%d incomes, %d/%d expenses",
        horizon_months, origin.isoformat(),
        len(active_incomes), len(incomes), len(active_expenses), len(expenses),
    )

    points: List[MonthlyProjectionPoint] = []
    for offset in range(horizon_months):
        target = add_months(origin, offset)
        special_items: List[SpecialItem] = []

        salary_total = ZERO
        bonus_total = ZERO
        for income in active_incomes:
            allocated = allocate_income(income, target, scheme=scheme)
            if allocated > 0 and normalize_frequency(income.frequency) == "one-time":
                special_items.append(SpecialItem(income.name, allocated, "one-off-income"))
            salary_total += allocated

            bonus = bonus_for_month(income, target, scheme=scheme)
            if bonus is not None:
                special_items.append(
                    SpecialItem(_bonus_label(income.name, bonus.multiplier),
                                round_money(bonus.net_amount), "bonus")
                )
                bonus_total += bonus.net_amount

        expense_total = ZERO
        for expense in active_expenses:
            allocated = allocate_expense(expense, target)
            if allocated > 0:
                frequency = normalize_frequency(expense.frequency)
                if frequency == "one-time":
                    special_items.append(SpecialItem(expense.name, allocated, "one-off-expense"))
                elif frequency == "custom":
                    special_items.append(SpecialItem(expense.name, allocated, "custom-expense"))
            expense_total += allocated

        income_total = salary_total + bonus_total
        raw_balance = income_total - expense_total
        cumulative += raw_balance

        points.append(
            MonthlyProjectionPoint(
                month=target,
                month_label=target.strftime(MONTH_LABEL_FORMAT),
                income=round_money(income_total),
                salary_income=round_money(salary_total),
                bonus=round_money(bonus_total),
                expense=round_money(expense_total),
                monthly_balance=round_money(raw_balance),
                cumulative_balance=round_money(cumulative),
                special_items=tuple(special_items),
            )
        )

    return points


# ---------------------------------------------------------------------------
# Tabular output and metrics
# ---------------------------------------------------------------------------

_FRAME_COLUMNS = [
    "income",
    "salary_income",
    "bonus",
    "expense",
    "monthly_balance",
    "cumulative_balance",
]


def projection_to_frame(points: Sequence[MonthlyProjectionPoint]) -> pd.DataFrame:
    """
    Projection as a DataFrame indexed by first-of-month timestamps.

    Amount columns are float64 for analysis and plotting; use the points
    themselves when exact cents matter.
    """
    start = points[0].month if points else None
    idx = month_index(start=start, months=len(points))
    idx.name = "month"
    data = {col: [float(getattr(p, col)) for p in points] for col in _FRAME_COLUMNS}
    frame = pd.DataFrame(data, index=idx, columns=_FRAME_COLUMNS)
    frame.insert(0, "month_label", [p.month_label for p in points])
    return frame


def compute_projection_metrics(points: Sequence[MonthlyProjectionPoint]) -> ProjectionMetrics:
    """Totals, dispersion and low-water mark of a projection."""
    if not points:
        return ProjectionMetrics(
            months=0,
            total_income=0.0,
            total_expense=0.0,
            net_change=0.0,
            mean_monthly_balance=0.0,
            std_monthly_balance=0.0,
            ending_balance=0.0,
            min_cumulative_balance=0.0,
            min_cumulative_month=None,
            negative_months=0,
        )

    income = np.array([float(p.income) for p in points])
    expense = np.array([float(p.expense) for p in points])
    balance = np.array([float(p.monthly_balance) for p in points])
    cumulative = np.array([float(p.cumulative_balance) for p in points])
    low = int(np.argmin(cumulative))

    return ProjectionMetrics(
        months=len(points),
        total_income=float(income.sum()),
        total_expense=float(expense.sum()),
        net_change=float(balance.sum()),
        mean_monthly_balance=float(balance.mean()),
        std_monthly_balance=float(balance.std()),
        ending_balance=float(cumulative[-1]),
        min_cumulative_balance=float(cumulative[low]),
        min_cumulative_month=points[low].month_label,
        negative_months=int((balance < 0).sum()),
    )

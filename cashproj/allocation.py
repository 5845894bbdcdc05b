"""
Frequency allocation for CashProj.

Purpose
-------
Answers two questions for a single instrument and a single target month:

- is_active_in_month: has the instrument started, and has it not yet ended?
- allocate_amount: how much of the instrument's amount lands in that month,
  given its payment frequency?

Both are pure functions over plain dates and amounts; income and expense
instruments feed them after resolving their effective terms.

Frequency rules
---------------
monthly      every active month
quarterly    every 3rd month counted from the start month (k mod 3 == 0)
semi-yearly  every 6th month counted from the start month (k mod 6 == 0)
yearly       the start date's calendar month, any year
custom       the listed calendar months; empty or unreadable lists pay nothing
one-time     the start date's month and year only

Cycles are anchored to the start month, not to calendar quarters, and missed
payments are never caught up.

Example
-------
>>> from datetime import date
>>> from decimal import Decimal
>>> allocate_amount(Decimal("300"), "quarterly", date(2025, 1, 15), None, None,
...                 date(2025, 4, 1))
Decimal('300')
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Optional

from .constants import MONTHS_PER_YEAR
from .utils import (
    end_of_month,
    months_between,
    parse_custom_months,
    start_of_month,
)

__all__ = [
    "normalize_frequency",
    "is_active_in_month",
    "allocate_amount",
    "monthly_equivalent",
]

ZERO = Decimal("0")

_CYCLE_MONTHS = {"quarterly": 3, "semi-yearly": 6}


def normalize_frequency(frequency: Optional[str]) -> str:
    """Lower-case and strip; unknown values pass through unchanged."""
    return (frequency or "").strip().lower()


def is_active_in_month(
    start_date: Optional[date],
    end_date: Optional[date],
    target_month: date,
) -> bool:
    """
    Whether an instrument with the given window is live in *target_month*.

    Parameters
    ----------
    start_date : date or None
        First day the instrument applies. None means "since forever"
        (recurring expenses recorded without a start).
    end_date : date or None
        Last day the instrument applies. None means open-ended.
    target_month : date
        Any day in the month being tested; compared as a whole month.

    Returns
    -------
    bool
        True iff the month overlaps [start-of-month(start), end-of-month(end)].
    """
    target = start_of_month(target_month)

    if start_date is None:
        return end_date is None or target <= end_of_month(end_date)

    if start_date > end_of_month(target):
        return False

    if end_date is None:
        return True

    return start_of_month(start_date) <= target <= end_of_month(end_date)


def allocate_amount(
    amount: Decimal,
    frequency: str,
    start_date: Optional[date],
    end_date: Optional[date],
    custom_months: Any,
    target_month: date,
) -> Decimal:
    """
    Amount attributed to *target_month* for one instrument.

    Parameters
    ----------
    amount : Decimal
        Per-occurrence amount (already net of contributions for income).
    frequency : str
        One of FREQUENCIES, case-insensitive. Unknown values allocate 0.
    start_date, end_date : date or None
        Active window, see is_active_in_month.
    custom_months : iterable of int, JSON string, or None
        Calendar months (1-12) for the "custom" frequency.
    target_month : date
        Any day in the month being allocated.

    Returns
    -------
    Decimal
        *amount* or zero. Never a partial amount.
    """
    if not is_active_in_month(start_date, end_date, target_month):
        return ZERO

    freq = normalize_frequency(frequency)
    target_month_number = target_month.month

    if freq == "monthly":
        return amount

    if freq in _CYCLE_MONTHS:
        if start_date is None:
            return ZERO
        k = months_between(start_date, target_month)
        if k >= 0 and k % _CYCLE_MONTHS[freq] == 0:
            return amount
        return ZERO

    if freq == "yearly":
        # Undated yearly items fall in January
        anchor_month = start_date.month if start_date is not None else 1
        return amount if target_month_number == anchor_month else ZERO

    if freq == "custom":
        if target_month_number in parse_custom_months(custom_months):
            return amount
        return ZERO

    if freq == "one-time":
        if (
            start_date is not None
            and start_date.year == target_month.year
            and start_date.month == target_month.month
        ):
            return amount
        return ZERO

    return ZERO


def monthly_equivalent(amount: Decimal, frequency: str, custom_months: Any = None) -> Decimal:
    """
    Average per-month cost of a recurring amount, for budgeting summaries.

    One-time amounts have no monthly equivalent (0). Not rounded.
    """
    freq = normalize_frequency(frequency)
    if freq == "monthly":
        return amount
    if freq == "yearly":
        return amount / MONTHS_PER_YEAR
    if freq in _CYCLE_MONTHS:
        return amount / _CYCLE_MONTHS[freq]
    if freq == "custom":
        return amount * len(parse_custom_months(custom_months)) / MONTHS_PER_YEAR
    return ZERO



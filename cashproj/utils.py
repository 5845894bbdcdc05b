"""General utilities for CashProj

Contents
--------
- Money helpers (decimal coercion, fail-soft parsing, cent rounding)
- Calendar helpers (month arithmetic, first/last day, index builders)
- Payload helpers (custom month lists, bonus groups)
"""

from __future__ import annotations

import json
from calendar import monthrange
from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, FrozenSet, Optional, Tuple, Union

import pandas as pd

from .constants import CENT, MONTHS_PER_YEAR
from .exceptions import TimeIndexError

__all__ = [
    # Money
    "to_decimal",
    "parse_amount",
    "round_money",
    "round_whole",
    # Calendar
    "start_of_month",
    "end_of_month",
    "add_months",
    "months_between",
    "current_month",
    "parse_year_month",
    "month_index",
    # Payloads
    "parse_custom_months",
    "parse_bonus_groups",
]

AmountLike = Union[Decimal, int, float, str]


# ---------------------------------------------------------------------------
# Money helpers
# ---------------------------------------------------------------------------

def to_decimal(value: AmountLike) -> Decimal:
    """Coerce *value* to Decimal.

    Floats go through ``str`` so 0.1 becomes Decimal("0.1") rather than its
    binary expansion. Raises ``InvalidOperation``/``TypeError`` on garbage.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("booleans are not amounts")
    if isinstance(value, (int, str)):
        return Decimal(value.strip() if isinstance(value, str) else value)
    if isinstance(value, float):
        return Decimal(str(value))
    raise TypeError(f"cannot interpret {type(value).__name__} as an amount")


def parse_amount(value: Any) -> Optional[Decimal]:
    """Parse an instrument amount, returning None when it is unusable.

    Unusable means: missing, not a number, NaN/infinite, or negative.
    Callers treat None as "contributes 0 this month".
    """
    if value is None:
        return None
    try:
        amount = to_decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        return None
    if not amount.is_finite() or amount < 0:
        return None
    return amount


def round_money(value: Decimal) -> Decimal:
    """Round to cents, half away from zero."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def round_whole(value: Decimal) -> Decimal:
    return value.quantize(Decimal("1"), rounding=ROUND_HALF_UP)


# ---------------------------------------------------------------------------
# Calendar helpers
# ---------------------------------------------------------------------------

def start_of_month(d: date) -> date:
    return date(d.year, d.month, 1)


def end_of_month(d: date) -> date:
    return date(d.year, d.month, monthrange(d.year, d.month)[1])


def add_months(d: date, months: int) -> date:
    """Return the first day of the month *months* after *d*'s month."""
    total_month = d.month - 1 + months
    year = d.year + total_month // MONTHS_PER_YEAR
    month = total_month % MONTHS_PER_YEAR + 1
    return date(year, month, 1)


def months_between(start: date, target: date) -> int:
    """Whole calendar months from *start*'s month to *target*'s month.

    Can be negative if target is before start.
    """
    return (target.year - start.year) * MONTHS_PER_YEAR + (target.month - start.month)


def current_month(today: Optional[date] = None) -> date:
    """First day of the month containing *today* (default: today)."""
    return start_of_month(today or date.today())


def parse_year_month(value: str) -> date:
    """Parse "YYYY-MM" (or a full ISO date) into a first-of-month date."""
    text = value.strip()
    try:
        if len(text) == 7:
            year, month = text.split("-")
            return date(int(year), int(month), 1)
        return start_of_month(date.fromisoformat(text))
    except ValueError as exc:
        raise TimeIndexError(
            f"Expected a month as 'YYYY-MM' or 'YYYY-MM-DD', got {value!r}."
        ) from exc


def month_index(start: Optional[date], months: int) -> pd.DatetimeIndex:
    """Construct a first-of-month DatetimeIndex for *months* periods.

    If *start* is None, uses the current month as the first period.
    """
    if months <= 0:
        return pd.DatetimeIndex([], dtype="datetime64[ns]")
    first = current_month(start)
    return pd.date_range(start=pd.Timestamp(first), periods=months, freq="MS")


# ---------------------------------------------------------------------------
# Payload helpers
# ---------------------------------------------------------------------------

def _load_json_list(value: Any) -> Optional[list]:
    if value is None:
        return None
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            return None
    if isinstance(value, (list, tuple, set, frozenset)):
        return list(value)
    return None


def _is_month_number(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 1 <= value <= 12


def parse_custom_months(value: Any) -> FrozenSet[int]:
    """Return the selected calendar months, or an empty set.

    Accepts an iterable of ints or a JSON array string such as "[3, 9]".
    Anything unparsable yields the empty set: a custom schedule with no
    readable months pays nothing rather than falling back to monthly.
    """
    items = _load_json_list(value)
    if not items:
        return frozenset()
    return frozenset(item for item in items if _is_month_number(item))


def parse_bonus_groups(value: Any) -> Tuple[Tuple[int, Decimal], ...]:
    """Return ``(calendar_month, multiplier)`` pairs.

    Accepts pairs, dicts shaped ``{"month": 12, "amount": "1.5"}`` (the
    stored form) or ``{"month": 12, "multiplier": 1.5}``, or a JSON string of
    either. Entries with an out-of-range month or a non-positive or
    unparsable multiplier are dropped.
    """
    items = _load_json_list(value)
    if not items:
        return ()
    groups = []
    for item in items:
        if isinstance(item, dict):
            month = item.get("month")
            raw = item.get("amount", item.get("multiplier"))
        elif isinstance(item, (list, tuple)) and len(item) == 2:
            month, raw = item
        else:
            continue
        multiplier = parse_amount(raw)
        if _is_month_number(month) and multiplier is not None and multiplier > 0:
            groups.append((month, multiplier))
    return tuple(groups)

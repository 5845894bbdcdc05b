"""
Income instruments for CashProj.

Purpose
-------
Describes where the money comes from: salaries, allowances, rental income,
one-off windfalls. Each IncomeInstrument carries its own payment frequency,
active window and, where the statutory scheme applies, enough information to
derive its take-home amount for any month.

Key components
--------------
- IncomeInstrument:
    Frozen record of one income source, as loaded from storage. Amounts may
    arrive as raw strings; they are parsed (fail-soft) when projected.

- EffectiveTerms / resolve_effective_terms:
    Future-change splicing. An income may announce a scheduled change (new
    amount from a given month). For each target month this picks which
    (amount, window) pair applies. Before the change month the current terms
    are truncated to end at the change start, whatever the stored end date
    says; from the change month on the future terms apply.

- take_home_amount:
    Per-occurrence amount after the employee contribution. Future amounts
    are recomputed through the contribution scheme; current amounts use the
    stored net figure.

- allocate_income / bonus_for_month:
    Month allocation of the salary and of any scheduled bonus.

Example
-------
>>> from datetime import date
>>> from decimal import Decimal
>>> salary = IncomeInstrument(
...     amount=Decimal("5000"), frequency="monthly", start_date=date(2024, 1, 1),
...     subject_to_contribution=True, net_amount=Decimal("4000"),
...     change_flag=True, future_amount=Decimal("6000"),
...     future_start_date=date(2025, 7, 1),
... )
>>> allocate_income(salary, date(2025, 6, 1))
Decimal('4000')
>>> allocate_income(salary, date(2025, 7, 1))
Decimal('4800.00')
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Optional, Union

from .allocation import ZERO, allocate_amount, is_active_in_month, normalize_frequency
from .constants import CURRENT_RECURRING
from .contribution import (
    DEFAULT_SCHEME,
    ContributionScheme,
    compute_bonus_contribution,
    compute_contribution,
)
from .exceptions import ValidationError
from .utils import parse_amount, parse_bonus_groups, start_of_month

__all__ = [
    "IncomeInstrument",
    "EffectiveTerms",
    "BonusAllocation",
    "resolve_effective_terms",
    "take_home_amount",
    "allocate_income",
    "bonus_for_month",
]

logger = logging.getLogger(__name__)

AmountLike = Union[Decimal, int, float, str]


@dataclass(frozen=True)
class IncomeInstrument:
    """
    One income source with its schedule and contribution settings.

    Parameters
    ----------
    amount : Decimal-like
        Gross amount per occurrence. Parsed fail-soft: an unusable value
        makes the instrument contribute 0 rather than failing a projection.
    frequency : str
        monthly, quarterly, semi-yearly, yearly, custom or one-time.
    start_date : date
        First day the income applies.
    end_date : date, optional
        Last day the income applies. None means open-ended.
    custom_months : iterable of int or JSON string, optional
        Calendar months paid when frequency is "custom".
    lifecycle_category : str, default "current-recurring"
        Only "current-recurring" instruments are projected month by month.
    is_active : bool or None, default True
        Only an explicit False excludes the instrument.
    subject_to_contribution : bool, default False
        Whether the statutory contribution is deducted.
    net_amount : Decimal-like, optional
        Stored take-home for the *current* amount. Ignored for future terms.
    change_flag : bool, default False
        Whether a future change is scheduled.
    future_amount : Decimal-like, optional
        New gross amount. None keeps the current amount.
    future_start_date : date, optional
        Required when change_flag is set.
    future_end_date : date, optional
        End of the future terms. None means open-ended.
    age : int, optional
        Contributor age for contribution lookups; None uses the default age.
    account_for_bonus : bool, default False
        Whether bonus_groups are projected.
    bonus_groups : sequence or JSON string, optional
        (calendar month, multiplier of gross amount) pairs.
    name : str, default "income"
        Label used in logs and special-item markers.

    Raises
    ------
    ValidationError
        If change_flag is set without a future_start_date.
    """

    amount: AmountLike
    frequency: str
    start_date: date
    end_date: Optional[date] = None
    custom_months: Any = None
    lifecycle_category: Optional[str] = CURRENT_RECURRING
    is_active: Optional[bool] = True
    subject_to_contribution: bool = False
    net_amount: Optional[AmountLike] = None
    change_flag: bool = False
    future_amount: Optional[AmountLike] = None
    future_start_date: Optional[date] = None
    future_end_date: Optional[date] = None
    age: Optional[int] = None
    account_for_bonus: bool = False
    bonus_groups: Any = None
    name: str = "income"

    def __post_init__(self) -> None:
        if self.change_flag and self.future_start_date is None:
            raise ValidationError(
                f"Income {self.name!r}: change_flag is set but future_start_date "
                f"is missing. A scheduled change needs the month it takes effect."
            )

    @property
    def has_future_change(self) -> bool:
        return bool(self.change_flag) and self.future_start_date is not None

    @property
    def participates(self) -> bool:
        """Whether the monthly projection includes this instrument."""
        return self.lifecycle_category == CURRENT_RECURRING and self.is_active is not False

    @property
    def parsed_amount(self) -> Optional[Decimal]:
        return parse_amount(self.amount)


@dataclass(frozen=True)
class EffectiveTerms:
    """Amount and window in force for one target month."""
    amount: Optional[Decimal]
    start_date: date
    end_date: Optional[date]
    is_future_amount: bool


@dataclass(frozen=True)
class BonusAllocation:
    """Bonus landing in a month: multiplier, gross and take-home."""
    multiplier: Decimal
    gross_amount: Decimal
    net_amount: Decimal


def resolve_effective_terms(income: IncomeInstrument, target_month: date) -> EffectiveTerms:
    """
    Pick the (amount, window) pair in force for *target_month*.

    Without a scheduled change the instrument's own terms apply. With one:

    - target on or after the change month: future amount and future window.
    - target before it: current amount, with the window cut off at the
      future start date. The stored end_date is not consulted on this branch.

    A change that declares no future amount keeps the current amount.
    """
    if not income.has_future_change:
        return EffectiveTerms(
            amount=income.parsed_amount,
            start_date=income.start_date,
            end_date=income.end_date,
            is_future_amount=False,
        )

    future_start = income.future_start_date
    if start_of_month(target_month) >= start_of_month(future_start):
        if income.future_amount is None:
            amount = income.parsed_amount
        else:
            amount = parse_amount(income.future_amount)
        return EffectiveTerms(
            amount=amount,
            start_date=future_start,
            end_date=income.future_end_date,
            is_future_amount=True,
        )

    return EffectiveTerms(
        amount=income.parsed_amount,
        start_date=income.start_date,
        end_date=future_start,
        is_future_amount=False,
    )


def take_home_amount(
    income: IncomeInstrument,
    terms: EffectiveTerms,
    *,
    scheme: ContributionScheme = DEFAULT_SCHEME,
) -> Optional[Decimal]:
    """
    Per-occurrence amount after the employee contribution.

    Returns None when the effective gross is unusable.
    """
    if terms.amount is None:
        return None
    if not income.subject_to_contribution:
        return terms.amount
    if terms.is_future_amount:
        return compute_contribution(terms.amount, income.age, scheme=scheme).net_take_home
    stored_net = parse_amount(income.net_amount)
    return stored_net if stored_net is not None else terms.amount


def allocate_income(
    income: IncomeInstrument,
    target_month: date,
    *,
    scheme: ContributionScheme = DEFAULT_SCHEME,
) -> Decimal:
    """Take-home salary attributed to *target_month* (bonus excluded)."""
    terms = resolve_effective_terms(income, target_month)
    amount = take_home_amount(income, terms, scheme=scheme)
    if amount is None:
        return ZERO
    return allocate_amount(
        amount,
        income.frequency,
        terms.start_date,
        terms.end_date,
        income.custom_months,
        target_month,
    )


def bonus_for_month(
    income: IncomeInstrument,
    target_month: date,
    *,
    scheme: ContributionScheme = DEFAULT_SCHEME,
) -> Optional[BonusAllocation]:
    """
    Bonus paid in *target_month*, if any.

    The bonus is a multiple of the current gross amount, paid in the listed
    calendar month while the instrument's own window is active. When the
    income is contribution-subject the bonus employee share (annual-ceiling
    rule) is deducted.
    """
    if not income.account_for_bonus:
        return None
    if not is_active_in_month(income.start_date, income.end_date, target_month):
        return None

    groups = parse_bonus_groups(income.bonus_groups)
    multiplier = next((m for month, m in groups if month == target_month.month), None)
    if multiplier is None:
        return None

    gross_salary = income.parsed_amount
    if gross_salary is None:
        return None
    gross_bonus = gross_salary * multiplier

    net_bonus = gross_bonus
    if income.subject_to_contribution:
        bonus_cpf = compute_bonus_contribution(gross_salary, gross_bonus, income.age, scheme=scheme)
        net_bonus = gross_bonus - bonus_cpf.employee_amount

    logger.debug(
        "Bonus for %s in %s: %sx gross=%s net=%s",
        income.name, target_month.strftime("%Y-%m"), multiplier, gross_bonus, net_bonus,
    )
    return BonusAllocation(multiplier=multiplier, gross_amount=gross_bonus, net_amount=net_bonus)


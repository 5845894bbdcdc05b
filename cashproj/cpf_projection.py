"""
Contribution account projection for CashProj.

Purpose
-------
Projects how the statutory contribution accumulates in each contributor's
sub-accounts (OA/SA/MA under the default scheme) month by month, and what
the household holds in total. Housing loans serviced from the first
sub-account are drawn down against it while they remain outstanding.

Key components
--------------
- ContributorProfile:
    One household member: gross monthly wage, date of birth or current age,
    and any bonus schedule.

- contributors_from_incomes:
    Builds profiles from contribution-subject monthly incomes, one per
    income name.

- PropertyAsset / LoanDeduction / extract_loan_deductions:
    Property records become monthly deductions with a finite run length
    (ceil(outstanding / monthly payment) months).

- project_contribution_accounts:
    Month 0 is the starting point with no contribution. For months 1..N each
    contributor's wage (capped at the ordinary ceiling) is multiplied by the
    combined employer and employee rate for their age that month and split
    by the allocation shares. Bonus months add the bonus contribution. Loan
    deductions are split evenly across contributors and taken from the first
    sub-account only.

Rounding
--------
Running totals are kept unrounded; every published figure (per contributor
and household, monthly and cumulative) is rounded to whole currency units.
Household figures are rounded sums, not sums of rounded figures.

Example
-------
>>> from datetime import date
>>> member = ContributorProfile("m1", "Alex", monthly_gross_income="6000", current_age=30)
>>> points = project_contribution_accounts([member], 12, start=date(2025, 1, 1))
>>> points[1].household.monthly_total
Decimal('2220')
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from .allocation import ZERO, normalize_frequency
from .constants import DEFAULT_CONTRIBUTOR_AGE, MONTH_LABEL_FORMAT, MONTHS_PER_YEAR
from .contribution import (
    DEFAULT_SCHEME,
    ContributionScheme,
    allocation_for_age,
    compute_bonus_contribution,
    rates_for_age,
)
from .exceptions import ValidationError
from .income import IncomeInstrument
from .utils import add_months, current_month, parse_amount, parse_bonus_groups, round_whole

__all__ = [
    "ContributorProfile",
    "PropertyAsset",
    "LoanDeduction",
    "AccountSnapshot",
    "ContributionAccountPoint",
    "extract_loan_deductions",
    "contributors_from_incomes",
    "age_at_month",
    "project_contribution_accounts",
]

logger = logging.getLogger(__name__)

AmountLike = Union[Decimal, int, float, str]


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ContributorProfile:
    """
    One contributing household member.

    Parameters
    ----------
    contributor_id : str
        Stable key for the member in projection output.
    name : str
        Display name.
    monthly_gross_income : Decimal-like
        Ordinary monthly wage. Unusable values count as 0.
    date_of_birth : date, optional
        Preferred source of the age used for rate lookups.
    current_age : int, optional
        Used when date_of_birth is unknown; ages one year every 12 months.
    bonus_schedule : sequence or JSON string, optional
        (calendar month, multiplier) pairs, same shapes as income bonus groups.
    """

    contributor_id: str
    name: str
    monthly_gross_income: AmountLike
    date_of_birth: Optional[date] = None
    current_age: Optional[int] = None
    bonus_schedule: Any = None


@dataclass(frozen=True)
class PropertyAsset:
    """Property record as far as contribution-funded loan servicing goes."""
    name: str
    monthly_loan_payment: AmountLike
    outstanding_loan: AmountLike
    paid_by_contribution: Optional[bool] = False
    is_active: Optional[bool] = True


@dataclass(frozen=True)
class LoanDeduction:
    monthly_amount: Decimal
    remaining_months: int

    def __post_init__(self) -> None:
        if self.monthly_amount < 0:
            raise ValidationError(f"monthly_amount must be non-negative, got {self.monthly_amount}.")
        if self.remaining_months < 0:
            raise ValidationError(f"remaining_months must be non-negative, got {self.remaining_months}.")


def extract_loan_deductions(property_assets: Sequence[PropertyAsset]) -> List[LoanDeduction]:
    """
    Loan deductions for active, contribution-funded properties.

    An asset is kept only with a positive monthly payment and a positive
    number of remaining months; unusable amounts count as 0.
    """
    deductions = []
    for asset in property_assets:
        if not asset.paid_by_contribution or asset.is_active is False:
            continue
        payment = parse_amount(asset.monthly_loan_payment) or ZERO
        outstanding = parse_amount(asset.outstanding_loan) or ZERO
        remaining = math.ceil(outstanding / payment) if payment > 0 else 0
        if payment > 0 and remaining > 0:
            deductions.append(LoanDeduction(monthly_amount=payment, remaining_months=remaining))
    return deductions


def contributors_from_incomes(
    incomes: Sequence[IncomeInstrument],
    dates_of_birth: Optional[Mapping[str, date]] = None,
) -> List[ContributorProfile]:
    """
    Contributor profiles from contribution-subject monthly incomes.

    Incomes are grouped by name, in first-seen order: each group becomes one
    contributor whose wage is the sum of its usable amounts. The age and the
    bonus schedule come from the first income in the group that has one;
    bonus groups count only where ``account_for_bonus`` is set.

    Parameters
    ----------
    incomes : sequence of IncomeInstrument
        Only participating, contribution-subject, monthly incomes are used.
    dates_of_birth : mapping of str to date, optional
        Date of birth by income name.

    Returns
    -------
    list of ContributorProfile
    """
    dates_of_birth = dates_of_birth or {}
    groups: Dict[str, List[IncomeInstrument]] = {}
    for income in incomes:
        if not (income.participates and income.subject_to_contribution):
            continue
        if normalize_frequency(income.frequency) != "monthly":
            continue
        groups.setdefault(income.name, []).append(income)

    contributors = []
    for name, members in groups.items():
        gross = sum((inc.parsed_amount or ZERO for inc in members), ZERO)
        age = next((inc.age for inc in members if inc.age is not None), None)
        bonus = next(
            (inc.bonus_groups for inc in members
             if inc.account_for_bonus and parse_bonus_groups(inc.bonus_groups)),
            None,
        )
        contributors.append(
            ContributorProfile(
                contributor_id=name,
                name=name,
                monthly_gross_income=gross,
                date_of_birth=dates_of_birth.get(name),
                current_age=age,
                bonus_schedule=bonus,
            )
        )
    return contributors


# ---------------------------------------------------------------------------
# Outputs
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AccountSnapshot:
    """Monthly and cumulative sub-account figures, whole currency units."""
    monthly_total: Decimal
    monthly_accounts: Mapping[str, Decimal]
    monthly_loan_deduction: Decimal
    cumulative_total: Decimal
    cumulative_accounts: Mapping[str, Decimal]
    cumulative_loan_deduction: Decimal

    def as_dict(self) -> Dict[str, Any]:
        return {
            "monthly_total": str(self.monthly_total),
            "monthly_accounts": {k: str(v) for k, v in self.monthly_accounts.items()},
            "monthly_loan_deduction": str(self.monthly_loan_deduction),
            "cumulative_total": str(self.cumulative_total),
            "cumulative_accounts": {k: str(v) for k, v in self.cumulative_accounts.items()},
            "cumulative_loan_deduction": str(self.cumulative_loan_deduction),
        }


@dataclass(frozen=True)
class ContributionAccountPoint:
    month: date
    month_index: int
    month_label: str
    members: Mapping[str, AccountSnapshot]
    household: AccountSnapshot

    def as_dict(self) -> Dict[str, Any]:
        return {
            "month": self.month.isoformat(),
            "month_index": self.month_index,
            "month_label": self.month_label,
            "members": {k: v.as_dict() for k, v in self.members.items()},
            "household": self.household.as_dict(),
        }


@dataclass
class _Tally:
    """Unrounded running figures for one contributor or the household."""
    total: Decimal = ZERO
    accounts: Dict[str, Decimal] = field(default_factory=dict)
    loan_deduction: Decimal = ZERO

    def add(self, total: Decimal, accounts: Mapping[str, Decimal], loan_deduction: Decimal) -> None:
        self.total += total
        for name, value in accounts.items():
            self.accounts[name] = self.accounts.get(name, ZERO) + value
        self.loan_deduction += loan_deduction


def _snapshot(monthly: _Tally, cumulative: _Tally) -> AccountSnapshot:
    return AccountSnapshot(
        monthly_total=round_whole(monthly.total),
        monthly_accounts={k: round_whole(v) for k, v in monthly.accounts.items()},
        monthly_loan_deduction=round_whole(monthly.loan_deduction),
        cumulative_total=round_whole(cumulative.total),
        cumulative_accounts={k: round_whole(v) for k, v in cumulative.accounts.items()},
        cumulative_loan_deduction=round_whole(cumulative.loan_deduction),
    )


# ---------------------------------------------------------------------------
# Projection
# ---------------------------------------------------------------------------

def age_at_month(
    date_of_birth: Optional[date],
    current_age: Optional[int],
    offset: int,
    start: Optional[date] = None,
) -> int:
    """
    Contributor age on the first day of the month *offset* months from *start*.

    Without a date of birth the current age (default 30) is advanced one
    year per twelve months of offset.
    """
    if date_of_birth is not None:
        ref = add_months(current_month(start), offset)
        age = ref.year - date_of_birth.year
        if (ref.month, ref.day) < (date_of_birth.month, date_of_birth.day):
            age -= 1
        return age
    base = DEFAULT_CONTRIBUTOR_AGE if current_age is None else current_age
    return base + offset // MONTHS_PER_YEAR


def project_contribution_accounts(
    contributors: Sequence[ContributorProfile],
    total_months: int,
    loan_deductions: Sequence[LoanDeduction] = (),
    *,
    start: Optional[date] = None,
    scheme: ContributionScheme = DEFAULT_SCHEME,
) -> List[ContributionAccountPoint]:
    """
    Project sub-account balances for a household.

    Parameters
    ----------
    contributors : sequence of ContributorProfile
    total_months : int
        Months to project after the starting point. Must be >= 0.
    loan_deductions : sequence of LoanDeduction, optional
        Each active deduction (month index <= remaining_months) is split
        evenly across contributors and charged to the first sub-account.
    start : date, optional
        Any day in month 0. Defaults to today.
    scheme : ContributionScheme, default DEFAULT_SCHEME

    Returns
    -------
    list of ContributionAccountPoint
        ``total_months + 1`` points; point 0 holds zeros.

    Raises
    ------
    ValidationError
        If total_months is negative.
    """
    if total_months < 0:
        raise ValidationError(f"total_months must be non-negative, got {total_months}.")

    origin = current_month(start)
    member_count = len(contributors)
    incomes: Dict[str, Decimal] = {}
    schedules = {}
    for member in contributors:
        gross = parse_amount(member.monthly_gross_income)
        if gross is None:
            logger.warning(
                "Contributor %r has unusable monthly income %r; projecting 0.",
                member.name, member.monthly_gross_income,
            )
            gross = ZERO
        incomes[member.contributor_id] = gross
        schedules[member.contributor_id] = dict(parse_bonus_groups(member.bonus_schedule))

    cumulative = {member.contributor_id: _Tally() for member in contributors}
    logger.debug(
        "Projecting contribution accounts: %d contributors, %d months, %d loan deductions",
        member_count, total_months, len(loan_deductions),
    )

    points: List[ContributionAccountPoint] = []
    for offset in range(total_months + 1):
        target = add_months(origin, offset)
        household_monthly = _Tally()
        household_cumulative = _Tally()
        members: Dict[str, AccountSnapshot] = {}

        for member in contributors:
            key = member.contributor_id
            age = age_at_month(member.date_of_birth, member.current_age, offset, start=origin)
            shares = allocation_for_age(age, scheme=scheme)
            monthly = _Tally(accounts={name: ZERO for name in shares})

            if offset > 0:
                gross = incomes[key]
                applicable = min(gross, scheme.ordinary_wage_ceiling)
                contribution = applicable * rates_for_age(age, scheme=scheme).total_rate
                split = {name: contribution * share for name, share in shares.items()}
                monthly = _Tally(total=sum(split.values(), ZERO), accounts=split)

                multiplier = schedules[key].get(target.month)
                if multiplier is not None:
                    bonus = compute_bonus_contribution(gross, gross * multiplier, age, scheme=scheme)
                    monthly.add(bonus.total_amount, bonus.sub_accounts, ZERO)

                deduction = sum(
                    (d.monthly_amount / member_count for d in loan_deductions
                     if offset <= d.remaining_months),
                    ZERO,
                )
                if deduction:
                    first_account = next(iter(shares))
                    monthly.add(-deduction, {first_account: -deduction}, deduction)

            cumulative[key].add(monthly.total, monthly.accounts, monthly.loan_deduction)
            members[key] = _snapshot(monthly, cumulative[key])
            household_monthly.add(monthly.total, monthly.accounts, monthly.loan_deduction)
            household_cumulative.add(
                cumulative[key].total, cumulative[key].accounts, cumulative[key].loan_deduction
            )

        points.append(
            ContributionAccountPoint(
                month=target,
                month_index=offset,
                month_label=target.strftime(MONTH_LABEL_FORMAT),
                members=members,
                household=_snapshot(household_monthly, household_cumulative),
            )
        )

    return points

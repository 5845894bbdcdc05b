"""
Contribution scheme module for CashProj.

Purpose
-------
Computes the statutory payroll contribution (CPF-style) on a gross wage:
an employer share and an employee share, each a fixed rate of the wage up
to a monthly ceiling, with rates tiered by the contributor's age. The
combined contribution is then split across named sub-accounts using a
second age-tiered table.

This module is callable on its own (take-home previews) as well as from the
monthly projection.

Key components
--------------
- RateBand / AllocationBand:
    One row of the age-band tables. ``max_age`` is inclusive; ``None`` marks
    the catch-all band for every age above the last threshold.

- ContributionScheme:
    Frozen bundle of both tables and the two wage ceilings. DEFAULT_SCHEME
    carries the current statutory figures.

- compute_contribution:
    Monthly ordinary-wage contribution and net take-home.

- compute_sub_account_allocation:
    Split of a total contribution into sub-accounts (OA/SA/MA).

- compute_bonus_contribution:
    Contribution on a bonus, limited by what remains of the annual wage
    ceiling after twelve months of ordinary wages.

Rounding
--------
Each published figure is rounded to cents independently (half away from
zero). ``net_take_home`` subtracts the rounded employee share from the
*uncapped* gross: only the contribution base is ceiling-limited.

Example
-------
>>> from decimal import Decimal
>>> result = compute_contribution(Decimal("10000"), age=30)
>>> result.applicable_amount, result.employee_amount, result.net_take_home
(Decimal('8000'), Decimal('1600.00'), Decimal('8400.00'))
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Mapping, Optional, Sequence, Tuple, TypeVar, Union

from .constants import (
    ANNUAL_WAGE_CEILING,
    DEFAULT_CONTRIBUTOR_AGE,
    MONTHS_PER_YEAR,
    ORDINARY_WAGE_CEILING,
)
from .exceptions import ConfigurationError, ValidationError
from .types import BonusContributionDict, ContributionDict
from .utils import round_money, to_decimal

__all__ = [
    "RateBand",
    "AllocationBand",
    "ContributionScheme",
    "ContributionResult",
    "BonusContributionResult",
    "DEFAULT_RATE_BANDS",
    "DEFAULT_ALLOCATION_BANDS",
    "DEFAULT_SCHEME",
    "rates_for_age",
    "allocation_for_age",
    "compute_contribution",
    "compute_sub_account_allocation",
    "compute_bonus_contribution",
]

AmountLike = Union[Decimal, int, float, str]


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RateBand:
    """Employer/employee rates for ages up to ``max_age`` (inclusive)."""
    max_age: Optional[int]
    employer_rate: Decimal
    employee_rate: Decimal

    @property
    def total_rate(self) -> Decimal:
        return self.employer_rate + self.employee_rate


@dataclass(frozen=True)
class AllocationBand:
    """Sub-account shares for ages up to ``max_age`` (inclusive).

    Shares sum to 1.0 by construction; this is not re-checked here.
    """
    max_age: Optional[int]
    shares: Mapping[str, Decimal]


DEFAULT_RATE_BANDS: Tuple[RateBand, ...] = (
    RateBand(55, Decimal("0.17"), Decimal("0.20")),
    RateBand(60, Decimal("0.155"), Decimal("0.17")),
    RateBand(65, Decimal("0.12"), Decimal("0.115")),
    RateBand(70, Decimal("0.09"), Decimal("0.075")),
    RateBand(None, Decimal("0.075"), Decimal("0.05")),
)

DEFAULT_ALLOCATION_BANDS: Tuple[AllocationBand, ...] = (
    AllocationBand(35, {"oa": Decimal("0.6217"), "sa": Decimal("0.1622"), "ma": Decimal("0.2162")}),
    AllocationBand(45, {"oa": Decimal("0.5676"), "sa": Decimal("0.2162"), "ma": Decimal("0.2162")}),
    AllocationBand(50, {"oa": Decimal("0.5135"), "sa": Decimal("0.2703"), "ma": Decimal("0.2162")}),
    AllocationBand(55, {"oa": Decimal("0.4324"), "sa": Decimal("0.3514"), "ma": Decimal("0.2162")}),
    AllocationBand(60, {"oa": Decimal("0.4308"), "sa": Decimal("0.2462"), "ma": Decimal("0.3231")}),
    AllocationBand(65, {"oa": Decimal("0.3404"), "sa": Decimal("0.1489"), "ma": Decimal("0.5106")}),
    AllocationBand(None, {"oa": Decimal("0.3333"), "sa": Decimal("0.0909"), "ma": Decimal("0.5758")}),
)


def _check_bands(name: str, bands: Sequence[Union[RateBand, AllocationBand]]) -> None:
    if not bands:
        raise ConfigurationError(f"{name} must contain at least one band.")
    previous: Optional[int] = None
    for position, band in enumerate(bands):
        if band.max_age is None:
            if position != len(bands) - 1:
                raise ConfigurationError(
                    f"{name}: only the last band may be the catch-all (max_age=None)."
                )
            continue
        if previous is not None and band.max_age <= previous:
            raise ConfigurationError(
                f"{name} must be ordered ascending by max_age, "
                f"got {band.max_age} after {previous}."
            )
        previous = band.max_age


@dataclass(frozen=True)
class ContributionScheme:
    """
    Complete parameter set for the contribution scheme.

    Parameters
    ----------
    rate_bands : tuple of RateBand
        Employer/employee rates by age, ascending ``max_age``.
    allocation_bands : tuple of AllocationBand
        Sub-account shares by age, ascending ``max_age``.
    ordinary_wage_ceiling : Decimal, default 8000
        Monthly wage above which no contribution is levied.
    annual_wage_ceiling : Decimal, default 102000
        Yearly cap on ordinary wages plus bonuses subject to contribution.

    Raises
    ------
    ConfigurationError
        If a table is empty, out of order, or a ceiling is negative.
    """
    rate_bands: Tuple[RateBand, ...] = DEFAULT_RATE_BANDS
    allocation_bands: Tuple[AllocationBand, ...] = DEFAULT_ALLOCATION_BANDS
    ordinary_wage_ceiling: Decimal = ORDINARY_WAGE_CEILING
    annual_wage_ceiling: Decimal = ANNUAL_WAGE_CEILING

    def __post_init__(self) -> None:
        _check_bands("rate_bands", self.rate_bands)
        _check_bands("allocation_bands", self.allocation_bands)
        if self.ordinary_wage_ceiling < 0 or self.annual_wage_ceiling < 0:
            raise ConfigurationError("wage ceilings must be non-negative.")


DEFAULT_SCHEME = ContributionScheme()


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ContributionResult:
    """Breakdown of one month's ordinary-wage contribution."""
    gross_amount: Decimal
    applicable_amount: Decimal
    employee_amount: Decimal
    employer_amount: Decimal
    total_amount: Decimal
    net_take_home: Decimal

    def as_dict(self) -> ContributionDict:
        return {
            "gross_amount": str(self.gross_amount),
            "applicable_amount": str(self.applicable_amount),
            "employee_amount": str(self.employee_amount),
            "employer_amount": str(self.employer_amount),
            "total_amount": str(self.total_amount),
            "net_take_home": str(self.net_take_home),
        }


@dataclass(frozen=True)
class BonusContributionResult:
    """Breakdown of the contribution levied on a bonus."""
    bonus_amount: Decimal
    annual_ordinary_base: Decimal
    remaining_annual_ceiling: Decimal
    applicable_amount: Decimal
    employee_amount: Decimal
    employer_amount: Decimal
    total_amount: Decimal
    sub_accounts: Dict[str, Decimal] = field(default_factory=dict)

    def as_dict(self) -> BonusContributionDict:
        return {
            "bonus_amount": str(self.bonus_amount),
            "annual_ordinary_base": str(self.annual_ordinary_base),
            "remaining_annual_ceiling": str(self.remaining_annual_ceiling),
            "applicable_amount": str(self.applicable_amount),
            "employee_amount": str(self.employee_amount),
            "employer_amount": str(self.employer_amount),
            "total_amount": str(self.total_amount),
            "sub_accounts": {k: str(v) for k, v in self.sub_accounts.items()},
        }


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------

BandT = TypeVar("BandT", RateBand, AllocationBand)


def _band_for_age(bands: Sequence[BandT], age: int) -> BandT:
    for band in bands:
        if band.max_age is None or age <= band.max_age:
            return band
    # Ages past every threshold land in the final band
    return bands[-1]


def _resolve_age(age: Optional[int]) -> int:
    return DEFAULT_CONTRIBUTOR_AGE if age is None else int(age)


def rates_for_age(age: Optional[int] = DEFAULT_CONTRIBUTOR_AGE, *, scheme: ContributionScheme = DEFAULT_SCHEME) -> RateBand:
    """Rate band applying to *age* (None → DEFAULT_CONTRIBUTOR_AGE)."""
    return _band_for_age(scheme.rate_bands, _resolve_age(age))


def allocation_for_age(
    age: Optional[int] = DEFAULT_CONTRIBUTOR_AGE,
    *,
    scheme: ContributionScheme = DEFAULT_SCHEME,
) -> Mapping[str, Decimal]:
    """Sub-account shares applying to *age* (None → DEFAULT_CONTRIBUTOR_AGE)."""
    return _band_for_age(scheme.allocation_bands, _resolve_age(age)).shares


# ---------------------------------------------------------------------------
# Calculations
# ---------------------------------------------------------------------------

def compute_contribution(
    gross_amount: AmountLike,
    age: Optional[int] = DEFAULT_CONTRIBUTOR_AGE,
    *,
    scheme: ContributionScheme = DEFAULT_SCHEME,
) -> ContributionResult:
    """
    Contribution on one month of ordinary wages.

    Parameters
    ----------
    gross_amount : Decimal-like
        Monthly gross wage. Must be non-negative.
    age : int, optional
        Contributor age. None (or omitted) assumes DEFAULT_CONTRIBUTOR_AGE.
    scheme : ContributionScheme, default DEFAULT_SCHEME

    Returns
    -------
    ContributionResult
        ``applicable_amount = min(gross, ceiling)``; employee and employer
        shares rounded to cents; ``total = employee + employer``;
        ``net_take_home = round(gross - employee)``.

    Raises
    ------
    ValidationError
        If gross_amount is negative.
    """
    gross = to_decimal(gross_amount)
    if gross < 0:
        raise ValidationError(f"gross_amount must be non-negative (got {gross}).")

    band = rates_for_age(age, scheme=scheme)
    applicable = min(gross, scheme.ordinary_wage_ceiling)

    employee = round_money(applicable * band.employee_rate)
    employer = round_money(applicable * band.employer_rate)

    return ContributionResult(
        gross_amount=gross,
        applicable_amount=applicable,
        employee_amount=employee,
        employer_amount=employer,
        total_amount=employee + employer,
        net_take_home=round_money(gross - employee),
    )


def compute_sub_account_allocation(
    total_amount: AmountLike,
    age: Optional[int] = DEFAULT_CONTRIBUTOR_AGE,
    *,
    scheme: ContributionScheme = DEFAULT_SCHEME,
) -> Dict[str, Decimal]:
    """
    Split *total_amount* across sub-accounts by the age band's shares.

    Each share is rounded to cents on its own. The parts are NOT reconciled
    back to *total_amount*: a residual cent either way is a known, accepted
    limitation kept for consistency with figures already reported.
    """
    total = to_decimal(total_amount)
    shares = allocation_for_age(age, scheme=scheme)
    return {name: round_money(total * share) for name, share in shares.items()}


def compute_bonus_contribution(
    monthly_income: AmountLike,
    bonus_amount: AmountLike,
    age: Optional[int] = DEFAULT_CONTRIBUTOR_AGE,
    *,
    scheme: ContributionScheme = DEFAULT_SCHEME,
) -> BonusContributionResult:
    """
    Contribution on a bonus under the annual wage ceiling.

    Twelve months of ordinary wages (each capped at the ordinary ceiling)
    use up part of the annual ceiling; only the bonus portion that fits in
    what remains attracts contribution.

    Parameters
    ----------
    monthly_income : Decimal-like
        Monthly ordinary gross wage.
    bonus_amount : Decimal-like
        Gross bonus paid.
    age : int, optional
        Contributor age (None → DEFAULT_CONTRIBUTOR_AGE).
    scheme : ContributionScheme, default DEFAULT_SCHEME

    Returns
    -------
    BonusContributionResult
    """
    monthly = to_decimal(monthly_income)
    bonus = to_decimal(bonus_amount)
    if monthly < 0 or bonus < 0:
        raise ValidationError("monthly_income and bonus_amount must be non-negative.")

    annual_base = min(monthly, scheme.ordinary_wage_ceiling) * MONTHS_PER_YEAR
    remaining = max(Decimal("0"), scheme.annual_wage_ceiling - annual_base)
    applicable = min(bonus, remaining)

    band = rates_for_age(age, scheme=scheme)
    employee_raw = applicable * band.employee_rate
    employer_raw = applicable * band.employer_rate
    total_raw = employee_raw + employer_raw

    shares = allocation_for_age(age, scheme=scheme)
    return BonusContributionResult(
        bonus_amount=bonus,
        annual_ordinary_base=annual_base,
        remaining_annual_ceiling=remaining,
        applicable_amount=applicable,
        employee_amount=round_money(employee_raw),
        employer_amount=round_money(employer_raw),
        total_amount=round_money(total_raw),
        sub_accounts={name: round_money(total_raw * share) for name, share in shares.items()},
    )

"""
Configuration management module for CashProj.

Purpose
-------
Pydantic models for everything read from files or the environment: the
contribution scheme tables, income and expense instrument records, the
portfolio file bundling them, and application settings.

The engine itself works on frozen dataclasses (IncomeInstrument,
ExpenseInstrument, ContributionScheme). These models are the validated
boundary in front of it; each exposes a ``to_*`` conversion.

Design Principles
-----------------
- Type-safe: Pydantic enforces types and validates ranges
- Immutable: Frozen models prevent accidental mutation
- Strict at the boundary: unknown keys and unknown frequencies are rejected
- Amounts stay strings: stored amounts keep their exact text and are
  parsed fail-soft by the engine

Example
-------
>>> from cashproj.config import IncomeInstrumentConfig
>>> cfg = IncomeInstrumentConfig(name="Salary", amount=5000, frequency="monthly",
...                              start_date="2025-01-01")
>>> cfg.amount
'5000'
>>> income = cfg.to_instrument()
>>> settings = AppSettings()
>>> settings.default_horizon_months
12
"""

from __future__ import annotations

import datetime
from decimal import Decimal
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import (
    ANNUAL_WAGE_CEILING,
    CURRENT_RECURRING,
    DEFAULT_CONTRIBUTOR_AGE,
    DEFAULT_HORIZON_MONTHS,
    FREQUENCIES,
    LIFECYCLE_CATEGORIES,
    ORDINARY_WAGE_CEILING,
)
from .contribution import (
    DEFAULT_ALLOCATION_BANDS,
    DEFAULT_RATE_BANDS,
    AllocationBand,
    ContributionScheme,
    RateBand,
)
from .expenses import ExpenseInstrument
from .income import IncomeInstrument

__all__ = [
    "RateBandConfig",
    "AllocationBandConfig",
    "ContributionSchemeConfig",
    "BonusGroupConfig",
    "IncomeInstrumentConfig",
    "ExpenseInstrumentConfig",
    "PortfolioConfig",
    "AppSettings",
]

FrequencyName = Literal[FREQUENCIES]
LifecycleName = Literal[LIFECYCLE_CATEGORIES]

SHARE_TOLERANCE = Decimal("0.001")


def _amount_text(v):
    """Keep amounts as text; numbers are converted without float noise."""
    if v is None or isinstance(v, str):
        return v
    if isinstance(v, bool):
        raise ValueError("amount must be a number or numeric string, not a boolean")
    if isinstance(v, (int, float, Decimal)):
        return str(v)
    raise ValueError(f"amount must be a number or numeric string, got {type(v).__name__}")


# ---------------------------------------------------------------------------
# Contribution Scheme Configuration
# ---------------------------------------------------------------------------

class RateBandConfig(BaseModel):
    """Employer/employee rates for ages up to ``max_age`` (None = all older ages)."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_age: Optional[int] = Field(default=None, ge=0, le=150, description="Inclusive upper age")
    employer_rate: Decimal = Field(ge=0, le=1, description="Employer rate (fraction)")
    employee_rate: Decimal = Field(ge=0, le=1, description="Employee rate (fraction)")

    def to_band(self) -> RateBand:
        return RateBand(self.max_age, self.employer_rate, self.employee_rate)


class AllocationBandConfig(BaseModel):
    """Sub-account shares for ages up to ``max_age`` (None = all older ages)."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_age: Optional[int] = Field(default=None, ge=0, le=150, description="Inclusive upper age")
    shares: Dict[str, Decimal] = Field(description="Share of the contribution per sub-account")

    @field_validator("shares")
    @classmethod
    def validate_shares(cls, v):
        """Ensure shares are non-negative and sum to 1."""
        if not v:
            raise ValueError("shares must name at least one sub-account")
        if any(share < 0 for share in v.values()):
            raise ValueError("shares must be non-negative")
        total = sum(v.values(), Decimal("0"))
        if abs(total - 1) > SHARE_TOLERANCE:
            raise ValueError(f"shares must sum to 1, got {total}")
        return v

    def to_band(self) -> AllocationBand:
        return AllocationBand(self.max_age, dict(self.shares))


def _check_band_order(bands) -> None:
    if not bands:
        raise ValueError("at least one band is required")
    for band in bands[:-1]:
        if band.max_age is None:
            raise ValueError("only the last band may omit max_age")
    previous = None
    for band in bands:
        if band.max_age is None:
            continue
        if previous is not None and band.max_age <= previous:
            raise ValueError(f"bands must ascend by max_age ({band.max_age} after {previous})")
        previous = band.max_age


class ContributionSchemeConfig(BaseModel):
    """
    Contribution scheme parameters.

    Attributes
    ----------
    rate_bands : list of RateBandConfig
        Age-tiered employer/employee rates, ascending, catch-all last.
    allocation_bands : list of AllocationBandConfig
        Age-tiered sub-account shares, ascending, catch-all last.
    ordinary_wage_ceiling : Decimal
        Monthly wage ceiling.
    annual_wage_ceiling : Decimal
        Annual ceiling on ordinary wages plus bonuses.

    Examples
    --------
    >>> cfg = ContributionSchemeConfig(ordinary_wage_ceiling=7400)
    >>> cfg.to_scheme().ordinary_wage_ceiling
    Decimal('7400')
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    rate_bands: List[RateBandConfig] = Field(
        default_factory=lambda: [
            RateBandConfig(max_age=b.max_age, employer_rate=b.employer_rate, employee_rate=b.employee_rate)
            for b in DEFAULT_RATE_BANDS
        ],
        description="Contribution rates by age"
    )
    allocation_bands: List[AllocationBandConfig] = Field(
        default_factory=lambda: [
            AllocationBandConfig(max_age=b.max_age, shares=dict(b.shares))
            for b in DEFAULT_ALLOCATION_BANDS
        ],
        description="Sub-account shares by age"
    )
    ordinary_wage_ceiling: Decimal = Field(
        default=ORDINARY_WAGE_CEILING,
        ge=0,
        description="Monthly ordinary wage ceiling"
    )
    annual_wage_ceiling: Decimal = Field(
        default=ANNUAL_WAGE_CEILING,
        ge=0,
        description="Annual wage ceiling"
    )

    @field_validator("rate_bands", "allocation_bands")
    @classmethod
    def validate_band_order(cls, v):
        _check_band_order(v)
        return v

    def to_scheme(self) -> ContributionScheme:
        return ContributionScheme(
            rate_bands=tuple(b.to_band() for b in self.rate_bands),
            allocation_bands=tuple(b.to_band() for b in self.allocation_bands),
            ordinary_wage_ceiling=self.ordinary_wage_ceiling,
            annual_wage_ceiling=self.annual_wage_ceiling,
        )


# ---------------------------------------------------------------------------
# Instrument Configuration
# ---------------------------------------------------------------------------

class BonusGroupConfig(BaseModel):
    """A bonus paid in calendar ``month`` as ``multiplier`` x gross salary."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    month: int = Field(ge=1, le=12, description="Calendar month (1-12)")
    multiplier: Decimal = Field(gt=0, description="Multiple of gross monthly salary")


class IncomeInstrumentConfig(BaseModel):
    """
    Income record as stored in a portfolio file.

    Amounts are kept as strings. An unparsable amount is accepted here and
    contributes 0 when projected.

    Examples
    --------
    >>> cfg = IncomeInstrumentConfig(
    ...     name="Salary", amount="5000", frequency="monthly",
    ...     start_date="2024-01-01", change_flag=True,
    ...     future_amount="6000", future_start_date="2025-07-01",
    ... )
    >>> cfg.to_instrument().has_future_change
    True
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(default="income", min_length=1, max_length=100, description="Display name")
    amount: str = Field(description="Gross amount per occurrence")
    frequency: FrequencyName = Field(description="Payment frequency")
    start_date: datetime.date = Field(description="First day the income applies")
    end_date: Optional[datetime.date] = Field(default=None, description="Last day (inclusive)")
    custom_months: Optional[List[int]] = Field(default=None, description="Months paid (custom frequency)")
    lifecycle_category: LifecycleName = Field(default=CURRENT_RECURRING)
    is_active: Optional[bool] = Field(default=True)
    subject_to_contribution: bool = Field(default=False)
    net_amount: Optional[str] = Field(default=None, description="Stored take-home amount")
    change_flag: bool = Field(default=False, description="A future change is scheduled")
    future_amount: Optional[str] = Field(default=None, description="Gross amount after the change")
    future_start_date: Optional[datetime.date] = Field(default=None, validate_default=True)
    future_end_date: Optional[datetime.date] = Field(default=None)
    age: Optional[int] = Field(default=None, ge=0, le=150, description="Contributor age")
    account_for_bonus: bool = Field(default=False)
    bonus_groups: Optional[List[BonusGroupConfig]] = Field(default=None)

    @field_validator("amount", "net_amount", "future_amount", mode="before")
    @classmethod
    def coerce_amounts(cls, v):
        return _amount_text(v)

    @field_validator("custom_months")
    @classmethod
    def validate_custom_months(cls, v):
        if v is not None and any(m < 1 or m > 12 for m in v):
            raise ValueError(f"custom_months must be within 1-12, got {v}")
        return v

    @field_validator("end_date")
    @classmethod
    def validate_end_date(cls, v, info):
        start = info.data.get("start_date")
        if v is not None and start is not None and v < start:
            raise ValueError(f"end_date ({v}) must be on or after start_date ({start})")
        return v

    @field_validator("future_start_date")
    @classmethod
    def validate_future_start(cls, v, info):
        if info.data.get("change_flag") and v is None:
            raise ValueError("future_start_date is required when change_flag is set")
        return v

    def to_instrument(self) -> IncomeInstrument:
        bonus_groups = None
        if self.bonus_groups is not None:
            bonus_groups = tuple((g.month, g.multiplier) for g in self.bonus_groups)
        return IncomeInstrument(
            amount=self.amount,
            frequency=self.frequency,
            start_date=self.start_date,
            end_date=self.end_date,
            custom_months=tuple(self.custom_months) if self.custom_months is not None else None,
            lifecycle_category=self.lifecycle_category,
            is_active=self.is_active,
            subject_to_contribution=self.subject_to_contribution,
            net_amount=self.net_amount,
            change_flag=self.change_flag,
            future_amount=self.future_amount,
            future_start_date=self.future_start_date,
            future_end_date=self.future_end_date,
            age=self.age,
            account_for_bonus=self.account_for_bonus,
            bonus_groups=bonus_groups,
            name=self.name,
        )


class ExpenseInstrumentConfig(BaseModel):
    """Expense record as stored in a portfolio file."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(default="expense", min_length=1, max_length=100)
    amount: str = Field(description="Amount per occurrence")
    frequency: FrequencyName
    start_date: Optional[datetime.date] = Field(default=None, description="None = already running")
    end_date: Optional[datetime.date] = None
    custom_months: Optional[List[int]] = None
    lifecycle_category: LifecycleName = CURRENT_RECURRING
    is_active: Optional[bool] = True

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount(cls, v):
        return _amount_text(v)

    @field_validator("custom_months")
    @classmethod
    def validate_custom_months(cls, v):
        if v is not None and any(m < 1 or m > 12 for m in v):
            raise ValueError(f"custom_months must be within 1-12, got {v}")
        return v

    @field_validator("end_date")
    @classmethod
    def validate_end_date(cls, v, info):
        start = info.data.get("start_date")
        if v is not None and start is not None and v < start:
            raise ValueError(f"end_date ({v}) must be on or after start_date ({start})")
        return v

    def to_instrument(self) -> ExpenseInstrument:
        return ExpenseInstrument(
            amount=self.amount,
            frequency=self.frequency,
            start_date=self.start_date,
            end_date=self.end_date,
            custom_months=tuple(self.custom_months) if self.custom_months is not None else None,
            lifecycle_category=self.lifecycle_category,
            is_active=self.is_active,
            name=self.name,
        )


class PortfolioConfig(BaseModel):
    """
    Contents of an instruments file.

    Attributes
    ----------
    schema_version : str, optional
        Format version the file was written with.
    incomes : list of IncomeInstrumentConfig
    expenses : list of ExpenseInstrumentConfig
    contribution_scheme : ContributionSchemeConfig, optional
        Overrides the statutory defaults when present.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    schema_version: Optional[str] = None
    incomes: List[IncomeInstrumentConfig] = Field(default_factory=list)
    expenses: List[ExpenseInstrumentConfig] = Field(default_factory=list)
    contribution_scheme: Optional[ContributionSchemeConfig] = None

    def income_instruments(self) -> List[IncomeInstrument]:
        return [cfg.to_instrument() for cfg in self.incomes]

    def expense_instruments(self) -> List[ExpenseInstrument]:
        return [cfg.to_instrument() for cfg in self.expenses]

    def scheme(self) -> ContributionScheme:
        cfg = self.contribution_scheme or ContributionSchemeConfig()
        return cfg.to_scheme()


# ---------------------------------------------------------------------------
# Application Settings (Environment Variables)
# ---------------------------------------------------------------------------

class AppSettings(BaseSettings):
    """
    Global application settings loaded from environment variables.

    Supports .env files for local development. Environment variables
    should be prefixed with CASHPROJ_ (e.g., CASHPROJ_LOG_LEVEL=DEBUG).

    Attributes
    ----------
    debug : bool
        Enable debug mode (forces DEBUG logging)
    log_level : str
        Logging level: "DEBUG", "INFO", "WARNING", "ERROR"
    default_horizon_months : int
        Horizon used by the CLI when --months is not given
    default_age : int
        Contributor age used by the CLI when --age is not given

    Examples
    --------
    >>> settings = AppSettings()
    >>> settings.log_level
    'WARNING'

    # With .env file:
    # CASHPROJ_DEFAULT_HORIZON_MONTHS=36
    >>> settings = AppSettings(_env_file=".env")
    >>> settings.default_horizon_months
    36
    """

    model_config = SettingsConfigDict(
        env_prefix="CASHPROJ_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    debug: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Logging level"
    )
    default_horizon_months: int = Field(
        default=DEFAULT_HORIZON_MONTHS,
        ge=1,
        le=600,
        description="Default projection horizon (months)"
    )
    default_age: int = Field(
        default=DEFAULT_CONTRIBUTOR_AGE,
        ge=0,
        le=150,
        description="Default contributor age"
    )

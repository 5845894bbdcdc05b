"""
Global constants for CashProj.

Purpose
-------
Centralizes default values and magic numbers used throughout the CashProj
codebase. Using constants instead of hardcoded values keeps the statutory
figures in one place and makes them easy to target from tests.

Usage
-----
>>> from cashproj.constants import DEFAULT_CONTRIBUTOR_AGE, ORDINARY_WAGE_CEILING
>>>
>>> result = compute_contribution(gross, age=DEFAULT_CONTRIBUTOR_AGE)

Categories
----------
- Contribution scheme: wage ceilings, default age
- Instruments: frequencies, lifecycle categories
- Projection: default horizon, label format
"""

from decimal import Decimal
from typing import Tuple

__all__ = [
    # Contribution scheme
    "DEFAULT_CONTRIBUTOR_AGE",
    "ORDINARY_WAGE_CEILING",
    "ANNUAL_WAGE_CEILING",
    # Instruments
    "FREQUENCIES",
    "CURRENT_RECURRING",
    "LIFECYCLE_CATEGORIES",
    # Projection
    "DEFAULT_HORIZON_MONTHS",
    "MONTH_LABEL_FORMAT",
    "MONTHS_PER_YEAR",
    "CENT",
]


# =============================================================================
# Contribution Scheme Defaults
# =============================================================================

DEFAULT_CONTRIBUTOR_AGE: int = 30
"""Age assumed when none is supplied: a mid-career employee.

Omitting the age never skips the contribution computation.
"""

ORDINARY_WAGE_CEILING: Decimal = Decimal("8000")
"""Monthly gross amount above which no contribution is levied."""

ANNUAL_WAGE_CEILING: Decimal = Decimal("102000")
"""Yearly cap on total wages (ordinary + bonus) subject to contribution."""


# =============================================================================
# Instrument Vocabulary
# =============================================================================

FREQUENCIES: Tuple[str, ...] = (
    "monthly",
    "quarterly",
    "semi-yearly",
    "yearly",
    "custom",
    "one-time",
)
"""Payment frequencies understood by the allocator."""

CURRENT_RECURRING: str = "current-recurring"
"""Lifecycle category of instruments that take part in the projection."""

LIFECYCLE_CATEGORIES: Tuple[str, ...] = (CURRENT_RECURRING, "one-off", "past")
"""Known lifecycle categories. Only CURRENT_RECURRING is projected."""


# =============================================================================
# Projection Defaults
# =============================================================================

DEFAULT_HORIZON_MONTHS: int = 12
"""Horizon used when a time range string cannot be parsed."""

MONTH_LABEL_FORMAT: str = "%b %Y"
"""Label format for projection points, e.g. "Jan 2025"."""

MONTHS_PER_YEAR: int = 12
"""Number of months in a year."""

CENT: Decimal = Decimal("0.01")
"""Quantum for currency rounding."""

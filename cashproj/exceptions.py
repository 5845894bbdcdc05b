"""
Custom exceptions for CashProj.

Purpose
-------
Provides a unified exception hierarchy for consistent error handling
across all CashProj modules. All exceptions inherit from CashProjError,
enabling catch-all handling when needed.

Exception Hierarchy
-------------------
CashProjError (base)
├── ConfigurationError - Invalid contribution scheme or settings
└── ValidationError - Instrument or argument validation failures
    └── TimeIndexError - Month/date indexing errors

Usage
-----
>>> from cashproj.exceptions import ValidationError
>>>
>>> # Raise specific exception
>>> raise ValidationError("horizon_months must be non-negative, got -1")
>>>
>>> # Catch all CashProj exceptions
>>> try:
...     points = project_monthly_balance(incomes, expenses, 24)
>>> except CashProjError as e:
...     print(f"CashProj error: {e}")
"""


class CashProjError(Exception):
    """
    Base exception for all CashProj errors.

    Examples
    --------
    >>> try:
    ...     load_portfolio(path)
    ... except CashProjError as e:
    ...     logger.error("Could not load instruments: %s", e)
    """
    pass


class ConfigurationError(CashProjError):
    """
    Invalid configuration or parameters.

    Raised when a contribution scheme or application setting is unusable:
    - Empty age-band or allocation tables
    - Bands not ordered ascending by max_age
    - Negative wage ceilings

    Examples
    --------
    >>> raise ConfigurationError(
    ...     "rate_bands must be ordered ascending by max_age, "
    ...     "got 60 after 65."
    ... )
    """
    pass


class ValidationError(CashProjError, ValueError):
    """
    Data validation failures.

    Raised when instrument data or call arguments fail validation, such as:
    - A future change flagged without a future start date
    - A negative projection horizon

    Subclasses ValueError so callers that guard with ``except ValueError``
    keep working.

    Examples
    --------
    >>> raise ValidationError(
    ...     "change_flag is set but future_start_date is missing. "
    ...     "A scheduled change needs the month it takes effect."
    ... )
    """
    pass


class TimeIndexError(ValidationError):
    """
    Month/date indexing errors.

    Raised when month or date strings are invalid:
    - Calendar month outside 1..12
    - Month strings that are not "YYYY-MM"

    Examples
    --------
    >>> raise TimeIndexError(
    ...     f"Bonus month {month} is outside 1..12. "
    ...     f"Bonus months are calendar months: 1 = January."
    ... )
    """
    pass

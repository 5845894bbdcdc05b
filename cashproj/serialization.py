"""
Serialization module for CashProj persistence.

Purpose
-------
Provides JSON serialization and deserialization for instrument portfolios
(incomes, expenses, optional contribution scheme) and for projection results,
so inputs can be versioned and results shared.

Design Principles
-----------------
- Type-safe: Loading goes through the Pydantic configs for validation
- Exact: Amounts are written as strings, never floats
- Backward compatible: Files carry a schema version; a mismatch warns

Example
-------
>>> from pathlib import Path
>>> from cashproj.serialization import save_portfolio, load_portfolio
>>> save_portfolio(incomes, expenses, Path("instruments.json"))
>>> portfolio = load_portfolio(Path("instruments.json"))
>>> incomes = portfolio.income_instruments()
"""

from __future__ import annotations

import json
import warnings
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from .config import (
    ContributionSchemeConfig,
    ExpenseInstrumentConfig,
    IncomeInstrumentConfig,
    PortfolioConfig,
)
from .contribution import ContributionScheme
from .expenses import ExpenseInstrument
from .income import IncomeInstrument
from .projection import MonthlyProjectionPoint
from .utils import parse_bonus_groups, parse_custom_months

__all__ = [
    "SCHEMA_VERSION",
    "income_to_dict",
    "income_from_dict",
    "expense_to_dict",
    "expense_from_dict",
    "scheme_to_dict",
    "save_portfolio",
    "load_portfolio",
    "save_projection",
    "load_projection",
]


# ---------------------------------------------------------------------------
# Schema Version
# ---------------------------------------------------------------------------

SCHEMA_VERSION = "0.1.0"


def _check_schema_version(config: Dict[str, Any]) -> None:
    schema_version = config.get("schema_version", "0.0.0")
    if schema_version != SCHEMA_VERSION:
        warnings.warn(
            f"Config schema version {schema_version} differs from current "
            f"version {SCHEMA_VERSION}. May encounter compatibility issues.",
            UserWarning,
        )


def _text(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _iso(value: Optional[date]) -> Optional[str]:
    return None if value is None else value.isoformat()


def _months(value: Any) -> Optional[List[int]]:
    return None if value is None else sorted(parse_custom_months(value))


def _drop_none(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


# ---------------------------------------------------------------------------
# Instrument Serialization
# ---------------------------------------------------------------------------

def income_to_dict(income: IncomeInstrument) -> Dict[str, Any]:
    """
    Convert IncomeInstrument to dictionary representation.

    Unset optional fields are omitted. Bonus groups are written in their
    normalized ``{"month", "multiplier"}`` form.
    """
    bonus_groups = None
    if income.bonus_groups is not None:
        bonus_groups = [
            {"month": month, "multiplier": str(multiplier)}
            for month, multiplier in parse_bonus_groups(income.bonus_groups)
        ]
    return _drop_none({
        "name": income.name,
        "amount": _text(income.amount),
        "frequency": income.frequency,
        "start_date": _iso(income.start_date),
        "end_date": _iso(income.end_date),
        "custom_months": _months(income.custom_months),
        "lifecycle_category": income.lifecycle_category,
        "is_active": income.is_active,
        "subject_to_contribution": income.subject_to_contribution,
        "net_amount": _text(income.net_amount),
        "change_flag": income.change_flag,
        "future_amount": _text(income.future_amount),
        "future_start_date": _iso(income.future_start_date),
        "future_end_date": _iso(income.future_end_date),
        "age": income.age,
        "account_for_bonus": income.account_for_bonus,
        "bonus_groups": bonus_groups,
    })


def income_from_dict(data: Dict[str, Any]) -> IncomeInstrument:
    """Create IncomeInstrument from dictionary representation (validated)."""
    return IncomeInstrumentConfig.model_validate(data).to_instrument()


def expense_to_dict(expense: ExpenseInstrument) -> Dict[str, Any]:
    """Convert ExpenseInstrument to dictionary representation."""
    return _drop_none({
        "name": expense.name,
        "amount": _text(expense.amount),
        "frequency": expense.frequency,
        "start_date": _iso(expense.start_date),
        "end_date": _iso(expense.end_date),
        "custom_months": _months(expense.custom_months),
        "lifecycle_category": expense.lifecycle_category,
        "is_active": expense.is_active,
    })


def expense_from_dict(data: Dict[str, Any]) -> ExpenseInstrument:
    """Create ExpenseInstrument from dictionary representation (validated)."""
    return ExpenseInstrumentConfig.model_validate(data).to_instrument()


def scheme_to_dict(scheme: ContributionScheme) -> Dict[str, Any]:
    """Convert ContributionScheme to its JSON-ready configuration form."""
    config = ContributionSchemeConfig(
        rate_bands=[
            {"max_age": b.max_age, "employer_rate": b.employer_rate, "employee_rate": b.employee_rate}
            for b in scheme.rate_bands
        ],
        allocation_bands=[
            {"max_age": b.max_age, "shares": dict(b.shares)}
            for b in scheme.allocation_bands
        ],
        ordinary_wage_ceiling=scheme.ordinary_wage_ceiling,
        annual_wage_ceiling=scheme.annual_wage_ceiling,
    )
    return config.model_dump(mode="json")


# ---------------------------------------------------------------------------
# Portfolio Serialization
# ---------------------------------------------------------------------------

def save_portfolio(
    incomes: Sequence[IncomeInstrument],
    expenses: Sequence[ExpenseInstrument],
    path: Path,
    scheme: Optional[ContributionScheme] = None,
) -> None:
    """
    Save income and expense instruments to a JSON file.

    Parameters
    ----------
    incomes : sequence of IncomeInstrument
    expenses : sequence of ExpenseInstrument
    path : Path
        Output file path (should have .json extension)
    scheme : ContributionScheme, optional
        Written only when given; files without one use the defaults.
    """
    config: Dict[str, Any] = {
        "schema_version": SCHEMA_VERSION,
        "incomes": [income_to_dict(inc) for inc in incomes],
        "expenses": [expense_to_dict(exp) for exp in expenses],
    }
    if scheme is not None:
        config["contribution_scheme"] = scheme_to_dict(scheme)

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(config, f, indent=2)


def load_portfolio(path: Path) -> PortfolioConfig:
    """
    Load and validate an instruments file.

    Parameters
    ----------
    path : Path
        Input file path

    Returns
    -------
    PortfolioConfig
        Validated contents; use ``income_instruments()``,
        ``expense_instruments()`` and ``scheme()`` to get engine objects.

    Raises
    ------
    pydantic.ValidationError
        If the file content does not match the schema.
    """
    with open(path, "r") as f:
        config = json.load(f)

    _check_schema_version(config)
    return PortfolioConfig.model_validate(config)


# ---------------------------------------------------------------------------
# Projection Serialization
# ---------------------------------------------------------------------------

def save_projection(
    points: Sequence[MonthlyProjectionPoint],
    path: Path,
    starting_balance: Any = None,
) -> None:
    """
    Save a monthly projection to JSON.

    Parameters
    ----------
    points : sequence of MonthlyProjectionPoint
    path : Path
        Output file path
    starting_balance : Decimal-like, optional
        Recorded alongside the points when given.
    """
    config: Dict[str, Any] = {
        "schema_version": SCHEMA_VERSION,
        "horizon_months": len(points),
        "start": points[0].month.isoformat() if points else None,
    }
    if starting_balance is not None:
        config["starting_balance"] = str(starting_balance)
    config["points"] = [p.as_dict() for p in points]

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(config, f, indent=2)


def load_projection(path: Path) -> Dict[str, Any]:
    """
    Load a saved projection.

    Returns the raw dictionary: points keep their string amounts.
    """
    with open(path, "r") as f:
        config = json.load(f)

    _check_schema_version(config)
    return config

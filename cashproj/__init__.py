"""
CashProj: Household Cash-Flow Projection

Projects month-by-month income, expenses and running balance from a set of
income and expense instruments, deducting the statutory payroll
contribution (CPF-style) where it applies.

Modules
-------
- allocation     : Frequency allocation and active-window checks
- contribution   : Age-banded contribution rates, ceilings, bonus rule
- income         : Income instruments, future-change splicing, bonuses
- expenses       : Expense instruments
- projection     : Monthly projection orchestrator, frames and metrics
- cpf_projection : Contribution sub-account projection with loan drawdowns
- config         : Pydantic configs and application settings
- serialization  : JSON persistence of instruments and projections
- utils          : Shared utilities (money, calendar, payload parsing)

"""

__version__ = "0.1.0"

from .contribution import ContributionScheme, DEFAULT_SCHEME, compute_contribution
from .income import IncomeInstrument
from .expenses import ExpenseInstrument
from .projection import MonthlyProjectionPoint, project_monthly_balance
from . import utils

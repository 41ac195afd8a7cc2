"""Expense tracker data model.

Only the shape needed for currency conversion is modelled here.
"""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class Transaction:
    """Base income or expense entry."""

    id: str
    date: str
    amount: float
    description: str
    currency: Optional[str] = None


@dataclass
class IncomeEntry(Transaction):
    source: str = "OTHER"


@dataclass
class ExpenseEntry(Transaction):
    category: str = "OTHER"
    expense_type: str = "NEED"
    sub_category: Optional[str] = None


@dataclass
class CategoryBudget:
    category: str
    monthly_budget: float
    currency: Optional[str] = None


@dataclass
class ExpenseMonthData:
    year: int
    month: int
    incomes: List[IncomeEntry] = field(default_factory=list)
    expenses: List[ExpenseEntry] = field(default_factory=list)
    budgets: List[CategoryBudget] = field(default_factory=list)
    is_closed: bool = False


@dataclass
class ExpenseYearData:
    year: int
    months: List[ExpenseMonthData] = field(default_factory=list)
    is_archived: bool = False


@dataclass
class ExpenseTrackerData:
    """Complete expense dataset.

    Attributes:
        years: Year containers
        current_year: Year of the live month
        current_month: Live month, 1-12
        currency: Currency the dataset is expressed in
        global_budgets: Budgets applying to every month
    """

    years: List[ExpenseYearData]
    current_year: int
    current_month: int
    currency: str = "EUR"
    global_budgets: List[CategoryBudget] = field(default_factory=list)

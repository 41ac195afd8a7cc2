"""FIRE calculator inputs.

The projection math lives outside the engine; only the inputs are modelled,
so that their monetary fields can follow a default-currency change.
"""

from dataclasses import dataclass

# Fields holding amounts of money; everything else is a rate, age or flag
MONETARY_FIELDS = (
    "initial_savings",
    "current_annual_expenses",
    "fire_annual_expenses",
    "annual_labor_income",
    "state_pension_income",
    "private_pension_income",
    "other_income",
)


@dataclass
class FireCalculatorInputs:
    initial_savings: float = 0.0
    stocks_percent: float = 70.0
    bonds_percent: float = 20.0
    cash_percent: float = 10.0
    current_annual_expenses: float = 0.0
    fire_annual_expenses: float = 0.0
    annual_labor_income: float = 0.0
    labor_income_growth_rate: float = 0.0
    savings_rate: float = 0.0
    desired_withdrawal_rate: float = 3.0
    years_of_expenses: float = 33.33
    expected_stock_return: float = 7.0
    expected_bond_return: float = 3.0
    expected_cash_return: float = -2.0
    year_of_birth: int = 1990
    retirement_age: int = 67
    state_pension_income: float = 0.0
    private_pension_income: float = 0.0
    other_income: float = 0.0
    stop_working_at_fire: bool = True
    max_age: int = 100

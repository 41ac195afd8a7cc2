"""Tracker datasets consumed by the engine.

Components:
- NetWorthTrackerData and its entries: holdings model mirrored by the sync bridge
- ExpenseTrackerData: expense dataset converted on currency changes
- FireCalculatorInputs: FIRE inputs converted on currency changes
"""

from portfolio_engine.tracker.expense import (
    CategoryBudget,
    ExpenseEntry,
    ExpenseMonthData,
    ExpenseTrackerData,
    ExpenseYearData,
    IncomeEntry,
)
from portfolio_engine.tracker.fire import MONETARY_FIELDS, FireCalculatorInputs
from portfolio_engine.tracker.net_worth import (
    AssetHolding,
    CashAccountType,
    CashEntry,
    FinancialOperation,
    HoldingAssetClass,
    MonthlySnapshot,
    MonthlyVariation,
    NetWorthForecast,
    NetWorthSettings,
    NetWorthTrackerData,
    NetWorthYearData,
    PensionEntry,
    SyncMetadata,
)

__all__ = [
    "AssetHolding",
    "CashEntry",
    "CashAccountType",
    "HoldingAssetClass",
    "PensionEntry",
    "FinancialOperation",
    "MonthlySnapshot",
    "NetWorthYearData",
    "NetWorthSettings",
    "NetWorthTrackerData",
    "MonthlyVariation",
    "NetWorthForecast",
    "SyncMetadata",
    "ExpenseTrackerData",
    "ExpenseYearData",
    "ExpenseMonthData",
    "IncomeEntry",
    "ExpenseEntry",
    "CategoryBudget",
    "FireCalculatorInputs",
    "MONETARY_FIELDS",
]

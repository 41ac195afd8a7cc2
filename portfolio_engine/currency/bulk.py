"""Bulk currency conversion of tracker datasets.

Used when the default (reporting) currency changes: every monetary field of a
dataset goes through convert_amount, while percentages, counts, dates and
enum fields are left untouched. Inputs are never modified; each function
returns a new structure.
"""

from dataclasses import replace
from typing import Callable, List, Optional

from portfolio_engine.allocation.base import Asset
from portfolio_engine.currency.rates import (
    DEFAULT_FALLBACK_RATES,
    ExchangeRates,
    convert_amount,
)
from portfolio_engine.tracker.expense import (
    CategoryBudget,
    ExpenseMonthData,
    ExpenseTrackerData,
)
from portfolio_engine.tracker.fire import MONETARY_FIELDS, FireCalculatorInputs
from portfolio_engine.tracker.net_worth import (
    MonthlySnapshot,
    MonthlyVariation,
    NetWorthForecast,
    NetWorthTrackerData,
    SyncMetadata,
)
from portfolio_engine.utils.logging import get_logger

logger = get_logger(__name__)

Converter = Callable[[float], float]


def _converter(from_currency: str, to_currency: str, rates: ExchangeRates) -> Converter:
    def convert(amount: float) -> float:
        return convert_amount(amount, from_currency, to_currency, rates)

    return convert


def _convert_optional(amount: Optional[float], convert: Converter) -> Optional[float]:
    return None if amount is None else convert(amount)


def convert_assets_to_new_currency(
    assets: List[Asset],
    from_currency: str,
    to_currency: str,
    rates: ExchangeRates = DEFAULT_FALLBACK_RATES,
) -> List[Asset]:
    """Convert asset values into a new reporting currency.

    current_value, target_value and price_per_share are converted;
    target_percent and shares are not. original_currency/original_value
    record the first conversion only and are never overwritten.

    Example:
        >>> converted = convert_assets_to_new_currency(assets, "EUR", "USD")
        >>> # 1000 EUR -> 1176.47 USD
    """
    if from_currency == to_currency:
        return [replace(a) for a in assets]

    convert = _converter(from_currency, to_currency, rates)
    converted = []
    for asset in assets:
        converted.append(
            replace(
                asset,
                current_value=convert(asset.current_value),
                target_value=_convert_optional(asset.target_value, convert),
                price_per_share=_convert_optional(asset.price_per_share, convert),
                original_currency=asset.original_currency or from_currency,
                original_value=(
                    asset.original_value
                    if asset.original_value is not None
                    else asset.current_value
                ),
            )
        )

    logger.info(
        "Converted %d assets from %s to %s", len(converted), from_currency, to_currency
    )
    return converted


def _convert_metadata(
    metadata: Optional[SyncMetadata], convert: Converter
) -> Optional[SyncMetadata]:
    if metadata is None:
        return None
    return replace(
        metadata,
        target_value=_convert_optional(metadata.target_value, convert),
        price_per_share=_convert_optional(metadata.price_per_share, convert),
    )


def _convert_snapshot(
    snapshot: MonthlySnapshot, convert: Converter, to_currency: str
) -> MonthlySnapshot:
    return replace(
        snapshot,
        assets=[
            replace(
                h,
                price_per_share=convert(h.price_per_share),
                currency=to_currency,
                sync_metadata=_convert_metadata(h.sync_metadata, convert),
            )
            for h in snapshot.assets
        ],
        cash_entries=[
            replace(
                c,
                balance=convert(c.balance),
                currency=to_currency,
                sync_metadata=_convert_metadata(c.sync_metadata, convert),
            )
            for c in snapshot.cash_entries
        ],
        pensions=[
            replace(p, current_value=convert(p.current_value), currency=to_currency)
            for p in snapshot.pensions
        ],
        operations=[
            replace(o, amount=convert(o.amount), currency=to_currency)
            for o in snapshot.operations
        ],
    )


def convert_net_worth_data_to_new_currency(
    data: NetWorthTrackerData,
    from_currency: str,
    to_currency: str,
    rates: ExchangeRates = DEFAULT_FALLBACK_RATES,
) -> NetWorthTrackerData:
    """Convert every month of a net worth dataset into to_currency.

    Holding prices, cash balances, pension values and operation amounts are
    converted and their currency set to to_currency. Share counts are kept.
    """
    if from_currency == to_currency:
        return replace(data, years=list(data.years))

    convert = _converter(from_currency, to_currency, rates)
    years = [
        replace(
            year_data,
            months=[_convert_snapshot(m, convert, to_currency) for m in year_data.months],
        )
        for year_data in data.years
    ]
    return replace(data, years=years, default_currency=to_currency)


def _convert_budget(budget: CategoryBudget, convert: Converter, to_currency: str) -> CategoryBudget:
    return replace(budget, monthly_budget=convert(budget.monthly_budget), currency=to_currency)


def _convert_expense_month(
    month: ExpenseMonthData, convert: Converter, to_currency: str
) -> ExpenseMonthData:
    return replace(
        month,
        incomes=[replace(i, amount=convert(i.amount), currency=to_currency) for i in month.incomes],
        expenses=[
            replace(e, amount=convert(e.amount), currency=to_currency) for e in month.expenses
        ],
        budgets=[_convert_budget(b, convert, to_currency) for b in month.budgets],
    )


def convert_expense_data_to_new_currency(
    data: ExpenseTrackerData,
    from_currency: str,
    to_currency: str,
    rates: ExchangeRates = DEFAULT_FALLBACK_RATES,
) -> ExpenseTrackerData:
    """Convert income, expense and budget amounts into to_currency."""
    if from_currency == to_currency:
        return replace(data, years=list(data.years))

    convert = _converter(from_currency, to_currency, rates)
    years = [
        replace(
            year_data,
            months=[_convert_expense_month(m, convert, to_currency) for m in year_data.months],
        )
        for year_data in data.years
    ]
    return replace(
        data,
        years=years,
        currency=to_currency,
        global_budgets=[_convert_budget(b, convert, to_currency) for b in data.global_budgets],
    )


def convert_fire_inputs_to_new_currency(
    inputs: FireCalculatorInputs,
    from_currency: str,
    to_currency: str,
    rates: ExchangeRates = DEFAULT_FALLBACK_RATES,
) -> FireCalculatorInputs:
    """Convert the monetary FIRE inputs; rates, percentages and ages are kept."""
    if from_currency == to_currency:
        return replace(inputs)

    convert = _converter(from_currency, to_currency, rates)
    changes = {name: convert(getattr(inputs, name)) for name in MONETARY_FIELDS}
    return replace(inputs, **changes)


def convert_monthly_variations_to_display_currency(
    variations: List[MonthlyVariation],
    from_currency: str,
    to_currency: str,
    rates: ExchangeRates = DEFAULT_FALLBACK_RATES,
) -> List[MonthlyVariation]:
    """Convert month-over-month figures for display; change_percent is kept."""
    if from_currency == to_currency:
        return [replace(v) for v in variations]

    convert = _converter(from_currency, to_currency, rates)
    return [
        replace(
            v,
            net_worth=convert(v.net_worth),
            change_from_prev_month=convert(v.change_from_prev_month),
            asset_value_change=convert(v.asset_value_change),
            cash_change=convert(v.cash_change),
            pension_change=convert(v.pension_change),
        )
        for v in variations
    ]


def convert_net_worth_forecast_to_display_currency(
    forecast: List[NetWorthForecast],
    from_currency: str,
    to_currency: str,
    rates: ExchangeRates = DEFAULT_FALLBACK_RATES,
) -> List[NetWorthForecast]:
    """Convert projected net worth values for display."""
    if from_currency == to_currency:
        return [replace(f) for f in forecast]

    convert = _converter(from_currency, to_currency, rates)
    return [replace(f, projected_net_worth=convert(f.projected_net_worth)) for f in forecast]

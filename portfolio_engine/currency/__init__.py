"""Currency Layer.

Components:
- convert_amount / get_exchange_rate: single-division conversion between codes
- recalculate_fallback_rates: rebase a rate table onto a new default currency
- convert_*_to_new_currency: bulk conversion of tracker datasets
"""

from portfolio_engine.currency.bulk import (
    convert_assets_to_new_currency,
    convert_expense_data_to_new_currency,
    convert_fire_inputs_to_new_currency,
    convert_monthly_variations_to_display_currency,
    convert_net_worth_data_to_new_currency,
    convert_net_worth_forecast_to_display_currency,
)
from portfolio_engine.currency.rates import (
    DEFAULT_FALLBACK_RATES,
    SUPPORTED_CURRENCIES,
    ExchangeRates,
    convert_amount,
    format_currency_value,
    get_currency_symbol,
    get_exchange_rate,
    is_valid_currency,
    recalculate_fallback_rates,
)

__all__ = [
    "DEFAULT_FALLBACK_RATES",
    "SUPPORTED_CURRENCIES",
    "ExchangeRates",
    "convert_amount",
    "get_exchange_rate",
    "recalculate_fallback_rates",
    "is_valid_currency",
    "get_currency_symbol",
    "format_currency_value",
    "convert_assets_to_new_currency",
    "convert_net_worth_data_to_new_currency",
    "convert_expense_data_to_new_currency",
    "convert_fire_inputs_to_new_currency",
    "convert_monthly_variations_to_display_currency",
    "convert_net_worth_forecast_to_display_currency",
]

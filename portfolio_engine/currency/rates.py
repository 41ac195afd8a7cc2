"""Exchange rate lookup, conversion and rate-table rebasing.

Every rate in a table is expressed relative to one implicit base currency
(the currency whose rate is 1). Converting between two codes therefore goes
``from -> base -> to``, which collapses to a single division of their rates.

Invalid rates are never fatal: a missing, zero or negative rate turns the
conversion into a no-op (rate 1) and is logged as a warning.
"""

from dataclasses import dataclass
from typing import Dict, Optional

from portfolio_engine.utils.logging import get_logger, log_with_context

logger = get_logger(__name__)

ExchangeRates = Dict[str, float]


@dataclass(frozen=True)
class CurrencyInfo:
    """Display information for a supported currency."""

    code: str
    symbol: str
    name: str


SUPPORTED_CURRENCIES = (
    CurrencyInfo("EUR", "€", "Euro"),
    CurrencyInfo("USD", "$", "US Dollar"),
    CurrencyInfo("GBP", "£", "British Pound"),
    CurrencyInfo("CHF", "CHF", "Swiss Franc"),
    CurrencyInfo("JPY", "¥", "Japanese Yen"),
    CurrencyInfo("AUD", "A$", "Australian Dollar"),
    CurrencyInfo("CAD", "C$", "Canadian Dollar"),
)

# 1 unit of each currency expressed in EUR
DEFAULT_FALLBACK_RATES: ExchangeRates = {
    "EUR": 1.0,
    "USD": 0.85,
    "GBP": 1.15,
    "CHF": 1.08,
    "JPY": 0.0054,
    "AUD": 0.57,
    "CAD": 0.62,
}

BASE_CURRENCY = "EUR"


def _lookup_rate(currency: str, rates: ExchangeRates) -> Optional[float]:
    """Return a usable rate for currency, or None when none is available."""
    rate = rates.get(currency)
    if rate is None:
        rate = DEFAULT_FALLBACK_RATES.get(currency)
    if rate is None or rate <= 0:
        return None
    return rate


def get_exchange_rate(
    from_currency: str,
    to_currency: str,
    rates: ExchangeRates = DEFAULT_FALLBACK_RATES,
) -> float:
    """Get the multiplier converting from_currency amounts into to_currency.

    Args:
        from_currency: Source currency code
        to_currency: Target currency code
        rates: Rate table relative to a common base currency

    Returns:
        Exchange rate; 1.0 if either rate is missing or invalid

    Example:
        >>> round(get_exchange_rate("USD", "GBP"), 4)  # 0.85 / 1.15
        0.7391
    """
    if from_currency == to_currency:
        return 1.0

    from_rate = _lookup_rate(from_currency, rates)
    to_rate = _lookup_rate(to_currency, rates)

    if from_rate is None or to_rate is None:
        log_with_context(
            logger,
            "warning",
            "Invalid exchange rate, using 1:1 conversion",
            from_currency=from_currency,
            to_currency=to_currency,
            from_rate=rates.get(from_currency),
            to_rate=rates.get(to_currency),
        )
        return 1.0

    return from_rate / to_rate


def convert_amount(
    amount: float,
    from_currency: str,
    to_currency: str,
    rates: ExchangeRates = DEFAULT_FALLBACK_RATES,
) -> float:
    """Convert an amount from one currency to another.

    Args:
        amount: The amount to convert
        from_currency: Source currency code
        to_currency: Target currency code
        rates: Rate table relative to a common base currency

    Returns:
        The converted amount; amount itself when the currencies match

    Example:
        >>> round(convert_amount(100, "USD", "GBP"), 2)
        73.91
    """
    if from_currency == to_currency:
        return amount

    return amount * get_exchange_rate(from_currency, to_currency, rates)


def convert_to_base(
    amount: float,
    from_currency: str,
    rates: ExchangeRates = DEFAULT_FALLBACK_RATES,
    base_currency: str = BASE_CURRENCY,
) -> float:
    """Convert an amount into the rate table's base currency."""
    if from_currency == base_currency:
        return amount

    rate = _lookup_rate(from_currency, rates)
    if rate is None:
        log_with_context(
            logger, "warning", "Invalid exchange rate, using 1:1 conversion",
            currency=from_currency, rate=rates.get(from_currency),
        )
        return amount

    return amount * rate


def convert_from_base(
    amount: float,
    to_currency: str,
    rates: ExchangeRates = DEFAULT_FALLBACK_RATES,
    base_currency: str = BASE_CURRENCY,
) -> float:
    """Convert an amount held in the base currency into to_currency."""
    if to_currency == base_currency:
        return amount

    rate = _lookup_rate(to_currency, rates)
    if rate is None:
        log_with_context(
            logger, "warning", "No exchange rate found, returning original amount",
            currency=to_currency, rate=rates.get(to_currency),
        )
        return amount

    return amount / rate


def recalculate_fallback_rates(
    current_rates: ExchangeRates,
    old_default: str,
    new_default: str,
) -> ExchangeRates:
    """Rebase a rate table so that new_default becomes the rate-1 currency.

    Each rate is multiplied by the value of one old_default unit expressed in
    new_default. Rebasing old -> new -> old reproduces the original table
    within floating-point tolerance.

    Args:
        current_rates: Rate table relative to old_default
        old_default: Previous default (base) currency
        new_default: New default (base) currency

    Returns:
        New rate table relative to new_default

    Example:
        >>> usd = recalculate_fallback_rates(DEFAULT_FALLBACK_RATES, "EUR", "USD")
        >>> round(usd["EUR"], 4)
        1.1765
    """
    if old_default == new_default:
        return dict(current_rates)

    conversion_rate = get_exchange_rate(old_default, new_default, current_rates)

    codes = [c.code for c in SUPPORTED_CURRENCIES]
    codes.extend(code for code in current_rates if code not in codes)

    new_rates: ExchangeRates = {}
    for code in codes:
        if code == new_default:
            new_rates[code] = 1.0
            continue

        old_rate = _lookup_rate(code, current_rates)
        if old_rate is None:
            log_with_context(
                logger, "warning", "Missing rate while rebasing, assuming 1",
                currency=code, old_default=old_default, new_default=new_default,
            )
            old_rate = 1.0
        new_rates[code] = old_rate * conversion_rate

    logger.info(
        "Rebased %d exchange rates from %s to %s", len(new_rates), old_default, new_default
    )
    return new_rates


def is_valid_currency(currency: str) -> bool:
    """Check whether currency is a supported currency code."""
    return any(c.code == currency for c in SUPPORTED_CURRENCIES)


def get_currency_symbol(currency: str) -> str:
    """Get the display symbol for a currency, or the code itself."""
    for info in SUPPORTED_CURRENCIES:
        if info.code == currency:
            return info.symbol
    return currency


def format_currency_value(
    value: float,
    currency: str,
    decimal_separator: str = ".",
) -> str:
    """Format a monetary value with symbol, grouping and two decimals.

    Args:
        value: The numeric value to format
        currency: Currency code used for the symbol
        decimal_separator: "." (1,234.56) or "," (1.234,56)

    Returns:
        Formatted string, e.g. "-€1,234.56"
    """
    symbol = get_currency_symbol(currency)
    formatted = f"{round(abs(value), 2):,.2f}"
    if decimal_separator == ",":
        formatted = formatted.replace(",", "_").replace(".", ",").replace("_", ".")

    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{formatted}"

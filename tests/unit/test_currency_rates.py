"""Unit tests for exchange rate lookup, conversion and rebasing."""

import logging

import pytest

from portfolio_engine.currency.rates import (
    DEFAULT_FALLBACK_RATES,
    SUPPORTED_CURRENCIES,
    convert_amount,
    convert_from_base,
    convert_to_base,
    format_currency_value,
    get_currency_symbol,
    get_exchange_rate,
    is_valid_currency,
    recalculate_fallback_rates,
)


class TestGetExchangeRate:
    """Test cases for get_exchange_rate."""

    def test_same_currency_is_one(self) -> None:
        """Test identical codes return exactly 1."""
        assert get_exchange_rate("GBP", "GBP") == 1.0

    def test_single_division(self) -> None:
        """Test rate is from_rate / to_rate."""
        assert get_exchange_rate("USD", "GBP") == pytest.approx(0.85 / 1.15)
        assert get_exchange_rate("EUR", "USD") == pytest.approx(1 / 0.85)

    def test_missing_rate_falls_back_to_defaults(self) -> None:
        """Test a code absent from the table uses the default rate."""
        rates = {"EUR": 1.0}
        assert get_exchange_rate("USD", "EUR", rates) == pytest.approx(0.85)

    def test_zero_rate_is_one_to_one(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test a zero rate turns the conversion into a no-op and logs it."""
        rates = dict(DEFAULT_FALLBACK_RATES, USD=0.0)

        with caplog.at_level(logging.WARNING, logger="portfolio_engine.currency.rates"):
            rate = get_exchange_rate("USD", "GBP", rates)

        assert rate == 1.0
        assert "Invalid exchange rate" in caplog.text
        assert "from_currency=USD" in caplog.text

    def test_negative_target_rate_is_one_to_one(self) -> None:
        """Test a negative rate on the target side is also a no-op."""
        rates = dict(DEFAULT_FALLBACK_RATES, GBP=-1.15)
        assert get_exchange_rate("USD", "GBP", rates) == 1.0

    def test_unknown_currency_is_one_to_one(self) -> None:
        """Test an unknown code without any rate converts 1:1."""
        assert get_exchange_rate("XYZ", "EUR") == 1.0


class TestConvertAmount:
    """Test cases for convert_amount."""

    def test_usd_to_gbp(self) -> None:
        """Test 100 USD -> 85 EUR -> 73.91 GBP."""
        result = convert_amount(100, "USD", "GBP", DEFAULT_FALLBACK_RATES)
        assert result == pytest.approx(73.91, abs=0.01)

    @pytest.mark.parametrize("currency", [c.code for c in SUPPORTED_CURRENCIES])
    @pytest.mark.parametrize("amount", [0.0, 1.0, -250.5, 1234567.89])
    def test_identity_for_same_currency(self, currency: str, amount: float) -> None:
        """Test converting to the same currency returns the amount unchanged."""
        assert convert_amount(amount, currency, currency) == amount

    def test_identity_ignores_broken_rates(self) -> None:
        """Test identity holds even when the table is unusable."""
        assert convert_amount(42.0, "USD", "USD", {"USD": 0.0}) == 42.0

    def test_invalid_rate_returns_amount(self) -> None:
        """Test an invalid rate leaves the amount unchanged."""
        rates = dict(DEFAULT_FALLBACK_RATES, JPY=0.0)
        assert convert_amount(500.0, "JPY", "EUR", rates) == 500.0

    def test_negative_amount(self) -> None:
        """Test negative amounts convert with the same rate."""
        assert convert_amount(-100, "EUR", "USD") == pytest.approx(-117.647, abs=0.001)


class TestBaseConversion:
    """Test cases for convert_to_base and convert_from_base."""

    def test_to_base(self) -> None:
        """Test converting into EUR multiplies by the rate."""
        assert convert_to_base(100, "USD") == pytest.approx(85.0)

    def test_from_base(self) -> None:
        """Test converting out of EUR divides by the rate."""
        assert convert_from_base(115, "GBP") == pytest.approx(100.0)

    def test_base_currency_unchanged(self) -> None:
        """Test the base currency converts to itself."""
        assert convert_to_base(10, "EUR") == 10
        assert convert_from_base(10, "EUR") == 10

    def test_invalid_rate_returns_amount(self) -> None:
        """Test an invalid rate leaves the amount unchanged."""
        assert convert_to_base(10, "USD", {"USD": -1}) == 10
        assert convert_from_base(10, "USD", {"USD": 0}) == 10


class TestRecalculateFallbackRates:
    """Test cases for rebasing a rate table."""

    def test_same_currency_returns_copy(self) -> None:
        """Test rebasing onto the same currency copies the table."""
        result = recalculate_fallback_rates(DEFAULT_FALLBACK_RATES, "EUR", "EUR")

        assert result == DEFAULT_FALLBACK_RATES
        assert result is not DEFAULT_FALLBACK_RATES

    def test_eur_to_usd(self) -> None:
        """Test rebasing EUR -> USD makes USD the rate-1 currency."""
        result = recalculate_fallback_rates(DEFAULT_FALLBACK_RATES, "EUR", "USD")

        assert result["USD"] == 1.0
        assert result["EUR"] == pytest.approx(1 / 0.85)
        assert result["GBP"] == pytest.approx(1.15 / 0.85)
        assert result["JPY"] == pytest.approx(0.0054 / 0.85)

    def test_round_trip_reproduces_table(self) -> None:
        """Test rebasing EUR -> USD -> EUR reproduces the original rates."""
        usd = recalculate_fallback_rates(DEFAULT_FALLBACK_RATES, "EUR", "USD")
        eur = recalculate_fallback_rates(usd, "USD", "EUR")

        assert eur["GBP"] == pytest.approx(1.15, rel=0.01)
        assert eur["USD"] == pytest.approx(0.85, rel=0.01)
        for code, rate in DEFAULT_FALLBACK_RATES.items():
            assert eur[code] == pytest.approx(rate, rel=0.01)

    def test_round_trip_custom_table(self) -> None:
        """Test the round trip also holds for a non-default table."""
        rates = {"EUR": 1.0, "USD": 0.9, "GBP": 1.2, "CHF": 1.05, "JPY": 0.006, "AUD": 0.6, "CAD": 0.65}
        there = recalculate_fallback_rates(rates, "EUR", "CHF")
        back = recalculate_fallback_rates(there, "CHF", "EUR")

        for code, rate in rates.items():
            assert back[code] == pytest.approx(rate, rel=0.01)

    def test_rebased_conversions_agree(self) -> None:
        """Test conversions give the same result before and after rebasing."""
        usd = recalculate_fallback_rates(DEFAULT_FALLBACK_RATES, "EUR", "USD")

        before = convert_amount(100, "GBP", "JPY", DEFAULT_FALLBACK_RATES)
        after = convert_amount(100, "GBP", "JPY", usd)
        assert after == pytest.approx(before)

    def test_extra_codes_are_kept(self) -> None:
        """Test codes outside the supported list are rebased too."""
        rates = dict(DEFAULT_FALLBACK_RATES, SEK=0.09)
        result = recalculate_fallback_rates(rates, "EUR", "USD")

        assert result["SEK"] == pytest.approx(0.09 / 0.85)

    def test_does_not_mutate_input(self) -> None:
        """Test the input table is left untouched."""
        rates = dict(DEFAULT_FALLBACK_RATES)
        recalculate_fallback_rates(rates, "EUR", "GBP")

        assert rates == DEFAULT_FALLBACK_RATES


class TestCurrencyHelpers:
    """Test cases for currency validation and formatting."""

    def test_is_valid_currency(self) -> None:
        """Test supported and unsupported codes."""
        assert is_valid_currency("EUR")
        assert is_valid_currency("CAD")
        assert not is_valid_currency("XYZ")
        assert not is_valid_currency("eur")

    def test_get_currency_symbol(self) -> None:
        """Test symbols and the code fallback."""
        assert get_currency_symbol("EUR") == "€"
        assert get_currency_symbol("AUD") == "A$"
        assert get_currency_symbol("XYZ") == "XYZ"

    def test_format_currency_value(self) -> None:
        """Test grouping, decimals and sign placement."""
        assert format_currency_value(1234.567, "EUR") == "€1,234.57"
        assert format_currency_value(-1234.56, "USD") == "-$1,234.56"
        assert format_currency_value(0, "GBP") == "£0.00"

    def test_format_currency_value_comma_decimal(self) -> None:
        """Test the comma decimal separator swaps grouping characters."""
        assert format_currency_value(1234567.5, "EUR", decimal_separator=",") == "€1.234.567,50"

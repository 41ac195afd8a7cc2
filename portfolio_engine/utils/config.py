"""Configuration management for the portfolio engine.

This module provides simple YAML configuration loading and access, plus the
engine settings (default currency and fallback exchange rates) derived from it.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from portfolio_engine.currency.rates import (
    BASE_CURRENCY,
    DEFAULT_FALLBACK_RATES,
    ExchangeRates,
    is_valid_currency,
    recalculate_fallback_rates,
)
from portfolio_engine.utils.exceptions import ConfigurationError

DEFAULT_CURRENCY_ENV_VAR = "PORTFOLIO_DEFAULT_CURRENCY"


class Config:
    """Read-only view over a nested YAML mapping.

    Keys are addressed with dots, so "currency.default" reads
    config["currency"]["default"].

    Example:
        >>> config = Config.from_file("config/default.yaml")
        >>> config.get("currency.default", "EUR")
        'EUR'
    """

    def __init__(self, config_dict: dict[str, Any]) -> None:
        self._config = config_dict

    @classmethod
    def from_file(cls, filepath: str | Path) -> "Config":
        """Parse a YAML file; an empty file gives an empty configuration.

        Raises:
            FileNotFoundError: If filepath does not exist
            yaml.YAMLError: If the file is not valid YAML
        """
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {filepath}")

        with open(path, "r", encoding="utf-8") as f:
            return cls(yaml.safe_load(f) or {})

    def get(self, key: str, default: Any = None) -> Any:
        """Look up a dotted key, returning default when any part is missing."""
        node: Any = self._config
        for part in key.split("."):
            if not isinstance(node, dict) or node.get(part) is None:
                return default
            node = node[part]
        return node

    def __getitem__(self, key: str) -> Any:
        value = self.get(key)
        if value is None:
            raise KeyError(f"Configuration key not found: {key}")
        return value

    def to_dict(self) -> dict[str, Any]:
        """Shallow copy of the underlying mapping."""
        return self._config.copy()


@dataclass(frozen=True)
class EngineSettings:
    """Settings shared by every engine flow.

    Attributes:
        default_currency: Reporting currency; every monetary value held by the
            caller is expressed in it
        fallback_rates: Rate table expressed relative to default_currency
        log_level: Logging level for command line tools
    """

    default_currency: str = "EUR"
    fallback_rates: ExchangeRates = field(
        default_factory=lambda: dict(DEFAULT_FALLBACK_RATES)
    )
    log_level: str = "INFO"


def load_config(filepath: str | Path | None = None) -> Config:
    """Helper function to load configuration.

    Args:
        filepath: Path to YAML configuration file. If None, uses default path.

    Returns:
        Config instance
    """
    if filepath is None:
        root_dir = Path(__file__).parent.parent.parent
        filepath = root_dir / "config" / "default.yaml"
    return Config.from_file(filepath)


def settings_from_config(config: Config) -> EngineSettings:
    """Build EngineSettings from a Config, applying environment overrides.

    Configured rates are expressed in EUR and are rebased onto the default
    currency when it differs.

    Args:
        config: Loaded configuration

    Returns:
        EngineSettings instance

    Raises:
        ConfigurationError: If the currency or a configured rate is invalid
    """
    default_currency = os.getenv(DEFAULT_CURRENCY_ENV_VAR) or config.get(
        "currency.default", "EUR"
    )
    default_currency = str(default_currency).upper()
    if not is_valid_currency(default_currency):
        raise ConfigurationError(f"Unsupported default currency: {default_currency}")

    rates: ExchangeRates = dict(DEFAULT_FALLBACK_RATES)
    configured = config.get("currency.fallback_rates", {}) or {}
    for code, rate in configured.items():
        try:
            rates[str(code).upper()] = float(rate)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(
                f"Invalid exchange rate for {code}: {rate!r}"
            ) from e

    if default_currency != BASE_CURRENCY:
        rates = recalculate_fallback_rates(rates, BASE_CURRENCY, default_currency)

    return EngineSettings(
        default_currency=default_currency,
        fallback_rates=rates,
        log_level=config.get("logging.level", "INFO"),
    )


def load_engine_settings(config_file: str | Path | None = None) -> EngineSettings:
    """Load engine settings from YAML configuration and an optional .env file.

    The .env file in the project root is read when present; its
    PORTFOLIO_DEFAULT_CURRENCY entry overrides currency.default.

    Args:
        config_file: Path to YAML file. If None, uses config/default.yaml.

    Returns:
        EngineSettings instance

    Raises:
        ConfigurationError: If the configuration file is missing or invalid

    Example:
        >>> settings = load_engine_settings()
        >>> settings.default_currency
        'EUR'
    """
    root_dir = Path(__file__).parent.parent.parent
    env_file = root_dir / ".env"
    if env_file.exists():
        load_dotenv(env_file)

    try:
        config = load_config(config_file)
    except FileNotFoundError as e:
        raise ConfigurationError(str(e)) from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid configuration file: {e}") from e

    return settings_from_config(config)

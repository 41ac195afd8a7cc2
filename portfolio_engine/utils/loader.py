"""Portfolio file loading.

Reads a YAML (or JSON) portfolio description into assets and allocation
options. Keys are snake_case and mirror the Asset fields:

    assets:
      - id: spy
        name: S&P 500 ETF
        ticker: SPY
        asset_class: STOCKS
        sub_asset_type: ETF
        current_value: 7000
        target_mode: PERCENTAGE
        target_percent: 60
    asset_class_targets:
      STOCKS: {target_mode: PERCENTAGE, target_percent: 80}
      BONDS: 20
    portfolio_value: 10000
    cash_delta_amount: 500

A bare number in asset_class_targets is a PERCENTAGE target.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, List, Optional, Type, TypeVar

import yaml

from portfolio_engine.allocation.base import (
    AllocationMode,
    AllocationOptions,
    Asset,
    AssetClass,
    AssetClassTarget,
    AssetClassTargets,
    SubAssetType,
)
from portfolio_engine.utils.exceptions import PortfolioFileError
from portfolio_engine.utils.logging import get_logger

logger = get_logger(__name__)

E = TypeVar("E", bound=Enum)

_OPTIONAL_FLOAT_FIELDS = (
    "target_percent",
    "target_value",
    "shares",
    "price_per_share",
    "original_value",
)


@dataclass
class PortfolioFile:
    """Parsed portfolio file."""

    assets: List[Asset] = field(default_factory=list)
    options: AllocationOptions = field(default_factory=AllocationOptions)


def _parse_enum(enum_cls: Type[E], value: Any, where: str) -> E:
    try:
        return enum_cls(str(value).upper())
    except ValueError as e:
        allowed = ", ".join(m.value for m in enum_cls)
        raise PortfolioFileError(
            f"{where}: unknown {enum_cls.__name__} {value!r} (expected one of {allowed})"
        ) from e


def _parse_mode(value: Any, where: str) -> AllocationMode:
    # YAML 1.1 reads a bare OFF as false
    if value is False:
        value = AllocationMode.OFF.value
    return _parse_enum(AllocationMode, value, where)


def _parse_float(value: Any, where: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise PortfolioFileError(f"{where}: expected a number, got {value!r}") from e


def _parse_optional_float(value: Any, where: str) -> Optional[float]:
    return None if value is None else _parse_float(value, where)


def parse_asset(raw: Any, index: int) -> Asset:
    """Build an Asset from one entry of the assets list.

    Args:
        raw: Mapping read from the file
        index: Position in the list, used for the default id and messages

    Raises:
        PortfolioFileError: If a required field is missing or a value is invalid
    """
    where = f"assets[{index}]"
    if not isinstance(raw, dict):
        raise PortfolioFileError(f"{where}: expected a mapping, got {type(raw).__name__}")

    for required in ("name", "asset_class", "current_value"):
        if raw.get(required) is None:
            raise PortfolioFileError(f"{where}: missing required field '{required}'")

    optional = {
        name: _parse_optional_float(raw.get(name), f"{where}.{name}")
        for name in _OPTIONAL_FLOAT_FIELDS
    }

    return Asset(
        id=str(raw.get("id") or f"asset-{index + 1}"),
        name=str(raw["name"]),
        ticker=str(raw.get("ticker") or ""),
        asset_class=_parse_enum(AssetClass, raw["asset_class"], f"{where}.asset_class"),
        current_value=_parse_float(raw["current_value"], f"{where}.current_value"),
        target_mode=_parse_mode(raw.get("target_mode", "PERCENTAGE"), f"{where}.target_mode"),
        sub_asset_type=_parse_enum(
            SubAssetType, raw.get("sub_asset_type", "NONE"), f"{where}.sub_asset_type"
        ),
        original_currency=raw.get("original_currency"),
        isin=raw.get("isin"),
        **optional,
    )


def parse_asset_class_targets(raw: Any) -> AssetClassTargets:
    """Build class targets from the asset_class_targets mapping.

    Raises:
        PortfolioFileError: If the mapping or one of its entries is invalid
    """
    if not isinstance(raw, dict):
        raise PortfolioFileError("asset_class_targets: expected a mapping")

    targets: AssetClassTargets = {}
    for key, value in raw.items():
        where = f"asset_class_targets.{key}"
        asset_class = _parse_enum(AssetClass, key, where)
        if isinstance(value, dict):
            mode = _parse_mode(value.get("target_mode", "PERCENTAGE"), f"{where}.target_mode")
            percent = _parse_optional_float(value.get("target_percent"), f"{where}.target_percent")
        else:
            mode = AllocationMode.PERCENTAGE
            percent = _parse_float(value, where)
        targets[asset_class] = AssetClassTarget(mode, percent)
    return targets


def parse_portfolio(data: Any) -> PortfolioFile:
    """Build a PortfolioFile from already-decoded file content.

    Raises:
        PortfolioFileError: If the structure is invalid
    """
    if not isinstance(data, dict):
        raise PortfolioFileError("Portfolio file must contain a mapping at the top level")

    raw_assets = data.get("assets") or []
    if not isinstance(raw_assets, list):
        raise PortfolioFileError("assets: expected a list")

    assets = [parse_asset(raw, i) for i, raw in enumerate(raw_assets)]

    ids = [a.id for a in assets]
    duplicates = sorted({i for i in ids if ids.count(i) > 1})
    if duplicates:
        raise PortfolioFileError(f"Duplicate asset ids: {', '.join(duplicates)}")

    raw_targets = data.get("asset_class_targets")
    options = AllocationOptions(
        asset_class_targets=(
            parse_asset_class_targets(raw_targets) if raw_targets is not None else None
        ),
        portfolio_value=_parse_optional_float(data.get("portfolio_value"), "portfolio_value"),
        cash_delta_amount=_parse_optional_float(
            data.get("cash_delta_amount"), "cash_delta_amount"
        ),
    )
    return PortfolioFile(assets=assets, options=options)


def load_portfolio(filepath: str | Path) -> PortfolioFile:
    """Load a portfolio file.

    JSON files are read with the same YAML parser.

    Args:
        filepath: Path to a .yaml/.yml/.json portfolio file

    Returns:
        PortfolioFile with assets and allocation options

    Raises:
        PortfolioFileError: If the file is missing, unparsable or invalid

    Example:
        >>> portfolio = load_portfolio("portfolio.yaml")
        >>> len(portfolio.assets)
        4
    """
    path = Path(filepath)
    if not path.exists():
        raise PortfolioFileError(f"Portfolio file not found: {filepath}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise PortfolioFileError(f"Cannot parse portfolio file {filepath}: {e}") from e

    portfolio = parse_portfolio(data or {})
    logger.info("Loaded %d assets from %s", len(portfolio.assets), path)
    return portfolio

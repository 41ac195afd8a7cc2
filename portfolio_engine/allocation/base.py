"""Data structures for portfolio allocation.

This module defines the allocation-target model shared by the redistribution
engine, the delta calculator and the sync bridge.

Conventions:
- An asset's target_percent is relative to its own asset class: within a
  class, PERCENTAGE-mode assets sum to 100.
- A class target's target_percent is relative to the portfolio value
  (normally excluding cash): PERCENTAGE-mode classes sum to 100.
- All structures are passed by value; engine functions return new objects.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class AssetClass(str, Enum):
    """Top-level asset classes."""

    STOCKS = "STOCKS"
    BONDS = "BONDS"
    CASH = "CASH"
    CRYPTO = "CRYPTO"
    REAL_ESTATE = "REAL_ESTATE"


class SubAssetType(str, Enum):
    """Instrument type within an asset class."""

    ETF = "ETF"
    SINGLE_STOCK = "SINGLE_STOCK"
    SINGLE_BOND = "SINGLE_BOND"
    SAVINGS_ACCOUNT = "SAVINGS_ACCOUNT"
    CHECKING_ACCOUNT = "CHECKING_ACCOUNT"
    BROKERAGE_ACCOUNT = "BROKERAGE_ACCOUNT"
    MONEY_ETF = "MONEY_ETF"
    COIN = "COIN"
    PROPERTY = "PROPERTY"
    REIT = "REIT"
    NONE = "NONE"


CASH_SUB_ASSET_TYPES = frozenset(
    {
        SubAssetType.SAVINGS_ACCOUNT,
        SubAssetType.CHECKING_ACCOUNT,
        SubAssetType.BROKERAGE_ACCOUNT,
        SubAssetType.MONEY_ETF,
    }
)


class AllocationMode(str, Enum):
    """Target semantics for an asset or asset class.

    PERCENTAGE: share of a base value
    SET: fixed absolute amount
    OFF: excluded from rebalancing
    """

    PERCENTAGE = "PERCENTAGE"
    SET = "SET"
    OFF = "OFF"


class AllocationAction(str, Enum):
    """Recommended action for an asset or class."""

    BUY = "BUY"
    SELL = "SELL"
    SAVE = "SAVE"
    INVEST = "INVEST"
    HOLD = "HOLD"
    EXCLUDED = "EXCLUDED"


@dataclass
class Asset:
    """A single position in the allocation-target model.

    Attributes:
        id: Unique identifier
        name: Display name
        ticker: Ticker symbol (empty for accounts)
        asset_class: Asset class the asset belongs to
        sub_asset_type: Instrument type, drives cash classification
        current_value: Value in the reporting currency
        target_mode: PERCENTAGE, SET or OFF
        target_percent: Class-relative percentage (PERCENTAGE mode only)
        target_value: Fixed target amount (SET mode only)
        shares: Optional share count
        price_per_share: Optional price per share
        original_currency: Currency before the first conversion
        original_value: Value before the first conversion
        isin: Optional ISIN
    """

    id: str
    name: str
    ticker: str
    asset_class: AssetClass
    current_value: float
    target_mode: AllocationMode = AllocationMode.PERCENTAGE
    sub_asset_type: SubAssetType = SubAssetType.NONE
    target_percent: Optional[float] = None
    target_value: Optional[float] = None
    shares: Optional[float] = None
    price_per_share: Optional[float] = None
    original_currency: Optional[str] = None
    original_value: Optional[float] = None
    isin: Optional[str] = None

    @property
    def is_cash(self) -> bool:
        """True for CASH-class assets and cash-like sub-types."""
        return (
            self.asset_class == AssetClass.CASH
            or self.sub_asset_type in CASH_SUB_ASSET_TYPES
        )


@dataclass(frozen=True)
class AssetClassTarget:
    """Class-level target.

    Attributes:
        target_mode: PERCENTAGE, SET or OFF
        target_percent: Share of the portfolio value (PERCENTAGE mode only)
    """

    target_mode: AllocationMode
    target_percent: Optional[float] = None


AssetClassTargets = Dict[AssetClass, AssetClassTarget]

DEFAULT_ASSET_CLASS_TARGETS: AssetClassTargets = {
    AssetClass.STOCKS: AssetClassTarget(AllocationMode.PERCENTAGE, 70.0),
    AssetClass.BONDS: AssetClassTarget(AllocationMode.PERCENTAGE, 20.0),
    AssetClass.CASH: AssetClassTarget(AllocationMode.PERCENTAGE, 10.0),
    AssetClass.CRYPTO: AssetClassTarget(AllocationMode.OFF),
    AssetClass.REAL_ESTATE: AssetClassTarget(AllocationMode.OFF),
}


@dataclass(frozen=True)
class AllocationOptions:
    """Optional inputs of the allocation calculator.

    Attributes:
        asset_class_targets: Class-level targets; when None each class falls
            back to the sum of its assets' percentages
        portfolio_value: Base value for percentage targets; defaults to the
            sum of non-OFF assets
        cash_delta_amount: Cash class delta to spread over the other
            PERCENTAGE classes (positive = SAVE, negative = INVEST)
        total_holdings: Denominator for current percentages; defaults to the
            value base
    """

    asset_class_targets: Optional[AssetClassTargets] = None
    portfolio_value: Optional[float] = None
    cash_delta_amount: Optional[float] = None
    total_holdings: Optional[float] = None


@dataclass
class AssetClassSummary:
    """Aggregate figures for one asset class."""

    asset_class: AssetClass
    assets: List[Asset]
    current_total: float
    current_percent: float
    target_mode: AllocationMode
    delta: float
    action: AllocationAction
    target_percent: Optional[float] = None
    target_total: Optional[float] = None


@dataclass
class AllocationDelta:
    """Per-asset difference between current and target allocation."""

    asset_id: str
    current_value: float
    current_percent: float
    current_percent_in_class: float
    target_value: float
    target_percent: float
    delta: float
    delta_percent: float
    action: AllocationAction


@dataclass
class PortfolioAllocation:
    """Complete allocation snapshot.

    Attributes:
        assets: Assets the snapshot was computed from
        asset_classes: One summary per asset class present
        total_value: Value base for targets (non-OFF assets unless supplied)
        total_holdings: Sum of all assets' current values, OFF included
        deltas: One delta per asset
        is_valid: False when validation_errors is non-empty
        validation_errors: Human-readable validation findings
    """

    assets: List[Asset]
    asset_classes: List[AssetClassSummary]
    total_value: float
    total_holdings: float
    deltas: List[AllocationDelta]
    is_valid: bool
    validation_errors: List[str] = field(default_factory=list)

    def get_delta(self, asset_id: str) -> Optional[AllocationDelta]:
        """Find the delta computed for asset_id."""
        for delta in self.deltas:
            if delta.asset_id == asset_id:
                return delta
        return None

    def get_class_summary(self, asset_class: AssetClass) -> Optional[AssetClassSummary]:
        """Find the summary computed for asset_class."""
        for summary in self.asset_classes:
            if summary.asset_class == asset_class:
                return summary
        return None

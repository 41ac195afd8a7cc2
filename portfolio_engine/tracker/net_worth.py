"""Net worth tracker data model (the shares x price holdings model).

Holdings and cash entries may carry a SyncMetadata envelope. The holdings
model never reads it; it only exists so that an entry synced from the
allocation model can be mapped back without losing targets or
classification.
"""

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from portfolio_engine.allocation.base import AllocationMode, AssetClass, SubAssetType


class HoldingAssetClass(str, Enum):
    """Asset classes used by the holdings model."""

    STOCKS = "STOCKS"
    BONDS = "BONDS"
    ETF = "ETF"
    CRYPTO = "CRYPTO"
    REAL_ESTATE = "REAL_ESTATE"
    OTHER = "OTHER"


class CashAccountType(str, Enum):
    """Cash account types used by the holdings model."""

    SAVINGS = "SAVINGS"
    CHECKING = "CHECKING"
    BROKERAGE = "BROKERAGE"
    CREDIT_CARD = "CREDIT_CARD"
    OTHER = "OTHER"


@dataclass(frozen=True)
class SyncMetadata:
    """Allocation-model fields carried through the holdings model.

    Attributes:
        asset_id: Id of the originating Asset
        ticker: Original ticker (cash entries have no ticker of their own)
        target_mode: Original allocation mode
        target_percent: Original class-relative percentage
        target_value: Original SET amount
        asset_class: Original asset class
        sub_asset_type: Original sub-type
        isin: Original ISIN
        shares: Original share count (cash entries only)
        price_per_share: Original price (cash entries only)

    Amounts are expressed in the dataset's default currency.
    """

    asset_id: Optional[str] = None
    ticker: Optional[str] = None
    target_mode: Optional[AllocationMode] = None
    target_percent: Optional[float] = None
    target_value: Optional[float] = None
    asset_class: Optional[AssetClass] = None
    sub_asset_type: Optional[SubAssetType] = None
    isin: Optional[str] = None
    shares: Optional[float] = None
    price_per_share: Optional[float] = None


@dataclass
class AssetHolding:
    """Security position stored as shares x price."""

    id: str
    ticker: str
    name: str
    shares: float
    price_per_share: float
    currency: str
    asset_class: HoldingAssetClass
    note: Optional[str] = None
    sync_metadata: Optional[SyncMetadata] = None

    @property
    def value(self) -> float:
        return self.shares * self.price_per_share


@dataclass
class CashEntry:
    """Cash or liquidity account balance."""

    id: str
    account_name: str
    account_type: CashAccountType
    balance: float
    currency: str
    note: Optional[str] = None
    sync_metadata: Optional[SyncMetadata] = None


@dataclass
class PensionEntry:
    id: str
    name: str
    current_value: float
    currency: str
    pension_type: str = "OTHER"
    note: Optional[str] = None


@dataclass
class FinancialOperation:
    """Dated financial operation such as a dividend or a tax payment."""

    id: str
    date: str
    type: str
    description: str
    amount: float
    currency: str
    related_asset_id: Optional[str] = None
    related_account_id: Optional[str] = None
    note: Optional[str] = None


@dataclass
class MonthlySnapshot:
    year: int
    month: int
    assets: List[AssetHolding] = field(default_factory=list)
    cash_entries: List[CashEntry] = field(default_factory=list)
    pensions: List[PensionEntry] = field(default_factory=list)
    operations: List[FinancialOperation] = field(default_factory=list)
    is_frozen: bool = False
    frozen_date: Optional[str] = None
    month_note: Optional[str] = None


@dataclass
class NetWorthYearData:
    year: int
    months: List[MonthlySnapshot] = field(default_factory=list)
    is_archived: bool = False


@dataclass(frozen=True)
class NetWorthSettings:
    show_pension_in_net_worth: bool = True
    include_unrealized_gains: bool = True
    sync_with_asset_allocation: bool = False


@dataclass
class NetWorthTrackerData:
    """Complete net worth dataset.

    Attributes:
        years: Year containers, sorted by year
        current_year: Year of the live (editable) month
        current_month: Live month, 1-12
        default_currency: Currency the dataset is expressed in
        settings: Tracker settings
    """

    years: List[NetWorthYearData]
    current_year: int
    current_month: int
    default_currency: str = "EUR"
    settings: NetWorthSettings = field(default_factory=NetWorthSettings)

    def find_month(self, year: int, month: int) -> Optional[MonthlySnapshot]:
        """Return the snapshot for year/month, or None."""
        for year_data in self.years:
            if year_data.year != year:
                continue
            for snapshot in year_data.months:
                if snapshot.month == month:
                    return snapshot
        return None


@dataclass
class MonthlyVariation:
    """Month-over-month net worth change."""

    month: str
    net_worth: float
    change_from_prev_month: float
    change_percent: float
    asset_value_change: float
    cash_change: float
    pension_change: float


@dataclass
class NetWorthForecast:
    month: str
    projected_net_worth: float
    confidence_level: str
    based_on_months: int


def generate_net_worth_id() -> str:
    """Generate a unique id for a holdings-model entry."""
    return f"nw-{uuid.uuid4().hex[:12]}"


def create_empty_monthly_snapshot(year: int, month: int) -> MonthlySnapshot:
    return MonthlySnapshot(year=year, month=month)


def create_empty_net_worth_year_data(year: int) -> NetWorthYearData:
    return NetWorthYearData(year=year)

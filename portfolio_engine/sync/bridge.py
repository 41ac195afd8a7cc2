"""Bidirectional sync between the allocation model and the net worth tracker.

Only the current month of the net worth dataset takes part in the sync:

- Assets -> net worth: non-cash assets become AssetHolding (shares x price),
  cash assets become CashEntry. The current month's holdings and cash
  entries are replaced; pensions, operations and every other month are kept.
- Net worth -> assets: holdings and cash entries of the current month become
  Assets, with current_value recomputed from shares x price.

Every entry carries a SyncMetadata envelope with the allocation-only fields
(targets, classification, ISIN), so a round trip loses nothing. Entries
without metadata come back with target_mode OFF.

Asset values are in the dataset's default currency and pushed entries are
written in it unchanged. Entries the tracker holds in another currency are
converted into the default with convert_amount when pulled.
"""

from dataclasses import replace
from typing import Callable, List, Optional

from portfolio_engine.allocation.base import (
    AllocationMode,
    Asset,
    AssetClass,
    SubAssetType,
)
from portfolio_engine.currency.rates import (
    DEFAULT_FALLBACK_RATES,
    ExchangeRates,
    convert_amount,
)
from portfolio_engine.tracker.net_worth import (
    AssetHolding,
    CashAccountType,
    CashEntry,
    HoldingAssetClass,
    MonthlySnapshot,
    NetWorthTrackerData,
    SyncMetadata,
    create_empty_monthly_snapshot,
    create_empty_net_worth_year_data,
)
from portfolio_engine.utils.logging import get_logger

logger = get_logger(__name__)

_HOLDING_CLASS_BY_ASSET_CLASS = {
    AssetClass.STOCKS: HoldingAssetClass.STOCKS,
    AssetClass.BONDS: HoldingAssetClass.BONDS,
    AssetClass.CRYPTO: HoldingAssetClass.CRYPTO,
    AssetClass.REAL_ESTATE: HoldingAssetClass.REAL_ESTATE,
    AssetClass.CASH: HoldingAssetClass.OTHER,
}

_ASSET_CLASS_BY_HOLDING_CLASS = {
    HoldingAssetClass.STOCKS: AssetClass.STOCKS,
    HoldingAssetClass.BONDS: AssetClass.BONDS,
    HoldingAssetClass.ETF: AssetClass.STOCKS,
    HoldingAssetClass.CRYPTO: AssetClass.CRYPTO,
    HoldingAssetClass.REAL_ESTATE: AssetClass.REAL_ESTATE,
    HoldingAssetClass.OTHER: AssetClass.STOCKS,
}

_ACCOUNT_TYPE_BY_SUB_TYPE = {
    SubAssetType.SAVINGS_ACCOUNT: CashAccountType.SAVINGS,
    SubAssetType.CHECKING_ACCOUNT: CashAccountType.CHECKING,
    SubAssetType.BROKERAGE_ACCOUNT: CashAccountType.BROKERAGE,
    SubAssetType.MONEY_ETF: CashAccountType.BROKERAGE,
}

_SUB_TYPE_BY_ACCOUNT_TYPE = {
    CashAccountType.SAVINGS: SubAssetType.SAVINGS_ACCOUNT,
    CashAccountType.CHECKING: SubAssetType.CHECKING_ACCOUNT,
    CashAccountType.BROKERAGE: SubAssetType.BROKERAGE_ACCOUNT,
}


def map_asset_class_to_net_worth(asset_class: AssetClass) -> HoldingAssetClass:
    return _HOLDING_CLASS_BY_ASSET_CLASS.get(asset_class, HoldingAssetClass.OTHER)


def map_net_worth_asset_class_to_allocation(asset_class: HoldingAssetClass) -> AssetClass:
    return _ASSET_CLASS_BY_HOLDING_CLASS.get(asset_class, AssetClass.STOCKS)


def map_sub_asset_type_to_cash_account_type(sub_asset_type: SubAssetType) -> CashAccountType:
    return _ACCOUNT_TYPE_BY_SUB_TYPE.get(sub_asset_type, CashAccountType.OTHER)


def _metadata_for(asset: Asset, include_shares: bool = False) -> SyncMetadata:
    return SyncMetadata(
        asset_id=asset.id,
        ticker=asset.ticker,
        target_mode=asset.target_mode,
        target_percent=asset.target_percent,
        target_value=asset.target_value,
        asset_class=asset.asset_class,
        sub_asset_type=asset.sub_asset_type,
        isin=asset.isin,
        shares=asset.shares if include_shares else None,
        price_per_share=asset.price_per_share if include_shares else None,
    )


def _to_cash_entry(asset: Asset, currency: str) -> CashEntry:
    return CashEntry(
        id=asset.id,
        account_name=asset.name,
        account_type=map_sub_asset_type_to_cash_account_type(asset.sub_asset_type),
        balance=asset.current_value,
        currency=currency,
        sync_metadata=_metadata_for(asset, include_shares=True),
    )


def _to_holding(asset: Asset, currency: str) -> AssetHolding:
    # Falls back to 1 share priced at the full value
    if asset.shares is not None and asset.shares > 0:
        shares = asset.shares
        if asset.price_per_share is not None and asset.price_per_share > 0:
            price = asset.price_per_share
        else:
            price = asset.current_value / shares
    else:
        shares = 1.0
        price = asset.current_value

    return AssetHolding(
        id=asset.id,
        ticker=asset.ticker or asset.name[:5].upper(),
        name=asset.name,
        shares=shares,
        price_per_share=price,
        currency=currency,
        asset_class=map_asset_class_to_net_worth(asset.asset_class),
        sync_metadata=_metadata_for(asset),
    )


def _with_current_month(
    data: NetWorthTrackerData,
    build_month: Callable[[MonthlySnapshot], MonthlySnapshot],
) -> NetWorthTrackerData:
    """Return a copy of data whose current month is rebuilt by build_month.

    Years and months other than the current one are shared by reference.
    """
    year, month = data.current_year, data.current_month
    years = list(data.years)

    year_index = next((i for i, y in enumerate(years) if y.year == year), None)
    if year_index is None:
        year_data = create_empty_net_worth_year_data(year)
        years.append(year_data)
        years.sort(key=lambda y: y.year)
        year_index = years.index(year_data)
    year_data = years[year_index]

    months = list(year_data.months)
    month_index = next((i for i, m in enumerate(months) if m.month == month), None)
    if month_index is None:
        new_month = build_month(create_empty_monthly_snapshot(year, month))
        months.append(new_month)
        months.sort(key=lambda m: m.month)
    else:
        months[month_index] = build_month(months[month_index])

    years[year_index] = replace(year_data, months=months)
    return replace(data, years=years)


def sync_asset_allocation_to_net_worth(
    assets: List[Asset],
    net_worth_data: NetWorthTrackerData,
) -> NetWorthTrackerData:
    """Mirror allocation assets into the net worth tracker's current month.

    The current year/month is created when missing. Its holdings and cash
    entries are replaced; everything else is left as is. The input dataset
    is not modified. Entries are written in the dataset's default currency
    without conversion.

    Args:
        assets: Assets from the allocation model, in the dataset's default currency
        net_worth_data: Net worth dataset

    Returns:
        New net worth dataset
    """
    currency = net_worth_data.default_currency

    holdings: List[AssetHolding] = []
    cash_entries: List[CashEntry] = []
    for asset in assets:
        if asset.is_cash:
            cash_entries.append(_to_cash_entry(asset, currency))
        else:
            holdings.append(_to_holding(asset, currency))

    def build_month(snapshot: MonthlySnapshot) -> MonthlySnapshot:
        return replace(snapshot, assets=holdings, cash_entries=cash_entries)

    logger.info(
        "Synced %d holdings and %d cash entries to net worth %d-%02d",
        len(holdings),
        len(cash_entries),
        net_worth_data.current_year,
        net_worth_data.current_month,
    )
    return _with_current_month(net_worth_data, build_month)


def _holding_to_asset(
    holding: AssetHolding, default_currency: str, rates: ExchangeRates
) -> Asset:
    meta = holding.sync_metadata or SyncMetadata()
    value = holding.shares * holding.price_per_share

    return Asset(
        id=meta.asset_id or holding.id,
        name=holding.name,
        ticker=meta.ticker if meta.ticker is not None else holding.ticker,
        asset_class=(
            meta.asset_class or map_net_worth_asset_class_to_allocation(holding.asset_class)
        ),
        sub_asset_type=meta.sub_asset_type or SubAssetType.ETF,
        current_value=convert_amount(value, holding.currency, default_currency, rates),
        shares=holding.shares,
        price_per_share=convert_amount(
            holding.price_per_share, holding.currency, default_currency, rates
        ),
        original_currency=holding.currency,
        original_value=value,
        isin=meta.isin,
        target_mode=meta.target_mode or AllocationMode.OFF,
        target_percent=meta.target_percent,
        target_value=meta.target_value,
    )


def _cash_entry_to_asset(
    entry: CashEntry, default_currency: str, rates: ExchangeRates
) -> Asset:
    meta = entry.sync_metadata or SyncMetadata()
    sub_asset_type = meta.sub_asset_type or _SUB_TYPE_BY_ACCOUNT_TYPE.get(
        entry.account_type, SubAssetType.SAVINGS_ACCOUNT
    )

    return Asset(
        id=meta.asset_id or entry.id,
        name=entry.account_name,
        ticker=meta.ticker or "",
        asset_class=meta.asset_class or AssetClass.CASH,
        sub_asset_type=sub_asset_type,
        current_value=convert_amount(entry.balance, entry.currency, default_currency, rates),
        shares=meta.shares,
        price_per_share=meta.price_per_share,
        original_currency=entry.currency,
        original_value=entry.balance,
        isin=meta.isin,
        target_mode=meta.target_mode or AllocationMode.OFF,
        target_percent=meta.target_percent,
        target_value=meta.target_value,
    )


def sync_net_worth_to_asset_allocation(
    net_worth_data: NetWorthTrackerData,
    rates: Optional[ExchangeRates] = None,
) -> List[Asset]:
    """Build allocation assets from the net worth tracker's current month.

    current_value is recomputed as shares x price, so edits made on the
    holdings side win after a round trip.

    Args:
        net_worth_data: Net worth dataset
        rates: Rate table relative to the dataset's default currency

    Returns:
        Assets (holdings first, then cash); empty when the current month
        does not exist
    """
    rates = rates or DEFAULT_FALLBACK_RATES
    snapshot = net_worth_data.find_month(
        net_worth_data.current_year, net_worth_data.current_month
    )
    if snapshot is None:
        logger.debug("No current month in net worth data, nothing to sync")
        return []

    default_currency = net_worth_data.default_currency
    assets = [_holding_to_asset(h, default_currency, rates) for h in snapshot.assets]
    assets.extend(
        _cash_entry_to_asset(c, default_currency, rates) for c in snapshot.cash_entries
    )
    return assets

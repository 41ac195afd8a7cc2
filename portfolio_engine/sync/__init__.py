"""Sync Layer.

Mirrors the allocation model into the net worth tracker's current month and
back, carrying allocation-only fields in SyncMetadata.
"""

from portfolio_engine.sync.bridge import (
    map_asset_class_to_net_worth,
    map_net_worth_asset_class_to_allocation,
    map_sub_asset_type_to_cash_account_type,
    sync_asset_allocation_to_net_worth,
    sync_net_worth_to_asset_allocation,
)

__all__ = [
    "sync_asset_allocation_to_net_worth",
    "sync_net_worth_to_asset_allocation",
    "map_asset_class_to_net_worth",
    "map_net_worth_asset_class_to_allocation",
    "map_sub_asset_type_to_cash_account_type",
]

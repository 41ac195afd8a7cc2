"""Allocation Layer.

This layer computes how a portfolio deviates from its target allocation and
keeps percentage targets consistent when they are edited.

Components:
- Asset, AssetClassTarget, AllocationOptions: input model
- AssetClassSummary, AllocationDelta, PortfolioAllocation: results
- calculate_portfolio_allocation: summary and delta calculator entry point
- redistribute_*/handle_asset_removal: redistribution engine
"""

from portfolio_engine.allocation.base import (
    DEFAULT_ASSET_CLASS_TARGETS,
    AllocationAction,
    AllocationDelta,
    AllocationMode,
    AllocationOptions,
    Asset,
    AssetClass,
    AssetClassSummary,
    AssetClassTarget,
    AssetClassTargets,
    PortfolioAllocation,
    SubAssetType,
)
from portfolio_engine.allocation.calculator import (
    calculate_allocation_deltas,
    calculate_asset_class_summaries,
    calculate_portfolio_allocation,
    determine_action,
    group_assets_by_class,
    validate_allocation,
)
from portfolio_engine.allocation.redistribution import (
    distribute_delta_to_assets,
    handle_asset_removal,
    redistribute_asset_class_percentages,
    redistribute_asset_percentages_in_class,
)

__all__ = [
    "Asset",
    "AssetClass",
    "SubAssetType",
    "AllocationMode",
    "AllocationAction",
    "AssetClassTarget",
    "AssetClassTargets",
    "AllocationOptions",
    "AssetClassSummary",
    "AllocationDelta",
    "PortfolioAllocation",
    "DEFAULT_ASSET_CLASS_TARGETS",
    "calculate_portfolio_allocation",
    "calculate_asset_class_summaries",
    "calculate_allocation_deltas",
    "determine_action",
    "group_assets_by_class",
    "validate_allocation",
    "redistribute_asset_class_percentages",
    "redistribute_asset_percentages_in_class",
    "distribute_delta_to_assets",
    "handle_asset_removal",
]

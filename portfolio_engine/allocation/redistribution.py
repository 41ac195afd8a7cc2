"""Proportional redistribution of percentage targets.

Whenever one percentage target is edited or a percentage asset is removed,
its peers are rescaled so the group keeps summing to a fixed total:

- Asset classes: PERCENTAGE classes sum to 100 of the portfolio value.
- Assets: PERCENTAGE assets sum to 100 within their class.

Peers keep their relative proportions. When every peer is at 0 the amount is
split equally instead. SET and OFF entries are never touched.
"""

from dataclasses import replace
from typing import Dict, List, Sequence

from portfolio_engine.allocation.base import (
    AllocationMode,
    Asset,
    AssetClass,
    AssetClassTarget,
    AssetClassTargets,
)
from portfolio_engine.utils.logging import get_logger

logger = get_logger(__name__)

def redistribute_equally(remaining_percent: float, item_count: int) -> float:
    """Return each item's share when remaining_percent is split equally."""
    if item_count == 0:
        return 0.0
    return remaining_percent / item_count


def redistribute_proportionally(
    weights: Sequence[float],
    remaining_percent: float,
) -> List[float]:
    """Split remaining_percent in proportion to weights.

    Falls back to an equal split when the weights sum to zero.

    Example:
        >>> [round(s, 2) for s in redistribute_proportionally([40, 30], 30)]
        [17.14, 12.86]
    """
    total = sum(weights)
    if total == 0:
        share = redistribute_equally(remaining_percent, len(weights))
        return [share for _ in weights]
    return [w / total * remaining_percent for w in weights]


def _clamp_percent(value: float) -> float:
    return min(max(value, 0.0), 100.0)


def redistribute_asset_class_percentages(
    targets: AssetClassTargets,
    edited_class: AssetClass,
    new_percent: float,
) -> AssetClassTargets:
    """Set one class's percentage and rescale the other PERCENTAGE classes.

    The other classes share 100 - new_percent in proportion to their current
    percentages (equally if they are all 0). Negative percentages weigh as 0.

    Args:
        targets: Current class targets
        edited_class: Class whose percentage was edited
        new_percent: New percentage, clamped to [0, 100]

    Returns:
        New class-target map

    Example:
        >>> result = redistribute_asset_class_percentages(targets, AssetClass.CASH, 10)
        >>> # STOCKS 60 / BONDS 35 / CASH 5 -> STOCKS 56.84 / BONDS 33.16
    """
    new_percent = _clamp_percent(new_percent)
    updated: AssetClassTargets = dict(targets)

    current = updated.get(edited_class, AssetClassTarget(AllocationMode.PERCENTAGE))
    updated[edited_class] = replace(current, target_percent=new_percent)

    others = [
        cls
        for cls, target in updated.items()
        if cls != edited_class and target.target_mode == AllocationMode.PERCENTAGE
    ]
    if not others:
        return updated

    remaining = 100.0 - new_percent
    shares = redistribute_proportionally(
        [max(updated[cls].target_percent or 0.0, 0.0) for cls in others], remaining
    )
    for cls, share in zip(others, shares):
        updated[cls] = replace(updated[cls], target_percent=share)

    logger.debug(
        "Redistributed %.2f%% across %d classes after editing %s",
        remaining,
        len(others),
        edited_class.value,
    )
    return updated


def redistribute_asset_percentages_in_class(
    assets: List[Asset],
    edited_asset_id: str,
    new_target_percent: float,
) -> List[Asset]:
    """Set one asset's class-relative percentage and rescale its peers.

    The pre-edit total of the class's PERCENTAGE assets is preserved: the
    peers share pre_edit_total - new_target_percent in proportion to their
    current percentages (equally if they are all 0). Negative percentages
    count as 0 in both the total and the weights.

    Args:
        assets: All assets
        edited_asset_id: Asset whose percentage was edited
        new_target_percent: New percentage, clamped to [0, 100]

    Returns:
        New list of assets; unchanged copies when the asset is unknown or not
        in PERCENTAGE mode
    """
    edited = next((a for a in assets if a.id == edited_asset_id), None)
    if edited is None or edited.target_mode != AllocationMode.PERCENTAGE:
        logger.debug("Asset %s is not a percentage asset, nothing to redistribute", edited_asset_id)
        return list(assets)

    new_target_percent = _clamp_percent(new_target_percent)
    class_peers = [
        a
        for a in assets
        if a.asset_class == edited.asset_class and a.target_mode == AllocationMode.PERCENTAGE
    ]
    pre_edit_total = sum(max(a.target_percent or 0.0, 0.0) for a in class_peers)
    others = [a for a in class_peers if a.id != edited_asset_id]

    remaining = max(pre_edit_total - new_target_percent, 0.0)
    shares = redistribute_proportionally(
        [max(a.target_percent or 0.0, 0.0) for a in others], remaining
    )
    new_percents: Dict[str, float] = {a.id: s for a, s in zip(others, shares)}
    new_percents[edited_asset_id] = new_target_percent

    return [
        replace(a, target_percent=new_percents[a.id]) if a.id in new_percents else a
        for a in assets
    ]


def distribute_delta_to_assets(
    assets: List[Asset],
    asset_class: AssetClass,
    delta: float,
) -> Dict[str, float]:
    """Split a class-level rebalance amount across the class's PERCENTAGE assets.

    Weighted by each asset's target_percent, equally if all weights are 0.

    Returns:
        Mapping of asset id to its share of delta
    """
    class_assets = [
        a
        for a in assets
        if a.asset_class == asset_class and a.target_mode == AllocationMode.PERCENTAGE
    ]
    if not class_assets:
        return {}

    weights = [max(a.target_percent or 0.0, 0.0) for a in class_assets]
    shares = redistribute_proportionally(weights, delta)
    return {a.id: share for a, share in zip(class_assets, shares)}


def handle_asset_removal(assets: List[Asset], removed_asset: Asset) -> List[Asset]:
    """Remove an asset and hand its percentage to its class peers.

    The vacated percentage of a PERCENTAGE asset is added to the remaining
    PERCENTAGE assets of the same class in proportion to their percentages
    (equally if they are all 0), so the class keeps summing to 100.

    Args:
        assets: All assets, including removed_asset
        removed_asset: Asset being deleted

    Returns:
        Remaining assets
    """
    remaining_assets = [a for a in assets if a.id != removed_asset.id]

    if removed_asset.target_mode != AllocationMode.PERCENTAGE:
        return remaining_assets

    peers = [
        a
        for a in remaining_assets
        if a.asset_class == removed_asset.asset_class
        and a.target_mode == AllocationMode.PERCENTAGE
    ]
    vacated = max(removed_asset.target_percent or 0.0, 0.0)
    if not peers or vacated == 0:
        return remaining_assets

    weights = [max(a.target_percent or 0.0, 0.0) for a in peers]
    additions = redistribute_proportionally(weights, vacated)
    new_percents = {
        a.id: w + extra for a, w, extra in zip(peers, weights, additions)
    }

    logger.debug(
        "Redistributed %.2f%% from removed asset %s to %d peers",
        vacated,
        removed_asset.id,
        len(peers),
    )
    return [
        replace(a, target_percent=new_percents[a.id]) if a.id in new_percents else a
        for a in remaining_assets
    ]

"""Allocation summary and delta calculator.

Computes how a portfolio deviates from its target allocation, per asset class
and per asset, and which action to take for each.

Class target resolution (first match wins):
1. Every asset in the class is OFF -> class is OFF
2. Any asset is SET -> class target is the sum of SET target values
3. An explicit class target exists -> its mode and percent of the value base
4. Otherwise -> the sum of the assets' own percentages, as a percent of the
   value base

Validation problems are reported as data, never raised.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from portfolio_engine.allocation.base import (
    AllocationAction,
    AllocationDelta,
    AllocationMode,
    AllocationOptions,
    Asset,
    AssetClass,
    AssetClassSummary,
    AssetClassTargets,
    PortfolioAllocation,
)
from portfolio_engine.utils.logging import get_logger

logger = get_logger(__name__)

# Deltas smaller than this (in currency units) do not warrant an action
ACTION_THRESHOLD = 100.0

# Allowed deviation from 100% for class-relative percentages
VALIDATION_TOLERANCE = 0.1


@dataclass
class ValidationResult:
    """Outcome of validate_allocation."""

    is_valid: bool
    errors: List[str] = field(default_factory=list)


def calculate_total_value(assets: List[Asset]) -> float:
    """Sum the current value of every asset that is not OFF."""
    return sum(a.current_value for a in assets if a.target_mode != AllocationMode.OFF)


def group_assets_by_class(assets: List[Asset]) -> Dict[AssetClass, List[Asset]]:
    """Partition assets into asset-class buckets.

    Bucket order carries no meaning; every class is computed independently.
    """
    grouped: Dict[AssetClass, List[Asset]] = {}
    for asset in assets:
        grouped.setdefault(asset.asset_class, []).append(asset)
    return grouped


def determine_action(
    asset_class: AssetClass,
    delta: float,
    target_mode: AllocationMode,
) -> AllocationAction:
    """Determine the recommended action for a delta.

    Args:
        asset_class: Class of the asset or summary
        delta: Target minus current value
        target_mode: Allocation mode of the asset or class

    Returns:
        EXCLUDED for OFF, HOLD below the threshold, SAVE/INVEST for cash,
        BUY/SELL otherwise
    """
    if target_mode == AllocationMode.OFF:
        return AllocationAction.EXCLUDED

    if abs(delta) < ACTION_THRESHOLD:
        return AllocationAction.HOLD

    if asset_class == AssetClass.CASH:
        return AllocationAction.SAVE if delta > 0 else AllocationAction.INVEST

    return AllocationAction.BUY if delta > 0 else AllocationAction.SELL


def _class_total(class_assets: List[Asset]) -> float:
    return sum(
        a.current_value for a in class_assets if a.target_mode != AllocationMode.OFF
    )


def _resolve_class_target(
    asset_class: AssetClass,
    class_assets: List[Asset],
    total_value: float,
    asset_class_targets: Optional[AssetClassTargets],
) -> Tuple[AllocationMode, Optional[float], Optional[float]]:
    """Resolve a class's (mode, percent, target total) by priority order."""
    if all(a.target_mode == AllocationMode.OFF for a in class_assets):
        return AllocationMode.OFF, None, None

    if any(a.target_mode == AllocationMode.SET for a in class_assets):
        set_total = sum(
            a.target_value or 0.0
            for a in class_assets
            if a.target_mode == AllocationMode.SET
        )
        return AllocationMode.SET, None, set_total

    if asset_class_targets and asset_class in asset_class_targets:
        class_target = asset_class_targets[asset_class]
        target_total = None
        if (
            class_target.target_mode == AllocationMode.PERCENTAGE
            and class_target.target_percent is not None
        ):
            target_total = (
                class_target.target_percent / 100 * total_value if total_value > 0 else 0.0
            )
        return class_target.target_mode, class_target.target_percent, target_total

    logger.debug("No class target for %s, summing asset percentages", asset_class.value)
    target_percent = sum(
        a.target_percent or 0.0
        for a in class_assets
        if a.target_mode == AllocationMode.PERCENTAGE
    )
    target_total = target_percent / 100 * total_value if total_value > 0 else 0.0
    return AllocationMode.PERCENTAGE, target_percent, target_total


def calculate_asset_class_summaries(
    assets: List[Asset],
    total_value: float,
    options: Optional[AllocationOptions] = None,
) -> List[AssetClassSummary]:
    """Calculate one summary per asset class.

    Args:
        assets: Assets to summarise
        total_value: Value base for percentage targets
        options: total_holdings (current-percent denominator, defaults to
            total_value) and asset_class_targets are read from here

    Returns:
        List of AssetClassSummary, one per class present in assets
    """
    options = options or AllocationOptions()
    percentage_base = (
        options.total_holdings if options.total_holdings is not None else total_value
    )

    summaries = []
    for asset_class, class_assets in group_assets_by_class(assets).items():
        current_total = _class_total(class_assets)
        current_percent = (
            current_total / percentage_base * 100 if percentage_base > 0 else 0.0
        )

        target_mode, target_percent, target_total = _resolve_class_target(
            asset_class, class_assets, total_value, options.asset_class_targets
        )
        delta = (target_total or 0.0) - current_total

        summaries.append(
            AssetClassSummary(
                asset_class=asset_class,
                assets=class_assets,
                current_total=current_total,
                current_percent=current_percent,
                target_mode=target_mode,
                target_percent=target_percent,
                target_total=target_total,
                delta=delta,
                action=determine_action(asset_class, delta, target_mode),
            )
        )

    return summaries


def _non_cash_percentage_total(asset_class_targets: AssetClassTargets) -> float:
    return sum(
        target.target_percent or 0.0
        for cls, target in asset_class_targets.items()
        if cls != AssetClass.CASH
        and target.target_mode == AllocationMode.PERCENTAGE
        and (target.target_percent or 0.0) > 0
    )


def _cash_adjustment(
    asset_class: AssetClass,
    asset_class_targets: Optional[AssetClassTargets],
    cash_delta_amount: Optional[float],
    non_cash_total: float,
) -> float:
    """Share of the cash delta moved into (or out of) a non-cash class.

    A negative cash delta (INVEST) adds to the class target, a positive one
    (SAVE) subtracts from it, in proportion to the class's target percent.
    """
    if (
        asset_class == AssetClass.CASH
        or not cash_delta_amount
        or non_cash_total <= 0
        or not asset_class_targets
    ):
        return 0.0

    class_target = asset_class_targets.get(asset_class)
    if (
        class_target is None
        or class_target.target_mode != AllocationMode.PERCENTAGE
        or not class_target.target_percent
        or class_target.target_percent <= 0
    ):
        return 0.0

    proportion = class_target.target_percent / non_cash_total
    return -cash_delta_amount * proportion


def calculate_allocation_deltas(
    assets: List[Asset],
    total_value: float,
    options: Optional[AllocationOptions] = None,
) -> List[AllocationDelta]:
    """Calculate the target value, delta and action of every asset.

    A PERCENTAGE asset's target_percent is relative to its class, so its
    target value is that percent of the class's resolved target value.

    Args:
        assets: Assets to evaluate
        total_value: Value base for percentage targets (typically excl. cash)
        options: asset_class_targets, cash_delta_amount and total_holdings
            are read from here

    Returns:
        List of AllocationDelta, one per asset
    """
    options = options or AllocationOptions()
    targets = options.asset_class_targets
    percentage_base = (
        options.total_holdings if options.total_holdings is not None else total_value
    )

    non_cash_total = 0.0
    if targets and options.cash_delta_amount:
        non_cash_total = _non_cash_percentage_total(targets)

    deltas = []
    for asset_class, class_assets in group_assets_by_class(assets).items():
        class_total = _class_total(class_assets)

        class_mode, _, class_target_value = _resolve_class_target(
            asset_class, class_assets, total_value, targets
        )
        class_target_value = class_target_value or 0.0
        if class_mode == AllocationMode.PERCENTAGE:
            class_target_value += _cash_adjustment(
                asset_class, targets, options.cash_delta_amount, non_cash_total
            )

        for asset in class_assets:
            if asset.target_mode == AllocationMode.OFF:
                deltas.append(
                    AllocationDelta(
                        asset_id=asset.id,
                        current_value=asset.current_value,
                        current_percent=0.0,
                        current_percent_in_class=0.0,
                        target_value=0.0,
                        target_percent=0.0,
                        delta=0.0,
                        delta_percent=0.0,
                        action=AllocationAction.EXCLUDED,
                    )
                )
                continue

            current_percent = (
                asset.current_value / percentage_base * 100 if percentage_base > 0 else 0.0
            )
            current_percent_in_class = (
                asset.current_value / class_total * 100 if class_total > 0 else 0.0
            )

            target_value = 0.0
            if asset.target_mode == AllocationMode.SET:
                target_value = asset.target_value or 0.0
            elif asset.target_percent is not None:
                target_value = asset.target_percent / 100 * class_target_value
            target_percent = target_value / total_value * 100 if total_value > 0 else 0.0

            delta = target_value - asset.current_value
            deltas.append(
                AllocationDelta(
                    asset_id=asset.id,
                    current_value=asset.current_value,
                    current_percent=current_percent,
                    current_percent_in_class=current_percent_in_class,
                    target_value=target_value,
                    target_percent=target_percent,
                    delta=delta,
                    delta_percent=target_percent - current_percent,
                    action=determine_action(asset_class, delta, asset.target_mode),
                )
            )

    return deltas


def validate_allocation(assets: List[Asset]) -> ValidationResult:
    """Validate class-relative percentages and non-negative values.

    Within each class that has PERCENTAGE assets their percentages must sum
    to 100 (within VALIDATION_TOLERANCE). Negative current values, target
    percentages and target values are flagged.
    """
    errors = []

    for asset_class, class_assets in group_assets_by_class(assets).items():
        percentage_assets = [
            a for a in class_assets if a.target_mode == AllocationMode.PERCENTAGE
        ]
        if not percentage_assets:
            continue

        total_percent = sum(a.target_percent or 0.0 for a in percentage_assets)
        if abs(total_percent - 100) > VALIDATION_TOLERANCE:
            errors.append(
                f"{asset_class.value} target percentages must sum to 100% "
                f"within the class (current: {total_percent:.2f}%)"
            )

    for asset in assets:
        if asset.current_value < 0:
            errors.append(f"Asset {asset.name} has negative value: {asset.current_value}")

        if asset.target_mode == AllocationMode.PERCENTAGE and (asset.target_percent or 0) < 0:
            errors.append(
                f"Asset {asset.name} has negative target percentage: {asset.target_percent}"
            )

        if asset.target_mode == AllocationMode.SET and (asset.target_value or 0) < 0:
            errors.append(
                f"Asset {asset.name} has negative target value: {asset.target_value}"
            )

    return ValidationResult(is_valid=not errors, errors=errors)


def calculate_portfolio_allocation(
    assets: List[Asset],
    options: Optional[AllocationOptions] = None,
) -> PortfolioAllocation:
    """Calculate the full allocation snapshot of a portfolio.

    total_value is options.portfolio_value when given, else the sum of
    non-OFF assets. total_holdings always sums every asset, OFF included,
    and is only used as the current-percent denominator.

    Args:
        assets: Portfolio assets
        options: Class targets, portfolio value and cash delta

    Returns:
        PortfolioAllocation snapshot

    Example:
        >>> allocation = calculate_portfolio_allocation(
        ...     assets,
        ...     AllocationOptions(asset_class_targets=DEFAULT_ASSET_CLASS_TARGETS),
        ... )
        >>> allocation.is_valid
        True
    """
    options = options or AllocationOptions()

    validation = validate_allocation(assets)
    total_value = (
        options.portfolio_value
        if options.portfolio_value is not None
        else calculate_total_value(assets)
    )
    total_holdings = sum(a.current_value for a in assets)

    resolved = AllocationOptions(
        asset_class_targets=options.asset_class_targets,
        portfolio_value=total_value,
        cash_delta_amount=options.cash_delta_amount,
        total_holdings=total_holdings,
    )

    asset_classes = calculate_asset_class_summaries(assets, total_value, resolved)
    deltas = calculate_allocation_deltas(assets, total_value, resolved)

    if not validation.is_valid:
        logger.info("Allocation has %d validation findings", len(validation.errors))

    return PortfolioAllocation(
        assets=list(assets),
        asset_classes=asset_classes,
        total_value=total_value,
        total_holdings=total_holdings,
        deltas=deltas,
        is_valid=validation.is_valid,
        validation_errors=validation.errors,
    )

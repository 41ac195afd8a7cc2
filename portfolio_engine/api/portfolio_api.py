"""User-friendly Portfolio API for allocation analysis and tracker sync.

This module provides a simple, high-level interface over the allocation
calculator, the redistribution engine, currency switching and the net worth
sync bridge.
"""

from dataclasses import dataclass, replace
from typing import List, Optional

from portfolio_engine.allocation.base import (
    AllocationOptions,
    Asset,
    AssetClass,
    AssetClassTargets,
    PortfolioAllocation,
)
from portfolio_engine.allocation.calculator import calculate_portfolio_allocation
from portfolio_engine.allocation.redistribution import (
    handle_asset_removal,
    redistribute_asset_class_percentages,
    redistribute_asset_percentages_in_class,
)
from portfolio_engine.currency.bulk import (
    convert_assets_to_new_currency,
    convert_expense_data_to_new_currency,
    convert_fire_inputs_to_new_currency,
    convert_net_worth_data_to_new_currency,
)
from portfolio_engine.currency.rates import (
    ExchangeRates,
    is_valid_currency,
    recalculate_fallback_rates,
)
from portfolio_engine.sync.bridge import (
    sync_asset_allocation_to_net_worth,
    sync_net_worth_to_asset_allocation,
)
from portfolio_engine.tracker.expense import ExpenseTrackerData
from portfolio_engine.tracker.fire import FireCalculatorInputs
from portfolio_engine.tracker.net_worth import NetWorthTrackerData
from portfolio_engine.utils.config import EngineSettings
from portfolio_engine.utils.exceptions import ConfigurationError
from portfolio_engine.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class CurrencySwitchResult:
    """Datasets re-expressed in a new default currency.

    Attributes:
        settings: Settings with the new default currency and rebased rates
        assets: Converted assets (None when not supplied)
        net_worth_data: Converted net worth dataset (None when not supplied)
        expense_data: Converted expense dataset (None when not supplied)
        fire_inputs: Converted FIRE inputs (None when not supplied)
    """

    settings: EngineSettings
    assets: Optional[List[Asset]] = None
    net_worth_data: Optional[NetWorthTrackerData] = None
    expense_data: Optional[ExpenseTrackerData] = None
    fire_inputs: Optional[FireCalculatorInputs] = None


class PortfolioAPI:
    """High-level API for allocation analysis.

    Holds a settings snapshot (default currency and rate table). Every
    method returns new structures and leaves its inputs untouched.

    Example:
        >>> from portfolio_engine.api.portfolio_api import PortfolioAPI
        >>> from portfolio_engine.allocation import DEFAULT_ASSET_CLASS_TARGETS
        >>>
        >>> api = PortfolioAPI()
        >>> allocation = api.analyze(assets, DEFAULT_ASSET_CLASS_TARGETS)
        >>> for delta in allocation.deltas:
        ...     print(delta.asset_id, delta.action.value, round(delta.delta, 2))
    """

    def __init__(self, settings: Optional[EngineSettings] = None):
        """Initialize PortfolioAPI.

        Args:
            settings: Engine settings (defaults to EUR with fallback rates)
        """
        self.settings = settings or EngineSettings()

        logger.debug(
            "PortfolioAPI initialized with default currency %s",
            self.settings.default_currency,
        )

    @property
    def default_currency(self) -> str:
        return self.settings.default_currency

    @property
    def rates(self) -> ExchangeRates:
        return self.settings.fallback_rates

    def analyze(
        self,
        assets: List[Asset],
        asset_class_targets: Optional[AssetClassTargets] = None,
        portfolio_value: Optional[float] = None,
        cash_delta_amount: Optional[float] = None,
    ) -> PortfolioAllocation:
        """Compute class summaries, per-asset deltas and validation findings.

        Args:
            assets: Portfolio assets in the default currency
            asset_class_targets: Class-level targets (optional)
            portfolio_value: Base value for percentage targets (optional)
            cash_delta_amount: Cash delta to spread over the other classes

        Returns:
            PortfolioAllocation snapshot
        """
        options = AllocationOptions(
            asset_class_targets=asset_class_targets,
            portfolio_value=portfolio_value,
            cash_delta_amount=cash_delta_amount,
        )
        allocation = calculate_portfolio_allocation(assets, options)

        if not allocation.is_valid:
            for error in allocation.validation_errors:
                logger.warning("Allocation validation: %s", error)

        return allocation

    def update_class_target(
        self,
        asset_class_targets: AssetClassTargets,
        asset_class: AssetClass,
        new_percent: float,
    ) -> AssetClassTargets:
        """Set a class percentage and rescale the other PERCENTAGE classes."""
        return redistribute_asset_class_percentages(
            asset_class_targets, asset_class, new_percent
        )

    def update_asset_target(
        self,
        assets: List[Asset],
        asset_id: str,
        new_target_percent: float,
    ) -> List[Asset]:
        """Set an asset's class-relative percentage and rescale its peers."""
        return redistribute_asset_percentages_in_class(
            assets, asset_id, new_target_percent
        )

    def remove_asset(self, assets: List[Asset], asset_id: str) -> List[Asset]:
        """Remove an asset, handing its percentage to its class peers.

        Returns an unchanged copy when asset_id is unknown.
        """
        removed = next((a for a in assets if a.id == asset_id), None)
        if removed is None:
            logger.warning("Asset %s not found, nothing removed", asset_id)
            return list(assets)

        logger.info("Removing asset %s (%s)", removed.name, asset_id)
        return handle_asset_removal(assets, removed)

    def change_default_currency(
        self,
        new_currency: str,
        assets: Optional[List[Asset]] = None,
        net_worth_data: Optional[NetWorthTrackerData] = None,
        expense_data: Optional[ExpenseTrackerData] = None,
        fire_inputs: Optional[FireCalculatorInputs] = None,
    ) -> CurrencySwitchResult:
        """Switch the default currency and convert every supplied dataset.

        Datasets are converted with the current rate table, which is then
        rebased onto new_currency. The API's settings are replaced by the
        returned ones.

        Args:
            new_currency: New default currency code
            assets: Allocation assets to convert
            net_worth_data: Net worth dataset to convert
            expense_data: Expense dataset to convert
            fire_inputs: FIRE calculator inputs to convert

        Returns:
            CurrencySwitchResult with the converted datasets

        Raises:
            ConfigurationError: If new_currency is not supported
        """
        new_currency = new_currency.upper()
        if not is_valid_currency(new_currency):
            raise ConfigurationError(f"Unsupported default currency: {new_currency}")

        old_currency = self.default_currency
        rates = self.rates

        result = CurrencySwitchResult(
            settings=replace(
                self.settings,
                default_currency=new_currency,
                fallback_rates=recalculate_fallback_rates(rates, old_currency, new_currency),
            )
        )
        if assets is not None:
            result.assets = convert_assets_to_new_currency(
                assets, old_currency, new_currency, rates
            )
        if net_worth_data is not None:
            result.net_worth_data = convert_net_worth_data_to_new_currency(
                net_worth_data, old_currency, new_currency, rates
            )
        if expense_data is not None:
            result.expense_data = convert_expense_data_to_new_currency(
                expense_data, old_currency, new_currency, rates
            )
        if fire_inputs is not None:
            result.fire_inputs = convert_fire_inputs_to_new_currency(
                fire_inputs, old_currency, new_currency, rates
            )

        self.settings = result.settings
        logger.info("Default currency changed from %s to %s", old_currency, new_currency)
        return result

    def push_to_net_worth(
        self, assets: List[Asset], net_worth_data: NetWorthTrackerData
    ) -> NetWorthTrackerData:
        """Mirror assets into the net worth tracker's current month."""
        return sync_asset_allocation_to_net_worth(assets, net_worth_data)

    def pull_from_net_worth(self, net_worth_data: NetWorthTrackerData) -> List[Asset]:
        """Build assets from the net worth tracker's current month."""
        return sync_net_worth_to_asset_allocation(net_worth_data, self.rates)

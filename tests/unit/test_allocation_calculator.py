"""Unit tests for the allocation summary and delta calculator."""

import pytest

from portfolio_engine.allocation.base import (
    DEFAULT_ASSET_CLASS_TARGETS,
    AllocationAction,
    AllocationMode,
    AllocationOptions,
    Asset,
    AssetClass,
    AssetClassTarget,
    SubAssetType,
)
from portfolio_engine.allocation.calculator import (
    ACTION_THRESHOLD,
    calculate_allocation_deltas,
    calculate_asset_class_summaries,
    calculate_portfolio_allocation,
    calculate_total_value,
    determine_action,
    group_assets_by_class,
    validate_allocation,
)


def make_asset(
    asset_id: str,
    asset_class: AssetClass,
    value: float,
    percent: float = 100.0,
    mode: AllocationMode = AllocationMode.PERCENTAGE,
    target_value: float = None,
) -> Asset:
    return Asset(
        id=asset_id,
        name=asset_id.upper(),
        ticker=asset_id.upper(),
        asset_class=asset_class,
        current_value=value,
        target_mode=mode,
        target_percent=percent if mode == AllocationMode.PERCENTAGE else None,
        target_value=target_value,
    )


@pytest.fixture
def class_targets() -> dict:
    """STOCKS 50% / BONDS 43% / CASH 7%."""
    return {
        AssetClass.STOCKS: AssetClassTarget(AllocationMode.PERCENTAGE, 50.0),
        AssetClass.BONDS: AssetClassTarget(AllocationMode.PERCENTAGE, 43.0),
        AssetClass.CASH: AssetClassTarget(AllocationMode.PERCENTAGE, 7.0),
    }


@pytest.fixture
def portfolio() -> list:
    """A 70,000 portfolio of which 5,000 is cash."""
    return [
        make_asset("world", AssetClass.STOCKS, 40000.0),
        make_asset("aggregate", AssetClass.BONDS, 25000.0),
        Asset(
            id="savings",
            name="Savings",
            ticker="",
            asset_class=AssetClass.CASH,
            sub_asset_type=SubAssetType.SAVINGS_ACCOUNT,
            current_value=5000.0,
            target_percent=100.0,
        ),
    ]


class TestDetermineAction:
    """Test cases for action thresholds."""

    def test_below_threshold_holds(self) -> None:
        """Test a delta of 99 is HOLD in either direction."""
        assert determine_action(AssetClass.STOCKS, 99.0, AllocationMode.PERCENTAGE) == AllocationAction.HOLD
        assert determine_action(AssetClass.STOCKS, -99.0, AllocationMode.PERCENTAGE) == AllocationAction.HOLD
        assert determine_action(AssetClass.CASH, 99.0, AllocationMode.PERCENTAGE) == AllocationAction.HOLD

    def test_non_cash_actions(self) -> None:
        """Test BUY above and SELL below the threshold."""
        assert determine_action(AssetClass.STOCKS, 101.0, AllocationMode.PERCENTAGE) == AllocationAction.BUY
        assert determine_action(AssetClass.BONDS, -101.0, AllocationMode.SET) == AllocationAction.SELL

    def test_cash_actions(self) -> None:
        """Test SAVE above and INVEST below the threshold for cash."""
        assert determine_action(AssetClass.CASH, 101.0, AllocationMode.PERCENTAGE) == AllocationAction.SAVE
        assert determine_action(AssetClass.CASH, -101.0, AllocationMode.PERCENTAGE) == AllocationAction.INVEST

    def test_off_is_excluded(self) -> None:
        """Test OFF wins regardless of the delta."""
        assert determine_action(AssetClass.STOCKS, 5000.0, AllocationMode.OFF) == AllocationAction.EXCLUDED

    def test_threshold_value(self) -> None:
        """Test the threshold is 100 currency units."""
        assert ACTION_THRESHOLD == 100.0
        assert determine_action(AssetClass.STOCKS, 100.0, AllocationMode.PERCENTAGE) == AllocationAction.BUY


class TestHelpers:
    """Test cases for grouping and totals."""

    def test_total_value_excludes_off(self) -> None:
        """Test OFF assets do not count toward the value base."""
        assets = [
            make_asset("a", AssetClass.STOCKS, 600.0),
            make_asset("b", AssetClass.STOCKS, 400.0, mode=AllocationMode.OFF),
        ]
        assert calculate_total_value(assets) == 600.0

    def test_group_assets_by_class(self, portfolio: list) -> None:
        """Test assets are bucketed by class."""
        grouped = group_assets_by_class(portfolio)

        assert set(grouped) == {AssetClass.STOCKS, AssetClass.BONDS, AssetClass.CASH}
        assert [a.id for a in grouped[AssetClass.BONDS]] == ["aggregate"]


class TestClassTargets:
    """Test cases for class summaries against explicit class targets."""

    def test_class_targets_on_value_excluding_cash(
        self, portfolio: list, class_targets: dict
    ) -> None:
        """Test 50/43/7 on 65,000 gives STOCKS 32,500 and BONDS 27,950."""
        allocation = calculate_portfolio_allocation(
            portfolio,
            AllocationOptions(asset_class_targets=class_targets, portfolio_value=65000.0),
        )

        stocks = allocation.get_class_summary(AssetClass.STOCKS)
        bonds = allocation.get_class_summary(AssetClass.BONDS)
        cash = allocation.get_class_summary(AssetClass.CASH)

        assert allocation.total_value == 65000.0
        assert allocation.total_holdings == 70000.0
        assert stocks.target_total == pytest.approx(32500.0)
        assert bonds.target_total == pytest.approx(27950.0)
        assert cash.target_total == pytest.approx(4550.0)
        assert stocks.action == AllocationAction.SELL
        assert bonds.action == AllocationAction.BUY
        assert cash.action == AllocationAction.INVEST

    def test_asset_deltas_follow_class_targets(
        self, portfolio: list, class_targets: dict
    ) -> None:
        """Test a 100% asset inherits its class target."""
        allocation = calculate_portfolio_allocation(
            portfolio,
            AllocationOptions(asset_class_targets=class_targets, portfolio_value=65000.0),
        )

        world = allocation.get_delta("world")
        assert world.target_value == pytest.approx(32500.0)
        assert world.delta == pytest.approx(-7500.0)
        assert world.target_percent == pytest.approx(50.0)
        assert world.current_percent == pytest.approx(40000 / 70000 * 100)
        assert world.action == AllocationAction.SELL

    def test_current_percent_uses_total_holdings(self, portfolio: list, class_targets: dict) -> None:
        """Test class current percent is relative to all holdings."""
        allocation = calculate_portfolio_allocation(
            portfolio,
            AllocationOptions(asset_class_targets=class_targets, portfolio_value=65000.0),
        )

        cash = allocation.get_class_summary(AssetClass.CASH)
        assert cash.current_percent == pytest.approx(5000 / 70000 * 100)

    def test_class_relative_asset_percent(self, class_targets: dict) -> None:
        """Test an asset's percent applies to its class target, not the portfolio."""
        assets = [
            make_asset("a", AssetClass.STOCKS, 5000.0, percent=60.0),
            make_asset("b", AssetClass.STOCKS, 5000.0, percent=40.0),
        ]

        deltas = calculate_allocation_deltas(
            assets, 10000.0, AllocationOptions(asset_class_targets=class_targets)
        )

        by_id = {d.asset_id: d for d in deltas}
        assert by_id["a"].target_value == pytest.approx(3000.0)
        assert by_id["b"].target_value == pytest.approx(2000.0)


class TestCashDelta:
    """Test cases for spreading the cash delta over other classes."""

    def test_invest_adds_to_other_classes(self, portfolio: list, class_targets: dict) -> None:
        """Test a negative cash delta raises the other classes' targets."""
        allocation = calculate_portfolio_allocation(
            portfolio,
            AllocationOptions(
                asset_class_targets=class_targets,
                portfolio_value=65000.0,
                cash_delta_amount=-930.0,
            ),
        )

        assert allocation.get_delta("world").target_value == pytest.approx(33000.0)
        assert allocation.get_delta("aggregate").target_value == pytest.approx(28380.0)
        assert allocation.get_delta("savings").target_value == pytest.approx(4550.0)

    def test_save_subtracts_from_other_classes(self, portfolio: list, class_targets: dict) -> None:
        """Test a positive cash delta lowers the other classes' targets."""
        allocation = calculate_portfolio_allocation(
            portfolio,
            AllocationOptions(
                asset_class_targets=class_targets,
                portfolio_value=65000.0,
                cash_delta_amount=930.0,
            ),
        )

        assert allocation.get_delta("world").target_value == pytest.approx(32000.0)
        assert allocation.get_delta("aggregate").target_value == pytest.approx(27520.0)

    def test_summaries_not_adjusted(self, portfolio: list, class_targets: dict) -> None:
        """Test the class summaries keep the unadjusted targets."""
        summaries = calculate_asset_class_summaries(
            portfolio,
            65000.0,
            AllocationOptions(asset_class_targets=class_targets, cash_delta_amount=-930.0),
        )

        stocks = next(s for s in summaries if s.asset_class == AssetClass.STOCKS)
        assert stocks.target_total == pytest.approx(32500.0)

    def test_ignored_without_class_targets(self, portfolio: list) -> None:
        """Test the cash delta needs class targets to be spread."""
        allocation = calculate_portfolio_allocation(
            portfolio, AllocationOptions(cash_delta_amount=-930.0)
        )

        world = allocation.get_delta("world")
        assert world.target_value == pytest.approx(70000.0)


class TestClassResolution:
    """Test cases for class target resolution without explicit targets."""

    def test_all_off_class(self) -> None:
        """Test a class whose assets are all OFF is OFF and EXCLUDED."""
        assets = [
            make_asset("btc", AssetClass.CRYPTO, 3000.0, mode=AllocationMode.OFF),
            make_asset("a", AssetClass.STOCKS, 7000.0),
        ]

        allocation = calculate_portfolio_allocation(assets, AllocationOptions(DEFAULT_ASSET_CLASS_TARGETS))
        crypto = allocation.get_class_summary(AssetClass.CRYPTO)

        assert crypto.target_mode == AllocationMode.OFF
        assert crypto.action == AllocationAction.EXCLUDED
        assert crypto.current_total == 0.0

    def test_set_assets_define_class_target(self) -> None:
        """Test any SET asset makes the class target the sum of SET values."""
        assets = [
            make_asset("home", AssetClass.REAL_ESTATE, 3000.0, mode=AllocationMode.SET, target_value=5000.0),
            make_asset("reit", AssetClass.REAL_ESTATE, 1000.0, mode=AllocationMode.SET, target_value=1000.0),
        ]

        summary = calculate_asset_class_summaries(assets, 4000.0)[0]

        assert summary.target_mode == AllocationMode.SET
        assert summary.target_total == pytest.approx(6000.0)
        assert summary.delta == pytest.approx(2000.0)
        assert summary.action == AllocationAction.BUY

    def test_fallback_to_asset_percent_sum(self) -> None:
        """Test a class without a target uses the sum of its percentages."""
        assets = [
            make_asset("a", AssetClass.BONDS, 500.0, percent=30.0),
            make_asset("b", AssetClass.BONDS, 500.0, percent=20.0),
        ]

        summary = calculate_asset_class_summaries(assets, 1000.0)[0]

        assert summary.target_percent == pytest.approx(50.0)
        assert summary.target_total == pytest.approx(500.0)
        assert summary.delta == pytest.approx(-500.0)
        assert summary.action == AllocationAction.SELL

    def test_zero_total_value(self) -> None:
        """Test an empty value base yields zero targets instead of failing."""
        assets = [make_asset("a", AssetClass.STOCKS, 0.0)]

        allocation = calculate_portfolio_allocation(assets)

        assert allocation.total_value == 0.0
        assert allocation.get_delta("a").target_percent == 0.0
        assert allocation.get_class_summary(AssetClass.STOCKS).current_percent == 0.0

    def test_empty_portfolio(self) -> None:
        """Test no assets give an empty, valid allocation."""
        allocation = calculate_portfolio_allocation([])

        assert allocation.asset_classes == []
        assert allocation.deltas == []
        assert allocation.is_valid


class TestOffAssets:
    """Test cases for OFF assets in the totals."""

    def test_off_assets_excluded_from_value_base(self) -> None:
        """Test OFF value is in total_holdings but not in total_value."""
        assets = [
            make_asset("a", AssetClass.STOCKS, 6000.0),
            make_asset("b", AssetClass.STOCKS, 4000.0, mode=AllocationMode.OFF),
        ]

        allocation = calculate_portfolio_allocation(assets)

        assert allocation.total_value == 6000.0
        assert allocation.total_holdings == 10000.0
        assert allocation.get_delta("a").current_percent == pytest.approx(60.0)
        assert allocation.get_class_summary(AssetClass.STOCKS).current_total == 6000.0

    def test_off_asset_delta(self) -> None:
        """Test an OFF asset gets a zeroed, EXCLUDED delta."""
        assets = [
            make_asset("a", AssetClass.STOCKS, 6000.0),
            make_asset("b", AssetClass.STOCKS, 4000.0, mode=AllocationMode.OFF),
        ]

        delta = calculate_portfolio_allocation(assets).get_delta("b")

        assert delta.action == AllocationAction.EXCLUDED
        assert delta.current_value == 4000.0
        assert delta.target_value == 0.0
        assert delta.delta == 0.0

    def test_explicit_portfolio_value(self) -> None:
        """Test a supplied portfolio value replaces the computed base."""
        assets = [make_asset("a", AssetClass.STOCKS, 6000.0)]

        allocation = calculate_portfolio_allocation(assets, AllocationOptions(portfolio_value=8000.0))

        assert allocation.total_value == 8000.0
        assert allocation.get_delta("a").target_value == pytest.approx(8000.0)
        assert allocation.get_delta("a").action == AllocationAction.BUY


class TestThresholdsThroughCalculator:
    """Test cases for thresholds applied to computed deltas."""

    @pytest.mark.parametrize(
        "target_value, expected",
        [
            (1099.0, AllocationAction.HOLD),
            (1101.0, AllocationAction.BUY),
            (899.0, AllocationAction.SELL),
        ],
    )
    def test_set_asset_thresholds(self, target_value: float, expected: AllocationAction) -> None:
        """Test SET deltas of 99, 101 and -101."""
        assets = [make_asset("a", AssetClass.STOCKS, 1000.0, mode=AllocationMode.SET, target_value=target_value)]

        delta = calculate_portfolio_allocation(assets).get_delta("a")

        assert delta.action == expected

    @pytest.mark.parametrize(
        "target_value, expected",
        [(1101.0, AllocationAction.SAVE), (899.0, AllocationAction.INVEST)],
    )
    def test_cash_thresholds(self, target_value: float, expected: AllocationAction) -> None:
        """Test cash deltas map to SAVE and INVEST."""
        assets = [make_asset("c", AssetClass.CASH, 1000.0, mode=AllocationMode.SET, target_value=target_value)]

        delta = calculate_portfolio_allocation(assets).get_delta("c")

        assert delta.action == expected


class TestValidation:
    """Test cases for validate_allocation."""

    def test_valid_portfolio(self, portfolio: list) -> None:
        """Test a portfolio with classes summing to 100 is valid."""
        result = validate_allocation(portfolio)

        assert result.is_valid
        assert result.errors == []

    def test_class_sum_error(self) -> None:
        """Test a class off by more than the tolerance is reported."""
        assets = [
            make_asset("a", AssetClass.STOCKS, 100.0, percent=40.0),
            make_asset("b", AssetClass.STOCKS, 100.0, percent=50.0),
        ]

        result = validate_allocation(assets)

        assert not result.is_valid
        assert result.errors == [
            "STOCKS target percentages must sum to 100% within the class (current: 90.00%)"
        ]

    def test_within_tolerance(self) -> None:
        """Test a deviation of up to 0.1 is accepted."""
        assets = [
            make_asset("a", AssetClass.STOCKS, 100.0, percent=33.33),
            make_asset("b", AssetClass.STOCKS, 100.0, percent=33.33),
            make_asset("c", AssetClass.STOCKS, 100.0, percent=33.33),
        ]

        assert validate_allocation(assets).is_valid

    def test_negative_values(self) -> None:
        """Test negative values, percentages and SET targets are reported."""
        assets = [
            make_asset("a", AssetClass.BONDS, -5.0, percent=100.0),
            make_asset("b", AssetClass.STOCKS, 100.0, mode=AllocationMode.SET, target_value=-10.0),
        ]

        errors = validate_allocation(assets).errors

        assert "Asset A has negative value: -5.0" in errors
        assert "Asset B has negative target value: -10.0" in errors

    def test_negative_percentage(self) -> None:
        """Test a negative target percentage is reported."""
        assets = [
            make_asset("a", AssetClass.STOCKS, 100.0, percent=110.0),
            make_asset("b", AssetClass.STOCKS, 100.0, percent=-10.0),
        ]

        errors = validate_allocation(assets).errors

        assert errors == ["Asset B has negative target percentage: -10.0"]

    def test_classes_without_percentage_assets_skipped(self) -> None:
        """Test SET and OFF classes are not checked for the 100% sum."""
        assets = [
            make_asset("a", AssetClass.STOCKS, 100.0, mode=AllocationMode.SET, target_value=100.0),
            make_asset("b", AssetClass.CRYPTO, 100.0, mode=AllocationMode.OFF),
        ]

        assert validate_allocation(assets).is_valid

    def test_allocation_carries_findings(self) -> None:
        """Test the snapshot reports validation findings without raising."""
        assets = [make_asset("a", AssetClass.STOCKS, 100.0, percent=50.0)]

        allocation = calculate_portfolio_allocation(assets)

        assert not allocation.is_valid
        assert len(allocation.validation_errors) == 1
        assert len(allocation.deltas) == 1

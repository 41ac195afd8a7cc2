"""Tabular views of an allocation snapshot.

Builds pandas DataFrames from a PortfolioAllocation for display in the CLI
and for callers that export allocation tables.
"""

import pandas as pd

from portfolio_engine.allocation.base import AllocationMode, PortfolioAllocation

ASSET_COLUMNS = [
    "name",
    "ticker",
    "asset_class",
    "target",
    "current_value",
    "current_pct",
    "target_value",
    "target_pct",
    "delta",
    "action",
]

CLASS_COLUMNS = [
    "asset_class",
    "target_mode",
    "current_total",
    "current_pct",
    "target_pct",
    "target_total",
    "delta",
    "action",
]


def format_asset_name(name: str) -> str:
    """Format an enum name for display, e.g. REAL_ESTATE -> Real Estate.

    ETF stays upper-case.
    """
    words = []
    for word in name.split("_"):
        words.append("ETF" if word == "ETF" else word.capitalize())
    return " ".join(words)


def _target_label(asset) -> str:
    if asset.target_mode == AllocationMode.PERCENTAGE:
        return f"{asset.target_percent or 0.0:.2f}%"
    return asset.target_mode.value


def allocation_to_dataframe(allocation: PortfolioAllocation) -> pd.DataFrame:
    """One row per asset with its current and target figures.

    Args:
        allocation: Snapshot from calculate_portfolio_allocation

    Returns:
        DataFrame indexed by asset id with ASSET_COLUMNS
    """
    rows = []
    index = []
    for asset in allocation.assets:
        delta = allocation.get_delta(asset.id)
        index.append(asset.id)
        rows.append(
            {
                "name": asset.name,
                "ticker": asset.ticker,
                "asset_class": format_asset_name(asset.asset_class.value),
                "target": _target_label(asset),
                "current_value": asset.current_value,
                "current_pct": delta.current_percent if delta else 0.0,
                "target_value": delta.target_value if delta else 0.0,
                "target_pct": delta.target_percent if delta else 0.0,
                "delta": delta.delta if delta else 0.0,
                "action": delta.action.value if delta else "HOLD",
            }
        )

    return pd.DataFrame(rows, index=pd.Index(index, name="asset_id"), columns=ASSET_COLUMNS)


def summaries_to_dataframe(allocation: PortfolioAllocation) -> pd.DataFrame:
    """One row per asset class, sorted by current total (largest first)."""
    rows = [
        {
            "asset_class": format_asset_name(s.asset_class.value),
            "target_mode": s.target_mode.value,
            "current_total": s.current_total,
            "current_pct": s.current_percent,
            "target_pct": s.target_percent,
            "target_total": s.target_total,
            "delta": s.delta,
            "action": s.action.value,
        }
        for s in allocation.asset_classes
    ]
    df = pd.DataFrame(rows, columns=CLASS_COLUMNS)
    if df.empty:
        return df
    return df.sort_values("current_total", ascending=False).reset_index(drop=True)

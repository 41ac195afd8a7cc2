"""User-friendly APIs for the portfolio engine.

Components:
- PortfolioAPI: allocation analysis, target edits, currency switching and
  net worth sync
"""

from portfolio_engine.api.portfolio_api import CurrencySwitchResult, PortfolioAPI

__all__ = [
    "PortfolioAPI",
    "CurrencySwitchResult",
]

"""Custom exceptions for the portfolio engine.

The calculation core never raises: invalid rates fall back to 1:1 and
allocation problems are returned as validation findings. These exceptions
are reserved for the outer surfaces (configuration and portfolio files).
"""


class PortfolioEngineError(Exception):
    """Base exception for all portfolio engine errors.

    All custom exceptions in the application should inherit from this class.
    """

    pass


class ConfigurationError(PortfolioEngineError):
    """Raised when configuration is invalid or missing.

    Examples:
        - Configuration file not found
        - Unsupported default currency
        - Non-numeric exchange rate in the config file
    """

    pass


class DataError(PortfolioEngineError):
    """Base exception for input data errors."""

    pass


class PortfolioFileError(DataError):
    """Raised when a portfolio file cannot be parsed into assets.

    Examples:
        - File is neither valid YAML nor JSON
        - Unknown asset class or allocation mode
        - Missing required asset fields
    """

    pass

"""Exception hierarchy for bet.

All application-specific exceptions inherit from BetError,
allowing callers to catch broad or narrow as needed.
"""


class BetError(Exception):
    """Base exception for all bet errors."""


class ConfigurationError(BetError):
    """No usable roots, or an argument that contradicts the configuration."""


class PersistenceError(BetError):
    """A configuration or index document could not be written."""

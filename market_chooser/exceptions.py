"""
Domain-specific exceptions.

Configuration and data problems are detected before the simulation starts
and raised as subclasses of ValueError, so callers that only know about
ValueError keep working.
"""


class ChooserError(Exception):
    """Base class for all market chooser errors."""


class ConfigurationError(ChooserError, ValueError):
    """Invalid run parameters (window sizes, repetition counts, criterion)."""


class MarketDataError(ChooserError, ValueError):
    """Unreadable, malformed, or unusable market history data."""

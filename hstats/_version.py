"""Version information for hstats."""

__version__ = "0.3.0"

"""Custom warning classes for the hstats package.

These warning classes allow users to programmatically filter, suppress,
or capture warnings using Python's standard ``warnings`` module.

Example:
    Silence the NaN notice during a bulk ingest::

        import warnings
        from hstats._warnings import DataQualityWarning

        warnings.filterwarnings("ignore", category=DataQualityWarning)
"""


class HstatsWarning(UserWarning):
    """Base class for all hstats warnings."""


class DataQualityWarning(HstatsWarning):
    """Runtime data-quality observations.

    Raised the first time an accumulator sees a NaN sample. The sample is
    counted as invalid and excluded from the bins and the running statistics.
    """
